"""Per-request session validation and token refresh."""

from __future__ import annotations

import logging
from typing import NamedTuple

import httpx
from starlette.requests import Request
from supabase import AuthError

from ..core.config import AppSettings
from ..schemas.auth import SessionUser
from .client import ClientFactory
from .cookies import CookieJar, propagate_to_request, request_cookie_storage

logger = logging.getLogger("retaildesk.auth")


class RefreshResult(NamedTuple):
    user: SessionUser | None
    cookies: CookieJar


class SessionRefresher:
    """Validate the caller's session once and collect any rotated tokens.

    The client is created and ``auth.get_user()`` is called right after it,
    with nothing in between; the resulting cookie writes are then copied onto
    the request (for handlers later in this request) and left in ``jar`` for
    the outgoing response. Dropping either copy logs users out at random when
    several requests race a token rotation.
    """

    def __init__(self, settings: AppSettings, client_factory: ClientFactory) -> None:
        self._settings = settings
        self._client_factory = client_factory

    async def refresh(self, request: Request, jar: CookieJar | None = None) -> RefreshResult:
        jar = jar if jar is not None else CookieJar()
        client = await self._client_factory(request_cookie_storage(request, jar, self._settings))
        try:
            response = await client.auth.get_user()
        except AuthError as exc:
            logger.info(
                "session.invalid",
                extra={"extra_data": {"path": request.url.path, "reason": str(exc)}},
            )
            response = None
        except httpx.HTTPError as exc:
            # Auth server unreachable: the request continues as anonymous.
            logger.warning(
                "session.unavailable",
                extra={"extra_data": {"path": request.url.path, "reason": repr(exc)}},
            )
            response = None

        propagate_to_request(request, jar)

        user = getattr(response, "user", None) if response is not None else None
        if user is None:
            return RefreshResult(None, jar)
        return RefreshResult(SessionUser.from_provider(user), jar)
