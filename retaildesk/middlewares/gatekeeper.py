"""Locale routing and authentication gate for every page request.

The gatekeeper runs an ordered pipeline over one ``ResponseAccumulator``:

1. locale stage: resolve the path locale; unprefixed paths get a locale
   redirect queued, and the active locale is remembered in a cookie;
2. session stage: validate/refresh the session, collecting cookie writes;
3. gate stage: let the request through or redirect it to the login page.

Every stage writes cookies into the same jar and the jar is applied to the
response that is finally returned, whichever branch produced it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.status import HTTP_307_TEMPORARY_REDIRECT

from ..auth.cookies import CookieJar
from ..auth.session import SessionRefresher
from ..core.config import AppSettings
from ..i18n import LOCALE_COOKIE_NAME, LocaleMatch, negotiate, resolve
from ..schemas.auth import SessionUser
from .request_id import principal_ctx_var

logger = logging.getLogger("retaildesk.gatekeeper")

PUBLIC_PREFIXES = ("/auth", "/api")
EXCLUDED_PREFIXES = ("/static", "/health", "/metrics", "/favicon.ico")
# Unprefixed paths with their own handlers (see routers/legacy.py).
LEGACY_PATHS = frozenset({"/", "/callback"})


class GateState(str, enum.Enum):
    ALLOWED = "allowed"
    REDIRECTED = "redirected"


class GateDecision(NamedTuple):
    state: GateState
    target: str | None = None


@dataclass
class ResponseAccumulator:
    """Cookie jar plus an optional response queued by an earlier stage."""

    cookies: CookieJar = field(default_factory=CookieJar)
    response: Response | None = None

    def finalize(self, response: Response) -> Response:
        return self.cookies.apply(response)


def _starts_with_prefix(path: str, prefixes: tuple[str, ...]) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") or path.startswith(prefix + "?") for prefix in prefixes)


def is_excluded(path: str) -> bool:
    return _starts_with_prefix(path, EXCLUDED_PREFIXES)


def is_public(remainder: str) -> bool:
    return remainder.startswith(PUBLIC_PREFIXES)


def is_legacy_alias(path: str, match: LocaleMatch) -> bool:
    """``/``, ``/callback`` and a bare ``/{locale}``; their handlers only redirect."""

    if match.has_explicit_locale:
        return match.remainder == "/"
    return path in LEGACY_PATHS


def decide(match: LocaleMatch, user: SessionUser | None) -> GateDecision:
    """Admission rule: a session, or a public remainder, lets the request in."""

    if user is not None or is_public(match.remainder):
        return GateDecision(GateState.ALLOWED)
    return GateDecision(GateState.REDIRECTED, f"/{match.locale}/auth")


def locale_stage(request: Request, match: LocaleMatch, accumulator: ResponseAccumulator, settings: AppSettings) -> None:
    if match.has_explicit_locale:
        if request.cookies.get(LOCALE_COOKIE_NAME) != match.locale:
            accumulator.cookies.set(
                LOCALE_COOKIE_NAME,
                match.locale,
                max_age=settings.LOCALE_COOKIE_MAX_AGE,
                httponly=False,
                secure=not settings.is_local,
            )
        return

    path = request.url.path
    if path in LEGACY_PATHS or _starts_with_prefix(path, ("/api",)):
        return
    locale = negotiate(request.headers.get("accept-language"), request.cookies.get(LOCALE_COOKIE_NAME))
    target = f"/{locale}{match.remainder if match.remainder != '/' else ''}"
    if request.url.query:
        target = f"{target}?{request.url.query}"
    accumulator.response = RedirectResponse(target, status_code=HTTP_307_TEMPORARY_REDIRECT)


class RouteGatekeeper(BaseHTTPMiddleware):
    """Global middleware deciding pass-through vs. redirect-to-login."""

    def __init__(self, app, settings: AppSettings, refresher: SessionRefresher) -> None:  # type: ignore[override]
        super().__init__(app)
        self.settings = settings
        self.refresher = refresher

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if is_excluded(request.url.path):
            return await call_next(request)

        accumulator = ResponseAccumulator()
        match = resolve(request.url.path)
        locale_stage(request, match, accumulator, self.settings)

        result = await self.refresher.refresh(request, accumulator.cookies)
        request.state.locale = match.locale
        request.state.remainder = match.remainder
        request.state.user = result.user
        if result.user is not None:
            principal_ctx_var.set(result.user.id)
            request.state.principal = result.user.id

        if is_legacy_alias(request.url.path, match):
            # Legacy handlers only redirect into a localized path, which is gated.
            decision = GateDecision(GateState.ALLOWED)
        else:
            decision = decide(match, result.user)
        if decision.state is GateState.REDIRECTED:
            logger.info(
                "gate.redirected",
                extra={"extra_data": {"path": request.url.path, "target": decision.target}},
            )
            return accumulator.finalize(
                RedirectResponse(decision.target, status_code=HTTP_307_TEMPORARY_REDIRECT)  # type: ignore[arg-type]
            )
        if accumulator.response is not None:
            return accumulator.finalize(accumulator.response)
        response = await call_next(request)
        return accumulator.finalize(response)
