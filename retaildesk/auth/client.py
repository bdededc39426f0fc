"""Supabase client construction.

One client is built per request, bound to that request's cookies through
``CookieStorage``. Nothing is cached between requests.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from starlette.requests import Request
from supabase import AsyncClientOptions, acreate_client

from ..core.config import AppSettings
from .cookies import CookieJar, CookieStorage, request_cookie_storage

ClientFactory = Callable[[CookieStorage], Awaitable[Any]]
AdminClientFactory = Callable[[], Awaitable[Any]]


def supabase_client_factory(settings: AppSettings) -> ClientFactory:
    """Return a factory that builds an async Supabase client over a cookie storage."""

    async def create(storage: CookieStorage) -> Any:
        options = AsyncClientOptions(
            storage=storage,  # type: ignore[arg-type]
            flow_type="pkce",
            auto_refresh_token=False,
            persist_session=True,
        )
        return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, options=options)

    return create


def supabase_admin_factory(settings: AppSettings) -> AdminClientFactory | None:
    """Factory for a service-role client, or ``None`` when no key is configured.

    The admin client carries no user session and never touches cookies.
    """

    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        return None

    async def create() -> Any:
        options = AsyncClientOptions(auto_refresh_token=False, persist_session=False)
        return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, options=options)

    return create


async def open_request_client(request: Request, jar: CookieJar | None = None) -> tuple[Any, CookieJar]:
    """Build a client for ``request`` whose cookie writes land in ``jar``."""

    jar = jar if jar is not None else CookieJar()
    settings: AppSettings = request.app.state.settings
    factory: ClientFactory = request.app.state.client_factory
    client = await factory(request_cookie_storage(request, jar, settings))
    return client, jar
