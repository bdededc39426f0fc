"""Application factory for RetailDesk.

``create_app`` wires configuration, the Supabase client factory, templates,
the locale catalogs, the middleware pipeline and the routers. Tests pass their
own settings and a fake client factory; ``main.py`` builds the real app.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth.client import AdminClientFactory, ClientFactory, supabase_admin_factory, supabase_client_factory
from .auth.session import SessionRefresher
from .core.config import AppSettings, get_settings
from .core.errors import http_exception_handler, validation_exception_handler
from .core.jinja import build_templates
from .i18n import CatalogStore
from .middlewares import RequestIdMiddleware, RouteGatekeeper, SecurityHeadersMiddleware

logger = logging.getLogger("retaildesk.request")


def create_app(
    settings: AppSettings | None = None,
    client_factory: ClientFactory | None = None,
    admin_client_factory: AdminClientFactory | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    factory = client_factory or supabase_client_factory(settings)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.client_factory = factory
    app.state.admin_client_factory = admin_client_factory or supabase_admin_factory(settings)
    app.state.templates = build_templates(settings)
    app.state.catalogs = CatalogStore(settings.messages_dir)

    app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")

    # Starlette runs the last added middleware first: request id, then
    # security headers, then the gatekeeper closest to the routes.
    app.add_middleware(RouteGatekeeper, settings=settings, refresher=SessionRefresher(settings, factory))
    app.add_middleware(SecurityHeadersMiddleware, hsts=not settings.is_local)
    app.add_middleware(RequestIdMiddleware)

    from .routers import admin_api, auth_ui, legacy, ui

    app.include_router(auth_ui.router)
    app.include_router(ui.router)
    app.include_router(admin_api.router)
    app.include_router(legacy.router)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    if not settings.is_local and not settings.TRUSTED_FORWARDED_HOSTS:
        logger.warning(
            "config.forwarded_hosts_unrestricted",
            extra={"extra_data": {"detail": "X-Forwarded-Host is trusted without an allow-list"}},
        )
    return app


__all__ = ["create_app"]
