"""Redirect target rules shared by the gatekeeper and the auth handlers."""

from __future__ import annotations

import logging
from urllib.parse import quote

from starlette.requests import Request

from ..core.config import AppSettings

logger = logging.getLogger("retaildesk.auth")

AUTH_FAILURE_MESSAGE = "Could not authenticate user"


def is_safe_next(candidate: str | None) -> bool:
    """Accept only same-origin relative paths.

    The path must start with ``/``; protocol-relative forms (``//host``,
    ``/\\host``) are rejected because browsers treat them as another origin.
    """

    if not candidate or not candidate.startswith("/"):
        return False
    if candidate.startswith("//") or candidate.startswith("/\\"):
        return False
    return not any(ch in candidate for ch in ("\r", "\n", "\t"))


def safe_next(candidate: str | None, default: str) -> str:
    return candidate if is_safe_next(candidate) else default  # type: ignore[return-value]


def request_origin(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


def post_login_url(request: Request, destination: str, settings: AppSettings) -> str:
    """Absolute URL for ``destination`` following the execution-mode host policy.

    Local mode always uses the request's own origin. Otherwise a
    reverse-proxy ``X-Forwarded-Host`` wins (over https) when it passes the
    ``TRUSTED_FORWARDED_HOSTS`` allow-list.
    """

    origin = request_origin(request)
    if settings.is_local:
        return f"{origin}{destination}"
    forwarded = (request.headers.get("x-forwarded-host") or "").split(",")[0].strip()
    if forwarded:
        if settings.forwarded_host_allowed(forwarded):
            return f"https://{forwarded}{destination}"
        logger.warning(
            "auth.forwarded_host_rejected",
            extra={"extra_data": {"forwarded_host": forwarded}},
        )
    return f"{origin}{destination}"


def auth_failure_url(request: Request, locale: str, message: str = AUTH_FAILURE_MESSAGE) -> str:
    return f"{request_origin(request)}/{locale}/auth?message={quote(message)}"
