from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..i18n import DEFAULT_LOCALE, Translator, is_supported
from ..schemas.auth import SessionUser


async def page_locale(request: Request, locale: str) -> str:
    """Path locale for page routes; anything outside the supported set is a 404."""

    if not is_supported(locale):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    request.state.locale = locale
    return locale


async def require_session(request: Request) -> SessionUser:
    """The user validated by the gatekeeper for this request."""

    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    return user


async def get_translator(request: Request) -> Translator:
    return request.app.state.catalogs.translator(getattr(request.state, "locale", None) or DEFAULT_LOCALE)
