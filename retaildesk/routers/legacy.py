"""Unprefixed entry points kept for old bookmarks and email links."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from starlette.convertors import Convertor, register_url_convertor

from ..auth.redirects import safe_next
from ..i18n import DEFAULT_LOCALE, LOCALE_COOKIE_NAME, LOCALES, negotiate


class LocaleConvertor(Convertor):
    """Matches only supported locale segments, so ``/health`` and friends fall through."""

    regex = "|".join(LOCALES)

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("locale", LocaleConvertor())

router = APIRouter()


@router.get("/")
async def root(request: Request):
    locale = negotiate(request.headers.get("accept-language"), request.cookies.get(LOCALE_COOKIE_NAME))
    return RedirectResponse(f"/{locale}/dashboard")


@router.get("/callback")
async def legacy_callback(next: str | None = None):
    return RedirectResponse(safe_next(next, f"/{DEFAULT_LOCALE}/dashboard"))


@router.get("/{locale:locale}")
async def locale_root(locale: str):
    return RedirectResponse(f"/{locale}/dashboard")
