"""Jinja2 environment and page rendering helpers.

Every HTML page goes through :func:`render`, which adds the translator,
the active locale, its text direction and the signed-in user to the
template context.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from ..i18n import DEFAULT_LOCALE, LOCALES, text_direction
from .config import AppSettings


def _to_dt(value: Any, tz: ZoneInfo | None) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        # Plain dates carry no zone; do not shift them across midnight.
        if len(value) == 10:
            return dt
    else:
        return None

    if tz is not None:
        dt = dt.replace(tzinfo=tz) if dt.tzinfo is None else dt.astimezone(tz)
    return dt


def build_templates(settings: AppSettings) -> Jinja2Templates:
    """Create the templates environment with the formatting filters registered."""

    tz = ZoneInfo(settings.TZ) if settings.TZ else None
    symbol = settings.CURRENCY_SYMBOL

    def fmt_dt(value: Any, fmt: str = "%Y-%m-%d %H:%M") -> str:
        dt = _to_dt(value, tz)
        return dt.strftime(fmt) if dt else ""

    def fmt_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
        dt = _to_dt(value, tz)
        return dt.strftime(fmt) if dt else ""

    def fmt_currency(value: Any) -> str:
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return ""
        return f"{symbol}{number:,.2f}"

    templates = Jinja2Templates(directory=str(settings.templates_dir))
    env = templates.env
    env.filters["fmt_dt"] = fmt_dt
    env.filters["fmt_date"] = fmt_date
    env.filters["fmt_currency"] = fmt_currency
    env.globals["app_name"] = settings.APP_NAME
    env.globals["locales"] = LOCALES
    return templates


def render(
    request: Request,
    name: str,
    context: Mapping[str, Any] | None = None,
    status_code: int = 200,
) -> Response:
    locale = getattr(request.state, "locale", None) or DEFAULT_LOCALE
    templates: Jinja2Templates = request.app.state.templates
    page_context = {
        "t": request.app.state.catalogs.translator(locale),
        "locale": locale,
        "dir": text_direction(locale),
        "user": getattr(request.state, "user", None),
        "remainder": getattr(request.state, "remainder", "/"),
    }
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)
