"""Supported UI locales.

The registry is a closed, compile-time set. Anything that is not a member is
treated as "no locale" and resolved to ``DEFAULT_LOCALE``.
"""

from __future__ import annotations

LOCALES: tuple[str, ...] = ("en", "fa", "ps")
DEFAULT_LOCALE = "en"

RTL_LOCALES = frozenset({"fa", "ps"})

LOCALE_COOKIE_NAME = "locale"


def is_supported(value: object) -> bool:
    return isinstance(value, str) and value in LOCALES


def coerce_locale(value: object) -> str:
    """Return ``value`` when it is a registry member, otherwise the default."""

    return value if is_supported(value) else DEFAULT_LOCALE  # type: ignore[return-value]


def text_direction(locale: str) -> str:
    return "rtl" if locale in RTL_LOCALES else "ltr"
