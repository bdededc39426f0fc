from __future__ import annotations

from .catalog import CatalogError, CatalogStore, Translator, flatten_keys, validate_catalogs
from .locales import DEFAULT_LOCALE, LOCALE_COOKIE_NAME, LOCALES, coerce_locale, is_supported, text_direction
from .resolver import LocaleMatch, negotiate, resolve

__all__ = [
    "DEFAULT_LOCALE",
    "LOCALES",
    "LOCALE_COOKIE_NAME",
    "CatalogError",
    "CatalogStore",
    "LocaleMatch",
    "Translator",
    "coerce_locale",
    "flatten_keys",
    "is_supported",
    "negotiate",
    "resolve",
    "text_direction",
    "validate_catalogs",
]
