"""Message catalogs: loading, key flattening and lookup."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

from .locales import DEFAULT_LOCALE, LOCALES

logger = logging.getLogger("retaildesk.i18n")


class CatalogError(Exception):
    """A catalog file is missing or cannot be parsed."""


def flatten_keys(messages: Mapping[str, Any], prefix: str = "") -> Iterator[str]:
    """Yield dotted keys for every leaf; lists count as leaves."""

    for key, value in messages.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, Mapping):
            yield from flatten_keys(value, dotted)
        else:
            yield dotted


def read_messages(messages_dir: Path, locale: str) -> dict[str, Any]:
    path = Path(messages_dir) / f"{locale}.json"
    if not path.exists():
        raise CatalogError(f'Missing messages file for locale "{locale}" at {path}')
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f'Invalid JSON in messages file for locale "{locale}": {exc}') from exc
    if not isinstance(data, dict):
        raise CatalogError(f'Messages file for locale "{locale}" must contain an object')
    return data


def compare_catalogs(
    catalogs: Mapping[str, Mapping[str, Any]],
    base_locale: str = DEFAULT_LOCALE,
) -> list[str]:
    """Return one message per key missing from, or extra in, a non-base catalog."""

    base_keys = set(flatten_keys(catalogs[base_locale]))
    errors: list[str] = []
    for locale, messages in catalogs.items():
        if locale == base_locale:
            continue
        keys = set(flatten_keys(messages))
        for key in sorted(base_keys - keys):
            errors.append(f'Locale "{locale}" is missing key "{key}"')
        for key in sorted(keys - base_keys):
            errors.append(
                f'Locale "{locale}" has extra key "{key}" not present in base locale "{base_locale}"'
            )
    return errors


def validate_catalogs(
    messages_dir: Path,
    locales: tuple[str, ...] = LOCALES,
    base_locale: str = DEFAULT_LOCALE,
) -> list[str]:
    if not Path(messages_dir).is_dir():
        raise CatalogError(f"Messages directory not found at {messages_dir}")
    catalogs = {locale: read_messages(messages_dir, locale) for locale in locales}
    return compare_catalogs(catalogs, base_locale)


class Translator:
    """Look up dotted keys in one locale's catalog.

    Unknown keys fall back to the default locale's text, then to the key
    itself, so a template never fails on a missing translation.
    """

    def __init__(self, locale: str, messages: Mapping[str, Any], fallback: Mapping[str, Any] | None = None):
        self.locale = locale
        self._messages = messages
        self._fallback = fallback or {}

    @staticmethod
    def _lookup(messages: Mapping[str, Any], key: str) -> Any:
        node: Any = messages
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def __call__(self, key: str, **params: Any) -> str:
        text = self._lookup(self._messages, key)
        if text is None:
            text = self._lookup(self._fallback, key)
        if text is None:
            logger.debug("i18n.missing_key", extra={"extra_data": {"locale": self.locale, "key": key}})
            return key
        for name, value in params.items():
            text = text.replace("{" + name + "}", str(value))
        return text


class CatalogStore:
    """Catalogs for all locales, read once at startup."""

    def __init__(self, messages_dir: Path, locales: tuple[str, ...] = LOCALES):
        self._catalogs = {locale: read_messages(messages_dir, locale) for locale in locales}

    def translator(self, locale: str) -> Translator:
        messages = self._catalogs.get(locale) or self._catalogs[DEFAULT_LOCALE]
        return Translator(locale, messages, self._catalogs[DEFAULT_LOCALE])
