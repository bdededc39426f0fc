"""Locale detection for request paths and unprefixed requests."""

from __future__ import annotations

from typing import NamedTuple

from .locales import DEFAULT_LOCALE, LOCALES, is_supported


class LocaleMatch(NamedTuple):
    locale: str
    has_explicit_locale: bool
    remainder: str


def resolve(path: str) -> LocaleMatch:
    """Split a leading locale segment off ``path``.

    ``/fa/customers`` gives ``("fa", True, "/customers")``; ``/xx/customers``
    and ``/customers`` give the default locale with the path kept as the
    remainder. Empty segments are dropped, so the remainder is always a single
    ``/``-prefixed path.
    """

    segments = [segment for segment in (path or "").split("/") if segment]
    if segments and segments[0] in LOCALES:
        return LocaleMatch(segments[0], True, "/" + "/".join(segments[1:]))
    return LocaleMatch(DEFAULT_LOCALE, False, "/" + "/".join(segments))


def _parse_accept_language(header: str) -> list[tuple[str, float]]:
    ranges: list[tuple[str, float]] = []
    for index, part in enumerate(header.split(",")):
        token = part.strip()
        if not token:
            continue
        tag, _, params = token.partition(";")
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        if quality <= 0:
            continue
        # Earlier entries win ties, hence the small positional penalty.
        ranges.append((tag.strip().lower(), quality - index * 1e-6))
    ranges.sort(key=lambda item: item[1], reverse=True)
    return ranges


def negotiate(accept_language: str | None, cookie_locale: str | None = None) -> str:
    """Pick the locale for a request that carries none in its path."""

    if is_supported(cookie_locale):
        return cookie_locale  # type: ignore[return-value]
    for tag, _quality in _parse_accept_language(accept_language or ""):
        primary = tag.split("-", 1)[0]
        if primary in LOCALES:
            return primary
    return DEFAULT_LOCALE
