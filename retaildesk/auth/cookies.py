"""Per-request cookie bookkeeping and the cookie-backed auth storage.

A ``CookieJar`` collects every cookie a request wants to write. It is filled
by the gatekeeper pipeline and by auth handlers, then applied to whichever
response is finally returned. ``CookieStorage`` is the storage adapter handed
to the Supabase auth client so session tokens live in browser cookies
instead of server memory.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Mapping

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from ..core.config import AppSettings

# Browsers cap a cookie at ~4096 bytes including attributes.
MAX_CHUNK_SIZE = 3180
BASE64_PREFIX = "base64-"


@dataclass(frozen=True)
class CookieMutation:
    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    secure: bool = True
    httponly: bool = True
    samesite: str = "lax"

    @property
    def is_deletion(self) -> bool:
        return self.max_age == 0


def cookie_options(settings: "AppSettings") -> dict[str, Any]:
    """Cookie flags for auth cookies; ``Secure`` everywhere except local mode.

    ``SameSite=Lax`` keeps the cookie on the top-level redirect back from the
    identity provider.
    """

    return {
        "path": "/",
        "secure": not settings.is_local,
        "httponly": True,
        "samesite": "lax",
        "max_age": settings.AUTH_COOKIE_MAX_AGE,
    }


def _set_cookie_names(response: "Response") -> set[str]:
    names = set()
    for header in response.headers.getlist("set-cookie"):
        name, _, _ = header.partition("=")
        names.add(name.strip())
    return names


class CookieJar:
    """Ordered cookie mutations for one request; the last write per name wins."""

    def __init__(self) -> None:
        self._mutations: dict[str, CookieMutation] = {}

    def set(self, name: str, value: str, **options: Any) -> None:
        self._mutations.pop(name, None)
        self._mutations[name] = CookieMutation(name=name, value=value, **options)

    def delete(self, name: str, **options: Any) -> None:
        options = {key: value for key, value in options.items() if key != "max_age"}
        self.set(name, "", max_age=0, **options)

    def merge(self, other: "CookieJar") -> None:
        for mutation in other:
            self._mutations.pop(mutation.name, None)
            self._mutations[mutation.name] = mutation

    def get(self, name: str) -> CookieMutation | None:
        return self._mutations.get(name)

    def names(self) -> list[str]:
        return list(self._mutations)

    def __iter__(self) -> Iterator[CookieMutation]:
        return iter(list(self._mutations.values()))

    def __len__(self) -> int:
        return len(self._mutations)

    def __contains__(self, name: object) -> bool:
        return name in self._mutations

    def overlay(self, cookies: Mapping[str, str]) -> dict[str, str]:
        """Return ``cookies`` as the browser will hold them after this jar applies."""

        merged = dict(cookies)
        for mutation in self:
            if mutation.is_deletion:
                merged.pop(mutation.name, None)
            else:
                merged[mutation.name] = mutation.value
        return merged

    def apply(self, response: "Response", *, keep_existing: bool = True) -> "Response":
        """Write every mutation onto ``response``.

        With ``keep_existing`` a cookie the response already sets (a later
        pipeline step wrote it) is left alone.
        """

        existing = _set_cookie_names(response) if keep_existing else set()
        for mutation in self:
            if mutation.name in existing:
                continue
            if mutation.is_deletion:
                response.delete_cookie(
                    mutation.name,
                    path=mutation.path,
                    secure=mutation.secure,
                    httponly=mutation.httponly,
                    samesite=mutation.samesite,  # type: ignore[arg-type]
                )
            else:
                response.set_cookie(
                    mutation.name,
                    mutation.value,
                    max_age=mutation.max_age,
                    path=mutation.path,
                    secure=mutation.secure,
                    httponly=mutation.httponly,
                    samesite=mutation.samesite,  # type: ignore[arg-type]
                )
        return response


def propagate_to_request(request: "Request", jar: CookieJar) -> None:
    """Rewrite the request's ``Cookie`` header so downstream handlers see ``jar``."""

    if not len(jar):
        return
    cookies = jar.overlay(request.cookies)
    header = "; ".join(f"{name}={value}" for name, value in cookies.items())
    headers = [(key, value) for key, value in request.scope["headers"] if key != b"cookie"]
    if header:
        headers.append((b"cookie", header.encode("latin-1")))
    request.scope["headers"] = headers
    # Starlette caches parsed headers/cookies on the Request instance.
    for cached in ("_headers", "_cookies"):
        if cached in request.__dict__:
            del request.__dict__[cached]


def _encode(value: str) -> str:
    encoded = base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")
    return BASE64_PREFIX + encoded


def _decode(raw: str) -> str | None:
    if not raw.startswith(BASE64_PREFIX):
        return raw
    payload = raw[len(BASE64_PREFIX):]
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.urlsafe_b64decode(payload.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


class CookieStorage:
    """Async key/value storage for the Supabase auth client, backed by cookies.

    Reads come from the inbound request cookies (plus anything written during
    this request); writes go into ``jar``. Values are base64url encoded and
    split into ``<name>.0``, ``<name>.1``... when too long for one cookie.
    Implements the ``get_item``/``set_item``/``remove_item`` interface the
    auth client expects from its storage.
    """

    def __init__(
        self,
        request_cookies: Mapping[str, str],
        jar: CookieJar,
        *,
        prefix: str = "sb",
        options: Mapping[str, Any] | None = None,
    ) -> None:
        self._cookies = dict(request_cookies)
        self._jar = jar
        self._prefix = prefix
        self._options = dict(options or {})

    @property
    def jar(self) -> CookieJar:
        return self._jar

    def cookie_name(self, key: str) -> str:
        return f"{self._prefix}-{key.replace('.', '-')}"

    def _chunk_names(self, name: str) -> list[str]:
        names = []
        index = 0
        while f"{name}.{index}" in self._cookies:
            names.append(f"{name}.{index}")
            index += 1
        return names

    def _read(self, name: str) -> str | None:
        if name in self._cookies:
            return self._cookies[name]
        chunks = self._chunk_names(name)
        if not chunks:
            return None
        return "".join(self._cookies[chunk] for chunk in chunks)

    def _write(self, name: str, value: str) -> None:
        self._cookies[name] = value
        self._jar.set(name, value, **self._options)

    def _drop(self, name: str) -> None:
        self._cookies.pop(name, None)
        self._jar.delete(name, **self._options)

    async def get_item(self, key: str) -> str | None:
        raw = self._read(self.cookie_name(key))
        if raw is None:
            return None
        return _decode(raw)

    async def set_item(self, key: str, value: str) -> None:
        name = self.cookie_name(key)
        encoded = _encode(value)
        stale = set(self._chunk_names(name))
        if name in self._cookies:
            stale.add(name)
        if len(encoded) <= MAX_CHUNK_SIZE:
            stale.discard(name)
            self._write(name, encoded)
        else:
            for index, start in enumerate(range(0, len(encoded), MAX_CHUNK_SIZE)):
                chunk_name = f"{name}.{index}"
                stale.discard(chunk_name)
                self._write(chunk_name, encoded[start:start + MAX_CHUNK_SIZE])
        for leftover in sorted(stale):
            self._drop(leftover)

    async def remove_item(self, key: str) -> None:
        name = self.cookie_name(key)
        targets = self._chunk_names(name)
        if name in self._cookies:
            targets.append(name)
        for target in targets:
            self._drop(target)


def request_cookie_storage(request: "Request", jar: CookieJar, settings: "AppSettings") -> CookieStorage:
    return CookieStorage(
        request.cookies,
        jar,
        prefix=settings.AUTH_COOKIE_PREFIX,
        options=cookie_options(settings),
    )


__all__ = [
    "BASE64_PREFIX",
    "MAX_CHUNK_SIZE",
    "CookieJar",
    "CookieMutation",
    "CookieStorage",
    "cookie_options",
    "propagate_to_request",
    "request_cookie_storage",
]
