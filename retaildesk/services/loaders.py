"""Concurrent table reads behind one error boundary.

A page is described by a :class:`PageLoader`: the table queries it needs, a
mapper turning the raw rows into template context, and the template. The
:class:`DataLoaderBoundary` runs every query at once, maps the result and
renders the page, or renders the shared error panel when anything fails.
Nothing is retried and no partially loaded page is shown.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Sequence

from fastapi import Request
from postgrest.exceptions import APIError
from starlette.responses import Response

from ..core.jinja import render
from ..schemas.auth import SessionUser

logger = logging.getLogger("retaildesk.pages")

Rows = List[Dict[str, Any]]
Datasets = Mapping[str, Rows]


class DataLoadError(Exception):
    """A table read failed; the message reads ``"<Table> error: <reason>"``."""


@dataclass(frozen=True)
class TableQuery:
    table: str
    columns: str = "*"
    order_by: str | None = None
    descending: bool = False
    filters: tuple[tuple[str, Any], ...] = ()
    # Column compared with the signed-in user's id.
    user_column: str | None = None
    label: str | None = None

    @property
    def title(self) -> str:
        return self.label or self.table.replace("_", " ").capitalize()


class SupabaseTableSource:
    """Reads rows through a request-bound Supabase client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    async def fetch(self, query: TableQuery, user: SessionUser | None = None) -> Rows:
        builder = self._client.table(query.table).select(query.columns)
        for column, value in query.filters:
            builder = builder.eq(column, value)
        if query.user_column:
            if user is None:
                raise DataLoadError(f"{query.title} error: no signed-in user")
            builder = builder.eq(query.user_column, user.id)
        if query.order_by:
            builder = builder.order(query.order_by, desc=query.descending)
        try:
            response = await builder.execute()
        except APIError as exc:
            raise DataLoadError(f"{query.title} error: {exc.message}") from exc
        return list(response.data or [])


async def fetch_all(source: SupabaseTableSource, queries: Sequence[TableQuery], user: SessionUser | None = None) -> Dict[str, Rows]:
    results = await asyncio.gather(*(source.fetch(query, user) for query in queries))
    return {query.table: rows for query, rows in zip(queries, results)}


@dataclass(frozen=True)
class PageLoader:
    name: str
    template: str
    queries: tuple[TableQuery, ...]
    mapper: Callable[[Datasets], Dict[str, Any]]
    context: Dict[str, Any] = field(default_factory=dict)


class DataLoaderBoundary:
    def __init__(self, loader: PageLoader) -> None:
        self.loader = loader

    async def load(self, source: SupabaseTableSource, user: SessionUser | None) -> Dict[str, Any]:
        datasets = await fetch_all(source, self.loader.queries, user)
        return self.loader.mapper(datasets)

    async def render(self, request: Request, source: SupabaseTableSource) -> Response:
        user = getattr(request.state, "user", None)
        try:
            context = await self.load(source, user)
        except Exception as exc:
            logger.exception(
                "page.load_failed",
                extra={"extra_data": {"page": self.loader.name, "error": str(exc)}},
            )
            return render(
                request,
                "_error_panel.html",
                {"page": self.loader.name, "details": str(exc) or "Unknown error occurred"},
                status_code=500,
            )
        context.update(self.loader.context)
        context.setdefault("page", self.loader.name)
        return render(request, self.loader.template, context)
