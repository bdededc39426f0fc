from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator


def install_health_and_metrics(app: FastAPI, registry: CollectorRegistry | None = None) -> Instrumentator:
    """Add ``/health`` and the Prometheus ``/metrics`` endpoint to ``app``.

    Must run before the app starts serving; the instrumentator adds a middleware.
    """

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, bool]:
        return {"ok": True}

    instrumentator = Instrumentator(registry=registry) if registry is not None else Instrumentator()
    instrumentator.instrument(app).expose(app, include_in_schema=False)
    return instrumentator
