from __future__ import annotations

from .gatekeeper import GateDecision, GateState, ResponseAccumulator, RouteGatekeeper, decide
from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "GateDecision",
    "GateState",
    "RequestIdMiddleware",
    "ResponseAccumulator",
    "RouteGatekeeper",
    "SecurityHeadersMiddleware",
    "decide",
    "request_id_ctx_var",
    "principal_ctx_var",
]
