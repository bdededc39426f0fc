"""Staff account management for administrators.

Both endpoints sit under ``/api``, which the gatekeeper never redirects, so
they check the session and the caller's ``profiles.role`` themselves and
answer with JSON error envelopes.
"""

from __future__ import annotations

import logging
from typing import Any, Type, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError
from pydantic import BaseModel, ValidationError
from starlette import status
from supabase import AuthError

from ..auth.client import open_request_client
from ..auth.cookies import CookieJar
from ..auth.redirects import post_login_url
from ..core.errors import ErrorEnvelope
from ..deps.auth import require_session
from ..i18n import DEFAULT_LOCALE
from ..schemas.admin import CreateUserRequest, InviteUserRequest
from ..schemas.auth import SessionUser

logger = logging.getLogger("retaildesk.admin")

router = APIRouter(prefix="/api/admin", tags=["admin"])

ADMIN_ROLE = "admin"

M = TypeVar("M", bound=BaseModel)


async def _rows(builder) -> list[dict[str, Any]]:
    try:
        response = await builder.execute()
    except APIError as exc:
        logger.warning("admin.query_failed", extra={"extra_data": {"reason": exc.message}})
        return []
    return list(response.data or [])


async def _admin_client(request: Request, user: SessionUser, action: str):
    client, jar = await open_request_client(request)
    profiles = await _rows(client.table("profiles").select("role").eq("id", user.id))
    if not profiles or profiles[0].get("role") != ADMIN_ROLE:
        logger.info("admin.forbidden", extra={"extra_data": {"action": action}})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Only admins can {action}")
    return client, jar


async def _parse(request: Request, model: Type[M]) -> M | ErrorEnvelope:
    try:
        payload = await request.json()
    except ValueError:
        return ErrorEnvelope(status_code=400, code="invalid_request", message="Request body must be JSON")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        return ErrorEnvelope(
            status_code=400,
            code="invalid_request",
            message="Invalid user details",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
        )


async def _location_exists(client: Any, location_id: int) -> bool:
    rows = await _rows(client.table("locations").select("location_id").eq("location_id", location_id))
    return bool(rows)


def _success(message: str, data: dict[str, Any]) -> JSONResponse:
    return JSONResponse({"success": True, "message": message, "data": data})


def _callback_url(request: Request) -> str:
    return post_login_url(request, f"/{DEFAULT_LOCALE}/auth/callback", request.app.state.settings)


@router.post("/create-user")
async def create_user(request: Request, user: SessionUser = Depends(require_session)):
    client, jar = await _admin_client(request, user, "create users")
    body = await _parse(request, CreateUserRequest)
    if isinstance(body, ErrorEnvelope):
        return jar.apply(body)
    if not await _location_exists(client, body.location_id):
        return jar.apply(ErrorEnvelope(status_code=400, code="invalid_location", message="Invalid location"))

    # The new account's session must not replace the admin's cookies.
    signup_client, _ = await open_request_client(request, CookieJar())
    try:
        result = await signup_client.auth.sign_up(
            {
                "email": body.email,
                "password": body.password,
                "options": {"data": body.user_metadata(), "email_redirect_to": _callback_url(request)},
            }
        )
    except AuthError as exc:
        logger.warning("admin.create_user_failed", extra={"extra_data": {"reason": str(exc)}})
        return jar.apply(
            ErrorEnvelope(status_code=500, code="provider_error", message=str(exc) or "Failed to create user")
        )
    created = getattr(result, "user", None)
    if created is None:
        return jar.apply(ErrorEnvelope(status_code=500, code="provider_error", message="Failed to create user"))

    logger.info("admin.user_created", extra={"extra_data": {"user_id": str(created.id), "role": body.role}})
    data = {
        "id": str(created.id),
        "email": getattr(created, "email", None) or body.email,
        "full_name": body.full_name,
        "role": body.role,
        "location_id": body.location_id,
    }
    return jar.apply(_success("User created successfully. Confirmation email sent.", data))


@router.post("/invite-user")
async def invite_user(request: Request, user: SessionUser = Depends(require_session)):
    client, jar = await _admin_client(request, user, "invite users")
    body = await _parse(request, InviteUserRequest)
    if isinstance(body, ErrorEnvelope):
        return jar.apply(body)
    if not await _location_exists(client, body.location_id):
        return jar.apply(ErrorEnvelope(status_code=400, code="invalid_location", message="Invalid location"))
    if await _rows(client.table("profiles").select("id").eq("email", body.email)):
        return jar.apply(
            ErrorEnvelope(status_code=409, code="user_exists", message="A user with this email already exists")
        )

    admin_factory = request.app.state.admin_client_factory
    if admin_factory is None:
        return jar.apply(
            ErrorEnvelope(status_code=503, code="not_configured", message="Invitations are not configured")
        )
    admin = await admin_factory()
    try:
        result = await admin.auth.admin.invite_user_by_email(
            body.email,
            {"data": body.user_metadata(), "redirect_to": _callback_url(request)},
        )
    except AuthError as exc:
        logger.warning("admin.invite_failed", extra={"extra_data": {"reason": str(exc)}})
        return jar.apply(
            ErrorEnvelope(status_code=500, code="provider_error", message=str(exc) or "Failed to send invitation")
        )

    invited = getattr(result, "user", None)
    logger.info("admin.user_invited", extra={"extra_data": {"role": body.role}})
    data = {"id": str(invited.id) if invited is not None else None, "email": body.email}
    return jar.apply(_success("Invitation sent successfully", data))

