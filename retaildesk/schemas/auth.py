from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SessionUser(BaseModel):
    """The signed-in user as the identity provider reports it."""

    id: str
    email: str | None = None
    full_name: str | None = None
    role: str | None = None

    @classmethod
    def from_provider(cls, user: Any) -> "SessionUser":
        metadata = getattr(user, "user_metadata", None) or {}
        app_metadata = getattr(user, "app_metadata", None) or {}
        return cls(
            id=str(getattr(user, "id")),
            email=getattr(user, "email", None),
            full_name=metadata.get("full_name") or metadata.get("name"),
            role=app_metadata.get("role") or metadata.get("role"),
        )


class Credentials(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {"email": "owner@example.com", "password": "correct horse"}
        }
    }
