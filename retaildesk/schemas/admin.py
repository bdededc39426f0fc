from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

StaffRole = Literal["admin", "warehouse-manager", "store-manager"]


class InviteUserRequest(BaseModel):
    email: str = Field(..., min_length=3)
    full_name: str = Field(..., min_length=1)
    role: StaffRole
    location_id: int
    phone: Optional[str] = None

    def user_metadata(self) -> dict:
        return {
            "full_name": self.full_name,
            "role": self.role,
            "location_id": str(self.location_id),
            "phone": self.phone or None,
        }


class CreateUserRequest(InviteUserRequest):
    password: str = Field(..., min_length=6)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "manager@example.com",
                "password": "secret1",
                "full_name": "Store Manager",
                "role": "store-manager",
                "location_id": 1,
            }
        }
    }
