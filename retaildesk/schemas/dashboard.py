from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ProfileView(BaseModel):
    email: Optional[str] = None
    full_name: str = "N/A"
    role: str = "N/A"
    location_name: str = "N/A"
    location_type: Optional[str] = None
