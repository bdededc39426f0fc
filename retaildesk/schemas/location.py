from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class LocationView(BaseModel):
    id: str
    name: str
    location_type: Optional[str] = None
    address: str = "N/A"


class LocationsPage(BaseModel):
    # Only administrators see the list; everyone else gets an access notice.
    can_manage: bool = False
    locations: List[LocationView] = []
    store_count: int = 0
    warehouse_count: int = 0
