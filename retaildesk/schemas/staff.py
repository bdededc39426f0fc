from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class StaffView(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = "N/A"
    phone: str = "N/A"
    role: Optional[str] = None
    hire_date: Optional[str] = None
    total_sales: int = 0
    total_revenue: Decimal = Decimal("0.00")
    last_sale: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
