from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class SaleView(BaseModel):
    id: str
    sale_date: Optional[str] = None
    total_amount: Decimal = Decimal("0")
    status: Optional[str] = None
    customer_name: str = "Unknown Customer"
    staff_name: str = "N/A"


class SalesSummary(BaseModel):
    count: int = 0
    revenue: Decimal = Decimal("0.00")
    completed: int = 0
    average: Decimal = Decimal("0.00")


class SalesPage(BaseModel):
    sales: List[SaleView] = []
    summary: SalesSummary = SalesSummary()
