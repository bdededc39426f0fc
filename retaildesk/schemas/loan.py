from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class LoanView(BaseModel):
    id: str
    amount: Decimal = Decimal("0")
    loan_date: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[str] = None
    customer_id: str = "N/A"
    customer_name: str = "Unknown Customer"
    customer_email: str = "N/A"
    location_name: str = "N/A"


class LoanSummary(BaseModel):
    count: int = 0
    total_amount: Decimal = Decimal("0.00")
    pending: int = 0
    paid: int = 0


class LoansPage(BaseModel):
    loans: List[LoanView] = []
    summary: LoanSummary = LoanSummary()
