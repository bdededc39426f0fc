from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class CustomerLoan(BaseModel):
    id: str
    amount: Decimal = Decimal("0")
    loan_date: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[str] = None


class CustomerView(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = "N/A"
    phone: str = "N/A"
    address: str = "N/A"
    created_at: Optional[str] = None
    loans: List[CustomerLoan] = []

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
