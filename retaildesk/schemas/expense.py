from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class ExpenseView(BaseModel):
    id: str
    amount: Decimal = Decimal("0")
    expense_date: Optional[str] = None
    category_name: str = "N/A"
    location_name: str = "N/A"
    vendor_name: str = "N/A"
    description: str = ""
    status: Optional[str] = None


class ExpensesPage(BaseModel):
    expenses: List[ExpenseView] = []
    total_amount: Decimal = Decimal("0.00")
