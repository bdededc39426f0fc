from __future__ import annotations

from decimal import Decimal
from typing import List

from pydantic import BaseModel


class MonthlyFigures(BaseModel):
    month: str
    revenue: Decimal = Decimal("0.00")
    expenses: Decimal = Decimal("0.00")
    profit: Decimal = Decimal("0.00")
    loans: Decimal = Decimal("0.00")


class ReportTotals(BaseModel):
    revenue: Decimal = Decimal("0.00")
    expenses: Decimal = Decimal("0.00")
    profit: Decimal = Decimal("0.00")
    loans: Decimal = Decimal("0.00")
    products: int = 0
    customers: int = 0


class LabeledAmount(BaseModel):
    label: str
    amount: Decimal = Decimal("0.00")
    count: int = 0


class ReportSummary(BaseModel):
    """Financial summary shown on the reports page; months are ``YYYY-MM``, newest first."""

    totals: ReportTotals = ReportTotals()
    monthly: List[MonthlyFigures] = []
    expenses_by_type: List[LabeledAmount] = []
    revenue_by_staff: List[LabeledAmount] = []
