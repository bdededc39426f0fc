from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Mapping

from ..schemas.report import LabeledAmount, MonthlyFigures, ReportSummary, ReportTotals

TWOPLACES = Decimal("0.01")
UNASSIGNED = "N/A"


def _to_decimal(value: Any) -> Decimal:
    """Best-effort conversion of incoming values to Decimal for currency math."""

    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return Decimal("0")
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return Decimal("0")
    return Decimal("0")


def _quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP) if value else Decimal("0.00")


def month_key(value: Any) -> str | None:
    """``YYYY-MM`` for a date, datetime or ISO string; ``None`` when unparseable."""

    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, str) and len(value) >= 7:
        try:
            parsed = datetime.strptime(value[:7], "%Y-%m")
        except ValueError:
            return None
        return f"{parsed.year:04d}-{parsed.month:02d}"
    return None


def sum_amounts(rows: Iterable[Mapping[str, Any]], column: str) -> Decimal:
    total = Decimal("0")
    for row in rows:
        total += _to_decimal(row.get(column))
    return _quantize_currency(total)


def _sorted_amounts(buckets: Mapping[str, Dict[str, Any]]) -> list[LabeledAmount]:
    items = [
        LabeledAmount(label=label, amount=_quantize_currency(data["amount"]), count=data["count"])
        for label, data in buckets.items()
    ]
    return sorted(items, key=lambda item: (-item.amount, item.label))


def build_report_summary(
    sales: Iterable[Mapping[str, Any]],
    products: Iterable[Mapping[str, Any]],
    customers: Iterable[Mapping[str, Any]],
    expenses: Iterable[Mapping[str, Any]],
    loans: Iterable[Mapping[str, Any]],
) -> ReportSummary:
    """Aggregate revenue, expenses, profit and loans per month and overall.

    Rows whose date cannot be read still count toward the totals but not
    toward any month.
    """

    monthly: Dict[str, Dict[str, Decimal]] = defaultdict(
        lambda: {"revenue": Decimal("0"), "expenses": Decimal("0"), "loans": Decimal("0")}
    )
    by_type: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"amount": Decimal("0"), "count": 0})
    by_staff: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"amount": Decimal("0"), "count": 0})

    revenue = Decimal("0")
    for sale in sales:
        amount = _to_decimal(sale.get("total_amount"))
        revenue += amount
        key = month_key(sale.get("sale_date"))
        if key:
            monthly[key]["revenue"] += amount
        staff_id = sale.get("staff_id")
        bucket = by_staff[f"#{staff_id}" if staff_id is not None else UNASSIGNED]
        bucket["amount"] += amount
        bucket["count"] += 1

    spent = Decimal("0")
    for expense in expenses:
        amount = _to_decimal(expense.get("amount"))
        spent += amount
        key = month_key(expense.get("expense_date"))
        if key:
            monthly[key]["expenses"] += amount
        bucket = by_type[expense.get("expense_type") or UNASSIGNED]
        bucket["amount"] += amount
        bucket["count"] += 1

    lent = Decimal("0")
    for loan in loans:
        amount = _to_decimal(loan.get("loan_amount"))
        lent += amount
        key = month_key(loan.get("loan_date"))
        if key:
            monthly[key]["loans"] += amount

    months = [
        MonthlyFigures(
            month=key,
            revenue=_quantize_currency(values["revenue"]),
            expenses=_quantize_currency(values["expenses"]),
            profit=_quantize_currency(values["revenue"] - values["expenses"]),
            loans=_quantize_currency(values["loans"]),
        )
        for key, values in sorted(monthly.items(), reverse=True)
    ]

    totals = ReportTotals(
        revenue=_quantize_currency(revenue),
        expenses=_quantize_currency(spent),
        profit=_quantize_currency(revenue - spent),
        loans=_quantize_currency(lent),
        products=sum(1 for _ in products),
        customers=sum(1 for _ in customers),
    )
    return ReportSummary(
        totals=totals,
        monthly=months,
        expenses_by_type=_sorted_amounts(by_type),
        revenue_by_staff=_sorted_amounts(by_staff),
    )
