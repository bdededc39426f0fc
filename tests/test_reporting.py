from decimal import Decimal

from retaildesk.services.reporting import build_report_summary, month_key


def test_month_key_handles_strings_and_garbage():
    assert month_key("2024-03-15T10:00:00Z") == "2024-03"
    assert month_key("2024-11-01") == "2024-11"
    assert month_key("not a date") is None
    assert month_key(None) is None


def test_summary_groups_by_month_newest_first():
    summary = build_report_summary(
        sales=[
            {"sale_date": "2024-01-05T10:00:00", "total_amount": 100, "staff_id": 1},
            {"sale_date": "2024-02-10T10:00:00", "total_amount": "250.50", "staff_id": 2},
            {"sale_date": "2024-02-11T10:00:00", "total_amount": 49.5, "staff_id": 1},
        ],
        products=[{"product_id": 1}, {"product_id": 2}],
        customers=[{"customer_id": 1}],
        expenses=[
            {"expense_date": "2024-01-20", "amount": 30, "expense_type": "rent"},
            {"expense_date": "2024-02-01", "amount": "20.25", "expense_type": "utilities"},
            {"expense_date": "2024-02-15", "amount": 400, "expense_type": "rent"},
        ],
        loans=[{"loan_date": "2024-02-03", "loan_amount": 75}],
    )

    assert [row.month for row in summary.monthly] == ["2024-02", "2024-01"]
    february, january = summary.monthly
    assert february.revenue == Decimal("300.00")
    assert february.expenses == Decimal("420.25")
    assert february.profit == Decimal("-120.25")
    assert february.loans == Decimal("75.00")
    assert (january.revenue, january.expenses, january.profit) == (Decimal("100.00"), Decimal("30.00"), Decimal("70.00"))

    totals = summary.totals
    assert totals.revenue == Decimal("400.00")
    assert totals.expenses == Decimal("450.25")
    assert totals.profit == Decimal("-50.25")
    assert totals.loans == Decimal("75.00")
    assert (totals.products, totals.customers) == (2, 1)


def test_summary_breakdowns_sort_by_amount():
    summary = build_report_summary(
        sales=[
            {"sale_date": "2024-01-05", "total_amount": 10, "staff_id": 1},
            {"sale_date": "2024-01-06", "total_amount": 30, "staff_id": 2},
            {"sale_date": "2024-01-07", "total_amount": 5, "staff_id": None},
        ],
        products=[],
        customers=[],
        expenses=[
            {"expense_date": "2024-01-01", "amount": 5, "expense_type": "supplies"},
            {"expense_date": "2024-01-02", "amount": 50, "expense_type": "rent"},
            {"expense_date": "2024-01-03", "amount": 1, "expense_type": None},
        ],
        loans=[],
    )

    assert [(item.label, item.amount, item.count) for item in summary.revenue_by_staff] == [
        ("#2", Decimal("30.00"), 1),
        ("#1", Decimal("10.00"), 1),
        ("N/A", Decimal("5.00"), 1),
    ]
    assert [item.label for item in summary.expenses_by_type] == ["rent", "supplies", "N/A"]


def test_undated_rows_count_in_totals_only():
    summary = build_report_summary(
        sales=[{"sale_date": None, "total_amount": 12}],
        products=[],
        customers=[],
        expenses=[],
        loans=[],
    )
    assert summary.monthly == []
    assert summary.totals.revenue == Decimal("12.00")


def test_empty_inputs_give_zero_summary():
    summary = build_report_summary([], [], [], [], [])
    assert summary.totals.revenue == Decimal("0.00")
    assert summary.monthly == []
    assert summary.expenses_by_type == []
