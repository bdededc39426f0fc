"""Page definitions: which tables each page reads and how rows become views."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping

from ..schemas.customer import CustomerLoan, CustomerView
from ..schemas.dashboard import ProfileView
from ..schemas.expense import ExpensesPage, ExpenseView
from ..schemas.inventory import InventoryPage, StockLevel
from ..schemas.loan import LoansPage, LoanSummary, LoanView
from ..schemas.location import LocationsPage, LocationView
from ..schemas.product import CategoryView, ProductsPage, ProductView
from ..schemas.sale import SalesPage, SalesSummary, SaleView
from ..schemas.staff import StaffView
from ..schemas.store import InventoryLine, StoreView
from .loaders import Datasets, PageLoader, Rows, TableQuery
from .reporting import _quantize_currency, _to_decimal, build_report_summary, sum_amounts

NOT_AVAILABLE = "N/A"
UNKNOWN_CUSTOMER = "Unknown Customer"
UNKNOWN_PRODUCT = "Unknown Product"
UNCATEGORIZED = "Uncategorized"
ADMIN_ROLE = "admin"
LOW_STOCK_THRESHOLD = 10


def _embedded(row: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    """A joined relation, which PostgREST returns as an object or a one-item list."""

    value = row.get(key)
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, Mapping) else None


def _text(value: Any, default: str = NOT_AVAILABLE) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _id(value: Any) -> str:
    return "" if value is None else str(value)


def _group_by(rows: Rows, column: str) -> Dict[Any, Rows]:
    grouped: Dict[Any, Rows] = defaultdict(list)
    for row in rows:
        grouped[row.get(column)].append(row)
    return grouped


def _latest(values: List[Any]) -> str | None:
    parsed = []
    for value in values:
        if not value:
            continue
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            continue
        parsed.append(dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc))
    return max(parsed).isoformat() if parsed else None


# ---------- dashboard ----------
def map_dashboard(datasets: Datasets) -> Dict[str, Any]:
    rows = datasets.get("profiles") or []
    profile = rows[0] if rows else {}
    location = _embedded(profile, "locations") or _embedded(profile, "location") or {}
    view = ProfileView(
        email=profile.get("email"),
        full_name=_text(profile.get("full_name")),
        role=_text(profile.get("role")),
        location_name=_text(location.get("name")),
        location_type=location.get("location_type"),
    )
    return {"profile": view}


# ---------- customers ----------
def map_customers(datasets: Datasets) -> Dict[str, Any]:
    loans_by_customer = _group_by(datasets.get("loans") or [], "customer_id")
    customers = []
    for row in datasets.get("customers") or []:
        loans = [
            CustomerLoan(
                id=_id(loan.get("loan_id")),
                amount=_to_decimal(loan.get("loan_amount")),
                loan_date=loan.get("loan_date"),
                due_date=loan.get("due_date"),
                status=loan.get("status"),
            )
            for loan in loans_by_customer.get(row.get("customer_id"), [])
        ]
        customers.append(
            CustomerView(
                id=_id(row.get("customer_id")),
                first_name=row.get("first_name") or "",
                last_name=row.get("last_name") or "",
                email=_text(row.get("email")),
                phone=_text(row.get("phone")),
                address=_text(row.get("address")),
                created_at=row.get("created_at"),
                loans=loans,
            )
        )
    return {"customers": customers}


# ---------- loans ----------
def _customer_name(customer: Mapping[str, Any] | None) -> str:
    if not customer:
        return UNKNOWN_CUSTOMER
    name = f"{customer.get('first_name') or ''} {customer.get('last_name') or ''}".strip()
    return name or UNKNOWN_CUSTOMER


def map_loans(datasets: Datasets) -> Dict[str, Any]:
    loans = []
    for row in datasets.get("loans") or []:
        customer = _embedded(row, "customers")
        location = _embedded(row, "locations")
        loans.append(
            LoanView(
                id=_id(row.get("loan_id")),
                amount=_to_decimal(row.get("loan_amount")),
                loan_date=row.get("loan_date"),
                due_date=row.get("due_date"),
                status=row.get("status"),
                customer_id=_text(row.get("customer_id")),
                customer_name=_customer_name(customer),
                customer_email=_text(customer.get("email") if customer else None),
                location_name=_text(location.get("name") if location else None),
            )
        )
    statuses = [(loan.status or "").lower() for loan in loans]
    summary = LoanSummary(
        count=len(loans),
        total_amount=_quantize_currency(sum((loan.amount for loan in loans), Decimal("0"))),
        pending=statuses.count("pending"),
        paid=statuses.count("paid"),
    )
    return {"page_data": LoansPage(loans=loans, summary=summary)}


# ---------- expenses ----------
def map_expenses(datasets: Datasets) -> Dict[str, Any]:
    locations = {row.get("location_id"): row.get("name") for row in datasets.get("locations") or []}
    categories = {row.get("category_id"): row.get("name") for row in datasets.get("expense_categories") or []}
    rows = datasets.get("expenses") or []
    expenses = [
        ExpenseView(
            id=_id(row.get("expense_id")),
            amount=_to_decimal(row.get("amount")),
            expense_date=row.get("expense_date"),
            category_name=_text(categories.get(row.get("category_id"))),
            location_name=_text(locations.get(row.get("location_id"))),
            vendor_name=_text(row.get("vendor_name")),
            description=row.get("description") or "",
            status=row.get("status"),
        )
        for row in rows
    ]
    return {"page_data": ExpensesPage(expenses=expenses, total_amount=sum_amounts(rows, "amount"))}


# ---------- stores ----------
def map_stores(datasets: Datasets) -> Dict[str, Any]:
    inventory_by_store = _group_by(datasets.get("store_inventory") or [], "store_id")
    stores = []
    for row in datasets.get("stores") or []:
        items = inventory_by_store.get(row.get("store_id"), [])
        lines = []
        for item in items:
            product = _embedded(item, "products") or {}
            lines.append(
                InventoryLine(
                    product_id=_id(item.get("product_id")),
                    product_name=_text(product.get("name"), UNKNOWN_PRODUCT),
                    sku=_text(product.get("sku")),
                    quantity=int(item.get("quantity") or 0),
                )
            )
        stores.append(
            StoreView(
                id=_id(row.get("store_id")),
                name=row.get("name") or "",
                location=_text(row.get("location")),
                total_products=len(lines),
                total_quantity=sum(line.quantity for line in lines),
                inventory=lines,
            )
        )
    return {"stores": stores}


# ---------- staff ----------
def map_staff(datasets: Datasets) -> Dict[str, Any]:
    sales_by_staff = _group_by(datasets.get("sales") or [], "staff_id")
    staff = []
    for row in datasets.get("staff") or []:
        sales = sales_by_staff.get(row.get("staff_id"), [])
        staff.append(
            StaffView(
                id=_id(row.get("staff_id")),
                first_name=row.get("first_name") or "",
                last_name=row.get("last_name") or "",
                email=_text(row.get("email")),
                phone=_text(row.get("phone")),
                role=row.get("role"),
                hire_date=row.get("hire_date"),
                total_sales=len(sales),
                total_revenue=sum_amounts(sales, "total_amount"),
                last_sale=_latest([sale.get("sale_date") for sale in sales]),
            )
        )
    return {"staff": staff}


# ---------- products ----------
def map_products(datasets: Datasets) -> Dict[str, Any]:
    category_names = {row.get("category_id"): row.get("name") for row in datasets.get("categories") or []}
    products = []
    for row in datasets.get("products") or []:
        category = _embedded(row, "categories")
        name = (category or {}).get("name") or category_names.get(row.get("category_id"))
        stock = row.get("inventory") or []
        if isinstance(stock, Mapping):
            stock = [stock]
        products.append(
            ProductView(
                id=_id(row.get("product_id")),
                name=_text(row.get("name"), UNKNOWN_PRODUCT),
                sku=_text(row.get("sku")),
                price=_quantize_currency(_to_decimal(row.get("base_price"))),
                category_id=None if row.get("category_id") is None else str(row.get("category_id")),
                category_name=_text(name, UNCATEGORIZED),
                stock_qty=sum(int(item.get("quantity") or 0) for item in stock),
            )
        )
    counts = _group_by(datasets.get("products") or [], "category_id")
    categories = [
        CategoryView(
            id=_id(row.get("category_id")),
            name=_text(row.get("name")),
            description=row.get("description") or "",
            product_count=len(counts.get(row.get("category_id"), [])),
        )
        for row in datasets.get("categories") or []
    ]
    page = ProductsPage(
        products=products,
        categories=categories,
        total_stock=sum(product.stock_qty for product in products),
    )
    return {"page_data": page}


# ---------- sales ----------
def map_sales(datasets: Datasets) -> Dict[str, Any]:
    staff_names = {
        row.get("staff_id"): f"{row.get('first_name') or ''} {row.get('last_name') or ''}".strip()
        for row in datasets.get("staff") or []
    }
    sales = [
        SaleView(
            id=_id(row.get("sale_id")),
            sale_date=row.get("sale_date"),
            total_amount=_to_decimal(row.get("total_amount")),
            status=row.get("status"),
            customer_name=_customer_name(_embedded(row, "customers")),
            staff_name=_text(staff_names.get(row.get("staff_id"))),
        )
        for row in datasets.get("sales") or []
    ]
    revenue = sum_amounts(datasets.get("sales") or [], "total_amount")
    summary = SalesSummary(
        count=len(sales),
        revenue=revenue,
        completed=sum(1 for sale in sales if (sale.status or "").lower() == "completed"),
        average=_quantize_currency(revenue / len(sales)) if sales else Decimal("0.00"),
    )
    return {"page_data": SalesPage(sales=sales, summary=summary)}


# ---------- inventory ----------
def map_inventory(datasets: Datasets) -> Dict[str, Any]:
    items = []
    for row in datasets.get("inventory") or []:
        product = _embedded(row, "products") or {}
        location = _embedded(row, "locations") or {}
        quantity = int(row.get("quantity") or 0)
        reserved = int(row.get("reserved_quantity") or 0)
        items.append(
            StockLevel(
                product_id=_id(row.get("product_id")),
                location_id=_id(row.get("location_id")),
                product_name=_text(product.get("name"), UNKNOWN_PRODUCT),
                sku=_text(product.get("sku")),
                location_name=_text(location.get("name")),
                location_type=location.get("location_type"),
                quantity=quantity,
                reserved=reserved,
                available=quantity - reserved,
                low_stock=quantity < LOW_STOCK_THRESHOLD,
                value=_quantize_currency(_to_decimal(product.get("base_price")) * quantity),
            )
        )
    page = InventoryPage(
        items=items,
        total_units=sum(item.quantity for item in items),
        low_stock_count=sum(1 for item in items if item.low_stock),
        total_value=_quantize_currency(sum((item.value for item in items), Decimal("0"))),
    )
    return {"page_data": page}


# ---------- locations ----------
def map_locations(datasets: Datasets) -> Dict[str, Any]:
    profiles = datasets.get("profiles") or []
    if not profiles or profiles[0].get("role") != ADMIN_ROLE:
        return {"page_data": LocationsPage(can_manage=False)}
    locations = [
        LocationView(
            id=_id(row.get("location_id")),
            name=_text(row.get("name")),
            location_type=row.get("location_type"),
            address=_text(row.get("address")),
        )
        for row in datasets.get("locations") or []
    ]
    types = [location.location_type for location in locations]
    page = LocationsPage(
        can_manage=True,
        locations=locations,
        store_count=types.count("store"),
        warehouse_count=types.count("warehouse"),
    )
    return {"page_data": page}


# ---------- reports ----------
def map_reports(datasets: Datasets) -> Dict[str, Any]:
    summary = build_report_summary(
        sales=datasets.get("sales") or [],
        products=datasets.get("products") or [],
        customers=datasets.get("customers") or [],
        expenses=datasets.get("expenses") or [],
        loans=datasets.get("loans") or [],
    )
    return {"report": summary}


PAGES: Dict[str, PageLoader] = {
    "dashboard": PageLoader(
        name="dashboard",
        template="dashboard.html",
        queries=(
            TableQuery(
                "profiles",
                "id, email, full_name, role, location_id, locations (name, location_type)",
                user_column="id",
            ),
        ),
        mapper=map_dashboard,
    ),
    "customers": PageLoader(
        name="customers",
        template="customers.html",
        queries=(
            TableQuery("customers", order_by="created_at", descending=True),
            TableQuery("loans", "loan_id, loan_amount, loan_date, due_date, status, customer_id"),
        ),
        mapper=map_customers,
    ),
    "loans": PageLoader(
        name="loans",
        template="loans.html",
        queries=(
            TableQuery(
                "loans",
                "loan_id, loan_amount, loan_date, due_date, status, customer_id, location_id, "
                "customers (first_name, last_name, email), locations (name)",
                order_by="loan_date",
                descending=True,
            ),
        ),
        mapper=map_loans,
    ),
    "expenses": PageLoader(
        name="expenses",
        template="expenses.html",
        queries=(
            TableQuery("expenses", order_by="expense_date", descending=True),
            TableQuery("locations", "location_id, name"),
            TableQuery("expense_categories", "category_id, name", label="Expense categories"),
        ),
        mapper=map_expenses,
    ),
    "stores": PageLoader(
        name="stores",
        template="stores.html",
        queries=(
            TableQuery("stores", order_by="name"),
            TableQuery(
                "store_inventory",
                "product_id, store_id, quantity, products (name, sku)",
                label="Store inventory",
            ),
        ),
        mapper=map_stores,
    ),
    "staff": PageLoader(
        name="staff",
        template="staff.html",
        queries=(
            TableQuery("staff", order_by="hire_date", descending=True),
            TableQuery("sales", "sale_id, total_amount, staff_id, sale_date"),
        ),
        mapper=map_staff,
    ),
    "products": PageLoader(
        name="products",
        template="products.html",
        queries=(
            TableQuery(
                "products",
                "product_id, name, sku, base_price, category_id, categories (name), inventory (quantity, location_id)",
                order_by="product_id",
                descending=True,
            ),
            TableQuery("categories", "category_id, name, description", order_by="name"),
        ),
        mapper=map_products,
    ),
    "sales": PageLoader(
        name="sales",
        template="sales.html",
        queries=(
            TableQuery(
                "sales",
                "sale_id, sale_date, total_amount, status, customer_id, staff_id, "
                "customers (first_name, last_name, email)",
                order_by="sale_date",
                descending=True,
            ),
            TableQuery("staff", "staff_id, first_name, last_name"),
        ),
        mapper=map_sales,
    ),
    "inventory": PageLoader(
        name="inventory",
        template="inventory.html",
        queries=(
            TableQuery(
                "inventory",
                "product_id, location_id, quantity, reserved_quantity, "
                "products (name, sku, base_price), locations (name, location_type)",
                order_by="quantity",
            ),
        ),
        mapper=map_inventory,
    ),
    "locations": PageLoader(
        name="locations",
        template="locations.html",
        queries=(
            TableQuery("profiles", "id, role", user_column="id", label="Profile"),
            TableQuery("locations", "location_id, name, location_type, address", order_by="name"),
        ),
        mapper=map_locations,
    ),
    "reports": PageLoader(
        name="reports",
        template="reports.html",
        queries=(
            TableQuery("sales", "sale_date, total_amount, staff_id", order_by="sale_date", descending=True),
            TableQuery("products", "product_id, name, base_price, category_id", order_by="name"),
            TableQuery("customers", "customer_id, created_at", order_by="created_at", descending=True),
            TableQuery("expenses", "expense_date, amount, expense_type", order_by="expense_date", descending=True),
            TableQuery("loans", "loan_date, loan_amount", order_by="loan_date", descending=True),
        ),
        mapper=map_reports,
    ),
}
