from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class ProductView(BaseModel):
    id: str
    name: str
    sku: str = "N/A"
    price: Decimal = Decimal("0.00")
    category_id: Optional[str] = None
    category_name: str = "Uncategorized"
    stock_qty: int = 0


class CategoryView(BaseModel):
    id: str
    name: str
    description: str = ""
    product_count: int = 0


class ProductsPage(BaseModel):
    products: List[ProductView] = []
    categories: List[CategoryView] = []
    total_stock: int = 0
