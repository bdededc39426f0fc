from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class StockLevel(BaseModel):
    """One product at one location."""

    product_id: str
    location_id: str
    product_name: str = "Unknown Product"
    sku: str = "N/A"
    location_name: str = "N/A"
    location_type: Optional[str] = None
    quantity: int = 0
    reserved: int = 0
    available: int = 0
    low_stock: bool = False
    value: Decimal = Decimal("0.00")


class InventoryPage(BaseModel):
    items: List[StockLevel] = []
    total_units: int = 0
    low_stock_count: int = 0
    total_value: Decimal = Decimal("0.00")
