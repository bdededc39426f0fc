from __future__ import annotations

from typing import List

from pydantic import BaseModel


class InventoryLine(BaseModel):
    product_id: str
    product_name: str = "Unknown Product"
    sku: str = "N/A"
    quantity: int = 0


class StoreView(BaseModel):
    id: str
    name: str
    location: str = "N/A"
    total_products: int = 0
    total_quantity: int = 0
    inventory: List[InventoryLine] = []
