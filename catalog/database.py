import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .schemas import CategoryIn, ProductIn

# This file holds the in-memory tables, id sequences and the locks guarding
# check-then-write mutations (SKU and category-name uniqueness).

PRODUCTS: Dict[int, Dict[str, Any]] = {}
CATEGORIES: Dict[int, Dict[str, Any]] = {}
_SEQUENCES: Dict[str, int] = {"products": 0, "categories": 0}
_LOCKS: Dict[str, asyncio.Lock] = {}


def _get_lock(key: str) -> asyncio.Lock:
    if key not in _LOCKS:
        _LOCKS[key] = asyncio.Lock()
    return _LOCKS[key]


def _next_id(table: str) -> int:
    _SEQUENCES[table] += 1
    return _SEQUENCES[table]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _make_product_dict(p: ProductIn, product_id: Optional[int] = None,
                       created_at: Optional[datetime] = None) -> Dict[str, Any]:
    now = _now()
    return {
        "id": product_id if product_id is not None else _next_id("products"),
        "name": p.name,
        "sku": p.sku,
        "description": p.description,
        "price": p.price,
        "quantity": p.quantity if p.quantity is not None else 0,
        "active": p.active if p.active is not None else True,
        "image_url": p.image_url,
        "weight": p.weight,
        "brand": p.brand,
        "category_id": p.category_id,
        "created_at": created_at or now,
        "updated_at": now,
    }


def _make_category_dict(c: CategoryIn, category_id: Optional[int] = None,
                        created_at: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "id": category_id if category_id is not None else _next_id("categories"),
        "name": c.name,
        "description": c.description,
        "active": c.active if c.active is not None else True,
        "created_at": created_at or _now(),
    }


def count_products_in(category_id: int) -> int:
    return sum(1 for p in PRODUCTS.values() if p["category_id"] == category_id)


def reset() -> None:
    PRODUCTS.clear()
    CATEGORIES.clear()
    _LOCKS.clear()
    for table in _SEQUENCES:
        _SEQUENCES[table] = 0
