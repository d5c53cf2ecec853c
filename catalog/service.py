import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .database import (
    CATEGORIES, PRODUCTS,
    _get_lock, _make_category_dict, _make_product_dict, _now, count_products_in, reset,
)
from .errors import InvalidArgument, InvalidState, NotFound
from .paging import CATEGORY_SORT_FIELDS, PRODUCT_SORT_FIELDS, paginate, parse_sort, sort_records
from .schemas import Category, CategoryIn, Page, Product, ProductIn, ProductStats

# This file contains the core logic behind every catalog endpoint.

logger = logging.getLogger("catalog-api")


# ---------------------------
# Record -> schema helpers
# ---------------------------
def _to_product(record: Dict[str, Any]) -> Product:
    category = CATEGORIES.get(record["category_id"]) if record["category_id"] is not None else None
    return Product(**record, category_name=category["name"] if category else None)


def _to_category(record: Dict[str, Any]) -> Category:
    return Category(**record, product_count=count_products_in(record["id"]))


def _active_products() -> List[Dict[str, Any]]:
    return [p for p in PRODUCTS.values() if p["active"]]


def _product_page(records: List[Dict[str, Any]], page: int, size: int, sort: str) -> Page:
    key, descending = parse_sort(sort, PRODUCT_SORT_FIELDS)
    ordered = sort_records(records, key, descending)
    return paginate([_to_product(r) for r in ordered], page, size)


def _category_page(records: List[Dict[str, Any]], page: int, size: int, sort: str) -> Page:
    key, descending = parse_sort(sort, CATEGORY_SORT_FIELDS)
    ordered = sort_records(records, key, descending)
    return paginate([_to_category(r) for r in ordered], page, size)


def _matches(term: str, *fields: Optional[str]) -> bool:
    return any(term in f.casefold() for f in fields if f)


def _product_record(product_id: int) -> Dict[str, Any]:
    p = PRODUCTS.get(product_id)
    if not p:
        raise NotFound(f"Product not found with id: {product_id}")
    return p


def _category_record(category_id: int) -> Dict[str, Any]:
    c = CATEGORIES.get(category_id)
    if not c:
        raise NotFound(f"Category not found with id: {category_id}")
    return c


def _check_category_ref(category_id: Optional[int]) -> None:
    if category_id is not None and category_id not in CATEGORIES:
        raise InvalidArgument(
            f"Category not found with id: {category_id}",
            field_errors={"categoryId": "must reference an existing category"},
        )


def _check_sku_free(sku: str, exclude_id: Optional[int] = None) -> None:
    if any(p["sku"] == sku and p["id"] != exclude_id for p in PRODUCTS.values()):
        raise InvalidArgument(
            f"Product with SKU {sku} already exists",
            field_errors={"sku": "must be unique"},
        )


def _check_category_name_free(name: str, exclude_id: Optional[int] = None) -> None:
    if any(c["name"] == name and c["id"] != exclude_id for c in CATEGORIES.values()):
        raise InvalidArgument(
            f"Category with name '{name}' already exists",
            field_errors={"name": "must be unique"},
        )


# ---------------------------
# Product queries
# ---------------------------
async def list_products_logic(page: int, size: int, sort: str) -> Page:
    logger.debug("Listing products page=%s size=%s sort=%s", page, size, sort)
    return _product_page(_active_products(), page, size, sort)


async def search_products_logic(q: str, page: int, size: int, sort: str) -> Page:
    term = (q or "").strip().casefold()
    if not term:
        return await list_products_logic(page, size, sort)
    logger.debug("Searching products q=%r page=%s size=%s sort=%s", q, page, size, sort)
    results = [p for p in _active_products() if _matches(term, p["name"], p["description"], p["brand"])]
    return _product_page(results, page, size, sort)


async def products_by_category_logic(category_id: int, page: int, size: int, sort: str) -> Page:
    _category_record(category_id)
    results = [p for p in _active_products() if p["category_id"] == category_id]
    return _product_page(results, page, size, sort)


async def products_by_price_range_logic(min_price: Decimal, max_price: Decimal,
                                        page: int, size: int, sort: str) -> Page:
    if min_price > max_price:
        raise InvalidArgument("Minimum price cannot be greater than maximum price")
    results = [p for p in _active_products() if min_price <= p["price"] <= max_price]
    return _product_page(results, page, size, sort)


async def low_stock_logic(threshold: int) -> List[Product]:
    results = [p for p in _active_products() if p["quantity"] <= threshold]
    results.sort(key=lambda p: (p["quantity"], p["id"]))
    return [_to_product(p) for p in results]


async def get_product_logic(product_id: int) -> Product:
    return _to_product(_product_record(product_id))


async def get_product_by_sku_logic(sku: str) -> Product:
    for p in PRODUCTS.values():
        if p["sku"] == sku:
            return _to_product(p)
    raise NotFound(f"Product not found with SKU: {sku}")


async def product_stats_logic() -> ProductStats:
    active = _active_products()
    total_value = sum((p["price"] * p["quantity"] for p in active), Decimal("0"))
    return ProductStats(total_products=len(active), total_value=total_value)


# ---------------------------
# Product mutations
# ---------------------------
async def create_product_logic(payload: ProductIn) -> Product:
    lock = _get_lock("products")
    await lock.acquire()
    try:
        _check_sku_free(payload.sku)
        _check_category_ref(payload.category_id)
        record = _make_product_dict(payload)
        PRODUCTS[record["id"]] = record
    finally:
        lock.release()
    logger.info("Created product id=%s sku=%s", record["id"], record["sku"])
    return _to_product(record)


async def update_product_logic(product_id: int, payload: ProductIn) -> Product:
    lock = _get_lock("products")
    await lock.acquire()
    try:
        existing = _product_record(product_id)
        _check_sku_free(payload.sku, exclude_id=product_id)
        _check_category_ref(payload.category_id)
        record = _make_product_dict(payload, product_id=product_id, created_at=existing["created_at"])
        PRODUCTS[product_id] = record
    finally:
        lock.release()
    logger.info("Updated product id=%s", product_id)
    return _to_product(record)


async def update_stock_logic(product_id: int, quantity: int) -> Product:
    if quantity < 0:
        raise InvalidArgument("Quantity cannot be negative", field_errors={"quantity": "must be >= 0"})
    p = _product_record(product_id)
    p["quantity"] = quantity
    p["updated_at"] = _now()
    logger.info("Updated stock for product id=%s to quantity=%s", product_id, quantity)
    return _to_product(p)


async def delete_product_logic(product_id: int) -> None:
    p = _product_record(product_id)
    p["active"] = False
    p["updated_at"] = _now()
    logger.info("Soft deleted product id=%s", product_id)


# ---------------------------
# Category queries
# ---------------------------
def _active_categories() -> List[Dict[str, Any]]:
    return [c for c in CATEGORIES.values() if c["active"]]


async def list_categories_logic(page: int, size: int, sort: str) -> Page:
    return _category_page(_active_categories(), page, size, sort)


async def list_all_categories_logic() -> List[Category]:
    return [_to_category(c) for c in sort_records(_active_categories(), "name")]


async def get_category_logic(category_id: int) -> Category:
    return _to_category(_category_record(category_id))


async def get_category_by_name_logic(name: str) -> Category:
    for c in CATEGORIES.values():
        if c["name"] == name:
            return _to_category(c)
    raise NotFound(f"Category not found with name: {name}")


async def search_categories_logic(q: str, page: int, size: int, sort: str) -> Page:
    term = (q or "").strip().casefold()
    if not term:
        return await list_categories_logic(page, size, sort)
    results = [c for c in _active_categories() if _matches(term, c["name"], c["description"])]
    return _category_page(results, page, size, sort)


async def categories_with_products_logic() -> List[Category]:
    results = [c for c in _active_categories() if count_products_in(c["id"]) > 0]
    return [_to_category(c) for c in sort_records(results, "name")]


# ---------------------------
# Category mutations
# ---------------------------
async def create_category_logic(payload: CategoryIn) -> Category:
    lock = _get_lock("categories")
    await lock.acquire()
    try:
        _check_category_name_free(payload.name)
        record = _make_category_dict(payload)
        CATEGORIES[record["id"]] = record
    finally:
        lock.release()
    logger.info("Created category id=%s name=%s", record["id"], record["name"])
    return _to_category(record)


async def update_category_logic(category_id: int, payload: CategoryIn) -> Category:
    lock = _get_lock("categories")
    await lock.acquire()
    try:
        existing = _category_record(category_id)
        _check_category_name_free(payload.name, exclude_id=category_id)
        existing["name"] = payload.name
        existing["description"] = payload.description
        if payload.active is not None:
            existing["active"] = payload.active
    finally:
        lock.release()
    logger.info("Updated category id=%s", category_id)
    return _to_category(existing)


async def delete_category_logic(category_id: int) -> None:
    lock = _get_lock("categories")
    await lock.acquire()
    try:
        _category_record(category_id)
        if count_products_in(category_id) > 0:
            raise InvalidState("Cannot delete category with existing products. Remove products first.")
        del CATEGORIES[category_id]
    finally:
        lock.release()
    logger.info("Deleted category id=%s", category_id)


# Utility: reset (for tests/demo)
async def reset_all_logic() -> Dict[str, str]:
    reset()
    logger.info("Catalog store reset")
    return {"status": "reset"}
