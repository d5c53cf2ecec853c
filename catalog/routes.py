from decimal import Decimal
from typing import Annotated, List

from fastapi import APIRouter, Query, Response

from . import service
from .config import DEFAULT_LOW_STOCK_THRESHOLD, DEFAULT_PAGE_SIZE, ENABLE_RESET, MAX_PAGE_SIZE
from .errors import NotFound
from .schemas import Category, CategoryIn, Page, Product, ProductIn, ProductStats

products = APIRouter(prefix="/products", tags=["products"])
categories = APIRouter(prefix="/categories", tags=["categories"])
utility = APIRouter(tags=["utility"])

PageParam = Annotated[int, Query(ge=0, description="Zero-based page index")]
SizeParam = Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE, description="Page size")]


def _sort(default: str):
    return Query(default, description="Sort property, optionally suffixed with ',asc' or ',desc'")


# ---------------------------
# Product endpoints
# ---------------------------
# Fixed paths are declared before /{product_id} so they are not captured by it.
@products.get("", response_model=Page[Product])
async def list_products(page: PageParam = 0, size: SizeParam = DEFAULT_PAGE_SIZE, sort: str = _sort("name")):
    return await service.list_products_logic(page, size, sort)


@products.get("/search", response_model=Page[Product])
async def search_products(q: str = Query("", description="Matched against name, description and brand"),
                          page: PageParam = 0, size: SizeParam = DEFAULT_PAGE_SIZE, sort: str = _sort("name")):
    return await service.search_products_logic(q, page, size, sort)


@products.get("/price-range", response_model=Page[Product])
async def products_by_price_range(min_price: Decimal = Query(..., alias="minPrice", ge=0),
                                  max_price: Decimal = Query(..., alias="maxPrice", ge=0),
                                  page: PageParam = 0, size: SizeParam = DEFAULT_PAGE_SIZE, sort: str = _sort("price")):
    return await service.products_by_price_range_logic(min_price, max_price, page, size, sort)


@products.get("/low-stock", response_model=List[Product])
async def low_stock_products(threshold: int = Query(DEFAULT_LOW_STOCK_THRESHOLD, ge=1)):
    return await service.low_stock_logic(threshold)


@products.get("/stats", response_model=ProductStats)
async def product_stats():
    return await service.product_stats_logic()


@products.get("/sku/{sku}", response_model=Product)
async def get_product_by_sku(sku: str):
    return await service.get_product_by_sku_logic(sku)


@products.get("/category/{category_id}", response_model=Page[Product])
async def products_by_category(category_id: int, page: PageParam = 0, size: SizeParam = DEFAULT_PAGE_SIZE,
                               sort: str = _sort("name")):
    return await service.products_by_category_logic(category_id, page, size, sort)


@products.get("/{product_id}", response_model=Product)
async def get_product(product_id: int):
    return await service.get_product_logic(product_id)


@products.post("", response_model=Product, status_code=201)
async def create_product(payload: ProductIn):
    return await service.create_product_logic(payload)


@products.put("/{product_id}", response_model=Product)
async def update_product(product_id: int, payload: ProductIn):
    return await service.update_product_logic(product_id, payload)


@products.patch("/{product_id}/stock", response_model=Product)
async def update_stock(product_id: int, quantity: int = Query(..., ge=0)):
    return await service.update_stock_logic(product_id, quantity)


@products.delete("/{product_id}", status_code=204)
async def delete_product(product_id: int):
    await service.delete_product_logic(product_id)
    return Response(status_code=204)


# ---------------------------
# Category endpoints
# ---------------------------
@categories.get("", response_model=Page[Category])
async def list_categories(page: PageParam = 0, size: SizeParam = DEFAULT_PAGE_SIZE, sort: str = _sort("name")):
    return await service.list_categories_logic(page, size, sort)


@categories.get("/list", response_model=List[Category])
async def list_all_categories():
    return await service.list_all_categories_logic()


@categories.get("/search", response_model=Page[Category])
async def search_categories(q: str = Query("", description="Matched against name and description"),
                            page: PageParam = 0, size: SizeParam = DEFAULT_PAGE_SIZE, sort: str = _sort("name")):
    return await service.search_categories_logic(q, page, size, sort)


@categories.get("/with-products", response_model=List[Category])
async def categories_with_products():
    return await service.categories_with_products_logic()


@categories.get("/name/{name}", response_model=Category)
async def get_category_by_name(name: str):
    return await service.get_category_by_name_logic(name)


@categories.get("/{category_id}", response_model=Category)
async def get_category(category_id: int):
    return await service.get_category_logic(category_id)


@categories.post("", response_model=Category, status_code=201)
async def create_category(payload: CategoryIn):
    return await service.create_category_logic(payload)


@categories.put("/{category_id}", response_model=Category)
async def update_category(category_id: int, payload: CategoryIn):
    return await service.update_category_logic(category_id, payload)


@categories.delete("/{category_id}", status_code=204)
async def delete_category(category_id: int):
    await service.delete_category_logic(category_id)
    return Response(status_code=204)


# ---------------------------
# Utility: reset (for tests/demo)
# ---------------------------
@utility.post("/reset")
async def reset_all():
    if not ENABLE_RESET:
        raise NotFound("Not Found")
    return await service.reset_all_logic()


@utility.get("/health")
async def health_check():
    return {"status": "ok"}
