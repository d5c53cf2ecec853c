# catalog_sdk/client.py
import logging
import os
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import requests
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from catalog.schemas import Category, CategoryIn, Page, Product, ProductIn, ProductStats

from .errors import NetworkError, UnknownServerError, error_from_response

logger = logging.getLogger("catalog-sdk")

DEFAULT_BASE_URL = "http://127.0.0.1:8085"
API_PREFIX = "/api/v1"

ProductPayload = Union[ProductIn, Dict[str, Any]]
CategoryPayload = Union[CategoryIn, Dict[str, Any]]


def _payload(body: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return body


@lru_cache(maxsize=None)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def _paging(page: int, size: int, sort: Optional[str]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"page": page, "size": size}
    if sort:
        params["sort"] = sort
    return params


class CatalogClient:
    """Thin typed client for the catalog REST API.

    One method per endpoint, one HTTP request per call. Errors are raised as
    ``CatalogAPIError`` subclasses and are never retried.

    ``session`` may be any object with a ``requests``-style ``request``
    method, which lets tests hand in FastAPI's ``TestClient``.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: int = 10, session: Optional[Any] = None):
        base_url = base_url or os.getenv("CATALOG_API_BASE_URL") or DEFAULT_BASE_URL
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{API_PREFIX}{path}"
        logger.debug("%s %s params=%s", method, url, kwargs.get("params"))
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not reach catalog API at {self.base_url}: {e}", code="NETWORK_ERROR") from e
        if not 200 <= r.status_code < 300:
            err = error_from_response(r)
            logger.debug("%s %s failed: %s %s", method, url, r.status_code, err.code)
            raise err
        return r

    def _json(self, r) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise UnknownServerError(f"Response from {r.url} is not JSON", status_code=r.status_code,
                                     code="INVALID_RESPONSE") from e

    def _decode(self, r, tp: Any) -> Any:
        body = self._json(r)
        try:
            return _adapter(tp).validate_python(body)
        except SchemaError as e:
            raise UnknownServerError(f"Unexpected response shape from {r.url}: {e.error_count()} invalid field(s)",
                                     status_code=r.status_code, code="INVALID_RESPONSE") from e

    # ---------------------------
    # Products: queries
    # ---------------------------
    def list_products(self, page: int = 0, size: int = 20, sort: str = "name") -> Page[Product]:
        r = self._request("GET", "/products", params=_paging(page, size, sort))
        return self._decode(r, Page[Product])

    def search_products(self, query: str, page: int = 0, size: int = 20, sort: str = "name") -> Page[Product]:
        params = _paging(page, size, sort)
        params["q"] = query
        r = self._request("GET", "/products/search", params=params)
        return self._decode(r, Page[Product])

    def get_products_by_category(self, category_id: int, page: int = 0, size: int = 20,
                                 sort: str = "name") -> Page[Product]:
        r = self._request("GET", f"/products/category/{category_id}", params=_paging(page, size, sort))
        return self._decode(r, Page[Product])

    def get_products_by_price_range(self, min_price: Union[Decimal, float, str], max_price: Union[Decimal, float, str],
                                    page: int = 0, size: int = 20, sort: str = "price") -> Page[Product]:
        params = _paging(page, size, sort)
        params["minPrice"] = str(min_price)
        params["maxPrice"] = str(max_price)
        r = self._request("GET", "/products/price-range", params=params)
        return self._decode(r, Page[Product])

    def get_low_stock_products(self, threshold: int = 10) -> List[Product]:
        r = self._request("GET", "/products/low-stock", params={"threshold": threshold})
        return self._decode(r, List[Product])

    def get_product(self, product_id: int) -> Product:
        r = self._request("GET", f"/products/{product_id}")
        return self._decode(r, Product)

    def get_product_by_sku(self, sku: str) -> Product:
        r = self._request("GET", f"/products/sku/{quote(sku, safe='')}")
        return self._decode(r, Product)

    def get_product_stats(self) -> ProductStats:
        r = self._request("GET", "/products/stats")
        return self._decode(r, ProductStats)

    # ---------------------------
    # Products: mutations
    # ---------------------------
    def create_product(self, product: ProductPayload) -> Product:
        r = self._request("POST", "/products", json=_payload(product))
        return self._decode(r, Product)

    def update_product(self, product_id: int, product: ProductPayload) -> Product:
        r = self._request("PUT", f"/products/{product_id}", json=_payload(product))
        return self._decode(r, Product)

    def update_stock(self, product_id: int, quantity: int) -> Product:
        r = self._request("PATCH", f"/products/{product_id}/stock", params={"quantity": quantity})
        return self._decode(r, Product)

    def delete_product(self, product_id: int) -> None:
        self._request("DELETE", f"/products/{product_id}")

    # ---------------------------
    # Categories
    # ---------------------------
    def list_categories(self, page: int = 0, size: int = 20, sort: str = "name") -> Page[Category]:
        r = self._request("GET", "/categories", params=_paging(page, size, sort))
        return self._decode(r, Page[Category])

    def list_all_categories(self) -> List[Category]:
        r = self._request("GET", "/categories/list")
        return self._decode(r, List[Category])

    def search_categories(self, query: str, page: int = 0, size: int = 20, sort: str = "name") -> Page[Category]:
        params = _paging(page, size, sort)
        params["q"] = query
        r = self._request("GET", "/categories/search", params=params)
        return self._decode(r, Page[Category])

    def get_categories_with_products(self) -> List[Category]:
        r = self._request("GET", "/categories/with-products")
        return self._decode(r, List[Category])

    def get_category(self, category_id: int) -> Category:
        r = self._request("GET", f"/categories/{category_id}")
        return self._decode(r, Category)

    def get_category_by_name(self, name: str) -> Category:
        r = self._request("GET", f"/categories/name/{quote(name, safe='')}")
        return self._decode(r, Category)

    def create_category(self, category: CategoryPayload) -> Category:
        r = self._request("POST", "/categories", json=_payload(category))
        return self._decode(r, Category)

    def update_category(self, category_id: int, category: CategoryPayload) -> Category:
        r = self._request("PUT", f"/categories/{category_id}", json=_payload(category))
        return self._decode(r, Category)

    def delete_category(self, category_id: int) -> None:
        self._request("DELETE", f"/categories/{category_id}")

    # ---------------------------
    # Utility
    # ---------------------------
    def reset(self) -> Dict[str, Any]:
        return self._json(self._request("POST", "/reset"))

    def health(self) -> Dict[str, Any]:
        return self._json(self._request("GET", "/health"))
