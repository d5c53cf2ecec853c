"""
Pydantic schema definitions shared by the catalog service and its SDK.

Every model reads and writes camelCase JSON (``imageUrl``, ``totalPages``)
while exposing snake_case attributes in Python. Prices and weights are
``Decimal`` values serialized as plain JSON numbers so browser clients
receive ``699.99`` rather than ``"699.99"``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_as_number = PlainSerializer(float, return_type=float, when_used="json")

Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2), _as_number]
Weight = Annotated[Decimal, Field(ge=0, max_digits=8, decimal_places=3), _as_number]

SKU_PATTERN = r"^[A-Z0-9-]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------
# Products
# ---------------------------
class ProductIn(CamelModel):
    """Writable product fields, used for create and full update.

    ``id``, ``categoryName`` and the timestamps are server-owned; clients may
    echo them back in a payload but they are ignored.
    """

    name: str = Field(min_length=2, max_length=200)
    sku: str = Field(pattern=SKU_PATTERN)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Money
    quantity: Optional[int] = Field(default=None, ge=0)
    active: Optional[bool] = None
    image_url: Optional[str] = Field(default=None, max_length=500)
    weight: Optional[Weight] = None
    brand: Optional[str] = Field(default=None, max_length=100)
    category_id: Optional[int] = None


class Product(ProductIn):
    id: int
    quantity: int = 0
    active: bool = True
    category_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductStats(CamelModel):
    total_products: int
    total_value: Annotated[Decimal, _as_number]


# ---------------------------
# Categories
# ---------------------------
class CategoryIn(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    active: Optional[bool] = None


class Category(CategoryIn):
    id: int
    active: bool = True
    product_count: int = 0
    created_at: Optional[datetime] = None


# ---------------------------
# Pagination and errors
# ---------------------------
class Page(CamelModel, Generic[T]):
    """One slice of an ordered result set.

    ``total_elements`` and ``total_pages`` describe the whole filtered result,
    not just ``content``. ``number`` is zero-based.
    """

    content: List[T]
    total_pages: int
    total_elements: int
    size: int
    number: int
    first: bool
    last: bool


class ErrorResponse(CamelModel):
    code: str
    message: str
    timestamp: str
    field_errors: Optional[Dict[str, str]] = None
