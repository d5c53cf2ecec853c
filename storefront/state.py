"""
Storefront session state and the reducer that advances it.

The state is an immutable pydantic model. Every user action is turned into a
new state by ``reduce``; actions that need fresh data bump ``issued_seq`` and
set ``loading``. The controller then fetches the page for that sequence number
and feeds the outcome back as ``ProductsLoaded`` or ``LoadFailed``. Outcomes
tagged with an older sequence number are dropped, so a slow response can
never overwrite the result of a later request.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from catalog.errors import InvalidArgument
from catalog.paging import PRODUCT_SORT_FIELDS, parse_sort
from catalog.schemas import Category, Page, Product

DEFAULT_SORT = "name"
PRICE_SORT = "price"


class Mode(str, Enum):
    LIST = "list"
    SEARCH = "search"
    CATEGORY = "category"
    PRICE_RANGE = "price_range"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class StorefrontState(_Frozen):
    mode: Mode = Mode.LIST
    page: int = 0
    size: int = 20
    sort: str = DEFAULT_SORT
    search_text: str = ""
    category_id: Optional[int] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    products: Optional[Page[Product]] = None
    categories: List[Category] = Field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    notice: Optional[str] = None
    issued_seq: int = 0


# ---------------------------
# Actions
# ---------------------------
class SubmitSearch(_Frozen):
    text: str


class ChooseCategory(_Frozen):
    category_id: Optional[int] = None


class ChoosePriceRange(_Frozen):
    min_price: Decimal
    max_price: Decimal


class ClearFilters(_Frozen):
    pass


class ChangeSort(_Frozen):
    sort: str


class ChangePage(_Frozen):
    page: int


class Reload(_Frozen):
    pass


class ProductsLoaded(_Frozen):
    seq: int
    page: Page[Product]


class LoadFailed(_Frozen):
    seq: int
    message: str


class CategoriesLoaded(_Frozen):
    categories: List[Category]


class Notify(_Frozen):
    message: str
    is_error: bool = False


class DismissError(_Frozen):
    pass


Action = Union[
    SubmitSearch, ChooseCategory, ChoosePriceRange, ClearFilters, ChangeSort, ChangePage, Reload,
    ProductsLoaded, LoadFailed, CategoriesLoaded, Notify, DismissError,
]


def _request(state: StorefrontState, **changes) -> StorefrontState:
    changes.update(loading=True, issued_seq=state.issued_seq + 1)
    return state.model_copy(update=changes)


_NO_FILTER = {"search_text": "", "category_id": None, "min_price": None, "max_price": None}


def reduce(state: StorefrontState, action: Action) -> StorefrontState:
    if isinstance(action, SubmitSearch):
        text = action.text.strip()
        mode = Mode.SEARCH if text else Mode.LIST
        return _request(state, **dict(_NO_FILTER, mode=mode, page=0, search_text=text))

    if isinstance(action, ChooseCategory):
        mode = Mode.LIST if action.category_id is None else Mode.CATEGORY
        return _request(state, **dict(_NO_FILTER, mode=mode, page=0, category_id=action.category_id))

    if isinstance(action, ChoosePriceRange):
        return _request(state, **dict(_NO_FILTER, mode=Mode.PRICE_RANGE, page=0, sort=PRICE_SORT,
                                    min_price=action.min_price, max_price=action.max_price))

    if isinstance(action, ClearFilters):
        return _request(state, **dict(_NO_FILTER, mode=Mode.LIST, page=0))

    if isinstance(action, ChangeSort):
        # Unknown sort keys never reach the server; the current sort stays.
        try:
            parse_sort(action.sort, PRODUCT_SORT_FIELDS)
        except InvalidArgument as e:
            return state.model_copy(update={"error": e.detail, "notice": f"Cannot sort: {e.detail}"})
        return _request(state, sort=action.sort)

    if isinstance(action, ChangePage):
        total_pages = state.products.total_pages if state.products else 0
        if not 0 <= action.page < total_pages:
            return state
        return _request(state, page=action.page)

    if isinstance(action, Reload):
        return _request(state)

    if isinstance(action, ProductsLoaded):
        if action.seq != state.issued_seq:
            return state
        return state.model_copy(update={"products": action.page, "loading": False, "error": None})

    if isinstance(action, LoadFailed):
        if action.seq != state.issued_seq:
            return state
        return state.model_copy(update={"loading": False, "error": action.message,
                                        "notice": f"Failed to load products: {action.message}"})

    if isinstance(action, CategoriesLoaded):
        return state.model_copy(update={"categories": list(action.categories)})

    if isinstance(action, Notify):
        update = {"notice": action.message}
        if action.is_error:
            update["error"] = action.message
        return state.model_copy(update=update)

    if isinstance(action, DismissError):
        return state.model_copy(update={"error": None})

    raise TypeError(f"Unknown storefront action: {action!r}")
