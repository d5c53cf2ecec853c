import math
from typing import Any, Dict, List, Sequence, Tuple

from .errors import InvalidArgument
from .schemas import Page

# Public sort names (as sent in ?sort=) -> record keys.
PRODUCT_SORT_FIELDS = {
    "id": "id",
    "name": "name",
    "sku": "sku",
    "price": "price",
    "quantity": "quantity",
    "brand": "brand",
    "weight": "weight",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

CATEGORY_SORT_FIELDS = {
    "id": "id",
    "name": "name",
    "createdAt": "created_at",
}


def parse_sort(sort: str, allowed: Dict[str, str]) -> Tuple[str, bool]:
    """Parse ``field`` or ``field,asc|desc`` into ``(record_key, descending)``."""
    field, _, direction = (sort or "").partition(",")
    field = field.strip()
    direction = direction.strip().lower() or "asc"
    if field not in allowed:
        raise InvalidArgument(
            f"Unknown sort property '{field}'",
            field_errors={"sort": f"must be one of: {', '.join(sorted(allowed))}"},
        )
    if direction not in ("asc", "desc"):
        raise InvalidArgument(
            f"Unknown sort direction '{direction}'",
            field_errors={"sort": "direction must be 'asc' or 'desc'"},
        )
    return allowed[field], direction == "desc"


def _key(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def sort_records(records: Sequence[Dict[str, Any]], key: str, descending: bool = False) -> List[Dict[str, Any]]:
    # Records missing the sort value go last in either direction; ties keep id order.
    present = sorted((r for r in records if r.get(key) is not None), key=lambda r: r["id"])
    missing = sorted((r for r in records if r.get(key) is None), key=lambda r: r["id"])
    present.sort(key=lambda r: _key(r[key]), reverse=descending)
    return present + missing


def paginate(items: Sequence[Any], page: int, size: int) -> Page:
    total = len(items)
    total_pages = math.ceil(total / size)
    start = page * size
    return Page(
        content=list(items[start:start + size]),
        total_pages=total_pages,
        total_elements=total,
        size=size,
        number=page,
        first=page == 0,
        last=page + 1 >= total_pages,
    )
