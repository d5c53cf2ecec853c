"""
Demo data loader for the catalog service.

When ``CATALOG_SEED_DEMO_DATA`` is enabled the service calls
``load_sample_catalog()`` at startup so that a freshly started instance has
a few categories and products to browse. Each sample product names its
category by name; the loader resolves that to the id assigned at load time.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from .database import CATEGORIES, PRODUCTS, _make_category_dict, _make_product_dict
from .schemas import CategoryIn, ProductIn

logger = logging.getLogger("catalog-api")

DATA_FILE = Path(__file__).resolve().parent / "data" / "sample_catalog.json"


def load_sample_catalog(path: Path = DATA_FILE) -> Dict[str, int]:
    """Populate an empty store from ``sample_catalog.json``; returns the counts loaded (zeros if it had data)."""
    if PRODUCTS or CATEGORIES:
        logger.info("Store not empty, skipping sample catalog")
        return {"categories": 0, "products": 0}

    with path.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = json.load(f)

    ids_by_name: Dict[str, int] = {}
    for entry in raw.get("categories", []):
        record = _make_category_dict(CategoryIn(**entry))
        CATEGORIES[record["id"]] = record
        ids_by_name[record["name"]] = record["id"]

    count = 0
    for entry in raw.get("products", []):
        entry = dict(entry)
        category = entry.pop("category", None)
        payload = ProductIn(**entry, category_id=ids_by_name.get(category) if category else None)
        record = _make_product_dict(payload)
        PRODUCTS[record["id"]] = record
        count += 1

    logger.info("Loaded sample catalog: %s categories, %s products", len(ids_by_name), count)
    return {"categories": len(ids_by_name), "products": count}
