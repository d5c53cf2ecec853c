#!/usr/bin/env python
from decimal import Decimal

from dotenv import load_dotenv
from rich import print

from catalog.schemas import ProductIn
from catalog_sdk.client import CatalogClient
from catalog_sdk.errors import CatalogAPIError


def main():
    load_dotenv()
    c = CatalogClient()

    # -----------------------------
    # Reset everything for demo
    # -----------------------------
    print("Resetting store...")
    print(c.reset())

    # -----------------------------
    # Categories
    # -----------------------------
    print("\nCreating categories...")
    electronics = c.create_category({"name": "Electronics", "description": "Gadgets and devices"})
    books = c.create_category({"name": "Books"})
    print(electronics)
    print(books)

    # -----------------------------
    # Products
    # -----------------------------
    print("\nCreating products...")
    laptop = c.create_product(ProductIn(name="Laptop Pro 14", sku="ELEC-LAP-14", price=Decimal("1299.00"),
                                        quantity=3, brand="Acme", category_id=electronics.id))
    mouse = c.create_product(ProductIn(name="Wireless Mouse", sku="ELEC-MOUSE-1", price=Decimal("10.00"),
                                       quantity=40, brand="Acme", category_id=electronics.id))
    novel = c.create_product(ProductIn(name="The Long Night", sku="BOOK-0001", price=Decimal("10.00"),
                                       quantity=0, category_id=books.id))
    print(laptop)
    print(mouse)
    print(novel)

    # -----------------------------
    # Queries
    # -----------------------------
    print("\nFirst page, two per page, most expensive first...")
    print(c.list_products(page=0, size=2, sort="price,desc"))

    print("\nSearching for 'acme'...")
    print(c.search_products("acme"))

    print("\nProducts priced exactly 10.00...")
    print(c.get_products_by_price_range("10.00", "10.00"))

    print("\nLow stock (threshold 5)...")
    print(c.get_low_stock_products(5))

    print("\nStats...")
    print(c.get_product_stats())

    # -----------------------------
    # Mutations and their errors
    # -----------------------------
    print("\nRestocking the novel...")
    print(c.update_stock(novel.id, 12))

    print("\nDuplicate SKU is rejected...")
    try:
        c.create_product(ProductIn(name="Another Mouse", sku="ELEC-MOUSE-1", price=Decimal("12.00")))
    except CatalogAPIError as e:
        print(f"[red]{type(e).__name__}[/red] {e.code}: {e}")

    print("\nDeleting the mouse (soft delete)...")
    c.delete_product(mouse.id)
    print(c.list_products())
    print(c.get_product(mouse.id))

    print("\nCategory with products cannot be deleted...")
    try:
        c.delete_category(electronics.id)
    except CatalogAPIError as e:
        print(f"[red]{type(e).__name__}[/red] {e.code}: {e}")


if __name__ == "__main__":
    main()
