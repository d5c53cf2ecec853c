# tests/test_storefront_view.py
from decimal import Decimal

from rich.console import Console

from catalog.schemas import Category, Page, Product
from storefront.state import Mode, StorefrontState
from storefront.view import pagination_bar, render, showing_line, stock_badge


def product(pid, **fields):
    base = {"id": pid, "name": f"Item {pid}", "sku": f"SKU-{pid}", "price": Decimal("10.00")}
    base.update(fields)
    return Product(**base)


def page_of(products, number=0, size=20, total=None):
    total = len(products) if total is None else total
    total_pages = -(-total // size)
    return Page[Product](content=products, total_pages=total_pages, total_elements=total, size=size,
                         number=number, first=number == 0, last=number + 1 >= total_pages)


def screen(state):
    console = Console(record=True, width=160, color_system=None)
    console.print(render(state))
    return console.export_text()


def test_table_columns():
    state = StorefrontState(products=page_of([
        product(1, name="Laptop", brand="Acme", price=Decimal("1299.5"), quantity=3, category_name="Electronics"),
        product(2, name="Gift Card", quantity=100, active=False),
    ]))
    text = screen(state)
    assert "Laptop" in text and "Acme" in text
    assert "$1,299.50" in text
    assert "Electronics" in text
    assert "Uncategorized" in text
    assert "Inactive" in text
    assert "Showing 1 to 2 of 2" in text


def test_stock_badge_colours():
    assert "red" in str(stock_badge(0).style)
    assert "yellow" in str(stock_badge(10).style)
    assert "green" in str(stock_badge(11).style)
    assert stock_badge(7).plain.strip() == "7"


def test_showing_line_for_middle_page():
    page = page_of([product(i) for i in range(21, 41)], number=1, size=20, total=45)
    assert showing_line(page) == "Showing 21 to 40 of 45"
    assert showing_line(page_of([], total=0)) == "Showing 0 to 0 of 0"


def test_prev_and_next_disabled_at_edges():
    only = page_of([product(1)])
    bar = pagination_bar(only)
    assert bar.plain.startswith("« Prev")
    assert bar.spans[0].style == "dim strike"
    assert bar.spans[-1].style == "dim strike"

    middle = page_of([product(1)], number=1, size=1, total=3)
    bar = pagination_bar(middle)
    assert bar.spans[0].style == "bold"
    assert bar.spans[-1].style == "bold"


def test_page_buttons_stop_at_ten():
    page = page_of([product(1)], number=0, size=1, total=15)
    bar = pagination_bar(page).plain
    assert "[10]" in bar
    assert "[11]" not in bar


def test_loading_error_and_notice():
    state = StorefrontState(loading=True, error="Product not found with id: 9", notice="Product deleted successfully")
    text = screen(state)
    assert "Loading products" in text
    assert "Product not found with id: 9" in text
    assert "Product deleted successfully" in text


def test_empty_page_message():
    text = screen(StorefrontState(mode=Mode.SEARCH, search_text="zzz", products=page_of([])))
    assert "No products found" in text
    assert "Search: 'zzz'" in text


def test_filter_description_uses_category_name():
    state = StorefrontState(mode=Mode.CATEGORY, category_id=2, sort="price,desc",
                            categories=[Category(id=2, name="Books")], products=page_of([]))
    assert "Category: Books | sorted by price,desc" in screen(state)


def test_render_is_pure():
    state = StorefrontState(products=page_of([product(1)]))
    assert screen(state) == screen(state)
