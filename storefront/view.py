# storefront/view.py
from typing import List, Optional

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from catalog.schemas import Page, Product

from .state import Mode, StorefrontState

# Page buttons beyond this are not offered; the API itself has no such limit.
MAX_PAGE_BUTTONS = 10
LOW_STOCK_LEVEL = 10


def stock_badge(quantity: int) -> Text:
    if quantity == 0:
        style = "bold white on red"
    elif quantity <= LOW_STOCK_LEVEL:
        style = "black on yellow"
    else:
        style = "black on green"
    return Text(f" {quantity} ", style=style)


def format_price(price) -> str:
    return f"${price:,.2f}"


def describe_filter(state: StorefrontState) -> str:
    if state.mode == Mode.SEARCH:
        label = f"Search: '{state.search_text}'"
    elif state.mode == Mode.CATEGORY:
        name = next((c.name for c in state.categories if c.id == state.category_id), f"#{state.category_id}")
        label = f"Category: {name}"
    elif state.mode == Mode.PRICE_RANGE:
        label = f"Price: {format_price(state.min_price)} to {format_price(state.max_price)}"
    else:
        label = "All products"
    return f"{label} | sorted by {state.sort}"


def products_table(products: List[Product]) -> Table:
    table = Table(
        title="📦 Products Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
    )
    table.add_column("ID", style="dim", justify="right")
    table.add_column("SKU", style="cyan")
    table.add_column("Product")
    table.add_column("Category")
    table.add_column("Price", justify="right")
    table.add_column("Stock", justify="center")
    table.add_column("Status")

    for p in products:
        name = Text(p.name, style="bold")
        if p.brand:
            name.append(f"\n{p.brand}", style="dim")
        category = Text(p.category_name) if p.category_name else Text("Uncategorized", style="italic dim")
        status = Text("Active", style="green") if p.active else Text("Inactive", style="dim")
        table.add_row(str(p.id), Text(p.sku), name, category, format_price(p.price), stock_badge(p.quantity), status)
    return table


def showing_line(page: Page[Product]) -> str:
    start = page.number * page.size
    if not page.content:
        return f"Showing 0 to 0 of {page.total_elements}"
    return f"Showing {start + 1} to {start + len(page.content)} of {page.total_elements}"


def pagination_bar(page: Page[Product]) -> Text:
    bar = Text()
    bar.append("« Prev", style="dim strike" if page.first else "bold")
    for i in range(min(page.total_pages, MAX_PAGE_BUTTONS)):
        style = "bold reverse" if i == page.number else ""
        bar.append(f" [{i + 1}] ", style=style)
    bar.append("Next »", style="dim strike" if page.last else "bold")
    return bar


def render(state: StorefrontState) -> RenderableType:
    """Build the whole storefront screen from ``state`` alone."""
    parts: List[RenderableType] = [Text(describe_filter(state), style="bold blue")]

    if state.loading:
        parts.append(Text("⏳ Loading products...", style="italic cyan"))
    if state.error:
        parts.append(Panel(Text(state.error, style="red"), title="❌ Error",
                           subtitle="[dim]x to dismiss[/dim]", border_style="red"))
    if state.notice:
        parts.append(Panel.fit(Text(state.notice), title="Status", border_style="green"))

    page: Optional[Page[Product]] = state.products
    if page is not None:
        if page.content:
            parts.append(products_table(page.content))
        else:
            parts.append(Text("No products found", style="italic yellow"))
        parts.append(Text(showing_line(page), style="dim"))
        parts.append(pagination_bar(page))
    return Group(*parts)
