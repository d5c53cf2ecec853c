# cli.py
"""Terminal storefront for the catalog API.

Run without arguments for the interactive menu, or with a subcommand
(``python cli.py list-products --size 5``) to print one JSON response.
"""
import argparse
import json
import logging
import os
import sys
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, List, Optional

from dotenv import load_dotenv
from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle
from pydantic import BaseModel
from pydantic import ValidationError as InputError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from catalog.paging import PRODUCT_SORT_FIELDS
from catalog.schemas import Category, Product, ProductIn
from catalog_sdk.client import CatalogClient
from catalog_sdk.errors import CatalogAPIError
from storefront import controller
from storefront.state import (
    ChangePage, ChangeSort, ChooseCategory, ChoosePriceRange, ClearFilters, DismissError, Notify, Reload,
    StorefrontState, SubmitSearch, reduce,
)
from storefront.view import format_price, products_table, render

console = Console()

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})

SORT_CHOICES = [f"{field}{suffix}" for field in PRODUCT_SORT_FIELDS for suffix in ("", ",desc")]


# ---------------------------
# Display helpers
# ---------------------------
def show_categories(categories: List[Category]):
    if not categories:
        console.print("[italic yellow]No categories found[/italic yellow]")
        return
    table = Table(title="🏷️ Categories", box=box.ROUNDED, header_style="bold cyan", title_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Products", justify="right")
    for cat in categories:
        table.add_row(str(cat.id), cat.name, cat.description or "", str(cat.product_count))
    console.print(table)


def show_product_details(p: Product):
    lines = [
        f"[bold]{p.name}[/bold]  [dim]{p.sku}[/dim]",
        f"Brand: {p.brand or '-'}    Category: {p.category_name or 'Uncategorized'}",
        f"Price: [green]{format_price(p.price)}[/green]    Stock: {p.quantity}    Weight: {p.weight or '-'}",
        f"Status: {'[green]Active[/green]' if p.active else '[dim]Inactive[/dim]'}",
    ]
    if p.description:
        lines.append(f"\n{p.description}")
    console.print(Panel("\n".join(lines), title=f"ℹ️ Product #{p.id}", border_style="cyan"))


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Catalog Storefront",
        "[bold blue]Product catalog browser[/bold blue]",
        f"[dim]{now}[/dim]",
    )
    return Panel(header, style="bold blue")


def with_spinner(fn: Callable, *args, **kwargs):
    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), transient=True) as progress:
        progress.add_task(description="Processing...", total=None)
        return fn(*args, **kwargs)


def try_api(state: StorefrontState, fn: Callable, *args):
    """Call a read-only SDK method; failures are recorded on the state."""
    try:
        return state, with_spinner(fn, *args)
    except CatalogAPIError as e:
        return reduce(state, Notify(message=str(e), is_error=True)), None


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_decimal(message: str, default: str = "0.00") -> Decimal:
    while True:
        raw = Prompt.ask(message, default=default)
        try:
            return Decimal(raw)
        except InvalidOperation:
            console.print("[red]Please enter a valid number.[/red]")


def ask_optional(message: str) -> Optional[str]:
    value = Prompt.ask(message, default="").strip()
    return value or None


def choose_category(state: StorefrontState, message: str) -> Optional[int]:
    names = {c.name: c.id for c in state.categories}
    raw = prompt_with_autocomplete(message, completer=WordCompleter(list(names), ignore_case=True, sentence=True))
    raw = raw.strip()
    if not raw:
        return None
    if raw in names:
        return names[raw]
    if raw.isdigit():
        return int(raw)
    console.print(f"[red]Unknown category '{raw}'[/red]")
    return None


def ask_product(state: StorefrontState) -> Optional[ProductIn]:
    name = Prompt.ask("Product name")
    sku = Prompt.ask("SKU (A-Z, 0-9, -)").strip().upper()
    price = ask_decimal("💰 Price", default="10.00")
    qty = IntPrompt.ask("📦 Quantity", default=0)
    brand = ask_optional("Brand (optional)")
    description = ask_optional("Description (optional)")
    category_id = choose_category(state, "🏷️ Category (optional, Tab to complete)")
    try:
        return ProductIn(name=name, sku=sku, price=price, quantity=qty, brand=brand,
                         description=description, category_id=category_id)
    except ValueError as e:
        console.print(Panel.fit(f"[red]{e}[/red]", title="Invalid product"))
        return None


# ---------------------------
# Main menu
# ---------------------------
MENU_OPTIONS = [
    ("1", "📦 Show products", "10", "ℹ️ Product details"),
    ("2", "🔍 Search products", "11", "➕ Create product"),
    ("3", "🏷️ Filter by category", "12", "📦 Update stock"),
    ("4", "💲 Filter by price", "13", "🗑️ Delete product"),
    ("5", "🧹 Clear filters", "14", "⚠️ Low stock report"),
    ("6", "↕️ Change sort", "15", "📊 Catalog stats"),
    ("7", "➡️ Next page", "16", "🏷️ Categories"),
    ("8", "⬅️ Previous page", "17", "➕ Create category"),
    ("9", "🔢 Go to page", "18", "🗑️ Delete category"),
    ("x", "Dismiss error", "r", "🔄 Reset store"),
    ("", "", "q", "👋 Quit"),
]


def menu(client: CatalogClient):
    console.clear()
    console.print(create_header())

    state = StorefrontState()
    state = with_spinner(controller.load_categories, client, state)
    state = with_spinner(controller.dispatch, client, state, Reload())

    while True:
        console.print(render(state))
        state = state.model_copy(update={"notice": None})

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        for row in MENU_OPTIONS:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 19)] + ["x", "r", "q", "quit", "exit"]),
        ).strip().lower()

        if choice == "1":
            state = with_spinner(controller.dispatch, client, state, Reload())

        elif choice == "2":
            term = prompt_with_autocomplete("Enter search term")
            state = with_spinner(controller.dispatch, client, state, SubmitSearch(text=term))

        elif choice == "3":
            state = with_spinner(controller.load_categories, client, state)
            category_id = choose_category(state, "Category (blank for all, Tab to complete)")
            state = with_spinner(controller.dispatch, client, state, ChooseCategory(category_id=category_id))

        elif choice == "4":
            low = ask_decimal("Minimum price", default="0.00")
            high = ask_decimal("Maximum price", default="100.00")
            state = with_spinner(controller.dispatch, client, state, ChoosePriceRange(min_price=low, max_price=high))

        elif choice == "5":
            state = with_spinner(controller.dispatch, client, state, ClearFilters())

        elif choice == "6":
            sort = prompt_with_autocomplete("Sort by (e.g. price,desc)",
                                            completer=WordCompleter(SORT_CHOICES), default=state.sort)
            state = with_spinner(controller.dispatch, client, state, ChangeSort(sort=sort.strip()))

        elif choice in ("7", "8", "9"):
            if choice == "7":
                target = state.page + 1
            elif choice == "8":
                target = state.page - 1
            else:
                target = IntPrompt.ask("Page number", default=state.page + 1) - 1
            new_state = with_spinner(controller.dispatch, client, state, ChangePage(page=target))
            if new_state is state:
                console.print("[yellow]No such page[/yellow]")
            state = new_state

        elif choice == "10":
            ref = prompt_with_autocomplete("Product ID or SKU").strip()
            fn = client.get_product if ref.isdigit() else client.get_product_by_sku
            state, product = try_api(state, fn, int(ref) if ref.isdigit() else ref.upper())
            if product:
                show_product_details(product)

        elif choice == "11":
            state = with_spinner(controller.load_categories, client, state)
            payload = ask_product(state)
            if payload is not None:
                state = with_spinner(controller.create_product, client, state, payload)

        elif choice == "12":
            pid = IntPrompt.ask("Product ID")
            qty = IntPrompt.ask("New quantity")
            state = with_spinner(controller.update_stock, client, state, pid, qty)

        elif choice == "13":
            pid = IntPrompt.ask("Product ID")
            if Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                state = with_spinner(controller.delete_product, client, state, pid)

        elif choice == "14":
            threshold = IntPrompt.ask("Threshold", default=10)
            state, products = try_api(state, client.get_low_stock_products, threshold)
            if products is not None:
                if products:
                    console.print(products_table(products))
                else:
                    console.print("[green]Nothing is running low[/green]")

        elif choice == "15":
            state, stats = try_api(state, client.get_product_stats)
            if stats:
                console.print(Panel.fit(
                    f"Active products: [bold]{stats.total_products}[/bold]\n"
                    f"Inventory value: [bold green]{format_price(stats.total_value)}[/bold green]",
                    title="📊 Catalog stats",
                ))

        elif choice == "16":
            state = with_spinner(controller.load_categories, client, state)
            show_categories(state.categories)

        elif choice == "17":
            name = Prompt.ask("Category name")
            description = ask_optional("Description (optional)")
            state, created = try_api(state, client.create_category, {"name": name, "description": description})
            if created:
                state = reduce(state, Notify(message=f"Category '{created.name}' created with id {created.id}"))
                state = with_spinner(controller.load_categories, client, state)

        elif choice == "18":
            state = with_spinner(controller.load_categories, client, state)
            category_id = choose_category(state, "Category to delete (Tab to complete)")
            if category_id is not None and Confirm.ask(f"[red]Delete category {category_id}?[/red]"):
                new_state, _ = try_api(state, client.delete_category, category_id)
                failed, state = new_state is not state, new_state
                if not failed:
                    state = reduce(state, Notify(message=f"Category {category_id} deleted"))
                    state = with_spinner(controller.load_categories, client, state)

        elif choice == "x":
            state = reduce(state, DismissError())

        elif choice == "r":
            if Confirm.ask("[red]This will clear all data. Continue?[/red]"):
                state, resp = try_api(state, client.reset)
                if resp is not None:
                    state = reduce(state, Notify(message="Store reset successfully"))
                    state = with_spinner(controller.load_categories, client, state)
                    state = with_spinner(controller.dispatch, client, state, ClearFilters())

        elif choice in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thanks for browsing! 👋[/bold green]", title="Goodbye"))
                return

        console.print()
        console.rule(style="dim")


# ---------------------------
# One-shot subcommands
# ---------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Catalog API command line")
    parser.add_argument("--base-url", help="API base URL (default: $CATALOG_API_BASE_URL)")
    subparsers = parser.add_subparsers(dest="command")

    def paged(sp):
        sp.add_argument("--page", type=int, default=0)
        sp.add_argument("--size", type=int, default=20)
        sp.add_argument("--sort", default=None, help="field or field,desc")
        return sp

    paged(subparsers.add_parser("list-products", help="List active products"))
    sp = paged(subparsers.add_parser("search", help="Search products by name, description or brand"))
    sp.add_argument("query")
    bc = paged(subparsers.add_parser("by-category", help="List products in a category"))
    bc.add_argument("category_id", type=int)
    pr = paged(subparsers.add_parser("price-range", help="List products within a price range"))
    pr.add_argument("--min", dest="min_price", type=Decimal, required=True)
    pr.add_argument("--max", dest="max_price", type=Decimal, required=True)
    ls = subparsers.add_parser("low-stock", help="Active products at or below a stock threshold")
    ls.add_argument("--threshold", type=int, default=10)
    gp = subparsers.add_parser("get-product", help="Fetch one product by id or SKU")
    ref = gp.add_mutually_exclusive_group(required=True)
    ref.add_argument("--id", type=int)
    ref.add_argument("--sku")
    subparsers.add_parser("stats", help="Product count and inventory value")

    cp = subparsers.add_parser("create-product", help="Create a product")
    cp.add_argument("--name", required=True)
    cp.add_argument("--sku", required=True)
    cp.add_argument("--price", type=Decimal, required=True)
    cp.add_argument("--quantity", type=int, default=0)
    cp.add_argument("--brand")
    cp.add_argument("--description")
    cp.add_argument("--category-id", type=int)
    us = subparsers.add_parser("update-stock", help="Set a product's stock quantity")
    us.add_argument("id", type=int)
    us.add_argument("quantity", type=int)
    dp = subparsers.add_parser("delete-product", help="Soft delete a product")
    dp.add_argument("id", type=int)

    paged(subparsers.add_parser("list-categories", help="List categories"))
    cc = subparsers.add_parser("create-category", help="Create a category")
    cc.add_argument("--name", required=True)
    cc.add_argument("--description")
    dc = subparsers.add_parser("delete-category", help="Delete an empty category")
    dc.add_argument("id", type=int)
    subparsers.add_parser("reset", help="Clear all data (when the server allows it)")
    return parser


def _sorted(args, default: str) -> dict:
    return {"page": args.page, "size": args.size, "sort": args.sort or default}


def run_command(client: CatalogClient, args: argparse.Namespace) -> Any:
    cmd = args.command
    if cmd == "list-products":
        return client.list_products(**_sorted(args, "name"))
    if cmd == "search":
        return client.search_products(args.query, **_sorted(args, "name"))
    if cmd == "by-category":
        return client.get_products_by_category(args.category_id, **_sorted(args, "name"))
    if cmd == "price-range":
        return client.get_products_by_price_range(args.min_price, args.max_price, **_sorted(args, "price"))
    if cmd == "low-stock":
        return client.get_low_stock_products(args.threshold)
    if cmd == "get-product":
        return client.get_product(args.id) if args.id is not None else client.get_product_by_sku(args.sku)
    if cmd == "stats":
        return client.get_product_stats()
    if cmd == "create-product":
        return client.create_product(ProductIn(
            name=args.name, sku=args.sku, price=args.price, quantity=args.quantity,
            brand=args.brand, description=args.description, category_id=args.category_id,
        ))
    if cmd == "update-stock":
        return client.update_stock(args.id, args.quantity)
    if cmd == "delete-product":
        client.delete_product(args.id)
        return {"deleted": args.id}
    if cmd == "list-categories":
        return client.list_categories(**_sorted(args, "name"))
    if cmd == "create-category":
        return client.create_category({"name": args.name, "description": args.description})
    if cmd == "delete-category":
        client.delete_category(args.id)
        return {"deleted": args.id}
    if cmd == "reset":
        return client.reset()
    raise ValueError(f"Unknown command: {cmd}")


def to_json(result: Any) -> str:
    if isinstance(result, BaseModel):
        return result.model_dump_json(by_alias=True)
    if isinstance(result, list):
        return json.dumps([r.model_dump(mode="json", by_alias=True) if isinstance(r, BaseModel) else r
                           for r in result])
    return json.dumps(result)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("CATALOG_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    args = build_parser().parse_args(argv)
    client = CatalogClient(base_url=args.base_url)

    if args.command is None:
        try:
            menu(client)
        except KeyboardInterrupt:
            console.print("\n\n[bold red]Interrupted by user[/bold red]")
            return 1
        return 0

    try:
        result = run_command(client, args)
    except CatalogAPIError as e:
        console.print_json(json.dumps({
            "status": e.status_code, "code": e.code, "message": e.message,
            "timestamp": e.timestamp, "fieldErrors": e.field_errors or None,
        }))
        return 1
    except InputError as e:
        console.print_json(json.dumps({
            "status": None, "code": "VALIDATION_FAILED", "message": "Validation failed for one or more fields",
            "timestamp": None,
            "fieldErrors": {".".join(str(p) for p in err["loc"]): err["msg"] for err in e.errors()},
        }))
        return 1
    console.print_json(to_json(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
