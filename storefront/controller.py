import logging
from typing import Union

from catalog.schemas import Page, Product, ProductIn
from catalog_sdk.client import CatalogClient
from catalog_sdk.errors import CatalogAPIError

from .state import (
    Action, CategoriesLoaded, LoadFailed, Mode, Notify, ProductsLoaded, Reload, StorefrontState, reduce,
)

logger = logging.getLogger("storefront")


def fetch_page(client: CatalogClient, state: StorefrontState) -> Page[Product]:
    """Issue the single query that ``state`` describes."""
    paging = {"page": state.page, "size": state.size, "sort": state.sort}
    if state.mode == Mode.SEARCH:
        return client.search_products(state.search_text, **paging)
    if state.mode == Mode.CATEGORY:
        return client.get_products_by_category(state.category_id, **paging)
    if state.mode == Mode.PRICE_RANGE:
        return client.get_products_by_price_range(state.min_price, state.max_price, **paging)
    return client.list_products(**paging)


def load_products(client: CatalogClient, state: StorefrontState) -> Union[ProductsLoaded, LoadFailed]:
    seq = state.issued_seq
    try:
        page = fetch_page(client, state)
    except CatalogAPIError as e:
        logger.warning("Loading products failed (seq=%s): %s", seq, e)
        return LoadFailed(seq=seq, message=str(e))
    return ProductsLoaded(seq=seq, page=page)


def dispatch(client: CatalogClient, state: StorefrontState, action: Action) -> StorefrontState:
    new_state = reduce(state, action)
    if new_state.issued_seq == state.issued_seq:
        return new_state
    return reduce(new_state, load_products(client, new_state))


def load_categories(client: CatalogClient, state: StorefrontState) -> StorefrontState:
    try:
        categories = client.list_all_categories()
    except CatalogAPIError as e:
        return reduce(state, Notify(message=f"Failed to load categories: {e}", is_error=True))
    return reduce(state, CategoriesLoaded(categories=categories))


# ---------------------------
# Mutations followed by a reload of the current view
# ---------------------------
def delete_product(client: CatalogClient, state: StorefrontState, product_id: int) -> StorefrontState:
    try:
        client.delete_product(product_id)
    except CatalogAPIError as e:
        return reduce(state, Notify(message=f"Failed to delete product: {e}", is_error=True))
    state = dispatch(client, state, Reload())
    return reduce(state, Notify(message="Product deleted successfully"))


def update_stock(client: CatalogClient, state: StorefrontState, product_id: int, quantity: int) -> StorefrontState:
    try:
        product = client.update_stock(product_id, quantity)
    except CatalogAPIError as e:
        return reduce(state, Notify(message=f"Failed to update stock: {e}", is_error=True))
    state = dispatch(client, state, Reload())
    return reduce(state, Notify(message=f"Stock for {product.sku} set to {product.quantity}"))


def create_product(client: CatalogClient, state: StorefrontState, product: ProductIn) -> StorefrontState:
    try:
        created = client.create_product(product)
    except CatalogAPIError as e:
        return reduce(state, Notify(message=f"Failed to create product: {e}", is_error=True))
    state = dispatch(client, state, Reload())
    return reduce(state, Notify(message=f"Product '{created.name}' created with id {created.id}"))
