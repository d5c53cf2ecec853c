# tests/test_product_queries.py
import math

import pytest

API = "/api/v1"


def _names(page):
    return [p["name"] for p in page["content"]]


def test_empty_store_returns_empty_first_and_last_page(client):
    page = client.get(f"{API}/products").json()
    assert page["content"] == []
    assert page["totalElements"] == 0
    assert page["totalPages"] == 0
    assert page["number"] == 0
    assert page["size"] == 20
    assert page["first"] is True
    assert page["last"] is True


def test_page_metadata_for_45_products(client, make_product):
    for _ in range(45):
        make_product()

    sizes = []
    for number in range(3):
        page = client.get(f"{API}/products", params={"page": number, "size": 20, "sort": "id"}).json()
        assert page["totalElements"] == 45
        assert page["totalPages"] == math.ceil(45 / 20) == 3
        assert page["number"] == number
        assert page["first"] == (number == 0)
        assert page["last"] == (number == 2)
        assert len(page["content"]) <= page["size"]
        sizes.append(len(page["content"]))
    assert sizes == [20, 20, 5]


def test_page_beyond_last_is_empty(client, make_product):
    for _ in range(3):
        make_product()
    page = client.get(f"{API}/products", params={"page": 5, "size": 2}).json()
    assert page["content"] == []
    assert page["number"] == 5
    assert page["totalPages"] == 2
    assert page["first"] is False
    assert page["last"] is True


@pytest.mark.parametrize("params", [{"page": -1}, {"size": 0}, {"size": 2001}])
def test_invalid_paging_is_rejected(client, params):
    r = client.get(f"{API}/products", params=params)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_FAILED"


def test_default_sort_is_name_case_insensitive(client, make_product):
    make_product(name="cherry")
    make_product(name="Banana")
    make_product(name="apple")
    assert _names(client.get(f"{API}/products").json()) == ["apple", "Banana", "cherry"]


def test_sort_direction_and_ties_by_id(client, make_product):
    a = make_product(name="Aa", price=5.0)
    b = make_product(name="Bb", price=20.0)
    c = make_product(name="Cc", price=5.0)
    asc = client.get(f"{API}/products", params={"sort": "price"}).json()
    assert [p["id"] for p in asc["content"]] == [a["id"], c["id"], b["id"]]
    desc = client.get(f"{API}/products", params={"sort": "price,DESC"}).json()
    assert [p["id"] for p in desc["content"]] == [b["id"], a["id"], c["id"]]


def test_missing_sort_values_go_last(client, make_product):
    make_product(name="No brand")
    make_product(name="Zed", brand="Zeta")
    make_product(name="Alf", brand="alpha")
    asc = _names(client.get(f"{API}/products", params={"sort": "brand"}).json())
    desc = _names(client.get(f"{API}/products", params={"sort": "brand,desc"}).json())
    assert asc == ["Alf", "Zed", "No brand"]
    assert desc == ["Zed", "Alf", "No brand"]


def test_unknown_sort_field_is_rejected(client, make_product):
    make_product()
    r = client.get(f"{API}/products", params={"sort": "color"})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "INVALID_ARGUMENT"
    assert "sort" in body["fieldErrors"]

    r = client.get(f"{API}/products", params={"sort": "name,sideways"})
    assert r.status_code == 400


def test_changing_sort_keeps_the_same_filtered_set(client, make_product):
    for i, price in enumerate([30.0, 10.0, 20.0, 40.0]):
        make_product(name=f"Mug {i}", price=price)
    make_product(name="Plate", price=15.0)

    by_name = client.get(f"{API}/products/search", params={"q": "mug", "sort": "name"}).json()
    by_price = client.get(f"{API}/products/search", params={"q": "mug", "sort": "price,desc"}).json()
    assert by_name["totalElements"] == by_price["totalElements"] == 4
    assert sorted(_names(by_name)) == sorted(_names(by_price))
    assert [p["price"] for p in by_price["content"]] == [40.0, 30.0, 20.0, 10.0]


def test_search_matches_name_description_and_brand(client, make_product):
    make_product(name="Red Kettle")
    make_product(name="Toaster", description="Fits a KETTLE-sized loaf")
    make_product(name="Blender", brand="KettleWorks")
    make_product(name="Lamp")
    page = client.get(f"{API}/products/search", params={"q": "kettle"}).json()
    assert sorted(_names(page)) == ["Blender", "Red Kettle", "Toaster"]
    assert page["totalElements"] == 3


@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_search_equals_list(client, make_product, blank):
    for _ in range(5):
        make_product()
    params = {"page": 1, "size": 2, "sort": "price,desc"}
    listed = client.get(f"{API}/products", params=params).json()
    searched = client.get(f"{API}/products/search", params={**params, "q": blank}).json()
    assert searched == listed


def test_products_by_category(client, make_category, make_product):
    books = make_category("Books")
    toys = make_category("Toys")
    make_product(name="Novel", category_id=books["id"])
    make_product(name="Atlas", category_id=books["id"])
    make_product(name="Yo-yo", category_id=toys["id"])
    page = client.get(f"{API}/products/category/{books['id']}").json()
    assert _names(page) == ["Atlas", "Novel"]
    assert all(p["categoryName"] == "Books" for p in page["content"])


def test_products_by_unknown_category_is_not_found(client):
    r = client.get(f"{API}/products/category/999")
    assert r.status_code == 404
    assert r.json()["code"] == "ENTITY_NOT_FOUND"


def test_price_range_is_inclusive(client, make_product):
    make_product(name="Cheap", price=9.99)
    make_product(name="Ten A", price=10.00)
    make_product(name="Ten B", price=10.0)
    make_product(name="Pricey", price=10.01)
    page = client.get(f"{API}/products/price-range", params={"minPrice": "10.00", "maxPrice": "10.00"}).json()
    assert _names(page) == ["Ten A", "Ten B"]
    assert all(p["price"] == 10.0 for p in page["content"])


def test_price_range_defaults_to_price_order(client, make_product):
    make_product(name="Beta", price=30.0)
    make_product(name="Alpha", price=20.0)
    page = client.get(f"{API}/products/price-range", params={"minPrice": 0, "maxPrice": 100}).json()
    assert _names(page) == ["Alpha", "Beta"]


def test_price_range_min_above_max_is_rejected(client):
    r = client.get(f"{API}/products/price-range", params={"minPrice": 50, "maxPrice": 10})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_ARGUMENT"


def test_low_stock_is_ordered_by_quantity_and_skips_inactive(client, make_product):
    a = make_product(name="Item A", quantity=7)
    b = make_product(name="Item B", quantity=0)
    make_product(name="Item C", quantity=11)
    d = make_product(name="Item D", quantity=7)
    gone = make_product(name="Item E", quantity=1)
    client.delete(f"{API}/products/{gone['id']}")

    low = client.get(f"{API}/products/low-stock").json()
    assert [p["id"] for p in low] == [b["id"], a["id"], d["id"]]

    low = client.get(f"{API}/products/low-stock", params={"threshold": 11}).json()
    assert len(low) == 4


def test_low_stock_threshold_must_be_positive(client):
    r = client.get(f"{API}/products/low-stock", params={"threshold": 0})
    assert r.status_code == 400


def test_get_product_by_id_and_sku(client, make_product):
    p = make_product(sku="ABC-123")
    assert client.get(f"{API}/products/{p['id']}").json()["sku"] == "ABC-123"
    assert client.get(f"{API}/products/sku/ABC-123").json()["id"] == p["id"]

    r = client.get(f"{API}/products/999")
    assert r.status_code == 404
    assert r.json()["message"] == "Product not found with id: 999"
    assert client.get(f"{API}/products/sku/NOPE-1").status_code == 404


def test_stats_cover_active_products_only(client, make_product):
    make_product(price=19.99, quantity=3)
    make_product(price=5.0, quantity=2)
    gone = make_product(price=1000.0, quantity=1)
    client.delete(f"{API}/products/{gone['id']}")
    stats = client.get(f"{API}/products/stats").json()
    assert stats["totalProducts"] == 2
    assert stats["totalValue"] == pytest.approx(69.97)
