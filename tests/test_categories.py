# tests/test_categories.py
API = "/api/v1"


def test_create_and_fetch_category(client):
    r = client.post(f"{API}/categories", json={"name": "Books", "description": "Paper", "productCount": 99})
    assert r.status_code == 201
    cat = r.json()
    assert cat["id"] == 1
    assert cat["active"] is True
    assert cat["productCount"] == 0
    assert client.get(f"{API}/categories/{cat['id']}").json()["name"] == "Books"
    assert client.get(f"{API}/categories/name/Books").json()["id"] == cat["id"]


def test_category_validation_and_unique_name(client, make_category):
    r = client.post(f"{API}/categories", json={"name": "B"})
    assert r.status_code == 400
    assert "name" in r.json()["fieldErrors"]

    make_category("Books")
    r = client.post(f"{API}/categories", json={"name": "Books"})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_ARGUMENT"


def test_unknown_category_lookups(client):
    assert client.get(f"{API}/categories/5").status_code == 404
    assert client.get(f"{API}/categories/name/Nothing").status_code == 404


def test_paginated_and_plain_lists(client, make_category):
    for name in ["Toys", "books", "Garden"]:
        make_category(name)
    page = client.get(f"{API}/categories", params={"size": 2}).json()
    assert [c["name"] for c in page["content"]] == ["books", "Garden"]
    assert page["totalPages"] == 2
    plain = client.get(f"{API}/categories/list").json()
    assert [c["name"] for c in plain] == ["books", "Garden", "Toys"]


def test_inactive_categories_are_not_listed(client, make_category):
    make_category("Visible")
    hidden = make_category("Hidden", active=False)
    assert [c["name"] for c in client.get(f"{API}/categories/list").json()] == ["Visible"]
    assert client.get(f"{API}/categories/{hidden['id']}").json()["active"] is False


def test_search_categories(client, make_category):
    make_category("Home & Kitchen", description="Cookware")
    make_category("Sports", description="Outdoor gear")
    make_category("Books")
    page = client.get(f"{API}/categories/search", params={"q": "OUT"}).json()
    assert [c["name"] for c in page["content"]] == ["Sports"]
    page = client.get(f"{API}/categories/search", params={"q": " "}).json()
    assert page["totalElements"] == 3


def test_product_count_and_with_products(client, make_category, make_product):
    books = make_category("Books")
    make_category("Empty")
    make_product(category_id=books["id"])
    make_product(category_id=books["id"])
    assert client.get(f"{API}/categories/{books['id']}").json()["productCount"] == 2
    non_empty = client.get(f"{API}/categories/with-products").json()
    assert [c["name"] for c in non_empty] == ["Books"]


def test_update_category(client, make_category):
    cat = make_category("Bookz")
    make_category("Toys")
    r = client.put(f"{API}/categories/{cat['id']}", json={"name": "Books", "description": "Fixed"})
    assert r.status_code == 200
    assert r.json()["name"] == "Books"
    assert r.json()["description"] == "Fixed"

    r = client.put(f"{API}/categories/{cat['id']}", json={"name": "Toys"})
    assert r.status_code == 400
    assert client.put(f"{API}/categories/999", json={"name": "Nope"}).status_code == 404


def test_renamed_category_shows_on_products(client, make_category, make_product):
    cat = make_category("Old Name")
    p = make_product(category_id=cat["id"])
    client.put(f"{API}/categories/{cat['id']}", json={"name": "New Name"})
    assert client.get(f"{API}/products/{p['id']}").json()["categoryName"] == "New Name"


def test_delete_empty_category(client, make_category):
    cat = make_category("Temp")
    r = client.delete(f"{API}/categories/{cat['id']}")
    assert r.status_code == 204
    assert client.get(f"{API}/categories/{cat['id']}").status_code == 404
    assert client.delete(f"{API}/categories/{cat['id']}").status_code == 404


def test_delete_category_with_products_conflicts(client, make_category, make_product):
    cat = make_category("Busy")
    p = make_product(category_id=cat["id"])
    client.delete(f"{API}/products/{p['id']}")

    r = client.delete(f"{API}/categories/{cat['id']}")
    assert r.status_code == 409
    body = r.json()
    assert body["code"] == "INVALID_STATE"
    assert client.get(f"{API}/categories/{cat['id']}").status_code == 200
