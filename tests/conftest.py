# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from catalog import database
from catalog.main import app
from catalog_sdk.client import CatalogClient

API = "/api/v1"


@pytest.fixture(autouse=True)
def clean_store():
    database.reset()
    yield
    database.reset()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sdk(client):
    return CatalogClient(base_url=str(client.base_url), session=client)


@pytest.fixture
def make_category(client):
    def _make(name="Electronics", **fields):
        r = client.post(f"{API}/categories", json={"name": name, **fields})
        assert r.status_code == 201, r.text
        return r.json()
    return _make


@pytest.fixture
def make_product(client):
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        body = {"name": f"Product {counter['n']}", "sku": f"SKU-{counter['n']:04d}", "price": 10.0, "quantity": 5}
        body.update(fields)
        r = client.post(f"{API}/products", json=body)
        assert r.status_code == 201, r.text
        return r.json()
    return _make
