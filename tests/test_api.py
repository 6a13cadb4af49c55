"""HTTP tests for the inventory route."""

from unittest.mock import MagicMock

import pytest
from elasticsearch import NotFoundError
from fastapi.testclient import TestClient

from inventory_api.config import get_settings
from inventory_api.errors import CatalogUnavailable
from inventory_api.es_catalog import ElasticsearchCatalog
from inventory_api.file_catalog import FileCatalog
from inventory_api.main import app, inventory_app
from inventory_api.search_service import InventoryService, get_service

URL = "/wp-json/kubik/v1/inventory"
HEADERS = {"X-INVENTORY-KEY": "test-inventory-key"}


@pytest.fixture
def client(service, config):
    inventory_app.dependency_overrides[get_service] = lambda: service
    inventory_app.dependency_overrides[get_settings] = lambda: config
    yield TestClient(app)
    inventory_app.dependency_overrides.clear()


def test_missing_key_is_unauthorized(client):
    response = client.get(URL, params={"search": "router"})

    assert response.status_code == 401
    assert response.json() == {"code": "rest_forbidden", "message": "Unauthorized", "data": {"status": 401}}


def test_wrong_key_is_unauthorized(client):
    response = client.get(URL, params={"search": "router"}, headers={"X-INVENTORY-KEY": "nope"})

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized"


def test_empty_query_short_circuits(client):
    response = client.get(URL, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 0
    assert body["products"] == []
    assert body["message"] == "Use search parameter"
    assert "timestamp" in body


def test_search_returns_envelope(client):
    response = client.get(URL, params={"search": "router"}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 4
    assert body["total_pages"] == 1
    assert body["current_page"] == 1
    assert [item["id"] for item in body["products"]] == [101, 103, 102, 104]
    assert body["products"][0]["stock"] == ">50"
    assert body["debug"]["term"] == "router"
    assert body["debug"]["sql_like"] == "router%"
    assert body["debug"]["ids_found"] == 4
    assert body["debug"]["cache_hit"] is False

    again = client.get(URL, params={"search": "router", "page": 2}, headers=HEADERS).json()
    assert again["debug"]["cache_hit"] is True
    assert again["products"] == []
    assert again["current_page"] == 2


def test_browse_mode_pages(cache, config):
    categories = [{"id": 7, "name": "Filters", "parent": 0}, {"id": 8, "name": "Oil filters", "parent": 7}]
    products = [
        {"id": idx, "title": f"Filter {idx}", "sku": f"F{idx}", "stock_status": "instock", "category_ids": [7 if idx % 2 else 8]}
        for idx in range(1, 138)
    ]
    service = InventoryService(FileCatalog(products, categories), cache, config)
    inventory_app.dependency_overrides[get_service] = lambda: service
    inventory_app.dependency_overrides[get_settings] = lambda: config
    try:
        client = TestClient(app)
        body = client.get(URL, params={"category": 7, "page": 3}, headers=HEADERS).json()
    finally:
        inventory_app.dependency_overrides.clear()

    assert body["count"] == 137
    assert body["total_pages"] == 3
    assert len(body["products"]) == 37
    assert body["products"][0]["id"] == 101
    assert body["debug"]["sql_like"] == "N/A"


def test_single_product_is_unwrapped(client):
    response = client.get(URL, params={"id": 101, "search": "ignored"}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 101
    assert body["gn"] == "GN-100"
    assert body["images"][0] == "https://cdn.example.com/ax3000.jpg"
    assert body["prices"]["Group 3"] == "80.00"
    assert "debug" not in body


def test_single_product_not_found(client):
    response = client.get(URL, params={"id": 999}, headers=HEADERS)

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_categories_listing(client):
    response = client.get(URL, params={"action": "categories"}, headers=HEADERS)

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Cables", "Networking", "Routers", "Wireless"]


def test_catalog_unavailable_is_reported(cache, config):
    class DownCatalog(FileCatalog):
        def is_available(self) -> bool:
            return False

    service = InventoryService(DownCatalog([]), cache, config)
    inventory_app.dependency_overrides[get_service] = lambda: service
    inventory_app.dependency_overrides[get_settings] = lambda: config
    try:
        client = TestClient(app)
        search = client.get(URL, params={"search": "router"}, headers=HEADERS)
        single = client.get(URL, params={"id": 1}, headers=HEADERS)
    finally:
        inventory_app.dependency_overrides.clear()

    assert search.status_code == 503
    assert search.json() == {"error": "Catalog unavailable"}
    assert single.status_code == 503


def test_cors_preflight_allows_key_header(client):
    response = client.options(
        URL,
        headers={
            "Origin": "https://viewer.example.com",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "X-INVENTORY-KEY",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://viewer.example.com")
    assert response.headers["access-control-allow-credentials"] == "true"
    assert "x-inventory-key" in response.headers["access-control-allow-headers"].lower()
    assert "GET" in response.headers["access-control-allow-methods"]


def test_cors_headers_only_on_inventory_namespace(client):
    inventory = client.get(URL, headers={**HEADERS, "Origin": "https://viewer.example.com"})
    other = client.get("/wp-json/other", headers={"Origin": "https://viewer.example.com"})

    assert "access-control-allow-origin" in inventory.headers
    assert "access-control-allow-origin" not in other.headers


def _serve(service, config):
    inventory_app.dependency_overrides[get_service] = lambda: service
    inventory_app.dependency_overrides[get_settings] = lambda: config
    return TestClient(app)


def test_outage_after_cache_warmup_is_503_not_empty_page(catalog_data, cache, config):
    class FlakyCatalog(FileCatalog):
        down = False

        def is_available(self) -> bool:
            return not self.down

        def get_product(self, product_id):
            if self.down:
                raise CatalogUnavailable()
            return super().get_product(product_id)

    catalog = FlakyCatalog(catalog_data["products"], catalog_data["categories"], catalog_data["media"])
    try:
        client = _serve(InventoryService(catalog, cache, config), config)
        first = client.get(URL, params={"search": "router"}, headers=HEADERS)
        catalog.down = True
        second = client.get(URL, params={"search": "router"}, headers=HEADERS)
    finally:
        inventory_app.dependency_overrides.clear()

    assert first.status_code == 200
    assert first.json()["count"] == 4
    assert second.status_code == 503
    assert second.json() == {"error": "Catalog unavailable"}


def test_missing_es_index_on_browse_is_503(cache, config):
    es = MagicMock()
    es.indices.exists.return_value = True
    es.search.side_effect = NotFoundError(
        "index_not_found_exception",
        MagicMock(status=404),
        {"error": {"type": "index_not_found_exception"}, "status": 404},
    )
    try:
        client = _serve(InventoryService(ElasticsearchCatalog(es, config), cache, config), config)
        response = client.get(URL, params={"category": 3}, headers=HEADERS)
    finally:
        inventory_app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json() == {"error": "Catalog unavailable"}


def test_float_like_stock_is_listed_and_shown(cache, config):
    products = [{"id": 5, "title": "Router mesh", "sku": "RM-5", "stock_quantity": "5.0", "stock_status": "instock"}]
    try:
        client = _serve(InventoryService(FileCatalog(products), cache, config), config)
        listed = client.get(URL, params={"search": "router"}, headers=HEADERS).json()
        single = client.get(URL, params={"id": 5}, headers=HEADERS)
    finally:
        inventory_app.dependency_overrides.clear()

    assert listed["debug"]["skipped"] == 0
    assert listed["products"][0]["stock"] == 5
    assert single.status_code == 200
    assert single.json()["stock"] == 5


def test_unreadable_product_detail_is_json_error(catalog_data, cache, config):
    class BrokenAttributes(FileCatalog):
        def get_attribute_terms(self, product, taxonomy):
            raise KeyError(taxonomy)

    catalog = BrokenAttributes(catalog_data["products"], catalog_data["categories"], catalog_data["media"])
    try:
        client = _serve(InventoryService(catalog, cache, config), config)
        response = client.get(URL, params={"id": 101}, headers=HEADERS)
    finally:
        inventory_app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Product could not be loaded"}
