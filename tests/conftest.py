"""Shared fixtures: a small catalog exercised through the file backend."""
from __future__ import annotations

import copy

import pytest

from inventory_api.cache import InMemoryCache
from inventory_api.config import Settings
from inventory_api.file_catalog import FileCatalog
from inventory_api.search_service import InventoryService

API_KEY = "test-inventory-key"

CATALOG = {
    "categories": [
        {"id": 1, "name": "Networking", "slug": "networking", "parent": 0, "count": 3},
        {"id": 2, "name": "Routers", "slug": "routers", "parent": 1, "count": 1},
        {"id": 3, "name": "Wireless", "slug": "wireless", "parent": 2, "count": 1},
        {"id": 4, "name": "Cables", "slug": "cables", "parent": 0, "count": 2},
    ],
    "media": [
        {"id": 900, "url": "https://cdn.example.com/ax3000.jpg", "thumbnail_url": "https://cdn.example.com/ax3000-150x150.jpg"},
        {"id": 901, "url": "https://cdn.example.com/ax3000-back.jpg"},
        {"id": 902, "url": "https://cdn.example.com/ax3000-box.jpg"},
    ],
    "products": [
        {
            "id": 101,
            "title": "Router AX3000",
            "sku": "ROUTERAX3000",
            "description": "Dual band router.\n\nWall mount kit included.<script>alert(1)</script>",
            "price": "89.90",
            "stock_quantity": None,
            "stock_status": "instock",
            "category_ids": [2],
            "attributes": {"pa_gnisios_kodikos": ["GN-100", "GN-101"]},
            "image_id": 900,
            "gallery_image_ids": [901, 902],
            "group_prices": {"3": {"regular_price": "80.00"}, "5": {"regular_price": ""}},
            "role_prices": {"b2b_gold": "75.50", "customer": "", "subscriber": "0"},
        },
        {
            "id": 102,
            "title": "Switch 8 port",
            "sku": "ROUTER-SW8",
            "description": "Unmanaged switch.",
            "price": "25",
            "stock_quantity": 12,
            "stock_status": "instock",
            "category_ids": [1],
        },
        {
            "id": 103,
            "title": "router mini",
            "sku": "RM-1",
            "description": "Travel router.",
            "price": 19.5,
            "stock_quantity": None,
            "stock_status": "outofstock",
            "category_ids": [3],
        },
        {
            "id": 104,
            "title": "Cable Cat6",
            "sku": "CB-6",
            "description": "Shielded patch cable.",
            "price": "4.20",
            "stock_quantity": 300,
            "stock_status": "instock",
            "category_ids": [4],
            "attributes": {"pa_antistixia": ["ROUTER-COMPAT"]},
        },
        {
            "id": 105,
            "title": "Patch panel",
            "sku": "PP-24",
            "description": "Works with any router setup.",
            "price": "45.00",
            "stock_quantity": 3,
            "stock_status": "instock",
            "category_ids": [4],
        },
        {
            "id": 106,
            "title": "Router prototype",
            "sku": "ROUTER-PROTO",
            "status": "draft",
            "price": "1.00",
            "stock_status": "instock",
            "category_ids": [2],
        },
    ],
}


@pytest.fixture
def catalog_data() -> dict:
    return copy.deepcopy(CATALOG)


@pytest.fixture
def catalog(catalog_data) -> FileCatalog:
    return FileCatalog(catalog_data["products"], catalog_data["categories"], catalog_data["media"])


@pytest.fixture
def config() -> Settings:
    return Settings(api_key=API_KEY, catalog_backend="file", cache_ttl_seconds=300, page_size=50)


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def service(catalog, cache, config) -> InventoryService:
    return InventoryService(catalog, cache, config)
