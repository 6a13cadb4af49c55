"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _get_list(name: str, default: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in _get_env(name, default).split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable settings container with environment variable overrides."""

    api_key: str = _get_env("INVENTORY_API_KEY", "")
    api_key_header: str = _get_env("INVENTORY_API_KEY_HEADER", "X-INVENTORY-KEY")
    api_namespace: str = _get_env("INVENTORY_API_NAMESPACE", "/wp-json/kubik/v1")
    api_route: str = _get_env("INVENTORY_API_ROUTE", "/inventory")

    catalog_backend: str = _get_env("CATALOG_BACKEND", "elasticsearch")
    catalog_path: str = _get_env("CATALOG_PATH", "catalog.json")
    catalog_source_url: str = _get_env("CATALOG_SOURCE_URL", "")
    catalog_request_timeout: float = float(_get_env("CATALOG_REQUEST_TIMEOUT", "300"))
    es_host: str = _get_env("ES_HOST", "http://localhost:9200")
    es_products_index: str = _get_env("ES_PRODUCTS_INDEX", "inventory-products")
    es_categories_index: str = _get_env("ES_CATEGORIES_INDEX", "inventory-categories")
    es_media_index: str = _get_env("ES_MEDIA_INDEX", "inventory-media")
    mappings_dir: str = _get_env("MAPPINGS_DIR", "mappings")

    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "300"))
    cache_key_prefix: str = _get_env("CACHE_KEY_PREFIX", "inv_search_")

    page_size: int = int(_get_env("PAGE_SIZE", "50"))
    browse_limit: int = int(_get_env("BROWSE_LIMIT", "2000"))
    title_limit: int = int(_get_env("TITLE_LIMIT", "1000"))
    sku_limit: int = int(_get_env("SKU_LIMIT", "1000"))
    attribute_limit: int = int(_get_env("ATTRIBUTE_LIMIT", "500"))
    description_limit: int = int(_get_env("DESCRIPTION_LIMIT", "200"))

    # Taxonomies searched by the attribute tier; the display code uses the first.
    search_taxonomies: tuple[str, ...] = _get_list("SEARCH_TAXONOMIES", "pa_gnisios_kodikos,pa_antistixia")
    code_taxonomy: str = _get_env("CODE_TAXONOMY", "pa_gnisios_kodikos")
    b2b_roles: tuple[str, ...] = _get_list("B2B_ROLES", "customer,subscriber,b2b_gold,b2b_platinum")
    stock_many_label: str = _get_env("STOCK_MANY_LABEL", ">50")

    load_on_startup: bool = _get_env("LOAD_ON_STARTUP", "false").lower() in {"1", "true", "yes"}
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()


def get_settings() -> Settings:
    return settings
