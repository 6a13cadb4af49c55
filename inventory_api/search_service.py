"""Inventory lookup pipeline: normalize, resolve, paginate, hydrate, respond."""
from __future__ import annotations

import logging
from functools import lru_cache
from time import perf_counter
from typing import Any, Mapping

from fastapi import Depends
from pydantic import BaseModel

from .cache import CacheBackend, get_cache
from .catalog import Catalog
from .config import Settings, get_settings, settings
from .errors import CatalogUnavailable, InventoryError, ProductNotFound, ProductUnreadable
from .es_client import get_client
from .es_catalog import ElasticsearchCatalog
from .file_catalog import FileCatalog
from .hydrator import Hydrator
from .models import CategoryNode, InventoryQuery, ProductDetail, RequestMode, ResultEnvelope
from .normalizer import normalize_query
from .paginator import paginate
from .resolver import IdResolver
from . import responder

logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, catalog: Catalog, cache: CacheBackend, config: Settings = settings) -> None:
        self.catalog = catalog
        self.config = config
        self.resolver = IdResolver(catalog, cache, config)
        self.hydrator = Hydrator(catalog, config)

    def handle(self, params: Mapping[str, Any]) -> BaseModel | list[CategoryNode]:
        """Dispatch raw query parameters to the matching mode."""
        query = normalize_query(params)
        if query.mode is RequestMode.PRODUCT:
            return self.product(query.product_id or 0)
        if query.mode is RequestMode.CATEGORIES:
            return self.categories()
        if query.mode is RequestMode.EMPTY:
            return responder.empty_response()
        return self.search(query)

    def search(self, query: InventoryQuery) -> ResultEnvelope:
        t0 = perf_counter()
        resolved = self.resolver.resolve(query.search_text, query.category_id)
        t1 = perf_counter()
        page = paginate(resolved.ids, query.page, self.config.page_size)
        hydrated = self.hydrator.hydrate_many(page.ids)
        t2 = perf_counter()
        logger.info(
            "timing: total=%.2fms resolve=%.2fms hydrate=%.2fms cache_hit=%d q=%r category=%s page=%s/%s",
            (t2 - t0) * 1000,
            (t1 - t0) * 1000,
            (t2 - t1) * 1000,
            int(resolved.cache_hit),
            query.search_text,
            query.category_id,
            page.current_page,
            page.total_pages,
        )
        return responder.build_envelope(query, resolved, page, hydrated)

    def product(self, product_id: int) -> ProductDetail:
        if not self.catalog.is_available():
            raise CatalogUnavailable()
        try:
            detail = self.hydrator.detail(product_id)
        except InventoryError:
            raise
        except Exception as exc:
            logger.exception("Product %s could not be hydrated", product_id)
            raise ProductUnreadable() from exc
        if detail is None:
            raise ProductNotFound()
        return detail

    def categories(self) -> list[CategoryNode]:
        if not self.catalog.is_available():
            raise CatalogUnavailable()
        return responder.category_nodes(self.catalog.list_categories())


@lru_cache(maxsize=4)
def _file_catalog(path: str) -> FileCatalog:
    return FileCatalog.from_path(path)


def create_catalog(config: Settings = settings) -> Catalog:
    """Build the configured catalog backend for one request."""
    if config.catalog_backend == "file":
        try:
            return _file_catalog(config.catalog_path)
        except (OSError, ValueError) as exc:
            logger.error("Catalog file %s unreadable: %s", config.catalog_path, exc)
            raise CatalogUnavailable() from exc
    return ElasticsearchCatalog(get_client(config), config)


def get_service(config: Settings = Depends(get_settings)) -> InventoryService:
    return InventoryService(create_catalog(config), get_cache(config), config)
