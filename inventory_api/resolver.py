"""Resolve a search/category query into an ordered list of product ids.

Search text runs through four match tiers in priority order (title prefix,
SKU prefix, classification-attribute prefix, then description substring only
when the first three found nothing). Category-only queries browse the whole
category subtree. The resulting id list is cached per (search text,
category) for a fixed window and reused verbatim on later hits, including
for other pages of the same query.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import List, Optional

from .cache import CacheBackend
from .catalog import Catalog, unique_ids
from .config import Settings
from .errors import CatalogUnavailable
from .utils import escape_like, hash_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedIds:
    ids: List[int]
    like_pattern: str
    cache_hit: bool


def like_pattern_for(search_text: str) -> str:
    return escape_like(search_text) + "%" if search_text else "N/A"


class IdResolver:
    def __init__(self, catalog: Catalog, cache: CacheBackend, config: Settings) -> None:
        self.catalog = catalog
        self.cache = cache
        self.config = config

    def cache_key(self, search_text: str, category_id: Optional[int]) -> str:
        return self.config.cache_key_prefix + hash_query(search_text, category_id or 0)

    def resolve(self, search_text: str, category_id: Optional[int] = None) -> ResolvedIds:
        pattern = like_pattern_for(search_text)
        key = self.cache_key(search_text, category_id)
        cached = self.cache.get_ids(key)
        if cached is not None:
            logger.debug("cache_hit q=%r category=%s ids=%s", search_text, category_id, len(cached))
            return ResolvedIds(ids=cached, like_pattern=pattern, cache_hit=True)

        if not self.catalog.is_available():
            raise CatalogUnavailable()

        t0 = perf_counter()
        if search_text:
            ids = self._search(search_text, category_id)
        else:
            ids = self._browse(category_id)
        total_ms = (perf_counter() - t0) * 1000
        logger.info(
            "timing: resolve=%.2fms cache_hit=0 q=%r category=%s ids=%s",
            total_ms,
            search_text,
            category_id,
            len(ids),
        )

        self.cache.set_ids(key, ids, self.config.cache_ttl_seconds)
        logger.debug("cache_store key=%s ttl=%s", key, self.config.cache_ttl_seconds)
        return ResolvedIds(ids=ids, like_pattern=pattern, cache_hit=False)

    def _subtree(self, category_id: Optional[int]) -> Optional[List[int]]:
        if not category_id:
            return None
        return self.catalog.category_subtree(category_id)

    def _browse(self, category_id: Optional[int]) -> List[int]:
        subtree = self._subtree(category_id)
        if not subtree:
            return []
        return unique_ids(self.catalog.browse_category(subtree, self.config.browse_limit))

    def _search(self, search_text: str, category_id: Optional[int]) -> List[int]:
        config = self.config
        subtree = self._subtree(category_id)

        title_ids = self.catalog.match_title_prefix(search_text, subtree, config.title_limit)
        sku_ids = self.catalog.match_sku_prefix(search_text, subtree, config.sku_limit)
        attribute_ids = self.catalog.match_attribute_prefix(
            search_text, config.search_taxonomies, subtree, config.attribute_limit
        )
        found = [*title_ids, *sku_ids, *attribute_ids]

        description_ids: List[int] = []
        if not found:
            description_ids = self.catalog.match_description(search_text, subtree, config.description_limit)
            found.extend(description_ids)

        logger.debug(
            "tiers q=%r title=%s sku=%s attribute=%s description=%s",
            search_text,
            len(title_ids),
            len(sku_ids),
            len(attribute_ids),
            len(description_ids),
        )
        return unique_ids(found)
