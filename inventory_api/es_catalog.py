"""Catalog backend that queries the Elasticsearch product indices.

Every tier is a filtered query on a ``keyword`` (or ``wildcard``) sub-field,
restricted to published products and sorted by ``id`` so that repeated runs
return ids in the same catalog-native order.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError

from .catalog import PUBLISHED, Category, DocumentCatalog, ProductDocument, unique_ids
from .config import Settings, settings
from .errors import CatalogUnavailable

logger = logging.getLogger(__name__)

CATEGORY_FETCH_SIZE = 10000
INDEX_NOT_FOUND = "index_not_found_exception"
WILDCARD_SPECIAL = ("\\", "*", "?")


def _escape_wildcard(text: str) -> str:
    for char in WILDCARD_SPECIAL:
        text = text.replace(char, "\\" + char)
    return text


def _prefix(field: str, text: str) -> dict:
    return {"prefix": {field: {"value": text, "case_insensitive": True}}}


def _missing_index(exc: NotFoundError) -> bool:
    body = exc.body if isinstance(exc.body, dict) else {}
    error = body.get("error")
    return isinstance(error, dict) and error.get("type") == INDEX_NOT_FOUND


class ElasticsearchCatalog(DocumentCatalog):
    name = "elasticsearch"

    def __init__(self, es: Elasticsearch, config: Settings = settings) -> None:
        self.es = es
        self.config = config
        self._categories: List[Category] | None = None

    def _call(self, method, **kwargs):
        try:
            return method(**kwargs)
        except (ApiError, TransportError) as exc:
            logger.error("Catalog request failed: %s", exc)
            raise CatalogUnavailable() from exc

    def is_available(self) -> bool:
        try:
            return bool(self.es.indices.exists(index=self.config.es_products_index))
        except (ApiError, TransportError) as exc:
            logger.warning("Catalog availability check failed: %s", exc)
            return False

    def _get_source(self, index: str, doc_id: int) -> Optional[Dict[str, Any]]:
        """Fetch one document, ``None`` when the document (not the index) is missing."""
        try:
            response = self.es.get(index=index, id=str(doc_id))
        except NotFoundError as exc:
            if _missing_index(exc):
                logger.error("Catalog index %s missing: %s", index, exc)
                raise CatalogUnavailable() from exc
            return None
        except (ApiError, TransportError) as exc:
            logger.error("Catalog request failed: %s", exc)
            raise CatalogUnavailable() from exc
        return response["_source"]

    def get_product(self, product_id: int) -> Optional[ProductDocument]:
        source = self._get_source(self.config.es_products_index, product_id)
        if source is None:
            return None
        product = ProductDocument(source)
        return product if product.is_published else None

    def _search_ids(self, must: List[dict], category_ids: Optional[Sequence[int]], limit: int) -> List[int]:
        filters: List[dict] = [{"term": {"status": PUBLISHED}}]
        if category_ids:
            filters.append({"terms": {"category_ids": list(category_ids)}})
        query = {"bool": {"must": must, "filter": filters}}
        logger.debug("ES query payload=%s size=%s", query, limit)
        response = self._call(
            self.es.search,
            index=self.config.es_products_index,
            query=query,
            size=limit,
            sort=[{"id": "asc"}],
            source=["id"],
            track_total_hits=False,
        )
        hits = response["hits"]["hits"]
        return unique_ids(hit["_source"]["id"] for hit in hits)

    def browse_category(self, category_ids: Sequence[int], limit: int) -> List[int]:
        return self._search_ids([{"match_all": {}}], category_ids, limit)

    def match_title_prefix(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]:
        return self._search_ids([_prefix("title.keyword", text)], category_ids, limit)

    def match_sku_prefix(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]:
        return self._search_ids([_prefix("sku", text)], category_ids, limit)

    def match_attribute_prefix(
        self,
        text: str,
        taxonomies: Sequence[str],
        category_ids: Optional[Sequence[int]],
        limit: int,
    ) -> List[int]:
        if not taxonomies:
            return []
        should = [_prefix(f"attributes.{taxonomy}", text) for taxonomy in taxonomies]
        return self._search_ids([{"bool": {"should": should, "minimum_should_match": 1}}], category_ids, limit)

    def match_description(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]:
        clause = {
            "wildcard": {
                "description.wildcard": {
                    "value": f"*{_escape_wildcard(text)}*",
                    "case_insensitive": True,
                }
            }
        }
        return self._search_ids([clause], category_ids, limit)

    def list_categories(self) -> List[Category]:
        if self._categories is None:
            response = self._call(
                self.es.search,
                index=self.config.es_categories_index,
                query={"match_all": {}},
                size=CATEGORY_FETCH_SIZE,
                sort=[{"id": "asc"}],
            )
            self._categories = [Category.from_source(hit["_source"]) for hit in response["hits"]["hits"]]
        return self._categories

    def get_media(self, attachment_id: int) -> Optional[Mapping[str, Any]]:
        return self._get_source(self.config.es_media_index, attachment_id)
