"""Catalog backend over the JSON catalog file, for local runs and tests."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .catalog import Category, DocumentCatalog, ProductDocument, unique_ids

logger = logging.getLogger(__name__)


def load_catalog_file(path: Path) -> Dict[str, List[dict]]:
    """Read ``{"products": [...], "categories": [...], "media": [...]}`` from disk."""
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    return {key: list(data.get(key) or []) for key in ("products", "categories", "media")}


class FileCatalog(DocumentCatalog):
    name = "file"

    def __init__(
        self,
        products: Sequence[Mapping[str, Any]],
        categories: Sequence[Mapping[str, Any]] = (),
        media: Sequence[Mapping[str, Any]] = (),
    ) -> None:
        self._products = sorted((ProductDocument(item) for item in products), key=lambda p: p.get_id())
        self._by_id = {product.get_id(): product for product in self._products}
        self._categories = [Category.from_source(item) for item in categories]
        self._media = {int(item["id"]): item for item in media}

    @classmethod
    def from_path(cls, path: str | Path) -> "FileCatalog":
        data = load_catalog_file(Path(path))
        logger.info("Loaded %s products from %s", len(data["products"]), path)
        return cls(data["products"], data["categories"], data["media"])

    def is_available(self) -> bool:
        return True

    def get_product(self, product_id: int) -> Optional[ProductDocument]:
        product = self._by_id.get(product_id)
        return product if product is not None and product.is_published else None

    def _filter_ids(
        self,
        predicate: Callable[[ProductDocument], bool],
        category_ids: Optional[Sequence[int]],
        limit: int,
    ) -> List[int]:
        allowed = set(category_ids or ())
        ids = []
        for product in self._products:
            if len(ids) >= limit:
                break
            if not product.is_published:
                continue
            if allowed and not allowed.intersection(product.source.get("category_ids") or ()):
                continue
            if predicate(product):
                ids.append(product.get_id())
        return unique_ids(ids)

    def browse_category(self, category_ids: Sequence[int], limit: int) -> List[int]:
        return self._filter_ids(lambda product: True, category_ids, limit)

    def match_title_prefix(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]:
        needle = text.casefold()
        return self._filter_ids(lambda p: p.get_name().casefold().startswith(needle), category_ids, limit)

    def match_sku_prefix(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]:
        needle = text.casefold()
        return self._filter_ids(lambda p: p.get_sku().casefold().startswith(needle), category_ids, limit)

    def match_attribute_prefix(
        self,
        text: str,
        taxonomies: Sequence[str],
        category_ids: Optional[Sequence[int]],
        limit: int,
    ) -> List[int]:
        needle = text.casefold()

        def matches(product: ProductDocument) -> bool:
            return any(
                term.casefold().startswith(needle)
                for taxonomy in taxonomies
                for term in self.get_attribute_terms(product, taxonomy)
            )

        return self._filter_ids(matches, category_ids, limit)

    def match_description(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]:
        needle = text.casefold()
        return self._filter_ids(lambda p: needle in p.get_description().casefold(), category_ids, limit)

    def list_categories(self) -> List[Category]:
        return list(self._categories)

    def get_media(self, attachment_id: int) -> Optional[Mapping[str, Any]]:
        return self._media.get(attachment_id)
