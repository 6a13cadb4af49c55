"""Read-only view of the product catalog shared by every backend.

Products, categories and media are stored as plain documents (the same shape
in Elasticsearch and in the JSON catalog file). :class:`ProductDocument`
exposes a product through the narrow :class:`CatalogProduct` interface, and
:class:`DocumentCatalog` implements the lookups that only depend on those
documents: category subtree traversal, taxonomy terms, the bulk-pricing and
role-pricing extension fields, and media URLs. Backends supply the queries.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

PUBLISHED = "publish"


class CatalogProduct(Protocol):
    def get_id(self) -> int: ...

    def get_sku(self) -> str: ...

    def get_name(self) -> str: ...

    def get_price(self) -> Any: ...

    def get_stock_quantity(self) -> Optional[int]: ...

    def get_stock_status(self) -> str: ...

    def get_image_id(self) -> Optional[int]: ...

    def get_gallery_image_ids(self) -> List[int]: ...

    def get_description(self) -> str: ...


@dataclass(frozen=True)
class ProductDocument:
    source: Mapping[str, Any]

    def get_id(self) -> int:
        return int(self.source["id"])

    def get_sku(self) -> str:
        return self.source.get("sku") or ""

    def get_name(self) -> str:
        return self.source.get("title") or ""

    def get_price(self) -> Any:
        return self.source.get("price")

    def get_stock_quantity(self) -> Optional[int]:
        quantity = self.source.get("stock_quantity")
        if quantity is None or isinstance(quantity, bool) or str(quantity).strip() == "":
            return None
        try:
            amount = Decimal(str(quantity).strip())
        except InvalidOperation:
            logger.warning("Ignoring malformed stock quantity %r on product %s", quantity, self.source.get("id"))
            return None
        if not amount.is_finite():
            return None
        # "5.0" reads as 5; fractions truncate toward zero.
        return int(amount)

    def get_stock_status(self) -> str:
        return self.source.get("stock_status") or "instock"

    def get_image_id(self) -> Optional[int]:
        image_id = self.source.get("image_id")
        return int(image_id) if image_id else None

    def get_gallery_image_ids(self) -> List[int]:
        return [int(item) for item in self.source.get("gallery_image_ids") or [] if item]

    def get_description(self) -> str:
        return self.source.get("description") or ""

    @property
    def is_published(self) -> bool:
        return self.source.get("status", PUBLISHED) == PUBLISHED


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    slug: str = ""
    parent: int = 0
    count: int = 0

    @classmethod
    def from_source(cls, source: Mapping[str, Any]) -> "Category":
        return cls(
            id=int(source["id"]),
            name=source.get("name") or "",
            slug=source.get("slug") or "",
            parent=int(source.get("parent") or 0),
            count=int(source.get("count") or 0),
        )


@dataclass(frozen=True)
class GroupPrice:
    group_id: str
    regular_price: Any = None


class Catalog(Protocol):
    """Operations the resolver and hydrator need from a catalog backend."""

    name: str

    def is_available(self) -> bool: ...

    def get_product(self, product_id: int) -> Optional[CatalogProduct]: ...

    def browse_category(self, category_ids: Sequence[int], limit: int) -> List[int]: ...

    def match_title_prefix(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]: ...

    def match_sku_prefix(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]: ...

    def match_attribute_prefix(
        self,
        text: str,
        taxonomies: Sequence[str],
        category_ids: Optional[Sequence[int]],
        limit: int,
    ) -> List[int]: ...

    def match_description(self, text: str, category_ids: Optional[Sequence[int]], limit: int) -> List[int]: ...

    def list_categories(self) -> List[Category]: ...

    def category_subtree(self, category_id: int) -> List[int]: ...

    def get_attribute_terms(self, product: CatalogProduct, taxonomy: str) -> List[str]: ...

    def get_group_prices(self, product: CatalogProduct) -> List[GroupPrice]: ...

    def get_role_price(self, product: CatalogProduct, role: str) -> Any: ...

    def get_thumbnail_url(self, product: CatalogProduct) -> Optional[str]: ...

    def get_attachment_url(self, attachment_id: int) -> Optional[str]: ...


class DocumentCatalog(ABC):
    """Shared behaviour for catalogs backed by product documents."""

    name = "documents"

    @abstractmethod
    def list_categories(self) -> List[Category]: ...

    @abstractmethod
    def get_media(self, attachment_id: int) -> Optional[Mapping[str, Any]]: ...

    def category_subtree(self, category_id: int) -> List[int]:
        """Return ``category_id`` followed by all of its descendants."""
        children: Dict[int, List[int]] = {}
        for category in self.list_categories():
            children.setdefault(category.parent, []).append(category.id)
        subtree = [category_id]
        seen = {category_id}
        idx = 0
        while idx < len(subtree):
            for child in children.get(subtree[idx], []):
                if child not in seen:
                    seen.add(child)
                    subtree.append(child)
            idx += 1
        return subtree

    def get_attribute_terms(self, product: CatalogProduct, taxonomy: str) -> List[str]:
        attributes = _source(product).get("attributes") or {}
        terms = attributes.get(taxonomy) or []
        if isinstance(terms, str):
            terms = [terms]
        return [str(term) for term in terms if term not in (None, "")]

    def get_group_prices(self, product: CatalogProduct) -> List[GroupPrice]:
        raw = _source(product).get("group_prices")
        if not raw or not isinstance(raw, Mapping):
            return []
        prices = []
        for group_id, data in raw.items():
            regular = data.get("regular_price") if isinstance(data, Mapping) else None
            prices.append(GroupPrice(group_id=str(group_id), regular_price=regular))
        return prices

    def get_role_price(self, product: CatalogProduct, role: str) -> Any:
        return (_source(product).get("role_prices") or {}).get(role)

    def get_thumbnail_url(self, product: CatalogProduct) -> Optional[str]:
        image_id = product.get_image_id()
        if not image_id:
            return None
        media = self.get_media(image_id)
        if not media:
            return None
        return media.get("thumbnail_url") or media.get("url")

    def get_attachment_url(self, attachment_id: int) -> Optional[str]:
        media = self.get_media(attachment_id)
        return media.get("url") if media else None


def _source(product: CatalogProduct) -> Mapping[str, Any]:
    return getattr(product, "source", {}) or {}


def unique_ids(ids: Iterable[Any]) -> List[int]:
    """Cast to ``int`` and drop duplicates, keeping the first occurrence."""
    seen: set[int] = set()
    result: List[int] = []
    for raw in ids:
        value = int(raw)
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
