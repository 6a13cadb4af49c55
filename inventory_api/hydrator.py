"""Build display records from catalog products.

Each id is hydrated independently: a product that no longer resolves, or
whose hydration raises, becomes a failed :class:`HydrationResult` and is
counted as skipped instead of failing the whole page. A catalog outage is
not a per-record failure and propagates.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

from .catalog import Catalog, CatalogProduct
from .config import Settings
from .errors import CatalogUnavailable
from .models import ProductDetail, ProductRecord
from .utils import filter_content

logger = logging.getLogger(__name__)

IN_STOCK = "instock"
EMPTY_ROLE_PRICES = ("", "0", 0, None)


@dataclass(frozen=True)
class HydrationResult:
    product_id: int
    record: Optional[ProductRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass
class HydratedPage:
    records: List[ProductRecord] = field(default_factory=list)
    skipped: int = 0


def price_string(value: Any) -> Optional[str]:
    """Render a stored price as a decimal string, ``None`` when empty or malformed."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        logger.warning("Ignoring malformed price %r", value)
        return None
    if not amount.is_finite():
        return None
    return text if isinstance(value, str) else str(amount)


class Hydrator:
    def __init__(self, catalog: Catalog, config: Settings) -> None:
        self.catalog = catalog
        self.config = config

    def normalize_stock(self, product: CatalogProduct) -> int | str:
        quantity = product.get_stock_quantity()
        if quantity is not None:
            return quantity
        return self.config.stock_many_label if product.get_stock_status() == IN_STOCK else 0

    def attribute_code(self, product: CatalogProduct) -> str:
        terms = self.catalog.get_attribute_terms(product, self.config.code_taxonomy)
        return terms[0] if terms else ""

    def prices(self, product: CatalogProduct) -> Dict[str, str]:
        prices: Dict[str, str] = {"retail": price_string(product.get_price()) or ""}

        for group in self.catalog.get_group_prices(product):
            if group.regular_price is None or group.regular_price == "":
                continue
            amount = price_string(group.regular_price)
            if amount is not None:
                prices[f"Group {group.group_id}"] = amount

        for role in self.config.b2b_roles:
            raw = self.catalog.get_role_price(product, role)
            if raw in EMPTY_ROLE_PRICES:
                continue
            amount = price_string(raw)
            if amount is not None:
                prices[role] = amount
        return prices

    def build_record(self, product: CatalogProduct) -> ProductRecord:
        return ProductRecord(
            id=product.get_id(),
            sku=product.get_sku(),
            name=product.get_name(),
            gn=self.attribute_code(product),
            img=self.catalog.get_thumbnail_url(product),
            stock=self.normalize_stock(product),
            status=product.get_stock_status(),
            prices=self.prices(product),
        )

    def hydrate(self, product_id: int) -> HydrationResult:
        try:
            product = self.catalog.get_product(product_id)
            if product is None:
                return HydrationResult(product_id, error="not found")
            return HydrationResult(product_id, record=self.build_record(product))
        except CatalogUnavailable:
            raise
        except Exception as exc:
            logger.warning("Skipping product %s: %s", product_id, exc, exc_info=True)
            return HydrationResult(product_id, error=str(exc) or type(exc).__name__)

    def hydrate_many(self, product_ids: Sequence[int]) -> HydratedPage:
        page = HydratedPage()
        for product_id in product_ids:
            result = self.hydrate(product_id)
            if result.ok:
                page.records.append(result.record)
            else:
                page.skipped += 1
        if page.skipped:
            logger.info("hydrate: %s of %s products skipped", page.skipped, len(product_ids))
        return page

    def images(self, product: CatalogProduct) -> List[str]:
        attachment_ids = []
        if product.get_image_id():
            attachment_ids.append(product.get_image_id())
        attachment_ids.extend(product.get_gallery_image_ids())
        urls = []
        for attachment_id in attachment_ids:
            url = self.catalog.get_attachment_url(attachment_id)
            if url:
                urls.append(url)
        return urls

    def detail(self, product_id: int) -> Optional[ProductDetail]:
        product = self.catalog.get_product(product_id)
        if product is None:
            return None
        return ProductDetail(
            id=product.get_id(),
            name=product.get_name(),
            sku=product.get_sku(),
            gn=self.attribute_code(product),
            description=filter_content(product.get_description()),
            images=self.images(product),
            prices=self.prices(product),
            stock=self.normalize_stock(product),
            status=product.get_stock_status(),
        )
