"""Turn raw query parameters into an :class:`InventoryQuery`."""
from __future__ import annotations

from typing import Any, Mapping

from .models import InventoryQuery, RequestMode
from .utils import absint, sanitize_text_field

CATEGORIES_ACTION = "categories"


def normalize_query(params: Mapping[str, Any]) -> InventoryQuery:
    """Pick the request mode and sanitize its inputs.

    Precedence: ``id`` (single product), ``action=categories``, then search
    text and/or category. With neither search text nor a category the query is
    empty and the pipeline is skipped.
    """
    raw_id = params.get("id")
    if raw_id is not None and str(raw_id).strip() not in ("", "0"):
        return InventoryQuery(mode=RequestMode.PRODUCT, product_id=absint(raw_id))

    if sanitize_text_field(params.get("action")).lower() == CATEGORIES_ACTION:
        return InventoryQuery(mode=RequestMode.CATEGORIES)

    search_text = sanitize_text_field(params.get("search"))
    category_id = absint(params.get("category")) or None
    page = max(1, absint(params.get("page")))

    if search_text:
        mode = RequestMode.SEARCH
    elif category_id:
        mode = RequestMode.BROWSE
    else:
        mode = RequestMode.EMPTY
    return InventoryQuery(mode=mode, search_text=search_text, category_id=category_id, page=page)
