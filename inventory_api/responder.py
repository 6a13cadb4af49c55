"""Assemble response payloads."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable

from .catalog import Category
from .hydrator import HydratedPage
from .models import CategoryNode, DebugInfo, EmptyQueryResponse, InventoryQuery, ResultEnvelope
from .paginator import Page
from .resolver import ResolvedIds

DEBUG_ID_SAMPLE = 5
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def empty_response(now: datetime | None = None) -> EmptyQueryResponse:
    return EmptyQueryResponse(timestamp=timestamp(now))


def build_envelope(
    query: InventoryQuery,
    resolved: ResolvedIds,
    page: Page,
    hydrated: HydratedPage,
    now: datetime | None = None,
) -> ResultEnvelope:
    return ResultEnvelope(
        timestamp=timestamp(now),
        count=page.total_count,
        total_pages=page.total_pages,
        current_page=page.current_page,
        per_page=page.page_size,
        products=hydrated.records,
        debug=DebugInfo(
            term=query.search_text,
            category=query.category_id,
            sql_like=resolved.like_pattern,
            ids_found=len(resolved.ids),
            ids_list=resolved.ids[:DEBUG_ID_SAMPLE],
            cache_hit=resolved.cache_hit,
            skipped=hydrated.skipped,
        ),
    )


def category_nodes(categories: Iterable[Category]) -> list[CategoryNode]:
    nodes = [
        CategoryNode(id=item.id, name=item.name, slug=item.slug, parent=item.parent, count=item.count)
        for item in categories
    ]
    return sorted(nodes, key=lambda node: (node.name.casefold(), node.id))


def error_body(message: str) -> dict:
    return {"error": message}
