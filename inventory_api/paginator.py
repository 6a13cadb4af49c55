"""Fixed-size pagination over a resolved id list."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence


@dataclass(frozen=True)
class Page:
    ids: List[int]
    total_count: int
    total_pages: int
    current_page: int
    page_size: int


def paginate(ids: Sequence[int], page: int, page_size: int) -> Page:
    """Slice ``ids`` for a 1-based ``page``; pages past the end are empty."""
    if page_size < 1:
        raise ValueError("page_size must be positive")
    page = max(1, page)
    total = len(ids)
    offset = (page - 1) * page_size
    return Page(
        ids=list(ids[offset : offset + page_size]),
        total_count=total,
        total_pages=math.ceil(total / page_size),
        current_page=page,
        page_size=page_size,
    )
