"""Pydantic models for request/response payloads."""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RequestMode(str, Enum):
    PRODUCT = "product"
    CATEGORIES = "categories"
    SEARCH = "search"
    BROWSE = "browse"
    EMPTY = "empty"


class InventoryQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: RequestMode
    search_text: str = ""
    category_id: int | None = None
    page: int = Field(1, ge=1)
    product_id: int | None = None


class ProductRecord(BaseModel):
    id: int
    sku: str
    name: str
    gn: str = ""
    img: str | None = None
    stock: int | str
    status: str
    prices: dict[str, str] = Field(default_factory=dict)


class ProductDetail(BaseModel):
    id: int
    name: str
    sku: str
    gn: str = ""
    description: str = ""
    images: list[str] = Field(default_factory=list)
    prices: dict[str, str] = Field(default_factory=dict)
    stock: int | str
    status: str


class DebugInfo(BaseModel):
    term: str
    category: int | None = None
    sql_like: str
    ids_found: int
    ids_list: list[int]
    cache_hit: bool
    skipped: int = 0


class ResultEnvelope(BaseModel):
    timestamp: str
    count: int
    total_pages: int
    current_page: int
    per_page: int
    products: list[ProductRecord]
    debug: DebugInfo


class EmptyQueryResponse(BaseModel):
    timestamp: str
    count: int = 0
    products: list[ProductRecord] = Field(default_factory=list)
    message: str = "Use search parameter"


class CategoryNode(BaseModel):
    id: int
    name: str
    slug: str
    parent: int
    count: int
