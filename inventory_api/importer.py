"""Load the catalog JSON file into the Elasticsearch indices."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Dict, Iterable, List

from elasticsearch import ApiError, Elasticsearch, TransportError, helpers

from .config import Settings, settings
from .data_files import ensure_data_file
from .file_catalog import load_catalog_file
from .indexing import catalog_indices, drop_indices, ensure_indices, index_is_empty

logger = logging.getLogger(__name__)


def _load_catalog(config: Settings) -> Dict[str, List[dict]]:
    path = ensure_data_file(config.catalog_path, config.catalog_source_url or None)
    # Detect Git LFS placeholder to avoid attempting to parse it as JSON.
    with path.open("r", encoding="utf-8") as fh:
        if fh.readline().startswith("version https://git-lfs.github.com/spec/v1"):
            logger.warning("Catalog file %s is a Git LFS pointer; real data not downloaded", path)
            return {"products": [], "categories": [], "media": []}
    try:
        return load_catalog_file(path)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Catalog file {path} is not valid JSON") from exc


def _prepare_product(raw: dict) -> dict:
    product = dict(raw)
    product["id"] = int(raw["id"])
    product.setdefault("status", "publish")
    product["title"] = raw.get("title") or raw.get("name") or ""
    product["category_ids"] = [int(item) for item in raw.get("category_ids") or []]
    product["gallery_image_ids"] = [int(item) for item in raw.get("gallery_image_ids") or []]
    product.pop("name", None)
    return product


def _iter_actions(index: str, documents: Iterable[dict]) -> Iterable[dict]:
    for document in documents:
        yield {
            "_index": index,
            "_id": str(document["id"]),
            "_source": document,
        }


async def import_catalog(es: Elasticsearch, config: Settings = settings) -> Dict[str, int]:
    data = _load_catalog(config)
    data["products"] = [_prepare_product(item) for item in data["products"]]
    counts: Dict[str, int] = {}
    for collection, index in catalog_indices(config).items():
        actions = list(_iter_actions(index, data[collection]))
        if actions:
            await asyncio.to_thread(helpers.bulk, es, actions, refresh="wait_for")
        counts[collection] = len(actions)
        logger.info("Indexed %s %s into %s", len(actions), collection, index)
    return counts


async def import_if_empty(es: Elasticsearch, config: Settings = settings) -> Dict[str, int]:
    if not await index_is_empty(es, config):
        return {}
    return await import_catalog(es, config)


async def reindex_catalog(es: Elasticsearch, config: Settings = settings) -> Dict[str, int]:
    await drop_indices(es, config)
    await ensure_indices(es, config)
    return await import_catalog(es, config)


async def prepare_catalog(es: Elasticsearch, config: Settings = settings) -> None:
    """Create missing indices and optionally seed them; a down cluster is logged, not fatal."""
    try:
        await ensure_indices(es, config)
        if config.load_on_startup:
            imported = await import_if_empty(es, config)
            if imported:
                logger.info("Imported catalog on startup: %s", imported)
    except (ApiError, TransportError) as exc:
        logger.warning("Catalog not ready on startup: %s", exc)
