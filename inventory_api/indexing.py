"""Index creation and maintenance helpers for the catalog indices."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import BadRequestError, NotFoundError

from .config import Settings, settings

logger = logging.getLogger(__name__)


def catalog_indices(config: Settings = settings) -> Dict[str, str]:
    """Map each catalog collection to its index name."""
    return {
        "products": config.es_products_index,
        "categories": config.es_categories_index,
        "media": config.es_media_index,
    }


def _load_mapping(mapping_path: Path) -> dict:
    with mapping_path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


async def ensure_index(es: Elasticsearch, collection: str, config: Settings = settings) -> None:
    """Create the index for ``collection`` from its mapping file if it is missing."""

    index = catalog_indices(config)[collection]
    mapping_path = Path(config.mappings_dir) / f"{collection}.json"
    exists = await asyncio.to_thread(es.indices.exists, index=index)
    if exists:
        return
    body = _load_mapping(mapping_path)
    logger.info("Creating index %s using %s", index, mapping_path)
    try:
        await asyncio.to_thread(
            es.indices.create,
            index=index,
            settings=body.get("settings"),
            mappings=body.get("mappings"),
        )
    except BadRequestError as exc:
        if getattr(exc, "error", "") == "resource_already_exists_exception":
            logger.info("Index %s already exists", index)
            return
        logger.exception("Failed to create index: %s", exc)
        raise


async def ensure_indices(es: Elasticsearch, config: Settings = settings) -> None:
    for collection in catalog_indices(config):
        await ensure_index(es, collection, config)


async def drop_indices(es: Elasticsearch, config: Settings = settings) -> None:
    for index in catalog_indices(config).values():
        try:
            await asyncio.to_thread(es.indices.delete, index=index)
        except NotFoundError:
            continue


async def index_is_empty(es: Elasticsearch, config: Settings = settings) -> bool:
    try:
        stats = await asyncio.to_thread(es.count, index=config.es_products_index)
        return stats["count"] == 0
    except NotFoundError:
        return True
