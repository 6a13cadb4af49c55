"""Elasticsearch client factory.

Clients are shared per (host, timeout) pair; the timeout is the per-request
allowance for the whole lookup, so a slow catalog does not cut a large
browse short. Blocking calls run in a worker thread via ``asyncio.to_thread``.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from elasticsearch import Elasticsearch

from .config import Settings, settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _connect(host: str, request_timeout: float) -> Elasticsearch:
    logger.info("Connecting to Elasticsearch at %s (timeout %ss)", host, request_timeout)
    return Elasticsearch(host, request_timeout=request_timeout)


def get_client(config: Settings = settings) -> Elasticsearch:
    return _connect(config.es_host, config.catalog_request_timeout)
