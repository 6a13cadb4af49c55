"""Shared-secret API key check for the inventory route."""
from __future__ import annotations

import hmac
import logging

from fastapi import Depends, Request

from .config import Settings, get_settings
from .errors import AuthFailure

logger = logging.getLogger(__name__)


def api_key_matches(expected: str, provided: str | None) -> bool:
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def require_api_key(request: Request, config: Settings = Depends(get_settings)) -> None:
    if not api_key_matches(config.api_key, request.headers.get(config.api_key_header)):
        logger.info("Rejected request to %s: missing or invalid API key", request.url.path)
        raise AuthFailure()
