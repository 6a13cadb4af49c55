"""Fetch the catalog export when it is not on disk yet."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60


def ensure_data_file(path: str | Path, source_url: str | None = None, timeout: int = DOWNLOAD_TIMEOUT) -> Path:
    """Return ``path``, downloading the export first when it is missing.

    The body is staged in ``<name>.part`` and moved into place only once
    complete, so an interrupted download never leaves a truncated catalog.
    """
    catalog_path = Path(path)
    if catalog_path.exists():
        return catalog_path
    if not source_url:
        raise FileNotFoundError(f"No catalog at {catalog_path} and CATALOG_SOURCE_URL is unset")

    staging = catalog_path.with_name(catalog_path.name + ".part")
    catalog_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Fetching catalog export %s -> %s", source_url, catalog_path)
    try:
        with urlopen(source_url, timeout=timeout) as response, staging.open("wb") as handle:
            shutil.copyfileobj(response, handle)
    except (OSError, URLError) as exc:
        staging.unlink(missing_ok=True)
        raise RuntimeError(f"Catalog download from {source_url} failed") from exc
    staging.replace(catalog_path)
    logger.info("Catalog export saved (%s bytes)", catalog_path.stat().st_size)
    return catalog_path
