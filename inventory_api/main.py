"""FastAPI application wiring the inventory lookup service."""
from __future__ import annotations

import asyncio
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from .auth import require_api_key
from .config import settings
from .errors import AuthFailure, CatalogUnavailable, InventoryError
from .es_client import get_client
from .importer import prepare_catalog
from .responder import error_body
from .search_service import InventoryService, create_catalog, get_service

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# ``force=True`` replaces uvicorn's default handlers so pipeline timings share one format.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "elastic_transport"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

app = FastAPI(title="Inventory Lookup Service")

# CORS applies only to the inventory namespace, so it lives on a mounted sub-application.
inventory_app = FastAPI(title="Inventory API")
inventory_app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=[settings.api_key_header],
)


@inventory_app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    if isinstance(exc, AuthFailure):
        body = {"code": "rest_forbidden", "message": exc.message, "data": {"status": exc.status_code}}
    else:
        logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
        body = error_body(exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


@inventory_app.get(settings.api_route, dependencies=[Depends(require_api_key)])
async def inventory(request: Request, service: InventoryService = Depends(get_service)):
    payload = await asyncio.to_thread(service.handle, dict(request.query_params))
    return payload


app.mount(settings.api_namespace.rstrip("/"), inventory_app)


@app.on_event("startup")
async def startup_event() -> None:
    if settings.catalog_backend != "elasticsearch":
        logger.info("Using %s catalog backend at %s", settings.catalog_backend, settings.catalog_path)
        return
    await prepare_catalog(get_client(settings), settings)


@app.get("/health")
async def health() -> dict:
    try:
        catalog = await asyncio.to_thread(create_catalog, settings)
    except CatalogUnavailable:
        return {"catalog": settings.catalog_backend, "available": False}
    available = await asyncio.to_thread(catalog.is_available)
    return {
        "catalog": catalog.name,
        "available": available,
    }
