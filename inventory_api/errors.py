"""Error types surfaced by the inventory API."""
from __future__ import annotations


class InventoryError(Exception):
    """Base error rendered as a JSON body with ``status_code``."""

    status_code = 500
    message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class AuthFailure(InventoryError):
    status_code = 401
    message = "Unauthorized"


class CatalogUnavailable(InventoryError):
    status_code = 503
    message = "Catalog unavailable"


class ProductNotFound(InventoryError):
    status_code = 404
    message = "Not found"


class ProductUnreadable(InventoryError):
    status_code = 500
    message = "Product could not be loaded"
