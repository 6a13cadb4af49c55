"""Read-only inventory lookup service."""
