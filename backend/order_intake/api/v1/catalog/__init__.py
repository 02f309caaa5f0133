"""Catalog API package."""

from order_intake.api.v1.catalog.routes import router

__all__ = ["router"]
