"""FastAPI dependencies for catalog lookups."""

from typing import Annotated

from fastapi import Depends

from order_intake.config import Settings, get_settings
from order_intake.db import StorageGateway, get_gateway
from order_intake.services.catalog.catalog_service import CatalogService


def get_catalog_service(
    gateway: Annotated[StorageGateway, Depends(get_gateway)],
    config: Annotated[Settings, Depends(get_settings)],
) -> CatalogService:
    """Get a CatalogService instance."""
    return CatalogService(gateway, config=config)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
