"""Read-only catalog and customer lookup endpoints."""

from fastapi import APIRouter

from order_intake.api.v1.catalog.dependencies import CatalogServiceDep
from order_intake.api.v1.catalog.schemas import CatalogItemResponse, CustomerResponse, MasterUnitsResponse
from order_intake.api.v1.orders.schemas import ErrorResponse

router = APIRouter()


@router.get("/catalog/items", response_model=list[CatalogItemResponse], operation_id="listItems")
async def list_items(service: CatalogServiceDep) -> list[CatalogItemResponse]:
    """List orderable items."""
    return [CatalogItemResponse.from_item(item) for item in await service.list_items()]


@router.get("/catalog/sites", operation_id="listSites")
async def list_sites(service: CatalogServiceDep) -> list[str]:
    """List sites offered in the order form."""
    return service.list_sites()


@router.get("/catalog/sites/{site}/warehouses", operation_id="listWarehouses")
async def list_warehouses(site: str, service: CatalogServiceDep) -> list[str]:
    """List warehouses of a site."""
    return await service.list_warehouses(site)


@router.get("/catalog/sites/{site}/warehouses/{warehouse}/locations", operation_id="listLocations")
async def list_locations(site: str, warehouse: str, service: CatalogServiceDep) -> list[str]:
    """List locations of a warehouse."""
    return await service.list_locations(site, warehouse)


@router.get("/catalog/units", operation_id="listUnits")
async def list_units(service: CatalogServiceDep) -> list[str]:
    """List sales units."""
    return await service.list_units()


@router.get(
    "/catalog/items/{item_number}/master-units",
    response_model=MasterUnitsResponse,
    operation_id="getMasterUnits",
)
async def get_master_units(item_number: str, service: CatalogServiceDep) -> MasterUnitsResponse:
    """Get master units and master-unit quantity of an item."""
    return MasterUnitsResponse.from_units(await service.get_master_units(item_number))


@router.get(
    "/customers",
    response_model=CustomerResponse,
    operation_id="findCustomer",
    responses={404: {"model": ErrorResponse}},
)
async def find_customer(name: str, service: CatalogServiceDep) -> CustomerResponse:
    """Look up a customer by exact name."""
    return CustomerResponse.from_summary(await service.find_customer(name))
