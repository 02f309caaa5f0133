"""Catalog lookup service.

Dropdown data for the order entry form: items, sites, warehouses, locations
and units, plus customer lookup by name. All reads go through the lenient
gateway path, so a failing query yields an empty list instead of an error.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy import distinct, func, select
from sqlalchemy.sql.elements import ColumnElement

from order_intake.config import Settings, settings
from order_intake.db.gateway import StorageGateway
from order_intake.models.customer import CustTable
from order_intake.models.inventory import InventDim, InventTable
from order_intake.models.sales import SalesLine
from order_intake.services.catalog.exceptions import CustomerNotFound

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CatalogItem:
    item_number: str
    item_name: str


@dataclass(frozen=True)
class CustomerSummary:
    customer_account: str
    delivery_address: str


@dataclass
class MasterUnits:
    master_units: list[str] = field(default_factory=list)
    master_qty: str = ""


class CatalogService:
    """Read-only lookups against AX master data."""

    def __init__(self, gateway: StorageGateway, *, config: Settings = settings):
        self.gateway = gateway
        self.config = config

    async def list_items(self) -> list[CatalogItem]:
        """First items of the data area's configured cost center."""
        statement = (
            select(InventTable.itemid, InventTable.itemname)
            .where(
                InventTable.dataareaid == self.config.data_area_id,
                InventTable.dimension2_ == self.config.dimension_cost_center,
            )
            .order_by(InventTable.itemid)
            .limit(self.config.catalog_item_limit)
        )
        items = await self.gateway.query(
            statement,
            lambda row: CatalogItem(item_number=row["itemid"] or "", item_name=row["itemname"] or ""),
        )
        logger.debug("Fetched catalog items", count=len(items))
        return items

    def list_sites(self) -> list[str]:
        return list(self.config.catalog_sites)

    async def list_warehouses(self, site: str) -> list[str]:
        statement = (
            select(distinct(InventDim.inventlocationid).label("warehouse"))
            .where(
                InventDim.inventsiteid == site,
                _not_blank(InventDim.inventlocationid),
            )
            .order_by("warehouse")
        )
        return await self.gateway.query(statement, lambda row: row["warehouse"])

    async def list_locations(self, site: str, warehouse: str) -> list[str]:
        statement = (
            select(distinct(InventDim.wmslocationid).label("location"))
            .where(
                InventDim.inventsiteid == site,
                InventDim.inventlocationid == warehouse,
                _not_blank(InventDim.wmslocationid),
            )
            .order_by("location")
        )
        return await self.gateway.query(statement, lambda row: row["location"])

    async def list_units(self) -> list[str]:
        """Sales units seen on existing order lines."""
        statement = (
            select(distinct(SalesLine.salesunit).label("unit"))
            .where(_not_blank(SalesLine.salesunit))
            .order_by("unit")
        )
        return await self.gateway.query(statement, lambda row: row["unit"])

    async def get_master_units(self, item_number: str) -> MasterUnits:
        """Master units used for an item and the first known master-unit quantity."""
        statement = (
            select(SalesLine.masterunit, SalesLine.masterunitqty)
            .distinct()
            .where(
                SalesLine.itemid == item_number,
                _not_blank(SalesLine.masterunit),
            )
        )
        rows = await self.gateway.query(
            statement,
            lambda row: (row["masterunit"] or "", row["masterunitqty"]),
        )

        result = MasterUnits()
        for unit, qty in rows:
            if unit and unit not in result.master_units:
                result.master_units.append(unit)
            if not result.master_qty and qty is not None:
                result.master_qty = _format_qty(qty)

        logger.info(
            "Fetched master units",
            item_number=item_number,
            master_units=result.master_units,
            master_qty=result.master_qty,
        )
        return result

    async def find_customer(self, name: str) -> CustomerSummary:
        """First customer with exactly this name. Raises CustomerNotFound."""
        statement = (
            select(CustTable.accountnum, CustTable.address)
            .where(CustTable.dataareaid == self.config.data_area_id, CustTable.name == name)
            .limit(1)
        )
        customers = await self.gateway.query(
            statement,
            lambda row: CustomerSummary(
                customer_account=row["accountnum"] or "",
                delivery_address=row["address"] or "",
            ),
        )
        if not customers:
            logger.info("Customer not found", name=name)
            raise CustomerNotFound("Customer not found.")
        return customers[0]


def _format_qty(qty: object) -> str:
    """Render a numeric quantity without trailing zeros ("12.000000" -> "12")."""
    text = str(qty)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _not_blank(column: Any) -> ColumnElement[bool]:
    """AX stores empty strings as a single space."""
    return func.ltrim(func.rtrim(column)) != ""
