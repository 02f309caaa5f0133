"""Reference data resolution for the order write.

Translates business keys into AX codes. A miss or a failed lookup is never
fatal: it resolves to an empty string, which is written as a blank attribute.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Select

from order_intake.db.gateway import StorageGateway
from order_intake.models.customer import CustTable
from order_intake.models.inventory import InventDim
from order_intake.services.exceptions import ResolutionError

logger = structlog.get_logger(__name__)


class ReferenceResolver:
    """Looks up inventory dimensions and customer groups for one data area."""

    def __init__(self, gateway: StorageGateway, *, data_area_id: str):
        self.gateway = gateway
        self.data_area_id = data_area_id

    async def resolve_inventory_dimension(self, site: str, warehouse: str, location: str) -> str:
        """Return the INVENTDIMID for a site/warehouse/location, or "" when none matches.

        When several rows match, the first one returned by the database wins.
        """
        statement = (
            select(InventDim.inventdimid)
            .where(
                InventDim.dataareaid == self.data_area_id,
                InventDim.inventsiteid == site,
                InventDim.inventlocationid == warehouse,
                InventDim.wmslocationid == location,
            )
            .limit(1)
        )
        try:
            return await self._first(statement, "inventdimid")
        except ResolutionError as e:
            logger.warning(
                "Inventory dimension not resolved",
                site=site,
                warehouse=warehouse,
                location=location,
                reason=str(e),
            )
            return ""

    async def resolve_customer_group(self, customer_account: str) -> str:
        """Return the customer's CUSTGROUP, or "" when the account is unknown."""
        statement = (
            select(CustTable.custgroup)
            .where(
                CustTable.dataareaid == self.data_area_id,
                CustTable.accountnum == customer_account,
            )
            .limit(1)
        )
        try:
            return await self._first(statement, "custgroup")
        except ResolutionError as e:
            logger.warning("Customer group not resolved", customer_account=customer_account, reason=str(e))
            return ""

    async def _first(self, statement: Select[tuple[str]], column: str) -> str:
        try:
            rows = await self.gateway.query(statement, lambda row: row[column], strict=True)
        except SQLAlchemyError as e:
            raise ResolutionError(f"Lookup failed: {e}") from e
        if not rows or not rows[0]:
            raise ResolutionError("No matching row")
        return str(rows[0]).strip()
