"""Order write pipeline.

Materializes a submitted order as AX rows. For every line item, strictly in
submission order:

1. allocate an order number and build the order code (prefix + number)
2. allocate a header RECID and insert the SALESTABLE row
3. resolve the customer group, allocate an inventory transaction id and
   resolve the inventory dimension
4. allocate a line RECID and insert the SALESLINE row
5. allocate an INVENTTRANS RECID and insert the inventory transaction

Each insert commits on its own. A failure stops the remaining steps for that
item only; rows already written stay written. An item whose header was written
always contributes its order code to the outcome.

With ``order_grouping="per_order"`` steps 1-2 run once per submission and every
item is written as a numbered line of that single header.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import structlog

from order_intake.config import Settings, settings
from order_intake.db.gateway import StorageGateway
from order_intake.models.inventory import InventTrans
from order_intake.models.sales import SalesLine, SalesTable
from order_intake.services.allocation import (
    AllocationGuard,
    RecordIdAllocator,
    SequenceAllocator,
    build_guard,
    format_inventtrans_id,
)
from order_intake.services.exceptions import AllocationError
from order_intake.services.orders.exceptions import (
    HeaderNotWritten,
    InventTransNotWritten,
    LineNotWritten,
)
from order_intake.services.orders.types import (
    BatchOutcome,
    CustomerInfo,
    ItemResult,
    ItemStatus,
    LineItem,
)
from order_intake.services.reference.resolver import ReferenceResolver
from order_intake.utils.datetime_utils import utc_now

logger = structlog.get_logger(__name__)


class OrderWriteService:
    """Writes submitted orders into SALESTABLE, SALESLINE and INVENTTRANS.

    Note: this service never raises for a failed item. Failures are logged
    and recorded as ItemResult entries in the returned BatchOutcome.
    """

    def __init__(
        self,
        gateway: StorageGateway,
        *,
        config: Settings = settings,
        guard: AllocationGuard | None = None,
    ):
        self.gateway = gateway
        self.config = config
        self.guard = guard or build_guard(config.allocation_strategy, lock_ttl_ms=config.allocation_lock_ttl_ms)
        self.sequences = SequenceAllocator(
            gateway,
            self.guard,
            data_area_id=config.data_area_id,
            max_attempts=config.allocation_max_attempts,
        )
        self.record_ids = RecordIdAllocator(gateway, self.guard, max_attempts=config.allocation_max_attempts)
        self.resolver = ReferenceResolver(gateway, data_area_id=config.data_area_id)

    async def process_order(self, customer: CustomerInfo, items: Sequence[LineItem]) -> BatchOutcome:
        """Write every line item and return the per-item outcome.

        ``outcome.order_codes`` holds one order code per written header, in
        submission order. Resubmitting the same order writes it again under
        new codes.
        """
        log = logger.bind(customer_account=customer.customer_account, item_count=len(items))
        log.info("Processing order", order_grouping=self.config.order_grouping)

        if self.config.order_grouping == "per_order":
            outcome = await self._process_grouped(customer, items)
        else:
            outcome = BatchOutcome()
            for position, item in enumerate(items, start=1):
                outcome.results.append(await self._process_item(customer, item, position))

        log.info(
            "Order processed",
            order_codes=outcome.order_codes,
            failed_items=len(outcome.failed),
        )
        return outcome

    async def _process_item(self, customer: CustomerInfo, item: LineItem, position: int) -> ItemResult:
        """Write header, line and inventory transaction for one item."""
        try:
            order_code = await self._write_header(customer)
        except AllocationError as e:
            logger.error("Order number or header id allocation failed", item_number=item.item_number, error=str(e))
            return ItemResult(position, item.item_number, ItemStatus.ALLOCATION_FAILED, reason=str(e))
        except HeaderNotWritten as e:
            logger.error("Order header insert failed, skipping item", item_number=item.item_number, error=str(e))
            return ItemResult(position, item.item_number, ItemStatus.HEADER_FAILED, reason=str(e))

        return await self._write_item(customer, item, order_code, position=position, line_number=1)

    async def _process_grouped(self, customer: CustomerInfo, items: Sequence[LineItem]) -> BatchOutcome:
        """Write one header for the whole submission and one line per item."""
        outcome = BatchOutcome()
        try:
            order_code = await self._write_header(customer)
        except (AllocationError, HeaderNotWritten) as e:
            status = ItemStatus.ALLOCATION_FAILED if isinstance(e, AllocationError) else ItemStatus.HEADER_FAILED
            logger.error("Order header could not be written, skipping all items", error=str(e))
            outcome.results.extend(
                ItemResult(position, item.item_number, status, reason=str(e))
                for position, item in enumerate(items, start=1)
            )
            return outcome

        for position, item in enumerate(items, start=1):
            outcome.results.append(
                await self._write_item(customer, item, order_code, position=position, line_number=position)
            )
        return outcome

    async def _write_header(self, customer: CustomerInfo) -> str:
        """Allocate an order code and insert its SALESTABLE row.

        Raises AllocationError or HeaderNotWritten.
        """
        number = await self.sequences.allocate(self.config.sales_order_sequence)
        order_code = f"{self.config.order_code_prefix}{number}"
        created = utc_now()

        recid, rowcount = await self.record_ids.insert(
            SalesTable,
            lambda recid: self._header_row(recid, order_code, customer, created),
        )
        if rowcount == 0:
            raise HeaderNotWritten(f"Order header {order_code} was not inserted")

        logger.info("Order header written", order_code=order_code, recid=recid)
        return order_code

    async def _write_item(
        self,
        customer: CustomerInfo,
        item: LineItem,
        order_code: str,
        *,
        position: int,
        line_number: int,
    ) -> ItemResult:
        """Write the line and inventory transaction of an item whose header exists."""
        log = logger.bind(order_code=order_code, item_number=item.item_number)

        try:
            customer_group = await self.resolver.resolve_customer_group(customer.customer_account)
            inventtrans_number = await self.sequences.allocate(self.config.inventtrans_sequence)
            inventtrans_id = format_inventtrans_id(inventtrans_number, self.config.inventtrans_suffix)
            inventdim_id = await self.resolver.resolve_inventory_dimension(item.site, item.warehouse, item.location)

            created = utc_now()
            _, rowcount = await self.record_ids.insert(
                SalesLine,
                lambda recid: self._line_row(
                    recid,
                    order_code,
                    line_number,
                    customer,
                    item,
                    customer_group=customer_group,
                    inventdim_id=inventdim_id,
                    inventtrans_id=inventtrans_id,
                    created=created,
                ),
            )
            if rowcount == 0:
                raise LineNotWritten(f"Order line for {item.item_number} on {order_code} was not inserted")
        except (AllocationError, LineNotWritten) as e:
            log.error("Order line failed, header kept", error=str(e))
            return ItemResult(position, item.item_number, ItemStatus.LINE_FAILED, order_code, str(e))

        try:
            _, rowcount = await self.record_ids.insert(
                InventTrans,
                lambda recid: self._inventtrans_row(
                    recid,
                    order_code,
                    customer,
                    item,
                    inventdim_id=inventdim_id,
                    inventtrans_id=inventtrans_id,
                ),
            )
            if rowcount == 0:
                raise InventTransNotWritten(f"Inventory transaction {inventtrans_id} was not inserted")
        except (AllocationError, InventTransNotWritten) as e:
            log.error("Inventory transaction failed, header and line kept", error=str(e))
            return ItemResult(position, item.item_number, ItemStatus.INVENTTRANS_FAILED, order_code, str(e))

        log.info("Order line written", inventtrans_id=inventtrans_id, inventdim_id=inventdim_id)
        return ItemResult(position, item.item_number, ItemStatus.COMPLETED, order_code)

    def _header_row(
        self,
        recid: int,
        order_code: str,
        customer: CustomerInfo,
        created: datetime,
    ) -> dict[str, Any]:
        cfg = self.config
        return {
            "recid": recid,
            "dataareaid": cfg.data_area_id,
            "salesid": order_code,
            "salesname": customer.customer_name,
            "custaccount": customer.customer_account,
            "invoiceaccount": customer.customer_account,
            "deliveryaddress": customer.delivery_address,
            "purchorderformnum": customer.purchase_order,
            "customerref": customer.purchase_order,
            "deliverydate": customer.requested_date,
            "shippingdaterequested": customer.requested_date,
            "inventsiteid": customer.site,
            "inventlocationid": customer.warehouse,
            "currencycode": cfg.currency_code,
            "dlvmode": cfg.delivery_mode,
            "languageid": cfg.language_id,
            "salestype": cfg.sales_type,
            "salesstatus": cfg.sales_status,
            "salesresponsible": cfg.sales_responsible,
            "dimension": cfg.dimension_department,
            "dimension2_": cfg.dimension_cost_center,
            "createddatetime": created,
        }

    def _line_row(
        self,
        recid: int,
        order_code: str,
        line_number: int,
        customer: CustomerInfo,
        item: LineItem,
        *,
        customer_group: str,
        inventdim_id: str,
        inventtrans_id: str,
        created: datetime,
    ) -> dict[str, Any]:
        cfg = self.config
        return {
            "recid": recid,
            "dataareaid": cfg.data_area_id,
            "salesid": order_code,
            "linenum": line_number,
            "itemid": item.item_number,
            "name": item.item_name,
            "salesqty": item.quantity,
            "salesunit": item.unit,
            "qtyordered": item.quantity,
            "remainsalesphysical": item.quantity,
            "packingunit": item.packing_unit,
            "packingunitqty": item.packing_unit_qty,
            "masterunit": item.master_unit,
            "masterunitqty": item.master_unit_qty,
            "custgroup": customer_group,
            "custaccount": customer.customer_account,
            "inventdimid": inventdim_id,
            "inventtransid": inventtrans_id,
            "currencycode": cfg.currency_code,
            "salestype": cfg.sales_type,
            "salesstatus": cfg.sales_status,
            "shippingdaterequested": customer.requested_date,
            "dimension": cfg.dimension_department,
            "dimension2_": cfg.dimension_cost_center,
            "createddatetime": created,
        }

    def _inventtrans_row(
        self,
        recid: int,
        order_code: str,
        customer: CustomerInfo,
        item: LineItem,
        *,
        inventdim_id: str,
        inventtrans_id: str,
    ) -> dict[str, Any]:
        cfg = self.config
        return {
            "recid": recid,
            "dataareaid": cfg.data_area_id,
            "inventtransid": inventtrans_id,
            "itemid": item.item_number,
            "qty": -item.quantity,  # issue from inventory
            "custvendac": customer.customer_account,
            "inventdimid": inventdim_id,
            "transrefid": order_code,
            "transtype": cfg.inventtrans_type,
            "statusissue": cfg.inventtrans_status_issue,
            "dateexpected": customer.requested_date,
            "currencycode": cfg.currency_code,
        }
