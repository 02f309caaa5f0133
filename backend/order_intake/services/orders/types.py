"""Request-scoped order entities and per-item write results."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import StrEnum


@dataclass(frozen=True)
class CustomerInfo:
    """Billing and shipping identifiers of the ordering customer."""

    customer_account: str
    delivery_address: str = ""
    purchase_order: str = ""
    requested_date: date | None = None
    site: str = ""
    warehouse: str = ""
    customer_name: str = ""


@dataclass(frozen=True)
class LineItem:
    """One ordered item with its units and inventory location."""

    item_number: str
    item_name: str = ""
    quantity: Decimal = Decimal(0)
    unit: str = ""
    packing_unit: str = ""
    packing_unit_qty: Decimal = Decimal(0)
    master_unit: str = ""
    master_unit_qty: Decimal = Decimal(0)
    site: str = ""
    warehouse: str = ""
    location: str = ""


class ItemStatus(StrEnum):
    """How far the write cycle for one line item got."""

    COMPLETED = "completed"
    ALLOCATION_FAILED = "allocation_failed"
    HEADER_FAILED = "header_failed"
    LINE_FAILED = "line_failed"
    INVENTTRANS_FAILED = "inventory_transaction_failed"


@dataclass
class ItemResult:
    """Outcome of writing one line item.

    ``order_code`` is set whenever the order header exists, even if the line
    or inventory transaction failed afterwards.
    """

    position: int
    item_number: str
    status: ItemStatus
    order_code: str | None = None
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ItemStatus.COMPLETED


@dataclass
class BatchOutcome:
    """Per-item results of one submission, in submission order."""

    results: list[ItemResult] = field(default_factory=list)

    @property
    def order_codes(self) -> list[str]:
        """Created order codes in submission order, one per written header."""
        codes: list[str] = []
        for result in self.results:
            if result.order_code is not None and result.order_code not in codes:
                codes.append(result.order_code)
        return codes

    @property
    def is_complete(self) -> bool:
        return all(result.succeeded for result in self.results)

    @property
    def failed(self) -> list[ItemResult]:
        return [result for result in self.results if not result.succeeded]
