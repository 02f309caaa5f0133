"""API schemas for order submission."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from order_intake.config import ResponseMode
from order_intake.services.orders.types import BatchOutcome, CustomerInfo, ItemResult, ItemStatus, LineItem

SUCCESS_MESSAGE = "Order submitted successfully."

# =============================================================================
# Request Schemas
# =============================================================================


class CustomerPayload(BaseModel):
    """Customer block of an order submission."""

    customer_account: str = Field(min_length=1)
    customer_name: str = ""
    delivery_address: str = ""
    purchase_order: str = ""
    requested_date: date | None = None
    site: str = ""
    warehouse: str = ""

    def to_domain(self) -> CustomerInfo:
        return CustomerInfo(
            customer_account=self.customer_account,
            customer_name=self.customer_name,
            delivery_address=self.delivery_address,
            purchase_order=self.purchase_order,
            requested_date=self.requested_date,
            site=self.site,
            warehouse=self.warehouse,
        )


class LineItemPayload(BaseModel):
    """One line of an order submission."""

    item_number: str = Field(min_length=1)
    item_name: str = ""
    quantity: Decimal = Field(gt=0)
    unit: str = ""
    packing_unit: str = ""
    packing_unit_qty: Decimal = Decimal(0)
    master_unit: str = ""
    master_unit_qty: Decimal = Decimal(0)
    site: str = ""
    warehouse: str = ""
    location: str = ""

    def to_domain(self) -> LineItem:
        return LineItem(
            item_number=self.item_number,
            item_name=self.item_name,
            quantity=self.quantity,
            unit=self.unit,
            packing_unit=self.packing_unit,
            packing_unit_qty=self.packing_unit_qty,
            master_unit=self.master_unit,
            master_unit_qty=self.master_unit_qty,
            site=self.site,
            warehouse=self.warehouse,
            location=self.location,
        )


class OrderSubmission(BaseModel):
    """Order submission: one customer and its line items."""

    customer: CustomerPayload
    items: list[LineItemPayload]

    def to_domain(self) -> tuple[CustomerInfo, list[LineItem]]:
        return self.customer.to_domain(), [item.to_domain() for item in self.items]


# =============================================================================
# Response Schemas
# =============================================================================


class ItemResultResponse(BaseModel):
    """Outcome of one submitted line item."""

    position: int
    item_number: str
    status: ItemStatus
    order_code: str | None
    reason: str | None

    @classmethod
    def from_result(cls, result: ItemResult) -> "ItemResultResponse":
        return cls(
            position=result.position,
            item_number=result.item_number,
            status=result.status,
            order_code=result.order_code,
            reason=result.reason,
        )


class OrderSubmissionResponse(BaseModel):
    """Order submission response.

    ``results`` is omitted in compat response mode.
    """

    message: str
    order_numbers: list[str]
    results: list[ItemResultResponse] | None = None

    @classmethod
    def from_outcome(cls, outcome: BatchOutcome, mode: ResponseMode) -> "OrderSubmissionResponse":
        if mode == "compat":
            return cls(message=SUCCESS_MESSAGE, order_numbers=outcome.order_codes)

        message = SUCCESS_MESSAGE
        if not outcome.is_complete:
            message = f"Order submitted with {len(outcome.failed)} failed item(s)."
        return cls(
            message=message,
            order_numbers=outcome.order_codes,
            results=[ItemResultResponse.from_result(result) for result in outcome.results],
        )


class ErrorResponse(BaseModel):
    """Error body for rejected requests."""

    error: str
    detail: list[dict[str, object]] | None = None
