"""Order submission endpoint."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Body, Response, status

from order_intake.api.v1.orders.dependencies import OrderWriteServiceDep, SettingsDep
from order_intake.api.v1.orders.schemas import ErrorResponse, OrderSubmission, OrderSubmissionResponse
from order_intake.services.orders.exceptions import InvalidOrderPayload

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["orders"])


@router.post(
    "/orders",
    response_model=OrderSubmissionResponse,
    response_model_exclude_none=True,
    operation_id="submitOrder",
    responses={
        207: {"model": OrderSubmissionResponse, "description": "Some items failed"},
        400: {"model": ErrorResponse, "description": "Missing or invalid payload"},
    },
)
async def submit_order(
    service: OrderWriteServiceDep,
    config: SettingsDep,
    response: Response,
    submission: Annotated[OrderSubmission | None, Body()] = None,
) -> OrderSubmissionResponse:
    """
    Write an order into AX.

    - Every line item gets its own order header, line and inventory transaction
      (or one shared header when ORDER_GROUPING=per_order)
    - Failed items never fail the request; inspect `results` (or compare
      `order_numbers` to the submitted items in compat mode)
    - Returns 207 when any item failed, unless RESPONSE_MODE=compat
    """
    if submission is None:
        logger.warning("Rejected order submission without payload")
        raise InvalidOrderPayload("Order payload is required.")

    customer, items = submission.to_domain()
    outcome = await service.process_order(customer, items)

    if config.response_mode != "compat" and not outcome.is_complete:
        response.status_code = status.HTTP_207_MULTI_STATUS

    return OrderSubmissionResponse.from_outcome(outcome, config.response_mode)
