"""Operator CLI: submit orders from files and inspect number sequences."""

import asyncio
import json
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from order_intake.api.v1.orders.schemas import OrderSubmission, OrderSubmissionResponse
from order_intake.config import settings
from order_intake.db import StorageGateway, dispose_engine, get_engine
from order_intake.logging import setup_logging
from order_intake.services.allocation import AllocationGuard, SequenceAllocator
from order_intake.services.exceptions import AllocationError
from order_intake.services.orders.order_write_service import OrderWriteService

setup_logging()
logger = structlog.get_logger(__name__)


@click.group()
def cli() -> None:
    """AX order intake tools."""
    pass


@cli.command()
@click.argument("order_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def submit(order_file: Path) -> None:
    """Write the order in ORDER_FILE (same JSON shape as POST /api/v1/orders)."""
    try:
        submission = OrderSubmission.model_validate_json(order_file.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise click.ClickException(f"Invalid order file: {e}") from e

    response = asyncio.run(_submit(submission))
    click.echo(json.dumps(response.model_dump(mode="json", exclude_none=True), indent=2))


async def _submit(submission: OrderSubmission) -> OrderSubmissionResponse:
    try:
        service = OrderWriteService(StorageGateway(get_engine()))
        customer, items = submission.to_domain()
        outcome = await service.process_order(customer, items)
        return OrderSubmissionResponse.from_outcome(outcome, settings.response_mode)
    finally:
        await dispose_engine()


@cli.command("peek-sequence")
@click.argument("sequence_name")
def peek_sequence(sequence_name: str) -> None:
    """Print the next value of SEQUENCE_NAME without advancing it."""
    try:
        value = asyncio.run(_peek(sequence_name))
    except AllocationError as e:
        raise click.ClickException(str(e)) from e
    click.echo(value)


async def _peek(sequence_name: str) -> int:
    try:
        allocator = SequenceAllocator(
            StorageGateway(get_engine()),
            AllocationGuard(),
            data_area_id=settings.data_area_id,
        )
        return await allocator.peek_next(sequence_name)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    cli()
