"""Named counter allocation backed by NUMBERSEQUENCETABLE."""

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_random

from order_intake.db.gateway import StorageGateway
from order_intake.models.number_sequence import NumberSequenceTable
from order_intake.services.allocation.exceptions import (
    InvalidSequenceValue,
    SequenceConflict,
    SequenceNotFound,
)
from order_intake.services.allocation.guard import AllocationGuard
from order_intake.services.exceptions import AllocationError

logger = structlog.get_logger(__name__)

_table = NumberSequenceTable.__table__  # type: ignore[attr-defined]


def parse_counter(sequence_name: str, raw: str) -> int:
    """Parse a stored counter value."""
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidSequenceValue(f"Sequence {sequence_name} holds a non-numeric value: {raw!r}") from None


def encode_counter(value: int, template: str) -> str:
    """Encode ``value`` in the same representation as ``template``.

    Zero-padding width is kept: ``encode_counter(100, "00099") == "00100"``.
    """
    return str(value).zfill(len(template.strip()))


def format_inventtrans_id(number: int, suffix: str) -> str:
    """Render an inventory transaction id, e.g. ``00001234_078``."""
    return f"{number:08d}{suffix}"


class SequenceAllocator:
    """Reads and advances named counters for one data area.

    ``peek_next`` and ``advance`` are independent round-trips. ``allocate``
    combines them under the configured AllocationGuard; with the atomic guard
    the advance becomes a compare-and-swap that is retried on conflict.
    """

    def __init__(
        self,
        gateway: StorageGateway,
        guard: AllocationGuard,
        *,
        data_area_id: str,
        max_attempts: int = 5,
    ):
        self.gateway = gateway
        self.guard = guard
        self.data_area_id = data_area_id
        self.max_attempts = max_attempts

    def _matches(self, sequence_name: str) -> tuple[object, ...]:
        return (
            _table.c.dataareaid == self.data_area_id,
            _table.c.numbersequence == sequence_name,
        )

    async def _read(self, sequence_name: str) -> str:
        statement = select(_table.c.nextrec).where(*self._matches(sequence_name))
        try:
            rows = await self.gateway.query(statement, lambda row: row["nextrec"], strict=True)
        except SQLAlchemyError as e:
            raise AllocationError(f"Could not read sequence {sequence_name}: {e}") from e
        if not rows or rows[0] is None:
            raise SequenceNotFound(f"Sequence {sequence_name} not found in data area {self.data_area_id}")
        return str(rows[0])

    async def _write(self, sequence_name: str, statement: Executable) -> int:
        try:
            return await self.gateway.execute(statement, strict=True)
        except SQLAlchemyError as e:
            raise AllocationError(f"Could not advance sequence {sequence_name}: {e}") from e

    async def peek_next(self, sequence_name: str) -> int:
        """Return the counter's current value without reserving it."""
        return parse_counter(sequence_name, await self._read(sequence_name))

    async def advance(self, sequence_name: str) -> None:
        """Increment the stored counter by one. Calling twice advances twice."""
        raw = await self._read(sequence_name)
        next_raw = encode_counter(parse_counter(sequence_name, raw) + 1, raw)
        statement = update(_table).where(*self._matches(sequence_name)).values(nextrec=next_raw)
        if await self._write(sequence_name, statement) == 0:
            raise SequenceNotFound(f"Sequence {sequence_name} disappeared while advancing")

    async def allocate(self, sequence_name: str) -> int:
        """Take the current value for use and advance the counter past it."""
        if self.guard.retry_on_conflict:
            return await self._allocate_swap(sequence_name)

        async with self.guard.hold(f"sequence:{sequence_name}"):
            value = await self.peek_next(sequence_name)
            await self.advance(sequence_name)

        logger.debug("Allocated sequence value", sequence=sequence_name, value=value)
        return value

    async def _allocate_swap(self, sequence_name: str) -> int:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(SequenceConflict),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_random(min=0, max=0.05),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                raw = await self._read(sequence_name)
                value = parse_counter(sequence_name, raw)
                statement = (
                    update(_table)
                    .where(*self._matches(sequence_name), _table.c.nextrec == raw)
                    .values(nextrec=encode_counter(value + 1, raw))
                )
                if await self._write(sequence_name, statement) == 0:
                    logger.warning(
                        "Sequence advanced concurrently, retrying",
                        sequence=sequence_name,
                        attempt=attempt.retry_state.attempt_number,
                        max_attempts=self.max_attempts,
                    )
                    raise SequenceConflict(f"Sequence {sequence_name} changed while allocating")

                logger.debug("Allocated sequence value", sequence=sequence_name, value=value)
                return value

        raise SequenceConflict(f"Failed to allocate from {sequence_name} after {self.max_attempts} attempts")
