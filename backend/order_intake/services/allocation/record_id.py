"""Gap-filling RECID allocation.

AX rows carry a synthetic RECID that must be unique per table. Instead of
appending after the maximum, the allocator reuses the lowest id whose
predecessor exists but which is itself free, so ids released by deletions
are reclaimed.
"""

from collections.abc import Callable
from typing import Any

import structlog
from sqlalchemy import Table, exists, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_random

from order_intake.db.gateway import StorageGateway
from order_intake.services.allocation.exceptions import RecordIdConflict
from order_intake.services.allocation.guard import AllocationGuard
from order_intake.services.exceptions import AllocationError

logger = structlog.get_logger(__name__)

RowBuilder = Callable[[int], dict[str, Any]]


def _table_of(model: type[SQLModel]) -> Table:
    table: Table = model.__table__  # type: ignore[attr-defined]
    return table


class RecordIdAllocator:
    """Allocates RECIDs and inserts rows with them.

    Usage:
        recid, rowcount = await allocator.insert(
            SalesTable,
            lambda recid: {"recid": recid, "salesid": order_code, ...},
        )
    """

    def __init__(self, gateway: StorageGateway, guard: AllocationGuard, *, max_attempts: int = 5):
        self.gateway = gateway
        self.guard = guard
        self.max_attempts = max_attempts

    async def next_id(self, model: type[SQLModel]) -> int:
        """Return the smallest ``recid + 1`` that is not itself taken, or 1 for an empty table.

        {1, 2, 4} -> 3, {1, 2, 3} -> 4, {} -> 1. Nothing is reserved.
        """
        table = _table_of(model)
        current = table.alias("cur")
        following = table.alias("nxt")
        candidate = (current.c.recid + 1).label("candidate")
        statement = (
            select(candidate)
            .where(~exists().where(following.c.recid == current.c.recid + 1))
            .order_by(candidate)
            .limit(1)
        )
        try:
            rows = await self.gateway.query(statement, lambda row: row["candidate"], strict=True)
        except SQLAlchemyError as e:
            raise AllocationError(f"Could not scan {table.name} for a free record id: {e}") from e
        return int(rows[0]) if rows else 1

    async def insert(self, model: type[SQLModel], build_row: RowBuilder) -> tuple[int, int]:
        """Allocate a RECID, insert ``build_row(recid)`` and return (recid, rowcount).

        Insert failures are logged and reported as rowcount 0. Raises
        AllocationError when no id can be allocated.
        """
        table = _table_of(model)
        if self.guard.retry_on_conflict:
            return await self._insert_retrying(table, model, build_row)

        async with self.guard.hold(f"recid:{table.name}"):
            recid = await self.next_id(model)
            rowcount = await self.gateway.execute(insert(table).values(build_row(recid)))
        return recid, rowcount

    async def _insert_retrying(self, table: Table, model: type[SQLModel], build_row: RowBuilder) -> tuple[int, int]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RecordIdConflict),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_random(min=0, max=0.05),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                recid = await self.next_id(model)
                try:
                    rowcount = await self.gateway.execute(insert(table).values(build_row(recid)), strict=True)
                except IntegrityError as e:
                    if await self._is_taken(table, recid):
                        logger.warning(
                            "Record id taken concurrently, retrying",
                            table=table.name,
                            recid=recid,
                            attempt=attempt.retry_state.attempt_number,
                            max_attempts=self.max_attempts,
                        )
                        raise RecordIdConflict(f"{table.name} recid {recid} was taken") from e
                    logger.error("Database command failed", table=table.name, recid=recid, error=str(e))
                    return recid, 0
                except SQLAlchemyError as e:
                    logger.error("Database command failed", table=table.name, recid=recid, error=str(e))
                    return recid, 0
                return recid, rowcount

        raise RecordIdConflict(f"Failed to allocate a {table.name} recid after {self.max_attempts} attempts")

    async def _is_taken(self, table: Table, recid: int) -> bool:
        statement = select(table.c.recid).where(table.c.recid == recid)
        rows = await self.gateway.query(statement, lambda row: row["recid"])
        return bool(rows)
