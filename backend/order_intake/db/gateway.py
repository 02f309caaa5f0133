"""Parameterized query/execute primitives over the AX database.

Every call checks out its own pooled connection and runs in its own implicit
transaction. Nothing here spans statements: a failed insert never rolls back
an earlier one.
"""

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import structlog
from sqlalchemy import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql import Executable

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RowMapper = Callable[[RowMapping], T]
Params = Mapping[str, Any]


class StorageGateway:
    """Thin wrapper over an async engine with lenient error handling.

    ``query`` and ``execute`` log and swallow database errors by default
    (empty list / zero rows). Pass ``strict=True`` to re-raise instead; the
    allocators need to tell "no rows" apart from "query failed".
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def query(
        self,
        statement: Executable,
        row_mapper: RowMapper[T],
        params: Params | None = None,
        *,
        strict: bool = False,
    ) -> list[T]:
        """Run a read statement and map every row."""
        try:
            async with self.engine.connect() as conn:
                if params:
                    result = await conn.execute(statement, dict(params))
                else:
                    result = await conn.execute(statement)
                return [row_mapper(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            if strict:
                raise
            logger.error("Database query failed", error=str(e))
            return []

    async def execute(
        self,
        statement: Executable,
        params: Params | None = None,
        *,
        strict: bool = False,
    ) -> int:
        """Run a write statement and return the affected row count (0 on failure)."""
        try:
            async with self.engine.begin() as conn:
                if params:
                    result = await conn.execute(statement, dict(params))
                else:
                    result = await conn.execute(statement)
                rowcount: int = result.rowcount  # type: ignore[attr-defined]
                return max(rowcount, 0)
        except SQLAlchemyError as e:
            if strict:
                raise
            logger.error("Database command failed", error=str(e))
            return 0
