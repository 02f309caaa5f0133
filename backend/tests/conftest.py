"""
Test configuration: fixtures for a SQLite copy of the AX schema, seeded
reference data, and an API test client.

Every test gets its own database file, so counters and RECIDs start from the
same seeded state. A file (not :memory:) is used so concurrent connections in
the allocation tests see each other's writes.
"""

from datetime import datetime
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import Insert, insert, select
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql import Executable
from sqlmodel import SQLModel

from order_intake.config import Settings, get_settings, settings
from order_intake.db import StorageGateway, get_gateway
from order_intake.main import app
from order_intake.models import CustTable, InventDim, InventTable, NumberSequenceTable, SalesLine

DATA_AREA = settings.data_area_id
SEEDED_AT = datetime(2024, 1, 15, 8, 30)


async def seed_rows(engine: AsyncEngine, model: type[SQLModel], rows: list[dict[str, Any]]) -> None:
    """Insert raw rows into a table, one statement per row."""
    table = model.__table__  # type: ignore[attr-defined]
    async with engine.begin() as conn:
        for row in rows:
            await conn.execute(insert(table).values(**row))


async def fetch_rows(engine: AsyncEngine, model: type[SQLModel]) -> list[dict[str, Any]]:
    """Read every row of a table ordered by RECID."""
    table = model.__table__  # type: ignore[attr-defined]
    async with engine.connect() as conn:
        result = await conn.execute(select(table).order_by(table.c.recid))
        return [dict(row) for row in result.mappings()]


class FakeRedis:
    """In-memory stand-in for the two Redis commands the lock uses.

    Keys listed in ``busy_keys`` are always held by someone else.
    """

    def __init__(self, busy_keys: set[str] | None = None):
        self.store: dict[str, str] = {}
        self.busy_keys = busy_keys or set()

    async def set(self, key, value, nx=False, px=None):
        if key in self.busy_keys or (nx and key in self.store):
            return None
        self.store[key] = value
        return True

    async def eval(self, script, numkeys, key, token):
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0


class RecordingGateway(StorageGateway):
    """Gateway that records inserts and can make inserts into some tables affect no rows."""

    def __init__(self, engine: AsyncEngine, reject_tables: set[str] | None = None):
        super().__init__(engine)
        self.reject_tables = reject_tables or set()
        self.inserted_tables: list[str] = []

    async def execute(self, statement: Executable, params: Any = None, *, strict: bool = False) -> int:
        if isinstance(statement, Insert):
            table_name = statement.table.name  # type: ignore[attr-defined]
            self.inserted_tables.append(table_name)
            if table_name in self.reject_tables:
                return 0
        return await super().execute(statement, params, strict=strict)


@pytest.fixture
async def engine(tmp_path):
    """Create a fresh SQLite database with the AX tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ax.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def gateway(engine):
    return StorageGateway(engine)


@pytest.fixture
def config() -> Settings:
    """Settings used by the pipeline under test (defaults with more conflict retries)."""
    return settings.model_copy(update={"allocation_max_attempts": 10})


@pytest.fixture
async def ax_data(engine):
    """Seed counters, a customer, inventory dimensions and items."""
    await seed_rows(
        engine,
        NumberSequenceTable,
        [
            {"recid": 1, "dataareaid": DATA_AREA, "numbersequence": settings.sales_order_sequence, "nextrec": "100"},
            {"recid": 2, "dataareaid": DATA_AREA, "numbersequence": settings.inventtrans_sequence, "nextrec": "1234"},
            {"recid": 3, "dataareaid": "dat", "numbersequence": settings.sales_order_sequence, "nextrec": "900"},
        ],
    )
    await seed_rows(
        engine,
        CustTable,
        [
            {
                "recid": 1,
                "dataareaid": DATA_AREA,
                "accountnum": "C-001",
                "name": "Acme Trading",
                "address": "1 Harbour Road",
                "custgroup": "WHOLESALE",
            },
            {
                "recid": 2,
                "dataareaid": DATA_AREA,
                "accountnum": "C-002",
                "name": "Blue Ridge Foods",
                "address": "77 Hill Street",
                "custgroup": "RETAIL",
            },
        ],
    )
    await seed_rows(
        engine,
        InventDim,
        [
            {
                "recid": 1,
                "dataareaid": DATA_AREA,
                "inventdimid": "DIM-0001",
                "inventsiteid": "MATCO01",
                "inventlocationid": "WH1",
                "wmslocationid": "A-01",
            },
            {
                "recid": 2,
                "dataareaid": DATA_AREA,
                "inventdimid": "DIM-0002",
                "inventsiteid": "MATCO01",
                "inventlocationid": "WH1",
                "wmslocationid": "A-02",
            },
            {
                "recid": 3,
                "dataareaid": DATA_AREA,
                "inventdimid": "DIM-0003",
                "inventsiteid": "MATCO01",
                "inventlocationid": "WH2",
                "wmslocationid": " ",
            },
            {
                "recid": 4,
                "dataareaid": "dat",
                "inventdimid": "DIM-9999",
                "inventsiteid": "MATCO02",
                "inventlocationid": "WH9",
                "wmslocationid": "Z-01",
            },
        ],
    )
    await seed_rows(
        engine,
        InventTable,
        [
            {"recid": 1, "dataareaid": DATA_AREA, "itemid": "ITM-100", "itemname": "Basmati rice 5kg",
             "dimension2_": settings.dimension_cost_center},
            {"recid": 2, "dataareaid": DATA_AREA, "itemid": "ITM-200", "itemname": "Sunflower oil 1L",
             "dimension2_": settings.dimension_cost_center},
            {"recid": 3, "dataareaid": DATA_AREA, "itemid": "ITM-300", "itemname": "Other division item",
             "dimension2_": "0700001"},
        ],
    )
    await seed_rows(
        engine,
        SalesLine,
        [
            {"recid": 1, "dataareaid": DATA_AREA, "salesid": "SO-1", "itemid": "ITM-100", "salesunit": "BAG",
             "masterunit": "CTN", "masterunitqty": 4, "createddatetime": SEEDED_AT},
            {"recid": 2, "dataareaid": DATA_AREA, "salesid": "SO-2", "itemid": "ITM-100", "salesunit": "PCS",
             "masterunit": "PLT", "masterunitqty": 4, "createddatetime": SEEDED_AT},
            {"recid": 3, "dataareaid": DATA_AREA, "salesid": "SO-3", "itemid": "ITM-200", "salesunit": " ",
             "masterunit": " ", "createddatetime": SEEDED_AT},
        ],
    )


@pytest.fixture
def order_payload() -> dict[str, Any]:
    """Two-item submission; the second item's location has no inventory dimension."""
    return {
        "customer": {
            "customer_account": "C-001",
            "customer_name": "Acme Trading",
            "delivery_address": "1 Harbour Road",
            "purchase_order": "PO-7781",
            "requested_date": "2024-02-01",
            "site": "MATCO01",
            "warehouse": "WH1",
        },
        "items": [
            {
                "item_number": "ITM-100",
                "item_name": "Basmati rice 5kg",
                "quantity": "10",
                "unit": "BAG",
                "packing_unit": "CTN",
                "packing_unit_qty": "4",
                "master_unit": "PLT",
                "master_unit_qty": "40",
                "site": "MATCO01",
                "warehouse": "WH1",
                "location": "A-01",
            },
            {
                "item_number": "ITM-200",
                "item_name": "Sunflower oil 1L",
                "quantity": "24",
                "unit": "PCS",
                "site": "MATCO01",
                "warehouse": "WH1",
                "location": "NOWHERE",
            },
        ],
    }


@pytest.fixture
async def client(gateway, config):
    """Create an async test client with dependency overrides."""
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_settings] = lambda: config

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
