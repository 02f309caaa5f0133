"""Tests for the order write pipeline against a SQLite copy of the AX schema."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import FakeRedis, RecordingGateway, fetch_rows
from order_intake.models import InventTrans, NumberSequenceTable, SalesLine, SalesTable
from order_intake.services.allocation.guard import RedisGuard
from order_intake.services.orders.order_write_service import OrderWriteService
from order_intake.services.orders.types import CustomerInfo, ItemStatus, LineItem

SEEDED_LINES = 3


@pytest.fixture
def customer() -> CustomerInfo:
    return CustomerInfo(
        customer_account="C-001",
        customer_name="Acme Trading",
        delivery_address="1 Harbour Road",
        purchase_order="PO-7781",
        requested_date=date(2024, 2, 1),
        site="MATCO01",
        warehouse="WH1",
    )


@pytest.fixture
def items() -> list[LineItem]:
    return [
        LineItem(
            item_number="ITM-100",
            item_name="Basmati rice 5kg",
            quantity=Decimal("10"),
            unit="BAG",
            packing_unit="CTN",
            packing_unit_qty=Decimal("4"),
            master_unit="PLT",
            master_unit_qty=Decimal("40"),
            site="MATCO01",
            warehouse="WH1",
            location="A-01",
        ),
        LineItem(
            item_number="ITM-200",
            item_name="Sunflower oil 1L",
            quantity=Decimal("24"),
            unit="PCS",
            site="MATCO01",
            warehouse="WH1",
            location="NOWHERE",
        ),
    ]


async def _written_lines(engine) -> list[dict]:
    return [row for row in await fetch_rows(engine, SalesLine) if row["recid"] > SEEDED_LINES]


async def _counters(engine) -> dict[str, str]:
    return {
        row["numbersequence"]: row["nextrec"]
        for row in await fetch_rows(engine, NumberSequenceTable)
        if row["dataareaid"] == "mrp"
    }


@pytest.mark.asyncio
class TestProcessOrder:

    async def test_every_item_gets_its_own_order(self, engine, gateway, config, ax_data, customer, items):
        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == ["SO-100", "SO-101"]
        assert outcome.is_complete
        assert [result.status for result in outcome.results] == [ItemStatus.COMPLETED, ItemStatus.COMPLETED]

        headers = await fetch_rows(engine, SalesTable)
        assert [header["salesid"] for header in headers] == ["SO-100", "SO-101"]
        assert [header["recid"] for header in headers] == [1, 2]
        assert headers[0]["custaccount"] == "C-001"
        assert headers[0]["purchorderformnum"] == "PO-7781"
        assert headers[0]["deliverydate"] == date(2024, 2, 1)
        assert headers[0]["inventsiteid"] == "MATCO01"
        assert headers[0]["dataareaid"] == "mrp"

        assert await _counters(engine) == {"Sale_1": "102", "Inve_13": "1236"}

    async def test_line_rows(self, engine, gateway, config, ax_data, customer, items):
        await OrderWriteService(gateway, config=config).process_order(customer, items)

        lines = await _written_lines(engine)
        assert [line["salesid"] for line in lines] == ["SO-100", "SO-101"]
        assert [line["recid"] for line in lines] == [4, 5]
        assert [line["linenum"] for line in lines] == [1, 1]
        assert [line["inventtransid"] for line in lines] == ["00001234_078", "00001235_078"]
        # The second item's location has no inventory dimension
        assert [line["inventdimid"] for line in lines] == ["DIM-0001", ""]
        assert [line["custgroup"] for line in lines] == ["WHOLESALE", "WHOLESALE"]
        assert lines[0]["salesqty"] == Decimal("10")
        assert lines[0]["masterunit"] == "PLT"
        assert lines[0]["dimension2_"] == config.dimension_cost_center

    async def test_inventory_transactions_issue_the_ordered_quantity(
        self, engine, gateway, config, ax_data, customer, items
    ):
        await OrderWriteService(gateway, config=config).process_order(customer, items)

        transactions = await fetch_rows(engine, InventTrans)
        assert [trans["inventtransid"] for trans in transactions] == ["00001234_078", "00001235_078"]
        assert [trans["qty"] for trans in transactions] == [Decimal("-10"), Decimal("-24")]
        assert [trans["transrefid"] for trans in transactions] == ["SO-100", "SO-101"]
        assert transactions[0]["inventdimid"] == "DIM-0001"
        assert transactions[0]["custvendac"] == "C-001"
        assert transactions[0]["statusissue"] == config.inventtrans_status_issue

    async def test_resubmission_creates_new_orders(self, engine, gateway, config, ax_data, customer, items):
        service = OrderWriteService(gateway, config=config)

        first = await service.process_order(customer, items)
        second = await service.process_order(customer, items)

        assert first.order_codes == ["SO-100", "SO-101"]
        assert second.order_codes == ["SO-102", "SO-103"]
        assert len(await fetch_rows(engine, SalesTable)) == 4

    async def test_unknown_customer_writes_blank_group(self, engine, gateway, config, ax_data, customer, items):
        unknown = CustomerInfo(customer_account="C-404", site="MATCO01", warehouse="WH1")

        outcome = await OrderWriteService(gateway, config=config).process_order(unknown, items[:1])

        assert outcome.is_complete
        lines = await _written_lines(engine)
        assert lines[0]["custgroup"] == ""

    async def test_empty_submission_writes_nothing(self, engine, gateway, config, ax_data, customer):
        outcome = await OrderWriteService(gateway, config=config).process_order(customer, [])

        assert outcome.order_codes == []
        assert outcome.is_complete
        assert await fetch_rows(engine, SalesTable) == []


@pytest.mark.asyncio
class TestPartialFailures:

    async def test_rejected_header_skips_the_item(self, engine, config, ax_data, customer, items):
        gateway = RecordingGateway(engine, reject_tables={"salestable"})

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == []
        assert [result.status for result in outcome.results] == [ItemStatus.HEADER_FAILED] * 2
        assert gateway.inserted_tables == ["salestable", "salestable"]
        assert await _written_lines(engine) == []
        assert await fetch_rows(engine, InventTrans) == []

    async def test_rejected_line_keeps_header_and_code(self, engine, config, ax_data, customer, items):
        gateway = RecordingGateway(engine, reject_tables={"salesline"})

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == ["SO-100", "SO-101"]
        assert [result.status for result in outcome.results] == [ItemStatus.LINE_FAILED] * 2
        assert [result.order_code for result in outcome.results] == ["SO-100", "SO-101"]
        assert "inventtrans" not in gateway.inserted_tables
        assert len(await fetch_rows(engine, SalesTable)) == 2

    async def test_rejected_inventory_transaction_keeps_header_and_line(
        self, engine, config, ax_data, customer, items
    ):
        gateway = RecordingGateway(engine, reject_tables={"inventtrans"})

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == ["SO-100", "SO-101"]
        assert [result.status for result in outcome.results] == [ItemStatus.INVENTTRANS_FAILED] * 2
        assert len(await _written_lines(engine)) == 2
        assert await fetch_rows(engine, InventTrans) == []

    async def test_failure_of_one_item_does_not_stop_the_next(self, engine, gateway, config, ax_data, customer, items):
        # SALESLINE.ITEMID is NOT NULL, so this line insert is rejected
        broken = LineItem(item_number=None, quantity=Decimal("1"))  # type: ignore[arg-type]

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, [broken, items[0]])

        assert [result.status for result in outcome.results] == [ItemStatus.LINE_FAILED, ItemStatus.COMPLETED]
        assert outcome.order_codes == ["SO-100", "SO-101"]
        assert [line["salesid"] for line in await _written_lines(engine)] == ["SO-101"]

    async def test_missing_order_sequence(self, engine, gateway, config, ax_data, customer, items):
        config = config.model_copy(update={"sales_order_sequence": "Missing_1"})

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == []
        assert [result.status for result in outcome.results] == [ItemStatus.ALLOCATION_FAILED] * 2
        assert all("Missing_1" in result.reason for result in outcome.results)
        assert await fetch_rows(engine, SalesTable) == []

    async def test_missing_inventtrans_sequence_fails_the_line(self, engine, gateway, config, ax_data, customer, items):
        config = config.model_copy(update={"inventtrans_sequence": "Missing_13"})

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == ["SO-100", "SO-101"]
        assert [result.status for result in outcome.results] == [ItemStatus.LINE_FAILED] * 2
        assert await _written_lines(engine) == []


@pytest.mark.asyncio
class TestGroupedOrders:

    async def test_one_header_for_the_whole_submission(self, engine, gateway, config, ax_data, customer, items):
        config = config.model_copy(update={"order_grouping": "per_order"})

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == ["SO-100"]
        assert outcome.is_complete
        assert [header["salesid"] for header in await fetch_rows(engine, SalesTable)] == ["SO-100"]

        lines = await _written_lines(engine)
        assert [line["salesid"] for line in lines] == ["SO-100", "SO-100"]
        assert [line["linenum"] for line in lines] == [1, 2]
        assert await _counters(engine) == {"Sale_1": "101", "Inve_13": "1236"}

    async def test_rejected_header_fails_every_item(self, engine, config, ax_data, customer, items):
        config = config.model_copy(update={"order_grouping": "per_order"})
        gateway = RecordingGateway(engine, reject_tables={"salestable"})

        outcome = await OrderWriteService(gateway, config=config).process_order(customer, items)

        assert outcome.order_codes == []
        assert [result.status for result in outcome.results] == [ItemStatus.HEADER_FAILED] * 2
        assert gateway.inserted_tables == ["salestable"]


@pytest.mark.asyncio
class TestRedisGuardedOrders:

    async def test_orders_written_under_redis_lock(self, engine, gateway, config, ax_data, customer, items):
        client = FakeRedis()

        outcome = await OrderWriteService(gateway, config=config, guard=RedisGuard(client)).process_order(
            customer, items
        )

        assert outcome.order_codes == ["SO-100", "SO-101"]
        assert outcome.is_complete
        assert client.store == {}

    async def test_unavailable_lock_fails_items_not_the_order(self, engine, gateway, config, ax_data, customer, items):
        guard = RedisGuard(FakeRedis(busy_keys={"RedisLock:allocation:sequence:Sale_1"}), max_wait=0.05)

        outcome = await OrderWriteService(gateway, config=config, guard=guard).process_order(customer, items)

        assert outcome.order_codes == []
        assert [result.status for result in outcome.results] == [ItemStatus.ALLOCATION_FAILED] * 2
        assert await fetch_rows(engine, SalesTable) == []

    async def test_unavailable_lock_after_header_keeps_order_codes(
        self, engine, gateway, config, ax_data, customer, items
    ):
        guard = RedisGuard(FakeRedis(busy_keys={"RedisLock:allocation:sequence:Inve_13"}), max_wait=0.05)

        outcome = await OrderWriteService(gateway, config=config, guard=guard).process_order(customer, items)

        assert outcome.order_codes == ["SO-100", "SO-101"]
        assert [result.status for result in outcome.results] == [ItemStatus.LINE_FAILED] * 2
        assert len(await fetch_rows(engine, SalesTable)) == 2
        assert await _written_lines(engine) == []
