"""
Unit tests for the work-center registry rebuild
"""

import pytest
from reconciliation.store import InMemoryStore
from reconciliation.work_centers import WorkCenterSynchronizer, utilization
from schemas.rows import SAPOperationRow


def sap_op(work_center, order="100575126", operation="0010", planned=0.0, actual=0.0):
    return SAPOperationRow(
        order_number=order,
        operation_number=operation,
        work_center=work_center,
        planned_work=planned,
        actual_work=actual,
    )


@pytest.fixture
def store():
    return InMemoryStore({"work_centers": []})


class TestWorkCenterSynchronizer:
    """Test full-replace registry semantics"""

    @pytest.mark.asyncio
    async def test_distinct_work_centers(self, store):
        """Test that repeated work centers appear once"""
        sync = WorkCenterSynchronizer(store, ["SR"])
        ops = [sap_op("DNI"), sap_op("SR", operation="0020"), sap_op("SR", operation="0030"), sap_op("ASM", operation="0040")]

        result = await sync.sync(ops)

        assert result.work_centers == {"DNI", "SR", "ASM"}
        rows = await store.query("work_centers")
        assert len(rows) == 3
        assert sorted(row["name"] for row in rows) == ["ASM", "DNI", "SR"]

    @pytest.mark.asyncio
    async def test_work_center_case_and_padding_collapse(self, store):
        """Test that "SR", " sr" and "Sr" are one vendor work center"""
        sync = WorkCenterSynchronizer(store, ["SR"])
        ops = [
            sap_op("SR", planned=4.0, actual=1.0),
            sap_op(" sr", operation="0020", planned=4.0),
            sap_op("Sr", operation="0030", planned=2.0),
            sap_op("dni", operation="0040"),
        ]

        await sync.sync(ops)

        rows = {row["name"]: row for row in await store.query("work_centers")}
        assert sorted(rows) == ["DNI", "SR"]
        assert rows["SR"]["type"] == "Vendor"
        assert rows["SR"]["total_operations"] == 3
        assert rows["SR"]["planned_hours"] == 10.0
        assert rows["DNI"]["type"] == "Production"

    @pytest.mark.asyncio
    async def test_absent_work_center_is_removed(self, store):
        sync = WorkCenterSynchronizer(store)

        await sync.sync([sap_op("DNI"), sap_op("OLD", operation="0020")])
        result = await sync.sync([sap_op("DNI")])

        assert result.work_centers == {"DNI"}
        assert result.removed == 1
        assert [row["name"] for row in await store.query("work_centers")] == ["DNI"]

    @pytest.mark.asyncio
    async def test_blank_work_centers_are_skipped(self, store):
        sync = WorkCenterSynchronizer(store)

        result = await sync.sync([sap_op(None), sap_op("  ", operation="0020"), sap_op("DNI", operation="0030")])

        assert result.work_centers == {"DNI"}

    @pytest.mark.asyncio
    async def test_metrics(self, store):
        sync = WorkCenterSynchronizer(store, ["SR"])
        ops = [
            sap_op("SR", order="A", operation="0010", planned=8.0, actual=2.0),
            sap_op("SR", order="B", operation="0010", planned=4.0, actual=0.0),
            sap_op("DNI", order="A", operation="0020", planned=2.0, actual=2.0),
        ]

        await sync.sync(ops)

        rows = {row["name"]: row for row in await store.query("work_centers")}
        assert rows["SR"]["type"] == "Vendor"
        assert rows["SR"]["status"] == "Running"
        assert rows["SR"]["utilization"] == 0.5
        assert rows["SR"]["total_operations"] == 2
        assert rows["SR"]["active_jobs"] == 1
        assert rows["SR"]["planned_hours"] == 12.0
        assert rows["SR"]["actual_hours"] == 2.0

        assert rows["DNI"]["type"] == "Production"
        assert rows["DNI"]["status"] == "Idle"
        assert rows["DNI"]["utilization"] == 1.0

    @pytest.mark.asyncio
    async def test_rerun_with_same_input_changes_nothing(self, store):
        sync = WorkCenterSynchronizer(store)
        ops = [sap_op("DNI"), sap_op("SR", operation="0020")]

        first = await sync.sync(ops)
        before = await store.query("work_centers")
        second = await sync.sync(ops)

        assert first.changed is True
        assert second.changed is False
        assert await store.query("work_centers") == before

    @pytest.mark.asyncio
    async def test_empty_input_empties_registry(self):
        store = InMemoryStore({"work_centers": [{"name": "DNI", "type": "Production", "status": "Idle"}]})

        result = await WorkCenterSynchronizer(store).sync([])

        assert result.work_centers == set()
        assert await store.query("work_centers") == []


class TestUtilization:
    """Test utilization ratio"""

    def test_zero_operations(self):
        assert utilization([]) == 0.0

    def test_ratio_of_operations_with_actual_work(self):
        ops = [sap_op("SR", actual=1.0), sap_op("SR", operation="0020"), sap_op("SR", operation="0030"), sap_op("SR", operation="0040", actual=0.5)]

        assert utilization(ops) == 0.5
