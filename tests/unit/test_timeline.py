"""
Unit tests for job timeline generation
"""

import pytest
from datetime import datetime
from reconciliation.store import InMemoryStore
from reconciliation.timeline import TimelineGenerator
from schemas.rows import JobRow, PurchaseOrderRow, ShipmentLogRow

JOB = JobRow(job_number="100575126")


def po(document, date=None, job_number="100575126", vendor="Acme Heat", status="Open"):
    return PurchaseOrderRow(
        purchasing_document=document,
        job_number=job_number,
        vendor=vendor,
        status=status,
        document_date=date,
    )


def shipment(log_id, date=None, job_reference="100575126", status="Shipped"):
    return ShipmentLogRow(
        id=log_id,
        job_reference=job_reference,
        vendor="Acme Heat",
        status=status,
        description="Sent out",
        shipment_date=date,
    )


@pytest.fixture
def store():
    return InMemoryStore({"job_timelines": []})


class TestTimelineOrdering:
    """Test event ordering within one job"""

    def setup_method(self):
        self.generator = TimelineGenerator(InMemoryStore())

    def test_sorted_by_date(self):
        """Test that an earlier shipment precedes a later purchase order"""
        records = self.generator.derive(
            JOB,
            [po("4500001", datetime(2024, 1, 5))],
            [shipment("1", datetime(2024, 1, 3))]
        )

        assert [r.source for r in records] == ["shipment_log", "purchase_order"]
        assert [r.sequence for r in records] == [1, 2]

    def test_same_date_purchase_order_first(self):
        same_day = datetime(2024, 1, 5)
        records = self.generator.derive(JOB, [po("4500001", same_day)], [shipment("1", same_day)])

        assert [r.source for r in records] == ["purchase_order", "shipment_log"]

    def test_same_date_same_source_keeps_input_order(self):
        same_day = datetime(2024, 1, 5)
        records = self.generator.derive(JOB, [po("B", same_day), po("A", same_day)], [])

        assert [r.source_id for r in records] == ["B", "A"]

    def test_undated_events_last(self):
        records = self.generator.derive(
            JOB,
            [po("4500001", None)],
            [shipment("1", datetime(2024, 1, 3))]
        )

        assert [r.source for r in records] == ["shipment_log", "purchase_order"]

    def test_titles_and_descriptions(self):
        records = self.generator.derive(
            JOB,
            [po("4500001", datetime(2024, 1, 5))],
            [shipment("1", datetime(2024, 1, 6), status="Delivered")]
        )

        assert records[0].title == "Purchase Order Created"
        assert records[0].description == "PO 4500001 for Acme Heat"
        assert records[0].status == "Open"
        assert records[1].title == "Shipment Delivered"
        assert records[1].description == "Sent out"

    def test_only_events_of_the_job(self):
        """Test that unlinked POs and other jobs' logs are excluded"""
        records = self.generator.derive(
            JOB,
            [po("4500001", job_number=None), po("4500002", job_number="OTHER"), po("4500003", job_number="100575126")],
            [shipment("1", job_reference="OTHER"), shipment("2", job_reference=" 100575126.0 ")]
        )

        assert sorted(r.source_id for r in records) == ["2", "4500003"]
        assert all(r.job_number == "100575126" for r in records)


class TestTimelineGenerator:
    """Test per-job replace semantics"""

    @pytest.mark.asyncio
    async def test_generate_writes_job_timeline(self, store):
        generator = TimelineGenerator(store)

        result = await generator.generate(JOB, [po("4500001", datetime(2024, 1, 5))], [shipment("1", datetime(2024, 1, 3))])

        assert result.count == 2
        rows = sorted(await store.query("job_timelines"), key=lambda r: r["sequence"])
        assert [r["source"] for r in rows] == ["shipment_log", "purchase_order"]

    @pytest.mark.asyncio
    async def test_regenerate_replaces_only_that_job(self):
        store = InMemoryStore({"job_timelines": [
            {"job_number": "100575126", "source": "purchase_order", "source_id": "OLD", "sequence": 1},
            {"job_number": "J1005", "source": "purchase_order", "source_id": "4500009", "sequence": 1},
        ]})
        generator = TimelineGenerator(store)

        result = await generator.generate(JOB, [po("4500001", datetime(2024, 1, 5))], [])

        assert result.removed == 1
        rows = await store.query("job_timelines")
        assert sorted((r["job_number"], r["source_id"]) for r in rows) == [
            ("100575126", "4500001"),
            ("J1005", "4500009"),
        ]

    @pytest.mark.asyncio
    async def test_rerun_with_same_input_changes_nothing(self, store):
        generator = TimelineGenerator(store)
        args = (JOB, [po("4500001", datetime(2024, 1, 5))], [shipment("1", datetime(2024, 1, 3))])

        first = await generator.generate(*args)
        before = await store.query("job_timelines")
        second = await generator.generate(*args)

        assert first.changed is True
        assert second.changed is False
        assert await store.query("job_timelines") == before

    @pytest.mark.asyncio
    async def test_generate_all(self, raw_tables):
        """Test timelines for every job from linked purchase orders"""
        raw_tables["purchase_orders"][0]["job_number"] = "100575126"
        store = InMemoryStore({**raw_tables, "job_timelines": []})

        result = await TimelineGenerator(store).generate_all()

        assert result.count == 2
        rows = await store.query("job_timelines", {"job_number": "100575126"})
        ordered = sorted(rows, key=lambda r: r["sequence"])
        assert [r["source"] for r in ordered] == ["shipment_log", "purchase_order"]
        assert await store.query("job_timelines", {"job_number": "J1005"}) == []

    @pytest.mark.asyncio
    async def test_generate_all_ignores_unlinked_purchase_orders(self, raw_tables):
        """Test that a PO without job_number contributes nothing before linking"""
        store = InMemoryStore({**raw_tables, "job_timelines": []})

        result = await TimelineGenerator(store).generate_all()

        rows = await store.query("job_timelines")
        assert result.count == 1
        assert [r["source"] for r in rows] == ["shipment_log"]
