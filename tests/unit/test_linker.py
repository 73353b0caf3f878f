"""
Unit tests for purchase order linking
"""

import pytest
from unittest.mock import AsyncMock
from core.exceptions import QueryFailure
from reconciliation.linker import RelationshipLinker
from reconciliation.store import InMemoryStore
from schemas.rows import JobRow, PurchaseOrderRow


def make_store(jobs, purchase_orders):
    return InMemoryStore({"jobs": jobs, "purchase_orders": purchase_orders})


class TestRelationshipLinker:
    """Test linking purchase orders to jobs via canonical identifiers"""

    @pytest.mark.asyncio
    async def test_link_sets_job_number(self):
        """Test that a padded reference links to its job"""
        store = make_store(
            [{"job_number": "100575126"}],
            [{"purchasing_document": "4500001", "job_number_raw": "100575126 "}]
        )
        linker = RelationshipLinker(store)

        report = await linker.run()

        assert report.linked == 1
        assert report.already_linked == 0
        assert report.unmatched == 0

        rows = await store.query("purchase_orders")
        assert rows[0]["job_number"] == "100575126"
        assert rows[0]["job_number_raw"] == "100575126 "

    @pytest.mark.asyncio
    async def test_second_run_reports_already_linked(self):
        """Test that earlier links are never counted as new"""
        store = make_store(
            [{"job_number": "100575126"}],
            [{"purchasing_document": "4500001", "job_number_raw": "100575126 "}]
        )
        linker = RelationshipLinker(store)

        await linker.run()
        report = await linker.run()

        assert report.linked == 0
        assert report.already_linked == 1
        assert report.unmatched == 0
        assert report.changed is False

    @pytest.mark.asyncio
    async def test_links_to_the_jobs_stored_number(self):
        """Test that the PO receives the job's own spelling of its number"""
        store = make_store(
            [{"job_number": "J-1005"}],
            [{"purchasing_document": "4500003", "Order": "j1005"}]
        )

        await RelationshipLinker(store).run()

        rows = await store.query("purchase_orders")
        assert rows[0]["job_number"] == "J-1005"

    @pytest.mark.asyncio
    async def test_unmatched_purchase_order_is_left_alone(self):
        """Test that a PO with no job stays unlinked and is only counted"""
        store = make_store(
            [{"job_number": "100575126"}],
            [
                {"purchasing_document": "4500002", "job_number_raw": "999999"},
                {"purchasing_document": "4500004", "job_number_raw": None},
                {"purchasing_document": "4500005", "job_number_raw": "  "},
            ]
        )

        report = await RelationshipLinker(store).run()

        assert report.linked == 0
        assert report.unmatched == 3
        rows = await store.query("purchase_orders")
        assert all(row.get("job_number") is None for row in rows)

    @pytest.mark.asyncio
    async def test_blank_references_never_link_to_blank_jobs(self):
        linker = RelationshipLinker(AsyncMock())

        report = await linker.link(
            [JobRow(job_number="--")],
            [PurchaseOrderRow(purchasing_document="1", job_reference="")]
        )

        assert report.linked == 0
        assert report.unmatched == 1
        linker.store.upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_link_is_rewritten(self):
        """Test that a PO linked to a job under another spelling is corrected"""
        store = make_store(
            [{"job_number": "J-1005"}],
            [{"purchasing_document": "4500003", "job_number_raw": "j1005", "job_number": "j1005"}]
        )

        report = await RelationshipLinker(store).run()

        assert report.linked == 1
        rows = await store.query("purchase_orders")
        assert rows[0]["job_number"] == "J-1005"

    @pytest.mark.asyncio
    async def test_duplicate_canonical_jobs_keep_first(self):
        store = make_store(
            [{"job_number": "J-1005"}, {"job_number": "j1005"}],
            [{"purchasing_document": "4500003", "job_number_raw": "J1005"}]
        )

        await RelationshipLinker(store).run()

        rows = await store.query("purchase_orders")
        assert rows[0]["job_number"] == "J-1005"

    @pytest.mark.asyncio
    async def test_upsert_uses_purchasing_document_key(self):
        """Test that only the link column is written, keyed by document"""
        store = AsyncMock()
        linker = RelationshipLinker(store)

        await linker.link(
            [JobRow(job_number="100575126")],
            [PurchaseOrderRow(purchasing_document="4500001", job_reference="100575126.0")]
        )

        store.upsert.assert_called_once_with(
            "purchase_orders",
            [{"purchasing_document": "4500001", "job_number": "100575126"}],
            conflict_key=("purchasing_document",)
        )

    @pytest.mark.asyncio
    async def test_query_failure_propagates(self):
        """Test that read failures surface to the caller"""
        store = InMemoryStore({"jobs": []})  # purchase_orders missing

        with pytest.raises(QueryFailure):
            await RelationshipLinker(store).run()
