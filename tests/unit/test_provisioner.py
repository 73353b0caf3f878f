"""
Unit tests for engine table provisioning
"""

import pytest
from unittest.mock import AsyncMock
from core.exceptions import ProvisionFailure
from models import ENGINE_TABLES
from reconciliation.provisioner import SchemaProvisioner, engine_table_columns
from reconciliation.store import InMemoryStore
from schemas.results import ProvisionStatus


class TestSchemaProvisioner:
    """Test idempotent create-if-absent"""

    def test_engine_table_columns_from_models(self):
        columns = engine_table_columns()

        assert set(columns) == set(ENGINE_TABLES)
        assert "name" in columns["work_centers"]
        assert {"job_number", "operation_number", "vendor"} <= set(columns["vendor_operations"])
        assert {"job_number", "source", "source_id", "sequence"} <= set(columns["job_timelines"])

    @pytest.mark.asyncio
    async def test_ensure_creates_then_reports_existing(self):
        store = InMemoryStore()
        provisioner = SchemaProvisioner(store)

        first = await provisioner.ensure("work_centers", ["name"])
        second = await provisioner.ensure("work_centers", ["name"])

        assert first.status == ProvisionStatus.CREATED
        assert second.status == ProvisionStatus.ALREADY_EXISTS

    @pytest.mark.asyncio
    async def test_ensure_all_is_idempotent(self):
        store = InMemoryStore()
        provisioner = SchemaProvisioner(store)

        first = await provisioner.ensure_all()
        second = await provisioner.ensure_all()

        assert [r.status for r in first] == [ProvisionStatus.CREATED] * len(ENGINE_TABLES)
        assert [r.status for r in second] == [ProvisionStatus.ALREADY_EXISTS] * len(ENGINE_TABLES)
        assert set(store.tables) == set(ENGINE_TABLES)

    @pytest.mark.asyncio
    async def test_existing_rows_survive(self):
        store = InMemoryStore({"work_centers": [{"name": "DNI"}]})

        await SchemaProvisioner(store).ensure_all()

        assert len(await store.query("work_centers")) == 1

    @pytest.mark.asyncio
    async def test_store_errors_become_provision_failure(self):
        """Test that any store error is reported as fatal provisioning failure"""
        store = AsyncMock()
        store.ensure_table.side_effect = ConnectionError("connection refused")

        with pytest.raises(ProvisionFailure) as exc_info:
            await SchemaProvisioner(store).ensure("work_centers", ["name"])

        assert exc_info.value.context["table_name"] == "work_centers"
        assert isinstance(exc_info.value.original_exception, ConnectionError)

    @pytest.mark.asyncio
    async def test_ensure_all_stops_at_first_failure(self):
        store = AsyncMock()
        store.ensure_table.side_effect = ProvisionFailure("disk full")

        with pytest.raises(ProvisionFailure):
            await SchemaProvisioner(store).ensure_all()

        assert store.ensure_table.call_count == 1
