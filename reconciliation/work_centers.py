"""
Rebuild the work-center registry from SAP operations
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence
from reconciliation.store.base import StoreClient, rows_equivalent
from reconciliation.transformers.row_mapper import RowMapper
from reconciliation.vendor_operations import normalize_work_center
from schemas.derived import WorkCenterRecord, to_row
from schemas.rows import SAPOperationRow
from schemas.results import SyncResult
import logging

logger = logging.getLogger(__name__)

SAP_OPERATIONS = "sap_operations"
WORK_CENTERS = "work_centers"


def utilization(operations: Sequence[SAPOperationRow]) -> float:
    """Share of operations with actual work booked; 0 when there are none"""
    if not operations:
        return 0.0
    booked = sum(1 for op in operations if op.actual_work > 0)
    return booked / len(operations)


class WorkCenterSynchronizer:
    """
    Full replace of the work_centers table.

    The registry is exactly the distinct work centers present in the
    current SAP operations; a work center no longer referenced disappears.
    """

    def __init__(
        self,
        store: StoreClient,
        vendor_work_centers: Iterable[str] = (),
        mapper: Optional[RowMapper] = None
    ):
        self.store = store
        self.vendor_work_centers = {
            code for code in (normalize_work_center(c) for c in vendor_work_centers) if code
        }
        self.mapper = mapper or RowMapper()

    def derive(self, sap_operations: Sequence[SAPOperationRow]) -> List[WorkCenterRecord]:
        groups: Dict[str, List[SAPOperationRow]] = defaultdict(list)
        for op in sap_operations:
            name = normalize_work_center(op.work_center)
            if name:
                groups[name].append(op)

        records = []
        for name in sorted(groups):
            ops = groups[name]
            # Orders with work booked but not finished
            active_orders = {
                op.order_number for op in ops
                if 0 < op.actual_work < op.planned_work
            }
            records.append(WorkCenterRecord(
                name=name,
                type="Vendor" if name in self.vendor_work_centers else "Production",
                status="Running" if active_orders else "Idle",
                utilization=utilization(ops),
                total_operations=len(ops),
                active_jobs=len(active_orders),
                planned_hours=sum(op.planned_work for op in ops),
                actual_hours=sum(op.actual_work for op in ops),
            ))
        return records

    async def sync(self, sap_operations: Sequence[SAPOperationRow]) -> SyncResult:
        records = self.derive(sap_operations)
        rows = [to_row(record) for record in records]
        names = {record.name for record in records}

        existing = await self.store.query(WORK_CENTERS)
        if rows_equivalent(existing, rows, WorkCenterRecord.STORED_FIELDS):
            logger.info(f"Work centers unchanged ({len(names)} registered)")
            return SyncResult(work_centers=names, changed=False)

        result = await self.store.replace(WORK_CENTERS, rows, scope_filter=None)
        removed = {row.get("name") for row in existing} - names
        logger.info(
            f"Work centers rebuilt: {len(names)} registered, {len(removed)} removed"
        )
        return SyncResult(work_centers=names, removed=len(removed), changed=True)

    async def run(self) -> SyncResult:
        """Read SAP operations from the store and rebuild the registry"""
        sap_operations = self.mapper.map_rows("sap_operation", await self.store.query(SAP_OPERATIONS))
        return await self.sync(sap_operations)
