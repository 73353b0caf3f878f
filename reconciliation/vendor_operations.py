"""
Derive vendor operations from SAP operations routed to vendor work centers
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
from reconciliation.identifiers import IdentifierMatcher, UNMATCHED
from reconciliation.store.base import StoreClient, rows_equivalent
from reconciliation.transformers.row_mapper import RowMapper
from schemas.derived import VendorOperationRecord, to_row
from schemas.rows import SAPOperationRow
from schemas.results import ReplaceResult
import logging

logger = logging.getLogger(__name__)

SAP_OPERATIONS = "sap_operations"
VENDOR_OPERATIONS = "vendor_operations"


def normalize_work_center(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


def operation_status(op: SAPOperationRow) -> str:
    """SAP status when present, otherwise progress of booked vs planned work"""
    if op.status:
        return op.status
    if op.actual_work <= 0:
        return "Pending"
    if op.actual_work < op.planned_work:
        return "In Progress"
    return "Complete"


class VendorOperationGenerator:
    """
    Regenerate the vendor_operations table.

    Replace semantics are scoped per job: rows of every job present in the
    current SAP input are replaced, rows of jobs absent from the input are
    left untouched.
    """

    def __init__(
        self,
        store: StoreClient,
        vendor_work_centers: Iterable[str],
        matcher: Optional[IdentifierMatcher] = None,
        mapper: Optional[RowMapper] = None
    ):
        self.store = store
        self.vendor_work_centers: Set[str] = {
            code for code in (normalize_work_center(c) for c in vendor_work_centers) if code
        }
        self.matcher = matcher or IdentifierMatcher()
        self.mapper = mapper or RowMapper()

    def derive(self, sap_operations: Sequence[SAPOperationRow], vendor_work_centers: Set[str]) -> Tuple[Set[str], List[VendorOperationRecord]]:
        """
        Compute vendor operations without touching the store.

        Returns:
            (canonical ids of every job in the input, derived records sorted by key)
        """
        jobs_in_scope: Set[str] = set()
        records: Dict[Tuple[str, str, str], VendorOperationRecord] = {}

        for op in sap_operations:
            job_id = self.matcher.normalize(op.order_number)
            if job_id is UNMATCHED:
                continue
            jobs_in_scope.add(job_id)

            work_center = normalize_work_center(op.work_center)
            if work_center not in vendor_work_centers:
                continue

            key = (job_id, op.operation_number, work_center)
            if key in records:
                logger.debug(f"Duplicate vendor operation {key}; keeping the first")
                continue

            records[key] = VendorOperationRecord(
                job_number=job_id,
                operation_number=op.operation_number,
                vendor=work_center,
                operation=op.description or op.short_text or f"Vendor operation {op.operation_number}",
                planned_work=op.planned_work,
                actual_work=op.actual_work,
                start_date=op.start_date,
                end_date=op.finish_date,
                status=operation_status(op),
                notes=op.short_text if op.description else None,
            )

        return jobs_in_scope, [records[key] for key in sorted(records)]

    async def generate(self, sap_operations: Sequence[SAPOperationRow], vendor_work_centers: Optional[Iterable[str]] = None) -> ReplaceResult:
        """
        Derive vendor operations and replace them for the jobs in scope.

        Returns:
            ReplaceResult with the number of derived rows
        """
        codes = self.vendor_work_centers if vendor_work_centers is None else {
            code for code in (normalize_work_center(c) for c in vendor_work_centers) if code
        }
        jobs_in_scope, records = self.derive(sap_operations, codes)
        rows = [to_row(record) for record in records]

        if not jobs_in_scope:
            logger.info("Vendor operations: no jobs in SAP input")
            return ReplaceResult(count=0)

        scope = {"job_number": sorted(jobs_in_scope)}
        existing = await self.store.query(VENDOR_OPERATIONS, scope)

        if rows_equivalent(existing, rows, VendorOperationRecord.STORED_FIELDS):
            logger.info(f"Vendor operations unchanged ({len(rows)} rows for {len(jobs_in_scope)} jobs)")
            return ReplaceResult(count=len(rows), changed=False)

        result = await self.store.replace(VENDOR_OPERATIONS, rows, scope_filter=scope)
        logger.info(
            f"Vendor operations regenerated: {result.written} rows for {len(jobs_in_scope)} jobs "
            f"({result.deleted} replaced)"
        )
        return ReplaceResult(count=len(rows), removed=result.deleted, changed=True)

    async def run(self) -> ReplaceResult:
        """Read SAP operations from the store and regenerate vendor operations"""
        sap_operations = self.mapper.map_rows("sap_operation", await self.store.query(SAP_OPERATIONS))
        return await self.generate(sap_operations)
