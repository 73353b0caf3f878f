"""
Merge purchase order and shipment log events into per-job timelines
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from reconciliation.identifiers import IdentifierMatcher, UNMATCHED
from reconciliation.store.base import Row, StoreClient, rows_equivalent
from reconciliation.transformers.row_mapper import RowMapper
from schemas.derived import JobTimelineRecord, to_row
from schemas.rows import JobRow, PurchaseOrderRow, ShipmentLogRow
from schemas.results import ReplaceResult
from models.base import TimelineSource
import logging

logger = logging.getLogger(__name__)

JOBS = "jobs"
PURCHASE_ORDERS = "purchase_orders"
SHIPMENT_LOGS = "shipment_logs"
JOB_TIMELINES = "job_timelines"

# Same-day tie break: purchase order events first
SOURCE_PRECEDENCE = {
    TimelineSource.PURCHASE_ORDER.value: 0,
    TimelineSource.SHIPMENT_LOG.value: 1,
}


def _sort_key(event: dict) -> Tuple:
    # Undated events go last, keeping their source and insertion order
    event_date = event["event_date"]
    return (
        event_date is None,
        event_date or datetime.min,
        SOURCE_PRECEDENCE[event["source"]],
        event["position"],
    )


class TimelineGenerator:
    """
    Regenerate job_timelines, one job at a time.

    Purchase orders belong to a job through their linked job_number, so the
    relationship linker must have run first. Shipment logs belong to a job
    through their own job reference.
    """

    def __init__(
        self,
        store: StoreClient,
        matcher: Optional[IdentifierMatcher] = None,
        mapper: Optional[RowMapper] = None
    ):
        self.store = store
        self.matcher = matcher or IdentifierMatcher()
        self.mapper = mapper or RowMapper()

    def _purchase_order_event(self, po: PurchaseOrderRow, position: int) -> dict:
        description = f"PO {po.purchasing_document}"
        if po.vendor:
            description += f" for {po.vendor}"
        return {
            "event_date": po.document_date,
            "source": TimelineSource.PURCHASE_ORDER.value,
            "source_id": po.purchasing_document,
            "title": "Purchase Order Created",
            "status": po.status,
            "description": description,
            "vendor": po.vendor,
            "position": position,
        }

    def _shipment_event(self, log: ShipmentLogRow, position: int) -> dict:
        return {
            "event_date": log.shipment_date,
            "source": TimelineSource.SHIPMENT_LOG.value,
            "source_id": log.id,
            "title": f"Shipment {log.status}" if log.status else "Shipment Logged",
            "status": log.status,
            "description": log.description or log.severity,
            "vendor": log.vendor,
            "position": position,
        }

    def derive(self, job: JobRow, purchase_orders: Sequence[PurchaseOrderRow], shipment_logs: Sequence[ShipmentLogRow]) -> List[JobTimelineRecord]:
        """
        Ordered timeline of one job.

        Events are sorted by date ascending; same-date events keep purchase
        orders before shipments, then the order of the source rows.
        """
        canonical = self.matcher.normalize(job.job_number)
        if canonical is UNMATCHED:
            return []

        events = []
        for position, po in enumerate(purchase_orders):
            if not po.purchasing_document or not self.matcher.matches(po.job_number, job.job_number):
                continue
            events.append(self._purchase_order_event(po, position))

        for position, log in enumerate(shipment_logs):
            if not log.id or not self.matcher.matches(log.job_reference, job.job_number):
                continue
            events.append(self._shipment_event(log, position))

        events.sort(key=_sort_key)

        return [
            JobTimelineRecord(
                job_number=canonical,
                sequence=sequence,
                **{k: v for k, v in event.items() if k != "position"}
            )
            for sequence, event in enumerate(events, start=1)
        ]

    async def generate(
        self,
        job: JobRow,
        purchase_orders: Sequence[PurchaseOrderRow],
        shipment_logs: Sequence[ShipmentLogRow],
        existing: Optional[Sequence[Row]] = None
    ) -> ReplaceResult:
        """
        Replace the stored timeline of one job.

        Args:
            existing: Stored timeline rows of the job, when the caller has
                already read them

        Returns:
            ReplaceResult with the number of timeline entries
        """
        canonical = self.matcher.normalize(job.job_number)
        if canonical is UNMATCHED:
            return ReplaceResult(count=0)

        rows = [to_row(record) for record in self.derive(job, purchase_orders, shipment_logs)]
        scope = {"job_number": canonical}
        if existing is None:
            existing = await self.store.query(JOB_TIMELINES, scope)

        if rows_equivalent(existing, rows, JobTimelineRecord.STORED_FIELDS):
            logger.debug(f"Timeline of job {canonical} unchanged ({len(rows)} entries)")
            return ReplaceResult(count=len(rows), changed=False)

        result = await self.store.replace(JOB_TIMELINES, rows, scope_filter=scope)
        logger.debug(f"Timeline of job {canonical} regenerated with {len(rows)} entries")
        return ReplaceResult(count=len(rows), removed=result.deleted, changed=True)

    async def generate_all(self) -> ReplaceResult:
        """Regenerate the timeline of every job in the store"""
        jobs = self.mapper.map_rows("job", await self.store.query(JOBS))
        purchase_orders = self.mapper.map_rows("purchase_order", await self.store.query(PURCHASE_ORDERS))
        shipment_logs = self.mapper.map_rows("shipment_log", await self.store.query(SHIPMENT_LOGS))
        stored = await self.store.query(JOB_TIMELINES)

        pos_by_job: Dict[str, List[PurchaseOrderRow]] = defaultdict(list)
        for po in purchase_orders:
            canonical = self.matcher.normalize(po.job_number)
            if canonical is not UNMATCHED:
                pos_by_job[canonical].append(po)

        logs_by_job: Dict[str, List[ShipmentLogRow]] = defaultdict(list)
        for log in shipment_logs:
            canonical = self.matcher.normalize(log.job_reference)
            if canonical is not UNMATCHED:
                logs_by_job[canonical].append(log)

        stored_by_job: Dict[str, List[Row]] = defaultdict(list)
        for row in stored:
            stored_by_job[row.get("job_number")].append(row)

        total = ReplaceResult()
        seen = set()
        for job in jobs:
            canonical = self.matcher.normalize(job.job_number)
            if canonical is UNMATCHED or canonical in seen:
                continue
            seen.add(canonical)
            total = total.merge(await self.generate(
                job,
                pos_by_job.get(canonical, []),
                logs_by_job.get(canonical, []),
                existing=stored_by_job.get(canonical, [])
            ))

        logger.info(
            f"Timelines: {total.count} entries for {len(seen)} jobs "
            f"({'regenerated' if total.changed else 'unchanged'})"
        )
        return total
