"""
Link purchase orders to jobs through the canonical job identifier
"""

from typing import Dict, List, Optional, Sequence
from reconciliation.identifiers import IdentifierMatcher, UNMATCHED
from reconciliation.store.base import StoreClient
from reconciliation.transformers.row_mapper import RowMapper
from schemas.rows import JobRow, PurchaseOrderRow
from schemas.results import LinkReport
import logging

logger = logging.getLogger(__name__)

PURCHASE_ORDERS = "purchase_orders"
JOBS = "jobs"


class RelationshipLinker:
    """
    Associate PurchaseOrder rows with Job rows.

    A purchase order whose reference matches no job stays unlinked: that is
    a normal outcome, counted as unmatched, never an error. Existing links
    are only rewritten when the referenced job's number differs from the
    stored one.
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

    def _job_index(self, jobs: Sequence[JobRow]) -> Dict[str, JobRow]:
        index: Dict[str, JobRow] = {}
        for job in jobs:
            canonical = self.matcher.normalize(job.job_number)
            if canonical is UNMATCHED:
                continue
            if canonical in index:
                logger.warning(
                    f"Jobs {index[canonical].job_number!r} and {job.job_number!r} share "
                    f"canonical id {canonical}; keeping the first"
                )
                continue
            index[canonical] = job
        return index

    async def link(self, jobs: Sequence[JobRow], purchase_orders: Sequence[PurchaseOrderRow]) -> LinkReport:
        """
        Set job_number on every purchase order whose reference matches a job.

        Returns:
            LinkReport with linked / already_linked / unmatched counts
        """
        index = self._job_index(jobs)
        report = LinkReport()
        updates: List[dict] = []

        for po in purchase_orders:
            canonical = self.matcher.normalize(po.job_reference)
            job = index.get(canonical) if canonical is not UNMATCHED else None

            if job is None or po.purchasing_document is None:
                report.unmatched += 1
                continue

            if po.job_number == job.job_number:
                report.already_linked += 1
                continue

            updates.append({
                "purchasing_document": po.purchasing_document,
                "job_number": job.job_number,
            })
            report.linked += 1

        if updates:
            await self.store.upsert(PURCHASE_ORDERS, updates, conflict_key=("purchasing_document",))

        logger.info(
            f"PO linking: linked={report.linked}, already_linked={report.already_linked}, "
            f"unmatched={report.unmatched}"
        )
        return report

    async def run(self) -> LinkReport:
        """Read jobs and purchase orders from the store and link them"""
        jobs = self.mapper.map_rows("job", await self.store.query(JOBS))
        purchase_orders = self.mapper.map_rows("purchase_order", await self.store.query(PURCHASE_ORDERS))
        return await self.link(jobs, purchase_orders)
