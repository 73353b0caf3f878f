"""
Reconciliation run history
"""

from typing import List
from reconciliation.store.base import Row, StoreClient
from schemas.results import ReconciliationReport
import logging

logger = logging.getLogger(__name__)

RECONCILIATION_RUNS = "reconciliation_runs"


class RunLog:
    """Persist one reconciliation_runs row per run_all() call"""

    def __init__(self, store: StoreClient):
        self.store = store

    @staticmethod
    def to_row(report: ReconciliationReport) -> Row:
        failed = [step for step in report.steps if not step.ok]
        return {
            "run_id": report.run_id,
            "status": report.status,
            "started_at": report.started_at,
            "completed_at": report.completed_at,
            "duration_seconds": report.duration_seconds,
            "steps": [
                {
                    "name": step.name,
                    "ok": step.ok,
                    "outcome": step.outcome.value,
                    "detail": step.detail,
                }
                for step in report.steps
            ],
            "error_message": "; ".join(step.summary for step in failed) if failed else None,
        }

    async def record(self, report: ReconciliationReport) -> bool:
        """
        Store the run. A failure to record is logged and reported as False;
        it never fails the run itself.
        """
        try:
            await self.store.upsert(RECONCILIATION_RUNS, [self.to_row(report)], conflict_key=("run_id",))
            return True
        except Exception as e:
            logger.error(f"Failed to record reconciliation run {report.run_id}: {str(e)}")
            return False

    async def recent(self, limit: int = 20) -> List[Row]:
        """Most recent runs first"""
        return await self.store.query(RECONCILIATION_RUNS, order_by=("-started_at",), limit=limit)
