"""
ReconciliationOrchestrator - runs every reconciliation step in dependency order.

Steps (fixed order):
    1. Schema        SchemaProvisioner.ensure_all
    2. PO Links      RelationshipLinker.run
    3. Vendor Ops    VendorOperationGenerator.run
    4. Work Centers  WorkCenterSynchronizer.run
    5. Timelines     TimelineGenerator.generate_all

Failure policy:
    - Schema failure aborts the run; later steps are reported as skipped
    - PO Links failure skips Timelines (timelines read the linked job_number)
    - Any other failure is recorded and the next step still runs
    - run_all() never raises
"""

from typing import Awaitable, Callable, Iterable, Optional
from datetime import datetime
from core.config import settings
from core.exceptions import ReconciliationError
from reconciliation.identifiers import IdentifierMatcher
from reconciliation.linker import RelationshipLinker
from reconciliation.provisioner import SchemaProvisioner
from reconciliation.run_log import RunLog
from reconciliation.store.base import StoreClient
from reconciliation.timeline import TimelineGenerator
from reconciliation.transformers.row_mapper import RowMapper
from reconciliation.vendor_operations import VendorOperationGenerator
from reconciliation.work_centers import WorkCenterSynchronizer
from schemas.results import (
    ProvisionStatus,
    ReconciliationReport,
    StepOutcome,
    StepResult,
)
import logging
import uuid

logger = logging.getLogger(__name__)

SCHEMA = "Schema"
PO_LINKS = "PO Links"
VENDOR_OPS = "Vendor Ops"
WORK_CENTERS = "Work Centers"
TIMELINES = "Timelines"

STEP_ORDER = (SCHEMA, PO_LINKS, VENDOR_OPS, WORK_CENTERS, TIMELINES)


class ReconciliationOrchestrator:
    """
    Run the reconciliation steps sequentially against one store.

    Every step is idempotent, so a failed or abandoned run is retried by
    calling run_all() again.
    """

    def __init__(
        self,
        store: StoreClient,
        vendor_work_centers: Optional[Iterable[str]] = None,
        matcher: Optional[IdentifierMatcher] = None,
        mapper: Optional[RowMapper] = None,
        record_runs: bool = True
    ):
        self.store = store
        matcher = matcher or IdentifierMatcher()
        mapper = mapper or RowMapper()
        vendor_codes = list(vendor_work_centers if vendor_work_centers is not None else settings.VENDOR_WORK_CENTERS)

        self.provisioner = SchemaProvisioner(store)
        self.linker = RelationshipLinker(store, matcher=matcher, mapper=mapper)
        self.vendor_operations = VendorOperationGenerator(store, vendor_codes, matcher=matcher, mapper=mapper)
        self.work_centers = WorkCenterSynchronizer(store, vendor_codes, mapper=mapper)
        self.timelines = TimelineGenerator(store, matcher=matcher, mapper=mapper)
        self.run_log = RunLog(store) if record_runs else None

    async def _run_step(self, name: str, action: Callable[[], Awaitable], describe: Callable) -> StepResult:
        """
        Run one step, converting any exception into a failed StepResult.

        describe(result) returns (changed, detail) for a successful step.
        """
        logger.info(f"Reconciliation step started: {name}")
        try:
            result = await action()
        except ReconciliationError as e:
            logger.error(
                f"Reconciliation step {name} failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            return StepResult(name=name, ok=False, outcome=StepOutcome.FAILED, detail=e.message)
        except Exception as e:
            logger.exception(f"Unexpected error in reconciliation step {name}")
            return StepResult(
                name=name,
                ok=False,
                outcome=StepOutcome.FAILED,
                detail=f"{type(e).__name__}: {str(e)}"
            )

        changed, detail = describe(result)
        outcome = StepOutcome.SUCCESS if changed else StepOutcome.NO_CHANGE
        logger.info(f"Reconciliation step finished: {name}: {outcome.value} ({detail})")
        return StepResult(name=name, ok=True, outcome=outcome, detail=detail)

    @staticmethod
    def _skipped(name: str, reason: str) -> StepResult:
        logger.warning(f"Reconciliation step skipped: {name} ({reason})")
        return StepResult(name=name, ok=False, outcome=StepOutcome.SKIPPED, detail=reason)

    async def run_all(self) -> ReconciliationReport:
        """
        Run every step and return the per-step report.

        Returns:
            ReconciliationReport; report.ok is False when any step failed
            or was skipped
        """
        report = ReconciliationReport(run_id=str(uuid.uuid4()), started_at=datetime.utcnow())
        logger.info(f"Reconciliation run {report.run_id} started")

        # --------------------------------------------------
        # STEP 1: SCHEMA (fatal on failure)
        # --------------------------------------------------
        schema = await self._run_step(
            SCHEMA,
            self.provisioner.ensure_all,
            lambda results: (
                any(r.status == ProvisionStatus.CREATED for r in results),
                f"{sum(r.status == ProvisionStatus.CREATED for r in results)} created, "
                f"{sum(r.status == ProvisionStatus.ALREADY_EXISTS for r in results)} already present"
            )
        )
        report.steps.append(schema)

        if not schema.ok:
            for name in STEP_ORDER[1:]:
                report.steps.append(self._skipped(name, "Schema provisioning failed"))
            return await self._finish(report)

        # --------------------------------------------------
        # STEP 2: PO LINKS
        # --------------------------------------------------
        links = await self._run_step(
            PO_LINKS,
            self.linker.run,
            lambda r: (
                r.changed,
                f"linked={r.linked}, already_linked={r.already_linked}, unmatched={r.unmatched}"
            )
        )
        report.steps.append(links)

        # --------------------------------------------------
        # STEP 3: VENDOR OPS
        # --------------------------------------------------
        report.steps.append(await self._run_step(
            VENDOR_OPS,
            self.vendor_operations.run,
            lambda r: (r.changed, f"{r.count} vendor operations")
        ))

        # --------------------------------------------------
        # STEP 4: WORK CENTERS
        # --------------------------------------------------
        report.steps.append(await self._run_step(
            WORK_CENTERS,
            self.work_centers.run,
            lambda r: (r.changed, f"{len(r.work_centers)} work centers, {r.removed} removed")
        ))

        # --------------------------------------------------
        # STEP 5: TIMELINES (needs up-to-date PO links)
        # --------------------------------------------------
        if links.ok:
            report.steps.append(await self._run_step(
                TIMELINES,
                self.timelines.generate_all,
                lambda r: (r.changed, f"{r.count} timeline entries")
            ))
        else:
            report.steps.append(self._skipped(TIMELINES, "PO Links step failed"))

        return await self._finish(report)

    async def _finish(self, report: ReconciliationReport) -> ReconciliationReport:
        report.completed_at = datetime.utcnow()

        if self.run_log is not None:
            await self.run_log.record(report)

        logger.info(
            f"Reconciliation run {report.run_id} completed: {report.status.value} "
            f"in {report.duration_seconds:.2f}s - " + ", ".join(report.summary_lines())
        )
        return report
