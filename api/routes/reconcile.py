"""
Reconciliation trigger and run history endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from api.dependencies import get_orchestrator, get_store
from core.exceptions import StoreError
from reconciliation.orchestrator import ReconciliationOrchestrator
from reconciliation.run_log import RunLog
from reconciliation.store import StoreClient
from schemas.api import ReconcileResponse, RunHistoryResponse, RunSummary
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reconcile", tags=["Reconciliation"])


@router.post("", response_model=ReconcileResponse)
async def reconcile(
    request: Request,
    orchestrator: ReconciliationOrchestrator = Depends(get_orchestrator)
):
    """
    Run every reconciliation step.

    Always answers 200: step failures are part of the report (ok=false),
    and re-running is safe.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    logger.info(f"[{request_id}] POST /reconcile")

    report = await orchestrator.run_all()

    logger.info(f"[{request_id}] Reconciliation {report.run_id}: {report.status.value}")

    return ReconcileResponse(
        run_id=report.run_id,
        status=report.status,
        ok=report.ok,
        started_at=report.started_at,
        completed_at=report.completed_at,
        duration_seconds=report.duration_seconds,
        steps=report.steps,
        summary=report.summary_lines()
    )


@router.get("/runs", response_model=RunHistoryResponse)
async def list_runs(
    limit: int = Query(20, ge=1, le=200, description="Number of recent runs to return"),
    store: StoreClient = Depends(get_store)
):
    """Recent reconciliation runs, newest first"""
    try:
        rows = await RunLog(store).recent(limit)
    except StoreError as e:
        logger.error(f"Failed to read run history: {e.message}", extra={"error_context": e.to_dict()})
        raise HTTPException(status_code=503, detail="Run history unavailable")

    runs = [RunSummary.model_validate(row) for row in rows]
    return RunHistoryResponse(runs=runs, total_runs=len(runs))
