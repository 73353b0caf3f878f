"""
Health check endpoint with store reachability and last reconciliation run
"""

from fastapi import APIRouter, Depends
from api.dependencies import get_store
from reconciliation.run_log import RunLog
from reconciliation.store import StoreClient
from schemas.api import HealthCheckResponse, RunSummary
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(store: StoreClient = Depends(get_store)):
    """
    Health check endpoint.

    Returns:
    - Store connectivity status
    - The most recent reconciliation run, if any
    """
    db_connected = False

    try:
        db_connected = await store.ping()
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    last_run = None
    if db_connected:
        try:
            recent = await RunLog(store).recent(limit=1)
            if recent:
                last_run = RunSummary.model_validate(recent[0])
        except Exception as e:
            # reconciliation_runs is created by the first run
            logger.warning(f"Failed to fetch last reconciliation run: {str(e)}")

    return HealthCheckResponse(
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        last_run=last_run
    )
