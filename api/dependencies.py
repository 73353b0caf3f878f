"""
FastAPI dependencies: database session, store client, orchestrator
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import get_session as get_db
from reconciliation.orchestrator import ReconciliationOrchestrator
from reconciliation.store import SQLAlchemyStore, StoreClient


async def get_store(db: AsyncSession = Depends(get_db)) -> StoreClient:
    """Store client over the request's database session"""
    return SQLAlchemyStore(db)


async def get_orchestrator(store: StoreClient = Depends(get_store)) -> ReconciliationOrchestrator:
    return ReconciliationOrchestrator(store)
