from sqlalchemy import Column, Integer, String, Enum, DateTime, Float, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from models.base import Base, RunStatus


class ReconciliationRun(Base):
    """
    Audit trail of reconciliation runs.

    Purpose:
    - Show when the derived tables were last rebuilt
    - Keep the per-step pass/fail summary of each run
    """
    __tablename__ = "reconciliation_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(36), unique=True, nullable=False, index=True)

    status = Column(Enum(RunStatus), default=RunStatus.RUNNING, nullable=False, index=True)

    started_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Float, nullable=True)

    steps = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    error_message = Column(Text, nullable=True)
