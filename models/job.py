from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime
from models.base import Base


class Job(Base):
    """
    A shop job, keyed by its job number.

    Created by spreadsheet imports and mutated by status/progress updates;
    the reconciliation engine only reads it.
    """
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_number = Column(String(64), nullable=False, unique=True, index=True)

    title = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(50), nullable=True)
    work_center = Column(String(50), nullable=True)
    customer = Column(String(200), nullable=True)
    priority = Column(String(20), nullable=True)
    progress = Column(Integer, nullable=True)

    due_date = Column(DateTime, nullable=True)
    scheduled_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
