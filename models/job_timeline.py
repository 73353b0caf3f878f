from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from datetime import datetime
from models.base import Base


class JobTimeline(Base):
    """
    One dated event in a job's timeline, merged from purchase orders and
    shipment logs. Rows of a job are replaced together on regeneration.
    """
    __tablename__ = "job_timelines"

    id = Column(Integer, primary_key=True, autoincrement=True)

    job_number = Column(String(64), nullable=False, index=True)
    event_date = Column(DateTime, nullable=True)
    source = Column(String(20), nullable=False)       # purchase_order, shipment_log
    source_id = Column(String(64), nullable=False)
    sequence = Column(Integer, nullable=False)

    title = Column(String(200), nullable=True)
    status = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    vendor = Column(String(200), nullable=True)

    refreshed_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_job_timeline_event", "job_number", "source", "source_id", unique=True),
        Index("idx_job_timeline_order", "job_number", "sequence"),
    )
