from sqlalchemy import Column, Integer, String, DateTime, Float
from datetime import datetime
from models.base import Base


class WorkCenter(Base):
    """
    Work-center registry, rebuilt from the distinct work centers in
    sap_operations on every reconciliation run. Never edited by hand.
    """
    __tablename__ = "work_centers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)

    type = Column(String(50), nullable=False)     # Production, Vendor
    status = Column(String(50), nullable=False)   # Running, Idle

    # Share of operations with actual work booked (0.0 - 1.0)
    utilization = Column(Float, nullable=False, default=0.0)
    total_operations = Column(Integer, nullable=False, default=0)
    active_jobs = Column(Integer, nullable=False, default=0)
    planned_hours = Column(Float, nullable=False, default=0.0)
    actual_hours = Column(Float, nullable=False, default=0.0)

    refreshed_at = Column(DateTime, nullable=False, default=datetime.utcnow)
