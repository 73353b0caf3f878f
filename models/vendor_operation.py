from sqlalchemy import Column, Integer, String, DateTime, Float, Text, Index
from datetime import datetime
from models.base import Base


class VendorOperation(Base):
    """
    Outsourced operation derived from an SAP operation routed to a vendor
    work center. job_number is the canonical identifier.
    """
    __tablename__ = "vendor_operations"

    id = Column(Integer, primary_key=True, autoincrement=True)

    job_number = Column(String(64), nullable=False, index=True)
    operation_number = Column(String(20), nullable=False)
    vendor = Column(String(50), nullable=False)

    operation = Column(String(500), nullable=True)
    planned_work = Column(Float, nullable=True)
    actual_work = Column(Float, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    status = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)

    refreshed_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_vendor_operation_key", "job_number", "operation_number", "vendor", unique=True),
    )
