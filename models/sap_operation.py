from sqlalchemy import Column, Integer, String, DateTime, Float, Index
from datetime import datetime
from models.base import Base


class SAPOperation(Base):
    """
    One routing operation from the SAP operations export.

    order_number arrives as "Order" or "Sales Document" depending on the
    export; the import layer resolves it before the row lands here.
    """
    __tablename__ = "sap_operations"

    id = Column(Integer, primary_key=True, autoincrement=True)

    order_number = Column(String(64), nullable=False, index=True)
    sales_document = Column(String(64), nullable=True)
    operation_number = Column(String(20), nullable=False)

    work_center = Column(String(50), nullable=True, index=True)
    description = Column(String(500), nullable=True)
    short_text = Column(String(500), nullable=True)

    planned_work = Column(Float, nullable=True)
    actual_work = Column(Float, nullable=True)
    status = Column(String(50), nullable=True)

    start_date = Column(DateTime, nullable=True)
    finish_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_sap_operation_order_op", "order_number", "operation_number", unique=True),
    )
