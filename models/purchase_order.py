from sqlalchemy import Column, Integer, String, DateTime, Float
from datetime import datetime
from models.base import Base


class PurchaseOrder(Base):
    """
    Purchase order line from the purchasing export.

    Design:
    - job_number_raw keeps the loose job reference exactly as imported
    - job_number is null until the relationship linker matches a job
    """
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchasing_document = Column(String(64), nullable=False, unique=True, index=True)

    item = Column(String(20), nullable=True)
    req_tracking_number = Column(String(64), nullable=True)
    purchasing_group = Column(String(20), nullable=True)

    # Linking
    job_number_raw = Column(String(64), nullable=True)
    job_number = Column(String(64), nullable=True, index=True)

    vendor = Column(String(200), nullable=True)
    short_text = Column(String(500), nullable=True)
    material = Column(String(100), nullable=True)

    order_quantity = Column(Float, nullable=True)
    net_price = Column(Float, nullable=True)
    remaining_quantity = Column(Float, nullable=True)
    remaining_value = Column(Float, nullable=True)

    status = Column(String(50), nullable=True)
    document_date = Column(DateTime, nullable=True, index=True)
    expected_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
