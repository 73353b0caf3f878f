from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime
from models.base import Base


class ShipmentLog(Base):
    """Shipment/work log entry, imported independently of purchase orders."""
    __tablename__ = "shipment_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_number = Column(String(64), nullable=True, index=True)

    vendor = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(50), nullable=True)    # Pending, Shipped, Delivered
    severity = Column(String(20), nullable=True)  # Normal, High, Critical

    date = Column(DateTime, nullable=True)
    shipment_date = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
