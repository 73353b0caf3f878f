from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class RunStatus(str, enum.Enum):
    """Reconciliation run status"""
    RUNNING = "running"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class TimelineSource(str, enum.Enum):
    """Raw stream a timeline entry was derived from"""
    PURCHASE_ORDER = "purchase_order"
    SHIPMENT_LOG = "shipment_log"
