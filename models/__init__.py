"""
SQLAlchemy ORM models for database tables.

Raw tables (written by the import/CRUD paths, only read here):
    job: Jobs keyed by job number
    sap_operation: SAP routing operations
    purchase_order: Purchase order lines, linked to jobs post-hoc
    shipment_log: Shipment and work log entries

Engine-owned tables (provisioned and rebuilt by reconciliation):
    work_center: Work-center registry
    vendor_operation: Outsourced operations per job
    job_timeline: Ordered per-job event timeline
    reconciliation_run: Run history

Usage:
    from models.base import Base, RunStatus
    from models.job import Job
    from models.vendor_operation import VendorOperation
"""

from models.base import Base, RunStatus, TimelineSource
from models.job import Job
from models.sap_operation import SAPOperation
from models.purchase_order import PurchaseOrder
from models.shipment_log import ShipmentLog
from models.work_center import WorkCenter
from models.vendor_operation import VendorOperation
from models.job_timeline import JobTimeline
from models.reconciliation_run import ReconciliationRun

RAW_TABLES = (
    Job.__tablename__,
    SAPOperation.__tablename__,
    PurchaseOrder.__tablename__,
    ShipmentLog.__tablename__,
)

ENGINE_TABLES = (
    WorkCenter.__tablename__,
    VendorOperation.__tablename__,
    JobTimeline.__tablename__,
    ReconciliationRun.__tablename__,
)

__all__ = [
    "Base",
    "RunStatus",
    "TimelineSource",
    "Job",
    "SAPOperation",
    "PurchaseOrder",
    "ShipmentLog",
    "WorkCenter",
    "VendorOperation",
    "JobTimeline",
    "ReconciliationRun",
    "RAW_TABLES",
    "ENGINE_TABLES",
]
