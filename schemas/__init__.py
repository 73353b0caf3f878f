"""
Pydantic schemas for data validation and serialization.

Schemas:
    rows: Typed views of raw import rows (jobs, SAP operations, POs, shipments)
    derived: Records written to the engine-owned tables
    results: Component results and the reconciliation report
    api: API endpoint request/response schemas

Usage:
    from schemas.rows import JobRow, PurchaseOrderRow
    from schemas.derived import VendorOperationRecord
    from schemas.results import LinkReport, ReconciliationReport
"""

__all__ = [
    "JobRow",
    "SAPOperationRow",
    "PurchaseOrderRow",
    "ShipmentLogRow",
    "WorkCenterRecord",
    "VendorOperationRecord",
    "JobTimelineRecord",
    "LinkReport",
    "ReplaceResult",
    "SyncResult",
    "StepResult",
    "ReconciliationReport",
]
