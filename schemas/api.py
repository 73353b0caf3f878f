"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from models.base import RunStatus
from schemas.results import StepResult

# ============================================================================
# Reconciliation Schemas
# ============================================================================

class ReconcileResponse(BaseModel):
    """Outcome of one POST /reconcile"""
    run_id: str
    status: RunStatus
    ok: bool
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    steps: List[StepResult] = Field(default_factory=list)
    summary: List[str] = Field(default_factory=list, description='One line per step, e.g. "PO Links: Success"')

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "run_id": "5f0c1c1e-8d4b-4d53-9a53-51c0f6a0d7a2",
                "status": "success",
                "ok": True,
                "started_at": "2024-01-15T10:30:00Z",
                "completed_at": "2024-01-15T10:30:02Z",
                "duration_seconds": 2.1,
                "steps": [
                    {"name": "PO Links", "ok": True, "outcome": "Success", "detail": "linked=3, already_linked=0, unmatched=1"}
                ],
                "summary": ["Schema: No change", "PO Links: Success", "Vendor Ops: No change"]
            }
        }
    )


class RunSummary(BaseModel):
    """One reconciliation_runs row"""
    run_id: str
    status: RunStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    steps: List[Dict[str, Any]] = Field(default_factory=list)
    error_message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RunHistoryResponse(BaseModel):
    runs: List[RunSummary] = Field(default_factory=list)
    total_runs: int = 0

# ============================================================================
# Job View Schemas
# ============================================================================

class PurchaseOrderItem(BaseModel):
    purchasing_document: str
    item: Optional[str] = None
    vendor: Optional[str] = None
    short_text: Optional[str] = None
    material: Optional[str] = None
    order_quantity: Optional[float] = None
    remaining_quantity: Optional[float] = None
    status: Optional[str] = None
    document_date: Optional[datetime] = None
    expected_date: Optional[datetime] = None


class VendorOperationItem(BaseModel):
    operation_number: str
    vendor: str
    operation: Optional[str] = None
    status: str
    date_range: Optional[str] = None
    planned_work: Optional[float] = None
    actual_work: Optional[float] = None
    notes: Optional[str] = None


class TimelineItem(BaseModel):
    sequence: int
    event_date: Optional[datetime] = None
    source: str
    title: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    vendor: Optional[str] = None


class JobDetailResponse(BaseModel):
    """Per-job dashboard view built from raw and derived tables"""
    job_number: str
    canonical_id: str
    title: Optional[str] = None
    status: Optional[str] = None
    work_center: Optional[str] = None
    customer: Optional[str] = None
    due_date: Optional[datetime] = None
    purchase_orders: List[PurchaseOrderItem] = Field(default_factory=list)
    vendor_operations: List[VendorOperationItem] = Field(default_factory=list)
    timeline: List[TimelineItem] = Field(default_factory=list)

# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    last_run: Optional[RunSummary] = None

    @model_validator(mode="after")
    def determine_status(self):
        """Determine overall health status"""
        if not self.database_connected:
            self.status = "unhealthy"
        elif self.last_run is not None and self.last_run.status != RunStatus.SUCCESS:
            self.status = "degraded"
        else:
            self.status = "healthy"
        return self
