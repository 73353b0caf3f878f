"""
Pydantic records for the engine-owned (derived) tables.

Each record lists its natural key in NATURAL_KEY and the columns that make
up its stored value in STORED_FIELDS; generators compare stored rows with
freshly computed ones on exactly those fields.
"""

from pydantic import BaseModel, Field
from typing import ClassVar, Optional, Tuple
from datetime import datetime


class WorkCenterRecord(BaseModel):
    """Work-center registry entry"""

    NATURAL_KEY: ClassVar[Tuple[str, ...]] = ("name",)
    STORED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "name", "type", "status", "utilization", "total_operations",
        "active_jobs", "planned_hours", "actual_hours",
    )

    name: str = Field(..., min_length=1, max_length=50)
    type: str
    status: str
    utilization: float = Field(0.0, ge=0, le=1)
    total_operations: int = Field(0, ge=0)
    active_jobs: int = Field(0, ge=0)
    planned_hours: float = 0.0
    actual_hours: float = 0.0


class VendorOperationRecord(BaseModel):
    """Outsourced operation for one job"""

    NATURAL_KEY: ClassVar[Tuple[str, ...]] = ("job_number", "operation_number", "vendor")
    STORED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "job_number", "operation_number", "vendor", "operation", "planned_work",
        "actual_work", "start_date", "end_date", "status", "notes",
    )

    job_number: str = Field(..., min_length=1)
    operation_number: str = Field(..., min_length=1)
    vendor: str = Field(..., min_length=1)
    operation: Optional[str] = None
    planned_work: Optional[float] = None
    actual_work: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: str
    notes: Optional[str] = None

    @property
    def date_range(self) -> Optional[str]:
        """Date range as the dashboard shows it ("2024-01-03 to 2024-01-17")"""
        if not self.start_date and not self.end_date:
            return None
        start = self.start_date.date().isoformat() if self.start_date else "?"
        end = self.end_date.date().isoformat() if self.end_date else "?"
        return f"{start} to {end}"


class JobTimelineRecord(BaseModel):
    """One entry of a job timeline"""

    NATURAL_KEY: ClassVar[Tuple[str, ...]] = ("job_number", "source", "source_id")
    STORED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "job_number", "event_date", "source", "source_id", "sequence",
        "title", "status", "description", "vendor",
    )

    job_number: str = Field(..., min_length=1)
    event_date: Optional[datetime] = None
    source: str
    source_id: str = Field(..., min_length=1)
    sequence: int = Field(..., ge=0)
    title: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    vendor: Optional[str] = None


def to_row(record: BaseModel) -> dict:
    """Dump a derived record to the dict a store client writes"""
    return {field: getattr(record, field) for field in record.STORED_FIELDS}
