"""
Typed views of raw import rows.

Raw tables are populated by independent spreadsheet imports, so the
engine never works on loose dictionaries: every row is mapped once into
one of these models (see reconciliation.transformers.row_mapper).
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class JobRow(BaseModel):
    """A job as read from the jobs table"""
    model_config = ConfigDict(frozen=True)

    job_number: str
    title: Optional[str] = None
    status: Optional[str] = None
    work_center: Optional[str] = None
    customer: Optional[str] = None
    due_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None


class SAPOperationRow(BaseModel):
    """One SAP routing operation"""
    model_config = ConfigDict(frozen=True)

    order_number: Optional[str] = None
    operation_number: str
    work_center: Optional[str] = None
    description: Optional[str] = None
    short_text: Optional[str] = None
    planned_work: float = 0.0
    actual_work: float = 0.0
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None


class PurchaseOrderRow(BaseModel):
    """
    One purchase order line.

    job_reference is the loose identifier from the import (whatever column
    the export used); job_number is the linked canonical job, or None.
    """
    model_config = ConfigDict(frozen=True)

    purchasing_document: Optional[str] = None
    job_reference: Optional[str] = None
    job_number: Optional[str] = None
    item: Optional[str] = None
    vendor: Optional[str] = None
    short_text: Optional[str] = None
    material: Optional[str] = None
    order_quantity: Optional[float] = None
    remaining_quantity: Optional[float] = None
    status: Optional[str] = None
    document_date: Optional[datetime] = None
    expected_date: Optional[datetime] = None


class ShipmentLogRow(BaseModel):
    """One shipment log entry"""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    job_reference: Optional[str] = None
    vendor: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    severity: Optional[str] = None
    shipment_date: Optional[datetime] = None
