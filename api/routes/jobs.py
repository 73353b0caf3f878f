"""
Per-job view: linked purchase orders, vendor operations and timeline
"""

from fastapi import APIRouter, Depends, HTTPException
from api.dependencies import get_store
from core.exceptions import StoreError
from reconciliation.identifiers import IdentifierMatcher
from reconciliation.store import StoreClient
from reconciliation.transformers.row_mapper import RowMapper
from schemas.api import JobDetailResponse, PurchaseOrderItem, TimelineItem, VendorOperationItem
from schemas.derived import VendorOperationRecord
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/jobs", tags=["Jobs"])

matcher = IdentifierMatcher()
mapper = RowMapper()


@router.get("/{job_number}", response_model=JobDetailResponse)
async def get_job(job_number: str, store: StoreClient = Depends(get_store)):
    """
    Look a job up by any spelling of its number ("j-1005", " J1005 ").

    Vendor operations and timeline come from the derived tables, so they
    reflect the last reconciliation run.
    """
    canonical = matcher.normalize(job_number)
    if matcher.is_unmatched(job_number):
        raise HTTPException(status_code=404, detail="Job not found")

    try:
        jobs = mapper.map_rows("job", await store.query("jobs"))
        job = next((j for j in jobs if matcher.matches(j.job_number, canonical)), None)
        if job is None:
            raise HTTPException(status_code=404, detail="Job not found")

        purchase_orders = mapper.map_rows(
            "purchase_order",
            await store.query("purchase_orders", {"job_number": job.job_number})
        )
        vendor_rows = await store.query("vendor_operations", {"job_number": canonical})
        timeline_rows = await store.query("job_timelines", {"job_number": canonical})

    except StoreError as e:
        logger.error(f"Failed to load job {job_number}: {e.message}", extra={"error_context": e.to_dict()})
        raise HTTPException(status_code=503, detail="Store unavailable")

    vendor_operations = []
    for row in sorted(vendor_rows, key=lambda r: (r["operation_number"], r["vendor"])):
        record = VendorOperationRecord(**{f: row.get(f) for f in VendorOperationRecord.STORED_FIELDS})
        vendor_operations.append(VendorOperationItem(
            date_range=record.date_range,
            **record.model_dump(include={
                "operation_number", "vendor", "operation", "status",
                "planned_work", "actual_work", "notes",
            })
        ))

    return JobDetailResponse(
        job_number=job.job_number,
        canonical_id=canonical,
        title=job.title,
        status=job.status,
        work_center=job.work_center,
        customer=job.customer,
        due_date=job.due_date,
        purchase_orders=[
            PurchaseOrderItem(**po.model_dump(exclude={"job_reference", "job_number"}))
            for po in purchase_orders
            if po.purchasing_document
        ],
        vendor_operations=vendor_operations,
        timeline=[
            TimelineItem(**{field: row.get(field) for field in TimelineItem.model_fields})
            for row in sorted(timeline_rows, key=lambda r: r["sequence"])
        ],
    )
