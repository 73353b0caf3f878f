"""
Column-name alias resolution for raw import rows.

Each import source names the same logical field differently ("Order",
"Sales Document", "order_number", ...). The alias table lists, per entity
and logical field, the column names to try in order; the first non-empty
value wins. Resolution happens once, when a raw row is mapped to its typed
view, never inside the generators.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
import math

# Callable supplied by an import layer that knows its own column layout
JobIdResolver = Callable[[Mapping[str, Any]], Optional[Any]]

AliasTable = Dict[str, Dict[str, Sequence[str]]]

DEFAULT_ALIASES: AliasTable = {
    "job": {
        "job_number": ("job_number", "Job Number", "Sales Document", "Order"),
        "title": ("title", "List name", "Description"),
        "status": ("status", "Status"),
        "work_center": ("work_center", "Oper.WorkCenter"),
        "customer": ("customer", "Customer"),
        "due_date": ("due_date", "Due Date"),
        "scheduled_date": ("scheduled_date", "Scheduled Date"),
    },
    "sap_operation": {
        "job_reference": ("order_number", "Order", "Sales Document", "sales_document"),
        "operation_number": ("operation_number", "Oper./Act.", "Operation"),
        "work_center": ("work_center", "Oper.WorkCenter"),
        "description": ("description", "Description"),
        "short_text": ("short_text", "Opr. short text", "Operation Short Text"),
        "planned_work": ("planned_work", "Work"),
        "actual_work": ("actual_work", "Actual work", "Acutal Work"),
        "status": ("status", "Status"),
        "start_date": ("start_date", "Basic start date"),
        "finish_date": ("finish_date", "Basic finish date"),
    },
    "purchase_order": {
        "purchasing_document": ("purchasing_document", "Purchasing Document"),
        "job_reference": (
            "job_number_raw", "Order", "Sales Document", "order_number",
            "req_tracking_number", "Req.Tracking Number", "Req. Tracking Number",
        ),
        "item": ("item", "Item"),
        "vendor": ("vendor", "Vendor/supplying plant"),
        "short_text": ("short_text", "Short Text"),
        "material": ("material", "Material"),
        "order_quantity": ("order_quantity", "Order Quantity", "Orde r Qua ntity"),
        "remaining_quantity": ("remaining_quantity", "Still to be delivered (qty)"),
        "deletion_indicator": ("deletion_indicator", "Deletion Indicator"),
        "status": ("status",),
        "document_date": ("document_date", "Document Date"),
        "expected_date": ("expected_date", "Delivery Date"),
    },
    "shipment_log": {
        "id": ("id",),
        "job_reference": ("job_number", "Order", "Sales Document", "order_number"),
        "vendor": ("vendor", "EmployeeName"),
        "description": ("description", "Confirmation Text"),
        "status": ("status",),
        "severity": ("severity",),
        "shipment_date": ("shipment_date", "date", "PostingDate"),
    },
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class FieldAliasResolver:
    """Resolve logical fields of raw rows through an ordered alias table"""

    def __init__(self, aliases: Optional[AliasTable] = None):
        self.aliases = aliases or DEFAULT_ALIASES

    def resolve(self, entity: str, row: Mapping[str, Any], field: str, default: Any = None) -> Any:
        """Return the first non-blank value among the field's aliases"""
        try:
            candidates = self.aliases[entity][field]
        except KeyError:
            raise KeyError(f"No aliases configured for {entity}.{field}")

        for column in candidates:
            value = row.get(column)
            if not _is_blank(value):
                return value
        return default

    def job_id_resolver(self, entity: str) -> JobIdResolver:
        """Resolver function for the job identifier of an entity's rows"""
        field = "job_number" if entity == "job" else "job_reference"
        return lambda row: self.resolve(entity, row, field)

    def date_columns(self, entity: str) -> List[str]:
        """Every column name that may carry one of the entity's date fields"""
        return [
            column
            for field, columns in self.aliases[entity].items() if field.endswith("_date")
            for column in columns
        ]
