"""
Map raw store rows into typed row models with alias resolution
"""

from typing import Any, Optional, Mapping
from datetime import date, datetime, timedelta, timezone
from schemas.rows import JobRow, SAPOperationRow, PurchaseOrderRow, ShipmentLogRow
from reconciliation.aliases import FieldAliasResolver, JobIdResolver
import logging
import math
import re

logger = logging.getLogger(__name__)

# Spreadsheet serial day 0 (Excel's 1900 leap-year bug folded in)
EXCEL_EPOCH = datetime(1899, 12, 30)

# Serial day numbers arrive as text from CSV exports ("45296", "45296.5")
_SERIAL = re.compile(r"^\d+(\.\d+)?$")

# Month-first layouts written by US-locale spreadsheet exports
US_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%y",
)


class RowMapper:
    """
    Turn raw rows from any import source into typed rows.

    Handles:
    - Column alias resolution (one ordered alias list per logical field)
    - Type conversion of spreadsheet values
    - Derived defaults (purchase order status)

    job_id_resolver, when supplied by the import layer, replaces the alias
    lookup for the job identifier of every row kind.
    """

    def __init__(
        self,
        resolver: Optional[FieldAliasResolver] = None,
        job_id_resolver: Optional[JobIdResolver] = None
    ):
        self.resolver = resolver or FieldAliasResolver()
        self.job_id_resolver = job_id_resolver

    def _job_id(self, entity: str, row: Mapping[str, Any]) -> Any:
        if self.job_id_resolver is not None:
            return self.job_id_resolver(row)
        return self.resolver.job_id_resolver(entity)(row)

    def _get(self, entity: str, row: Mapping[str, Any], field: str) -> Any:
        return self.resolver.resolve(entity, row, field)

    def to_job(self, row: Mapping[str, Any]) -> Optional[JobRow]:
        """Map a jobs row; rows without a job number are dropped"""
        job_number = self._parse_str(self._job_id("job", row))
        if job_number is None:
            logger.warning(f"Skipping job row without job number: {dict(row)}")
            return None

        return JobRow(
            job_number=job_number,
            title=self._parse_str(self._get("job", row, "title")),
            status=self._parse_str(self._get("job", row, "status")),
            work_center=self._parse_str(self._get("job", row, "work_center")),
            customer=self._parse_str(self._get("job", row, "customer")),
            due_date=self._parse_datetime(self._get("job", row, "due_date")),
            scheduled_date=self._parse_datetime(self._get("job", row, "scheduled_date")),
        )

    def to_sap_operation(self, row: Mapping[str, Any]) -> Optional[SAPOperationRow]:
        """Map an SAP operation row"""
        operation_number = self._parse_str(self._get("sap_operation", row, "operation_number"))
        if operation_number is None:
            logger.warning(f"Skipping SAP operation without operation number: {dict(row)}")
            return None

        return SAPOperationRow(
            order_number=self._parse_str(self._job_id("sap_operation", row)),
            operation_number=operation_number,
            work_center=self._parse_str(self._get("sap_operation", row, "work_center")),
            description=self._parse_str(self._get("sap_operation", row, "description")),
            short_text=self._parse_str(self._get("sap_operation", row, "short_text")),
            planned_work=self._parse_float(self._get("sap_operation", row, "planned_work")) or 0.0,
            actual_work=self._parse_float(self._get("sap_operation", row, "actual_work")) or 0.0,
            status=self._parse_str(self._get("sap_operation", row, "status")),
            start_date=self._parse_datetime(self._get("sap_operation", row, "start_date")),
            finish_date=self._parse_datetime(self._get("sap_operation", row, "finish_date")),
        )

    def to_purchase_order(self, row: Mapping[str, Any]) -> PurchaseOrderRow:
        """Map a purchase order row, deriving status when the export has none"""
        remaining = self._parse_float(self._get("purchase_order", row, "remaining_quantity"))
        status = self._parse_str(self._get("purchase_order", row, "status"))
        if status is None:
            if self._get("purchase_order", row, "deletion_indicator"):
                status = "Cancelled"
            elif remaining is not None and remaining > 0:
                status = "Open"
            else:
                status = "Completed"

        return PurchaseOrderRow(
            purchasing_document=self._parse_str(self._get("purchase_order", row, "purchasing_document")),
            job_reference=self._parse_str(self._job_id("purchase_order", row)),
            job_number=self._parse_str(row.get("job_number")),
            item=self._parse_str(self._get("purchase_order", row, "item")),
            vendor=self._parse_str(self._get("purchase_order", row, "vendor")),
            short_text=self._parse_str(self._get("purchase_order", row, "short_text")),
            material=self._parse_str(self._get("purchase_order", row, "material")),
            order_quantity=self._parse_float(self._get("purchase_order", row, "order_quantity")),
            remaining_quantity=remaining,
            status=status,
            document_date=self._parse_datetime(self._get("purchase_order", row, "document_date")),
            expected_date=self._parse_datetime(self._get("purchase_order", row, "expected_date")),
        )

    def to_shipment_log(self, row: Mapping[str, Any]) -> ShipmentLogRow:
        """Map a shipment log row"""
        return ShipmentLogRow(
            id=self._parse_str(self._get("shipment_log", row, "id")),
            job_reference=self._parse_str(self._job_id("shipment_log", row)),
            vendor=self._parse_str(self._get("shipment_log", row, "vendor")),
            description=self._parse_str(self._get("shipment_log", row, "description")),
            status=self._parse_str(self._get("shipment_log", row, "status")),
            severity=self._parse_str(self._get("shipment_log", row, "severity")),
            shipment_date=self._parse_datetime(self._get("shipment_log", row, "shipment_date")),
        )

    @staticmethod
    def _parse_str(value: Any) -> Optional[str]:
        """Stringify a cell value; blanks become None"""
        if value is None:
            return None
        if isinstance(value, float):
            if math.isnan(value):
                return None
            if value.is_integer():
                value = int(value)
        text = str(value).strip()
        return text or None

    @staticmethod
    def _parse_float(value: Any) -> Optional[float]:
        """Safely parse float value"""
        if value is None or value == "":
            return None
        try:
            parsed = float(str(value).replace(",", "")) if isinstance(value, str) else float(value)
        except (ValueError, TypeError):
            return None
        if math.isnan(parsed):
            return None
        return parsed

    @staticmethod
    def _parse_datetime(value: Any) -> Optional[datetime]:
        """
        Parse a date cell.

        Accepts datetime/date objects, ISO strings, US month-first strings
        and spreadsheet serial day numbers (numeric or as text). Aware values
        are converted to naive UTC.
        """
        if value is None or value == "":
            return None

        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime(value.year, value.month, value.day)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            if isinstance(value, float) and math.isnan(value):
                return None
            parsed = EXCEL_EPOCH + timedelta(days=float(value))
        else:
            text = str(value).strip()
            if _SERIAL.match(text):
                parsed = EXCEL_EPOCH + timedelta(days=float(text))
            else:
                parsed = RowMapper._parse_date_text(text)
                if parsed is None:
                    logger.debug(f"Unparseable date value: {value!r}")
                    return None

        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    @staticmethod
    def _parse_date_text(text: str) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        for fmt in US_DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return None

    def map_rows(self, kind: str, rows) -> list:
        """Map a sequence of raw rows of one kind, dropping unusable rows"""
        mapper = {
            "job": self.to_job,
            "sap_operation": self.to_sap_operation,
            "purchase_order": self.to_purchase_order,
            "shipment_log": self.to_shipment_log,
        }[kind]
        mapped = [mapper(row) for row in rows]
        return [row for row in mapped if row is not None]
