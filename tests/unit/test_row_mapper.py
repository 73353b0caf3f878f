"""
Unit tests for raw row mapping
"""

import math
from datetime import date, datetime, timezone, timedelta
from reconciliation.transformers.row_mapper import RowMapper


class TestRowMapper:
    """Test mapping raw import rows into typed rows"""

    def setup_method(self):
        self.mapper = RowMapper()

    def test_sap_operation_from_export_columns(self):
        """Test that SAP export headers resolve through aliases"""
        op = self.mapper.to_sap_operation({
            "Order": 100575126.0,
            "Oper./Act.": "0020",
            "Oper.WorkCenter": "SR",
            "Opr. short text": "Heat treat",
            "Work": "8",
            "Actual work": "2.5",
            "Basic start date": "2024-01-03",
        })

        assert op.order_number == "100575126"
        assert op.operation_number == "0020"
        assert op.work_center == "SR"
        assert op.short_text == "Heat treat"
        assert op.planned_work == 8.0
        assert op.actual_work == 2.5
        assert op.start_date == datetime(2024, 1, 3)

    def test_sap_operation_without_operation_number_is_dropped(self):
        assert self.mapper.to_sap_operation({"Order": "1"}) is None

    def test_missing_work_defaults_to_zero(self):
        op = self.mapper.to_sap_operation({"order_number": "1", "operation_number": "0010", "Work": None})

        assert op.planned_work == 0.0
        assert op.actual_work == 0.0

    def test_job_without_number_is_dropped(self):
        assert self.mapper.to_job({"title": "Orphan"}) is None

    def test_purchase_order_reference_and_link_are_separate(self):
        po = self.mapper.to_purchase_order({
            "Purchasing Document": "4500001",
            "Req.Tracking Number": "100575126 ",
            "job_number": "100575126",
        })

        assert po.purchasing_document == "4500001"
        assert po.job_reference == "100575126"
        assert po.job_number == "100575126"

    def test_purchase_order_status_derivation(self):
        """Test status derived from deletion flag and remaining quantity"""
        cancelled = self.mapper.to_purchase_order({"purchasing_document": "1", "Deletion Indicator": "L", "remaining_quantity": 3})
        open_po = self.mapper.to_purchase_order({"purchasing_document": "2", "remaining_quantity": "3"})
        completed = self.mapper.to_purchase_order({"purchasing_document": "3", "remaining_quantity": 0})
        explicit = self.mapper.to_purchase_order({"purchasing_document": "4", "status": "On Hold"})

        assert cancelled.status == "Cancelled"
        assert open_po.status == "Open"
        assert completed.status == "Completed"
        assert explicit.status == "On Hold"

    def test_custom_job_id_resolver(self):
        """Test that an import layer can supply its own identifier lookup"""
        mapper = RowMapper(job_id_resolver=lambda row: row.get("Auftrag"))

        op = mapper.to_sap_operation({"Auftrag": "A-7", "Order": "ignored", "operation_number": "0010"})

        assert op.order_number == "A-7"

    def test_map_rows_drops_unusable_rows(self):
        rows = [{"job_number": "J-1"}, {"title": "no number"}, {"job_number": "  "}]

        jobs = self.mapper.map_rows("job", rows)

        assert [job.job_number for job in jobs] == ["J-1"]


class TestValueParsing:
    """Test spreadsheet cell parsing"""

    def test_parse_str(self):
        assert RowMapper._parse_str(None) is None
        assert RowMapper._parse_str("  ") is None
        assert RowMapper._parse_str(math.nan) is None
        assert RowMapper._parse_str(100575126.0) == "100575126"
        assert RowMapper._parse_str(" SR ") == "SR"

    def test_parse_float(self):
        assert RowMapper._parse_float("1,250.5") == 1250.5
        assert RowMapper._parse_float("n/a") is None
        assert RowMapper._parse_float("") is None
        assert RowMapper._parse_float(math.nan) is None
        assert RowMapper._parse_float(3) == 3.0

    def test_parse_datetime_formats(self):
        assert RowMapper._parse_datetime(date(2024, 1, 5)) == datetime(2024, 1, 5)
        assert RowMapper._parse_datetime("2024-01-05T10:30:00") == datetime(2024, 1, 5, 10, 30)
        assert RowMapper._parse_datetime("garbage") is None
        assert RowMapper._parse_datetime("") is None

    def test_parse_datetime_excel_serial(self):
        """Test spreadsheet serial day numbers"""
        assert RowMapper._parse_datetime(45296) == datetime(2024, 1, 5)
        assert RowMapper._parse_datetime(45296.5) == datetime(2024, 1, 5, 12)

    def test_parse_datetime_text_from_csv(self):
        """Test serial numbers and US dates arriving as text"""
        assert RowMapper._parse_datetime("45296") == datetime(2024, 1, 5)
        assert RowMapper._parse_datetime(" 45296.5 ") == datetime(2024, 1, 5, 12)
        assert RowMapper._parse_datetime("01/05/2024") == datetime(2024, 1, 5)
        assert RowMapper._parse_datetime("1/5/2024 2:30 PM") == datetime(2024, 1, 5, 14, 30)
        assert RowMapper._parse_datetime("13/45/2024") is None

    def test_parse_datetime_aware_to_naive_utc(self):
        aware = datetime(2024, 1, 5, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        assert RowMapper._parse_datetime(aware) == datetime(2024, 1, 5, 10, 0)
        assert RowMapper._parse_datetime("2024-01-05T10:00:00Z") == datetime(2024, 1, 5, 10, 0)
