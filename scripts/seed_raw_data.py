"""
Load spreadsheet exports (CSV) into the raw tables.

Usage:
    python scripts/seed_raw_data.py --jobs jobs.csv --sap sap.csv --purchase-orders po.csv --shipments logs.csv

Column names are resolved through the reconciliation alias table, so the
SAP export may say "Order" or "Sales Document" and the purchasing export
"Req.Tracking Number"; the loose job reference of purchase orders lands
in job_number_raw and is linked by the next reconciliation run.
"""

import argparse
import asyncio
import logging
import sys
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

import pandas as pd
from core.database import async_session_maker, engine
from core.logging import setup_logging
from reconciliation.store import SQLAlchemyStore, StoreClient
from reconciliation.transformers.row_mapper import EXCEL_EPOCH, RowMapper

logger = logging.getLogger(__name__)

mapper = RowMapper()

JOB_KEY = ("job_number",)
SAP_OPERATION_KEY = ("order_number", "operation_number")
PURCHASE_ORDER_KEY = ("purchasing_document",)


def parse_date_column(series: pd.Series) -> pd.Series:
    """
    Parse one date column of an export.

    Cells holding a number are spreadsheet serial days; everything else goes
    through pandas' mixed-format parser (ISO, US month-first, ...). Aware
    values are converted to naive UTC. Unparseable cells become None.
    """
    numeric = pd.to_numeric(series, errors="coerce")
    serial = pd.to_datetime(numeric, unit="D", origin=EXCEL_EPOCH, errors="coerce")
    text = pd.to_datetime(series.where(numeric.isna()), format="mixed", utc=True, errors="coerce")
    parsed = serial.fillna(text.dt.tz_localize(None))

    unparsed = int((series.notna() & parsed.isna()).sum())
    if unparsed:
        logger.warning(f"{unparsed} unparseable values in date column {series.name!r}")

    return pd.Series(
        [None if pd.isna(value) else value.to_pydatetime() for value in parsed],
        index=series.index,
        dtype=object
    )


def read_export(path: Path, entity: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Read a CSV export into dicts, blank cells as None.

    When entity is given, the columns that may carry its date fields are
    parsed into datetimes.
    """
    df = pd.read_csv(path, dtype=object)
    df.columns = df.columns.str.strip()

    if entity is not None:
        for column in mapper.resolver.date_columns(entity):
            if column in df.columns:
                df[column] = parse_date_column(df[column])

    df = df.astype(object).where(pd.notna(df), None)
    records = df.to_dict(orient="records")
    logger.info(f"Read {len(records)} rows from {path}")
    return records


def collapse_duplicates(rows: List[Dict[str, Any]], key: Sequence[str], label: str) -> List[Dict[str, Any]]:
    """Keep the last row per natural key; one upsert batch may not touch a key twice"""
    unique: Dict[tuple, Dict[str, Any]] = {}
    for row in rows:
        unique[tuple(row.get(column) for column in key)] = row

    collapsed = len(rows) - len(unique)
    if collapsed:
        logger.warning(f"Collapsed {collapsed} duplicate {label} rows sharing {', '.join(key)}")
    return list(unique.values())


def job_rows(records) -> List[Dict[str, Any]]:
    return [job.model_dump() for job in mapper.map_rows("job", records)]


def sap_operation_rows(records) -> List[Dict[str, Any]]:
    rows = []
    for op in mapper.map_rows("sap_operation", records):
        if op.order_number is None:
            logger.warning(f"Skipping SAP operation {op.operation_number} without order number")
            continue
        rows.append(op.model_dump())
    return rows


def purchase_order_rows(records) -> List[Dict[str, Any]]:
    rows = []
    for po in mapper.map_rows("purchase_order", records):
        if po.purchasing_document is None:
            logger.warning("Skipping purchase order without purchasing document")
            continue
        row = po.model_dump(exclude={"job_reference", "job_number"})
        row["job_number_raw"] = po.job_reference
        rows.append(row)
    return rows


def shipment_log_rows(records) -> List[Dict[str, Any]]:
    rows = []
    for log in mapper.map_rows("shipment_log", records):
        row = log.model_dump(exclude={"id", "job_reference"})
        row["job_number"] = log.job_reference
        rows.append(row)
    return rows


async def seed(store: StoreClient, args) -> None:
    if args.jobs:
        rows = collapse_duplicates(job_rows(read_export(args.jobs, "job")), JOB_KEY, "job")
        await store.upsert("jobs", rows, conflict_key=JOB_KEY)
        logger.info(f"Upserted {len(rows)} jobs")

    if args.sap:
        rows = collapse_duplicates(
            sap_operation_rows(read_export(args.sap, "sap_operation")), SAP_OPERATION_KEY, "SAP operation"
        )
        await store.upsert("sap_operations", rows, conflict_key=SAP_OPERATION_KEY)
        logger.info(f"Upserted {len(rows)} SAP operations")

    if args.purchase_orders:
        rows = collapse_duplicates(
            purchase_order_rows(read_export(args.purchase_orders, "purchase_order")),
            PURCHASE_ORDER_KEY,
            "purchase order"
        )
        await store.upsert("purchase_orders", rows, conflict_key=PURCHASE_ORDER_KEY)
        logger.info(f"Upserted {len(rows)} purchase orders")

    if args.shipments:
        # Shipment logs have no natural key: each import replaces the previous one
        rows = shipment_log_rows(read_export(args.shipments, "shipment_log"))
        result = await store.replace("shipment_logs", rows)
        logger.info(f"Loaded {result.written} shipment logs ({result.deleted} replaced)")


async def main_async(args) -> None:
    try:
        async with async_session_maker() as session:
            await seed(SQLAlchemyStore(session), args)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Load CSV exports into the raw tables")
    parser.add_argument("--jobs", type=Path, help="Jobs export")
    parser.add_argument("--sap", type=Path, help="SAP operations export")
    parser.add_argument("--purchase-orders", type=Path, help="Purchasing export")
    parser.add_argument("--shipments", type=Path, help="Shipment log export")
    args = parser.parse_args()

    setup_logging()

    if not any([args.jobs, args.sap, args.purchase_orders, args.shipments]):
        parser.error("Nothing to load: pass at least one export")

    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
