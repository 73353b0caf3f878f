"""
Run the reconciliation engine once and print the per-step summary.

Usage:
    python scripts/run_reconciliation.py [--vendor-work-centers SR,OSP] [--no-history]

Exit code is 1 when any step failed or was skipped, so the script can be
chained in shell jobs; re-running it is always safe.
"""

import argparse
import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import async_session_maker, engine
from core.logging import setup_logging
from reconciliation.orchestrator import ReconciliationOrchestrator
from reconciliation.store import SQLAlchemyStore

logger = logging.getLogger(__name__)


async def run_reconciliation(vendor_work_centers=None, record_runs: bool = True) -> bool:
    """Run every reconciliation step; True when all succeeded"""
    try:
        async with async_session_maker() as session:
            orchestrator = ReconciliationOrchestrator(
                SQLAlchemyStore(session),
                vendor_work_centers=vendor_work_centers,
                record_runs=record_runs
            )
            report = await orchestrator.run_all()
    finally:
        await engine.dispose()

    for step in report.steps:
        line = step.summary
        if step.detail:
            line += f" ({step.detail})"
        print(line)

    print(f"Run {report.run_id}: {report.status.value} in {report.duration_seconds:.2f}s")
    return report.ok


def main():
    parser = argparse.ArgumentParser(description="Reconcile raw imports into derived dashboard tables")
    parser.add_argument(
        "--vendor-work-centers",
        help=f"Comma-separated vendor work-center codes (default: {','.join(settings.VENDOR_WORK_CENTERS)})"
    )
    parser.add_argument(
        "--no-history",
        action="store_true",
        help="Do not record the run in reconciliation_runs"
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    setup_logging(args.log_level)

    vendor_work_centers = None
    if args.vendor_work_centers:
        vendor_work_centers = [code.strip() for code in args.vendor_work_centers.split(",") if code.strip()]

    ok = asyncio.run(run_reconciliation(vendor_work_centers, record_runs=not args.no_history))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
