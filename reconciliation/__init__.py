"""
Reconciliation engine for the shop-floor dashboard.

Raw tables (jobs, sap_operations, purchase_orders, shipment_logs) are
filled by independent spreadsheet imports with no foreign keys between
them. This package normalizes their job identifiers and rebuilds the
derived tables from them, idempotently, so it can be re-run at any time.

Modules:
    identifiers: Canonical job identifiers (IdentifierMatcher)
    aliases: Ordered column-alias table for raw rows
    provisioner: Create-if-absent for engine-owned tables
    linker: Purchase order -> job linking
    vendor_operations: Vendor operations from SAP operations
    work_centers: Work-center registry rebuild
    timeline: Per-job timelines from purchase orders and shipment logs
    run_log: Run history
    orchestrator: Runs every step in dependency order

Subpackages:
    store: Store client contract, SQLAlchemy store, in-memory store
    transformers: Raw row -> typed row mapping

Usage:
    from reconciliation.orchestrator import ReconciliationOrchestrator
    from reconciliation.store import SQLAlchemyStore

    async with async_session_maker() as session:
        orchestrator = ReconciliationOrchestrator(SQLAlchemyStore(session))
        report = await orchestrator.run_all()

    for line in report.summary_lines():
        print(line)    # "PO Links: Success", "Vendor Ops: No change", ...

Error Handling:
    Store clients raise the StoreError family from core.exceptions. The
    orchestrator catches them at each step boundary and records them in
    the report; run_all() never raises.
"""

__all__ = [
    "IdentifierMatcher",
    "FieldAliasResolver",
    "SchemaProvisioner",
    "RelationshipLinker",
    "VendorOperationGenerator",
    "WorkCenterSynchronizer",
    "TimelineGenerator",
    "RunLog",
    "ReconciliationOrchestrator",
]
