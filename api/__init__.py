"""
HTTP surface of the reconciliation engine.

Modules:
    main: FastAPI application
    middleware: Request id and latency headers
    dependencies: Session, store and orchestrator providers

Routes:
    POST /reconcile          Run every reconciliation step
    GET  /reconcile/runs     Recent run history
    GET  /jobs/{job_number}  Per-job view
    GET  /health             Store reachability and last run
"""
