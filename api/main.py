"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, jobs, reconcile
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.logging import setup_logging
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Shopfloor Reconciliation API",
    description="Reconciles imported SAP operations, purchase orders and shipment logs into per-job views",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(reconcile.router)
app.include_router(jobs.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Shopfloor Reconciliation API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    logger.info(f"Vendor work centers: {', '.join(settings.VENDOR_WORK_CENTERS)}")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Shopfloor Reconciliation API")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Shopfloor Reconciliation API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "reconcile": "/reconcile",
            "runs": "/reconcile/runs",
            "jobs": "/jobs/{job_number}"
        }
    }
