"""
Core utilities and configuration for the job reconciliation service.

This package provides foundational components used throughout the engine:

Modules:
    config: Application configuration and environment variable management
    database: Database engine and session management
    exceptions: Exception hierarchy for store and reconciliation failures
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import get_session
    from core.exceptions import QueryFailure, WriteFailure
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with async_session_maker() as session:
        store = SQLAlchemyStore(session)
"""

__all__ = [
    "settings",
    "get_session",
    "setup_logging",
    # Exceptions
    "ReconciliationError",
    "StoreError",
    "ProvisionFailure",
    "QueryFailure",
    "WriteFailure",
]
