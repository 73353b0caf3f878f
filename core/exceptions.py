"""
Exceptions for the reconciliation engine with structured error context.

Every failure raised by a store client or a reconciliation step carries a
context dictionary (table, operation, step name, ...) so the orchestrator
can record it in the run report without losing detail.

Exception Hierarchy:
    ReconciliationError (base)
    └── StoreError
        ├── ProvisionFailure   (fatal: aborts the whole run)
        ├── QueryFailure       (per-step: step marked failed)
        └── WriteFailure       (per-step: earlier writes may have committed)

An identifier that matches no job is not an exception; linkers count it.
"""

from typing import Optional, Dict, Any
from datetime import datetime


class ReconciliationError(Exception):
    """
    Base exception for all reconciliation errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (table, operation, step, ...)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Store Errors
# ============================================================================

class StoreError(ReconciliationError):
    """Base exception for failures reported by a store client."""
    pass


class ProvisionFailure(StoreError):
    """
    Raised when an engine-owned table cannot be created or verified.

    Fatal for the whole run: every downstream write depends on the table.

    Context should include:
        - table_name: Table being provisioned
        - missing_columns: Columns requested but unknown (if applicable)
    """
    pass


class QueryFailure(StoreError):
    """
    Raised when reading from the store fails or times out.

    Context should include:
        - table_name: Table being read
        - filter: The filter that was applied
        - timeout: Timeout in seconds (for timeouts)
    """
    pass


class WriteFailure(StoreError):
    """
    Raised when an upsert or replace fails or times out.

    Writes issued before the failure may already be committed; re-running
    the reconciliation converges because every write is keyed.

    Context should include:
        - table_name: Table being written
        - operation: UPSERT or REPLACE
        - row_count: Number of rows in the failed write
    """
    pass
