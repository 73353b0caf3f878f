from reconciliation.store.base import StoreClient, WriteResult, rows_equivalent
from reconciliation.store.memory import InMemoryStore
from reconciliation.store.sqlalchemy_store import SQLAlchemyStore

__all__ = [
    "StoreClient",
    "WriteResult",
    "rows_equivalent",
    "InMemoryStore",
    "SQLAlchemyStore",
]
