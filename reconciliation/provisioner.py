"""
Create engine-owned tables before any derived write
"""

from typing import Dict, List, Optional, Sequence
from core.exceptions import ProvisionFailure
from models import Base, ENGINE_TABLES
from reconciliation.store.base import StoreClient
from schemas.results import ProvisionResult, ProvisionStatus
import logging

logger = logging.getLogger(__name__)


def engine_table_columns() -> Dict[str, List[str]]:
    """Column names of every engine-owned table, from the ORM metadata"""
    return {
        name: [column.name for column in Base.metadata.tables[name].columns]
        for name in ENGINE_TABLES
    }


class SchemaProvisioner:
    """
    Idempotent "create if absent" for the derived tables.

    Safe to call on every run. Any failure surfaces as ProvisionFailure,
    which aborts the reconciliation run.
    """

    def __init__(self, store: StoreClient, tables: Optional[Dict[str, Sequence[str]]] = None):
        self.store = store
        self.tables = tables if tables is not None else engine_table_columns()

    async def ensure(self, table_name: str, columns: Sequence[str]) -> ProvisionResult:
        try:
            status = await self.store.ensure_table(table_name, columns)
        except ProvisionFailure:
            raise
        except Exception as e:
            raise ProvisionFailure(
                f"Failed to provision table {table_name}",
                context={"table_name": table_name},
                original_exception=e
            )

        if status == ProvisionStatus.CREATED:
            logger.info(f"Created table {table_name}")
        else:
            logger.debug(f"Table {table_name} already exists")

        return ProvisionResult(table_name=table_name, status=status)

    async def ensure_all(self) -> List[ProvisionResult]:
        """Provision every engine-owned table, stopping at the first failure"""
        return [
            await self.ensure(table_name, columns)
            for table_name, columns in self.tables.items()
        ]
