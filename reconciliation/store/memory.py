"""
In-memory store client.

Substitute for the SQL store in tests and dry runs. Tables must exist
(seeded through the constructor or created with ensure_table) before they
are read or written, like a real database.
"""

from typing import Dict, List, Mapping, Optional, Sequence
from copy import deepcopy
from core.exceptions import QueryFailure, WriteFailure
from reconciliation.store.base import StoreClient, WriteResult, Row, Filter, row_matches, sort_rows
from schemas.results import ProvisionStatus
import logging

logger = logging.getLogger(__name__)


class InMemoryStore(StoreClient):

    def __init__(self, tables: Optional[Mapping[str, Sequence[Row]]] = None):
        self.tables: Dict[str, List[Row]] = {}
        self.columns: Dict[str, List[str]] = {}
        self._next_id: Dict[str, int] = {}
        for name, rows in (tables or {}).items():
            self.tables[name] = []
            self._next_id[name] = 1
            for row in rows:
                self._insert(name, row)

    def _insert(self, table: str, row: Row) -> None:
        stored = deepcopy(dict(row))
        if stored.get("id") is None:
            stored["id"] = self._next_id[table]
        self._next_id[table] = max(self._next_id[table], stored["id"]) + 1
        self.tables[table].append(stored)

    def _require(self, table: str, error_cls, operation: str) -> List[Row]:
        if table not in self.tables:
            raise error_cls(
                f"Table {table} does not exist",
                context={"table_name": table, "operation": operation}
            )
        return self.tables[table]

    async def query(
        self,
        table: str,
        filter: Optional[Filter] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None
    ) -> List[Row]:
        rows = self._require(table, QueryFailure, "SELECT")
        matched = sort_rows([deepcopy(row) for row in rows if row_matches(row, filter)], order_by)
        return matched if limit is None else matched[:limit]

    async def upsert(self, table: str, rows: Sequence[Row], conflict_key: Sequence[str]) -> WriteResult:
        existing = self._require(table, WriteFailure, "UPSERT")
        for row in rows:
            key = tuple(row.get(column) for column in conflict_key)
            target = next(
                (r for r in existing if tuple(r.get(column) for column in conflict_key) == key),
                None
            )
            if target is None:
                self._insert(table, row)
            else:
                target.update(deepcopy(dict(row)))
        return WriteResult(written=len(rows))

    async def replace(self, table: str, rows: Sequence[Row], scope_filter: Optional[Filter] = None) -> WriteResult:
        existing = self._require(table, WriteFailure, "REPLACE")
        kept = [row for row in existing if not row_matches(row, scope_filter)] if scope_filter else []
        deleted = len(existing) - len(kept)
        self.tables[table] = kept
        for row in rows:
            self._insert(table, row)
        return WriteResult(deleted=deleted, written=len(rows))

    async def ensure_table(self, name: str, columns: Sequence[str]) -> ProvisionStatus:
        if name in self.tables:
            return ProvisionStatus.ALREADY_EXISTS
        self.tables[name] = []
        self.columns[name] = list(columns)
        self._next_id[name] = 1
        logger.debug(f"Created in-memory table {name}")
        return ProvisionStatus.CREATED
