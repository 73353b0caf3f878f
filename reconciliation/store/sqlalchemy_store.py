"""
Store client over an async SQLAlchemy session (PostgreSQL or SQLite)
"""

from typing import Awaitable, List, Optional, Sequence, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Table, delete, insert, inspect, select, text
from sqlalchemy.dialects import postgresql, sqlite
from core.config import settings
from core.exceptions import ProvisionFailure, QueryFailure, WriteFailure
from models import Base
from reconciliation.store.base import StoreClient, WriteResult, Row, Filter, parse_order
from schemas.results import ProvisionStatus
import asyncio
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLAlchemyStore(StoreClient):
    """
    Store client backed by the ORM metadata.

    Ensures:
    - Upserts use INSERT ... ON CONFLICT on the natural key
    - replace() deletes and inserts inside one transaction
    - Every call is bounded by STORE_TIMEOUT_SECONDS
    """

    def __init__(
        self,
        db_session: AsyncSession,
        timeout_seconds: Optional[float] = None,
        batch_size: Optional[int] = None
    ):
        self.db = db_session
        self.timeout_seconds = timeout_seconds or settings.STORE_TIMEOUT_SECONDS
        self.batch_size = batch_size or settings.RECONCILE_BATCH_SIZE

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise KeyError(f"Unknown table: {name}")
        return table

    def _where(self, table: Table, filter: Optional[Filter]):
        clauses = []
        for column, expected in (filter or {}).items():
            col = table.c[column]
            if expected is None:
                clauses.append(col.is_(None))
            elif isinstance(expected, (list, tuple, set, frozenset)):
                clauses.append(col.in_(list(expected)))
            else:
                clauses.append(col == expected)
        return clauses

    def _order(self, table: Table, order_by: Optional[Sequence[str]]):
        return [
            table.c[column].desc().nulls_last() if descending else table.c[column].asc().nulls_first()
            for column, descending in parse_order(order_by)
        ]

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)

    def _insert_for_dialect(self, table: Table):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table)
        if dialect == "sqlite":
            return sqlite.insert(table)
        raise NotImplementedError(f"Upsert not supported for dialect {dialect}")

    async def ping(self) -> bool:
        try:
            await self._bounded(self.db.execute(text("SELECT 1")))
            return True
        except Exception as e:
            await self.db.rollback()
            raise QueryFailure(
                "Store is unreachable",
                context={"operation": "PING"},
                original_exception=e
            )

    async def query(
        self,
        table: str,
        filter: Optional[Filter] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None
    ) -> List[Row]:
        try:
            target = self._table(table)
            stmt = (
                select(target)
                .where(*self._where(target, filter))
                .order_by(*self._order(target, order_by), target.c.id)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            result = await self._bounded(self.db.execute(stmt))
            return [dict(row) for row in result.mappings().all()]

        except asyncio.TimeoutError as e:
            await self.db.rollback()
            raise QueryFailure(
                f"Query on {table} timed out",
                context={"table_name": table, "filter": dict(filter or {}), "timeout": self.timeout_seconds},
                original_exception=e
            )
        except Exception as e:
            await self.db.rollback()
            raise QueryFailure(
                f"Query on {table} failed",
                context={"table_name": table, "filter": dict(filter or {})},
                original_exception=e
            )

    async def upsert(self, table: str, rows: Sequence[Row], conflict_key: Sequence[str]) -> WriteResult:
        if not rows:
            return WriteResult()

        try:
            target = self._table(table)
            update_columns = [c for c in rows[0].keys() if c not in conflict_key]

            for i in range(0, len(rows), self.batch_size):
                batch = list(rows[i:i + self.batch_size])
                stmt = self._insert_for_dialect(target)
                if update_columns:
                    stmt = stmt.on_conflict_do_update(
                        index_elements=list(conflict_key),
                        set_={column: stmt.excluded[column] for column in update_columns}
                    )
                else:
                    stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_key))
                await self._bounded(self.db.execute(stmt, batch))

            await self._bounded(self.db.commit())
            logger.debug(f"Upserted {len(rows)} rows into {table}")
            return WriteResult(written=len(rows))

        except Exception as e:
            await self.db.rollback()
            raise WriteFailure(
                f"Upsert into {table} failed",
                context={
                    "table_name": table,
                    "operation": "UPSERT",
                    "row_count": len(rows),
                    "conflict_key": list(conflict_key)
                },
                original_exception=e
            )

    async def replace(self, table: str, rows: Sequence[Row], scope_filter: Optional[Filter] = None) -> WriteResult:
        try:
            target = self._table(table)
            deleted = await self._bounded(
                self.db.execute(delete(target).where(*self._where(target, scope_filter)))
            )

            for i in range(0, len(rows), self.batch_size):
                batch = list(rows[i:i + self.batch_size])
                await self._bounded(self.db.execute(insert(target), batch))

            await self._bounded(self.db.commit())
            logger.debug(f"Replaced {deleted.rowcount} rows with {len(rows)} in {table}")
            return WriteResult(deleted=deleted.rowcount or 0, written=len(rows))

        except Exception as e:
            await self.db.rollback()
            raise WriteFailure(
                f"Replace in {table} failed",
                context={
                    "table_name": table,
                    "operation": "REPLACE",
                    "row_count": len(rows),
                    "scope": dict(scope_filter or {})
                },
                original_exception=e
            )

    async def ensure_table(self, name: str, columns: Sequence[str]) -> ProvisionStatus:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise ProvisionFailure(
                f"No table definition for {name}",
                context={"table_name": name}
            )

        missing = [c for c in columns if c not in table.c]
        if missing:
            raise ProvisionFailure(
                f"Table {name} does not define requested columns",
                context={"table_name": name, "missing_columns": missing}
            )

        def create_if_absent(sync_conn) -> ProvisionStatus:
            if inspect(sync_conn).has_table(name):
                return ProvisionStatus.ALREADY_EXISTS
            table.create(sync_conn, checkfirst=True)
            return ProvisionStatus.CREATED

        try:
            conn = await self.db.connection()
            status = await self._bounded(conn.run_sync(create_if_absent))
            await self.db.commit()
            return status

        except Exception as e:
            await self.db.rollback()
            raise ProvisionFailure(
                f"Failed to provision table {name}",
                context={"table_name": name},
                original_exception=e
            )
