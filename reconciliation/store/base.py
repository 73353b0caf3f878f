"""
Store client contract consumed by the reconciliation engine.

Any relational store can back the engine as long as it offers these four
operations. Filters are plain dictionaries of column -> value:
    - a scalar matches by equality
    - a list/tuple/set matches by membership
    - None matches NULL

query() optionally orders by column names (a leading "-" sorts descending)
and caps the number of rows returned.
"""

from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from pydantic import BaseModel
from schemas.results import ProvisionStatus

Row = Dict[str, Any]
Filter = Mapping[str, Any]


class WriteResult(BaseModel):
    """Rows deleted and written by one store call"""
    deleted: int = 0
    written: int = 0


class StoreClient(ABC):
    """
    Abstract store used by every reconciliation component.

    Implementations raise QueryFailure for failed/timed-out reads and
    WriteFailure for failed/timed-out writes; ensure_table raises
    ProvisionFailure.
    """

    @abstractmethod
    async def query(
        self,
        table: str,
        filter: Optional[Filter] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None
    ) -> List[Row]:
        """Return rows of table matching filter, ordered by order_by, at most limit of them"""
        pass

    @abstractmethod
    async def upsert(self, table: str, rows: Sequence[Row], conflict_key: Sequence[str]) -> WriteResult:
        """Insert rows, updating the given columns of rows whose conflict_key already exists"""
        pass

    @abstractmethod
    async def replace(self, table: str, rows: Sequence[Row], scope_filter: Optional[Filter] = None) -> WriteResult:
        """
        Delete rows matching scope_filter (all rows when None), then insert rows.

        Atomic where the store supports transactions; otherwise readers may
        observe the scope empty between the delete and the insert.
        """
        pass

    @abstractmethod
    async def ensure_table(self, name: str, columns: Sequence[str]) -> ProvisionStatus:
        """Create table if absent"""
        pass

    async def ping(self) -> bool:
        """Check that the store is reachable"""
        return True


def row_matches(row: Mapping[str, Any], filter: Optional[Filter]) -> bool:
    """Evaluate a filter against one row (shared by non-SQL stores)"""
    if not filter:
        return True
    for column, expected in filter.items():
        value = row.get(column)
        if expected is None:
            if value is not None:
                return False
        elif isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def rows_equivalent(existing: Iterable[Mapping[str, Any]], computed: Iterable[Mapping[str, Any]], fields: Sequence[str]) -> bool:
    """True when both row collections hold the same values on fields, ignoring order"""
    def fingerprint(rows):
        return Counter(tuple(row.get(field) for field in fields) for row in rows)

    return fingerprint(existing) == fingerprint(computed)


def parse_order(order_by: Optional[Sequence[str]]) -> List[Tuple[str, bool]]:
    """Split order_by entries into (column, descending) pairs"""
    return [(column.lstrip("-"), column.startswith("-")) for column in (order_by or ())]


def sort_rows(rows: List[Row], order_by: Optional[Sequence[str]]) -> List[Row]:
    """Order rows like query(order_by=...) does; None sorts before any value"""
    for column, descending in reversed(parse_order(order_by)):
        rows.sort(
            key=lambda row: (row.get(column) is not None, row.get(column)),
            reverse=descending
        )
    return rows
