from reconciliation.transformers.row_mapper import RowMapper

__all__ = ["RowMapper"]
