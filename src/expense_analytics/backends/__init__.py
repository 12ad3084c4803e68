"""SQL backends for the analytics engine."""

from .duckdb import DuckDBBackend, load_query

__all__ = ["DuckDBBackend", "load_query"]
