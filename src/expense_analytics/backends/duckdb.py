"""
DuckDB backend.

Runs the reference SQL window queries over the in-memory dataset, so the
pure-Python engine can be checked against a real SQL engine.
"""

from importlib import resources
from pathlib import Path
from typing import Optional, Union
import pyarrow as pa

try:
    import duckdb
except ImportError:
    raise ImportError("duckdb is required. Install with: pip install duckdb")

from ..analyses import Report, get_definition
from ..config import DuckDBConfig, ReportConfig
from ..exceptions import EmptyPartitionError
from ..logging import get_logger
from ..store import RecordStore


logger = get_logger("backends.duckdb")

SQL_PACKAGE = "expense_analytics"


def load_query(name: str, variables: Optional[dict[str, object]] = None) -> str:
    """
    Load a packaged SQL query and substitute ``{{var}}`` placeholders.

    Args:
        name: Query name (file stem under ``expense_analytics/sql``)
        variables: Values for ``{{var}}`` placeholders

    Returns:
        SQL text
    """
    try:
        query = resources.files(SQL_PACKAGE).joinpath("sql").joinpath(f"{name}.sql").read_text()
    except FileNotFoundError:
        raise ValueError(f"SQL query not found: {name}") from None

    for key, value in (variables or {}).items():
        query = query.replace(f"{{{{{key}}}}}", str(value))
    return query


class DuckDBBackend:
    """
    DuckDB analytical engine.

    Source tables are registered as views over PyArrow tables; nothing is
    copied into the database.
    """

    def __init__(self, config: Optional[DuckDBConfig] = None):
        self.config = config or DuckDBConfig()
        self._conn: Optional[duckdb.DuckDBPyConnection] = None

        if not self.config.in_memory:
            Path(self.config.database_path).parent.mkdir(parents=True, exist_ok=True)

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get or create DuckDB connection."""
        if self._conn is None:
            self._conn = self._create_connection()
        return self._conn

    def _create_connection(self) -> duckdb.DuckDBPyConnection:
        """Create and configure DuckDB connection."""
        conn = duckdb.connect(
            self.config.get_connection_string(),
            read_only=self.config.read_only,
        )

        if self.config.threads:
            conn.execute(f"SET threads = {self.config.threads}")

        if self.config.memory_limit:
            conn.execute(f"SET memory_limit = '{self.config.memory_limit}'")

        return conn

    def register(self, name: str, data: pa.Table) -> None:
        """Expose a PyArrow table to SQL under ``name``."""
        self.conn.register(name, data)

    def register_store(self, store: RecordStore) -> None:
        """Register departments, expense_categories and transactions."""
        for name, table in store.to_tables().items():
            self.register(name, table)
        logger.debug(f"Registered {len(store)} transactions with DuckDB")

    def execute(self, query: str, params: Optional[Union[list, dict]] = None):
        """
        Execute a SQL query.

        Args:
            query: SQL query string
            params: Optional parameters for parameterized queries
        """
        if params:
            return self.conn.execute(query, params)
        return self.conn.execute(query)

    def query(self, query: str, params: Optional[Union[list, dict]] = None) -> pa.Table:
        """Execute query and return as PyArrow Table."""
        result = self.execute(query, params)
        # Newer duckdb releases deprecate fetch_arrow_table in favour of to_arrow_table
        if hasattr(result, "to_arrow_table"):
            return result.to_arrow_table()
        return result.fetch_arrow_table()

    def row_count(self, table: str) -> int:
        """Number of rows in a registered table."""
        return self.query(f"SELECT COUNT(*) AS n FROM {table}").column("n")[0].as_py()

    def run_query(self, name: str, variables: Optional[dict[str, object]] = None) -> pa.Table:
        """Run a packaged query by name."""
        logger.debug(f"Running SQL query: {name}")
        return self.query(load_query(name, variables))

    def build_report(self, name: str, config: Optional[ReportConfig] = None) -> Report:
        """
        Compute a report with SQL instead of the Python window engine.

        The registered store must already be in place (see register_store).
        Reports whose window needs rows raise EmptyPartitionError on an
        empty transactions table, as the Python engine does.
        """
        config = config or ReportConfig()
        definition = get_definition(name)
        if definition.requires_rows and self.row_count("transactions") == 0:
            raise EmptyPartitionError(definition.requires_rows)

        variables = {
            "top_n": config.top_n,
            "preceding": config.moving_window - 1,
            "places": config.decimal_places,
            "buckets": config.n_buckets,
        }
        table = definition.schema.cast(self.run_query(definition.sql, variables))
        rows = [definition.row_type(**record) for record in table.to_pylist()]
        return Report(definition.name, definition.title, definition.schema, rows)

    def close(self) -> None:
        """Close the DuckDB connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "DuckDBBackend":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self):
        self.close()
