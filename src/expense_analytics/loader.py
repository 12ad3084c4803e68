"""
Dataset loading.

Reads the three source tables from CSV or Parquet files, validates them
against the source schemas and builds a RecordStore.
"""

from pathlib import Path
from typing import Optional, Union
import pyarrow as pa
import pyarrow.csv as pv
import pyarrow.parquet as pq

from .config import DataConfig
from .exceptions import InvalidRecordError
from .logging import get_logger, log_execution_time
from .schemas import BaseSchema, DepartmentSchema, ExpenseCategorySchema, TransactionSchema
from .store import RecordStore


logger = get_logger("loader")

# Source table name -> schema, in load order
SOURCE_TABLES: dict[str, type[BaseSchema]] = {
    "departments": DepartmentSchema,
    "expense_categories": ExpenseCategorySchema,
    "transactions": TransactionSchema,
}


def read_table(path: Union[str, Path], schema: type[BaseSchema]) -> pa.Table:
    """
    Read one CSV or Parquet file and cast it to ``schema``.

    Raises:
        FileNotFoundError: the file does not exist
        InvalidRecordError: the file does not match the schema
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            table = pv.read_csv(
                path,
                convert_options=pv.ConvertOptions(column_types=schema.column_types()),
            )
        elif suffix == ".parquet":
            table = pq.read_table(path)
        else:
            raise InvalidRecordError(f"Unsupported file type: {path.name}")
    except pa.ArrowInvalid as e:
        raise InvalidRecordError(f"{path.name}: {e}") from e

    errors = schema.validate(table)
    if errors:
        raise InvalidRecordError(f"{path.name}: schema validation failed: {'; '.join(errors)}")

    try:
        return schema.cast(table)
    except (pa.ArrowInvalid, ValueError) as e:
        raise InvalidRecordError(f"{path.name}: {e}") from e


def load_tables(config: DataConfig) -> dict[str, pa.Table]:
    """Read all source tables described by ``config``."""
    return {
        name: read_table(config.path_for(name), schema)
        for name, schema in SOURCE_TABLES.items()
    }


def load_store(config: Optional[DataConfig] = None) -> RecordStore:
    """Load and validate the dataset into a RecordStore."""
    config = config or DataConfig()

    with log_execution_time(logger, f"loading dataset from {config.base_path}"):
        tables = load_tables(config)
        store = RecordStore.from_tables(
            tables["departments"],
            tables["expense_categories"],
            tables["transactions"],
        )

    logger.info(f"Loaded {store!r}")
    return store


def write_tables(
    tables: dict[str, pa.Table],
    config: DataConfig,
) -> list[Path]:
    """Write source tables in the layout ``load_tables`` reads."""
    config.base_path.mkdir(parents=True, exist_ok=True)

    written = []
    for name, schema in SOURCE_TABLES.items():
        path = config.path_for(name)
        table = schema.cast(tables[name])
        if config.file_format == "parquet":
            pq.write_table(table, path)
        else:
            pv.write_csv(table, path)
        written.append(path)
    return written
