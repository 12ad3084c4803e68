"""
Report rendering and export.

Reports render to a rich console table, CSV or JSON text, or are written
to CSV / JSON / Parquet files. Column order always follows the report
schema.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
import pyarrow as pa
import pyarrow.csv as pv
import pyarrow.parquet as pq
from rich.table import Table

from .analyses import Report
from .logging import get_logger


logger = get_logger("formatter")

FORMATS = ("table", "csv", "json")
FILE_FORMATS = {".csv": "csv", ".json": "json", ".parquet": "parquet"}

NULL_DISPLAY = "-"


def truncate(report: Report, limit: Optional[int]) -> Report:
    """Keep the first ``limit`` rows; None or non-positive keeps everything."""
    if limit is None or limit <= 0:
        return report
    return report.head(limit)


def format_value(value: Any) -> str:
    """Human-readable cell value."""
    if value is None:
        return NULL_DISPLAY
    if isinstance(value, Decimal):
        return f"{value:,.2f}"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def render_table(report: Report, limit: Optional[int] = None) -> Table:
    """Render a report as a rich Table."""
    report = truncate(report, limit)

    table = Table(title=report.title, show_header=True, header_style="bold")
    for column in report.columns:
        dtype = report.schema.column_types()[column]
        justify = "left" if pa.types.is_string(dtype) or pa.types.is_date(dtype) else "right"
        table.add_column(column, justify=justify)

    for record in report.records():
        table.add_row(*[format_value(record[c]) for c in report.columns])

    return table


def to_dataframe(report: Report) -> pd.DataFrame:
    """Report as a pandas DataFrame, columns in schema order."""
    return report.to_arrow().to_pandas()


def to_csv(report: Report, limit: Optional[int] = None) -> str:
    """Render a report as CSV text."""
    return to_dataframe(truncate(report, limit)).to_csv(index=False)


def _money_as_float(table: pa.Table) -> pa.Table:
    for i, column in enumerate(table.schema):
        if pa.types.is_decimal(column.type):
            table = table.set_column(i, column.name, table.column(i).cast(pa.float64()))
    return table


def to_json(report: Report, limit: Optional[int] = None) -> str:
    """
    Render a report as a JSON array of records.

    Money columns are written as JSON numbers, matching the CSV output;
    undefined values (e.g. growth without a previous month) are null.
    """
    df = _money_as_float(truncate(report, limit).to_arrow()).to_pandas()
    return df.to_json(orient="records", indent=2, date_format="iso", default_handler=str)


def render(report: Report, fmt: str = "table", limit: Optional[int] = None) -> Union[Table, str]:
    """Render in one of FORMATS."""
    if fmt == "table":
        return render_table(report, limit)
    if fmt == "csv":
        return to_csv(report, limit)
    if fmt == "json":
        return to_json(report, limit)
    raise ValueError(f"Unknown format: {fmt} (expected one of {', '.join(FORMATS)})")


def write_report(
    report: Report,
    path: Union[str, Path],
    fmt: Optional[str] = None,
) -> Path:
    """
    Write a report to disk.

    Args:
        report: Report to write
        path: Output file
        fmt: 'csv', 'json' or 'parquet'; inferred from the suffix if None

    Returns:
        The written path
    """
    path = Path(path)
    if fmt is None:
        fmt = FILE_FORMATS.get(path.suffix.lower())
        if fmt is None:
            raise ValueError(f"Cannot infer format from {path.name}; pass fmt explicitly")

    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "parquet":
        pq.write_table(report.to_arrow(), path)
    elif fmt == "csv":
        pv.write_csv(report.to_arrow(), path)
    elif fmt == "json":
        path.write_text(to_json(report))
    else:
        raise ValueError(f"Unknown file format: {fmt}")

    logger.info(f"Wrote {len(report)} rows of {report.name} to {path}")
    return path
