"""
Configuration for the expense analytics engine.

Supports environment variables and config files.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json


ENV_PREFIX = "EXPENSE_ANALYTICS_"

FILE_FORMATS = ("csv", "parquet")


@dataclass
class DataConfig:
    """Where the three source tables live."""

    base_path: Path = field(default_factory=lambda: Path("data"))
    file_format: str = "csv"
    departments: str = "departments"
    expense_categories: str = "expense_categories"
    transactions: str = "transactions"

    def __post_init__(self):
        self.base_path = Path(self.base_path)
        if self.file_format not in FILE_FORMATS:
            raise ValueError(
                f"file_format must be one of {', '.join(FILE_FORMATS)}, got {self.file_format!r}"
            )

    def path_for(self, table: str) -> Path:
        """Path of a source table file, e.g. data/transactions.csv."""
        stem = getattr(self, table)
        return self.base_path / f"{stem}.{self.file_format}"


@dataclass
class DuckDBConfig:
    """Configuration for the DuckDB engine running the reference SQL."""

    database_path: str = ":memory:"
    read_only: bool = False
    threads: Optional[int] = None
    memory_limit: Optional[str] = None  # e.g., "1GB"

    @property
    def in_memory(self) -> bool:
        return self.database_path == ":memory:"

    def get_connection_string(self) -> str:
        return str(self.database_path)


@dataclass
class ReportConfig:
    """Window parameters for the four reports."""

    top_n: int = 10
    moving_window: int = 3
    n_buckets: int = 4
    decimal_places: int = 2

    def __post_init__(self):
        for name in ("top_n", "moving_window", "n_buckets"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")
        if self.decimal_places < 0:
            raise ValueError("decimal_places must be non-negative")


@dataclass
class AnalyticsConfig:
    """Main configuration."""

    data: DataConfig = field(default_factory=DataConfig)
    duckdb: DuckDBConfig = field(default_factory=DuckDBConfig)
    reports: ReportConfig = field(default_factory=ReportConfig)
    log_level: str = "WARNING"

    @classmethod
    def from_file(cls, path: Path) -> "AnalyticsConfig":
        """Load configuration from JSON file."""
        with open(path) as f:
            data = json.load(f)

        return cls(
            data=DataConfig(**data.get("data", {})),
            duckdb=DuckDBConfig(**data.get("duckdb", {})),
            reports=ReportConfig(**data.get("reports", {})),
            log_level=data.get("log_level", "WARNING"),
        )

    @classmethod
    def from_env(cls) -> "AnalyticsConfig":
        """Create config from EXPENSE_ANALYTICS_* environment variables."""
        return cls(
            data=DataConfig(
                base_path=Path(os.getenv(f"{ENV_PREFIX}DATA_PATH", "data")),
                file_format=os.getenv(f"{ENV_PREFIX}FILE_FORMAT", "csv"),
            ),
            duckdb=DuckDBConfig(
                database_path=os.getenv(f"{ENV_PREFIX}DUCKDB_PATH", ":memory:"),
            ),
            reports=ReportConfig(
                top_n=int(os.getenv(f"{ENV_PREFIX}TOP_N", "10")),
                moving_window=int(os.getenv(f"{ENV_PREFIX}MOVING_WINDOW", "3")),
            ),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "WARNING"),
        )

    @classmethod
    def default(cls, base_path: Optional[Path] = None) -> "AnalyticsConfig":
        """Create default configuration, reading overrides from the environment."""
        config = cls.from_env()
        if base_path is not None:
            config.data.base_path = Path(base_path)
        return config

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "data": {
                "base_path": str(self.data.base_path),
                "file_format": self.data.file_format,
                "departments": self.data.departments,
                "expense_categories": self.data.expense_categories,
                "transactions": self.data.transactions,
            },
            "duckdb": {
                "database_path": self.duckdb.database_path,
                "read_only": self.duckdb.read_only,
                "threads": self.duckdb.threads,
                "memory_limit": self.duckdb.memory_limit,
            },
            "reports": {
                "top_n": self.reports.top_n,
                "moving_window": self.reports.moving_window,
                "n_buckets": self.reports.n_buckets,
                "decimal_places": self.reports.decimal_places,
            },
            "log_level": self.log_level,
        }

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
