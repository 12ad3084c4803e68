"""
Report pipeline.

Runs a selection of analyses over one record store. Each analysis is a
pipeline step; an analysis that raises an AnalyticsError is recorded as
failed and the remaining analyses still run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Any, Optional

from .base import BasePipeline, PipelineResult, PipelineStatus
from ..analyses import REPORTS, Report, build_report, get_definition
from ..config import DuckDBConfig, ReportConfig
from ..exceptions import AnalyticsError
from ..logging import get_logger, log_execution_time
from ..store import RecordStore


logger = get_logger("pipelines.reports")

ENGINES = ("python", "sql")


@dataclass
class ReportResult:
    """Outcome of one analysis."""

    name: str
    status: PipelineStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    report: Optional[Report] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    @property
    def rows(self) -> int:
        return len(self.report) if self.report is not None else 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "rows": self.rows,
            "error": self.error,
            "error_code": self.error_code,
            "metadata": self.metadata,
        }


class ReportPipeline(BasePipeline):
    """
    Pipeline computing reports from a record store.

    Args:
        store: Loaded, validated dataset
        config: Window parameters
        reports: Report names to run (default: all, in registry order)
        engine: 'python' (window engine) or 'sql' (DuckDB reference queries)
    """

    def __init__(
        self,
        store: RecordStore,
        config: Optional[ReportConfig] = None,
        reports: Optional[list[str]] = None,
        engine: str = "python",
        duckdb_config: Optional[DuckDBConfig] = None,
        name: str = "reports",
    ):
        super().__init__(name)
        if engine not in ENGINES:
            raise ValueError(f"Unknown engine: {engine} (expected one of {', '.join(ENGINES)})")

        self.store = store
        self.config = config or ReportConfig()
        self.report_names = list(dict.fromkeys(reports)) if reports is not None else list(REPORTS)
        self.engine = engine
        self.duckdb_config = duckdb_config

        # Fail fast on unknown names, before any analysis runs
        for report_name in self.report_names:
            get_definition(report_name)

    def build(self) -> "ReportPipeline":
        """One step per requested report."""
        self._steps = []
        for report_name in self.report_names:
            self.add_step(report_name, partial(self._run_report, report_name))
        return self

    def _run_report(self, report_name: str, context: dict[str, Any]) -> ReportResult:
        result = ReportResult(
            name=report_name,
            status=PipelineStatus.RUNNING,
            started_at=datetime.now(),
            metadata={"engine": self.engine},
        )

        try:
            with log_execution_time(logger, report_name):
                result.report = self._compute(report_name, context)
            result.status = PipelineStatus.SUCCESS

        except AnalyticsError as e:
            result.status = PipelineStatus.FAILED
            result.error = e.message
            result.error_code = e.code

        result.completed_at = datetime.now()
        return result

    def _compute(self, report_name: str, context: dict[str, Any]) -> Report:
        if self.engine == "python":
            return build_report(report_name, self.store, self.config)

        backend = context.get("duckdb")
        if backend is None:
            # duckdb is only required by the sql engine
            from ..backends import DuckDBBackend

            backend = DuckDBBackend(self.duckdb_config)
            backend.register_store(self.store)
            context["duckdb"] = backend
        return backend.build_report(report_name, self.config)

    def run(self) -> PipelineResult:
        try:
            return super().run()
        finally:
            backend = self._context.get("duckdb")
            if backend is not None:
                backend.close()

    def run_reports(self) -> dict[str, ReportResult]:
        """Build, run and return per-report results keyed by name."""
        self.build().run()
        return dict(self.results)
