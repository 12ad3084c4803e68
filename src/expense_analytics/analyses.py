"""
The four window-function analyses.

Each analysis aggregates the record store, orders the aggregate rows,
applies window functions and returns typed report rows:

    ranking             department revenue, ROW_NUMBER / RANK / DENSE_RANK
    monthly_trend       running total, moving average, yearly min / max
    month_over_month    LAG / LEAD, growth %, trend label
    risk_segmentation   NTILE(4) over transaction amounts
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pyarrow as pa

from . import window
from .aggregator import Aggregator
from .config import ReportConfig
from .exceptions import UndefinedValueError, UnknownReportError
from .logging import get_logger
from .models import (
    MonthlyTrend,
    MonthOverMonthDelta,
    RankedDepartmentRevenue,
    ReportRow,
    RiskSegment,
)
from .schemas import (
    BaseSchema,
    DepartmentRankingSchema,
    MonthlyTrendSchema,
    MonthOverMonthSchema,
    RiskSegmentationSchema,
)
from .store import RecordStore


logger = get_logger("analyses")


def department_ranking(store: RecordStore) -> list[RankedDepartmentRevenue]:
    """
    Rank departments by total revenue, highest first.

    Equal revenues are ordered by department_id ascending, which decides
    ``row_num``; ``revenue_rank`` and ``dense_revenue_rank`` give tied
    departments the same number.
    """
    totals = window.order_rows(
        Aggregator(store).by_department(),
        key=lambda d: d.total,
        descending=True,
        tie_break=lambda d: d.department_id,
    )
    revenues = [d.total for d in totals]

    return [
        RankedDepartmentRevenue(
            department_id=d.department_id,
            department_name=d.department_name,
            total_revenue=d.total,
            row_num=rn,
            revenue_rank=rk,
            dense_revenue_rank=drk,
        )
        for d, rn, rk, drk in zip(
            totals,
            window.row_number(revenues),
            window.rank(revenues),
            window.dense_rank(revenues),
        )
    ]


def monthly_trend(
    store: RecordStore,
    moving_window: int = 3,
    places: int = 2,
) -> list[MonthlyTrend]:
    """
    Monthly totals with running total, moving average and yearly bounds.

    Raises:
        EmptyPartitionError: the store holds no transactions
    """
    months = Aggregator(store).by_month()
    sums = [m.total for m in months]
    bounds = window.partition_min_max(sums, [m.year for m in months])

    return [
        MonthlyTrend(
            year=m.year,
            month=m.month,
            monthly_expense=m.total,
            running_total=running,
            moving_avg_3m=moving,
            min_monthly_year=low,
            max_monthly_year=high,
        )
        for m, running, moving, (low, high) in zip(
            months,
            window.running_total(sums),
            window.moving_average(sums, window=moving_window, places=places),
            bounds,
        )
    ]


def month_over_month(store: RecordStore, places: int = 2) -> list[MonthOverMonthDelta]:
    """
    Compare each month with its neighbours.

    Growth is left as None when the previous month is absent or zero; the
    trend label for the first month is "No Change".
    """
    months = Aggregator(store).by_month()
    sums = [m.total for m in months]

    rows = []
    for m, previous, following in zip(months, window.lag(sums), window.lead(sums)):
        try:
            growth = window.growth_percent(m.total, previous, places=places)
        except UndefinedValueError as e:
            logger.debug(f"{m.year}-{m.month:02d}: {e}")
            growth = None

        rows.append(
            MonthOverMonthDelta(
                year=m.year,
                month=m.month,
                current_month=m.total,
                previous_month=previous,
                next_month=following,
                mom_growth_percent=growth,
                mom_trend=window.trend_label(m.total, previous),
            )
        )
    return rows


def risk_segmentation(store: RecordStore, buckets: int = 4) -> list[RiskSegment]:
    """
    Split transactions into amount quartiles, highest amounts in quartile 1.

    Raises:
        EmptyPartitionError: the store holds no transactions
    """
    ordered = window.order_rows(
        store.enriched(),
        key=lambda e: e.amount,
        descending=True,
        tie_break=lambda e: e.transaction_id,
    )
    quartiles = window.ntile(len(ordered), buckets)

    return [
        RiskSegment(
            transaction_id=e.transaction_id,
            department_name=e.department.department_name,
            expense_name=e.expense.expense_name,
            transaction_date=e.transaction.transaction_date,
            amount=e.amount,
            risk_quartile=q,
            risk_segment=_segment_label(q, buckets),
        )
        for e, q in zip(ordered, quartiles)
    ]


def _segment_label(bucket: int, buckets: int) -> str:
    if buckets == 4:
        return window.risk_segment(bucket)
    return f"Bucket {bucket} of {buckets}"


# ---------------------------------------------------------------------------
# Report registry
# ---------------------------------------------------------------------------


@dataclass
class Report:
    """Rows of one analysis plus the schema they render with."""

    name: str
    title: str
    schema: type[BaseSchema]
    rows: list[ReportRow] = field(default_factory=list)

    @property
    def columns(self) -> list[str]:
        return self.schema.field_names()

    def records(self) -> list[dict]:
        return [row.to_dict() for row in self.rows]

    def to_arrow(self) -> pa.Table:
        return self.schema.from_dicts(self.records())

    def filter(self, predicate: Callable[[Any], bool]) -> "Report":
        """New report keeping only rows matching ``predicate``."""
        return Report(self.name, self.title, self.schema, [r for r in self.rows if predicate(r)])

    def head(self, n: int) -> "Report":
        return Report(self.name, self.title, self.schema, self.rows[:n])

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ReportDefinition:
    name: str
    title: str
    schema: type[BaseSchema]
    row_type: type[ReportRow]
    build: Callable[[RecordStore, ReportConfig], list[ReportRow]]
    sql: str
    # Window operation that cannot run over zero transactions, if any
    requires_rows: Optional[str] = None


REPORTS: dict[str, ReportDefinition] = {
    "ranking": ReportDefinition(
        name="ranking",
        title="Department Revenue Ranking",
        schema=DepartmentRankingSchema,
        row_type=RankedDepartmentRevenue,
        build=lambda store, cfg: department_ranking(store),
        sql="ranking",
    ),
    "monthly_trend": ReportDefinition(
        name="monthly_trend",
        title="Monthly Expense Trend",
        schema=MonthlyTrendSchema,
        row_type=MonthlyTrend,
        build=lambda store, cfg: monthly_trend(
            store, moving_window=cfg.moving_window, places=cfg.decimal_places
        ),
        sql="monthly_trend",
        requires_rows="partition_min_max",
    ),
    "month_over_month": ReportDefinition(
        name="month_over_month",
        title="Month-over-Month Change",
        schema=MonthOverMonthSchema,
        row_type=MonthOverMonthDelta,
        build=lambda store, cfg: month_over_month(store, places=cfg.decimal_places),
        sql="month_over_month",
    ),
    "risk_segmentation": ReportDefinition(
        name="risk_segmentation",
        title="Transaction Risk Segmentation",
        schema=RiskSegmentationSchema,
        row_type=RiskSegment,
        build=lambda store, cfg: risk_segmentation(store, buckets=cfg.n_buckets),
        sql="risk_segmentation",
        requires_rows="ntile",
    ),
}


def get_definition(name: str) -> ReportDefinition:
    """Look up a report by name."""
    if name not in REPORTS:
        raise UnknownReportError(name, list(REPORTS))
    return REPORTS[name]


def build_report(
    name: str,
    store: RecordStore,
    config: Optional[ReportConfig] = None,
) -> Report:
    """
    Compute one report.

    The ranking report is filtered to ``row_num <= config.top_n`` after all
    ranks are computed.
    """
    config = config or ReportConfig()
    definition = get_definition(name)
    report = Report(
        name=definition.name,
        title=definition.title,
        schema=definition.schema,
        rows=definition.build(store, config),
    )
    if name == "ranking":
        report = report.filter(lambda r: r.row_num <= config.top_n)
    return report
