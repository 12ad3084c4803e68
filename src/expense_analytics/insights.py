"""
Narrative insights.

Turns computed reports into short findings of the kind written up
alongside the queries: who spends most, which months moved most, how much
of the book sits in the high-risk quartile.
"""

from dataclasses import dataclass
from decimal import Decimal

from .analyses import department_ranking, month_over_month, risk_segmentation
from .exceptions import EmptyPartitionError
from .models import MonthOverMonthDelta, RankedDepartmentRevenue, RiskSegment
from .store import RecordStore
from .window import HUNDRED, round_half_up


@dataclass(frozen=True)
class Insight:
    topic: str
    text: str


def _month_label(row: MonthOverMonthDelta) -> str:
    return f"{row.year}-{row.month:02d}"


def ranking_insights(rows: list[RankedDepartmentRevenue]) -> list[Insight]:
    if not rows:
        return []

    grand_total = sum((r.total_revenue for r in rows), Decimal(0))
    top = rows[0]
    found = []
    if grand_total:
        share = round_half_up(top.total_revenue / grand_total * HUNDRED, 1)
        found.append(Insight(
            "ranking",
            f"{top.department_name} leads with {top.total_revenue:,.2f} "
            f"({share}% of total spend).",
        ))

    ties = [r for r in rows if r.revenue_rank != r.row_num]
    if ties:
        names = ", ".join(r.department_name for r in ties)
        found.append(Insight("ranking", f"Tied revenue ranks: {names}."))
    return found


def trend_insights(rows: list[MonthOverMonthDelta]) -> list[Insight]:
    with_growth = [r for r in rows if r.mom_growth_percent is not None]
    if not with_growth:
        return []

    found = []
    best = max(with_growth, key=lambda r: r.mom_growth_percent)
    worst = min(with_growth, key=lambda r: r.mom_growth_percent)
    if best.mom_growth_percent > 0:
        found.append(Insight(
            "trend",
            f"Largest month-over-month increase: {_month_label(best)} "
            f"(+{best.mom_growth_percent}%).",
        ))
    if worst.mom_growth_percent < 0:
        found.append(Insight(
            "trend",
            f"Largest month-over-month decrease: {_month_label(worst)} "
            f"({worst.mom_growth_percent}%).",
        ))

    increases = sum(1 for r in rows if r.mom_trend == "Increase")
    found.append(Insight(
        "trend",
        f"Spend rose in {increases} of {len(rows) - 1} month-to-month transitions.",
    ))
    return found


def risk_insights(rows: list[RiskSegment]) -> list[Insight]:
    high = [r for r in rows if r.risk_quartile == 1]
    if not high:
        return []

    total = sum((r.amount for r in rows), Decimal(0))
    high_total = sum((r.amount for r in high), Decimal(0))
    share = round_half_up(high_total / total * HUNDRED, 1) if total else Decimal(0)
    threshold = min(r.amount for r in high)
    return [Insight(
        "risk",
        f"{len(high)} high-risk transactions (>= {threshold:,.2f}) "
        f"account for {share}% of spend.",
    )]


def summarize(store: RecordStore) -> list[Insight]:
    """All insights for a dataset; an empty dataset yields none."""
    ranking = department_ranking(store)

    try:
        segments = risk_segmentation(store)
    except EmptyPartitionError:
        segments = []

    return (
        ranking_insights(ranking)
        + trend_insights(month_over_month(store))
        + risk_insights(segments)
    )
