"""
Domain records.

Source entities (departments, expense categories, transactions) are frozen
dataclasses and never mutated after load. Report rows are derived on demand
from the transaction set and have no lifecycle of their own.
"""

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Department:
    """Reference data: an organisational unit."""

    department_id: int
    department_name: str
    region: Optional[str] = None


@dataclass(frozen=True)
class ExpenseCategory:
    """Reference data: a type of expense and its category label."""

    expense_id: int
    expense_name: str
    category: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """A single monetary movement booked against a department and expense."""

    transaction_id: int
    department_id: int
    expense_id: int
    transaction_date: date
    amount: Decimal

    @property
    def period(self) -> tuple[int, int]:
        """(year, month) grouping key."""
        return (self.transaction_date.year, self.transaction_date.month)


@dataclass(frozen=True)
class EnrichedTransaction:
    """Transaction joined with its department and expense category."""

    transaction: Transaction
    department: Department
    expense: ExpenseCategory

    @property
    def transaction_id(self) -> int:
        return self.transaction.transaction_id

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount


class ReportRow:
    """Mixin for derived rows: dict conversion in field order."""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RankedDepartmentRevenue(ReportRow):
    department_id: int
    department_name: str
    total_revenue: Decimal
    row_num: int
    revenue_rank: int
    dense_revenue_rank: int


@dataclass(frozen=True)
class MonthlyTrend(ReportRow):
    year: int
    month: int
    monthly_expense: Decimal
    running_total: Decimal
    moving_avg_3m: Decimal
    min_monthly_year: Decimal
    max_monthly_year: Decimal


@dataclass(frozen=True)
class MonthOverMonthDelta(ReportRow):
    year: int
    month: int
    current_month: Decimal
    previous_month: Optional[Decimal]
    next_month: Optional[Decimal]
    mom_growth_percent: Optional[Decimal]  # None when growth is undefined
    mom_trend: str


@dataclass(frozen=True)
class RiskSegment(ReportRow):
    transaction_id: int
    department_name: str
    expense_name: str
    transaction_date: date
    amount: Decimal
    risk_quartile: int
    risk_segment: str
