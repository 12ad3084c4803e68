"""
Grouping and summation.

Collapses transactions to one row per key (department, or year/month)
before window functions are applied. This is the GROUP BY half of every
report; the OVER half lives in ``window``.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Hashable, Iterable

from .exceptions import DataIntegrityError
from .models import Transaction
from .store import RecordStore


@dataclass(frozen=True)
class AggregateRow:
    """Sum of amounts for one grouping key."""

    key: Any
    total: Decimal
    count: int


@dataclass(frozen=True)
class DepartmentTotal:
    department_id: int
    department_name: str
    total: Decimal


@dataclass(frozen=True)
class MonthlyTotal:
    year: int
    month: int
    total: Decimal


def group_sum(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], Hashable],
) -> list[AggregateRow]:
    """
    Sum amounts per distinct key, in order of first appearance.

    Raises:
        DataIntegrityError: ``key`` returned None for a transaction
    """
    totals: dict[Hashable, Decimal] = {}
    counts: dict[Hashable, int] = {}

    for txn in transactions:
        group = key(txn)
        if group is None:
            raise DataIntegrityError(
                f"Transaction {txn.transaction_id} has no grouping key"
            )
        totals[group] = totals.get(group, Decimal(0)) + txn.amount
        counts[group] = counts.get(group, 0) + 1

    return [AggregateRow(key=k, total=totals[k], count=counts[k]) for k in totals]


class Aggregator:
    """Named groupings over a record store."""

    def __init__(self, store: RecordStore):
        self.store = store

    def by_department(self) -> list[DepartmentTotal]:
        """Total amount per department that has at least one transaction."""
        rows = group_sum(self.store.transactions, key=lambda t: t.department_id)
        return [
            DepartmentTotal(
                department_id=row.key,
                department_name=self.store.department(row.key).department_name,
                total=row.total,
            )
            for row in rows
        ]

    def by_month(self) -> list[MonthlyTotal]:
        """Total amount per (year, month), ascending."""
        rows = group_sum(self.store.transactions, key=lambda t: t.period)
        return sorted(
            (MonthlyTotal(year=row.key[0], month=row.key[1], total=row.total) for row in rows),
            key=lambda m: (m.year, m.month),
        )

    def total(self) -> Decimal:
        return sum((t.amount for t in self.store.transactions), Decimal(0))
