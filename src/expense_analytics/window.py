"""
Window functions.

Pure, SQL-compatible analytic functions over ordered sequences. Each
function takes values that are already in window order and returns one
output per input row, mirroring ROW_NUMBER, RANK, DENSE_RANK,
SUM() OVER, AVG() OVER (ROWS n PRECEDING), MIN/MAX() OVER (PARTITION BY),
LAG, LEAD and NTILE.

Monetary arithmetic stays in Decimal; rounding is half-up.
"""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from itertools import accumulate
from typing import Any, Callable, Hashable, Optional, Sequence, TypeVar

from .exceptions import EmptyPartitionError, UndefinedValueError


T = TypeVar("T")

HUNDRED = Decimal(100)

INCREASE = "Increase"
DECREASE = "Decrease"
NO_CHANGE = "No Change"

RISK_SEGMENTS = {
    1: "High Risk",
    2: "Medium-High Risk",
    3: "Medium-Low Risk",
    4: "Low Risk",
}


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats and strings to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_half_up(value: Any, places: int = 2) -> Decimal:
    """Round to a fixed number of decimal places, ties away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)


def order_rows(
    rows: Sequence[T],
    key: Callable[[T], Any],
    descending: bool = False,
    tie_break: Optional[Callable[[T], Any]] = None,
) -> list[T]:
    """
    Sort rows for a window.

    ``tie_break`` is always applied ascending, whatever the direction of
    ``key``; both sorts are stable so the result is deterministic.
    """
    ordered = list(rows)
    if tie_break is not None:
        ordered.sort(key=tie_break)
    ordered.sort(key=key, reverse=descending)
    return ordered


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


def row_number(values: Sequence[Any]) -> list[int]:
    """Unique, strictly increasing position: 1..N."""
    return list(range(1, len(values) + 1))


def rank(values: Sequence[Any]) -> list[int]:
    """Ties share a rank; the next distinct value skips past the tied rows."""
    ranks: list[int] = []
    for i, value in enumerate(values):
        if i and value == values[i - 1]:
            ranks.append(ranks[-1])
        else:
            ranks.append(i + 1)
    return ranks


def dense_rank(values: Sequence[Any]) -> list[int]:
    """Ties share a rank; the next distinct value increments by one."""
    ranks: list[int] = []
    current = 0
    for i, value in enumerate(values):
        if not i or value != values[i - 1]:
            current += 1
        ranks.append(current)
    return ranks


# ---------------------------------------------------------------------------
# Running and moving aggregates
# ---------------------------------------------------------------------------


def running_total(values: Sequence[Any]) -> list[Decimal]:
    """SUM() OVER (ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW)."""
    return list(accumulate(to_decimal(v) for v in values))


def moving_average(
    values: Sequence[Any],
    window: int = 3,
    places: int = 2,
) -> list[Decimal]:
    """
    AVG() OVER (ROWS BETWEEN window-1 PRECEDING AND CURRENT ROW).

    Rows near the start average over however many rows are available.
    """
    if window < 1:
        raise ValueError(f"window must be positive, got {window}")

    decimals = [to_decimal(v) for v in values]
    averages = []
    for i in range(len(decimals)):
        frame = decimals[max(0, i - window + 1): i + 1]
        averages.append(round_half_up(sum(frame) / len(frame), places))
    return averages


def partition_min_max(
    values: Sequence[Any],
    partitions: Sequence[Hashable],
) -> list[tuple[Decimal, Decimal]]:
    """
    MIN() and MAX() OVER (PARTITION BY ...), broadcast to every row.

    ``partitions[i]`` is the partition key of ``values[i]``.
    """
    if len(values) != len(partitions):
        raise ValueError("values and partitions must have the same length")
    if not values:
        raise EmptyPartitionError("partition_min_max")

    groups: dict[Hashable, list[Decimal]] = defaultdict(list)
    for value, key in zip(values, partitions):
        groups[key].append(to_decimal(value))

    bounds = {key: (min(group), max(group)) for key, group in groups.items()}
    return [bounds[key] for key in partitions]


# ---------------------------------------------------------------------------
# Offset lookup
# ---------------------------------------------------------------------------


def lag(values: Sequence[T], offset: int = 1, default: Optional[T] = None) -> list[Optional[T]]:
    """Value ``offset`` rows before the current row, ``default`` at the boundary."""
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")
    return [values[i - offset] if i - offset >= 0 else default for i in range(len(values))]


def lead(values: Sequence[T], offset: int = 1, default: Optional[T] = None) -> list[Optional[T]]:
    """Value ``offset`` rows after the current row, ``default`` at the boundary."""
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")
    n = len(values)
    return [values[i + offset] if i + offset < n else default for i in range(n)]


# ---------------------------------------------------------------------------
# Period-over-period derivations
# ---------------------------------------------------------------------------


def growth_percent(current: Any, previous: Optional[Any], places: int = 2) -> Decimal:
    """
    (current - previous) / previous * 100, rounded half-up.

    Raises:
        UndefinedValueError: previous is absent or zero
    """
    if previous is None or to_decimal(previous) == 0:
        raise UndefinedValueError(current, previous)

    current_dec = to_decimal(current)
    previous_dec = to_decimal(previous)
    return round_half_up((current_dec - previous_dec) / previous_dec * HUNDRED, places)


def trend_label(current: Any, previous: Optional[Any]) -> str:
    """Increase / Decrease / No Change; an absent previous value is No Change."""
    if previous is None:
        return NO_CHANGE

    current_dec = to_decimal(current)
    previous_dec = to_decimal(previous)
    if current_dec > previous_dec:
        return INCREASE
    if current_dec < previous_dec:
        return DECREASE
    return NO_CHANGE


# ---------------------------------------------------------------------------
# Quantile bucketing
# ---------------------------------------------------------------------------


def bucket_sizes(n_rows: int, buckets: int = 4) -> list[int]:
    """Sizes of NTILE buckets: the first ``n_rows % buckets`` get one extra row."""
    if buckets < 1:
        raise ValueError(f"buckets must be positive, got {buckets}")
    base, remainder = divmod(n_rows, buckets)
    return [base + 1 if i < remainder else base for i in range(buckets)]


def ntile(n_rows: int, buckets: int = 4) -> list[int]:
    """
    NTILE(buckets) bucket number for each of ``n_rows`` ordered rows.

    Raises:
        EmptyPartitionError: n_rows is zero
    """
    if n_rows <= 0:
        raise EmptyPartitionError("ntile")

    assignment: list[int] = []
    for bucket, size in enumerate(bucket_sizes(n_rows, buckets), start=1):
        assignment.extend([bucket] * size)
    return assignment


def risk_segment(quartile: int) -> str:
    """Label for a risk quartile (1 = highest amounts)."""
    try:
        return RISK_SEGMENTS[quartile]
    except KeyError:
        raise ValueError(f"risk quartile must be 1-4, got {quartile}") from None
