"""Tests for window functions."""

from decimal import Decimal

import pytest

from expense_analytics import window
from expense_analytics.exceptions import EmptyPartitionError, UndefinedValueError


class TestRanking:
    """Tests for ROW_NUMBER, RANK and DENSE_RANK."""

    def test_no_ties(self):
        """Test all three variants agree without ties."""
        values = [86000, 38000, 22000, 11000]

        assert window.row_number(values) == [1, 2, 3, 4]
        assert window.rank(values) == [1, 2, 3, 4]
        assert window.dense_rank(values) == [1, 2, 3, 4]

    def test_ties(self):
        """Test gaps after ties for rank, none for dense_rank."""
        values = [100, 100, 50, 50, 10]

        assert window.row_number(values) == [1, 2, 3, 4, 5]
        assert window.rank(values) == [1, 1, 3, 3, 5]
        assert window.dense_rank(values) == [1, 1, 2, 2, 3]

    def test_all_equal(self):
        """Test a single tie group."""
        values = [7, 7, 7]

        assert window.rank(values) == [1, 1, 1]
        assert window.dense_rank(values) == [1, 1, 1]

    def test_empty(self):
        """Test empty input yields empty ranks."""
        assert window.row_number([]) == []
        assert window.rank([]) == []
        assert window.dense_rank([]) == []

    @pytest.mark.parametrize("values", [
        [5, 4, 3],
        [5, 5, 3, 3, 3, 1],
        [9, 9, 9, 9],
        [10, 8, 8, 2, 1, 1],
    ])
    def test_rank_ordering_property(self, values):
        """Test dense_rank <= rank <= row_number row by row."""
        for d, r, n in zip(window.dense_rank(values), window.rank(values), window.row_number(values)):
            assert d <= r <= n

    def test_order_rows_tie_break(self):
        """Test descending key with ascending tie-break."""
        rows = [("b", 10), ("c", 20), ("a", 10), ("d", 5)]

        ordered = window.order_rows(rows, key=lambda r: r[1], descending=True, tie_break=lambda r: r[0])

        assert ordered == [("c", 20), ("a", 10), ("b", 10), ("d", 5)]


class TestRunningAndMoving:
    """Tests for running totals and moving averages."""

    def test_running_total(self):
        """Test prefix sums."""
        result = window.running_total([Decimal("75000"), Decimal("82000"), Decimal("10")])

        assert result == [Decimal("75000"), Decimal("157000"), Decimal("157010")]

    def test_running_total_last_equals_sum(self):
        """Test last running total equals the grand total."""
        values = [Decimal("1.10"), Decimal("2.20"), Decimal("3.30")]

        assert window.running_total(values)[-1] == sum(values)

    def test_moving_average_partial_frames(self):
        """Test the first rows average over fewer values."""
        result = window.moving_average([Decimal("10"), Decimal("20"), Decimal("30"), Decimal("40")])

        assert result == [Decimal("10.00"), Decimal("15.00"), Decimal("20.00"), Decimal("30.00")]

    def test_moving_average_rounds_half_up(self):
        """Test half-up rounding to two places."""
        # (0.01 + 0.02) / 2 = 0.015
        result = window.moving_average([Decimal("0.01"), Decimal("0.02")])

        assert result[1] == Decimal("0.02")

    def test_moving_average_within_bounds(self):
        """Test each average lies within its frame's min and max."""
        values = [Decimal(v) for v in ("75000.00", "82000.00", "61000.50", "90000.25", "12.34")]

        averages = window.moving_average(values, window=3)

        for i, avg in enumerate(averages):
            frame = values[max(0, i - 2): i + 1]
            assert min(frame) <= avg <= max(frame)

    def test_moving_average_invalid_window(self):
        """Test non-positive window is rejected."""
        with pytest.raises(ValueError):
            window.moving_average([1, 2], window=0)

    def test_floats_are_converted_exactly(self):
        """Test float input does not leak binary noise."""
        assert window.running_total([0.1, 0.2]) == [Decimal("0.1"), Decimal("0.3")]


class TestPartitionMinMax:
    """Tests for partition-scoped min/max."""

    def test_broadcast_per_year(self):
        """Test bounds are computed per partition and broadcast."""
        values = [10, 30, 20, 5, 50]
        years = [2023, 2023, 2023, 2024, 2024]

        result = window.partition_min_max(values, years)

        assert result == [(10, 30), (10, 30), (10, 30), (5, 50), (5, 50)]

    def test_bounds_contain_values(self):
        """Test min <= value <= max for every row."""
        values = [Decimal("3"), Decimal("1"), Decimal("2"), Decimal("8")]
        years = [1, 1, 2, 2]

        for value, (low, high) in zip(values, window.partition_min_max(values, years)):
            assert low <= value <= high

    def test_empty_raises(self):
        """Test zero rows report emptiness."""
        with pytest.raises(EmptyPartitionError) as exc:
            window.partition_min_max([], [])

        assert exc.value.code == "EMPTY_PARTITION"

    def test_length_mismatch(self):
        """Test mismatched inputs are rejected."""
        with pytest.raises(ValueError):
            window.partition_min_max([1, 2], [1])


class TestLagLead:
    """Tests for offset lookups."""

    def test_lag_and_lead(self):
        """Test previous and next values with absent boundaries."""
        values = [1, 2, 3]

        assert window.lag(values) == [None, 1, 2]
        assert window.lead(values) == [2, 3, None]

    def test_symmetry(self):
        """Test lag[m] == current[m-1] and lead[m-1] == current[m]."""
        values = [5, 8, 13, 21, 34]
        lagged = window.lag(values)
        led = window.lead(values)

        for m in range(1, len(values)):
            assert lagged[m] == values[m - 1]
            assert led[m - 1] == values[m]

    def test_offset_and_default(self):
        """Test larger offsets and a default."""
        values = [1, 2, 3, 4]

        assert window.lag(values, offset=2, default=0) == [0, 0, 1, 2]
        assert window.lead(values, offset=2, default=0) == [3, 4, 0, 0]

    def test_negative_offset(self):
        """Test negative offsets are rejected."""
        with pytest.raises(ValueError):
            window.lag([1], offset=-1)


class TestGrowthAndTrend:
    """Tests for growth percentage and trend labels."""

    def test_growth_percent(self):
        """Test (82000 - 75000) / 75000 * 100 rounds to 9.33."""
        assert window.growth_percent(Decimal("82000"), Decimal("75000")) == Decimal("9.33")

    def test_negative_growth(self):
        """Test a decrease gives a negative percentage."""
        assert window.growth_percent(75, 100) == Decimal("-25.00")

    def test_growth_undefined_without_previous(self):
        """Test absent previous value is undefined, not zero."""
        with pytest.raises(UndefinedValueError) as exc:
            window.growth_percent(Decimal("100"), None)

        assert exc.value.previous is None

    def test_growth_undefined_for_zero_previous(self):
        """Test zero previous value is undefined."""
        with pytest.raises(UndefinedValueError):
            window.growth_percent(Decimal("100"), Decimal("0"))

    @pytest.mark.parametrize("current,previous,label", [
        (82000, 75000, "Increase"),
        (70000, 75000, "Decrease"),
        (75000, 75000, "No Change"),
        (75000, None, "No Change"),
    ])
    def test_trend_label(self, current, previous, label):
        """Test categorical trend."""
        assert window.trend_label(current, previous) == label


class TestNtile:
    """Tests for quantile bucketing."""

    def test_even_split(self):
        """Test eight rows split two per bucket."""
        assert window.ntile(8) == [1, 1, 2, 2, 3, 3, 4, 4]

    def test_remainder_goes_to_first_buckets(self):
        """Test 10 rows give sizes 3, 3, 2, 2."""
        assert window.bucket_sizes(10) == [3, 3, 2, 2]
        assert window.ntile(10) == [1, 1, 1, 2, 2, 2, 3, 3, 4, 4]

    def test_fewer_rows_than_buckets(self):
        """Test small inputs leave trailing buckets empty."""
        assert window.ntile(2) == [1, 2]
        assert window.bucket_sizes(2) == [1, 1, 0, 0]

    @pytest.mark.parametrize("n", [1, 3, 4, 7, 13, 100, 1001])
    def test_sizes_differ_by_at_most_one(self, n):
        """Test every row is assigned once and bucket sizes are balanced."""
        assignment = window.ntile(n)
        sizes = [assignment.count(b) for b in range(1, 5)]

        assert len(assignment) == n
        assert sum(sizes) == n
        assert max(sizes) - min(sizes) <= 1
        assert assignment == sorted(assignment)

    def test_empty_raises(self):
        """Test zero rows report emptiness."""
        with pytest.raises(EmptyPartitionError):
            window.ntile(0)

    def test_risk_segment_labels(self):
        """Test quartile labels."""
        assert [window.risk_segment(q) for q in range(1, 5)] == [
            "High Risk",
            "Medium-High Risk",
            "Medium-Low Risk",
            "Low Risk",
        ]

    def test_risk_segment_out_of_range(self):
        """Test invalid quartiles are rejected."""
        with pytest.raises(ValueError):
            window.risk_segment(5)


class TestRounding:
    """Tests for half-up rounding."""

    @pytest.mark.parametrize("value,expected", [
        ("2.345", "2.35"),
        ("2.344", "2.34"),
        ("-2.345", "-2.35"),
        ("10", "10.00"),
    ])
    def test_round_half_up(self, value, expected):
        """Test ties round away from zero."""
        assert window.round_half_up(Decimal(value)) == Decimal(expected)
