"""Tests for the DuckDB backend against the Python window engine."""

import warnings

import pytest

from expense_analytics.analyses import build_report
from expense_analytics.backends import DuckDBBackend, load_query
from expense_analytics.config import ReportConfig
from expense_analytics.exceptions import EmptyPartitionError
from expense_analytics.pipelines import PipelineStatus, ReportPipeline


@pytest.fixture
def backend(demo_store):
    """DuckDB backend with the demo data registered."""
    backend = DuckDBBackend()
    backend.register_store(demo_store)
    yield backend
    backend.close()


class TestLoadQuery:
    """Tests for packaged SQL."""

    def test_substitutes_variables(self):
        """Test placeholders are replaced."""
        sql = load_query("ranking", {"top_n": 7})

        assert "{{" not in sql
        assert "7" in sql

    def test_missing_query(self):
        """Test unknown query names."""
        with pytest.raises(ValueError):
            load_query("does_not_exist")


class TestDuckDBBackend:
    """Tests for DuckDBBackend."""

    def test_registered_tables(self, backend, demo_store):
        """Test the store is visible to SQL."""
        table = backend.query("SELECT COUNT(*) AS n FROM transactions")

        assert table.column("n").to_pylist() == [len(demo_store)]

    def test_ranking_matches(self, backend, demo_store):
        """Test SQL ranking equals the Python ranking."""
        config = ReportConfig(top_n=3)
        sql = backend.build_report("ranking", config)
        py = build_report("ranking", demo_store, config)

        assert [r.to_dict() for r in sql.rows] == [r.to_dict() for r in py.rows]

    def test_monthly_trend_matches(self, backend, demo_store):
        """Test SQL monthly trend equals the Python trend."""
        sql = backend.build_report("monthly_trend").rows
        py = build_report("monthly_trend", demo_store).rows

        assert len(sql) == len(py)
        for s, p in zip(sql, py):
            assert (s.year, s.month) == (p.year, p.month)
            assert s.monthly_expense == p.monthly_expense
            assert s.running_total == p.running_total
            assert s.min_monthly_year == p.min_monthly_year
            assert s.max_monthly_year == p.max_monthly_year
            # AVG runs in floating point in DuckDB
            assert float(s.moving_avg_3m) == pytest.approx(float(p.moving_avg_3m), abs=0.011)

    def test_month_over_month_matches(self, backend, demo_store):
        """Test SQL LAG/LEAD equals the Python deltas."""
        sql = backend.build_report("month_over_month").rows
        py = build_report("month_over_month", demo_store).rows

        assert len(sql) == len(py)
        for s, p in zip(sql, py):
            assert s.previous_month == p.previous_month
            assert s.next_month == p.next_month
            assert s.mom_trend == p.mom_trend
            if p.mom_growth_percent is None:
                assert s.mom_growth_percent is None
            else:
                assert float(s.mom_growth_percent) == pytest.approx(
                    float(p.mom_growth_percent), abs=0.011
                )

    def test_risk_segmentation_matches(self, backend, demo_store):
        """Test SQL NTILE equals the Python quartiles."""
        sql = backend.build_report("risk_segmentation").rows
        py = build_report("risk_segmentation", demo_store).rows

        assert [(r.transaction_id, r.risk_quartile, r.risk_segment) for r in sql] == [
            (r.transaction_id, r.risk_quartile, r.risk_segment) for r in py
        ]

    def test_context_manager(self, store):
        """Test the connection closes on exit."""
        with DuckDBBackend() as backend:
            backend.register_store(store)
            assert backend.query("SELECT 1 AS x").num_rows == 1

        assert backend._conn is None

    def test_query_without_deprecation_warning(self, backend):
        """Test fetching arrow results uses the current duckdb API."""
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            table = backend.query("SELECT 1 AS x")

        assert table.column("x").to_pylist() == [1]

    def test_row_count(self, backend, demo_store):
        """Test counting rows of a registered table."""
        assert backend.row_count("transactions") == len(demo_store)

    @pytest.mark.parametrize("name,operation", [
        ("monthly_trend", "partition_min_max"),
        ("risk_segmentation", "ntile"),
    ])
    def test_empty_transactions_raise(self, empty_store, name, operation):
        """Test SQL reports over zero rows report emptiness like the Python engine."""
        with DuckDBBackend() as backend:
            backend.register_store(empty_store)

            with pytest.raises(EmptyPartitionError) as exc:
                backend.build_report(name)

        assert exc.value.operation == operation

    @pytest.mark.parametrize("name", ["ranking", "month_over_month"])
    def test_empty_transactions_no_rows(self, empty_store, name):
        """Test reports without a row requirement return nothing on empty data."""
        with DuckDBBackend() as backend:
            backend.register_store(empty_store)

            assert len(backend.build_report(name)) == 0


class TestSqlEngine:
    """Tests for the report pipeline on the sql engine."""

    def test_scenario(self, store):
        """Test the two-month scenario through DuckDB."""
        results = ReportPipeline(store, engine="sql").run_reports()

        assert all(r.status == PipelineStatus.SUCCESS for r in results.values())
        feb = results["month_over_month"].report.rows[1]
        assert str(feb.mom_growth_percent) == "9.33"
        assert feb.mom_trend == "Increase"
        assert [r.department_name for r in results["ranking"].report.rows] == [
            "Finance", "Marketing", "HR", "IT",
        ]
        assert results["ranking"].metadata == {"engine": "sql"}
