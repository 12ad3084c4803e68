"""Tests for dataset loading."""

import pyarrow as pa
import pyarrow.csv as pv
import pytest

from expense_analytics.config import DataConfig
from expense_analytics.exceptions import InvalidRecordError, ReferentialIntegrityError
from expense_analytics.loader import load_store, load_tables, read_table, write_tables
from expense_analytics.sample import sample_tables
from expense_analytics.schemas import DepartmentSchema, TransactionSchema


class TestRoundTrip:
    """Tests writing and re-reading the source tables."""

    @pytest.mark.parametrize("file_format", ["csv", "parquet"])
    def test_write_then_load(self, temp_dir, store, file_format):
        """Test the store survives a trip through files."""
        config = DataConfig(base_path=temp_dir, file_format=file_format)

        paths = write_tables(store.to_tables(), config)
        loaded = load_store(config)

        assert [p.name for p in paths] == [
            f"departments.{file_format}",
            f"expense_categories.{file_format}",
            f"transactions.{file_format}",
        ]
        assert loaded.transactions == store.transactions
        assert loaded.departments == store.departments
        assert loaded.expense_categories == store.expense_categories

    def test_sample_dataset(self, temp_dir, demo_store):
        """Test the demo dataset loads from CSV."""
        config = DataConfig(base_path=temp_dir)
        write_tables(sample_tables(), config)

        loaded = load_store(config)

        assert len(loaded) == len(demo_store)

    def test_load_tables_types(self, temp_dir, store):
        """Test CSV columns are read with schema types."""
        config = DataConfig(base_path=temp_dir)
        write_tables(store.to_tables(), config)

        tables = load_tables(config)

        assert tables["transactions"].schema.types == TransactionSchema.to_arrow_schema().types


class TestReadTable:
    """Tests for read_table errors."""

    def test_missing_file(self, temp_dir):
        """Test a missing file."""
        with pytest.raises(FileNotFoundError):
            read_table(temp_dir / "departments.csv", DepartmentSchema)

    def test_unsupported_suffix(self, temp_dir):
        """Test an unknown file type."""
        path = temp_dir / "departments.xlsx"
        path.write_text("x")

        with pytest.raises(InvalidRecordError):
            read_table(path, DepartmentSchema)

    def test_missing_required_column(self, temp_dir):
        """Test a CSV lacking a required column."""
        path = temp_dir / "departments.csv"
        path.write_text("department_id,region\n1,Europe\n")

        with pytest.raises(InvalidRecordError, match="department_name"):
            read_table(path, DepartmentSchema)

    def test_unparseable_value(self, temp_dir):
        """Test a value that does not convert to the column type."""
        path = temp_dir / "departments.csv"
        path.write_text("department_id,department_name,region\nabc,Finance,Europe\n")

        with pytest.raises(InvalidRecordError):
            read_table(path, DepartmentSchema)

    def test_dangling_reference(self, temp_dir, store):
        """Test integrity is checked after loading."""
        config = DataConfig(base_path=temp_dir)
        tables = store.to_tables()
        tables["departments"] = tables["departments"].slice(1)
        write_tables(tables, config)

        with pytest.raises(ReferentialIntegrityError):
            load_store(config)

    def test_parquet_with_float_amounts(self, temp_dir):
        """Test float amounts in Parquet are cast to money."""
        import pyarrow.parquet as pq
        from datetime import date

        path = temp_dir / "transactions.parquet"
        pq.write_table(pa.table({
            "transaction_id": [1],
            "department_id": [1],
            "expense_id": [1],
            "transaction_date": [date(2024, 1, 1)],
            "amount": [19.99],
        }), path)

        table = read_table(path, TransactionSchema)

        assert str(table.column("amount")[0].as_py()) == "19.99"
