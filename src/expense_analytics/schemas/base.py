"""Arrow schema declarations shared by source tables and reports."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable
import pyarrow as pa


# Monetary columns: 18 digits, 2 after the point
MONEY = pa.decimal128(18, 2)

# Types that may be cast into one another when reading files
_TYPE_FAMILIES: list[Callable[[pa.DataType], bool]] = [
    lambda t: pa.types.is_integer(t) or pa.types.is_floating(t) or pa.types.is_decimal(t),
    lambda t: pa.types.is_date(t) or pa.types.is_timestamp(t),
    lambda t: pa.types.is_string(t) or pa.types.is_large_string(t),
]


@dataclass(frozen=True)
class SchemaField:
    """One column: name, arrow type, nullability and a short description."""

    name: str
    dtype: pa.DataType
    nullable: bool = True
    description: str = ""

    def to_arrow_field(self) -> pa.Field:
        metadata = {b"description": self.description.encode()} if self.description else None
        return pa.field(self.name, self.dtype, nullable=self.nullable, metadata=metadata)


class BaseSchema:
    """
    Table layout declared as ``SchemaField`` class attributes.

    Declaration order is column order: source files are cast into it and
    reports are rendered in it.
    """

    @classmethod
    def fields(cls) -> list[SchemaField]:
        declared: dict[str, SchemaField] = {}
        for klass in reversed(cls.__mro__):
            for value in vars(klass).values():
                if isinstance(value, SchemaField):
                    declared[value.name] = value
        return list(declared.values())

    @classmethod
    def to_arrow_schema(cls) -> pa.Schema:
        return pa.schema([f.to_arrow_field() for f in cls.fields()])

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in cls.fields()]

    @classmethod
    def column_types(cls) -> dict[str, pa.DataType]:
        """Column name to arrow type, e.g. for ``pyarrow.csv.ConvertOptions``."""
        return {f.name: f.dtype for f in cls.fields()}

    @classmethod
    def validate(cls, table: pa.Table) -> list[str]:
        """
        Check ``table`` against the schema.

        Returns one message per problem: missing required column,
        incompatible type, or nulls in a required column. Empty means valid.
        """
        problems = []
        for f in cls.fields():
            if f.name not in table.column_names:
                if not f.nullable:
                    problems.append(f"Missing required column: {f.name}")
                continue

            actual = table.schema.field(f.name).type
            if not actual.equals(f.dtype) and not cls._types_compatible(actual, f.dtype):
                problems.append(f"Type mismatch for {f.name}: expected {f.dtype}, got {actual}")

            if not f.nullable and table.column(f.name).null_count:
                problems.append(f"Null values in required column: {f.name}")
        return problems

    @staticmethod
    def _types_compatible(actual: pa.DataType, expected: pa.DataType) -> bool:
        return any(member(actual) and member(expected) for member in _TYPE_FAMILIES)

    @classmethod
    def cast(cls, table: pa.Table) -> pa.Table:
        """
        Reorder and cast ``table`` to the schema.

        Missing nullable columns are added as nulls; a missing required
        column raises ValueError.
        """
        columns = {}
        for f in cls.fields():
            if f.name in table.column_names:
                column = table.column(f.name)
                columns[f.name] = column if column.type.equals(f.dtype) else _cast_column(column, f.dtype)
            elif f.nullable:
                columns[f.name] = pa.nulls(table.num_rows, type=f.dtype)
            else:
                raise ValueError(f"Missing required column: {f.name}")
        return pa.table(columns)

    @classmethod
    def empty_table(cls) -> pa.Table:
        return cls.to_arrow_schema().empty_table()

    @classmethod
    def from_dicts(cls, records: list[dict]) -> pa.Table:
        """Build a table from dicts; keys outside the schema are ignored, missing keys are null."""
        if not records:
            return cls.empty_table()
        names = cls.field_names()
        rows = [{name: record.get(name) for name in names} for record in records]
        return pa.Table.from_pylist(rows, schema=cls.to_arrow_schema())


def _cast_column(column: pa.ChunkedArray, target: pa.DataType) -> pa.ChunkedArray:
    # Floats reach decimals through their shortest repr, so 19.99 stays 19.99
    if pa.types.is_floating(column.type) and pa.types.is_decimal(target):
        values = [None if v is None else Decimal(repr(v)) for v in column.to_pylist()]
        return pa.chunked_array([pa.array(values, type=target)], type=target)
    if pa.types.is_timestamp(column.type) and pa.types.is_date(target):
        values = [None if v is None else v.date() for v in column.to_pylist()]
        return pa.chunked_array([pa.array(values, type=target)], type=target)
    return column.cast(target)
