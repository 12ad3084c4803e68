"""Source table schemas: departments, expense categories, transactions."""

import pyarrow as pa
from .base import BaseSchema, MONEY, SchemaField


class DepartmentSchema(BaseSchema):
    """Schema for department reference data."""

    department_id = SchemaField(
        name="department_id",
        dtype=pa.int64(),
        nullable=False,
        description="Unique department identifier",
    )
    department_name = SchemaField(
        name="department_name",
        dtype=pa.string(),
        nullable=False,
        description="Department name",
    )
    region = SchemaField(
        name="region",
        dtype=pa.string(),
        nullable=True,
        description="Region the department reports from",
    )


class ExpenseCategorySchema(BaseSchema):
    """Schema for expense category reference data."""

    expense_id = SchemaField(
        name="expense_id",
        dtype=pa.int64(),
        nullable=False,
        description="Unique expense identifier",
    )
    expense_name = SchemaField(
        name="expense_name",
        dtype=pa.string(),
        nullable=False,
        description="Expense name (e.g. Cloud Hosting)",
    )
    category = SchemaField(
        name="category",
        dtype=pa.string(),
        nullable=True,
        description="Category label (e.g. Technology)",
    )


class TransactionSchema(BaseSchema):
    """
    Schema for transaction records.

    Each transaction references exactly one department and one expense
    category; amounts are non-negative.
    """

    transaction_id = SchemaField(
        name="transaction_id",
        dtype=pa.int64(),
        nullable=False,
        description="Unique transaction identifier",
    )
    department_id = SchemaField(
        name="department_id",
        dtype=pa.int64(),
        nullable=False,
        description="Department the amount is booked against",
    )
    expense_id = SchemaField(
        name="expense_id",
        dtype=pa.int64(),
        nullable=False,
        description="Expense category of the amount",
    )
    transaction_date = SchemaField(
        name="transaction_date",
        dtype=pa.date32(),
        nullable=False,
        description="Booking date",
    )
    amount = SchemaField(
        name="amount",
        dtype=MONEY,
        nullable=False,
        description="Transaction amount",
    )
