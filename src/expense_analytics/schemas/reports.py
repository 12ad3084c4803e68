"""Output schemas for the four window-function reports."""

import pyarrow as pa
from .base import BaseSchema, MONEY, SchemaField


class DepartmentRankingSchema(BaseSchema):
    """Department revenue with ROW_NUMBER, RANK and DENSE_RANK side by side."""

    department_id = SchemaField(name="department_id", dtype=pa.int64(), nullable=False)
    department_name = SchemaField(name="department_name", dtype=pa.string(), nullable=False)
    total_revenue = SchemaField(name="total_revenue", dtype=MONEY, nullable=False)
    row_num = SchemaField(
        name="row_num",
        dtype=pa.int64(),
        nullable=False,
        description="Unique position, ties broken by department_id",
    )
    revenue_rank = SchemaField(
        name="revenue_rank",
        dtype=pa.int64(),
        nullable=False,
        description="Rank with gaps after ties",
    )
    dense_revenue_rank = SchemaField(
        name="dense_revenue_rank",
        dtype=pa.int64(),
        nullable=False,
        description="Rank without gaps",
    )


class MonthlyTrendSchema(BaseSchema):
    """Monthly expense with running total, moving average and yearly bounds."""

    year = SchemaField(name="year", dtype=pa.int64(), nullable=False)
    month = SchemaField(name="month", dtype=pa.int64(), nullable=False)
    monthly_expense = SchemaField(name="monthly_expense", dtype=MONEY, nullable=False)
    running_total = SchemaField(name="running_total", dtype=MONEY, nullable=False)
    moving_avg_3m = SchemaField(
        name="moving_avg_3m",
        dtype=MONEY,
        nullable=False,
        description="Average of this and the two preceding months",
    )
    min_monthly_year = SchemaField(name="min_monthly_year", dtype=MONEY, nullable=False)
    max_monthly_year = SchemaField(name="max_monthly_year", dtype=MONEY, nullable=False)


class MonthOverMonthSchema(BaseSchema):
    """Month-over-month deltas from LAG / LEAD."""

    year = SchemaField(name="year", dtype=pa.int64(), nullable=False)
    month = SchemaField(name="month", dtype=pa.int64(), nullable=False)
    current_month = SchemaField(name="current_month", dtype=MONEY, nullable=False)
    previous_month = SchemaField(name="previous_month", dtype=MONEY, nullable=True)
    next_month = SchemaField(name="next_month", dtype=MONEY, nullable=True)
    mom_growth_percent = SchemaField(
        name="mom_growth_percent",
        dtype=MONEY,
        nullable=True,
        description="Null when the previous month is absent or zero",
    )
    mom_trend = SchemaField(name="mom_trend", dtype=pa.string(), nullable=False)


class RiskSegmentationSchema(BaseSchema):
    """Transactions bucketed into amount quartiles."""

    transaction_id = SchemaField(name="transaction_id", dtype=pa.int64(), nullable=False)
    department_name = SchemaField(name="department_name", dtype=pa.string(), nullable=False)
    expense_name = SchemaField(name="expense_name", dtype=pa.string(), nullable=False)
    transaction_date = SchemaField(name="transaction_date", dtype=pa.date32(), nullable=False)
    amount = SchemaField(name="amount", dtype=MONEY, nullable=False)
    risk_quartile = SchemaField(
        name="risk_quartile",
        dtype=pa.int64(),
        nullable=False,
        description="1 = highest amounts",
    )
    risk_segment = SchemaField(name="risk_segment", dtype=pa.string(), nullable=False)
