"""Schema definitions for source tables and report outputs."""

from .base import BaseSchema, SchemaField, MONEY
from .records import DepartmentSchema, ExpenseCategorySchema, TransactionSchema
from .reports import (
    DepartmentRankingSchema,
    MonthlyTrendSchema,
    MonthOverMonthSchema,
    RiskSegmentationSchema,
)

__all__ = [
    "BaseSchema",
    "SchemaField",
    "MONEY",
    "DepartmentSchema",
    "ExpenseCategorySchema",
    "TransactionSchema",
    "DepartmentRankingSchema",
    "MonthlyTrendSchema",
    "MonthOverMonthSchema",
    "RiskSegmentationSchema",
]
