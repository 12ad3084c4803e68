"""
Deterministic demo dataset.

Five departments, six expense categories and two years of transactions,
sized like a small company's books. The same seed always yields the same
records.
"""

import random
from datetime import date
from decimal import Decimal

import pyarrow as pa

from .schemas import DepartmentSchema, ExpenseCategorySchema, TransactionSchema
from .store import RecordStore


DEPARTMENTS = [
    {"department_id": 1, "department_name": "Finance", "region": "North America"},
    {"department_id": 2, "department_name": "Marketing", "region": "Europe"},
    {"department_id": 3, "department_name": "HR", "region": "North America"},
    {"department_id": 4, "department_name": "IT", "region": "Asia Pacific"},
    {"department_id": 5, "department_name": "Operations", "region": "Europe"},
]

EXPENSE_CATEGORIES = [
    {"expense_id": 1, "expense_name": "Salaries", "category": "Payroll"},
    {"expense_id": 2, "expense_name": "Cloud Hosting", "category": "Technology"},
    {"expense_id": 3, "expense_name": "Travel", "category": "Operations"},
    {"expense_id": 4, "expense_name": "Office Supplies", "category": "Operations"},
    {"expense_id": 5, "expense_name": "Consulting", "category": "Professional Services"},
    {"expense_id": 6, "expense_name": "Advertising", "category": "Marketing"},
]

# Relative spend per department; Finance books the most
DEPARTMENT_WEIGHTS = {1: 3.0, 2: 1.6, 3: 1.0, 4: 2.2, 5: 1.3}

DEFAULT_SEED = 42


def sample_records(
    seed: int = DEFAULT_SEED,
    years: tuple[int, ...] = (2023, 2024),
) -> dict[str, list[dict]]:
    """Plain-dict records for the three source tables."""
    rng = random.Random(seed)
    transactions = []
    transaction_id = 1

    for year in years:
        for month in range(1, 13):
            # Mild seasonality: Q4 spend runs higher
            season = 1.25 if month >= 10 else 1.0
            for department_id, weight in DEPARTMENT_WEIGHTS.items():
                for _ in range(rng.randint(1, 3)):
                    base = rng.uniform(500, 4000) * weight * season
                    transactions.append({
                        "transaction_id": transaction_id,
                        "department_id": department_id,
                        "expense_id": rng.choice(EXPENSE_CATEGORIES)["expense_id"],
                        "transaction_date": date(year, month, rng.randint(1, 28)),
                        "amount": Decimal(f"{base:.2f}"),
                    })
                    transaction_id += 1

    return {
        "departments": [dict(d) for d in DEPARTMENTS],
        "expense_categories": [dict(e) for e in EXPENSE_CATEGORIES],
        "transactions": transactions,
    }


def sample_tables(seed: int = DEFAULT_SEED) -> dict[str, pa.Table]:
    """Demo dataset as PyArrow tables."""
    records = sample_records(seed)
    return {
        "departments": DepartmentSchema.from_dicts(records["departments"]),
        "expense_categories": ExpenseCategorySchema.from_dicts(records["expense_categories"]),
        "transactions": TransactionSchema.from_dicts(records["transactions"]),
    }


def sample_store(seed: int = DEFAULT_SEED) -> RecordStore:
    """Demo dataset as a RecordStore."""
    records = sample_records(seed)
    return RecordStore.from_records(
        records["departments"],
        records["expense_categories"],
        records["transactions"],
    )
