"""Shared fixtures."""

import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from expense_analytics.sample import sample_store
from expense_analytics.store import RecordStore


DEPARTMENTS = [
    {"department_id": 1, "department_name": "Finance", "region": "North America"},
    {"department_id": 2, "department_name": "Marketing", "region": "Europe"},
    {"department_id": 3, "department_name": "HR", "region": "North America"},
    {"department_id": 4, "department_name": "IT", "region": "Asia Pacific"},
]

EXPENSE_CATEGORIES = [
    {"expense_id": 1, "expense_name": "Salaries", "category": "Payroll"},
    {"expense_id": 2, "expense_name": "Cloud Hosting", "category": "Technology"},
    {"expense_id": 3, "expense_name": "Advertising", "category": "Marketing"},
]

# January sums to 75,000 and February to 82,000; per department the totals
# are Finance 86,000, Marketing 38,000, HR 22,000, IT 11,000.
TRANSACTIONS = [
    {"transaction_id": 1, "department_id": 1, "expense_id": 1, "transaction_date": date(2024, 1, 5), "amount": Decimal("40000.00")},
    {"transaction_id": 2, "department_id": 2, "expense_id": 3, "transaction_date": date(2024, 1, 10), "amount": Decimal("20000.00")},
    {"transaction_id": 3, "department_id": 3, "expense_id": 1, "transaction_date": date(2024, 1, 15), "amount": Decimal("10000.00")},
    {"transaction_id": 4, "department_id": 4, "expense_id": 2, "transaction_date": date(2024, 1, 20), "amount": Decimal("5000.00")},
    {"transaction_id": 5, "department_id": 1, "expense_id": 1, "transaction_date": date(2024, 2, 3), "amount": Decimal("46000.00")},
    {"transaction_id": 6, "department_id": 2, "expense_id": 3, "transaction_date": date(2024, 2, 8), "amount": Decimal("18000.00")},
    {"transaction_id": 7, "department_id": 3, "expense_id": 1, "transaction_date": date(2024, 2, 14), "amount": Decimal("12000.00")},
    {"transaction_id": 8, "department_id": 4, "expense_id": 2, "transaction_date": date(2024, 2, 21), "amount": Decimal("6000.00")},
]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def records():
    """Plain-dict records for the two-month scenario."""
    return {
        "departments": [dict(d) for d in DEPARTMENTS],
        "expense_categories": [dict(e) for e in EXPENSE_CATEGORIES],
        "transactions": [dict(t) for t in TRANSACTIONS],
    }


@pytest.fixture
def store(records):
    """Record store for the two-month scenario."""
    return RecordStore.from_records(
        records["departments"],
        records["expense_categories"],
        records["transactions"],
    )


@pytest.fixture
def tied_store():
    """Departments 1 and 2 tie at 100, 3 and 4 tie at 50, 5 has 10."""
    departments = [
        {"department_id": i, "department_name": f"Dept {i}", "region": None}
        for i in range(1, 6)
    ]
    amounts = {1: "100", 2: "100", 3: "50", 4: "50", 5: "10"}
    # Insert in reverse id order so the tie-break has work to do
    transactions = [
        {
            "transaction_id": 10 + dept_id,
            "department_id": dept_id,
            "expense_id": 1,
            "transaction_date": date(2024, 3, 1),
            "amount": Decimal(amount),
        }
        for dept_id, amount in sorted(amounts.items(), reverse=True)
    ]
    return RecordStore.from_records(departments, EXPENSE_CATEGORIES, transactions)


@pytest.fixture
def empty_store():
    """Reference data but no transactions."""
    return RecordStore.from_records(DEPARTMENTS, EXPENSE_CATEGORIES, [])


@pytest.fixture(scope="session")
def demo_store():
    """Two years of deterministic sample data."""
    return sample_store()
