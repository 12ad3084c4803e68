"""
In-memory record store.

Holds the read-only dataset (departments, expense categories,
transactions) and resolves transaction references. All integrity checks
run once, at construction; a store that exists is a valid store.
"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Iterator
import pyarrow as pa

from .exceptions import InvalidRecordError, ReferentialIntegrityError
from .logging import get_logger
from .models import Department, EnrichedTransaction, ExpenseCategory, Transaction
from .schemas import DepartmentSchema, ExpenseCategorySchema, TransactionSchema
from .window import to_decimal


logger = get_logger("store")


def _coerce_date(value: Any, record_id: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidRecordError(
        f"Transaction {record_id}: invalid transaction_date {value!r}", record_id
    )


def _coerce_amount(value: Any, record_id: Any) -> Decimal:
    if value is None:
        raise InvalidRecordError(f"Transaction {record_id}: amount is missing", record_id)
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidRecordError(
            f"Transaction {record_id}: amount {value!r} is not a number", record_id
        ) from None
    if not amount.is_finite():
        raise InvalidRecordError(f"Transaction {record_id}: amount must be finite", record_id)
    if amount < 0:
        raise InvalidRecordError(
            f"Transaction {record_id}: amount must be non-negative, got {amount}", record_id
        )
    return amount


def _index(records: Iterable[Any], key: str, kind: str) -> dict[Any, Any]:
    index: dict[Any, Any] = {}
    for record in records:
        record_id = getattr(record, key)
        if record_id is None:
            raise InvalidRecordError(f"{kind} without {key}")
        if record_id in index:
            raise InvalidRecordError(f"Duplicate {kind} {key}: {record_id}", record_id)
        index[record_id] = record
    return index


class RecordStore:
    """
    Read-only collection of transactions with their reference data.

    Raises on construction:
        ReferentialIntegrityError: a transaction's department_id or
            expense_id is missing or does not resolve
        InvalidRecordError: duplicate identifiers, negative or non-finite
            amounts, missing or unparseable transaction dates
    """

    def __init__(
        self,
        departments: Iterable[Department],
        expense_categories: Iterable[ExpenseCategory],
        transactions: Iterable[Transaction],
    ):
        self._departments = _index(departments, "department_id", "department")
        self._expenses = _index(expense_categories, "expense_id", "expense category")

        checked = []
        for txn in transactions:
            self._check_references(txn)
            amount = _coerce_amount(txn.amount, txn.transaction_id)
            booked = _coerce_date(txn.transaction_date, txn.transaction_id)
            if amount is not txn.amount or booked is not txn.transaction_date:
                txn = replace(txn, amount=amount, transaction_date=booked)
            checked.append(txn)
        self._transactions = tuple(checked)
        _index(self._transactions, "transaction_id", "transaction")

        logger.debug(
            f"Loaded {len(self._transactions)} transactions, "
            f"{len(self._departments)} departments, "
            f"{len(self._expenses)} expense categories"
        )

    def _check_references(self, txn: Transaction) -> None:
        if txn.department_id is None or txn.department_id not in self._departments:
            raise ReferentialIntegrityError(txn.transaction_id, "department_id", txn.department_id)
        if txn.expense_id is None or txn.expense_id not in self._expenses:
            raise ReferentialIntegrityError(txn.transaction_id, "expense_id", txn.expense_id)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        departments: list[dict],
        expense_categories: list[dict],
        transactions: list[dict],
    ) -> "RecordStore":
        """Build a store from plain dictionaries (e.g. JSON or fixtures)."""
        return cls(
            departments=[
                Department(
                    department_id=d.get("department_id"),
                    department_name=d.get("department_name"),
                    region=d.get("region"),
                )
                for d in departments
            ],
            expense_categories=[
                ExpenseCategory(
                    expense_id=e.get("expense_id"),
                    expense_name=e.get("expense_name"),
                    category=e.get("category"),
                )
                for e in expense_categories
            ],
            transactions=[cls._transaction_from_dict(t) for t in transactions],
        )

    @staticmethod
    def _transaction_from_dict(record: dict) -> Transaction:
        record_id = record.get("transaction_id")
        if record_id is None:
            raise InvalidRecordError("Transaction without transaction_id")
        return Transaction(
            transaction_id=record_id,
            department_id=record.get("department_id"),
            expense_id=record.get("expense_id"),
            transaction_date=_coerce_date(record.get("transaction_date"), record_id),
            amount=_coerce_amount(record.get("amount"), record_id),
        )

    @classmethod
    def from_tables(
        cls,
        departments: pa.Table,
        expense_categories: pa.Table,
        transactions: pa.Table,
    ) -> "RecordStore":
        """Build a store from PyArrow tables shaped like the source schemas."""
        return cls.from_records(
            departments.to_pylist(),
            expense_categories.to_pylist(),
            transactions.to_pylist(),
        )

    def to_tables(self) -> dict[str, pa.Table]:
        """Export the dataset as PyArrow tables keyed by SQL table name."""
        return {
            "departments": DepartmentSchema.from_dicts(
                [vars(d) for d in self._departments.values()]
            ),
            "expense_categories": ExpenseCategorySchema.from_dicts(
                [vars(e) for e in self._expenses.values()]
            ),
            "transactions": TransactionSchema.from_dicts(
                [vars(t) for t in self._transactions]
            ),
        }

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def departments(self) -> tuple[Department, ...]:
        return tuple(self._departments.values())

    @property
    def expense_categories(self) -> tuple[ExpenseCategory, ...]:
        return tuple(self._expenses.values())

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._transactions

    def department(self, department_id: Any) -> Department:
        """Resolve a department, raising if it is unknown."""
        try:
            return self._departments[department_id]
        except KeyError:
            raise ReferentialIntegrityError(None, "department_id", department_id) from None

    def expense_category(self, expense_id: Any) -> ExpenseCategory:
        """Resolve an expense category, raising if it is unknown."""
        try:
            return self._expenses[expense_id]
        except KeyError:
            raise ReferentialIntegrityError(None, "expense_id", expense_id) from None

    def enriched(self) -> list[EnrichedTransaction]:
        """Transactions joined with their department and expense category."""
        return [
            EnrichedTransaction(
                transaction=txn,
                department=self._departments[txn.department_id],
                expense=self._expenses[txn.expense_id],
            )
            for txn in self._transactions
        ]

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    def __repr__(self) -> str:
        return (
            f"RecordStore(departments={len(self._departments)}, "
            f"expense_categories={len(self._expenses)}, "
            f"transactions={len(self._transactions)})"
        )
