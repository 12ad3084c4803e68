"""
Typed exceptions for the analytics engine.

Every error carries a machine-readable ``code`` so callers (the report
pipeline, the CLI) can branch on type instead of parsing messages.

    AnalyticsError
    +-- DataIntegrityError
    |   +-- ReferentialIntegrityError
    |   +-- InvalidRecordError
    +-- UndefinedValueError
    +-- EmptyPartitionError
    +-- UnknownReportError
"""

from typing import Any, Optional


class AnalyticsError(Exception):
    """Base class for all analytics errors."""

    code: str = "ANALYTICS_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class DataIntegrityError(AnalyticsError):
    """Source data cannot be used as loaded."""

    code = "DATA_INTEGRITY"


class ReferentialIntegrityError(DataIntegrityError):
    """A transaction references a department or expense category that does not exist."""

    code = "REFERENTIAL_INTEGRITY"

    def __init__(self, transaction_id: Any, field: str, value: Any):
        self.transaction_id = transaction_id
        self.field = field
        self.value = value
        super().__init__(
            f"Transaction {transaction_id}: {field}={value!r} does not resolve"
        )


class InvalidRecordError(DataIntegrityError):
    """A record violates a field constraint (duplicate id, negative amount, bad schema)."""

    code = "INVALID_RECORD"

    def __init__(self, message: str, record_id: Optional[Any] = None):
        self.record_id = record_id
        super().__init__(message)


class UndefinedValueError(AnalyticsError):
    """A derived value has no numeric result (e.g. growth against a zero or absent base)."""

    code = "UNDEFINED_VALUE"

    def __init__(self, current: Any, previous: Any):
        self.current = current
        self.previous = previous
        reason = "absent" if previous is None else "zero"
        super().__init__(
            f"Growth of {current} is undefined: previous value is {reason}"
        )


class EmptyPartitionError(AnalyticsError):
    """A window operation was asked to run over zero rows."""

    code = "EMPTY_PARTITION"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} requires at least one row")


class UnknownReportError(AnalyticsError):
    """A report name does not match any registered analysis."""

    code = "UNKNOWN_REPORT"

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(
            f"Unknown report: {name} (available: {', '.join(available)})"
        )
