"""Exception types raised by the table staging engine.

Local validation problems (unknown keys, read-only fields, empty selections)
are raised before the Model Store is touched. Store problems carry the
status code, severity counts and import log the store reported.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.commit_result import CommitResult


class TableEngineError(Exception):
    """Base class for every error raised by tablestage."""

    def __init__(self, message: str, table_key: str | None = None):
        super().__init__(message)
        self.table_key = table_key


class UnknownTable(TableEngineError):
    """Table key is not present in the catalog."""

    def __init__(self, table_key: str):
        super().__init__(f"Unknown table: {table_key!r}", table_key)


class UnknownField(TableEngineError):
    """Field key is not defined for the table."""

    def __init__(self, table_key: str, field_key: str):
        super().__init__(f"Unknown field {field_key!r} in table {table_key!r}", table_key)
        self.field_key = field_key


class FieldNotImportable(TableEngineError):
    """Field exists but is read-only and cannot appear in a staged edit."""

    def __init__(self, table_key: str, field_key: str):
        super().__init__(
            f"Field {field_key!r} in table {table_key!r} is not importable", table_key
        )
        self.field_key = field_key


class MalformedTable(TableEngineError):
    """Row data does not match the declared field keys or row count."""


class EmptySelection(TableEngineError):
    """A display selection call received no names."""

    def __init__(self, category: str):
        super().__init__(f"Selection of {category} cannot be empty")
        self.category = category


class InvalidOutputOptions(TableEngineError):
    """Output options for display are internally inconsistent."""


class TableUnavailable(TableEngineError):
    """The store could not produce the requested table."""

    def __init__(self, table_key: str, status_code: int | None = None):
        message = f"Table {table_key!r} is unavailable"
        if status_code is not None:
            message += f" (status {status_code})"
        super().__init__(message, table_key)
        self.status_code = status_code


class GroupNotFound(TableEngineError):
    """The group filter passed to a read does not name a group in the model."""

    def __init__(self, table_key: str, group_filter: str):
        super().__init__(
            f"Group {group_filter!r} not found while reading table {table_key!r}", table_key
        )
        self.group_filter = group_filter


class StoreCommunicationFailure(TableEngineError):
    """The Model Store call itself failed (non-zero status or raised).

    Attributes:
        operation: Name of the store operation that failed.
        status_code: Status returned by the store, or -1 if it raised.
        result: Commit result with whatever counts/log the store produced,
            when the failure happened during a commit.
    """

    def __init__(
        self,
        operation: str,
        status_code: int,
        message: str = "",
        table_key: str | None = None,
        result: CommitResult | None = None,
    ):
        text = message or f"{operation} failed with status {status_code}"
        super().__init__(text, table_key)
        self.operation = operation
        self.status_code = status_code
        self.result = result


class PartialImportFailure(TableEngineError):
    """The store accepted the commit but reported fatal or row-level errors."""

    def __init__(self, result: CommitResult):
        keys = ", ".join(result.table_keys) or "<none>"
        super().__init__(
            f"Import finished with errors for tables [{keys}]: "
            f"fatal={result.fatal_error_count}, errors={result.error_count}, "
            f"warnings={result.warning_count}"
        )
        self.result = result
