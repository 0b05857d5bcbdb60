"""Model Store abstraction.

The Model Store is the system of record that owns durable table contents.
tablestage only reads from it and submits batches of edits to it; version
conflicts, type coercion and referential checks are the store's job.

Stores exchange table data in the row-major array form only. Delimited text
and markup are produced by tablestage's codecs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..models.pending_edit import PendingEdit
    from ..models.table import FieldDescriptor, ObsoleteTable, TableDescriptor
    from ..services.selection import DisplaySelection


class StoreStatus(IntEnum):
    """Status codes returned by store calls. Anything non-zero is a failure."""

    OK = 0
    FAILED = 1
    TABLE_NOT_FOUND = 2
    GROUP_NOT_FOUND = 3


@dataclass(frozen=True)
class FieldListResponse:
    """Fields of one table, with the table version the store reported."""

    version: int = 0
    fields: tuple[FieldDescriptor, ...] = ()
    status: int = StoreStatus.OK


@dataclass(frozen=True)
class TableResponse:
    """Contents of one table in row-major array form."""

    version: int = 0
    field_keys: tuple[str, ...] = ()
    row_count: int = 0
    rows: tuple[str, ...] = ()
    status: int = StoreStatus.OK


@dataclass(frozen=True)
class CommitResponse:
    """What the store reported for one commit batch."""

    fatal_error_count: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    log: str = ""
    status: int = StoreStatus.OK


class ModelStore(ABC):
    """Abstract base class for Model Store collaborators.

    Implementations must be safe to call from the thread that owns the
    engine; tablestage does not call a store from more than one thread at a
    time unless the caller does.
    """

    @abstractmethod
    def list_tables(self, include_empty: bool = False) -> list[TableDescriptor]:
        """List tables defined in the model.

        Args:
            include_empty: Also list tables that currently have no rows,
                with is_empty set.
        """

    @abstractmethod
    def list_obsolete_tables(self) -> list[ObsoleteTable]:
        """List deprecated table keys with migration notes."""

    @abstractmethod
    def list_fields(self, table_key: str) -> FieldListResponse:
        """List every field of a table, in the store's column order."""

    @abstractmethod
    def get_editable_table(self, table_key: str, group_filter: str = "") -> TableResponse:
        """Read a table for editing (all importable columns, current version)."""

    @abstractmethod
    def get_display_table(
        self,
        table_key: str,
        field_keys: Sequence[str] = (),
        group_filter: str = "",
        selection: DisplaySelection | None = None,
    ) -> TableResponse:
        """Read a table for display.

        Args:
            table_key: Table to read.
            field_keys: Columns to include; empty means all, in catalog order.
            group_filter: Restrict rows to objects in this group ("" = all).
            selection: Load case/combination/pattern and output option
                selection narrowing result tables.
        """

    @abstractmethod
    def commit_edits(self, edits: Sequence[PendingEdit], fill_log: bool = True) -> CommitResponse:
        """Apply a batch of table replacements in one call.

        Commits are irreversible at the store level; callers are expected to
        have saved the model beforehand.
        """

    def discard_edits(self) -> int:
        """Drop any edits the store itself is holding. Returns a status code."""
        return StoreStatus.OK
