"""Snapshot reads from the Model Store in any of the three wire formats.

Every read goes through the store's array form and is then encoded by the
codecs, so the array, delimited-text and markup payloads of the same read
always describe identical field keys and cells.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..codecs import delimited, markup
from ..data.model_store import StoreStatus
from ..debug_trace import logger, perf_timer
from ..errors import GroupNotFound, MalformedTable, TableUnavailable
from ..models.constants import DEFAULT_FILE_ENCODING, DEFAULT_SEPARATOR, TableFormat
from ..models.table import TableSnapshot
from ..models.validation import validate_table_key

if TYPE_CHECKING:
    from ..data.model_store import ModelStore, TableResponse
    from .catalog import TableCatalog
    from .selection import DisplaySelectionState


@dataclass(frozen=True)
class EncodedTable:
    """A snapshot delivered as delimited text or markup.

    Attributes:
        table_key: Table that was read.
        version: Version reported by the store at read time.
        format: DELIMITED_TEXT or TAGGED_MARKUP.
        text: The encoded document.
        field_keys: Columns included, in order.
        row_count: Number of rows encoded.
        separator: Cell separator (delimited text only).
        editable: False for display reads, which cannot be staged.
    """

    table_key: str
    version: int
    format: TableFormat
    text: str
    field_keys: tuple[str, ...]
    row_count: int
    separator: str = DEFAULT_SEPARATOR
    editable: bool = True


class TableSnapshotReader:
    """Reads versioned table snapshots for display or editing.

    Display reads honor the current DisplaySelectionState; editing reads
    return the version that must be echoed back when staging.

    Usage:
        reader = TableSnapshotReader(store, catalog, selection)
        snapshot = reader.read_for_editing("Load Patterns")
        csv_form = reader.read_for_editing("Load Patterns", fmt=TableFormat.DELIMITED_TEXT)
    """

    def __init__(
        self,
        store: ModelStore,
        catalog: TableCatalog,
        selection: DisplaySelectionState | None = None,
    ):
        self._store = store
        self._catalog = catalog
        self._selection = selection

    def _check_response(
        self, operation: str, table_key: str, group_filter: str, response: TableResponse
    ) -> None:
        if response.status == StoreStatus.OK:
            return

        logger.warning(
            "%s failed for table '%s' (group %r): status %d",
            operation,
            table_key,
            group_filter,
            response.status,
        )
        if response.status == StoreStatus.GROUP_NOT_FOUND:
            raise GroupNotFound(table_key, group_filter)
        raise TableUnavailable(table_key, response.status)

    def _to_snapshot(self, table_key: str, response: TableResponse, editable: bool) -> TableSnapshot:
        try:
            return TableSnapshot(
                table_key=table_key,
                version=response.version,
                field_keys=tuple(response.field_keys),
                rows=tuple(response.rows),
                row_count=response.row_count,
                editable=editable,
            )
        except MalformedTable as e:
            # Row count and cells from the store disagree
            raise TableUnavailable(table_key) from e

    def _encode(
        self,
        snapshot: TableSnapshot,
        fmt: TableFormat,
        separator: str,
        include_schema: bool,
    ) -> TableSnapshot | EncodedTable:
        if fmt is TableFormat.ARRAY:
            return snapshot

        if fmt is TableFormat.DELIMITED_TEXT:
            text = delimited.encode(snapshot.field_keys, snapshot.rows, separator)
        elif fmt is TableFormat.TAGGED_MARKUP:
            fields = self._catalog.list_fields(snapshot.table_key) if include_schema else None
            text = markup.encode(
                snapshot.table_key,
                snapshot.version,
                snapshot.field_keys,
                snapshot.rows,
                include_schema=include_schema,
                fields=fields,
            )
        else:
            raise ValueError(f"Unsupported table format: {fmt!r}")

        return EncodedTable(
            table_key=snapshot.table_key,
            version=snapshot.version,
            format=fmt,
            text=text,
            field_keys=snapshot.field_keys,
            row_count=snapshot.row_count,
            separator=separator,
            editable=snapshot.editable,
        )

    # --- Snapshot reads ---

    def read_display_snapshot(
        self,
        table_key: str,
        field_keys: Sequence[str] | None = None,
        group_filter: str = "",
    ) -> TableSnapshot:
        """Read a table for display in array form.

        Args:
            table_key: Table to read.
            field_keys: Columns to include; None or empty means all fields in
                catalog order.
            group_filter: Restrict rows to objects in this group ("" = all).

        Raises:
            TableUnavailable: If the table is unknown or unreadable.
            GroupNotFound: If group_filter does not name a group.
        """
        is_valid, error = validate_table_key(table_key)
        if not is_valid:
            raise ValueError(error)

        selection = self._selection.snapshot() if self._selection is not None else None
        with perf_timer("get_display_table"):
            response = self._store.get_display_table(
                table_key, tuple(field_keys or ()), group_filter or "", selection
            )
        self._check_response("get_display_table", table_key, group_filter, response)

        snapshot = self._to_snapshot(table_key, response, editable=False)
        logger.debug(
            "Retrieved table '%s' for display: %d records, %d fields",
            table_key,
            snapshot.row_count,
            snapshot.field_count,
        )
        return snapshot

    def read_editable_snapshot(self, table_key: str, group_filter: str = "") -> TableSnapshot:
        """Read a table for editing in array form.

        Raises:
            TableUnavailable: If the table is unknown or unreadable.
            GroupNotFound: If group_filter does not name a group.
        """
        is_valid, error = validate_table_key(table_key)
        if not is_valid:
            raise ValueError(error)

        with perf_timer("get_editable_table"):
            response = self._store.get_editable_table(table_key, group_filter or "")
        self._check_response("get_editable_table", table_key, group_filter, response)

        snapshot = self._to_snapshot(table_key, response, editable=True)
        logger.debug(
            "Retrieved table '%s' for editing: %d records, %d fields (version %d)",
            table_key,
            snapshot.row_count,
            snapshot.field_count,
            snapshot.version,
        )
        return snapshot

    # --- Formatted reads ---

    def read_for_display(
        self,
        table_key: str,
        field_keys: Sequence[str] | None = None,
        group_filter: str = "",
        fmt: TableFormat = TableFormat.ARRAY,
        separator: str = DEFAULT_SEPARATOR,
        include_schema: bool = False,
    ) -> TableSnapshot | EncodedTable:
        """Read a table for display in the requested format.

        Returns:
            TableSnapshot for ARRAY, EncodedTable for the text formats. The
            payload is marked not editable.
        """
        snapshot = self.read_display_snapshot(table_key, field_keys, group_filter)
        return self._encode(snapshot, fmt, separator, include_schema)

    def read_for_editing(
        self,
        table_key: str,
        group_filter: str = "",
        fmt: TableFormat = TableFormat.ARRAY,
        separator: str = DEFAULT_SEPARATOR,
        include_schema: bool = False,
    ) -> TableSnapshot | EncodedTable:
        """Read a table for editing in the requested format.

        The payload's version is the one to pass when staging the edit.
        """
        snapshot = self.read_editable_snapshot(table_key, group_filter)
        return self._encode(snapshot, fmt, separator, include_schema)

    # --- File reads ---

    def read_for_display_to_file(
        self,
        table_key: str,
        path: Path | str,
        field_keys: Sequence[str] | None = None,
        group_filter: str = "",
        separator: str = DEFAULT_SEPARATOR,
        encoding: str = DEFAULT_FILE_ENCODING,
    ) -> int:
        """Write a display read to a delimited-text file.

        Returns:
            The table version that was read.
        """
        snapshot = self.read_display_snapshot(table_key, field_keys, group_filter)
        delimited.write_file(path, snapshot.field_keys, snapshot.rows, separator, encoding)
        logger.debug("Saved table '%s' to file for display: %s", table_key, path)
        return snapshot.version

    def read_for_editing_to_file(
        self,
        table_key: str,
        path: Path | str,
        group_filter: str = "",
        separator: str = DEFAULT_SEPARATOR,
        encoding: str = DEFAULT_FILE_ENCODING,
    ) -> int:
        """Write an editing read to a delimited-text file.

        Returns:
            The table version to pass when staging the edited file.
        """
        snapshot = self.read_editable_snapshot(table_key, group_filter)
        delimited.write_file(path, snapshot.field_keys, snapshot.rows, separator, encoding)
        logger.debug("Saved table '%s' to file for editing: %s", table_key, path)
        return snapshot.version
