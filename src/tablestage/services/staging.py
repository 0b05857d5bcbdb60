"""Staging buffer for table edits awaiting commit.

Holds at most one PendingEdit per table key. Staging validates the edit
against the catalog but never touches table contents in the Model Store;
only CommitCoordinator.apply() does that.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from ..codecs import delimited, markup
from ..debug_trace import logger
from ..errors import FieldNotImportable, MalformedTable, UnknownField
from ..models.constants import DEFAULT_FILE_ENCODING, DEFAULT_SEPARATOR
from ..models.pending_edit import PendingEdit
from ..models.validation import validate_field_keys, validate_row_shape, validate_table_key

if TYPE_CHECKING:
    from ..models.table import TableSnapshot
    from .catalog import TableCatalog


class EditStagingBuffer:
    """Table-keyed map of pending edits, in staging order.

    Staging the same table twice replaces the earlier edit (last writer
    wins). A failed stage leaves any earlier edit for that table in place.

    Usage:
        buffer = EditStagingBuffer(catalog)
        buffer.stage("Loads", 3, ["Name", "Value"], ["DL", "100", "LL", "50"])
        buffer.peek("Loads")  # -> PendingEdit('Loads', v3, 2 fields, 2 rows)
    """

    def __init__(self, catalog: TableCatalog):
        self._catalog = catalog
        self._lock = threading.Lock()
        self._pending: dict[str, PendingEdit] = {}

    # --- Validation ---

    def _validate(
        self,
        table_key: str,
        field_keys: Sequence[str],
        rows: Sequence[str],
        row_count: int | None,
    ) -> None:
        is_valid, error = validate_table_key(table_key)
        if not is_valid:
            raise ValueError(error)

        is_valid, error = validate_field_keys(field_keys)
        if not is_valid:
            raise MalformedTable(f"Table {table_key!r}: {error}", table_key)

        is_valid, error = validate_row_shape(len(field_keys), len(rows), row_count)
        if not is_valid:
            raise MalformedTable(f"Table {table_key!r}: {error}", table_key)

        # Raises UnknownTable when the key is not in the catalog
        catalog_fields = {f.field_key: f for f in self._catalog.list_fields(table_key)}
        for key in field_keys:
            descriptor = catalog_fields.get(key)
            if descriptor is None:
                raise UnknownField(table_key, key)
            if not descriptor.is_importable:
                raise FieldNotImportable(table_key, key)

    # --- Staging ---

    def stage(
        self,
        table_key: str,
        version: int,
        field_keys: Sequence[str],
        rows: Sequence[str],
        row_count: int | None = None,
    ) -> PendingEdit:
        """Stage a full replacement of one table's rows.

        The version is not compared with the store's current version here;
        the store checks it when the edit is committed.

        Args:
            table_key: Table to replace.
            version: Version of the snapshot the edit was built from.
            field_keys: Column order of rows. Every key must be an
                importable field of the table.
            rows: Flat row-major cells.
            row_count: Declared number of rows. When omitted, rows must hold
                a whole number of rows.

        Returns:
            The PendingEdit now held for table_key.

        Raises:
            UnknownTable: If table_key is not in the catalog.
            UnknownField: If a field key is not defined for the table.
            FieldNotImportable: If a field is read-only.
            MalformedTable: If field keys are empty/duplicated or the cell
                count does not match.
        """
        if isinstance(field_keys, str):
            raise TypeError("field_keys must be a sequence of strings, not a string")

        field_keys = tuple(field_keys)
        cells = tuple("" if cell is None else str(cell) for cell in rows)
        self._validate(table_key, field_keys, cells, row_count)

        edit = PendingEdit(
            table_key=table_key, version=int(version), field_keys=field_keys, rows=cells
        )
        with self._lock:
            replaced = table_key in self._pending
            # Re-staging moves the table to the end of the batch
            self._pending.pop(table_key, None)
            self._pending[table_key] = edit

        logger.debug(
            "%s edit for '%s': %d rows, %d fields (version %d)",
            "Replaced" if replaced else "Staged",
            table_key,
            edit.row_count,
            len(field_keys),
            edit.version,
        )
        return edit

    def stage_snapshot(self, snapshot: TableSnapshot) -> PendingEdit:
        """Stage an edited snapshot obtained from read_for_editing().

        Raises:
            ValueError: If the snapshot came from a display read.
        """
        if not snapshot.editable:
            raise ValueError(
                f"Snapshot of '{snapshot.table_key}' was read for display and cannot be staged"
            )
        return self.stage(
            snapshot.table_key,
            snapshot.version,
            snapshot.field_keys,
            snapshot.rows,
            snapshot.row_count,
        )

    def stage_delimited(
        self,
        table_key: str,
        version: int,
        text: str,
        separator: str = DEFAULT_SEPARATOR,
    ) -> PendingEdit:
        """Stage an edit supplied as delimited text (header line first)."""
        field_keys, cells = delimited.decode(text, separator)
        return self.stage(table_key, version, field_keys, cells)

    def stage_file(
        self,
        table_key: str,
        version: int,
        path: Path | str,
        separator: str = DEFAULT_SEPARATOR,
        encoding: str = DEFAULT_FILE_ENCODING,
    ) -> PendingEdit:
        """Stage an edit from a delimited-text file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        field_keys, cells = delimited.read_file(path, separator, encoding)
        logger.debug("Read edit for '%s' from %s", table_key, path)
        return self.stage(table_key, version, field_keys, cells)

    def stage_markup(self, table_key: str, text: str, version: int | None = None) -> PendingEdit:
        """Stage an edit supplied as a markup document.

        Args:
            table_key: Table to replace. Must match the document's key.
            text: Document produced by the markup codec.
            version: Version to stage with; defaults to the document's.

        Raises:
            MalformedTable: If the document is invalid or names another table.
        """
        document = markup.decode(text)
        if document.table_key and document.table_key != table_key:
            raise MalformedTable(
                f"Markup is for table {document.table_key!r}, not {table_key!r}", table_key
            )
        staged_version = document.version if version is None else version
        return self.stage(
            table_key, staged_version, document.field_keys, document.cells, document.row_count
        )

    # --- Introspection ---

    def peek(self, table_key: str) -> PendingEdit | None:
        """Get the pending edit for a table, or None."""
        with self._lock:
            return self._pending.get(table_key)

    def pending(self) -> list[PendingEdit]:
        """Get every pending edit, in staging order."""
        with self._lock:
            return list(self._pending.values())

    @property
    def table_keys(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def __contains__(self, table_key: object) -> bool:
        with self._lock:
            return table_key in self._pending

    # --- Removal ---

    def discard(self, table_key: str) -> bool:
        """Drop the pending edit for one table.

        Returns:
            True if an edit was dropped.
        """
        with self._lock:
            removed = self._pending.pop(table_key, None)
        if removed is not None:
            logger.debug("Discarded staged edit for '%s'", table_key)
        return removed is not None

    def clear(self) -> int:
        """Discard every pending edit without touching the store.

        Returns:
            Number of edits discarded.
        """
        with self._lock:
            count = len(self._pending)
            self._pending.clear()
        if count:
            logger.debug("Cleared %d staged edits", count)
        return count

    def drain(self) -> list[PendingEdit]:
        """Take every pending edit and empty the buffer in one step."""
        with self._lock:
            edits = list(self._pending.values())
            self._pending.clear()
        return edits
