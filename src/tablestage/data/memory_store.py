"""In-memory Model Store.

A complete ModelStore that keeps tables in dicts. Used by the test suite
and for working with table data when no structural model is running.

Behavior on commit:
- The batch is all-or-nothing: if any edit produces a fatal or error
  entry, no table is changed.
- A staged version that differs from the table's current version is a
  fatal entry ("stale version").
- Fields that are unknown or read-only are error entries.
- Committed tables replace their rows completely; columns not supplied in
  the edit become empty strings. Each committed table's version goes up
  by one.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..models.constants import TableImportType
from ..models.table import FieldDescriptor, ObsoleteTable, TableDescriptor
from .model_store import (
    CommitResponse,
    FieldListResponse,
    ModelStore,
    StoreStatus,
    TableResponse,
)

if TYPE_CHECKING:
    from ..models.pending_edit import PendingEdit
    from ..services.selection import DisplaySelection

ALL_GROUP = "All"


@dataclass
class _StoredTable:
    descriptor: TableDescriptor
    fields: list[FieldDescriptor]
    rows: list[list[str]] = field(default_factory=list)
    version: int = 1
    group_field: str | None = None
    case_field: str | None = None

    @property
    def field_keys(self) -> list[str]:
        return [f.field_key for f in self.fields]

    def column(self, field_key: str) -> int:
        return self.field_keys.index(field_key)


class InMemoryModelStore(ModelStore):
    """ModelStore backed by plain Python containers.

    Usage:
        store = InMemoryModelStore()
        store.add_table(
            "Loads",
            [FieldDescriptor("Loads", "Name", True), FieldDescriptor("Loads", "Value", True)],
            rows=[["DL", "100"], ["LL", "50"]],
            version=3,
        )
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tables: dict[str, _StoredTable] = {}
        self._obsolete: list[ObsoleteTable] = []
        self._groups: set[str] = {ALL_GROUP}
        self.commits: list[tuple[PendingEdit, ...]] = []
        self.last_selection: DisplaySelection | None = None

    # --- Setup ---

    def add_table(
        self,
        table_key: str,
        fields: Iterable[FieldDescriptor | str],
        rows: Iterable[Sequence[str]] = (),
        display_name: str | None = None,
        import_type: TableImportType = TableImportType.INTERACTIVE_ALWAYS,
        version: int = 1,
        group_field: str | None = None,
        case_field: str | None = None,
    ) -> None:
        """Define a table.

        Args:
            table_key: Key of the table.
            fields: Field descriptors, or bare keys (importable fields).
            rows: Initial rows, one sequence of cells per row.
            display_name: Name shown in listings (defaults to the key).
            import_type: Whether and how the table may be edited.
            version: Current table version.
            group_field: Column holding the group a row's object belongs to,
                used for group-filtered reads.
            case_field: Column holding the load case or combination name,
                used to narrow display reads by the display selection.

        Raises:
            ValueError: If a row has the wrong width or a named column is
                not a field of the table.
        """
        descriptors = [
            f if isinstance(f, FieldDescriptor) else FieldDescriptor(table_key, f, True)
            for f in fields
        ]
        table = _StoredTable(
            descriptor=TableDescriptor(table_key, display_name or table_key, import_type),
            fields=descriptors,
            version=version,
            group_field=group_field,
            case_field=case_field,
        )
        for column in (group_field, case_field):
            if column is not None and column not in table.field_keys:
                raise ValueError(f"{column!r} is not a field of table {table_key!r}")

        width = len(descriptors)
        for row in rows:
            if len(row) != width:
                raise ValueError(f"Row {list(row)!r} does not have {width} cells")
            table.rows.append([str(cell) for cell in row])

        with self._lock:
            self._tables[table_key] = table

    def add_group(self, name: str) -> None:
        with self._lock:
            self._groups.add(name)

    def add_obsolete_table(self, table_key: str, migration_note: str = "") -> None:
        with self._lock:
            self._obsolete.append(ObsoleteTable(table_key, migration_note))

    def rows(self, table_key: str) -> list[list[str]]:
        """Get a copy of a table's committed rows."""
        with self._lock:
            return [list(row) for row in self._tables[table_key].rows]

    def version(self, table_key: str) -> int:
        with self._lock:
            return self._tables[table_key].version

    # --- Catalog ---

    def list_tables(self, include_empty: bool = False) -> list[TableDescriptor]:
        with self._lock:
            tables = []
            for table in self._tables.values():
                is_empty = not table.rows
                if is_empty and not include_empty:
                    continue
                d = table.descriptor
                tables.append(TableDescriptor(d.table_key, d.display_name, d.import_type, is_empty))
            return tables

    def list_obsolete_tables(self) -> list[ObsoleteTable]:
        with self._lock:
            return list(self._obsolete)

    def list_fields(self, table_key: str) -> FieldListResponse:
        with self._lock:
            table = self._tables.get(table_key)
            if table is None:
                return FieldListResponse(status=StoreStatus.TABLE_NOT_FOUND)
            return FieldListResponse(version=table.version, fields=tuple(table.fields))

    # --- Reads ---

    def _rows_in_group(self, table: _StoredTable, group_filter: str) -> list[list[str]]:
        if not group_filter or group_filter == ALL_GROUP or table.group_field is None:
            return table.rows
        column = table.column(table.group_field)
        return [row for row in table.rows if row[column] == group_filter]

    @staticmethod
    def _response(
        table: _StoredTable, field_keys: Sequence[str], rows: list[list[str]]
    ) -> TableResponse:
        columns = [table.column(key) for key in field_keys]
        cells = tuple(row[c] for row in rows for c in columns)
        return TableResponse(
            version=table.version,
            field_keys=tuple(field_keys),
            row_count=len(rows),
            rows=cells,
        )

    def get_editable_table(self, table_key: str, group_filter: str = "") -> TableResponse:
        with self._lock:
            table = self._tables.get(table_key)
            if table is None:
                return TableResponse(status=StoreStatus.TABLE_NOT_FOUND)
            if group_filter and group_filter not in self._groups:
                return TableResponse(status=StoreStatus.GROUP_NOT_FOUND)

            field_keys = [f.field_key for f in table.fields if f.is_importable]
            return self._response(table, field_keys, self._rows_in_group(table, group_filter))

    def get_display_table(
        self,
        table_key: str,
        field_keys: Sequence[str] = (),
        group_filter: str = "",
        selection: DisplaySelection | None = None,
    ) -> TableResponse:
        with self._lock:
            self.last_selection = selection
            table = self._tables.get(table_key)
            if table is None:
                return TableResponse(status=StoreStatus.TABLE_NOT_FOUND)
            if group_filter and group_filter not in self._groups:
                return TableResponse(status=StoreStatus.GROUP_NOT_FOUND)

            keys = list(field_keys) or table.field_keys
            if any(key not in table.field_keys for key in keys):
                return TableResponse(status=StoreStatus.FAILED)

            rows = self._rows_in_group(table, group_filter)
            if selection is not None and table.case_field is not None:
                names = set(selection.load_cases) | set(selection.load_combinations)
                if names:
                    column = table.column(table.case_field)
                    rows = [row for row in rows if row[column] in names]

            return self._response(table, keys, rows)

    # --- Commit ---

    def _check_edit(self, edit: PendingEdit, fatal: list[str], errors: list[str]) -> None:
        table = self._tables.get(edit.table_key)
        if table is None:
            fatal.append(f"Table '{edit.table_key}' not found")
            return
        if not table.descriptor.is_importable:
            fatal.append(f"Table '{edit.table_key}' is not importable")
            return
        if edit.version != table.version:
            fatal.append(
                f"Table '{edit.table_key}': stale version {edit.version} "
                f"(current version is {table.version})"
            )
            return

        importable = {f.field_key: f.is_importable for f in table.fields}
        for key in edit.field_keys:
            if key not in importable:
                errors.append(f"Table '{edit.table_key}': unknown field '{key}'")
            elif not importable[key]:
                errors.append(f"Table '{edit.table_key}': field '{key}' is not importable")

    def commit_edits(self, edits: Sequence[PendingEdit], fill_log: bool = True) -> CommitResponse:
        with self._lock:
            self.commits.append(tuple(edits))

            fatal: list[str] = []
            errors: list[str] = []
            for edit in edits:
                self._check_edit(edit, fatal, errors)

            info: list[str] = []
            if not fatal and not errors:
                for edit in edits:
                    table = self._tables[edit.table_key]
                    positions = [
                        edit.field_keys.index(k) if k in edit.field_keys else None
                        for k in table.field_keys
                    ]
                    width = len(edit.field_keys)
                    table.rows = [
                        ["" if p is None else edit.rows[start + p] for p in positions]
                        for start in range(0, len(edit.rows), width)
                    ]
                    table.version += 1
                    info.append(
                        f"Table '{edit.table_key}': {edit.row_count} records imported "
                        f"(version {table.version})"
                    )

            log = ""
            if fill_log:
                lines = [f"FATAL: {m}" for m in fatal]
                lines += [f"ERROR: {m}" for m in errors]
                lines += [f"INFO: {m}" for m in info]
                log = "\n".join(lines)

            return CommitResponse(
                fatal_error_count=len(fatal),
                error_count=len(errors),
                warning_count=0,
                info_count=len(info),
                log=log,
            )
