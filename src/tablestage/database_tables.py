"""DatabaseTables - one object that wires the table staging engine together.

Owns a TableCatalog, TableSnapshotReader, EditStagingBuffer,
CommitCoordinator and DisplaySelectionState over a single ModelStore, and
applies EngineSettings defaults wherever a call leaves them out.

Typical workflow:

    tables = DatabaseTables(store)
    snapshot = tables.read_for_editing("Load Patterns")
    tables.stage_snapshot(snapshot.with_records(edited_records))
    result = tables.apply()   # save the model first; commits are irreversible
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from .models.constants import TableFormat
from .services.catalog import TableCatalog
from .services.commit import CommitCoordinator, CommitState
from .services.reader import EncodedTable, TableSnapshotReader
from .services.selection import DisplaySelectionState
from .services.staging import EditStagingBuffer
from .settings import EngineSettings

if TYPE_CHECKING:
    from .data.model_store import ModelStore
    from .models.commit_result import CommitResult
    from .models.display import OutputOptions
    from .models.pending_edit import PendingEdit
    from .models.table import (
        FieldDescriptor,
        ObsoleteTable,
        TableDescriptor,
        TableSnapshot,
        TableSummary,
        TableValidation,
    )
    from .services.edit_session import EditSession


class DatabaseTables:
    """Facade over the catalog, reader, staging buffer, committer and selection.

    The components are also exposed as attributes (catalog, reader, buffer,
    coordinator, selection) for callers that want to use them directly.
    """

    def __init__(self, store: ModelStore, settings: EngineSettings | None = None):
        self.store = store
        self.settings = settings or EngineSettings()
        self.selection = DisplaySelectionState()
        self.catalog = TableCatalog(store)
        self.reader = TableSnapshotReader(store, self.catalog, self.selection)
        self.buffer = EditStagingBuffer(self.catalog)
        self.coordinator = CommitCoordinator(self.buffer, store, self.reader)

    def _fill_log(self, fill_log: bool | None) -> bool:
        return self.settings.fill_log if fill_log is None else fill_log

    # --- Catalog ---

    def list_available_tables(self) -> list[TableDescriptor]:
        return self.catalog.list_available()

    def list_all_tables(self) -> list[TableDescriptor]:
        return self.catalog.list_all()

    def list_obsolete_tables(self) -> list[ObsoleteTable]:
        return self.catalog.list_obsolete()

    def list_fields(self, table_key: str) -> list[FieldDescriptor]:
        return self.catalog.list_fields(table_key)

    def importable_fields(self, table_key: str) -> list[str]:
        return self.catalog.importable_fields(table_key)

    def is_table_available(self, table_key: str) -> bool:
        return self.catalog.is_table_available(table_key)

    def get_table_summary(self, table_key: str) -> TableSummary | None:
        """Summarize a table, counting its rows under the current display selection."""
        return self.catalog.get_summary(table_key, self.selection.snapshot())

    def get_all_table_summaries(self) -> list[TableSummary]:
        return self.catalog.get_all_summaries(self.selection.snapshot())

    def validate_table_for_editing(self, table_key: str) -> TableValidation:
        return self.catalog.validate_for_editing(table_key)

    # --- Reads ---

    def read_for_display(
        self,
        table_key: str,
        field_keys: Sequence[str] | None = None,
        group_filter: str = "",
        fmt: TableFormat = TableFormat.ARRAY,
        separator: str | None = None,
        include_schema: bool | None = None,
    ) -> TableSnapshot | EncodedTable:
        return self.reader.read_for_display(
            table_key,
            field_keys,
            group_filter,
            fmt,
            separator or self.settings.separator,
            self.settings.include_schema if include_schema is None else include_schema,
        )

    def read_for_editing(
        self,
        table_key: str,
        group_filter: str = "",
        fmt: TableFormat = TableFormat.ARRAY,
        separator: str | None = None,
        include_schema: bool | None = None,
    ) -> TableSnapshot | EncodedTable:
        return self.reader.read_for_editing(
            table_key,
            group_filter,
            fmt,
            separator or self.settings.separator,
            self.settings.include_schema if include_schema is None else include_schema,
        )

    def read_for_display_to_file(
        self,
        table_key: str,
        path: Path | str,
        field_keys: Sequence[str] | None = None,
        group_filter: str = "",
    ) -> int:
        return self.reader.read_for_display_to_file(
            table_key,
            path,
            field_keys,
            group_filter,
            self.settings.separator,
            self.settings.file_encoding,
        )

    def read_for_editing_to_file(
        self, table_key: str, path: Path | str, group_filter: str = ""
    ) -> int:
        return self.reader.read_for_editing_to_file(
            table_key, path, group_filter, self.settings.separator, self.settings.file_encoding
        )

    # --- Staging ---

    def stage(
        self,
        table_key: str,
        version: int,
        field_keys: Sequence[str],
        rows: Sequence[str],
        row_count: int | None = None,
    ) -> PendingEdit:
        return self.buffer.stage(table_key, version, field_keys, rows, row_count)

    def stage_snapshot(self, snapshot: TableSnapshot) -> PendingEdit:
        return self.buffer.stage_snapshot(snapshot)

    def stage_delimited(
        self, table_key: str, version: int, text: str, separator: str | None = None
    ) -> PendingEdit:
        return self.buffer.stage_delimited(
            table_key, version, text, separator or self.settings.separator
        )

    def stage_file(self, table_key: str, version: int, path: Path | str) -> PendingEdit:
        return self.buffer.stage_file(
            table_key, version, path, self.settings.separator, self.settings.file_encoding
        )

    def stage_markup(self, table_key: str, text: str, version: int | None = None) -> PendingEdit:
        return self.buffer.stage_markup(table_key, text, version)

    def peek(self, table_key: str) -> PendingEdit | None:
        return self.buffer.peek(table_key)

    def pending_edits(self) -> list[PendingEdit]:
        return self.buffer.pending()

    # --- Commit ---

    @property
    def state(self) -> CommitState:
        return self.coordinator.state

    def apply(self, fill_log: bool | None = None) -> CommitResult:
        """Commit every staged edit in one batch.

        Save the model before calling this; commits are irreversible.
        """
        return self.coordinator.apply(self._fill_log(fill_log))

    def cancel(self) -> int:
        return self.coordinator.cancel()

    def edit_table(
        self,
        table_key: str,
        modify: Callable[[TableSnapshot], TableSnapshot],
        group_filter: str = "",
        fill_log: bool | None = None,
    ) -> CommitResult:
        return self.coordinator.edit_table(
            table_key, modify, group_filter, self._fill_log(fill_log)
        )

    @contextmanager
    def edit_session(self, fill_log: bool | None = None) -> Generator[EditSession, None, None]:
        with self.coordinator.edit_session(self._fill_log(fill_log)) as session:
            yield session

    # --- Display selection ---

    def set_selected_cases(self, names: Sequence[str]) -> None:
        self.selection.set_selected_cases(names)

    def set_selected_combinations(self, names: Sequence[str]) -> None:
        self.selection.set_selected_combinations(names)

    def set_selected_patterns(self, names: Sequence[str]) -> None:
        self.selection.set_selected_patterns(names)

    def set_output_options(self, options: OutputOptions) -> None:
        self.selection.set_output_options(options)
