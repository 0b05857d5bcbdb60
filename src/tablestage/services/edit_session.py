"""Edit session helper for staging several table edits as one batch.

EditSession provides a small API over the staging buffer. Edits staged
through the session are committed together when the session exits
normally, and discarded when it exits with an exception.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from ..models.constants import DEFAULT_FILE_ENCODING, DEFAULT_SEPARATOR

if TYPE_CHECKING:
    from ..models.commit_result import CommitResult
    from ..models.pending_edit import PendingEdit
    from ..models.table import TableSnapshot
    from .reader import TableSnapshotReader
    from .staging import EditStagingBuffer


class EditSession:
    """Accumulates staged edits until CommitCoordinator.edit_session() exits.

    Usage:
        with coordinator.edit_session() as session:
            snapshot = session.read("Load Patterns")
            session.stage_snapshot(snapshot.with_records(records))
            session.stage("Loads", 3, ["Name", "Value"], ["DL", "100"])
        print(session.result)
    """

    def __init__(
        self,
        buffer: EditStagingBuffer,
        reader: TableSnapshotReader | None = None,
        fill_log: bool = True,
    ):
        """Initialize an edit session.

        Args:
            buffer: Staging buffer the session writes into.
            reader: Reader used by read(); optional for sessions that only
                stage payloads built elsewhere.
            fill_log: Whether the commit on exit requests the import log.
        """
        self._buffer = buffer
        self._reader = reader
        self._fill_log = fill_log
        self._staged: list[str] = []
        self._result: CommitResult | None = None

    @property
    def fill_log(self) -> bool:
        return self._fill_log

    @property
    def staged_keys(self) -> list[str]:
        """Table keys staged through this session, in staging order."""
        return list(self._staged)

    @property
    def result(self) -> CommitResult | None:
        """Commit result, set once the session has exited normally."""
        return self._result

    def _record(self, edit: PendingEdit) -> PendingEdit:
        if edit.table_key in self._staged:
            self._staged.remove(edit.table_key)
        self._staged.append(edit.table_key)
        return edit

    def set_result(self, result: CommitResult) -> None:
        """Store the commit outcome (for CommitCoordinator to call)."""
        self._result = result

    def read(self, table_key: str, group_filter: str = "") -> TableSnapshot:
        """Read a table for editing in array form.

        Raises:
            RuntimeError: If the session was created without a reader.
        """
        if self._reader is None:
            raise RuntimeError("This edit session has no reader")
        return self._reader.read_editable_snapshot(table_key, group_filter)

    def stage(
        self,
        table_key: str,
        version: int,
        field_keys: Sequence[str],
        rows: Sequence[str],
        row_count: int | None = None,
    ) -> PendingEdit:
        """Stage a table replacement (see EditStagingBuffer.stage)."""
        return self._record(self._buffer.stage(table_key, version, field_keys, rows, row_count))

    def stage_snapshot(self, snapshot: TableSnapshot) -> PendingEdit:
        return self._record(self._buffer.stage_snapshot(snapshot))

    def stage_delimited(
        self, table_key: str, version: int, text: str, separator: str = DEFAULT_SEPARATOR
    ) -> PendingEdit:
        return self._record(self._buffer.stage_delimited(table_key, version, text, separator))

    def stage_file(
        self,
        table_key: str,
        version: int,
        path: Path | str,
        separator: str = DEFAULT_SEPARATOR,
        encoding: str = DEFAULT_FILE_ENCODING,
    ) -> PendingEdit:
        return self._record(
            self._buffer.stage_file(table_key, version, path, separator, encoding)
        )

    def stage_markup(self, table_key: str, text: str, version: int | None = None) -> PendingEdit:
        return self._record(self._buffer.stage_markup(table_key, text, version))

    def discard(self, table_key: str) -> bool:
        """Drop one table's staged edit without ending the session."""
        if table_key in self._staged:
            self._staged.remove(table_key)
        return self._buffer.discard(table_key)

    def has_pending_changes(self) -> bool:
        """Check if the buffer holds anything the session exit would commit."""
        return not self._buffer.is_empty
