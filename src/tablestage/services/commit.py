"""Commit coordination: apply or cancel every staged edit as one batch.

State machine per staging cycle:

    IDLE --stage--> DIRTY --apply--> IDLE
                    DIRTY --cancel--> IDLE

apply() on IDLE returns an empty, successful result without calling the
store. Every apply() clears the buffer whatever the outcome; a caller that
wants to retry must re-read fresh snapshots and stage again.

IMPORTANT: save the model before calling apply(). Commits cannot be undone
at the store level, and tablestage does not implement save or undo.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING

from ..debug_trace import logger, perf_timer
from ..errors import StoreCommunicationFailure
from ..models.commit_result import CommitResult
from ..models.table import TableSnapshot
from .edit_session import EditSession

if TYPE_CHECKING:
    from ..data.model_store import CommitResponse, ModelStore
    from .reader import TableSnapshotReader
    from .staging import EditStagingBuffer


class CommitState(Enum):
    """Whether the staging buffer holds anything to commit."""

    IDLE = "idle"
    DIRTY = "dirty"


class CommitCoordinator:
    """Applies or discards the whole staging buffer.

    Usage:
        coordinator = CommitCoordinator(buffer, store, reader)
        buffer.stage("Loads", 3, ["Name", "Value"], ["DL", "100", "LL", "50"])
        result = coordinator.apply()
        if not result.succeeded:
            print(result.log)
    """

    def __init__(
        self,
        buffer: EditStagingBuffer,
        store: ModelStore,
        reader: TableSnapshotReader | None = None,
    ):
        self._buffer = buffer
        self._store = store
        self._reader = reader
        self._current_session: EditSession | None = None

    @property
    def state(self) -> CommitState:
        return CommitState.IDLE if self._buffer.is_empty else CommitState.DIRTY

    # --- Apply / Cancel ---

    def apply(self, fill_log: bool = True) -> CommitResult:
        """Submit every staged edit to the store in one call.

        Args:
            fill_log: Ask the store to return its import log text.

        Returns:
            CommitResult with the store's counts and log. A zero status with
            fatal or error counts is returned with succeeded False rather
            than raised; call raise_for_errors() to turn it into an exception.

        Raises:
            StoreCommunicationFailure: If the store call raised or returned a
                non-zero status. The buffer is cleared either way.
        """
        edits = self._buffer.drain()
        if not edits:
            logger.debug("Nothing staged; apply is a no-op")
            return CommitResult.empty()

        table_keys = tuple(edit.table_key for edit in edits)
        row_total = sum(edit.row_count for edit in edits)
        logger.info("Applying %d edited tables to model...", len(edits))

        try:
            with perf_timer("commit_edits", row_count=row_total):
                response = self._store.commit_edits(edits, fill_log)
        except Exception as e:
            logger.error("Unexpected error applying edited tables: %s", e)
            raise StoreCommunicationFailure(
                "commit_edits",
                -1,
                f"Unexpected error applying edited tables: {e}",
                result=CommitResult(status_code=-1, table_keys=table_keys),
            ) from e

        result = self._to_result(response, table_keys)

        if result.status_code != 0:
            message = (
                f"Failed to apply edited tables. Return code: {result.status_code}. "
                f"Fatal Errors: {result.fatal_error_count}, Errors: {result.error_count}, "
                f"Warnings: {result.warning_count}"
            )
            logger.error("Failed to apply edited tables: %s", message)
            if fill_log and result.log:
                logger.error("Import Log:\n%s", result.log)
            raise StoreCommunicationFailure(
                "commit_edits", result.status_code, message, result=result
            )

        if result.has_errors:
            logger.warning(
                "Applied edited tables with errors: Fatal=%d, Errors=%d, Warnings=%d, Info=%d",
                result.fatal_error_count,
                result.error_count,
                result.warning_count,
                result.info_count,
            )
        elif result.has_warnings:
            logger.info(
                "Applied edited tables with warnings: Warnings=%d, Info=%d",
                result.warning_count,
                result.info_count,
            )
        else:
            logger.info("Successfully applied edited tables: Info=%d", result.info_count)

        if fill_log and result.log:
            logger.debug("Import Log:\n%s", result.log)

        return result

    @staticmethod
    def _to_result(response: CommitResponse, table_keys: tuple[str, ...]) -> CommitResult:
        return CommitResult(
            fatal_error_count=response.fatal_error_count,
            error_count=response.error_count,
            warning_count=response.warning_count,
            info_count=response.info_count,
            log=response.log or "",
            status_code=int(response.status),
            table_keys=table_keys,
        )

    def cancel(self) -> int:
        """Discard every staged edit. Never calls the store.

        Returns:
            Number of edits discarded.
        """
        count = self._buffer.clear()
        logger.debug("Cancelled %d pending table edits", count)
        return count

    # --- Workflows ---

    def edit_table(
        self,
        table_key: str,
        modify: Callable[[TableSnapshot], TableSnapshot],
        group_filter: str = "",
        fill_log: bool = True,
    ) -> CommitResult:
        """Read one table, let the callback edit it, stage it and apply.

        Anything already staged is committed in the same batch.

        Args:
            table_key: Table to edit.
            modify: Receives the editable snapshot and returns the edited one.
            group_filter: Restrict the read to objects in this group.
            fill_log: Ask the store to return its import log text.

        Raises:
            RuntimeError: If the coordinator has no reader.
            TypeError: If modify does not return a TableSnapshot.
        """
        if self._reader is None:
            raise RuntimeError("edit_table requires a TableSnapshotReader")

        logger.info("Starting edit workflow for table '%s'", table_key)
        snapshot = self._reader.read_editable_snapshot(table_key, group_filter)
        logger.debug("Retrieved table with %d records", snapshot.row_count)

        modified = modify(snapshot)
        if not isinstance(modified, TableSnapshot):
            raise TypeError(
                f"modify must return a TableSnapshot, got {type(modified).__name__}"
            )
        logger.debug("Modified table now has %d records", modified.row_count)

        self._buffer.stage_snapshot(modified)
        result = self.apply(fill_log)

        if result.succeeded:
            logger.info("Successfully completed edit workflow for table '%s'", table_key)
        else:
            logger.error("Edit workflow completed with errors for table '%s': %s", table_key, result)
        return result

    @contextmanager
    def edit_session(self, fill_log: bool = True) -> Generator[EditSession, None, None]:
        """Context manager that commits everything staged when it exits.

        On normal exit the buffer is applied and the result stored on
        session.result. If the block raises, the buffer is cancelled and the
        exception propagates.

        Yields:
            EditSession for staging edits

        Raises:
            RuntimeError: If a session is already open on this coordinator.
        """
        if self._current_session is not None:
            raise RuntimeError("Cannot nest edit_session calls")

        session = EditSession(self._buffer, self._reader, fill_log)
        self._current_session = session

        try:
            yield session
        except BaseException:
            self.cancel()
            raise
        else:
            session.set_result(self.apply(fill_log))
        finally:
            self._current_session = None
