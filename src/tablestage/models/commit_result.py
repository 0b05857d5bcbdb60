"""Aggregated outcome of committing staged table edits."""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import PartialImportFailure


@dataclass(frozen=True)
class CommitResult:
    """Counts and import log returned for one commit batch.

    The store's status code and the content counts are independent signals:
    a zero status only means the batch ran, not that every row imported.
    ``succeeded`` requires both.

    Attributes:
        fatal_error_count: Fatal messages in the import log.
        error_count: Non-fatal error messages.
        warning_count: Warning messages.
        info_count: Informational messages.
        log: Import log text (empty unless fill_log was requested).
        status_code: Status returned by the store's commit call.
        table_keys: Tables that were part of the batch, in staging order.
    """

    fatal_error_count: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    log: str = ""
    status_code: int = 0
    table_keys: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> CommitResult:
        """Result for a commit with nothing staged."""
        return cls()

    @property
    def has_errors(self) -> bool:
        return self.fatal_error_count > 0 or self.error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def succeeded(self) -> bool:
        return self.status_code == 0 and not self.has_errors

    def raise_for_errors(self) -> CommitResult:
        """Raise PartialImportFailure if the import reported errors.

        Returns:
            self, so the call can be chained.
        """
        if not self.succeeded:
            raise PartialImportFailure(self)
        return self

    def __str__(self) -> str:
        return (
            f"Apply Result: Errors={self.fatal_error_count + self.error_count}, "
            f"Warnings={self.warning_count}, Info={self.info_count}"
        )
