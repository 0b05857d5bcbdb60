"""Pending table edit held by the staging buffer until commit or cancel."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PendingEdit:
    """A full replacement of one table's contents, waiting to be committed.

    Attributes:
        table_key: Table being replaced.
        version: Version of the snapshot the edit was built from. Forwarded
            to the store unchanged; the store decides whether it is stale.
        field_keys: Column order of rows.
        rows: Flat row-major cells.
    """

    table_key: str
    version: int
    field_keys: tuple[str, ...]
    rows: tuple[str, ...]

    @property
    def row_count(self) -> int:
        if not self.field_keys:
            return 0
        return len(self.rows) // len(self.field_keys)

    def __repr__(self) -> str:
        return (
            f"PendingEdit({self.table_key!r}, v{self.version}, "
            f"{len(self.field_keys)} fields, {self.row_count} rows)"
        )
