"""Data model for database tables.

Contains the catalog records reported by the Model Store and the
TableSnapshot value type that carries table contents between the store,
the codecs and the staging buffer.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace

from ..errors import MalformedTable
from .constants import TableImportType
from .validation import validate_row_shape

# ==============================================================================
# Catalog Records
# ==============================================================================


@dataclass(frozen=True)
class TableDescriptor:
    """One table as reported by the store's table listing."""

    table_key: str
    display_name: str
    import_type: TableImportType = TableImportType.NOT_IMPORTABLE
    is_empty: bool = False

    @property
    def is_importable(self) -> bool:
        return self.import_type.is_importable

    def __str__(self) -> str:
        return f"{self.display_name} ({self.table_key}) - {self.import_type.name}"


@dataclass(frozen=True)
class FieldDescriptor:
    """One field (column) of a table."""

    table_key: str
    field_key: str
    is_importable: bool
    field_name: str = ""
    description: str = ""
    units: str = ""

    def __str__(self) -> str:
        name = self.field_name or self.field_key
        return f"{name} ({self.field_key}) - {self.units} - Importable: {self.is_importable}"


@dataclass(frozen=True)
class ObsoleteTable:
    """A deprecated table key with a note on what replaced it."""

    table_key: str
    migration_note: str = ""

    def __str__(self) -> str:
        return f"{self.table_key}: {self.migration_note}"


@dataclass(frozen=True)
class TableSummary:
    """Catalog, field and record counts for one table."""

    table_key: str
    display_name: str
    import_type: TableImportType
    is_empty: bool
    version: int
    total_fields: int
    importable_fields: int
    total_records: int

    def __str__(self) -> str:
        return (
            f"{self.display_name} ({self.table_key}): {self.total_records} records, "
            f"{self.importable_fields}/{self.total_fields} importable fields"
        )


@dataclass
class TableValidation:
    """Result of checking whether a table can be edited."""

    table_key: str
    import_type: TableImportType | None = None
    importable_field_count: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __str__(self) -> str:
        if self.is_valid:
            return f"Table '{self.table_key}' is valid for editing"
        return f"Table '{self.table_key}' validation failed: {', '.join(self.errors)}"


# ==============================================================================
# Snapshot
# ==============================================================================


@dataclass(frozen=True)
class TableSnapshot:
    """Immutable, versioned read of a table's rows.

    Rows are stored row-major: cell ``i * len(field_keys) + j`` is row i,
    column j. Sequences passed in are copied into tuples, so a snapshot never
    shares mutable state with whoever built it.

    Attributes:
        table_key: Table the rows belong to.
        version: Version reported by the store at read time. Must be echoed
            back when staging an edit built from this snapshot.
        field_keys: Column order.
        rows: Flat row-major cells.
        row_count: Number of rows. Inferred from the cells when omitted.
        editable: False for display reads, which cannot be staged.

    Raises:
        MalformedTable: If the cell count does not match fields x rows.
    """

    table_key: str
    version: int
    field_keys: tuple[str, ...]
    rows: tuple[str, ...]
    row_count: int | None = None
    editable: bool = True

    def __post_init__(self) -> None:
        field_keys = tuple(self.field_keys)
        rows = tuple("" if cell is None else str(cell) for cell in self.rows)
        object.__setattr__(self, "field_keys", field_keys)
        object.__setattr__(self, "rows", rows)

        is_valid, error = validate_row_shape(len(field_keys), len(rows), self.row_count)
        if not is_valid:
            raise MalformedTable(f"Table {self.table_key!r}: {error}", self.table_key)

        if self.row_count is None:
            count = len(rows) // len(field_keys) if field_keys else 0
            object.__setattr__(self, "row_count", count)

    @property
    def field_count(self) -> int:
        return len(self.field_keys)

    def iter_rows(self) -> Iterator[tuple[str, ...]]:
        """Yield each row as a tuple of cells in field order."""
        width = len(self.field_keys)
        for start in range(0, len(self.rows), width or 1):
            yield self.rows[start : start + width]

    def cell(self, row_index: int, field_key: str) -> str:
        """Get one cell by row index and field key.

        Raises:
            IndexError: If row_index is out of range.
            KeyError: If field_key is not a column of this snapshot.
        """
        if not 0 <= row_index < self.row_count:
            raise IndexError(f"Row {row_index} out of range (0..{self.row_count - 1})")
        try:
            column = self.field_keys.index(field_key)
        except ValueError:
            raise KeyError(field_key) from None
        return self.rows[row_index * len(self.field_keys) + column]

    def to_records(self) -> list[dict[str, str]]:
        """Get rows as a list of field_key -> value dicts."""
        return [dict(zip(self.field_keys, row)) for row in self.iter_rows()]

    def with_rows(self, rows: Iterable[str], row_count: int | None = None) -> TableSnapshot:
        """Return a copy with different cells but the same key, version and fields."""
        return replace(self, rows=tuple(rows), row_count=row_count)

    def with_records(self, records: Iterable[Mapping[str, str]]) -> TableSnapshot:
        """Return a copy whose rows come from field_key -> value dicts.

        Fields missing from a record become empty strings; keys that are not
        columns of this snapshot are ignored.
        """
        return TableSnapshot.from_records(
            self.table_key, self.version, self.field_keys, records, editable=self.editable
        )

    @classmethod
    def from_records(
        cls,
        table_key: str,
        version: int,
        field_keys: Sequence[str],
        records: Iterable[Mapping[str, str]],
        editable: bool = True,
    ) -> TableSnapshot:
        """Build a snapshot from field_key -> value dicts."""
        cells: list[str] = []
        count = 0
        for record in records:
            cells.extend(record.get(key, "") for key in field_keys)
            count += 1
        return cls(
            table_key=table_key,
            version=version,
            field_keys=tuple(field_keys),
            rows=tuple(cells),
            row_count=count,
            editable=editable,
        )
