"""Row-major array form of table data.

The canonical representation everywhere in tablestage: an ordered tuple of
field keys plus one flat tuple of cells where element ``i * F + j`` is row i,
column j. The other codecs convert to and from this form.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ..errors import MalformedTable
from ..models.validation import validate_row_shape


def encode(field_keys: Sequence[str], cells: Sequence[str]) -> list[str]:
    """Produce the flat array payload for a table.

    Args:
        field_keys: Column order.
        cells: Row-major cells.

    Returns:
        A new list, safe for the caller to mutate.

    Raises:
        MalformedTable: If the cells are not a whole number of rows.
    """
    is_valid, error = validate_row_shape(len(field_keys), len(cells))
    if not is_valid:
        raise MalformedTable(error)
    return list(cells)


def decode(
    field_keys: Sequence[str], cells: Sequence[str], row_count: int | None = None
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Validate a flat array payload and return it in canonical form.

    Args:
        field_keys: Column order.
        cells: Row-major cells.
        row_count: Declared row count, if the producer supplied one.

    Returns:
        Tuple of (field_keys, cells) as tuples.

    Raises:
        MalformedTable: If the cells do not match fields x rows.
    """
    is_valid, error = validate_row_shape(len(field_keys), len(cells), row_count)
    if not is_valid:
        raise MalformedTable(error)
    return tuple(field_keys), tuple("" if cell is None else str(cell) for cell in cells)


def split_rows(field_keys: Sequence[str], cells: Sequence[str]) -> list[list[str]]:
    """Split flat cells into one list per row."""
    width = len(field_keys)
    if width == 0:
        return []
    return [list(cells[start : start + width]) for start in range(0, len(cells), width)]


def join_rows(field_keys: Sequence[str], rows: Iterable[Sequence[str]]) -> list[str]:
    """Flatten per-row lists back into row-major cells.

    Raises:
        MalformedTable: If a row has the wrong number of cells.
    """
    width = len(field_keys)
    cells: list[str] = []
    for index, row in enumerate(rows):
        if len(row) != width:
            raise MalformedTable(f"Row {index} has {len(row)} cells, expected {width}")
        cells.extend(row)
    return cells


def to_records(field_keys: Sequence[str], cells: Sequence[str]) -> list[dict[str, str]]:
    """Get rows as field_key -> value dicts."""
    return [dict(zip(field_keys, row)) for row in split_rows(field_keys, cells)]


def from_records(field_keys: Sequence[str], records: Iterable[Mapping[str, str]]) -> list[str]:
    """Flatten field_key -> value dicts into row-major cells.

    Missing fields become empty strings.
    """
    cells: list[str] = []
    for record in records:
        cells.extend(record.get(key, "") for key in field_keys)
    return cells
