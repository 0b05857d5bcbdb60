"""Delimited-text (CSV) form of table data.

Format:
- Line 1: Header - the field keys, in column order
- Lines 2..N+1: One line per row, cells in header order
- Cells joined by a single-character separator (default comma)
- Cells containing the separator, quotes or newlines are quoted, with
  embedded quotes doubled (CSV standard)

Blank lines are ignored when decoding. The file variants use exactly the
same header and separator rules as the in-memory form.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from pathlib import Path

from ..errors import MalformedTable
from ..models.constants import DEFAULT_FILE_ENCODING, DEFAULT_SEPARATOR
from ..models.validation import validate_row_shape
from .array import split_rows


def _check_separator(separator: str) -> None:
    if not isinstance(separator, str) or len(separator) != 1:
        raise ValueError(f"Separator must be a single character, got {separator!r}")
    if separator in ('"', "\r", "\n"):
        raise ValueError(f"Separator cannot be {separator!r}")


def encode(
    field_keys: Sequence[str], cells: Sequence[str], separator: str = DEFAULT_SEPARATOR
) -> str:
    """Encode a table as delimited text.

    Args:
        field_keys: Column order (written as the header line).
        cells: Row-major cells.
        separator: Single-character cell separator.

    Returns:
        Text with one header line and one line per row, each ending in "\\n".

    Raises:
        MalformedTable: If there are no fields or the cells are not whole rows.
        ValueError: If the separator is not a usable single character.
    """
    _check_separator(separator)
    if not field_keys:
        raise MalformedTable("Cannot encode a table with no fields")

    is_valid, error = validate_row_shape(len(field_keys), len(cells))
    if not is_valid:
        raise MalformedTable(error)

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=separator, lineterminator="\n")
    writer.writerow(field_keys)
    writer.writerows(split_rows(field_keys, cells))
    return buffer.getvalue()


def decode(
    text: str, separator: str = DEFAULT_SEPARATOR
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Decode delimited text into canonical (field_keys, cells).

    Args:
        text: Delimited text, header line first.
        separator: Single-character cell separator.

    Returns:
        Tuple of (field_keys, cells).

    Raises:
        MalformedTable: If there is no header or a row has the wrong width.
        ValueError: If the separator is not a usable single character.
    """
    _check_separator(separator)

    reader = csv.reader(io.StringIO(text), delimiter=separator)
    header: list[str] | None = None
    cells: list[str] = []

    try:
        for line in reader:
            if not line:
                continue  # Blank line

            if header is None:
                header = line
                continue

            if len(line) != len(header):
                raise MalformedTable(
                    f"Line {reader.line_num}: expected {len(header)} cells, got {len(line)}"
                )
            cells.extend(line)
    except csv.Error as e:
        raise MalformedTable(f"Invalid delimited text: {e}") from e

    if header is None:
        raise MalformedTable("Delimited text has no header line")

    return tuple(header), tuple(cells)


def write_file(
    path: Path | str,
    field_keys: Sequence[str],
    cells: Sequence[str],
    separator: str = DEFAULT_SEPARATOR,
    encoding: str = DEFAULT_FILE_ENCODING,
) -> Path:
    """Write a table to a delimited-text file.

    Args:
        path: Destination file (overwritten).
        field_keys: Column order.
        cells: Row-major cells.
        separator: Single-character cell separator.
        encoding: Text encoding of the file.

    Returns:
        The path written, as a Path.
    """
    path = Path(path)
    content = encode(field_keys, cells, separator)
    with open(path, "w", newline="", encoding=encoding) as f:
        f.write(content)
    return path


def read_file(
    path: Path | str,
    separator: str = DEFAULT_SEPARATOR,
    encoding: str = DEFAULT_FILE_ENCODING,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Read a table from a delimited-text file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        MalformedTable: If the content is not a valid table.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table file not found: {path}")

    with open(path, newline="", encoding=encoding) as f:
        return decode(f.read(), separator)
