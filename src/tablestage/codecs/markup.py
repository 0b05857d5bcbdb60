"""Tagged-markup (XML) form of table data.

Document layout:

    <Table key="Loads" version="3" schemaVersion="1.0">
      <Fields>
        <Field key="Name" />
        <Field key="Value" />
      </Fields>
      <Rows>
        <Row><Cell value="DL" /><Cell value="100" /></Row>
      </Rows>
    </Table>

Cell values are stored in attributes so that embedded line breaks survive
parsing unchanged. ``schemaVersion`` is only written when
schema inclusion is requested; field importability and units are then
written on each Field element as well.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import MalformedTable
from ..models.constants import MARKUP_SCHEMA_VERSION
from ..models.table import FieldDescriptor
from ..models.validation import validate_row_shape
from .array import split_rows

ROOT_TAG = "Table"


@dataclass(frozen=True)
class MarkupTable:
    """Decoded markup document."""

    table_key: str
    version: int
    field_keys: tuple[str, ...]
    cells: tuple[str, ...]
    schema_version: str | None = None

    @property
    def row_count(self) -> int:
        if not self.field_keys:
            return 0
        return len(self.cells) // len(self.field_keys)


def encode(
    table_key: str,
    version: int,
    field_keys: Sequence[str],
    cells: Sequence[str],
    include_schema: bool = False,
    fields: Sequence[FieldDescriptor] | None = None,
) -> str:
    """Encode a table as an XML document.

    Args:
        table_key: Written as the root ``key`` attribute.
        version: Written as the root ``version`` attribute.
        field_keys: Column order.
        cells: Row-major cells.
        include_schema: Write ``schemaVersion`` and per-field metadata.
        fields: Field metadata used when include_schema is set.

    Returns:
        XML text (no declaration; the caller chooses the byte encoding).

    Raises:
        MalformedTable: If the cells are not a whole number of rows.
    """
    is_valid, error = validate_row_shape(len(field_keys), len(cells))
    if not is_valid:
        raise MalformedTable(error, table_key)

    root = ET.Element(ROOT_TAG, {"key": table_key, "version": str(version)})
    if include_schema:
        root.set("schemaVersion", MARKUP_SCHEMA_VERSION)

    metadata = {f.field_key: f for f in fields or ()}
    fields_elem = ET.SubElement(root, "Fields")
    for key in field_keys:
        field_elem = ET.SubElement(fields_elem, "Field", {"key": key})
        descriptor = metadata.get(key)
        if include_schema and descriptor is not None:
            field_elem.set("importable", "true" if descriptor.is_importable else "false")
            if descriptor.units:
                field_elem.set("units", descriptor.units)

    rows_elem = ET.SubElement(root, "Rows")
    for row in split_rows(field_keys, cells):
        row_elem = ET.SubElement(rows_elem, "Row")
        for value in row:
            ET.SubElement(row_elem, "Cell", {"value": value})

    ET.indent(root)
    return ET.tostring(root, encoding="unicode") + "\n"


def decode(text: str) -> MarkupTable:
    """Decode an XML document produced by encode().

    Raises:
        MalformedTable: If the document is not well-formed or a row has the
            wrong number of cells.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedTable(f"Invalid table markup: {e}") from e

    if root.tag != ROOT_TAG:
        raise MalformedTable(f"Expected <{ROOT_TAG}> root element, got <{root.tag}>")

    table_key = root.get("key", "")
    try:
        version = int(root.get("version", "0"))
    except ValueError:
        raise MalformedTable(f"Invalid version: {root.get('version')!r}", table_key) from None

    fields_elem = root.find("Fields")
    if fields_elem is None:
        raise MalformedTable("Table markup has no <Fields> element", table_key)
    field_keys = tuple(elem.get("key", "") for elem in fields_elem.findall("Field"))

    cells: list[str] = []
    rows_elem = root.find("Rows")
    if rows_elem is not None:
        for index, row_elem in enumerate(rows_elem.findall("Row")):
            values = [cell.get("value", "") for cell in row_elem.findall("Cell")]
            if len(values) != len(field_keys):
                raise MalformedTable(
                    f"Row {index} has {len(values)} cells, expected {len(field_keys)}",
                    table_key,
                )
            cells.extend(values)

    return MarkupTable(
        table_key=table_key,
        version=version,
        field_keys=field_keys,
        cells=tuple(cells),
        schema_version=root.get("schemaVersion"),
    )
