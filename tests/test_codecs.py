"""Tests for the array, delimited-text and markup codecs."""

import pytest

from tablestage.codecs import array, delimited, markup
from tablestage.errors import MalformedTable
from tablestage.models.table import FieldDescriptor

FIELDS = ("Name", "Value")
CELLS = ("DL", "100", "LL", "50")


class TestArrayCodec:
    """Tests for the row-major array form."""

    def test_encode_returns_new_list(self):
        payload = array.encode(FIELDS, CELLS)
        assert payload == ["DL", "100", "LL", "50"]
        payload.append("x")
        assert CELLS == ("DL", "100", "LL", "50")

    def test_decode_with_row_count(self):
        fields, cells = array.decode(["Name", "Value"], ["DL", "100"], row_count=1)
        assert fields == ("Name", "Value")
        assert cells == ("DL", "100")

    def test_decode_mismatch(self):
        with pytest.raises(MalformedTable):
            array.decode(FIELDS, CELLS, row_count=3)

    def test_split_and_join(self):
        rows = array.split_rows(FIELDS, CELLS)
        assert rows == [["DL", "100"], ["LL", "50"]]
        assert array.join_rows(FIELDS, rows) == list(CELLS)

    def test_join_rejects_wrong_width(self):
        with pytest.raises(MalformedTable):
            array.join_rows(FIELDS, [["DL", "100"], ["LL"]])

    def test_records(self):
        records = array.to_records(FIELDS, CELLS)
        assert records[1] == {"Name": "LL", "Value": "50"}
        assert array.from_records(FIELDS, [{"Name": "WL"}]) == ["WL", ""]


class TestDelimitedEncode:
    """Tests for delimited.encode()."""

    def test_header_then_rows(self):
        text = delimited.encode(FIELDS, CELLS)
        assert text == "Name,Value\nDL,100\nLL,50\n"

    def test_custom_separator(self):
        text = delimited.encode(FIELDS, CELLS, separator=";")
        assert text.splitlines()[0] == "Name;Value"

    def test_quotes_cells_containing_separator(self):
        text = delimited.encode(("Name", "Note"), ("DL", 'self weight, "SW"'))
        assert text.splitlines()[1] == 'DL,"self weight, ""SW"""'

    def test_no_fields(self):
        with pytest.raises(MalformedTable):
            delimited.encode((), ())

    @pytest.mark.parametrize("separator", ["", ",,", '"', "\n"])
    def test_bad_separator(self, separator):
        with pytest.raises(ValueError):
            delimited.encode(FIELDS, CELLS, separator=separator)


class TestDelimitedDecode:
    """Tests for delimited.decode()."""

    def test_round_trip(self):
        cells = ("DL", 'comma, quote " and\nnewline', "LL", "")
        fields, decoded = delimited.decode(delimited.encode(FIELDS, cells))
        assert fields == FIELDS
        assert decoded == cells

    def test_round_trip_tab_separator(self):
        text = delimited.encode(FIELDS, CELLS, separator="\t")
        assert delimited.decode(text, separator="\t") == (FIELDS, CELLS)

    def test_trailing_blank_lines_ignored(self):
        fields, cells = delimited.decode("Name,Value\nDL,100\n\n\n")
        assert fields == FIELDS
        assert cells == ("DL", "100")

    def test_header_only(self):
        fields, cells = delimited.decode("Name,Value\n")
        assert fields == FIELDS
        assert cells == ()

    def test_wrong_width(self):
        with pytest.raises(MalformedTable) as exc_info:
            delimited.decode("Name,Value\nDL,100,extra\n")
        assert "expected 2 cells" in str(exc_info.value)

    def test_missing_header(self):
        with pytest.raises(MalformedTable):
            delimited.decode("\n\n")


class TestDelimitedFiles:
    """Tests for delimited file read/write."""

    def test_file_round_trip(self, tmp_path):
        path = tmp_path / "loads.csv"
        written = delimited.write_file(path, FIELDS, CELLS)
        assert written == path
        assert path.read_text(encoding="utf-8") == "Name,Value\nDL,100\nLL,50\n"
        assert delimited.read_file(path) == (FIELDS, CELLS)

    def test_non_ascii_cells(self, tmp_path):
        path = tmp_path / "stories.csv"
        cells = ("Étage 1", "3.5m²")
        delimited.write_file(str(path), FIELDS, cells)
        assert delimited.read_file(str(path)) == (FIELDS, cells)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            delimited.read_file(tmp_path / "nope.csv")


class TestMarkup:
    """Tests for the markup codec."""

    def test_round_trip(self):
        cells = ("DL", "100 & <more>", "LL", 'say "hi"\nnext line')
        text = markup.encode("Loads", 3, FIELDS, cells)
        document = markup.decode(text)
        assert document.table_key == "Loads"
        assert document.version == 3
        assert document.field_keys == FIELDS
        assert document.cells == cells
        assert document.row_count == 2

    def test_schema_version_only_when_requested(self):
        plain = markup.encode("Loads", 3, FIELDS, CELLS)
        assert "schemaVersion" not in plain
        assert markup.decode(plain).schema_version is None

        with_schema = markup.encode("Loads", 3, FIELDS, CELLS, include_schema=True)
        assert markup.decode(with_schema).schema_version == "1.0"

    def test_schema_writes_field_metadata(self):
        fields = [
            FieldDescriptor("Loads", "Name", True),
            FieldDescriptor("Loads", "Value", False, units="kN"),
        ]
        text = markup.encode("Loads", 3, FIELDS, CELLS, include_schema=True, fields=fields)
        assert 'importable="false"' in text
        assert 'units="kN"' in text

    def test_empty_table(self):
        document = markup.decode(markup.encode("Area Loads", 1, ("Area", "Load"), ()))
        assert document.field_keys == ("Area", "Load")
        assert document.cells == ()

    def test_encode_partial_row(self):
        with pytest.raises(MalformedTable):
            markup.encode("Loads", 3, FIELDS, ("DL",))

    def test_not_xml(self):
        with pytest.raises(MalformedTable):
            markup.decode("Name,Value\nDL,100")

    def test_wrong_root(self):
        with pytest.raises(MalformedTable):
            markup.decode("<Other />")

    def test_bad_version(self):
        with pytest.raises(MalformedTable):
            markup.decode('<Table key="Loads" version="three"><Fields /></Table>')

    def test_row_width_mismatch(self):
        text = (
            '<Table key="Loads" version="1">'
            '<Fields><Field key="Name" /><Field key="Value" /></Fields>'
            '<Rows><Row><Cell value="DL" /></Row></Rows>'
            "</Table>"
        )
        with pytest.raises(MalformedTable):
            markup.decode(text)
