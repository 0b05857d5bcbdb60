"""Tests for EditStagingBuffer."""

import threading

import pytest

from tablestage.codecs import delimited, markup
from tablestage.errors import FieldNotImportable, MalformedTable, UnknownField, UnknownTable
from tablestage.models.table import TableSnapshot
from tablestage.services.catalog import TableCatalog
from tablestage.services.reader import TableSnapshotReader
from tablestage.services.staging import EditStagingBuffer


@pytest.fixture
def buffer(store):
    return EditStagingBuffer(TableCatalog(store))


@pytest.fixture
def reader(store):
    return TableSnapshotReader(store, TableCatalog(store))


class TestStage:
    """Tests for stage() validation and replacement."""

    def test_stage_and_peek(self, buffer):
        buffer.stage("Loads", 3, ["Name", "Value"], ["DL", "100", "LL", "50"])
        edit = buffer.peek("Loads")
        assert edit.version == 3
        assert edit.field_keys == ("Name", "Value")
        assert edit.rows == ("DL", "100", "LL", "50")
        assert edit.row_count == 2

    def test_peek_missing(self, buffer):
        assert buffer.peek("Loads") is None

    def test_replaces_previous_edit(self, buffer):
        """Last writer wins; no merge."""
        buffer.stage("Loads", 3, ["Name", "Value"], ["DL", "100"])
        buffer.stage("Loads", 4, ["Name"], ["WL"])
        edit = buffer.peek("Loads")
        assert edit.version == 4
        assert edit.rows == ("WL",)
        assert len(buffer) == 1

    def test_version_not_checked(self, buffer):
        """Stale versions are left for the store to reject on commit."""
        buffer.stage("Loads", 99, ["Name", "Value"], ["DL", "100"])
        assert buffer.peek("Loads").version == 99

    def test_non_importable_field_keeps_previous_edit(self, buffer):
        buffer.stage("Joint Coordinates", 7, ["Joint", "Story"], ["1", "Story1"])
        with pytest.raises(FieldNotImportable) as exc_info:
            buffer.stage("Joint Coordinates", 7, ["Joint", "GUID"], ["1", "x"])
        assert exc_info.value.field_key == "GUID"

        edit = buffer.peek("Joint Coordinates")
        assert edit.field_keys == ("Joint", "Story")
        assert edit.rows == ("1", "Story1")

    def test_unknown_field(self, buffer):
        with pytest.raises(UnknownField) as exc_info:
            buffer.stage("Loads", 3, ["Name", "Colour"], ["DL", "red"])
        assert exc_info.value.field_key == "Colour"
        assert buffer.is_empty

    def test_unknown_table(self, buffer):
        with pytest.raises(UnknownTable):
            buffer.stage("Missing", 1, ["A"], ["1"])

    def test_row_count_mismatch(self, buffer):
        with pytest.raises(MalformedTable):
            buffer.stage("Loads", 3, ["Name", "Value"], ["DL", "100", "LL", "50"], row_count=3)

    def test_partial_row(self, buffer):
        with pytest.raises(MalformedTable):
            buffer.stage("Loads", 3, ["Name", "Value"], ["DL", "100", "LL"])

    def test_duplicate_field_keys(self, buffer):
        with pytest.raises(MalformedTable):
            buffer.stage("Loads", 3, ["Name", "Name"], ["DL", "DL"])

    def test_empty_field_keys(self, buffer):
        with pytest.raises(MalformedTable):
            buffer.stage("Loads", 3, [], [])

    def test_bare_string_field_keys(self, buffer):
        with pytest.raises(TypeError):
            buffer.stage("Loads", 3, "Name", ["DL"])

    def test_zero_rows_allowed(self, buffer):
        """Staging zero rows replaces the table with an empty one."""
        edit = buffer.stage("Loads", 3, ["Name", "Value"], [], row_count=0)
        assert edit.row_count == 0

    def test_staged_rows_are_copied(self, buffer):
        rows = ["DL", "100"]
        buffer.stage("Loads", 3, ["Name", "Value"], rows)
        rows[0] = "changed"
        assert buffer.peek("Loads").rows == ("DL", "100")


class TestStageFormats:
    """Tests for staging snapshots, delimited text, files and markup."""

    def test_stage_editing_snapshot(self, buffer, reader):
        snapshot = reader.read_for_editing("Loads")
        edited = snapshot.with_records([{"Name": "DL", "Value": "120"}])
        buffer.stage_snapshot(edited)
        assert buffer.peek("Loads").rows == ("DL", "120")
        assert buffer.peek("Loads").version == 3

    def test_display_snapshot_rejected(self, buffer, reader):
        snapshot = reader.read_for_display("Loads")
        with pytest.raises(ValueError):
            buffer.stage_snapshot(snapshot)
        assert buffer.is_empty

    def test_stage_delimited(self, buffer):
        buffer.stage_delimited("Loads", 3, "Name;Value\nDL;100\n", separator=";")
        assert buffer.peek("Loads").rows == ("DL", "100")

    def test_stage_file(self, buffer, tmp_path):
        path = tmp_path / "loads.csv"
        delimited.write_file(path, ["Name", "Value"], ["SW", "0"])
        buffer.stage_file("Loads", 3, path)
        assert buffer.peek("Loads").rows == ("SW", "0")

    def test_stage_missing_file(self, buffer, tmp_path):
        with pytest.raises(FileNotFoundError):
            buffer.stage_file("Loads", 3, tmp_path / "missing.csv")

    def test_stage_markup_uses_document_version(self, buffer):
        text = markup.encode("Loads", 3, ["Name", "Value"], ["DL", "100"])
        buffer.stage_markup("Loads", text)
        assert buffer.peek("Loads").version == 3

    def test_stage_markup_version_override(self, buffer):
        text = markup.encode("Loads", 3, ["Name", "Value"], ["DL", "100"])
        buffer.stage_markup("Loads", text, version=5)
        assert buffer.peek("Loads").version == 5

    def test_stage_markup_for_other_table(self, buffer):
        text = markup.encode("Other", 1, ["Name", "Value"], ["DL", "100"])
        with pytest.raises(MalformedTable):
            buffer.stage_markup("Loads", text)

    def test_snapshot_and_text_forms_stage_identically(self, buffer, reader):
        snapshot = reader.read_for_editing("Loads")
        buffer.stage_snapshot(snapshot)
        from_array = buffer.peek("Loads")

        text = delimited.encode(snapshot.field_keys, snapshot.rows)
        buffer.stage_delimited("Loads", snapshot.version, text)
        assert buffer.peek("Loads") == from_array


class TestBufferContents:
    """Tests for introspection, clear and drain."""

    def test_staging_order(self, buffer):
        buffer.stage("Loads", 3, ["Name"], ["DL"])
        buffer.stage("Joint Coordinates", 7, ["Joint"], ["1"])
        assert buffer.table_keys == ["Loads", "Joint Coordinates"]
        assert [e.table_key for e in buffer.pending()] == ["Loads", "Joint Coordinates"]
        assert "Loads" in buffer
        assert "Story Drifts" not in buffer

    def test_clear(self, buffer, store):
        buffer.stage("Loads", 3, ["Name"], ["DL"])
        assert buffer.clear() == 1
        assert buffer.is_empty
        assert buffer.peek("Loads") is None
        assert store.commits == []

    def test_discard_one_table(self, buffer):
        buffer.stage("Loads", 3, ["Name"], ["DL"])
        buffer.stage("Joint Coordinates", 7, ["Joint"], ["1"])
        assert buffer.discard("Loads") is True
        assert buffer.discard("Loads") is False
        assert buffer.table_keys == ["Joint Coordinates"]

    def test_drain(self, buffer):
        buffer.stage("Loads", 3, ["Name"], ["DL"])
        edits = buffer.drain()
        assert [e.table_key for e in edits] == ["Loads"]
        assert buffer.is_empty

    def test_staging_does_not_touch_store(self, buffer, store, reader):
        buffer.stage("Loads", 3, ["Name", "Value"], ["WL", "1"])
        snapshot = reader.read_for_editing("Loads")
        assert snapshot.rows == ("DL", "100", "LL", "50")
        assert snapshot.version == 3
        assert store.commits == []

    def test_concurrent_stage_keeps_one_edit_per_table(self, buffer):
        def stage_many(value):
            for _ in range(20):
                buffer.stage("Loads", 3, ["Name", "Value"], ["DL", value])

        threads = [threading.Thread(target=stage_many, args=(str(i),)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(buffer) == 1
        assert buffer.peek("Loads").rows[1] in {"0", "1", "2", "3"}

    def test_snapshot_value_type(self):
        """Snapshots staged from records are independent of the source dicts."""
        record = {"Name": "DL", "Value": "100"}
        snapshot = TableSnapshot.from_records("Loads", 3, ["Name", "Value"], [record])
        record["Value"] = "999"
        assert snapshot.rows == ("DL", "100")
