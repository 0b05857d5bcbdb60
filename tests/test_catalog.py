"""Tests for TableCatalog."""

from unittest.mock import MagicMock

import pytest

from tablestage.data.model_store import FieldListResponse, StoreStatus
from tablestage.errors import StoreCommunicationFailure, UnknownTable
from tablestage.models.constants import TableImportType
from tablestage.models.table import TableDescriptor
from tablestage.services.catalog import TableCatalog
from tablestage.services.selection import DisplaySelection


@pytest.fixture
def catalog(store):
    return TableCatalog(store)


class TestListTables:
    """Tests for table listings."""

    def test_available_excludes_empty_tables(self, catalog):
        keys = [t.table_key for t in catalog.list_available()]
        assert keys == ["Loads", "Joint Coordinates", "Story Drifts"]

    def test_all_includes_empty_tables(self, catalog):
        tables = {t.table_key: t for t in catalog.list_all()}
        assert tables["Area Loads"].is_empty is True
        assert tables["Loads"].is_empty is False

    def test_empty_catalog_is_valid(self):
        store = MagicMock()
        store.list_tables.return_value = []
        assert TableCatalog(store).list_available() == []

    def test_obsolete(self, catalog):
        obsolete = catalog.list_obsolete()
        assert len(obsolete) == 1
        assert obsolete[0].table_key == "Frame Loads - Old"
        assert "Distributed" in obsolete[0].migration_note

    def test_get_table_exact_match(self, catalog):
        assert catalog.get_table("Loads").display_name == "Load Definitions"
        assert catalog.get_table("loads") is None

    def test_get_table_includes_empty_tables(self, catalog):
        assert catalog.get_table("Area Loads").is_empty is True

    def test_is_table_available(self, catalog):
        assert catalog.is_table_available("Loads")
        assert not catalog.is_table_available("Area Loads")  # empty
        assert not catalog.is_table_available("Missing")
        assert not catalog.is_table_available("")


class TestListFields:
    """Tests for field discovery."""

    def test_fields_in_column_order(self, catalog):
        fields = catalog.list_fields("Joint Coordinates")
        assert [f.field_key for f in fields] == ["Joint", "Story", "GUID"]
        assert [f.is_importable for f in fields] == [True, True, False]

    def test_field_metadata(self, catalog):
        value = catalog.list_fields("Loads")[1]
        assert value.units == "kN"
        assert value.description == "Magnitude"

    def test_unknown_table(self, catalog):
        with pytest.raises(UnknownTable) as exc_info:
            catalog.list_fields("Missing")
        assert exc_info.value.table_key == "Missing"

    def test_blank_key(self, catalog):
        with pytest.raises(ValueError):
            catalog.list_fields("")

    def test_empty_table_has_fields(self, catalog):
        assert [f.field_key for f in catalog.list_fields("Area Loads")] == ["Area", "Load"]
        assert catalog.field_version("Area Loads") == 1

    def test_importable_fields(self, catalog):
        assert catalog.importable_fields("Joint Coordinates") == ["Joint", "Story"]

    def test_field_version(self, catalog):
        assert catalog.field_version("Loads") == 3

    def test_store_failure(self):
        store = MagicMock()
        store.list_tables.return_value = [TableDescriptor("Loads", "Loads")]
        store.list_fields.return_value = FieldListResponse(status=StoreStatus.FAILED)
        with pytest.raises(StoreCommunicationFailure) as exc_info:
            TableCatalog(store).list_fields("Loads")
        assert exc_info.value.status_code == StoreStatus.FAILED
        assert exc_info.value.table_key == "Loads"

    def test_no_caching(self, store, catalog):
        """Every call reflects the store as it is now."""
        assert catalog.get_table("New Table") is None
        store.add_table("New Table", ["A"], rows=[["1"]])
        assert catalog.get_table("New Table") is not None


class TestSummaries:
    """Tests for summaries and edit validation."""

    def test_summary(self, catalog):
        summary = catalog.get_summary("Joint Coordinates")
        assert summary.version == 7
        assert summary.total_fields == 3
        assert summary.importable_fields == 2
        assert summary.total_records == 3
        assert "2/3 importable" in str(summary)

    def test_summary_of_empty_table(self, catalog):
        summary = catalog.get_summary("Area Loads")
        assert summary.is_empty
        assert summary.total_fields == 2
        assert summary.version == 1
        assert summary.total_records == 0

    def test_summary_of_missing_table(self, catalog):
        assert catalog.get_summary("Missing") is None

    def test_summary_counts_records_under_selection(self, catalog):
        selection = DisplaySelection(load_cases=("Dead",))
        assert catalog.get_summary("Story Drifts").total_records == 3
        assert catalog.get_summary("Story Drifts", selection).total_records == 2

    def test_all_summaries(self, catalog):
        keys = [s.table_key for s in catalog.get_all_summaries()]
        assert keys == ["Loads", "Joint Coordinates", "Story Drifts"]
        counts = {s.table_key: s.total_records for s in catalog.get_all_summaries()}
        assert counts["Loads"] == 2

    def test_validate_importable_table(self, catalog):
        validation = catalog.validate_for_editing("Loads")
        assert validation.is_valid
        assert validation.import_type == TableImportType.INTERACTIVE_ALWAYS
        assert validation.importable_field_count == 2

    def test_validate_read_only_table(self, catalog):
        validation = catalog.validate_for_editing("Story Drifts")
        assert not validation.is_valid
        assert "not importable" in validation.errors[0]

    def test_validate_empty_table_warns(self, catalog):
        validation = catalog.validate_for_editing("Area Loads")
        assert validation.is_valid
        assert "empty" in validation.warnings[0]
        assert validation.importable_field_count == 2

    def test_validate_missing_table(self, catalog):
        validation = catalog.validate_for_editing("Missing")
        assert validation.errors == ["Table 'Missing' not found"]
