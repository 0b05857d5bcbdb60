"""Shared fixtures: a small in-memory model with a few tables."""

import pytest

from tablestage.data.memory_store import InMemoryModelStore
from tablestage.models.constants import TableImportType
from tablestage.models.table import FieldDescriptor


def make_loads_store() -> InMemoryModelStore:
    """Build a store with an editable "Loads" table (version 3), a table with a
    read-only column, a read-only results table and an empty table."""
    store = InMemoryModelStore()
    store.add_table(
        "Loads",
        [
            FieldDescriptor("Loads", "Name", True, "Name", "Load pattern name"),
            FieldDescriptor("Loads", "Value", True, "Value", "Magnitude", "kN"),
        ],
        rows=[["DL", "100"], ["LL", "50"]],
        display_name="Load Definitions",
        version=3,
    )
    store.add_table(
        "Joint Coordinates",
        [
            FieldDescriptor("Joint Coordinates", "Joint", True),
            FieldDescriptor("Joint Coordinates", "Story", True),
            FieldDescriptor("Joint Coordinates", "GUID", False),
        ],
        rows=[["1", "Story1", "a-1"], ["2", "Story1", "a-2"], ["3", "Story2", "a-3"]],
        version=7,
        group_field="Story",
    )
    store.add_table(
        "Story Drifts",
        ["Story", "OutputCase", "Drift"],
        rows=[
            ["Story1", "Dead", "0.001"],
            ["Story1", "Live", "0.002"],
            ["Story2", "Dead", "0.003"],
        ],
        import_type=TableImportType.NOT_IMPORTABLE,
        case_field="OutputCase",
    )
    store.add_table("Area Loads", ["Area", "Load"], rows=[])
    store.add_group("Story1")
    store.add_obsolete_table("Frame Loads - Old", "Use 'Frame Loads - Distributed'")
    return store


@pytest.fixture
def store():
    """In-memory store with the standard test tables."""
    return make_loads_store()
