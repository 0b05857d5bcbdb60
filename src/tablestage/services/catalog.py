"""Read-only directory of the tables and fields the Model Store defines.

The catalog holds no state of its own; every call goes to the store, so
results always reflect the model as it is now.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..debug_trace import logger
from ..errors import StoreCommunicationFailure, TableEngineError, UnknownTable
from ..models.constants import TableImportType
from ..models.table import TableSummary, TableValidation
from ..models.validation import validate_table_key

if TYPE_CHECKING:
    from ..data.model_store import FieldListResponse, ModelStore
    from ..models.table import FieldDescriptor, ObsoleteTable, TableDescriptor
    from .selection import DisplaySelection


class TableCatalog:
    """Table and field discovery.

    Usage:
        catalog = TableCatalog(store)
        for table in catalog.list_available():
            print(table.table_key, table.import_type.name)
        fields = catalog.list_fields("Joint Coordinates")
    """

    def __init__(self, store: ModelStore):
        self._store = store

    # --- Tables ---

    def list_available(self) -> list[TableDescriptor]:
        """List tables that currently exist in the model."""
        tables = self._store.list_tables(include_empty=False)
        logger.debug("Retrieved %d available tables", len(tables))
        return list(tables)

    def list_all(self) -> list[TableDescriptor]:
        """List every table, including ones that have no rows (is_empty set)."""
        tables = self._store.list_tables(include_empty=True)
        logger.debug(
            "Retrieved %d tables (%d empty)", len(tables), sum(1 for t in tables if t.is_empty)
        )
        return list(tables)

    def list_obsolete(self) -> list[ObsoleteTable]:
        """List deprecated table keys with migration notes."""
        obsolete = self._store.list_obsolete_tables()
        logger.debug("Retrieved %d obsolete tables", len(obsolete))
        return list(obsolete)

    def get_table(self, table_key: str) -> TableDescriptor | None:
        """Find a table by exact key, or None. Empty tables are included."""
        for table in self.list_all():
            if table.table_key == table_key:
                return table
        return None

    def is_table_available(self, table_key: str) -> bool:
        """Check if a table exists and has rows."""
        is_valid, _ = validate_table_key(table_key)
        if not is_valid:
            return False
        return any(t.table_key == table_key and not t.is_empty for t in self.list_all())

    # --- Fields ---

    def _field_response(self, table_key: str) -> FieldListResponse:
        is_valid, error = validate_table_key(table_key)
        if not is_valid:
            raise ValueError(error)

        if self.get_table(table_key) is None:
            raise UnknownTable(table_key)

        response = self._store.list_fields(table_key)
        if response.status != 0:
            raise StoreCommunicationFailure(
                "list_fields",
                response.status,
                f"Failed to get fields for table '{table_key}'. Status: {response.status}",
                table_key=table_key,
            )
        logger.debug(
            "Retrieved %d fields for table '%s' (version %d)",
            len(response.fields),
            table_key,
            response.version,
        )
        return response

    def list_fields(self, table_key: str) -> list[FieldDescriptor]:
        """List every field of a table, in column order.

        Raises:
            UnknownTable: If table_key is not a table in the model.
            StoreCommunicationFailure: If the store could not list the fields.
        """
        return list(self._field_response(table_key).fields)

    def field_version(self, table_key: str) -> int:
        """Get the table version the store reports alongside its fields."""
        return self._field_response(table_key).version

    def importable_fields(self, table_key: str) -> list[str]:
        """Get keys of fields that may appear in a staged edit."""
        return [f.field_key for f in self.list_fields(table_key) if f.is_importable]

    # --- Summaries ---

    def _count_records(self, table_key: str, selection: DisplaySelection | None) -> int:
        response = self._store.get_display_table(table_key, selection=selection)
        if response.status != 0:
            logger.warning(
                "Could not count records of table '%s'. Status: %d", table_key, response.status
            )
            return 0
        return response.row_count

    def get_summary(
        self, table_key: str, selection: DisplaySelection | None = None
    ) -> TableSummary | None:
        """Summarize one table, or None if it is not in the catalog.

        Records are counted with a display read of the whole table.

        Args:
            table_key: Table to summarize.
            selection: Display selection the count is taken under; None
                leaves the store's own selection in place.
        """
        table = self.get_table(table_key)
        if table is None:
            return None

        response = self._field_response(table_key)
        fields = list(response.fields)
        records = 0 if table.is_empty else self._count_records(table_key, selection)

        return TableSummary(
            table_key=table.table_key,
            display_name=table.display_name,
            import_type=table.import_type,
            is_empty=table.is_empty,
            version=response.version,
            total_fields=len(fields),
            importable_fields=sum(1 for f in fields if f.is_importable),
            total_records=records,
        )

    def get_all_summaries(self, selection: DisplaySelection | None = None) -> list[TableSummary]:
        """Summarize every available table."""
        summaries = []
        for table in self.list_available():
            summary = self.get_summary(table.table_key, selection)
            if summary is not None:
                summaries.append(summary)
        logger.debug("Retrieved summaries for %d tables", len(summaries))
        return summaries

    def validate_for_editing(self, table_key: str) -> TableValidation:
        """Check whether a table can be edited, collecting errors and warnings.

        Never raises for catalog problems; they are reported in the result.
        """
        result = TableValidation(table_key=table_key)

        is_valid, error = validate_table_key(table_key)
        if not is_valid:
            result.errors.append(error)
            return result

        table = next((t for t in self.list_all() if t.table_key == table_key), None)
        if table is None:
            result.errors.append(f"Table '{table_key}' not found")
            return result

        result.import_type = table.import_type
        if table.import_type == TableImportType.NOT_IMPORTABLE:
            result.errors.append(f"Table '{table_key}' is not importable (read-only)")
            return result

        if table.is_empty:
            result.warnings.append(f"Table '{table_key}' is currently empty")

        try:
            importable = self.importable_fields(table_key)
        except TableEngineError as e:
            result.errors.append(str(e))
            return result

        result.importable_field_count = len(importable)
        if not importable:
            result.warnings.append(f"Table '{table_key}' has no importable fields")

        return result
