"""Model Store adapter over a running ETABS instance (COM via pywin32).

Maps each ModelStore operation onto ``SapModel.DatabaseTables`` calls.
pywin32 returns a method's by-reference arguments after its return value,
so a call such as ``GetAllTables(0, [], [], [], [])`` comes back as
``(ret, number_tables, table_keys, table_names, import_types, is_empty)``.
Placeholder values are passed for every by-reference argument.

win32com is imported only when connecting, so the rest of tablestage
works on machines without pywin32.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ..debug_trace import logger
from ..errors import StoreCommunicationFailure
from ..models.constants import TableImportType
from ..models.display import OutputOptions
from ..models.table import FieldDescriptor, ObsoleteTable, TableDescriptor
from .model_store import (
    CommitResponse,
    FieldListResponse,
    ModelStore,
    StoreStatus,
    TableResponse,
)

if TYPE_CHECKING:
    from ..models.pending_edit import PendingEdit
    from ..services.selection import DisplaySelection

ETABS_PROG_ID = "CSI.ETABS.API.ETABSObject"

# (DisplaySelection attribute, DatabaseTables setter, SapModel collection)
_SELECTION_SETTERS = (
    ("load_cases", "SetLoadCasesSelectedForDisplay", "LoadCases"),
    ("load_combinations", "SetLoadCombinationsSelectedForDisplay", "RespCombo"),
    ("load_patterns", "SetLoadPatternsSelectedForDisplay", "LoadPatterns"),
)


def _unpack(result: Any) -> tuple[int, tuple]:
    """Split a COM call result into (status, by-reference outputs)."""
    if isinstance(result, (tuple, list)):
        return int(result[0]), tuple(result[1:])
    return int(result), ()


def _import_type(code: int) -> TableImportType:
    try:
        return TableImportType(int(code))
    except ValueError:
        logger.warning("Unknown table import type code %r; treating as not importable", code)
        return TableImportType.NOT_IMPORTABLE


class EtabsComStore(ModelStore):
    """ModelStore backed by an ETABS ``SapModel`` COM object.

    Usage:
        store = connect_to_running_etabs()
        tables = DatabaseTables(store)
    """

    def __init__(self, sap_model: Any):
        self._sap_model = sap_model
        self._applied_selection: DisplaySelection | None = None

    @property
    def _tables(self) -> Any:
        return self._sap_model.DatabaseTables

    def _call(self, operation: str, *args: Any) -> tuple[int, tuple]:
        method = getattr(self._tables, operation)
        return _unpack(method(*args))

    def _require_ok(self, operation: str, status: int, table_key: str | None = None) -> None:
        if status != StoreStatus.OK:
            raise StoreCommunicationFailure(
                operation,
                status,
                f"{operation} failed. Return code: {status}",
                table_key=table_key,
            )

    # --- Catalog ---

    def list_tables(self, include_empty: bool = False) -> list[TableDescriptor]:
        if include_empty:
            status, outs = self._call("GetAllTables", 0, [], [], [], [])
            self._require_ok("GetAllTables", status)
            _, keys, names, types, empties = outs
        else:
            status, outs = self._call("GetAvailableTables", 0, [], [], [])
            self._require_ok("GetAvailableTables", status)
            _, keys, names, types = outs
            empties = [False] * len(keys or ())

        return [
            TableDescriptor(key, name, _import_type(code), bool(empty))
            for key, name, code, empty in zip(keys or (), names or (), types or (), empties or ())
        ]

    def list_obsolete_tables(self) -> list[ObsoleteTable]:
        status, outs = self._call("GetObsoleteTableKeyList", 0, [], [])
        self._require_ok("GetObsoleteTableKeyList", status)
        _, keys, notes = outs
        return [ObsoleteTable(key, note) for key, note in zip(keys or (), notes or ())]

    def list_fields(self, table_key: str) -> FieldListResponse:
        status, outs = self._call("GetAllFieldsInTable", table_key, 0, 0, [], [], [], [], [])
        if status != StoreStatus.OK:
            return FieldListResponse(status=status)

        version, _, keys, names, descriptions, units, importable = outs
        fields = tuple(
            FieldDescriptor(
                table_key=table_key,
                field_key=key,
                is_importable=bool(is_importable),
                field_name=name,
                description=description,
                units=unit,
            )
            for key, name, description, unit, is_importable in zip(
                keys or (), names or (), descriptions or (), units or (), importable or ()
            )
        )
        return FieldListResponse(version=int(version), fields=fields)

    # --- Reads ---

    def _group_exists(self, group_name: str) -> bool:
        status, outs = _unpack(self._sap_model.GroupDef.GetNameList(0, []))
        if status != StoreStatus.OK:
            return True  # Can't tell; report the read failure as-is
        return group_name in (outs[1] or ())

    def _read_failed(self, status: int, group_filter: str) -> TableResponse:
        if group_filter and not self._group_exists(group_filter):
            return TableResponse(status=StoreStatus.GROUP_NOT_FOUND)
        return TableResponse(status=status)

    def get_editable_table(self, table_key: str, group_filter: str = "") -> TableResponse:
        status, outs = self._call("GetTableForEditingArray", table_key, group_filter, 0, [], 0, [])
        if status != StoreStatus.OK:
            return self._read_failed(status, group_filter)

        version, field_keys, row_count, rows = outs
        return TableResponse(
            version=int(version),
            field_keys=tuple(field_keys or ()),
            row_count=int(row_count),
            rows=tuple(rows or ()),
        )

    def get_display_table(
        self,
        table_key: str,
        field_keys: Sequence[str] = (),
        group_filter: str = "",
        selection: DisplaySelection | None = None,
    ) -> TableResponse:
        if selection is not None:
            self._apply_selection(selection)

        # A single blank key asks for every field
        requested = list(field_keys) or [""]
        status, outs = self._call(
            "GetTableForDisplayArray", table_key, requested, group_filter, 0, [], 0, []
        )
        if status != StoreStatus.OK:
            return self._read_failed(status, group_filter)

        _, version, included, row_count, rows = outs
        return TableResponse(
            version=int(version),
            field_keys=tuple(included or ()),
            row_count=int(row_count),
            rows=tuple(rows or ()),
        )

    def _all_names(self, collection: str) -> list[str]:
        operation = f"{collection}.GetNameList"
        status, outs = _unpack(getattr(self._sap_model, collection).GetNameList(0, []))
        self._require_ok(operation, status)
        return list(outs[1] or ())

    def _apply_selection(self, selection: DisplaySelection) -> None:
        previous = self._applied_selection
        for attribute, operation, collection in _SELECTION_SETTERS:
            names = getattr(selection, attribute)
            if not names:
                if not getattr(previous, attribute, ()):
                    continue
                # Cleared since the last read; select everything again
                names = self._all_names(collection)
            status, _ = self._call(operation, list(names))
            self._require_ok(operation, status)

        if selection.output_options is not None:
            self._apply_output_options(selection.output_options)
        elif previous is not None and previous.output_options is not None:
            self._apply_output_options(OutputOptions())

        self._applied_selection = selection

    def _apply_output_options(self, options: OutputOptions) -> None:
        location = options.base_reaction
        status, _ = self._call(
            "SetOutputOptionsForDisplay",
            location.is_user_defined,
            location.x,
            location.y,
            location.z,
            options.is_all_modes,
            options.start_mode,
            options.end_mode,
            options.is_all_buckling_modes,
            options.start_buckling_mode,
            options.end_buckling_mode,
            options.multistep_static,
            options.nonlinear_static,
            options.modal_history,
            options.direct_history,
            options.combo,
        )
        self._require_ok("SetOutputOptionsForDisplay", status)

    # --- Commit ---

    def _queue_edit(self, edit: PendingEdit) -> int:
        status, _ = self._call(
            "SetTableForEditingArray",
            edit.table_key,
            edit.version,
            list(edit.field_keys),
            edit.row_count,
            list(edit.rows),
        )
        if status == StoreStatus.OK:
            logger.debug(
                "Set table '%s' for editing: %d records, %d fields",
                edit.table_key,
                edit.row_count,
                len(edit.field_keys),
            )
        return status

    def commit_edits(self, edits: Sequence[PendingEdit], fill_log: bool = True) -> CommitResponse:
        # Tables queued in ETABS outlive this call unless cancelled
        try:
            for edit in edits:
                status = self._queue_edit(edit)
                if status != StoreStatus.OK:
                    message = (
                        f"Failed to set table '{edit.table_key}' for editing. "
                        f"Return code: {status}"
                    )
                    logger.error("%s; cancelling table editing", message)
                    self.discard_edits()
                    return CommitResponse(fatal_error_count=1, log=message, status=status)

            status, outs = self._call("ApplyEditedTables", fill_log, 0, 0, 0, 0, "")
        except Exception:
            logger.error("Table commit interrupted; cancelling table editing")
            self.discard_edits()
            raise

        fatal, errors, warnings, info, log = outs if outs else (0, 0, 0, 0, "")
        return CommitResponse(
            fatal_error_count=int(fatal),
            error_count=int(errors),
            warning_count=int(warnings),
            info_count=int(info),
            log=log or "",
            status=status,
        )

    def discard_edits(self) -> int:
        status, _ = self._call("CancelTableEditing")
        if status != StoreStatus.OK:
            logger.warning("CancelTableEditing failed. Return code: %d", status)
        else:
            logger.debug("Cancelled all pending table edits")
        return status


def connect_to_running_etabs(prog_id: str = ETABS_PROG_ID) -> EtabsComStore:
    """Attach to the running ETABS instance.

    Raises:
        RuntimeError: If pywin32 is not installed or ETABS is not running.
    """
    try:
        import win32com.client
    except ImportError as e:
        raise RuntimeError("pywin32 is required to connect to ETABS") from e

    try:
        etabs = win32com.client.GetActiveObject(prog_id)
        # Early binding so by-reference arguments are returned
        etabs = win32com.client.gencache.EnsureDispatch(etabs)
    except Exception as e:
        raise RuntimeError(f"No running ETABS instance found ({prog_id}): {e}") from e

    logger.info("Connected to running ETABS instance")
    return EtabsComStore(etabs.SapModel)
