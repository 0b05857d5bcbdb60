"""tablestage - stage edits to model database tables and commit them as one batch.

Read a versioned table snapshot, modify it as an array, delimited text or a
file, stage it, and later apply every staged edit to the Model Store in a
single call (or cancel them all).
"""

from .data.memory_store import InMemoryModelStore
from .data.model_store import ModelStore, StoreStatus
from .database_tables import DatabaseTables
from .debug_trace import setup_debug_logging
from .errors import (
    EmptySelection,
    FieldNotImportable,
    GroupNotFound,
    InvalidOutputOptions,
    MalformedTable,
    PartialImportFailure,
    StoreCommunicationFailure,
    TableEngineError,
    TableUnavailable,
    UnknownField,
    UnknownTable,
)
from .models.commit_result import CommitResult
from .models.constants import TableFormat, TableImportType
from .models.display import BaseReactionLocation, OutputOptions
from .models.pending_edit import PendingEdit
from .models.table import FieldDescriptor, ObsoleteTable, TableDescriptor, TableSnapshot
from .services.commit import CommitState
from .services.reader import EncodedTable
from .settings import EngineSettings

__version__ = "0.1.0"

__all__ = [
    "DatabaseTables",
    "EngineSettings",
    "ModelStore",
    "InMemoryModelStore",
    "StoreStatus",
    "TableDescriptor",
    "FieldDescriptor",
    "ObsoleteTable",
    "TableSnapshot",
    "EncodedTable",
    "PendingEdit",
    "CommitResult",
    "CommitState",
    "TableFormat",
    "TableImportType",
    "OutputOptions",
    "BaseReactionLocation",
    "TableEngineError",
    "UnknownTable",
    "UnknownField",
    "FieldNotImportable",
    "MalformedTable",
    "EmptySelection",
    "InvalidOutputOptions",
    "TableUnavailable",
    "GroupNotFound",
    "StoreCommunicationFailure",
    "PartialImportFailure",
    "setup_debug_logging",
]
