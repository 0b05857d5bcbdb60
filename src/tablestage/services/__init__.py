"""Service layer for table staging and commit.

Services:
- TableCatalog: Table and field discovery (stateless, always asks the store)
- TableSnapshotReader: Versioned reads in array, delimited-text or markup form
- EditStagingBuffer: One pending edit per table key, validated on stage
- CommitCoordinator: Applies or cancels the whole buffer as one batch
- DisplaySelectionState: Load case/combination/pattern and output selection

Staging never changes the Model Store. Only CommitCoordinator.apply() does,
and it clears the buffer whatever the outcome.
"""

from .catalog import TableCatalog
from .commit import CommitCoordinator, CommitState
from .edit_session import EditSession
from .reader import EncodedTable, TableSnapshotReader
from .selection import DisplaySelection, DisplaySelectionState
from .staging import EditStagingBuffer

__all__ = [
    "TableCatalog",
    "TableSnapshotReader",
    "EncodedTable",
    "EditStagingBuffer",
    "CommitCoordinator",
    "CommitState",
    "EditSession",
    "DisplaySelection",
    "DisplaySelectionState",
]
