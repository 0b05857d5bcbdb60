# ==============================================================================
# Table Classification
# ==============================================================================

from enum import Enum, IntEnum


class TableImportType(IntEnum):
    """Import classification reported by the Model Store for each table."""

    NOT_IMPORTABLE = 0  # Read-only
    IMPORTABLE_NON_INTERACTIVE = 1  # Importable, but not through the interactive editor
    INTERACTIVE_WHEN_UNLOCKED = 2  # Interactive import only while the model is unlocked
    INTERACTIVE_ALWAYS = 3  # Interactive import whether locked or unlocked

    @property
    def is_importable(self) -> bool:
        return self is not TableImportType.NOT_IMPORTABLE


# ==============================================================================
# Wire Formats
# ==============================================================================


class TableFormat(Enum):
    """Encodings a snapshot can be delivered in."""

    ARRAY = "array"  # Flat row-major list of cells
    DELIMITED_TEXT = "delimited"  # Header line + one line per row
    TAGGED_MARKUP = "markup"  # XML document


DEFAULT_SEPARATOR = ","

# Written as the schemaVersion attribute when schema inclusion is requested
MARKUP_SCHEMA_VERSION = "1.0"

# Encoding used by the *_to_file / stage_file variants unless overridden
DEFAULT_FILE_ENCODING = "utf-8"


# ==============================================================================
# Display Defaults
# ==============================================================================

# Mode range reported by the store when output options were never set
DEFAULT_START_MODE = 1
DEFAULT_END_MODE = 12
DEFAULT_START_BUCKLING_MODE = 1
DEFAULT_END_BUCKLING_MODE = 1
