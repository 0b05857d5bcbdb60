from dataclasses import dataclass

from .models.constants import DEFAULT_FILE_ENCODING, DEFAULT_SEPARATOR


@dataclass
class EngineSettings:
    """Defaults applied by DatabaseTables when a call does not override them."""

    separator: str = DEFAULT_SEPARATOR
    fill_log: bool = True
    include_schema: bool = False
    file_encoding: str = DEFAULT_FILE_ENCODING

    def __post_init__(self):
        if len(self.separator) != 1:
            raise ValueError(f"Separator must be a single character, got {self.separator!r}")
