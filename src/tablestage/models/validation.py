from collections.abc import Sequence


def validate_table_key(table_key: str) -> tuple[bool, str]:
    """Validate that a table key is a non-blank string.

    Args:
        table_key: The table key to validate

    Returns:
        Tuple of (is_valid, error_message) - error_message is "" if valid
    """
    if not isinstance(table_key, str):
        return False, f"Table key must be a string, got {type(table_key).__name__}"

    if not table_key.strip():
        return False, "Table key cannot be empty"

    return True, ""


def validate_field_keys(field_keys: Sequence[str]) -> tuple[bool, str]:
    """Validate an ordered list of field keys (non-empty, no blanks, no duplicates).

    Args:
        field_keys: Column order of a table edit

    Returns:
        Tuple of (is_valid, error_message) - error_message is "" if valid
    """
    if isinstance(field_keys, str):
        return False, "Field keys must be a sequence of strings, not a string"

    if len(field_keys) == 0:
        return False, "At least one field key is required"

    seen: set[str] = set()
    for key in field_keys:
        if not isinstance(key, str) or not key:
            return False, f"Invalid field key: {key!r}"
        if key in seen:
            return False, f"Duplicate field key: {key}"
        seen.add(key)

    return True, ""


def validate_row_shape(
    field_count: int, cell_count: int, row_count: int | None = None
) -> tuple[bool, str]:
    """Validate that a flat cell list fits the declared fields and row count.

    When row_count is None the cell count only has to be a whole number of rows.

    Args:
        field_count: Number of fields (columns)
        cell_count: Number of cells in the row-major list
        row_count: Declared number of rows, if the caller supplied one

    Returns:
        Tuple of (is_valid, error_message) - error_message is "" if valid
    """
    if field_count <= 0:
        if cell_count == 0 and not row_count:
            return True, ""
        return False, f"{cell_count} cells supplied with no fields"

    if row_count is None:
        if cell_count % field_count != 0:
            return False, f"{cell_count} cells is not a multiple of {field_count} fields"
        return True, ""

    if row_count < 0:
        return False, f"Row count cannot be negative ({row_count})"

    expected = row_count * field_count
    if cell_count != expected:
        return False, (
            f"Expected {expected} cells ({row_count} rows x {field_count} fields), "
            f"got {cell_count}"
        )

    return True, ""


def validate_names(names: Sequence[str]) -> tuple[bool, str]:
    """Validate a selection list of load case/combination/pattern names.

    Args:
        names: Names to select

    Returns:
        Tuple of (is_valid, error_message) - error_message is "" if valid
    """
    if len(names) == 0:
        return False, "No names given"

    for name in names:
        if not isinstance(name, str) or not name.strip():
            return False, f"Invalid name: {name!r}"

    return True, ""
