"""Display selection state.

Which load cases, combinations and patterns, and which output categories,
display-oriented table reads include. Mutated independently of staging and
read by TableSnapshotReader on every display read.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass

from ..debug_trace import logger
from ..errors import EmptySelection
from ..models.display import OutputOptions
from ..models.validation import validate_names


@dataclass(frozen=True)
class DisplaySelection:
    """Immutable copy of the selection at one point in time.

    An empty tuple means no explicit selection was made for that category;
    the store then applies its own default.
    """

    load_cases: tuple[str, ...] = ()
    load_combinations: tuple[str, ...] = ()
    load_patterns: tuple[str, ...] = ()
    output_options: OutputOptions | None = None

    @property
    def is_default(self) -> bool:
        return not (
            self.load_cases
            or self.load_combinations
            or self.load_patterns
            or self.output_options is not None
        )


class DisplaySelectionState:
    """Process-wide display selection, guarded by a single lock.

    Usage:
        selection = DisplaySelectionState()
        selection.set_selected_cases(["Dead", "Live"])
        selection.set_output_options(OutputOptions(start_mode=1, end_mode=6))
        reader.read_for_display("Story Drifts")
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._selection = DisplaySelection()

    @staticmethod
    def _checked_names(category: str, names: Sequence[str]) -> tuple[str, ...]:
        if isinstance(names, str):
            raise TypeError(f"Expected a sequence of {category} names, got a single string")

        if len(names) == 0:
            raise EmptySelection(category)

        is_valid, error = validate_names(names)
        if not is_valid:
            raise ValueError(f"Cannot select {category}: {error}")
        return tuple(names)

    def _update(self, **changes) -> None:
        with self._lock:
            current = self._selection
            self._selection = DisplaySelection(
                load_cases=changes.get("load_cases", current.load_cases),
                load_combinations=changes.get("load_combinations", current.load_combinations),
                load_patterns=changes.get("load_patterns", current.load_patterns),
                output_options=changes.get("output_options", current.output_options),
            )

    # --- Selection setters ---

    def set_selected_cases(self, names: Sequence[str]) -> None:
        """Select load cases for display.

        Raises:
            EmptySelection: If names is empty.
            ValueError: If a name is blank.
        """
        cases = self._checked_names("load cases", names)
        self._update(load_cases=cases)
        logger.debug("Set %d load cases for display", len(cases))

    def set_selected_combinations(self, names: Sequence[str]) -> None:
        """Select load combinations for display.

        Raises:
            EmptySelection: If names is empty.
            ValueError: If a name is blank.
        """
        combos = self._checked_names("load combinations", names)
        self._update(load_combinations=combos)
        logger.debug("Set %d load combinations for display", len(combos))

    def set_selected_patterns(self, names: Sequence[str]) -> None:
        """Select load patterns for display.

        Raises:
            EmptySelection: If names is empty.
            ValueError: If a name is blank.
        """
        patterns = self._checked_names("load patterns", names)
        self._update(load_patterns=patterns)
        logger.debug("Set %d load patterns for display", len(patterns))

    def set_output_options(self, options: OutputOptions) -> None:
        """Set output options after checking they are internally consistent.

        Raises:
            InvalidOutputOptions: If a range is inverted or a code is negative.
        """
        options.validate()
        self._update(output_options=options)
        logger.debug("Set output options for display")

    # --- Reset ---

    def clear_cases(self) -> None:
        self._update(load_cases=())

    def clear_combinations(self) -> None:
        self._update(load_combinations=())

    def clear_patterns(self) -> None:
        self._update(load_patterns=())

    def clear_output_options(self) -> None:
        self._update(output_options=None)

    def clear(self) -> None:
        """Drop every explicit selection, returning to store defaults."""
        with self._lock:
            self._selection = DisplaySelection()

    # --- Readers ---

    @property
    def selected_cases(self) -> tuple[str, ...]:
        return self._selection.load_cases

    @property
    def selected_combinations(self) -> tuple[str, ...]:
        return self._selection.load_combinations

    @property
    def selected_patterns(self) -> tuple[str, ...]:
        return self._selection.load_patterns

    @property
    def output_options(self) -> OutputOptions:
        return self._selection.output_options or OutputOptions()

    def snapshot(self) -> DisplaySelection:
        """Get the current selection as an immutable record."""
        with self._lock:
            return self._selection
