"""Output options that narrow display-oriented table reads."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import InvalidOutputOptions
from .constants import (
    DEFAULT_END_BUCKLING_MODE,
    DEFAULT_END_MODE,
    DEFAULT_START_BUCKLING_MODE,
    DEFAULT_START_MODE,
)

RESULT_CLASS_OPTIONS = (
    "multistep_static",
    "nonlinear_static",
    "modal_history",
    "direct_history",
    "combo",
)


@dataclass(frozen=True)
class BaseReactionLocation:
    """Point base reactions are reported about."""

    is_user_defined: bool = False
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class OutputOptions:
    """Which result categories display reads include.

    The integer result-class options (multistep static, nonlinear static,
    modal history, direct history, combination) are opaque codes forwarded
    to the store; only their sign is checked here.
    """

    base_reaction: BaseReactionLocation = field(default_factory=BaseReactionLocation)
    is_all_modes: bool = False
    start_mode: int = DEFAULT_START_MODE
    end_mode: int = DEFAULT_END_MODE
    is_all_buckling_modes: bool = False
    start_buckling_mode: int = DEFAULT_START_BUCKLING_MODE
    end_buckling_mode: int = DEFAULT_END_BUCKLING_MODE
    multistep_static: int = 0
    nonlinear_static: int = 0
    modal_history: int = 0
    direct_history: int = 0
    combo: int = 0

    def validate(self) -> OutputOptions:
        """Check that mode ranges are ordered and option codes are non-negative.

        Returns:
            self, so the call can be chained.

        Raises:
            InvalidOutputOptions: On the first inconsistency found.
        """
        if not self.is_all_modes:
            _check_range("mode", self.start_mode, self.end_mode)
        if not self.is_all_buckling_modes:
            _check_range("buckling mode", self.start_buckling_mode, self.end_buckling_mode)

        for name in RESULT_CLASS_OPTIONS:
            value = getattr(self, name)
            if value < 0:
                raise InvalidOutputOptions(f"{name} cannot be negative ({value})")

        return self


def _check_range(label: str, start: int, end: int) -> None:
    if start < 1:
        raise InvalidOutputOptions(f"Start {label} must be at least 1 (got {start})")
    if start > end:
        raise InvalidOutputOptions(f"Start {label} {start} is after end {label} {end}")
