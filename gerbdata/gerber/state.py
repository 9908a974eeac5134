"""
Modal State Management for Gerber interpretation

Tracks the values that persist from one command to the next:
- Current position (coordinates are modal)
- Selected aperture
- Whether the previous operation was a move (D02)
- Interpolation mode (G01/G02/G03, G74/G75)
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

OPERATION_PATTERN = re.compile(r"D0?([123])")

LINEAR_CODES = ("G01", "G1")
CLOCKWISE_CODES = ("G02", "G2")
COUNTER_CLOCKWISE_CODES = ("G03", "G3")
ARC_CODES = CLOCKWISE_CODES + COUNTER_CLOCKWISE_CODES


class InterpolationMode(Enum):
    LINEAR = "LINEAR"
    SINGLE_QUADRANT = "SINGLE_QUADRANT"
    MULTI_QUADRANT = "MULTI_QUADRANT"


class ArcDirection(Enum):
    CLOCKWISE = "CW"
    COUNTER_CLOCKWISE = "CCW"


class Operation(Enum):
    """Normalized D01/D02/D03 operation codes."""
    DRAW = "D01"
    MOVE = "D02"
    FLASH = "D03"


def normalize_operation(op: str | None) -> Operation | None:
    """Map 'D1', 'D01', 'D2' ... to an Operation, None for anything else."""
    if op is None:
        return None
    match = OPERATION_PATTERN.fullmatch(op.strip())
    if not match:
        return None
    return Operation(f"D0{match.group(1)}")


@dataclass
class ModalState:
    """Tracks modal state while functions are appended to a document"""

    last_position: dict[str, float] = field(default_factory=lambda: {"X": 0.0, "Y": 0.0})
    current_aperture: str | None = None
    last_was_move: bool = False
    last_operation: Operation | None = None

    interpolation_mode: InterpolationMode = InterpolationMode.LINEAR
    arc_direction: ArcDirection = ArcDirection.CLOCKWISE
    # G74/G75 setting that G02/G03 switch into
    quadrant_mode: InterpolationMode = InterpolationMode.SINGLE_QUADRANT

    @property
    def is_arc(self) -> bool:
        return self.interpolation_mode is not InterpolationMode.LINEAR

    def update_from_code(self, code: str | None) -> None:
        """
        Update interpolation state from a function code

        Args:
            code: G/M code string as written, e.g. 'G02' or 'G2'
        """
        if code is None:
            return

        if code in LINEAR_CODES:
            self.interpolation_mode = InterpolationMode.LINEAR
        elif code in CLOCKWISE_CODES:
            self.interpolation_mode = self.quadrant_mode
            self.arc_direction = ArcDirection.CLOCKWISE
        elif code in COUNTER_CLOCKWISE_CODES:
            self.interpolation_mode = self.quadrant_mode
            self.arc_direction = ArcDirection.COUNTER_CLOCKWISE
        elif code == "G74":
            self.quadrant_mode = InterpolationMode.SINGLE_QUADRANT
            self.interpolation_mode = InterpolationMode.SINGLE_QUADRANT
        elif code == "G75":
            self.quadrant_mode = InterpolationMode.MULTI_QUADRANT
            self.interpolation_mode = InterpolationMode.MULTI_QUADRANT
        else:
            return

        logger.debug(
            "Interpolation now %s (%s) after %s",
            self.interpolation_mode.value,
            self.arc_direction.value,
            code,
        )

    def resolve_position(self, position: dict[str, float]) -> dict[str, float]:
        """Fill axes missing from a decoded position with the last position."""
        resolved = {}
        for axis in ("X", "Y"):
            if axis in position:
                resolved[axis] = position[axis]
            else:
                resolved[axis] = self.last_position.get(axis, 0.0)
        return resolved

    def update_position(self, new_position: dict[str, float]) -> None:
        self.last_position = {"X": new_position["X"], "Y": new_position["Y"]}

    def reset(self) -> None:
        """Reset state to defaults"""
        self.last_position = {"X": 0.0, "Y": 0.0}
        self.current_aperture = None
        self.last_was_move = False
        self.last_operation = None
        self.interpolation_mode = InterpolationMode.LINEAR
        self.arc_direction = ArcDirection.CLOCKWISE
        self.quadrant_mode = InterpolationMode.SINGLE_QUADRANT

    def get_status(self) -> dict:
        """Get current state as dictionary for status reporting"""
        return {
            "last_position": self.last_position.copy(),
            "current_aperture": self.current_aperture,
            "last_was_move": self.last_was_move,
            "last_operation": self.last_operation.value if self.last_operation else None,
            "interpolation_mode": self.interpolation_mode.value,
            "arc_direction": self.arc_direction.value,
        }
