"""
Bounding box tracking for interpreted Gerber operations.

Draws and flashes grow a running extent; moves do not. Multi-quadrant arcs
contribute their axis-aligned extremes when the sweep passes them, which gives
a conservative box without sampling the arc.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from gerbdata.config import TRACE
from .apertures import ApertureTable
from .state import ArcDirection, InterpolationMode, ModalState, Operation

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

# Axis-aligned extremes of a unit circle: right, top, left, bottom
_CARDINAL_ANGLES = np.array([0.0, 0.5 * math.pi, math.pi, 1.5 * math.pi])
_CARDINAL_UNIT = np.array([[1.0, 0.0], [0.0, 1.0], [-1.0, 0.0], [0.0, -1.0]])


@dataclass
class BoundingBox:
    """Running extent; bounds stay None until the first point arrives."""

    lx: float | None = None
    rx: float | None = None
    by: float | None = None
    ty: float | None = None

    @property
    def empty(self) -> bool:
        return self.lx is None

    def extend(self, x: float, y: float) -> None:
        x = float(x)
        y = float(y)
        self.lx = x if self.lx is None else min(self.lx, x)
        self.rx = x if self.rx is None else max(self.rx, x)
        self.by = y if self.by is None else min(self.by, y)
        self.ty = y if self.ty is None else max(self.ty, y)

    def extend_points(self, points: np.ndarray) -> None:
        """Extend by an (N, 2) array of x, y points."""
        if len(points) == 0:
            return
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        self.extend(lo[0], lo[1])
        self.extend(hi[0], hi[1])

    def as_tuple(self) -> tuple[float | None, float | None, float | None, float | None]:
        """(left x, bottom y, right x, top y)"""
        return (self.lx, self.by, self.rx, self.ty)

    @property
    def width(self) -> float | None:
        if self.empty:
            return None
        return self.rx - self.lx

    @property
    def height(self) -> float | None:
        if self.empty:
            return None
        return self.ty - self.by

    def reset(self) -> None:
        self.lx = self.rx = self.by = self.ty = None


def arc_points(
    start: dict[str, float],
    end: dict[str, float],
    offset: dict[str, float],
    direction: ArcDirection,
) -> np.ndarray:
    """
    Candidate points bounding a multi-quadrant arc

    Args:
        start: Arc start {X, Y}
        end: Arc end {X, Y}
        offset: Centre offset from start {I?, J?}
        direction: Sweep direction

    Returns:
        (N, 2) array: start, end (unless a full circle) and every axis-aligned
        extreme of the circle that lies inside the sweep
    """
    s = np.array([start["X"], start["Y"]], dtype=float)
    e = np.array([end["X"], end["Y"]], dtype=float)
    off = np.array([offset.get("I", 0.0), offset.get("J", 0.0)], dtype=float)
    center = s + off
    radius = float(np.hypot(off[0], off[1]))
    extremes = center + radius * _CARDINAL_UNIT

    if np.array_equal(s, e):
        # full circle
        return np.vstack([s, extremes])

    a_start = math.atan2(s[1] - center[1], s[0] - center[0])
    a_end = math.atan2(e[1] - center[1], e[0] - center[0])
    if direction is ArcDirection.COUNTER_CLOCKWISE:
        sweep = (a_end - a_start) % TWO_PI
        rel = np.mod(_CARDINAL_ANGLES - a_start, TWO_PI)
    else:
        sweep = (a_start - a_end) % TWO_PI
        rel = np.mod(a_start - _CARDINAL_ANGLES, TWO_PI)

    return np.vstack([s, e, extremes[rel <= sweep]])


def is_blank_aperture(state: ModalState, apertures: ApertureTable) -> bool:
    code = state.current_aperture
    if code is None or code not in apertures:
        return True
    return apertures.entries[code].is_blank


def apply_operation(
    box: BoundingBox,
    state: ModalState,
    apertures: ApertureTable,
    position: dict[str, float],
    offset: dict[str, float],
    operation: Operation | None,
    ignore_blank: bool = False,
) -> dict[str, float]:
    """
    Apply one decoded operation to the bounding box and modal state

    Args:
        box: Bounding box to extend
        state: Modal state; last_position, last_was_move and last_operation
            are updated in place
        apertures: Aperture table used for blank-aperture detection
        position: Decoded {X?, Y?}; missing axes are taken from the state
        offset: Decoded {I?, J?}
        operation: D01/D02/D03; None is treated like a flash
        ignore_blank: Skip draws made with a closed aperture

    Returns:
        The resolved {X, Y} position now held in state.last_position
    """
    resolved = state.resolve_position(position)

    if state.interpolation_mode is InterpolationMode.LINEAR:
        # offsets act as a displacement for linear moves
        resolved["X"] += offset.get("I", 0.0)
        resolved["Y"] += offset.get("J", 0.0)

    start = state.last_position

    if operation is Operation.MOVE:
        state.last_was_move = True
    elif operation is Operation.DRAW:
        if state.last_was_move:
            box.extend(start["X"], start["Y"])
            state.last_was_move = False

        if ignore_blank and is_blank_aperture(state, apertures):
            logger.log(TRACE, "Skipping blank draw with aperture %s", state.current_aperture)
        elif state.interpolation_mode is InterpolationMode.MULTI_QUADRANT:
            box.extend_points(arc_points(start, resolved, offset, state.arc_direction))
        elif state.interpolation_mode is InterpolationMode.SINGLE_QUADRANT:
            if resolved != start:
                box.extend(resolved["X"], resolved["Y"])
            else:
                logger.debug("Ignoring zero-length single-quadrant arc at %s", resolved)
        else:
            box.extend(resolved["X"], resolved["Y"])
    else:
        box.extend(resolved["X"], resolved["Y"])

    state.update_position(resolved)
    if operation is not None:
        state.last_operation = operation
    return resolved
