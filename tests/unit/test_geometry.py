import numpy as np
import pytest

from gerbdata.gerber.apertures import ApertureTable
from gerbdata.gerber.geometry import BoundingBox, apply_operation, arc_points
from gerbdata.gerber.state import ArcDirection, InterpolationMode, ModalState, Operation


def _points(arr):
    return {(round(float(x), 9), round(float(y), 9)) for x, y in arr}


def test_bounding_box_extend():
    box = BoundingBox()
    assert box.empty
    assert box.width is None
    box.extend(1.0, 2.0)
    box.extend(-1.0, 5.0)
    assert box.as_tuple() == (-1.0, 2.0, 1.0, 5.0)
    assert box.width == 2.0
    assert box.height == 3.0
    box.reset()
    assert box.as_tuple() == (None, None, None, None)


def test_bounding_box_extend_points():
    box = BoundingBox()
    box.extend_points(np.array([[0.0, 1.0], [2.0, -3.0], [1.0, 4.0]]))
    assert box.as_tuple() == (0.0, -3.0, 2.0, 4.0)
    box.extend_points(np.empty((0, 2)))
    assert box.as_tuple() == (0.0, -3.0, 2.0, 4.0)


def test_full_circle_covers_all_extremes():
    start = {"X": 1.0, "Y": 0.0}
    points = arc_points(start, dict(start), {"I": -1.0, "J": 0.0}, ArcDirection.COUNTER_CLOCKWISE)
    assert _points(points) == {(1.0, 0.0), (0.0, 1.0), (-1.0, 0.0), (0.0, -1.0)}


def test_ccw_quarter_arc_includes_no_extra_extreme():
    # (1,0) -> (0,1) around the origin, counter-clockwise
    points = arc_points({"X": 1.0, "Y": 0.0}, {"X": 0.0, "Y": 1.0}, {"I": -1.0, "J": 0.0}, ArcDirection.COUNTER_CLOCKWISE)
    assert _points(points) == {(1.0, 0.0), (0.0, 1.0)}


def test_cw_three_quarter_arc_passes_three_extremes():
    # (1,0) -> (0,1) the long way round, clockwise
    points = arc_points({"X": 1.0, "Y": 0.0}, {"X": 0.0, "Y": 1.0}, {"I": -1.0, "J": 0.0}, ArcDirection.CLOCKWISE)
    assert _points(points) == {(1.0, 0.0), (0.0, 1.0), (0.0, -1.0), (-1.0, 0.0)}


def test_ccw_half_arc_passes_top():
    points = arc_points({"X": 2.0, "Y": 1.0}, {"X": 0.0, "Y": 1.0}, {"I": -1.0, "J": 0.0}, ArcDirection.COUNTER_CLOCKWISE)
    assert _points(points) == {(2.0, 1.0), (0.0, 1.0), (1.0, 2.0)}


def _state(mode=InterpolationMode.LINEAR, direction=ArcDirection.CLOCKWISE):
    state = ModalState()
    state.interpolation_mode = mode
    state.arc_direction = direction
    return state


def test_move_does_not_extend_but_next_draw_includes_start():
    box, state, table = BoundingBox(), _state(), ApertureTable()
    apply_operation(box, state, table, {"X": 5.0, "Y": 5.0}, {}, Operation.MOVE)
    assert box.empty
    assert state.last_was_move
    apply_operation(box, state, table, {"X": 3.0, "Y": 6.0}, {}, Operation.DRAW)
    assert box.as_tuple() == (3.0, 5.0, 5.0, 6.0)
    assert not state.last_was_move
    assert state.last_position == {"X": 3.0, "Y": 6.0}


def test_multi_quadrant_full_circle_draw():
    box, state, table = BoundingBox(), _state(InterpolationMode.MULTI_QUADRANT), ApertureTable()
    apply_operation(box, state, table, {"X": 1.0, "Y": 0.0}, {}, Operation.MOVE)
    apply_operation(box, state, table, {"X": 1.0, "Y": 0.0}, {"I": -1.0, "J": 0.0}, Operation.DRAW)
    assert box.as_tuple() == pytest.approx((-1.0, -1.0, 1.0, 1.0))


def test_single_quadrant_zero_length_arc_is_ignored():
    box, state, table = BoundingBox(), _state(InterpolationMode.SINGLE_QUADRANT), ApertureTable()
    apply_operation(box, state, table, {"X": 0.0, "Y": 0.0}, {"I": 1.0, "J": 0.0}, Operation.DRAW)
    assert box.empty


def test_single_quadrant_arc_uses_endpoint_only():
    box, state, table = BoundingBox(), _state(InterpolationMode.SINGLE_QUADRANT), ApertureTable()
    apply_operation(box, state, table, {"X": 1.0, "Y": 1.0}, {"I": 0.0, "J": 1.0}, Operation.DRAW)
    assert box.as_tuple() == (1.0, 1.0, 1.0, 1.0)


def test_linear_offsets_fold_into_position():
    box, state, table = BoundingBox(), _state(), ApertureTable()
    resolved = apply_operation(box, state, table, {"X": 1.0, "Y": 1.0}, {"I": 0.5, "J": -0.25}, Operation.FLASH)
    assert resolved == {"X": 1.5, "Y": 0.75}
    assert state.last_position == {"X": 1.5, "Y": 0.75}
    assert box.as_tuple() == (1.5, 0.75, 1.5, 0.75)


def test_ignore_blank_skips_closed_aperture_draws():
    table = ApertureTable()
    table.define("D10", "C", "0")
    table.define("D11", "C", "0.01")

    box, state = BoundingBox(), _state()
    state.current_aperture = "D10"
    apply_operation(box, state, table, {"X": 2.0, "Y": 2.0}, {}, Operation.DRAW, ignore_blank=True)
    assert box.empty
    assert state.last_position == {"X": 2.0, "Y": 2.0}

    state.current_aperture = "D11"
    apply_operation(box, state, table, {"X": 4.0, "Y": 2.0}, {}, Operation.DRAW, ignore_blank=True)
    assert box.as_tuple() == (4.0, 2.0, 4.0, 2.0)


def test_blank_draws_count_without_ignore_blank():
    table = ApertureTable()
    table.define("D10", "C", "0")
    box, state = BoundingBox(), _state()
    state.current_aperture = "D10"
    apply_operation(box, state, table, {"X": 2.0, "Y": 2.0}, {}, Operation.DRAW)
    assert box.as_tuple() == (2.0, 2.0, 2.0, 2.0)
