from gerbdata.gerber.state import (
    ArcDirection,
    InterpolationMode,
    ModalState,
    Operation,
    normalize_operation,
)
from gerbdata.utils.errors import ParseError


def test_normalize_operation():
    assert normalize_operation("D1") is Operation.DRAW
    assert normalize_operation("D02") is Operation.MOVE
    assert normalize_operation(" D03 ") is Operation.FLASH
    assert normalize_operation("D04") is None
    assert normalize_operation("D10") is None
    assert normalize_operation(None) is None


def test_interpolation_codes():
    state = ModalState()
    assert state.interpolation_mode is InterpolationMode.LINEAR
    assert not state.is_arc

    state.update_from_code("G02")
    assert state.interpolation_mode is InterpolationMode.SINGLE_QUADRANT
    assert state.arc_direction is ArcDirection.CLOCKWISE

    state.update_from_code("G75")
    state.update_from_code("G1")
    assert state.interpolation_mode is InterpolationMode.LINEAR

    state.update_from_code("G3")
    assert state.interpolation_mode is InterpolationMode.MULTI_QUADRANT
    assert state.arc_direction is ArcDirection.COUNTER_CLOCKWISE
    assert state.is_arc

    state.update_from_code("G04")
    assert state.interpolation_mode is InterpolationMode.MULTI_QUADRANT


def test_resolve_position_fills_missing_axes():
    state = ModalState()
    assert state.resolve_position({"Y": 2.0}) == {"X": 0.0, "Y": 2.0}
    state.update_position({"X": 1.0, "Y": 2.0})
    assert state.resolve_position({"X": 5.0}) == {"X": 5.0, "Y": 2.0}


def test_reset():
    state = ModalState()
    state.update_from_code("G75")
    state.current_aperture = "D10"
    state.last_was_move = True
    state.reset()
    assert state.get_status() == {
        "last_position": {"X": 0.0, "Y": 0.0},
        "current_aperture": None,
        "last_was_move": False,
        "last_operation": None,
        "interpolation_mode": "LINEAR",
        "arc_direction": "CW",
    }
    assert state.quadrant_mode is InterpolationMode.SINGLE_QUADRANT


def test_parse_error_message_carries_line():
    err = ParseError("[parse] Invalid move instruction: X1", line=7)
    assert err.original_message == "[parse] Invalid move instruction: X1"
    assert str(err) == "Parse Error: [parse] Invalid move instruction: X1 [line 7]"
    assert str(ParseError("oops")) == "Parse Error: oops"
