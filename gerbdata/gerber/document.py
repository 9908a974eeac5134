"""
Gerber Document

Holds everything known about one RS-274X image: format specification, units,
aperture and macro tables, the ordered function log, the modal state and the
bounding box of drawn data.

Functions must be appended in file order; each append is validated and then
interpreted against the modal state left by the previous ones. Public methods
return True (or the requested value) on success and None on failure, with the
message available from ``error`` and the exception from ``last_exception``.
"""

import logging

from gerbdata import config as cfg
from gerbdata.config import TRACE
from gerbdata.utils.errors import (
    ApertureError,
    FunctionValidationError,
    GerberError,
    InvalidFunctionCode,
    InvalidOperationCode,
    MissingOperationCode,
)
from .apertures import Aperture, ApertureTable, MacroTable, validate_code
from .codec import decode
from .format import (
    FormatSpec,
    Units,
    parse_coordinate_mode,
    parse_digits,
    parse_units,
    parse_zero_suppression,
)
from .functions import ApertureSelect, Command, Function, ParamCall
from .geometry import BoundingBox, apply_operation
from .state import ARC_CODES, ModalState, Operation, normalize_operation

logger = logging.getLogger(__name__)

TOOL_SELECT_CODE = "G54"


class Document:
    """An RS-274X image built from a stream of functions"""

    # Function codes accepted without ignore_invalid_codes
    SUPPORTED_CODES = {
        "G01": "Linear interpolation",
        "G1": "Linear interpolation",
        "G02": "Clockwise circular interpolation",
        "G2": "Clockwise circular interpolation",
        "G03": "Counter-clockwise circular interpolation",
        "G3": "Counter-clockwise circular interpolation",
        "G04": "Comment",
        "G4": "Comment",
        "G36": "Region mode on",
        "G37": "Region mode off",
        "G54": "Select aperture (deprecated)",
        "G55": "Prepare for flash (deprecated)",
        "G70": "Inch units (deprecated)",
        "G71": "Millimeter units (deprecated)",
        "G74": "Single quadrant mode",
        "G75": "Multi quadrant mode",
        "G90": "Absolute coordinates (deprecated)",
        "G91": "Incremental coordinates (deprecated)",
        "M00": "Program stop (deprecated)",
        "M01": "Optional stop (deprecated)",
        "M02": "End of file",
    }

    def __init__(
        self,
        ignore_invalid_codes: bool | None = None,
        ignore_blank_apertures: bool | None = None,
        require_operation_code: bool | None = None,
    ):
        """
        Args:
            ignore_invalid_codes: Accept unknown function codes instead of failing
            ignore_blank_apertures: Leave draws with a closed (zero or unknown
                diameter) aperture out of the bounding box
            require_operation_code: Coordinates need an operation code unless
                the function is G02/G03; False accepts them for any function
        """
        self.ignore_invalid_codes = (
            cfg.IGNORE_INVALID_DEFAULT if ignore_invalid_codes is None else bool(ignore_invalid_codes)
        )
        self.ignore_blank_apertures = (
            cfg.IGNORE_BLANK_DEFAULT if ignore_blank_apertures is None else bool(ignore_blank_apertures)
        )
        self.require_operation_code = (
            cfg.REQUIRE_OPCODE_DEFAULT if require_operation_code is None else bool(require_operation_code)
        )

        self._format = FormatSpec()
        self._units = parse_units(cfg.DEFAULT_UNITS)
        self._apertures = ApertureTable()
        self._macros = MacroTable()
        self._functions: list[Function] = []

        self.state = ModalState()
        self.box = BoundingBox()

        self.error: str | None = None
        self.last_exception: GerberError | None = None

    # ----- error channel -----

    def _fail(self, where: str, exc: GerberError):
        self.error = f"[{where}] {exc.original_message}"
        self.last_exception = exc
        logger.debug("%s", self.error)
        return None

    def _warn(self, where: str, exc: GerberError) -> None:
        """Record an error without failing the call."""
        self.error = f"[{where}] {exc.original_message}"
        self.last_exception = exc
        logger.warning("%s", self.error)

    # ----- format / mode -----

    def format(self, zero=None, coordinates=None, integer=None, decimal=None):
        """
        Set or retrieve the format specification

        Called without arguments, returns a copy of the current FormatSpec.
        Otherwise each given field is validated on its own; valid fields are
        applied even if another field in the same call is rejected.

        Args:
            zero: Zero suppression, any word starting with L or T
            coordinates: Coordinate mode, any word starting with A or I
            integer: Integer digits, 0-7
            decimal: Decimal digits, 0-7

        Returns:
            FormatSpec when reading, True when every field was applied,
            None (error set) if any field was rejected
        """
        if zero is None and coordinates is None and integer is None and decimal is None:
            return self._format.copy()

        failure = None
        checks = (
            ("zero_suppression", zero, parse_zero_suppression),
            ("coordinate_mode", coordinates, parse_coordinate_mode),
            ("integer_digits", integer, lambda v: parse_digits(v, "integer")),
            ("decimal_digits", decimal, lambda v: parse_digits(v, "decimal")),
        )
        for attr, value, parse in checks:
            if value is None:
                continue
            try:
                setattr(self._format, attr, parse(value))
            except GerberError as e:
                failure = e
                self._fail("format", e)

        if failure is not None:
            return None
        logger.debug("Format now %s", self._format)
        return True

    def mode(self, units=None):
        """
        Set or get the units for coordinates ('IN' or 'MM')

        Returns:
            Current units string when reading, True when set, None on error
        """
        if units is None:
            return self._units.value
        try:
            self._units = parse_units(units)
        except GerberError as e:
            return self._fail("mode", e)
        return True

    @property
    def units(self) -> Units:
        return self._units

    # ----- apertures / macros -----

    def aperture(self, code, type=None, modifiers=""):
        """
        Define or get an aperture

        Args:
            code: D-code, D10 or above
            type: C, R, O, P or a macro name; omit to read the aperture
            modifiers: Raw modifier string, e.g. '0.0100' or '0.060X0.030'

        Returns:
            When defining: True, or None on error. A circle without a readable
            diameter is still defined (the problem is reported in ``error``).
            When reading: the Aperture, an empty (undefined) Aperture when the
            code is unknown, or None if the code is malformed.
        """
        if type is None:
            try:
                return self._apertures.get(code)
            except GerberError as e:
                return self._fail("aperture", e)

        try:
            aperture, warning = self._apertures.define(code, type, modifiers)
        except GerberError as e:
            return self._fail("aperture", e)
        if warning:
            self.error = f"[aperture] {warning}"
        logger.log(TRACE, "Defined aperture %s type=%s modifiers=%s", code, aperture.type, aperture.modifiers)
        return True

    def apertures(self) -> dict[str, Aperture]:
        return dict(self._apertures.entries)

    def macro(self, name, primitives=None):
        """
        Define or get an aperture macro

        Args:
            name: Macro name
            primitives: List of primitive statements; omit to read

        Returns:
            The primitive list (None if unknown when reading, or on error)
        """
        if primitives is None:
            return self._macros.get(name)
        try:
            return self._macros.define(name, primitives)
        except GerberError as e:
            return self._fail("macro", e)

    def macros(self) -> dict[str, list[str]]:
        return {name: list(prims) for name, prims in self._macros.items()}

    # ----- functions -----

    def _validate_command(self, func, coord, op) -> None:
        if func is not None and not self.ignore_invalid_codes and func not in self.SUPPORTED_CODES:
            raise InvalidFunctionCode(f"Invalid Function Code: {func}")

        if op is not None and normalize_operation(op) is None and func != TOOL_SELECT_CODE:
            raise InvalidOperationCode(f"Invalid Operation Code: {op}")

        if coord and op is None and self.require_operation_code and func not in ARC_CODES:
            raise MissingOperationCode("Operation Code must be provided when Coordinate Data is provided")

    def _select_tool(self, command: Command) -> None:
        """G54Dnn selects aperture nn"""
        if command.func != TOOL_SELECT_CODE or command.op is None:
            return
        try:
            validate_code(command.op)
        except ApertureError:
            return
        if command.op not in self._apertures:
            self._warn("function", ApertureError(f"Invalid/Unknown Aperture Referenced: {command.op}"))
        self.state.current_aperture = command.op

    def _interpret(self, command: Command) -> None:
        """
        Run a command through the codec, modal state and bounding box

        Raises:
            FormatError: if the coordinate data cannot be decoded; nothing is
                changed in that case
        """
        position, offset = decode(command.coord, self._format)

        self.state.update_from_code(command.func)
        self._select_tool(command)

        operation = normalize_operation(command.op)
        if command.coord:
            if command.op is None:
                # omitted op code: reuse the previous operation (arcs draw by default)
                operation = self.state.last_operation
                if operation is None and command.func in ARC_CODES:
                    operation = Operation.DRAW
            resolved = apply_operation(
                self.box,
                self.state,
                self._apertures,
                position,
                offset,
                operation,
                ignore_blank=self.ignore_blank_apertures,
            )
            command.xy_coords = (resolved["X"], resolved["Y"])
        elif operation is not None:
            self.state.last_operation = operation

    def append_command(self, func=None, coord=None, op=None, comment=None):
        """
        Append a command function

        Args:
            func: Function code, e.g. 'G01'
            coord: Coordinate data, e.g. 'X010000Y-2000'
            op: Operation code, D01/D02/D03
            comment: Comment text (G04)

        Returns:
            True on success, None on error
        """
        if func is None and coord is None and op is None and comment is None:
            return True

        try:
            self._validate_command(func, coord, op)
            command = Command(func=func, coord=coord or None, op=op, comment=comment)
            self._interpret(command)
        except GerberError as e:
            return self._fail("function", e)

        self._functions.append(command)
        logger.log(TRACE, "Appended command %s -> %s", command, command.xy_coords)
        return True

    def append_aperture_select(self, code):
        """
        Append an aperture selection

        An unknown or malformed code is reported in ``error`` but the selection
        is still recorded and becomes the current aperture.

        Returns:
            True
        """
        if code not in self._apertures:
            self._warn("function", ApertureError(f"Invalid/Unknown Aperture Referenced: {code}"))
        self.state.current_aperture = code
        self._functions.append(ApertureSelect(code))
        logger.log(TRACE, "Selected aperture %s", code)
        return True

    def append_param(self, raw):
        """
        Append a repeatable parameter call (LP, SR, ...)

        Returns:
            True on success, None if raw is empty
        """
        if not raw:
            return self._fail("function", FunctionValidationError("Parameter call requires a value"))
        self._functions.append(ParamCall(str(raw)))
        return True

    def functions(self) -> list[Function]:
        return list(self._functions)

    def function(self, num: int):
        """Return the num-th function (zero-indexed), None on a bad index."""
        if not isinstance(num, int) or num < 0 or num >= len(self._functions):
            return self._fail("functions", FunctionValidationError(f"Invalid function number {num}"))
        return self._functions[num]

    def function_count(self) -> int:
        return len(self._functions)

    def reinterpret(self):
        """
        Replay the function log from a fresh modal state

        Refreshes every Command's ``xy_coords``, the modal state and the
        bounding box after format, units, apertures or command fields were
        rewritten by a conversion step.

        Returns:
            True on success, None if a command no longer decodes
        """
        self.state.reset()
        self.box.reset()
        for index, func in enumerate(self._functions):
            if isinstance(func, ApertureSelect):
                self.state.current_aperture = func.code
            elif isinstance(func, Command):
                func.xy_coords = None
                try:
                    self._interpret(func)
                except GerberError as e:
                    return self._fail("reinterpret", type(e)(f"function {index}: {e.original_message}"))
        logger.debug("Reinterpreted %d functions", len(self._functions))
        return True

    # ----- geometry -----

    def bounding_box(self) -> tuple[float | None, float | None, float | None, float | None]:
        """(left x, bottom y, right x, top y); all None before anything was drawn"""
        return self.box.as_tuple()

    def width(self) -> float | None:
        return self.box.width

    def height(self) -> float | None:
        return self.box.height

    def get_status(self) -> dict:
        """Summary for reporting"""
        return {
            "format": self._format.as_dict(),
            "mode": self._units.value,
            "apertures": len(self._apertures),
            "macros": len(self._macros),
            "functions": len(self._functions),
            "bounding_box": self.box.as_tuple(),
            "state": self.state.get_status(),
            "error": self.error,
        }
