"""
Gerber Parser

Tokenizes RS-274X text line by line and replays it into a Document.
Supports extended parameters (%...%) spanning several physical lines, several
``*``-terminated commands per line, and the deprecated habit of omitting the
operation code on coordinate data.
"""

import logging
import os
import re
from collections.abc import Iterable
from enum import Enum

from gerbdata import config as cfg
from gerbdata.config import TRACE
from gerbdata.utils.errors import ParseError
from .apertures import split_macro_body
from .document import Document
from .state import normalize_operation

logger = logging.getLogger(__name__)


class ParserState(Enum):
    IDLE = "IDLE"
    ACCUMULATING_PARAMETER = "ACCUMULATING_PARAMETER"


class GerberParser:
    """RS-274X parser that builds a Document from lines of text"""

    # Regex patterns for parsing
    BLANK_PATTERN = re.compile(r"\s*\*?\s*")
    PARAM_OPEN_PATTERN = re.compile(r"\s*%([^%]+)")
    PARAM_LINE_PATTERN = re.compile(r"\s*(?:%[^%]*%\s*)+")
    PARAM_BLOCK_PATTERN = re.compile(r"%([^%]*)%")
    COMMAND_PATTERN = re.compile(r"G\d+")
    COMMAND_BODY_PATTERN = re.compile(r"(X[+-]?\d+)?(Y[+-]?\d+)?(I[+-]?\d+)?(J[+-]?\d+)?(D\d+)?")
    OP_ONLY_PATTERN = re.compile(r"D0*\d")
    APERTURE_SELECT_PATTERN = re.compile(r"D(\d{2,})")
    PROGRAM_END_PATTERN = re.compile(r"M0?[02]")
    M_CODE_PATTERN = re.compile(r"M\d+")
    MOVE_PATTERN = re.compile(r"(.*?)(D\d+)")
    FS_MODE_PATTERN = re.compile(r"([LT])([AI])", re.IGNORECASE)
    FS_DIGITS_PATTERN = re.compile(r"([XY])(\d)(\d)")
    MO_PATTERN = re.compile(r"in|mm", re.IGNORECASE)
    AD_PATTERN = re.compile(r"D(\d+)([a-z_$][a-z0-9_$]*)(.*)", re.IGNORECASE | re.DOTALL)

    COMMENT_CODES = ("G04", "G4")

    # Parameters recorded verbatim in the function log
    PASSTHROUGH_PARAMS = {
        "IP": "Image polarity (deprecated)",
        "IN": "Image name (deprecated)",
        "LN": "Level name (deprecated)",
        "OF": "Image offset (deprecated)",
        "SF": "Scale factor (deprecated)",
        "AS": "Axis select (deprecated)",
        "IR": "Image rotation (deprecated)",
        "MI": "Mirror image (deprecated)",
        "TF": "File attribute",
        "TA": "Aperture attribute",
        "TO": "Object attribute",
        "TD": "Delete attribute",
        "LM": "Load mirroring",
        "LR": "Load rotation",
        "LS": "Load scaling",
    }

    def __init__(
        self,
        ignore_invalid_codes: bool | None = None,
        ignore_blank_apertures: bool | None = None,
        require_operation_code: bool | None = None,
    ):
        """
        Args:
            ignore_invalid_codes: Tolerate unknown codes/parameters and bare
                operation codes instead of failing
            ignore_blank_apertures: Passed to the Document
            require_operation_code: Passed to the Document
        """
        self.ignore_invalid_codes = (
            cfg.IGNORE_INVALID_DEFAULT if ignore_invalid_codes is None else bool(ignore_invalid_codes)
        )
        self.ignore_blank_apertures = (
            cfg.IGNORE_BLANK_DEFAULT if ignore_blank_apertures is None else bool(ignore_blank_apertures)
        )
        self.require_operation_code = require_operation_code

        self.error: str | None = None
        self.exception: ParseError | None = None
        self.line_count = 0
        self.document: Document | None = None

        self._state = ParserState.IDLE
        self._buffer = ""
        self.last_op_code: str | None = None
        self.ended = False

        self._param_handlers = {
            "FS": self._param_fs,
            "MO": self._param_mo,
            "AD": self._param_ad,
            "AM": self._param_am,
            "LP": self._param_lp,
            "SR": self._param_sr,
        }

    @property
    def state(self) -> ParserState:
        return self._state

    def _reset(self) -> None:
        self.error = None
        self.exception = None
        self.line_count = 0
        self._state = ParserState.IDLE
        self._buffer = ""
        self.last_op_code = None
        self.ended = False
        self.document = Document(
            ignore_invalid_codes=self.ignore_invalid_codes,
            ignore_blank_apertures=self.ignore_blank_apertures,
            require_operation_code=self.require_operation_code,
        )

    def _fail(self, exc: ParseError):
        self.exception = exc
        self.error = str(exc.original_message) if exc.line is None else f"{exc.original_message} [line {exc.line}]"
        logger.error("%s", self.error)
        return None

    # ----- entry points -----

    def parse(self, data):
        """
        Parse a file or a sequence of lines into a new Document

        Args:
            data: Path of a file to read, or an iterable of lines

        Returns:
            The Document, or None with ``error`` and ``exception`` set
        """
        if data is None:
            return self._fail(ParseError("[parse] ERROR: No Data Provided"))

        if isinstance(data, (str, bytes, os.PathLike)):
            if not os.fspath(data):
                return self._fail(ParseError("[parse] ERROR: No File Name Provided for File Mode"))
            try:
                with open(data, "r", encoding=cfg.FILE_ENCODING) as f:
                    return self.parse_lines(f)
            except OSError as e:
                return self._fail(ParseError(f"[parse] ERROR: Could not open {os.fsdecode(data)} -> {e}"))

        return self.parse_lines(data)

    def parse_text(self, text: str):
        """Parse a whole program held in a string"""
        return self.parse_lines(text.splitlines())

    def parse_lines(self, lines: Iterable[str]):
        """
        Parse lines one at a time, stopping at the first unrecoverable error

        Returns:
            The Document, or None with ``error`` and ``exception`` set
        """
        self._reset()

        for line in lines:
            try:
                self.parse_line(line)
            except ParseError as e:
                e.line = self.line_count
                return self._fail(e)
            if self.ended:
                break

        if self._state is ParserState.ACCUMULATING_PARAMETER:
            return self._fail(ParseError(f"[parse] Unterminated parameter: %{self._buffer}", self.line_count))

        logger.info(
            "Parsed %d lines: %d functions, %d apertures",
            self.line_count,
            self.document.function_count(),
            len(self.document.apertures()),
        )
        return self.document

    # ----- line state machine -----

    def parse_line(self, line: str) -> None:
        """
        Feed one physical line

        Raises:
            ParseError: on any unrecoverable problem in the line
        """
        if self.document is None:
            self._reset()
        self.line_count += 1
        if self.ended:
            return

        line = line.rstrip("\r\n")
        if self.BLANK_PATTERN.fullmatch(line):
            return

        if self._state is ParserState.ACCUMULATING_PARAMETER:
            if not line.rstrip().endswith("%"):
                self._buffer += line.strip()
                return
            body = self._buffer + line.replace("%", "").strip()
            self._state = ParserState.IDLE
            self._buffer = ""
            self._dispatch_param(body)
            return

        match = self.PARAM_OPEN_PATTERN.fullmatch(line)
        if match:
            self._state = ParserState.ACCUMULATING_PARAMETER
            self._buffer = match.group(1).strip()
            return

        if self.PARAM_LINE_PATTERN.fullmatch(line):
            for body in self.PARAM_BLOCK_PATTERN.findall(line):
                self._dispatch_param(body)
            return

        # can have multiple commands on one line
        for token in line.split("*"):
            token = token.strip()
            if not token:
                continue
            logger.log(TRACE, "line %d token %s", self.line_count, token)

            if self.COMMAND_PATTERN.match(token):
                self._parse_command(token)
            elif self.OP_ONLY_PATTERN.fullmatch(token):
                if not self.ignore_invalid_codes:
                    raise ParseError(f"[parse] Cannot Have OpCode Alone on Line: {token}")
                logger.warning("Line %d: operation code alone on line: %s", self.line_count, token)
                self._parse_move(token)
            elif (code := self._aperture_code(token)) is not None:
                self._check(self.document.append_aperture_select(code))
            elif self.PROGRAM_END_PATTERN.fullmatch(token):
                self.ended = True
                return
            elif self.M_CODE_PATTERN.fullmatch(token):
                self._check(self.document.append_command(func=token))
            else:
                self._parse_move(token)

    def _check(self, result) -> None:
        """Turn a failed Document call into a ParseError carrying its message"""
        if result is None:
            cause = self.document.last_exception
            raise ParseError(self.document.error or "[parse] Unknown error") from cause

    def _aperture_code(self, token: str) -> str | None:
        """Dnn with nn >= 10, leading zeros dropped (D010 -> D10)"""
        match = self.APERTURE_SELECT_PATTERN.fullmatch(token)
        if not match or int(match.group(1)) < 10:
            return None
        return f"D{int(match.group(1))}"

    # ----- commands -----

    def _parse_command(self, token: str) -> None:
        match = self.COMMAND_PATTERN.match(token)
        com = match.group(0)
        rest = token[match.end():]

        # comments are taken verbatim
        if com in self.COMMENT_CODES:
            self._check(self.document.append_command(func=com, comment=rest))
            return

        rest = rest.strip()
        if not rest:
            self._check(self.document.append_command(func=com))
            return

        body = self.COMMAND_BODY_PATTERN.fullmatch(rest)
        if not body:
            raise ParseError(f"[parse] Invalid instruction following command code {com}: {rest}")

        x, y, i, j, opcode = body.groups()
        coord = "".join(part for part in (x, y, i, j) if part) or None

        if opcode is None:
            # arcs in particular leave the D code off; reuse the last one
            op = self.last_op_code if coord else None
        else:
            op = opcode
            if normalize_operation(opcode) is not None:
                self.last_op_code = opcode
            elif com == "G54":
                op = self._aperture_code(opcode) or opcode

        self._check(self.document.append_command(func=com, coord=coord, op=op))

    def _parse_move(self, token: str) -> None:
        coord = None
        match = self.MOVE_PATTERN.fullmatch(token)
        if match and match.group(1):
            coord, op = match.group(1), match.group(2)
            self.last_op_code = op
        elif self.OP_ONLY_PATTERN.fullmatch(token):
            op = token
            self.last_op_code = op
        elif self.last_op_code:
            # re-using the previous D code is deprecated but still widely written
            op = self.last_op_code
            coord = token
        else:
            raise ParseError(f"[parse] Invalid move instruction: {token}")

        self._check(self.document.append_command(coord=coord, op=op))

    # ----- parameters -----

    def _dispatch_param(self, body: str) -> None:
        body = body.strip()
        if not body:
            return

        code, data = body[:2], body[2:]
        handler = self._param_handlers.get(code)
        if handler is not None:
            handler(data)
        elif code in self.PASSTHROUGH_PARAMS:
            self._check(self.document.append_param(body.rstrip("*")))
        elif self.ignore_invalid_codes:
            logger.warning("Line %d: ignoring unknown parameter %s", self.line_count, body)
        else:
            raise ParseError(f"[parse] Unknown Parameter: {body}")

    @staticmethod
    def _first_statement(data: str) -> str:
        # get rid of anything trailing the first statement
        return data.split("*", 1)[0].strip()

    def _param_fs(self, data: str) -> None:
        data = self._first_statement(data)

        mode = self.FS_MODE_PATTERN.match(data)
        if not mode:
            raise ParseError(f"[parse] Invalid FS Parameter Value: {data}")

        digits = {axis: (int(i), int(d)) for axis, i, d in self.FS_DIGITS_PATTERN.findall(data)}
        if "X" not in digits:
            raise ParseError(f"[parse] Invalid FS Parameter Value: {data}")
        if "Y" in digits and digits["Y"] != digits["X"]:
            # X and Y must share one format; X wins
            logger.warning("Line %d: FS Y format %s differs from X %s", self.line_count, digits["Y"], digits["X"])

        integer, decimal = digits["X"]
        self._check(
            self.document.format(
                zero=mode.group(1).upper(),
                coordinates=mode.group(2).upper(),
                integer=integer,
                decimal=decimal,
            )
        )

    def _param_mo(self, data: str) -> None:
        data = self._first_statement(data)
        if not self.MO_PATTERN.search(data):
            raise ParseError(f"[parse] Invalid MO Parameter Value: {data}")
        self._check(self.document.mode(data.upper()))

    def _param_ad(self, data: str) -> None:
        data = self._first_statement(data)
        match = self.AD_PATTERN.fullmatch(data)
        if not match:
            raise ParseError(f"[parse] Invalid AD Parameter Value: {data}")

        number, shape, modifiers = match.groups()
        if int(number) < 10:
            raise ParseError(f"[parse] Invalid User-Defined Aperture Number: {number}, From: {data}")
        if modifiers.startswith(","):
            modifiers = modifiers[1:]

        self._check(self.document.aperture(f"D{int(number)}", shape, modifiers))

    def _param_am(self, data: str) -> None:
        name, primitives = split_macro_body(data)
        if not name:
            raise ParseError(f"[_paramAM] invalid aperture macro definition: {data}")
        self._check(self.document.macro(name, primitives))

    def _param_lp(self, data: str) -> None:
        data = self._first_statement(data)
        if data not in ("D", "C"):
            raise ParseError(f"[parse] Invalid LP Parameter Value: {data}")
        # added as a function, as polarity changes are repeated often
        self._check(self.document.append_param(f"LP{data}"))

    def _param_sr(self, data: str) -> None:
        data = self._first_statement(data)
        self._check(self.document.append_param(f"SR{data}"))


def load(source, **kwargs) -> Document:
    """
    Parse a file path or an iterable of lines

    Raises:
        ParseError: with the line number of the first unrecoverable error
    """
    parser = GerberParser(**kwargs)
    document = parser.parse(source)
    if document is None:
        raise parser.exception
    return document


def loads(text: str, **kwargs) -> Document:
    """Parse program text held in a string, raising ParseError on failure"""
    parser = GerberParser(**kwargs)
    document = parser.parse_text(text)
    if document is None:
        raise parser.exception
    return document
