"""
Format specification and units for Gerber documents.

The FS parameter fixes how many integer and decimal digits every coordinate
field carries and which side of the field has its zeros omitted. RS-274X
requires X and Y to share one format, so a single pair of digit counts is kept
and used for X, Y, I and J alike.
"""

from dataclasses import dataclass
from enum import Enum

from gerbdata import config as cfg
from gerbdata.utils.errors import FormatError, ModeError


class ZeroSuppression(Enum):
    """Which zeros are omitted from coordinate fields."""
    LEADING = "L"
    TRAILING = "T"


class CoordinateMode(Enum):
    """Absolute or incremental coordinates (incremental is accepted, not interpreted)."""
    ABSOLUTE = "A"
    INCREMENTAL = "I"


class Units(Enum):
    INCH = "IN"
    MILLIMETER = "MM"


def _prefix_choice(enum_cls, value, what: str):
    """Resolve 'L', 'Lead', 'leading' ... to an enum member by first letter."""
    if isinstance(value, enum_cls):
        return value
    s = str(value).strip() if value is not None else ""
    if s:
        first = s[0].upper()
        for member in enum_cls:
            if member.value == first:
                return member
    raise FormatError(f"Invalid {what} value: {value}")


def parse_zero_suppression(value) -> ZeroSuppression:
    return _prefix_choice(ZeroSuppression, value, "zero")


def parse_coordinate_mode(value) -> CoordinateMode:
    return _prefix_choice(CoordinateMode, value, "coordinates")


def parse_digits(value, what: str) -> int:
    """Validate a digit count against [0, MAX_FORMAT_DIGITS]."""
    if isinstance(value, bool):
        raise FormatError(f"Invalid format spec for {what} : {value}")
    try:
        digits = int(value)
    except (TypeError, ValueError):
        raise FormatError(f"Invalid format spec for {what} : {value}") from None
    if digits != value and str(digits) != str(value).strip():
        raise FormatError(f"Invalid format spec for {what} : {value}")
    if digits < 0 or digits > cfg.MAX_FORMAT_DIGITS:
        raise FormatError(f"Invalid format spec for {what} : {value}")
    return digits


def parse_units(value) -> Units:
    """Units accept exactly 'IN' or 'MM'."""
    if isinstance(value, Units):
        return value
    for member in Units:
        if value == member.value:
            return member
    raise ModeError(f"Invalid Mode: {value}")


@dataclass
class FormatSpec:
    """Coordinate format shared by every axis of a document."""

    zero_suppression: ZeroSuppression = ZeroSuppression.LEADING
    coordinate_mode: CoordinateMode = CoordinateMode.ABSOLUTE
    integer_digits: int = cfg.DEFAULT_INTEGER_DIGITS
    decimal_digits: int = cfg.DEFAULT_DECIMAL_DIGITS

    @property
    def field_length(self) -> int:
        return self.integer_digits + self.decimal_digits

    @property
    def divisor(self) -> int:
        return 10 ** self.decimal_digits

    @property
    def zero(self) -> str:
        return self.zero_suppression.value

    @property
    def coordinates(self) -> str:
        return self.coordinate_mode.value

    def copy(self) -> "FormatSpec":
        return FormatSpec(
            self.zero_suppression,
            self.coordinate_mode,
            self.integer_digits,
            self.decimal_digits,
        )

    def as_dict(self) -> dict:
        return {
            "zero": self.zero,
            "coordinates": self.coordinates,
            "format": {"integer": self.integer_digits, "decimal": self.decimal_digits},
        }

    def __str__(self):
        digits = f"{self.integer_digits}{self.decimal_digits}"
        return f"FS{self.zero}{self.coordinates}X{digits}Y{digits}"
