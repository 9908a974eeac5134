"""
Coordinate codec for fixed-point Gerber coordinate data.

Coordinate tokens carry no decimal point: ``X123500Y001250`` under a 2.5
format means X=1.235, Y=0.0125. Omitted zeros are restored according to the
format's zero suppression before scaling by the number of decimal digits.
"""

import re

from .format import FormatSpec, ZeroSuppression
from gerbdata.utils.errors import FormatError, GeometryError

POSITION_AXES = ("X", "Y")
OFFSET_AXES = ("I", "J")

AXIS_PATTERN = re.compile(r"([XYIJ])([+-]?)(\d+)")


def split_token(token: str) -> dict[str, tuple[str, str]]:
    """
    Split a coordinate token into axis -> (sign, digits).

    Raises:
        FormatError: on repeated axes or text that is not axis data
    """
    fields: dict[str, tuple[str, str]] = {}
    pos = 0
    token = token.strip()
    while pos < len(token):
        match = AXIS_PATTERN.match(token, pos)
        if not match:
            raise FormatError(f"Invalid coordinate data: {token[pos:]!r} in {token!r}")
        axis, sign, digits = match.groups()
        if axis in fields:
            raise FormatError(f"Axis {axis} given more than once in {token!r}")
        fields[axis] = (sign, digits)
        pos = match.end()
    return fields


def pad_digits(digits: str, fmt: FormatSpec) -> str:
    """Restore suppressed zeros so the field is at least field_length long."""
    missing = fmt.field_length - len(digits)
    if missing <= 0:
        return digits
    if fmt.zero_suppression is ZeroSuppression.LEADING:
        return "0" * missing + digits
    return digits + "0" * missing


def decode_value(sign: str, digits: str, fmt: FormatSpec) -> float:
    value = int(pad_digits(digits, fmt)) / fmt.divisor
    return -value if sign == "-" else value


def decode(token: str | None, fmt: FormatSpec) -> tuple[dict[str, float], dict[str, float]]:
    """
    Decode a coordinate token

    Args:
        token: Compact coordinate string such as ``X-1500Y2000I10J0``
        fmt: Format specification in effect

    Returns:
        Tuple of (position {X?, Y?}, offset {I?, J?}) in document units
    """
    position: dict[str, float] = {}
    offset: dict[str, float] = {}
    if not token:
        return position, offset

    for axis, (sign, digits) in split_token(token).items():
        target = position if axis in POSITION_AXES else offset
        target[axis] = decode_value(sign, digits, fmt)
    return position, offset


def encode(value: float, fmt: FormatSpec) -> str:
    """
    Encode a value into a coordinate field (no axis letter)

    Args:
        value: Value in document units
        fmt: Format specification to encode for

    Returns:
        Signed digit string with zeros suppressed per the format

    Raises:
        GeometryError: if the integer part needs more than integer_digits digits
    """
    scaled = round(abs(value) * fmt.divisor)
    if not scaled:
        return "0"
    digits = str(scaled).rjust(fmt.field_length, "0")
    if len(digits) > fmt.field_length:
        raise GeometryError(
            f"Value {value} does not fit format {fmt.integer_digits}.{fmt.decimal_digits}"
        )

    if fmt.zero_suppression is ZeroSuppression.LEADING:
        digits = digits.lstrip("0")
    else:
        digits = digits.rstrip("0")
    return f"-{digits}" if value < 0 else digits


def encode_token(position: dict[str, float], offset: dict[str, float] | None, fmt: FormatSpec) -> str:
    """Build a coordinate token in X, Y, I, J order."""
    offset = offset or {}
    parts = []
    for axis in POSITION_AXES:
        if axis in position:
            parts.append(f"{axis}{encode(position[axis], fmt)}")
    for axis in OFFSET_AXES:
        if axis in offset:
            parts.append(f"{axis}{encode(offset[axis], fmt)}")
    return "".join(parts)
