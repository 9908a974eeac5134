"""
Aperture and aperture-macro tables.

Apertures are keyed by their D-code (``D10`` and up; D00-D09 are reserved for
operations). Macros are stored as their primitive statements, unevaluated.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from gerbdata.utils.errors import ApertureError

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"D(\d+)")
TYPE_PATTERN = re.compile(r"[a-z_$][a-z0-9_$]*", re.IGNORECASE)
DIAMETER_PATTERN = re.compile(r"[0-9.]+")

MIN_APERTURE_NUMBER = 10


class ApertureKind(Enum):
    CIRCLE = "C"
    RECTANGLE = "R"
    OBROUND = "O"
    POLYGON = "P"
    MACRO = "MACRO"


def kind_for_type(type_token: str) -> ApertureKind:
    """Standard one-letter types map to their kind, anything else names a macro."""
    for kind in ApertureKind:
        if kind is not ApertureKind.MACRO and kind.value == type_token:
            return kind
    return ApertureKind.MACRO


@dataclass
class Aperture:
    """A defined aperture, or an empty record for an undefined code."""

    code: str
    type: str | None = None
    modifiers: str = ""
    diameter: float | None = None

    @property
    def defined(self) -> bool:
        return self.type is not None

    @property
    def kind(self) -> ApertureKind | None:
        if self.type is None:
            return None
        return kind_for_type(self.type)

    @property
    def macro_name(self) -> str | None:
        return self.type if self.kind is ApertureKind.MACRO else None

    @property
    def is_blank(self) -> bool:
        """Zero or unknown diameter (closed aperture)."""
        return self.diameter is None or self.diameter <= 0.0

    def __bool__(self):
        return self.defined


def validate_code(code) -> int:
    """
    Validate an aperture D-code

    Returns:
        The numeric part of the code

    Raises:
        ApertureError: if the code is malformed or below D10
    """
    match = CODE_PATTERN.fullmatch(str(code)) if code is not None else None
    if not match:
        raise ApertureError(f"Invalid D-Code: {code}")
    number = int(match.group(1))
    if number < MIN_APERTURE_NUMBER:
        raise ApertureError(f"Invalid D-Code: '{code}'")
    return number


def leading_diameter(modifiers: str) -> float | None:
    match = DIAMETER_PATTERN.match(modifiers or "")
    if not match:
        return None
    try:
        return float(match.group(0))
    except ValueError:
        # a run such as "1.2.3" matches the pattern but is not a number
        return None


@dataclass
class ApertureTable:
    """Apertures by code; entries are replaced on redefinition, never removed."""

    entries: dict[str, Aperture] = field(default_factory=dict)

    def define(self, code: str, type_token: str, modifiers: str = "") -> tuple[Aperture, str | None]:
        """
        Define an aperture

        Args:
            code: D-code, e.g. 'D11'
            type_token: C, R, O, P or a macro name
            modifiers: Raw modifier string, e.g. '0.0100' or '0.02X0.04'

        Returns:
            Tuple of (aperture, warning) where warning describes a circle whose
            diameter could not be read; the aperture is stored either way

        Raises:
            ApertureError: bad code or bad type token
        """
        validate_code(code)
        if type_token is None or not TYPE_PATTERN.fullmatch(str(type_token)):
            raise ApertureError(f"Invalid Type: {type_token}")

        modifiers = "" if modifiers is None else str(modifiers)
        aperture = Aperture(code=code, type=str(type_token), modifiers=modifiers)

        warning = None
        if aperture.kind is ApertureKind.CIRCLE:
            aperture.diameter = leading_diameter(modifiers)
            if aperture.diameter is None:
                warning = f"Modifier does not appear to include diameter for circle: {modifiers}"
                logger.warning("[aperture] %s", warning)

        self.entries[code] = aperture
        return aperture, warning

    def get(self, code: str) -> Aperture:
        """Look up a code; undefined codes give an empty record."""
        validate_code(code)
        return self.entries.get(code, Aperture(code=code))

    def __contains__(self, code) -> bool:
        return code in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries.values())


def split_macro_body(body: str) -> tuple[str, list[str]]:
    """
    Split an AM parameter body into name and primitive statements

    The body arrives as ``NAME*prim*prim*...`` where several primitives may
    have been squashed onto one physical line. Comment primitives (code 0)
    and empty segments are dropped.
    """
    segments = [s.strip() for s in body.split("*")]
    name = segments[0] if segments else ""
    primitives = [s for s in segments[1:] if s and not s.startswith("0")]
    return name, primitives


@dataclass
class MacroTable:
    entries: dict[str, list[str]] = field(default_factory=dict)

    def define(self, name: str, primitives: list[str]) -> list[str]:
        if not name or not TYPE_PATTERN.fullmatch(name):
            raise ApertureError(f"Invalid aperture macro name: {name}")
        self.entries[name] = list(primitives)
        return self.entries[name]

    def get(self, name: str) -> list[str] | None:
        return self.entries.get(name)

    def __contains__(self, name) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def items(self):
        return self.entries.items()
