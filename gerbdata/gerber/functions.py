"""
Function records held in a document's ordered log.

A function is exactly one of: an aperture selection, a repeatable parameter
call (LP, SR, ...) or a command carrying any of function code, coordinate
data, operation code and comment.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ApertureSelect:
    """Dnn (nn >= 10) - select the aperture for following operations"""

    code: str

    def __str__(self):
        return f"{self.code}*"


@dataclass(frozen=True)
class ParamCall:
    """A parameter that may be repeated within the command stream"""

    raw: str

    def __str__(self):
        return f"%{self.raw}*%"


@dataclass
class Command:
    """G/M code, coordinate data and operation code

    ``func``, ``coord`` and ``op`` are the text as issued. ``xy_coords`` is the
    resolved position computed when the command was interpreted; it is
    refreshed by ``Document.reinterpret()`` after an external rewrite of
    ``coord`` or ``op``.
    """

    func: str | None = None
    coord: str | None = None
    op: str | None = None
    comment: str | None = None
    xy_coords: tuple[float, float] | None = None

    @property
    def has_coordinates(self) -> bool:
        return bool(self.coord)

    def __str__(self):
        if self.comment is not None and self.func in ("G04", "G4"):
            return f"{self.func}{self.comment}*"
        return f"{self.func or ''}{self.coord or ''}{self.op or ''}*"


Function = ApertureSelect | ParamCall | Command
