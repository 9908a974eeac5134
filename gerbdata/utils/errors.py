"""
Exception types for the gerbdata decode/interpret pipeline.
Keep this focused and non-redundant; prefer built-ins where appropriate.
"""


class GerberError(RuntimeError):
    """Base class for all document, parser and writer failures."""

    label = "Gerber Error"

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"{self.label}: {message}")

    def __str__(self):
        return f"{self.label}: {self.original_message}"


class FormatError(GerberError):
    """Bad digit counts, zero/coordinate tokens or coordinate data."""

    label = "Format Error"


class ModeError(GerberError):
    """Unknown units token."""

    label = "Mode Error"


class ApertureError(GerberError):
    """Bad aperture code, bad type token or unresolvable selection."""

    label = "Aperture Error"


class FunctionValidationError(GerberError):
    """A function record failed validation before being appended."""

    label = "Function Error"


class InvalidFunctionCode(FunctionValidationError):
    pass


class InvalidOperationCode(FunctionValidationError):
    pass


class MissingOperationCode(FunctionValidationError):
    pass


class ParseError(GerberError):
    """Malformed line, unterminated parameter or unrecoverable token."""

    label = "Parse Error"

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)

    def __str__(self):
        if self.line is None:
            return f"{self.label}: {self.original_message}"
        return f"{self.label}: {self.original_message} [line {self.line}]"


class GeometryError(GerberError):
    """Coordinate value does not fit the configured field width."""

    label = "Geometry Error"


class WriterError(GerberError):
    """Serialization target or source document is unusable."""

    label = "Writer Error"
