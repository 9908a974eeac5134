"""
gerbdata Python Package

Reads, inspects and writes RS-274X (Gerber) photoplotter files.

Key components:
- Document: Format, units, apertures, function log and bounding box
- GerberParser: Builds a Document from a file or lines of text
- Writer: Serializes a Document back to RS-274X
- load / loads: Parse a file or string, raising ParseError on failure
"""

from ._version import __version__
from .gerber import Document, GerberParser, Writer, load, loads
from .utils.errors import GerberError, ParseError

__all__ = [
    "__version__",
    "Document",
    "GerberParser",
    "Writer",
    "load",
    "loads",
    "GerberError",
    "ParseError",
]
