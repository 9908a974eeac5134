"""
RS-274X (Gerber) implementation for gerbdata

Decodes Gerber command streams into a Document holding format, units,
apertures, macros, the ordered function log and the bounding box of drawn
data, and writes Documents back out.

Main components:
- format.py: Format specification (FS) and units (MO)
- apertures.py: Aperture and aperture macro tables
- codec.py: Fixed-point coordinate decoding and encoding
- state.py: Modal state tracking across commands
- geometry.py: Bounding box and arc extremes
- functions.py: Function records held in the log
- document.py: Function sequencer and document model
- parser.py: Line-oriented tokenizer
- writer.py: RS-274X serializer
"""

from .apertures import Aperture, ApertureKind
from .document import Document
from .format import CoordinateMode, FormatSpec, Units, ZeroSuppression
from .functions import ApertureSelect, Command, Function, ParamCall
from .geometry import BoundingBox
from .parser import GerberParser, ParserState, load, loads
from .state import InterpolationMode, ModalState, Operation
from .writer import Writer

__all__ = [
    "Aperture",
    "ApertureKind",
    "ApertureSelect",
    "BoundingBox",
    "Command",
    "CoordinateMode",
    "Document",
    "FormatSpec",
    "Function",
    "GerberParser",
    "InterpolationMode",
    "ModalState",
    "Operation",
    "ParamCall",
    "ParserState",
    "Units",
    "Writer",
    "ZeroSuppression",
    "load",
    "loads",
]
