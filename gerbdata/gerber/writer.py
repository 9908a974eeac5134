"""
Gerber Writer

Serializes a Document back to RS-274X text: format and mode headers, aperture
macros, aperture definitions, the function log in order, then M02.
"""

import io
import logging
import os

from gerbdata.utils.errors import GerberError, WriterError
from .document import Document
from .functions import ApertureSelect, Command, ParamCall

logger = logging.getLogger(__name__)

END_OF_FILE = "M02*"


def format_header(document: Document) -> list[str]:
    fmt = document.format()
    return [f"%{fmt}*%", f"%MO{document.mode()}*%"]


def format_macro(name: str, primitives: list[str]) -> str:
    """%AMNAME*\\nprim*\\nprim*%"""
    body = "*\n".join(primitives)
    if body:
        return f"%AM{name}*\n{body}*%"
    return f"%AM{name}*%"


def format_aperture(aperture) -> str:
    if aperture.modifiers:
        return f"%AD{aperture.code}{aperture.type},{aperture.modifiers}*%"
    return f"%AD{aperture.code}{aperture.type}*%"


def format_function(func) -> str:
    if isinstance(func, (ApertureSelect, ParamCall, Command)):
        return str(func)
    raise WriterError(f"Unknown function record: {func!r}")


def render_lines(document: Document) -> list[str]:
    """All output lines for a document, without line terminators"""
    if not isinstance(document, Document):
        raise WriterError("No Document provided")

    lines = format_header(document)
    lines.extend(format_macro(name, prims) for name, prims in document.macros().items())
    lines.extend(format_aperture(ap) for ap in document.apertures().values() if ap.defined)
    lines.extend(format_function(func) for func in document.functions())
    lines.append(END_OF_FILE)
    return lines


class Writer:
    """Writes Documents to files or open text handles"""

    def __init__(self):
        self.error: str | None = None
        self.exception: GerberError | None = None

    def _fail(self, exc: GerberError):
        self.exception = exc
        self.error = f"[write] {exc.original_message}"
        logger.error("%s", self.error)
        return None

    def write(self, target, document: Document):
        """
        Write a document

        Args:
            target: Path to create, or an object with a ``write`` method; an
                open handle is written to but not closed
            document: Document to serialize

        Returns:
            True on success, None with ``error`` set on failure
        """
        if target is None:
            return self._fail(WriterError("ERROR: No File path or handle Provided"))

        try:
            text = "\n".join(render_lines(document)) + "\n"
        except GerberError as e:
            return self._fail(e)

        if hasattr(target, "write"):
            target.write(text)
            return True

        try:
            with open(target, "w", encoding="ascii", newline="\n") as f:
                f.write(text)
        except (OSError, UnicodeEncodeError) as e:
            return self._fail(WriterError(f"Cannot open {os.fsdecode(target)} for writing -> {e}"))

        logger.info("Wrote %d functions to %s", document.function_count(), os.fsdecode(target))
        return True

    def to_string(self, document: Document) -> str | None:
        """Render a document to a string, None with ``error`` set on failure"""
        buf = io.StringIO()
        if self.write(buf, document) is None:
            return None
        return buf.getvalue()
