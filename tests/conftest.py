"""
Pytest configuration and shared fixtures for gerbdata tests.

Provides fresh documents and parsers, the standard RS-274X preamble used by
the parser scenarios, and a helper for writing Gerber text to a temp file.
"""

import os
import sys

import pytest

# Add the parent directory to Python path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from gerbdata.gerber.document import Document
from gerbdata.gerber.parser import GerberParser

PREAMBLE = [
    "%FSLAX25Y25*%",
    "%MOIN*%",
    "%ADD10C,0.000070*%",
    "D10*",
]


@pytest.fixture
def document():
    """A Document with strict defaults regardless of the environment."""
    return Document(ignore_invalid_codes=False, ignore_blank_apertures=False, require_operation_code=True)


@pytest.fixture
def parser():
    return GerberParser(ignore_invalid_codes=False, ignore_blank_apertures=False, require_operation_code=True)


@pytest.fixture
def preamble():
    return list(PREAMBLE)


@pytest.fixture
def gerber_file(tmp_path):
    """Write lines to a temp .gbr file and return its path."""

    def _write(lines, name="board.gbr", newline="\n"):
        path = tmp_path / name
        path.write_bytes(newline.join(lines).encode("ascii") + newline.encode("ascii"))
        return path

    return _write
