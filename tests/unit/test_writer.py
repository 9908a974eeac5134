import io

from gerbdata.gerber.document import Document
from gerbdata.gerber.parser import GerberParser
from gerbdata.gerber.writer import Writer, format_macro, render_lines


def _parsed(lines):
    parser = GerberParser(ignore_invalid_codes=False)
    doc = parser.parse(lines)
    assert doc is not None, parser.error
    return doc


def test_render_order():
    doc = _parsed(
        [
            "%FSLAX25Y25*%",
            "%MOIN*%",
            "%AMOC8*",
            "5,1,8,0,0,1.08239X$1,22.5*",
            "%",
            "%ADD10C,0.000070*%",
            "%ADD11OC8,0.05*%",
            "G04 outline*",
            "D10*",
            "%LPD*%",
            "G01X123500Y001250D02*",
            "X020000D01*",
            "M02*",
        ]
    )
    assert render_lines(doc) == [
        "%FSLAX25Y25*%",
        "%MOIN*%",
        "%AMOC8*\n5,1,8,0,0,1.08239X$1,22.5*%",
        "%ADD10C,0.000070*%",
        "%ADD11OC8,0.05*%",
        "G04 outline*",
        "D10*",
        "%LPD*%",
        "G01X123500Y001250D02*",
        "X020000D01*",
        "M02*",
    ]


def test_write_to_handle_leaves_it_open(preamble):
    doc = _parsed(preamble + ["X123500Y001250D02*"])
    buf = io.StringIO()
    assert Writer().write(buf, doc) is True
    assert not buf.closed
    text = buf.getvalue()
    assert text.startswith("%FSLAX25Y25*%\n%MOIN*%\n%ADD10C,0.000070*%\nD10*\n")
    assert text.endswith("X123500Y001250D02*\nM02*\n")


def test_write_to_path_and_read_back(preamble, tmp_path):
    doc = _parsed(preamble + ["X0Y0D02*", "X100000Y50000D01*"])
    path = tmp_path / "out.gbr"
    assert Writer().write(str(path), doc) is True

    again = GerberParser().parse(str(path))
    assert again is not None
    assert [str(f) for f in again.functions()] == [str(f) for f in doc.functions()]
    assert again.bounding_box() == doc.bounding_box()


def test_empty_document():
    assert Writer().to_string(Document()) == "%FSLAX55Y55*%\n%MOIN*%\nM02*\n"


def test_write_errors(tmp_path):
    writer = Writer()
    assert writer.write(None, Document()) is None
    assert "No File path" in writer.error
    assert writer.write(io.StringIO(), "not a document") is None
    assert "No Document" in writer.error
    assert writer.write(str(tmp_path / "missing" / "out.gbr"), Document()) is None
    assert "Cannot open" in writer.error


def test_format_macro_without_primitives():
    assert format_macro("EMPTY", []) == "%AMEMPTY*%"
