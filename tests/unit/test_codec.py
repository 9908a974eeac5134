import pytest

from gerbdata.gerber.codec import decode, encode, encode_token, pad_digits, split_token
from gerbdata.gerber.format import CoordinateMode, FormatSpec, ZeroSuppression
from gerbdata.utils.errors import FormatError, GeometryError


def _fmt(zero=ZeroSuppression.LEADING, integer=2, decimal=5):
    return FormatSpec(zero, CoordinateMode.ABSOLUTE, integer, decimal)


def test_decode_leading_zero_suppression():
    position, offset = decode("X123500Y001250", _fmt())
    assert position == {"X": pytest.approx(1.235), "Y": pytest.approx(0.0125)}
    assert offset == {}


def test_decode_trailing_zero_suppression():
    # trailing zeros omitted: "15" under 2.5 is 1500000 -> 15.0
    position, _ = decode("X15Y-01", _fmt(ZeroSuppression.TRAILING))
    assert position["X"] == pytest.approx(15.0)
    assert position["Y"] == pytest.approx(-1.0)


def test_decode_offsets_and_signs():
    position, offset = decode("X-1500Y+2000I10J0", _fmt())
    assert position == {"X": pytest.approx(-0.015), "Y": pytest.approx(0.02)}
    assert offset == {"I": pytest.approx(0.0001), "J": 0.0}


def test_decode_partial_and_empty():
    assert decode("Y500", _fmt()) == ({"Y": pytest.approx(0.005)}, {})
    assert decode("", _fmt()) == ({}, {})
    assert decode(None, _fmt()) == ({}, {})


def test_decode_longer_than_field_is_not_truncated():
    position, _ = decode("X123456789", _fmt())
    assert position["X"] == pytest.approx(1234.56789)


@pytest.mark.parametrize("token", ["X10X20", "X10Z5", "X1.5", "hello"])
def test_decode_rejects_malformed(token):
    with pytest.raises(FormatError):
        decode(token, _fmt())


def test_split_token_order_free():
    assert split_token("J1I2Y3X4") == {"J": ("", "1"), "I": ("", "2"), "Y": ("", "3"), "X": ("", "4")}


def test_pad_digits():
    assert pad_digits("15", _fmt()) == "0000015"
    assert pad_digits("15", _fmt(ZeroSuppression.TRAILING)) == "1500000"
    assert pad_digits("123456789", _fmt()) == "123456789"


def test_encode_suppresses_zeros():
    assert encode(1.235, _fmt()) == "123500"
    assert encode(1.235, _fmt(ZeroSuppression.TRAILING)) == "01235"
    assert encode(-0.0125, _fmt()) == "-1250"
    assert encode(0.0, _fmt()) == "0"


def test_encode_overflow_raises():
    with pytest.raises(GeometryError):
        encode(100.0, _fmt(integer=2))
    with pytest.raises(GeometryError):
        encode(1.0, _fmt(integer=0, decimal=0))


def test_encode_token_axis_order():
    token = encode_token({"Y": 0.5, "X": 1.0}, {"J": -0.25, "I": 0.0}, _fmt())
    assert token == "X100000Y50000I0J-25000"


@pytest.mark.parametrize("zero", [ZeroSuppression.LEADING, ZeroSuppression.TRAILING])
@pytest.mark.parametrize("integer", range(8))
@pytest.mark.parametrize("decimal", range(8))
def test_encoded_value_decodes_within_resolution(zero, integer, decimal):
    fmt = _fmt(zero, integer, decimal)
    limit = 10 ** integer
    values = [0.0, 0.75 * limit - 0.3, -(0.5 * limit), 1.0 / 3.0 if integer else 0.123456789]
    for value in values:
        token = "X" + encode(value, fmt)
        decoded, _ = decode(token, fmt)
        assert decoded["X"] == pytest.approx(value, abs=10 ** -decimal)
