from __future__ import annotations

import struct

import pytest

from oas2router.convert import EVALUATES_AS_TRUE, convert_parameter, convert_primitive
from oas2router.errors import (
    ArityError,
    ConversionError,
    InvalidValueError,
    UnknownTypeError,
    UnsupportedFormatError,
    UnsupportedTypeError,
)


@pytest.mark.parametrize(
    "value,type_,format_,expected",
    [
        ("hello", "string", "", "hello"),
        ("", "string", "", ""),
        ("42", "integer", "int32", 42),
        ("-2147483648", "integer", "int32", -(2**31)),
        ("2147483647", "integer", "int32", 2**31 - 1),
        ("9223372036854775807", "integer", "", 2**63 - 1),
        ("+7", "integer", "int64", 7),
        ("1.5", "number", "double", 1.5),
        ("2", "number", "", 2.0),
        ("1e3", "number", "", 1000.0),
        ("0.5", "number", "float", 0.5),
        (".25", "number", "", 0.25),
        ("-Infinity", "number", "float", float("-inf")),
    ],
)
def test_convert_primitive_table(value, type_, format_, expected):
    got = convert_primitive(value, type_, format_)
    assert got == expected
    assert type(got) is type(expected)


def test_float_format_is_single_precision():
    got = convert_primitive("0.1", "number", "float")
    assert got == struct.unpack("<f", struct.pack("<f", 0.1))[0]
    assert got != 0.1
    assert convert_primitive("0.1", "number", "double") == 0.1


@pytest.mark.parametrize(
    "value,type_,format_",
    [
        ("2147483648", "integer", "int32"),
        ("9223372036854775808", "integer", "int64"),
        ("12.5", "integer", ""),
        ("abc", "integer", ""),
        (" 12", "integer", ""),
        ("1_000", "integer", ""),
        ("", "integer", ""),
        ("abc", "number", ""),
        ("1_0.5", "number", "double"),
        (" 1.5", "number", ""),
        ("1e400", "number", "double"),
        ("1e39", "number", "float"),
        ("-1e39", "number", "float"),
        ("\u0661\u0662", "number", ""),
        ("\u0661\u0662", "integer", ""),
        ("1.5\n", "number", "double"),
    ],
)
def test_unparsable_values_raise_invalid_value(value, type_, format_):
    with pytest.raises(InvalidValueError):
        convert_primitive(value, type_, format_)


@pytest.mark.parametrize(
    "type_,format_",
    [
        ("string", "byte"),
        ("string", "binary"),
        ("string", "date"),
        ("string", "date-time"),
        ("integer", "int16"),
        ("number", "decimal"),
    ],
)
def test_unsupported_formats(type_, format_):
    with pytest.raises(UnsupportedFormatError) as ei:
        convert_primitive("1", type_, format_)
    assert format_ in str(ei.value)


def test_array_and_file_are_not_implemented():
    for t in ("array", "file"):
        with pytest.raises(UnsupportedTypeError):
            convert_primitive("x", t, "")
        with pytest.raises(UnsupportedTypeError):
            convert_parameter(["x", "y"], t, "")


def test_unknown_type():
    with pytest.raises(UnknownTypeError) as ei:
        convert_primitive("x", "object", "")
    assert "unknown type: object" in str(ei.value)


@pytest.mark.parametrize("value", sorted(EVALUATES_AS_TRUE) + ["TRUE", "Yes", "On", "ENABLED"])
def test_boolean_truthy_values(value):
    assert convert_primitive(value, "boolean", "") is True


@pytest.mark.parametrize("value", ["false", "0", "no", "", "nope", "truthy", "  true", "é"])
def test_boolean_is_total(value):
    # any other input is false, never an error, whatever the format
    assert convert_primitive(value, "boolean", "") is False
    assert convert_primitive(value, "boolean", "weird") is False


def test_convert_parameter_requires_single_value():
    assert convert_parameter(["5"], "integer", "int32") == 5
    with pytest.raises(ArityError) as ei:
        convert_parameter(["5", "6"], "integer", "")
    assert "values count is 2, want 1" in str(ei.value)
    with pytest.raises(ArityError):
        convert_parameter([], "string", "")


def test_conversion_errors_are_value_errors():
    with pytest.raises(ValueError):
        convert_primitive("x", "integer", "")
    err = ConversionError("boom")
    assert err.to_dict() == {"code": "conversion_error", "message": "boom"}
