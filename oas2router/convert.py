"""Convert raw string parameter values to typed values per Swagger 2.0 type/format.

Supported (type, format) pairs:
 - string:  "" only (byte, binary, date, date-time are not implemented)
 - integer: "int32", "int64", ""
 - number:  "float", "double", ""
 - boolean: any format; never fails

array and file are rejected as not implemented rather than guessed at.
"""
from __future__ import annotations

import math
import re
import struct
from collections.abc import Sequence

from .errors import (
    ArityError,
    InvalidValueError,
    UnknownTypeError,
    UnsupportedFormatError,
    UnsupportedTypeError,
)

TypedValue = str | int | float | bool

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

EVALUATES_AS_TRUE = frozenset(
    {"true", "1", "yes", "ok", "y", "on", "selected", "checked", "t", "enabled"}
)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
# ASCII decimal notation plus the inf/infinity/nan spellings
_NUMBER_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)", re.IGNORECASE
)
_UNIMPLEMENTED_TYPES = ("array", "file")


def convert_parameter(values: Sequence[str], type_: str, format_: str = "") -> TypedValue:
    """Convert the value(s) of one parameter.

    Multi-value input is only meaningful for arrays, which are not implemented,
    so every other type requires exactly one value.
    """
    if type_ in _UNIMPLEMENTED_TYPES:
        raise UnsupportedTypeError(type_)
    if len(values) != 1:
        raise ArityError(len(values))
    return convert_primitive(values[0], type_, format_)


def convert_primitive(value: str, type_: str, format_: str = "") -> TypedValue:
    if type_ == "string":
        return _convert_string(value, format_)
    if type_ == "integer":
        return _convert_integer(value, format_)
    if type_ == "number":
        return _convert_number(value, format_)
    if type_ == "boolean":
        return _convert_boolean(value)
    if type_ in _UNIMPLEMENTED_TYPES:
        raise UnsupportedTypeError(type_)
    raise UnknownTypeError(type_)


def _convert_string(value: str, format_: str) -> str:
    if format_ == "":
        return value
    # TODO: parse byte (base64), binary, date and date-time
    raise UnsupportedFormatError("string", format_)


def _convert_integer(value: str, format_: str) -> int:
    if format_ == "int32":
        lo, hi = INT32_MIN, INT32_MAX
    elif format_ in ("", "int64"):
        lo, hi = INT64_MIN, INT64_MAX
        format_ = "int64"
    else:
        raise UnsupportedFormatError("integer", format_)
    if not _INTEGER_RE.fullmatch(value):
        raise InvalidValueError(value, format_)
    i = int(value)
    if not lo <= i <= hi:
        raise InvalidValueError(value, format_)
    return i


def _convert_number(value: str, format_: str) -> float:
    if format_ not in ("float", "double", ""):
        raise UnsupportedFormatError("number", format_)
    target = "float" if format_ == "float" else "double"
    # float() also takes whitespace, digit separators and non-ASCII digits
    if not _NUMBER_RE.fullmatch(value):
        raise InvalidValueError(value, target)
    f = float(value)
    if math.isinf(f) and not _spells_infinity(value):
        raise InvalidValueError(value, target)
    if target == "double":
        return f
    try:
        return struct.unpack("<f", struct.pack("<f", f))[0]
    except OverflowError:
        raise InvalidValueError(value, target) from None


def _spells_infinity(value: str) -> bool:
    return value.lstrip("+-").lower() in ("inf", "infinity")


def _convert_boolean(value: str) -> bool:
    return value.lower() in EVALUATES_AS_TRUE


__all__ = [
    "TypedValue",
    "EVALUATES_AS_TRUE",
    "convert_parameter",
    "convert_primitive",
]
