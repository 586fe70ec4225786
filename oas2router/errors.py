"""Error types raised while building the router and validating requests.

Validation errors are collected into lists and handed to the caller's error
handler; they are never turned into HTTP responses here.
"""
from __future__ import annotations

from typing import Any


class Oas2Error(Exception):
    """Root of every error raised by this package."""

    code = "oas2_error"

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.code
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        for k, v in self.extra.items():
            if v is not None:
                payload[k] = v
        return payload


class ContractError(Oas2Error):
    code = "contract_error"


# ---- Conversion errors ----
class ConversionError(Oas2Error, ValueError):
    code = "conversion_error"


class UnsupportedTypeError(ConversionError):
    code = "unsupported_type"

    def __init__(self, type_: str, message: str | None = None):
        super().__init__(message or f"type {type_}: not implemented", type=type_)
        self.type_ = type_


class UnknownTypeError(UnsupportedTypeError):
    code = "unknown_type"

    def __init__(self, type_: str):
        super().__init__(type_, f"unknown type: {type_}")


class UnsupportedFormatError(ConversionError):
    code = "unsupported_format"

    def __init__(self, type_: str, format_: str):
        super().__init__(f"unknown format {format_} for type {type_}", type=type_, format=format_)
        self.type_ = type_
        self.format_ = format_


class ArityError(ConversionError):
    code = "arity_mismatch"

    def __init__(self, count: int):
        super().__init__(f"values count is {count}, want 1", count=count)
        self.count = count


class InvalidValueError(ConversionError):
    code = "invalid_value"

    def __init__(self, value: str, target: str):
        super().__init__(f"cannot convert {value!r} to {target}", value=value, target=target)
        self.value = value
        self.target = target


# ---- Request validation errors ----
class ParameterError(Oas2Error):
    """Wraps a failure for one named parameter so callers know where it came from."""

    code = "invalid_parameter"

    def __init__(self, name: str, in_: str, message: str, cause: Exception | None = None):
        super().__init__(f"{in_} parameter {name}: {message}", name=name, location=in_)
        self.name = name
        self.in_ = in_
        self.cause = cause


class RequiredParameterError(ParameterError):
    code = "required"

    def __init__(self, name: str, in_: str):
        super().__init__(name, in_, "is required")


class InvalidPayloadError(Oas2Error):
    code = "invalid_payload"

    def __init__(self, message: str = "Body contains invalid json"):
        super().__init__(message)


class SchemaViolation(Oas2Error):
    """One schema keyword failure reported by the schema evaluator."""

    code = "schema_violation"

    def __init__(self, message: str, path: str = "", validator: str | None = None):
        super().__init__(message, path=path or None, validator=validator)
        self.path = path
        self.validator = validator

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


__all__ = [
    "Oas2Error",
    "ContractError",
    "ConversionError",
    "UnsupportedTypeError",
    "UnknownTypeError",
    "UnsupportedFormatError",
    "ArityError",
    "InvalidValueError",
    "ParameterError",
    "RequiredParameterError",
    "InvalidPayloadError",
    "SchemaViolation",
]
