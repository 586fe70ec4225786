"""Schema evaluation backed by jsonschema (Draft 4, the base of Swagger 2.0 schemas)."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jsonschema import Draft4Validator

from .errors import SchemaViolation


def validate_by_schema(schema: Mapping[str, Any], value: Any) -> list[SchemaViolation]:
    """Return every violation of ``schema`` by ``value`` (empty list when valid)."""
    validator = Draft4Validator(schema)
    violations: list[SchemaViolation] = []
    for err in sorted(validator.iter_errors(value), key=lambda e: [str(p) for p in e.absolute_path]):
        path = "/".join(str(p) for p in err.absolute_path)
        violations.append(SchemaViolation(err.message, path=path, validator=str(err.validator)))
    return violations


def constraint_schema(type_: str, constraints: Mapping[str, Any]) -> dict[str, Any] | None:
    """Schema enforcing a simple parameter's validation keywords, or None if it has none."""
    if not constraints:
        return None
    schema: dict[str, Any] = dict(constraints)
    if type_ in ("string", "integer", "number", "boolean"):
        schema["type"] = type_
    return schema


__all__ = ["validate_by_schema", "constraint_schema"]
