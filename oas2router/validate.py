"""Request data validation against an operation's parameter definitions.

Both functions collect every failure instead of stopping at the first one.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .contract import Parameter
from .convert import convert_parameter
from .errors import ConversionError, ParameterError, RequiredParameterError
from .schema import constraint_schema, validate_by_schema


def _values(query: Mapping[str, Any], name: str) -> list[str] | None:
    # werkzeug MultiDict keeps every value under getlist; plain dicts may hold str or list
    if hasattr(query, "getlist"):
        vals = query.getlist(name)
        return vals if name in query else None
    if name not in query:
        return None
    raw = query[name]
    return [raw] if isinstance(raw, str) else list(raw)


def validate_query(parameters: Iterable[Parameter], query: Mapping[str, Any]) -> list[Exception]:
    """Check required-presence, convertibility and declared constraints of query parameters."""
    errors: list[Exception] = []
    for p in parameters:
        if p.in_ != "query":
            continue
        errors.extend(_validate_query_param(p, query))
    return errors


def _validate_query_param(p: Parameter, query: Mapping[str, Any]) -> list[Exception]:
    vals = _values(query, p.name)
    if vals is None:
        return [RequiredParameterError(p.name, p.in_)] if p.required else []
    try:
        value = convert_parameter(vals, p.type_, p.format_)
    except ConversionError as e:
        return [ParameterError(p.name, p.in_, e.message, cause=e)]
    schema = constraint_schema(p.type_, p.constraints)
    if schema is None:
        return []
    return [
        ParameterError(p.name, p.in_, v.message, cause=v)
        for v in validate_by_schema(schema, value)
    ]


def validate_body(parameters: Sequence[Parameter], body: Any) -> list[Exception]:
    """Validate a decoded payload against the schema of every body parameter."""
    errors: list[Exception] = []
    for p in parameters:
        if p.in_ != "body" or not p.schema:
            continue
        errors.extend(validate_by_schema(p.schema, body))
    return errors


__all__ = ["validate_query", "validate_body"]
