"""Thin Swagger 2.0 contract model.

Loads a document (mapping, JSON/YAML text or file), validates it with
openapi-spec-validator and exposes the method -> path -> Operation view the
router binds against. Objects are read-only once built.
"""
from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from openapi_spec_validator import validate

from .errors import ContractError

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")

# Validation keywords a non-body parameter may carry (Swagger 2.0 parameter object)
CONSTRAINT_KEYWORDS = (
    "enum",
    "maximum",
    "exclusiveMaximum",
    "minimum",
    "exclusiveMinimum",
    "maxLength",
    "minLength",
    "pattern",
    "multipleOf",
)


@dataclass(frozen=True)
class Parameter:
    name: str
    in_: str
    type_: str = ""
    format_: str = ""
    required: bool = False
    schema: Mapping[str, Any] | None = None
    constraints: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], schema: Mapping[str, Any] | None = None) -> Parameter:
        try:
            name = raw["name"]
            in_ = raw["in"]
        except KeyError as e:
            raise ContractError(f"parameter is missing {e.args[0]!r}") from None
        return cls(
            name=name,
            in_=in_,
            type_=raw.get("type", ""),
            format_=raw.get("format", ""),
            # path parameters are always required
            required=bool(raw.get("required", False)) or in_ == "path",
            schema=schema if schema is not None else raw.get("schema"),
            constraints=MappingProxyType({k: raw[k] for k in CONSTRAINT_KEYWORDS if k in raw}),
        )


@dataclass(frozen=True)
class Response:
    status: int | str
    schema: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class Operation:
    id: str
    method: str
    path: str
    parameters: tuple[Parameter, ...] = ()
    responses: Mapping[int | str, Response] = field(default_factory=dict)

    def parameters_in(self, in_: str) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.in_ == in_)

    def response_for(self, status: int) -> Response | None:
        return self.responses.get(status)


class Contract:
    """Read-only view over a validated Swagger 2.0 document."""

    def __init__(self, document: Mapping[str, Any]):
        self._doc = document

    @property
    def base_path(self) -> str:
        return (self._doc.get("basePath") or "").rstrip("/")

    @property
    def definitions(self) -> Mapping[str, Any]:
        return self._doc.get("definitions") or {}

    def operations(self) -> dict[str, dict[str, Operation]]:
        """Return method (upper-case) -> path -> Operation."""
        result: dict[str, dict[str, Operation]] = {}
        for path, item in (self._doc.get("paths") or {}).items():
            if not isinstance(item, Mapping):
                continue
            shared = [self._deref(p, "parameters") for p in item.get("parameters", [])]
            for method in HTTP_METHODS:
                raw_op = item.get(method)
                if raw_op is None:
                    continue
                op = self._build_operation(method.upper(), path, raw_op, shared)
                result.setdefault(op.method, {})[path] = op
        return result

    def _build_operation(
        self, method: str, path: str, raw: Mapping[str, Any], shared: list[Mapping[str, Any]]
    ) -> Operation:
        own = [self._deref(p, "parameters") for p in raw.get("parameters", [])]
        seen: set[tuple[str, str]] = set()
        params: list[Parameter] = []
        for p in own:
            param = Parameter.from_dict(p, self._bundle(p.get("schema")))
            key = (param.name, param.in_)
            if key in seen:
                raise ContractError(f"{method} {path}: duplicate parameter {param.name} in {param.in_}")
            seen.add(key)
            params.append(param)
        # path-level parameters apply unless the operation overrides them
        for p in shared:
            param = Parameter.from_dict(p, self._bundle(p.get("schema")))
            if (param.name, param.in_) not in seen:
                seen.add((param.name, param.in_))
                params.append(param)

        responses: dict[int | str, Response] = {}
        for code, resp in (raw.get("responses") or {}).items():
            resp = self._deref(resp, "responses")
            status: int | str = int(code) if str(code).isdigit() else str(code)
            responses[status] = Response(status=status, schema=self._bundle(resp.get("schema")))
        return Operation(
            id=raw.get("operationId", ""),
            method=method,
            path=path,
            parameters=tuple(params),
            responses=MappingProxyType(responses),
        )

    def _bundle(self, schema: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
        # "#/definitions/X" references resolve against the root of the schema
        if schema is None or not self.definitions:
            return schema
        return {"allOf": [schema], "definitions": self.definitions}

    def _deref(self, obj: Mapping[str, Any], section: str) -> Mapping[str, Any]:
        ref = obj.get("$ref") if isinstance(obj, Mapping) else None
        if not ref:
            return obj
        prefix = f"#/{section}/"
        if not ref.startswith(prefix):
            raise ContractError(f"unsupported reference {ref}")
        try:
            return self._doc[section][ref[len(prefix):]]
        except KeyError:
            raise ContractError(f"unresolved reference {ref}") from None


def _looks_like_path(source: str) -> bool:
    return "\n" not in source and Path(source).suffix in (".json", ".yaml", ".yml")


def _read_document(source: Mapping[str, Any] | str | os.PathLike[str]) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    if isinstance(source, os.PathLike) or _looks_like_path(source):
        path = Path(source)
        if not path.exists():
            raise ContractError(f"contract file not found: {path}")
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    # Inline document; YAML is a superset of JSON
    return yaml.safe_load(source)


def load_contract(
    source: Mapping[str, Any] | str | os.PathLike[str], *, validate_document: bool = True
) -> Contract:
    """Load and (optionally) validate a Swagger 2.0 document.

    Raises ContractError on any read, parse or validation failure.
    """
    try:
        doc = _read_document(source)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ContractError(f"cannot read contract: {e}") from e
    if not isinstance(doc, Mapping):
        raise ContractError("contract document must be a mapping")
    if doc.get("swagger") != "2.0":
        raise ContractError(f"unsupported contract version: {doc.get('swagger') or doc.get('openapi')!r}")
    if validate_document:
        # openapi-spec-validator versions differ in exception class
        try:
            validate(doc)
        except Exception as e:
            raise ContractError(f"invalid contract: {e}") from e
    return Contract(doc)


__all__ = [
    "HTTP_METHODS",
    "Parameter",
    "Response",
    "Operation",
    "Contract",
    "load_contract",
]
