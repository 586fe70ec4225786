from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from werkzeug.wrappers import Request

from .contract import Operation
from .convert import TypedValue

WSGIEnvironment = dict[str, Any]
StartResponse = Callable[..., Any]
WSGIApp = Callable[[WSGIEnvironment, StartResponse], Iterable[bytes]]

STATE_KEY = "oas2router.state"


@dataclass(frozen=True)
class RequestState:
    """Per-request metadata: the matched operation and decoded path parameters.

    Never mutated; layers derive a new state and a new environ around it.
    """

    operation: Operation | None = None
    path_params: Mapping[str, TypedValue] = field(default_factory=lambda: MappingProxyType({}))

    def with_operation(self, operation: Operation) -> RequestState:
        return replace(self, operation=operation)

    def with_path_param(self, name: str, value: TypedValue) -> RequestState:
        return replace(self, path_params=MappingProxyType({**self.path_params, name: value}))


_EMPTY = RequestState()


def _environ(source: Request | Mapping[str, Any]) -> Mapping[str, Any]:
    return source.environ if isinstance(source, Request) else source


def get_state(source: Request | Mapping[str, Any]) -> RequestState:
    return _environ(source).get(STATE_KEY, _EMPTY)


def derive(environ: WSGIEnvironment, state: RequestState, **overrides: Any) -> WSGIEnvironment:
    """Return a copy of ``environ`` carrying ``state`` (plus any extra keys)."""
    return {**environ, **overrides, STATE_KEY: state}


def get_operation(source: Request | Mapping[str, Any]) -> Operation | None:
    """Return the contract operation matched for this request, if any."""
    return get_state(source).operation


def get_path_param(source: Request | Mapping[str, Any], name: str) -> TypedValue | None:
    """Return a decoded path parameter by name.

    For a handler on "/pet/{id}" serving "/pet/12", ``get_path_param(request, "id")`` is 12.
    """
    return get_state(source).path_params.get(name)


__all__ = [
    "RequestState",
    "STATE_KEY",
    "WSGIEnvironment",
    "StartResponse",
    "WSGIApp",
    "derive",
    "get_state",
    "get_operation",
    "get_path_param",
]
