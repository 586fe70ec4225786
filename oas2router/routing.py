"""Pluggable routing engines.

Any object with ``route``, ``mount`` and the WSGI call signature can serve as the
underlying router. Two are provided: a plain werkzeug ``Map`` (default) and a
Flask application for embedding contract routes into an existing app.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from flask import Flask, request as flask_request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.dispatcher import DispatcherMiddleware
from werkzeug.routing import Map, Rule
from werkzeug.wrappers import Request, Response

from .context import StartResponse, WSGIApp, WSGIEnvironment

# wsgiorg routing_args convention: (positional, named)
ROUTING_ARGS_KEY = "wsgiorg.routing_args"

_TEMPLATE_VAR = re.compile(r"{([^{}]+)}")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@runtime_checkable
class RoutingEngine(Protocol):
    def route(self, method: str, pattern: str, handler: WSGIApp) -> None: ...  # pragma: no cover
    def mount(self, prefix: str, handler: WSGIApp) -> None: ...  # pragma: no cover
    def __call__(self, environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]: ...  # pragma: no cover


def to_rule(pattern: str) -> tuple[str, dict[str, str]]:
    """Rewrite a "/pet/{id}" template to werkzeug's "/pet/<id>".

    Variable names that are not identifiers get an alias; the returned mapping
    translates aliases back to the template names.
    """
    aliases: dict[str, str] = {}

    def _sub(m: re.Match[str]) -> str:
        name = m.group(1)
        if _IDENTIFIER.fullmatch(name):
            return f"<{name}>"
        alias = f"v{len(aliases)}_" + re.sub(r"\W", "_", name)
        aliases[alias] = name
        return f"<{alias}>"

    return _TEMPLATE_VAR.sub(_sub, pattern), aliases


def _named_args(values: dict[str, str], aliases: dict[str, str]) -> dict[str, str]:
    return {aliases.get(k, k): v for k, v in values.items()}


def routing_arg(req: Request, name: str) -> str:
    """Default path extractor: read a matched variable from ``wsgiorg.routing_args``."""
    args = req.environ.get(ROUTING_ARGS_KEY)
    if not args:
        return ""
    return args[1].get(name, "")


def _normalize_prefix(prefix: str) -> str:
    return prefix.rstrip("/")


class WerkzeugRouter:
    def __init__(self, strict_slashes: bool = False) -> None:
        self._map = Map(strict_slashes=strict_slashes)
        self._handlers: dict[str, WSGIApp] = {}
        self._aliases: dict[str, dict[str, str]] = {}
        # mounts live in the dispatcher's own dict (it discards an empty one passed in)
        self._dispatcher = DispatcherMiddleware(self._dispatch)

    def route(self, method: str, pattern: str, handler: WSGIApp) -> None:
        rule, aliases = to_rule(pattern)
        endpoint = f"{method.upper()} {pattern}"
        self._map.add(Rule(rule, methods=[method.upper()], endpoint=endpoint))
        self._handlers[endpoint] = handler
        self._aliases[endpoint] = aliases

    def mount(self, prefix: str, handler: WSGIApp) -> None:
        self._dispatcher.mounts[_normalize_prefix(prefix)] = handler

    def _dispatch(self, environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
        adapter = self._map.bind_to_environ(environ)
        try:
            endpoint, values = adapter.match()
        except HTTPException as e:
            return e(environ, start_response)
        args = _named_args(values, self._aliases[endpoint])
        return self._handlers[endpoint]({**environ, ROUTING_ARGS_KEY: ((), args)}, start_response)

    def __call__(self, environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
        return self._dispatcher(environ, start_response)


class FlaskRouter:
    """Routing engine backed by a Flask application (a fresh one unless given)."""

    def __init__(self, app: Flask | None = None) -> None:
        self.app = app or Flask(__name__)
        self._dispatcher = DispatcherMiddleware(self.app.wsgi_app)
        self.app.wsgi_app = self._dispatcher  # type: ignore[method-assign]

    def route(self, method: str, pattern: str, handler: WSGIApp) -> None:
        rule, aliases = to_rule(pattern)

        def view(**values: str) -> Response:
            environ = {**flask_request.environ, ROUTING_ARGS_KEY: ((), _named_args(values, aliases))}
            return self.app.response_class.force_type(handler, environ)  # type: ignore[arg-type]

        self.app.add_url_rule(
            rule, endpoint=f"{method.upper()} {pattern}", view_func=view, methods=[method.upper()]
        )

    def mount(self, prefix: str, handler: WSGIApp) -> None:
        self._dispatcher.mounts[_normalize_prefix(prefix)] = handler

    def __call__(self, environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
        return self.app(environ, start_response)


__all__ = [
    "ROUTING_ARGS_KEY",
    "RoutingEngine",
    "WerkzeugRouter",
    "FlaskRouter",
    "routing_arg",
    "to_rule",
]
