"""Contract-aware WSGI middleware.

A middleware maps a WSGI application to a WSGI application. Every layer here
reads the operation stamped by the router and passes a derived environ
downstream; the incoming environ is never modified.

Request-side validators answer with whatever the caller's error handler returns
and stop the chain. The response-side validator only observes: the response is
already on its way to the client when it runs.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from io import BytesIO
from typing import Any

from werkzeug.wrappers import Request, Response
from werkzeug.wsgi import ClosingIterator

from .context import (
    StartResponse,
    WSGIApp,
    WSGIEnvironment,
    derive,
    get_operation,
    get_state,
)
from .contract import Operation
from .convert import convert_primitive
from .errors import ConversionError, InvalidPayloadError
from .routing import routing_arg
from .schema import validate_by_schema
from .validate import validate_body, validate_query

Middleware = Callable[[WSGIApp], WSGIApp]
ErrorHandler = Callable[[Request, Sequence[Exception]], WSGIApp | None]
PathExtractor = Callable[[Request, str], str]

log = logging.getLogger("oas2router.middleware")


def _request(environ: WSGIEnvironment) -> Request:
    return Request(environ, populate_request=False)


def _error_app(result: WSGIApp | None) -> WSGIApp:
    # an error handler that returns nothing leaves an empty response, as if it wrote nothing
    return result if result is not None else Response()


def chain(*middlewares: Middleware) -> Middleware:
    """Compose middleware so that the first one given runs first at request time."""

    def apply(handler: WSGIApp) -> WSGIApp:
        for mw in reversed(middlewares):
            handler = mw(handler)
        return handler

    return apply


def operation_stamp(operation: Operation) -> Middleware:
    """Record the matched operation in the request state."""

    def apply(next_app: WSGIApp) -> WSGIApp:
        def app(environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
            state = get_state(environ).with_operation(operation)
            return next_app(derive(environ, state), start_response)

        return app

    return apply


class PathParameterExtractor:
    """Decode path parameters declared by the operation into the request state.

    Values that fail conversion are skipped; the handler sees no value for them.
    """

    def __init__(self, extractor: PathExtractor = routing_arg) -> None:
        self.extractor = extractor

    def __call__(self, next_app: WSGIApp) -> WSGIApp:
        def app(environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
            op = get_operation(environ)
            if op is None:
                return next_app(environ, start_response)
            req = _request(environ)
            state = get_state(environ)
            for p in op.parameters_in("path"):
                try:
                    value = convert_primitive(self.extractor(req, p.name), p.type_, p.format_)
                except ConversionError as e:
                    log.debug("path parameter %s of %s not decoded: %s", p.name, op.id, e)
                    continue
                state = state.with_path_param(p.name, value)
            return next_app(derive(environ, state), start_response)

        return app


class QueryValidator:
    def __init__(self, error_handler: ErrorHandler, continue_on_error: bool = False) -> None:
        self.error_handler = error_handler
        self.continue_on_error = continue_on_error

    def __call__(self, next_app: WSGIApp) -> WSGIApp:
        def app(environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
            op = get_operation(environ)
            if op is None:
                return next_app(environ, start_response)
            req = _request(environ)
            errors = validate_query(op.parameters, req.args)
            if errors:
                result = self.error_handler(req, errors)
                if not self.continue_on_error:
                    return _error_app(result)(environ, start_response)
            return next_app(environ, start_response)

        return app


def _replay(environ: WSGIEnvironment, raw: bytes) -> WSGIEnvironment:
    return {**environ, "wsgi.input": BytesIO(raw), "CONTENT_LENGTH": str(len(raw))}


class BodyValidator:
    """Validate a JSON request body against the operation's body parameter schema.

    The body is buffered, so the downstream handler can still read it in full.
    """

    def __init__(self, error_handler: ErrorHandler) -> None:
        self.error_handler = error_handler

    def __call__(self, next_app: WSGIApp) -> WSGIApp:
        def app(environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
            op = get_operation(environ)
            if op is None:
                return next_app(environ, start_response)
            req = _request(environ)
            raw = req.get_data(cache=False)
            if not raw:
                return next_app(_replay(environ, raw), start_response)
            try:
                body = json.loads(raw)
            except ValueError:
                result = self.error_handler(req, [InvalidPayloadError()])
                return _error_app(result)(environ, start_response)
            errors = validate_body(op.parameters_in("body"), body)
            if errors:
                result = self.error_handler(req, errors)
                return _error_app(result)(environ, start_response)
            return next_app(_replay(environ, raw), start_response)

        return app


class ResponseRecorder:
    """Capture the status and payload of a response while passing it through untouched."""

    def __init__(self, start_response: StartResponse) -> None:
        self._start_response = start_response
        self.status = ""
        self.chunks: list[bytes] = []
        self.complete = False

    @property
    def status_code(self) -> int:
        try:
            return int(self.status.split(None, 1)[0])
        except (IndexError, ValueError):
            return 0

    def payload(self) -> bytes:
        return b"".join(self.chunks)

    def start_response(self, status: str, headers: list[tuple[str, str]], exc_info: Any = None) -> Callable[[bytes], Any]:
        self.status = status
        write = self._start_response(status, headers, exc_info)

        def _write(data: bytes) -> Any:
            self.chunks.append(data)
            return write(data)

        return _write

    def record(self, app_iter: Iterable[bytes]) -> Iterator[bytes]:
        for chunk in app_iter:
            self.chunks.append(chunk)
            yield chunk
        self.complete = True


class ResponseBodyValidator:
    """Validate the response payload against the schema declared for its status.

    Runs once the response has been fully sent, so it can only report.
    """

    def __init__(self, error_handler: ErrorHandler, logger: logging.Logger | None = None) -> None:
        self.error_handler = error_handler
        self.logger = logger or log

    def __call__(self, next_app: WSGIApp) -> WSGIApp:
        def app(environ: WSGIEnvironment, start_response: StartResponse) -> Iterable[bytes]:
            op = get_operation(environ)
            if op is None:
                return next_app(environ, start_response)
            recorder = ResponseRecorder(start_response)
            app_iter = next_app(environ, recorder.start_response)
            callbacks: list[Callable[[], Any]] = []
            close = getattr(app_iter, "close", None)
            if close is not None:
                callbacks.append(close)
            callbacks.append(lambda: self._validate(op, environ, recorder))
            return ClosingIterator(recorder.record(app_iter), callbacks)

        return app

    def _validate(self, op: Operation, environ: WSGIEnvironment, recorder: ResponseRecorder) -> None:
        # HEAD answers carry no body to check
        if not recorder.complete or environ.get("REQUEST_METHOD") == "HEAD":
            return
        status = recorder.status_code
        declared = op.response_for(status)
        if declared is None:
            self.logger.debug("no response declared for %s status %s", op.id, status)
            return
        if declared.schema is None:
            return
        try:
            body = json.loads(recorder.payload())
        except ValueError as e:
            self.logger.warning("response of %s (status %s) is not valid json: %s", op.id, status, e)
            return
        errors = validate_by_schema(declared.schema, body)
        if errors:
            self.logger.warning(
                "response of %s (status %s) violates contract: %s",
                op.id,
                status,
                "; ".join(str(e) for e in errors),
            )
            self.error_handler(_request(environ), errors)


__all__ = [
    "Middleware",
    "ErrorHandler",
    "PathExtractor",
    "chain",
    "operation_stamp",
    "PathParameterExtractor",
    "QueryValidator",
    "BodyValidator",
    "ResponseRecorder",
    "ResponseBodyValidator",
]
