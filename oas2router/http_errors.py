"""RFC7807 problem+json helpers and a ready-made validation error handler.

Nothing in the router installs these on its own; pass ``problem_error_handler()``
to the validators when problem+json responses are wanted.
"""
from __future__ import annotations

import json
from collections.abc import Sequence

from werkzeug.http import HTTP_STATUS_CODES
from werkzeug.wrappers import Request, Response

from .errors import Oas2Error

_BASE_TYPE_PREFIX = "https://example.com/errors/"


def _ptype(slug: str) -> str:
    return _BASE_TYPE_PREFIX + slug


def problem(status: int, type_: str, title: str, detail: str, **extra: object) -> Response:
    payload: dict[str, object] = {
        "type": type_,
        "title": title,
        "status": status,
        "detail": detail,
    }
    for k, v in extra.items():
        if v is not None:
            payload[k] = v
    return Response(json.dumps(payload), status=status, mimetype="application/problem+json")


def _std(status: int, slug: str, title: str, detail: str | None = None, **extra: object) -> Response:
    d = detail if detail is not None else slug
    return problem(status, _ptype(slug), title, d, **extra)


def bad_request(detail: str = "bad_request", **extra: object) -> Response:
    return _std(400, "bad_request", "Bad Request", detail, **extra)


def unprocessable_entity(errors: object | list[dict[str, object]], detail: str = "validation_error", **extra: object) -> Response:
    return _std(422, "validation_error", "Unprocessable Entity", detail, errors=errors, **extra)


def error_dict(err: Exception) -> dict[str, object]:
    if isinstance(err, Oas2Error):
        return err.to_dict()
    return {"code": "error", "message": str(err)}


def problem_error_handler(status: int = 422):
    """Build an error handler answering with problem+json listing every error.

    422 and 400 go through ``unprocessable_entity`` / ``bad_request``; any other
    status gets its standard reason phrase as title.
    """

    def handle(request: Request, errors: Sequence[Exception]) -> Response:
        items = [error_dict(e) for e in errors]
        # the mount at basePath moves the prefix into SCRIPT_NAME
        instance = request.script_root + request.path
        if status == 422:
            return unprocessable_entity(items, instance=instance)
        if status == 400:
            return bad_request("validation_error", errors=items, instance=instance)
        title = HTTP_STATUS_CODES.get(status, "Unknown Error")
        return _std(status, "validation_error", title, "validation_error", errors=items, instance=instance)

    return handle


__all__ = [
    "problem",
    "bad_request",
    "unprocessable_entity",
    "error_dict",
    "problem_error_handler",
]
