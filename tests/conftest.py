import copy
import json
import os
import sys

import pytest

# Path setup before any project imports to satisfy E402
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

from werkzeug.wrappers import Request, Response  # noqa: E402

from oas2router.context import get_path_param  # noqa: E402

PET_SCHEMA = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "id": {"type": "integer", "format": "int64"},
        "name": {"type": "string"},
        "tag": {"type": "string"},
    },
}

PETSTORE = {
    "swagger": "2.0",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "basePath": "/v1",
    "consumes": ["application/json"],
    "produces": ["application/json"],
    "paths": {
        "/pet": {
            "get": {
                "operationId": "listPets",
                "parameters": [
                    {"name": "limit", "in": "query", "required": True, "type": "integer", "format": "int32", "maximum": 100},
                    {"name": "tag", "in": "query", "required": True, "type": "string"},
                    {"name": "verbose", "in": "query", "type": "boolean"},
                ],
                "responses": {
                    "200": {"description": "pets", "schema": {"type": "array", "items": {"$ref": "#/definitions/Pet"}}},
                },
            },
            "post": {
                "operationId": "createPet",
                "parameters": [
                    {"name": "pet", "in": "body", "required": True, "schema": {"$ref": "#/definitions/Pet"}},
                ],
                "responses": {
                    "201": {"description": "created", "schema": {"$ref": "#/definitions/Pet"}},
                    "204": {"description": "accepted, nothing to return"},
                },
            },
        },
        "/pet/{id}": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "type": "integer", "format": "int64"},
            ],
            "get": {
                "operationId": "getPetById",
                "responses": {"200": {"description": "pet", "schema": {"$ref": "#/definitions/Pet"}}},
            },
            "delete": {
                "operationId": "deletePet",
                "responses": {"204": {"description": "deleted"}},
            },
        },
    },
    "definitions": {"Pet": PET_SCHEMA},
}


def json_response(payload, status=200):
    return Response(json.dumps(payload), status=status, mimetype="application/json")


def json_handler(payload, status=200):
    @Request.application
    def app(request):
        return json_response(payload, status)

    return app


@Request.application
def get_pet(request):
    return json_response({"id": get_path_param(request, "id"), "name": "rex"})


@Request.application
def echo_body(request):
    return Response(request.get_data(), status=201, mimetype="application/json")


class ErrorRecorder:
    """Error handler that records every call and answers 400."""

    def __init__(self, status=400):
        self.status = status
        self.calls = []

    def __call__(self, request, errors):
        self.calls.append(list(errors))
        return Response("invalid", status=self.status)

    @property
    def errors(self):
        assert self.calls, "error handler was not called"
        return self.calls[-1]


@pytest.fixture
def petstore_doc():
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def contract(petstore_doc):
    from oas2router.contract import load_contract

    return load_contract(petstore_doc)


@pytest.fixture
def handlers():
    return {
        "listPets": json_handler([{"id": 1, "name": "rex"}]),
        "createPet": echo_body,
        "getPetById": get_pet,
        "deletePet": Request.application(lambda request: Response(status=204)),
    }


@pytest.fixture
def on_error():
    return ErrorRecorder()
