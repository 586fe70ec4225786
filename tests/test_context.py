from __future__ import annotations

from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from oas2router.context import STATE_KEY, RequestState, derive, get_operation, get_path_param, get_state
from oas2router.contract import Operation
from oas2router.middleware import operation_stamp


def test_state_derivation_leaves_original_untouched():
    op = Operation(id="getPetById", method="GET", path="/pet/{id}")
    s0 = RequestState()
    s1 = s0.with_operation(op)
    s2 = s1.with_path_param("id", 12)
    assert s0.operation is None and dict(s0.path_params) == {}
    assert s1.operation is op and dict(s1.path_params) == {}
    assert s2.path_params["id"] == 12


def test_accessors_on_environ_and_request():
    environ = EnvironBuilder("/pet/1").get_environ()
    assert get_operation(environ) is None
    assert get_path_param(environ, "id") is None

    op = Operation(id="getPetById", method="GET", path="/pet/{id}")
    derived = derive(environ, RequestState(op).with_path_param("id", 1))
    assert STATE_KEY not in environ
    req = Request(derived)
    assert get_operation(req) is op
    assert get_path_param(req, "id") == 1
    assert get_path_param(req, "other") is None


def test_operation_stamp_passes_derived_environ():
    op = Operation(id="listPets", method="GET", path="/pet")
    seen = []

    def inner(environ, start_response):
        seen.append(environ)
        return []

    environ = EnvironBuilder("/pet").get_environ()
    operation_stamp(op)(inner)(environ, lambda *a: None)
    (got,) = seen
    assert got is not environ
    assert get_state(got).operation is op
    assert get_state(environ).operation is None
