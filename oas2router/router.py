"""Bind contract operations to handlers and build the routing tree.

Usage::

    router = build_router(
        load_contract("petstore.yaml"),
        {"getPetById": get_pet},
        with_logger(logging.getLogger("petstore")),
        with_middleware(PathParameterExtractor()),
        with_middleware(QueryValidator(on_errors)),
    )

Building happens once; the returned WSGI application holds no mutable state.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .context import WSGIApp
from .contract import Contract, load_contract
from .middleware import Middleware, chain, operation_stamp
from .routing import RoutingEngine, WerkzeugRouter

OperationHandlers = Mapping[str, WSGIApp]
EngineFactory = Callable[[], RoutingEngine]


def discard_logger() -> logging.Logger:
    """A logger that drops every record and never reaches the root logger."""
    lg = logging.Logger("oas2router.discard")
    lg.addHandler(logging.NullHandler())
    lg.propagate = False
    return lg


@dataclass(frozen=True)
class RouterConfig:
    logger: logging.Logger = field(default_factory=discard_logger)
    base_router: EngineFactory = WerkzeugRouter
    middlewares: tuple[Middleware, ...] = ()


RouterOption = Callable[[RouterConfig], RouterConfig]


def with_logger(logger: logging.Logger) -> RouterOption:
    def apply(cfg: RouterConfig) -> RouterConfig:
        return replace(cfg, logger=logger)

    return apply


def with_base_router(factory: EngineFactory) -> RouterOption:
    """Plug in another routing engine; ``factory`` must return a fresh engine per call."""

    def apply(cfg: RouterConfig) -> RouterConfig:
        return replace(cfg, base_router=factory)

    return apply


def with_middleware(mw: Middleware) -> RouterOption:
    """Append a middleware; middleware run in the order they were appended."""

    def apply(cfg: RouterConfig) -> RouterConfig:
        return replace(cfg, middlewares=(*cfg.middlewares, mw))

    return apply


def build_config(*options: RouterOption) -> RouterConfig:
    cfg = RouterConfig()
    for opt in options:
        cfg = opt(cfg)
    return cfg


def build_router(
    contract: Contract | Mapping[str, Any],
    handlers: OperationHandlers,
    *options: RouterOption,
) -> RoutingEngine:
    """Return a WSGI router serving every contract operation that has a handler.

    Operations without a handler are logged and left unrouted. Contract errors
    propagate to the caller.
    """
    cfg = build_config(*options)
    if not isinstance(contract, Contract):
        contract = load_contract(contract)
    operations = contract.operations()

    custom = chain(*cfg.middlewares)
    subrouter = cfg.base_router()
    for method, path_ops in operations.items():
        for path, op in path_ops.items():
            handler = handlers.get(op.id)
            if handler is None:
                cfg.logger.warning("oas2 router: no handler registered for operation %s", op.id)
                continue
            # the stamp wraps last so custom middleware can read the operation
            handler = operation_stamp(op)(custom(handler))
            cfg.logger.debug("oas2 router: handle: %s %s", method, path)
            subrouter.route(method, path, handler)

    router = cfg.base_router()
    router.mount(contract.base_path, subrouter)
    return router


__all__ = [
    "OperationHandlers",
    "RouterConfig",
    "RouterOption",
    "discard_logger",
    "with_logger",
    "with_base_router",
    "with_middleware",
    "build_config",
    "build_router",
]
