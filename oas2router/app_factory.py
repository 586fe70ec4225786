"""Application factory: contract + handlers -> WSGI app with the standard validator stack.

Stack (request-time order): path parameter decoding, query validation, body
validation, response validation (when enabled), then any caller middleware.
Which validators are installed comes from ``Config`` (env + override).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any

from .config import Config
from .contract import Contract, load_contract
from .http_errors import problem_error_handler
from .logging_setup import configure_logging
from .middleware import (
    BodyValidator,
    ErrorHandler,
    Middleware,
    PathExtractor,
    PathParameterExtractor,
    QueryValidator,
    ResponseBodyValidator,
)
from .router import OperationHandlers, RouterOption, build_router, with_logger, with_middleware
from .routing import RoutingEngine, routing_arg


def create_app(
    contract: Contract | Mapping[str, Any] | str | os.PathLike[str],
    handlers: OperationHandlers,
    error_handler: ErrorHandler | None = None,
    config_override: dict[str, Any] | None = None,
    extra_middleware: Iterable[Middleware] = (),
    path_extractor: PathExtractor = routing_arg,
    options: Iterable[RouterOption] = (),
) -> RoutingEngine:
    cfg = Config.from_env()
    if config_override:
        cfg.override(config_override)
    if cfg.log_level:
        configure_logging(cfg.log_level)
    if not isinstance(contract, Contract):
        contract = load_contract(contract, validate_document=cfg.validate_contract)

    on_error = error_handler or problem_error_handler()
    log = logging.getLogger("oas2router.router")
    stack: list[Middleware] = [PathParameterExtractor(path_extractor)]
    if cfg.validate_query:
        stack.append(QueryValidator(on_error, continue_on_error=cfg.query_continue_on_error))
    if cfg.validate_body:
        stack.append(BodyValidator(on_error))
    if cfg.validate_response:
        stack.append(ResponseBodyValidator(on_error, logger=logging.getLogger("oas2router.middleware")))
    stack.extend(extra_middleware)

    opts: list[RouterOption] = [with_logger(log)]
    opts.extend(with_middleware(mw) for mw in stack)
    # caller options last so they can replace the logger or routing engine
    opts.extend(options)
    return build_router(contract, handlers, *opts)


__all__ = ["create_app"]
