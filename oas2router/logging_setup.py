"""Process-level logging wiring for the ``oas2router`` logger tree.

Library code only emits records; this is called by the application factory
when OAS2_LOG_LEVEL is set.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "oas2router"


class _Oas2StreamHandler(logging.StreamHandler):  # pragma: no cover - marker type
    pass


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    # Avoid duplicate attachment if called again
    if not any(isinstance(h, _Oas2StreamHandler) for h in log.handlers):
        h = _Oas2StreamHandler()
        h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        log.addHandler(h)
    log.setLevel(level)
    return log


__all__ = ["LOGGER_NAME", "configure_logging"]
