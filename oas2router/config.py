from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    validate_contract: bool = True
    validate_query: bool = True
    validate_body: bool = True
    validate_response: bool = False  # observational only; costs a payload copy per response
    query_continue_on_error: bool = False
    log_level: str | None = None  # None: leave logging configuration to the host process

    @classmethod
    def from_env(cls) -> Config:
        try:  # pragma: no cover
            load_dotenv()
        except OSError:
            pass
        return cls(
            validate_contract=_flag("OAS2_VALIDATE_CONTRACT", "1"),
            validate_query=_flag("OAS2_VALIDATE_QUERY", "1"),
            validate_body=_flag("OAS2_VALIDATE_BODY", "1"),
            validate_response=_flag("OAS2_VALIDATE_RESPONSE", "0"),
            query_continue_on_error=_flag("OAS2_QUERY_CONTINUE_ON_ERROR", "0"),
            log_level=(os.getenv("OAS2_LOG_LEVEL") or "").strip().upper() or None,
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)


__all__ = ["Config"]
