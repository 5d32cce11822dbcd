"""
Harness configuration: builder strictness, account decoding, and logging.

- Loads sane defaults and supports overrides via environment variables
  (ANCHOR_TESTKIT_*).
- The selector namespaces are deliberately absent: they are a compatibility
  contract with the target program, not a setting.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

_PREFIX = "ANCHOR_TESTKIT_"
_LOG_FORMATS = ("json", "text")
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _parse_bool(val: Any, default: bool) -> bool:
    if val is None or val == "":
        return default
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _parse_level(val: Any, default: str = "WARNING") -> str:
    if val is None or val == "":
        return default
    s = str(val).strip().upper()
    if s not in _LOG_LEVELS:
        raise ValueError(f"log level must be one of {_LOG_LEVELS}, got: {val!r}")
    return s


def _parse_format(val: Any, default: str = "text") -> str:
    if val is None or val == "":
        return default
    s = str(val).strip().lower()
    if s not in _LOG_FORMATS:
        raise ValueError(f"log format must be one of {_LOG_FORMATS}, got: {val!r}")
    return s


@dataclass(slots=True)
class HarnessConfig:
    # Builder: raise on a reused account name instead of shadowing it
    strict_account_names: bool = False
    # Decoder: accept account data longer than the decoded layout
    allow_trailing_bytes: bool = True
    # Submission: emit a failed transaction's program logs at DEBUG
    log_failed_tx_logs: bool = True
    # Logging
    log_level: str = "WARNING"
    log_format: str = "text"
    log_file: Optional[str] = field(default=None)

    @classmethod
    def from_env(cls, prefix: str = _PREFIX) -> "HarnessConfig":
        """
        Create config from environment variables:

        ANCHOR_TESTKIT_STRICT_ACCOUNT_NAMES   (bool)
        ANCHOR_TESTKIT_ALLOW_TRAILING_BYTES   (bool)
        ANCHOR_TESTKIT_LOG_FAILED_TX_LOGS     (bool)
        ANCHOR_TESTKIT_LOG_LEVEL              (DEBUG|INFO|WARNING|ERROR|CRITICAL)
        ANCHOR_TESTKIT_LOG_FORMAT             (json|text)
        ANCHOR_TESTKIT_LOG_FILE               (path) optional
        """
        return cls(
            strict_account_names=_parse_bool(_env(f"{prefix}STRICT_ACCOUNT_NAMES"), False),
            allow_trailing_bytes=_parse_bool(_env(f"{prefix}ALLOW_TRAILING_BYTES"), True),
            log_failed_tx_logs=_parse_bool(_env(f"{prefix}LOG_FAILED_TX_LOGS"), True),
            log_level=_parse_level(_env(f"{prefix}LOG_LEVEL")),
            log_format=_parse_format(_env(f"{prefix}LOG_FORMAT")),
            log_file=_env(f"{prefix}LOG_FILE") or None,
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["HarnessConfig"] = None, **overrides: Any
    ) -> "HarnessConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        for key in ("strict_account_names", "allow_trailing_bytes", "log_failed_tx_logs"):
            if key in overrides:
                data[key] = _parse_bool(overrides[key], getattr(base, key))
        if "log_level" in overrides:
            data["log_level"] = _parse_level(overrides["log_level"], base.log_level)
        if "log_format" in overrides:
            data["log_format"] = _parse_format(overrides["log_format"], base.log_format)
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strict_account_names": bool(self.strict_account_names),
            "allow_trailing_bytes": bool(self.allow_trailing_bytes),
            "log_failed_tx_logs": bool(self.log_failed_tx_logs),
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_file": self.log_file,
        }


# Convenience singleton (safe to use for simple scripts)
DEFAULT = HarnessConfig.from_env()

__all__ = ["HarnessConfig", "DEFAULT"]
