"""
anchor_testkit.logging
----------------------

Structured logging for the harness.

- Context-local fields (test, program, instruction, payer …) carried in a
  `ContextVar` and attached to every record.
- Two renderings: newline-delimited JSON, or a one-line text form that is
  colored on a TTY.
- Optional JSON tee to a file.

Library modules only ever call `get_logger(__name__)`; nothing is printed
until a test session (or a caller) runs `configure()` / `setup_logging()`.
Only the "anchor_testkit" logger is touched and its records still propagate,
so pytest's `caplog` sees them.

Usage
-----
    from anchor_testkit import logging as tlog

    tlog.configure(json=False, level="DEBUG")  # once, e.g. in conftest.py
    log = tlog.get_logger(__name__)

    with tlog.log_scope(test="escrow_make"):
        log.info("submitting", extra={"accounts": 7})

Environment
-----------
- ANCHOR_TESTKIT_LOG_FORMAT: json|text (wins over the `fmt` argument)
- ANCHOR_TESTKIT_LOG_LEVEL / ANCHOR_TESTKIT_LOG_FILE via `configure_from_config`
"""

from __future__ import annotations

import datetime as _dt
import json as _json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import IO, Any, Dict, Iterator, List, Mapping, Optional, Tuple

ROOT_LOGGER = "anchor_testkit"

# Context keys the text renderer shows first, in this order.
DEFAULT_CONTEXT_KEYS = ("test", "program", "instruction", "payer")

_fields: ContextVar[Mapping[str, Any]] = ContextVar("anchor_testkit_log_fields", default={})


# --- context -----------------------------------------------------------------


def context() -> Dict[str, Any]:
    """Copy of the fields bound in the current context."""
    return dict(_fields.get())


def bind(**fields: Any) -> None:
    _fields.set({**_fields.get(), **{k: _plain(v) for k, v in fields.items()}})


def unbind(*keys: str) -> None:
    _fields.set({k: v for k, v in _fields.get().items() if k not in keys})


def clear_context() -> None:
    _fields.set({})


@contextmanager
def log_scope(**fields: Any) -> Iterator[None]:
    """Bind `fields` for the body of the `with` block only."""
    token = _fields.set({**_fields.get(), **{k: _plain(v) for k, v in fields.items()}})
    try:
        yield
    finally:
        _fields.reset(token)


# --- rendering ---------------------------------------------------------------


def _plain(v: Any) -> Any:
    """Reduce a value to something JSON can hold (bytes as hex)."""
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _plain(x) for k, x in v.items()}
    if is_dataclass(v) and not isinstance(v, type):
        return _plain(asdict(v))
    if isinstance(v, _dt.datetime):
        return (v if v.tzinfo else v.replace(tzinfo=_dt.timezone.utc)).isoformat()
    return str(v)


# Attributes every LogRecord has; anything else arrived via `extra=`.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("x", logging.INFO, __file__, 0, "", (), None))
) | {"message", "asctime"}


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _plain(v)
        for k, v in vars(record).items()
        if k not in _RECORD_ATTRS and not k.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    when = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
    return when.isoformat(timespec="milliseconds")


class JSONFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg, then context and extras."""

    def format(self, record: logging.LogRecord) -> str:
        out: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": record.process,
        }
        out.update(context())
        for k, v in _extras(record).items():
            out.setdefault(k, v)
        if record.exc_info:
            out["err"] = self.formatException(record.exc_info)
        return _json.dumps(out, separators=(",", ":"), default=str)


_COLORS = {
    logging.DEBUG: "\x1b[90m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[1;35m",
}
_RESET = "\x1b[0m"


def _is_tty(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty()) and "NO_COLOR" not in os.environ


class TextFormatter(logging.Formatter):
    """
    `<ts> | <LEVEL> | <logger> | k=v … | <message>`, for example

        2025-01-05T12:34:56.789+00:00 | INFO    | anchor_testkit.tx.send | instruction=make compute_units=5120 | transaction succeeded
    """

    def __init__(self, stream: Any = None) -> None:
        super().__init__()
        self._color = stream is not None and _is_tty(stream)

    def _pairs(self, record: logging.LogRecord) -> List[str]:
        ctx = context()
        ordered = [k for k in DEFAULT_CONTEXT_KEYS if ctx.get(k) is not None]
        ordered += [k for k in ctx if k not in DEFAULT_CONTEXT_KEYS]
        pairs = [f"{k}={ctx[k]}" for k in ordered]
        pairs += [f"{k}={v}" for k, v in _extras(record).items() if k not in ctx]
        return pairs

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<7}"
        if self._color:
            level = f"{_COLORS.get(record.levelno, '')}{level}{_RESET}"
        parts = [_timestamp(record), level, record.name]
        pairs = self._pairs(record)
        if pairs:
            parts.append(" ".join(pairs))
        parts.append(record.getMessage())
        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# --- setup -------------------------------------------------------------------


def _level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(value.strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def _format_override() -> Optional[bool]:
    fmt = os.environ.get("ANCHOR_TESTKIT_LOG_FORMAT", "").strip().lower()
    return {"json": True, "text": False}.get(fmt)


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "WARNING",
    stream: Optional[IO[str]] = None,
    file_path: Optional[Path | str] = None,
) -> logging.Logger:
    """
    Install handlers on the package logger, replacing any from an earlier
    call.

    json=None picks JSON when ANCHOR_TESTKIT_LOG_FORMAT says so, otherwise
    JSON for non-interactive streams and text on a TTY. `file_path` adds a
    JSON file handler at the same level.
    """
    stream = stream if stream is not None else sys.stderr
    if json is None:
        override = _format_override()
        json = override if override is not None else not _is_tty(stream)
    lvl = _level(level)

    console = logging.StreamHandler(stream)
    console.setFormatter(JSONFormatter() if json else TextFormatter(stream))
    handlers: List[logging.Handler] = [console]
    if file_path:
        path = Path(file_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        tee = logging.FileHandler(path, encoding="utf-8")
        tee.setFormatter(JSONFormatter())
        handlers.append(tee)

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for h in handlers:
        h.setLevel(lvl)
        logger.addHandler(h)
    logger.setLevel(lvl)
    return logger


def setup_logging(
    *,
    level: str | int = "WARNING",
    fmt: str = "text",
    file: Optional[Path | str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """`configure` with a textual format; ANCHOR_TESTKIT_LOG_FORMAT takes precedence over `fmt`."""
    override = _format_override()
    use_json = override if override is not None else fmt.strip().lower() == "json"
    return configure(json=use_json, level=level, stream=stream, file_path=file)


def configure_from_config(cfg: Any) -> logging.Logger:
    """Apply the logging fields of a `HarnessConfig`."""
    return configure(json=cfg.log_format == "json", level=cfg.log_level, file_path=cfg.log_file)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the package namespace (`mytests` becomes `anchor_testkit.mytests`)."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class ContextAdapter(logging.LoggerAdapter):
    """Adds constant fields to every call; call-site `extra` wins on conflicts."""

    def process(self, msg: Any, kwargs: Any) -> Tuple[Any, Any]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_fields(logger: logging.Logger, **fields: Any) -> ContextAdapter:
    return ContextAdapter(logger, {k: _plain(v) for k, v in fields.items()})


__all__ = [
    "ROOT_LOGGER",
    "DEFAULT_CONTEXT_KEYS",
    "context",
    "bind",
    "unbind",
    "clear_context",
    "log_scope",
    "JSONFormatter",
    "TextFormatter",
    "configure",
    "setup_logging",
    "configure_from_config",
    "get_logger",
    "with_fields",
    "ContextAdapter",
]
