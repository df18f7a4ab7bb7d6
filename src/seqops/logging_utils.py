"""Structured logging helpers.

Events are emitted through :func:`log_event` either as a plain dict or as one
JSON object per line. The JSON choice comes from, in order: an explicit
``json_logs`` argument, the last :func:`configure_logging` /
:func:`apply_logging_options` call, and the ``SEQOPS_JSON_LOGS`` environment
variable.
"""

from __future__ import annotations

import json
import logging
import math
import os
from typing import Any, Mapping

JSON_LOGS_ENV = "SEQOPS_JSON_LOGS"
PLAIN_FORMAT = "%(levelname)s:%(name)s:%(message)s"
JSON_FORMAT = "%(message)s"

_json_logs: bool | None = None


def _json_logs_from_env() -> bool:
    return os.getenv(JSON_LOGS_ENV, "false").lower() == "true"


def json_logs_enabled() -> bool:
    return _json_logs if _json_logs is not None else _json_logs_from_env()


def set_json_logs(enabled: bool | None) -> None:
    """Force JSON event lines on or off; ``None`` defers to the environment."""

    global _json_logs
    _json_logs = enabled


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def configure_logging(level: str = "INFO", json_logs: bool | None = None) -> None:
    """Configure global logging. Respects the SEQOPS_JSON_LOGS env override."""

    if json_logs is not None:
        set_json_logs(json_logs)

    logging.basicConfig(
        level=_level(level),
        format=JSON_FORMAT if json_logs_enabled() else PLAIN_FORMAT,
    )


def apply_logging_options(level: str | None = None, json_logs: bool | None = None) -> None:
    """Adjust an already configured root logger, e.g. from a run config's ``logging`` block."""

    root = logging.getLogger()
    if level:
        root.setLevel(_level(level))
    if json_logs is None:
        return
    set_json_logs(json_logs)
    formatter = logging.Formatter(JSON_FORMAT if json_logs else PLAIN_FORMAT)
    for handler in root.handlers:
        handler.setFormatter(formatter)


def _jsonable(value: Any) -> Any:
    # NaN marks an unavailable sample and is not valid JSON
    if isinstance(value, float) and not math.isfinite(value):
        return None if math.isnan(value) else str(value)
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def log_event(logger: logging.Logger, event: str, *, json_logs: bool | None = None, **fields: Any) -> None:
    """Emit a structured log event."""

    if json_logs is None:
        json_logs = json_logs_enabled()

    payload = {"event": event, **fields}
    if json_logs:
        logger.info(json.dumps(_jsonable(payload), default=str))
    else:
        logger.info(payload)
