# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Logging helpers.

Modules obtain loggers through :func:`get_logger`; applications call
:func:`setup_logger` once at startup to install a handler on the root logger.
Structured context travels in ``extra={"event": ..., ...}`` and is rendered
by both formatters.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from typing import Any, ClassVar

_ROOT_NAMESPACE = "grappling_tracker"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger inside the ``grappling_tracker`` namespace."""
    if not name:
        return logging.getLogger(_ROOT_NAMESPACE)
    if name == _ROOT_NAMESPACE or name.startswith(f"{_ROOT_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_NAMESPACE}.{name}")


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name and appends ``extra`` fields."""

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, *, use_color: bool = True) -> None:
        super().__init__(fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_color and levelname in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[levelname]}{levelname}{self.RESET}"
        try:
            rendered = super().format(record)
        finally:
            record.levelname = levelname
        extra = _extra_fields(record)
        if extra:
            rendered += " " + " ".join(f"{key}={value}" for key, value in extra.items())
        return rendered


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def __init__(
        self,
        *,
        serializer: Callable[[dict[str, Any]], str] | None = None,
        payload_transformer: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    ) -> None:
        super().__init__()
        self._serializer = serializer or (lambda payload: json.dumps(payload, default=str, ensure_ascii=False))
        self._transform = payload_transformer

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = _extra_fields(record)
        if extra:
            payload["context"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if self._transform is not None:
            payload = self._transform(payload)
        return self._serializer(payload)


def setup_logger(
    *,
    level: int | str = logging.INFO,
    use_json: bool = False,
    json_serializer: Callable[[dict[str, Any]], str] | None = None,
    payload_transformer: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    force: bool = False,
) -> logging.Logger:
    """Install a stream handler on the root logger.

    Does nothing when the root logger already has handlers, unless ``force``
    is set, in which case existing handlers are removed first.
    """
    root = logging.getLogger()
    if root.handlers and not force:
        return get_logger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stderr)
    if use_json:
        handler.setFormatter(JSONFormatter(serializer=json_serializer, payload_transformer=payload_transformer))
    else:
        handler.setFormatter(ColoredFormatter(use_color=sys.stderr.isatty()))
    root.addHandler(handler)
    root.setLevel(level if isinstance(level, int) else level.upper())
    return get_logger()


__all__ = ["ColoredFormatter", "JSONFormatter", "get_logger", "setup_logger"]
