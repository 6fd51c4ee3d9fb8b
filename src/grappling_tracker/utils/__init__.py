"""Utility helpers for grappling-tracker."""

from .logger import ColoredFormatter, JSONFormatter, get_logger, setup_logger

__all__ = ["ColoredFormatter", "JSONFormatter", "get_logger", "setup_logger"]
