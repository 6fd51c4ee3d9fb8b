# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Request dispatch.

The dispatcher is a pure function of (method, path, route table): it finds
the handler, calls it with the container and any path parameters, and hands
back whatever the handler returned.

The dispatch flow:
1. Normalize the path the way route patterns are normalized
2. Look up the request method's routes (``HEAD`` falls back to ``GET``)
3. No match: 405 if other methods match the path, else 404
4. Call ``handler(container, **params)`` and return its result unmodified

Errors raised by handlers propagate unchanged.
"""

from __future__ import annotations

from typing import Any

from .container import Container
from .exceptions import MethodNotAllowedError, RouteNotFoundError
from .routing import HttpMethod, RouteTable, display_path, normalize_path
from .utils import get_logger

_logger = get_logger("grappling_tracker.dispatch")


class Dispatcher:
    """Match requests against a compiled :class:`RouteTable`."""

    def __init__(self, table: RouteTable, container: Container) -> None:
        self._table = table
        self._container = container

    @property
    def table(self) -> RouteTable:
        return self._table

    def dispatch(self, method: str, path: str) -> Any:
        """Invoke the handler registered for ``method`` and ``path``.

        Raises:
            RouteNotFoundError: nothing matches the path.
            MethodNotAllowedError: the path matches only under other methods.
        """
        normalized = normalize_path(path)
        verb = method.strip().upper()

        match = None
        try:
            request_method = HttpMethod(verb)
        except ValueError:
            request_method = None
        else:
            match = self._table.lookup(request_method, normalized)
            if match is None and request_method is HttpMethod.HEAD:
                match = self._table.lookup(HttpMethod.GET, normalized)

        if match is None:
            allowed = self.allowed_methods(path)
            if allowed:
                _logger.debug(
                    "method not allowed",
                    extra={"event": "dispatch.method_not_allowed", "method": verb, "path": display_path(normalized)},
                )
                raise MethodNotAllowedError(verb, display_path(normalized), allowed=allowed)
            _logger.debug(
                "route not found",
                extra={"event": "dispatch.not_found", "method": verb, "path": display_path(normalized)},
            )
            raise RouteNotFoundError(verb, display_path(normalized))

        handler, params = match
        _logger.debug(
            "route matched",
            extra={"event": "dispatch.match", "method": verb, "path": display_path(normalized)},
        )
        return handler(self._container, **params)

    def allowed_methods(self, path: str) -> list[str]:
        """Methods that have a route matching ``path``, in declaration order."""
        normalized = normalize_path(path)
        allowed = [method.value for method in HttpMethod if self._table.lookup(method, normalized) is not None]
        if HttpMethod.GET.value in allowed and HttpMethod.HEAD.value not in allowed:
            allowed.insert(allowed.index(HttpMethod.GET.value) + 1, HttpMethod.HEAD.value)
        return allowed


__all__ = ["Dispatcher"]
