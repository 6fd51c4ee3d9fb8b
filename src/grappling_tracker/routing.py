# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Route registration and the compiled route table.

Routes are collected with :class:`RouteCollector` and compiled once into an
immutable :class:`RouteTable` that the dispatcher reads.

Patterns are compared after trimming whitespace and surrounding slashes, so
``"/users"``, ``"users/"`` and ``" /users "`` name the same route. A pattern
segment may be a placeholder:

- ``{name}`` matches one path segment (``[^/]+``);
- ``{name:regex}`` matches ``regex`` (which may not itself contain braces).

Placeholder names must be unique within a pattern and may not be
``container``.

Example:
    >>> routes = RouteCollector()
    >>> routes.get("/", front_page)
    >>> routes.get("/users/{id:\\d+}", show_user)
    >>> table = routes.compile()
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from .exceptions import RouteDefinitionError
from .utils import get_logger

_logger = get_logger("grappling_tracker.routing")

Handler = Callable[..., Any]
"""Route handler, called as ``handler(container, **params)``."""

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)(?::([^{}]+))?\}")
_DEFAULT_SEGMENT = "[^/]+"

# Handlers receive the container positionally under this name.
RESERVED_PARAMETERS = frozenset({"container"})


class HttpMethod(str, Enum):
    """HTTP methods a route can be registered for."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value: str | HttpMethod) -> HttpMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise RouteDefinitionError(f"unsupported HTTP method '{value}'") from None


def normalize_path(path: str) -> str:
    """Trim whitespace and surrounding slashes; the root becomes ``""``."""
    return path.strip().strip("/")


def display_path(normalized: str) -> str:
    return "/" + normalized


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One registration as written by the application."""

    method: HttpMethod
    pattern: str
    handler: Handler

    @property
    def is_static(self) -> bool:
        return "{" not in self.pattern and "}" not in self.pattern


@dataclass(frozen=True, slots=True)
class VariableRoute:
    """A pattern with placeholders, compiled to a regular expression."""

    pattern: str
    regex: re.Pattern[str]
    handler: Handler

    def match(self, path: str) -> dict[str, str] | None:
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return found.groupdict()


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate a normalized pattern with placeholders into a regex."""
    parts: list[str] = []
    names: set[str] = set()
    position = 0
    for placeholder in _PLACEHOLDER.finditer(pattern):
        static = pattern[position : placeholder.start()]
        if "{" in static or "}" in static:
            raise RouteDefinitionError(f"malformed placeholder in route '{display_path(pattern)}'")
        parts.append(re.escape(static))

        name, expression = placeholder.group(1), placeholder.group(2)
        if name in RESERVED_PARAMETERS:
            raise RouteDefinitionError(f"placeholder name '{name}' is reserved in route '{display_path(pattern)}'")
        if name in names:
            raise RouteDefinitionError(f"placeholder '{name}' repeated in route '{display_path(pattern)}'")
        names.add(name)
        parts.append(f"(?P<{name}>{expression or _DEFAULT_SEGMENT})")
        position = placeholder.end()

    tail = pattern[position:]
    if "{" in tail or "}" in tail:
        raise RouteDefinitionError(f"malformed placeholder in route '{display_path(pattern)}'")
    parts.append(re.escape(tail))

    try:
        return re.compile("".join(parts))
    except re.error as exc:
        raise RouteDefinitionError(f"invalid expression in route '{display_path(pattern)}': {exc}") from exc


@dataclass(frozen=True, slots=True)
class RouteTable:
    """Read-only lookup structure produced by :meth:`RouteCollector.compile`.

    Attributes:
        static: method -> normalized path -> handler
        variable: method -> variable routes in registration order
        entries: every registration, in order, for introspection
    """

    static: Mapping[HttpMethod, Mapping[str, Handler]]
    variable: Mapping[HttpMethod, tuple[VariableRoute, ...]]
    entries: tuple[RouteEntry, ...]

    @property
    def methods(self) -> frozenset[HttpMethod]:
        return frozenset(self.static) | frozenset(self.variable)

    def lookup(self, method: HttpMethod, path: str) -> tuple[Handler, dict[str, str]] | None:
        """Find the handler for an already-normalized path.

        Static routes win over variable ones; among variable routes the
        first registered match wins.
        """
        handler = self.static.get(method, {}).get(path)
        if handler is not None:
            return handler, {}
        for route in self.variable.get(method, ()):
            params = route.match(path)
            if params is not None:
                return route.handler, params
        return None

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class RouteCollector:
    """Accumulates route registrations before compilation."""

    def __init__(self) -> None:
        self._entries: list[RouteEntry] = []

    def add_route(self, method: str | HttpMethod, pattern: str, handler: Handler) -> RouteEntry:
        if not callable(handler):
            raise RouteDefinitionError(f"handler for {method} {pattern!r} is not callable")
        normalized = normalize_path(pattern)
        entry = RouteEntry(HttpMethod.parse(method), normalized, handler)
        if not entry.is_static:
            # Fail at registration rather than at compile time.
            compile_pattern(normalized)
        self._entries.append(entry)
        return entry

    def get(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add_route(HttpMethod.GET, pattern, handler)

    def post(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add_route(HttpMethod.POST, pattern, handler)

    def put(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add_route(HttpMethod.PUT, pattern, handler)

    def patch(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add_route(HttpMethod.PATCH, pattern, handler)

    def delete(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add_route(HttpMethod.DELETE, pattern, handler)

    def head(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add_route(HttpMethod.HEAD, pattern, handler)

    def options(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add_route(HttpMethod.OPTIONS, pattern, handler)

    @property
    def entries(self) -> tuple[RouteEntry, ...]:
        return tuple(self._entries)

    def compile(self) -> RouteTable:
        static: dict[HttpMethod, dict[str, Handler]] = {}
        variable: dict[HttpMethod, list[VariableRoute]] = {}

        for entry in self._entries:
            if entry.is_static:
                routes = static.setdefault(entry.method, {})
                if entry.pattern in routes:
                    _logger.warning(
                        "duplicate route ignored",
                        extra={
                            "event": "routing.duplicate",
                            "method": entry.method.value,
                            "pattern": display_path(entry.pattern),
                        },
                    )
                    continue
                routes[entry.pattern] = entry.handler
            else:
                route = VariableRoute(entry.pattern, compile_pattern(entry.pattern), entry.handler)
                variable.setdefault(entry.method, []).append(route)

        _logger.debug("routes compiled", extra={"event": "routing.compile", "count": len(self._entries)})
        return RouteTable(
            static=MappingProxyType({method: MappingProxyType(routes) for method, routes in static.items()}),
            variable=MappingProxyType({method: tuple(routes) for method, routes in variable.items()}),
            entries=tuple(self._entries),
        )


__all__ = [
    "Handler",
    "HttpMethod",
    "RESERVED_PARAMETERS",
    "RouteCollector",
    "RouteEntry",
    "RouteTable",
    "VariableRoute",
    "compile_pattern",
    "display_path",
    "normalize_path",
]
