# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Exceptions raised by the container, the router and the models."""

from __future__ import annotations

from collections.abc import Hashable, Sequence


def describe(component: Hashable) -> str:
    """Human-readable name for a component identifier."""
    name = getattr(component, "__qualname__", None)
    if isinstance(name, str):
        return name
    return str(component)


# --- Container configuration errors ---


class ContainerError(Exception):
    """Base class for container configuration errors.

    These are fatal at startup and are never recovered from.
    """

    def __init__(self, message: str, *, component: Hashable) -> None:
        super().__init__(message)
        self.component = component


class DuplicateRegistrationError(ContainerError):
    """A construction rule already exists for the identifier."""

    def __init__(self, component: Hashable) -> None:
        super().__init__(f"component '{describe(component)}' is already registered", component=component)


class UnregisteredComponentError(ContainerError):
    """No construction rule exists for the identifier."""

    def __init__(self, component: Hashable, *, required_by: Hashable | None = None) -> None:
        message = f"component '{describe(component)}' is not registered"
        if required_by is not None:
            message += f" (required by '{describe(required_by)}')"
        super().__init__(message, component=component)
        self.required_by = required_by


class CyclicDependencyError(ContainerError):
    """Resolution of a component re-entered itself.

    Attributes:
        chain: Identifiers from the first occurrence of the component to its
            re-entry, e.g. ``(A, B, A)``.
    """

    def __init__(self, chain: Sequence[Hashable]) -> None:
        rendered = " -> ".join(describe(item) for item in chain)
        super().__init__(f"circular dependency: {rendered}", component=chain[-1])
        self.chain = tuple(chain)


# --- Routing errors ---


class RoutingError(Exception):
    """Base class for request routing failures.

    Subclasses carry the HTTP status the entry point answers with.
    """

    status_code: int = 500
    reason: str = "Internal Server Error"

    def __init__(self, method: str, path: str) -> None:
        super().__init__(f"{self.status_code} {self.reason}: {method} {path}")
        self.method = method
        self.path = path

    @property
    def body(self) -> str:
        return f"{self.status_code} {self.reason}"


class RouteNotFoundError(RoutingError):
    """No route matches the request path."""

    status_code = 404
    reason = "Not Found"


class MethodNotAllowedError(RoutingError):
    """The path matches routes, but none for the request method."""

    status_code = 405
    reason = "Method Not Allowed"

    def __init__(self, method: str, path: str, *, allowed: Sequence[str]) -> None:
        super().__init__(method, path)
        self.allowed = tuple(allowed)


class RouteDefinitionError(ValueError):
    """A route pattern or method could not be registered."""


# --- Model errors ---


class RecordNotFoundError(LookupError):
    """A model lookup found no row."""

    def __init__(self, table: str, identifier: object) -> None:
        super().__init__(f"no row in '{table}' with id {identifier!r}")
        self.table = table
        self.identifier = identifier


__all__ = [
    "ContainerError",
    "CyclicDependencyError",
    "DuplicateRegistrationError",
    "MethodNotAllowedError",
    "RecordNotFoundError",
    "RouteDefinitionError",
    "RouteNotFoundError",
    "RoutingError",
    "UnregisteredComponentError",
    "describe",
]
