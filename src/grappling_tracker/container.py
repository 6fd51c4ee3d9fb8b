# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Dependency container.

The container maps component identifiers (classes or string tags) to
construction rules and builds the object graph lazily. Every component is a
singleton for the lifetime of the container.

Rules are a small tagged variant instead of constructor reflection:

- ``Factory(build)``: ``build(container)`` returns the instance.
- ``Constructor(target, dependencies)``: the dependencies are resolved in
  order and passed positionally to ``target``.
- ``Instance(value)``: a ready-made value.

Example:
    >>> container = Container()
    >>> container.register_instance("settings", settings)
    >>> container.register(Connection, Factory(lambda c: connect(c.get("settings"))))
    >>> container.register(User, Constructor(User, (Connection,)))
    >>> container.get(User) is container.get(User)
    True
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator, Sequence
from contextlib import ExitStack
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, TypeVar, overload

from .exceptions import (
    CyclicDependencyError,
    DuplicateRegistrationError,
    UnregisteredComponentError,
    describe,
)
from .utils import get_logger

_logger = get_logger("grappling_tracker.container")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Factory:
    """Build a component by calling ``build(container)``.

    ``finalizer`` is called with the instance when the container closes;
    without one, the instance's own ``close()`` is used if it has one.
    """

    build: Callable[[Container], Any]
    finalizer: Callable[[Any], Any] | None = None

    @property
    def dependencies(self) -> tuple[Hashable, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Constructor:
    """Build a component by calling ``target`` with resolved dependencies."""

    target: Callable[..., Any]
    dependencies: tuple[Hashable, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any sequence but store a tuple so the rule stays hashable.
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


@dataclass(frozen=True, slots=True)
class Instance:
    """A component that already exists."""

    value: Any

    @property
    def dependencies(self) -> tuple[Hashable, ...]:
        return ()


Rule = Factory | Constructor | Instance


def create(target: Callable[..., Any], *dependencies: Hashable) -> Constructor:
    """Shorthand for ``Constructor(target, dependencies)``."""
    return Constructor(target, dependencies)


class Container:
    """Registry of construction rules with lazy singleton resolution.

    Registering an identifier twice raises :class:`DuplicateRegistrationError`
    unless ``replace=True`` is passed. Each rule runs at most once; a rule
    that raises leaves nothing cached and may be retried.
    """

    def __init__(self) -> None:
        self._rules: dict[Hashable, Rule] = {}
        self._instances: dict[Hashable, Any] = {}
        self._resolving: list[Hashable] = []
        self._exit_stack = ExitStack()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, component: Hashable, rule: Rule | Callable[[Container], Any], *, replace: bool = False) -> None:
        """Add a construction rule for ``component``.

        A bare callable is treated as a :class:`Factory`.
        """
        if not isinstance(rule, (Factory, Constructor, Instance)):
            if not callable(rule):
                raise TypeError(f"rule for '{describe(component)}' must be a Factory, Constructor, Instance or callable")
            rule = Factory(rule)

        if component in self._rules:
            if not replace:
                raise DuplicateRegistrationError(component)
            if component in self._instances and not isinstance(self._rules[component], Instance):
                raise RuntimeError(f"cannot replace '{describe(component)}' after it has been resolved")
            self._instances.pop(component, None)

        self._rules[component] = rule
        if isinstance(rule, Instance):
            self._instances[component] = rule.value
        _logger.debug(
            "component registered",
            extra={"event": "container.register", "component": describe(component), "rule": type(rule).__name__},
        )

    def register_instance(self, component: Hashable, value: Any, *, replace: bool = False) -> None:
        self.register(component, Instance(value), replace=replace)

    def has(self, component: Hashable) -> bool:
        return component in self._rules

    def __contains__(self, component: object) -> bool:
        return isinstance(component, Hashable) and component in self._rules

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def is_resolved(self, component: Hashable) -> bool:
        return component in self._instances

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @overload
    def resolve(self, component: type[T]) -> T: ...

    @overload
    def resolve(self, component: Hashable) -> Any: ...

    def resolve(self, component: Hashable) -> Any:
        """Return the singleton for ``component``, building it on first use.

        Raises:
            UnregisteredComponentError: ``component`` (or a dependency) has no rule.
            CyclicDependencyError: ``component`` depends on itself transitively.
        """
        try:
            return self._instances[component]
        except KeyError:
            pass

        if component in self._resolving:
            start = self._resolving.index(component)
            chain = [*self._resolving[start:], component]
            raise CyclicDependencyError(chain)

        rule = self._rules.get(component)
        if rule is None:
            required_by = self._resolving[-1] if self._resolving else None
            raise UnregisteredComponentError(component, required_by=required_by)

        self._resolving.append(component)
        try:
            instance = self._build(rule)
        finally:
            self._resolving.pop()

        self._instances[component] = instance
        self._track(instance, rule)
        _logger.debug(
            "component resolved",
            extra={"event": "container.resolve", "component": describe(component)},
        )
        return instance

    get = resolve

    def resolve_all(self, components: Sequence[Hashable]) -> list[Any]:
        return [self.resolve(component) for component in components]

    def _build(self, rule: Rule) -> Any:
        if isinstance(rule, Factory):
            return rule.build(self)
        if isinstance(rule, Constructor):
            arguments = [self.resolve(dependency) for dependency in rule.dependencies]
            return rule.target(*arguments)
        return rule.value

    def _track(self, instance: Any, rule: Rule) -> None:
        if isinstance(rule, Factory) and rule.finalizer is not None:
            self._exit_stack.callback(rule.finalizer, instance)
            return
        close = getattr(instance, "close", None)
        if callable(close):
            self._exit_stack.callback(close)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close built instances that expose ``close()``, newest first.

        Instances supplied through :class:`Instance` are owned by the caller
        and left alone. Every finalizer runs even if an earlier one raises;
        the first failure is re-raised after the cache is cleared.
        """
        try:
            self._exit_stack.close()
        finally:
            self._instances = {
                component: rule.value for component, rule in self._rules.items() if isinstance(rule, Instance)
            }

    def __enter__(self) -> Container:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["Constructor", "Container", "Factory", "Instance", "Rule", "create"]
