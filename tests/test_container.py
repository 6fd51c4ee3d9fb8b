# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Dependency container: registration, singleton resolution, cycles, lifecycle."""

from __future__ import annotations

import pytest

from grappling_tracker.container import Constructor, Container, Factory, Instance, create
from grappling_tracker.exceptions import (
    ContainerError,
    CyclicDependencyError,
    DuplicateRegistrationError,
    UnregisteredComponentError,
)


class Connection:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn
        self.closed = False

    def close(self) -> None:
        self.closed = True


class Repository:
    def __init__(self, connection: Connection) -> None:
        self.connection = connection


class Service:
    def __init__(self, repository: Repository, connection: Connection) -> None:
        self.repository = repository
        self.connection = connection


def _container() -> Container:
    container = Container()
    container.register_instance("dsn", "sqlite://")
    container.register(Connection, create(Connection, "dsn"))
    container.register(Repository, create(Repository, Connection))
    container.register(Service, create(Service, Repository, Connection))
    return container


# --- Resolution ---


class TestResolve:
    def test_resolves_full_graph(self):
        service = _container().resolve(Service)

        assert isinstance(service, Service)
        assert service.connection.dsn == "sqlite://"
        assert service.repository.connection is service.connection

    def test_consecutive_resolves_return_same_instance(self):
        container = _container()
        assert container.resolve(Repository) is container.resolve(Repository)
        assert container.get(Service) is container.resolve(Service)

    def test_dependencies_passed_in_declared_order(self):
        container = Container()
        container.register_instance("a", 1)
        container.register_instance("b", 2)
        container.register("pair", create(lambda first, second: (first, second), "b", "a"))

        assert container.resolve("pair") == (2, 1)

    def test_factory_receives_container(self):
        container = Container()
        container.register_instance("settings", {"dsn": "postgresql://db"})
        container.register(Connection, Factory(lambda c: Connection(c.get("settings")["dsn"])))

        assert container.resolve(Connection).dsn == "postgresql://db"

    def test_bare_callable_is_a_factory(self):
        container = Container()
        container.register("answer", lambda c: 42)
        assert container.resolve("answer") == 42

    def test_constructor_accepts_list_of_dependencies(self):
        rule = Constructor(Repository, [Connection])  # type: ignore[arg-type]
        assert rule.dependencies == (Connection,)

    def test_resolve_all(self):
        container = _container()
        connection, repository = container.resolve_all([Connection, Repository])
        assert repository.connection is connection

    def test_is_resolved_tracks_lazy_construction(self):
        container = _container()
        assert not container.is_resolved(Repository)
        container.resolve(Repository)
        assert container.is_resolved(Repository)
        assert container.is_resolved(Connection)
        assert not container.is_resolved(Service)


class TestSideEffects:
    def test_factory_runs_once_per_container(self):
        calls = []
        container = Container()
        container.register("counter", Factory(lambda c: calls.append(1) or len(calls)))
        container.register("left", create(lambda n: n, "counter"))
        container.register("right", create(lambda n: n, "counter"))

        container.resolve("left")
        container.resolve("right")
        container.resolve("counter")

        assert calls == [1]

    def test_each_container_runs_its_own_rules(self):
        calls = []

        def build(c: Container) -> object:
            calls.append(c)
            return object()

        first, second = Container(), Container()
        for container in (first, second):
            container.register("thing", build)

        assert first.resolve("thing") is not second.resolve("thing")
        assert calls == [first, second]

    def test_failed_factory_is_not_cached(self):
        attempts = []

        def flaky(c: Container) -> str:
            attempts.append(1)
            if len(attempts) == 1:
                raise ConnectionError("database unavailable")
            return "connected"

        container = Container()
        container.register("db", flaky)

        with pytest.raises(ConnectionError):
            container.resolve("db")
        assert container.resolve("db") == "connected"
        assert len(attempts) == 2


# --- Registration ---


class TestRegister:
    def test_duplicate_registration_rejected(self):
        container = _container()
        with pytest.raises(DuplicateRegistrationError) as exc:
            container.register(Repository, create(Repository, Connection))
        assert exc.value.component is Repository
        assert "Repository" in str(exc.value)

    def test_replace_before_resolution(self):
        container = _container()
        container.register("dsn", Instance("postgresql://other"), replace=True)
        assert container.resolve(Connection).dsn == "postgresql://other"

    def test_replace_after_resolution_rejected(self):
        container = _container()
        container.resolve(Connection)
        with pytest.raises(RuntimeError):
            container.register(Connection, create(Connection, "dsn"), replace=True)

    def test_non_callable_rule_rejected(self):
        with pytest.raises(TypeError):
            Container().register("x", 42)  # type: ignore[arg-type]

    def test_membership(self):
        container = _container()
        assert Connection in container
        assert container.has("dsn")
        assert "missing" not in container
        assert [] not in container
        assert len(container) == 4
        assert set(container) == {"dsn", Connection, Repository, Service}


# --- Errors ---


class TestErrors:
    def test_unregistered_component(self):
        with pytest.raises(UnregisteredComponentError) as exc:
            Container().resolve("nothing")
        assert exc.value.component == "nothing"
        assert exc.value.required_by is None

    def test_unregistered_dependency_names_dependent(self):
        container = Container()
        container.register(Repository, create(Repository, Connection))

        with pytest.raises(UnregisteredComponentError) as exc:
            container.resolve(Repository)

        assert exc.value.component is Connection
        assert exc.value.required_by is Repository
        assert "required by 'Repository'" in str(exc.value)

    def test_self_dependency_is_a_cycle(self):
        container = Container()
        container.register("loop", create(lambda x: x, "loop"))

        with pytest.raises(CyclicDependencyError) as exc:
            container.resolve("loop")
        assert exc.value.chain == ("loop", "loop")

    def test_indirect_cycle_reports_chain(self):
        container = Container()
        container.register("a", create(lambda b: b, "b"))
        container.register("b", create(lambda c: c, "c"))
        container.register("c", create(lambda a: a, "a"))

        with pytest.raises(CyclicDependencyError) as exc:
            container.resolve("a")

        assert exc.value.chain == ("a", "b", "c", "a")
        assert "a -> b -> c -> a" in str(exc.value)

    def test_cycle_through_factory(self):
        container = Container()
        container.register("a", lambda c: c.get("b"))
        container.register("b", lambda c: c.get("a"))

        with pytest.raises(CyclicDependencyError):
            container.resolve("b")

    def test_cycle_entered_midway_reports_only_the_loop(self):
        container = Container()
        container.register("entry", create(lambda a: a, "a"))
        container.register("a", create(lambda b: b, "b"))
        container.register("b", create(lambda a: a, "a"))

        with pytest.raises(CyclicDependencyError) as exc:
            container.resolve("entry")
        assert exc.value.chain == ("a", "b", "a")

    def test_container_usable_after_cycle(self):
        container = Container()
        container.register("a", create(lambda b: b, "b"))
        container.register("b", create(lambda a: a, "a"))
        container.register_instance("ok", "fine")

        with pytest.raises(CyclicDependencyError):
            container.resolve("a")
        with pytest.raises(CyclicDependencyError):
            container.resolve("b")
        assert container.resolve("ok") == "fine"

    def test_errors_share_base_class(self):
        for error in (DuplicateRegistrationError, UnregisteredComponentError, CyclicDependencyError):
            assert issubclass(error, ContainerError)


# --- Lifecycle ---


class TestClose:
    def test_close_releases_built_instances(self):
        container = _container()
        connection = container.resolve(Connection)
        container.close()
        assert connection.closed

    def test_close_runs_newest_first(self):
        order = []

        class Resource:
            def __init__(self, name: str) -> None:
                self.name = name

            def close(self) -> None:
                order.append(self.name)

        container = Container()
        container.register("outer", create(lambda inner: Resource("outer"), "inner"))
        container.register("inner", lambda c: Resource("inner"))

        container.resolve("outer")
        container.close()

        assert order == ["outer", "inner"]

    def test_finalizer_overrides_close(self):
        finalized = []
        container = Container()
        container.register(Connection, Factory(lambda c: Connection("x"), finalizer=finalized.append))

        connection = container.resolve(Connection)
        container.close()

        assert finalized == [connection]
        assert not connection.closed

    def test_instances_are_left_to_their_owner(self):
        connection = Connection("external")
        with Container() as container:
            container.register_instance(Connection, connection)
            container.resolve(Connection)
        assert not connection.closed
        assert container.resolve(Connection) is connection

    def test_unbuilt_components_are_not_built_on_close(self):
        built = []
        container = Container()
        container.register("lazy", lambda c: built.append(1))
        container.close()
        assert built == []

    def test_failing_finalizer_still_clears_cache(self):
        def broken_dispose(instance: object) -> None:
            raise RuntimeError("dispose failed")

        container = _container()
        container.register("engine", Factory(lambda c: object(), finalizer=broken_dispose))
        container.resolve("engine")
        connection = container.resolve(Connection)

        with pytest.raises(RuntimeError, match="dispose failed"):
            container.close()

        assert connection.closed
        assert not container.is_resolved(Connection)
        fresh = container.resolve(Connection)
        assert fresh is not connection
        assert not fresh.closed

    def test_resolve_after_close_builds_fresh_instance(self):
        container = _container()
        first = container.resolve(Connection)
        container.close()
        second = container.resolve(Connection)
        assert second is not first
        assert not second.closed
