# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Dispatcher: matching, status errors and handler invocation."""

from __future__ import annotations

import pytest

from grappling_tracker.container import Container
from grappling_tracker.dispatch import Dispatcher
from grappling_tracker.exceptions import MethodNotAllowedError, RouteNotFoundError
from grappling_tracker.routing import RouteCollector


def _dispatcher(register) -> Dispatcher:
    container = Container()
    container.register_instance("greeting", "hello")
    routes = RouteCollector()
    register(routes)
    return Dispatcher(routes.compile(), container)


@pytest.fixture
def root_only() -> Dispatcher:
    return _dispatcher(lambda routes: routes.get("/", lambda c: "<h1>front page</h1>"))


class TestMatching:
    def test_get_root(self, root_only: Dispatcher):
        assert root_only.dispatch("GET", "/") == "<h1>front page</h1>"

    def test_empty_path_is_root(self, root_only: Dispatcher):
        assert root_only.dispatch("GET", "") == "<h1>front page</h1>"

    def test_method_is_case_insensitive(self, root_only: Dispatcher):
        assert root_only.dispatch("get", "/") == "<h1>front page</h1>"

    def test_trailing_slash_is_ignored(self):
        dispatcher = _dispatcher(lambda routes: routes.get("/users", lambda c: "users"))
        assert dispatcher.dispatch("GET", "/users/") == "users"

    def test_handler_receives_container(self):
        dispatcher = _dispatcher(lambda routes: routes.get("/", lambda c: c.get("greeting")))
        assert dispatcher.dispatch("GET", "/") == "hello"

    def test_path_parameters_passed_as_keywords(self):
        def show(container: Container, id: str) -> str:
            return f"user {id}"

        dispatcher = _dispatcher(lambda routes: routes.get("/users/{id:\\d+}", show))
        assert dispatcher.dispatch("GET", "/users/42") == "user 42"

    def test_result_returned_unmodified(self):
        body = "  <p>whitespace kept</p>\n"
        dispatcher = _dispatcher(lambda routes: routes.get("/", lambda c: body))
        assert dispatcher.dispatch("GET", "/") is body

    def test_head_falls_back_to_get(self, root_only: Dispatcher):
        assert root_only.dispatch("HEAD", "/") == "<h1>front page</h1>"

    def test_explicit_head_route_preferred(self):
        def register(routes: RouteCollector) -> None:
            routes.get("/", lambda c: "get")
            routes.head("/", lambda c: "head")

        assert _dispatcher(register).dispatch("HEAD", "/") == "head"


class TestErrors:
    def test_unknown_path_is_not_found(self, root_only: Dispatcher):
        with pytest.raises(RouteNotFoundError) as exc:
            root_only.dispatch("GET", "/missing")

        assert exc.value.status_code == 404
        assert exc.value.body == "404 Not Found"
        assert exc.value.path == "/missing"

    def test_other_method_is_not_allowed(self, root_only: Dispatcher):
        with pytest.raises(MethodNotAllowedError) as exc:
            root_only.dispatch("POST", "/")

        assert exc.value.status_code == 405
        assert exc.value.body == "405 Method Not Allowed"
        assert exc.value.allowed == ("GET", "HEAD")

    def test_not_allowed_when_method_has_routes_elsewhere(self):
        def register(routes: RouteCollector) -> None:
            routes.get("/notes", lambda c: "list")
            routes.post("/classes", lambda c: "create")

        with pytest.raises(MethodNotAllowedError) as exc:
            _dispatcher(register).dispatch("POST", "/notes")
        assert exc.value.allowed == ("GET", "HEAD")

    def test_variable_routes_count_for_allowed_methods(self):
        def register(routes: RouteCollector) -> None:
            routes.put("/notes/{id}", lambda c, id: id)
            routes.delete("/notes/{id}", lambda c, id: id)

        dispatcher = _dispatcher(register)
        with pytest.raises(MethodNotAllowedError) as exc:
            dispatcher.dispatch("GET", "/notes/3")
        assert exc.value.allowed == ("PUT", "DELETE")

    def test_unsupported_method_on_known_path(self, root_only: Dispatcher):
        with pytest.raises(MethodNotAllowedError):
            root_only.dispatch("BREW", "/")

    def test_unsupported_method_on_unknown_path(self, root_only: Dispatcher):
        with pytest.raises(RouteNotFoundError):
            root_only.dispatch("BREW", "/missing")

    def test_parameter_constraint_mismatch_is_not_found(self):
        dispatcher = _dispatcher(lambda routes: routes.get("/users/{id:\\d+}", lambda c, id: id))
        with pytest.raises(RouteNotFoundError):
            dispatcher.dispatch("GET", "/users/abc")

    def test_handler_errors_propagate(self):
        def broken(container: Container) -> str:
            raise RuntimeError("database went away")

        dispatcher = _dispatcher(lambda routes: routes.get("/", broken))
        with pytest.raises(RuntimeError, match="database went away"):
            dispatcher.dispatch("GET", "/")

    def test_allowed_methods(self, root_only: Dispatcher):
        assert root_only.allowed_methods("/") == ["GET", "HEAD"]
        assert root_only.allowed_methods("/missing") == []
