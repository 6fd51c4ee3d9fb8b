# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Exception hierarchy and messages."""

from __future__ import annotations

import pytest

from grappling_tracker.exceptions import (
    CyclicDependencyError,
    MethodNotAllowedError,
    RecordNotFoundError,
    RouteDefinitionError,
    RouteNotFoundError,
    RoutingError,
    UnregisteredComponentError,
    describe,
)


class Engine:
    pass


@pytest.mark.parametrize(("component", "expected"), [(Engine, "Engine"), ("settings", "settings"), (42, "42")])
def test_describe(component, expected: str):
    assert describe(component) == expected


def test_cycle_message_names_classes():
    error = CyclicDependencyError([Engine, "settings", Engine])
    assert str(error) == "circular dependency: Engine -> settings -> Engine"
    assert error.component is Engine


def test_unregistered_message():
    assert str(UnregisteredComponentError("settings")) == "component 'settings' is not registered"


def test_routing_errors_carry_status():
    not_found = RouteNotFoundError("GET", "/missing")
    not_allowed = MethodNotAllowedError("POST", "/", allowed=["GET", "HEAD"])

    assert isinstance(not_found, RoutingError)
    assert (not_found.status_code, not_found.body) == (404, "404 Not Found")
    assert str(not_found) == "404 Not Found: GET /missing"
    assert (not_allowed.status_code, not_allowed.body) == (405, "405 Method Not Allowed")
    assert not_allowed.allowed == ("GET", "HEAD")


def test_definition_and_record_errors_use_builtin_bases():
    assert issubclass(RouteDefinitionError, ValueError)
    assert issubclass(RecordNotFoundError, LookupError)
    assert str(RecordNotFoundError("users", 7)) == "no row in 'users' with id 7"
