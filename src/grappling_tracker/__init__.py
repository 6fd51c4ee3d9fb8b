# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Grappling tracker: server-rendered web application.

The request pipeline is assembled from small pieces:

- ``grappling_tracker.container`` - lazy singleton dependency container
- ``grappling_tracker.routing`` - route registration and compiled route table
- ``grappling_tracker.dispatch`` - (method, path) -> handler invocation
- ``grappling_tracker.app`` - entry point, base-path stripping, status mapping
- ``grappling_tracker.dependencies`` / ``grappling_tracker.routes`` - the wiring
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .app import Application, HttpRequest, HttpResponse, create_app, strip_base_path
from .container import Constructor, Container, Factory, Instance, create
from .dispatch import Dispatcher
from .exceptions import (
    ContainerError,
    CyclicDependencyError,
    DuplicateRegistrationError,
    MethodNotAllowedError,
    RecordNotFoundError,
    RouteDefinitionError,
    RouteNotFoundError,
    RoutingError,
    UnregisteredComponentError,
)
from .routing import HttpMethod, RouteCollector, RouteTable
from .settings import DatabaseSettings, ServerSettings, Settings, TemplateSettings, load_settings

try:
    __version__ = version("grappling-tracker")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "Application",
    "Constructor",
    "Container",
    "ContainerError",
    "CyclicDependencyError",
    "DatabaseSettings",
    "Dispatcher",
    "DuplicateRegistrationError",
    "Factory",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "Instance",
    "MethodNotAllowedError",
    "RecordNotFoundError",
    "RouteCollector",
    "RouteDefinitionError",
    "RouteNotFoundError",
    "RouteTable",
    "RoutingError",
    "ServerSettings",
    "Settings",
    "TemplateSettings",
    "UnregisteredComponentError",
    "create",
    "create_app",
    "load_settings",
    "strip_base_path",
]
