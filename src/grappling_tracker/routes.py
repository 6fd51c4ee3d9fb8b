# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Route table for the application."""

from __future__ import annotations

from jinja2 import Environment

from .container import Container
from .controllers import (
    CategoryController,
    MainViewController,
    PositionController,
    ProfileController,
    TechniqueController,
    TrainingClassController,
    UserController,
    action,
)
from .routing import RouteCollector


def front_page(container: Container) -> str:
    return container.get(Environment).get_template("front_page.html").render()


def register_routes(router: RouteCollector, container: Container) -> None:
    router.get("/", front_page)
    router.get("/dashboard", action(MainViewController, "index"))
    router.get("/users", action(UserController, "index"))
    router.get(r"/users/{id:\d+}", action(UserController, "show"))
    router.get(r"/profiles/{id:\d+}", action(ProfileController, "show"))
    router.get("/classes", action(TrainingClassController, "index"))
    router.get("/positions", action(PositionController, "index"))
    router.get("/categories", action(CategoryController, "index"))
    router.get("/techniques", action(TechniqueController, "index"))


__all__ = ["front_page", "register_routes"]
