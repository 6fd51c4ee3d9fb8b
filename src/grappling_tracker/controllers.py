# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Request handlers that turn model data into rendered pages.

Controllers are built once by the container. Actions take only path
parameters and return the rendered HTML string.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from jinja2 import Environment

from .container import Container
from .models import Category, Note, Position, Profile, Technique, TrainingClass, User


class Controller:
    def __init__(self, renderer: Environment) -> None:
        self.renderer = renderer

    def render(self, template: str, **context: Any) -> str:
        return self.renderer.get_template(template).render(**context)


class TrainingClassController(Controller):
    def __init__(self, training_class: TrainingClass, renderer: Environment) -> None:
        super().__init__(renderer)
        self.training_class = training_class

    def index(self) -> str:
        return self.render("classes/index.html", classes=self.training_class.all())


class UserController(Controller):
    def __init__(self, user: User, renderer: Environment) -> None:
        super().__init__(renderer)
        self.user = user

    def index(self) -> str:
        return self.render("users/index.html", users=self.user.all())

    def show(self, id: str) -> str:
        return self.render("users/show.html", user=self.user.find(id))


class PositionController(Controller):
    def __init__(self, position: Position, renderer: Environment) -> None:
        super().__init__(renderer)
        self.position = position

    def index(self) -> str:
        return self.render("positions/index.html", positions=self.position.all())


class CategoryController(Controller):
    def __init__(self, category: Category, renderer: Environment) -> None:
        super().__init__(renderer)
        self.category = category

    def index(self) -> str:
        return self.render("categories/index.html", categories=self.category.all())


class TechniqueController(Controller):
    """Lists techniques grouped by category, with position and class lookups."""

    def __init__(
        self,
        technique: Technique,
        category: Category,
        position: Position,
        training_class: TrainingClass,
        renderer: Environment,
    ) -> None:
        super().__init__(renderer)
        self.technique = technique
        self.category = category
        self.position = position
        self.training_class = training_class

    def index(self) -> str:
        categories = self.category.all()
        groups = [(category, self.technique.by_category(category["id"])) for category in categories]
        return self.render(
            "techniques/index.html",
            groups=groups,
            positions={row["id"]: row for row in self.position.all()},
            classes={row["id"]: row for row in self.training_class.all()},
        )


class MainViewController(Controller):
    """Landing page for signed-in users: recent classes, notes and technique count."""

    def __init__(
        self,
        technique: Technique,
        training_class: TrainingClass,
        note: Note,
        renderer: Environment,
    ) -> None:
        super().__init__(renderer)
        self.technique = technique
        self.training_class = training_class
        self.note = note

    def index(self) -> str:
        return self.render(
            "dashboard.html",
            classes=self.training_class.recent(),
            notes=self.note.latest(),
            technique_count=self.technique.count(),
        )


class ProfileController(Controller):
    """A member's profile next to the gym-wide class and technique totals."""

    def __init__(
        self,
        profile: Profile,
        technique: Technique,
        training_class: TrainingClass,
        renderer: Environment,
    ) -> None:
        super().__init__(renderer)
        self.profile = profile
        self.technique = technique
        self.training_class = training_class

    def show(self, id: str) -> str:
        profile = self.profile.for_user(id)
        return self.render(
            "profiles/show.html",
            profile=profile,
            total_classes=self.training_class.count(),
            total_techniques=self.technique.count(),
        )


def action(controller: type[Controller], name: str) -> Callable[..., str]:
    """Route handler that resolves ``controller`` and calls its ``name`` action."""

    def handler(container: Container, **params: str) -> str:
        return getattr(container.resolve(controller), name)(**params)

    handler.__name__ = f"{controller.__name__}.{name}"
    handler.__qualname__ = handler.__name__
    return handler


__all__ = [
    "CategoryController",
    "Controller",
    "MainViewController",
    "PositionController",
    "ProfileController",
    "TechniqueController",
    "TrainingClassController",
    "UserController",
    "action",
]
