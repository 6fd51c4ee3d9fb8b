# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Container definitions for the application.

``"settings"`` is registered by string; every other component is keyed by
its class. Models take the shared connection, controllers take their models
followed by the template environment.
"""

from __future__ import annotations

from jinja2 import Environment
from sqlalchemy.engine import Connection, Engine

from .container import Container, Factory, create
from .controllers import (
    CategoryController,
    MainViewController,
    PositionController,
    ProfileController,
    TechniqueController,
    TrainingClassController,
    UserController,
)
from .database import create_database_engine, open_connection
from .models import MODELS, Category, Note, Position, Profile, Technique, TrainingClass, User
from .settings import Settings
from .templating import create_environment

SETTINGS = "settings"


def _environment(settings: Settings) -> Environment:
    return create_environment(settings.templates, base_path=settings.base_path)


def register_dependencies(container: Container) -> Container:
    """Register infrastructure, models and controllers on ``container``.

    ``"settings"`` must already be registered.
    """
    container.register(
        Engine,
        Factory(lambda c: create_database_engine(c.get(SETTINGS).database), finalizer=Engine.dispose),
    )
    container.register(Connection, Factory(lambda c: open_connection(c.get(Engine))))
    container.register(Environment, Factory(lambda c: _environment(c.get(SETTINGS))))

    for model in MODELS:
        container.register(model, create(model, Connection))

    container.register(TrainingClassController, create(TrainingClassController, TrainingClass, Environment))
    container.register(UserController, create(UserController, User, Environment))
    container.register(PositionController, create(PositionController, Position, Environment))
    container.register(CategoryController, create(CategoryController, Category, Environment))
    container.register(
        TechniqueController,
        create(TechniqueController, Technique, Category, Position, TrainingClass, Environment),
    )
    container.register(
        MainViewController,
        create(MainViewController, Technique, TrainingClass, Note, Environment),
    )
    container.register(
        ProfileController,
        create(ProfileController, Profile, Technique, TrainingClass, Environment),
    )
    return container


def build_container(settings: Settings) -> Container:
    container = Container()
    container.register_instance(SETTINGS, settings)
    return register_dependencies(container)


__all__ = ["SETTINGS", "build_container", "register_dependencies"]
