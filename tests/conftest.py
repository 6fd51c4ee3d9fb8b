# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Connection

from grappling_tracker.app import Application
from grappling_tracker.database import initialize_schema
from grappling_tracker.settings import DatabaseSettings, Settings, TemplateSettings

SEED = [
    "INSERT INTO users (id, name, email) VALUES (1, 'Helio', 'helio@example.com'), (2, 'Rickson', 'rickson@example.com')",
    "INSERT INTO profiles (id, user_id, belt, bio) VALUES (1, 1, 'black', 'Founder')",
    "INSERT INTO training_classes (id, title, held_on) VALUES (1, 'Guard fundamentals', '2026-10-01'), (2, 'Leg locks', '2026-10-08')",
    "INSERT INTO positions (id, name) VALUES (1, 'Closed guard'), (2, 'Mount')",
    "INSERT INTO categories (id, name) VALUES (1, 'Submissions'), (2, 'Sweeps')",
    "INSERT INTO techniques (id, name, category_id, position_id, training_class_id) VALUES "
    "(1, 'Armbar', 1, 1, 1), (2, 'Scissor sweep', 2, 1, 1), (3, 'Americana', 1, 2, 2)",
    "INSERT INTO notes (id, training_class_id, body) VALUES (1, 1, 'Keep elbows tight')",
]


def seed(connection: Connection) -> None:
    for statement in SEED:
        connection.execute(text(statement))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database=DatabaseSettings(dsn="sqlite://"),
        templates=TemplateSettings(cache_path=tmp_path / "cache", debug=True),
        base_path="/router-template/public",
    )


@pytest.fixture
def app(settings: Settings) -> Iterator[Application]:
    application = Application(settings)
    connection = application.container.get(Connection)
    initialize_schema(connection)
    seed(connection)
    try:
        yield application
    finally:
        application.close()


@pytest.fixture
def connection(app: Application) -> Connection:
    return app.container.get(Connection)
