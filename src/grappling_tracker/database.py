# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Database engine and connection factories.

Models share one SQLAlchemy :class:`~sqlalchemy.engine.Connection` per
container. Rows come back as mappings (column name -> value).
"""

from __future__ import annotations

from importlib import resources

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.pool import StaticPool

from .settings import DatabaseSettings
from .utils import get_logger

_logger = get_logger("grappling_tracker.database")


def build_url(settings: DatabaseSettings) -> URL:
    """Combine the DSN with separately configured credentials."""
    url = make_url(settings.dsn)
    if settings.username is not None:
        url = url.set(username=settings.username)
    if settings.password is not None:
        url = url.set(password=settings.password)
    return url


def create_database_engine(settings: DatabaseSettings) -> Engine:
    url = build_url(settings)
    options = dict(settings.options)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # An in-memory database lives inside one DBAPI connection.
        options.setdefault("poolclass", StaticPool)
        options.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, **options)
    _logger.info(
        "database engine created",
        extra={"event": "database.engine", "url": url.render_as_string(hide_password=True)},
    )
    return engine


def open_connection(engine: Engine) -> Connection:
    """Open the connection the models share.

    Statements run in autocommit mode so that each model call is its own
    unit of work.
    """
    return engine.connect().execution_options(isolation_level="AUTOCOMMIT")


def load_schema() -> str:
    return resources.files("grappling_tracker").joinpath("resources", "schema.sql").read_text(encoding="utf-8")


def initialize_schema(connection: Connection, script: str | None = None) -> int:
    """Run the bundled (or given) DDL script statement by statement.

    Returns:
        Number of statements executed.
    """
    script = load_schema() if script is None else script
    statements = [statement.strip() for statement in script.split(";") if statement.strip()]
    for statement in statements:
        connection.exec_driver_sql(statement)
    _logger.info("schema initialized", extra={"event": "database.schema", "statements": len(statements)})
    return len(statements)


__all__ = ["build_url", "create_database_engine", "initialize_schema", "load_schema", "open_connection"]
