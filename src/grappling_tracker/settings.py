# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Application settings.

Settings are built once at process start and handed to the factories that
need them. Nothing reads configuration from module globals.

Example:
    >>> from grappling_tracker.settings import DatabaseSettings, Settings
    >>>
    >>> settings = Settings(
    ...     database=DatabaseSettings(dsn="sqlite:///tracker.db"),
    ...     base_path="/router-template/public",
    ... )
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_VIEWS_PATH = PACKAGE_ROOT / "resources" / "views"

_ENV_PREFIX = "GT_"
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(slots=True, frozen=True)
class DatabaseSettings:
    """Connection parameters for the relational database.

    ``dsn`` is an SQLAlchemy URL. Credentials given separately override the
    ones embedded in the URL.
    """

    dsn: str = "sqlite:///grappling_tracker.db"
    username: str | None = None
    password: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    """Extra keyword arguments for ``sqlalchemy.create_engine``."""


@dataclass(slots=True, frozen=True)
class TemplateSettings:
    """Jinja2 environment configuration."""

    views_path: Path = DEFAULT_VIEWS_PATH
    """Root directory searched for templates."""

    namespaces: Mapping[str, Path | None] = field(
        default_factory=lambda: dict.fromkeys(("Header", "HeaderViewItems", "HeaderAddItems", "Footer"))
    )
    """Named path aliases, addressed as ``@Alias/name.html``. ``None`` means ``views_path``."""

    cache_path: Path | None = None
    """Directory for compiled template bytecode. ``None`` disables the cache."""

    debug: bool = False


@dataclass(slots=True, frozen=True)
class ServerSettings:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings object registered in the container as ``"settings"``."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    templates: TemplateSettings = field(default_factory=TemplateSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    base_path: str = ""
    """Deployment prefix stripped from incoming paths before dispatch."""

    debug: bool = False


def _flag(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def load_settings(env_file: str | os.PathLike[str] | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``GT_*`` environment variables.

    Args:
        env_file: Optional ``.env`` file loaded into the process environment
            first. Variables already set win over the file.
        environ: Mapping to read instead of ``os.environ``.

    Recognized variables: ``GT_DATABASE_DSN``, ``GT_DATABASE_USERNAME``,
    ``GT_DATABASE_PASSWORD``, ``GT_VIEWS_PATH``, ``GT_CACHE_PATH``,
    ``GT_TEMPLATE_DEBUG``, ``GT_BASE_PATH``, ``GT_DEBUG``, ``GT_HOST``,
    ``GT_PORT``.
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    env = os.environ if environ is None else environ

    def get(name: str) -> str | None:
        return env.get(_ENV_PREFIX + name)

    debug = _flag(get("DEBUG"), False)
    defaults = DatabaseSettings()
    database = DatabaseSettings(
        dsn=get("DATABASE_DSN") or defaults.dsn,
        username=get("DATABASE_USERNAME"),
        password=get("DATABASE_PASSWORD"),
    )
    views_path = get("VIEWS_PATH")
    cache_path = get("CACHE_PATH")
    templates = TemplateSettings(
        views_path=Path(views_path) if views_path else DEFAULT_VIEWS_PATH,
        cache_path=Path(cache_path) if cache_path else None,
        debug=_flag(get("TEMPLATE_DEBUG"), debug),
    )
    server_defaults = ServerSettings()
    server = ServerSettings(
        host=get("HOST") or server_defaults.host,
        port=int(get("PORT") or server_defaults.port),
    )
    return Settings(
        database=database,
        templates=templates,
        server=server,
        base_path=get("BASE_PATH") or "",
        debug=debug,
    )


__all__ = ["DatabaseSettings", "ServerSettings", "Settings", "TemplateSettings", "load_settings"]
