# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Template renderer factory.

Templates are looked up in ``views_path``. Named aliases make the same (or
another) directory addressable as ``@Alias/name.html``; the default aliases
``Header``, ``HeaderViewItems``, ``HeaderAddItems`` and ``Footer`` all point
at ``views_path``.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemBytecodeCache,
    FileSystemLoader,
    PrefixLoader,
    StrictUndefined,
    Undefined,
    select_autoescape,
)

from .settings import TemplateSettings
from .utils import get_logger

_logger = get_logger("grappling_tracker.templating")

NAMESPACE_MARKER = "@"


def build_loader(settings: TemplateSettings) -> BaseLoader:
    views = Path(settings.views_path)
    loaders: list[BaseLoader] = [FileSystemLoader(views)]
    if settings.namespaces:
        aliases = {
            f"{NAMESPACE_MARKER}{alias}": FileSystemLoader(Path(path) if path is not None else views)
            for alias, path in settings.namespaces.items()
        }
        loaders.insert(0, PrefixLoader(aliases, delimiter="/"))
    return ChoiceLoader(loaders)


def create_environment(settings: TemplateSettings, *, base_path: str = "") -> Environment:
    """Build the Jinja2 environment the controllers render with.

    ``base_path`` is published to every template as the ``base_path``
    global (without a trailing slash) so links stay under the deployment
    prefix.

    With ``debug`` enabled templates are re-checked on every render and
    undefined variables raise instead of rendering empty.
    """
    bytecode_cache = None
    if settings.cache_path is not None:
        cache_path = Path(settings.cache_path)
        cache_path.mkdir(parents=True, exist_ok=True)
        bytecode_cache = FileSystemBytecodeCache(str(cache_path))

    environment = Environment(
        loader=build_loader(settings),
        autoescape=select_autoescape(["html", "htm", "xml"]),
        bytecode_cache=bytecode_cache,
        auto_reload=settings.debug,
        undefined=StrictUndefined if settings.debug else Undefined,
        extensions=["jinja2.ext.debug"] if settings.debug else [],
    )
    environment.globals["base_path"] = base_path.rstrip("/")
    _logger.debug(
        "template environment created",
        extra={
            "event": "templating.environment",
            "views_path": str(settings.views_path),
            "namespaces": sorted(settings.namespaces),
            "debug": settings.debug,
        },
    )
    return environment


__all__ = ["NAMESPACE_MARKER", "build_loader", "create_environment"]
