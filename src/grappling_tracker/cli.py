# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Command line interface.

Usage:
    grappling-tracker [--env-file .env] serve [--host HOST] [--port PORT]
    grappling-tracker [--env-file .env] routes
    grappling-tracker [--env-file .env] init-db
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import replace

from sqlalchemy.engine import Connection

from .app import Application
from .database import initialize_schema
from .routing import display_path
from .settings import Settings, load_settings
from .utils import get_logger, setup_logger

_logger = get_logger("grappling_tracker.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grappling-tracker", description="Grappling tracker web application")
    parser.add_argument("--env-file", default=None, help="Load GT_* settings from this .env file")
    parser.add_argument("--log-level", default="INFO", help="Root log level (default: INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit one JSON object per log line")

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Serve the application with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: GT_HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: GT_PORT or 8000)")

    commands.add_parser("routes", help="Print the route table")
    commands.add_parser("init-db", help="Create the database tables")
    return parser


def _serve(settings: Settings, args: argparse.Namespace) -> int:
    import uvicorn

    server = replace(
        settings.server,
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
    )
    app = Application(replace(settings, server=server)).asgi()
    _logger.info("starting server", extra={"event": "cli.serve", "host": server.host, "port": server.port})
    uvicorn.run(app, host=server.host, port=server.port, log_level=args.log_level.lower())
    return 0


def _routes(settings: Settings) -> int:
    with Application(settings) as app:
        for entry in app.dispatcher.table:
            handler = getattr(entry.handler, "__qualname__", repr(entry.handler))
            print(f"{entry.method.value:<8}{display_path(entry.pattern):<24}{handler}")
    return 0


def _init_db(settings: Settings) -> int:
    with Application(settings) as app:
        count = initialize_schema(app.container.get(Connection))
    print(f"executed {count} statements")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(level=args.log_level, use_json=args.json_logs)
    settings = load_settings(args.env_file)

    if args.command == "serve":
        return _serve(settings, args)
    if args.command == "routes":
        return _routes(settings)
    return _init_db(settings)


if __name__ == "__main__":
    sys.exit(main())
