# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""HTTP entry point.

:class:`Application` wires settings, container, routes and dispatcher
together and turns routing errors into status responses:

- no matching route -> 404 ``"404 Not Found"``
- route exists under another method -> 405 ``"405 Method Not Allowed"``
- a model lookup that finds nothing -> 404 ``"404 Not Found"``
- success -> 200 with the handler's body

Every other exception propagates to the transport. :meth:`Application.asgi`
exposes the application to ASGI servers through Starlette.
"""

from __future__ import annotations

import threading
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from types import TracebackType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .container import Container
from .dependencies import build_container
from .dispatch import Dispatcher
from .exceptions import MethodNotAllowedError, RecordNotFoundError, RouteNotFoundError, RoutingError
from .routes import register_routes
from .routing import HttpMethod, RouteCollector
from .settings import Settings, load_settings
from .utils import get_logger

try:  # starlette is only needed to serve over ASGI
    from starlette.applications import Starlette
    from starlette.concurrency import run_in_threadpool
    from starlette.requests import Request
    from starlette.responses import HTMLResponse
    from starlette.routing import Route
    from starlette.types import Receive, Scope, Send
except ImportError:
    Starlette = None  # type: ignore
    run_in_threadpool = None  # type: ignore
    Request = None  # type: ignore
    HTMLResponse = None  # type: ignore
    Route = None  # type: ignore
    Receive = Scope = Send = None  # type: ignore

_logger = get_logger("grappling_tracker.app")

RouteDefinitions = Callable[[RouteCollector, Container], None]


class HttpRequest(BaseModel):
    """The part of an incoming request the dispatcher needs."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(..., min_length=1)
    path: str = "/"

    @field_validator("method")
    @classmethod
    def upper_method(cls, v: str) -> str:
        return v.strip().upper()


class HttpResponse(BaseModel):
    """Body plus status code produced for one request."""

    status: int = Field(200, ge=100, le=599)
    body: str = ""
    headers: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_error(cls, error: RoutingError) -> HttpResponse:
        headers = {}
        if isinstance(error, MethodNotAllowedError):
            headers["Allow"] = ", ".join(error.allowed)
        return cls(status=error.status_code, body=error.body, headers=headers)


def strip_base_path(path: str, base_path: str) -> str:
    """Remove the deployment prefix from ``path``.

    The prefix is removed only when it covers whole leading segments:
    with base ``/app``, ``/app/users`` becomes ``/users`` and ``/app``
    becomes ``/``, while ``/apple`` and ``/other`` pass through unchanged.
    """
    base = base_path.rstrip("/")
    if not base:
        return path or "/"
    if path == base:
        return "/"
    if path.startswith(base + "/"):
        return path[len(base) :]
    return path


class Application:
    """One composed application: container, compiled routes and dispatcher.

    Example:
        >>> app = Application(Settings(base_path="/router-template/public"))
        >>> app.handle("GET", "/router-template/public/").status
        200
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        container: Container | None = None,
        routes: RouteDefinitions = register_routes,
    ) -> None:
        self.settings = settings or Settings()
        self.container = container if container is not None else build_container(self.settings)
        collector = RouteCollector()
        routes(collector, self.container)
        self.dispatcher = Dispatcher(collector.compile(), self.container)
        self._lock = threading.Lock()

    def handle(self, method: str, path: str) -> HttpResponse:
        """Dispatch one request and map routing failures to status responses."""
        request = HttpRequest(method=method, path=path)
        stripped = strip_base_path(request.path, self.settings.base_path)
        try:
            body = self.dispatcher.dispatch(request.method, stripped)
        except (RouteNotFoundError, MethodNotAllowedError) as exc:
            return HttpResponse.from_error(exc)
        except RecordNotFoundError as exc:
            _logger.debug("record not found", extra={"event": "app.record_not_found", "table": exc.table})
            return HttpResponse.from_error(RouteNotFoundError(request.method, stripped))
        if request.method == HttpMethod.HEAD.value:
            body = ""
        return HttpResponse(status=200, body=body)

    def __call__(self, method: str, path: str) -> HttpResponse:
        return self.handle(method, path)

    def close(self) -> None:
        self.container.close()

    def __enter__(self) -> Application:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Starlette integration
    # ------------------------------------------------------------------

    def asgi(self) -> Starlette:
        """Wrap the application in a Starlette app with one catch-all route.

        The route is a raw ASGI endpoint without a method list, so every verb
        (including ones outside :class:`HttpMethod`) reaches :meth:`handle`.
        """
        if Starlette is None or Route is None:
            raise RuntimeError("starlette must be installed to serve the application over ASGI")

        application = self

        @asynccontextmanager
        async def lifespan(app: Starlette) -> AsyncIterator[None]:
            try:
                yield
            finally:
                application.close()

        return Starlette(
            debug=self.settings.debug,
            routes=[Route("/{path:path}", _DispatchEndpoint(self))],
            lifespan=lifespan,
        )

    def _handle_locked(self, method: str, path: str) -> HttpResponse:
        # One connection per container: serialize requests through it.
        with self._lock:
            return self.handle(method, path)


class _DispatchEndpoint:
    """ASGI endpoint that runs the synchronous dispatch in the thread pool."""

    def __init__(self, application: Application) -> None:
        self._application = application

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await run_in_threadpool(self._application._handle_locked, request.method, request.url.path)
        await HTMLResponse(response.body, status_code=response.status, headers=response.headers)(scope, receive, send)


def create_app(settings: Settings | None = None) -> Starlette:
    """ASGI application factory (``uvicorn --factory grappling_tracker.app:create_app``).

    Without explicit settings, ``GT_*`` environment variables are used.
    """
    return Application(settings if settings is not None else load_settings()).asgi()


__all__ = ["Application", "HttpRequest", "HttpResponse", "create_app", "strip_base_path"]
