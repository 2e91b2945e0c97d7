"""
Gatehouse App - Main application class for the framework.

The App class collects controllers and guard bindings, freezes them into a
RouteTable at startup, and dispatches requests through the bound guards
before calling the route handler. It is also an ASGI application, served
with uvicorn.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from .context import ExecutionContext
from .controller import ControllerMeta
from .exceptions import (
    ForbiddenException,
    HTTPException,
    MethodNotAllowedException,
    NotFoundException,
)
from .guard import Guard, GuardLike, can_activate_all, resolve_guard
from .request import Request
from .response import Response
from .routing import Route, RouteTable, normalize_path

logger = logging.getLogger(__name__)

@dataclass
class _PendingRoute:
    """A plain function route waiting for build()."""
    method: str
    path: str
    handler: Callable[..., Any]
    guards: List[GuardLike] = field(default_factory=list)

class App:
    """
    Gatehouse application.

    Controller-based structure; guards bind at global, controller and
    route scope and run in that order.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8000) -> None:
        """
        Initialize a new Gatehouse application.

        Args:
            host: Server host address
            port: Server port
        """
        self.host = host
        self.port = port

        self._global_guards: List[GuardLike] = []
        self._guard_instances: Dict[Type[Guard], Guard] = {}
        self._controllers: List[Any] = []
        self._pending_routes: List[_PendingRoute] = []
        self._table: Optional[RouteTable] = None

    def _ensure_mutable(self, action: str) -> None:
        if self._table is not None:
            raise RuntimeError(f"Cannot {action} after the application has been built")

    def use_global_guards(self, *guards: GuardLike) -> None:
        """Bind guards to every route of the application."""
        self._ensure_mutable("add global guards")
        self._global_guards.extend(guards)

    def provide_guard(self, guard: Guard) -> None:
        """
        Use a configured guard instance wherever its class is bound.

        Example:
            app.provide_guard(AuthGuard(api_key=settings.api_key))
        """
        self._ensure_mutable("provide guards")
        self._guard_instances[type(guard)] = resolve_guard(guard)
        logger.info("Registered Guard: %s", type(guard).__name__)

    def route(self, path: str, methods: Optional[List[str]] = None, guards: Optional[List[GuardLike]] = None):
        """Decorator to register a plain function route."""
        self._ensure_mutable("add routes")
        methods = methods or ["GET"]

        def decorator(handler):
            for method in methods:
                self._pending_routes.append(_PendingRoute(method.upper(), path, handler, list(guards or [])))
            return handler
        return decorator

    def get(self, path: str, guards: Optional[List[GuardLike]] = None):
        return self.route(path, ["GET"], guards)

    def post(self, path: str, guards: Optional[List[GuardLike]] = None):
        return self.route(path, ["POST"], guards)

    def put(self, path: str, guards: Optional[List[GuardLike]] = None):
        return self.route(path, ["PUT"], guards)

    def delete(self, path: str, guards: Optional[List[GuardLike]] = None):
        return self.route(path, ["DELETE"], guards)

    def patch(self, path: str, guards: Optional[List[GuardLike]] = None):
        return self.route(path, ["PATCH"], guards)

    def register_controller(self, controller_cls: Type) -> None:
        """
        Register a Controller class.
        Instantiates the controller; its routes are bound on build().
        """
        self._ensure_mutable("register controllers")
        meta: ControllerMeta | None = vars(controller_cls).get("_controller_meta")
        if not meta:
            raise ValueError(f"Class {controller_cls.__name__} is not decorated with @Controller")

        instance = controller_cls()
        self._controllers.append(instance)
        logger.info("Registered Controller: %s (%s)", controller_cls.__name__, meta.prefix or "/")

    @property
    def is_built(self) -> bool:
        return self._table is not None

    def build(self) -> RouteTable:
        """
        Freeze all bindings into the route table.

        Each route's guards are global ++ controller ++ route. A guard class
        named at several places gets a single shared instance.
        """
        if self._table is not None:
            return self._table

        instances: Dict[Type[Guard], Guard] = dict(self._guard_instances)

        def bind(guards: List[GuardLike]) -> List[Guard]:
            bound = []
            for g in guards:
                if isinstance(g, type):
                    if g not in instances:
                        instances[g] = resolve_guard(g)
                    bound.append(instances[g])
                else:
                    bound.append(resolve_guard(g))
            return bound

        global_guards = bind(self._global_guards)
        routes: List[Route] = []

        for instance in self._controllers:
            controller_cls = type(instance)
            meta: ControllerMeta = vars(controller_cls)["_controller_meta"]
            controller_guards = bind(meta.guards)

            for route_meta in meta.routes:
                full_path = normalize_path(meta.prefix, route_meta.path)
                routes.append(Route(
                    method=route_meta.method,
                    path=full_path,
                    endpoint=getattr(instance, route_meta.handler_name),
                    handler=vars(controller_cls)[route_meta.handler_name],
                    controller=controller_cls,
                    guards=global_guards + controller_guards + bind(route_meta.guards),
                ))

        for pending in self._pending_routes:
            routes.append(Route(
                method=pending.method,
                path=normalize_path("", pending.path),
                endpoint=pending.handler,
                handler=pending.handler,
                guards=global_guards + bind(pending.guards),
            ))

        for route in routes:
            logger.info("Mapped %r", route)

        self._table = RouteTable(routes)
        return self._table

    async def handle(self, request: Request) -> Response:
        """Dispatch a request: match, run guards, call the handler."""
        table = self.build()
        try:
            response = await self._dispatch(table, request)
        except HTTPException as e:
            response = e.to_response()
        except Exception:
            logger.exception("Unhandled error while handling %s %s", request.method, request.path)
            response = HTTPException(500, "Internal server error").to_response()

        if request.method == "HEAD":
            response.body = b""
        return response

    async def _dispatch(self, table: RouteTable, request: Request) -> Response:
        matched = table.match(request.method, request.path)
        if matched is None:
            if table.allowed_methods(request.path):
                raise MethodNotAllowedException(message=f"Cannot {request.method} {request.path}")
            raise NotFoundException(message=f"Cannot {request.method} {request.path}")

        route, params = matched
        request = request.with_params(params)
        context = ExecutionContext(request=request, handler=route.handler, controller=route.controller)

        if not await can_activate_all(route.guards, context):
            raise ForbiddenException()

        result = await self._call_endpoint(route.endpoint, request)
        return Response.from_result(result)

    async def _call_endpoint(self, endpoint: Callable[..., Any], request: Request) -> Any:
        sig = inspect.signature(endpoint)
        kwargs: Dict[str, Any] = {}
        for name in sig.parameters:
            if name == "request":
                kwargs[name] = request
            elif name in request.params:
                kwargs[name] = request.params[name]

        result = endpoint(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def __call__(self, scope: Dict[str, Any], receive: Callable, send: Callable) -> None:
        """ASGI entry point."""
        if scope["type"] == "lifespan":
            while True:
                message = await receive()
                if message["type"] == "lifespan.startup":
                    self.build()
                    await send({"type": "lifespan.startup.complete"})
                elif message["type"] == "lifespan.shutdown":
                    await send({"type": "lifespan.shutdown.complete"})
                    return

        if scope["type"] == "websocket":
            message = await receive()
            if message["type"] == "websocket.connect":
                # Closing before accept rejects the handshake.
                await send({"type": "websocket.close", "code": 1000})
            return

        if scope["type"] != "http":
            logger.warning("Ignoring unsupported ASGI scope type: %s", scope["type"])
            return

        body = b""
        more_body = True
        while more_body:
            message = await receive()
            body += message.get("body", b"")
            more_body = message.get("more_body", False)

        headers: Dict[str, str] = {}
        for raw_key, raw_value in scope.get("headers", []):
            key = raw_key.decode("latin-1")
            value = raw_value.decode("latin-1")
            # Repeated headers are joined the way Node does, never picked.
            headers[key] = f"{headers[key]}, {value}" if key in headers else value

        request = Request(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            body=body.decode("utf-8", errors="replace") or None,
        )
        response = await self.handle(request)
        try:
            start, body_message = self._encode_response(response)
        except (UnicodeError, AttributeError):
            logger.exception("Could not encode response for %s %s", request.method, request.path)
            start, body_message = self._encode_response(HTTPException(500, "Internal server error").to_response())

        await send(start)
        await send(body_message)

    @staticmethod
    def _encode_response(response: Response) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Build the ASGI start and body messages for a response."""
        headers = [(b"content-type", response.content_type.encode("latin-1"))]
        headers += [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in response.headers.items()]
        start = {"type": "http.response.start", "status": response.status, "headers": headers}
        return start, {"type": "http.response.body", "body": response.body_bytes()}

    def serve(self, log_level: str = "info") -> None:
        """Start the HTTP server."""
        import uvicorn

        self.build()
        logger.info("Serving on %s:%s", self.host, self.port)
        uvicorn.run(self, host=self.host, port=self.port, log_level=log_level)

    def test_client(self):
        """Return an in-process TestClient for this app."""
        from .test_client import TestClient
        self.build()
        return TestClient(self)
