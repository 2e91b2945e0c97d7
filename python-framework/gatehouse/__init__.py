"""
Gatehouse - controller-based Python framework with request guards

Example usage:
    from gatehouse import App, Controller, get, AuthGuard

    @Controller("/secure", guards=[AuthGuard])
    class SecureController:
        @get("/")
        def index(self):
            return "Hello, World!"

    app = App()
    app.register_controller(SecureController)
    app.serve()
"""

from .app import App
from .request import Request
from .response import Response
from .controller import Controller, UseGuards, get, post, put, delete, patch, head, options
from .context import ExecutionContext
from .guard import Guard, can_activate_all
from .metadata import SetMetadata, Authorized, Reflector, AUTHORIZED_KEY
from .auth import AuthGuard, SkipAuthorizationCheck, SKIP_AUTHORIZATION_CHECK
from .business import BusinessGuard
from .exceptions import (
    HTTPException,
    ForbiddenException,
    NotFoundException,
    MethodNotAllowedException,
)
from .routing import Route, RouteTable

__version__ = "0.1.0"
__all__ = [
    "App", "Request", "Response",
    "Controller", "UseGuards", "get", "post", "put", "delete", "patch", "head", "options",
    "ExecutionContext", "Guard", "can_activate_all",
    "SetMetadata", "Authorized", "Reflector", "AUTHORIZED_KEY",
    "AuthGuard", "SkipAuthorizationCheck", "SKIP_AUTHORIZATION_CHECK", "BusinessGuard",
    "HTTPException", "ForbiddenException", "NotFoundException", "MethodNotAllowedException",
    "Route", "RouteTable",
    "__version__",
]
