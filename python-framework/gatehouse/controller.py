from __future__ import annotations
from typing import Callable, List, Optional, TypeVar
from dataclasses import dataclass, field

from .guard import GuardLike

T = TypeVar("T")

GUARDS_ATTR = "__guards__"

@dataclass
class RouteMeta:
    """Metadata for a single route definition."""
    method: str
    path: str
    handler_name: str
    guards: List[GuardLike] = field(default_factory=list) # Guards specific to this route

@dataclass
class ControllerMeta:
    """Metadata container for a controller class."""
    prefix: str
    tags: List[str] = field(default_factory=list)
    guards: List[GuardLike] = field(default_factory=list) # Guards applied to all routes in class
    routes: List[RouteMeta] = field(default_factory=list)

def Controller(prefix: str = "", tags: Optional[List[str]] = None, guards: Optional[List[GuardLike]] = None):
    """
    Class decorator for defining a Controller.

    Usage:
        @Controller("/users", guards=[AuthGuard])
        class UserController:
            ...
    """
    def decorator(cls: type):
        class_guards = list(guards or []) + list(vars(cls).get(GUARDS_ATTR, []))
        meta = ControllerMeta(prefix=prefix, tags=tags or [], guards=class_guards)

        for name, method in cls.__dict__.items():
            if hasattr(method, "_route_meta"):
                route_data: RouteMeta = method._route_meta
                route_data.handler_name = name
                route_data.guards = route_data.guards + list(getattr(method, GUARDS_ATTR, []))
                meta.routes.append(route_data)

        setattr(cls, "_controller_meta", meta)
        return cls
    return decorator

def UseGuards(*guards: GuardLike) -> Callable[[T], T]:
    """
    Bind guards to a route method or to a whole controller class.

    Usage:
        @get("/test")
        @UseGuards(AuthGuard, BusinessGuard)
        def test(self): ...
    """
    def decorator(target: T) -> T:
        meta: Optional[ControllerMeta] = vars(target).get("_controller_meta")
        if meta is not None:
            # Applied above @Controller: the class is already collected.
            meta.guards.extend(guards)
            return target
        existing = list(vars(target).get(GUARDS_ATTR, []))
        setattr(target, GUARDS_ATTR, existing + list(guards))
        return target
    return decorator

def _route_decorator(method: str, path: str, guards: Optional[List[GuardLike]] = None):
    """Factory for HTTP method decorators."""
    def decorator(func: Callable):
        func._route_meta = RouteMeta(
            method=method.upper(),
            path=path,
            handler_name=func.__name__,
            guards=list(guards or [])
        )
        return func
    return decorator

def get(path: str = "/", guards: Optional[List[GuardLike]] = None):
    return _route_decorator("GET", path, guards)

def post(path: str = "/", guards: Optional[List[GuardLike]] = None):
    return _route_decorator("POST", path, guards)

def put(path: str = "/", guards: Optional[List[GuardLike]] = None):
    return _route_decorator("PUT", path, guards)

def delete(path: str = "/", guards: Optional[List[GuardLike]] = None):
    return _route_decorator("DELETE", path, guards)

def patch(path: str = "/", guards: Optional[List[GuardLike]] = None):
    return _route_decorator("PATCH", path, guards)

def head(path: str = "/", guards: Optional[List[GuardLike]] = None):
    return _route_decorator("HEAD", path, guards)

def options(path: str = "/", guards: Optional[List[GuardLike]] = None):
    return _route_decorator("OPTIONS", path, guards)
