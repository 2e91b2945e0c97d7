from __future__ import annotations
from typing import Callable, Optional, TypeVar

from .context import ExecutionContext
from .guard import Guard
from .metadata import AUTHORIZED_KEY, Authorized, Reflector

T = TypeVar("T")

SKIP_AUTHORIZATION_CHECK = "SkipAuthorizationCheck"
API_KEY_HEADER = "api_key"
DEFAULT_API_KEY = "MY_API_KEY"

class AuthGuard(Guard):
    """
    Guard that compares the `api_key` header against a fixed key.

    A handler (or its controller) tagged with `SkipAuthorizationCheck` under
    the `authorized` metadata key is let through without looking at headers.
    Handler-level tags override controller-level tags.
    """

    def __init__(self, reflector: Optional[Reflector] = None, api_key: str = DEFAULT_API_KEY) -> None:
        self.reflector = reflector or Reflector()
        self.api_key = api_key

    def can_activate(self, context: ExecutionContext) -> bool:
        tags = self.reflector.get_all_and_override(
            AUTHORIZED_KEY,
            [context.get_handler(), context.get_class()],
        ) or ()

        if SKIP_AUTHORIZATION_CHECK in tags:
            return True

        return context.headers.get(API_KEY_HEADER) == self.api_key

def SkipAuthorizationCheck() -> Callable[[T], T]:
    """
    Decorator to let a route (or a whole controller) bypass AuthGuard.

    Usage:
        @get("/public")
        @SkipAuthorizationCheck()
        def handler(self): ...
    """
    return Authorized(SKIP_AUTHORIZATION_CHECK)
