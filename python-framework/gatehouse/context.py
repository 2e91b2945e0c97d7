from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Type

from .request import Request

@dataclass(frozen=True)
class ExecutionContext:
    """
    Per-request view handed to guards.

    `handler` is the plain function declared on the controller (not the bound
    method), so metadata attached with decorators can be looked up on it.
    `controller` is None for routes registered directly on the App.
    """
    request: Request
    handler: Callable[..., Any]
    controller: Optional[Type[Any]] = None

    def get_request(self) -> Request:
        return self.request

    def get_handler(self) -> Callable[..., Any]:
        return self.handler

    def get_class(self) -> Optional[Type[Any]]:
        return self.controller

    @property
    def headers(self) -> Mapping[str, str]:
        return self.request.headers
