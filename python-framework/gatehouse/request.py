"""
Gatehouse Request - Request object passed to guards and handlers.
"""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import Any, Mapping

class Request:
    """
    HTTP Request object.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: Request path
        headers: Read-only header mapping; keys are compared case-sensitively
        params: Path parameters extracted from the route
        body: Raw request body as string
    """

    def __init__(
        self,
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        body: str | None = None,
    ) -> None:
        self._method = method.upper()
        self._path = path
        self._headers = dict(headers or {})
        self._params = params or {}
        self._body = body

    @property
    def method(self) -> str:
        """HTTP method (GET, POST, etc.)."""
        return self._method

    @property
    def path(self) -> str:
        """Request path."""
        return self._path

    @property
    def headers(self) -> Mapping[str, str]:
        """Request headers (read-only)."""
        return MappingProxyType(self._headers)

    @property
    def params(self) -> dict[str, str]:
        """Path parameters extracted from the route pattern."""
        return self._params

    @property
    def body(self) -> str | None:
        """Raw request body as string."""
        return self._body

    @property
    def text(self) -> str | None:
        """Request body as text (alias of body)."""
        return self._body

    def with_params(self, params: dict[str, str]) -> Request:
        """Copy of this request carrying matched path parameters."""
        return Request(self._method, self._path, self._headers, params, self._body)

    def json(self) -> dict[str, Any]:
        """
        Parse request body as JSON.

        Raises:
            ValueError: If body is not valid JSON
        """
        if not self._body:
            return {}
        return json.loads(self._body)

    def __repr__(self) -> str:
        return f"Request(method={self.method!r}, path={self.path!r})"
