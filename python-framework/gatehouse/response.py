"""
Gatehouse Response - Response objects for handlers.

Provides helper classes for creating HTTP responses.
"""

from __future__ import annotations

import json
from typing import Any

class Response:
    """
    HTTP Response object.

    Attributes:
        status: HTTP status code (default: 200)
        body: Response body as string, or raw bytes
        content_type: Content-Type header value
    """

    def __init__(
        self,
        body: str | bytes = "",
        status: int = 200,
        content_type: str = "application/json",
    ) -> None:
        self.status = status
        self.body = body
        self.content_type = content_type
        self.headers: dict[str, str] = {}

    @classmethod
    def json(cls, data: dict[str, Any] | list[Any], status: int = 200) -> Response:
        """
        Create a JSON response.

        Args:
            data: Data to serialize as JSON
            status: HTTP status code (default: 200)
        """
        return cls(
            body=json.dumps(data, ensure_ascii=False),
            status=status,
            content_type="application/json",
        )

    @classmethod
    def text(cls, text: str, status: int = 200) -> Response:
        """Create a plain text response."""
        return cls(body=text, status=status, content_type="text/plain")

    @classmethod
    def html(cls, html: str, status: int = 200) -> Response:
        """Create an HTML response."""
        return cls(body=html, status=status, content_type="text/html")

    @classmethod
    def from_result(cls, result: Any) -> Response:
        """Convert a handler return value into a Response."""
        if isinstance(result, Response):
            return result
        if result is None:
            return cls(body="", content_type="text/plain")
        if isinstance(result, (dict, list)):
            return cls.json(result)
        if isinstance(result, bytes):
            return cls(body=result, content_type="application/octet-stream")
        return cls.text(str(result))

    def with_status(self, status: int) -> Response:
        """Set the status code (Builder pattern)."""
        self.status = status
        return self

    def with_header(self, key: str, value: str) -> Response:
        """Set a header (Builder pattern)."""
        if key.lower() == "content-type":
            self.content_type = value
        else:
            self.headers[key] = value
        return self

    def body_bytes(self) -> bytes:
        """Body as bytes, ready to send."""
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    def json_body(self) -> Any:
        """Parse the body as JSON (for tests)."""
        return json.loads(self.body)

    def __repr__(self) -> str:
        return f"Response(status={self.status}, content_type={self.content_type!r})"
