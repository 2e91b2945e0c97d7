from __future__ import annotations
from typing import Any, Dict, Optional

from .response import Response

class HTTPException(Exception):
    """
    Exception rendered as an HTTP error response.

    Guards and handlers may raise it to choose the rejection themselves;
    a guard that simply returns False gets a ForbiddenException.
    """
    status_code: int = 500
    default_error: str = "Internal Server Error"

    def __init__(self, status_code: Optional[int] = None, message: Optional[str] = None, error: Optional[str] = None) -> None:
        if status_code is not None:
            self.status_code = status_code
        self.error = error or self.default_error
        self.message = message or self.error
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"statusCode": self.status_code, "message": self.message, "error": self.error}

    def to_response(self) -> Response:
        return Response.json(self.to_dict(), status=self.status_code)

class ForbiddenException(HTTPException):
    status_code = 403
    default_error = "Forbidden"

    def __init__(self, message: str = "Forbidden resource") -> None:
        super().__init__(message=message)

class NotFoundException(HTTPException):
    status_code = 404
    default_error = "Not Found"

class MethodNotAllowedException(HTTPException):
    status_code = 405
    default_error = "Method Not Allowed"
