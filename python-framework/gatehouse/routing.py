from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional, Pattern, Sequence, Tuple, Type

from .guard import Guard

_PARAM_RE = re.compile(r"\{([a-zA-Z_][a-zA-Z0-9_]*)\}")

def normalize_path(prefix: str, path: str) -> str:
    """Join a controller prefix and a route path into an absolute path."""
    prefix = prefix.rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    if not path.startswith("/"):
        path = "/" + path
    combined = (prefix + path).rstrip("/")
    return combined if combined else "/"

def compile_path(path: str) -> Pattern[str]:
    """Compile `/users/{id}` into a regex with a named group per parameter."""
    pattern = ""
    last = 0
    for match in _PARAM_RE.finditer(path):
        pattern += re.escape(path[last:match.start()])
        pattern += f"(?P<{match.group(1)}>[^/]+)"
        last = match.end()
    pattern += re.escape(path[last:])
    return re.compile(f"^{pattern}$")

class Route:
    """
    A bound route.

    `endpoint` is what gets called (a bound method for controller routes);
    `handler` is the declared function, used for metadata lookup.
    `guards` is the full global ++ controller ++ route sequence.
    """

    def __init__(
        self,
        method: str,
        path: str,
        endpoint: Callable[..., Any],
        handler: Callable[..., Any],
        controller: Optional[Type[Any]] = None,
        guards: Sequence[Guard] = (),
    ) -> None:
        self.method = method
        self.path = path
        self.endpoint = endpoint
        self.handler = handler
        self.controller = controller
        self.guards: Tuple[Guard, ...] = tuple(guards)
        self._regex = compile_path(path)

    def match_path(self, path: str) -> Optional[Dict[str, str]]:
        m = self._regex.match(path)
        if m is None:
            return None
        return m.groupdict()

    def __repr__(self) -> str:
        guard_names = ", ".join(type(g).__name__ for g in self.guards)
        return f"Route({self.method} {self.path} guards=[{guard_names}])"

class RouteTable:
    """Immutable binding table built once at application startup."""

    def __init__(self, routes: Sequence[Route]) -> None:
        self._routes: Tuple[Route, ...] = tuple(routes)

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def match(self, method: str, path: str) -> Optional[Tuple[Route, Dict[str, str]]]:
        """Find the route for a request. HEAD falls back to the GET route."""
        method = method.upper()
        matched = self._match_exact(method, normalize_path("", path))
        if matched is None and method == "HEAD":
            matched = self._match_exact("GET", normalize_path("", path))
        return matched

    def _match_exact(self, method: str, path: str) -> Optional[Tuple[Route, Dict[str, str]]]:
        for route in self._routes:
            if route.method != method:
                continue
            params = route.match_path(path)
            if params is not None:
                return route, params
        return None

    def allowed_methods(self, path: str) -> List[str]:
        path = normalize_path("", path)
        return [r.method for r in self._routes if r.match_path(path) is not None]

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self):
        return iter(self._routes)
