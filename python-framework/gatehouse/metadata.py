"""
Gatehouse Metadata - declarative data attached to handlers and controllers.

Metadata is stored in a `__metadata__` dict on the decorated function or
class and read back through a `Reflector`. Nothing is evaluated at request
time beyond a dictionary lookup.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, TypeVar

T = TypeVar("T")

METADATA_ATTR = "__metadata__"
AUTHORIZED_KEY = "authorized"

def SetMetadata(key: str, *values: str) -> Callable[[T], T]:
    """
    Decorator attaching `values` under `key` to a function or a class.

    Usage:
        @SetMetadata("roles", "admin")
        @get("/admin")
        def admin(self): ...
    """
    def decorator(target: T) -> T:
        # Copy so a subclass never writes into its parent's table.
        table: Dict[str, Tuple[str, ...]] = dict(getattr(target, METADATA_ATTR, {}))
        table[key] = tuple(values)
        setattr(target, METADATA_ATTR, table)
        return target
    return decorator

def Authorized(*tags: str) -> Callable[[T], T]:
    """Attach authorization tags (read by AuthGuard)."""
    return SetMetadata(AUTHORIZED_KEY, *tags)

class Reflector:
    """Reads metadata attached with SetMetadata."""

    def get(self, key: str, target: Any) -> Optional[Tuple[str, ...]]:
        if target is None:
            return None
        # Bound methods proxy attribute access to their function.
        table = getattr(target, METADATA_ATTR, None)
        if not table:
            return None
        return table.get(key)

    def get_all_and_override(self, key: str, targets: Iterable[Any]) -> Optional[Tuple[str, ...]]:
        """
        Return the value from the first target that defines `key`.

        With targets `[handler, controller]` a handler-level definition wins
        outright; the two are never merged.
        """
        for target in targets:
            value = self.get(key, target)
            if value is not None:
                return value
        return None
