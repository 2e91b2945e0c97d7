from __future__ import annotations
import inspect
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Iterable, Type, Union

if TYPE_CHECKING:
    from .context import ExecutionContext

logger = logging.getLogger(__name__)

CanActivateResult = Union[bool, Awaitable[bool]]

class Guard(ABC):
    """
    Base class for all Guards.
    Guards are responsible for determining whether a request should be handled
    by the route handler or not. They are typically used for permissions,
    authentication, and throttling.

    A guard instance is shared by every request bound to it, so it must not
    keep per-request state between calls.
    """

    @abstractmethod
    def can_activate(self, context: ExecutionContext) -> CanActivateResult:
        """
        Return `True` to allow the request to proceed.
        Return `False` to deny access (403 Forbidden).
        Return an awaitable to decide asynchronously.
        Raise an HTTPException to customize the error.

        Args:
            context: The ExecutionContext of the current request.
        """
        pass

GuardLike = Union[Guard, Type[Guard]]

def resolve_guard(guard: GuardLike) -> Guard:
    """Instantiate a guard class, or pass an instance through."""
    if isinstance(guard, type):
        if not issubclass(guard, Guard):
            raise ValueError(f"{guard.__name__} is not a Guard subclass")
        return guard()
    if not isinstance(guard, Guard):
        raise ValueError(f"{guard!r} is not a Guard")
    return guard

async def can_activate_all(guards: Iterable[Guard], context: Any) -> bool:
    """
    Evaluate guards strictly in order, awaiting each one before the next.

    Stops at the first guard that denies; later guards are never called.
    """
    for guard in guards:
        result = guard.can_activate(context)

        if inspect.isawaitable(result):
            allow = await result
        else:
            allow = result

        if not allow:
            logger.debug("Guard %s denied access", type(guard).__name__)
            return False
    return True
