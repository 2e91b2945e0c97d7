from __future__ import annotations

from .context import ExecutionContext
from .guard import Guard

BUSINESS_ID_HEADER = "business_id"
DEFAULT_BUSINESS_ID = "892367480"

class BusinessGuard(Guard):
    """Allows the request only when `business_id` matches exactly (string equality)."""

    def __init__(self, business_id: str = DEFAULT_BUSINESS_ID) -> None:
        self.business_id = business_id

    def can_activate(self, context: ExecutionContext) -> bool:
        return context.headers.get(BUSINESS_ID_HEADER) == self.business_id
