"""Session and sync ledger models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SessionContext:
    """The logged-in user, passed explicitly into session-scoped calls."""

    user_id: Optional[int]
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = SessionContext(user_id=None)


@dataclass(frozen=True)
class PendingChange:
    """A local-only write waiting to be replayed against the remote catalog."""

    entity: str  # e.g. "products"
    entity_id: int
    operation: str  # "create", "update" or "delete"
    reason: str  # Why the remote call failed
    recorded_at: datetime
