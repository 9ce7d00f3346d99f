"""Result types returned across the sync layer.

Expected failures travel as values, not exceptions:
- RemoteResult: what the remote client returns for every call
- SyncOutcome: whether a write reached the remote or stayed local
- OperationResult: caller-facing success/failure with a message
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from localhands.errors import CatalogSyncError

T = TypeVar("T")


@dataclass(frozen=True)
class RemoteResult(Generic[T]):
    """Outcome of a single remote call."""

    value: Optional[T] = None
    error: Optional[CatalogSyncError] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried error if the call failed."""
        if self.error is not None:
            raise self.error
        return self.value


class SyncState(str, Enum):
    SYNCED = "synced"
    LOCAL_ONLY = "local_only"


@dataclass(frozen=True)
class SyncOutcome(Generic[T]):
    """A persisted entity tagged with whether the remote confirmed it."""

    value: T
    state: SyncState
    reason: Optional[str] = None

    @classmethod
    def synced(cls, value: T) -> "SyncOutcome[T]":
        return cls(value=value, state=SyncState.SYNCED)

    @classmethod
    def local_only(cls, value: T, reason: str) -> "SyncOutcome[T]":
        return cls(value=value, state=SyncState.LOCAL_ONLY, reason=reason)

    @property
    def is_synced(self) -> bool:
        return self.state == SyncState.SYNCED


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Success value or failure message for user-facing operations."""

    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "OperationResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return "" if self.error is None else str(self.error)


@dataclass(frozen=True)
class ReconcileReport:
    """Counts from replaying the pending local-only ledger."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    still_pending: int = 0


@dataclass(frozen=True)
class PropagationReport:
    """Counts from a producer rename fan-out."""

    total: int = 0
    remote_confirmed: int = 0

    @property
    def local_only(self) -> int:
        return self.total - self.remote_confirmed
