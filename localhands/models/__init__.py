"""Data models module."""

from localhands.models.favorite import Favorite
from localhands.models.product import Product
from localhands.models.results import (
    OperationResult,
    PropagationReport,
    ReconcileReport,
    RemoteResult,
    SyncOutcome,
    SyncState,
)
from localhands.models.seller import Seller, SellerPatch
from localhands.models.session import ANONYMOUS, PendingChange, SessionContext
from localhands.models.user import User, UserRole

__all__ = [
    "ANONYMOUS",
    "Favorite",
    "OperationResult",
    "PendingChange",
    "Product",
    "PropagationReport",
    "ReconcileReport",
    "RemoteResult",
    "Seller",
    "SellerPatch",
    "SessionContext",
    "SyncOutcome",
    "SyncState",
    "User",
    "UserRole",
]
