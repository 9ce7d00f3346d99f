"""Service modules: local store, sync coordinators and local auth."""

from localhands.services.auth_service import AuthError, AuthService
from localhands.services.catalog_store import CatalogStore
from localhands.services.consistency import ConsistencyPropagator
from localhands.services.favorites import FavoritesIndex
from localhands.services.identifier_allocator import IdentifierAllocator
from localhands.services.password_hasher import PasswordHasher, Pbkdf2PasswordHasher
from localhands.services.product_sync import ProductSyncCoordinator
from localhands.services.seller_sync import SellerSyncCoordinator
from localhands.services.startup_sync import InitialSyncReport, run_initial_sync

__all__ = [
    "AuthError",
    "AuthService",
    "CatalogStore",
    "ConsistencyPropagator",
    "FavoritesIndex",
    "IdentifierAllocator",
    "InitialSyncReport",
    "PasswordHasher",
    "Pbkdf2PasswordHasher",
    "ProductSyncCoordinator",
    "SellerSyncCoordinator",
    "run_initial_sync",
]
