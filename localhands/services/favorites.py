"""Favorites: local-only (user, product) pairs and the products they point at."""

import logging
from typing import AsyncIterator, List

from ..errors import NotAuthenticated
from ..models import Favorite, Product, SessionContext
from .catalog_store import CatalogStore

logger = logging.getLogger(__name__)


class FavoritesIndex:
    """Read and mutate a user's favorite products. Never touches the remote."""

    def __init__(self, store: CatalogStore):
        self._store = store

    async def favorites_for_user(self, user_id: int) -> List[Product]:
        return await self._store.favorites.products_for_user(user_id)

    def observe_favorites_for_user(self, user_id: int) -> AsyncIterator[List[Product]]:
        """Live list of the user's favorite products.

        Emits again when a favorite is added or removed, or when a favorited
        product changes.
        """
        return self._store.favorites.observe_products_for_user(user_id)

    async def add(self, user_id: int, product_id: int) -> Favorite:
        """Mark a product as favorite. Adding it twice keeps a single row."""
        favorite = await self._store.favorites.upsert(Favorite(user_id=user_id, product_id=product_id))
        logger.debug(f"User {user_id} added product {product_id} to favorites")
        return favorite

    async def remove(self, user_id: int, product_id: int) -> None:
        """Unmark a product. Does nothing if it was not a favorite."""
        removed = await self._store.favorites.delete(user_id, product_id)
        if removed:
            logger.debug(f"User {user_id} removed product {product_id} from favorites")

    async def is_favorite(self, user_id: int, product_id: int) -> bool:
        return await self._store.favorites.exists(user_id, product_id)

    # Session-scoped variants

    async def favorites_for_session(self, session: SessionContext) -> List[Product]:
        return await self.favorites_for_user(self._user_id(session))

    def observe_favorites_for_session(self, session: SessionContext) -> AsyncIterator[List[Product]]:
        return self.observe_favorites_for_user(self._user_id(session))

    async def add_for_session(self, session: SessionContext, product_id: int) -> Favorite:
        return await self.add(self._user_id(session), product_id)

    async def remove_for_session(self, session: SessionContext, product_id: int) -> None:
        await self.remove(self._user_id(session), product_id)

    async def is_favorite_for_session(self, session: SessionContext, product_id: int) -> bool:
        return await self.is_favorite(self._user_id(session), product_id)

    @staticmethod
    def _user_id(session: SessionContext) -> int:
        if not session.is_authenticated:
            raise NotAuthenticated("No user is logged in")
        return session.user_id
