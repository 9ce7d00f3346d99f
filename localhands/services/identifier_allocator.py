"""Identifier allocation for new products."""

import logging
import time
from typing import Callable

from ..clients import CatalogApiClient, Resource

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_MODULUS = 1_000_000


class IdentifierAllocator:
    """Derives the next product id from the remote catalog.

    Allocation is not transactional: two callers allocating at the same time,
    or while offline, can receive the same id. The remote answers a taken id
    with 409, which surfaces as IdentifierCollision on create.
    """

    def __init__(
        self,
        api_client: CatalogApiClient,
        fallback_modulus: int = DEFAULT_FALLBACK_MODULUS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the allocator.

        Args:
            api_client: Connected remote catalog client.
            fallback_modulus: Upper bound (exclusive) of offline fallback ids.
            clock: Returns the current time in seconds. Swappable for tests.
        """
        self._api_client = api_client
        self._fallback_modulus = fallback_modulus
        self._clock = clock

    async def next_id(self) -> int:
        """Return max(remote product ids) + 1, or 1 for an empty catalog.

        Falls back to a time-derived id when the remote list is unavailable.
        """
        result = await self._api_client.list_items(Resource.PRODUCTS)
        if not result.ok:
            fallback = self.fallback_id()
            logger.warning(f"Could not list remote products ({result.error}); using fallback id {fallback}")
            return fallback

        ids = [product.id for product in result.value]
        next_id = max(ids) + 1 if ids else 1
        logger.debug(f"Allocated product id {next_id} from {len(ids)} remote products")
        return next_id

    def fallback_id(self) -> int:
        """Current time in milliseconds modulo the fallback modulus, never 0."""
        millis = int(self._clock() * 1000)
        return (millis % self._fallback_modulus) or 1
