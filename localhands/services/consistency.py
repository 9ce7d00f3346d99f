"""Keeps the producer name on products in step with the seller's business name."""

import asyncio
import logging
from dataclasses import replace

from ..models import Product, PropagationReport
from .catalog_store import CatalogStore
from .product_sync import ProductSyncCoordinator

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4


class ConsistencyPropagator:
    """Fans a seller rename out to every product the seller owns."""

    def __init__(
        self,
        product_sync: ProductSyncCoordinator,
        store: CatalogStore,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        self._product_sync = product_sync
        self._store = store
        self._concurrency = concurrency

    async def propagate_producer_rename(self, owner_id: int, new_name: str) -> PropagationReport:
        """Rewrite `producer` on every locally known product of `owner_id`.

        Each renamed product is pushed remotely and always written locally,
        so a remote failure for one product never stops the others. Products
        are distinct rows, so at most one write per product is in flight.

        Args:
            owner_id: Seller (and user) id owning the products.
            new_name: The seller's new entrepreneurship name.

        Returns:
            PropagationReport with how many products the remote confirmed.

        Raises:
            LocalWriteFailed: If the local store rejects a write. Raised after
                every other rename has finished.
        """
        products = await self._store.products.by_owner(owner_id)
        if not products:
            logger.info(f"No local products for seller {owner_id}, nothing to rename")
            return PropagationReport()

        semaphore = asyncio.Semaphore(self._concurrency)

        async def rename(product: Product) -> bool:
            async with semaphore:
                confirmed = await self._product_sync.update_with_sync(replace(product, producer=new_name))
                logger.debug(f"Product {product.id} renamed to '{new_name}' (remote: {confirmed})")
                return confirmed

        results = await asyncio.gather(
            *(rename(product) for product in products), return_exceptions=True
        )
        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            logger.error(
                f"Seller {owner_id} rename: {len(errors)} of {len(results)} products could not be saved"
            )
            raise errors[0]

        report = PropagationReport(total=len(results), remote_confirmed=sum(results))
        if report.local_only:
            logger.warning(
                f"Seller {owner_id} rename: {report.local_only} of {report.total} products saved locally only"
            )
        else:
            logger.info(f"Seller {owner_id} rename propagated to {report.total} products")
        return report
