"""Product write-through with local-only fallback.

Mutations go to the remote catalog first and are mirrored locally. When the
remote call fails the write is kept locally and recorded in the pending_sync
ledger so push_pending() can replay it later.
"""

import logging
from dataclasses import replace
from typing import AsyncIterator, List, Optional

from ..clients import CatalogApiClient, Resource
from ..errors import NotFoundRemotely
from ..models import Product, ReconcileReport, SyncOutcome
from .catalog_store import PRODUCTS, CatalogStore
from .identifier_allocator import IdentifierAllocator

logger = logging.getLogger(__name__)


class ProductSyncCoordinator:
    """Coordinates product writes between the remote catalog and the local store."""

    def __init__(
        self,
        api_client: CatalogApiClient,
        store: CatalogStore,
        allocator: IdentifierAllocator,
    ):
        self._api_client = api_client
        self._store = store
        self._allocator = allocator

    async def create_with_sync(self, product: Product) -> SyncOutcome[Product]:
        """Create a product remotely and mirror it locally.

        The producer name is taken from the owner's local seller record. If
        the remote create fails for any reason, the product is stored locally
        under a time-derived id and a pending create is recorded. Either id is
        moved past any id a local product already holds.

        Args:
            product: Product to create. Its id is ignored.

        Returns:
            SyncOutcome with the persisted product, SYNCED when the remote
            confirmed it, LOCAL_ONLY otherwise. The id is never 0.

        Raises:
            LocalWriteFailed: If the local store rejects the write.
        """
        if product.owner_id is not None:
            seller = await self._store.sellers.get(product.owner_id)
            if seller is not None:
                product = replace(product, producer=seller.entrepreneurship)
            else:
                logger.warning(
                    f"No local seller {product.owner_id}; keeping producer '{product.producer}'"
                )

        new_id = await self._free_local_id(await self._allocator.next_id())
        result = await self._api_client.create_item(
            Resource.PRODUCTS, replace(product, id=new_id), entity_id=new_id
        )

        if result.ok:
            stored = await self._store.products.upsert(result.value)
            logger.info(f"Created product {stored.id} remotely")
            return SyncOutcome.synced(stored)

        reason = str(result.error)
        local = replace(product, id=await self._free_local_id(self._allocator.fallback_id()))
        with self._store.transaction():
            await self._store.products.upsert(local)
            await self._store.pending.record(PRODUCTS, local.id, "create", reason)

        logger.warning(f"Product stored locally only with id {local.id}: {reason}")
        return SyncOutcome.local_only(local, reason)

    async def update_with_sync(self, product: Product) -> bool:
        """Update a product remotely and always write it locally.

        Returns:
            True if the remote confirmed the update, False if it is local-only.
        """
        result = await self._api_client.update_item(Resource.PRODUCTS, product.id, product)

        with self._store.transaction():
            await self._store.products.upsert(product)
            if result.ok:
                await self._store.pending.remove(PRODUCTS, product.id)
            else:
                await self._store.pending.record(PRODUCTS, product.id, "update", str(result.error))

        if result.ok:
            logger.debug(f"Product {product.id} updated remotely and locally")
        else:
            logger.warning(f"Product {product.id} updated locally only: {result.error}")
        return result.ok

    async def delete_with_sync(self, product: Product) -> bool:
        """Delete a product remotely and always delete it locally.

        A remote 404 counts as confirmed: the product is already gone.

        Returns:
            True if the remote confirmed the delete, False if it is local-only.
        """
        result = await self._api_client.delete_item(Resource.PRODUCTS, product.id)
        confirmed = result.ok or isinstance(result.error, NotFoundRemotely)

        with self._store.transaction():
            await self._store.products.delete(product.id)
            if confirmed:
                await self._store.pending.remove(PRODUCTS, product.id)
            else:
                await self._store.pending.record(PRODUCTS, product.id, "delete", str(result.error))

        if not confirmed:
            logger.warning(f"Product {product.id} deleted locally only: {result.error}")
        return confirmed

    async def pull_and_merge_all(self) -> int:
        """Replace local products with the remote list. Best effort.

        Returns:
            Number of products merged, 0 when the remote list is unavailable.
        """
        result = await self._api_client.list_items(Resource.PRODUCTS)
        if not result.ok:
            logger.error(f"Product sync skipped, remote list failed: {result.error}")
            return 0

        merged = await self._store.products.bulk_upsert(result.value)
        logger.info(f"Merged {merged} remote products into the local store")
        return merged

    async def push_pending(self) -> ReconcileReport:
        """Replay local-only product writes against the remote catalog.

        Pending creates get a freshly allocated id. Once the remote accepts
        them, the local row and its favorites move to the remote id.
        """
        created = updated = deleted = still_pending = 0

        for change in await self._store.pending.list_all(PRODUCTS):
            if change.operation == "delete":
                result = await self._api_client.delete_item(Resource.PRODUCTS, change.entity_id)
                if result.ok or isinstance(result.error, NotFoundRemotely):
                    await self._store.pending.remove(PRODUCTS, change.entity_id)
                    deleted += 1
                else:
                    still_pending += 1
                continue

            product = await self._store.products.get(change.entity_id)
            if product is None:
                logger.debug(f"Dropping pending {change.operation} for missing product {change.entity_id}")
                await self._store.pending.remove(PRODUCTS, change.entity_id)
                continue

            if change.operation == "create":
                if await self._push_create(product):
                    created += 1
                else:
                    still_pending += 1
            else:
                result = await self._api_client.update_item(Resource.PRODUCTS, product.id, product)
                if result.ok:
                    await self._store.pending.remove(PRODUCTS, product.id)
                    updated += 1
                else:
                    still_pending += 1

        report = ReconcileReport(
            created=created, updated=updated, deleted=deleted, still_pending=still_pending
        )
        logger.info(
            f"Pending product sync: {created} created, {updated} updated, "
            f"{deleted} deleted, {still_pending} still pending"
        )
        return report

    async def _push_create(self, product: Product) -> bool:
        new_id = await self._free_local_id(await self._allocator.next_id())
        result = await self._api_client.create_item(
            Resource.PRODUCTS, replace(product, id=new_id), entity_id=new_id
        )
        if not result.ok:
            return False

        remote = result.value
        with self._store.transaction():
            # The remote has the product now, so the create must never be replayed
            await self._store.pending.remove(PRODUCTS, product.id)

            if remote.id == product.id:
                await self._store.products.upsert(remote)
            elif await self._store.products.get(remote.id) is None:
                await self._store.products.rekey(product.id, remote.id)
                await self._store.products.upsert(remote)
            else:
                logger.error(
                    f"Remote assigned id {remote.id} to local-only product {product.id}, "
                    f"but that id is held by another local product; keeping the local row as {product.id}"
                )
                return True

        logger.info(f"Local-only product {product.id} created remotely as {remote.id}")
        return True

    async def _free_local_id(self, candidate: int) -> int:
        """First id at or above `candidate` that no local product holds."""
        while await self._store.products.get(candidate) is not None:
            candidate += 1
        return candidate

    # Read paths, local only

    async def by_id(self, product_id: int) -> Optional[Product]:
        return await self._store.products.get(product_id)

    def observe_by_id(self, product_id: int) -> AsyncIterator[Optional[Product]]:
        return self._store.products.observe(product_id)

    async def by_owner(self, owner_id: int) -> List[Product]:
        return await self._store.products.by_owner(owner_id)

    def observe_by_owner(self, owner_id: int) -> AsyncIterator[List[Product]]:
        return self._store.products.observe_by_owner(owner_id)

    async def by_category(self, category: str) -> List[Product]:
        return await self._store.products.by_category(category)

    async def by_city(self, city: str) -> List[Product]:
        return await self._store.products.by_city(city)

    async def by_seller_name_search(self, query: str) -> List[Product]:
        return await self._store.products.search_by_producer(query)

    async def search(self, query: str) -> List[Product]:
        return await self._store.products.search(query)

    async def categories(self) -> List[str]:
        return await self._store.products.categories()

    async def all(self) -> List[Product]:
        return await self._store.products.list_all()

    def observe_all(self) -> AsyncIterator[List[Product]]:
        return self._store.products.observe_all()
