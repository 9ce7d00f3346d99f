"""Seller write-through.

Unlike products, seller profile edits are never kept local-only: sellers are
visible to other users, so a remote failure leaves the local store untouched.
"""

import logging
from dataclasses import replace
from typing import AsyncIterator, List, Optional

from ..clients import CatalogApiClient, Resource
from ..errors import LocalWriteFailed, NotFoundRemotely
from ..models import OperationResult, Seller, SellerPatch, User, UserRole
from .catalog_store import SELLERS, CatalogStore
from .consistency import ConsistencyPropagator

logger = logging.getLogger(__name__)


class SellerSyncCoordinator:
    """Coordinates seller writes between the remote catalog and the local store."""

    def __init__(
        self,
        api_client: CatalogApiClient,
        store: CatalogStore,
        propagator: Optional[ConsistencyPropagator] = None,
    ):
        self._api_client = api_client
        self._store = store
        self._propagator = propagator

    async def convert_to_seller(
        self,
        user: User,
        entrepreneurship: str,
        address: str,
    ) -> OperationResult[Seller]:
        """Register a user as a seller under the user's own id.

        The remote seller list is scanned for the user's id: an existing
        seller is PATCHed, otherwise one is created with the user's id. Any
        remote failure returns a failure before anything is written locally.
        The seller row and the role promotion are committed together.

        Args:
            user: Stored user to promote.
            entrepreneurship: Business name shown as producer on products.
            address: Seller address.

        Returns:
            OperationResult with the stored seller.

        Raises:
            LocalWriteFailed: If the local transaction fails.
        """
        try:
            seller = Seller.for_user(user, entrepreneurship, address)
        except ValueError as e:
            return OperationResult.failure(e)

        listing = await self._api_client.list_items(Resource.SELLERS)
        if not listing.ok:
            return OperationResult.failure(listing.error)

        if any(remote.id == seller.id for remote in listing.value):
            logger.info(f"Seller {seller.id} exists remotely, patching")
            result = await self._api_client.patch_item(
                Resource.SELLERS, seller.id, SellerPatch.from_seller(seller)
            )
        else:
            logger.info(f"Creating remote seller {seller.id}")
            result = await self._api_client.create_item(Resource.SELLERS, seller, entity_id=seller.id)

        if not result.ok:
            return OperationResult.failure(result.error)

        stored = result.value if result.value is not None and result.value.id == seller.id else seller
        with self._store.transaction():
            # Only the role changes; the stored row may be newer than `user`
            if await self._store.users.get(user.id) is None:
                await self._store.users.upsert(replace(user, role=UserRole.SELLER))
            else:
                await self._store.users.set_role(user.id, UserRole.SELLER)
            await self._store.sellers.upsert(stored)

        logger.info(f"User {user.id} converted to seller '{stored.entrepreneurship}'")
        return OperationResult.success(stored)

    async def update_seller_api(self, seller: Seller) -> OperationResult[Seller]:
        """Push a seller profile edit, PATCH first and PUT as fallback.

        Returns:
            OperationResult with the stored seller. Fails with
            NotFoundRemotely when the remote has no such seller, and with the
            remote error when both PATCH and PUT fail. No local write happens
            on failure.
        """
        current = await self._api_client.get_item(Resource.SELLERS, seller.id)
        if not current.ok:
            error = current.error
            if not isinstance(error, NotFoundRemotely):
                error = NotFoundRemotely(SELLERS, seller.id)
                error.__cause__ = current.error
            return OperationResult.failure(error)

        patch = SellerPatch.from_seller(seller)
        result = await self._api_client.patch_item(Resource.SELLERS, seller.id, patch)
        if not result.ok:
            logger.warning(f"PATCH of seller {seller.id} failed ({result.status_code}), retrying with PUT")
            result = await self._api_client.put_item(Resource.SELLERS, seller.id, patch)
            if not result.ok:
                logger.error(f"PUT of seller {seller.id} failed ({result.status_code}), nothing saved")
                return OperationResult.failure(result.error)

        if result.value is not None:
            updated = result.value
        else:
            # No usable echo from the server: apply the patch to the remote record
            updated = replace(
                current.value,
                name=patch.name,
                lastname=patch.lastname,
                phone=patch.phone,
                address=patch.address,
                entrepreneurship=patch.entrepreneurship,
                photo_url=patch.photo_url,
            )

        with self._store.transaction():
            await self._ensure_seller_user(updated)
            await self._store.sellers.upsert(updated)

        return OperationResult.success(updated)

    async def save_seller_profile(self, seller: Seller) -> OperationResult[Seller]:
        """Save a profile edit remotely, then mirror it onto the local user.

        A changed entrepreneurship name is propagated to the seller's products.
        """
        previous = await self._store.sellers.get(seller.id)

        result = await self.update_seller_api(seller)
        if not result.ok:
            return result
        saved = result.value

        user = await self._store.users.get(saved.id)
        if user is not None:
            await self._store.users.update(
                replace(
                    user,
                    name=saved.name,
                    last_name=saved.lastname,
                    email=saved.email,
                    phone=saved.phone,
                    address=saved.address,
                )
            )

        renamed = previous is None or previous.entrepreneurship != saved.entrepreneurship
        if renamed and self._propagator is not None:
            await self._propagator.propagate_producer_rename(saved.id, saved.entrepreneurship)

        return result

    async def sync_sellers_with_api(self) -> List[Seller]:
        """Pull every remote seller into the local store.

        Each seller's co-identity user is created or promoted first. A seller
        that cannot be stored is logged and skipped.

        Returns:
            The remote seller list, or [] when it could not be fetched.
        """
        result = await self._api_client.list_items(Resource.SELLERS)
        if not result.ok:
            logger.error(f"Seller sync skipped, remote list failed: {result.error}")
            return []

        inserted = updated = failed = 0
        for seller in result.value:
            try:
                existed = await self._store.sellers.get(seller.id) is not None
                with self._store.transaction():
                    await self._ensure_seller_user(seller)
                    await self._store.sellers.upsert(seller)
            except LocalWriteFailed as e:
                failed += 1
                logger.error(f"Could not store seller {seller.id} ({seller.email}): {e}")
                continue

            if existed:
                updated += 1
            else:
                inserted += 1

        logger.info(
            f"Seller sync: {len(result.value)} remote, {inserted} inserted, "
            f"{updated} updated, {failed} failed"
        )
        return result.value

    async def get_seller_by_email(self, email: str) -> Optional[Seller]:
        """Find a remote seller by email, ignoring case.

        Uses the server-side email filter first and falls back to scanning
        the full list when that yields nothing.
        """
        wanted = email.strip().lower()

        filtered = await self._api_client.list_items(Resource.SELLERS, email=email.strip())
        if filtered.ok:
            match = self._first_with_email(filtered.value, wanted)
            if match is not None:
                return match
            logger.debug(f"Email filter found no seller for {wanted}, scanning full list")

        full = await self._api_client.list_items(Resource.SELLERS)
        if not full.ok:
            return None
        return self._first_with_email(full.value, wanted)

    async def is_user_seller(self, email: str) -> bool:
        return await self.get_seller_by_email(email) is not None

    async def get_seller(self, seller_id: int) -> Optional[Seller]:
        return await self._store.sellers.get(seller_id)

    def observe_seller(self, seller_id: int) -> AsyncIterator[Optional[Seller]]:
        return self._store.sellers.observe(seller_id)

    async def all_sellers(self) -> List[Seller]:
        return await self._store.sellers.list_all()

    async def _ensure_seller_user(self, seller: Seller) -> None:
        """Make sure user N exists with role SELLER before seller N is stored."""
        user = await self._store.users.get(seller.id)
        if user is None:
            await self._store.users.upsert(
                User(
                    id=seller.id,
                    name=seller.name,
                    last_name=seller.lastname,
                    email=seller.email,
                    password="",
                    role=UserRole.SELLER,
                    phone=seller.phone,
                    address=seller.address,
                    photo_url=seller.photo_url,
                )
            )
            logger.debug(f"Created local user {seller.id} for remote seller {seller.email}")
        elif not user.is_seller:
            await self._store.users.set_role(user.id, UserRole.SELLER)

    @staticmethod
    def _first_with_email(sellers: List[Seller], email: str) -> Optional[Seller]:
        return next((seller for seller in sellers if seller.email.lower() == email), None)
