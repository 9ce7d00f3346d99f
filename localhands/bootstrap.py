"""Builds the connected service graph from configuration."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from localhands.clients import CatalogApiClient
from localhands.config import AppConfig
from localhands.services import (
    AuthService,
    CatalogStore,
    ConsistencyPropagator,
    FavoritesIndex,
    IdentifierAllocator,
    ProductSyncCoordinator,
    SellerSyncCoordinator,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Every service a caller needs, sharing one store and one API client."""
    api_client: CatalogApiClient
    store: CatalogStore
    allocator: IdentifierAllocator
    products: ProductSyncCoordinator
    propagator: ConsistencyPropagator
    sellers: SellerSyncCoordinator
    favorites: FavoritesIndex
    auth: AuthService


@asynccontextmanager
async def build_services(
    config: AppConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[Services]:
    """Open the store and the API client and wire the services together.

    Both are closed when the block exits.

    Args:
        config: Application configuration.
        transport: Optional httpx transport for the API client (used by tests).
    """
    store = CatalogStore(config.database.path)
    api_client = CatalogApiClient(
        base_url=config.api.base_url,
        timeout_seconds=config.api.timeout_seconds,
        token=config.api.token,
        transport=transport,
    )

    try:
        async with api_client:
            allocator = IdentifierAllocator(api_client, config.sync.fallback_id_modulus)
            products = ProductSyncCoordinator(api_client, store, allocator)
            propagator = ConsistencyPropagator(products, store, config.sync.propagation_concurrency)

            logger.debug(f"Services ready (api={config.api.base_url}, db={config.database.path})")
            yield Services(
                api_client=api_client,
                store=store,
                allocator=allocator,
                products=products,
                propagator=propagator,
                sellers=SellerSyncCoordinator(api_client, store, propagator),
                favorites=FavoritesIndex(store),
                auth=AuthService(store),
            )
    finally:
        store.close()
