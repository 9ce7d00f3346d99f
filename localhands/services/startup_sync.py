"""Catalog synchronization run when the application starts."""

import logging
from dataclasses import dataclass, field

from ..errors import LocalWriteFailed
from ..models import ReconcileReport
from .product_sync import ProductSyncCoordinator
from .seller_sync import SellerSyncCoordinator

logger = logging.getLogger(__name__)


@dataclass
class InitialSyncReport:
    """What each startup stage achieved."""
    sellers_synced: int = 0
    pending: ReconcileReport = field(default_factory=ReconcileReport)
    products_merged: int = 0
    failed_stages: list[str] = field(default_factory=list)


async def run_initial_sync(
    sellers: SellerSyncCoordinator,
    products: ProductSyncCoordinator,
) -> InitialSyncReport:
    """Bring the local catalog up to date with the remote one.

    Stages run in order: sellers (creating their users), replay of
    local-only product writes, then a full product pull. A stage whose local
    writes fail is logged and the next stage still runs.
    """
    report = InitialSyncReport()

    logger.info("Initial sync: sellers")
    try:
        report.sellers_synced = len(await sellers.sync_sellers_with_api())
    except LocalWriteFailed:
        logger.exception("Initial seller sync failed")
        report.failed_stages.append("sellers")

    logger.info("Initial sync: pending local-only changes")
    try:
        report.pending = await products.push_pending()
    except LocalWriteFailed:
        logger.exception("Replaying pending changes failed")
        report.failed_stages.append("pending")

    logger.info("Initial sync: products")
    try:
        report.products_merged = await products.pull_and_merge_all()
    except LocalWriteFailed:
        logger.exception("Initial product sync failed")
        report.failed_stages.append("products")

    logger.info(
        f"Initial sync done: {report.sellers_synced} sellers, "
        f"{report.products_merged} products, {report.pending.still_pending} changes still pending"
    )
    return report
