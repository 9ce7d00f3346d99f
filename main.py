import asyncio
import logging

from localhands.bootstrap import build_services
from localhands.config import get_config, get_environment
from localhands.services import run_initial_sync

logger = logging.getLogger(__name__)


async def main():
    """Open the local catalog and run the startup sync against the remote API."""
    config = get_config()

    async with build_services(config) as services:
        if not config.sync.initial_sync_on_startup:
            logger.info("Initial sync disabled")
            return

        report = await run_initial_sync(services.sellers, services.products)

    print("Initial sync complete:")
    print(f"  - Sellers synced: {report.sellers_synced}")
    print(f"  - Pending changes pushed: {report.pending.created + report.pending.updated + report.pending.deleted}")
    print(f"  - Pending changes left: {report.pending.still_pending}")
    print(f"  - Products merged: {report.products_merged}")
    if report.failed_stages:
        print(f"  - Failed stages: {', '.join(report.failed_stages)}")


if __name__ == "__main__":
    logging.basicConfig(level=get_config().logging.level)
    logger.info(f"Environment: {get_environment()}")
    asyncio.run(main())
