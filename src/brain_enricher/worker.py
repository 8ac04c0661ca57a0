"""Standalone enrichment worker: the scheduler without the HTTP surface.

Run with ``brain-enricher-worker``. SIGINT/SIGTERM stop the loop; rows caught
mid-extraction are recovered by the stale-lease rule on the next start.
"""

import asyncio
import logging
import signal

from brain_enricher.config import Settings, get_settings
from brain_enricher.extraction import ExtractorRegistry
from brain_enricher.fetch import SafeFetcher
from brain_enricher.logging_config import configure_logging
from brain_enricher.scheduler import EnrichmentScheduler
from brain_enricher.store import build_store

logger = logging.getLogger(__name__)


async def run_worker(settings: Settings, stop: asyncio.Event | None = None) -> None:
    """Run the scheduler until ``stop`` is set (or SIGINT/SIGTERM arrives)."""
    stop = stop or asyncio.Event()
    loop = asyncio.get_running_loop()
    handled = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
            handled.append(sig)
        except (NotImplementedError, RuntimeError):
            # Not on the main thread, or no signal support on this platform
            pass

    store = build_store(settings)
    await store.initialize()
    async with SafeFetcher.from_settings(settings) as fetcher:
        scheduler = EnrichmentScheduler(
            store, ExtractorRegistry.from_settings(settings, fetcher), settings
        )
        scheduler.start()
        try:
            await stop.wait()
        finally:
            logger.info("Shutdown requested")
            await scheduler.stop()
            await store.close()
            for sig in handled:
                loop.remove_signal_handler(sig)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    asyncio.run(run_worker(settings))


if __name__ == "__main__":
    main()
