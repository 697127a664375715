"""Periodic removal of expired cache entries."""

import asyncio
import contextlib
import logging

from docsearch.cache.result_cache import ResultCache
from docsearch.errors import CacheBackendError

logger = logging.getLogger(__name__)


async def sweep_forever(cache: ResultCache, interval: float) -> None:
    """Run ``cache.cleanup_expired()`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await cache.cleanup_expired()
        except CacheBackendError:
            logger.warning("Expired-entry sweep failed; retrying next interval", exc_info=True)


def start_sweeper(cache: ResultCache, interval: float) -> asyncio.Task[None] | None:
    """Start the sweep loop as a background task. A non-positive interval disables it."""
    if interval <= 0:
        logger.info("Cache sweeper disabled")
        return None
    return asyncio.create_task(sweep_forever(cache, interval), name="cache-sweeper")


async def stop_sweeper(task: asyncio.Task[None] | None) -> None:
    """Cancel the sweep task and wait for it to finish."""
    if task is None:
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
