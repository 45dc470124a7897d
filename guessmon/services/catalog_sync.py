"""
Startup catalog sync - runs the engine once and merges the result
"""
import asyncio
import logging
from typing import Dict, Optional

from guessmon.core.catalog import CatalogStore
from guessmon.core.sync import SyncEngine


logger = logging.getLogger(__name__)


class SyncStatus:
    """Progress sink that remembers the latest state for the status endpoint"""

    def __init__(self):
        self.state = "idle"     # idle | syncing | synced | cancelled | failed
        self.message = ""
        self.new_count = 0

    def __call__(self, message: str) -> None:
        self.message = message

    def as_dict(self) -> Dict:
        return {"status": self.state, "message": self.message, "new_count": self.new_count}


async def run_startup_sync(
    store: CatalogStore,
    engine: SyncEngine,
    status: Optional[SyncStatus] = None,
) -> int:
    """
    Sync once and merge into the store

    If the task is cancelled before the engine returns, nothing is merged and
    CancelledError propagates to the canceller.

    Args:
        store: Catalog to update
        engine: Configured SyncEngine
        status: Optional SyncStatus receiving progress

    Returns:
        Number of creatures added
    """
    status = status or SyncStatus()
    if store.merged:
        logger.info("Catalog already merged, skipping sync")
        return 0

    status.state = "syncing"
    status.message = "Checking for new creatures..."

    try:
        result = await engine.sync(status)
    except asyncio.CancelledError:
        status.state = "cancelled"
        logger.info("🛑 Catalog sync cancelled, nothing merged")
        raise

    try:
        added = store.merge(result)
    except Exception as e:
        status.state = "failed"
        status.message = "Sync failed, using bundled catalog"
        logger.warning(f"⚠️ Catalog merge failed, keeping bundled catalog: {type(e).__name__}: {e}")
        return 0

    status.new_count = added
    status.state = "synced"
    status.message = f"+{added} new creatures synced!" if added else "Database is up to date"
    return added
