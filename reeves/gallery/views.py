import asyncio
import logging
from typing import Set

from .store import GalleryStore

logger = logging.getLogger(__name__)


class ViewCountEmitter:
    """Best-effort view counter.

    increment() returns immediately; the store call runs as a detached task
    and any failure is logged, never raised. Every call counts one view.
    """

    def __init__(self, store: GalleryStore):
        self.store = store
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def increment(self, item_id: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropping view for {item_id}")
            return
        task = loop.create_task(self._send(item_id))
        # held until done
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, item_id: str) -> None:
        try:
            await self.store.increment_views(item_id)
        except Exception:
            logger.exception(f"View count increment failed for {item_id}")

    async def drain(self) -> None:
        """Wait for in-flight increments (shutdown, tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
