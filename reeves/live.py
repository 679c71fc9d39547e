"""
Live listings for the admin screens.

A Subscription pushes the full result set to its callback once when it
starts and again after every change to the underlying collection. It is an
explicit resource: whoever starts one must close it (or use it as an async
context manager) so no listener outlives the screen that asked for it.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import StoreError

logger = logging.getLogger(__name__)


class ChangeStreamWaiter:
    """Awaitable that resolves True once the collection has changed."""

    def __init__(self, collection: Collection, max_await_ms: int = 1000):
        self.collection = collection
        self.max_await_ms = max_await_ms
        self._stream = None

    def _next_change(self) -> bool:
        if self._stream is None:
            self._stream = self.collection.watch(max_await_time_ms=self.max_await_ms)
        return self._stream.try_next() is not None

    async def __call__(self) -> bool:
        try:
            return await asyncio.to_thread(self._next_change)
        except PyMongoError as exc:
            raise StoreError(f"Change stream failed: {exc}") from exc

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None


def change_stream_waiter(collection: Collection) -> ChangeStreamWaiter:
    return ChangeStreamWaiter(collection)


class Subscription:
    def __init__(
        self,
        fetch: Callable[[], Awaitable[list]],
        wait_for_change: Callable[[], Awaitable[bool]],
        on_snapshot: Callable[[list], object],
        retry_delay: float = 1.0,
    ):
        self._fetch = fetch
        self._wait_for_change = wait_for_change
        self._on_snapshot = on_snapshot
        self.retry_delay = retry_delay
        self._task: Optional[asyncio.Task] = None
        self.closed = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> "Subscription":
        if self.closed:
            raise RuntimeError("Subscription already closed")
        if self._task is not None:
            return self
        await self._push()
        self._task = asyncio.create_task(self._listen())
        return self

    async def _push(self) -> None:
        try:
            items = await self._fetch()
        except StoreError as exc:
            logger.warning(f"Live listing refresh failed: {exc}")
            return
        result = self._on_snapshot(items)
        if inspect.isawaitable(result):
            await result

    async def _listen(self) -> None:
        while not self.closed:
            try:
                changed = await self._wait_for_change()
            except StoreError as exc:
                logger.warning(f"Live listing lost its change feed, retrying: {exc}")
                await asyncio.sleep(self.retry_delay)
                continue
            if changed:
                await self._push()

    async def close(self) -> None:
        self.closed = True
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Live listing stopped with an error before close")
        closer = getattr(self._wait_for_change, "close", None)
        if closer is not None:
            closer()

    async def __aenter__(self) -> "Subscription":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
