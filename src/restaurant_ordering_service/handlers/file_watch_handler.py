"""Watcher that recomputes bestsellers when completedOrders.json changes.

Orders completed through the API already trigger a recomputation, so changes
left by the service's own writes are ignored. The watcher covers edits made
outside the service (imports, manual fixes). It polls the file's modification
time and waits until the file has been quiet for the debounce delay, so a burst
of writes causes a single recomputation.
"""

import asyncio
import contextlib
import logging
import time
from pathlib import Path

from restaurant_ordering_service.errors import StorageError
from restaurant_ordering_service.repositories.json_store import JsonDocumentStore
from restaurant_ordering_service.services.bestseller_service import BestsellerService

logger = logging.getLogger(__name__)


class CompletedOrdersWatcher:
    """Polls the completed orders file and triggers bestseller recomputation."""

    def __init__(
        self,
        path: Path,
        bestseller_service: BestsellerService,
        poll_interval_seconds: float = 0.5,
        debounce_seconds: float = 1.0,
        store: JsonDocumentStore | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            path: Path of completedOrders.json
            bestseller_service: Service to recompute bestsellers with
            poll_interval_seconds: How often to check the modification time
            debounce_seconds: Quiet period required before recomputing
            store: Store that writes the file from inside the service, if any
        """
        self.path = Path(path)
        self.bestseller_service = bestseller_service
        self.poll_interval_seconds = poll_interval_seconds
        self.debounce_seconds = debounce_seconds
        self.store = store

        self._last_mtime = self._current_mtime()
        self._pending_since: float | None = None
        self._task: asyncio.Task | None = None

    def _current_mtime(self) -> float | None:
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError:
            return None

    def _is_own_write(self, mtime: float | None) -> bool:
        if self.store is None or mtime is None:
            return False
        return mtime == self.store.last_written_mtime

    def check_once(self, now: float | None = None) -> bool:
        """Poll the file once.

        Args:
            now: Monotonic timestamp to use (defaults to time.monotonic())

        Returns:
            True when a change has settled and a recomputation is due
        """
        now = time.monotonic() if now is None else now
        mtime = self._current_mtime()

        if mtime != self._last_mtime:
            self._last_mtime = mtime
            if self._is_own_write(mtime):
                logger.debug(f"Ignoring change to {self.path} written by the service")
                return False
            self._pending_since = now
            logger.debug(f"Detected change to {self.path}")
            return False

        if self._pending_since is not None and now - self._pending_since >= self.debounce_seconds:
            self._pending_since = None
            return True

        return False

    async def run(self) -> None:
        """Poll until cancelled, recomputing after each settled change."""
        logger.info(f"Watching {self.path} for changes")
        while True:
            await asyncio.sleep(self.poll_interval_seconds)
            if not self.check_once():
                continue

            logger.info("Completed orders changed, recomputing bestsellers")
            try:
                await asyncio.to_thread(self.bestseller_service.recompute, "file_watch")
            except StorageError as e:
                # Keep watching; the next change gets another attempt
                logger.error(f"Bestseller recomputation after file change failed: {e}")

    def start(self) -> None:
        """Start polling in a background task on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
