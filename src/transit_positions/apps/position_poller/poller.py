"""Main orchestrator for the position poller service.

Wire together the TransitView feed and a position store: on every cycle
capture the time, fetch the all-routes snapshot, insert it as one
transaction, log the outcome, then wait for the configured interval.
A failed cycle is logged and the next one runs as normal; only schema
initialisation at startup is fatal.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from transit_positions.core.models import count_positions

if TYPE_CHECKING:
    from transit_positions.core.protocols import PositionFeed, PositionStore

logger = logging.getLogger(__name__)


class PositionPoller:
    """Poll the feed forever and persist each snapshot.

    Cycles never overlap: the wait starts only after a cycle has finished,
    so a slow cycle delays the next one instead of being skipped or run
    concurrently.  Missed intervals are not caught up.

    Args:
        feed: Source of all-routes snapshots.
        store: Destination for snapshots; owned by the poller once running.
        interval_seconds: Seconds to wait between the end of one cycle and
            the start of the next.

    """

    def __init__(
        self,
        feed: PositionFeed,
        store: PositionStore,
        interval_seconds: float,
    ) -> None:
        """Initialize the poller with its collaborators.

        Args:
            feed: Source of all-routes snapshots.
            store: Destination for snapshots.
            interval_seconds: Seconds to wait between cycles.

        """
        self._feed = feed
        self._store = store
        self._interval_seconds = interval_seconds
        self._stop = asyncio.Event()
        self._cycles = 0
        self._failed_cycles = 0
        self._total_written = 0

    async def run(self) -> None:
        """Execute the polling loop until shutdown.

        Steps:
            1. Install SIGINT/SIGTERM handlers.
            2. Initialise the store schema (failure propagates).
            3. Run a cycle, then wait ``interval_seconds`` or until shutdown.
            4. On shutdown, close the feed and the store.

        Raises:
            SchemaError: If the store schema cannot be initialised.

        """
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, self._handle_shutdown)
        loop.add_signal_handler(signal.SIGTERM, self._handle_shutdown)

        try:
            await self._store.init_db()
            logger.info(
                "Starting position polling every %ss (dedup=%s)",
                self._interval_seconds,
                self._store.enforces_unique_key,
            )
            while not self._stop.is_set():
                await self.run_cycle()
                await self._wait()
        finally:
            try:
                await self._feed.close()
            finally:
                await self._store.close()
            logger.info(
                "[POLLER] shut down cycles=%d failed=%d written=%d",
                self._cycles,
                self._failed_cycles,
                self._total_written,
            )

    async def run_cycle(self) -> bool:
        """Fetch one snapshot and insert it.

        Any error from the fetch or the insert is logged with its
        traceback and the cycle counts as failed; nothing is raised.

        Returns:
            ``True`` if the snapshot was committed, ``False`` otherwise.

        """
        self._cycles += 1
        captured_at = _now()
        try:
            snapshot = await self._feed.get_all_positions()
            written = await self._store.insert_snapshot(captured_at, snapshot)
        except Exception:
            self._failed_cycles += 1
            logger.exception("Poll cycle at %s failed", captured_at.isoformat())
            return False

        self._total_written += written
        logger.info(
            "[POLLER] committed snapshot fetched=%d written=%d routes=%d read_time=%s",
            count_positions(snapshot),
            written,
            len(snapshot),
            captured_at.isoformat(),
        )
        return True

    def _handle_shutdown(self) -> None:
        """Set the stop event for graceful exit on SIGINT/SIGTERM."""
        logger.info("Shutdown signal received")
        self._stop.set()

    async def _wait(self) -> None:
        """Sleep for the interval, returning early if shutdown is requested."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self._interval_seconds)
        except TimeoutError:
            pass


def _now() -> datetime:
    """Return the current UTC time truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)
