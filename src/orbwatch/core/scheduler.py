"""Periodic batch re-propagation of the catalog."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

from orbwatch.core.catalog import CatalogStore, PositionUpdate
from orbwatch.core.propagation import propagate_batch
from orbwatch.utils.constants import UPDATE_INTERVAL_S

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshScheduler:
    """Re-propagate every catalogued object on a fixed interval.

    A pass collects results for all objects before applying them to the
    store as one ``update_positions`` batch. Passes never overlap: the timer
    thread and :meth:`refresh_now` both hold ``lock`` for the whole pass.

    Args:
        store: Catalog store to refresh.
        interval: Seconds between passes.
        clock: Returns the refresh instant. Defaults to UTC now.
        lock: Lock serializing passes with other catalog mutations.
    """

    def __init__(
        self,
        store: CatalogStore,
        interval: float = UPDATE_INTERVAL_S,
        clock: Callable[[], datetime] | None = None,
        lock: threading.Lock | threading.RLock | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.store = store
        self.interval = interval
        self._clock = clock or _utcnow
        self._lock = lock if lock is not None else threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def refresh_now(self, now: datetime | None = None) -> int:
        """Run one refresh pass immediately.

        Returns:
            Number of objects whose position was updated. Zero while the
            catalog is loading or empty.
        """
        with self._lock:
            if self.store.loading:
                logger.debug("Refresh skipped: catalog is loading")
                return 0
            objects = [obj for obj in self.store.objects.values() if obj.record is not None]
            if not objects:
                return 0

            when = now if now is not None else self._clock()
            results = propagate_batch([obj.record for obj in objects], when)
            updates = [
                PositionUpdate(norad_id=obj.norad_id, position=r.position, velocity=r.velocity)
                for obj, r in zip(objects, results)
                if r is not None
            ]
            if len(updates) < len(objects):
                logger.info("Refresh at %s: %d/%d objects failed to propagate",
                            when.isoformat(), len(objects) - len(updates), len(objects))
            if updates:
                self.store.update_positions(updates)
            logger.debug("Refresh at %s updated %d objects", when.isoformat(), len(updates))
            return len(updates)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.refresh_now()
            except Exception:
                logger.exception("Refresh pass failed")

    def start(self) -> None:
        """Start the timer thread. Does nothing if already running.

        If a stopped thread is still finishing its last pass, waits for it
        before starting a new one.
        """
        if self.running:
            if not self._stop_event.is_set():
                return
            self._thread.join()
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="orbwatch-refresh", daemon=True)
        self._thread.start()
        logger.info("Refresh scheduler started (every %.1fs)", self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer thread and wait for an in-flight pass to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Refresh scheduler still finishing a pass after %ss", timeout)
                return
        self._thread = None
        logger.info("Refresh scheduler stopped")

    def __enter__(self) -> RefreshScheduler:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
