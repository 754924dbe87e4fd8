"""Tracking session: the single owner of a catalog and its refresh loop.

All catalog mutation (loads, refresh passes, selection with ground-track
regeneration, filter toggles) runs under one re-entrant lock, so the
store itself needs no locking.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Mapping

from orbwatch.core.catalog import CatalogStore, TrackedObject, build_tracked_objects
from orbwatch.core.groundtrack import GroundTrack, ground_track
from orbwatch.core.scheduler import RefreshScheduler
from orbwatch.core.types import Category
from orbwatch.data.document import CatalogDocument
from orbwatch.data.retrieval import CatalogFetcher
from orbwatch.utils.config import TrackerSettings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackingSession:
    """Load a catalog, keep it refreshed and answer presentation queries.

    Args:
        settings: Runtime settings. Defaults to :class:`TrackerSettings`.
        fetch: Returns the catalog document. Defaults to a
            :class:`CatalogFetcher` built from ``settings``.
        clock: Returns the current instant. Defaults to UTC now.

    Example::

        with TrackingSession() as session:
            session.load()
            session.start()
            for obj in session.visible_objects:
                print(obj.name, obj.position.latitude, obj.position.longitude)
    """

    def __init__(
        self,
        settings: TrackerSettings | None = None,
        fetch: Callable[[], CatalogDocument] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self._fetch = fetch or CatalogFetcher(self.settings).fetch
        self._clock = clock or _utcnow
        self._lock = threading.RLock()
        self.store = CatalogStore()
        self.scheduler = RefreshScheduler(
            self.store, interval=self.settings.update_interval_s, clock=self._clock, lock=self._lock
        )
        self._executor: ThreadPoolExecutor | None = None
        self._pending: Future | None = None
        self._attempt: Future | None = None
        self._initialized = False

    # --- Loading ---

    def load(self) -> bool:
        """Retrieve the catalog document and load it into the store.

        Does nothing once a load has succeeded; use :meth:`retry_load` after
        a failure. A call made while another load is running waits for that
        load and returns its outcome instead of fetching again.

        Returns:
            True if the catalog is loaded.
        """
        with self._lock:
            if self._initialized:
                return True
            attempt = self._attempt
            if attempt is None:
                self._attempt = Future()
                self.store.set_loading(True)
        if attempt is not None:
            logger.debug("Load already in progress, waiting for it")
            return attempt.result()

        loaded = False
        try:
            loaded = self._do_load()
        finally:
            with self._lock:
                attempt, self._attempt = self._attempt, None
            attempt.set_result(loaded)
        return loaded

    def _do_load(self) -> bool:
        try:
            document = self._fetch()
            objects = build_tracked_objects(
                document.entries(), now=self._clock(), max_objects=self.settings.max_objects
            )
        except Exception as exc:
            logger.error("Failed to load satellites: %s", exc)
            with self._lock:
                self.store.set_error(str(exc) or "Failed to load satellite data")
            return False

        with self._lock:
            self.store.load(objects)
            self._initialized = True
            # the reload drops the old track; rebuild it from the new record
            selected = self.store.selected_object
            if selected is not None:
                self.store.set_ground_track(ground_track(selected, self._clock()))
        return True

    def load_async(self) -> Future:
        """Run :meth:`load` on a background worker.

        A call while a load is outstanding returns the outstanding future.
        """
        with self._lock:
            if self._pending is not None and not self._pending.done():
                logger.debug("Load already in progress")
                return self._pending
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="orbwatch-load")
            self._pending = self._executor.submit(self.load)
            return self._pending

    def retry_load(self) -> Future:
        """Clear the loaded flag and start a fresh background load."""
        with self._lock:
            if self._pending is not None and not self._pending.done():
                return self._pending
            if self._attempt is not None:
                logger.debug("Load already in progress, retry not started")
                return self._attempt
            self._initialized = False
            self.store.set_error(None)
            self.store.set_loading(True)
        return self.load_async()

    # --- Commands ---

    def select(self, norad_id: int | None) -> GroundTrack | None:
        """Select an object (or clear the selection) and compute its ground track."""
        with self._lock:
            self.store.select(norad_id)
            selected = self.store.selected_object
            if selected is None:
                return None
            track = ground_track(selected, self._clock())
            self.store.set_ground_track(track)
            return track

    def toggle_filter(self, category: Category) -> None:
        with self._lock:
            self.store.toggle_filter(category)

    def refresh_now(self) -> int:
        """Re-propagate every object immediately."""
        return self.scheduler.refresh_now()

    # --- Lifecycle ---

    def start(self) -> None:
        """Start the periodic refresh loop."""
        self.scheduler.start()

    def close(self) -> None:
        """Stop the refresh loop and the load worker."""
        self.scheduler.stop()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> TrackingSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- Read surface ---

    @property
    def visible_objects(self) -> list[TrackedObject]:
        with self._lock:
            return self.store.visible_objects()

    @property
    def selected_object(self) -> TrackedObject | None:
        with self._lock:
            return self.store.selected_object

    @property
    def loading(self) -> bool:
        return self.store.loading

    @property
    def error(self) -> str | None:
        return self.store.error

    @property
    def ground_track(self) -> GroundTrack | None:
        return self.store.ground_track

    @property
    def filters(self) -> Mapping[Category, bool]:
        return self.store.filters
