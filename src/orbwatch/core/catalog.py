"""Catalog store: the authoritative snapshot of tracked objects.

Every mutation is expressed as an event and applied by :func:`transition`,
a pure function from (state, event) to the next state that re-establishes
the selection/filter/ground-track invariants. :class:`CatalogStore` holds
the current state and offers one method per event plus the read surface
used by a presentation layer.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Mapping, Union

from orbwatch.core.groundtrack import GroundTrack
from orbwatch.core.propagation import derive_orbital_elements, propagate_batch
from orbwatch.core.tle import OrbitalRecord, classify_freshness, parse_element_set
from orbwatch.core.types import (
    Category,
    Freshness,
    GeodeticPosition,
    OrbitalElements,
    TwoLineElement,
    VelocityVector,
)
from orbwatch.utils.constants import MAX_OBJECTS

if TYPE_CHECKING:
    from orbwatch.data.document import CatalogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackedObject:
    """A catalogued object with its latest computed state.

    ``norad_id`` is the identity; refreshes replace position and velocity
    through :func:`dataclasses.replace` and never change it.
    """

    norad_id: int
    name: str
    category: Category
    tle: TwoLineElement
    epoch: datetime
    position: GeodeticPosition
    velocity: VelocityVector
    orbital_elements: OrbitalElements
    record: OrbitalRecord | None = field(default=None, repr=False, compare=False)

    def freshness(self, now: datetime | None = None) -> Freshness:
        """Age classification of the element set, evaluated at ``now``."""
        return classify_freshness(self.epoch, now)


def _default_filters() -> dict[Category, bool]:
    return {category: True for category in Category}


@dataclass(frozen=True)
class CatalogState:
    """Immutable snapshot of the catalog.

    Attributes:
        objects: Tracked objects keyed by NORAD ID.
        selected_id: Selected object, if any.
        filters: Visibility flag per category.
        loading: True until the first successful load.
        error: User-facing error message from a failed load.
        ground_track: Ground track of the selected object, if computed.
    """

    objects: Mapping[int, TrackedObject] = field(default_factory=dict)
    selected_id: int | None = None
    filters: Mapping[Category, bool] = field(default_factory=_default_filters)
    loading: bool = True
    error: str | None = None
    ground_track: GroundTrack | None = None

    def is_selectable(self, norad_id: int) -> bool:
        obj = self.objects.get(norad_id)
        return obj is not None and self.filters[obj.category]


class CatalogStatus(Enum):
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


# --- Events ---

@dataclass(frozen=True)
class PositionUpdate:
    norad_id: int
    position: GeodeticPosition
    velocity: VelocityVector


@dataclass(frozen=True)
class Load:
    objects: tuple[TrackedObject, ...]


@dataclass(frozen=True)
class UpdatePositions:
    updates: tuple[PositionUpdate, ...]


@dataclass(frozen=True)
class Select:
    norad_id: int | None


@dataclass(frozen=True)
class ToggleFilter:
    category: Category


@dataclass(frozen=True)
class SetGroundTrack:
    track: GroundTrack | None


@dataclass(frozen=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True)
class SetError:
    message: str | None


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[Load, UpdatePositions, Select, ToggleFilter, SetGroundTrack, SetLoading, SetError, Reset]


def _drop_invalid_selection(state: CatalogState) -> CatalogState:
    if state.selected_id is None or state.is_selectable(state.selected_id):
        return state
    logger.debug("Clearing selection of NORAD %d", state.selected_id)
    return replace(state, selected_id=None, ground_track=None)


def transition(state: CatalogState, event: Event) -> CatalogState:
    """Apply one event to a catalog state and return the next state.

    Raises:
        TypeError: If ``event`` is not a catalog event.
    """
    if isinstance(event, Load):
        objects: dict[int, TrackedObject] = {}
        for obj in event.objects:
            if obj.norad_id in objects:
                logger.warning("Duplicate NORAD %d in load, keeping the last entry", obj.norad_id)
            objects[obj.norad_id] = obj
        return _drop_invalid_selection(
            replace(state, objects=objects, loading=False, error=None, ground_track=None)
        )

    if isinstance(event, UpdatePositions):
        known = [u for u in event.updates if u.norad_id in state.objects]
        if not known:
            return state
        objects = dict(state.objects)
        for update in known:
            objects[update.norad_id] = replace(
                objects[update.norad_id], position=update.position, velocity=update.velocity
            )
        return replace(state, objects=objects)

    if isinstance(event, Select):
        selected = event.norad_id
        if selected is not None and not state.is_selectable(selected):
            logger.debug("Ignoring selection of unknown or hidden NORAD %d", selected)
            selected = None
        return replace(state, selected_id=selected, ground_track=None)

    if isinstance(event, ToggleFilter):
        filters = dict(state.filters)
        filters[event.category] = not filters[event.category]
        return _drop_invalid_selection(replace(state, filters=filters))

    if isinstance(event, SetGroundTrack):
        return replace(state, ground_track=event.track)

    if isinstance(event, SetLoading):
        return replace(state, loading=event.loading)

    if isinstance(event, SetError):
        return replace(state, error=event.message, loading=False)

    if isinstance(event, Reset):
        return CatalogState()

    raise TypeError(f"Not a catalog event: {event!r}")


class CatalogStore:
    """Holder of the current :class:`CatalogState`.

    Not thread-safe; callers serialize access (see ``TrackingSession``).
    """

    def __init__(self, state: CatalogState | None = None) -> None:
        self._state = state if state is not None else CatalogState()

    def dispatch(self, event: Event) -> CatalogState:
        self._state = transition(self._state, event)
        return self._state

    # --- Commands ---

    def load(self, objects: Iterable[TrackedObject]) -> None:
        self.dispatch(Load(tuple(objects)))
        logger.info("Catalog loaded with %d objects", len(self._state.objects))

    def update_positions(self, updates: Iterable[PositionUpdate]) -> None:
        self.dispatch(UpdatePositions(tuple(updates)))

    def select(self, norad_id: int | None) -> None:
        self.dispatch(Select(norad_id))

    def toggle_filter(self, category: Category) -> None:
        self.dispatch(ToggleFilter(category))

    def set_ground_track(self, track: GroundTrack | None) -> None:
        self.dispatch(SetGroundTrack(track))

    def set_loading(self, loading: bool) -> None:
        self.dispatch(SetLoading(loading))

    def set_error(self, message: str | None) -> None:
        self.dispatch(SetError(message))

    def reset(self) -> None:
        self.dispatch(Reset())

    # --- Read surface ---

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def objects(self) -> Mapping[int, TrackedObject]:
        return self._state.objects

    @property
    def filters(self) -> Mapping[Category, bool]:
        return self._state.filters

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def ground_track(self) -> GroundTrack | None:
        return self._state.ground_track

    @property
    def selected_object(self) -> TrackedObject | None:
        if self._state.selected_id is None:
            return None
        return self._state.objects.get(self._state.selected_id)

    @property
    def status(self) -> CatalogStatus:
        if self._state.loading:
            return CatalogStatus.LOADING
        if self._state.error is not None:
            return CatalogStatus.ERRORED
        return CatalogStatus.READY

    def visible_objects(self) -> list[TrackedObject]:
        """Objects whose category is enabled, ordered by NORAD ID."""
        filters = self._state.filters
        return [obj for _, obj in sorted(self._state.objects.items()) if filters[obj.category]]

    def freshness_counts(self, now: datetime | None = None) -> dict[Freshness, int]:
        if now is None:
            now = datetime.now(timezone.utc)
        counts = Counter(obj.freshness(now) for obj in self._state.objects.values())
        return {status: counts.get(status, 0) for status in Freshness}


def build_tracked_objects(
    entries: Iterable[CatalogEntry],
    now: datetime | None = None,
    max_objects: int = MAX_OBJECTS,
) -> list[TrackedObject]:
    """Turn catalog document entries into tracked objects.

    Each entry is validated, classified and propagated once to ``now``.
    Invalid, expired and unpropagatable entries are dropped.

    Args:
        entries: Catalog entries with ``norad_id``, ``name``, ``line1``,
            ``line2`` and ``category``.
        now: Propagation and freshness instant. Defaults to now (UTC).
        max_objects: Maximum number of objects to keep.

    Returns:
        Tracked objects in entry order.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    candidates: list[tuple[CatalogEntry, OrbitalRecord]] = []
    invalid = expired = 0
    for entry in entries:
        record = parse_element_set(entry.line1, entry.line2, name=entry.name)
        if record is None:
            invalid += 1
            continue
        if classify_freshness(record.epoch, now) is Freshness.EXPIRED:
            logger.warning("Skipping NORAD %d (%s): element set expired (epoch %s)",
                           entry.norad_id, entry.name, record.epoch.isoformat())
            expired += 1
            continue
        if record.norad_id != entry.norad_id:
            logger.warning("NORAD %d (%s): element set carries catalog number %d",
                           entry.norad_id, entry.name, record.norad_id)
        candidates.append((entry, record))

    if len(candidates) > max_objects:
        logger.warning("Catalog has %d usable objects, keeping the first %d", len(candidates), max_objects)
        candidates = candidates[:max_objects]

    results = propagate_batch([record for _, record in candidates], now)

    objects: list[TrackedObject] = []
    failed = 0
    for (entry, record), result in zip(candidates, results):
        if result is None:
            logger.warning("Skipping NORAD %d (%s): propagation failed", entry.norad_id, entry.name)
            failed += 1
            continue
        objects.append(
            TrackedObject(
                norad_id=entry.norad_id,
                name=entry.name,
                category=entry.category,
                tle=TwoLineElement(line0=entry.name, line1=record.line1, line2=record.line2),
                epoch=record.epoch,
                position=result.position,
                velocity=result.velocity,
                orbital_elements=derive_orbital_elements(record),
                record=record,
            )
        )

    logger.info(
        "Built %d tracked objects (%d invalid, %d expired, %d unpropagatable)",
        len(objects), invalid, expired, failed,
    )
    return objects
