"""Ground track generation for a tracked object."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Sequence

from orbwatch.core.propagation import propagate_window
from orbwatch.core.types import GeodeticPosition
from orbwatch.utils.constants import (
    GROUND_TRACK_FUTURE_S,
    GROUND_TRACK_PAST_S,
    GROUND_TRACK_STEP_S,
)

if TYPE_CHECKING:
    from orbwatch.core.catalog import TrackedObject

logger = logging.getLogger(__name__)

ANTIMERIDIAN_JUMP_DEG = 180.0


@dataclass(frozen=True)
class GroundTrack:
    """Sub-satellite path around an instant, split at antimeridian crossings.

    Attributes:
        norad_id: Object the track belongs to.
        segments: Continuous runs of points in temporal order.
    """

    norad_id: int
    segments: tuple[tuple[GeodeticPosition, ...], ...]

    @property
    def points(self) -> list[GeodeticPosition]:
        return [p for segment in self.segments for p in segment]

    def with_breaks(self) -> list[GeodeticPosition]:
        """Flatten into one polyline with a NaN marker between segments."""
        result: list[GeodeticPosition] = []
        for i, segment in enumerate(self.segments):
            if i > 0:
                prev = result[-1]
                nxt = segment[0]
                result.append(
                    GeodeticPosition(
                        latitude=math.nan,
                        longitude=math.nan,
                        altitude=math.nan,
                        timestamp=prev.timestamp + (nxt.timestamp - prev.timestamp) / 2,
                    )
                )
            result.extend(segment)
        return result


def split_antimeridian(points: Sequence[GeodeticPosition]) -> tuple[tuple[GeodeticPosition, ...], ...]:
    """Split a point sequence wherever consecutive longitudes differ by > 180°."""
    segments: list[tuple[GeodeticPosition, ...]] = []
    current: list[GeodeticPosition] = []

    for point in points:
        if current and abs(point.longitude - current[-1].longitude) > ANTIMERIDIAN_JUMP_DEG:
            segments.append(tuple(current))
            current = []
        current.append(point)

    if current:
        segments.append(tuple(current))
    return tuple(segments)


def ground_track(
    obj: TrackedObject,
    center: datetime | None = None,
    *,
    before: timedelta = timedelta(seconds=GROUND_TRACK_PAST_S),
    after: timedelta = timedelta(seconds=GROUND_TRACK_FUTURE_S),
    step: timedelta = timedelta(seconds=GROUND_TRACK_STEP_S),
) -> GroundTrack | None:
    """Compute the ground track of an object around ``center``.

    Args:
        obj: Tracked object to compute the track for.
        center: Centre instant. Defaults to now (UTC).
        before: Span before the centre.
        after: Span after the centre.
        step: Sampling step.

    Returns:
        The ground track, or None if the object has no record or no
        instant in the window could be propagated.
    """
    if obj.record is None:
        return None
    if center is None:
        center = datetime.now(timezone.utc)

    points = propagate_window(obj.record, center - before, center + after, step)
    if not points:
        logger.info("No ground track for NORAD %d: window produced no points", obj.norad_id)
        return None

    segments = split_antimeridian(points)
    logger.debug(
        "Ground track for NORAD %d: %d points in %d segments", obj.norad_id, len(points), len(segments)
    )
    return GroundTrack(norad_id=obj.norad_id, segments=segments)
