"""Shared fixtures: reference element sets and synthetic catalog objects."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from orbwatch.core.catalog import TrackedObject
from orbwatch.core.tle import OrbitalRecord, restamp_epoch
from orbwatch.core.types import (
    Category,
    GeodeticPosition,
    OrbitalElements,
    TwoLineElement,
    VelocityVector,
)

# ISS (ZARYA), epoch 2024-02-14
ISS_NAME = "ISS (ZARYA)"
ISS_LINE1 = "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9997"
ISS_LINE2 = "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439592"

# NOAA 18, sun-synchronous
NOAA_LINE1 = "1 28654U 05018A   24045.52083333  .00000149  00000-0  10834-3 0  9994"
NOAA_LINE2 = "2 28654  98.9710 100.7890 0014048 313.6230  46.3750 14.12905012970120"

# GOES 17, geostationary (deep-space branch)
GEO_LINE1 = "1 43226U 18022A   24053.87506944  .00000091  00000-0  00000-0 0  9997"
GEO_LINE2 = "2 43226   0.0146 271.2658 0001116 139.7856 316.2395  1.00273358 21774"

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def iss_record(now: datetime) -> OrbitalRecord:
    """ISS elements re-stamped so that ``now`` is the epoch."""
    return OrbitalRecord.from_lines(restamp_epoch(ISS_LINE1, now), ISS_LINE2, name=ISS_NAME)


@pytest.fixture
def geo_record(now: datetime) -> OrbitalRecord:
    return OrbitalRecord.from_lines(restamp_epoch(GEO_LINE1, now), GEO_LINE2, name="GOES 17")


@pytest.fixture
def make_object(now: datetime) -> Callable[..., TrackedObject]:
    """Factory for tracked objects with a fixed, record-less state."""

    def _make(norad_id: int, category: Category, record: OrbitalRecord | None = None) -> TrackedObject:
        return TrackedObject(
            norad_id=norad_id,
            name=f"Satellite {norad_id}",
            category=category,
            tle=TwoLineElement(line0=f"Satellite {norad_id}", line1="", line2=""),
            epoch=now,
            position=GeodeticPosition(latitude=0.0, longitude=0.0, altitude=400.0, timestamp=now),
            velocity=VelocityVector(x=0.0, y=7.66, z=0.0),
            orbital_elements=OrbitalElements(
                inclination_deg=51.0,
                eccentricity=0.001,
                period_min=93.0,
                semi_major_axis_km=6800.0,
                raan_deg=0.0,
                arg_perigee_deg=0.0,
            ),
            record=record,
        )

    return _make
