"""Integration test: parse → build catalog → refresh → ground track end-to-end."""
from __future__ import annotations

import math
from datetime import datetime, timedelta

import numpy as np
import pytest

from orbwatch.core.catalog import CatalogStore, build_tracked_objects
from orbwatch.core.groundtrack import ground_track
from orbwatch.core.scheduler import RefreshScheduler
from orbwatch.core.tle import restamp_epoch
from orbwatch.core.types import Category, Freshness
from orbwatch.data.document import CatalogDocument

# Hardcoded real TLEs (no network calls)
ISS_LINE1 = "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9997"
ISS_LINE2 = "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439592"
NOAA_LINE1 = "1 28654U 05018A   24045.52083333  .00000149  00000-0  10834-3 0  9994"
NOAA_LINE2 = "2 28654  98.9710 100.7890 0014048 313.6230  46.3750 14.12905012970120"
GEO_LINE1 = "1 43226U 18022A   24053.87506944  .00000091  00000-0  00000-0 0  9997"
GEO_LINE2 = "2 43226   0.0146 271.2658 0001116 139.7856 316.2395  1.00273358 21774"


@pytest.fixture
def document(now: datetime) -> CatalogDocument:
    def entry(norad_id: int, name: str, line1: str, line2: str, age: timedelta) -> dict:
        return {"noradId": norad_id, "name": name, "line1": restamp_epoch(line1, now - age), "line2": line2}

    return CatalogDocument.from_dict({
        "meta": {"lastUpdated": now.isoformat(), "source": "CelesTrak", "version": "1.0.0", "totalCount": 4},
        "categories": {
            "stations": [
                entry(25544, "ISS (ZARYA)", ISS_LINE1, ISS_LINE2, timedelta(hours=6)),
                # one corrupted line is dropped without failing the load
                {"noradId": 99999, "name": "CORRUPT", "line1": ISS_LINE1[:-1] + "0", "line2": ISS_LINE2},
            ],
            "weather": [
                entry(28654, "NOAA 18", NOAA_LINE1, NOAA_LINE2, timedelta(days=10)),
                entry(43226, "GOES 17", GEO_LINE1, GEO_LINE2, timedelta(days=1)),
            ],
        },
    })


def test_catalog_lifecycle(document: CatalogDocument, now: datetime) -> None:
    store = CatalogStore()
    store.load(build_tracked_objects(document.entries(), now=now))

    assert sorted(store.objects) == [25544, 28654, 43226]
    assert store.freshness_counts(now) == {Freshness.CURRENT: 2, Freshness.STALE: 1, Freshness.EXPIRED: 0}

    iss = store.objects[25544]
    assert 300 < iss.position.altitude < 500
    assert 7.0 < iss.velocity.speed < 8.0
    assert abs(iss.position.latitude) <= 52.0
    assert 90 < iss.orbital_elements.period_min < 95

    goes = store.objects[43226]
    assert goes.position.altitude == pytest.approx(35786, abs=300)
    assert abs(goes.position.latitude) < 0.5

    later = now + timedelta(minutes=10)
    RefreshScheduler(store, clock=lambda: later).refresh_now()
    moved = store.objects[25544]
    assert moved.position.timestamp == later
    assert moved.position != iss.position
    assert moved.orbital_elements == iss.orbital_elements

    store.select(25544)
    track = ground_track(store.selected_object, later)
    store.set_ground_track(track)
    assert store.ground_track is track
    for segment in track.segments:
        lons = np.array([p.longitude for p in segment])
        assert np.all(np.abs(np.diff(lons)) <= 180.0)
    assert all(math.isfinite(p.latitude) for p in track.points)

    store.toggle_filter(Category.STATION)
    assert store.selected_object is None
    assert store.ground_track is None
    assert [o.norad_id for o in store.visible_objects()] == [28654, 43226]
