"""Orbital propagation via SGP4 and conversion to geodetic coordinates."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import numpy as np
from numpy.typing import NDArray
from sgp4.api import SatrecArray, jday
from sgp4.propagation import gstime

from orbwatch.core.tle import OrbitalRecord
from orbwatch.core.types import GeodeticPosition, OrbitalElements, VelocityVector
from orbwatch.utils.constants import (
    EARTH_FLATTENING,
    EARTH_MU_KM3_S2 as MU,
    EARTH_RADIUS_KM as RE,
)

logger = logging.getLogger(__name__)

_E2 = EARTH_FLATTENING * (2.0 - EARTH_FLATTENING)
_LATITUDE_ITERATIONS = 20
_WINDOW_TOLERANCE = timedelta(milliseconds=1)


@dataclass(frozen=True)
class PropagationResult:
    """Geodetic position and inertial velocity at one instant."""

    position: GeodeticPosition
    velocity: VelocityVector


def _as_utc(t: datetime) -> datetime:
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


def _julian(t: datetime) -> tuple[float, float]:
    t = _as_utc(t)
    return jday(t.year, t.month, t.day, t.hour, t.minute, t.second + t.microsecond / 1e6)


def teme_to_geodetic(
    position_km: NDArray[np.float64], gmst_rad: float
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Convert TEME positions to geodetic coordinates on the WGS-84 ellipsoid.

    Args:
        position_km: Array of shape (n, 3).
        gmst_rad: Greenwich mean sidereal angle of the instant in radians.

    Returns:
        Tuple of (latitude_deg, longitude_deg, altitude_km), each shape (n,).
        Longitude is wrapped to [-180, 180).
    """
    x = position_km[:, 0]
    y = position_km[:, 1]
    z = position_km[:, 2]
    r_xy = np.hypot(x, y)

    lon = np.mod(np.arctan2(y, x) - gmst_rad + math.pi, 2.0 * math.pi) - math.pi

    lat = np.arctan2(z, r_xy)
    c = np.ones_like(lat)
    for _ in range(_LATITUDE_ITERATIONS):
        sin_lat = np.sin(lat)
        c = 1.0 / np.sqrt(1.0 - _E2 * sin_lat * sin_lat)
        lat = np.arctan2(z + RE * c * _E2 * sin_lat, r_xy)

    alt = r_xy / np.cos(lat) - RE * c
    return np.degrees(lat), np.degrees(lon), alt


def _results_from_arrays(
    errors: NDArray, positions: NDArray, velocities: NDArray, when: datetime
) -> list[PropagationResult | None]:
    jd, fr = _julian(when)
    gmst = gstime(jd + fr)

    valid = (
        (errors == 0)
        & np.all(np.isfinite(positions), axis=1)
        & np.all(np.isfinite(velocities), axis=1)
    )
    with np.errstate(invalid="ignore"):
        lat, lon, alt = teme_to_geodetic(positions, gmst)
    valid &= np.isfinite(lat) & np.isfinite(lon) & np.isfinite(alt)

    results: list[PropagationResult | None] = []
    for i in range(len(errors)):
        if not valid[i]:
            results.append(None)
            continue
        results.append(
            PropagationResult(
                position=GeodeticPosition(
                    latitude=float(lat[i]),
                    longitude=float(lon[i]),
                    altitude=float(alt[i]),
                    timestamp=when,
                ),
                velocity=VelocityVector(
                    x=float(velocities[i, 0]),
                    y=float(velocities[i, 1]),
                    z=float(velocities[i, 2]),
                ),
            )
        )
    return results


def propagate(record: OrbitalRecord, when: datetime) -> PropagationResult | None:
    """Propagate one record to one instant using SGP4.

    Args:
        record: A parsed OrbitalRecord.
        when: Target instant (naive datetimes are taken as UTC).

    Returns:
        The geodetic position and inertial velocity, or None if SGP4
        reports an error or produces non-finite output.
    """
    when = _as_utc(when)
    jd, fr = _julian(when)
    error_code, pos, vel = record.satrec.sgp4(jd, fr)

    if error_code != 0:
        logger.debug("SGP4 failed for NORAD %d at %s: error code %d", record.norad_id, when, error_code)
        return None

    result = _results_from_arrays(
        np.array([error_code]),
        np.array([pos], dtype=np.float64),
        np.array([vel], dtype=np.float64),
        when,
    )[0]
    if result is None:
        logger.debug("SGP4 produced non-finite state for NORAD %d at %s", record.norad_id, when)
    return result


def propagate_batch(records: list[OrbitalRecord], when: datetime) -> list[PropagationResult | None]:
    """Propagate many records to a single instant using vectorized SGP4.

    Uses SatrecArray for C-level batch propagation.

    Args:
        records: Records to propagate.
        when: Single instant to propagate all objects to.

    Returns:
        One entry per record, None where propagation failed.
    """
    if not records:
        return []

    when = _as_utc(when)
    satrec_array = SatrecArray([r.satrec for r in records])

    jd, fr = _julian(when)
    jd_array = np.array([jd], dtype=np.float64)
    fr_array = np.array([fr], dtype=np.float64)

    # Output shape: errors (n,1), positions (n,1,3), velocities (n,1,3)
    errors, positions, velocities = satrec_array.sgp4(jd_array, fr_array)

    results = _results_from_arrays(errors[:, 0], positions[:, 0, :], velocities[:, 0, :], when)

    failed = sum(1 for r in results if r is None)
    if failed:
        logger.debug("Batch propagation: %d/%d objects failed at %s", failed, len(records), when)
    return results


def propagate_window(
    record: OrbitalRecord,
    start: datetime,
    end: datetime,
    step: timedelta,
) -> list[GeodeticPosition]:
    """Sample positions at start, start+step, ... up to and including end.

    Instants where propagation fails are skipped.

    Raises:
        ValueError: If step is not positive.
    """
    if step <= timedelta(0):
        raise ValueError(f"step must be positive, got {step}")

    positions: list[GeodeticPosition] = []
    i = 0
    t = start
    while t <= end + _WINDOW_TOLERANCE:
        result = propagate(record, t)
        if result is not None:
            positions.append(result.position)
        i += 1
        t = start + i * step

    logger.debug(
        "Propagated NORAD %d over %s..%s: %d/%d samples", record.norad_id, start, end, len(positions), i
    )
    return positions


def derive_orbital_elements(record: OrbitalRecord) -> OrbitalElements:
    """Compute period and semi-major axis from mean motion (Kepler's third law)."""
    n_rad_per_min = record.mean_motion_rad_min
    n_rad_per_sec = n_rad_per_min / 60.0
    return OrbitalElements(
        inclination_deg=record.inclination_deg,
        eccentricity=record.eccentricity,
        period_min=2.0 * math.pi / n_rad_per_min,
        semi_major_axis_km=(MU / (n_rad_per_sec ** 2)) ** (1.0 / 3.0),
        raan_deg=record.raan_deg,
        arg_perigee_deg=record.arg_perigee_deg,
    )
