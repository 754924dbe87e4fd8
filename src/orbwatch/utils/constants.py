from __future__ import annotations

"""Physical constants and default tracking parameters.

Distances in km, times in seconds unless the name says otherwise.
"""

# --- Earth parameters (WGS-84) ---
EARTH_RADIUS_KM: float = 6378.137
"""Equatorial radius of Earth in km."""

EARTH_POLAR_RADIUS_KM: float = 6356.7523142
"""Polar radius of Earth in km."""

EARTH_FLATTENING: float = (EARTH_RADIUS_KM - EARTH_POLAR_RADIUS_KM) / EARTH_RADIUS_KM
"""Flattening of the reference ellipsoid."""

EARTH_MU_KM3_S2: float = 398600.4418
"""Earth gravitational parameter (GM) in km³/s²."""

# --- Time ---
UNIX_EPOCH_JD: float = 2440587.5
"""Julian date of 1970-01-01T00:00:00Z."""

SECONDS_PER_DAY: float = 86400.0

# --- Element-set freshness (days since epoch) ---
STALE_AFTER_DAYS: float = 7.0
"""Element sets older than this are STALE."""

EXPIRED_AFTER_DAYS: float = 30.0
"""Element sets older than this are EXPIRED and rejected at load."""

TLE_LINE_LENGTH: int = 69

# --- Ground track window ---
GROUND_TRACK_PAST_S: float = 45 * 60.0
"""Ground track span before the centre instant."""

GROUND_TRACK_FUTURE_S: float = 45 * 60.0
"""Ground track span after the centre instant."""

GROUND_TRACK_STEP_S: float = 30.0
"""Sampling step along the ground track."""

# --- Catalog / refresh ---
UPDATE_INTERVAL_S: float = 5.0
"""Period of the position refresh loop."""

MAX_OBJECTS: int = 200
"""Maximum number of tracked objects kept from one catalog document."""

# --- Retrieval ---
DEFAULT_TLE_URL: str = "https://raw.githubusercontent.com/orbwatch/data/main/satellites.json"
"""Catalog document location."""

DEFAULT_CACHE_PATH: str = "~/.cache/orbwatch/satellites.json"

CACHE_TTL_S: float = 60 * 60.0
"""Age after which the cached catalog document is refetched."""

REQUEST_TIMEOUT_S: float = 10.0
