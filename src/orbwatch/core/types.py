"""Value types shared by the propagation engine and the catalog store."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Category(Enum):
    """Closed set of object categories used for filtering."""

    STATION = "station"
    NAVIGATION = "navigation"
    WEATHER = "weather"

    @property
    def document_key(self) -> str:
        """Key of this category in the catalog document."""
        return _DOCUMENT_KEYS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def color(self) -> tuple[int, int, int]:
        """RGB colour for map layers."""
        return _COLORS[self]

    @classmethod
    def from_string(cls, value: str) -> Category:
        """Map a document key or member value to a Category.

        Raises:
            ValueError: If the string names no category.
        """
        key = value.strip().lower()
        for category in cls:
            if key in (category.value, category.document_key):
                return category
        raise ValueError(f"Unknown category: {value!r}")


_DOCUMENT_KEYS: dict[Category, str] = {
    Category.STATION: "stations",
    Category.NAVIGATION: "navigation",
    Category.WEATHER: "weather",
}

_LABELS: dict[Category, str] = {
    Category.STATION: "Space Stations",
    Category.NAVIGATION: "Navigation",
    Category.WEATHER: "Weather",
}

_COLORS: dict[Category, tuple[int, int, int]] = {
    Category.STATION: (66, 133, 244),
    Category.NAVIGATION: (52, 168, 83),
    Category.WEATHER: (251, 188, 4),
}


class Freshness(Enum):
    """Age classification of an element set relative to its epoch."""

    CURRENT = "current"
    STALE = "stale"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TwoLineElement:
    """Raw element-set text as received."""

    line0: str
    line1: str
    line2: str


@dataclass(frozen=True)
class GeodeticPosition:
    """Latitude/longitude in degrees and altitude in km above the ellipsoid.

    A NaN latitude/longitude marks a break in a polyline.
    """

    latitude: float
    longitude: float
    altitude: float
    timestamp: datetime

    @property
    def is_break(self) -> bool:
        return math.isnan(self.longitude)


@dataclass(frozen=True)
class VelocityVector:
    """Inertial (TEME) velocity components in km/s."""

    x: float
    y: float
    z: float

    @property
    def speed(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


@dataclass(frozen=True)
class OrbitalElements:
    """Static orbital parameters derived once from an element set.

    Attributes:
        inclination_deg: Inclination in degrees.
        eccentricity: Eccentricity (dimensionless).
        period_min: Orbital period in minutes.
        semi_major_axis_km: Semi-major axis in km.
        raan_deg: Right ascension of ascending node in degrees.
        arg_perigee_deg: Argument of perigee in degrees.
    """

    inclination_deg: float
    eccentricity: float
    period_min: float
    semi_major_axis_km: float
    raan_deg: float
    arg_perigee_deg: float
