"""TLE (Two-Line Element) validation and parsing.

Element sets are parsed with the sgp4 library into an immutable
:class:`OrbitalRecord` that the propagation engine consumes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sgp4.api import Satrec, WGS72

from orbwatch.core.types import Freshness
from orbwatch.utils.constants import (
    EXPIRED_AFTER_DAYS,
    SECONDS_PER_DAY,
    STALE_AFTER_DAYS,
    TLE_LINE_LENGTH,
    UNIX_EPOCH_JD,
)

logger = logging.getLogger(__name__)

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def compute_checksum(text: str) -> int:
    """Modulo-10 checksum of a TLE line body.

    Digits count their value, ``-`` counts 1, everything else 0.
    """
    total = 0
    for char in text:
        if "0" <= char <= "9":
            total += ord(char) - ord("0")
        elif char == "-":
            total += 1
    return total % 10


def validate_tle_line(line: str, line_number: int) -> bool:
    """Check length, line-number prefix and trailing checksum of a TLE line."""
    if len(line) != TLE_LINE_LENGTH:
        return False
    if line[0] != str(line_number):
        return False
    return line[-1] == str(compute_checksum(line[:-1]))


def _line_problem(line: str, line_number: int) -> str | None:
    if len(line) != TLE_LINE_LENGTH:
        return f"length {len(line)} != {TLE_LINE_LENGTH}"
    if line[0] != str(line_number):
        return f"does not start with {line_number!r}"
    if not validate_tle_line(line, line_number):
        return f"checksum mismatch (expected {compute_checksum(line[:-1])}, found {line[-1]!r})"
    return None


def julian_to_datetime(jd: float, fraction: float = 0.0) -> datetime:
    """Convert a (split) Julian date to a UTC datetime."""
    days = (jd - UNIX_EPOCH_JD) + fraction
    return _UNIX_EPOCH + timedelta(seconds=days * SECONDS_PER_DAY)


@dataclass(frozen=True)
class OrbitalRecord:
    """A validated element set ready for propagation.

    Attributes:
        name: Satellite name (line 0, if provided).
        line1: Raw TLE line 1.
        line2: Raw TLE line 2.
        norad_id: NORAD catalog number.
        epoch: Epoch as a UTC datetime.
        inclination_deg: Orbital inclination in degrees.
        raan_deg: Right ascension of ascending node in degrees.
        eccentricity: Orbital eccentricity (dimensionless).
        arg_perigee_deg: Argument of perigee in degrees.
        mean_anomaly_deg: Mean anomaly in degrees.
        mean_motion_rad_min: Mean motion in radians per minute.
        bstar: BSTAR drag term.
        satrec: Underlying sgp4 Satrec object for propagation.
    """

    name: str
    line1: str
    line2: str
    norad_id: int
    epoch: datetime
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rad_min: float
    bstar: float
    satrec: Satrec = field(repr=False, compare=False)

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: str = "") -> OrbitalRecord:
        """Validate and parse a TLE.

        Args:
            line1: TLE line 1 (69 characters).
            line2: TLE line 2 (69 characters).
            name: Optional satellite name (line 0).

        Returns:
            A parsed OrbitalRecord.

        Raises:
            ValueError: If a line fails validation or the elements do not
                yield a usable orbit.
        """
        line1 = line1.strip()
        line2 = line2.strip()

        for number, line in ((1, line1), (2, line2)):
            problem = _line_problem(line, number)
            if problem is not None:
                raise ValueError(f"Invalid TLE line {number}: {problem}: {line!r}")

        norad_id = int(line1[2:7])
        sat = Satrec.twoline2rv(line1, line2, WGS72)

        if sat.error != 0:
            raise ValueError(f"sgp4 rejected elements for NORAD {norad_id}: error code {sat.error}")
        if not math.isfinite(sat.no_kozai) or sat.no_kozai <= 0.0:
            raise ValueError(f"Invalid mean motion for NORAD {norad_id}: {sat.no_kozai!r}")

        epoch = julian_to_datetime(sat.jdsatepoch, sat.jdsatepochF)

        logger.debug("Parsed TLE for NORAD %d (epoch %s)", norad_id, epoch.isoformat())

        return cls(
            name=name.strip(),
            line1=line1,
            line2=line2,
            norad_id=norad_id,
            epoch=epoch,
            inclination_deg=math.degrees(sat.inclo),
            raan_deg=math.degrees(sat.nodeo),
            eccentricity=sat.ecco,
            arg_perigee_deg=math.degrees(sat.argpo),
            mean_anomaly_deg=math.degrees(sat.mo),
            mean_motion_rad_min=sat.no_kozai,
            bstar=sat.bstar,
            satrec=sat,
        )

    def __str__(self) -> str:
        header = f"0 {self.name}\n" if self.name else ""
        return f"{header}{self.line1}\n{self.line2}"


def parse_element_set(line1: str, line2: str, name: str = "") -> OrbitalRecord | None:
    """Parse a TLE, returning None instead of raising on bad input."""
    try:
        return OrbitalRecord.from_lines(line1, line2, name=name)
    except ValueError as exc:
        logger.warning("Dropping element set %r: %s", name, exc)
        return None


def classify_freshness(epoch: datetime, now: datetime | None = None) -> Freshness:
    """Classify an element set by the age of its epoch.

    Args:
        epoch: Element-set epoch (naive datetimes are taken as UTC).
        now: Evaluation instant. Defaults to now (UTC).

    Returns:
        CURRENT up to 7 days, STALE up to 30 days, EXPIRED beyond.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)

    age_days = (now - epoch).total_seconds() / SECONDS_PER_DAY
    if age_days <= STALE_AFTER_DAYS:
        return Freshness.CURRENT
    if age_days <= EXPIRED_AFTER_DAYS:
        return Freshness.STALE
    return Freshness.EXPIRED


def restamp_epoch(line1: str, epoch: datetime) -> str:
    """Rewrite the epoch field of a TLE line 1 and fix its checksum.

    Args:
        line1: A 69-character TLE line 1.
        epoch: New epoch (naive datetimes are taken as UTC).

    Returns:
        The updated line.
    """
    if len(line1) != TLE_LINE_LENGTH:
        raise ValueError(f"Invalid TLE line 1: {line1!r}")
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)
    epoch = epoch.astimezone(timezone.utc)

    start_of_year = datetime(epoch.year, 1, 1, tzinfo=timezone.utc)
    day_of_year = (epoch - start_of_year).total_seconds() / SECONDS_PER_DAY + 1.0
    field_text = f"{epoch.year % 100:02d}{day_of_year:012.8f}"

    body = line1[:18] + field_text + line1[32:68]
    return body + str(compute_checksum(body))
