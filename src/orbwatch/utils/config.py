"""Runtime settings for a tracking session."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from orbwatch.utils.constants import (
    CACHE_TTL_S,
    DEFAULT_CACHE_PATH,
    DEFAULT_TLE_URL,
    MAX_OBJECTS,
    REQUEST_TIMEOUT_S,
    UPDATE_INTERVAL_S,
)

logger = logging.getLogger(__name__)

_ENV_PREFIX = "ORBWATCH_"


@dataclass(frozen=True)
class TrackerSettings:
    """Settings for retrieval and refresh.

    Attributes:
        tle_url: URL of the catalog document.
        cache_path: JSON file holding the last good catalog document.
        cache_ttl_s: Cache age in seconds after which a refetch is attempted.
        request_timeout_s: HTTP timeout in seconds.
        update_interval_s: Period of the position refresh loop in seconds.
        max_objects: Cap on tracked objects per catalog document.
    """

    tle_url: str = DEFAULT_TLE_URL
    cache_path: Path = Path(DEFAULT_CACHE_PATH).expanduser()
    cache_ttl_s: float = CACHE_TTL_S
    request_timeout_s: float = REQUEST_TIMEOUT_S
    update_interval_s: float = UPDATE_INTERVAL_S
    max_objects: int = MAX_OBJECTS

    def __post_init__(self) -> None:
        if self.update_interval_s <= 0:
            raise ValueError(f"update_interval_s must be positive, got {self.update_interval_s}")
        if self.cache_ttl_s < 0:
            raise ValueError(f"cache_ttl_s must be non-negative, got {self.cache_ttl_s}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> TrackerSettings:
        """Build settings from ``ORBWATCH_*`` environment variables.

        Recognised: ``ORBWATCH_TLE_URL``, ``ORBWATCH_CACHE_PATH``,
        ``ORBWATCH_CACHE_TTL_S``, ``ORBWATCH_UPDATE_INTERVAL_S``.
        Unset variables keep their defaults.

        Raises:
            ValueError: If a numeric variable does not parse.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        url = env.get(f"{_ENV_PREFIX}TLE_URL")
        if url:
            kwargs["tle_url"] = url
        path = env.get(f"{_ENV_PREFIX}CACHE_PATH")
        if path:
            kwargs["cache_path"] = Path(path).expanduser()
        for key, name in (("CACHE_TTL_S", "cache_ttl_s"), ("UPDATE_INTERVAL_S", "update_interval_s")):
            raw = env.get(f"{_ENV_PREFIX}{key}")
            if raw is None:
                continue
            try:
                kwargs[name] = float(raw)
            except ValueError:
                raise ValueError(f"{_ENV_PREFIX}{key} must be a number, got {raw!r}") from None

        logger.debug("Settings from environment: %s", sorted(kwargs))
        return cls(**kwargs)
