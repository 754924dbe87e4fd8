"""Catalog document retrieval with a JSON file cache.

Provides the fallback chain the tracker relies on: fresh cache, network,
stale cache, built-in sample. The sample fallback means a session always
has something to show; a consumer can tell by the ``"Sample Data"``
source in the document metadata.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable
from urllib.parse import urlparse

import requests

from orbwatch.data.document import CatalogDocument
from orbwatch.data.sample import sample_document
from orbwatch.utils.config import TrackerSettings

logger = logging.getLogger(__name__)


@dataclass
class CachedDocument:
    document: CatalogDocument
    timestamp: float


@dataclass
class CatalogFetcher:
    """Fetch the catalog document described by ``settings``.

    Attributes:
        settings: URL, cache location, TTL and timeout.
        clock: Returns the current time in seconds since the Unix epoch.
    """

    settings: TrackerSettings = field(default_factory=TrackerSettings)
    clock: Callable[[], float] = time.time
    _session: requests.Session = field(default_factory=requests.Session, repr=False)

    def fetch(self) -> CatalogDocument:
        """Return the best available catalog document.

        Order: cached copy within TTL, network, cached copy of any age,
        built-in sample.
        """
        cached = self.read_cache()
        if cached is not None and not self._is_expired(cached.timestamp):
            logger.info("Using cached catalog document from %s", self.settings.cache_path)
            return cached.document

        try:
            document = self.download()
        except (requests.RequestException, OSError, ValueError) as exc:
            logger.error("Failed to fetch catalog document from %s: %s", self.settings.tle_url, exc)
        else:
            self.write_cache(document)
            return document

        if cached is not None:
            logger.warning("Using expired cached catalog document as fallback")
            return cached.document

        logger.warning("No catalog document available, falling back to built-in sample data")
        return sample_document()

    def download(self) -> CatalogDocument:
        """Retrieve and validate the document from ``settings.tle_url``.

        Plain paths and ``file://`` URLs are read from disk.

        Raises:
            requests.HTTPError: If the server answers with an error status.
            requests.RequestException: On connection problems.
            OSError: If a local file cannot be read.
            ValueError: If the body is not a valid catalog document.
        """
        url = self.settings.tle_url
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            response = self._session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.settings.request_timeout_s,
            )
            response.raise_for_status()
            data = response.json()
        else:
            path = Path(parsed.path if parsed.scheme == "file" else url)
            data = json.loads(path.read_text(encoding="utf-8"))

        document = CatalogDocument.from_dict(data)
        logger.debug("Downloaded catalog document: %d entries from %s",
                     len(document.entries()), document.meta.source)
        return document

    def read_cache(self) -> CachedDocument | None:
        """Load the cached document, or None if absent or unreadable."""
        path = Path(self.settings.cache_path)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return CachedDocument(
                document=CatalogDocument.from_dict(raw["data"]),
                timestamp=float(raw["timestamp"]),
            )
        except (OSError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable catalog cache %s: %s", path, exc)
            return None

    def write_cache(self, document: CatalogDocument) -> None:
        path = Path(self.settings.cache_path)
        entry = {"timestamp": self.clock(), "data": document.to_dict()}
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(entry), encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to cache catalog document at %s: %s", path, exc)

    def _is_expired(self, timestamp: float) -> bool:
        return self.clock() - timestamp > self.settings.cache_ttl_s
