"""Catalog document model.

The catalog document is a JSON object of the form::

    {
      "meta": {"lastUpdated": "...", "source": "...", "version": "...", "totalCount": 3},
      "categories": {
        "stations":   [{"noradId": 25544, "name": "...", "line1": "...", "line2": "..."}],
        "navigation": [...],
        "weather":    [...]
      }
    }
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from orbwatch.core.types import Category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogMetadata:
    """Document metadata.

    Attributes:
        last_updated: ISO 8601 timestamp of the last update.
        source: Data source attribution.
        version: Schema version.
        total_count: Total number of entries across categories.
    """

    last_updated: str
    source: str
    version: str
    total_count: int


@dataclass(frozen=True)
class CatalogEntry:
    """One element set of the document, tagged with its category."""

    norad_id: int
    name: str
    line1: str
    line2: str
    category: Category


@dataclass(frozen=True)
class CatalogDocument:
    """A parsed catalog document."""

    meta: CatalogMetadata
    categories: dict[Category, list[CatalogEntry]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> CatalogDocument:
        """Parse a decoded JSON document.

        Missing category keys become empty lists; entries that are not
        objects with the four required fields are skipped.

        Raises:
            ValueError: If ``meta`` or ``categories`` is missing or not an object,
                a category is not a list, or the metadata has the wrong types.
        """
        if not isinstance(data, dict):
            raise ValueError("Invalid catalog document: not a JSON object")
        meta = data.get("meta")
        raw_categories = data.get("categories")
        if not isinstance(meta, dict) or not isinstance(raw_categories, dict):
            raise ValueError("Invalid catalog document: missing 'meta' or 'categories'")

        categories: dict[Category, list[CatalogEntry]] = {}
        for category in Category:
            raw_entries = raw_categories.get(category.document_key)
            if raw_entries is None:
                raw_entries = []
            if not isinstance(raw_entries, list):
                raise ValueError(f"Invalid catalog document: '{category.document_key}' is not a list")
            entries = []
            for raw in raw_entries:
                try:
                    entries.append(
                        CatalogEntry(
                            norad_id=int(raw["noradId"]),
                            name=str(raw["name"]),
                            line1=str(raw["line1"]),
                            line2=str(raw["line2"]),
                            category=category,
                        )
                    )
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning("Skipping malformed %s entry %r: %s", category.document_key, raw, exc)
            categories[category] = entries

        total = sum(len(v) for v in categories.values())
        try:
            metadata = CatalogMetadata(
                last_updated=str(meta.get("lastUpdated", "")),
                source=str(meta.get("source", "")),
                version=str(meta.get("version", "")),
                total_count=int(meta.get("totalCount", total)),
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid catalog document: bad metadata: {exc}") from exc
        return cls(meta=metadata, categories=categories)

    def to_dict(self) -> dict[str, Any]:
        return {
            "meta": {
                "lastUpdated": self.meta.last_updated,
                "source": self.meta.source,
                "version": self.meta.version,
                "totalCount": self.meta.total_count,
            },
            "categories": {
                category.document_key: [
                    {"noradId": e.norad_id, "name": e.name, "line1": e.line1, "line2": e.line2}
                    for e in self.categories.get(category, [])
                ]
                for category in Category
            },
        }

    def entries(self) -> list[CatalogEntry]:
        """All entries, stations first, then navigation, then weather."""
        return [e for category in Category for e in self.categories.get(category, [])]
