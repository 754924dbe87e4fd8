"""Built-in sample catalog used when no catalog document can be retrieved.

The element sets are real but old; their epochs are rewritten to the
current instant so they pass the freshness check. Positions derived from
them are illustrative only, which is why the document's source is
``"Sample Data"``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from orbwatch.core.tle import restamp_epoch
from orbwatch.data.document import CatalogDocument

SAMPLE_SOURCE = "Sample Data"

_SAMPLE_CATEGORIES = {
    "stations": [
        {
            "noradId": 25544,
            "name": "ISS (ZARYA)",
            "line1": "1 25544U 98067A   24053.50900463  .00003075  00000-0  59442-4 0  9994",
            "line2": "2 25544  51.6433  59.2583 0008217  16.4489 347.6017 15.51174618173442",
        },
    ],
    "navigation": [
        {
            "noradId": 28874,
            "name": "GPS BIIR-2",
            "line1": "1 28874U 05038A   24053.18592765 -.00000020  00000-0  00000-0 0  9995",
            "line2": "2 28874  55.1247 237.2584 0104234 247.5032 111.4573  2.00569934135462",
        },
    ],
    "weather": [
        {
            "noradId": 43226,
            "name": "GOES 17",
            "line1": "1 43226U 18022A   24053.87506944  .00000091  00000-0  00000-0 0  9997",
            "line2": "2 43226   0.0146 271.2658 0001116 139.7856 316.2395  1.00273358 21774",
        },
    ],
}


def sample_document(now: datetime | None = None) -> CatalogDocument:
    """Return the sample catalog with every epoch set to ``now``."""
    if now is None:
        now = datetime.now(timezone.utc)

    categories = {
        key: [dict(entry, line1=restamp_epoch(entry["line1"], now)) for entry in entries]
        for key, entries in _SAMPLE_CATEGORIES.items()
    }
    return CatalogDocument.from_dict(
        {
            "meta": {
                "lastUpdated": now.isoformat(),
                "source": SAMPLE_SOURCE,
                "version": "1.0.0",
                "totalCount": sum(len(v) for v in categories.values()),
            },
            "categories": categories,
        }
    )
