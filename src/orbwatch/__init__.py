"""
orbwatch: live satellite position tracking for Python.

Parses two-line element sets, propagates them with SGP4 to geodetic
positions and ground tracks, and keeps a continuously refreshed catalog
snapshot for a map or dashboard to read.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from orbwatch.core.types import (
    Category,
    Freshness,
    GeodeticPosition,
    OrbitalElements,
    TwoLineElement,
    VelocityVector,
)
from orbwatch.core.tle import (
    OrbitalRecord,
    classify_freshness,
    compute_checksum,
    parse_element_set,
    validate_tle_line,
)
from orbwatch.core.propagation import (
    PropagationResult,
    derive_orbital_elements,
    propagate,
    propagate_batch,
    propagate_window,
)
from orbwatch.core.groundtrack import GroundTrack, ground_track, split_antimeridian
from orbwatch.core.catalog import (
    CatalogState,
    CatalogStatus,
    CatalogStore,
    PositionUpdate,
    TrackedObject,
    build_tracked_objects,
    transition,
)
from orbwatch.core.scheduler import RefreshScheduler
from orbwatch.core.session import TrackingSession
from orbwatch.data.document import CatalogDocument, CatalogEntry, CatalogMetadata
from orbwatch.data.retrieval import CatalogFetcher
from orbwatch.data.sample import sample_document
from orbwatch.utils.config import TrackerSettings

__all__ = [
    "__version__",
    "Category",
    "Freshness",
    "GeodeticPosition",
    "OrbitalElements",
    "TwoLineElement",
    "VelocityVector",
    "OrbitalRecord",
    "classify_freshness",
    "compute_checksum",
    "parse_element_set",
    "validate_tle_line",
    "PropagationResult",
    "derive_orbital_elements",
    "propagate",
    "propagate_batch",
    "propagate_window",
    "GroundTrack",
    "ground_track",
    "split_antimeridian",
    "CatalogState",
    "CatalogStatus",
    "CatalogStore",
    "PositionUpdate",
    "TrackedObject",
    "build_tracked_objects",
    "transition",
    "RefreshScheduler",
    "TrackingSession",
    "CatalogDocument",
    "CatalogEntry",
    "CatalogMetadata",
    "CatalogFetcher",
    "sample_document",
    "TrackerSettings",
]
