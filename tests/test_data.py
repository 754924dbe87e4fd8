"""Tests for the catalog document model and retrieval fallback chain."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from orbwatch.core.tle import validate_tle_line
from orbwatch.core.types import Category
from orbwatch.data.document import CatalogDocument
from orbwatch.data.retrieval import CatalogFetcher
from orbwatch.data.sample import SAMPLE_SOURCE, sample_document
from orbwatch.utils.config import TrackerSettings

ISS_LINE1 = "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9997"
ISS_LINE2 = "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439592"

DOCUMENT = {
    "meta": {
        "lastUpdated": "2026-03-01T00:00:00Z",
        "source": "CelesTrak",
        "version": "1.0.0",
        "totalCount": 1,
    },
    "categories": {
        "stations": [
            {"noradId": 25544, "name": "ISS (ZARYA)", "line1": ISS_LINE1, "line2": ISS_LINE2},
        ],
    },
}


def _make_response(status_code: int = 200, payload: object = None) -> MagicMock:
    """Helper to create a mock response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.raise_for_status = MagicMock()
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    return resp


class TestCatalogDocument:
    def test_parse(self) -> None:
        doc = CatalogDocument.from_dict(DOCUMENT)
        assert doc.meta.source == "CelesTrak"
        assert doc.meta.total_count == 1
        entries = doc.entries()
        assert len(entries) == 1
        assert entries[0].norad_id == 25544
        assert entries[0].category is Category.STATION

    def test_missing_categories_are_empty(self) -> None:
        doc = CatalogDocument.from_dict(DOCUMENT)
        assert doc.categories[Category.NAVIGATION] == []
        assert doc.categories[Category.WEATHER] == []

    @pytest.mark.parametrize("data", [{}, {"meta": {}}, {"categories": {}}, [], "text", {"meta": [], "categories": {}}])
    def test_structural_failure(self, data: object) -> None:
        with pytest.raises(ValueError, match="Invalid catalog document"):
            CatalogDocument.from_dict(data)

    @pytest.mark.parametrize("path, value", [(("categories", "stations"), 5), (("meta", "totalCount"), None)])
    def test_wrong_types_are_structural_failures(self, path: tuple[str, str], value: object) -> None:
        data = json.loads(json.dumps(DOCUMENT))
        data[path[0]][path[1]] = value
        with pytest.raises(ValueError, match="Invalid catalog document"):
            CatalogDocument.from_dict(data)

    def test_malformed_entry_skipped(self) -> None:
        data = json.loads(json.dumps(DOCUMENT))
        data["categories"]["weather"] = [{"noradId": "not a number", "name": "X", "line1": "", "line2": ""}, {"name": "Y"}]
        doc = CatalogDocument.from_dict(data)
        assert doc.categories[Category.WEATHER] == []
        assert len(doc.entries()) == 1

    def test_entries_ordered_by_category(self) -> None:
        entries = sample_document().entries()
        assert [e.category for e in entries] == [Category.STATION, Category.NAVIGATION, Category.WEATHER]

    def test_to_dict_roundtrip(self) -> None:
        doc = CatalogDocument.from_dict(DOCUMENT)
        again = CatalogDocument.from_dict(doc.to_dict())
        assert again == doc
        assert set(doc.to_dict()["categories"]) == {"stations", "navigation", "weather"}


class TestSampleDocument:
    def test_stamped_now(self, now: datetime) -> None:
        doc = sample_document(now)
        assert doc.meta.source == SAMPLE_SOURCE
        assert doc.meta.total_count == 3
        for entry in doc.entries():
            assert validate_tle_line(entry.line1, 1)
            assert validate_tle_line(entry.line2, 2)
            assert entry.line1[18:32] == "26060.50000000"


@pytest.fixture
def settings(tmp_path: Path) -> TrackerSettings:
    return TrackerSettings(
        tle_url="https://example.test/satellites.json",
        cache_path=tmp_path / "cache" / "satellites.json",
        cache_ttl_s=3600.0,
    )


def _write_cache(path: Path, timestamp: float, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"timestamp": timestamp, "data": data}), encoding="utf-8")


class TestCatalogFetcher:
    def test_fetch_success_writes_cache(self, settings: TrackerSettings) -> None:
        fetcher = CatalogFetcher(settings, clock=lambda: 1000.0)
        with patch.object(fetcher._session, "get", return_value=_make_response(200, DOCUMENT)) as get:
            doc = fetcher.fetch()

        assert doc.meta.source == "CelesTrak"
        assert get.call_args.args[0] == settings.tle_url
        cached = json.loads(settings.cache_path.read_text(encoding="utf-8"))
        assert cached["timestamp"] == 1000.0
        assert cached["data"]["meta"]["source"] == "CelesTrak"

    def test_fresh_cache_skips_network(self, settings: TrackerSettings) -> None:
        _write_cache(settings.cache_path, 1000.0, DOCUMENT)
        fetcher = CatalogFetcher(settings, clock=lambda: 1000.0 + 60.0)
        with patch.object(fetcher._session, "get") as get:
            doc = fetcher.fetch()
        get.assert_not_called()
        assert doc.meta.source == "CelesTrak"

    def test_expired_cache_refetched(self, settings: TrackerSettings) -> None:
        stale = json.loads(json.dumps(DOCUMENT))
        stale["meta"]["source"] = "old"
        _write_cache(settings.cache_path, 0.0, stale)
        fetcher = CatalogFetcher(settings, clock=lambda: 10_000.0)
        with patch.object(fetcher._session, "get", return_value=_make_response(200, DOCUMENT)):
            doc = fetcher.fetch()
        assert doc.meta.source == "CelesTrak"

    def test_http_error_falls_back_to_expired_cache(self, settings: TrackerSettings) -> None:
        stale = json.loads(json.dumps(DOCUMENT))
        stale["meta"]["source"] = "old"
        _write_cache(settings.cache_path, 0.0, stale)
        fetcher = CatalogFetcher(settings, clock=lambda: 10_000.0)
        with patch.object(fetcher._session, "get", return_value=_make_response(503)):
            doc = fetcher.fetch()
        assert doc.meta.source == "old"

    def test_connection_error_without_cache_uses_sample(self, settings: TrackerSettings) -> None:
        fetcher = CatalogFetcher(settings)
        with patch.object(fetcher._session, "get", side_effect=requests.ConnectionError("offline")):
            doc = fetcher.fetch()
        assert doc.meta.source == SAMPLE_SOURCE
        assert len(doc.entries()) == 3

    def test_structural_failure_treated_as_retrieval_failure(self, settings: TrackerSettings) -> None:
        fetcher = CatalogFetcher(settings)
        with patch.object(fetcher._session, "get", return_value=_make_response(200, {"meta": {}})):
            doc = fetcher.fetch()
        assert doc.meta.source == SAMPLE_SOURCE
        assert not settings.cache_path.exists()

    @pytest.mark.parametrize("path, value", [(("categories", "stations"), 5), (("meta", "totalCount"), None)])
    def test_wrongly_typed_document_falls_back(
        self, settings: TrackerSettings, path: tuple[str, str], value: object
    ) -> None:
        data = json.loads(json.dumps(DOCUMENT))
        data[path[0]][path[1]] = value
        fetcher = CatalogFetcher(settings)
        with patch.object(fetcher._session, "get", return_value=_make_response(200, data)):
            doc = fetcher.fetch()
        assert doc.meta.source == SAMPLE_SOURCE

    def test_corrupt_cache_ignored(self, settings: TrackerSettings) -> None:
        settings.cache_path.parent.mkdir(parents=True)
        settings.cache_path.write_text("{not json", encoding="utf-8")
        fetcher = CatalogFetcher(settings)
        assert fetcher.read_cache() is None

    def test_local_file_url(self, tmp_path: Path) -> None:
        source = tmp_path / "satellites.json"
        source.write_text(json.dumps(DOCUMENT), encoding="utf-8")
        settings = TrackerSettings(tle_url=str(source), cache_path=tmp_path / "cache.json")
        doc = CatalogFetcher(settings).fetch()
        assert doc.meta.source == "CelesTrak"

    def test_file_scheme_url(self, tmp_path: Path) -> None:
        source = tmp_path / "satellites.json"
        source.write_text(json.dumps(DOCUMENT), encoding="utf-8")
        settings = TrackerSettings(tle_url=source.as_uri(), cache_path=tmp_path / "cache.json")
        assert CatalogFetcher(settings).download().meta.source == "CelesTrak"
