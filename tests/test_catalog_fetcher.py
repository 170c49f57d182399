"""Tests for RepositoryCatalogFetcher and catalog payload parsing."""

from __future__ import annotations

import json

import httpx
import pytest

from src.catalog.fetcher import RepositoryCatalogFetcher, parse_catalog
from src.infra.errors import CatalogFetchError

URL = "https://plugins.test/catalog.json"


def _fetcher(tmp_path, handler) -> RepositoryCatalogFetcher:
    return RepositoryCatalogFetcher(
        URL,
        tmp_path / "cache" / "catalog.json",
        timeout_s=5,
        transport=httpx.MockTransport(handler),
    )


class TestParseCatalog:
    def test_plain_ids(self) -> None:
        assert parse_catalog(["a", "b"]) == ["a", "b"]

    def test_objects_with_id(self) -> None:
        payload = [{"id": "a", "name": "A"}, {"id": "b"}]
        assert parse_catalog(payload) == ["a", "b"]

    def test_entries_without_id_skipped(self) -> None:
        payload = [{"name": "no id"}, {"id": None}, {"id": ""}, 42, "c"]
        assert parse_catalog(payload) == ["c"]

    def test_non_list_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be a JSON list"):
            parse_catalog({"plugins": []})


class TestFetchCatalog:
    def test_success_returns_ids_and_writes_cache(self, tmp_path) -> None:
        fetcher = _fetcher(tmp_path, lambda req: httpx.Response(200, json=[{"id": "x"}, "y"]))

        assert fetcher.fetch_catalog() == ["x", "y"]
        cache_file = tmp_path / "cache" / "catalog.json"
        assert json.loads(cache_file.read_text()) == ["x", "y"]
        assert not cache_file.with_suffix(".tmp").exists()

    def test_requests_configured_url(self, tmp_path) -> None:
        seen: list[str] = []

        def handler(req: httpx.Request) -> httpx.Response:
            seen.append(str(req.url))
            return httpx.Response(200, json=[])

        _fetcher(tmp_path, handler).fetch_catalog()
        assert seen == [URL]

    def test_http_error_status_raises(self, tmp_path) -> None:
        fetcher = _fetcher(tmp_path, lambda req: httpx.Response(503))
        with pytest.raises(CatalogFetchError) as exc_info:
            fetcher.fetch_catalog()
        assert exc_info.value.code == "CATALOG_FETCH_FAILED"

    def test_transport_error_raises(self, tmp_path) -> None:
        def handler(req: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=req)

        with pytest.raises(CatalogFetchError, match="failed"):
            _fetcher(tmp_path, handler).fetch_catalog()

    def test_invalid_json_raises(self, tmp_path) -> None:
        fetcher = _fetcher(tmp_path, lambda req: httpx.Response(200, text="<html>"))
        with pytest.raises(CatalogFetchError, match="malformed"):
            fetcher.fetch_catalog()

    def test_failure_leaves_existing_cache_untouched(self, tmp_path) -> None:
        cache_file = tmp_path / "cache" / "catalog.json"
        cache_file.parent.mkdir()
        cache_file.write_text(json.dumps(["old"]))

        with pytest.raises(CatalogFetchError):
            _fetcher(tmp_path, lambda req: httpx.Response(500)).fetch_catalog()

        assert json.loads(cache_file.read_text()) == ["old"]


class TestTryGetCachedCatalog:
    def test_missing_file_returns_none(self, tmp_path) -> None:
        fetcher = _fetcher(tmp_path, lambda req: httpx.Response(200, json=[]))
        assert fetcher.try_get_cached_catalog() is None

    def test_reads_cache_file(self, tmp_path) -> None:
        cache_file = tmp_path / "cache" / "catalog.json"
        cache_file.parent.mkdir()
        cache_file.write_text(json.dumps(["a", "b"]))

        fetcher = _fetcher(tmp_path, lambda req: httpx.Response(500))
        assert fetcher.try_get_cached_catalog() == ["a", "b"]

    def test_corrupt_file_returns_none(self, tmp_path) -> None:
        cache_file = tmp_path / "cache" / "catalog.json"
        cache_file.parent.mkdir()
        cache_file.write_text("not json {{{")

        fetcher = _fetcher(tmp_path, lambda req: httpx.Response(500))
        assert fetcher.try_get_cached_catalog() is None

    def test_does_not_hit_network(self, tmp_path) -> None:
        def handler(req: httpx.Request) -> httpx.Response:
            raise AssertionError("network must not be used")

        assert _fetcher(tmp_path, handler).try_get_cached_catalog() is None

    def test_round_trip_after_fetch(self, tmp_path) -> None:
        fetcher = _fetcher(tmp_path, lambda req: httpx.Response(200, json=["p"]))
        fetcher.fetch_catalog()
        assert fetcher.try_get_cached_catalog() == ["p"]
