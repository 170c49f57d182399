"""Plugin repository catalog fetching.

CatalogCache depends only on the CatalogFetcher protocol. The repository
implementation downloads the catalog over HTTP and mirrors it into a local
JSON file so that try_get_cached_catalog() stays a cheap disk read.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

import httpx
import structlog

from src.constants import CATALOG_FETCH_TIMEOUT_SECONDS
from src.infra.errors import CatalogFetchError

logger = structlog.get_logger()


class CatalogFetcher(Protocol):
    def try_get_cached_catalog(self) -> Iterable[str] | None:
        """Return locally cached plugin ids without blocking, or None if none."""
        ...

    def fetch_catalog(self) -> Iterable[str]:
        """Blocking fetch of the current catalog. Raises on failure."""
        ...


def parse_catalog(payload: Any) -> list[str]:
    """Extract plugin ids from a catalog payload.

    Accepts a list of id strings or a list of objects carrying an "id" key.
    Entries without a usable id are skipped.
    """
    if not isinstance(payload, list):
        raise ValueError(f"catalog must be a JSON list (got {type(payload).__name__})")
    ids: list[str] = []
    for item in payload:
        if isinstance(item, dict):
            item = item.get("id")
        if isinstance(item, str) and item:
            ids.append(item)
    return ids


class RepositoryCatalogFetcher:
    """Fetch the catalog from a plugin repository URL, keep a local JSON copy."""

    def __init__(
        self,
        url: str,
        cache_path: Path,
        *,
        timeout_s: float = CATALOG_FETCH_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._cache_path = cache_path
        self._timeout_s = timeout_s
        self._transport = transport

    def try_get_cached_catalog(self) -> list[str] | None:
        if not self._cache_path.is_file():
            return None
        try:
            return parse_catalog(json.loads(self._cache_path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            logger.warning(
                "catalog_cache_file_unreadable",
                path=str(self._cache_path),
                error=str(e),
            )
            return None

    def fetch_catalog(self) -> list[str]:
        try:
            with httpx.Client(timeout=self._timeout_s, transport=self._transport) as client:
                resp = client.get(self._url)
                resp.raise_for_status()
                ids = parse_catalog(resp.json())
        except httpx.HTTPError as e:
            raise CatalogFetchError(f"Catalog download from {self._url} failed: {e}") from e
        except ValueError as e:
            raise CatalogFetchError(f"Catalog from {self._url} is malformed: {e}") from e

        self._write_cache(ids)
        logger.info("catalog_fetched", url=self._url, plugins=len(ids))
        return ids

    def _write_cache(self, ids: list[str]) -> None:
        """Atomic replace; a failed write only costs the local copy."""
        try:
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = self._cache_path.with_suffix(".tmp")
            temp_file.write_text(json.dumps(ids), encoding="utf-8")
            temp_file.replace(self._cache_path)
        except OSError as e:
            logger.warning(
                "catalog_cache_write_failed",
                path=str(self._cache_path),
                error=str(e),
            )
