"""Catalog membership cache with bounded staleness and background refresh.

Membership queries never block on the network: they answer from the snapshot
currently held (possibly empty) and, when that snapshot is missing or older
than the staleness window, schedule a single background refresh.
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Executor
from dataclasses import dataclass
from pathlib import Path

import structlog

from src.catalog.fetcher import CatalogFetcher
from src.constants import CATALOG_REFRESH_TIMEOUT_SECONDS, CATALOG_STALENESS_SECONDS
from src.tools.base import ToolOrigin

logger = structlog.get_logger()


@dataclass(frozen=True)
class CatalogSnapshot:
    identifiers: frozenset[str]
    fetched_at: float


def canonical_path(path: Path) -> str:
    """Resolve symlinks and ``..`` segments; fall back to the absolute form.

    Keeps paths like ``/opt/app/bin/../plugins/x`` from failing the
    plugins-root prefix check.
    """
    try:
        return str(path.resolve(strict=False))
    except (OSError, RuntimeError):
        return os.path.abspath(path)


class CatalogCache:
    """Process-wide holder of the plugin catalog snapshot.

    Construct once and pass by reference to classification calls.
    Thread-safe: snapshot swaps and the in-flight flag are guarded by one lock;
    readers get an immutable snapshot reference.

    Without a host executor every claimed refresh runs on its own daemon
    thread, so a refresh the watchdog supersedes never blocks its successor.
    """

    def __init__(
        self,
        fetcher: CatalogFetcher,
        plugins_path: Path,
        *,
        staleness_seconds: float = CATALOG_STALENESS_SECONDS,
        refresh_timeout_s: float = CATALOG_REFRESH_TIMEOUT_SECONDS,
        executor: Executor | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._plugins_root = canonical_path(plugins_path)
        self._staleness = staleness_seconds
        self._refresh_timeout = refresh_timeout_s
        self._clock = clock
        self._executor = executor
        self._closed = False
        self._lock = threading.Lock()
        self._snapshot: CatalogSnapshot | None = None
        self._refresh_started_at: float | None = None  # None = no refresh in flight

    @property
    def plugins_root(self) -> str:
        return self._plugins_root

    @property
    def snapshot(self) -> CatalogSnapshot | None:
        return self._snapshot

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh_started_at is not None

    def plugin_ids(self) -> frozenset[str]:
        """Current catalog ids; schedules a refresh when missing or stale."""
        snapshot = self._current()
        return snapshot.identifiers if snapshot is not None else frozenset()

    def is_listed(
        self, origin: ToolOrigin | None, plugin_ids: frozenset[str] | None = None
    ) -> bool:
        """True if origin is installed under the plugins root and its id is in the catalog.

        plugin_ids pins the catalog for a whole classification pass; without it
        the current snapshot is read.
        """
        if origin is None or origin.plugin_id is None or origin.path is None:
            return False
        if not canonical_path(origin.path).startswith(self._plugins_root):
            return False
        if plugin_ids is None:
            plugin_ids = self.plugin_ids()
        return origin.plugin_id in plugin_ids

    def close(self) -> None:
        """Stop scheduling refreshes. A host-supplied executor is left running."""
        self._closed = True

    def __enter__(self) -> CatalogCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _current(self) -> CatalogSnapshot | None:
        cached = self._read_cached() if self._snapshot is None else None
        with self._lock:
            now = self._clock()
            if self._snapshot is None and cached is not None:
                self._install(cached, now, source="local_cache")
            snapshot = self._snapshot
            submit = (
                snapshot is None or now - snapshot.fetched_at > self._staleness
            ) and self._claim_refresh(now)
        if submit:
            self._submit_refresh(now)
        return snapshot

    def _read_cached(self) -> Iterable[str] | None:
        try:
            return self._fetcher.try_get_cached_catalog()
        except Exception:
            logger.warning("catalog_cached_read_failed", exc_info=True)
            return None

    def _install(self, ids: Iterable[str], now: float, *, source: str) -> None:
        # Caller holds the lock.
        self._snapshot = CatalogSnapshot(identifiers=frozenset(ids), fetched_at=now)
        logger.info(
            "catalog_snapshot_installed",
            source=source,
            plugins=len(self._snapshot.identifiers),
        )

    def _claim_refresh(self, now: float) -> bool:
        """Set the in-flight flag unless a live refresh already holds it. Caller holds the lock."""
        started = self._refresh_started_at
        if started is not None:
            if now - started <= self._refresh_timeout:
                return False
            logger.warning(
                "catalog_refresh_timed_out",
                in_flight_s=round(now - started, 1),
                timeout_s=self._refresh_timeout,
            )
        self._refresh_started_at = now
        return True

    def _submit_refresh(self, started_at: float) -> None:
        if self._closed:
            self._reject_refresh(started_at, reason="closed")
            return
        try:
            if self._executor is not None:
                self._executor.submit(self._refresh, started_at)
            else:
                threading.Thread(
                    target=self._refresh,
                    args=(started_at,),
                    name="catalog-refresh",
                    daemon=True,
                ).start()
        except RuntimeError as e:
            self._reject_refresh(started_at, reason=str(e))
            return
        logger.info("catalog_refresh_scheduled")

    def _reject_refresh(self, started_at: float, *, reason: str) -> None:
        logger.warning("catalog_refresh_rejected", reason=reason)
        with self._lock:
            self._clear_in_flight(started_at)

    def _refresh(self, started_at: float) -> None:
        try:
            ids = list(self._fetcher.fetch_catalog())
        except Exception as e:
            logger.warning("catalog_refresh_failed", error=str(e), error_type=type(e).__name__)
            with self._lock:
                self._clear_in_flight(started_at)
            return

        with self._lock:
            self._install(ids, self._clock(), source="repository")
            self._clear_in_flight(started_at)

    def _clear_in_flight(self, started_at: float) -> None:
        # A refresh superseded by the watchdog must not clear its successor's flag.
        if self._refresh_started_at == started_at:
            self._refresh_started_at = None
