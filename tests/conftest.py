"""Shared pytest fixtures for tool usage tests.

CatalogCache is driven deterministically: a FakeClock stands in for
time.monotonic and a ManualExecutor queues background refreshes until the
test runs them explicitly. InlineExecutor runs a refresh before submit
returns, for tests that need the catalog to change mid-call.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest
import structlog

from src.catalog.cache import CatalogCache
from src.tools.base import ToolOrigin, ToolState


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualExecutor(Executor):
    """Executor that only records submissions; run_all() executes them."""

    def __init__(self) -> None:
        self.pending: list[tuple[Callable, tuple]] = []
        self.submitted = 0
        self.shut_down = False

    def submit(self, fn, /, *args, **kwargs):  # type: ignore[override]
        if self.shut_down:
            raise RuntimeError("cannot schedule new futures after shutdown")
        self.submitted += 1
        self.pending.append((fn, args))
        return Future()

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for fn, args in pending:
            fn(*args)

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        self.shut_down = True


class InlineExecutor(Executor):
    """Executor that runs each submission immediately on the caller thread."""

    def submit(self, fn, /, *args, **kwargs):  # type: ignore[override]
        future: Future = Future()
        future.set_result(fn(*args, **kwargs))
        return future


class FakeFetcher:
    def __init__(
        self,
        cached: Iterable[str] | None = None,
        remote: Iterable[str] | Exception = (),
    ) -> None:
        self.cached = cached
        self.remote = remote
        self.cached_reads = 0
        self.fetches = 0

    def try_get_cached_catalog(self) -> Iterable[str] | None:
        self.cached_reads += 1
        return self.cached

    def fetch_catalog(self) -> Iterable[str]:
        self.fetches += 1
        if isinstance(self.remote, Exception):
            raise self.remote
        return self.remote


class StaticSource:
    def __init__(self, states: list[ToolState]) -> None:
        self.states = states
        self.calls = 0

    def list_tool_states(self, workspace: Path) -> list[ToolState]:
        self.calls += 1
        return list(self.states)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def executor() -> ManualExecutor:
    return ManualExecutor()


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def plugins_dir(tmp_path: Path) -> Path:
    path = tmp_path / "plugins"
    path.mkdir()
    return path


@pytest.fixture
def make_cache(plugins_dir: Path, executor: ManualExecutor, clock: FakeClock):
    def _make(fetcher: FakeFetcher, **kwargs) -> CatalogCache:
        return CatalogCache(fetcher, plugins_dir, executor=executor, clock=clock, **kwargs)

    return _make


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_source():
    return StaticSource


@pytest.fixture
def listed_origin(plugins_dir: Path):
    """Origin of a repository plugin installed under the plugins root."""

    def _origin(plugin_id: str) -> ToolOrigin:
        return ToolOrigin(plugin_id=plugin_id, path=plugins_dir / plugin_id, bundled=False)

    return _origin


@pytest.fixture
def bundled_origin():
    def _origin(plugin_id: str = "com.example.core") -> ToolOrigin:
        return ToolOrigin(
            plugin_id=plugin_id, path=Path("/opt/app/lib") / plugin_id, bundled=True,
        )

    return _origin


@pytest.fixture(autouse=True)
def captured_logs():
    """Route structlog events into a list instead of stdout."""
    with structlog.testing.capture_logs() as logs:
        yield logs
