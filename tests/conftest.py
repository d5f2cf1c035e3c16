"""Shared test fixtures for vaultcache.

Provides a scriptable fake backend (served through
:class:`httpx.MockTransport`), a controllable millisecond clock, storage
backends, a ready-made worker, config isolation and output management.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from vaultcache.models import OfflineCacheConfig
from vaultcache.notifications import InMemoryShell
from vaultcache.output import OutputFormat, OutputManager, reset_output, set_output
from vaultcache.storage import DiskCacheStorage, MemoryCacheStorage
from vaultcache.worker import OfflineCacheWorker

BASE_URL = "https://portal.test"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    CliRunner swaps sys.stdout/sys.stderr; a manager created during one
    test would keep references to closed streams.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Fake backend and clock
# ---------------------------------------------------------------------------


class FakeBackend:
    """Portal origin with per-path canned responses and an on/off switch.

    Unknown paths answer 404.  While ``online`` is False every request
    raises :class:`httpx.ConnectError`.
    """

    def __init__(self) -> None:
        self.online = True
        self.routes: dict[str, tuple[int, bytes, str]] = {
            "/": (200, b"<html>root</html>", "text/html"),
            "/index.html": (200, b"<html>shell</html>", "text/html"),
            "/offline.html": (200, b"<html>offline</html>", "text/html"),
        }
        self.calls: list[tuple[str, str]] = []

    def json(self, path: str, data: Any, status: int = 200) -> None:
        self.routes[path] = (status, json.dumps(data).encode(), "application/json")

    def html(self, path: str, text: str, status: int = 200) -> None:
        self.routes[path] = (status, text.encode(), "text/html")

    def calls_to(self, path: str) -> int:
        return sum(1 for _, p in self.calls if p == path)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        if not self.online:
            raise httpx.ConnectError("network is unreachable", request=request)
        route = self.routes.get(request.url.raw_path.decode()) or self.routes.get(
            request.url.path
        )
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        status, body, content_type = route
        return httpx.Response(status, content=body, headers={"Content-Type": content_type})


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def network(backend: FakeBackend) -> httpx.AsyncClient:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(backend.handle))
    yield client
    await client.aclose()


# ---------------------------------------------------------------------------
# Storage, shell and worker
# ---------------------------------------------------------------------------


@pytest.fixture
def storage() -> MemoryCacheStorage:
    return MemoryCacheStorage()


@pytest.fixture
def disk_storage(tmp_path: Path) -> DiskCacheStorage:
    s = DiskCacheStorage(tmp_path)
    yield s
    s.close()


@pytest.fixture
def shell() -> InMemoryShell:
    return InMemoryShell()


@pytest.fixture
def cache_config() -> OfflineCacheConfig:
    return OfflineCacheConfig()


@pytest.fixture
def worker(
    network: httpx.AsyncClient,
    storage: MemoryCacheStorage,
    shell: InMemoryShell,
    cache_config: OfflineCacheConfig,
    clock: FakeClock,
) -> OfflineCacheWorker:
    return OfflineCacheWorker(network, storage, shell, config=cache_config, clock=clock)



# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories into tmp_path, clear VAULTCACHE_* and chdir there."""
    monkeypatch.setattr("vaultcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["VAULTCACHE_PROFILE", "VAULTCACHE_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
