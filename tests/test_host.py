"""Tests for the lifecycle host and the httpx transport binding."""

from __future__ import annotations

import httpx
import pytest

from vaultcache.exceptions import InstallError
from vaultcache.host import OfflineTransport, WorkerHost, WorkerState
from vaultcache.models import OfflineCacheConfig
from vaultcache.worker import OfflineCacheWorker

BASE_URL = "https://portal.test"


def _worker(network, storage, shell, clock, version: str = "v2") -> OfflineCacheWorker:
    config = OfflineCacheConfig(
        static_cache_name=f"unityvault-{version}",
        api_cache_name=f"unityvault-api-{version}",
    )
    return OfflineCacheWorker(network, storage, shell, config=config, clock=clock)


class TestRegister:
    async def test_first_worker_activates(self, network, storage, shell, clock) -> None:
        host = WorkerHost(network)
        worker = _worker(network, storage, shell, clock)
        assert host.state_of(worker) is WorkerState.PARSED

        assert await host.register(worker) is WorkerState.ACTIVATED
        assert host.active is worker
        assert host.waiting is None

    async def test_failed_install_keeps_previous_version(
        self, network, backend, storage, shell, clock
    ) -> None:
        host = WorkerHost(network)
        old = _worker(network, storage, shell, clock, "v2")
        await host.register(old)

        backend.online = False
        new = _worker(network, storage, shell, clock, "v3")
        with pytest.raises(InstallError):
            await host.register(new)

        assert host.state_of(new) is WorkerState.REDUNDANT
        assert host.active is old
        assert await storage.generation_names() == ["unityvault-v2"]

    async def test_skip_waiting_replaces_active(self, network, storage, shell, clock) -> None:
        host = WorkerHost(network)
        old = _worker(network, storage, shell, clock, "v2")
        new = _worker(network, storage, shell, clock, "v3")
        await host.register(old)
        await host.register(new)

        assert host.active is new
        assert host.state_of(old) is WorkerState.REDUNDANT
        assert await storage.generation_names() == ["unityvault-v3"]

    async def test_without_skip_waiting_new_version_waits(
        self, network, storage, shell, clock, monkeypatch
    ) -> None:
        host = WorkerHost(network)
        old = _worker(network, storage, shell, clock, "v2")
        await host.register(old)

        new = _worker(network, storage, shell, clock, "v3")
        original_install = new.on_install

        async def install_without_skip() -> None:
            await original_install()
            new.skip_waiting_requested = False

        monkeypatch.setattr(new, "on_install", install_without_skip)

        assert await host.register(new) is WorkerState.INSTALLED
        assert host.waiting is new
        assert host.active is old
        assert "unityvault-v2" in await storage.generation_names()

        assert await host.release_active() is new
        assert host.active is new
        assert host.state_of(new) is WorkerState.ACTIVATED
        assert await storage.generation_names() == ["unityvault-v3"]

    async def test_release_without_waiting(self, network) -> None:
        assert await WorkerHost(network).release_active() is None


class TestResume:
    async def test_resume_skips_install_when_installed(
        self, network, backend, storage, shell, clock
    ) -> None:
        await WorkerHost(network).register(_worker(network, storage, shell, clock))
        calls = len(backend.calls)

        host = WorkerHost(network)
        backend.online = False
        worker = _worker(network, storage, shell, clock)
        assert await host.resume(worker) is WorkerState.ACTIVATED
        assert len(backend.calls) == calls

    async def test_resume_installs_when_missing(self, network, backend, storage, shell, clock) -> None:
        host = WorkerHost(network)
        worker = _worker(network, storage, shell, clock)
        assert await host.resume(worker) is WorkerState.ACTIVATED
        assert backend.calls_to("/offline.html") == 1

    async def test_resume_purges_renamed_api_generation(
        self, network, backend, storage, shell, clock
    ) -> None:
        await WorkerHost(network).register(_worker(network, storage, shell, clock))
        await storage.open_generation("unityvault-api-v2")

        backend.online = False
        worker = OfflineCacheWorker(
            network,
            storage,
            shell,
            config=OfflineCacheConfig(api_cache_name="unityvault-api-v3"),
            clock=clock,
        )
        host = WorkerHost(network)
        assert await host.resume(worker) is WorkerState.ACTIVATED
        assert host.active is worker
        assert await storage.generation_names() == ["unityvault-v2"]


class TestDispatch:
    async def test_no_active_worker_goes_to_network(self, network, backend, storage) -> None:
        host = WorkerHost(network)
        backend.json("/api/members", [])
        response = await host.fetch(network.build_request("GET", "/api/members"))
        assert response.status_code == 200
        assert await storage.generation_names() == []

    async def test_push_without_worker_is_ignored(self, network) -> None:
        assert await WorkerHost(network).push(b'{"body": "x"}') is None

    async def test_push_and_click_through_host(self, network, storage, shell, clock) -> None:
        host = WorkerHost(network)
        await host.register(_worker(network, storage, shell, clock))
        notification = await host.push(b'{"data": {"url": "/member"}}')
        await host.notification_click(notification)
        assert [w.url for w in shell.windows] == ["/member"]


class TestOfflineTransport:
    async def test_client_reads_through_cache(self, network, backend, storage, shell, clock) -> None:
        host = WorkerHost(network)
        await host.register(_worker(network, storage, shell, clock))
        backend.json("/api/members", {"items": [1]})

        async with httpx.AsyncClient(base_url=BASE_URL, transport=OfflineTransport(host)) as portal:
            assert (await portal.get("/api/members")).json() == {"items": [1]}
            backend.online = False
            cached = await portal.get("/api/members")
            assert cached.status_code == 200
            assert cached.json() == {"items": [1]}
            assert (await portal.get("/")).text == "<html>root</html>"

            with pytest.raises(httpx.ConnectError):
                await portal.post("/api/auth/login", json={"email": "a@b.org"})
