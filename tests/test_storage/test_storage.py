"""Tests for the memory and diskcache storage backends.

Both backends run the same contract tests; disk-only behaviour (reopening,
directory layout, name validation) is covered separately.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from vaultcache.storage import (
    CachedResponse,
    CacheStorage,
    DiskCacheStorage,
    MemoryCacheStorage,
    make_cache_key,
)


def _entry(path: str, body: bytes = b"{}") -> CachedResponse:
    return CachedResponse(
        url=f"https://portal.test{path}",
        status_code=200,
        headers=[("content-type", "application/json")],
        body=body,
    )


@pytest.fixture(params=["memory", "disk"])
def any_storage(request, tmp_path: Path) -> CacheStorage:
    if request.param == "memory":
        yield MemoryCacheStorage()
        return
    s = DiskCacheStorage(tmp_path)
    yield s
    s.close()


# ------------------------------------------------------------------ #
# Generation contract
# ------------------------------------------------------------------ #


class TestGenerationContract:
    async def test_put_and_get(self, any_storage: CacheStorage) -> None:
        gen = await any_storage.open_generation("api-v1")
        await gen.put("GET https://portal.test/api/members", _entry("/api/members", b"[1]"))
        entry = await gen.get("GET https://portal.test/api/members")
        assert entry is not None
        assert entry.body == b"[1]"
        assert entry.header("Content-Type") == "application/json"

    async def test_missing_key_returns_none(self, any_storage: CacheStorage) -> None:
        gen = await any_storage.open_generation("api-v1")
        assert await gen.get("GET https://portal.test/nope") is None

    async def test_keys_in_insertion_order(self, any_storage: CacheStorage) -> None:
        gen = await any_storage.open_generation("api-v1")
        for name in ["c", "a", "b"]:
            await gen.put(name, _entry(f"/{name}"))
        assert await gen.keys() == ["c", "a", "b"]

    async def test_put_existing_key_moves_it_last(self, any_storage: CacheStorage) -> None:
        gen = await any_storage.open_generation("api-v1")
        for name in ["a", "b", "c"]:
            await gen.put(name, _entry(f"/{name}"))
        await gen.put("a", _entry("/a", b"new"))
        assert await gen.keys() == ["b", "c", "a"]
        assert (await gen.get("a")).body == b"new"

    async def test_delete(self, any_storage: CacheStorage) -> None:
        gen = await any_storage.open_generation("api-v1")
        await gen.put("a", _entry("/a"))
        assert await gen.delete("a") is True
        assert await gen.delete("a") is False
        assert await gen.count() == 0

    async def test_clear(self, any_storage: CacheStorage) -> None:
        gen = await any_storage.open_generation("api-v1")
        await gen.put("a", _entry("/a"))
        await gen.put("b", _entry("/b"))
        await gen.clear()
        assert await gen.keys() == []


# ------------------------------------------------------------------ #
# Storage contract
# ------------------------------------------------------------------ #


class TestStorageContract:
    async def test_open_creates_generation(self, any_storage: CacheStorage) -> None:
        assert await any_storage.has_generation("static-v1") is False
        await any_storage.open_generation("static-v1")
        assert await any_storage.has_generation("static-v1") is True

    async def test_open_twice_returns_same_entries(self, any_storage: CacheStorage) -> None:
        first = await any_storage.open_generation("static-v1")
        await first.put("a", _entry("/a"))
        second = await any_storage.open_generation("static-v1")
        assert await second.get("a") is not None

    async def test_generations_are_isolated(self, any_storage: CacheStorage) -> None:
        a = await any_storage.open_generation("a")
        b = await any_storage.open_generation("b")
        await a.put("k", _entry("/k"))
        assert await b.get("k") is None

    async def test_delete_generation_removes_entries(self, any_storage: CacheStorage) -> None:
        gen = await any_storage.open_generation("old-v1")
        await gen.put("k", _entry("/k"))

        assert await any_storage.delete_generation("old-v1") is True
        assert "old-v1" not in await any_storage.generation_names()

        reopened = await any_storage.open_generation("old-v1")
        assert await reopened.get("k") is None

    async def test_delete_unknown_generation(self, any_storage: CacheStorage) -> None:
        assert await any_storage.delete_generation("never-opened") is False


# ------------------------------------------------------------------ #
# Disk-only behaviour
# ------------------------------------------------------------------ #


class TestDiskStorage:
    async def test_entries_survive_reopen(self, tmp_path: Path) -> None:
        first = DiskCacheStorage(tmp_path)
        gen = await first.open_generation("api-v1")
        await gen.put("a", _entry("/a", b"persisted"))
        await gen.put("b", _entry("/b"))
        first.close()

        second = DiskCacheStorage(tmp_path)
        try:
            gen = await second.open_generation("api-v1")
            assert await gen.keys() == ["a", "b"]
            assert (await gen.get("a")).body == b"persisted"
            assert await second.generation_names() == ["api-v1"]
        finally:
            second.close()

    async def test_generation_directory_layout(self, disk_storage: DiskCacheStorage, tmp_path: Path) -> None:
        await disk_storage.open_generation("unityvault-v2")
        assert (tmp_path / "generations" / "unityvault-v2").is_dir()
        assert disk_storage.directory == tmp_path / "generations"

    @pytest.mark.parametrize("name", ["../escape", "", "a/b", ".hidden"])
    async def test_rejects_unsafe_names(self, disk_storage: DiskCacheStorage, name: str) -> None:
        with pytest.raises(ValueError):
            await disk_storage.open_generation(name)

    async def test_close_twice(self, tmp_path: Path) -> None:
        s = DiskCacheStorage(tmp_path)
        await s.open_generation("a")
        s.close()
        s.close()


# ------------------------------------------------------------------ #
# Entries
# ------------------------------------------------------------------ #


class TestCachedResponse:
    def test_key_uppercases_method(self) -> None:
        assert make_cache_key("get", "https://portal.test/api/x?a=1") == (
            "GET https://portal.test/api/x?a=1"
        )

    def test_cached_at_parses_integer(self) -> None:
        entry = _entry("/a").model_copy(update={"headers": [("x-sw-cached-at", "1234")]})
        assert entry.cached_at("x-sw-cached-at") == 1234

    @pytest.mark.parametrize("headers", [[], [("x-sw-cached-at", "yesterday")]])
    def test_cached_at_missing_or_garbled(self, headers) -> None:
        entry = _entry("/a").model_copy(update={"headers": headers})
        assert entry.cached_at("x-sw-cached-at") is None

    def test_age_ms(self) -> None:
        entry = _entry("/a").model_copy(update={"headers": [("x-sw-cached-at", "1000")]})
        assert entry.age_ms(1500, "x-sw-cached-at") == 500
        assert _entry("/a").age_ms(1500, "x-sw-cached-at") is None

    def test_to_response_recomputes_length(self) -> None:
        entry = CachedResponse(
            url="https://portal.test/a",
            status_code=200,
            headers=[("content-encoding", "gzip"), ("content-length", "999")],
            body=b"plain",
        )
        response = entry.to_response()
        assert response.content == b"plain"
        assert response.headers["content-length"] == "5"
        assert "content-encoding" not in response.headers
