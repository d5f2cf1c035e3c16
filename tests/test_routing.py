"""Tests for request classification."""

from __future__ import annotations

import pytest

from vaultcache.models import OfflineCacheConfig
from vaultcache.routing import Route, classify_request, request_path


@pytest.fixture
def config() -> OfflineCacheConfig:
    return OfflineCacheConfig()


class TestApiReads:
    @pytest.mark.parametrize(
        "url",
        [
            "https://portal.test/api/members",
            "https://portal.test/api/loans/42?include=payments",
            "/api/distributions/2024",
        ],
    )
    def test_api_get_is_network_first(self, config: OfflineCacheConfig, url: str) -> None:
        assert classify_request("GET", url, config) is Route.NETWORK_FIRST

    def test_method_is_case_insensitive(self, config: OfflineCacheConfig) -> None:
        assert classify_request("get", "/api/members", config) is Route.NETWORK_FIRST


class TestBypass:
    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "HEAD"])
    def test_api_writes_bypass(self, config: OfflineCacheConfig, method: str) -> None:
        assert classify_request(method, "/api/members", config) is Route.BYPASS

    @pytest.mark.parametrize(
        "path",
        ["/api/auth/login", "/api/auth/refresh", "/api/payments/mpesa", "/api/groups/1/payments/"],
    )
    def test_auth_and_payment_reads_bypass(self, config: OfflineCacheConfig, path: str) -> None:
        assert classify_request("GET", path, config) is Route.BYPASS

    def test_segment_match_needs_slashes(self, config: OfflineCacheConfig) -> None:
        assert classify_request("GET", "/api/authors", config) is Route.NETWORK_FIRST
        assert classify_request("GET", "/api/payments", config) is Route.NETWORK_FIRST

    def test_query_string_is_not_part_of_path(self, config: OfflineCacheConfig) -> None:
        url = "https://portal.test/api/members?next=/auth/"
        assert classify_request("GET", url, config) is Route.NETWORK_FIRST


class TestStatic:
    @pytest.mark.parametrize("path", ["/", "/index.html", "/assets/app.js", "/apix/members"])
    def test_non_api_is_cache_first(self, config: OfflineCacheConfig, path: str) -> None:
        assert classify_request("GET", path, config) is Route.CACHE_FIRST

    def test_prefix_is_configurable(self) -> None:
        config = OfflineCacheConfig(api_prefix="/v2/")
        assert classify_request("GET", "/v2/members", config) is Route.NETWORK_FIRST
        assert classify_request("GET", "/api/members", config) is Route.CACHE_FIRST


def test_request_path_of_bare_origin() -> None:
    assert request_path("https://portal.test") == "/"
