"""
Tests for the ENBUILD HTTP client and process settings.

HTTP traffic is served by httpx.MockTransport handlers; nothing leaves the
process.
"""

import pytest
import base64
import os
import sys

import httpx

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.enbuild.client import CATALOGS_PATH, EnbuildClient
from src.enbuild.config import Credentials, Settings
from src.enbuild.errors import ConfigurationError, EnbuildAPIError, EnbuildConnectionError


BASE_URL = "https://enbuild.test/enbuild-bk"
CATALOGS = [
    {"id": "c1", "name": "terraform-aws-eks", "type": "terraform", "vcs": "GITHUB"},
    {"id": "c2", "name": "ansible-hardening", "type": "ansible", "vcs": "GITHUB"},
]


class Recorder:
    """MockTransport handler that records requests and replays a canned response."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def _client(handler, **credentials) -> EnbuildClient:
    creds = Credentials(base_url=BASE_URL, **(credentials or {"token": "secret-token"}))
    return EnbuildClient(creds, transport=httpx.MockTransport(handler))


class TestEnbuildClient:
    """Tests for request building and response unwrapping."""

    @pytest.mark.asyncio
    async def test_list_sends_filters_and_bearer_token(self):
        recorder = Recorder(httpx.Response(200, json=CATALOGS))
        client = _client(recorder)

        result = await client.list_catalogs(name="eks", type="terraform", vcs="GITHUB")

        assert result == CATALOGS
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == f"/enbuild-bk{CATALOGS_PATH}"
        assert dict(request.url.params) == {"name": "eks", "type": "terraform", "vcs": "GITHUB"}
        assert request.headers["Authorization"] == "Bearer secret-token"

    @pytest.mark.asyncio
    async def test_empty_filters_are_not_sent(self):
        recorder = Recorder(httpx.Response(200, json=CATALOGS))

        await _client(recorder).filter_catalogs_by_vcs("GITLAB")

        assert dict(recorder.requests[0].url.params) == {"vcs": "GITLAB"}

    @pytest.mark.asyncio
    async def test_filter_by_type(self):
        recorder = Recorder(httpx.Response(200, json=CATALOGS))

        await _client(recorder).filter_catalogs_by_type("ansible")

        assert dict(recorder.requests[0].url.params) == {"type": "ansible"}

    @pytest.mark.asyncio
    async def test_list_unwraps_data_envelope(self):
        recorder = Recorder(httpx.Response(200, json={"data": CATALOGS, "total": 2}))

        result = await _client(recorder).list_catalogs(vcs="GITHUB")

        assert result == CATALOGS

    @pytest.mark.asyncio
    async def test_list_rejects_unexpected_payload(self):
        recorder = Recorder(httpx.Response(200, json={"data": "oops"}))

        with pytest.raises(EnbuildAPIError):
            await _client(recorder).list_catalogs(vcs="GITHUB")

    @pytest.mark.asyncio
    async def test_get_catalog(self):
        recorder = Recorder(httpx.Response(200, json={"data": CATALOGS[0]}))

        result = await _client(recorder).get_catalog("c1")

        assert result == CATALOGS[0]
        assert recorder.requests[0].url.path == f"/enbuild-bk{CATALOGS_PATH}/c1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("catalog_id,raw_path", [
        ("a/b", b"/enbuild-bk/api/v1/catalogs/a%2Fb"),
        ("../users", b"/enbuild-bk/api/v1/catalogs/..%2Fusers"),
        ("..", b"/enbuild-bk/api/v1/catalogs/%2E%2E"),
        ("x?vcs=GITHUB", b"/enbuild-bk/api/v1/catalogs/x%3Fvcs%3DGITHUB"),
        ("#frag", b"/enbuild-bk/api/v1/catalogs/%23frag"),
    ])
    async def test_get_catalog_id_stays_one_path_segment(self, catalog_id, raw_path):
        """IDs with URL syntax in them address only the catalog item endpoint."""
        recorder = Recorder(httpx.Response(200, json={"data": CATALOGS[0]}))

        await _client(recorder).get_catalog(catalog_id)

        request = recorder.requests[0]
        assert request.url.raw_path == raw_path
        assert request.url.query == b""
        assert request.url.fragment == ""

    @pytest.mark.asyncio
    async def test_get_catalog_rejects_list_payload(self):
        """The item endpoint must answer with an object, not an array."""
        recorder = Recorder(httpx.Response(200, json=CATALOGS))

        with pytest.raises(EnbuildAPIError) as exc_info:
            await _client(recorder).get_catalog("c1")

        assert str(exc_info.value) == (
            "ENBUILD API returned status 200: unexpected catalog payload of type list"
        )

    @pytest.mark.asyncio
    async def test_get_catalog_empty_body(self):
        recorder = Recorder(httpx.Response(200, content=b""))

        assert await _client(recorder).get_catalog("missing") is None

    @pytest.mark.asyncio
    async def test_basic_auth_profile(self):
        recorder = Recorder(httpx.Response(200, json=[]))

        await _client(recorder, username="admin", password="pw").list_catalogs(vcs="GITHUB")

        request = recorder.requests[0]
        expected = base64.b64encode(b"admin:pw").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_http_error_carries_status_and_detail(self):
        recorder = Recorder(httpx.Response(404, json={"message": "Catalog not found"}))

        with pytest.raises(EnbuildAPIError) as exc_info:
            await _client(recorder).get_catalog("nope")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "ENBUILD API returned status 404: Catalog not found"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EnbuildConnectionError) as exc_info:
            await _client(handler).list_catalogs(vcs="GITHUB")

        assert "connection refused" in str(exc_info.value)

    def test_requires_credentials(self):
        with pytest.raises(ValueError, match="API token is required"):
            EnbuildClient(Credentials(base_url=BASE_URL))

    def test_requires_base_url(self):
        with pytest.raises(ValueError, match="base URL is required"):
            EnbuildClient(Credentials(base_url="", token="t"))


class TestSettings:
    """Tests for flag/environment resolution and startup validation."""

    def test_environment_fallback(self):
        env = {
            "ENBUILD_API_TOKEN": "env-token",
            "ENBUILD_BASE_URL": "https://enbuild.test/",
            "ENBUILD_MCP_PORT": "9090",
            "ENBUILD_DEBUG": "true",
        }

        settings = Settings.from_env(env)

        assert settings.token == "env-token"
        assert settings.base_url == "https://enbuild.test"
        assert settings.port == 9090
        assert settings.debug is True
        assert settings.transport == "stdio"

    def test_flags_override_environment(self):
        env = {"ENBUILD_API_TOKEN": "env-token", "ENBUILD_BASE_URL": "https://env.test"}

        settings = Settings.from_env(env, token="flag-token", base_url=None, transport="sse")

        assert settings.token == "flag-token"
        assert settings.base_url == "https://env.test"
        assert settings.transport == "sse"

    def test_secrets_hidden_from_repr(self):
        settings = Settings(base_url="https://x", token="super-secret", password="hunter2")
        assert "super-secret" not in repr(settings)
        assert "hunter2" not in repr(settings)

    def test_validate_accepts_basic_auth(self):
        settings = Settings(base_url="https://x", username="u", password="p")
        assert settings.validate() is settings

    @pytest.mark.parametrize("settings,fragment", [
        (Settings(base_url="https://x"), "token is required"),
        (Settings(token="t"), "base URL is required"),
        (Settings(token="t", base_url="https://x", transport="websocket"), "invalid transport"),
        (Settings(token="t", base_url="https://x", port=0), "invalid port"),
        (Settings(token="t", base_url="https://x", log_level="loud"), "invalid log level"),
    ])
    def test_validate_rejects(self, settings, fragment):
        with pytest.raises(ConfigurationError, match=fragment):
            settings.validate()

    def test_malformed_port(self):
        with pytest.raises(ConfigurationError, match="ENBUILD_MCP_PORT"):
            Settings.from_env({"ENBUILD_MCP_PORT": "eighty"})
