"""Tests for the life data API client."""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from lifegrid.editor.annotations import Annotation
from lifegrid.editor.client import (
    LifeDataAuthError,
    LifeDataClient,
    LifeDataError,
    LifeDataNotFoundError,
    normalize_username,
)
from lifegrid.editor.config import ApiConfig

pytestmark = pytest.mark.anyio


def _client(api_config, handler) -> LifeDataClient:
    return LifeDataClient(api_config, transport=httpx.MockTransport(handler))


class TestInit:
    def test_requires_base_url(self):
        config = ApiConfig(base_url="", session_id=None, verify_ssl=True, timeout=5.0)
        with pytest.raises(ValueError, match="base URL"):
            LifeDataClient(config)

    async def test_close_is_idempotent(self, api_config):
        client = LifeDataClient(api_config)
        await client.close()
        await client.close()


def test_normalize_username():
    assert normalize_username("  Alice ") == "alice"


class TestGetProfile:
    async def test_parses_profile(self, api_config):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "username": "alice",
                    "dateOfBirth": "1990-03-15T00:00:00.000Z",
                    "cellData": {"0-18": {"color": "#3b82f6", "label": "College"}, "bad": {}},
                },
            )

        client = _client(api_config, handler)
        profile = await client.get_profile(" Alice ")
        await client.close()

        assert seen[0].method == "GET"
        assert seen[0].url.path == "/api/profile/alice"
        assert "session=session-abc" in seen[0].headers["cookie"]
        assert profile is not None
        assert profile.username == "alice"
        assert profile.date_of_birth == date(1990, 3, 15)
        assert profile.cell_data == {"0-18": Annotation(color="#3B82F6", label="College")}

    async def test_missing_fields(self, api_config):
        client = _client(api_config, lambda request: httpx.Response(200, json={}))
        profile = await client.get_profile("bob")
        await client.close()
        assert profile is not None
        assert profile.username == "bob"
        assert profile.date_of_birth is None
        assert profile.cell_data == {}

    async def test_not_found_returns_none(self, api_config):
        client = _client(api_config, lambda request: httpx.Response(404, json={"error": "User not found"}))
        assert await client.get_profile("ghost") is None
        await client.close()

    async def test_blank_username_skips_request(self, api_config):
        client = LifeDataClient(api_config)
        with patch.object(LifeDataClient, "_request", new_callable=AsyncMock) as mock_request:
            assert await client.get_profile("   ") is None
        mock_request.assert_not_called()
        await client.close()

    async def test_unexpected_payload(self, api_config):
        client = LifeDataClient(api_config)
        with patch.object(LifeDataClient, "_request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = "<html></html>"
            with pytest.raises(LifeDataError, match="Unexpected profile payload"):
                await client.get_profile("alice")
        await client.close()

    async def test_username_is_quoted(self, api_config):
        client = LifeDataClient(api_config)
        with patch.object(LifeDataClient, "_request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = {"username": "a/b"}
            await client.get_profile("a/b")
        mock_request.assert_awaited_once_with("GET", "/api/profile/a%2Fb")
        await client.close()


class TestSaveCellData:
    async def test_puts_full_map(self, api_config):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        client = _client(api_config, handler)
        payload = {"0-18": {"color": "#3B82F6", "label": "College"}}
        assert await client.save_cell_data(payload) is True
        await client.close()

        assert seen[0].method == "PUT"
        assert seen[0].url.path == "/api/life-data"
        assert json.loads(seen[0].content) == {"cellData": payload}

    async def test_server_error_returns_false(self, api_config, mock_logger):
        client = LifeDataClient(
            api_config,
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
            logger=mock_logger,
        )
        assert await client.save_cell_data({}) is False
        mock_logger.warning.assert_called_once()
        await client.close()

    async def test_unauthorized_returns_false(self, api_config):
        client = _client(api_config, lambda request: httpx.Response(401))
        assert await client.save_cell_data({}) is False
        await client.close()


class TestRequest:
    @pytest.mark.parametrize(
        ("status", "error"),
        [(401, LifeDataAuthError), (403, LifeDataAuthError), (404, LifeDataNotFoundError), (502, LifeDataError)],
    )
    async def test_status_mapping(self, api_config, status, error):
        client = _client(api_config, lambda request: httpx.Response(status))
        with pytest.raises(error):
            await client._request("GET", "/api/anything")
        await client.close()

    async def test_transport_error(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _client(api_config, handler)
        with pytest.raises(LifeDataError, match="Failed to contact"):
            await client._request("GET", "/api/anything")
        await client.close()

    async def test_plain_text_body(self, api_config):
        client = _client(api_config, lambda request: httpx.Response(200, text="ok"))
        assert await client._request("GET", "/health") == "ok"
        await client.close()
