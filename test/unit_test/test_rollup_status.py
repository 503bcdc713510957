"""
Rollup Provider Status Unit Tests

Uses httpx.MockTransport so no real rollup provider is contacted.
"""

import httpx
import pytest
from unittest.mock import AsyncMock

from rollup_web_sdk.infra.rollup_status import get_rollup_provider_status, status_url
from rollup_web_sdk.errors import ConfigurationError, ErrorCode, RollupProviderError

SERVER_URL = "https://rollup.example.com"

STATUS_DOCUMENT = {
    "chainId": 5,
    "networkOrHost": "goerli",
    "rollupContractAddress": "0x" + "ab" * 20,
    "dataSize": 1024,
}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestStatusUrl:
    """Tests for status endpoint URL building"""

    def test_joins_path(self):
        assert status_url(SERVER_URL, "/status") == "https://rollup.example.com/status"

    def test_trailing_slash(self):
        assert status_url(SERVER_URL + "/", "status") == "https://rollup.example.com/status"

    def test_default_path_from_config(self):
        assert status_url(SERVER_URL).endswith("/status")

    def test_empty_server_url(self):
        with pytest.raises(ConfigurationError) as exc_info:
            status_url("")
        assert exc_info.value.code == ErrorCode.CONFIG_MISSING


class TestGetRollupProviderStatus:
    """Tests for fetching the status document"""

    @pytest.mark.asyncio
    async def test_parses_status(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=STATUS_DOCUMENT)

        async with mock_client(handler) as client:
            status = await get_rollup_provider_status(SERVER_URL, client=client)

        assert status.chain_id == 5
        assert status.network == "goerli"
        assert status.network_or_host == "goerli"
        assert status.rollup_contract_address == "0x" + "ab" * 20
        assert str(requests[0].url) == "https://rollup.example.com/status"

    @pytest.mark.asyncio
    async def test_hex_chain_id(self):
        def handler(request):
            return httpx.Response(200, json={"chainId": "0x1"})

        async with mock_client(handler) as client:
            status = await get_rollup_provider_status(SERVER_URL, client=client)

        assert status.chain_id == 1
        assert status.network_or_host == ""

    @pytest.mark.asyncio
    async def test_shared_client_is_not_closed(self):
        def handler(request):
            return httpx.Response(200, json=STATUS_DOCUMENT)

        client = mock_client(handler)
        await get_rollup_provider_status(SERVER_URL, client=client)

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_missing_chain_id(self):
        def handler(request):
            return httpx.Response(200, json={"networkOrHost": "goerli"})

        async with mock_client(handler) as client:
            with pytest.raises(RollupProviderError) as exc_info:
                await get_rollup_provider_status(SERVER_URL, client=client, max_retries=3)

        assert exc_info.value.code == ErrorCode.ROLLUP_PROVIDER_INVALID_RESPONSE
        assert "chainId" in exc_info.value.message
        assert exc_info.value.server_url == SERVER_URL

    @pytest.mark.asyncio
    async def test_invalid_chain_id(self):
        def handler(request):
            return httpx.Response(200, json={"chainId": "not-a-chain"})

        async with mock_client(handler) as client:
            with pytest.raises(RollupProviderError) as exc_info:
                await get_rollup_provider_status(SERVER_URL, client=client)

        assert exc_info.value.code == ErrorCode.ROLLUP_PROVIDER_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        async with mock_client(handler) as client:
            with pytest.raises(RollupProviderError) as exc_info:
                await get_rollup_provider_status(SERVER_URL, client=client)

        assert exc_info.value.code == ErrorCode.ROLLUP_PROVIDER_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_json_array_body(self):
        def handler(request):
            return httpx.Response(200, json=[1, 2, 3])

        async with mock_client(handler) as client:
            with pytest.raises(RollupProviderError) as exc_info:
                await get_rollup_provider_status(SERVER_URL, client=client)

        assert exc_info.value.code == ErrorCode.ROLLUP_PROVIDER_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        sleep = AsyncMock()
        async with mock_client(handler) as client:
            with pytest.raises(RollupProviderError) as exc_info:
                await get_rollup_provider_status(SERVER_URL, client=client, max_retries=3, sleep_func=sleep)

        assert exc_info.value.code == ErrorCode.ROLLUP_PROVIDER_INVALID_RESPONSE
        assert len(calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        responses = [httpx.Response(503), httpx.Response(200, json=STATUS_DOCUMENT)]

        def handler(request):
            return responses.pop(0)

        sleep = AsyncMock()
        async with mock_client(handler) as client:
            status = await get_rollup_provider_status(
                SERVER_URL, client=client, max_retries=3, retry_delay=0.1, sleep_func=sleep
            )

        assert status.chain_id == 5
        sleep.assert_awaited_once_with(0.1)

    @pytest.mark.asyncio
    async def test_unreachable_after_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        sleep = AsyncMock()
        async with mock_client(handler) as client:
            with pytest.raises(RollupProviderError) as exc_info:
                await get_rollup_provider_status(SERVER_URL, client=client, max_retries=3, sleep_func=sleep)

        assert exc_info.value.code == ErrorCode.ROLLUP_PROVIDER_UNREACHABLE
        assert exc_info.value.recoverable is True
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with mock_client(handler) as client:
            with pytest.raises(RollupProviderError) as exc_info:
                await get_rollup_provider_status(
                    SERVER_URL, client=client, max_retries=1, sleep_func=AsyncMock()
                )

        assert exc_info.value.code == ErrorCode.ROLLUP_PROVIDER_TIMEOUT
