"""
Bitget Client Tests.

============================================================
PURPOSE
============================================================
Tests for BitgetClient with the HTTP layer (`_send`) mocked.

TEST CATEGORIES:
- Signing: headers and signature over the transmitted bytes
- Envelope handling: success, exchange errors, bad bodies
- Response decoding: raw bytes through _send
- Transport failures: network errors and timeouts
- Retry: backoff through request_with_retry

============================================================
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from bitget_connector.config import BitgetCredentials, ClientConfig
from bitget_connector.constants import ENDPOINTS
from bitget_connector.errors import (
    ApiError,
    AuthError,
    ErrorCategory,
    RateLimited,
    TransportFailure,
    ValidationError,
)
from bitget_connector.transport import BitgetClient, sign


TIMESTAMP = "1700000000000"


def ok(data):
    return 200, {"code": "00000", "msg": "success", "requestTime": 1700000000000, "data": data}


@pytest.fixture
def credentials():
    return BitgetCredentials("test-api-key", "test-secret", "test-pass")


@pytest.fixture
def client(credentials):
    return BitgetClient(credentials, clock=lambda: TIMESTAMP, sleep=AsyncMock())


def fake_session(status, raw):
    """aiohttp-shaped session whose every response has `status` and body bytes `raw`."""
    response = MagicMock()
    response.status = status
    response.read = AsyncMock(return_value=raw)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    session.request = MagicMock(return_value=context)
    return session


# ============================================================
# SIGNING TESTS
# ============================================================

class TestSignedRequests:
    """Tests for authenticated request construction."""

    @pytest.mark.asyncio
    async def test_get_signs_path_with_query(self, client):
        """Signature covers the exact query string that is sent."""
        with patch.object(client, "_send", new=AsyncMock(return_value=ok([{"coin": "USDT"}]))) as send:
            data = await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS, query={"coin": "USDT", "x": ""})

        assert data == [{"coin": "USDT"}]

        method, url, headers, body = send.call_args.args
        path = f"{ENDPOINTS.SPOT_ACCOUNT_ASSETS}?coin=USDT"

        assert method == "GET"
        assert url == f"https://api.bitget.com{path}"
        assert body == ""
        assert headers["ACCESS-KEY"] == "test-api-key"
        assert headers["ACCESS-PASSPHRASE"] == "test-pass"
        assert headers["ACCESS-TIMESTAMP"] == TIMESTAMP
        assert headers["ACCESS-SIGN"] == sign(TIMESTAMP, "GET", path, "", "test-secret")
        assert headers["Content-Type"] == "application/json"
        assert headers["locale"] == "en-US"
        assert "paptrading" not in headers

    @pytest.mark.asyncio
    async def test_post_signs_pruned_compact_body(self, client):
        with patch.object(client, "_send", new=AsyncMock(return_value=ok({"orderId": "1"}))) as send:
            await client.request(
                "post",
                ENDPOINTS.SPOT_TRADE_PLACE_ORDER,
                body={"symbol": "BTCUSDT", "price": None, "size": "1", "reduceOnly": False},
            )

        method, url, headers, body = send.call_args.args

        assert method == "POST"
        assert json.loads(body) == {"symbol": "BTCUSDT", "size": "1", "reduceOnly": False}
        assert " " not in body
        assert headers["ACCESS-SIGN"] == sign(
            TIMESTAMP, "POST", ENDPOINTS.SPOT_TRADE_PLACE_ORDER, body, "test-secret"
        )

    @pytest.mark.asyncio
    async def test_demo_header(self):
        demo = BitgetCredentials("k", "s", "p", environment="demo")
        client = BitgetClient(demo, clock=lambda: TIMESTAMP)

        with patch.object(client, "_send", new=AsyncMock(return_value=ok([]))) as send:
            await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        headers = send.call_args.args[2]
        assert headers["paptrading"] == "1"

    @pytest.mark.asyncio
    async def test_credential_provider_called_per_request(self, credentials):
        provider_calls = []

        def provider():
            provider_calls.append(1)
            return credentials

        client = BitgetClient(provider, clock=lambda: TIMESTAMP)

        with patch.object(client, "_send", new=AsyncMock(return_value=ok([]))):
            await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)
            await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert len(provider_calls) == 2

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        client = BitgetClient()

        with patch.object(client, "_send", new=AsyncMock(return_value=ok([]))) as send:
            with pytest.raises(ValidationError, match="Credentials are required"):
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        send.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_credentials(self):
        client = BitgetClient(BitgetCredentials("", "s", "p"))

        with pytest.raises(ValidationError, match="api_key is required"):
            await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

    @pytest.mark.asyncio
    async def test_public_request_is_unsigned(self):
        client = BitgetClient()

        with patch.object(client, "_send", new=AsyncMock(return_value=ok([{"lastPr": "1"}]))) as send:
            data = await client.public_request("GET", ENDPOINTS.MARKET_TICKER, query={"symbol": "BTCUSDT"})

        headers = send.call_args.args[2]
        assert data == [{"lastPr": "1"}]
        assert "ACCESS-KEY" not in headers
        assert "ACCESS-SIGN" not in headers

    @pytest.mark.asyncio
    async def test_custom_base_url(self, credentials):
        client = BitgetClient(credentials, config=ClientConfig(base_url="https://example.test"))

        with patch.object(client, "_send", new=AsyncMock(return_value=ok([]))) as send:
            await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert send.call_args.args[1] == f"https://example.test{ENDPOINTS.SPOT_ACCOUNT_ASSETS}"


# ============================================================
# ENVELOPE TESTS
# ============================================================

class TestResponseHandling:
    """Tests for envelope parsing."""

    @pytest.mark.asyncio
    async def test_success_records_metrics(self, client):
        with patch.object(client, "_send", new=AsyncMock(return_value=ok({"a": 1}))):
            await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        summary = client.metrics.summary()
        assert summary["requests"] == {"total": 1, "failed": 0}
        assert client.metrics.endpoint(ENDPOINTS.SPOT_ACCOUNT_ASSETS).calls == 1

    @pytest.mark.asyncio
    async def test_error_envelope(self, client):
        response = (400, {"code": "40002", "msg": "sign signature error", "data": None})

        with patch.object(client, "_send", new=AsyncMock(return_value=response)):
            with pytest.raises(AuthError) as exc_info:
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert exc_info.value.code == "40002"
        assert exc_info.value.http_status == 400
        assert str(exc_info.value).startswith("Bitget API Error:")
        assert client.metrics.summary()["errors"]["by_code"] == {"40002": 1}

    @pytest.mark.asyncio
    async def test_non_success_code_with_http_200(self, client):
        response = (200, {"code": "43001", "msg": "balance not enough"})

        with patch.object(client, "_send", new=AsyncMock(return_value=response)):
            with pytest.raises(ApiError) as exc_info:
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert exc_info.value.category == ErrorCategory.INSUFFICIENT_FUNDS

    @pytest.mark.asyncio
    async def test_rate_limited(self, client):
        response = (429, {"code": "40006", "msg": "Too Many Requests"})

        with patch.object(client, "_send", new=AsyncMock(return_value=response)):
            with pytest.raises(RateLimited):
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert client.metrics.summary()["errors"]["by_category"] == {"RATE_LIMIT": 1}

    @pytest.mark.asyncio
    async def test_unparseable_success_body(self, client):
        with patch.object(client, "_send", new=AsyncMock(return_value=(200, "<html>"))):
            with pytest.raises(TransportFailure) as exc_info:
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert exc_info.value.code == "PARSE_ERROR"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, client):
        with patch.object(client, "_send", new=AsyncMock(return_value=(502, "Bad Gateway"))):
            with pytest.raises(ApiError) as exc_info:
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert exc_info.value.code == "502"
        assert exc_info.value.category == ErrorCategory.EXCHANGE_ERROR


# ============================================================
# RESPONSE DECODING TESTS
# ============================================================

class TestResponseDecoding:
    """Tests for decoding raw response bytes in _send."""

    @pytest.mark.asyncio
    async def test_utf8_json_body(self, credentials):
        body = json.dumps({"code": "00000", "msg": "success", "data": {"coin": "USDT"}}).encode()
        client = BitgetClient(credentials, session=fake_session(200, body), clock=lambda: TIMESTAMP)

        assert await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS) == {"coin": "USDT"}

    @pytest.mark.asyncio
    async def test_invalid_utf8_body_is_parse_failure(self, credentials):
        client = BitgetClient(credentials, session=fake_session(200, b"\xff\xfe{"), clock=lambda: TIMESTAMP)

        with pytest.raises(TransportFailure) as exc_info:
            await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert exc_info.value.code == "PARSE_ERROR"
        assert exc_info.value.http_status == 200
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        assert client.metrics.summary()["errors"]["by_code"] == {"PARSE_ERROR": 1}

    @pytest.mark.asyncio
    async def test_invalid_utf8_body_is_retried(self, credentials):
        sleep = AsyncMock()
        session = fake_session(502, b"\xff")
        client = BitgetClient(credentials, session=session, clock=lambda: TIMESTAMP, sleep=sleep)

        with pytest.raises(TransportFailure):
            await client.request_with_retry("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert session.request.call_count == 3
        assert sleep.await_count == 2


# ============================================================
# NETWORK FAILURE TESTS
# ============================================================

class TestTransportFailures:
    """Tests for network-level failures."""

    @pytest.mark.asyncio
    async def test_network_error(self, client):
        error = aiohttp.ClientConnectionError("connection reset")

        with patch.object(client, "_send", new=AsyncMock(side_effect=error)):
            with pytest.raises(TransportFailure) as exc_info:
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert exc_info.value.code == "NETWORK_ERROR"
        assert exc_info.value.__cause__ is error
        assert client.metrics.summary()["errors"]["by_category"] == {"NETWORK": 1}

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        with patch.object(client, "_send", new=AsyncMock(side_effect=asyncio.TimeoutError())):
            with pytest.raises(TransportFailure) as exc_info:
                await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)

        assert exc_info.value.category == ErrorCategory.TIMEOUT
        assert client.metrics.summary()["errors"]["by_category"] == {"TIMEOUT": 1}


# ============================================================
# RETRY TESTS
# ============================================================

class TestRequestWithRetry:
    """Tests for request_with_retry."""

    @pytest.mark.asyncio
    async def test_retries_with_backoff(self, credentials):
        sleep = AsyncMock()
        timestamps = iter(["1000", "2000", "3000"])
        client = BitgetClient(credentials, clock=lambda: next(timestamps), sleep=sleep)

        responses = [
            (500, {"code": "50001", "msg": "system busy"}),
            (500, {"code": "50001", "msg": "system busy"}),
            ok({"orderId": "1"}),
        ]

        with patch.object(client, "_send", new=AsyncMock(side_effect=responses)) as send:
            data = await client.request_with_retry("POST", ENDPOINTS.SPOT_TRADE_PLACE_ORDER, body={"a": "1"})

        assert data == {"orderId": "1"}
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]
        assert send.await_count == 3
        # every attempt re-signed with a fresh timestamp
        stamps = [c.args[2]["ACCESS-TIMESTAMP"] for c in send.await_args_list]
        assert stamps == ["1000", "2000", "3000"]
        assert client.metrics.summary()["retries"] == 2

    @pytest.mark.asyncio
    async def test_auth_failure_not_retried(self, client):
        response = (400, {"code": "40001", "msg": "apikey invalid"})

        with patch.object(client, "_send", new=AsyncMock(return_value=response)) as send:
            with pytest.raises(AuthError):
                await client.request_with_retry("POST", ENDPOINTS.SPOT_TRADE_PLACE_ORDER, body={"a": "1"})

        assert send.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, client):
        response = (500, {"code": "50001", "msg": "system busy"})

        with patch.object(client, "_send", new=AsyncMock(return_value=response)) as send:
            with pytest.raises(ApiError):
                await client.request_with_retry("POST", ENDPOINTS.SPOT_TRADE_PLACE_ORDER, max_attempts=2)

        assert send.await_count == 2


# ============================================================
# SESSION TESTS
# ============================================================

class TestSession:
    """Tests for session lifecycle."""

    @pytest.mark.asyncio
    async def test_context_manager_closes_owned_session(self, credentials):
        async with BitgetClient(credentials) as client:
            session = client._get_session()
            assert not session.closed

        assert session.closed

    @pytest.mark.asyncio
    async def test_external_session_left_open(self, credentials):
        async with aiohttp.ClientSession() as session:
            client = BitgetClient(credentials, session=session)
            await client.close()

            assert not session.closed


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
