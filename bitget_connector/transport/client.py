"""
Bitget REST Client.

============================================================
PURPOSE
============================================================
Async transport for the Bitget v2 REST API.

- Authenticated calls: HMAC-SHA256 signing with passphrase
- Public calls: no credentials, no signature
- Envelope parsing: `code == "00000"` is the only success
- Typed failures: AuthError, RateLimited, ApiError, TransportFailure

The query string and body that are signed are byte-for-byte the
ones that are transmitted.

============================================================
API DOCUMENTATION
============================================================
https://www.bitget.com/api-doc/common/intro

============================================================
"""

import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

import aiohttp

from ..config import (
    BitgetCredentials,
    ClientConfig,
    CredentialSource,
    as_credential_provider,
)
from ..constants import DEMO_TRADING_HEADER, SUCCESS_CODE
from ..errors import (
    BitgetError,
    TransportFailure,
    ValidationError,
    create_network_error,
    create_parse_error,
    create_timeout_error,
    map_bitget_error,
)
from ..utils import build_query_string, current_timestamp, remove_empty_properties
from .logging_utils import RequestLogger
from .metrics import TransportMetrics
from .retry import with_retry
from .signer import sign


logger = logging.getLogger(__name__)


# ============================================================
# CLIENT
# ============================================================

class BitgetClient:
    """
    Bitget v2 REST client.

    Use as an async context manager, or call `close()` when done:

        async with BitgetClient(BitgetCredentials.from_env()) as client:
            data = await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS)
    """

    def __init__(
        self,
        credentials: Optional[CredentialSource] = None,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        metrics: Optional[TransportMetrics] = None,
        clock: Callable[[], str] = current_timestamp,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ):
        """
        Initialize client.

        Args:
            credentials: BitgetCredentials or a zero-arg callable returning them.
                Only needed for authenticated calls.
            config: Transport configuration
            session: Existing aiohttp session (not closed by the client)
            metrics: Metrics collector (one is created when omitted)
            clock: Source of epoch-millisecond timestamps for signing
            sleep: Coroutine used for retry backoff
        """
        self._credentials = as_credential_provider(credentials) if credentials is not None else None
        self._config = config or ClientConfig()
        self._session = session
        self._owns_session = session is None
        self._clock = clock
        self._sleep = sleep

        self._metrics = metrics or TransportMetrics()
        self._log = RequestLogger("bitget")

    # --------------------------------------------------------
    # PROPERTIES
    # --------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def metrics(self) -> TransportMetrics:
        return self._metrics

    # --------------------------------------------------------
    # SESSION
    # --------------------------------------------------------

    async def __aenter__(self) -> "BitgetClient":
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Release the HTTP session if the client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    # --------------------------------------------------------
    # PUBLIC API
    # --------------------------------------------------------

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make a signed request.

        Args:
            method: HTTP method
            endpoint: API path constant
            body: JSON body mapping
            query: Query parameters

        Returns:
            The envelope's `data` field
        """
        return await self._call(method, endpoint, body=body, query=query, signed=True)

    async def public_request(
        self,
        method: str,
        endpoint: str,
        query: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make an unsigned request to a public endpoint."""
        return await self._call(method, endpoint, query=query, signed=False)

    async def request_with_retry(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
        max_attempts: Optional[int] = None,
    ) -> Any:
        """
        Signed request with bounded exponential backoff.

        Every attempt is re-signed with a fresh timestamp.
        """
        retry = self._config.retry
        return await with_retry(
            lambda: self.request(method, endpoint, body=body, query=query),
            max_attempts=max_attempts or retry.max_attempts,
            initial_delay=retry.initial_delay_seconds,
            sleep=self._sleep,
            on_retry=lambda attempt, error: self._metrics.record_retry(),
        )

    # --------------------------------------------------------
    # REQUEST HANDLING
    # --------------------------------------------------------

    def _resolve_credentials(self) -> BitgetCredentials:
        if self._credentials is None:
            raise ValidationError("Credentials are required for authenticated requests")
        credentials = self._credentials()
        missing = credentials.validate()
        if missing:
            raise ValidationError(f"Invalid credentials: {', '.join(missing)}")
        return credentials

    def _build_headers(
        self,
        method: str,
        request_path: str,
        body_str: str,
        signed: bool,
    ) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "locale": "en-US",
        }
        if not signed:
            return headers

        credentials = self._resolve_credentials()
        timestamp = self._clock()
        headers.update({
            "ACCESS-KEY": credentials.api_key,
            "ACCESS-SIGN": sign(timestamp, method, request_path, body_str, credentials.secret_key),
            "ACCESS-TIMESTAMP": timestamp,
            "ACCESS-PASSPHRASE": credentials.passphrase,
        })
        if credentials.is_demo:
            headers[DEMO_TRADING_HEADER] = "1"
        return headers

    async def _call(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
        signed: bool = True,
    ) -> Any:
        method = method.upper()

        cleaned_query = remove_empty_properties(query)
        cleaned_body = remove_empty_properties(body)

        query_string = build_query_string(cleaned_query)
        request_path = f"{endpoint}?{query_string}" if query_string else endpoint
        body_str = json.dumps(cleaned_body, separators=(",", ":")) if cleaned_body else ""

        headers = self._build_headers(method, request_path, body_str, signed)
        url = f"{self._config.base_url}{request_path}"

        request_id = self._log.request(method, endpoint, headers=headers, query=cleaned_query, body=body_str)
        start_time = time.time()

        try:
            status, payload = await self._send(method, url, headers, body_str)
        except aiohttp.ClientError as e:
            error = create_network_error(str(e) or type(e).__name__, cause=e)
            self._record_failure(request_id, endpoint, start_time, None, error)
            raise error from e
        except asyncio.TimeoutError as e:
            error = create_timeout_error(int(self._config.timeout_seconds * 1000), cause=e)
            self._record_failure(request_id, endpoint, start_time, None, error)
            raise error from e
        except TransportFailure as error:
            self._record_failure(request_id, endpoint, start_time, error.http_status, error)
            raise

        return self._handle_response(request_id, endpoint, start_time, status, payload)

    async def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: str,
    ) -> Tuple[int, Any]:
        """
        Issue one HTTP request.

        Returns:
            (HTTP status, parsed JSON payload or raw text when not JSON)

        Raises:
            TransportFailure: body is not valid UTF-8
        """
        session = self._get_session()
        async with session.request(method, url, headers=headers, data=body or None) as resp:
            raw = await resp.read()
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise create_parse_error(resp.status, cause=e) from e
            try:
                payload = json.loads(text) if text else None
            except ValueError:
                payload = text
            return resp.status, payload

    def _handle_response(
        self,
        request_id: str,
        endpoint: str,
        start_time: float,
        status: int,
        payload: Any,
    ) -> Any:
        """Parse the envelope and raise on anything but success."""
        error: Optional[BitgetError] = None

        if not isinstance(payload, dict):
            if status >= 400:
                error = map_bitget_error(None, str(payload or ""), status)
            else:
                error = create_parse_error(status)
        else:
            code = payload.get("code")
            msg = payload.get("msg", "")
            if code is None and status >= 400:
                error = map_bitget_error(None, msg, status)
            elif str(code) != SUCCESS_CODE:
                error = map_bitget_error(code, msg, status)

        if error is not None:
            self._record_failure(request_id, endpoint, start_time, status, error)
            raise error

        latency_ms = (time.time() - start_time) * 1000
        self._metrics.record_success(endpoint, latency_ms)
        self._log.response(request_id, status, latency_ms, payload.get("data"))

        return payload.get("data")

    def _record_failure(
        self,
        request_id: str,
        endpoint: str,
        start_time: float,
        status: Optional[int],
        error: BitgetError,
    ) -> None:
        latency_ms = (time.time() - start_time) * 1000
        self._metrics.record_failure(endpoint, latency_ms, error)
        self._log.failure(request_id, status, latency_ms, error)
