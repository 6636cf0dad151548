"""
Bitget Connector - Error Handling and Mapping.

============================================================
PURPOSE
============================================================
Typed failures raised by the transport, the retry policy and
the operation dispatcher:
- Unified error taxonomy
- Bitget error code mapping
- Retry eligibility classification

============================================================
ERROR TYPES
============================================================
1. AuthError         - Bad key/signature/timestamp/permission/IP
2. RateLimited       - HTTP 429 or code 40006
3. ApiError          - Any other non-success envelope
4. TransportFailure  - Network, timeout and parse errors
5. ValidationError   - Bad caller input, raised before any call

============================================================
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .constants import (
    AUTH_ERROR_CODES,
    ERROR_CODE_MAP,
    ERROR_MESSAGES,
    RATE_LIMIT_ERROR_CODE,
)


logger = logging.getLogger(__name__)


# ============================================================
# ERROR TAXONOMY
# ============================================================

class ErrorCategory(Enum):
    """Standardized error categories."""

    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT = "RATE_LIMIT"
    AUTHENTICATION = "AUTHENTICATION"
    INVALID_REQUEST = "INVALID_REQUEST"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    POSITION_NOT_FOUND = "POSITION_NOT_FOUND"
    INVALID_ORDER = "INVALID_ORDER"
    EXCHANGE_ERROR = "EXCHANGE_ERROR"
    UNKNOWN = "UNKNOWN"


class RetryEligibility(Enum):
    """Whether error is eligible for retry."""

    RETRY = "RETRY"           # Safe to retry
    NO_RETRY = "NO_RETRY"     # Should not retry
    BACKOFF = "BACKOFF"       # Retry with exponential backoff


# ============================================================
# EXCEPTIONS
# ============================================================

class BitgetError(Exception):
    """
    Base class for every failure surfaced by the connector.

    Carries the exchange code (when the failure came from the
    exchange), a human message and retry classification.
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN
    retry_eligible: RetryEligibility = RetryEligibility.NO_RETRY

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        category: Optional[ErrorCategory] = None,
        exchange_message: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.http_status = http_status
        self.exchange_message = exchange_message
        if category is not None:
            self.category = category
        super().__init__(self._format())

    def _format(self) -> str:
        return self.message

    @property
    def retryable(self) -> bool:
        return self.retry_eligible in (RetryEligibility.RETRY, RetryEligibility.BACKOFF)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": type(self).__name__,
            "category": self.category.value,
            "code": self.code,
            "message": self.message,
            "retry_eligible": self.retry_eligible.value,
            "http_status": self.http_status,
            "exchange_message": self.exchange_message,
        }


class _ExchangeReportedError(BitgetError):
    """Failures that came back in an API envelope."""

    def _format(self) -> str:
        return f"Bitget API Error: {self.message} (Code: {self.code})"


class AuthError(_ExchangeReportedError):
    """Invalid credentials or permissions. Never retried."""

    category = ErrorCategory.AUTHENTICATION
    retry_eligible = RetryEligibility.NO_RETRY


class RateLimited(_ExchangeReportedError):
    """Too many requests."""

    category = ErrorCategory.RATE_LIMIT
    retry_eligible = RetryEligibility.BACKOFF


class ApiError(_ExchangeReportedError):
    """Generic non-success envelope."""

    category = ErrorCategory.UNKNOWN
    retry_eligible = RetryEligibility.RETRY


class TransportFailure(BitgetError):
    """Network, timeout or unparseable response."""

    category = ErrorCategory.NETWORK
    retry_eligible = RetryEligibility.RETRY

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        category: Optional[ErrorCategory] = None,
    ):
        self.cause = cause
        super().__init__(message, code=code, http_status=http_status, category=category)

    def _format(self) -> str:
        return f"Bitget request failed: {self.message}"


class ValidationError(BitgetError):
    """Caller input rejected before any network call."""

    category = ErrorCategory.INVALID_REQUEST
    retry_eligible = RetryEligibility.NO_RETRY


# ============================================================
# BITGET ERROR MAPPING
# ============================================================

# Codes with a more specific category than the exception type implies
BITGET_ERROR_CATEGORIES: Dict[str, ErrorCategory] = {
    "43001": ErrorCategory.INSUFFICIENT_FUNDS,
    "43002": ErrorCategory.ORDER_NOT_FOUND,
    "43003": ErrorCategory.ORDER_NOT_FOUND,
    "45001": ErrorCategory.POSITION_NOT_FOUND,
    "45002": ErrorCategory.INVALID_ORDER,
}


def _classify(code: Optional[str], message: str, http_status: Optional[int]) -> Tuple[type, ErrorCategory]:
    if code in AUTH_ERROR_CODES:
        return AuthError, ErrorCategory.AUTHENTICATION

    if (
        http_status == 429
        or code == RATE_LIMIT_ERROR_CODE
        or (message and RATE_LIMIT_ERROR_CODE in message)
    ):
        return RateLimited, ErrorCategory.RATE_LIMIT

    if not code and http_status in (401, 403):
        return AuthError, ErrorCategory.AUTHENTICATION

    if code in BITGET_ERROR_CATEGORIES:
        return ApiError, BITGET_ERROR_CATEGORIES[code]

    if http_status and http_status >= 500:
        return ApiError, ErrorCategory.EXCHANGE_ERROR

    return ApiError, ErrorCategory.UNKNOWN


def map_bitget_error(
    code: Any,
    message: Optional[str],
    http_status: Optional[int] = None,
) -> BitgetError:
    """
    Map a Bitget error response to a typed failure.

    The human message comes from the static code table, falling
    back to the exchange message, then to a generic text.

    Args:
        code: Bitget error code from the envelope (may be None)
        message: Bitget `msg` field
        http_status: HTTP status code

    Returns:
        AuthError, RateLimited or ApiError
    """
    code_str = str(code) if code not in (None, "") else None
    message = message or ""

    error_cls, category = _classify(code_str, message, http_status)
    human = ERROR_CODE_MAP.get(code_str or "") or message or ERROR_MESSAGES.UNKNOWN_ERROR

    return error_cls(
        human,
        code=code_str or (str(http_status) if http_status else "UNKNOWN"),
        http_status=http_status,
        category=category,
        exchange_message=message or None,
    )


# ============================================================
# NETWORK ERROR HELPERS
# ============================================================

def create_network_error(message: str, cause: BaseException = None) -> TransportFailure:
    """Create network error."""
    return TransportFailure(message, cause=cause, code="NETWORK_ERROR")


def create_timeout_error(timeout_ms: int, cause: BaseException = None) -> TransportFailure:
    """Create timeout error."""
    return TransportFailure(
        f"Request timed out after {timeout_ms}ms",
        cause=cause,
        code="TIMEOUT",
        category=ErrorCategory.TIMEOUT,
    )


def create_parse_error(http_status: int, cause: BaseException = None) -> TransportFailure:
    """Create error for a response body that is not a JSON envelope."""
    return TransportFailure(
        f"Unparseable response body (HTTP {http_status})",
        cause=cause,
        code="PARSE_ERROR",
        http_status=http_status,
    )
