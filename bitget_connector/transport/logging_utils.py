"""
Bitget Connector - Request Logging.

============================================================
PURPOSE
============================================================
One JSON log line per request and per outcome, correlated by
a request ID:

    REQUEST:  {"request_id": "bitget-1", "method": "GET", ...}
    RESPONSE: {"request_id": "bitget-1", "status": 200, ...}
    FAILURE:  {"request_id": "bitget-1", "code": "40006", ...}

Requests and responses log at debug, failures at warning.

============================================================
MASKING
============================================================
Bitget authenticates with the ACCESS-KEY, ACCESS-SIGN and
ACCESS-PASSPHRASE headers; those are masked before logging.
Query fields named like credentials are masked as well. The
JSON body is never logged, only a digest of the exact bytes
that were signed.

============================================================
"""

import hashlib
import itertools
import json
import logging
from typing import Any, Dict, Mapping, Optional

from ..errors import BitgetError


logger = logging.getLogger(__name__)


SENSITIVE_HEADERS = frozenset({"ACCESS-KEY", "ACCESS-SIGN", "ACCESS-PASSPHRASE"})

# Compared lower-cased
SENSITIVE_FIELDS = frozenset({"apikey", "secretkey", "passphrase", "sign", "signature"})

PREVIEW_CHARS = 200


# ============================================================
# MASKING
# ============================================================

def mask_value(value: str, show_chars: int = 4) -> str:
    """'bg_live_key' -> 'bg_l...***'; short values are hidden entirely."""
    if not value or len(value) <= show_chars:
        return "***"
    return f"{value[:show_chars]}...***"


def mask_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    return {
        name: mask_value(str(value)) if name.upper() in SENSITIVE_HEADERS else value
        for name, value in (headers or {}).items()
    }


def mask_fields(data: Any) -> Any:
    """Mask credential-like keys in nested mappings and lists."""
    if isinstance(data, Mapping):
        return {
            key: mask_value(str(value)) if key.lower() in SENSITIVE_FIELDS else mask_fields(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_fields(item) for item in data]
    return data


def body_digest(body: str) -> Optional[str]:
    if not body:
        return None
    return hashlib.sha256(body.encode()).hexdigest()[:16]


# ============================================================
# REQUEST LOGGER
# ============================================================

class RequestLogger:
    """Masked request/response log lines for one client."""

    def __init__(self, name: str = "bitget"):
        self._name = name
        self._logger = logging.getLogger(f"bitget_connector.transport.{name}")
        self._ids = itertools.count(1)

    def _emit(self, level: int, kind: str, fields: Dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        entry = {key: value for key, value in fields.items() if value is not None}
        self._logger.log(level, f"{kind}: {json.dumps(entry, default=str)}")

    def request(
        self,
        method: str,
        endpoint: str,
        headers: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, Any]] = None,
        body: str = "",
    ) -> str:
        """
        Log an outgoing request.

        Args:
            method: HTTP method
            endpoint: Path without query string
            headers: Headers as sent
            query: Pruned query parameters
            body: Serialised JSON body as signed

        Returns:
            Request ID for the matching response() or failure() call
        """
        request_id = f"{self._name}-{next(self._ids)}"
        self._emit(logging.DEBUG, "REQUEST", {
            "request_id": request_id,
            "method": method.upper(),
            "endpoint": endpoint,
            "query": mask_fields(dict(query)) if query else None,
            "headers": mask_headers(headers) if headers else None,
            "body_sha256": body_digest(body),
        })
        return request_id

    def response(self, request_id: str, status: int, latency_ms: float, data: Any = None) -> None:
        preview = json.dumps(data, default=str)[:PREVIEW_CHARS] if data is not None else None
        self._emit(logging.DEBUG, "RESPONSE", {
            "request_id": request_id,
            "status": status,
            "latency_ms": round(latency_ms, 2),
            "data": preview,
        })

    def failure(
        self,
        request_id: str,
        status: Optional[int],
        latency_ms: float,
        error: BitgetError,
    ) -> None:
        self._emit(logging.WARNING, "FAILURE", {
            "request_id": request_id,
            "status": status,
            "latency_ms": round(latency_ms, 2),
            "error": type(error).__name__,
            "category": error.category.value,
            "code": error.code,
            "message": error.message[:PREVIEW_CHARS],
        })
