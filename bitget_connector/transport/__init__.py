"""
Bitget Connector - Transport.

Signing, HTTP transport, retry and pagination for the Bitget v2 REST API.
"""

from .signer import sign, build_prehash
from .client import BitgetClient
from .retry import with_retry, backoff_delay
from .pagination import fetch_all, extract_items
from .metrics import TransportMetrics, EndpointStats
from .logging_utils import (
    RequestLogger,
    body_digest,
    mask_fields,
    mask_headers,
    mask_value,
)


__all__ = [
    # Signing
    "sign",
    "build_prehash",
    # Client
    "BitgetClient",
    # Retry
    "with_retry",
    "backoff_delay",
    # Pagination
    "fetch_all",
    "extract_items",
    # Observability
    "TransportMetrics",
    "EndpointStats",
    "RequestLogger",
    "body_digest",
    "mask_fields",
    "mask_headers",
    "mask_value",
]
