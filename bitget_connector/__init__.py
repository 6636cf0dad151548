"""
Bitget Connector.

============================================================
PURPOSE
============================================================
Async client for the Bitget v2 REST API.

- transport:  signing, HTTP, retry, pagination, metrics
- polling:    change detection between successive snapshots
- operations: Resource x operation registry and dispatcher

============================================================
"""

__version__ = "1.0.0"

from .config import (
    BitgetCredentials,
    ClientConfig,
    Environment,
    PaginationConfig,
    RetryConfig,
)
from .errors import (
    ApiError,
    AuthError,
    BitgetError,
    ErrorCategory,
    RateLimited,
    RetryEligibility,
    TransportFailure,
    ValidationError,
    map_bitget_error,
)
from .transport import BitgetClient, fetch_all, sign, with_retry
from .polling import (
    ChangeEvent,
    EventType,
    InMemoryStateStore,
    PollTrigger,
    SqlAlchemyStateStore,
    SubscriptionState,
)
from .operations import (
    ItemResult,
    Resource,
    execute,
    execute_batch,
    flatten_results,
)


__all__ = [
    "__version__",
    # Configuration
    "BitgetCredentials",
    "ClientConfig",
    "Environment",
    "PaginationConfig",
    "RetryConfig",
    # Errors
    "ApiError",
    "AuthError",
    "BitgetError",
    "ErrorCategory",
    "RateLimited",
    "RetryEligibility",
    "TransportFailure",
    "ValidationError",
    "map_bitget_error",
    # Transport
    "BitgetClient",
    "fetch_all",
    "sign",
    "with_retry",
    # Polling
    "ChangeEvent",
    "EventType",
    "InMemoryStateStore",
    "PollTrigger",
    "SqlAlchemyStateStore",
    "SubscriptionState",
    # Operations
    "ItemResult",
    "Resource",
    "execute",
    "execute_batch",
    "flatten_results",
]
