"""
Bitget Connector - Transport Metrics.

============================================================
PURPOSE
============================================================
In-process counters for one BitgetClient:

- calls, failures and latency per endpoint
- failures by exchange code and by error category
- retry attempts

`summary()` is what the CLI prints with --metrics.

============================================================
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import BitgetError


logger = logging.getLogger(__name__)


@dataclass
class EndpointStats:
    """Call count and latency for one endpoint."""

    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def record(self, latency_ms: float, ok: bool) -> None:
        self.calls += 1
        if not ok:
            self.failures += 1
        self.total_ms += latency_ms
        self.max_ms = max(self.max_ms, latency_ms)

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calls": self.calls,
            "failures": self.failures,
            "avg_ms": round(self.avg_ms, 2),
            "max_ms": round(self.max_ms, 2),
        }


class TransportMetrics:
    """Metrics collector for one client."""

    def __init__(self):
        self._endpoints: Dict[str, EndpointStats] = defaultdict(EndpointStats)
        self._error_codes: Counter = Counter()
        self._categories: Counter = Counter()
        self._retries = 0

    # --------------------------------------------------------
    # RECORDING
    # --------------------------------------------------------

    def record_success(self, endpoint: str, latency_ms: float) -> None:
        self._endpoints[endpoint].record(latency_ms, ok=True)

    def record_failure(self, endpoint: str, latency_ms: float, error: BitgetError) -> None:
        self._endpoints[endpoint].record(latency_ms, ok=False)
        self._categories[error.category.value] += 1
        if error.code:
            self._error_codes[error.code] += 1

    def record_retry(self) -> None:
        self._retries += 1

    # --------------------------------------------------------
    # REPORTING
    # --------------------------------------------------------

    @property
    def total_calls(self) -> int:
        return sum(stats.calls for stats in self._endpoints.values())

    @property
    def total_failures(self) -> int:
        return sum(stats.failures for stats in self._endpoints.values())

    def endpoint(self, endpoint: str) -> Optional[EndpointStats]:
        return self._endpoints.get(endpoint)

    def summary(self) -> Dict[str, Any]:
        """
        Snapshot of every counter.

        Returns:
            {"requests": {...}, "retries": n, "errors": {...},
             "endpoints": {path: {...}}}
        """
        return {
            "requests": {
                "total": self.total_calls,
                "failed": self.total_failures,
            },
            "retries": self._retries,
            "errors": {
                "by_code": dict(self._error_codes.most_common()),
                "by_category": dict(self._categories),
            },
            "endpoints": {
                path: stats.to_dict() for path, stats in sorted(self._endpoints.items())
            },
        }
