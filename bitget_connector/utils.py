"""
Bitget Connector - Utilities.

============================================================
PURPOSE
============================================================
Small pure helpers shared by the transport, the operation
dispatcher and the poll handlers.

- Request parameter pruning and query string building
- Timestamp conversion
- Symbol / client order ID helpers
- Cursor ID comparison

============================================================
"""

import random
import re
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

from .constants import DEFAULTS


_SYMBOL_PATTERN = re.compile(r"^[A-Z0-9]+$")
_NON_SYMBOL_CHARS = re.compile(r"[^A-Z0-9]")
_BASE36_DIGITS = string.digits + string.ascii_lowercase


# ============================================================
# REQUEST PARAMETERS
# ============================================================

def remove_empty_properties(obj: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Drop entries whose value is None or an empty string.

    Zero and False are kept.
    """
    if not obj:
        return {}
    return {
        key: value
        for key, value in obj.items()
        if value is not None and value != ""
    }


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_string(params: Optional[Mapping[str, Any]]) -> str:
    """
    Build a form-encoded query string.

    Keys keep insertion order. List values repeat the key. The same
    string is used for signing and for the request URL.
    """
    pairs = []
    for key, value in remove_empty_properties(params).items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_value(v)) for v in value)
        else:
            pairs.append((key, _query_value(value)))
    return urlencode(pairs)


def build_pagination_params(
    limit: Optional[int] = None,
    id_less_than: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> Dict[str, str]:
    """Build cursor pagination query parameters."""
    params: Dict[str, str] = {}
    if limit:
        params["limit"] = str(limit)
    if id_less_than:
        params["idLessThan"] = id_less_than
    if start_time:
        params["startTime"] = start_time
    if end_time:
        params["endTime"] = end_time
    return params


# ============================================================
# TIMESTAMPS
# ============================================================

def _parse_iso(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_millis(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def to_timestamp(date: Union[str, int, float, None]) -> Optional[str]:
    """
    Convert a user supplied date into an epoch millisecond string.

    Numeric strings pass through unchanged, ISO dates are converted,
    anything unparseable is returned as given. Empty input gives None.
    """
    if not date:
        return None

    if isinstance(date, str):
        if date.isdigit():
            return date
        parsed = _parse_iso(date)
        if parsed is not None:
            return str(_to_millis(parsed))
        return date

    return str(int(date))


def format_timestamp(date: Union[datetime, str, int, float]) -> str:
    """Format a datetime, ISO string or number as epoch milliseconds."""
    if isinstance(date, datetime):
        return str(_to_millis(date))

    if isinstance(date, str):
        if date.isdigit():
            return date
        parsed = _parse_iso(date)
        if parsed is None:
            raise ValueError(f"Invalid date: {date}")
        return str(_to_millis(parsed))

    return str(int(date))


def parse_timestamp(timestamp: Union[str, int]) -> datetime:
    """Parse an epoch millisecond timestamp into an aware UTC datetime."""
    ts = int(timestamp)
    return datetime.fromtimestamp(ts / 1000, tz=timezone.utc)


def current_timestamp() -> str:
    """Epoch milliseconds as a string, as used for request signing."""
    return str(int(time.time() * 1000))


# ============================================================
# SYMBOLS AND IDS
# ============================================================

def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_client_order_id(prefix: str = "bg") -> str:
    """Generate a unique client order ID."""
    stamp = _base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36_DIGITS, k=8))
    return f"{prefix}_{stamp}_{suffix}"


def validate_symbol(symbol: str) -> bool:
    """Bitget symbols are uppercase without separators (e.g. BTCUSDT)."""
    return bool(_SYMBOL_PATTERN.match(symbol))


def format_symbol(symbol: str) -> str:
    """Uppercase a symbol and strip separators: 'btc/usdt' -> 'BTCUSDT'."""
    return _NON_SYMBOL_CHARS.sub("", symbol.upper())


def compare_ids(left: Any, right: Any) -> int:
    """
    Compare two exchange IDs.

    All-digit IDs compare numerically so that '999' < '1000';
    anything else falls back to string comparison.

    Returns:
        -1, 0 or 1
    """
    left_str = str(left)
    right_str = str(right)

    if left_str.isdigit() and right_str.isdigit():
        left_key, right_key = int(left_str), int(right_str)
        return (left_key > right_key) - (left_key < right_key)

    return (left_str > right_str) - (left_str < right_str)


def is_newer_id(candidate: Any, cursor: Optional[str]) -> bool:
    """
    True when candidate is strictly greater than cursor, or there is
    no cursor yet. A missing candidate ID is never newer.
    """
    if candidate in (None, ""):
        return False
    if not cursor:
        return True
    return compare_ids(candidate, cursor) > 0


# ============================================================
# NUMBERS
# ============================================================

def format_number(value: Union[str, int, float], decimals: int = 8) -> str:
    """Format a number with up to `decimals` places, trailing zeros removed."""
    number = float(value)
    text = f"{number:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def calculate_percentage_change(old_value: float, new_value: float) -> float:
    if old_value == 0:
        return 0.0
    return ((new_value - old_value) / old_value) * 100


def validate_leverage(leverage: Any, max_leverage: int = DEFAULTS.MAX_LEVERAGE) -> bool:
    if isinstance(leverage, bool):
        return False
    if isinstance(leverage, float):
        if not leverage.is_integer():
            return False
        leverage = int(leverage)
    if not isinstance(leverage, int):
        return False
    return DEFAULTS.MIN_LEVERAGE <= leverage <= max_leverage
