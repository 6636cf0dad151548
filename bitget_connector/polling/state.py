"""
Poll Subscription State.

============================================================
PURPOSE
============================================================
Typed per-subscription state carried between poll ticks.

- last_price:     last observed ticker price (price alerts)
- last_order_id:  highest filled order ID already emitted
- last_trade_id:  highest trade cursor already emitted
- positions:      Position Key -> last observed position record
- balances:       Balance Key  -> last observed balance record

Stored values are always the most recently observed truth,
never a delta. Each tick produces a new state object; the
previous one is not mutated.

============================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


# ============================================================
# KEYS
# ============================================================

def position_key(product_type: str, symbol: str, hold_side: str) -> str:
    """Position Key: one side of one contract in one product family."""
    return f"{product_type}-{symbol}-{hold_side}"


def spot_balance_key(coin: str) -> str:
    return f"spot-{coin}"


def futures_balance_key(product_type: str, margin_coin: str) -> str:
    return f"futures-{product_type}-{margin_coin}"


# ============================================================
# STATE
# ============================================================

@dataclass
class SubscriptionState:
    """
    State of one poll subscription.
    """

    last_price: Optional[float] = None
    """Last observed price (price alerts)."""

    last_order_id: Optional[str] = None
    """Highest filled order ID emitted so far."""

    last_trade_id: Optional[str] = None
    """Highest trade ID (or timestamp) emitted so far."""

    positions: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    """Position Key -> position record."""

    balances: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    """Balance Key -> balance record."""

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible representation for a StateStore."""
        return {
            "last_price": self.last_price,
            "last_order_id": self.last_order_id,
            "last_trade_id": self.last_trade_id,
            "positions": {key: dict(value) for key, value in self.positions.items()},
            "balances": {key: dict(value) for key, value in self.balances.items()},
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SubscriptionState":
        """Rebuild state; None or {} gives the empty initial state."""
        if not data:
            return cls()

        last_price = data.get("last_price")
        return cls(
            last_price=float(last_price) if last_price is not None else None,
            last_order_id=data.get("last_order_id") or None,
            last_trade_id=data.get("last_trade_id") or None,
            positions=dict(data.get("positions") or {}),
            balances=dict(data.get("balances") or {}),
        )

    @property
    def is_empty(self) -> bool:
        return (
            self.last_price is None
            and not self.last_order_id
            and not self.last_trade_id
            and not self.positions
            and not self.balances
        )
