"""
Bitget Connector - Poll Diff Engine.

Turns successive REST snapshots into change events.
"""

from .events import ChangeEvent, ChangeType, EventType
from .state import (
    SubscriptionState,
    position_key,
    spot_balance_key,
    futures_balance_key,
)
from .store import (
    StateStore,
    StateStoreError,
    InMemoryStateStore,
    SqlAlchemyStateStore,
)
from .handlers import (
    HANDLERS,
    TriggerParams,
    handle_price_alert,
    handle_order_filled,
    handle_position_change,
    handle_balance_change,
    handle_new_trade,
)
from .trigger import PollTrigger


__all__ = [
    # Events
    "ChangeEvent",
    "ChangeType",
    "EventType",
    # State
    "SubscriptionState",
    "position_key",
    "spot_balance_key",
    "futures_balance_key",
    # Storage
    "StateStore",
    "StateStoreError",
    "InMemoryStateStore",
    "SqlAlchemyStateStore",
    # Handlers
    "HANDLERS",
    "TriggerParams",
    "handle_price_alert",
    "handle_order_filled",
    "handle_position_change",
    "handle_balance_change",
    "handle_new_trade",
    # Trigger
    "PollTrigger",
]
