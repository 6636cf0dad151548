"""
Poll Change Events.

============================================================
PURPOSE
============================================================
Events produced by one poll tick.

A ChangeEvent carries the current exchange record, tags
describing where it came from (orderType, productType,
accountType, marketType) and, where applicable, the previous
values it was compared against.

`to_dict()` flattens all of it into the record shape consumers
receive, e.g. for a modified position:

    {...position fields, "changeType": "modified",
     "previousTotal": "1", "previousAvailable": "1",
     "productType": "USDT-FUTURES"}

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


# ============================================================
# ENUMS
# ============================================================

class EventType(Enum):
    """Poll trigger event types."""

    PRICE_ALERT = "priceAlert"
    ORDER_FILLED = "orderFilled"
    POSITION_CHANGE = "positionChange"
    BALANCE_CHANGE = "balanceChange"
    NEW_TRADE = "newTrade"

    @classmethod
    def parse(cls, value: str) -> "EventType":
        """Accept the camelCase value or the snake_case name."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown event type: {value}")


class ChangeType(Enum):
    """Kind of change a single event represents."""

    OPENED = "opened"
    MODIFIED = "modified"
    CLOSED = "closed"
    FILLED = "filled"
    TRADE = "trade"
    PRICE_ALERT = "price_alert"


# Change types that are written into the record as `changeType`
_LIFECYCLE_CHANGES = (ChangeType.OPENED, ChangeType.MODIFIED, ChangeType.CLOSED)


# ============================================================
# EVENT
# ============================================================

@dataclass
class ChangeEvent:
    """One detected change."""

    change_type: ChangeType
    record: Dict[str, Any]
    tags: Dict[str, Any] = field(default_factory=dict)
    previous: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.record)
        result.update(self.tags)
        if self.change_type in _LIFECYCLE_CHANGES:
            result["changeType"] = self.change_type.value
        result.update(self.previous)
        return result

    @property
    def product_type(self):
        return self.tags.get("productType", self.record.get("productType"))
