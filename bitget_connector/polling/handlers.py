"""
Poll Diff Handlers.

============================================================
PURPOSE
============================================================
One handler per event type. Each handler is a single pass:

    async (client, params, state) -> (events, new_state)

It fetches the current exchange snapshot, compares it with the
stored SubscriptionState and returns the detected events plus
the state to store for the next tick. The input state is never
mutated.

============================================================
EVENT TYPES
============================================================
- priceAlert:     ticker price vs target (above/below/crosses)
- orderFilled:    new filled orders since the order cursor
- positionChange: opened / modified / closed positions
- balanceChange:  modified spot and futures balances
- newTrade:       public trades newer than the trade cursor

============================================================
ERROR HANDLING
============================================================
A failure fetching one sub-source (one market, one product
type) is logged at debug and skipped so siblings still
contribute. Position and balance snapshots are replaced in
full each tick, so records of a failed sub-source drop out of
the stored snapshot. A stored position whose product type
failed is reported as closed.

============================================================
"""

import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from ..constants import (
    ENDPOINTS,
    MARGINED_PRODUCT_TYPES,
    MARKET_FUTURES,
    MARKET_SPOT,
    PRODUCT_TYPES,
    USDT_FUTURES,
)
from ..errors import BitgetError, ValidationError
from ..utils import compare_ids, format_symbol, is_newer_id
from .events import ChangeEvent, ChangeType, EventType
from .state import (
    SubscriptionState,
    futures_balance_key,
    position_key,
    spot_balance_key,
)


logger = logging.getLogger(__name__)


HandlerResult = Tuple[List[ChangeEvent], SubscriptionState]
Handler = Callable[[Any, "TriggerParams", SubscriptionState], Awaitable[HandlerResult]]


# ============================================================
# CONSTANTS
# ============================================================

PRICE_CONDITIONS = ("above", "below", "crossesAbove", "crossesBelow")

SPOT_FILLED_STATUSES = {"full_fill", "partial_fill"}
FUTURES_FILLED_STATUSES = {"filled", "partial_fill"}

ORDER_HISTORY_LIMIT = 20
RECENT_TRADES_LIMIT = "50"

ALL = "all"


# ============================================================
# PARAMETERS
# ============================================================

@dataclass
class TriggerParams:
    """
    Poll trigger configuration.

    Only the fields relevant to the configured event type are used.
    """

    # Price alert / new trade
    symbol: str = "BTCUSDT"
    market_type: str = MARKET_SPOT
    product_type: str = USDT_FUTURES
    price_condition: str = "above"
    target_price: Optional[float] = None

    # Order filled
    order_symbol: str = ""
    order_type_filter: str = ALL

    # Position change
    position_product_type: str = ALL
    position_symbol: str = ""

    # Balance change
    account_type: str = MARKET_SPOT
    coin_filter: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TriggerParams":
        """
        Build params from snake_case or camelCase keys.

        Raises:
            ValidationError: unknown key or non-numeric target price
        """
        known = {f.name: f.name for f in fields(cls)}
        known.update({_camel(name): name for name in list(known)})

        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if key not in known:
                raise ValidationError(f"Unknown trigger parameter: {key}")
            values[known[key]] = value

        target = values.get("target_price")
        if target not in (None, ""):
            try:
                values["target_price"] = float(target)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"targetPrice must be a number, got {target!r}") from e
        else:
            values["target_price"] = None

        return cls(**values)

    def validate_for(self, event: EventType) -> None:
        """Raise ValidationError when params cannot serve `event`."""
        if event in (EventType.PRICE_ALERT, EventType.NEW_TRADE):
            if self.market_type not in (MARKET_SPOT, MARKET_FUTURES):
                raise ValidationError(f"marketType must be spot or futures, got {self.market_type}")
            if not format_symbol(self.symbol or ""):
                raise ValidationError("symbol is required")
            if self.market_type == MARKET_FUTURES and self.product_type not in PRODUCT_TYPES:
                raise ValidationError(f"Unknown productType: {self.product_type}")

        if event is EventType.PRICE_ALERT:
            if self.price_condition not in PRICE_CONDITIONS:
                raise ValidationError(f"Unknown priceCondition: {self.price_condition}")
            if self.target_price is None:
                raise ValidationError("targetPrice is required for price alerts")

        if event is EventType.ORDER_FILLED and self.order_type_filter not in (ALL, MARKET_SPOT, MARKET_FUTURES):
            raise ValidationError(f"Unknown orderTypeFilter: {self.order_type_filter}")

        if event is EventType.POSITION_CHANGE and self.position_product_type not in (ALL, *PRODUCT_TYPES):
            raise ValidationError(f"Unknown positionProductType: {self.position_product_type}")

        if event is EventType.BALANCE_CHANGE and self.account_type not in (ALL, MARKET_SPOT, MARKET_FUTURES):
            raise ValidationError(f"Unknown accountType: {self.account_type}")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# ============================================================
# HELPERS
# ============================================================

def _as_records(response: Any, items_key: Optional[str] = None) -> List[Dict[str, Any]]:
    """Bare list, {items_key: [...]} or a single record -> list of records."""
    if isinstance(response, list):
        return [item for item in response if isinstance(item, dict)]
    if isinstance(response, dict):
        if items_key and items_key in response:
            return _as_records(response[items_key] or [])
        return [response]
    return []


def _max_id(ids: List[Any]) -> Optional[str]:
    ids = [str(i) for i in ids if i not in (None, "")]
    if not ids:
        return None
    return max(ids, key=cmp_to_key(compare_ids))


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ============================================================
# PRICE ALERT
# ============================================================

def price_condition_met(condition: str, previous: float, current: float, target: float) -> bool:
    if condition == "above":
        return current > target
    if condition == "below":
        return current < target
    if condition == "crossesAbove":
        return previous <= target and current > target
    if condition == "crossesBelow":
        return previous >= target and current < target
    return False


async def handle_price_alert(client, params: TriggerParams, state: SubscriptionState) -> HandlerResult:
    """
    Compare the ticker price with the target.

    The first tick uses the current price as the previous one, so
    crossing conditions never fire on it. last_price is always
    updated.
    """
    symbol = format_symbol(params.symbol)
    query: Dict[str, Any] = {"symbol": symbol}

    if params.market_type == MARKET_SPOT:
        endpoint = ENDPOINTS.MARKET_TICKER
    else:
        endpoint = ENDPOINTS.FUTURES_MARKET_TICKER
        query["productType"] = params.product_type

    ticker = await client.public_request("GET", endpoint, query=query)
    if isinstance(ticker, list):
        ticker = ticker[0] if ticker else {}
    ticker = ticker or {}

    current_price = float(ticker.get("lastPr") or ticker.get("last") or 0)
    previous_price = state.last_price if state.last_price is not None else current_price
    new_state = replace(state, last_price=current_price)

    if not price_condition_met(params.price_condition, previous_price, current_price, params.target_price):
        return [], new_state

    logger.info(
        f"Price alert {symbol}: {params.price_condition} {params.target_price} "
        f"(previous={previous_price}, current={current_price})"
    )

    event = ChangeEvent(
        change_type=ChangeType.PRICE_ALERT,
        record={
            "symbol": symbol,
            "marketType": params.market_type,
            "currentPrice": current_price,
            "targetPrice": params.target_price,
            "priceCondition": params.price_condition,
            "previousPrice": previous_price,
            "timestamp": _utc_now_iso(),
        },
    )
    return [event], new_state


# ============================================================
# ORDER FILLED
# ============================================================

async def handle_order_filled(client, params: TriggerParams, state: SubscriptionState) -> HandlerResult:
    """Emit filled orders newer than last_order_id from spot and/or futures history."""
    cursor = state.last_order_id
    symbol = format_symbol(params.order_symbol) if params.order_symbol else None
    events: List[ChangeEvent] = []

    if params.order_type_filter in (ALL, MARKET_SPOT):
        query = {"limit": ORDER_HISTORY_LIMIT, "symbol": symbol}
        try:
            orders = await client.request("GET", ENDPOINTS.SPOT_TRADE_HISTORY_ORDERS, query=query)
        except BitgetError as e:
            logger.debug(f"Spot order history unavailable: {e}")
        else:
            for order in _as_records(orders):
                if order.get("status") in SPOT_FILLED_STATUSES and is_newer_id(order.get("orderId"), cursor):
                    events.append(ChangeEvent(
                        change_type=ChangeType.FILLED,
                        record=order,
                        tags={"orderType": MARKET_SPOT},
                    ))

    if params.order_type_filter in (ALL, MARKET_FUTURES):
        for product_type in MARGINED_PRODUCT_TYPES:
            query = {"productType": product_type, "limit": ORDER_HISTORY_LIMIT, "symbol": symbol}
            try:
                orders = await client.request("GET", ENDPOINTS.FUTURES_HISTORY_ORDERS, query=query)
            except BitgetError as e:
                logger.debug(f"Futures order history unavailable for {product_type}: {e}")
                continue

            for order in _as_records(orders, items_key="entrustedList"):
                if order.get("status") in FUTURES_FILLED_STATUSES and is_newer_id(order.get("orderId"), cursor):
                    events.append(ChangeEvent(
                        change_type=ChangeType.FILLED,
                        record=order,
                        tags={"orderType": MARKET_FUTURES, "productType": product_type},
                    ))

    if not events:
        return [], state

    new_cursor = _max_id([event.record.get("orderId") for event in events] + [cursor])
    return events, replace(state, last_order_id=new_cursor)


# ============================================================
# POSITION CHANGE
# ============================================================

async def handle_position_change(client, params: TriggerParams, state: SubscriptionState) -> HandlerResult:
    """Diff live positions against the stored snapshot by Position Key."""
    if params.position_product_type == ALL:
        product_types = list(PRODUCT_TYPES)
    else:
        product_types = [params.position_product_type]

    symbol = format_symbol(params.position_symbol) if params.position_symbol else None
    previous = state.positions
    current: Dict[str, Dict[str, Any]] = {}
    events: List[ChangeEvent] = []

    for product_type in product_types:
        try:
            positions = await client.request(
                "GET",
                ENDPOINTS.FUTURES_POSITIONS,
                query={"productType": product_type, "symbol": symbol},
            )
        except BitgetError as e:
            logger.debug(f"Positions unavailable for {product_type}: {e}")
            continue

        for position in _as_records(positions):
            key = position_key(product_type, position.get("symbol"), position.get("holdSide"))
            current[key] = {**position, "productType": product_type}
            prior = previous.get(key)

            if prior is None:
                events.append(ChangeEvent(
                    change_type=ChangeType.OPENED,
                    record=position,
                    tags={"productType": product_type},
                ))
            elif position.get("total") != prior.get("total") or position.get("available") != prior.get("available"):
                events.append(ChangeEvent(
                    change_type=ChangeType.MODIFIED,
                    record=position,
                    tags={"productType": product_type},
                    previous={
                        "previousTotal": prior.get("total"),
                        "previousAvailable": prior.get("available"),
                    },
                ))

    for key, prior in previous.items():
        if key not in current:
            events.append(ChangeEvent(change_type=ChangeType.CLOSED, record=prior))

    return events, replace(state, positions=current)


# ============================================================
# BALANCE CHANGE
# ============================================================

async def handle_balance_change(client, params: TriggerParams, state: SubscriptionState) -> HandlerResult:
    """
    Diff balances against the stored snapshot by Balance Key.

    Only modifications are reported; a balance seen for the first
    time is stored silently.
    """
    coin = params.coin_filter.upper() if params.coin_filter else None
    previous = state.balances
    current: Dict[str, Dict[str, Any]] = {}
    events: List[ChangeEvent] = []

    if params.account_type in (ALL, MARKET_SPOT):
        try:
            assets = await client.request("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS, query={"coin": coin})
        except BitgetError as e:
            logger.debug(f"Spot assets unavailable: {e}")
        else:
            for asset in _as_records(assets):
                key = spot_balance_key(asset.get("coin"))
                current[key] = {**asset, "accountType": MARKET_SPOT}
                prior = previous.get(key)

                if prior and (
                    asset.get("available") != prior.get("available")
                    or asset.get("frozen") != prior.get("frozen")
                ):
                    events.append(ChangeEvent(
                        change_type=ChangeType.MODIFIED,
                        record=asset,
                        tags={"accountType": MARKET_SPOT},
                        previous={
                            "previousAvailable": prior.get("available"),
                            "previousFrozen": prior.get("frozen"),
                        },
                    ))

    if params.account_type in (ALL, MARKET_FUTURES):
        for product_type in MARGINED_PRODUCT_TYPES:
            try:
                accounts = await client.request(
                    "GET",
                    ENDPOINTS.FUTURES_ACCOUNTS,
                    query={"productType": product_type},
                )
            except BitgetError as e:
                logger.debug(f"Futures accounts unavailable for {product_type}: {e}")
                continue

            for account in _as_records(accounts):
                margin_coin = account.get("marginCoin")
                if coin and margin_coin != coin:
                    continue

                key = futures_balance_key(product_type, margin_coin)
                current[key] = {**account, "accountType": MARKET_FUTURES, "productType": product_type}
                prior = previous.get(key)

                if prior and (
                    account.get("available") != prior.get("available")
                    or account.get("equity") != prior.get("equity")
                ):
                    events.append(ChangeEvent(
                        change_type=ChangeType.MODIFIED,
                        record=account,
                        tags={"accountType": MARKET_FUTURES, "productType": product_type},
                        previous={
                            "previousAvailable": prior.get("available"),
                            "previousEquity": prior.get("equity"),
                        },
                    ))

    return events, replace(state, balances=current)


# ============================================================
# NEW TRADE
# ============================================================

def trade_cursor(trade: Dict[str, Any]) -> Optional[str]:
    """Trade ID, falling back to the trade timestamp."""
    value = trade.get("tradeId") or trade.get("ts")
    return str(value) if value not in (None, "") else None


async def handle_new_trade(client, params: TriggerParams, state: SubscriptionState) -> HandlerResult:
    """Emit public trades newer than last_trade_id."""
    symbol = format_symbol(params.symbol)
    query: Dict[str, Any] = {"symbol": symbol, "limit": RECENT_TRADES_LIMIT}

    if params.market_type == MARKET_SPOT:
        endpoint = ENDPOINTS.MARKET_TRADES
    else:
        endpoint = ENDPOINTS.FUTURES_MARKET_TRADES
        query["productType"] = params.product_type

    trades = _as_records(await client.public_request("GET", endpoint, query=query))
    if not trades:
        return [], state

    cursor = state.last_trade_id
    events = [
        ChangeEvent(
            change_type=ChangeType.TRADE,
            record=trade,
            tags={"symbol": symbol, "marketType": params.market_type},
        )
        for trade in trades
        if trade_cursor(trade) and is_newer_id(trade_cursor(trade), cursor)
    ]

    new_cursor = _max_id([trade_cursor(trade) for trade in trades] + [cursor])
    return events, replace(state, last_trade_id=new_cursor)


# ============================================================
# REGISTRY
# ============================================================

HANDLERS: Dict[EventType, Handler] = {
    EventType.PRICE_ALERT: handle_price_alert,
    EventType.ORDER_FILLED: handle_order_filled,
    EventType.POSITION_CHANGE: handle_position_change,
    EventType.BALANCE_CHANGE: handle_balance_change,
    EventType.NEW_TRADE: handle_new_trade,
}
