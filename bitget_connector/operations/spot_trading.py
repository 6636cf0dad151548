"""
Spot trading operations.

Order placement (single and batch) goes through the retry path.
A client order ID is generated when the caller does not supply one.
"""

from typing import Any, Dict, List

from ..constants import DEFAULTS, ENDPOINTS
from ..errors import ValidationError
from ..utils import generate_client_order_id
from .registry import ApiCall, Params, Resource, operation


def validate_batch(orders: Any) -> List[Dict[str, Any]]:
    """Batch order lists hold 1 to MAX_BATCH_ORDERS entries."""
    if not isinstance(orders, list) or not orders:
        raise ValidationError("At least one order is required")
    if len(orders) > DEFAULTS.MAX_BATCH_ORDERS:
        raise ValidationError(f"Maximum {DEFAULTS.MAX_BATCH_ORDERS} orders per batch")
    for order in orders:
        if not isinstance(order, dict):
            raise ValidationError("Each batch order must be a mapping")
    return orders


@operation(Resource.SPOT_TRADING, "place_order", retry=True)
def place_order(params: Params) -> ApiCall:
    order_type = params.string("orderType", required=True)
    body = {
        "symbol": params.symbol(),
        "side": params.string("side", required=True),
        "orderType": order_type,
        "size": params.string("size", required=True),
        "force": params.string("force", "gtc"),
        "clientOid": params.string("clientOid") or generate_client_order_id(),
    }
    if order_type == "limit":
        body["price"] = params.string("price", required=True)
    return ApiCall("POST", ENDPOINTS.SPOT_TRADE_PLACE_ORDER, body=body)


@operation(Resource.SPOT_TRADING, "batch_place_orders", retry=True)
def batch_place_orders(params: Params) -> ApiCall:
    orders = validate_batch(params.get("orders"))
    order_list = [
        {
            "side": order.get("side"),
            "orderType": order.get("orderType"),
            "size": order.get("size"),
            "price": order.get("price"),
            "force": order.get("force") or "gtc",
            "clientOid": order.get("clientOid") or generate_client_order_id(f"batch{index}"),
        }
        for index, order in enumerate(orders)
    ]
    body = {"symbol": params.symbol(), "orderList": order_list}
    return ApiCall("POST", ENDPOINTS.SPOT_TRADE_BATCH_ORDERS, body=body)


@operation(Resource.SPOT_TRADING, "cancel_order")
def cancel_order(params: Params) -> ApiCall:
    reference = params.require_order_reference()
    body = {"symbol": params.symbol(), **reference}
    return ApiCall("POST", ENDPOINTS.SPOT_TRADE_CANCEL_ORDER, body=body)


@operation(Resource.SPOT_TRADING, "batch_cancel_orders")
def batch_cancel_orders(params: Params) -> ApiCall:
    """`orderIds` is a comma separated string or a list."""
    order_ids = params.get("orderIds")
    if isinstance(order_ids, str):
        order_ids = [order_id.strip() for order_id in order_ids.split(",") if order_id.strip()]
    body = {"symbol": params.symbol(), "orderIds": order_ids or None}
    return ApiCall("POST", ENDPOINTS.SPOT_TRADE_BATCH_CANCEL, body=body)


@operation(Resource.SPOT_TRADING, "get_open_orders", paginated=True)
def get_open_orders(params: Params) -> ApiCall:
    query = {
        "symbol": params.symbol(required=False),
        **params.time_range(),
        **params.pick("limit", "orderType", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.SPOT_TRADE_OPEN_ORDERS, query=query)


@operation(Resource.SPOT_TRADING, "get_order_history", paginated=True)
def get_order_history(params: Params) -> ApiCall:
    query = {
        "symbol": params.symbol(required=False),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.SPOT_TRADE_HISTORY_ORDERS, query=query)


@operation(Resource.SPOT_TRADING, "get_order_detail")
def get_order_detail(params: Params) -> ApiCall:
    return ApiCall("GET", ENDPOINTS.SPOT_TRADE_ORDER_INFO, query=params.require_order_reference())


@operation(Resource.SPOT_TRADING, "get_fills", paginated=True, id_key="tradeId")
def get_fills(params: Params) -> ApiCall:
    query = {
        "symbol": params.symbol(required=False),
        **params.pick("orderId"),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.SPOT_TRADE_FILLS, query=query)
