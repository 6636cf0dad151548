"""
Futures trading operations: orders, plan (trigger) orders and fills.

Placement of regular, batch and plan orders goes through the retry
path. Modify and cancel need an orderId or a clientOid.
"""

from ..constants import ENDPOINTS
from ..utils import generate_client_order_id
from .registry import ApiCall, Params, Resource, operation
from .spot_trading import validate_batch


@operation(Resource.FUTURES_TRADING, "place_order", retry=True)
def place_order(params: Params) -> ApiCall:
    order_type = params.string("orderType", required=True)
    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        "marginCoin": params.coin("marginCoin", required=True),
        "marginMode": params.string("marginMode", "crossed"),
        "side": params.string("side", required=True),
        "orderType": order_type,
        "size": params.string("size", required=True),
        "tradeSide": params.string("tradeSide"),
        "clientOid": params.string("clientOid") or generate_client_order_id("futures"),
        **params.pick("reduceOnly", "presetStopSurplusPrice", "presetStopLossPrice"),
    }
    if order_type == "limit":
        body["price"] = params.string("price", required=True)
        body["force"] = params.string("force", "gtc")
    return ApiCall("POST", ENDPOINTS.FUTURES_PLACE_ORDER, body=body)


@operation(Resource.FUTURES_TRADING, "batch_place_orders", retry=True)
def batch_place_orders(params: Params) -> ApiCall:
    orders = validate_batch(params.get("orders"))
    order_list = [
        {
            "side": order.get("side"),
            "orderType": order.get("orderType"),
            "size": order.get("size"),
            "price": order.get("price"),
            "tradeSide": order.get("tradeSide"),
            "clientOid": order.get("clientOid") or generate_client_order_id(f"fbatch{index}"),
        }
        for index, order in enumerate(orders)
    ]
    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        "marginCoin": params.coin("marginCoin", required=True),
        "marginMode": params.string("marginMode", "crossed"),
        "orderList": order_list,
    }
    return ApiCall("POST", ENDPOINTS.FUTURES_BATCH_ORDERS, body=body)


@operation(Resource.FUTURES_TRADING, "modify_order")
def modify_order(params: Params) -> ApiCall:
    reference = params.require_order_reference()
    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        **reference,
        **params.pick("newPrice", "newSize", "newClientOid"),
    }
    return ApiCall("POST", ENDPOINTS.FUTURES_MODIFY_ORDER, body=body)


@operation(Resource.FUTURES_TRADING, "cancel_order")
def cancel_order(params: Params) -> ApiCall:
    reference = params.require_order_reference()
    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        **reference,
    }
    return ApiCall("POST", ENDPOINTS.FUTURES_CANCEL_ORDER, body=body)


@operation(Resource.FUTURES_TRADING, "cancel_all_orders")
def cancel_all_orders(params: Params) -> ApiCall:
    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(required=False),
        "marginCoin": params.coin("marginCoin"),
    }
    return ApiCall("POST", ENDPOINTS.FUTURES_CANCEL_ALL_ORDERS, body=body)


@operation(Resource.FUTURES_TRADING, "get_open_orders", paginated=True, items_key="entrustedList")
def get_open_orders(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(required=False),
        **params.pick("orderId", "clientOid", "limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_OPEN_ORDERS, query=query)


@operation(Resource.FUTURES_TRADING, "get_order_history", paginated=True, items_key="entrustedList")
def get_order_history(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(required=False),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_HISTORY_ORDERS, query=query)


@operation(Resource.FUTURES_TRADING, "get_fills", paginated=True, items_key="fillList", id_key="tradeId")
def get_fills(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(required=False),
        **params.pick("orderId"),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_FILLS, query=query)


@operation(Resource.FUTURES_TRADING, "place_plan_order", retry=True)
def place_plan_order(params: Params) -> ApiCall:
    """Trigger order that becomes live once `triggerPrice` is reached."""
    order_type = params.string("orderType", required=True)
    body = {
        "planType": params.string("planType", "normal_plan"),
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        "marginCoin": params.coin("marginCoin", required=True),
        "marginMode": params.string("marginMode", "crossed"),
        "side": params.string("side", required=True),
        "size": params.string("size", required=True),
        "triggerPrice": params.string("triggerPrice", required=True),
        "triggerType": params.string("triggerType", required=True),
        "orderType": order_type,
        "clientOid": params.string("clientOid") or generate_client_order_id("plan"),
        **params.pick("tradeSide", "reduceOnly"),
    }
    if order_type == "limit":
        body["executePrice"] = params.string("executePrice", required=True)
    return ApiCall("POST", ENDPOINTS.FUTURES_PLACE_PLAN_ORDER, body=body)


@operation(Resource.FUTURES_TRADING, "cancel_plan_order")
def cancel_plan_order(params: Params) -> ApiCall:
    reference = params.require_order_reference()
    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(required=False),
        **reference,
    }
    return ApiCall("POST", ENDPOINTS.FUTURES_CANCEL_PLAN_ORDER, body=body)


@operation(Resource.FUTURES_TRADING, "get_plan_orders", paginated=True, items_key="entrustedList")
def get_plan_orders(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "planType": params.string("planType", "normal_plan"),
        "symbol": params.symbol(required=False),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_PLAN_ORDERS, query=query)
