"""
Copy trading operations (futures follower side).
"""

from ..constants import ENDPOINTS, USDT_FUTURES
from .registry import ApiCall, Params, Resource, operation


COPY_MODE_FIXED_AMOUNT = "fixedAmount"
COPY_MODE_RATIO = "ratio"


def _product_type(params: Params) -> str:
    return params.string("productType", USDT_FUTURES)


@operation(Resource.COPY_TRADING, "get_traders")
def get_traders(params: Params) -> ApiCall:
    query = {
        "productType": _product_type(params),
        **params.pick("pageNo", "pageSize", "sortBy"),
    }
    return ApiCall("GET", ENDPOINTS.COPY_TRADERS, query=query)


@operation(Resource.COPY_TRADING, "get_trader_positions")
def get_trader_positions(params: Params) -> ApiCall:
    query = {
        "traderId": params.string("traderId", required=True),
        "productType": _product_type(params),
    }
    return ApiCall("GET", ENDPOINTS.COPY_TRADER_POSITIONS, query=query)


@operation(Resource.COPY_TRADING, "follow_trader")
def follow_trader(params: Params) -> ApiCall:
    """
    Start following a trader.

    copyMode "fixedAmount" sends `fixedAmount`; any other mode sends
    `copyRatio`.
    """
    body = {
        "traderId": params.string("traderId", required=True),
        "productType": _product_type(params),
        "copyTradeCoin": params.coin("copyTradeCoin", required=True),
    }
    if params.string("copyMode", COPY_MODE_RATIO) == COPY_MODE_FIXED_AMOUNT:
        body["fixedAmount"] = params.string("fixedAmount", required=True)
    else:
        body["copyRatio"] = params.string("copyRatio", required=True)
    body.update(params.pick("maxFollowAmount", "totalLimit"))
    return ApiCall("POST", ENDPOINTS.COPY_FOLLOW_TRADER, body=body)


@operation(Resource.COPY_TRADING, "unfollow_trader")
def unfollow_trader(params: Params) -> ApiCall:
    body = {
        "traderId": params.string("traderId", required=True),
        "productType": _product_type(params),
    }
    return ApiCall("POST", ENDPOINTS.COPY_UNFOLLOW_TRADER, body=body)


@operation(Resource.COPY_TRADING, "get_follow_settings")
def get_follow_settings(params: Params) -> ApiCall:
    query = {
        "traderId": params.string("traderId", required=True),
        "productType": _product_type(params),
    }
    return ApiCall("GET", ENDPOINTS.COPY_FOLLOW_SETTINGS, query=query)


@operation(Resource.COPY_TRADING, "update_follow_settings")
def update_follow_settings(params: Params) -> ApiCall:
    body = {
        "traderId": params.string("traderId", required=True),
        "productType": _product_type(params),
        **params.pick("fixedAmount", "copyRatio", "maxFollowAmount", "totalLimit"),
    }
    return ApiCall("POST", ENDPOINTS.COPY_UPDATE_SETTINGS, body=body)


@operation(Resource.COPY_TRADING, "get_follower_history", paginated=True)
def get_follower_history(params: Params) -> ApiCall:
    query = {
        "productType": _product_type(params),
        "traderId": params.string("traderId"),
        "symbol": params.symbol(required=False),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.COPY_FOLLOWER_HISTORY, query=query)


@operation(Resource.COPY_TRADING, "close_follower_position")
def close_follower_position(params: Params) -> ApiCall:
    body = {
        "productType": _product_type(params),
        "symbol": params.symbol(),
        "traderId": params.string("traderId", required=True),
        "holdSide": params.string("holdSide"),
    }
    return ApiCall("POST", ENDPOINTS.COPY_CLOSE_POSITION, body=body)
