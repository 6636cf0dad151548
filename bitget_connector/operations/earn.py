"""
Earn (savings) operations.
"""

from ..constants import ENDPOINTS
from .registry import ApiCall, Params, Resource, operation


@operation(Resource.EARN, "get_products")
def get_products(params: Params) -> ApiCall:
    query = {
        "coin": params.coin(),
        "periodType": params.string("periodType"),
    }
    return ApiCall("GET", ENDPOINTS.EARN_PRODUCTS, query=query)


@operation(Resource.EARN, "subscribe", retry=True)
def subscribe(params: Params) -> ApiCall:
    body = {
        "productId": params.string("productId", required=True),
        "amount": params.string("amount", required=True),
    }
    return ApiCall("POST", ENDPOINTS.EARN_SUBSCRIBE, body=body)


@operation(Resource.EARN, "redeem", retry=True)
def redeem(params: Params) -> ApiCall:
    body = {
        "productId": params.string("productId", required=True),
        "amount": params.string("amount", required=True),
    }
    return ApiCall("POST", ENDPOINTS.EARN_REDEEM, body=body)


@operation(Resource.EARN, "get_subscriptions")
def get_subscriptions(params: Params) -> ApiCall:
    query = {
        "coin": params.coin(),
        "productId": params.string("productId"),
    }
    return ApiCall("GET", ENDPOINTS.EARN_SUBSCRIPTIONS, query=query)


@operation(Resource.EARN, "get_history", paginated=True)
def get_history(params: Params) -> ApiCall:
    query = {
        "coin": params.coin(),
        **params.pick("productId", "operationType"),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.EARN_HISTORY, query=query)
