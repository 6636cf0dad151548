"""
Spot account operations: balances, bills and wallet transfers.
"""

from ..constants import ENDPOINTS
from .registry import ApiCall, Params, Resource, operation


@operation(Resource.SPOT_ACCOUNT, "get_balance")
def get_balance(params: Params) -> ApiCall:
    return ApiCall("GET", ENDPOINTS.SPOT_ACCOUNT_ASSETS, query={"coin": params.coin()})


@operation(Resource.SPOT_ACCOUNT, "get_bills", paginated=True, id_key="billId")
def get_bills(params: Params) -> ApiCall:
    query = {
        "coin": params.coin(),
        "groupType": params.string("groupType"),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.SPOT_ACCOUNT_BILLS, query=query)


@operation(Resource.SPOT_ACCOUNT, "transfer", retry=True)
def transfer(params: Params) -> ApiCall:
    """Move funds between account types (spot, usdt_futures, ...)."""
    body = {
        "fromType": params.string("fromType", required=True),
        "toType": params.string("toType", required=True),
        "coin": params.coin(required=True),
        "amount": params.string("amount") or params.string("size", required=True),
        "clientOid": params.string("clientOid"),
    }
    return ApiCall("POST", ENDPOINTS.SPOT_WALLET_TRANSFER, body=body)


@operation(Resource.SPOT_ACCOUNT, "get_transfer_history")
def get_transfer_history(params: Params) -> ApiCall:
    query = {
        "coin": params.coin(),
        "fromType": params.string("fromType"),
        **params.time_range(),
        **params.pick("limit", "clientOid"),
    }
    return ApiCall("GET", ENDPOINTS.SPOT_WALLET_TRANSFER_RECORDS, query=query)
