"""
Futures account operations: accounts, positions, leverage and margin mode.
"""

from ..constants import DEFAULTS, ENDPOINTS
from ..errors import ValidationError
from ..utils import validate_leverage
from .registry import ApiCall, Params, Resource, operation


@operation(Resource.FUTURES_ACCOUNT, "get_account")
def get_account(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(required=False),
        "marginCoin": params.coin("marginCoin"),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_ACCOUNT, query=query)


@operation(Resource.FUTURES_ACCOUNT, "get_accounts")
def get_accounts(params: Params) -> ApiCall:
    """All margin accounts of one product type."""
    query = {"productType": params.string("productType", required=True)}
    return ApiCall("GET", ENDPOINTS.FUTURES_ACCOUNTS, query=query)


@operation(Resource.FUTURES_ACCOUNT, "get_positions")
def get_positions(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "marginCoin": params.coin("marginCoin"),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_POSITIONS, query=query)


@operation(Resource.FUTURES_ACCOUNT, "get_single_position")
def get_single_position(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        "marginCoin": params.coin("marginCoin", required=True),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_SINGLE_POSITION, query=query)


@operation(Resource.FUTURES_ACCOUNT, "set_leverage")
def set_leverage(params: Params) -> ApiCall:
    leverage = params.require("leverage")
    try:
        leverage_value = float(leverage)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Leverage must be a number, got {leverage!r}") from e
    if not validate_leverage(leverage_value):
        raise ValidationError(
            f"Leverage must be an integer between {DEFAULTS.MIN_LEVERAGE} and {DEFAULTS.MAX_LEVERAGE}"
        )

    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        "marginCoin": params.coin("marginCoin", required=True),
        "leverage": str(int(leverage_value)),
        "holdSide": params.string("holdSide"),
    }
    return ApiCall("POST", ENDPOINTS.FUTURES_SET_LEVERAGE, body=body)


@operation(Resource.FUTURES_ACCOUNT, "set_margin_mode")
def set_margin_mode(params: Params) -> ApiCall:
    body = {
        "productType": params.string("productType", required=True),
        "symbol": params.symbol(),
        "marginCoin": params.coin("marginCoin", required=True),
        "marginMode": params.string("marginMode", required=True),
    }
    return ApiCall("POST", ENDPOINTS.FUTURES_SET_MARGIN_MODE, body=body)


@operation(Resource.FUTURES_ACCOUNT, "get_bills", paginated=True, items_key="bills", id_key="billId")
def get_bills(params: Params) -> ApiCall:
    query = {
        "productType": params.string("productType", required=True),
        "coin": params.coin(),
        "businessType": params.string("businessType"),
        **params.time_range(),
        **params.pick("limit", "idLessThan"),
    }
    return ApiCall("GET", ENDPOINTS.FUTURES_BILLS, query=query)
