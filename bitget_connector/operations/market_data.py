"""
Public market data operations.

Every call is unsigned. `marketType` selects the spot or futures
endpoint family; futures calls carry a productType (USDT-FUTURES
unless given).
"""

from typing import Any, Dict

from ..constants import ENDPOINTS, MARKET_FUTURES, MARKET_SPOT, USDT_FUTURES
from ..errors import ValidationError
from .registry import ApiCall, Params, Resource, operation


DEFAULT_ORDER_BOOK_LIMIT = "15"
DEFAULT_TRADES_LIMIT = "100"


def _market(params: Params) -> str:
    market_type = params.string("marketType", MARKET_SPOT)
    if market_type not in (MARKET_SPOT, MARKET_FUTURES):
        raise ValidationError(f"Unknown market type: {market_type}")
    return market_type


def _public_get(params: Params, spot_endpoint: str, futures_endpoint: str, query: Dict[str, Any]) -> ApiCall:
    if _market(params) == MARKET_SPOT:
        return ApiCall("GET", spot_endpoint, query=query, public=True)
    query = {**query, "productType": params.string("productType", USDT_FUTURES)}
    return ApiCall("GET", futures_endpoint, query=query, public=True)


@operation(Resource.MARKET_DATA, "get_tickers")
def get_tickers(params: Params) -> ApiCall:
    return _public_get(params, ENDPOINTS.MARKET_TICKERS, ENDPOINTS.FUTURES_MARKET_TICKERS, {})


@operation(Resource.MARKET_DATA, "get_ticker")
def get_ticker(params: Params) -> ApiCall:
    query = {"symbol": params.symbol()}
    return _public_get(params, ENDPOINTS.MARKET_TICKER, ENDPOINTS.FUTURES_MARKET_TICKER, query)


@operation(Resource.MARKET_DATA, "get_order_book")
def get_order_book(params: Params) -> ApiCall:
    query = {
        "symbol": params.symbol(),
        "limit": params.string("limit", DEFAULT_ORDER_BOOK_LIMIT),
    }
    return _public_get(params, ENDPOINTS.MARKET_ORDERBOOK, ENDPOINTS.FUTURES_MARKET_ORDERBOOK, query)


@operation(Resource.MARKET_DATA, "get_candles")
def get_candles(params: Params) -> ApiCall:
    """Candlesticks; granularity uses Bitget's names (1min, 1h, 1day, ...)."""
    query = {
        "symbol": params.symbol(),
        "granularity": params.string("granularity", required=True),
        **params.time_range(),
        **params.pick("limit"),
    }
    return _public_get(params, ENDPOINTS.MARKET_CANDLES, ENDPOINTS.FUTURES_MARKET_CANDLES, query)


@operation(Resource.MARKET_DATA, "get_trades")
def get_trades(params: Params) -> ApiCall:
    query = {
        "symbol": params.symbol(),
        "limit": params.string("limit", DEFAULT_TRADES_LIMIT),
    }
    return _public_get(params, ENDPOINTS.MARKET_TRADES, ENDPOINTS.FUTURES_MARKET_TRADES, query)


@operation(Resource.MARKET_DATA, "get_symbols")
def get_symbols(params: Params) -> ApiCall:
    return _public_get(params, ENDPOINTS.MARKET_SYMBOLS, ENDPOINTS.FUTURES_MARKET_SYMBOLS, {})


@operation(Resource.MARKET_DATA, "get_server_time")
def get_server_time(params: Params) -> ApiCall:
    return ApiCall("GET", ENDPOINTS.MARKET_SERVER_TIME, public=True)
