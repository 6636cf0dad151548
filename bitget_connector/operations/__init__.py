"""
Operations package.

Importing the package registers every resource's operations.
"""

from . import (  # noqa: F401
    copy_trading,
    earn,
    futures_account,
    futures_trading,
    market_data,
    spot_account,
    spot_trading,
)
from .dispatcher import ItemResult, execute, execute_batch, flatten_results
from .registry import (
    REGISTRY,
    ApiCall,
    OperationSpec,
    Params,
    Resource,
    list_operations,
    operation,
    resolve,
)


__all__ = [
    "REGISTRY",
    "ApiCall",
    "OperationSpec",
    "Params",
    "Resource",
    "list_operations",
    "operation",
    "resolve",
    "ItemResult",
    "execute",
    "execute_batch",
    "flatten_results",
]
