"""
Operation Dispatcher.

============================================================
PURPOSE
============================================================
Executes registered operations against a BitgetClient.

- execute:        one operation, one parameter set
- execute_batch:  one operation per input item, with an
                  ItemResult per slot
- flatten_results: output rows (list data -> one row each)

Listing operations accept `return_all` (and optional
`max_items`) to read every page through the paginator.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..config import ClientConfig
from ..constants import DEFAULTS
from ..errors import BitgetError, ValidationError
from ..transport.pagination import fetch_all
from .registry import OperationSpec, Params, resolve


logger = logging.getLogger(__name__)


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass
class ItemResult:
    """Outcome of one batch slot."""

    index: int
    ok: bool
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"index": self.index, "ok": self.ok}
        if self.ok:
            result["data"] = self.data
        else:
            result["error"] = self.error
        return result


# ============================================================
# EXECUTION
# ============================================================

def _pop_option(values: Dict[str, Any], snake: str, camel: str) -> Any:
    first = values.pop(snake, None)
    second = values.pop(camel, None)
    return first if first is not None else second


def _default_page_size(client) -> int:
    config = getattr(client, "config", None)
    if isinstance(config, ClientConfig):
        return config.pagination.default_limit
    return DEFAULTS.PAGE_SIZE


async def execute(client, resource, operation: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """
    Run one operation.

    Args:
        client: BitgetClient
        resource: Resource or its name
        operation: Operation name (snake_case or camelCase)
        params: Caller parameters

    Returns:
        Response data (a record list when return_all is set)

    Raises:
        ValidationError: unknown operation, bad parameters, or
            return_all on a non-listing operation
        BitgetError: request failures
    """
    spec = resolve(resource, operation)

    values = dict(params or {})
    return_all = bool(_pop_option(values, "return_all", "returnAll"))
    max_items = _pop_option(values, "max_items", "maxItems")

    call = spec.build(Params(values))

    if return_all:
        if not spec.paginated:
            raise ValidationError(f"{spec.key} does not support return_all")
        logger.debug(f"Fetching all pages for {spec.key}")
        return await fetch_all(
            client,
            call.method,
            call.endpoint,
            body=call.body or None,
            query=call.query,
            items_key=spec.items_key,
            id_key=spec.id_key,
            max_items=int(max_items) if max_items else None,
            public=call.public,
            default_limit=_default_page_size(client),
        )

    if call.public:
        return await client.public_request(call.method, call.endpoint, query=call.query)
    if spec.retry:
        return await client.request_with_retry(call.method, call.endpoint, body=call.body, query=call.query)
    return await client.request(call.method, call.endpoint, body=call.body, query=call.query)


async def execute_batch(
    client,
    resource,
    operation: str,
    items: Iterable[Dict[str, Any]],
    continue_on_fail: bool = False,
) -> List[ItemResult]:
    """
    Run the same operation once per parameter set, in order.

    With continue_on_fail the error message is recorded in the
    item's slot and the batch moves on; otherwise the first error
    propagates.
    """
    spec: OperationSpec = resolve(resource, operation)

    results: List[ItemResult] = []
    for index, item in enumerate(items):
        try:
            data = await execute(client, spec.resource, spec.name, item)
        except BitgetError as e:
            if not continue_on_fail:
                raise
            logger.warning(f"{spec.key} item {index} failed: {e}")
            results.append(ItemResult(index=index, ok=False, error=str(e)))
            continue
        results.append(ItemResult(index=index, ok=True, data=data))

    return results


def flatten_results(results: Iterable[ItemResult]) -> List[Dict[str, Any]]:
    """
    Output rows for a batch.

    List data yields one row per element, None yields no row, and a
    failed item yields {"error": message}.
    """
    rows: List[Dict[str, Any]] = []
    for result in results:
        if not result.ok:
            rows.append({"error": result.error})
        elif isinstance(result.data, list):
            rows.extend(row if isinstance(row, dict) else {"value": row} for row in result.data)
        elif isinstance(result.data, dict):
            rows.append(result.data)
        elif result.data is not None:
            rows.append({"value": result.data})
    return rows
