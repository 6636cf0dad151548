"""
Cursor pagination over `idLessThan`.

Pages are assumed to arrive in descending ID order. The cursor for the
next page is the `id_key` field of the last item of the current page.
No re-sorting and no de-duplication is done here.
"""

import logging
from typing import Any, Dict, List, Optional

from ..constants import DEFAULTS


logger = logging.getLogger(__name__)


def extract_items(response: Any, items_key: str = "data") -> List[Any]:
    """
    Normalise one page into a list of records.

    - bare list -> as is
    - mapping containing `items_key` -> that value (or [])
    - any other non-empty value -> one-element list
    - empty -> []
    """
    if isinstance(response, list):
        return response
    if isinstance(response, dict) and items_key in response:
        return response[items_key] or []
    if response:
        return [response]
    return []


def _page_limit(query: Optional[Dict[str, Any]], default_limit: int) -> int:
    limit = (query or {}).get("limit")
    if not limit:
        return default_limit
    return int(limit)


async def fetch_all(
    client,
    method: str,
    endpoint: str,
    body: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, Any]] = None,
    items_key: str = "data",
    id_key: str = "orderId",
    max_items: Optional[int] = None,
    public: bool = False,
    default_limit: int = DEFAULTS.PAGE_SIZE,
) -> List[Any]:
    """
    Fetch every page of a cursor-paginated endpoint.

    Stops on an empty page, once `max_items` is reached (result is
    truncated to exactly `max_items`), or on a page shorter than the
    effective limit (query `limit`, default 100).

    Args:
        client: BitgetClient
        method: HTTP method
        endpoint: API path constant
        body: JSON body mapping
        query: Query parameters; `idLessThan` is injected per page
        items_key: Key holding the records when the page is a mapping
        id_key: Record field used as the next cursor
        max_items: Optional cap on returned records
        public: Use unsigned requests
        default_limit: Page size assumed when the query has no limit

    Returns:
        Records in the order received
    """
    limit = _page_limit(query, default_limit)

    items: List[Any] = []
    cursor: Optional[str] = None
    page = 0

    while True:
        current_query = dict(query or {})
        if cursor:
            current_query["idLessThan"] = cursor

        if public:
            response = await client.public_request(method, endpoint, query=current_query)
        else:
            response = await client.request(method, endpoint, body=body, query=current_query)
        page += 1

        page_items = extract_items(response, items_key)
        if not page_items:
            break

        items.extend(page_items)

        if max_items and len(items) >= max_items:
            break

        if len(page_items) < limit:
            break

        last_item = page_items[-1]
        cursor = last_item.get(id_key) if isinstance(last_item, dict) else None
        if not cursor:
            logger.debug(f"{endpoint}: last item has no '{id_key}', stopping after page {page}")
            break

    logger.debug(f"{endpoint}: fetched {len(items)} items in {page} pages")

    return items[:max_items] if max_items else items
