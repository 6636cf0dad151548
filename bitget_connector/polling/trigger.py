"""
Poll Trigger.

============================================================
PURPOSE
============================================================
Runs one poll tick for one subscription:

1. Load SubscriptionState from the StateStore
2. Run the configured handler
3. Save the new state and return the events as flat records

A failure escaping the handler is logged and the tick yields
no events; the stored state is left untouched. A tick never
raises into the host scheduler.

No internal looping: the host decides when to tick.

============================================================
"""

import logging
from typing import Any, Dict, List, Optional, Union

from ..errors import ValidationError
from .events import EventType
from .handlers import HANDLERS, TriggerParams
from .state import SubscriptionState
from .store import InMemoryStateStore, StateStore


logger = logging.getLogger(__name__)


class PollTrigger:
    """
    Poll trigger for one subscription.

    Usage:
        trigger = PollTrigger(client, "priceAlert", {"symbol": "BTCUSDT",
                              "priceCondition": "crossesAbove", "targetPrice": 50000},
                              store=store, subscription_id="btc-50k")
        records = await trigger.poll()
    """

    def __init__(
        self,
        client,
        event: Union[EventType, str],
        params: Union[TriggerParams, Dict[str, Any], None] = None,
        store: Optional[StateStore] = None,
        subscription_id: str = "default",
    ):
        """
        Args:
            client: BitgetClient
            event: Event type to detect
            params: TriggerParams or a mapping of trigger parameters
            store: State storage (in-memory when omitted)
            subscription_id: Identity of this subscription in the store

        Raises:
            ValidationError: invalid event type or parameters
        """
        try:
            self._event = EventType.parse(event)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if not isinstance(params, TriggerParams):
            params = TriggerParams.from_dict(params)
        params.validate_for(self._event)

        self._client = client
        self._params = params
        self._store = store if store is not None else InMemoryStateStore()
        self._key = f"{subscription_id}:{self._event.value}"

    @property
    def event(self) -> EventType:
        return self._event

    @property
    def params(self) -> TriggerParams:
        return self._params

    @property
    def state_key(self) -> str:
        return self._key

    def load_state(self) -> SubscriptionState:
        return SubscriptionState.from_dict(self._store.load(self._key))

    async def poll(self) -> List[Dict[str, Any]]:
        """
        Run one tick.

        Returns:
            Flat event records (empty when nothing changed or the tick failed)
        """
        handler = HANDLERS[self._event]

        try:
            state = self.load_state()
            events, new_state = await handler(self._client, self._params, state)
            self._store.save(self._key, new_state.to_dict())
        except Exception as e:
            logger.error(f"Bitget poll {self._key} failed: {e}", exc_info=True)
            return []

        if events:
            logger.info(f"Bitget poll {self._key}: {len(events)} event(s)")
        else:
            logger.debug(f"Bitget poll {self._key}: no changes")

        return [event.to_dict() for event in events]
