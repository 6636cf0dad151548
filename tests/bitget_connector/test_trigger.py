"""
Poll Trigger Tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from bitget_connector.errors import ApiError, ValidationError
from bitget_connector.polling import (
    EventType,
    InMemoryStateStore,
    PollTrigger,
    SubscriptionState,
    TriggerParams,
)


def ticker_client(*prices):
    client = MagicMock()
    client.public_request = AsyncMock(side_effect=[{"lastPr": str(p)} for p in prices])
    return client


class TestPollTrigger:
    """Tests for PollTrigger."""

    def test_invalid_event(self):
        with pytest.raises(ValidationError, match="Unknown event type"):
            PollTrigger(MagicMock(), "priceDrop", {"targetPrice": 1})

    def test_invalid_params(self):
        with pytest.raises(ValidationError):
            PollTrigger(MagicMock(), "priceAlert", {})

    def test_state_key(self):
        trigger = PollTrigger(MagicMock(), EventType.NEW_TRADE, subscription_id="btc")

        assert trigger.state_key == "btc:newTrade"

    def test_accepts_params_object(self):
        params = TriggerParams(target_price=1.0)

        trigger = PollTrigger(MagicMock(), "price_alert", params)

        assert trigger.params is params
        assert trigger.event is EventType.PRICE_ALERT

    @pytest.mark.asyncio
    async def test_state_persists_between_ticks(self):
        store = InMemoryStateStore()
        client = ticker_client(49000, 51000)
        params = {"priceCondition": "crossesAbove", "targetPrice": 50000}

        trigger = PollTrigger(client, "priceAlert", params, store=store, subscription_id="alerts")

        assert await trigger.poll() == []
        assert store.load("alerts:priceAlert")["last_price"] == 49000.0

        records = await trigger.poll()

        assert len(records) == 1
        assert records[0]["previousPrice"] == 49000.0
        assert records[0]["currentPrice"] == 51000.0

    @pytest.mark.asyncio
    async def test_failed_tick_returns_nothing_and_keeps_state(self):
        store = InMemoryStateStore()
        store.save("default:priceAlert", SubscriptionState(last_price=49000.0).to_dict())

        client = MagicMock()
        client.public_request = AsyncMock(side_effect=ApiError("down", code="50001"))

        trigger = PollTrigger(client, "priceAlert", {"targetPrice": 50000}, store=store)

        assert await trigger.poll() == []
        assert trigger.load_state().last_price == 49000.0

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self):
        client = MagicMock()
        client.public_request = AsyncMock(side_effect=RuntimeError("bug"))

        trigger = PollTrigger(client, "newTrade")

        assert await trigger.poll() == []

    @pytest.mark.asyncio
    async def test_subscriptions_are_independent(self):
        store = InMemoryStateStore()
        params = {"targetPrice": 1}

        first = PollTrigger(ticker_client(10), "priceAlert", params, store=store, subscription_id="a")
        second = PollTrigger(ticker_client(20), "priceAlert", params, store=store, subscription_id="b")

        await first.poll()
        await second.poll()

        assert first.load_state().last_price == 10.0
        assert second.load_state().last_price == 20.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
