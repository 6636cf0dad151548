"""
Poll State Storage Tests.

============================================================
PURPOSE
============================================================
Tests for SubscriptionState serialisation and the in-memory
and SQLAlchemy state stores.

============================================================
"""

import pytest
from sqlalchemy import create_engine, inspect

from bitget_connector.polling import (
    InMemoryStateStore,
    SqlAlchemyStateStore,
    StateStoreError,
    SubscriptionState,
    futures_balance_key,
    position_key,
    spot_balance_key,
)


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'state.db'}"


def sample_state():
    return SubscriptionState(
        last_price=50000.5,
        last_order_id="1002",
        positions={position_key("USDT-FUTURES", "BTCUSDT", "long"): {"total": "1"}},
        balances={spot_balance_key("USDT"): {"available": "100"}},
    )


# ============================================================
# STATE TESTS
# ============================================================

class TestSubscriptionState:
    """Tests for SubscriptionState."""

    def test_keys(self):
        assert position_key("USDT-FUTURES", "BTCUSDT", "long") == "USDT-FUTURES-BTCUSDT-long"
        assert spot_balance_key("USDT") == "spot-USDT"
        assert futures_balance_key("USDT-FUTURES", "USDT") == "futures-USDT-FUTURES-USDT"

    def test_round_trip(self):
        state = sample_state()

        assert SubscriptionState.from_dict(state.to_dict()) == state

    def test_empty(self):
        assert SubscriptionState.from_dict(None).is_empty
        assert SubscriptionState.from_dict({}).is_empty
        assert not sample_state().is_empty


# ============================================================
# IN-MEMORY STORE TESTS
# ============================================================

class TestInMemoryStateStore:
    """Tests for InMemoryStateStore."""

    def test_missing_key(self):
        assert InMemoryStateStore().load("nope") is None

    def test_values_are_copied(self):
        store = InMemoryStateStore()
        data = sample_state().to_dict()

        store.save("a", data)
        data["positions"].clear()
        loaded = store.load("a")
        loaded["balances"].clear()

        assert store.load("a")["positions"]
        assert store.load("a")["balances"]
        assert store.keys() == ["a"]


# ============================================================
# SQLALCHEMY STORE TESTS
# ============================================================

class TestSqlAlchemyStateStore:
    """Tests for SqlAlchemyStateStore."""

    def test_creates_table(self, sqlite_url):
        store = SqlAlchemyStateStore(sqlite_url)

        assert "poll_subscription_state" in inspect(store.engine).get_table_names()
        store.close()

    def test_save_and_load(self, sqlite_url):
        store = SqlAlchemyStateStore(sqlite_url)
        state = sample_state()

        store.save("alerts:priceAlert", state.to_dict())

        assert SubscriptionState.from_dict(store.load("alerts:priceAlert")) == state
        assert store.load("other") is None
        store.close()

    def test_overwrite(self, sqlite_url):
        store = SqlAlchemyStateStore(sqlite_url)

        store.save("k", SubscriptionState(last_order_id="1").to_dict())
        store.save("k", SubscriptionState(last_order_id="2").to_dict())

        assert store.load("k")["last_order_id"] == "2"
        assert store.keys() == ["k"]
        store.close()

    def test_survives_reopen(self, sqlite_url):
        store = SqlAlchemyStateStore(sqlite_url)
        store.save("k", sample_state().to_dict())
        store.close()

        reopened = SqlAlchemyStateStore(sqlite_url)

        assert reopened.load("k")["last_order_id"] == "1002"
        reopened.close()

    def test_accepts_engine(self, sqlite_url):
        engine = create_engine(sqlite_url)

        store = SqlAlchemyStateStore(engine)
        store.save("k", {"last_price": 1.0})

        assert store.engine is engine
        assert store.load("k") == {"last_price": 1.0}
        engine.dispose()

    @pytest.mark.parametrize("url", ["notadb://x", "not a url"])
    def test_bad_url_raises_store_error(self, url):
        with pytest.raises(StateStoreError, match="Invalid state database URL"):
            SqlAlchemyStateStore(url)

    def test_unreachable_database_raises_store_error(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'missing' / 'state.db'}"

        with pytest.raises(StateStoreError, match="Failed to create state table"):
            SqlAlchemyStateStore(url)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
