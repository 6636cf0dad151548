"""
Poll Subscription State Storage.

============================================================
PURPOSE
============================================================
Durable key-value storage for SubscriptionState blobs, one
entry per subscription key.

============================================================
COMPONENTS
============================================================
- StateStore: protocol (load / save of the whole blob)
- InMemoryStateStore: process-local dict
- SqlAlchemyStateStore: one row per subscription in
  `poll_subscription_state`, state stored as JSON

============================================================
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import JSON, DateTime, String, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker


logger = logging.getLogger(__name__)


# ============================================================
# PROTOCOL
# ============================================================

class StateStore(Protocol):
    """Get/set of the whole state blob for one subscription key."""

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def save(self, key: str, state: Dict[str, Any]) -> None:
        ...


class StateStoreError(Exception):
    """Raised when durable state cannot be read or written."""


# ============================================================
# IN-MEMORY STORE
# ============================================================

class InMemoryStateStore:
    """Process-local store. Values are deep-copied in and out."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def save(self, key: str, state: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(state)

    def keys(self):
        return list(self._data)


# ============================================================
# ORM MODEL
# ============================================================

class Base(DeclarativeBase):
    """Declarative base for connector tables."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class SubscriptionStateRecord(Base):
    """
    Persisted state of one poll subscription.
    """

    __tablename__ = "poll_subscription_state"

    subscription_key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Subscription identity (e.g. '<subscription>:<event>')"
    )

    state: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Serialised SubscriptionState"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="Last update timestamp (UTC)"
    )


# ============================================================
# SQLALCHEMY STORE
# ============================================================

class SqlAlchemyStateStore:
    """
    Durable store backed by any SQLAlchemy database.

    Usage:
        store = SqlAlchemyStateStore("sqlite:///bitget_state.db")
        store.save("alerts:priceAlert", state.to_dict())
    """

    def __init__(self, url_or_engine, echo: bool = False, create_tables: bool = True):
        """
        Args:
            url_or_engine: Database URL or an existing Engine
            echo: Log SQL statements
            create_tables: Create the state table if missing

        Raises:
            StateStoreError: the URL or its driver is unusable, or the
                state table cannot be created
        """
        try:
            if isinstance(url_or_engine, Engine):
                self._engine = url_or_engine
            else:
                self._engine = create_engine(url_or_engine, echo=echo, future=True)
        except (SQLAlchemyError, ImportError) as e:
            logger.error(f"Invalid state database URL: {e}")
            raise StateStoreError(f"Invalid state database URL: {e}") from e

        self._session_factory = sessionmaker(
            bind=self._engine,
            autoflush=False,
            expire_on_commit=False,
        )

        if create_tables:
            try:
                Base.metadata.create_all(self._engine)
            except SQLAlchemyError as e:
                logger.error(f"Failed to create state table: {e}")
                raise StateStoreError(f"Failed to create state table: {e}") from e

        logger.debug(f"State store ready: {self._engine.url.render_as_string(hide_password=True)}")

    @property
    def engine(self) -> Engine:
        return self._engine

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            with self._session_factory() as session:
                record = session.get(SubscriptionStateRecord, key)
                return copy.deepcopy(record.state) if record is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load state for {key}: {e}")
            raise StateStoreError(f"Failed to load state for {key}: {e}") from e

    def save(self, key: str, state: Dict[str, Any]) -> None:
        try:
            with self._session_factory() as session, session.begin():
                record = session.get(SubscriptionStateRecord, key)
                if record is None:
                    session.add(SubscriptionStateRecord(subscription_key=key, state=state))
                else:
                    record.state = copy.deepcopy(state)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save state for {key}: {e}")
            raise StateStoreError(f"Failed to save state for {key}: {e}") from e

    def keys(self):
        with self._session_factory() as session:
            return list(session.scalars(select(SubscriptionStateRecord.subscription_key)))

    def close(self) -> None:
        self._engine.dispose()
