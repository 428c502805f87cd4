"""
Key-value store abstraction backing every piece of service state.

Supports an in-memory fallback for tests/local runs, a SQLAlchemy table
(Postgres in production, SQLite in tests) and a Redis-backed implementation.
Values are anything JSON-serializable.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import redis
from sqlalchemy import JSON, Column, Float, String, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class KvStore(Protocol):
    """Operations the handlers need from the key-value store."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


def _copy(value: Any) -> Any:
    # Mimic a real round trip through the wire format.
    return json.loads(json.dumps(value, default=str))


@dataclass
class InMemoryKvStore:
    """Dict-backed store for development and tests."""

    items: dict[str, tuple[Any, Optional[float]]] = field(default_factory=dict)

    def get(self, key: str) -> Optional[Any]:
        entry = self.items.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.time():
            self.items.pop(key, None)
            return None
        return _copy(value)

    def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expires_at = time.time() + ttl if ttl else None
        self.items[key] = (_copy(value), expires_at)

    def delete(self, key: str) -> None:
        self.items.pop(key, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.items.clear()


class SqlKvStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlKvStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get(self, key: str) -> Optional[Any]:
        with self.Session() as session:
            row = session.get(KvRow, key)
            if not row:
                return None
            if row.expires_at is not None and row.expires_at <= time.time():
                session.delete(row)
                session.commit()
                return None
            return row.value

    def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expires_at = time.time() + ttl if ttl else None
        payload = _copy(value)
        with self.Session() as session:
            existing = session.get(KvRow, key)
            if existing:
                existing.value = payload
                existing.expires_at = expires_at
            else:
                session.add(KvRow(key=key, value=payload, expires_at=expires_at))
            session.commit()

    def delete(self, key: str) -> None:
        with self.Session() as session:
            row = session.get(KvRow, key)
            if row:
                session.delete(row)
                session.commit()


@dataclass
class RedisKvStore:
    """Redis-backed store with JSON-encoded values."""

    url: str
    key_prefix: str = "feedback:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        body = json.dumps(value, default=str)
        self.client.set(self._key(key), body, ex=ttl or None)

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))


Base = declarative_base()


class KvRow(Base):
    __tablename__ = "kv_store"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)
    expires_at = Column(Float, nullable=True)
