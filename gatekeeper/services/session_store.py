"""Expiring key-value storage for refresh and password-reset tokens."""

import logging
import math
import threading
from datetime import datetime, timedelta
from typing import Protocol

from redis import Redis
from redis.exceptions import RedisError

from gatekeeper.clock import Clock, get_clock
from gatekeeper.config import get_settings
from gatekeeper.errors import StoreError

logger = logging.getLogger("gatekeeper")


def refresh_key(user_id: str) -> str:
    return f"refresh:{user_id}"


def reset_key(token: str) -> str:
    return f"reset:{token}"


class SessionStoreError(StoreError):
    """Backing cache could not be reached."""


class SessionStore(Protocol):
    def put(self, key: str, value: str, ttl: timedelta) -> None: ...

    def get(self, key: str) -> str | None: ...

    def pop(self, key: str) -> str | None: ...

    def delete(self, key: str) -> None: ...

    def ping(self) -> bool: ...


def _ttl_seconds(ttl: timedelta) -> int:
    """Round up to whole seconds, never below one (Redis rejects EX <= 0)."""
    return max(1, math.ceil(ttl.total_seconds()))


class RedisSessionStore:
    """Session store backed by Redis. Redis enforces the TTL."""

    def __init__(self, client: Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str, *, socket_timeout: float = 5.0) -> "RedisSessionStore":
        client = Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        try:
            self.client.set(key, value, ex=_ttl_seconds(ttl))
        except RedisError as e:
            logger.exception("Session store write failed for %s", key.split(":", 1)[0])
            raise SessionStoreError("session store unavailable") from e

    def get(self, key: str) -> str | None:
        try:
            return self.client.get(key)
        except RedisError as e:
            logger.exception("Session store read failed for %s", key.split(":", 1)[0])
            raise SessionStoreError("session store unavailable") from e

    def pop(self, key: str) -> str | None:
        """Atomically read and delete a key (GETDEL, Redis >= 6.2)."""
        try:
            return self.client.getdel(key)
        except RedisError as e:
            logger.exception("Session store read failed for %s", key.split(":", 1)[0])
            raise SessionStoreError("session store unavailable") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except RedisError as e:
            logger.exception("Session store delete failed for %s", key.split(":", 1)[0])
            raise SessionStoreError("session store unavailable") from e

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except RedisError:
            return False


class MemorySessionStore:
    """In-process session store for development and tests.

    Entries carry an absolute deadline on the shared clock and are dropped
    when read after it.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or get_clock()
        self._entries: dict[str, tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        with self._lock:
            self._entries[key] = (value, self.clock.now() + ttl)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._live_value(key)

    def pop(self, key: str) -> str | None:
        with self._lock:
            value = self._live_value(key)
            self._entries.pop(key, None)
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def ping(self) -> bool:
        return True

    def _live_value(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, deadline = entry
        if deadline <= self.clock.now():
            del self._entries[key]
            return None
        return value


_session_store: RedisSessionStore | MemorySessionStore | None = None


def get_session_store() -> SessionStore:
    """Get singleton session store instance."""
    global _session_store
    if _session_store is None:
        settings = get_settings()
        if settings.REDIS_URL:
            _session_store = RedisSessionStore.from_url(settings.REDIS_URL)
        else:
            _session_store = MemorySessionStore()
    return _session_store
