"""
Session Store backed by Redis.

Only the last validated CPF is persisted, under a single fixed key. Whether a
user is "remembered" is derived from that key on demand, never cached.
"""
from typing import Optional

from redis.exceptions import RedisError

from granacred.settings import settings
from granacred.store.redis_conn import get_redis
from granacred.observability.logging import log


class SessionStore:
    """get/set over Redis. Read failures look like an empty store."""

    def get(self, key: str) -> Optional[str]:
        try:
            raw = get_redis().get(key)
        except RedisError as e:
            log(event="session_store_read_failed", key=key, errorType=type(e).__name__, error=str(e)[:200])
            return None
        if raw is None or raw == "":
            return None
        return raw if isinstance(raw, str) else raw.decode("utf-8")

    def set(self, key: str, value: str) -> None:
        try:
            get_redis().set(key, value)
        except RedisError as e:
            log(event="session_store_write_failed", key=key, errorType=type(e).__name__, error=str(e)[:200])


def load_identifier(store) -> Optional[str]:
    return store.get(settings.SESSION_IDENTIFIER_KEY)


def save_identifier(store, identifier: str) -> None:
    store.set(settings.SESSION_IDENTIFIER_KEY, identifier)
    log(event="session_identifier_saved", cpf=identifier)


def is_remembered(store) -> bool:
    return bool(load_identifier(store))
