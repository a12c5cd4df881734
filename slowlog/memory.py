"""Key/value stores that keep the watermark between report cycles.

Values are plain strings (or None). Storing None removes the key.
``set_many`` applies several keys as one update, so a reader never sees half
of a watermark. Backend failures surface as ``MemoryStoreError``.
"""

import json
import logging
import os
import tempfile
from typing import Protocol, runtime_checkable

from redis.exceptions import RedisError

from slowlog.errors import MemoryStoreError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "slowlog"


@runtime_checkable
class MemoryStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str | None) -> None: ...

    def set_many(self, values: dict[str, str | None]) -> None: ...


def _apply(data: dict, values: dict) -> None:
    for key, value in values.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value


def _discard(path: str) -> None:
    if os.path.exists(path):
        os.unlink(path)


class DictMemoryStore:
    """In-process store; nothing survives the process."""

    def __init__(self, initial: dict | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str | None) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str | None]) -> None:
        _apply(self._data, values)

    def as_dict(self) -> dict:
        return dict(self._data)


class JsonFileMemoryStore:
    """Store backed by one JSON object on disk.

    Every update rewrites the file atomically (tmp + os.replace).
    """

    def __init__(self, path: str):
        self._path = path
        self._data: dict[str, str] = {}
        self._load()

    @property
    def path(self) -> str:
        return self._path

    def _load(self) -> None:
        if not os.path.exists(self._path):
            return
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("State file %s is not valid JSON, starting empty", self._path)
            return
        except OSError as exc:
            raise MemoryStoreError.for_store(self._path, exc.strerror or str(exc)) from None
        if isinstance(data, dict):
            self._data = {k: v for k, v in data.items() if v is not None}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str | None) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str | None]) -> None:
        _apply(self._data, values)
        self._save()

    def _save(self) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
        except OSError as exc:
            raise MemoryStoreError.for_store(self._path, exc.strerror or str(exc)) from None
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except OSError as exc:
            _discard(tmp)
            raise MemoryStoreError.for_store(self._path, exc.strerror or str(exc)) from None
        except Exception:
            _discard(tmp)
            raise


class RedisMemoryStore:
    """Store backed by a single Redis hash named after the namespace."""

    def __init__(self, client, namespace: str = DEFAULT_NAMESPACE):
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = DEFAULT_NAMESPACE) -> "RedisMemoryStore":
        from redis import Redis

        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        logger.info("Using Redis memory store (namespace=%s)", namespace)
        return cls(client, namespace)

    @property
    def hash_name(self) -> str:
        return f"{self._namespace}:memory"

    def _failed(self, exc: RedisError) -> MemoryStoreError:
        logger.error("Redis memory store error on %s: %s", self.hash_name, exc)
        return MemoryStoreError.for_store(f"Redis hash {self.hash_name}", str(exc))

    def get(self, key: str) -> str | None:
        try:
            value = self._client.hget(self.hash_name, key)
        except RedisError as exc:
            raise self._failed(exc) from None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str | None) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str | None]) -> None:
        present = {k: v for k, v in values.items() if v is not None}
        absent = [k for k, v in values.items() if v is None]
        try:
            pipe = self._client.pipeline(transaction=True)
            if present:
                pipe.hset(self.hash_name, mapping=present)
            if absent:
                pipe.hdel(self.hash_name, *absent)
            pipe.execute()
        except RedisError as exc:
            raise self._failed(exc) from None


def open_memory_store(config) -> MemoryStore:
    """Redis when a URL is configured, otherwise the JSON state file."""
    if config.redis_url:
        return RedisMemoryStore.from_url(config.redis_url, config.memory_namespace)
    logger.debug("Using JSON memory store at %s", config.state_file)
    return JsonFileMemoryStore(config.state_file)
