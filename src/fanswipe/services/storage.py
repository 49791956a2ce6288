"""Synchronous key-value persistence for locally cached client state."""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from redis import Redis
from redis.exceptions import RedisError

from fanswipe.core.config import Settings
from fanswipe.services.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String-to-string store with the semantics of browser local storage."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store. State lives only as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """Return all stored keys."""
        return list(self._data)


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    The whole file is read once at construction and rewritten on every
    mutation. A missing file is an empty store; an unreadable or corrupt one
    is logged and treated as empty so a bad cache never blocks startup.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._data: dict[str, str] = self._read()

    @property
    def path(self) -> Path:
        """Location of the backing file."""
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring storage file %s: top-level value is not an object", self._path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _write(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._write()


class RedisStore:
    """Store backed by a synchronous Redis client, for state shared across devices."""

    def __init__(self, url: str | None = None, client: Redis | None = None) -> None:
        if client is None and url is None:
            raise ValueError("RedisStore needs a url or a client")
        self._client = client if client is not None else Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except RedisError as e:
            raise StorageError(f"Redis GET {key} failed: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(key, value)
        except RedisError as e:
            raise StorageError(f"Redis SET {key} failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except RedisError as e:
            raise StorageError(f"Redis DELETE {key} failed: {e}") from e


def create_store(settings: Settings) -> KeyValueStore:
    """Build the store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "file":
        return JsonFileStore(settings.storage_path)
    if settings.storage_backend == "redis":
        return RedisStore(settings.redis_url)
    return MemoryStore()


@dataclass(frozen=True)
class StorageKeys:
    """Namespaced storage keys. Each value is a JSON array or object."""

    prefix: str = "fanswipe_"

    @property
    def blocked_users(self) -> str:
        return f"{self.prefix}blocked_users"

    @property
    def hidden_content(self) -> str:
        return f"{self.prefix}hidden_content"

    @property
    def reported_content(self) -> str:
        return f"{self.prefix}reported_content"

    @property
    def reported_creators(self) -> str:
        return f"{self.prefix}reported_creators"

    @property
    def safety_settings(self) -> str:
        return f"{self.prefix}safety_settings"

    @property
    def browse_filters(self) -> str:
        return f"{self.prefix}browse_filters"
