"""Key-value stores that keep the session across process restarts."""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, cast

import redis
import structlog

from clinic_portal.config import Settings

logger = structlog.get_logger(__name__)

USER_KEY = "user"
TOKEN_KEY = "token"


class KeyValueStore(Protocol):
    """Opaque JSON key-value store used by the session holder."""

    def get_json(self, key: str) -> Any | None: ...

    def set_json(self, key: str, value: Any) -> bool: ...

    def delete(self, key: str) -> bool: ...


class MemoryStore:
    """In-process store. Nothing survives a restart."""

    def __init__(self, initial: dict[str, Any] | None = None):
        """Initialize store with optional seed data."""
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set_json(key, value)

    def get_json(self, key: str) -> Any | None:
        value = self._data.get(key)
        if value is None:
            return None
        return json.loads(value)

    def set_json(self, key: str, value: Any) -> bool:
        # Serialize so callers never share mutable state with the store
        self._data[key] = json.dumps(value, default=str)
        return True

    def delete(self, key: str) -> bool:
        self._data.pop(key, None)
        return True


class FileStore:
    """JSON document on disk holding every key."""

    def __init__(self, path: str | Path):
        """Initialize store backed by the given file."""
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("session_store_read_failed", path=str(self.path), error=str(e))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("session_store_corrupt", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".session-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, default=str)
                os.replace(tmp_path, self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
                raise
            return True
        except OSError as e:
            logger.error("session_store_write_failed", path=str(self.path), error=str(e))
            return False

    def get_json(self, key: str) -> Any | None:
        """Get a value by key."""
        return self._read().get(key)

    def set_json(self, key: str, value: Any) -> bool:
        """
        Store a JSON-serializable value.

        Args:
            key: Store key
            value: Value to serialize

        Returns:
            True if successful, False otherwise
        """
        data = self._read()
        data[key] = value
        return self._write(data)

    def delete(self, key: str) -> bool:
        """Delete a key. Missing keys are not an error."""
        data = self._read()
        if key not in data:
            return True
        del data[key]
        return self._write(data)


class RedisStore:
    """Redis-backed store."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        """Initialize store with Redis client."""
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get_json(self, key: str) -> Any | None:
        """
        Get JSON value and deserialize.

        Args:
            key: Store key

        Returns:
            Deserialized object or None
        """
        try:
            value = cast(str | None, self.redis.get(self._key(key)))
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.warning("session_store_read_failed", key=key, error=str(e))
            return None

    def set_json(self, key: str, value: Any) -> bool:
        """Serialize and set JSON value."""
        try:
            self.redis.set(self._key(key), json.dumps(value, default=str))
            return True
        except redis.RedisError as e:
            logger.error("session_store_write_failed", key=key, error=str(e))
            return False

    def delete(self, key: str) -> bool:
        """Delete key."""
        try:
            self.redis.delete(self._key(key))
            return True
        except redis.RedisError as e:
            logger.error("session_store_delete_failed", key=key, error=str(e))
            return False


def get_store(settings: Settings) -> KeyValueStore:
    """
    Build the store selected by ``STORAGE_BACKEND``.

    Args:
        settings: Client settings

    Returns:
        Configured key-value store

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = settings.storage_backend.lower()

    if backend == "file":
        return FileStore(settings.storage_path)
    if backend == "redis":
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=True,
            socket_connect_timeout=5,
        )
        return RedisStore(client, key_prefix=settings.redis_key_prefix)
    if backend == "memory":
        return MemoryStore()

    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
