"""Durable slots: a single named key holding the serialized decision-log collection.

Every backend stores one opaque string. Reads return None when the slot has
never been written. Failures surface as the backend's native error
(``redis.RedisError`` or ``OSError``, or ``UnicodeDecodeError`` when the
stored bytes are not UTF-8); the store translates them.
"""

import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from redis import Redis

from resolve.core.config import Settings
from resolve.db.redis import get_redis


@runtime_checkable
class DurableSlot(Protocol):
    """One key in a local key-value store."""

    def read(self) -> str | None:
        """Return the stored document, or None if the slot is empty."""
        ...

    def write(self, value: str) -> None:
        """Replace the stored document."""
        ...


class RedisSlot:
    """Slot backed by a single Redis string key."""

    def __init__(self, redis: Redis, key: str):
        self.redis = redis
        self.key = key

    def read(self) -> str | None:
        value = self.redis.get(self.key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def write(self, value: str) -> None:
        self.redis.set(self.key, value)


class FileSlot:
    """Slot backed by one JSON file.

    Writes land in a sibling temp file first and are then renamed over the
    target, so a failed write leaves the previous document intact.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise


class MemorySlot:
    """In-process slot for tests and ephemeral runs.

    Args:
        initial: Document to start with (None = empty slot)
        fail_writes: Simulate a full storage medium on every write
    """

    def __init__(self, initial: str | None = None, fail_writes: bool = False):
        self.value = initial
        self.fail_writes = fail_writes
        self.writes = 0

    def read(self) -> str | None:
        return self.value

    def write(self, value: str) -> None:
        if self.fail_writes:
            raise OSError(28, "No space left on device")
        self.value = value
        self.writes += 1


def build_slot(settings: Settings, redis: Redis | None = None) -> DurableSlot:
    """Create the slot selected by ``settings.storage_backend``.

    Args:
        settings: Application settings
        redis: Redis client to use instead of the shared one

    Returns:
        A DurableSlot for the configured backend
    """
    if settings.storage_backend == "memory":
        return MemorySlot()
    if settings.storage_backend == "file":
        return FileSlot(settings.storage_path)
    return RedisSlot(redis if redis is not None else get_redis(), settings.storage_key)
