"""Storage package — shared Redis client and durable slots."""

from resolve.db.redis import close_redis, get_redis, init_redis
from resolve.db.slots import DurableSlot, FileSlot, MemorySlot, RedisSlot, build_slot

__all__ = [
    "DurableSlot",
    "FileSlot",
    "MemorySlot",
    "RedisSlot",
    "build_slot",
    "close_redis",
    "get_redis",
    "init_redis",
]
