"""
Key-value namespaces backing the data access layer.

Provides:
- Redis connection management
- Namespaced string get/put over Redis or process memory
- Store bindings handed to the DAO
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

import redis.asyncio as redis  # type: ignore[import-not-found]

from ..core.config import Settings

logger = logging.getLogger(__name__)

# Global Redis client
_redis_client: Optional[redis.Redis] = None

# Memory namespaces survive across requests for the lifetime of the process
_memory_namespaces: Dict[str, "MemoryNamespace"] = {}


class KVNamespace(Protocol):
    """A string-keyed namespace of JSON-serialized records."""

    name: str

    async def get(self, key: str) -> Optional[str]: ...

    async def put(self, key: str, value: str) -> None: ...


class RedisNamespace:
    """Namespace stored under ``<name>:<key>`` in Redis."""

    def __init__(self, client: redis.Redis, name: str):
        self.client = client
        self.name = name

    def _key(self, key: str) -> str:
        return f"{self.name}:{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(self._key(key))

    async def put(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)

    def __repr__(self):
        return f"<RedisNamespace(name='{self.name}')>"


class MemoryNamespace:
    """Dictionary-backed namespace for development and tests."""

    def __init__(self, name: str, data: Optional[Dict[str, str]] = None):
        self.name = name
        self.data: Dict[str, str] = dict(data or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def put(self, key: str, value: str) -> None:
        self.data[key] = value

    def __repr__(self):
        return f"<MemoryNamespace(name='{self.name}', keys={len(self.data)})>"


@dataclass
class StoreBindings:
    """The three namespaces owned by one request-scoped DAO."""

    professors: KVNamespace
    users: KVNamespace
    processing_queue: KVNamespace


async def get_redis(redis_url: str) -> redis.Redis:
    """Get or create the Redis connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def close_redis() -> None:
    """Close the Redis connection."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def get_memory_namespace(name: str) -> MemoryNamespace:
    """Get or create a process-wide memory namespace."""
    if name not in _memory_namespaces:
        _memory_namespaces[name] = MemoryNamespace(name)
    return _memory_namespaces[name]


def reset_memory_namespaces() -> None:
    """Drop every process-wide memory namespace."""
    _memory_namespaces.clear()


async def create_bindings(settings: Settings) -> StoreBindings:
    """Build store bindings for the configured backend."""
    names = (
        settings.professors_namespace,
        settings.users_namespace,
        settings.processing_queue_namespace,
    )

    if settings.kv_backend == "memory":
        professors, users, queue = (get_memory_namespace(name) for name in names)
    else:
        client = await get_redis(settings.redis_url)
        professors, users, queue = (RedisNamespace(client, name) for name in names)

    return StoreBindings(professors=professors, users=users, processing_queue=queue)


async def check_store_health(settings: Settings) -> dict:
    """Report key-value store connectivity."""
    if settings.kv_backend == "memory":
        return {
            "status": "connected",
            "backend": "memory",
            "namespaces": len(_memory_namespaces),
        }

    try:
        client = await get_redis(settings.redis_url)
        await client.ping()  # type: ignore[misc]
        return {"status": "connected", "backend": "redis"}
    except redis.RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return {"status": "disconnected", "backend": "redis", "error": str(e)}
