"""Redis connection wrapper used by the Redis entity store."""

import json
from dataclasses import dataclass, field
from typing import Any

import redis.asyncio as redis
from redis.asyncio.lock import Lock

from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class WriteBatch:
    """Writes held back until a transaction commits. List pushes are oldest first."""

    hashes: dict[str, dict[str, Any]] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)
    pushes: dict[str, list[Any]] = field(default_factory=dict)
    caps: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.hashes or self.values or self.pushes)

    def hset(self, name: str, mapping: dict[str, Any]) -> None:
        self.hashes.setdefault(name, {}).update(mapping)

    def set(self, name: str, value: Any) -> None:
        self.values[name] = value

    def lpush(self, name: str, value: Any, cap: int) -> None:
        self.pushes.setdefault(name, []).append(value)
        self.caps[name] = cap


class StateManager:
    """Namespaced JSON access to Redis keys, hashes and lists."""

    def __init__(self, redis_url: str, key_prefix: str = "restaurant") -> None:
        self.redis_client: redis.Redis | None = None
        self.redis_url = redis_url
        self.key_prefix = key_prefix

    def key(self, name: str) -> str:
        """Qualify a key with the namespace prefix."""
        return f"{self.key_prefix}:{name}"

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self.redis_client is None:
            self.redis_client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info("redis_connected", url=self.redis_url)

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("redis_disconnected")

    async def _client(self) -> redis.Redis:
        if not self.redis_client:
            await self.connect()
        return self.redis_client

    @staticmethod
    def _decode(value: Any) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    async def set(self, name: str, value: Any) -> None:
        """Set a JSON value."""
        client = await self._client()
        await client.set(self.key(name), json.dumps(value))
        logger.debug("state_set", key=name)

    async def get(self, name: str) -> Any:
        """Get a JSON value."""
        client = await self._client()
        return self._decode(await client.get(self.key(name)))

    async def hset_many(self, name: str, mapping: dict[str, Any]) -> None:
        """Set several hash fields to JSON values in one round trip."""
        if not mapping:
            return
        client = await self._client()
        await client.hset(
            self.key(name),
            mapping={field: json.dumps(value) for field, value in mapping.items()},
        )

    async def hget(self, name: str, field: str) -> Any:
        """Get a hash field."""
        client = await self._client()
        return self._decode(await client.hget(self.key(name), field))

    async def hgetall(self, name: str) -> dict[str, Any]:
        """Get all hash fields."""
        client = await self._client()
        data = await client.hgetall(self.key(name))
        return {field: self._decode(value) for field, value in data.items()}

    async def hdel(self, name: str, *fields: str) -> None:
        """Delete hash fields."""
        client = await self._client()
        await client.hdel(self.key(name), *fields)

    async def lpush_capped(self, name: str, value: Any, cap: int) -> None:
        """Prepend to a list and trim it to ``cap`` entries."""
        client = await self._client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.lpush(self.key(name), json.dumps(value))
            pipe.ltrim(self.key(name), 0, cap - 1)
            await pipe.execute()

    async def commit(self, batch: WriteBatch) -> None:
        """Apply buffered writes atomically in one MULTI/EXEC pipeline."""
        if batch.is_empty:
            return
        client = await self._client()
        async with client.pipeline(transaction=True) as pipe:
            for name, mapping in batch.hashes.items():
                pipe.hset(
                    self.key(name),
                    mapping={field: json.dumps(value) for field, value in mapping.items()},
                )
            for name, value in batch.values.items():
                pipe.set(self.key(name), json.dumps(value))
            for name, values in batch.pushes.items():
                pipe.lpush(self.key(name), *(json.dumps(value) for value in values))
                pipe.ltrim(self.key(name), 0, batch.caps[name] - 1)
            await pipe.execute()
        logger.debug(
            "state_committed",
            hashes=list(batch.hashes),
            values=list(batch.values),
            lists=list(batch.pushes),
        )

    async def rpush(self, name: str, value: Any) -> None:
        """Append to a list."""
        client = await self._client()
        await client.rpush(self.key(name), json.dumps(value))

    async def lrange(self, name: str, start: int = 0, end: int = -1) -> list[Any]:
        """Read a slice of a list."""
        client = await self._client()
        return [self._decode(value) for value in await client.lrange(self.key(name), start, end)]

    async def delete(self, *names: str) -> None:
        """Delete keys."""
        client = await self._client()
        await client.delete(*(self.key(name) for name in names))
        logger.debug("state_deleted", keys=list(names))

    async def increment(self, name: str, amount: int = 1) -> int:
        """Increment a counter."""
        client = await self._client()
        return await client.incrby(self.key(name), amount)

    async def lock(self, name: str, timeout: float) -> Lock:
        """Distributed lock; the caller enters it with ``async with``."""
        client = await self._client()
        return client.lock(self.key(name), timeout=timeout, blocking_timeout=timeout)

    async def flush(self) -> int:
        """Delete every key under the namespace prefix."""
        client = await self._client()
        deleted = 0
        async for key in client.scan_iter(match=f"{self.key_prefix}:*"):
            deleted += await client.delete(key)
        return deleted
