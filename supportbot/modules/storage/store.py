import json
import logging
import os
from typing import Any, Optional

import redis.asyncio as redis

logger = logging.getLogger("supportbot.storage")


class NotFoundError(KeyError):
    """Raised when a key has no stored value."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Key not found: {self.key}"


class StorageModule:
    """Owns the Redis connection."""

    def __init__(self, connection_url: str = None, password: Optional[str] = None):
        """Initialize storage with connection URL."""
        self.url = connection_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.password = password
        self._client = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(
                self.url,
                password=self.password,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


class StateStore:
    """
    JSON key-value store on top of an async Redis client.

    Absent keys raise NotFoundError; every other failure (connection
    loss, bad payload) propagates unchanged.
    """

    def __init__(self, redis_client):
        """
        Initialize the store.

        Args:
            redis_client: Async Redis client created with decode_responses=True
        """
        self.redis = redis_client

    async def get(self, key: str) -> Any:
        data = await self.redis.get(key)
        if data is None:
            raise NotFoundError(key)
        return json.loads(data)

    async def put(self, key: str, value: Any) -> None:
        await self.redis.set(key, json.dumps(value))

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)
        logger.debug(f"Deleted {key}")
