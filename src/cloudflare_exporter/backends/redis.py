# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
RedisStateStore for the Cloudflare exporter

This module provides a Redis-backed state store so accumulated counters
survive restarts and can be shared by a replacement instance.

Each document is stored as one JSON string under ``{namespace}:{key}``.
Writes replace the whole document; there is no partial update.
"""

import json
import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import (
    ConnectionError,
    RedisError,
    ResponseError,
    TimeoutError,
)
from typing_extensions import Self

from ..exceptions import BackendConnectionError, BackendOperationError
from .base import BaseStateStore, HealthCheckResult

logger = logging.getLogger(__name__)


class RedisStateStore(BaseStateStore):
    """
    Redis-backed state store.

    Example:
        async with RedisStateStore("redis://localhost:6379/0") as store:
            await store.set_state("default:metrics", state.to_dict())
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        redis_client: Any | None = None,
        namespace: str = "cloudflare_exporter",
        socket_timeout: float = 5.0,
    ) -> None:
        """
        Initialize the Redis state store.

        Args:
            redis_url: Redis connection URL
            redis_client: Optional pre-configured redis.asyncio client
            namespace: Namespace prefix for keys
            socket_timeout: Connect and read timeout in seconds
        """
        super().__init__(namespace)
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self._redis: Any | None = redis_client
        self._owned_redis = redis_client is None

    def _get_state_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def _ensure_connected(self) -> Any:
        """Return the client, creating it lazily on first use."""
        if self._redis is None:
            logger.info(f"Connecting state store to {self.redis_url}")
            self._redis = Redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=self.socket_timeout,
                socket_timeout=self.socket_timeout,
            )
        return self._redis

    async def get_state(self, key: str) -> dict[str, Any] | None:
        state_key = self._get_state_key(key)
        try:
            raw = await self._ensure_connected().get(state_key)
        except (ConnectionError, TimeoutError) as e:
            logger.error(f"Redis connection error getting state for {key}: {e}")
            raise BackendConnectionError(str(e)) from e
        except (ResponseError, RedisError) as e:
            logger.error(f"Redis error getting state for {key}: {e}")
            raise BackendOperationError(str(e)) from e

        if raw is None:
            return None
        try:
            state = json.loads(raw)
        except json.JSONDecodeError as e:
            raise BackendOperationError(f"Corrupt state document at {state_key}: {e}") from e
        if not isinstance(state, dict):
            raise BackendOperationError(f"State document at {state_key} is not an object")
        return state

    async def set_state(self, key: str, state: dict[str, Any]) -> None:
        payload = json.dumps(state, separators=(",", ":"))
        try:
            await self._ensure_connected().set(self._get_state_key(key), payload)
        except (ConnectionError, TimeoutError) as e:
            logger.error(f"Redis connection error setting state for {key}: {e}")
            raise BackendConnectionError(str(e)) from e
        except (ResponseError, RedisError) as e:
            logger.error(f"Redis error setting state for {key}: {e}")
            raise BackendOperationError(str(e)) from e

    async def delete_state(self, key: str) -> None:
        try:
            await self._ensure_connected().delete(self._get_state_key(key))
        except (ConnectionError, TimeoutError) as e:
            raise BackendConnectionError(str(e)) from e
        except (ResponseError, RedisError) as e:
            raise BackendOperationError(str(e)) from e

    async def health_check(self) -> HealthCheckResult:
        """Ping Redis and report server details."""
        try:
            redis_client = self._ensure_connected()
            await redis_client.ping()
            info = await redis_client.info()
            return HealthCheckResult(
                healthy=True,
                backend_type="redis",
                namespace=self.namespace,
                metadata={
                    "redis_url": self.redis_url,
                    "redis_version": info.get("redis_version"),
                    "used_memory": info.get("used_memory_human"),
                    "connected_clients": info.get("connected_clients"),
                },
            )
        except (ConnectionError, TimeoutError, ResponseError, RedisError) as e:
            return HealthCheckResult(
                healthy=False,
                backend_type="redis",
                namespace=self.namespace,
                error=str(e),
            )

    async def close(self) -> None:
        """Close the connection if this store created it."""
        if self._redis is not None and self._owned_redis:
            try:
                await self._redis.aclose()
            except RedisError as e:
                logger.error(f"Error closing Redis connection: {e}")
            finally:
                self._redis = None

    async def __aenter__(self) -> Self:
        self._ensure_connected()
        return self

    async def __aexit__(self, exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.close()


__all__ = ["RedisStateStore"]
