# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
State store implementations for the collection state.

Available stores:
- BaseStateStore: Abstract base class defining the store interface
- MemoryStateStore: In-memory store for single-instance deployments
- RedisStateStore: Redis-based store that survives restarts (requires redis extra)

Note: RedisStateStore is lazily imported to avoid requiring the redis
package when only using MemoryStateStore.
"""

from typing import TYPE_CHECKING, cast

from cloudflare_exporter.backends.base import BaseStateStore, HealthCheckResult
from cloudflare_exporter.backends.memory import MemoryStateStore

# Lazy imports for optional redis backend
if TYPE_CHECKING:
    from cloudflare_exporter.backends.redis import RedisStateStore

__all__ = [
    "BaseStateStore",
    "HealthCheckResult",
    "MemoryStateStore",
    # Redis backend (lazy loaded)
    "RedisStateStore",
]


def __getattr__(name: str) -> type:
    """Lazy import for the optional redis store."""
    if name == "RedisStateStore":
        try:
            from cloudflare_exporter.backends import redis as redis_module

            return cast(type, getattr(redis_module, name))
        except ImportError as e:  # pragma: no cover
            raise ImportError(  # pragma: no cover
                f"'{name}' requires the 'redis' extra. "
                "Install with: pip install cloudflare-prometheus-exporter[redis]"
            ) from e
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
