# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Cloudflare Prometheus Exporter - Cloudflare analytics as Prometheus metrics.

The exporter periodically queries the Cloudflare GraphQL analytics API,
reconciles the per-window snapshots it returns into monotonic counters and
serves the result in the Prometheus text format.

Key Features:
    - Rate-limited, retrying upstream client with batched zone queries
    - Partial-failure tolerant refresh cycles
    - Monotonic counters that absorb upstream resets
    - Durable state (memory or Redis) surviving restarts
    - Scrapes never trigger upstream traffic

Quick Start:
    >>> from cloudflare_exporter import ExporterConfig
    >>> from cloudflare_exporter.server import build_runtime, create_app
    >>>
    >>> config = ExporterConfig.from_env()
    >>> app = create_app(build_runtime(config))

Main Exports:
    - ExporterConfig: Configuration options
    - CloudflareClient: Upstream analytics client
    - FetchOrchestrator, ReconciliationEngine: The collection pipeline
    - MetricsRegistry: Prometheus serialization
    - MemoryStateStore, RedisStateStore: State stores

Note: RedisStateStore requires the 'redis' extra. Install with:
    pip install cloudflare-prometheus-exporter[redis]

Version: 1.0.0
"""

__version__ = "1.0.0"

from typing import TYPE_CHECKING

from .backends import BaseStateStore, HealthCheckResult, MemoryStateStore
from .collection import FetchOrchestrator, LabelMapper, ReconciliationEngine
from .config import ExporterConfig
from .exceptions import (
    AuthenticationError,
    BackendConnectionError,
    BackendOperationError,
    ConfigurationError,
    ExporterError,
    QueryError,
    SerializationError,
    UpstreamError,
)
from .observability import METRIC_DEFINITIONS, MetricsRegistry
from .protocols import UpstreamClientProtocol
from .providers import CloudflareClient
from .ratelimit import RetryPolicy, TokenBucketLimiter
from .scheduler import CollectionState, CounterState, GaugeState
from .types import CycleResult, FetchFailure, MetricIdentity, TimeWindow

# Lazy imports for optional redis store
if TYPE_CHECKING:
    from .backends.redis import RedisStateStore

__all__ = [
    "METRIC_DEFINITIONS",
    "AuthenticationError",
    "BackendConnectionError",
    "BackendOperationError",
    "BaseStateStore",
    "CloudflareClient",
    "CollectionState",
    "ConfigurationError",
    "CounterState",
    "CycleResult",
    "ExporterConfig",
    "ExporterError",
    "FetchFailure",
    "FetchOrchestrator",
    "GaugeState",
    "HealthCheckResult",
    "LabelMapper",
    "MemoryStateStore",
    "MetricIdentity",
    "MetricsRegistry",
    "QueryError",
    "ReconciliationEngine",
    "RedisStateStore",
    "RetryPolicy",
    "SerializationError",
    "TimeWindow",
    "TokenBucketLimiter",
    "UpstreamClientProtocol",
    "UpstreamError",
    "__version__",
]


def __getattr__(name: str) -> type:
    """Lazy import for the optional redis store."""
    if name == "RedisStateStore":
        from .backends import RedisStateStore

        return RedisStateStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
