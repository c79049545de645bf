# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Exporter Configuration

This module provides the configuration class for the exporter, covering
upstream access, query shaping, rate limiting, refresh scheduling, state
storage and the HTTP listener. Values are usually read from the
environment with ExporterConfig.from_env().
"""

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ConfigurationError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})

MAX_BATCH_SIZE = 10


def _parse_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_number(name: str, raw: str, kind: type) -> Any:
    try:
        return kind(raw.strip())
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be {'an integer' if kind is int else 'a number'}, got {raw!r}"
        ) from e


def _parse_listen(raw: str) -> tuple[str, int]:
    host, sep, port = raw.strip().rpartition(":")
    if not sep:
        host, port = raw.strip(), "8080"
    try:
        return host or "0.0.0.0", int(port)  # noqa: S104  # nosec B104
    except ValueError as e:
        raise ConfigurationError(f"LISTEN must be host:port, got {raw!r}") from e


@dataclass
class ExporterConfig:
    """
    Configuration for the Cloudflare exporter.

    Credentials are optional here so that a config can be built and
    inspected without them; the upstream client raises AuthenticationError
    when neither a token nor a key/email pair is present.
    """

    # === Upstream Credentials ===

    api_token: str | None = None
    """Cloudflare API token (preferred)."""

    api_key: str | None = None
    """Legacy global API key, used together with api_email."""

    api_email: str | None = None
    """Account email for the legacy API key."""

    # === Query Shaping ===

    scrape_delay: int = 300
    """Seconds the query window trails wall-clock time."""

    time_window: int = 60
    """Width of the query window in seconds."""

    query_limit: int = 1000
    """Row limit passed to every GraphQL dataset."""

    batch_size: int = MAX_BATCH_SIZE
    """Zones per GraphQL request (the API accepts at most 10)."""

    free_tier: bool = False
    """Only fetch datasets available on the free plan."""

    exclude_host: bool = True
    """Drop the per-host label from host-dimensioned series."""

    http_status_group: bool = False
    """Fold edge status codes into 1xx..5xx buckets."""

    metrics_denylist: frozenset[str] = field(default_factory=frozenset)
    """Metric names that are never recorded or exposed."""

    zones: tuple[str, ...] = ()
    """Zone IDs to include. Empty means all zones."""

    exclude_zones: tuple[str, ...] = ()
    """Zone IDs to skip."""

    # === Concurrency and Rate Limiting ===

    ssl_concurrency: int = 5
    """Parallel per-zone REST lookups (certificates, firewall rules)."""

    max_concurrent_fetches: int = 10
    """Maximum in-flight category fetches within one cycle."""

    rate_limit_rps: float = 4.0
    """Sustained upstream call rate (calls per second)."""

    rate_limit_burst: int = 2
    """Token bucket capacity."""

    retry_max_attempts: int = 4
    """Attempts per upstream call, including the first."""

    retry_base_delay: float = 0.1
    """Base delay for exponential backoff in seconds."""

    retry_max_delay: float = 5.0
    """Cap on a single backoff delay in seconds."""

    request_timeout: float = 10.0
    """Per-request HTTP timeout in seconds."""

    # === Refresh Scheduling ===

    refresh_interval_seconds: float = 60.0
    """Delay between the end of one cycle and the start of the next."""

    # === State Storage ===

    state_backend: str = "memory"
    """Either 'memory' or 'redis'."""

    redis_url: str = "redis://localhost:6379/0"
    """Redis connection URL for the redis state backend."""

    state_namespace: str = "cloudflare_exporter"
    """Key prefix for persisted state."""

    tenant: str = "default"
    """Tenant name; each tenant owns its own state blob."""

    # === HTTP Listener ===

    metrics_path: str = "/metrics"
    """Path that serves the exposition text."""

    listen_host: str = "0.0.0.0"  # noqa: S104  # nosec B104  # exporter must be reachable by the Prometheus server
    """Listen address."""

    listen_port: int = 8080
    """Listen port."""

    log_level: str = "INFO"
    """Root log level."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.metrics_denylist = frozenset(self.metrics_denylist)
        self.zones = tuple(self.zones)
        self.exclude_zones = tuple(self.exclude_zones)
        for name in (
            "rate_limit_rps",
            "retry_base_delay",
            "retry_max_delay",
            "request_timeout",
            "refresh_interval_seconds",
        ):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a finite number")
        if not 1 <= self.batch_size <= MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {self.batch_size}"
            )
        if self.scrape_delay < 0:
            raise ConfigurationError("scrape_delay must not be negative")
        if self.time_window < 1:
            raise ConfigurationError("time_window must be at least 1 second")
        if self.query_limit < 1:
            raise ConfigurationError("query_limit must be at least 1")
        if self.ssl_concurrency < 1:
            raise ConfigurationError("ssl_concurrency must be at least 1")
        if self.max_concurrent_fetches < 1:
            raise ConfigurationError("max_concurrent_fetches must be at least 1")
        if self.rate_limit_rps <= 0:
            raise ConfigurationError("rate_limit_rps must be positive")
        if self.rate_limit_burst < 1:
            raise ConfigurationError("rate_limit_burst must be at least 1")
        if self.retry_max_attempts < 1:
            raise ConfigurationError("retry_max_attempts must be at least 1")
        if self.refresh_interval_seconds <= 0:
            raise ConfigurationError("refresh_interval_seconds must be positive")
        if self.state_backend not in ("memory", "redis"):
            raise ConfigurationError("state_backend must be 'memory' or 'redis'")
        if not self.metrics_path.startswith("/"):
            raise ConfigurationError("metrics_path must start with '/'")
        self.log_level = self.log_level.upper()
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Unknown log_level {self.log_level!r}")

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_token) or bool(self.api_key and self.api_email)

    @property
    def state_key(self) -> str:
        """Store key holding this tenant's collection state."""
        return f"{self.tenant}:metrics"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExporterConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Raises:
            ConfigurationError: If a value cannot be parsed or fails validation
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {
            "api_token": env.get("CF_API_TOKEN") or None,
            "api_key": env.get("CF_API_KEY") or None,
            "api_email": env.get("CF_API_EMAIL") or None,
            "metrics_denylist": frozenset(_parse_list(env.get("METRICS_DENYLIST"))),
            "zones": _parse_list(env.get("CF_ZONES")),
            "exclude_zones": _parse_list(env.get("CF_EXCLUDE_ZONES")),
        }

        ints = {
            "SCRAPE_DELAY": "scrape_delay",
            "TIME_WINDOW": "time_window",
            "CF_QUERY_LIMIT": "query_limit",
            "CF_BATCH_SIZE": "batch_size",
            "SSL_CONCURRENCY": "ssl_concurrency",
            "MAX_CONCURRENT_FETCHES": "max_concurrent_fetches",
            "RATE_LIMIT_BURST": "rate_limit_burst",
            "RETRY_MAX_ATTEMPTS": "retry_max_attempts",
        }
        floats = {
            "RATE_LIMIT_RPS": "rate_limit_rps",
            "REQUEST_TIMEOUT": "request_timeout",
            "DO_ALARM_INTERVAL": "refresh_interval_seconds",
            "REFRESH_INTERVAL": "refresh_interval_seconds",
        }
        bools = {
            "FREE_TIER": "free_tier",
            "EXCLUDE_HOST": "exclude_host",
            "CF_HTTP_STATUS_GROUP": "http_status_group",
        }
        strings = {
            "METRICS_PATH": "metrics_path",
            "STATE_BACKEND": "state_backend",
            "REDIS_URL": "redis_url",
            "STATE_NAMESPACE": "state_namespace",
            "TENANT": "tenant",
            "LOG_LEVEL": "log_level",
        }

        for var, attr in ints.items():
            if env.get(var):
                kwargs[attr] = _parse_number(var, env[var], int)
        # REFRESH_INTERVAL is listed after DO_ALARM_INTERVAL so it wins
        for var, attr in floats.items():
            if env.get(var):
                kwargs[attr] = _parse_number(var, env[var], float)
        for var, attr in bools.items():
            if env.get(var):
                kwargs[attr] = _parse_bool(var, env[var])
        for var, attr in strings.items():
            if env.get(var):
                kwargs[attr] = env[var].strip()
        if env.get("LISTEN"):
            kwargs["listen_host"], kwargs["listen_port"] = _parse_listen(env["LISTEN"])

        return cls(**kwargs)


__all__ = ["MAX_BATCH_SIZE", "ExporterConfig"]
