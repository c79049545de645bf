# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base State Store for the Cloudflare exporter

This module provides the BaseStateStore abstract class that defines the
interface for persisting the collection state between process restarts.

The store is a plain key/value document store: the refresh actor reads
one JSON-compatible document per tenant at startup and writes it back
after every cycle.
"""

import abc
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class HealthCheckResult:
    """
    Structured health check result for backend monitoring.

    Attributes:
        healthy: Whether the backend is operational
        backend_type: Type of backend (e.g., 'redis', 'memory')
        namespace: Backend namespace
        error: Error message if unhealthy
        metadata: Additional backend-specific information
    """

    healthy: bool
    backend_type: str
    namespace: str
    error: str | None = None
    metadata: dict[str, Any] | None = None


class BaseStateStore(abc.ABC):
    """
    Abstract base class for collection state stores.

    Implementations must tolerate concurrent calls from one event loop and
    must return documents that the caller may freely mutate.
    """

    def __init__(self, namespace: str = "cloudflare_exporter"):
        """
        Initialize the store with a namespace for isolation.

        Args:
            namespace: Namespace for isolating data across deployments
        """
        self.namespace = namespace

    @abc.abstractmethod
    async def get_state(self, key: str) -> dict[str, Any] | None:
        """
        Get the document stored under a key.

        Args:
            key: The key to retrieve

        Returns:
            The stored document, or None if nothing is stored

        Raises:
            BackendConnectionError: If the store cannot be reached
            BackendOperationError: If the stored document cannot be read
        """
        pass

    @abc.abstractmethod
    async def set_state(self, key: str, state: dict[str, Any]) -> None:
        """
        Store a document under a key, replacing any previous one.

        Raises:
            BackendConnectionError: If the store cannot be reached
            BackendOperationError: If the document cannot be written
        """
        pass

    @abc.abstractmethod
    async def delete_state(self, key: str) -> None:
        """Remove the document stored under a key, if any."""
        pass

    @abc.abstractmethod
    async def health_check(self) -> HealthCheckResult:
        """Perform a health check on the store."""
        pass

    async def close(self) -> None:  # noqa: B027
        """Release store resources. The default does nothing."""


__all__ = ["BaseStateStore", "HealthCheckResult"]
