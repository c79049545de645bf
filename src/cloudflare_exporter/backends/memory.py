# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
MemoryStateStore for the Cloudflare exporter

This module provides an in-memory state store that doesn't require Redis.
State does not survive a restart, which is fine for a single process
whose counters may start from zero after a deploy.
"""

import asyncio
import copy
import logging
from typing import Any

from .base import BaseStateStore, HealthCheckResult

logger = logging.getLogger(__name__)


class MemoryStateStore(BaseStateStore):
    """
    In-memory state store.

    Documents are deep-copied on the way in and out, so callers never share
    mutable structure with the store.
    """

    def __init__(self, namespace: str = "cloudflare_exporter") -> None:
        super().__init__(namespace)
        self._states: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        logger.debug(f"Initialized MemoryStateStore with namespace '{namespace}'")

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get_state(self, key: str) -> dict[str, Any] | None:
        async with self._lock:
            state = self._states.get(self._key(key))
            return copy.deepcopy(state) if state is not None else None

    async def set_state(self, key: str, state: dict[str, Any]) -> None:
        async with self._lock:
            self._states[self._key(key)] = copy.deepcopy(state)

    async def delete_state(self, key: str) -> None:
        async with self._lock:
            self._states.pop(self._key(key), None)

    async def health_check(self) -> HealthCheckResult:
        async with self._lock:
            stored = len(self._states)
        return HealthCheckResult(
            healthy=True,
            backend_type="memory",
            namespace=self.namespace,
            metadata={"stored_documents": stored},
        )


__all__ = ["MemoryStateStore"]
