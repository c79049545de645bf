# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Refresh actor for the Cloudflare exporter.

The actor owns the collection state of one tenant. Scrapes only read the
current snapshot; the upstream API is queried exclusively from a timer
task, one cycle at a time. After every cycle the state (including the
time the next cycle is due) is written to the state store, so a restarted
process picks up both the accumulated counters and the pending timer.
"""

import asyncio
import contextlib
import logging
import math
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import ValidationError
from typing_extensions import Self

from ..backends.base import BaseStateStore
from ..collection.orchestrator import FetchOrchestrator
from ..collection.reconciliation import ReconciliationEngine
from ..exceptions import ExporterError
from ..observability.registry import MetricsRegistry
from .state.models import CollectionState

logger = logging.getLogger(__name__)


class ActorState(str, Enum):
    """Lifecycle states of the refresh actor."""

    UNINITIALIZED = "uninitialized"
    IDLE = "idle"
    REFRESHING = "refreshing"
    STOPPED = "stopped"


class RefreshActor:
    """
    Serializes refresh cycles and publishes immutable snapshots.

    The write path (timer, refresh, persist) runs under one asyncio lock.
    The read path (``snapshot``, ``metrics_text``, ``status``) only reads
    the current snapshot reference, which is replaced in a single
    assignment once a cycle has been persisted.

    Example:
        async with RefreshActor(orchestrator, store, state_key="default:metrics") as actor:
            actor.notify_scrape()
            body = actor.metrics_text()
    """

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        store: BaseStateStore,
        state_key: str = "default:metrics",
        refresh_interval: float = 60.0,
        engine: ReconciliationEngine | None = None,
        registry: MetricsRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the actor.

        Args:
            orchestrator: Produces one CycleResult per refresh
            store: Durable store for the collection state
            state_key: Key of this tenant's document in the store
            refresh_interval: Seconds between the end of one cycle and the next
            engine: Reconciliation engine (a default one when omitted)
            registry: Serializer used by metrics_text (a default one when omitted)
            clock: Epoch-seconds clock
        """
        if not math.isfinite(refresh_interval) or refresh_interval <= 0:
            raise ValueError(
                f"refresh_interval must be a positive finite number, got {refresh_interval}"
            )
        self.orchestrator = orchestrator
        self.store = store
        self.state_key = state_key
        self.refresh_interval = refresh_interval
        self.engine = engine or ReconciliationEngine()
        self.registry = registry or MetricsRegistry()
        self._clock = clock

        self._snapshot = CollectionState()
        self._state = ActorState.UNINITIALIZED
        self._lock = asyncio.Lock()
        self._timer_task: asyncio.Task[None] | None = None
        self._loaded = False

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    @property
    def state(self) -> ActorState:
        return self._state

    @property
    def snapshot(self) -> CollectionState:
        """The state as of the last completed cycle."""
        return self._snapshot

    @property
    def timer_armed(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def metrics_text(self, now: float | None = None) -> str:
        """Render the current snapshot; raises SerializationError on failure."""
        return self.registry.serialize(self._snapshot, now=self._clock() if now is None else now)

    def status(self) -> dict[str, Any]:
        snapshot = self._snapshot
        return {
            "state": self._state.value,
            "last_fetch": snapshot.last_fetch_timestamp,
            "last_error": snapshot.last_error,
            "next_refresh_at": snapshot.next_refresh_at,
            "state_loaded": self._loaded,
            "cycles_completed": snapshot.cycles_completed,
            "counter_count": len(snapshot.counters),
            "gauge_count": len(snapshot.gauges),
            "staleness_seconds": snapshot.staleness_seconds(self._clock()),
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        """Whether the persisted state has been read (or found absent)."""
        return self._loaded

    async def _load(self) -> bool:
        """
        Read the persisted state into the snapshot.

        A missing document or one that fails validation counts as loaded
        and leaves the snapshot empty. A store error does not count as
        loaded, and nothing is written back until a later load succeeds.
        """
        try:
            stored = await self.store.get_state(self.state_key)
        except ExporterError as e:
            logger.error(f"Failed to load state for {self.state_key}, persisting paused: {e}")
            return False

        if stored is not None:
            try:
                self._snapshot = CollectionState.from_dict(stored)
                logger.info(
                    f"Loaded state for {self.state_key}: "
                    f"{len(self._snapshot.counters)} counters, "
                    f"{len(self._snapshot.gauges)} gauges"
                )
            except ValidationError as e:
                logger.error(f"Discarding invalid state document for {self.state_key}: {e}")
        self._loaded = True
        return True

    async def start(self) -> None:
        """
        Load the persisted state and re-arm a pending timer.

        When the store cannot be read the actor still starts, and the load
        is retried at the beginning of every refresh.
        """
        if self._state is not ActorState.UNINITIALIZED:
            return
        await self._load()

        self._state = ActorState.IDLE
        if self._snapshot.next_refresh_at is not None:
            self._arm(self._snapshot.next_refresh_at)

    def notify_scrape(self) -> None:
        """Arm the refresh timer if it is not running. Never refreshes directly."""
        if self._state in (ActorState.UNINITIALIZED, ActorState.STOPPED):
            return
        if not self.timer_armed:
            self._arm(self._clock() + self.refresh_interval)

    def _arm(self, due_at: float) -> None:
        self._timer_task = asyncio.create_task(self._run_timer(due_at), name="refresh_timer")
        logger.debug(f"Refresh timer armed for {due_at:.0f}")

    async def _run_timer(self, due_at: float) -> None:
        while True:
            await asyncio.sleep(max(0.0, due_at - self._clock()))
            try:
                state = await self.refresh()
                due_at = state.next_refresh_at or self._clock() + self.refresh_interval
            except asyncio.CancelledError:
                raise  # Always re-raise for graceful shutdown
            except Exception:
                logger.exception(f"Refresh for {self.state_key} failed, rescheduling")
                due_at = self._clock() + self.refresh_interval

    async def stop(self) -> None:
        """Cancel the timer and any in-flight cycle."""
        self._state = ActorState.STOPPED
        if self._timer_task and not self._timer_task.done():
            self._timer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer_task
        self._timer_task = None
        logger.debug(f"Stopped refresh actor for {self.state_key}")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def refresh(self) -> CollectionState:
        """
        Run one cycle, persist the result and publish the new snapshot.

        Returns:
            The newly published snapshot
        """
        async with self._lock:
            if self._state is not ActorState.STOPPED:
                self._state = ActorState.REFRESHING
            try:
                if not self._loaded:
                    await self._load()
                state = await self._run_cycle(self._snapshot)
                state = state.model_copy(
                    update={"next_refresh_at": self._clock() + self.refresh_interval}
                )
                if self._loaded:
                    try:
                        await self.store.set_state(self.state_key, state.to_dict())
                    except ExporterError as e:
                        logger.error(f"Failed to persist state for {self.state_key}: {e}")
                else:
                    logger.warning(
                        f"Not persisting state for {self.state_key}: stored state not loaded yet"
                    )
                self._snapshot = state
                return state
            finally:
                if self._state is ActorState.REFRESHING:
                    self._state = ActorState.IDLE

    async def _run_cycle(self, prior: CollectionState) -> CollectionState:
        started = self._clock()
        try:
            result = await self.orchestrator.run_cycle()
        except asyncio.CancelledError:
            raise  # Always re-raise for graceful shutdown
        except Exception as e:
            logger.exception("Refresh cycle failed unexpectedly")
            return prior.model_copy(update={"last_error": str(e) or type(e).__name__})

        if not result.succeeded:
            logger.error(f"Refresh cycle failed: {result.error}")
            return prior.model_copy(update={"last_error": result.error})

        state = self.engine.apply(result, prior).model_copy(
            update={"last_fetch_timestamp": self._clock(), "last_error": None}
        )
        logger.info(
            f"Refresh cycle completed in {self._clock() - started:.1f}s: "
            f"{len(result.counters)} counter and {len(result.gauges)} gauge readings, "
            f"{len(result.failures)} failed fetches"
        )
        return state


__all__ = ["ActorState", "RefreshActor"]
