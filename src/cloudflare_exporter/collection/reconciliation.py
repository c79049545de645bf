# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reconciliation of per-window snapshots into monotonic counters.

The analytics API reports what happened inside a query window, not a
running total. Publishing those values directly as counters would make
them go up and down between scrapes. The engine keeps, per counter
series, the last raw reading and an accumulated total:

- first reading: the full value is credited
- raw >= previous: the difference is credited
- raw < previous: treated as a reset, the new raw value is credited

The accumulated total therefore never decreases. Gauges are simply
overwritten with the latest reading.
"""

import logging
from collections.abc import Iterable

from ..scheduler.state.models import CollectionState, CounterState, GaugeState
from ..types.identity import MetricIdentity
from ..types.observation import CycleResult

logger = logging.getLogger(__name__)


def compute_delta(previous_raw: float, raw: float) -> float:
    """Amount credited for a new raw reading given the previous one."""
    return raw if raw < previous_raw else raw - previous_raw


def _collapse(
    readings: Iterable[tuple[MetricIdentity, float]],
) -> dict[MetricIdentity, float]:
    """Keep the last reading per identity, in first-seen order."""
    latest: dict[MetricIdentity, float] = {}
    for identity, value in readings:
        latest[identity] = value
    return latest


class ReconciliationEngine:
    """
    Folds a CycleResult into a CollectionState.

    The engine is stateless apart from its denylist; ``apply`` never
    mutates the prior state and always returns a fresh instance.
    """

    def __init__(self, denylist: Iterable[str] = ()) -> None:
        """
        Initialize the engine.

        Args:
            denylist: Metric names that are never recorded
        """
        self.denylist = frozenset(denylist)

    def apply(self, result: CycleResult, prior: CollectionState) -> CollectionState:
        """
        Produce the state that results from applying ``result`` to ``prior``.

        Series absent from ``result`` keep their previous state. Timestamps
        and error fields are carried over unchanged; the refresh actor owns
        those.
        """
        counters = dict(prior.counters)
        gauges = dict(prior.gauges)

        for identity, raw in _collapse(result.counters).items():
            if identity.name in self.denylist:
                continue
            if raw < 0:
                logger.warning(f"Ignoring negative raw reading {raw} for {identity}")
                continue
            key = identity.key
            existing = counters.get(key)
            if existing is None:
                counters[key] = CounterState(
                    name=identity.name,
                    labels=identity.label_dict(),
                    last_raw_value=raw,
                    accumulated_total=raw,
                )
            else:
                counters[key] = existing.model_copy(
                    update={
                        "last_raw_value": raw,
                        "accumulated_total": existing.accumulated_total
                        + compute_delta(existing.last_raw_value, raw),
                    }
                )

        for identity, value in _collapse(result.gauges).items():
            if identity.name in self.denylist:
                continue
            gauges[identity.key] = GaugeState(
                name=identity.name, labels=identity.label_dict(), value=value
            )

        return prior.model_copy(
            update={
                "counters": counters,
                "gauges": gauges,
                "cycles_completed": prior.cycles_completed + 1,
            }
        )


__all__ = ["ReconciliationEngine", "compute_delta"]
