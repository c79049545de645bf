# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Per-cycle observation types.

A refresh cycle produces a CycleResult: raw counter readings and gauge
readings keyed by MetricIdentity, plus a record of every fetch slice that
failed. The reconciliation engine folds it into the durable state.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from .identity import MetricIdentity


@dataclass(frozen=True)
class FetchFailure:
    """
    A category fetch that failed and contributed nothing to the cycle.

    Attributes:
        category: Telemetry category name (e.g. ``http``, ``ssl``)
        scope: Batch index, zone id or account id the fetch covered
        error: Error message
    """

    category: str
    scope: str
    error: str


@dataclass
class CycleResult:
    """
    Output of one fetch cycle.

    Attributes:
        counters: Raw counter readings in fetch order
        gauges: Gauge readings in fetch order
        failures: Slices that failed and were substituted with nothing
        error: Set only when the cycle as a whole failed (inventory unavailable)
    """

    counters: list[tuple[MetricIdentity, float]] = field(default_factory=list)
    gauges: list[tuple[MetricIdentity, float]] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)
    error: str | None = None

    def add_counter(
        self, name: str, labels: Mapping[str, object] | None, value: float
    ) -> None:
        self.counters.append((MetricIdentity.of(name, labels), float(value)))

    def add_gauge(
        self, name: str, labels: Mapping[str, object] | None, value: float
    ) -> None:
        self.gauges.append((MetricIdentity.of(name, labels), float(value)))

    def extend(self, other: "CycleResult") -> None:
        """Append another result's readings and failures, preserving order."""
        self.counters.extend(other.counters)
        self.gauges.extend(other.gauges)
        self.failures.extend(other.failures)

    @property
    def succeeded(self) -> bool:
        return self.error is None


__all__ = ["CycleResult", "FetchFailure"]
