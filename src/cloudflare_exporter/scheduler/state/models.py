# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
State models for the Cloudflare exporter.

CollectionState is the single document persisted per tenant. It is
treated as immutable: reconciliation always produces a new instance and
the refresh actor swaps its reference in one assignment, so readers
never observe a half-applied cycle.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ...types.identity import MetricIdentity


class CounterState(BaseModel):
    """
    Durable accumulator for one counter series.

    Attributes:
        name: Metric name
        labels: Label set of the series
        last_raw_value: Most recent raw reading from upstream
        accumulated_total: Published, monotonically non-decreasing value
    """

    model_config = ConfigDict(frozen=True)

    name: str
    labels: dict[str, str] = Field(default_factory=dict)
    last_raw_value: float
    accumulated_total: float

    @property
    def identity(self) -> MetricIdentity:
        return MetricIdentity.of(self.name, self.labels)


class GaugeState(BaseModel):
    """Latest reading of one gauge series."""

    model_config = ConfigDict(frozen=True)

    name: str
    labels: dict[str, str] = Field(default_factory=dict)
    value: float

    @property
    def identity(self) -> MetricIdentity:
        return MetricIdentity.of(self.name, self.labels)


class CollectionState(BaseModel):
    """
    Everything the exporter knows, as of the last completed cycle.

    Attributes:
        counters: Counter series keyed by MetricIdentity.key
        gauges: Gauge series keyed by MetricIdentity.key
        last_fetch_timestamp: Epoch seconds of the last successful cycle
        last_error: Message of the last failed cycle, cleared on success
        next_refresh_at: Epoch seconds the next cycle is due (durable timer)
        cycles_completed: Number of cycles folded into this state
    """

    model_config = ConfigDict(frozen=True)

    counters: dict[str, CounterState] = Field(default_factory=dict)
    gauges: dict[str, GaugeState] = Field(default_factory=dict)
    last_fetch_timestamp: float | None = None
    last_error: str | None = None
    next_refresh_at: float | None = None
    cycles_completed: int = 0

    @model_validator(mode="after")
    def _validate_counters(self) -> "CollectionState":
        """Reject persisted documents whose counters went negative."""
        for key, counter in self.counters.items():
            if counter.accumulated_total < 0:
                raise ValueError(f"counter {key} has a negative accumulated total")
        return self

    def staleness_seconds(self, now: float) -> int:
        """Whole seconds since the last successful cycle, or -1 if there was none."""
        if self.last_fetch_timestamp is None:
            return -1
        return max(0, round(now - self.last_fetch_timestamp))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict for the state store."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CollectionState":
        """Rebuild a state from a dict produced by to_dict()."""
        return cls.model_validate(data)


__all__ = ["CollectionState", "CounterState", "GaugeState"]
