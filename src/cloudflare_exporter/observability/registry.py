# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Prometheus exposition of the collection state.

The registry renders a CollectionState snapshot with prometheus_client.
Each call builds a one-shot collector and a fresh CollectorRegistry, so a
render only ever sees the snapshot it was handed and nothing is
registered globally.

Usage:
    >>> registry = MetricsRegistry(denylist={"cloudflare_zone_uniques_total"})
    >>> body = registry.serialize(state)
"""

import logging
import time
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from ..exceptions import SerializationError
from ..scheduler.state.models import CollectionState, CounterState, GaugeState
from .definitions import COUNTER, GAUGE, METRIC_DEFINITIONS, MetricDefinition

logger = logging.getLogger(__name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"
"""Content type of the text exposition format served on the metrics path."""


def exposed_name(name: str, metric_type: str) -> str:
    """Name a series is published under; counters carry a single ``_total`` suffix."""
    if metric_type == COUNTER and not name.endswith("_total"):
        return f"{name}_total"
    return name


class _SnapshotCollector:
    """Collector yielding a fixed list of metric families."""

    def __init__(self, families: list[Metric]) -> None:
        self._families = families

    def collect(self) -> Iterator[Metric]:
        return iter(self._families)


class MetricsRegistry:
    """
    Renders collection state in the Prometheus text format.

    Args:
        definitions: Metric catalog used for types and HELP text
        denylist: Names never rendered (stored or exposed form)
    """

    def __init__(
        self,
        definitions: Mapping[str, MetricDefinition] | None = None,
        denylist: Iterable[str] = (),
    ) -> None:
        self.definitions = dict(METRIC_DEFINITIONS if definitions is None else definitions)
        self.denylist = frozenset(denylist)

    def _is_denied(self, name: str, metric_type: str) -> bool:
        return name in self.denylist or exposed_name(name, metric_type) in self.denylist

    def _resolve_type(self, name: str, has_counter_state: bool) -> str:
        definition = self.definitions.get(name)
        if definition is not None:
            return definition.metric_type
        return COUNTER if has_counter_state else GAUGE

    def _help(self, name: str) -> str:
        definition = self.definitions.get(name)
        return definition.description if definition else f"Cloudflare metric {name}"

    def build_families(self, state: CollectionState) -> list[Metric]:
        """Group the snapshot's series into one metric family per name."""
        counters: dict[str, list[CounterState]] = defaultdict(list)
        gauges: dict[str, list[GaugeState]] = defaultdict(list)
        for counter in state.counters.values():
            counters[counter.name].append(counter)
        for gauge in state.gauges.values():
            gauges[gauge.name].append(gauge)

        families: list[Metric] = []
        for name in sorted(set(counters) | set(gauges)):
            metric_type = self._resolve_type(name, name in counters)
            if self._is_denied(name, metric_type):
                continue

            if metric_type == COUNTER:
                if name in gauges:
                    logger.warning(f"Dropping gauge samples for counter metric {name}")
                family: Metric = CounterMetricFamily(name, self._help(name))
                for counter in sorted(counters[name], key=lambda c: c.identity.key):
                    family.add_sample(
                        f"{family.name}_total", dict(counter.labels), counter.accumulated_total
                    )
            else:
                if name in counters:
                    logger.warning(f"Dropping counter samples for gauge metric {name}")
                family = GaugeMetricFamily(name, self._help(name))
                for gauge in sorted(gauges[name], key=lambda g: g.identity.key):
                    family.add_sample(name, dict(gauge.labels), gauge.value)

            if family.samples:
                families.append(family)
        return families

    def serialize(self, state: CollectionState, now: float | None = None) -> str:
        """
        Render ``state`` as a Prometheus text exposition.

        Args:
            state: Snapshot to render
            now: Epoch seconds used for the staleness comment (defaults to now)

        Returns:
            Exposition text followed by the staleness and last-error comments

        Raises:
            SerializationError: If the snapshot cannot be rendered
        """
        now = time.time() if now is None else now
        try:
            registry = CollectorRegistry(auto_describe=False)
            registry.register(_SnapshotCollector(self.build_families(state)))
            body = generate_latest(registry).decode("utf-8")
        except Exception as e:
            logger.exception("Failed to serialize metrics")
            raise SerializationError(f"Failed to serialize metrics: {e}") from e

        lines = [body.rstrip("\n")] if body else []
        lines.append(f"# Metrics staleness: {state.staleness_seconds(now)}s")
        if state.last_error:
            flattened = " ".join(state.last_error.splitlines())
            lines.append(f"# Last error: {flattened}")
        return "\n".join(lines) + "\n"


__all__ = ["CONTENT_TYPE_LATEST", "MetricsRegistry", "exposed_name"]
