# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability module for the Cloudflare exporter.

This module provides the metric catalog and the Prometheus serializer.

Main Components:
    MetricsRegistry: Renders a CollectionState in the text exposition format.
    METRIC_DEFINITIONS: Type and HELP text of every published metric.

Submodules:
    constants: Metric name constants.
    definitions: The metric catalog.
    registry: Serialization with prometheus_client.
"""

from .definitions import COUNTER, GAUGE, METRIC_DEFINITIONS, MetricDefinition
from .registry import CONTENT_TYPE_LATEST, MetricsRegistry, exposed_name

__all__ = [
    "CONTENT_TYPE_LATEST",
    "COUNTER",
    "GAUGE",
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "MetricsRegistry",
    "exposed_name",
]
