# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Scheduling of refresh cycles.

The refresh actor lives in ``cloudflare_exporter.scheduler.actor``; this
package only re-exports the state models, which the collection pipeline
also depends on.
"""

from .state import CollectionState, CounterState, GaugeState

__all__ = ["CollectionState", "CounterState", "GaugeState"]
