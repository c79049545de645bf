# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Collection state models."""

from .models import CollectionState, CounterState, GaugeState

__all__ = ["CollectionState", "CounterState", "GaugeState"]
