# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .identity import MetricIdentity
from .inventory import (
    FREE_PLAN_ID,
    Account,
    SSLCertificate,
    TimeWindow,
    Zone,
    ZoneAccount,
    ZonePlan,
    normalize_account_name,
)
from .observation import CycleResult, FetchFailure

__all__ = [
    "FREE_PLAN_ID",
    # Inventory types
    "Account",
    # Cycle output
    "CycleResult",
    "FetchFailure",
    # Metric identity
    "MetricIdentity",
    "SSLCertificate",
    "TimeWindow",
    "Zone",
    "ZoneAccount",
    "ZonePlan",
    "normalize_account_name",
]
