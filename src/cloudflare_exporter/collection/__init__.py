# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Collection pipeline: fetch orchestration, label mapping and reconciliation.
"""

from .mapper import LabelMapper, status_bucket
from .orchestrator import (
    ACCOUNT_CATEGORIES,
    ALL_CATEGORIES,
    BASE_CATEGORIES,
    PREMIUM_CATEGORIES,
    FetchOrchestrator,
    FetchSlice,
    batched,
    filter_zones,
)
from .reconciliation import ReconciliationEngine, compute_delta

__all__ = [
    "ACCOUNT_CATEGORIES",
    "ALL_CATEGORIES",
    "BASE_CATEGORIES",
    "PREMIUM_CATEGORIES",
    "FetchOrchestrator",
    "FetchSlice",
    "LabelMapper",
    "ReconciliationEngine",
    "batched",
    "compute_delta",
    "filter_zones",
    "status_bucket",
]
