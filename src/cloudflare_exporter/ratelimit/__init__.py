# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Upstream call pacing: token bucket limiter and retry policy."""

from .bucket import TokenBucketLimiter
from .retry import RetryPolicy

__all__ = ["RetryPolicy", "TokenBucketLimiter"]
