# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for exporter components.

Available protocols:
- UpstreamClientProtocol: Interface for clients of the Cloudflare analytics API

Supporting types:
- ZoneRows / AccountRows: Raw GraphQL ``viewer`` entries returned by category fetches
"""

from .client import AccountRows, UpstreamClientProtocol, ZoneRows

__all__ = [
    "AccountRows",
    "UpstreamClientProtocol",
    "ZoneRows",
]
