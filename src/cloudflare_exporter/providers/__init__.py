# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Upstream provider implementations."""

from .cloudflare import CF_API_BASE_URL, CloudflareClient, build_auth_headers

__all__ = ["CF_API_BASE_URL", "CloudflareClient", "build_auth_headers"]
