# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for the Cloudflare analytics client."""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from ..types.inventory import Account, SSLCertificate, TimeWindow, Zone

ZoneRows = list[dict[str, Any]]
"""``viewer.zones`` entries of a GraphQL response, each carrying a ``zoneTag``."""

AccountRows = list[dict[str, Any]]
"""``viewer.accounts`` entries of a GraphQL response."""


@runtime_checkable
class UpstreamClientProtocol(Protocol):
    """
    Interface the fetch orchestrator needs from an upstream client.

    Zone-scoped categories take a batch of zone IDs (at most 10) and the
    cycle's time window; account-scoped categories take one account ID.
    Every method raises UpstreamError for transport failures and
    QueryError for GraphQL error payloads. Implementations are expected to
    rate limit and retry internally.
    """

    # Inventory

    async def fetch_zones(self) -> list[Zone]: ...

    async def fetch_accounts(self) -> list[Account]: ...

    # Zone-scoped REST lookups

    async def fetch_firewall_rules(self, zone_id: str) -> dict[str, str]:
        """Map of firewall rule / ruleset ID to its description."""
        ...

    async def fetch_ssl_certificates(self, zone_id: str) -> list[SSLCertificate]: ...

    # Zone-scoped GraphQL categories

    async def fetch_http_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_firewall_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_health_check_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_adaptive_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_edge_country_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_request_method_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_colo_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_colo_error_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_load_balancer_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    async def fetch_logpush_zone_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows: ...

    # Account-scoped GraphQL categories

    async def fetch_worker_totals(
        self, account_id: str, window: TimeWindow
    ) -> AccountRows: ...

    async def fetch_logpush_account_metrics(
        self, account_id: str, window: TimeWindow
    ) -> AccountRows: ...

    async def fetch_magic_transit_metrics(
        self, account_id: str, window: TimeWindow
    ) -> AccountRows: ...


__all__ = ["AccountRows", "UpstreamClientProtocol", "ZoneRows"]
