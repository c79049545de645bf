# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Cloudflare API client.

Implements UpstreamClientProtocol on top of httpx. Every HTTP request takes
a token from the shared TokenBucketLimiter and runs under the RetryPolicy,
so callers only ever see the final outcome of a call.

Error mapping:
- HTTP 429 -> UpstreamError(status_code=429, retryable=True)
- other non-2xx -> UpstreamError(status_code, retryable=status >= 500)
- connection errors and timeouts -> UpstreamError(retryable=True)
- GraphQL ``errors`` payload -> QueryError (never retried)
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from typing_extensions import Self

from ..config import ExporterConfig
from ..exceptions import AuthenticationError, ExporterError, QueryError, UpstreamError
from ..protocols.client import AccountRows, ZoneRows
from ..ratelimit import RetryPolicy, TokenBucketLimiter
from ..types.inventory import Account, SSLCertificate, TimeWindow, Zone
from . import queries

logger = logging.getLogger(__name__)

CF_API_BASE_URL = "https://api.cloudflare.com/client/v4"
ZONES_PAGE_SIZE = 50
ACCOUNTS_PAGE_SIZE = 50


def build_auth_headers(config: ExporterConfig) -> dict[str, str]:
    """
    Build authentication headers from the configured credentials.

    An API token takes precedence over the legacy key/email pair.

    Raises:
        AuthenticationError: If neither credential form is configured
    """
    if config.api_token:
        return {"Authorization": f"Bearer {config.api_token}"}
    if config.api_key and config.api_email:
        return {"X-Auth-Email": config.api_email, "X-Auth-Key": config.api_key}
    raise AuthenticationError(
        "No valid authentication provided: set CF_API_TOKEN, "
        "or CF_API_KEY together with CF_API_EMAIL"
    )


class CloudflareClient:
    """
    Rate-limited, retrying client for the Cloudflare GraphQL and REST APIs.

    Example:
        async with CloudflareClient(config) as client:
            zones = await client.fetch_zones()
    """

    def __init__(
        self,
        config: ExporterConfig,
        limiter: TokenBucketLimiter | None = None,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = CF_API_BASE_URL,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Exporter configuration (credentials, query limit, timeouts)
            limiter: Shared limiter; built from the config when omitted
            retry_policy: Retry policy; built from the config when omitted
            http_client: Pre-configured httpx client (tests inject a MockTransport)
            base_url: API root

        Raises:
            AuthenticationError: If no credentials are configured
        """
        self._headers = build_auth_headers(config)
        self._config = config
        self.base_url = base_url.rstrip("/")
        self.limiter = limiter or TokenBucketLimiter(
            config.rate_limit_rps, config.rate_limit_burst
        )
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        )
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.request_timeout),
            headers={"Content-Type": "application/json"},
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one HTTP attempt and decode the JSON body."""
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.request(
                method, url, headers=self._headers, params=params, json=payload
            )
        except httpx.HTTPError as e:
            raise UpstreamError(
                f"{method} {path} failed: {e.__class__.__name__}: {e}", retryable=True
            ) from e

        if response.status_code == 429:
            raise UpstreamError(
                "Rate limited by Cloudflare API", status_code=429, retryable=True
            )
        if response.is_error:
            raise UpstreamError(
                f"{method} {path} failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                retryable=response.status_code >= 500,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{method} {path} returned invalid JSON",
                status_code=response.status_code,
                retryable=False,
            ) from e

    async def _rest(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.retry_policy.call(
            lambda: self._send("GET", path, params=params),
            limiter=self.limiter,
            description=f"GET {path}",
        )

    async def _graphql_once(
        self, query: str, variables: dict[str, Any]
    ) -> dict[str, Any]:
        body = await self._send(
            "POST", "/graphql", payload={"query": query, "variables": variables}
        )
        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            raise QueryError([str(err.get("message", err)) for err in errors])
        if not isinstance(body, dict):
            raise UpstreamError("GraphQL response is not an object", retryable=False)
        return body.get("data") or {}

    async def _graphql(
        self, query: str, variables: dict[str, Any], description: str
    ) -> dict[str, Any]:
        return await self.retry_policy.call(
            lambda: self._graphql_once(query, variables),
            limiter=self.limiter,
            description=description,
        )

    async def _zone_query(
        self, category: str, query: str, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        data = await self._graphql(
            query,
            {
                "zoneIDs": list(zone_ids),
                "mintime": window.mintime_iso,
                "maxtime": window.maxtime_iso,
                "limit": self._config.query_limit,
            },
            description=f"{category} query for {len(zone_ids)} zone(s)",
        )
        viewer = data.get("viewer") or {}
        return list(viewer.get("zones") or [])

    async def _account_query(
        self, category: str, query: str, account_id: str, window: TimeWindow
    ) -> AccountRows:
        data = await self._graphql(
            query,
            {
                "accountID": account_id,
                "mintime": window.mintime_iso,
                "maxtime": window.maxtime_iso,
                "limit": self._config.query_limit,
            },
            description=f"{category} query for account {account_id}",
        )
        viewer = data.get("viewer") or {}
        return list(viewer.get("accounts") or [])

    async def _paginate(self, path: str, per_page: int) -> list[dict[str, Any]]:
        """Collect ``result`` entries across all pages of a REST listing."""
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            body = await self._rest(path, params={"page": page, "per_page": per_page})
            items.extend(body.get("result") or [])
            total_pages = (body.get("result_info") or {}).get("total_pages") or 1
            if page >= total_pages:
                return items
            page += 1

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    async def fetch_zones(self) -> list[Zone]:
        return [Zone.model_validate(z) for z in await self._paginate("/zones", ZONES_PAGE_SIZE)]

    async def fetch_accounts(self) -> list[Account]:
        return [
            Account.model_validate(a)
            for a in await self._paginate("/accounts", ACCOUNTS_PAGE_SIZE)
        ]

    async def fetch_firewall_rules(self, zone_id: str) -> dict[str, str]:
        """
        Map firewall rule IDs and managed ruleset IDs to human-readable descriptions.

        Either lookup may fail on its own (plans without the feature answer
        403) and then contributes no entries.

        Raises:
            ExporterError: The error of the rulesets lookup when both lookups fail
        """
        rules: dict[str, str] = {}
        rules_failed = False
        try:
            body = await self._rest(f"/zones/{zone_id}/firewall/rules")
            for rule in body.get("result") or []:
                if rule.get("description"):
                    rules[rule["id"]] = rule["description"]
        except ExporterError as e:
            rules_failed = True
            logger.debug(f"Firewall rules unavailable for zone {zone_id}: {e}")
        try:
            body = await self._rest(f"/zones/{zone_id}/rulesets")
            for ruleset in body.get("result") or []:
                rules[ruleset["id"]] = ruleset.get("description") or ruleset.get("name", "")
        except ExporterError as e:
            if rules_failed:
                raise
            logger.debug(f"Rulesets unavailable for zone {zone_id}: {e}")
        return rules

    async def fetch_ssl_certificates(self, zone_id: str) -> list[SSLCertificate]:
        body = await self._rest(f"/zones/{zone_id}/ssl/certificate_packs")
        return [SSLCertificate.model_validate(c) for c in body.get("result") or []]

    # ------------------------------------------------------------------
    # Zone-scoped categories
    # ------------------------------------------------------------------

    async def fetch_http_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query("http", queries.HTTP_QUERY, zone_ids, window)

    async def fetch_firewall_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query("firewall", queries.FIREWALL_QUERY, zone_ids, window)

    async def fetch_health_check_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query(
            "health_check", queries.HEALTH_CHECK_QUERY, zone_ids, window
        )

    async def fetch_adaptive_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query("adaptive", queries.ADAPTIVE_QUERY, zone_ids, window)

    async def fetch_edge_country_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query(
            "edge_country", queries.EDGE_COUNTRY_QUERY, zone_ids, window
        )

    async def fetch_request_method_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query(
            "request_method", queries.REQUEST_METHOD_QUERY, zone_ids, window
        )

    async def fetch_colo_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query("colo", queries.COLO_QUERY, zone_ids, window)

    async def fetch_colo_error_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query(
            "colo_error", queries.COLO_ERROR_QUERY, zone_ids, window
        )

    async def fetch_load_balancer_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query(
            "load_balancer", queries.LOAD_BALANCER_QUERY, zone_ids, window
        )

    async def fetch_logpush_zone_metrics(
        self, zone_ids: Sequence[str], window: TimeWindow
    ) -> ZoneRows:
        return await self._zone_query(
            "logpush_zone", queries.LOGPUSH_ZONE_QUERY, zone_ids, window
        )

    # ------------------------------------------------------------------
    # Account-scoped categories
    # ------------------------------------------------------------------

    async def fetch_worker_totals(
        self, account_id: str, window: TimeWindow
    ) -> AccountRows:
        return await self._account_query(
            "workers", queries.WORKER_TOTALS_QUERY, account_id, window
        )

    async def fetch_logpush_account_metrics(
        self, account_id: str, window: TimeWindow
    ) -> AccountRows:
        return await self._account_query(
            "logpush_account", queries.LOGPUSH_ACCOUNT_QUERY, account_id, window
        )

    async def fetch_magic_transit_metrics(
        self, account_id: str, window: TimeWindow
    ) -> AccountRows:
        return await self._account_query(
            "magic_transit", queries.MAGIC_TRANSIT_QUERY, account_id, window
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.aclose()


__all__ = ["CF_API_BASE_URL", "CloudflareClient", "build_auth_headers"]
