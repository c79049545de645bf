# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Label mapping from raw analytics rows to metric observations.

Each ``map_*`` method takes the rows of one category fetch and appends
counter and gauge readings to a CycleResult. Rows whose labels collapse
onto the same series (for example when the host label is dropped) are
summed for counters; for gauges the last row wins.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..observability import constants as m
from ..types.identity import MetricIdentity
from ..types.inventory import Account, SSLCertificate, Zone, normalize_account_name
from ..types.observation import CycleResult

logger = logging.getLogger(__name__)

STATUS_BUCKETS = ("1xx", "2xx", "3xx", "4xx", "5xx")
WORKER_QUANTILES = ("P50", "P75", "P99", "P999")


def _num(value: Any) -> float:
    return float(value or 0)


def status_bucket(code: int) -> str:
    """Fold an HTTP status code into its 1xx..5xx bucket."""
    if code < 200:
        return "1xx"
    if code < 300:
        return "2xx"
    if code < 400:
        return "3xx"
    if code < 500:
        return "4xx"
    return "5xx"


class _CounterSums:
    """Sums counter readings per series before they are emitted."""

    def __init__(self) -> None:
        self._sums: dict[MetricIdentity, float] = {}

    def add(self, name: str, labels: Mapping[str, object], value: Any) -> None:
        identity = MetricIdentity.of(name, labels)
        self._sums[identity] = self._sums.get(identity, 0.0) + _num(value)

    def flush(self, result: CycleResult) -> None:
        result.counters.extend(self._sums.items())


class LabelMapper:
    """
    Turns raw category rows into labelled observations.

    Args:
        exclude_host: Drop the ``host`` label from host-dimensioned series
        http_status_group: Fold edge status codes into 1xx..5xx buckets
    """

    def __init__(self, exclude_host: bool = True, http_status_group: bool = False):
        self.exclude_host = exclude_host
        self.http_status_group = http_status_group

    # ------------------------------------------------------------------
    # Label helpers
    # ------------------------------------------------------------------

    @staticmethod
    def zone_labels(zone: Zone) -> dict[str, str]:
        return {"zone": zone.name, "account": normalize_account_name(zone.account.name)}

    def with_host(self, labels: dict[str, str], host: str | None) -> dict[str, str]:
        if self.exclude_host or not host:
            return labels
        return {**labels, "host": host}

    @staticmethod
    def _zone_entries(
        rows: Iterable[dict[str, Any]], zones: Mapping[str, Zone]
    ) -> Iterable[tuple[Zone, dict[str, Any]]]:
        """Pair each ``viewer.zones`` entry with its inventory zone; unknown tags are skipped."""
        for entry in rows:
            zone = zones.get(entry.get("zoneTag", ""))
            if zone is None:
                logger.debug(f"Skipping rows for unknown zone {entry.get('zoneTag')!r}")
                continue
            yield zone, entry

    # ------------------------------------------------------------------
    # Zone categories
    # ------------------------------------------------------------------

    def map_http(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        for zone, entry in self._zone_entries(rows, zones):
            groups = entry.get("httpRequests1mGroups") or []
            if not groups:
                continue
            base = self.zone_labels(zone)
            sums = _CounterSums()
            requests = cached_requests = 0.0

            for group in groups:
                total = group.get("sum") or {}
                uniq = group.get("uniq") or {}
                requests += _num(total.get("requests"))
                cached_requests += _num(total.get("cachedRequests"))

                sums.add(m.ZONE_REQUESTS_TOTAL, base, total.get("requests"))
                sums.add(m.ZONE_REQUESTS_SSL_ENCRYPTED, base, total.get("encryptedRequests"))
                sums.add(m.ZONE_BANDWIDTH_TOTAL, base, total.get("bytes"))
                sums.add(m.ZONE_BANDWIDTH_CACHED, base, total.get("cachedBytes"))
                sums.add(m.ZONE_BANDWIDTH_SSL_ENCRYPTED, base, total.get("encryptedBytes"))
                sums.add(m.ZONE_THREATS_TOTAL, base, total.get("threats"))
                sums.add(m.ZONE_PAGEVIEWS_TOTAL, base, total.get("pageViews"))
                sums.add(m.ZONE_UNIQUES_TOTAL, base, uniq.get("uniques"))

                for ct in total.get("contentTypeMap") or []:
                    labels = {**base, "content_type": ct.get("edgeResponseContentTypeName", "")}
                    sums.add(m.ZONE_REQUESTS_CONTENT_TYPE, labels, ct.get("requests"))
                    sums.add(m.ZONE_BANDWIDTH_CONTENT_TYPE, labels, ct.get("bytes"))

                for country in total.get("countryMap") or []:
                    labels = {**base, "country": country.get("clientCountryName", "")}
                    sums.add(m.ZONE_REQUESTS_COUNTRY, labels, country.get("requests"))
                    sums.add(m.ZONE_BANDWIDTH_COUNTRY, labels, country.get("bytes"))
                    sums.add(m.ZONE_THREATS_COUNTRY, labels, country.get("threats"))

                if self.http_status_group:
                    for bucket in STATUS_BUCKETS:
                        sums.add(m.ZONE_REQUESTS_STATUS, {**base, "status": bucket}, 0)
                for status in total.get("responseStatusMap") or []:
                    code = int(status.get("edgeResponseStatus") or 0)
                    label = status_bucket(code) if self.http_status_group else str(code)
                    sums.add(
                        m.ZONE_REQUESTS_STATUS, {**base, "status": label}, status.get("requests")
                    )

                for browser in total.get("browserMap") or []:
                    sums.add(
                        m.ZONE_REQUESTS_BROWSER,
                        {**base, "family": browser.get("uaBrowserFamily", "")},
                        browser.get("pageViews"),
                    )

                for threat in total.get("threatPathingMap") or []:
                    sums.add(
                        m.ZONE_THREATS_TYPE,
                        {**base, "type": threat.get("threatPathingName", "")},
                        threat.get("requests"),
                    )

            sums.flush(result)
            result.add_gauge(m.ZONE_REQUESTS_CACHED, base, cached_requests)
            if requests > 0:
                result.add_gauge(m.ZONE_CACHE_HIT_RATIO, base, cached_requests / requests)

    def map_firewall(
        self,
        rows: list[dict[str, Any]],
        zones: Mapping[str, Zone],
        firewall_rules: Mapping[str, str],
        result: CycleResult,
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for event in entry.get("firewallEventsAdaptiveGroups") or []:
                dims = event.get("dimensions") or {}
                count = event.get("count")
                action = dims.get("action", "")
                rule_id = dims.get("ruleId", "")
                host = dims.get("clientRequestHTTPHost")

                sums.add(m.ZONE_FIREWALL_EVENTS_COUNT, base, count)
                sums.add(
                    m.ZONE_FIREWALL_REQUEST_ACTION,
                    {**base, "action": action, "rule": firewall_rules.get(rule_id, rule_id)},
                    count,
                )
                sums.add(
                    m.ZONE_BOT_REQUEST_BY_COUNTRY,
                    self.with_host(
                        {**base, "country": dims.get("clientCountryName", ""), "action": action},
                        host,
                    ),
                    count,
                )
                sums.add(
                    m.ZONE_FIREWALL_BOTS_DETECTED,
                    self.with_host(
                        {**base, "source": dims.get("source", ""), "action": action}, host
                    ),
                    count,
                )
        sums.flush(result)

    def map_health_checks(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            groups = entry.get("healthCheckEventsAdaptiveGroups") or []
            total_events = 0.0
            for group in groups:
                dims = group.get("dimensions") or {}
                total_events += _num(group.get("count"))
                sums.add(
                    m.ZONE_HEALTH_CHECK_EVENTS_ORIGIN_COUNT,
                    {
                        **base,
                        "health_status": dims.get("healthStatus", ""),
                        "origin_ip": dims.get("originIP", ""),
                        "fqdn": dims.get("fqdn", ""),
                    },
                    group.get("count"),
                )
            if groups:
                result.add_gauge(m.ZONE_HEALTH_CHECK_EVENTS_AVG, base, total_events / len(groups))
        sums.flush(result)

    def map_adaptive(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for group in entry.get("httpRequestsAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                status = int(dims.get("originResponseStatus") or 0)
                if status == 0:
                    continue
                labels = self.with_host(
                    {**base, "status": str(status), "country": dims.get("clientCountryName", "")},
                    dims.get("clientRequestHTTPHost"),
                )
                count = group.get("count")
                sums.add(m.ZONE_REQUESTS_ORIGIN_STATUS_COUNTRY_HOST, labels, count)
                result.add_gauge(
                    m.ZONE_ORIGIN_RESPONSE_DURATION_MS,
                    labels,
                    _num((group.get("avg") or {}).get("originResponseDurationMs")),
                )
                # 499 is a client-closed request, not a customer error
                if 400 <= status < 500 and status != 499:
                    sums.add(m.ZONE_CUSTOMER_ERROR_4XX_RATE, labels, count)
                elif status >= 500:
                    sums.add(m.ZONE_CUSTOMER_ERROR_5XX_RATE, labels, count)
        sums.flush(result)

    def map_edge_country(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for group in entry.get("httpRequestsEdgeCountryHost") or []:
                dims = group.get("dimensions") or {}
                status = int(dims.get("edgeResponseStatus") or 0)
                labels = self.with_host(
                    {**base, "status": str(status), "country": dims.get("clientCountryName", "")},
                    dims.get("clientRequestHTTPHost"),
                )
                sums.add(m.ZONE_REQUESTS_STATUS_COUNTRY_HOST, labels, group.get("count"))
                if 400 <= status < 600:
                    result.add_gauge(m.ZONE_EDGE_ERROR_RATE, labels, 1)
        sums.flush(result)

    def map_request_method(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for group in entry.get("httpRequestsAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                sums.add(
                    m.ZONE_REQUEST_METHOD_COUNT,
                    {**base, "method": dims.get("clientRequestHTTPMethodName", "")},
                    group.get("count"),
                )
        sums.flush(result)

    def map_colo(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for group in entry.get("httpRequestsAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                total = group.get("sum") or {}
                labels = self.with_host(
                    {**base, "colocation": dims.get("coloCode", "")},
                    dims.get("clientRequestHTTPHost"),
                )
                sums.add(m.ZONE_COLOCATION_VISITS, labels, total.get("visits"))
                sums.add(
                    m.ZONE_COLOCATION_EDGE_RESPONSE_BYTES, labels, total.get("edgeResponseBytes")
                )
                sums.add(m.ZONE_COLOCATION_REQUESTS_TOTAL, labels, group.get("count"))
        sums.flush(result)

    def map_colo_error(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for group in entry.get("httpRequestsAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                total = group.get("sum") or {}
                labels = self.with_host(
                    {
                        **base,
                        "colocation": dims.get("coloCode", ""),
                        "status": str(dims.get("edgeResponseStatus", "")),
                    },
                    dims.get("clientRequestHTTPHost"),
                )
                sums.add(m.ZONE_COLOCATION_VISITS_ERROR, labels, total.get("visits"))
                sums.add(
                    m.ZONE_COLOCATION_EDGE_RESPONSE_BYTES_ERROR,
                    labels,
                    total.get("edgeResponseBytes"),
                )
                sums.add(m.ZONE_COLOCATION_REQUESTS_TOTAL_ERROR, labels, group.get("count"))
        sums.flush(result)

    def map_load_balancer(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for group in entry.get("loadBalancingRequestsAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                sums.add(
                    m.POOL_REQUESTS_TOTAL,
                    {
                        **base,
                        "load_balancer_name": dims.get("lbName", ""),
                        "pool_name": dims.get("selectedPoolName", ""),
                        "origin_name": dims.get("selectedOriginName", ""),
                    },
                    group.get("count"),
                )
            for lb in entry.get("loadBalancingRequestsAdaptive") or []:
                for pool in lb.get("pools") or []:
                    result.add_gauge(
                        m.POOL_HEALTH_STATUS,
                        {
                            **base,
                            "load_balancer_name": lb.get("lbName", ""),
                            "pool_name": pool.get("poolName", ""),
                        },
                        1 if pool.get("healthy") else 0,
                    )
        sums.flush(result)

    def map_logpush_zone(
        self, rows: list[dict[str, Any]], zones: Mapping[str, Zone], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for zone, entry in self._zone_entries(rows, zones):
            base = self.zone_labels(zone)
            for group in entry.get("logpushHealthAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                sums.add(
                    m.LOGPUSH_FAILED_JOBS_ZONE_COUNT,
                    {
                        **base,
                        "destination": dims.get("destinationType", ""),
                        "job_id": str(dims.get("jobId", "")),
                        "final": str(dims.get("final", "")).lower(),
                    },
                    group.get("count"),
                )
        sums.flush(result)

    def map_ssl_certificates(
        self, zone: Zone, certificates: list[SSLCertificate], result: CycleResult
    ) -> None:
        for cert in certificates:
            if cert.expires_on is None:
                continue
            hosts = cert.hosts
            if hosts and hosts[0].startswith("*."):
                zone_name = hosts[1] if len(hosts) > 1 else hosts[0]
            else:
                zone_name = hosts[0] if hosts else "unknown"
            result.add_gauge(
                m.ZONE_CERTIFICATE_VALIDATION_STATUS,
                {
                    "zone_id": zone.id,
                    "zone_name": zone_name,
                    "status": cert.status,
                    "issuer": cert.issuer,
                },
                cert.expires_on.timestamp(),
            )

    # ------------------------------------------------------------------
    # Account categories
    # ------------------------------------------------------------------

    def map_workers(
        self, account: Account, rows: list[dict[str, Any]], result: CycleResult
    ) -> None:
        account_name = normalize_account_name(account.name)
        sums = _CounterSums()
        for entry in rows:
            for worker in entry.get("workersInvocationsAdaptive") or []:
                dims = worker.get("dimensions") or {}
                total = worker.get("sum") or {}
                quantiles = worker.get("quantiles") or {}
                base = {"script_name": dims.get("scriptName", ""), "account": account_name}

                sums.add(m.WORKER_REQUESTS_COUNT, base, total.get("requests"))
                sums.add(m.WORKER_ERRORS_COUNT, base, total.get("errors"))
                for q in WORKER_QUANTILES:
                    labels = {**base, "quantile": q}
                    result.add_gauge(m.WORKER_CPU_TIME, labels, _num(quantiles.get(f"cpuTime{q}")))
                    result.add_gauge(
                        m.WORKER_DURATION, labels, round(_num(quantiles.get(f"duration{q}")), 3)
                    )
        sums.flush(result)

    def map_logpush_account(
        self, account: Account, rows: list[dict[str, Any]], result: CycleResult
    ) -> None:
        sums = _CounterSums()
        for entry in rows:
            for group in entry.get("logpushHealthAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                sums.add(
                    m.LOGPUSH_FAILED_JOBS_ACCOUNT_COUNT,
                    {
                        "account": normalize_account_name(account.name),
                        "account_type": account.type,
                        "destination": dims.get("destinationType", ""),
                        "job_id": str(dims.get("jobId", "")),
                        "final": str(dims.get("final", "")).lower(),
                    },
                    group.get("count"),
                )
        sums.flush(result)

    def map_magic_transit(
        self, account: Account, rows: list[dict[str, Any]], result: CycleResult
    ) -> None:
        active = healthy = failures = edge_colos = 0
        for entry in rows:
            for group in entry.get("magicTransitTunnelHealthChecksAdaptiveGroups") or []:
                dims = group.get("dimensions") or {}
                if dims.get("active") == 1:
                    active += 1
                if dims.get("resultStatus") == "healthy":
                    healthy += 1
                else:
                    failures += 1
                if dims.get("edgePopName"):
                    edge_colos += 1

        labels = {
            "account": normalize_account_name(account.name),
            "account_type": account.type,
        }
        result.add_gauge(m.MAGIC_TRANSIT_ACTIVE_TUNNELS, labels, active)
        result.add_gauge(m.MAGIC_TRANSIT_HEALTHY_TUNNELS, labels, healthy)
        result.add_gauge(m.MAGIC_TRANSIT_TUNNEL_FAILURES, labels, failures)
        result.add_gauge(m.MAGIC_TRANSIT_EDGE_COLO_COUNT, labels, edge_colos)


__all__ = ["STATUS_BUCKETS", "LabelMapper", "status_bucket"]
