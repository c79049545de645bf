# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric catalog.

Every published name has exactly one type and one help string. The
serializer consults this catalog so a name is never exposed as both a
counter and a gauge.
"""

from dataclasses import dataclass

from .constants import (
    EXPORTER_FETCH_FAILURES,
    EXPORTER_UP,
    LOGPUSH_FAILED_JOBS_ACCOUNT_COUNT,
    LOGPUSH_FAILED_JOBS_ZONE_COUNT,
    MAGIC_TRANSIT_ACTIVE_TUNNELS,
    MAGIC_TRANSIT_EDGE_COLO_COUNT,
    MAGIC_TRANSIT_HEALTHY_TUNNELS,
    MAGIC_TRANSIT_TUNNEL_FAILURES,
    POOL_HEALTH_STATUS,
    POOL_REQUESTS_TOTAL,
    WORKER_CPU_TIME,
    WORKER_DURATION,
    WORKER_ERRORS_COUNT,
    WORKER_REQUESTS_COUNT,
    ZONE_BANDWIDTH_CACHED,
    ZONE_BANDWIDTH_CONTENT_TYPE,
    ZONE_BANDWIDTH_COUNTRY,
    ZONE_BANDWIDTH_SSL_ENCRYPTED,
    ZONE_BANDWIDTH_TOTAL,
    ZONE_BOT_REQUEST_BY_COUNTRY,
    ZONE_CACHE_HIT_RATIO,
    ZONE_CERTIFICATE_VALIDATION_STATUS,
    ZONE_COLOCATION_EDGE_RESPONSE_BYTES,
    ZONE_COLOCATION_EDGE_RESPONSE_BYTES_ERROR,
    ZONE_COLOCATION_REQUESTS_TOTAL,
    ZONE_COLOCATION_REQUESTS_TOTAL_ERROR,
    ZONE_COLOCATION_VISITS,
    ZONE_COLOCATION_VISITS_ERROR,
    ZONE_CUSTOMER_ERROR_4XX_RATE,
    ZONE_CUSTOMER_ERROR_5XX_RATE,
    ZONE_EDGE_ERROR_RATE,
    ZONE_FIREWALL_BOTS_DETECTED,
    ZONE_FIREWALL_EVENTS_COUNT,
    ZONE_FIREWALL_REQUEST_ACTION,
    ZONE_HEALTH_CHECK_EVENTS_AVG,
    ZONE_HEALTH_CHECK_EVENTS_ORIGIN_COUNT,
    ZONE_ORIGIN_RESPONSE_DURATION_MS,
    ZONE_PAGEVIEWS_TOTAL,
    ZONE_REQUEST_METHOD_COUNT,
    ZONE_REQUESTS_BROWSER,
    ZONE_REQUESTS_CACHED,
    ZONE_REQUESTS_CONTENT_TYPE,
    ZONE_REQUESTS_COUNTRY,
    ZONE_REQUESTS_ORIGIN_STATUS_COUNTRY_HOST,
    ZONE_REQUESTS_SSL_ENCRYPTED,
    ZONE_REQUESTS_STATUS,
    ZONE_REQUESTS_STATUS_COUNTRY_HOST,
    ZONE_REQUESTS_TOTAL,
    ZONE_THREATS_COUNTRY,
    ZONE_THREATS_TOTAL,
    ZONE_THREATS_TYPE,
    ZONE_UNIQUES_TOTAL,
    ZONES_FILTERED,
    ZONES_PROCESSED,
    ZONES_TOTAL,
)

COUNTER = "counter"
GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDefinition:
    """
    Definition of a published metric.

    Attributes:
        name: Metric name as stored in state
        metric_type: 'counter' or 'gauge'
        description: HELP text
    """

    name: str
    metric_type: str
    description: str


def _counter(name: str, description: str) -> MetricDefinition:
    return MetricDefinition(name, COUNTER, description)


def _gauge(name: str, description: str) -> MetricDefinition:
    return MetricDefinition(name, GAUGE, description)


_CATALOG = (
    # === Zone Requests ===
    _counter(ZONE_REQUESTS_TOTAL, "Number of requests for zone"),
    _gauge(ZONE_REQUESTS_CACHED, "Number of cached requests for zone"),
    _counter(ZONE_REQUESTS_SSL_ENCRYPTED, "Number of encrypted requests for zone"),
    _counter(ZONE_REQUESTS_CONTENT_TYPE, "Number of requests per content type"),
    _counter(ZONE_REQUESTS_COUNTRY, "Number of requests per country"),
    _counter(ZONE_REQUESTS_STATUS, "Number of requests per HTTP status"),
    _counter(ZONE_REQUESTS_BROWSER, "Page views per browser"),
    _counter(
        ZONE_REQUESTS_ORIGIN_STATUS_COUNTRY_HOST,
        "Requests per origin status, country, host",
    ),
    _counter(ZONE_REQUESTS_STATUS_COUNTRY_HOST, "Requests per edge status, country, host"),
    _counter(ZONE_REQUEST_METHOD_COUNT, "Number of requests per HTTP method"),
    # === Zone Bandwidth ===
    _counter(ZONE_BANDWIDTH_TOTAL, "Total bandwidth per zone in bytes"),
    _counter(ZONE_BANDWIDTH_CACHED, "Cached bandwidth per zone in bytes"),
    _counter(ZONE_BANDWIDTH_SSL_ENCRYPTED, "Encrypted bandwidth per zone in bytes"),
    _counter(ZONE_BANDWIDTH_CONTENT_TYPE, "Bandwidth per content type"),
    _counter(ZONE_BANDWIDTH_COUNTRY, "Bandwidth per country"),
    # === Threats, Page Views, Uniques ===
    _counter(ZONE_THREATS_TOTAL, "Threats per zone"),
    _counter(ZONE_THREATS_COUNTRY, "Threats per country"),
    _counter(ZONE_THREATS_TYPE, "Threats per type"),
    _counter(ZONE_PAGEVIEWS_TOTAL, "Page views per zone"),
    _counter(ZONE_UNIQUES_TOTAL, "Unique visitors per zone"),
    # === Colocation ===
    _counter(ZONE_COLOCATION_VISITS, "Visits per colocation"),
    _counter(ZONE_COLOCATION_EDGE_RESPONSE_BYTES, "Edge response bytes per colocation"),
    _counter(ZONE_COLOCATION_REQUESTS_TOTAL, "Requests per colocation"),
    _counter(
        ZONE_COLOCATION_VISITS_ERROR,
        "Visits per colocation with error status codes (4xx/5xx)",
    ),
    _counter(
        ZONE_COLOCATION_EDGE_RESPONSE_BYTES_ERROR,
        "Edge response bytes per colocation with error codes",
    ),
    _counter(ZONE_COLOCATION_REQUESTS_TOTAL_ERROR, "Requests per colocation with error codes"),
    # === Firewall ===
    _counter(ZONE_FIREWALL_EVENTS_COUNT, "Count of firewall events"),
    _counter(ZONE_FIREWALL_REQUEST_ACTION, "Firewall events per action"),
    _counter(ZONE_FIREWALL_BOTS_DETECTED, "Bot requests detected"),
    _counter(ZONE_BOT_REQUEST_BY_COUNTRY, "Bot requests per country"),
    # === Health Checks ===
    _counter(ZONE_HEALTH_CHECK_EVENTS_ORIGIN_COUNT, "Health check events per origin"),
    _gauge(ZONE_HEALTH_CHECK_EVENTS_AVG, "Average health check events"),
    # === Workers ===
    _counter(WORKER_REQUESTS_COUNT, "Worker requests count"),
    _counter(WORKER_ERRORS_COUNT, "Worker errors count"),
    _gauge(WORKER_CPU_TIME, "Worker CPU time quantiles"),
    _gauge(WORKER_DURATION, "Worker duration quantiles (GB*s)"),
    # === Load Balancers ===
    _gauge(POOL_HEALTH_STATUS, "Pool health status (1=healthy, 0=unhealthy)"),
    _counter(POOL_REQUESTS_TOTAL, "Requests per pool"),
    # === Logpush ===
    _counter(LOGPUSH_FAILED_JOBS_ACCOUNT_COUNT, "Failed logpush jobs (account level)"),
    _counter(LOGPUSH_FAILED_JOBS_ZONE_COUNT, "Failed logpush jobs (zone level)"),
    # === Error Rates, Origin, Cache ===
    _counter(ZONE_CUSTOMER_ERROR_4XX_RATE, "4xx error rate"),
    _counter(ZONE_CUSTOMER_ERROR_5XX_RATE, "5xx error rate"),
    _gauge(ZONE_EDGE_ERROR_RATE, "Edge error rate (4xx and 5xx)"),
    _gauge(ZONE_ORIGIN_RESPONSE_DURATION_MS, "Origin response duration in ms"),
    _gauge(ZONE_CACHE_HIT_RATIO, "Cache hit ratio"),
    # === Magic Transit ===
    _gauge(MAGIC_TRANSIT_ACTIVE_TUNNELS, "Number of active Magic Transit tunnels"),
    _gauge(MAGIC_TRANSIT_HEALTHY_TUNNELS, "Number of healthy Magic Transit tunnels"),
    _gauge(MAGIC_TRANSIT_TUNNEL_FAILURES, "Number of failed Magic Transit tunnels"),
    _gauge(MAGIC_TRANSIT_EDGE_COLO_COUNT, "Number of edge colocation sites"),
    # === Certificates ===
    _gauge(ZONE_CERTIFICATE_VALIDATION_STATUS, "SSL certificate expiry timestamp"),
    # === Exporter Info ===
    _gauge(EXPORTER_UP, "Cloudflare exporter is up"),
    _gauge(ZONES_TOTAL, "Total number of zones"),
    _gauge(ZONES_FILTERED, "Zones after filtering"),
    _gauge(ZONES_PROCESSED, "Zones actually processed"),
    _gauge(EXPORTER_FETCH_FAILURES, "Category fetches that failed in the last refresh cycle"),
)

METRIC_DEFINITIONS: dict[str, MetricDefinition] = {d.name: d for d in _CATALOG}
"""Catalog of every published metric, keyed by name."""


__all__ = ["COUNTER", "GAUGE", "METRIC_DEFINITIONS", "MetricDefinition"]
