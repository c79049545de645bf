# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

This module provides the names of every series the exporter publishes.
All metric names use the `cloudflare_` prefix.

Naming Conventions:
    - Names are kept as the Cloudflare exporter has always published them
    - Counters are exposed with a `_total` suffix; a name that already
      ends in `_total` is not doubled

Label Best Practices:
    Labels are limited to bounded dimensions of the analytics datasets:
    - `zone`, `account` - Resource identity
    - `status`, `country`, `colocation`, `method` - Categorical breakdowns
    - `host` - Only when EXCLUDE_HOST is disabled

    NEVER use per-window counts or timestamps as labels (unbounded!)

Usage:
    >>> from cloudflare_exporter.observability.constants import ZONE_REQUESTS_TOTAL
    >>> print(ZONE_REQUESTS_TOTAL)
    'cloudflare_zone_requests_total'
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "cloudflare"
"""Prefix for all Prometheus metrics published by the exporter."""


# =============================================================================
# Zone Request Metrics
# =============================================================================

ZONE_REQUESTS_TOTAL = f"{METRIC_PREFIX}_zone_requests_total"
ZONE_REQUESTS_CACHED = f"{METRIC_PREFIX}_zone_requests_cached"
ZONE_REQUESTS_SSL_ENCRYPTED = f"{METRIC_PREFIX}_zone_requests_ssl_encrypted"
ZONE_REQUESTS_CONTENT_TYPE = f"{METRIC_PREFIX}_zone_requests_content_type"
ZONE_REQUESTS_COUNTRY = f"{METRIC_PREFIX}_zone_requests_country"
ZONE_REQUESTS_STATUS = f"{METRIC_PREFIX}_zone_requests_status"
ZONE_REQUESTS_BROWSER = f"{METRIC_PREFIX}_zone_requests_browser_map_page_views_count"
ZONE_REQUESTS_ORIGIN_STATUS_COUNTRY_HOST = (
    f"{METRIC_PREFIX}_zone_requests_origin_status_country_host"
)
ZONE_REQUESTS_STATUS_COUNTRY_HOST = f"{METRIC_PREFIX}_zone_requests_status_country_host"
ZONE_REQUEST_METHOD_COUNT = f"{METRIC_PREFIX}_zone_request_method_count"


# =============================================================================
# Zone Bandwidth Metrics
# =============================================================================

ZONE_BANDWIDTH_TOTAL = f"{METRIC_PREFIX}_zone_bandwidth_total"
ZONE_BANDWIDTH_CACHED = f"{METRIC_PREFIX}_zone_bandwidth_cached"
ZONE_BANDWIDTH_SSL_ENCRYPTED = f"{METRIC_PREFIX}_zone_bandwidth_ssl_encrypted"
ZONE_BANDWIDTH_CONTENT_TYPE = f"{METRIC_PREFIX}_zone_bandwidth_content_type"
ZONE_BANDWIDTH_COUNTRY = f"{METRIC_PREFIX}_zone_bandwidth_country"


# =============================================================================
# Zone Threat, Page View and Unique Visitor Metrics
# =============================================================================

ZONE_THREATS_TOTAL = f"{METRIC_PREFIX}_zone_threats_total"
ZONE_THREATS_COUNTRY = f"{METRIC_PREFIX}_zone_threats_country"
ZONE_THREATS_TYPE = f"{METRIC_PREFIX}_zone_threats_type"
ZONE_PAGEVIEWS_TOTAL = f"{METRIC_PREFIX}_zone_pageviews_total"
ZONE_UNIQUES_TOTAL = f"{METRIC_PREFIX}_zone_uniques_total"


# =============================================================================
# Colocation Metrics
# =============================================================================

ZONE_COLOCATION_VISITS = f"{METRIC_PREFIX}_zone_colocation_visits"
ZONE_COLOCATION_EDGE_RESPONSE_BYTES = f"{METRIC_PREFIX}_zone_colocation_edge_response_bytes"
ZONE_COLOCATION_REQUESTS_TOTAL = f"{METRIC_PREFIX}_zone_colocation_requests_total"
ZONE_COLOCATION_VISITS_ERROR = f"{METRIC_PREFIX}_zone_colocation_visits_error"
ZONE_COLOCATION_EDGE_RESPONSE_BYTES_ERROR = (
    f"{METRIC_PREFIX}_zone_colocation_edge_response_bytes_error"
)
ZONE_COLOCATION_REQUESTS_TOTAL_ERROR = (
    f"{METRIC_PREFIX}_zone_colocation_requests_total_error"
)


# =============================================================================
# Firewall Metrics
# =============================================================================

ZONE_FIREWALL_EVENTS_COUNT = f"{METRIC_PREFIX}_zone_firewall_events_count"
ZONE_FIREWALL_REQUEST_ACTION = f"{METRIC_PREFIX}_zone_firewall_request_action"
ZONE_FIREWALL_BOTS_DETECTED = f"{METRIC_PREFIX}_zone_firewall_bots_detected"
ZONE_BOT_REQUEST_BY_COUNTRY = f"{METRIC_PREFIX}_zone_bot_request_by_country"


# =============================================================================
# Health Check Metrics
# =============================================================================

ZONE_HEALTH_CHECK_EVENTS_ORIGIN_COUNT = (
    f"{METRIC_PREFIX}_zone_health_check_events_origin_count"
)
ZONE_HEALTH_CHECK_EVENTS_AVG = f"{METRIC_PREFIX}_zone_health_check_events_avg"


# =============================================================================
# Worker Metrics
# =============================================================================

WORKER_REQUESTS_COUNT = f"{METRIC_PREFIX}_worker_requests_count"
WORKER_ERRORS_COUNT = f"{METRIC_PREFIX}_worker_errors_count"
WORKER_CPU_TIME = f"{METRIC_PREFIX}_worker_cpu_time"
WORKER_DURATION = f"{METRIC_PREFIX}_worker_duration"


# =============================================================================
# Load Balancer and Logpush Metrics
# =============================================================================

POOL_HEALTH_STATUS = f"{METRIC_PREFIX}_zone_pool_health_status"
POOL_REQUESTS_TOTAL = f"{METRIC_PREFIX}_zone_pool_requests_total"
LOGPUSH_FAILED_JOBS_ACCOUNT_COUNT = f"{METRIC_PREFIX}_logpush_failed_jobs_account_count"
LOGPUSH_FAILED_JOBS_ZONE_COUNT = f"{METRIC_PREFIX}_logpush_failed_jobs_zone_count"


# =============================================================================
# Error Rate, Origin and Cache Metrics
# =============================================================================

ZONE_CUSTOMER_ERROR_4XX_RATE = f"{METRIC_PREFIX}_zone_customer_error_4xx_rate"
ZONE_CUSTOMER_ERROR_5XX_RATE = f"{METRIC_PREFIX}_zone_customer_error_5xx_rate"
ZONE_EDGE_ERROR_RATE = f"{METRIC_PREFIX}_zone_edge_error_rate"
ZONE_ORIGIN_RESPONSE_DURATION_MS = f"{METRIC_PREFIX}_zone_origin_response_duration_ms"
ZONE_CACHE_HIT_RATIO = f"{METRIC_PREFIX}_zone_cache_hit_ratio"


# =============================================================================
# Magic Transit and Certificate Metrics
# =============================================================================

MAGIC_TRANSIT_ACTIVE_TUNNELS = f"{METRIC_PREFIX}_magic_transit_active_tunnels"
MAGIC_TRANSIT_HEALTHY_TUNNELS = f"{METRIC_PREFIX}_magic_transit_healthy_tunnels"
MAGIC_TRANSIT_TUNNEL_FAILURES = f"{METRIC_PREFIX}_magic_transit_tunnel_failures"
MAGIC_TRANSIT_EDGE_COLO_COUNT = f"{METRIC_PREFIX}_magic_transit_edge_colo_count"
ZONE_CERTIFICATE_VALIDATION_STATUS = f"{METRIC_PREFIX}_zone_certificate_validation_status"


# =============================================================================
# Exporter Info Metrics
# =============================================================================

EXPORTER_UP = f"{METRIC_PREFIX}_exporter_up"
ZONES_TOTAL = f"{METRIC_PREFIX}_zones_total"
ZONES_FILTERED = f"{METRIC_PREFIX}_zones_filtered"
ZONES_PROCESSED = f"{METRIC_PREFIX}_zones_processed"
EXPORTER_FETCH_FAILURES = f"{METRIC_PREFIX}_exporter_fetch_failures"
