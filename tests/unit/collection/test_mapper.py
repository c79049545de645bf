"""Tests for LabelMapper."""

from datetime import datetime, timezone

import pytest

from cloudflare_exporter.collection.mapper import LabelMapper, status_bucket
from cloudflare_exporter.observability import constants as m
from cloudflare_exporter.types import Account, CycleResult, MetricIdentity, SSLCertificate, Zone

ZONE = Zone(id="z1", name="example.com", account={"id": "a1", "name": "Acme Corp"})
ZONES = {"z1": ZONE}
BASE = {"zone": "example.com", "account": "acme-corp"}


def counters(result: CycleResult) -> dict[MetricIdentity, float]:
    return dict(result.counters)


def gauges(result: CycleResult) -> dict[MetricIdentity, float]:
    return dict(result.gauges)


def ident(name: str, **labels: str) -> MetricIdentity:
    return MetricIdentity.of(name, labels)


@pytest.fixture
def mapper():
    return LabelMapper()


class TestStatusBucket:
    @pytest.mark.parametrize(
        "code,bucket", [(101, "1xx"), (200, "2xx"), (304, "3xx"), (404, "4xx"), (503, "5xx")]
    )
    def test_buckets(self, code, bucket):
        assert status_bucket(code) == bucket


class TestHttpMapping:
    ROWS = [
        {
            "zoneTag": "z1",
            "httpRequests1mGroups": [
                {
                    "sum": {
                        "requests": 500,
                        "cachedRequests": 200,
                        "encryptedRequests": 450,
                        "bytes": 10000,
                        "cachedBytes": 4000,
                        "encryptedBytes": 9000,
                        "threats": 3,
                        "pageViews": 120,
                        "responseStatusMap": [
                            {"edgeResponseStatus": 200, "requests": 450},
                            {"edgeResponseStatus": 404, "requests": 30},
                            {"edgeResponseStatus": 403, "requests": 20},
                        ],
                        "countryMap": [
                            {"clientCountryName": "US", "requests": 400, "bytes": 8000, "threats": 2}
                        ],
                        "contentTypeMap": [
                            {"edgeResponseContentTypeName": "html", "requests": 100, "bytes": 500}
                        ],
                        "browserMap": [{"uaBrowserFamily": "Chrome", "pageViews": 80}],
                        "threatPathingMap": [{"threatPathingName": "bic.ban.unknown", "requests": 3}],
                    },
                    "uniq": {"uniques": 42},
                }
            ],
        }
    ]

    def test_zone_totals(self, mapper):
        result = CycleResult()
        mapper.map_http(self.ROWS, ZONES, result)
        c = counters(result)
        assert c[ident(m.ZONE_REQUESTS_TOTAL, **BASE)] == 500
        assert c[ident(m.ZONE_BANDWIDTH_TOTAL, **BASE)] == 10000
        assert c[ident(m.ZONE_UNIQUES_TOTAL, **BASE)] == 42
        assert c[ident(m.ZONE_REQUESTS_COUNTRY, country="US", **BASE)] == 400
        assert c[ident(m.ZONE_REQUESTS_CONTENT_TYPE, content_type="html", **BASE)] == 100
        assert c[ident(m.ZONE_REQUESTS_BROWSER, family="Chrome", **BASE)] == 80
        assert c[ident(m.ZONE_THREATS_TYPE, type="bic.ban.unknown", **BASE)] == 3

    def test_status_codes_ungrouped(self, mapper):
        result = CycleResult()
        mapper.map_http(self.ROWS, ZONES, result)
        c = counters(result)
        assert c[ident(m.ZONE_REQUESTS_STATUS, status="404", **BASE)] == 30
        assert c[ident(m.ZONE_REQUESTS_STATUS, status="403", **BASE)] == 20

    def test_status_codes_grouped_emit_every_bucket(self):
        result = CycleResult()
        LabelMapper(http_status_group=True).map_http(self.ROWS, ZONES, result)
        c = counters(result)
        assert c[ident(m.ZONE_REQUESTS_STATUS, status="4xx", **BASE)] == 50
        assert c[ident(m.ZONE_REQUESTS_STATUS, status="2xx", **BASE)] == 450
        assert c[ident(m.ZONE_REQUESTS_STATUS, status="1xx", **BASE)] == 0
        assert c[ident(m.ZONE_REQUESTS_STATUS, status="5xx", **BASE)] == 0

    def test_cache_gauges(self, mapper):
        result = CycleResult()
        mapper.map_http(self.ROWS, ZONES, result)
        g = gauges(result)
        assert g[ident(m.ZONE_REQUESTS_CACHED, **BASE)] == 200
        assert g[ident(m.ZONE_CACHE_HIT_RATIO, **BASE)] == pytest.approx(0.4)

    def test_no_ratio_without_requests(self, mapper):
        rows = [{"zoneTag": "z1", "httpRequests1mGroups": [{"sum": {"requests": 0}, "uniq": {}}]}]
        result = CycleResult()
        mapper.map_http(rows, ZONES, result)
        assert ident(m.ZONE_CACHE_HIT_RATIO, **BASE) not in gauges(result)

    def test_unknown_zone_tag_is_skipped(self, mapper):
        rows = [{"zoneTag": "other", "httpRequests1mGroups": [{"sum": {"requests": 5}}]}]
        result = CycleResult()
        mapper.map_http(rows, ZONES, result)
        assert result.counters == []


class TestFirewallMapping:
    ROWS = [
        {
            "zoneTag": "z1",
            "firewallEventsAdaptiveGroups": [
                {
                    "count": 4,
                    "dimensions": {
                        "action": "block",
                        "source": "firewallrules",
                        "ruleId": "r1",
                        "clientCountryName": "DE",
                        "clientRequestHTTPHost": "www.example.com",
                    },
                },
                {
                    "count": 6,
                    "dimensions": {
                        "action": "block",
                        "source": "firewallrules",
                        "ruleId": "r1",
                        "clientCountryName": "DE",
                        "clientRequestHTTPHost": "api.example.com",
                    },
                },
            ],
        }
    ]

    def test_rule_descriptions_and_summing(self, mapper):
        result = CycleResult()
        mapper.map_firewall(self.ROWS, ZONES, {"r1": "Block scrapers"}, result)
        c = counters(result)
        assert c[ident(m.ZONE_FIREWALL_EVENTS_COUNT, **BASE)] == 10
        assert (
            c[ident(m.ZONE_FIREWALL_REQUEST_ACTION, action="block", rule="Block scrapers", **BASE)]
            == 10
        )
        assert c[ident(m.ZONE_BOT_REQUEST_BY_COUNTRY, country="DE", action="block", **BASE)] == 10

    def test_unknown_rule_falls_back_to_id(self, mapper):
        result = CycleResult()
        mapper.map_firewall(self.ROWS, ZONES, {}, result)
        assert ident(m.ZONE_FIREWALL_REQUEST_ACTION, action="block", rule="r1", **BASE) in counters(
            result
        )

    def test_host_label_when_not_excluded(self):
        result = CycleResult()
        LabelMapper(exclude_host=False).map_firewall(self.ROWS, ZONES, {}, result)
        c = counters(result)
        assert (
            c[
                ident(
                    m.ZONE_FIREWALL_BOTS_DETECTED,
                    source="firewallrules",
                    action="block",
                    host="api.example.com",
                    **BASE,
                )
            ]
            == 6
        )


class TestAdaptiveMapping:
    def test_error_rates(self, mapper):
        rows = [
            {
                "zoneTag": "z1",
                "httpRequestsAdaptiveGroups": [
                    {"count": 7, "dimensions": {"originResponseStatus": 404, "clientCountryName": "US"}},
                    {"count": 2, "dimensions": {"originResponseStatus": 499, "clientCountryName": "US"}},
                    {"count": 5, "dimensions": {"originResponseStatus": 502, "clientCountryName": "US"}},
                    {"count": 9, "dimensions": {"originResponseStatus": 0, "clientCountryName": "US"}},
                ],
            }
        ]
        result = CycleResult()
        mapper.map_adaptive(rows, ZONES, result)
        c = counters(result)
        assert c[ident(m.ZONE_CUSTOMER_ERROR_4XX_RATE, status="404", country="US", **BASE)] == 7
        assert ident(m.ZONE_CUSTOMER_ERROR_4XX_RATE, status="499", country="US", **BASE) not in c
        assert c[ident(m.ZONE_CUSTOMER_ERROR_5XX_RATE, status="502", country="US", **BASE)] == 5
        assert not any(i.label_dict().get("status") == "0" for i in c)

    def test_edge_error_gauge(self, mapper):
        rows = [
            {
                "zoneTag": "z1",
                "httpRequestsEdgeCountryHost": [
                    {"count": 3, "dimensions": {"edgeResponseStatus": 200, "clientCountryName": "US"}},
                    {"count": 1, "dimensions": {"edgeResponseStatus": 503, "clientCountryName": "US"}},
                ],
            }
        ]
        result = CycleResult()
        mapper.map_edge_country(rows, ZONES, result)
        g = gauges(result)
        assert g == {ident(m.ZONE_EDGE_ERROR_RATE, status="503", country="US", **BASE): 1.0}


class TestAccountMapping:
    ACCOUNT = Account(id="a1", name="Acme Corp", type="enterprise")

    def test_workers(self, mapper):
        rows = [
            {
                "workersInvocationsAdaptive": [
                    {
                        "dimensions": {"scriptName": "api", "status": "success"},
                        "sum": {"requests": 10, "errors": 0},
                        "quantiles": {"cpuTimeP50": 1.5, "durationP99": 0.123456},
                    },
                    {
                        "dimensions": {"scriptName": "api", "status": "scriptThrewException"},
                        "sum": {"requests": 2, "errors": 2},
                        "quantiles": {},
                    },
                ]
            }
        ]
        result = CycleResult()
        mapper.map_workers(self.ACCOUNT, rows, result)
        c = counters(result)
        labels = {"script_name": "api", "account": "acme-corp"}
        assert c[ident(m.WORKER_REQUESTS_COUNT, **labels)] == 12
        assert c[ident(m.WORKER_ERRORS_COUNT, **labels)] == 2
        assert {i.label_dict()["quantile"] for i, _ in result.gauges} == {
            "P50",
            "P75",
            "P99",
            "P999",
        }

    def test_worker_duration_rounding(self, mapper):
        rows = [
            {
                "workersInvocationsAdaptive": [
                    {
                        "dimensions": {"scriptName": "api"},
                        "sum": {},
                        "quantiles": {"durationP99": 0.123456},
                    }
                ]
            }
        ]
        result = CycleResult()
        mapper.map_workers(self.ACCOUNT, rows, result)
        g = gauges(result)
        labels = {"script_name": "api", "account": "acme-corp", "quantile": "P99"}
        assert g[ident(m.WORKER_DURATION, **labels)] == 0.123

    def test_magic_transit(self, mapper):
        rows = [
            {
                "magicTransitTunnelHealthChecksAdaptiveGroups": [
                    {"dimensions": {"active": 1, "resultStatus": "healthy", "edgePopName": "fra"}},
                    {"dimensions": {"active": 0, "resultStatus": "unhealthy", "edgePopName": ""}},
                ]
            }
        ]
        result = CycleResult()
        mapper.map_magic_transit(self.ACCOUNT, rows, result)
        labels = {"account": "acme-corp", "account_type": "enterprise"}
        g = gauges(result)
        assert g[ident(m.MAGIC_TRANSIT_ACTIVE_TUNNELS, **labels)] == 1
        assert g[ident(m.MAGIC_TRANSIT_HEALTHY_TUNNELS, **labels)] == 1
        assert g[ident(m.MAGIC_TRANSIT_TUNNEL_FAILURES, **labels)] == 1
        assert g[ident(m.MAGIC_TRANSIT_EDGE_COLO_COUNT, **labels)] == 1


class TestSslMapping:
    def test_expiry_gauge_uses_first_non_wildcard_host(self, mapper):
        expires = datetime(2025, 1, 1, tzinfo=timezone.utc)
        certs = [
            SSLCertificate(
                status="active",
                issuer="LetsEncrypt",
                expires_on=expires,
                hosts=["*.example.com", "example.com"],
            ),
            SSLCertificate(status="pending", hosts=["example.com"]),
        ]
        result = CycleResult()
        mapper.map_ssl_certificates(ZONE, certs, result)
        assert result.gauges == [
            (
                ident(
                    m.ZONE_CERTIFICATE_VALIDATION_STATUS,
                    zone_id="z1",
                    zone_name="example.com",
                    status="active",
                    issuer="LetsEncrypt",
                ),
                expires.timestamp(),
            )
        ]


class TestLoadBalancerMapping:
    def test_pool_requests_and_health(self, mapper):
        rows = [
            {
                "zoneTag": "z1",
                "loadBalancingRequestsAdaptiveGroups": [
                    {
                        "count": 11,
                        "dimensions": {
                            "lbName": "lb",
                            "selectedPoolName": "primary",
                            "selectedOriginName": "o1",
                        },
                    }
                ],
                "loadBalancingRequestsAdaptive": [
                    {"lbName": "lb", "pools": [{"poolName": "primary", "healthy": True},
                                               {"poolName": "backup", "healthy": False}]}
                ],
            }
        ]
        result = CycleResult()
        mapper.map_load_balancer(rows, ZONES, result)
        g = gauges(result)
        assert g[ident(m.POOL_HEALTH_STATUS, load_balancer_name="lb", pool_name="primary", **BASE)] == 1
        assert g[ident(m.POOL_HEALTH_STATUS, load_balancer_name="lb", pool_name="backup", **BASE)] == 0
        assert (
            counters(result)[
                ident(
                    m.POOL_REQUESTS_TOTAL,
                    load_balancer_name="lb",
                    pool_name="primary",
                    origin_name="o1",
                    **BASE,
                )
            ]
            == 11
        )
