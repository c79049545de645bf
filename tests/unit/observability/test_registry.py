"""Tests for MetricsRegistry serialization."""

from unittest.mock import patch

import pytest

from cloudflare_exporter.exceptions import SerializationError
from cloudflare_exporter.observability import COUNTER, GAUGE, METRIC_DEFINITIONS, exposed_name
from cloudflare_exporter.observability.registry import MetricsRegistry
from cloudflare_exporter.scheduler.state import CollectionState, CounterState, GaugeState

NOW = 1_700_000_100.0


def counter(name, total, **labels):
    state = CounterState(name=name, labels=labels, last_raw_value=total, accumulated_total=total)
    return state.identity.key, state


def gauge(name, value, **labels):
    state = GaugeState(name=name, labels=labels, value=value)
    return state.identity.key, state


def make_state(counters=(), gauges=(), **kwargs):
    return CollectionState(counters=dict(counters), gauges=dict(gauges), **kwargs)


@pytest.fixture
def registry():
    return MetricsRegistry()


class TestExposedName:
    def test_counter_suffix_is_not_doubled(self):
        assert exposed_name("cloudflare_zone_requests_total", COUNTER) == "cloudflare_zone_requests_total"
        assert exposed_name("cloudflare_worker_errors_count", COUNTER) == "cloudflare_worker_errors_count_total"
        assert exposed_name("cloudflare_zones_total", GAUGE) == "cloudflare_zones_total"


class TestSerialize:
    def test_single_zone_counter(self, registry):
        state = make_state(
            [counter("cloudflare_zone_requests_total", 500, zone="example.com", account="acme")],
            last_fetch_timestamp=NOW,
        )
        text = registry.serialize(state, now=NOW)
        assert 'cloudflare_zone_requests_total{account="acme",zone="example.com"} 500.0' in text
        assert "# TYPE cloudflare_zone_requests_total counter" in text
        assert "# HELP cloudflare_zone_requests_total Number of requests for zone" in text
        assert text.endswith("# Metrics staleness: 0s\n")

    def test_counters_get_total_suffix(self, registry):
        state = make_state([counter("cloudflare_worker_requests_count", 12, script_name="api")])
        text = registry.serialize(state, now=NOW)
        assert 'cloudflare_worker_requests_count_total{script_name="api"} 12.0' in text
        assert "# TYPE cloudflare_worker_requests_count_total counter" in text

    def test_gauges(self, registry):
        state = make_state(gauges=[gauge("cloudflare_zone_cache_hit_ratio", 0.4, zone="example.com")])
        text = registry.serialize(state, now=NOW)
        assert "# TYPE cloudflare_zone_cache_hit_ratio gauge" in text
        assert 'cloudflare_zone_cache_hit_ratio{zone="example.com"} 0.4' in text

    def test_one_help_and_type_line_per_name(self, registry):
        state = make_state(
            [
                counter("cloudflare_zone_requests_total", 1, zone="a.com"),
                counter("cloudflare_zone_requests_total", 2, zone="b.com"),
                counter("cloudflare_zone_requests_total", 3, zone="c.com"),
            ]
        )
        text = registry.serialize(state, now=NOW)
        assert text.count("# TYPE cloudflare_zone_requests_total") == 1
        assert text.count("# HELP cloudflare_zone_requests_total") == 1
        assert text.count("cloudflare_zone_requests_total{") == 3

    def test_catalog_type_wins_over_stored_kind(self, registry):
        state = make_state(
            [counter("cloudflare_zone_requests_total", 5, zone="a.com")],
            [gauge("cloudflare_zone_requests_total", 1, zone="b.com")],
        )
        text = registry.serialize(state, now=NOW)
        assert 'zone="a.com"' in text
        assert 'zone="b.com"' not in text

    def test_unknown_names(self, registry):
        state = make_state(
            [counter("cloudflare_new_thing", 7)],
            [gauge("cloudflare_new_gauge", 2)],
        )
        text = registry.serialize(state, now=NOW)
        assert "# TYPE cloudflare_new_thing_total counter" in text
        assert "# TYPE cloudflare_new_gauge gauge" in text

    def test_label_values_are_escaped(self, registry):
        state = make_state(gauges=[gauge("cloudflare_exporter_up", 1, note='say "hi"\\now\n')])
        text = registry.serialize(state, now=NOW)
        assert 'note="say \\"hi\\"\\\\now\\n"' in text

    def test_denylist_matches_stored_and_exposed_names(self):
        registry = MetricsRegistry(
            denylist={"cloudflare_zone_requests_total", "cloudflare_worker_errors_count_total"}
        )
        state = make_state(
            [
                counter("cloudflare_zone_requests_total", 1),
                counter("cloudflare_worker_errors_count", 1),
                counter("cloudflare_zone_bandwidth_total", 1),
            ]
        )
        text = registry.serialize(state, now=NOW)
        assert "cloudflare_zone_requests_total" not in text
        assert "cloudflare_worker_errors_count" not in text
        assert "cloudflare_zone_bandwidth_total" in text

    def test_empty_state(self, registry):
        assert registry.serialize(CollectionState(), now=NOW) == "# Metrics staleness: -1s\n"

    def test_staleness_and_last_error(self, registry):
        state = CollectionState(last_fetch_timestamp=NOW - 90, last_error="zones failed\nretry later")
        text = registry.serialize(state, now=NOW)
        assert "# Metrics staleness: 90s" in text
        assert text.endswith("# Last error: zones failed retry later\n")

    def test_output_is_deterministic(self, registry):
        state = make_state(
            [
                counter("cloudflare_zone_requests_total", 2, zone="b.com"),
                counter("cloudflare_zone_requests_total", 1, zone="a.com"),
            ]
        )
        text = registry.serialize(state, now=NOW)
        assert text == registry.serialize(state, now=NOW)
        assert text.index('zone="a.com"') < text.index('zone="b.com"')

    def test_failures_raise_serialization_error(self, registry):
        state = make_state([counter("cloudflare_zone_requests_total", 1)])
        with patch(
            "cloudflare_exporter.observability.registry.generate_latest",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(SerializationError, match="boom"):
                registry.serialize(state, now=NOW)


class TestCatalog:
    def test_every_definition_is_typed(self):
        assert METRIC_DEFINITIONS
        for name, definition in METRIC_DEFINITIONS.items():
            assert definition.name == name
            assert definition.metric_type in (COUNTER, GAUGE)
            assert definition.description
