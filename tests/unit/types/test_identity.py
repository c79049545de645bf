"""Tests for MetricIdentity."""

from cloudflare_exporter.types import MetricIdentity


class TestMetricIdentity:
    def test_label_order_does_not_matter(self):
        a = MetricIdentity.of("cloudflare_zone_requests_total", {"zone": "z", "account": "a"})
        b = MetricIdentity.of("cloudflare_zone_requests_total", {"account": "a", "zone": "z"})
        assert a == b
        assert hash(a) == hash(b)
        assert a.key == b.key

    def test_key_format(self):
        identity = MetricIdentity.of("m", {"zone": "example.com", "account": "acme"})
        assert identity.key == "m{account=acme,zone=example.com}"
        assert str(identity) == identity.key

    def test_no_labels(self):
        assert MetricIdentity.of("m").key == "m{}"
        assert MetricIdentity.of("m", {}) == MetricIdentity("m")

    def test_values_are_stringified(self):
        identity = MetricIdentity.of("m", {"status": 200})
        assert identity.label_dict() == {"status": "200"}

    def test_different_labels_are_different_series(self):
        assert MetricIdentity.of("m", {"status": "200"}) != MetricIdentity.of(
            "m", {"status": "404"}
        )

    def test_separators_in_values_are_escaped(self):
        # Free-text rule descriptions may contain key separators
        a = MetricIdentity.of("m", {"a": "1,b=2"})
        b = MetricIdentity.of("m", {"a": "1", "b": "2"})
        assert a != b
        assert a.key != b.key
        assert a.key == "m{a=1\\,b\\=2}"
        assert b.key == "m{a=1,b=2}"

    def test_closing_brace_and_backslash_are_escaped(self):
        a = MetricIdentity.of("m", {"x": "1},y{"})
        assert a.key == "m{x=1\\}\\,y{}"
        assert MetricIdentity.of("m", {"path": "C:\\"}).key == "m{path=C:\\\\}"
