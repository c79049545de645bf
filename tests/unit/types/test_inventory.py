"""Tests for inventory models and the query time window."""

from datetime import datetime, timezone

from cloudflare_exporter.types import (
    FREE_PLAN_ID,
    CycleResult,
    TimeWindow,
    Zone,
    normalize_account_name,
)


class TestZone:
    def test_parses_api_payload_and_ignores_extra_fields(self):
        zone = Zone.model_validate(
            {
                "id": "z1",
                "name": "example.com",
                "status": "active",
                "paused": False,
                "plan": {"id": FREE_PLAN_ID, "name": "Free Website", "is_subscribed": False},
                "account": {"id": "a1", "name": "Acme Corp"},
            }
        )
        assert zone.name == "example.com"
        assert zone.account.name == "Acme Corp"
        assert zone.is_free_plan

    def test_paid_plan(self):
        zone = Zone(id="z1", name="example.com", plan={"id": "enterprise"})
        assert not zone.is_free_plan


class TestNormalizeAccountName:
    def test_lowercases_and_dashes(self):
        assert normalize_account_name("Acme Corp Prod") == "acme-corp-prod"
        assert normalize_account_name("acme") == "acme"


class TestTimeWindow:
    def test_truncates_to_minute_and_trails_by_delay(self):
        now = datetime(2024, 5, 1, 12, 10, 42, 123456, tzinfo=timezone.utc)
        window = TimeWindow.ending_before(now, scrape_delay=300, time_window=60)
        assert window.maxtime_iso == "2024-05-01T12:05:00Z"
        assert window.mintime_iso == "2024-05-01T12:04:00Z"

    def test_naive_datetimes_are_utc(self):
        window = TimeWindow.ending_before(datetime(2024, 5, 1, 12, 0, 30), 0, 120)
        assert window.maxtime_iso == "2024-05-01T12:00:00Z"
        assert window.mintime_iso == "2024-05-01T11:58:00Z"


class TestCycleResult:
    def test_add_and_extend(self):
        first = CycleResult()
        first.add_counter("c", {"zone": "z"}, 5)
        second = CycleResult()
        second.add_gauge("g", None, 1)
        first.extend(second)
        assert len(first.counters) == 1
        assert first.counters[0][1] == 5.0
        assert first.gauges[0][0].name == "g"
        assert first.succeeded

    def test_error_marks_failure(self):
        assert not CycleResult(error="zones unavailable").succeeded
