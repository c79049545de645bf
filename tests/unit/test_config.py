"""Tests for ExporterConfig defaults, validation and environment parsing."""

import pytest

from cloudflare_exporter.config import MAX_BATCH_SIZE, ExporterConfig
from cloudflare_exporter.exceptions import ConfigurationError


class TestExporterConfigDefaults:
    def test_defaults(self):
        config = ExporterConfig()
        assert config.scrape_delay == 300
        assert config.time_window == 60
        assert config.query_limit == 1000
        assert config.batch_size == MAX_BATCH_SIZE
        assert config.free_tier is False
        assert config.exclude_host is True
        assert config.http_status_group is False
        assert config.ssl_concurrency == 5
        assert config.max_concurrent_fetches == 10
        assert config.rate_limit_rps == 4.0
        assert config.rate_limit_burst == 2
        assert config.retry_max_attempts == 4
        assert config.refresh_interval_seconds == 60.0
        assert config.metrics_path == "/metrics"
        assert config.state_backend == "memory"
        assert config.metrics_denylist == frozenset()

    def test_state_key_is_per_tenant(self):
        assert ExporterConfig(tenant="acme").state_key == "acme:metrics"

    def test_has_credentials(self):
        assert ExporterConfig(api_token="t").has_credentials
        assert ExporterConfig(api_key="k", api_email="e@example.com").has_credentials
        assert not ExporterConfig(api_key="k").has_credentials
        assert not ExporterConfig().has_credentials

    def test_log_level_is_normalized(self):
        assert ExporterConfig(log_level="debug").log_level == "DEBUG"


class TestExporterConfigValidation:
    @pytest.mark.parametrize("batch_size", [0, 11, -1])
    def test_batch_size_bounds(self, batch_size):
        with pytest.raises(ConfigurationError, match="batch_size"):
            ExporterConfig(batch_size=batch_size)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("time_window", 0),
            ("query_limit", 0),
            ("ssl_concurrency", 0),
            ("max_concurrent_fetches", 0),
            ("rate_limit_rps", 0),
            ("rate_limit_burst", 0),
            ("retry_max_attempts", 0),
            ("refresh_interval_seconds", 0),
            ("scrape_delay", -1),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigurationError, match=field):
            ExporterConfig(**{field: value})

    @pytest.mark.parametrize(
        "field",
        [
            "rate_limit_rps",
            "retry_base_delay",
            "retry_max_delay",
            "request_timeout",
            "refresh_interval_seconds",
        ],
    )
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_values(self, field, value):
        with pytest.raises(ConfigurationError, match=f"{field} must be a finite number"):
            ExporterConfig(**{field: value})

    def test_unknown_state_backend(self):
        with pytest.raises(ConfigurationError, match="state_backend"):
            ExporterConfig(state_backend="sqlite")

    def test_metrics_path_must_be_absolute(self):
        with pytest.raises(ConfigurationError, match="metrics_path"):
            ExporterConfig(metrics_path="metrics")

    def test_unknown_log_level(self):
        with pytest.raises(ConfigurationError, match="log_level"):
            ExporterConfig(log_level="chatty")


class TestExporterConfigFromEnv:
    def test_empty_environment_gives_defaults(self):
        assert ExporterConfig.from_env({}) == ExporterConfig()

    def test_reads_credentials_and_numbers(self):
        config = ExporterConfig.from_env(
            {
                "CF_API_TOKEN": "secret",
                "SCRAPE_DELAY": "120",
                "TIME_WINDOW": "300",
                "CF_BATCH_SIZE": "5",
                "RATE_LIMIT_RPS": "2.5",
                "MAX_CONCURRENT_FETCHES": "3",
            }
        )
        assert config.api_token == "secret"
        assert config.scrape_delay == 120
        assert config.time_window == 300
        assert config.batch_size == 5
        assert config.rate_limit_rps == 2.5
        assert config.max_concurrent_fetches == 3

    def test_lists(self):
        config = ExporterConfig.from_env(
            {
                "METRICS_DENYLIST": "cloudflare_zone_uniques_total, cloudflare_worker_cpu_time",
                "CF_ZONES": "z1,z2,",
                "CF_EXCLUDE_ZONES": " z3 ",
            }
        )
        assert config.metrics_denylist == frozenset(
            {"cloudflare_zone_uniques_total", "cloudflare_worker_cpu_time"}
        )
        assert config.zones == ("z1", "z2")
        assert config.exclude_zones == ("z3",)

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("1", True), ("Yes", True), ("false", False), ("0", False), ("off", False)],
    )
    def test_booleans(self, raw, expected):
        config = ExporterConfig.from_env({"FREE_TIER": raw, "EXCLUDE_HOST": raw})
        assert config.free_tier is expected
        assert config.exclude_host is expected

    def test_invalid_boolean(self):
        with pytest.raises(ConfigurationError, match="FREE_TIER"):
            ExporterConfig.from_env({"FREE_TIER": "maybe"})

    def test_invalid_number(self):
        with pytest.raises(ConfigurationError, match="SCRAPE_DELAY"):
            ExporterConfig.from_env({"SCRAPE_DELAY": "soon"})

    def test_refresh_interval_alias(self):
        assert ExporterConfig.from_env({"DO_ALARM_INTERVAL": "30"}).refresh_interval_seconds == 30
        config = ExporterConfig.from_env({"DO_ALARM_INTERVAL": "30", "REFRESH_INTERVAL": "90"})
        assert config.refresh_interval_seconds == 90

    def test_listen_address(self):
        config = ExporterConfig.from_env({"LISTEN": ":9199"})
        assert (config.listen_host, config.listen_port) == ("0.0.0.0", 9199)
        config = ExporterConfig.from_env({"LISTEN": "127.0.0.1:8081"})
        assert (config.listen_host, config.listen_port) == ("127.0.0.1", 8081)

    def test_invalid_listen_address(self):
        with pytest.raises(ConfigurationError, match="LISTEN"):
            ExporterConfig.from_env({"LISTEN": "localhost:http"})

    def test_validation_applies_to_environment(self):
        with pytest.raises(ConfigurationError, match="batch_size"):
            ExporterConfig.from_env({"CF_BATCH_SIZE": "50"})

    @pytest.mark.parametrize("var", ["RATE_LIMIT_RPS", "REFRESH_INTERVAL", "REQUEST_TIMEOUT"])
    def test_nan_from_environment(self, var):
        with pytest.raises(ConfigurationError, match="finite"):
            ExporterConfig.from_env({var: "nan"})
