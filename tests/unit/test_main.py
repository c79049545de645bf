"""Tests for the command-line entry point."""

import os
from unittest.mock import patch

from cloudflare_exporter.__main__ import EXIT_AUTH_ERROR, EXIT_CONFIG_ERROR, main


class TestMain:
    def test_invalid_configuration(self):
        with patch.dict(os.environ, {"CF_BATCH_SIZE": "50"}, clear=True):
            assert main() == EXIT_CONFIG_ERROR

    def test_missing_credentials(self):
        with patch.dict(os.environ, {}, clear=True):
            assert main() == EXIT_AUTH_ERROR

    def test_serves_on_configured_listener(self):
        env = {"CF_API_TOKEN": "t", "LISTEN": "127.0.0.1:9199", "LOG_LEVEL": "debug"}
        with patch.dict(os.environ, env, clear=True), patch(
            "cloudflare_exporter.__main__.uvicorn.run"
        ) as run:
            assert main() == 0
        _, kwargs = run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9199
        assert kwargs["log_level"] == "debug"
