"""Tests for lazy import patterns in __init__.py modules.

These tests cover the __getattr__ lazy import mechanisms used for the
optional Redis dependency.
"""

import pytest


class TestTopLevelLazyImports:
    """Test lazy imports from the top-level cloudflare_exporter module."""

    def test_lazy_redis_state_store_import(self):
        from cloudflare_exporter import RedisStateStore
        from cloudflare_exporter.backends.redis import RedisStateStore as direct

        assert RedisStateStore is direct

    def test_unknown_attribute_raises_attribute_error(self):
        import cloudflare_exporter

        with pytest.raises(
            AttributeError,
            match=r"module 'cloudflare_exporter' has no attribute 'FakeClass'",
        ):
            _ = cloudflare_exporter.FakeClass

    def test_version_exported(self):
        import cloudflare_exporter

        assert cloudflare_exporter.__version__ == "1.0.0"


class TestBackendsLazyImports:
    """Test lazy imports from cloudflare_exporter.backends."""

    def test_lazy_redis_state_store_import(self):
        from cloudflare_exporter.backends import RedisStateStore

        assert RedisStateStore.__name__ == "RedisStateStore"

    def test_unknown_attribute_raises_attribute_error(self):
        import cloudflare_exporter.backends as backends

        with pytest.raises(AttributeError, match=r"has no attribute"):
            _ = backends.NotAStore
