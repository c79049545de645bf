"""Tests for the upstream client protocol."""

from cloudflare_exporter.config import ExporterConfig
from cloudflare_exporter.protocols import UpstreamClientProtocol
from cloudflare_exporter.providers import CloudflareClient


class TestUpstreamClientProtocol:
    def test_cloudflare_client_satisfies_protocol(self):
        client = CloudflareClient(ExporterConfig(api_token="token"))
        assert isinstance(client, UpstreamClientProtocol)

    def test_incomplete_object_does_not_satisfy_protocol(self):
        class ZonesOnly:
            async def fetch_zones(self):
                return []

        assert not isinstance(ZonesOnly(), UpstreamClientProtocol)
