# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
HTTP surface of the exporter.

``build_runtime`` wires the client, orchestrator, reconciliation engine,
registry, state store and refresh actor for one tenant; ``create_app``
exposes that runtime through FastAPI. The lifespan starts the actor and
closes every resource on shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from . import __version__
from .backends.base import BaseStateStore
from .backends.memory import MemoryStateStore
from .collection.orchestrator import FetchOrchestrator
from .collection.reconciliation import ReconciliationEngine
from .config import ExporterConfig
from .exceptions import SerializationError
from .observability.definitions import METRIC_DEFINITIONS
from .observability.registry import CONTENT_TYPE_LATEST, MetricsRegistry
from .protocols.client import UpstreamClientProtocol
from .providers.cloudflare import CloudflareClient
from .scheduler.actor import RefreshActor

logger = logging.getLogger(__name__)

INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>Cloudflare Exporter</title></head>
<body>
<h1>Cloudflare Prometheus Exporter</h1>
<p><a href="{metrics_path}">Metrics</a></p>
<p><a href="/health">Health</a></p>
<p><a href="/status">Status</a></p>
</body>
</html>
"""


@dataclass
class ExporterRuntime:
    """
    Everything one tenant needs at runtime.

    Attributes:
        config: Exporter configuration
        actor: Refresh actor owning the tenant's state
        store: State store the actor persists to
        client: Upstream client, closed on shutdown when not None
    """

    config: ExporterConfig
    actor: RefreshActor
    store: BaseStateStore
    client: Any | None = None

    async def aclose(self) -> None:
        await self.actor.stop()
        if self.client is not None and hasattr(self.client, "aclose"):
            await self.client.aclose()
        await self.store.close()


def build_store(config: ExporterConfig) -> BaseStateStore:
    """Create the state store selected by ``config.state_backend``."""
    if config.state_backend == "redis":
        from .backends.redis import RedisStateStore

        return RedisStateStore(config.redis_url, namespace=config.state_namespace)
    return MemoryStateStore(namespace=config.state_namespace)


def build_runtime(
    config: ExporterConfig,
    client: UpstreamClientProtocol | None = None,
    store: BaseStateStore | None = None,
) -> ExporterRuntime:
    """
    Wire the collection pipeline for one tenant.

    Raises:
        AuthenticationError: If no client is given and no credentials are configured
    """
    client = client or CloudflareClient(config)
    store = store or build_store(config)
    actor = RefreshActor(
        FetchOrchestrator(client, config),
        store,
        state_key=config.state_key,
        refresh_interval=config.refresh_interval_seconds,
        engine=ReconciliationEngine(config.metrics_denylist),
        registry=MetricsRegistry(METRIC_DEFINITIONS, config.metrics_denylist),
    )
    return ExporterRuntime(config=config, actor=actor, store=store, client=client)


def create_app(runtime: ExporterRuntime) -> FastAPI:
    """Build the FastAPI application serving ``runtime``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        await runtime.actor.start()
        logger.info(f"Exporter started, serving metrics on {runtime.config.metrics_path}")
        yield
        await runtime.aclose()
        logger.info("Exporter stopped")

    app = FastAPI(title="Cloudflare Prometheus Exporter", version=__version__, lifespan=lifespan)
    app.state.runtime = runtime
    index = INDEX_HTML.format(metrics_path=runtime.config.metrics_path)

    @app.get("/", response_class=HTMLResponse)
    async def root() -> str:
        return index

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/status")
    async def status() -> dict[str, Any]:
        health_result = await runtime.store.health_check()
        return {
            **runtime.actor.status(),
            "tenant": runtime.config.tenant,
            "store": {
                "backend": health_result.backend_type,
                "healthy": health_result.healthy,
                "error": health_result.error,
            },
        }

    @app.get(runtime.config.metrics_path)
    async def metrics() -> Response:
        runtime.actor.notify_scrape()
        try:
            body = runtime.actor.metrics_text()
        except SerializationError as e:
            return PlainTextResponse(f"Error serializing metrics: {e}", status_code=500)
        return Response(content=body, media_type=CONTENT_TYPE_LATEST)

    return app


__all__ = ["ExporterRuntime", "build_runtime", "build_store", "create_app"]
