# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Fetch orchestration for one refresh cycle.

A cycle lists zones and accounts, applies the zone filters, plans one
fetch slice per (category, batch) or (category, account), runs every
slice concurrently under a shared semaphore and maps the results in plan
order. A failing slice is recorded and skipped; only an unavailable zone
inventory fails the cycle as a whole.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..config import ExporterConfig
from ..observability import constants as m
from ..protocols.client import UpstreamClientProtocol
from ..types.inventory import Account, TimeWindow, Zone
from ..types.observation import CycleResult, FetchFailure
from .mapper import LabelMapper

logger = logging.getLogger(__name__)

# Categories covering every filtered zone
BASE_CATEGORIES = (
    "http",
    "firewall",
    "health_check",
    "adaptive",
    "edge_country",
    "request_method",
)
# Categories covering paid-plan zones only, skipped entirely on the free tier
PREMIUM_CATEGORIES = ("colo", "colo_error", "load_balancer", "logpush_zone")
SSL_CATEGORY = "ssl"
ACCOUNT_CATEGORIES = ("workers", "logpush_account", "magic_transit")
INVENTORY_CATEGORIES = ("accounts", "firewall_rules")

ALL_CATEGORIES = (
    INVENTORY_CATEGORIES
    + BASE_CATEGORIES
    + PREMIUM_CATEGORIES
    + (SSL_CATEGORY,)
    + ACCOUNT_CATEGORIES
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def batched(items: Sequence[str], size: int) -> list[list[str]]:
    """Split ``items`` into consecutive batches of at most ``size``."""
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def filter_zones(zones: Sequence[Zone], config: ExporterConfig) -> list[Zone]:
    """Apply the include list, then the exclude list."""
    selected = list(zones)
    if config.zones:
        wanted = set(config.zones)
        selected = [z for z in selected if z.id in wanted]
    if config.exclude_zones:
        excluded = set(config.exclude_zones)
        selected = [z for z in selected if z.id not in excluded]
    return selected


@dataclass
class FetchSlice:
    """
    One planned upstream fetch and the mapping applied to its payload.

    Attributes:
        category: Telemetry category
        scope: Batch index, zone id or account id
        fetch: Zero-argument coroutine factory performing the fetch
        apply: Maps the fetched payload into a CycleResult
        zone_count: Number of zones the slice covers (batch slices only)
        limit: Extra semaphore bounding this kind of slice
    """

    category: str
    scope: str
    fetch: Callable[[], Awaitable[Any]]
    apply: Callable[[Any, CycleResult], None]
    zone_count: int = 0
    limit: asyncio.Semaphore | None = None


class FetchOrchestrator:
    """
    Produces a CycleResult from the upstream analytics API.

    ``run_cycle`` never raises for upstream failures. Cancellation always
    propagates so that stopping the refresh actor reaches every in-flight
    fetch.
    """

    def __init__(
        self,
        client: UpstreamClientProtocol,
        config: ExporterConfig,
        mapper: LabelMapper | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.config = config
        self.mapper = mapper or LabelMapper(
            exclude_host=config.exclude_host,
            http_status_group=config.http_status_group,
        )
        self._clock = clock

    async def _run_slice(
        self, plan: FetchSlice, semaphore: asyncio.Semaphore
    ) -> tuple[bool, Any]:
        """Run one fetch; returns (True, payload) or (False, error)."""
        try:
            if plan.limit is not None:
                async with plan.limit, semaphore:
                    return True, await plan.fetch()
            async with semaphore:
                return True, await plan.fetch()
        except asyncio.CancelledError:
            raise  # Always re-raise for graceful shutdown
        except Exception as e:
            logger.warning(f"Fetch of {plan.category} for {plan.scope} failed: {e}")
            return False, e

    async def _fetch_accounts(self, result: CycleResult) -> list[Account]:
        try:
            return await self.client.fetch_accounts()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Failed to list accounts, skipping account categories: {e}")
            result.failures.append(FetchFailure("accounts", "inventory", str(e)))
            return []

    async def _fetch_firewall_rules(
        self, zones: Sequence[Zone], semaphore: asyncio.Semaphore, result: CycleResult
    ) -> dict[str, str]:
        """Rule descriptions for every zone; a failing zone contributes nothing."""
        limit = asyncio.Semaphore(self.config.ssl_concurrency)
        plans = [
            FetchSlice(
                category="firewall_rules",
                scope=zone.id,
                fetch=lambda zone_id=zone.id: self.client.fetch_firewall_rules(zone_id),
                apply=lambda payload, _result: None,
                limit=limit,
            )
            for zone in zones
        ]
        outcomes = await asyncio.gather(*(self._run_slice(p, semaphore) for p in plans))

        rules: dict[str, str] = {}
        for plan, (ok, payload) in zip(plans, outcomes):
            if ok:
                rules.update(payload)
            else:
                result.failures.append(FetchFailure(plan.category, plan.scope, str(payload)))
        return rules

    def plan(
        self,
        zones: Sequence[Zone],
        accounts: Sequence[Account],
        firewall_rules: dict[str, str],
        window: TimeWindow,
    ) -> list[FetchSlice]:
        """Build the ordered list of fetch slices for one cycle."""
        client = self.client
        mapper = self.mapper
        batch_size = self.config.batch_size
        zones_by_id = {z.id: z for z in zones}

        zone_fetchers: dict[str, tuple[Callable[..., Awaitable[Any]], Callable[..., None]]] = {
            "http": (client.fetch_http_metrics, mapper.map_http),
            "firewall": (
                client.fetch_firewall_metrics,
                lambda rows, by_id, out: mapper.map_firewall(rows, by_id, firewall_rules, out),
            ),
            "health_check": (client.fetch_health_check_metrics, mapper.map_health_checks),
            "adaptive": (client.fetch_adaptive_metrics, mapper.map_adaptive),
            "edge_country": (client.fetch_edge_country_metrics, mapper.map_edge_country),
            "request_method": (
                client.fetch_request_method_metrics,
                mapper.map_request_method,
            ),
            "colo": (client.fetch_colo_metrics, mapper.map_colo),
            "colo_error": (client.fetch_colo_error_metrics, mapper.map_colo_error),
            "load_balancer": (client.fetch_load_balancer_metrics, mapper.map_load_balancer),
            "logpush_zone": (client.fetch_logpush_zone_metrics, mapper.map_logpush_zone),
        }
        account_fetchers: dict[str, tuple[Callable[..., Awaitable[Any]], Callable[..., None]]] = {
            "workers": (client.fetch_worker_totals, mapper.map_workers),
            "logpush_account": (
                client.fetch_logpush_account_metrics,
                mapper.map_logpush_account,
            ),
            "magic_transit": (client.fetch_magic_transit_metrics, mapper.map_magic_transit),
        }

        def zone_slice(category: str, index: int, batch: list[str]) -> FetchSlice:
            fetch, apply = zone_fetchers[category]
            return FetchSlice(
                category=category,
                scope=f"batch-{index}",
                fetch=lambda: fetch(batch, window),
                apply=lambda rows, out: apply(rows, zones_by_id, out),
                zone_count=len(batch),
            )

        slices: list[FetchSlice] = []
        zone_ids = [z.id for z in zones]
        for index, batch in enumerate(batched(zone_ids, batch_size)):
            slices.extend(zone_slice(c, index, batch) for c in BASE_CATEGORIES)

        if not self.config.free_tier:
            premium = [z for z in zones if not z.is_free_plan]
            premium_ids = [z.id for z in premium]
            for index, batch in enumerate(batched(premium_ids, batch_size)):
                slices.extend(zone_slice(c, index, batch) for c in PREMIUM_CATEGORIES)

            ssl_limit = asyncio.Semaphore(self.config.ssl_concurrency)
            for zone in premium:
                slices.append(
                    FetchSlice(
                        category=SSL_CATEGORY,
                        scope=zone.id,
                        fetch=lambda zone_id=zone.id: client.fetch_ssl_certificates(zone_id),
                        apply=lambda certs, out, zone=zone: mapper.map_ssl_certificates(
                            zone, certs, out
                        ),
                        limit=ssl_limit,
                    )
                )

        for account in accounts:
            for category in ACCOUNT_CATEGORIES:
                fetch, apply = account_fetchers[category]
                slices.append(
                    FetchSlice(
                        category=category,
                        scope=account.id,
                        fetch=lambda fetch=fetch, account_id=account.id: fetch(account_id, window),
                        apply=lambda rows, out, apply=apply, account=account: apply(
                            account, rows, out
                        ),
                    )
                )
        return slices

    async def run_cycle(self) -> CycleResult:
        """
        Run one full fetch cycle.

        Returns:
            CycleResult with every successful slice mapped, plus exporter
            info gauges. ``error`` is set only when zones could not be listed.
        """
        config = self.config
        window = TimeWindow.ending_before(self._clock(), config.scrape_delay, config.time_window)
        result = CycleResult()
        semaphore = asyncio.Semaphore(config.max_concurrent_fetches)

        zones_task = asyncio.ensure_future(self.client.fetch_zones())
        try:
            accounts = await self._fetch_accounts(result)
            all_zones = await zones_task
        except asyncio.CancelledError:
            zones_task.cancel()
            raise
        except Exception as e:
            logger.error(f"Failed to list zones, cycle aborted: {e}")
            return CycleResult(error=f"Failed to fetch zones: {e}")

        zones = filter_zones(all_zones, config)
        logger.debug(
            f"Cycle window {window.mintime_iso}..{window.maxtime_iso}: "
            f"{len(zones)}/{len(all_zones)} zones, {len(accounts)} accounts"
        )

        firewall_rules = await self._fetch_firewall_rules(zones, semaphore, result)
        slices = self.plan(zones, accounts, firewall_rules, window)
        outcomes = await asyncio.gather(*(self._run_slice(s, semaphore) for s in slices))

        processed = 0
        for plan, (ok, payload) in zip(slices, outcomes):
            if not ok:
                result.failures.append(FetchFailure(plan.category, plan.scope, str(payload)))
                continue
            partial = CycleResult()
            try:
                plan.apply(payload, partial)
            except Exception as e:
                logger.warning(f"Mapping of {plan.category} for {plan.scope} failed: {e}")
                result.failures.append(FetchFailure(plan.category, plan.scope, str(e)))
                continue
            result.extend(partial)
            if plan.category == "http":
                processed += plan.zone_count

        result.add_gauge(m.EXPORTER_UP, None, 1)
        result.add_gauge(m.ZONES_TOTAL, None, len(all_zones))
        result.add_gauge(m.ZONES_FILTERED, None, len(zones))
        result.add_gauge(m.ZONES_PROCESSED, None, processed)
        for category in ALL_CATEGORIES:
            count = sum(1 for f in result.failures if f.category == category)
            result.add_gauge(m.EXPORTER_FETCH_FAILURES, {"category": category}, count)

        if result.failures:
            logger.info(f"Cycle completed with {len(result.failures)} failed fetches")
        return result


__all__ = [
    "ACCOUNT_CATEGORIES",
    "ALL_CATEGORIES",
    "BASE_CATEGORIES",
    "PREMIUM_CATEGORIES",
    "FetchOrchestrator",
    "FetchSlice",
    "batched",
    "filter_zones",
]
