# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Resource inventory types.

Zones, accounts and certificate packs as returned by the Cloudflare REST
API, plus the query time window shared by every request in a cycle.
Inventory is fetched fresh every cycle and never persisted.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field

FREE_PLAN_ID = "0feeeeeeeeeeeeeeeeeeeeeeeeeeeeee"


class ZonePlan(BaseModel):
    """Billing plan attached to a zone."""

    id: str = ""
    name: str = ""
    is_subscribed: bool = False


class ZoneAccount(BaseModel):
    """Owning account reference embedded in a zone."""

    id: str = ""
    name: str = ""


class Zone(BaseModel):
    """
    A Cloudflare zone (domain) as listed by ``GET /zones``.

    Attributes:
        id: Zone tag, used as the ``zoneTag`` filter in GraphQL queries
        name: Zone hostname, exposed as the ``zone`` label
        status: Activation status reported by the API
        plan: Billing plan; the free plan gates premium datasets
        account: Owning account, exposed as the ``account`` label
    """

    id: str
    name: str
    status: str = ""
    plan: ZonePlan = Field(default_factory=ZonePlan)
    account: ZoneAccount = Field(default_factory=ZoneAccount)

    @property
    def is_free_plan(self) -> bool:
        return self.plan.id == FREE_PLAN_ID


class Account(BaseModel):
    """A Cloudflare account as listed by ``GET /accounts``."""

    id: str
    name: str
    type: str = ""


class SSLCertificate(BaseModel):
    """An edge certificate pack entry for a zone."""

    id: str = ""
    type: str = ""
    status: str = ""
    issuer: str = ""
    expires_on: datetime | None = None
    hosts: list[str] = Field(default_factory=list)


def normalize_account_name(name: str) -> str:
    """Lowercase an account name and replace spaces with dashes."""
    return name.lower().replace(" ", "-")


@dataclass(frozen=True)
class TimeWindow:
    """
    Half-open query window ``[mintime, maxtime)``.

    The window trails wall-clock time by ``scrape_delay`` seconds because
    the analytics datasets are only complete after a few minutes.
    """

    mintime: datetime
    maxtime: datetime

    @classmethod
    def ending_before(
        cls, now: datetime, scrape_delay: int, time_window: int
    ) -> "TimeWindow":
        """Build the window for a cycle starting at ``now`` (truncated to the minute)."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        anchor = now.astimezone(timezone.utc).replace(second=0, microsecond=0)
        maxtime = anchor - timedelta(seconds=scrape_delay)
        mintime = maxtime - timedelta(seconds=time_window)
        return cls(mintime=mintime, maxtime=maxtime)

    @staticmethod
    def _format(value: datetime) -> str:
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")

    @property
    def mintime_iso(self) -> str:
        return self._format(self.mintime)

    @property
    def maxtime_iso(self) -> str:
        return self._format(self.maxtime)


__all__ = [
    "FREE_PLAN_ID",
    "Account",
    "SSLCertificate",
    "TimeWindow",
    "Zone",
    "ZoneAccount",
    "ZonePlan",
    "normalize_account_name",
]
