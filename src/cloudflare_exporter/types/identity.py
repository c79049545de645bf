# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric identity for the Cloudflare exporter.

A metric series is identified by its name and its label set. Label sets
are stored sorted by key so that two observations carrying the same labels
in a different insertion order always land on the same series.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

_KEY_ESCAPES = str.maketrans({"\\": "\\\\", ",": "\\,", "=": "\\=", "}": "\\}"})


def _escape(value: str) -> str:
    return value.translate(_KEY_ESCAPES)


@dataclass(frozen=True)
class MetricIdentity:
    """
    Canonical (name, labels) pair used to key counter and gauge state.

    Attributes:
        name: Metric name as listed in the metric catalog
        labels: Label pairs sorted by label name
    """

    name: str
    labels: tuple[tuple[str, str], ...] = ()

    @classmethod
    def of(cls, name: str, labels: Mapping[str, object] | None = None) -> MetricIdentity:
        """Build an identity from a label mapping, in any insertion order."""
        if not labels:
            return cls(name)
        return cls(name, tuple(sorted((str(k), str(v)) for k, v in labels.items())))

    @property
    def key(self) -> str:
        """Canonical string form, e.g. ``cloudflare_zone_requests_total{account=acme,zone=example.com}``.

        Backslashes, commas, equals signs and closing braces inside label
        names and values are backslash-escaped, so distinct label sets never
        share a key.
        """
        pairs = ",".join(f"{_escape(k)}={_escape(v)}" for k, v in self.labels)
        return f"{self.name}{{{pairs}}}"

    def label_dict(self) -> dict[str, str]:
        return dict(self.labels)

    def __str__(self) -> str:
        return self.key


__all__ = ["MetricIdentity"]
