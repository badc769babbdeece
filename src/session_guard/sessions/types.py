"""Record types produced by session scans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SortMode = Literal["size", "lru"]

SORT_MODES: tuple[SortMode, ...] = ("size", "lru")


@dataclass(frozen=True)
class SessionRecord:
    """One session transcript file, built fresh on every scan."""

    path: str
    size_bytes: int
    mtime_ms: float
    is_active: bool
    namespace: str
    title: str


@dataclass
class NamespaceAggregate:
    """Totals for all sessions sharing a namespace."""

    namespace: str
    count: int = 0
    size_bytes: int = 0
    latest_mtime_ms: float = 0.0

    def add(self, record: SessionRecord) -> None:
        self.count += 1
        self.size_bytes += record.size_bytes
        self.latest_mtime_ms = max(self.latest_mtime_ms, record.mtime_ms)


@dataclass(frozen=True)
class UsageTotals:
    """Aggregate size and count from metadata only (no content reads)."""

    total_size_bytes: int
    total_sessions: int
