"""Quota state calculation and summaries.

The engine is stateless: every summary is recomputed from filesystem
metadata and the persisted config. Callers that want to avoid rescanning
keep a QuotaSummaryCache value and pass it back in.
"""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from session_guard.config.models import QuotaConfig
from session_guard.constants import (
    DEFAULT_QUOTA_INFO_RATIO,
    DEFAULT_QUOTA_WARN_RATIO,
    QUOTA_CACHE_TTL_SECONDS,
)
from session_guard.format import format_bytes, format_percent
from session_guard.quota.store import QuotaStore
from session_guard.sessions.scanner import scan_usage
from session_guard.sessions.types import UsageTotals

QuotaState = Literal["disabled", "ok", "info", "warn", "critical"]


def compute_quota_state(
    usage_ratio: float, info_ratio: float, warn_ratio: float
) -> QuotaState:
    """Map a usage ratio onto the configured thresholds.

    Breakpoints are inclusive at info_ratio, warn_ratio and 1.0. A non-finite
    ratio is treated as ok.
    """
    if not math.isfinite(usage_ratio) or usage_ratio < info_ratio:
        return "ok"
    if usage_ratio < warn_ratio:
        return "info"
    if usage_ratio < 1:
        return "warn"
    return "critical"


@dataclass(frozen=True)
class QuotaSummary:
    configured: bool
    state: QuotaState
    usage_ratio: float
    total_size_bytes: int
    total_sessions: int
    info_ratio: float
    warn_ratio: float
    quota_bytes: int | None = None

    @property
    def needs_attention(self) -> bool:
        return self.state in ("warn", "critical")


def build_quota_summary(usage: UsageTotals, config: QuotaConfig | None) -> QuotaSummary:
    """Combine usage totals with the (optional) quota config."""
    if config is None:
        return QuotaSummary(
            configured=False,
            state="disabled",
            usage_ratio=0.0,
            total_size_bytes=usage.total_size_bytes,
            total_sessions=usage.total_sessions,
            info_ratio=DEFAULT_QUOTA_INFO_RATIO,
            warn_ratio=DEFAULT_QUOTA_WARN_RATIO,
        )

    usage_ratio = usage.total_size_bytes / config.max_total_size_bytes
    return QuotaSummary(
        configured=True,
        state=compute_quota_state(usage_ratio, config.info_ratio, config.warn_ratio),
        usage_ratio=usage_ratio,
        total_size_bytes=usage.total_size_bytes,
        total_sessions=usage.total_sessions,
        info_ratio=config.info_ratio,
        warn_ratio=config.warn_ratio,
        quota_bytes=config.max_total_size_bytes,
    )


async def load_quota_summary(
    root: str | Path, store: QuotaStore | None = None
) -> QuotaSummary:
    """Scan usage and read the config concurrently, then summarize."""
    store = store or QuotaStore()
    usage, config = await asyncio.gather(scan_usage(root), store.read())
    return build_quota_summary(usage, config)


def build_status_text(summary: QuotaSummary) -> str:
    """Status-bar text for the current quota state."""
    if not summary.configured or not summary.quota_bytes:
        return "Session quota: not set"
    return (
        f"Session quota {summary.state.upper()} {format_percent(summary.usage_ratio)} "
        f"({format_bytes(summary.total_size_bytes)}/{format_bytes(summary.quota_bytes)})"
    )


@dataclass(frozen=True)
class QuotaSummaryCache:
    """A computed summary remembered for one session root."""

    root: str
    summary: QuotaSummary
    computed_at: float

    def is_fresh(
        self, root: str | Path, now: float, ttl: float = QUOTA_CACHE_TTL_SECONDS
    ) -> bool:
        return self.root == str(root) and 0 <= now - self.computed_at < ttl


async def get_quota_summary(
    root: str | Path,
    cache: QuotaSummaryCache | None = None,
    force: bool = False,
    now: float | None = None,
    ttl: float = QUOTA_CACHE_TTL_SECONDS,
    store: QuotaStore | None = None,
) -> tuple[QuotaSummary, QuotaSummaryCache]:
    """Return a summary, reusing the cached one while it is fresh.

    Args:
        root: Session root directory.
        cache: Previously returned cache value, if any.
        force: Always recompute.
        now: Current monotonic time (defaults to time.monotonic()).
        ttl: Cache lifetime in seconds.
        store: Quota store override.

    Returns:
        Tuple of (summary, cache value to keep for the next call).
    """
    now = time.monotonic() if now is None else now
    if not force and cache is not None and cache.is_fresh(root, now, ttl):
        return cache.summary, cache

    summary = await load_quota_summary(root, store)
    return summary, QuotaSummaryCache(root=str(root), summary=summary, computed_at=now)
