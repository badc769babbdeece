"""Per-input quota check.

Runs before each user input is accepted: refreshes the status bar, nags
when usage is high and blocks ordinary input once the quota is exceeded.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from session_guard.constants import (
    QUOTA_CACHE_TTL_SECONDS,
    STATUS_KEY,
    WARN_NOTIFY_COOLDOWN_SECONDS,
)
from session_guard.format import collapse_whitespace, format_bytes, format_percent
from session_guard.host import Host
from session_guard.quota.engine import (
    QuotaSummary,
    QuotaSummaryCache,
    build_status_text,
    get_quota_summary,
)
from session_guard.quota.store import QuotaStore

logger = logging.getLogger(__name__)

COMMAND_NAME = "/session-guard"

# Subcommands still accepted while the quota is exceeded
_ALLOWED_SUBCOMMANDS = ("scan", "clean", "quota set")


def is_allowed_critical_input(text: str) -> bool:
    """Whether input may proceed while the quota is exceeded."""
    normalized = collapse_whitespace(text)
    if normalized == "/help":
        return True
    if normalized == COMMAND_NAME:
        return True
    return any(
        normalized.startswith(f"{COMMAND_NAME} {sub}") for sub in _ALLOWED_SUBCOMMANDS
    )


class InputGuard:
    """Checks quota state before input, keeping its own summary cache."""

    def __init__(
        self,
        store: QuotaStore | None = None,
        ttl: float = QUOTA_CACHE_TTL_SECONDS,
        warn_cooldown: float = WARN_NOTIFY_COOLDOWN_SECONDS,
    ) -> None:
        self._store = store or QuotaStore()
        self._ttl = ttl
        self._warn_cooldown = warn_cooldown
        self._cache: QuotaSummaryCache | None = None
        self._last_warned_at: float | None = None

    @property
    def cache(self) -> QuotaSummaryCache | None:
        return self._cache

    def invalidate(self) -> None:
        self._cache = None

    async def refresh(
        self,
        host: Host,
        root: str | Path,
        force: bool = False,
        now: float | None = None,
    ) -> QuotaSummary:
        """Get the (possibly cached) summary and update the status bar."""
        summary, self._cache = await get_quota_summary(
            root,
            cache=self._cache,
            force=force,
            now=now,
            ttl=self._ttl,
            store=self._store,
        )
        host.set_status(STATUS_KEY, build_status_text(summary))
        return summary

    def remember(
        self,
        host: Host,
        root: str | Path,
        summary: QuotaSummary,
        now: float | None = None,
    ) -> None:
        """Store a freshly computed summary (e.g. after a cleanup)."""
        now = time.monotonic() if now is None else now
        self._cache = QuotaSummaryCache(root=str(root), summary=summary, computed_at=now)
        host.set_status(STATUS_KEY, build_status_text(summary))

    async def check(
        self, text: str, host: Host, root: str | Path, now: float | None = None
    ) -> bool:
        """Decide whether an input may proceed.

        Returns:
            False if the input is blocked because the quota is exceeded.
        """
        now = time.monotonic() if now is None else now
        summary = await self.refresh(host, root, now=now)

        if summary.state == "critical" and summary.quota_bytes:
            if is_allowed_critical_input(text):
                return True
            logger.info(
                "input_blocked_quota_exceeded",
                extra={"quota.usage_ratio": summary.usage_ratio},
            )
            host.notify(
                f"Session storage quota exceeded ({format_bytes(summary.total_size_bytes)}"
                f"/{format_bytes(summary.quota_bytes)}). "
                f"Run {COMMAND_NAME} clean to free space.",
                "error",
            )
            return False

        if summary.state == "warn" and self._should_warn(now):
            self._last_warned_at = now
            host.notify(
                f"Session storage at {format_percent(summary.usage_ratio)} of quota. "
                f"Consider {COMMAND_NAME} clean.",
                "warning",
            )
        return True

    def _should_warn(self, now: float) -> bool:
        if self._last_warned_at is None:
            return True
        return now - self._last_warned_at >= self._warn_cooldown
