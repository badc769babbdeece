"""Cleanup candidate selection.

The active session is never deletable. Of the rest, the most recently
touched keep_recent sessions are shown but not pre-selected; everything
older is pre-selected.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from session_guard.constants import DEFAULT_KEEP_RECENT
from session_guard.sessions.ranking import sort_sessions
from session_guard.sessions.types import SessionRecord

CandidateReason = Literal["ACTIVE", "KEEP_RECENT"]


@dataclass(frozen=True)
class CleanCandidate:
    path: str
    namespace: str
    size_bytes: int
    mtime_ms: float
    title: str
    selectable: bool
    default_selected: bool
    reason: CandidateReason | None = None

    @classmethod
    def from_record(
        cls,
        record: SessionRecord,
        selectable: bool,
        default_selected: bool,
        reason: CandidateReason | None = None,
    ) -> CleanCandidate:
        return cls(
            path=record.path,
            namespace=record.namespace,
            size_bytes=record.size_bytes,
            mtime_ms=record.mtime_ms,
            title=record.title,
            selectable=selectable,
            default_selected=default_selected,
            reason=reason,
        )


def build_clean_candidates(
    records: Iterable[SessionRecord], keep_recent: int = DEFAULT_KEEP_RECENT
) -> list[CleanCandidate]:
    """Build the ordered candidate list for interactive cleanup.

    Active sessions come first and are locked. Non-active sessions follow
    oldest first; all but the newest keep_recent are pre-selected.
    """
    records = list(records)
    active = [r for r in records if r.is_active]
    non_active = sort_sessions((r for r in records if not r.is_active), "lru")
    cutoff = max(0, len(non_active) - max(0, keep_recent))

    candidates = [
        CleanCandidate.from_record(
            r, selectable=False, default_selected=False, reason="ACTIVE"
        )
        for r in active
    ]
    for index, record in enumerate(non_active):
        selected = index < cutoff
        candidates.append(
            CleanCandidate.from_record(
                record,
                selectable=True,
                default_selected=selected,
                reason=None if selected else "KEEP_RECENT",
            )
        )
    return candidates


def selected_records(
    records: Iterable[SessionRecord], paths: Iterable[str]
) -> list[SessionRecord]:
    """Map a UI selection back onto scanned records, never including active ones."""
    wanted = {Path(p).resolve() for p in paths}
    return [
        r for r in records if not r.is_active and Path(r.path).resolve() in wanted
    ]
