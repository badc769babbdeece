"""Session transcript discovery and ranking.

Sessions are JSONL transcripts stored as
{session_root}/{namespace}/{session}.jsonl, one namespace per working
context. Records are rebuilt on every scan and never cached.
"""

from session_guard.sessions.ranking import (
    build_namespace_stats,
    lru_order_key,
    size_order_key,
    sort_sessions,
)
from session_guard.sessions.scanner import (
    collect_session_files,
    extract_message_text,
    extract_session_title,
    namespace_for,
    scan_sessions,
    scan_usage,
)
from session_guard.sessions.types import (
    SORT_MODES,
    NamespaceAggregate,
    SessionRecord,
    SortMode,
    UsageTotals,
)

__all__ = [
    "NamespaceAggregate",
    "SORT_MODES",
    "SessionRecord",
    "SortMode",
    "UsageTotals",
    "build_namespace_stats",
    "collect_session_files",
    "extract_message_text",
    "extract_session_title",
    "lru_order_key",
    "namespace_for",
    "scan_sessions",
    "scan_usage",
    "size_order_key",
    "sort_sessions",
]
