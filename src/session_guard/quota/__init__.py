"""Storage quota: config persistence, state machine and input guard."""

from session_guard.quota.engine import (
    QuotaState,
    QuotaSummary,
    QuotaSummaryCache,
    build_quota_summary,
    build_status_text,
    compute_quota_state,
    get_quota_summary,
    load_quota_summary,
)
from session_guard.quota.guard import InputGuard, is_allowed_critical_input
from session_guard.quota.store import QuotaStore

__all__ = [
    "InputGuard",
    "QuotaState",
    "QuotaStore",
    "QuotaSummary",
    "QuotaSummaryCache",
    "build_quota_summary",
    "build_status_text",
    "compute_quota_state",
    "get_quota_summary",
    "is_allowed_critical_input",
    "load_quota_summary",
]
