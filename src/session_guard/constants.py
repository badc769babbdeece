"""Defaults and thresholds shared across the guard."""

SESSION_FILE_SUFFIX = ".jsonl"

DEFAULT_KEEP_RECENT = 20
MAX_SESSION_TITLE_LEN = 72
NO_TITLE_PLACEHOLDER = "(No user prompt yet)"
UNKNOWN_NAMESPACE = "(unknown)"

DEFAULT_QUOTA_INFO_RATIO = 0.7
DEFAULT_QUOTA_WARN_RATIO = 0.9

STATUS_KEY = "session-guard"
REPORT_CUSTOM_TYPE = "session-guard-report"

QUOTA_CACHE_TTL_SECONDS = 15.0
WARN_NOTIFY_COOLDOWN_SECONDS = 60.0

# Soft delete
TRASH_COMMAND = "trash"
TRASH_TIMEOUT_SECONDS = 10.0
QUARANTINE_DIR_NAME = "session-trash"
