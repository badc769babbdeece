"""`/session-guard` command parsing and actions."""

from session_guard.commands.actions import (
    ensure_session_dir,
    handle_command,
    run_clean,
    run_quota_set,
    run_scan,
)
from session_guard.commands.args import (
    ParsedCleanArgs,
    ParsedQuotaArgs,
    ParsedScanArgs,
    parse_clean_args,
    parse_quota_args,
    parse_scan_args,
)

__all__ = [
    "ParsedCleanArgs",
    "ParsedQuotaArgs",
    "ParsedScanArgs",
    "ensure_session_dir",
    "handle_command",
    "parse_clean_args",
    "parse_quota_args",
    "parse_scan_args",
    "run_clean",
    "run_quota_set",
    "run_scan",
]
