"""Plain-text report payloads and their rich rendering.

Reports are built as plain text so any host can show them; render_report()
adds styling for hosts that draw with rich.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rich.text import Text

from session_guard.cleanup.executor import CleanupResult
from session_guard.constants import REPORT_CUSTOM_TYPE
from session_guard.format import (
    ellipsize_middle,
    format_bytes,
    format_percent,
    format_time,
    pad,
)
from session_guard.quota.engine import QuotaSummary
from session_guard.sessions.ranking import build_namespace_stats, sort_sessions
from session_guard.sessions.types import SessionRecord, SortMode

SCAN_TITLE = "Session Guard Scan"
CLEANUP_TITLE = "Session Guard Cleanup Result"
QUOTA_TITLE = "Session Guard Quota Updated"

TOP_N = 10
CLEAN_ADVICE = "Advice: Run /session-guard clean to free space"
QUOTA_ADVICE = "Advice: Use /session-guard quota set <size>"


@dataclass(frozen=True)
class Report:
    """A report payload tagged for the host's rendering pipeline."""

    content: str
    custom_type: str = REPORT_CUSTOM_TYPE


def _quota_lines(summary: QuotaSummary) -> list[str]:
    if not summary.configured or not summary.quota_bytes:
        return ["Quota: (not set)", QUOTA_ADVICE]
    lines = [
        f"Quota: {format_bytes(summary.quota_bytes)} ({summary.quota_bytes} bytes)",
        f"Used: {format_bytes(summary.total_size_bytes)} ({summary.total_size_bytes} bytes)",
        f"Usage: {format_percent(summary.usage_ratio)}",
        f"State: {summary.state.upper()}",
    ]
    if summary.needs_attention:
        lines.append(CLEAN_ADVICE)
    return lines


def _rule(*widths: int) -> str:
    return "  ".join("-" * w for w in widths)


def build_scan_report(
    root: str,
    sessions: Sequence[SessionRecord],
    sort: SortMode,
    summary: QuotaSummary,
    current_namespace: str | None = None,
) -> str:
    total_size = sum(s.size_bytes for s in sessions)
    lines = [
        SCAN_TITLE,
        f"Sort: {sort}",
        f"Session dir: {root}",
        *([f"Current namespace: {current_namespace}"] if current_namespace else []),
        f"Total sessions: {len(sessions)}",
        f"Total size: {format_bytes(total_size)} ({total_size} bytes)",
        *_quota_lines(summary),
        "",
        "Top namespaces by size:",
    ]

    namespaces = build_namespace_stats(sessions)[:TOP_N]
    if not namespaces:
        lines.append("(none)")
    else:
        lines.append(
            f"{pad('#', 3, 'right')}  {pad('Size', 10, 'right')}  "
            f"{pad('Count', 5, 'right')}  {pad('Updated', 16)}  Namespace"
        )
        lines.append(_rule(3, 10, 5, 16, 36))
        for i, ns in enumerate(namespaces, start=1):
            lines.append(
                f"{pad(str(i), 3, 'right')}  {pad(format_bytes(ns.size_bytes), 10, 'right')}  "
                f"{pad(str(ns.count), 5, 'right')}  {pad(format_time(ns.latest_mtime_ms), 16)}  "
                f"{ellipsize_middle(ns.namespace, 36)}"
            )
    lines.append("")

    top = sort_sessions(sessions, sort)[:TOP_N]
    if not top:
        lines.append("No session files found.")
        return "\n".join(lines)

    lines.append(
        "Top 10 least recently updated sessions:"
        if sort == "lru"
        else "Top 10 largest session files:"
    )
    lines.append(
        f"{pad('#', 3, 'right')}  {pad('Size', 10, 'right')}  {pad('Updated', 16)}  "
        f"{pad('Namespace', 26)}  Summary"
    )
    lines.append(_rule(3, 10, 16, 26, 34))
    for i, s in enumerate(top, start=1):
        label = f"{s.title} [ACTIVE]" if s.is_active else s.title
        lines.append(
            f"{pad(str(i), 3, 'right')}  {pad(format_bytes(s.size_bytes), 10, 'right')}  "
            f"{pad(format_time(s.mtime_ms), 16)}  {pad(ellipsize_middle(s.namespace, 26), 26)}  "
            f"{ellipsize_middle(label, 34)}"
        )
    return "\n".join(lines)


def build_quota_report(size_bytes: int, summary: QuotaSummary) -> str:
    lines = [
        QUOTA_TITLE,
        f"Quota: {format_bytes(size_bytes)} ({size_bytes} bytes)",
        f"Used: {format_bytes(summary.total_size_bytes)} ({summary.total_size_bytes} bytes)",
        f"Usage: {format_percent(summary.usage_ratio)}",
        f"State: {summary.state.upper()}",
    ]
    if summary.needs_attention:
        lines.append(CLEAN_ADVICE)
    return "\n".join(lines)


def build_cleanup_report(result: CleanupResult) -> str:
    lines = [
        CLEANUP_TITLE,
        f"Deleted: {result.succeeded}/{result.attempted}",
        f"Freed: {format_bytes(result.freed_bytes)} ({result.freed_bytes} bytes)",
        f"Methods: trash={result.trashed}, quarantine={result.quarantined}",
    ]
    if result.failed:
        shown, omitted = result.failure_preview()
        lines.append("")
        lines.append("Failures:")
        lines.extend(f"{i}. {failure}" for i, failure in enumerate(shown, start=1))
        if omitted:
            lines.append(f"... {omitted} more")
    return "\n".join(lines)


# Label prefixes highlighted in rendered reports
_LABELS = (
    "Sort:",
    "Session dir:",
    "Total sessions:",
    "Total size:",
    "Quota:",
    "Used:",
    "Usage:",
    "State:",
    "Deleted:",
    "Freed:",
    "Methods:",
)

_STATE_STYLES = {
    "OK": "green",
    "INFO": "cyan",
    "WARN": "yellow",
    "CRITICAL": "bold red",
    "DISABLED": "dim",
}


def _render_line(line: str) -> Text:
    if line in (SCAN_TITLE, CLEANUP_TITLE, QUOTA_TITLE):
        return Text.assemble(("◉ ", "cyan"), (line, "bold cyan"))

    if line.startswith("Advice:"):
        return Text(line, style="yellow")

    if line.endswith(":") and line.startswith(("Top ", "Failures")):
        return Text.assemble((line[:-1], "bold cyan"), (":", "dim"))

    for label in _LABELS:
        if line.startswith(label):
            value = line[len(label) :].strip()
            style = _STATE_STYLES.get(value, "dim") if label == "State:" else "bold"
            if label == "Session dir:":
                style = "dim"
            return Text.assemble((label, "dim"), " ", (value, style))

    text = Text(line)
    text.highlight_words(["[ACTIVE]", "[LOCKED]"], style="bold yellow")
    return text


def render_report(content: str) -> Text:
    """Style a plain-text report for display on a rich console."""
    return Text("\n").join(_render_line(line) for line in content.split("\n"))
