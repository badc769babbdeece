"""Command actions: scan, quota set and interactive cleanup."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiofiles.os

from session_guard.cleanup.candidates import build_clean_candidates, selected_records
from session_guard.cleanup.executor import SoftDeleter, soft_delete_sessions
from session_guard.commands.args import (
    COMMAND,
    parse_clean_args,
    parse_quota_args,
    parse_scan_args,
)
from session_guard.config.paths import current_namespace, resolve_session_root
from session_guard.constants import DEFAULT_KEEP_RECENT
from session_guard.format import format_bytes
from session_guard.host import Host
from session_guard.quota.engine import QuotaSummary, load_quota_summary
from session_guard.quota.guard import InputGuard
from session_guard.quota.store import QuotaStore
from session_guard.reports import (
    Report,
    build_cleanup_report,
    build_quota_report,
    build_scan_report,
)
from session_guard.sessions.scanner import scan_sessions
from session_guard.sessions.types import SortMode

logger = logging.getLogger(__name__)

USAGE = f"Unknown subcommand. Use {COMMAND} [scan [--sort size|lru] | clean | quota set <size>]"


async def ensure_session_dir(host: Host, root: str | Path) -> bool:
    if await aiofiles.os.path.isdir(root):
        return True
    host.notify(f"Session directory not found: {root}", "warning")
    return False


async def run_scan(
    host: Host,
    root: str | Path,
    sort: SortMode = "size",
    store: QuotaStore | None = None,
) -> QuotaSummary:
    """Scan all sessions and send a usage report."""
    sessions, summary = await asyncio.gather(
        scan_sessions(root, host.active_session_file),
        load_quota_summary(root, store),
    )
    namespace = current_namespace(host.cwd, host.active_session_file, host.session_dir)
    report = build_scan_report(str(root), sessions, sort, summary, namespace)

    logger.info(
        "scan_completed",
        extra={"session.count": len(sessions), "scan.sort": sort},
    )
    host.notify(f"Scanned {len(sessions)} session files (global, sort={sort})", "info")
    host.send_report(Report(content=report))
    return summary


async def run_quota_set(
    host: Host,
    root: str | Path,
    size_bytes: int,
    store: QuotaStore | None = None,
) -> QuotaSummary | None:
    """Persist a new quota and report the resulting state."""
    store = store or QuotaStore()
    try:
        await store.write(size_bytes)
    except ValueError as e:
        host.notify(str(e), "warning")
        return None
    except OSError as e:
        logger.warning(
            "quota_config_write_failed",
            extra={"file.path": str(store.path), "error.message": str(e)},
        )
        host.notify(f"Could not save quota to {store.path}: {e}", "warning")
        return None

    summary = await load_quota_summary(root, store)
    host.send_report(Report(content=build_quota_report(size_bytes, summary)))
    return summary


async def run_clean(
    host: Host,
    root: str | Path,
    keep_recent: int = DEFAULT_KEEP_RECENT,
    deleter: SoftDeleter | None = None,
    store: QuotaStore | None = None,
) -> QuotaSummary | None:
    """Let the user pick sessions to soft-delete, then delete them.

    Returns:
        A refreshed quota summary, or None if nothing was deleted.
    """
    sessions = await scan_sessions(root, host.active_session_file)
    if not sessions:
        host.notify("No sessions found", "info")
        return None

    candidates = build_clean_candidates(sessions, keep_recent)
    if not any(c.selectable for c in candidates):
        host.notify("No deletable sessions found (only active sessions remain)", "info")
        return None

    selected_paths = await host.select(candidates)
    if selected_paths is None:
        host.notify("Cleanup cancelled", "info")
        return None

    chosen = selected_records(sessions, selected_paths)
    if not chosen:
        host.notify("No sessions selected", "warning")
        return None

    total_bytes = sum(s.size_bytes for s in chosen)
    confirmed = await host.confirm(
        "Confirm cleanup",
        f"Soft-delete {len(chosen)} sessions ({format_bytes(total_bytes)}). Continue?",
    )
    if not confirmed:
        host.notify("Cleanup cancelled", "info")
        return None

    result = await soft_delete_sessions(chosen, root, deleter)
    host.send_report(Report(content=build_cleanup_report(result)))

    if result.failed:
        host.notify(f"Cleanup finished with {result.failed} failure(s)", "warning")
    else:
        host.notify(f"Cleanup completed. Freed {format_bytes(result.freed_bytes)}", "info")

    return await load_quota_summary(root, store)


async def handle_command(
    host: Host,
    args: str | None,
    guard: InputGuard | None = None,
    store: QuotaStore | None = None,
    deleter: SoftDeleter | None = None,
) -> QuotaSummary | None:
    """Dispatch a `/session-guard ...` invocation.

    Argument errors are reported as a single warning before anything runs.
    """
    root = resolve_session_root(host.active_session_file, host.session_dir)
    summary: QuotaSummary | None = None

    clean = parse_clean_args(args)
    quota = parse_quota_args(args)
    scan = parse_scan_args(args)

    if clean.is_clean_command:
        if clean.error:
            host.notify(clean.error, "warning")
            return None
        if not await ensure_session_dir(host, root):
            return None
        summary = await run_clean(host, root, deleter=deleter, store=store)
    elif quota.is_quota_command:
        if quota.error or quota.size_bytes is None:
            host.notify(quota.error or USAGE, "warning")
            return None
        summary = await run_quota_set(host, root, quota.size_bytes, store)
    elif scan.is_scan_command:
        if scan.error:
            host.notify(scan.error, "warning")
            return None
        if not await ensure_session_dir(host, root):
            return None
        summary = await run_scan(host, root, scan.sort, store)
    else:
        host.notify(USAGE, "warning")
        return None

    if guard is not None:
        # Files may have changed even when the command produced no summary
        if summary is None:
            guard.invalidate()
        else:
            guard.remember(host, root, summary)
    return summary
