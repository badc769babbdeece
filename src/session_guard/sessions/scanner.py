"""Session storage scanning: file discovery, metadata and title extraction."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from session_guard.constants import (
    MAX_SESSION_TITLE_LEN,
    NO_TITLE_PLACEHOLDER,
    SESSION_FILE_SUFFIX,
    UNKNOWN_NAMESPACE,
)
from session_guard.format import collapse_whitespace, truncate_end
from session_guard.sessions.types import SessionRecord, UsageTotals

logger = logging.getLogger(__name__)


async def collect_session_files(root: Path) -> list[Path]:
    """Recursively collect session files under root.

    Directories that vanish or cannot be listed contribute nothing; the walk
    continues with their siblings. Symlinks are neither followed nor
    collected.
    """
    results: list[Path] = []

    async def walk(directory: Path) -> None:
        try:
            with await aiofiles.os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            logger.debug(
                "session_dir_unreadable",
                extra={"file.path": str(directory), "error.message": str(e)},
            )
            return

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    await walk(Path(entry.path))
                elif entry.is_file(follow_symlinks=False) and entry.name.endswith(
                    SESSION_FILE_SUFFIX
                ):
                    results.append(Path(entry.path))
            except OSError:
                continue

    await walk(Path(root))
    return results


def namespace_for(path: str | Path, root: str | Path) -> str:
    """Get the namespace (first directory under root) for a session file."""
    try:
        relative = Path(path).relative_to(root)
    except ValueError:
        return UNKNOWN_NAMESPACE
    if len(relative.parts) < 2:
        return UNKNOWN_NAMESPACE
    return relative.parts[0]


def extract_message_text(content: Any) -> str:
    """Extract plain text from message content.

    Args:
        content: Either a string or a list of content blocks. Only blocks
            tagged as text contribute.

    Returns:
        Extracted text joined with single spaces.
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    parts = [
        block["text"]
        for block in content
        if isinstance(block, dict)
        and block.get("type") == "text"
        and isinstance(block.get("text"), str)
    ]
    return " ".join(parts).strip()


def parse_message_line(line: str) -> tuple[str, str] | None:
    """Parse one JSONL line into (role, text) if it is a message record."""
    if "message" not in line:
        return None
    try:
        record = json.loads(line)
    except (ValueError, RecursionError):
        return None
    if not isinstance(record, dict) or record.get("type") != "message":
        return None
    message = record.get("message")
    if not isinstance(message, dict):
        return None
    role = message.get("role")
    if not isinstance(role, str):
        return None
    return role, extract_message_text(message.get("content"))


def normalize_title(text: str, max_len: int = MAX_SESSION_TITLE_LEN) -> str:
    normalized = collapse_whitespace(text)
    if not normalized:
        return NO_TITLE_PLACEHOLDER
    return truncate_end(normalized, max_len)


async def extract_session_title(
    path: str | Path, max_len: int = MAX_SESSION_TITLE_LEN
) -> str:
    """Derive a title from the first user message in a session file.

    The file is read line by line so large transcripts are never loaded
    whole. Malformed lines are skipped.
    """
    async with aiofiles.open(path, encoding="utf-8", errors="replace") as f:
        async for line in f:
            parsed = parse_message_line(line)
            if parsed is None:
                continue
            role, text = parsed
            if role == "user" and text.strip():
                return normalize_title(text, max_len)
    return NO_TITLE_PLACEHOLDER


async def _build_record(
    path: Path, root: Path, active_path: Path | None
) -> SessionRecord | None:
    try:
        stat = await aiofiles.os.stat(path)
    except OSError as e:
        logger.debug(
            "session_file_skipped",
            extra={"file.path": str(path), "error.message": str(e)},
        )
        return None

    # Unreadable content still counts toward usage, so keep the record
    try:
        title = await extract_session_title(path)
    except OSError as e:
        logger.debug(
            "session_title_unreadable",
            extra={"file.path": str(path), "error.message": str(e)},
        )
        title = NO_TITLE_PLACEHOLDER

    return SessionRecord(
        path=str(path),
        size_bytes=stat.st_size,
        mtime_ms=stat.st_mtime_ns / 1_000_000,
        is_active=active_path is not None and path.resolve() == active_path,
        namespace=namespace_for(path, root),
        title=title,
    )


async def scan_sessions(
    root: str | Path, active_session_file: str | Path | None = None
) -> list[SessionRecord]:
    """Scan all session files under root.

    Per-file work runs concurrently. Files that fail to stat are excluded
    rather than failing the scan; files whose content cannot be read keep
    the placeholder title. Result order is unspecified.

    Args:
        root: Session root directory.
        active_session_file: Currently open session file, never deletable.

    Returns:
        One SessionRecord per statable session file.
    """
    root_path = Path(root)
    active_path = Path(active_session_file).resolve() if active_session_file else None
    files = await collect_session_files(root_path)

    records = await asyncio.gather(
        *(_build_record(path, root_path, active_path) for path in files)
    )
    scanned = [record for record in records if record is not None]
    logger.debug(
        "sessions_scanned",
        extra={
            "file.path": str(root_path),
            "session.count": len(scanned),
            "session.skipped": len(files) - len(scanned),
        },
    )
    return scanned


async def _stat_size(path: Path) -> int:
    try:
        return (await aiofiles.os.stat(path)).st_size
    except OSError:
        return 0


async def scan_usage(root: str | Path) -> UsageTotals:
    """Compute total size and count from file metadata only.

    This is the fast path used before each input; it never reads content.
    """
    files = await collect_session_files(Path(root))
    if not files:
        return UsageTotals(total_size_bytes=0, total_sessions=0)

    sizes = await asyncio.gather(*(_stat_size(path) for path in files))
    return UsageTotals(total_size_bytes=sum(sizes), total_sessions=len(files))
