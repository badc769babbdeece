"""Soft delete of session files.

Removal is an ordered list of strategies tried until one succeeds: first
the system trash tool, then a rename into a quarantine directory beside the
session root. Nothing is ever permanently erased here.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol

import aiofiles.os

from session_guard.constants import (
    QUARANTINE_DIR_NAME,
    TRASH_COMMAND,
    TRASH_TIMEOUT_SECONDS,
)
from session_guard.host import CommandRunner
from session_guard.sessions.types import SessionRecord

logger = logging.getLogger(__name__)

DeleteMethod = Literal["trash", "quarantine"]

MAX_REPORTED_FAILURES = 5


@dataclass(frozen=True)
class SoftDeleteOutcome:
    """Result of one soft-delete attempt."""

    ok: bool
    method: DeleteMethod | None = None
    target: str | None = None
    error: str | None = None

    @classmethod
    def success(cls, method: DeleteMethod, target: str | None = None) -> SoftDeleteOutcome:
        return cls(ok=True, method=method, target=target)

    @classmethod
    def failure(cls, error: str) -> SoftDeleteOutcome:
        return cls(ok=False, error=error)


class DeleteStrategy(Protocol):
    name: str

    async def remove(self, path: Path, root: Path) -> SoftDeleteOutcome: ...


async def run_command(command: str, args: Sequence[str], timeout: float) -> int:
    """Run a command and return its exit code, killing it on timeout."""
    process = await asyncio.create_subprocess_exec(
        command,
        *args,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    try:
        await asyncio.wait_for(process.wait(), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        raise
    return process.returncode if process.returncode is not None else -1


class TrashStrategy:
    """Delegate to an external "move to trash" command."""

    name = "trash"

    def __init__(
        self,
        command: str = TRASH_COMMAND,
        timeout: float = TRASH_TIMEOUT_SECONDS,
        runner: CommandRunner | None = None,
    ) -> None:
        self.command = command
        self.timeout = timeout
        self._runner = runner or run_command

    async def remove(self, path: Path, root: Path) -> SoftDeleteOutcome:
        try:
            code = await self._runner(self.command, [str(path)], self.timeout)
        except TimeoutError:
            return SoftDeleteOutcome.failure(
                f"{self.command} timed out after {self.timeout:g}s"
            )
        except OSError as e:
            return SoftDeleteOutcome.failure(f"{self.command} unavailable: {e}")

        if code == 0:
            return SoftDeleteOutcome.success("trash")
        return SoftDeleteOutcome.failure(f"{self.command} exited with code {code}")


async def unique_path(path: Path) -> Path:
    """Return path, or a timestamped sibling name if path already exists."""
    if not await aiofiles.os.path.exists(path):
        return path

    stamp = int(time.time() * 1000)
    candidate = path.with_name(f"{path.stem}_{stamp}{path.suffix}")
    if not await aiofiles.os.path.exists(candidate):
        return candidate
    return path.with_name(f"{path.stem}_{stamp}_{secrets.token_hex(2)}{path.suffix}")


class QuarantineStrategy:
    """Rename the file into a trash directory mirroring its session path."""

    name = "quarantine"

    def __init__(self, trash_dir: Path | None = None) -> None:
        self.trash_dir = trash_dir

    def quarantine_root(self, root: Path) -> Path:
        return self.trash_dir or root.parent / QUARANTINE_DIR_NAME

    async def remove(self, path: Path, root: Path) -> SoftDeleteOutcome:
        try:
            relative = path.relative_to(root)
        except ValueError:
            relative = Path(path.name)

        try:
            target = await unique_path(self.quarantine_root(root) / relative)
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            await aiofiles.os.rename(path, target)
        except OSError as e:
            return SoftDeleteOutcome.failure(str(e))
        return SoftDeleteOutcome.success("quarantine", str(target))


def default_strategies(runner: CommandRunner | None = None) -> list[DeleteStrategy]:
    return [TrashStrategy(runner=runner), QuarantineStrategy()]


class SoftDeleter:
    """Tries each strategy in order until one succeeds."""

    def __init__(self, strategies: Sequence[DeleteStrategy] | None = None) -> None:
        self.strategies = list(strategies) if strategies is not None else default_strategies()

    async def soft_delete(self, path: Path, root: Path) -> SoftDeleteOutcome:
        outcome = SoftDeleteOutcome.failure("No delete strategy configured")
        for strategy in self.strategies:
            try:
                outcome = await strategy.remove(path, root)
            except Exception as e:
                outcome = SoftDeleteOutcome.failure(str(e) or type(e).__name__)
            if outcome.ok:
                return outcome
            logger.debug(
                "soft_delete_strategy_failed",
                extra={
                    "file.path": str(path),
                    "strategy": strategy.name,
                    "error.message": outcome.error,
                },
            )
        return outcome


@dataclass
class CleanupResult:
    """Aggregate of a soft-delete batch."""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    freed_bytes: int = 0
    trashed: int = 0
    quarantined: int = 0
    failures: list[str] = field(default_factory=list)

    def record(self, session: SessionRecord, outcome: SoftDeleteOutcome) -> None:
        self.attempted += 1
        if outcome.ok:
            self.succeeded += 1
            self.freed_bytes += session.size_bytes
            if outcome.method == "trash":
                self.trashed += 1
            else:
                self.quarantined += 1
        else:
            self.failed += 1
            self.failures.append(f"{Path(session.path).name}: {outcome.error}")

    def failure_preview(self, limit: int = MAX_REPORTED_FAILURES) -> tuple[list[str], int]:
        """Return the first failures and how many were omitted."""
        return self.failures[:limit], max(0, len(self.failures) - limit)


async def soft_delete_sessions(
    sessions: Iterable[SessionRecord],
    root: str | Path,
    deleter: SoftDeleter | None = None,
) -> CleanupResult:
    """Soft-delete sessions one at a time.

    A failure on one file never stops the rest. Active sessions are refused.
    """
    deleter = deleter or SoftDeleter()
    root_path = Path(root)
    result = CleanupResult()

    for session in sessions:
        if session.is_active:
            outcome = SoftDeleteOutcome.failure("Active session cannot be deleted")
        else:
            outcome = await deleter.soft_delete(Path(session.path), root_path)
        result.record(session, outcome)

    if result.failed:
        logger.warning(
            "cleanup_finished_with_failures",
            extra={"cleanup.failed": result.failed, "cleanup.succeeded": result.succeeded},
        )
    else:
        logger.info(
            "cleanup_finished",
            extra={
                "cleanup.succeeded": result.succeeded,
                "cleanup.freed_bytes": result.freed_bytes,
            },
        )
    return result
