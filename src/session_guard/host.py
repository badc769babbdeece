"""Contract between the guard and the application hosting it.

The host owns the UI and knows which session is currently open; the guard
only talks to it through this protocol.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Literal, Protocol

if TYPE_CHECKING:
    from session_guard.cleanup.candidates import CleanCandidate
    from session_guard.reports import Report

NotifyLevel = Literal["info", "warning", "error"]

# (command, args, timeout_seconds) -> exit code
CommandRunner = Callable[[str, Sequence[str], float], Awaitable[int]]


class Host(Protocol):
    """UI primitives and session context supplied by the host application."""

    @property
    def active_session_file(self) -> str | None: ...

    @property
    def session_dir(self) -> str | None: ...

    @property
    def cwd(self) -> str: ...

    def notify(self, message: str, level: NotifyLevel = "info") -> None: ...

    async def confirm(self, title: str, message: str) -> bool: ...

    def set_status(self, key: str, text: str) -> None: ...

    async def select(self, candidates: list[CleanCandidate]) -> list[str] | None:
        """Show the interactive cleanup panel.

        Returns:
            Selected paths in list order, or None if cancelled.
        """
        ...

    def send_report(self, report: Report) -> None: ...
