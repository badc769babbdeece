"""Shared test fixtures and factories."""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from session_guard.cleanup.candidates import CleanCandidate
from session_guard.config.paths import ENV_VAR, get_agent_dir
from session_guard.quota.store import QuotaStore
from session_guard.reports import Report
from session_guard.sessions.types import SessionRecord

NAMESPACE = "--home-me-project--"

# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def agent_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the agent directory at a temp dir so nothing touches ~/.pi."""
    home = tmp_path / "agent"
    home.mkdir()
    monkeypatch.setenv(ENV_VAR, str(home))
    get_agent_dir.cache_clear()
    yield home
    get_agent_dir.cache_clear()


# =============================================================================
# Session File Factories
# =============================================================================


def message_line(role: str, content: Any) -> str:
    """Build one JSONL message record."""
    return json.dumps(
        {"type": "message", "message": {"role": role, "content": content}}
    )


def user_line(text: str) -> str:
    return message_line("user", [{"type": "text", "text": text}])


def assistant_line(text: str) -> str:
    return message_line("assistant", [{"type": "text", "text": text}])


def write_session_file(
    root: Path,
    name: str,
    namespace: str | None = NAMESPACE,
    lines: list[str] | None = None,
    size: int | None = None,
    mtime: float | None = None,
) -> Path:
    """Write a session file under root/namespace.

    Args:
        size: Pad the file with a trailing non-message line up to this size.
        mtime: Epoch seconds to set as the file's modification time.
    """
    directory = root / namespace if namespace else root
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name

    content = "".join(f"{line}\n" for line in (lines or []))
    if size is not None and len(content.encode()) < size:
        content += "x" * (size - len(content.encode()))
    path.write_text(content, encoding="utf-8")

    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def session_root(tmp_path: Path) -> Path:
    """Create an empty session root directory."""
    root = tmp_path / "sessions"
    root.mkdir()
    return root


@pytest.fixture
def write_session(session_root: Path) -> Callable[..., Path]:
    """Factory writing session files under the session root."""

    def _write(name: str, **kwargs: Any) -> Path:
        return write_session_file(session_root, name, **kwargs)

    return _write


# =============================================================================
# Quota Fixtures
# =============================================================================


@pytest.fixture
def quota_path(tmp_path: Path) -> Path:
    return tmp_path / "config" / "session-guard.json"


@pytest.fixture
def store(quota_path: Path) -> QuotaStore:
    return QuotaStore(quota_path)


def write_quota(path: Path, quota: dict[str, Any], **siblings: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({**siblings, "quota": quota}), encoding="utf-8")


# =============================================================================
# Host
# =============================================================================


class FakeHost:
    """In-memory host that records everything the guard asks of it."""

    def __init__(
        self,
        session_dir: str | None = None,
        active_session_file: str | None = None,
        cwd: str = "/tmp",
        confirm_result: bool = True,
        selection: list[str] | None | Callable[[list[CleanCandidate]], Any] = None,
    ) -> None:
        self._session_dir = session_dir
        self._active_session_file = active_session_file
        self._cwd = cwd
        self.confirm_result = confirm_result
        self.selection = selection
        self.notifications: list[tuple[str, str]] = []
        self.status: dict[str, str] = {}
        self.reports: list[Report] = []
        self.confirms: list[tuple[str, str]] = []
        self.offered: list[CleanCandidate] | None = None

    @property
    def active_session_file(self) -> str | None:
        return self._active_session_file

    @property
    def session_dir(self) -> str | None:
        return self._session_dir

    @property
    def cwd(self) -> str:
        return self._cwd

    def notify(self, message: str, level: str = "info") -> None:
        self.notifications.append((level, message))

    async def confirm(self, title: str, message: str) -> bool:
        self.confirms.append((title, message))
        return self.confirm_result

    def set_status(self, key: str, text: str) -> None:
        self.status[key] = text

    async def select(self, candidates: list[CleanCandidate]) -> list[str] | None:
        self.offered = candidates
        if callable(self.selection):
            return self.selection(candidates)
        return self.selection

    def send_report(self, report: Report) -> None:
        self.reports.append(report)

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m in self.notifications if level is None or lvl == level]


@pytest.fixture
def host(session_root: Path) -> FakeHost:
    return FakeHost(session_dir=str(session_root))


def default_selection(candidates: list[CleanCandidate]) -> list[str]:
    return [c.path for c in candidates if c.selectable and c.default_selected]


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})


# =============================================================================
# Record Factories
# =============================================================================


def make_record(
    path: str,
    size_bytes: int = 100,
    mtime_ms: float = 1000.0,
    namespace: str = "--ns--",
    is_active: bool = False,
    title: str | None = None,
) -> SessionRecord:
    """Factory for in-memory session records."""
    return SessionRecord(
        path=path,
        size_bytes=size_bytes,
        mtime_ms=mtime_ms,
        is_active=is_active,
        namespace=namespace,
        title=title if title is not None else path,
    )
