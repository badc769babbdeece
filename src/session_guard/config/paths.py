"""Centralized path management for the session guard.

Session transcripts, the quota config and logs all live under the agent
directory. The agent directory can be overridden with the
SESSION_GUARD_AGENT_DIR environment variable.

Default locations:
- Linux/macOS: ~/.pi/agent
- Windows: %USERPROFILE%\\.pi\\agent
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "SESSION_GUARD_AGENT_DIR"


@lru_cache(maxsize=1)
def get_agent_dir() -> Path:
    """Get the base directory for agent data.

    Resolution order:
    1. SESSION_GUARD_AGENT_DIR environment variable (if set)
    2. Platform default (~/.pi/agent)

    Returns:
        Path to the agent directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".pi" / "agent"


def get_sessions_path() -> Path:
    """Get the default sessions directory path (JSONL transcripts)."""
    return get_agent_dir() / "sessions"


def get_quota_config_path() -> Path:
    """Get the quota config file path."""
    return get_agent_dir() / "session-guard.json"


def get_logs_path() -> Path:
    """Get the logs directory path."""
    return get_agent_dir() / "logs"


def encode_cwd_namespace(cwd: str | Path) -> str:
    """Encode a working directory as a session namespace directory name.

    /home/me/project -> --home-me-project--
    """
    normalized = str(Path(cwd).resolve()).replace("\\", "/")
    return f"--{normalized.replace('/', '-')}--"


def is_namespace_dir(path: Path) -> bool:
    name = path.name
    return len(name) >= 4 and name.startswith("--") and name.endswith("--")


def resolve_session_root(
    active_session_file: str | Path | None = None,
    session_dir: str | Path | None = None,
) -> Path:
    """Resolve the root directory that holds all session namespaces.

    Args:
        active_session_file: Path of the currently open session file, if any.
        session_dir: Session directory reported by the host, if any.

    Returns:
        The session root. With an active session file this is the parent of
        its namespace directory; a session dir that is itself a namespace
        directory resolves to its parent.
    """
    if active_session_file:
        namespace_dir = Path(active_session_file).resolve().parent
        return namespace_dir.parent

    candidate = Path(session_dir or get_sessions_path()).expanduser().resolve()
    if is_namespace_dir(candidate):
        return candidate.parent
    return candidate


def current_namespace(
    cwd: str | Path,
    active_session_file: str | Path | None = None,
    session_dir: str | Path | None = None,
) -> str:
    """Get the namespace the host is working in.

    The active session's directory wins, then a session dir that is itself a
    namespace directory, then the encoded working directory.
    """
    if active_session_file:
        return Path(active_session_file).resolve().parent.name
    if session_dir:
        candidate = Path(session_dir).expanduser().resolve()
        if is_namespace_dir(candidate):
            return candidate.name
    return encode_cwd_namespace(cwd)


def get_all_paths() -> dict[str, Path]:
    """Get all standard paths for debugging/display."""
    return {
        "agent": get_agent_dir(),
        "sessions": get_sessions_path(),
        "quota_config": get_quota_config_path(),
        "logs": get_logs_path(),
    }
