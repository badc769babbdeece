"""Configuration module."""

from session_guard.config.models import QuotaConfig
from session_guard.config.paths import (
    get_agent_dir,
    get_logs_path,
    get_quota_config_path,
    get_sessions_path,
    resolve_session_root,
)

__all__ = [
    "QuotaConfig",
    "get_agent_dir",
    "get_logs_path",
    "get_quota_config_path",
    "get_sessions_path",
    "resolve_session_root",
]
