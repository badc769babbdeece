"""Logging setup for the session guard.

Call configure_logging() once from whatever drives the guard (the CLI, or a
host embedding it). Modules only ever do ``logging.getLogger(__name__)``.

Levels in use:
- DEBUG: per-file anomalies (unreadable files, skipped lines, strategy fallbacks)
- INFO: finished scans, quota writes and cleanups
- WARNING: cleanup batches with failures

Events are snake_case names with dotted context keys passed through
``extra``, e.g. ``logger.info("cleanup_finished", extra={"cleanup.failed": 2})``.
"""

import json
import logging
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TextIO

DEFAULT_LOG_RETENTION_DAYS = 7
LOG_FILE_PREFIX = "session-guard-"
LEVEL_ENV_VAR = "SESSION_GUARD_LOG_LEVEL"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Standard LogRecord attributes; whatever else is on a record came from `extra`
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "component"}


def component_of(logger_name: str) -> str:
    """Map a logger name to its subpackage, e.g. session_guard.quota.store -> quota."""
    head, _, rest = logger_name.partition(".")
    if head == "session_guard" and rest:
        return rest.split(".", 1)[0]
    return head


def prune_old_logs(
    logs_dir: Path,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    suffix: str = ".jsonl",
) -> int:
    """Remove guard log files last written before the retention window.

    Returns the number of files removed.
    """
    if not logs_dir.is_dir():
        return 0

    cutoff = (datetime.now(UTC) - timedelta(days=retention_days)).timestamp()
    removed = 0
    for path in logs_dir.glob(f"{LOG_FILE_PREFIX}*{suffix}"):
        try:
            if path.is_file() and path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except OSError:
            continue
    return removed


class JSONLineFormatter(logging.Formatter):
    """Render a record as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "component": component_of(record.name),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra
        return json.dumps(entry, default=str)


class JSONLHandler(logging.Handler):
    """Append records to ``{logs_dir}/session-guard-YYYY-MM-DD.jsonl``.

    A new file is opened when the UTC date changes; old files are pruned at
    that point.
    """

    def __init__(
        self,
        logs_dir: Path,
        retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ):
        super().__init__()
        logs_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir = logs_dir
        self.retention_days = retention_days
        self.setFormatter(JSONLineFormatter())
        self._day: str | None = None
        self._stream: TextIO | None = None

    def _stream_for_today(self) -> TextIO:
        day = datetime.now(UTC).strftime("%Y-%m-%d")
        if self._stream is not None and day == self._day:
            return self._stream
        if self._stream is not None:
            self._stream.close()
        self._day = day
        self._stream = (self.logs_dir / f"{LOG_FILE_PREFIX}{day}.jsonl").open(
            "a", encoding="utf-8"
        )
        prune_old_logs(self.logs_dir, self.retention_days)
        return self._stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
            stream = self._stream_for_today()
            stream.write(line + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        super().close()


class ComponentFormatter(logging.Formatter):
    """Formatter exposing ``%(component)s`` for console output."""

    def format(self, record: logging.LogRecord) -> str:
        record.component = component_of(record.name)
        return super().format(record)


def resolve_level(level: str | None) -> str:
    """Normalize a level name, falling back to the env var and then INFO."""
    name = (level or os.environ.get(LEVEL_ENV_VAR) or "INFO").upper()
    return name if name in _LEVELS else "INFO"


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            show_path=False,
            markup=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
        return handler

    handler = logging.StreamHandler()
    handler.setFormatter(
        ComponentFormatter(
            "%(asctime)s %(levelname)-7s %(component)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    return handler


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
) -> None:
    """Install the guard's root handlers, replacing any existing ones.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. None reads SESSION_GUARD_LOG_LEVEL.
        use_rich: Render console records with rich.
        log_to_file: Also keep daily JSONL files under the agent logs dir.
    """
    from session_guard.config.paths import get_logs_path

    log_level = getattr(logging, resolve_level(level))
    handlers = [_console_handler(use_rich)]
    if log_to_file:
        handlers.append(JSONLHandler(get_logs_path()))

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
