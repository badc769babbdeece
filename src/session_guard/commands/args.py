"""Slash-command argument parsers.

Each parser returns a small result object; a non-empty error means the
command was recognized but its arguments were not, and nothing should run.
"""

from __future__ import annotations

from dataclasses import dataclass

from session_guard.format import parse_size
from session_guard.sessions.types import SORT_MODES, SortMode

COMMAND = "/session-guard"


@dataclass(frozen=True)
class ParsedScanArgs:
    is_scan_command: bool
    sort: SortMode = "size"
    error: str | None = None


@dataclass(frozen=True)
class ParsedCleanArgs:
    is_clean_command: bool
    error: str | None = None


@dataclass(frozen=True)
class ParsedQuotaArgs:
    is_quota_command: bool
    size_bytes: int | None = None
    error: str | None = None


def _tokens(args: str | None) -> list[str]:
    return (args or "").split()


def parse_scan_args(args: str | None) -> ParsedScanArgs:
    """Parse `scan [--sort size|lru]`. No arguments at all also means scan."""
    tokens = _tokens(args)
    if not tokens:
        return ParsedScanArgs(is_scan_command=True)
    if tokens[0] != "scan":
        return ParsedScanArgs(is_scan_command=False)

    sort: SortMode = "size"
    supported = " | ".join(SORT_MODES)
    i = 1
    while i < len(tokens):
        token = tokens[i]
        if token == "--sort":
            if i + 1 >= len(tokens):
                return ParsedScanArgs(
                    True, sort, f"Missing value for --sort. Supported: {supported}"
                )
            value = tokens[i + 1]
            if value not in SORT_MODES:
                return ParsedScanArgs(
                    True, sort, f"Invalid --sort value: {value}. Supported: {supported}"
                )
            sort = value  # type: ignore[assignment]
            i += 2
            continue
        kind = "option" if token.startswith("--") else "argument"
        return ParsedScanArgs(
            True, sort, f"Unknown {kind}: {token}. Supported: --sort <size|lru>"
        )

    return ParsedScanArgs(is_scan_command=True, sort=sort)


def parse_clean_args(args: str | None) -> ParsedCleanArgs:
    tokens = _tokens(args)
    if not tokens or tokens[0] != "clean":
        return ParsedCleanArgs(is_clean_command=False)
    if len(tokens) > 1:
        token = tokens[1]
        kind = "option" if token.startswith("--") else "argument"
        return ParsedCleanArgs(
            True, f"Unknown {kind}: {token}. Use {COMMAND} clean"
        )
    return ParsedCleanArgs(is_clean_command=True)


def parse_quota_args(args: str | None) -> ParsedQuotaArgs:
    """Parse `quota set <size>`; the size may contain spaces ("10 GB")."""
    tokens = _tokens(args)
    if not tokens or tokens[0] != "quota":
        return ParsedQuotaArgs(is_quota_command=False)
    if len(tokens) < 2 or tokens[1] != "set":
        return ParsedQuotaArgs(
            True, error=f"Unknown quota command. Use {COMMAND} quota set <size>"
        )

    size_raw = "".join(tokens[2:])
    if not size_raw:
        return ParsedQuotaArgs(
            True, error=f"Missing size. Example: {COMMAND} quota set 10GB"
        )

    size_bytes = parse_size(size_raw)
    if size_bytes is None:
        return ParsedQuotaArgs(
            True,
            error=f"Invalid size: {size_raw}. Supported units: B, KB, MB, GB, TB",
        )
    return ParsedQuotaArgs(is_quota_command=True, size_bytes=size_bytes)
