"""Main CLI application."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Annotated

import typer

from session_guard.cli.console import console, dim, error, settings_table
from session_guard.cli.host import ConsoleHost
from session_guard.config.paths import (
    get_all_paths,
    get_quota_config_path,
    resolve_session_root,
)
from session_guard.constants import DEFAULT_KEEP_RECENT
from session_guard.format import format_bytes, format_percent, parse_size
from session_guard.logging import LEVEL_ENV_VAR, configure_logging
from session_guard.sessions.types import SORT_MODES

app = typer.Typer(
    name="session-guard",
    help="Session storage guard - scan usage, enforce a quota, clean up old sessions",
    no_args_is_help=True,
)

quota_app = typer.Typer(help="Manage the session storage quota")
app.add_typer(quota_app, name="quota")

RootOption = Annotated[
    Path | None,
    typer.Option(
        "--root",
        "-r",
        help="Session directory (defaults to the agent sessions directory)",
    ),
]
ActiveOption = Annotated[
    Path | None,
    typer.Option(
        "--active",
        help="Currently open session file; it is never deleted",
    ),
]


def _host(
    root: Path | None, active: Path | None, assume_yes: bool = False
) -> tuple[ConsoleHost, Path]:
    host = ConsoleHost(
        session_dir=str(root) if root else None,
        active_session_file=str(active) if active else None,
        assume_yes=assume_yes,
    )
    return host, resolve_session_root(host.active_session_file, host.session_dir)


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Log level (DEBUG, INFO, WARNING, ERROR)",
        ),
    ] = None,
    log_file: Annotated[
        bool,
        typer.Option(
            "--log-file",
            help="Also write JSONL logs to the agent logs directory",
        ),
    ] = False,
) -> None:
    """Session storage guard."""
    # Keep routine INFO events out of command output unless asked for
    configure_logging(
        log_level or os.environ.get(LEVEL_ENV_VAR, "WARNING"),
        use_rich=True,
        log_to_file=log_file,
    )


@app.command()
def scan(
    sort: Annotated[
        str,
        typer.Option(
            "--sort",
            "-s",
            help="Sort order for the session list: size | lru",
        ),
    ] = "size",
    root: RootOption = None,
    active: ActiveOption = None,
) -> None:
    """Report session storage usage by namespace and file."""
    from session_guard.commands.actions import ensure_session_dir, run_scan

    if sort not in SORT_MODES:
        error(f"Invalid --sort value: {sort}. Supported: {' | '.join(SORT_MODES)}")
        raise typer.Exit(1)

    host, session_root = _host(root, active)

    async def run() -> bool:
        if not await ensure_session_dir(host, session_root):
            return False
        await run_scan(host, session_root, sort)  # type: ignore[arg-type]
        return True

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def clean(
    root: RootOption = None,
    active: ActiveOption = None,
    keep_recent: Annotated[
        int,
        typer.Option(
            "--keep-recent",
            "-k",
            min=0,
            help="Number of most recent sessions left unselected by default",
        ),
    ] = DEFAULT_KEEP_RECENT,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip the picker and confirmation; delete the default selection",
        ),
    ] = False,
) -> None:
    """Pick old sessions and move them to trash (or quarantine)."""
    from session_guard.commands.actions import ensure_session_dir, run_clean
    from session_guard.quota.engine import build_status_text

    host, session_root = _host(root, active, assume_yes=yes)

    async def run() -> bool:
        if not await ensure_session_dir(host, session_root):
            return False
        summary = await run_clean(host, session_root, keep_recent=keep_recent)
        if summary is not None:
            dim(build_status_text(summary))
        return True

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def status(root: RootOption = None, active: ActiveOption = None) -> None:
    """Print the one-line quota status."""
    from session_guard.quota.engine import build_status_text, load_quota_summary

    _, session_root = _host(root, active)
    summary = asyncio.run(load_quota_summary(session_root))
    console.print(build_status_text(summary), highlight=False)


@app.command()
def check(
    text: Annotated[str, typer.Argument(help="Input that is about to be submitted")],
    root: RootOption = None,
    active: ActiveOption = None,
) -> None:
    """Check whether an input would be accepted under the current quota.

    Exits with code 2 when the quota is exceeded and the input is blocked.
    """
    from session_guard.quota.guard import InputGuard

    host, session_root = _host(root, active)
    allowed = asyncio.run(InputGuard().check(text, host, session_root))
    if not allowed:
        raise typer.Exit(2)


@quota_app.command("set")
def quota_set(
    size: Annotated[
        list[str],
        typer.Argument(help="Quota size, e.g. 10GB or 512 MB (units: B, KB, MB, GB, TB)"),
    ],
    root: RootOption = None,
    active: ActiveOption = None,
) -> None:
    """Set the session storage quota."""
    from session_guard.commands.actions import run_quota_set

    size_raw = "".join(size)
    size_bytes = parse_size(size_raw)
    if size_bytes is None:
        error(f"Invalid size: {size_raw}. Supported units: B, KB, MB, GB, TB")
        raise typer.Exit(1)

    host, session_root = _host(root, active)
    if asyncio.run(run_quota_set(host, session_root, size_bytes)) is None:
        raise typer.Exit(1)


@quota_app.command("show")
def quota_show(root: RootOption = None, active: ActiveOption = None) -> None:
    """Show the configured quota and current usage."""
    from session_guard.quota.engine import load_quota_summary

    _, session_root = _host(root, active)
    summary = asyncio.run(load_quota_summary(session_root))

    rows = [
        ("Config file", str(get_quota_config_path())),
        ("Session dir", str(session_root)),
        ("Sessions", str(summary.total_sessions)),
        ("Used", format_bytes(summary.total_size_bytes)),
    ]
    if summary.configured and summary.quota_bytes:
        rows += [
            ("Quota", format_bytes(summary.quota_bytes)),
            ("Usage", format_percent(summary.usage_ratio)),
            ("Info at", format_percent(summary.info_ratio)),
            ("Warn at", format_percent(summary.warn_ratio)),
        ]
    else:
        rows.append(("Quota", "(not set)"))
    rows.append(("State", summary.state.upper()))
    console.print(settings_table("Session Quota", rows))


@app.command()
def paths() -> None:
    """Show where sessions, the quota config and logs are kept."""
    rows = [(name, str(path)) for name, path in get_all_paths().items()]
    console.print(settings_table("Session Guard Paths", rows))
