"""Terminal host: implements the guard's host contract on a rich console."""

from __future__ import annotations

import os

import click
import typer
from rich.text import Text

from session_guard.cleanup.candidates import CleanCandidate
from session_guard.cleanup.picker import (
    PickerState,
    build_session_preview,
    handle_key,
    key_from_input,
    render_picker,
    with_preview,
)
from session_guard.cli.console import console, dim, notice
from session_guard.host import NotifyLevel
from session_guard.reports import Report, render_report


def _style_picker_line(line: str) -> Text:
    if line.startswith("❯ "):
        style = "yellow" if "[LOCKED]" in line else "bold cyan"
        return Text(line, style=style)
    if "[LOCKED]" in line:
        return Text(line, style="yellow")
    if line.startswith(("↑/↓", "  #", "  --", "…")):
        return Text(line, style="dim")
    if line in ("Session Guard Cleanup", "Session Preview"):
        return Text(line, style="bold cyan")
    return Text(line)


class ConsoleHost:
    """Host backed by the terminal.

    With assume_yes the picker and confirmation are skipped and the default
    selection is used, which makes cleanup scriptable.
    """

    def __init__(
        self,
        session_dir: str | None = None,
        active_session_file: str | None = None,
        cwd: str | None = None,
        assume_yes: bool = False,
    ) -> None:
        self._session_dir = session_dir
        self._active_session_file = active_session_file
        self._cwd = cwd or os.getcwd()
        self.assume_yes = assume_yes
        self.status: dict[str, str] = {}

    @property
    def active_session_file(self) -> str | None:
        return self._active_session_file

    @property
    def session_dir(self) -> str | None:
        return self._session_dir

    @property
    def cwd(self) -> str:
        return self._cwd

    def notify(self, message: str, level: NotifyLevel = "info") -> None:
        notice(message, level)

    async def confirm(self, title: str, message: str) -> bool:
        if self.assume_yes:
            return True
        confirmed = typer.confirm(f"{title}: {message}")
        if not confirmed:
            dim("Cancelled")
        return confirmed

    def set_status(self, key: str, text: str) -> None:
        self.status[key] = text

    async def select(self, candidates: list[CleanCandidate]) -> list[str] | None:
        if self.assume_yes:
            return [c.path for c in candidates if c.selectable and c.default_selected]
        return await self._run_picker(candidates)

    async def _run_picker(self, candidates: list[CleanCandidate]) -> list[str] | None:
        state = PickerState.initial(candidates)
        while not state.done:
            console.clear()
            for line in render_picker(state, console.width):
                console.print(_style_picker_line(line), soft_wrap=True)

            state = handle_key(state, key_from_input(click.getchar()))

            if state.preview_loading and state.current is not None:
                try:
                    lines = await build_session_preview(state.current.path)
                except OSError as e:
                    state = with_preview(state, error=str(e))
                else:
                    state = with_preview(state, lines=lines)

        console.clear()
        if state.result is None or state.result.paths is None:
            return None
        return list(state.result.paths)

    def send_report(self, report: Report) -> None:
        console.print(render_report(report.content), soft_wrap=True)
