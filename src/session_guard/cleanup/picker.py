"""Interactive cleanup picker as a pure state machine.

handle_key() maps (state, key) to a new state and render_picker() turns a
state into plain text lines. Neither touches a terminal; hosts feed keys in
and draw the lines however they like. Loading a preview is the only side
effect and is left to the host: when a key opens the preview the new state
has preview_loading set, the host loads build_session_preview() and applies
it with with_preview().
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Literal

import aiofiles

from session_guard.cleanup.candidates import CleanCandidate
from session_guard.format import (
    collapse_whitespace,
    ellipsize_middle,
    format_bytes,
    format_time,
    pad,
    truncate_end,
)
from session_guard.sessions.scanner import parse_message_line

VISIBLE_ROWS = 10
CONTEXT_ROWS_ABOVE_CURSOR = 1
PREVIEW_MAX_MESSAGES = 60
PREVIEW_LINE_LEN = 140
TITLE_COLUMN_WIDTH = 48


class Key(Enum):
    UP = "up"
    DOWN = "down"
    SPACE = "space"
    TOGGLE_ALL = "toggle_all"
    PREVIEW = "preview"
    ENTER = "enter"
    ESCAPE = "escape"


_CHAR_KEYS = {
    "k": Key.UP,
    "j": Key.DOWN,
    " ": Key.SPACE,
    "a": Key.TOGGLE_ALL,
    "p": Key.PREVIEW,
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\x1b": Key.ESCAPE,
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
}


def key_from_input(data: str) -> Key | None:
    """Translate raw terminal input into a picker key."""
    return _CHAR_KEYS.get(data)


@dataclass(frozen=True)
class PickerResult:
    """Final outcome of the picker: selected paths, or None when cancelled."""

    paths: tuple[str, ...] | None


@dataclass(frozen=True)
class PickerState:
    candidates: tuple[CleanCandidate, ...]
    cursor: int = 0
    scroll: int = 0
    selected: frozenset[int] = frozenset()
    mode: Literal["list", "preview"] = "list"
    preview_lines: tuple[str, ...] = ()
    preview_scroll: int = 0
    preview_loading: bool = False
    preview_error: str = ""
    result: PickerResult | None = None
    visible_rows: int = VISIBLE_ROWS

    @classmethod
    def initial(
        cls, candidates: list[CleanCandidate], visible_rows: int = VISIBLE_ROWS
    ) -> PickerState:
        cursor = next((i for i, c in enumerate(candidates) if c.selectable), 0)
        selected = frozenset(
            i for i, c in enumerate(candidates) if c.selectable and c.default_selected
        )
        state = cls(
            candidates=tuple(candidates),
            cursor=cursor,
            selected=selected,
            visible_rows=visible_rows,
        )
        return _ensure_cursor_visible(state)

    @property
    def done(self) -> bool:
        return self.result is not None

    @property
    def current(self) -> CleanCandidate | None:
        if 0 <= self.cursor < len(self.candidates):
            return self.candidates[self.cursor]
        return None


def _next_selectable(candidates: tuple[CleanCandidate, ...], start: int, step: int) -> int:
    index = start + step
    while 0 <= index < len(candidates):
        if candidates[index].selectable:
            return index
        index += step
    return start


def _ensure_cursor_visible(state: PickerState) -> PickerState:
    scroll = state.scroll
    if state.cursor < scroll:
        scroll = max(0, state.cursor - CONTEXT_ROWS_ABOVE_CURSOR)
    if state.cursor >= scroll + state.visible_rows:
        scroll = state.cursor - state.visible_rows + 1
    return replace(state, scroll=max(0, scroll))


def _toggle_all(state: PickerState) -> PickerState:
    selectable = {i for i, c in enumerate(state.candidates) if c.selectable}
    if selectable <= state.selected:
        return replace(state, selected=state.selected - selectable)
    return replace(state, selected=state.selected | selectable)


def _confirm(state: PickerState) -> PickerState:
    paths = tuple(state.candidates[i].path for i in sorted(state.selected))
    return replace(state, result=PickerResult(paths=paths))


def _handle_preview_key(state: PickerState, key: Key) -> PickerState:
    if key is Key.UP:
        return replace(state, preview_scroll=max(0, state.preview_scroll - 1))
    if key is Key.DOWN:
        max_scroll = max(0, len(state.preview_lines) - state.visible_rows)
        return replace(state, preview_scroll=min(max_scroll, state.preview_scroll + 1))
    if key in (Key.ESCAPE, Key.PREVIEW):
        return replace(state, mode="list")
    return state


def handle_key(state: PickerState, key: Key | None) -> PickerState:
    """Apply one key press. Finished pickers and unknown keys are no-ops."""
    if state.done or key is None:
        return state

    if state.mode == "preview":
        return _handle_preview_key(state, key)

    if key is Key.UP:
        cursor = _next_selectable(state.candidates, state.cursor, -1)
        return _ensure_cursor_visible(replace(state, cursor=cursor))
    if key is Key.DOWN:
        cursor = _next_selectable(state.candidates, state.cursor, 1)
        return _ensure_cursor_visible(replace(state, cursor=cursor))
    if key is Key.SPACE:
        item = state.current
        if item is None or not item.selectable:
            return state
        return replace(state, selected=state.selected ^ {state.cursor})
    if key is Key.TOGGLE_ALL:
        return _toggle_all(state)
    if key is Key.PREVIEW:
        if state.current is None:
            return state
        return replace(
            state,
            mode="preview",
            preview_loading=True,
            preview_error="",
            preview_lines=(),
            preview_scroll=0,
        )
    if key is Key.ENTER:
        return _confirm(state)
    if key is Key.ESCAPE:
        return replace(state, result=PickerResult(paths=None))
    return state


def with_preview(
    state: PickerState, lines: list[str] | None = None, error: str | None = None
) -> PickerState:
    """Finish a preview load with either its lines or an error message."""
    return replace(
        state,
        preview_loading=False,
        preview_lines=tuple(lines or ()),
        preview_error=error or "",
        preview_scroll=0,
    )


def selected_summary(state: PickerState) -> tuple[int, int]:
    """Return (count, total bytes) of the current selection."""
    items = [state.candidates[i] for i in state.selected if i < len(state.candidates)]
    return len(items), sum(c.size_bytes for c in items)


def _truncate(line: str, width: int) -> str:
    return line if len(line) <= width else line[: max(0, width)]


def _render_preview(state: PickerState, width: int) -> list[str]:
    lines = ["Session Preview", "↑/↓ scroll  •  p/esc back", ""]
    if state.preview_loading:
        lines.append("Loading preview...")
    elif state.preview_error:
        lines.append(f"Failed to load preview: {state.preview_error}")
    else:
        end = min(len(state.preview_lines), state.preview_scroll + state.visible_rows)
        lines.extend(state.preview_lines[state.preview_scroll : end])
        if end < len(state.preview_lines):
            lines.append(f"… {len(state.preview_lines) - end} more lines")
    return [_truncate(line, width) for line in lines]


def render_picker(state: PickerState, width: int = 120) -> list[str]:
    """Render the picker as plain text lines no wider than width."""
    if state.mode == "preview":
        return _render_preview(state, width)

    count, size = selected_summary(state)
    lines = [
        "Session Guard Cleanup",
        "↑/↓ move  •  space toggle  •  a all/none  •  p preview  •  enter confirm  •  esc cancel",
        "[×] locked: active session cannot be deleted",
        f"Selected: {count} files, {format_bytes(size)}",
        "",
        f"  {pad('#', 3, 'right')}  {pad('Sel', 5)}  {pad('Size', 10, 'right')}  "
        f"{pad('Updated', 16)}  Summary",
        f"  {'-' * 3}  {'-' * 5}  {'-' * 10}  {'-' * 16}  {'-' * TITLE_COLUMN_WIDTH}",
    ]

    end = min(len(state.candidates), state.scroll + state.visible_rows)
    for i in range(state.scroll, end):
        item = state.candidates[i]
        if not item.selectable:
            mark = "[×]"
        else:
            mark = "[x]" if i in state.selected else "[ ]"
        title = f"{item.title} [LOCKED]" if item.reason == "ACTIVE" else item.title
        row = (
            f"{pad(str(i + 1), 3, 'right')}  {pad(mark, 5)}  "
            f"{pad(format_bytes(item.size_bytes), 10, 'right')}  "
            f"{pad(format_time(item.mtime_ms), 16)}  "
            f"{ellipsize_middle(title, TITLE_COLUMN_WIDTH)}"
        )
        prefix = "❯ " if i == state.cursor else "  "
        lines.append(prefix + row)

    if end < len(state.candidates):
        lines.append(f"… {len(state.candidates) - end} more")
    return [_truncate(line, width) for line in lines]


async def build_session_preview(
    path: str | Path, max_messages: int = PREVIEW_MAX_MESSAGES
) -> list[str]:
    """Build preview lines of user/assistant messages in a session file.

    Raises:
        OSError: If the file cannot be read; the host shows it as the
            preview error.
    """
    preview = ["Session Preview", f"File: {Path(path).name}", ""]
    shown = 0

    async with aiofiles.open(path, encoding="utf-8", errors="replace") as f:
        async for line in f:
            parsed = parse_message_line(line)
            if parsed is None:
                continue
            role, text = parsed
            if role not in ("user", "assistant"):
                continue
            text = truncate_end(collapse_whitespace(text), PREVIEW_LINE_LEN)
            if not text:
                continue

            preview.append(f"{role}> {text}")
            shown += 1
            if shown >= max_messages:
                preview.append("")
                preview.append(f"… preview truncated ({shown} messages shown)")
                break

    if shown == 0:
        preview.append("(No message content found)")
    return preview
