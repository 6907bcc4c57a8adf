"""Interactive bootstrap: terminal, persisted state and frame rendering.

The UI is deliberately small. The listing fills the screen and the bottom row
shows either the innermost command-line session or the latest status message.
"""

from __future__ import annotations

import functools
import logging
import os
import shutil
import sys
from pathlib import Path

from ..bookmarks import BookmarkTable
from ..editor import edit_text, launch_editor
from ..input.reader import TerminalKeySource
from .config import Settings, load_bookmarks, load_histories, save_bookmarks, save_histories
from .context import InputContext, build_context
from .terminal import TerminalController

logger = logging.getLogger(__name__)

CURSOR_MARK = "> "
ENTRY_INDENT = "  "


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[: max(0, width)]


def render_lines(context: InputContext, width: int, height: int) -> list[str]:
    """Return ``height`` plain rows: header, visible entries, bottom line."""
    width = max(1, width)
    height = max(2, height)
    listing = context.listing
    header = str(listing.directory)
    if listing.filter_pattern:
        header += f"  [filter: {listing.filter_pattern}]"
    rows = [_clip(header, width)]

    visible = height - 2
    start = 0
    if listing.position >= visible:
        start = listing.position - visible + 1
    for idx, entry in enumerate(listing.entries[start : start + visible], start=start):
        marker = CURSOR_MARK if idx == listing.position else ENTRY_INDENT
        name = entry.name + "/" if entry.is_dir else entry.name
        rows.append(_clip(marker + name, width))
    while len(rows) < height - 1:
        rows.append("")
    rows.append(_clip(bottom_line(context), width))
    return rows


def bottom_line(context: InputContext) -> str:
    session = context.engine.active
    if session is not None:
        return session.prompt + session.text
    return context.status.last()


def _bottom_cursor_column(context: InputContext) -> int | None:
    session = context.engine.active
    if session is None:
        return None
    return len(session.prompt) + session.buffer.cursor


def draw(terminal: TerminalController, context: InputContext) -> None:
    term = shutil.get_terminal_size((80, 24))
    rows = render_lines(context, term.columns, term.lines)
    out = ["\x1b[H"]
    for idx, row in enumerate(rows):
        out.append(row)
        out.append("\x1b[K")
        if idx < len(rows) - 1:
            out.append("\r\n")
    column = _bottom_cursor_column(context)
    if column is None:
        out.append("\x1b[?25l")
    else:
        out.append(f"\x1b[{len(rows)};{min(column, term.columns - 1) + 1}H\x1b[?25h")
    terminal.write("".join(out))


def run_app(directory: Path, settings: Settings, config_path: Path | None = None) -> None:
    """Run the listing UI on ``directory`` until ``q`` or end of input."""
    if not os.isatty(sys.stdin.fileno()):
        raise SystemExit("vicline needs an interactive terminal")

    history = load_histories(settings, config_path)
    bookmarks = load_bookmarks(BookmarkTable(), config_path)
    terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
    context = build_context(
        directory,
        settings=settings,
        source=TerminalKeySource(terminal.stdin_fd),
        history=history,
        bookmarks=bookmarks,
        opener=functools.partial(
            launch_editor,
            disable_tui_mode=terminal.disable_tui_mode,
            enable_tui_mode=terminal.enable_tui_mode,
        ),
        edit_text=functools.partial(
            edit_text,
            disable_tui_mode=terminal.disable_tui_mode,
            enable_tui_mode=terminal.enable_tui_mode,
        ),
    )
    context.loop.after_key = lambda: draw(terminal, context)
    logger.info("starting in %s", context.listing.directory)
    try:
        with terminal.raw_mode():
            draw(terminal, context)
            context.loop.run()
    finally:
        save_histories(context.history, config_path)
        save_bookmarks(context.bookmarks, config_path)
