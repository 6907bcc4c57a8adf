"""Editor launch helpers for opening files and editing command-line text.

Runs ``$EDITOR`` while temporarily leaving raw terminal mode.
Returns an error message string instead of raising for UI-friendly handling.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


def _noop() -> None:
    return None


def launch_editor(
    target: Path,
    disable_tui_mode: Callable[[], None] = _noop,
    enable_tui_mode: Callable[[], None] = _noop,
) -> str | None:
    editor_env = os.environ.get("EDITOR", "").strip()
    if not editor_env:
        return "Cannot edit: $EDITOR is not set."
    cmd = shlex.split(editor_env)
    if not cmd:
        return "Cannot edit: $EDITOR is empty."

    disable_tui_mode()
    try:
        subprocess.run([*cmd, str(target)], check=False)
    except Exception as exc:
        logger.warning("editor launch failed: %s", exc)
        return f"Failed to launch editor: {exc}"
    finally:
        enable_tui_mode()
    return None


def edit_text(
    text: str,
    disable_tui_mode: Callable[[], None] = _noop,
    enable_tui_mode: Callable[[], None] = _noop,
) -> tuple[str | None, str | None]:
    """Edit ``text`` in ``$EDITOR`` through a temporary file.

    Returns ``(first_line, error)``; ``first_line`` is ``None`` on failure.
    """
    fd, name = tempfile.mkstemp(prefix="vicline-", suffix=".txt")
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text + "\n")
        error = launch_editor(path, disable_tui_mode, enable_tui_mode)
        if error is not None:
            return None, error
        try:
            edited = path.read_text(encoding="utf-8")
        except OSError as exc:
            return None, f"Cannot read edited text: {exc}"
    finally:
        try:
            path.unlink()
        except OSError:
            pass
    lines = edited.splitlines()
    return (lines[0] if lines else ""), None
