"""Dependency container for command-line sessions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..editor import edit_text
from ..expr import Evaluator
from ..history import HistoryStore
from ..listing import DirectoryListing
from ..modes import ModeManager
from ..runtime.config import Settings
from ..status import StatusBar


@dataclass(frozen=True)
class CommandLineDeps:
    """Runtime collaborators required by :class:`CommandLineEngine`."""

    modes: ModeManager
    history: HistoryStore
    listing: DirectoryListing
    status: StatusBar
    settings: Settings
    evaluator: Evaluator
    # Runs the event loop until the predicate holds; used by blocking input().
    run_until: Callable[[Callable[[], bool]], None] | None = None
    run_command: Callable[[str], None] | None = None
    edit_text: Callable[[str], tuple[str | None, str | None]] = edit_text
