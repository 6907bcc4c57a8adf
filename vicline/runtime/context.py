"""Composition root wiring the input subsystem together.

``build_context`` creates one instance of every collaborator, binds key maps
for normal and command-line modes, and connects blocking ``input()`` to the
event loop so expressions can prompt.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from ..bookmarks import BookmarkTable
from ..cmdline.deps import CommandLineDeps
from ..cmdline.engine import CommandLineEngine
from ..cmdline.keymap import register_cmdline_bindings
from ..commands import CommandRunner
from ..editor import edit_text as default_edit_text
from ..expr import Evaluator
from ..history import HistoryStore
from ..input.matcher import KeySequenceMatcher
from ..input.reader import ScriptedKeySource
from ..listing import DirectoryListing, Opener
from ..modes import ModeManager
from ..normal import register_normal_bindings
from ..status import StatusBar
from .config import Settings
from .loop import EventLoop, KeySource


@dataclass
class InputContext:
    """Every runtime collaborator of one interactive session."""

    settings: Settings
    modes: ModeManager
    status: StatusBar
    history: HistoryStore
    listing: DirectoryListing
    bookmarks: BookmarkTable
    matcher: KeySequenceMatcher
    evaluator: Evaluator
    loop: EventLoop
    commands: CommandRunner
    engine: CommandLineEngine

    @property
    def source(self) -> KeySource:
        return self.loop.source

    def feed(self, keys: Iterable[str] | str) -> None:
        """Queue keys on a scripted source for nested loops to consume."""
        source = self.loop.source
        if not isinstance(source, ScriptedKeySource):
            raise TypeError("only scripted key sources accept queued keys")
        source.feed(keys)

    def execute(self, keys: Iterable[str] | str, timed_out: bool = True) -> None:
        """Dispatch keys directly, as if typed, resolving a trailing prefix."""
        self.loop.execute_keys(keys, timed_out=timed_out)


def build_context(
    directory: Path,
    settings: Settings | None = None,
    source: KeySource | None = None,
    history: HistoryStore | None = None,
    bookmarks: BookmarkTable | None = None,
    clock: Callable[[], float] = time.monotonic,
    opener: Opener | None = None,
    edit_text: Callable[[str], tuple[str | None, str | None]] | None = None,
    show_hidden: bool = False,
) -> InputContext:
    settings = settings or Settings()
    modes = ModeManager()
    status = StatusBar()
    if history is None:
        history = HistoryStore(settings.history_size, settings.history_sizes)
    listing = DirectoryListing(
        directory,
        show_hidden=show_hidden,
        ignore_case=settings.ignore_case,
        opener=opener,
    )
    if bookmarks is None:
        bookmarks = BookmarkTable(status)
    elif bookmarks.status is None:
        bookmarks.status = status
    matcher = KeySequenceMatcher(lambda: modes.active, settings.timeout_ms, clock)
    evaluator = Evaluator()
    loop = EventLoop(source if source is not None else ScriptedKeySource(), matcher, modes)
    commands = CommandRunner(evaluator, status, listing, bookmarks, history)
    deps = CommandLineDeps(
        modes=modes,
        history=history,
        listing=listing,
        status=status,
        settings=settings,
        evaluator=evaluator,
        run_until=loop.run_until,
        run_command=commands.run,
        edit_text=edit_text or default_edit_text,
    )
    engine = CommandLineEngine(deps)
    evaluator.prompt = engine.input
    engine.command_completer = commands.complete

    context = InputContext(
        settings=settings,
        modes=modes,
        status=status,
        history=history,
        listing=listing,
        bookmarks=bookmarks,
        matcher=matcher,
        evaluator=evaluator,
        loop=loop,
        commands=commands,
        engine=engine,
    )
    register_cmdline_bindings(matcher, engine)
    register_normal_bindings(context)
    return context
