"""Minimal ``:`` command set run when a command session is accepted."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from .bookmarks import BookmarkTable
from .completion import DIR_COMPLETION, Completion, path_completer
from .expr import EvalError, Evaluator, complete_expression
from .history import COMMAND_HISTORY, HISTORY_CATEGORIES, HistoryStore
from .listing import DirectoryListing
from .status import StatusBar

logger = logging.getLogger(__name__)


class CommandRunner:
    """Parse ``name args`` lines and dispatch to builtin commands."""

    def __init__(
        self,
        evaluator: Evaluator,
        status: StatusBar,
        listing: DirectoryListing,
        bookmarks: BookmarkTable,
        history: HistoryStore,
    ) -> None:
        self.evaluator = evaluator
        self.status = status
        self.listing = listing
        self.bookmarks = bookmarks
        self.history = history
        self.commands: dict[str, Callable[[str], None]] = {
            "cd": self.cd,
            "echo": self.echo,
            "history": self.show_history,
            "marks": self.marks,
        }

    def run(self, line: str) -> None:
        line = line.strip().lstrip(":").strip()
        if not line:
            return
        name, _, args = line.partition(" ")
        command = self.commands.get(name)
        if command is None:
            self.status.error(f"Unknown command: {name}")
            return
        logger.debug("run command %s %r", name, args)
        command(args.strip())

    def echo(self, args: str) -> None:
        if not args:
            self.status.message("")
            return
        try:
            value = self.evaluator.evaluate(args)
        except EvalError as exc:
            self.status.error(str(exc))
            return
        self.status.message(value)

    def cd(self, args: str) -> None:
        target = Path(args).expanduser() if args else Path.home()
        if not target.is_absolute():
            target = self.listing.directory / target
        if not self.listing.change_directory(target):
            self.status.error(f"Cannot change directory: {args}")

    def marks(self, args: str) -> None:
        active = self.bookmarks.active(args or None)
        if not active:
            self.status.message("No marks set")
            return
        parts = []
        for mark in active:
            bookmark = self.bookmarks.get(mark)
            if bookmark is not None:
                parts.append(f"{mark}: {bookmark.directory / bookmark.file}")
        self.status.message("; ".join(parts))

    def show_history(self, args: str) -> None:
        category = args or COMMAND_HISTORY
        if category not in HISTORY_CATEGORIES:
            self.status.error(f"Unknown history: {category}")
            return
        entries = self.history.entries(category)
        self.status.message(" | ".join(entries) if entries else "History is empty")

    def complete(self, text: str, cursor: int) -> Completion:
        """Complete command names, then per-command arguments."""
        head = text[:cursor]
        stripped = head.lstrip()
        lead = len(head) - len(stripped)
        if " " not in stripped:
            names = tuple(name for name in sorted(self.commands) if name.startswith(stripped))
            return Completion(names, lead, cursor)
        name, _, _ = stripped.partition(" ")
        args_start = lead + len(name) + 1
        while args_start < cursor and text[args_start] == " ":
            args_start += 1
        args = text[args_start:cursor]
        if name == "echo":
            result = complete_expression(args, len(args), self.evaluator.function_names())
        elif name == "cd":
            result = path_completer(lambda: self.listing.directory, DIR_COMPLETION)(args, len(args))
        else:
            return Completion((), cursor, cursor)
        return Completion(result.candidates, args_start + result.start, args_start + result.end)
