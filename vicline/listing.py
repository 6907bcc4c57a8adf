"""Filesystem-backed directory listing used as the navigation collaborator.

The listing owns the current directory, the sorted visible entries (after an
optional local filter) and the cursor position. Snapshots capture all of that
so a cancelled search or filter can put everything back exactly.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

Opener = Callable[[Path], "str | None"]


@dataclass(frozen=True)
class ListingEntry:
    """One visible row of the listing."""

    name: str
    path: Path
    is_dir: bool


@dataclass(frozen=True)
class ListingSnapshot:
    """Directory, cursor and local filter captured for exact rollback."""

    directory: Path
    position: int
    entry_name: str | None
    filter_pattern: str


def name_matcher(pattern: str, ignore_case: bool = True) -> Callable[[str], bool]:
    """Build a predicate for ``pattern``.

    The pattern is a regular expression; when it does not compile (a partial
    pattern such as ``"dos("``) it is matched as a literal substring. The
    empty pattern matches everything.
    """
    if not pattern:
        return lambda _name: True
    flags = re.IGNORECASE if ignore_case else 0
    try:
        regex = re.compile(pattern, flags)
    except re.error:
        regex = re.compile(re.escape(pattern), flags)
    return lambda name: regex.search(name) is not None


def _sort_key(entry: ListingEntry) -> tuple[int, str, str]:
    return (0 if entry.is_dir else 1, entry.name.casefold(), entry.name)


def list_directory(directory: Path, show_hidden: bool) -> tuple[list[ListingEntry], OSError | None]:
    """Return sorted children of ``directory`` (directories first)."""
    entries: list[ListingEntry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                if not show_hidden and child.name.startswith("."):
                    continue
                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False
                entries.append(ListingEntry(child.name, Path(child.path), is_dir))
    except OSError as exc:
        return [], exc
    entries.sort(key=_sort_key)
    return entries, None


class DirectoryListing:
    """Current directory view with cursor, local filter and snapshots."""

    def __init__(
        self,
        directory: Path,
        show_hidden: bool = False,
        ignore_case: bool = True,
        opener: Opener | None = None,
    ) -> None:
        self.show_hidden = show_hidden
        self.ignore_case = ignore_case
        self.opener = opener
        self.directory = directory.resolve()
        self.last_directory: Path | None = None
        self.filter_pattern = ""
        self.position = 0
        self.entries: list[ListingEntry] = []
        self._all_entries: list[ListingEntry] = []
        self.load()

    def load(self, select: str | None = None) -> None:
        """Rescan the directory and reapply the local filter."""
        self._all_entries, error = list_directory(self.directory, self.show_hidden)
        if error is not None:
            logger.warning("cannot list %s: %s", self.directory, error)
        self._apply_filter(select)

    def _apply_filter(self, select: str | None) -> None:
        previous = select
        if previous is None:
            current = self.current_entry()
            previous = current.name if current is not None else None
        matches = name_matcher(self.filter_pattern, self.ignore_case)
        self.entries = [entry for entry in self._all_entries if matches(entry.name)]
        index = self.find(previous) if previous is not None else None
        self.position = index if index is not None else 0

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def current_entry(self) -> ListingEntry | None:
        if 0 <= self.position < len(self.entries):
            return self.entries[self.position]
        return None

    def find(self, name: str) -> int | None:
        for idx, entry in enumerate(self.entries):
            if entry.name == name:
                return idx
        return None

    def move_to(self, index: int) -> bool:
        """Move the cursor to ``index`` (clamped); return whether it moved."""
        if not self.entries:
            return False
        target = max(0, min(index, len(self.entries) - 1))
        if target == self.position:
            return False
        self.position = target
        return True

    def set_filter(self, pattern: str) -> None:
        if pattern == self.filter_pattern:
            return
        self.filter_pattern = pattern
        self._apply_filter(None)

    def change_directory(self, directory: Path, select: str | None = None) -> bool:
        """Switch to ``directory``; the local filter is dropped on success."""
        try:
            resolved = directory.resolve()
        except OSError:
            resolved = directory
        if not resolved.is_dir():
            return False
        if resolved != self.directory:
            self.last_directory = self.directory
        self.directory = resolved
        self.filter_pattern = ""
        self.position = 0
        self.entries = []
        self.load(select)
        return True

    def enter_directory(self) -> bool:
        entry = self.current_entry()
        if entry is None or not entry.is_dir:
            return False
        return self.change_directory(entry.path)

    def leave_directory(self) -> bool:
        parent = self.directory.parent
        if parent == self.directory:
            return False
        return self.change_directory(parent, select=self.directory.name)

    def open_entry(self) -> str | None:
        """Enter the current directory or hand the file to the opener.

        Returns an error message for the status line, ``None`` on success.
        """
        entry = self.current_entry()
        if entry is None:
            return "No file to open"
        if entry.is_dir:
            return None if self.enter_directory() else f"Cannot enter {entry.name}"
        if self.opener is None:
            return f"No opener for {entry.name}"
        return self.opener(entry.path)

    def snapshot(self) -> ListingSnapshot:
        current = self.current_entry()
        return ListingSnapshot(
            directory=self.directory,
            position=self.position,
            entry_name=current.name if current is not None else None,
            filter_pattern=self.filter_pattern,
        )

    def restore(self, snapshot: ListingSnapshot) -> None:
        """Put directory, filter and cursor back to ``snapshot``."""
        if snapshot.directory != self.directory:
            last_directory = self.last_directory
            self.change_directory(snapshot.directory)
            # Rolling back is not a user-visible directory change.
            self.last_directory = last_directory
        if snapshot.filter_pattern != self.filter_pattern:
            self.filter_pattern = snapshot.filter_pattern
            self._apply_filter(snapshot.entry_name)
        index = self.find(snapshot.entry_name) if snapshot.entry_name is not None else None
        if index is None:
            index = snapshot.position
        self.position = max(0, min(index, len(self.entries) - 1)) if self.entries else 0
