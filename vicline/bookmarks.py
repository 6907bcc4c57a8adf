"""Single-character bookmarks over directory/file pairs.

Valid marks are digits, letters and the ``<``/``>`` selection marks. The
special marks ``<``, ``>`` and ``'`` can only be set by the program itself
(``'`` is the "previous directory" mark).
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from pathlib import Path

from .listing import DirectoryListing
from .status import StatusBar

VALID_MARKS = string.digits + "<>" + string.ascii_uppercase + string.ascii_lowercase
SPECIAL_MARKS = "<>'"


@dataclass(frozen=True)
class Bookmark:
    directory: Path
    file: str


def is_valid_mark(mark: str) -> bool:
    return len(mark) == 1 and (mark in VALID_MARKS or mark in SPECIAL_MARKS)


def is_user_mark(mark: str) -> bool:
    """Return whether users may set ``mark`` directly."""
    return len(mark) == 1 and mark in VALID_MARKS and mark not in SPECIAL_MARKS


class BookmarkTable:
    """Mapping from the mark alphabet to :class:`Bookmark` records."""

    def __init__(self, status: StatusBar | None = None) -> None:
        self.status = status
        self._marks: dict[str, Bookmark] = {}

    def _report(self, text: str) -> None:
        if self.status is not None:
            self.status.error(text)

    def add(self, mark: str, directory: Path, file: str) -> bool:
        """Set a user mark; invalid or special names are rejected."""
        if not is_user_mark(mark):
            self._report("Invalid mark name")
            return False
        self._marks[mark] = Bookmark(Path(directory), file)
        return True

    def get(self, mark: str) -> Bookmark | None:
        return self._marks.get(mark)

    def is_empty(self, mark: str) -> bool:
        return mark not in self._marks

    def remove(self, mark: str) -> None:
        self._marks.pop(mark, None)

    def clear(self) -> None:
        self._marks.clear()

    def active(self, marks: str | None = None) -> list[str]:
        """Return set marks in alphabet order, optionally limited to ``marks``."""
        alphabet = VALID_MARKS + "'"
        return [
            mark
            for mark in alphabet
            if mark in self._marks and (marks is None or mark in marks)
        ]

    def is_valid(self, mark: str) -> bool:
        """Return whether ``mark`` is set and still points at a directory."""
        bookmark = self._marks.get(mark)
        return bookmark is not None and bookmark.directory.is_dir()

    def goto(self, listing: DirectoryListing, mark: str) -> bool:
        """Navigate ``listing`` to ``mark``; report problems on the status line."""
        if not is_valid_mark(mark):
            self._report("Invalid mark name")
            return False
        if mark == "'" and mark not in self._marks:
            if listing.last_directory is None:
                self._report("Mark is not set")
                return False
            return listing.change_directory(listing.last_directory)
        if self.is_empty(mark):
            self._report("Mark is not set")
            return False
        if not self.is_valid(mark):
            self._report("Mark is invalid")
            return False
        bookmark = self._marks[mark]
        if not listing.change_directory(bookmark.directory, select=bookmark.file):
            self._report("Mark is invalid")
            return False
        return True

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {
            mark: {"directory": str(bookmark.directory), "file": bookmark.file}
            for mark, bookmark in self._marks.items()
        }

    def load_dict(self, data: dict[str, object]) -> None:
        """Merge serialized marks, dropping invalid keys and malformed entries."""
        for mark, raw in data.items():
            if not isinstance(mark, str) or not is_valid_mark(mark):
                continue
            if not isinstance(raw, dict):
                continue
            directory = raw.get("directory")
            file = raw.get("file", "")
            if not isinstance(directory, str) or not directory or not isinstance(file, str):
                continue
            self._marks[mark] = Bookmark(Path(directory), file)
