"""Completion results, candidate cycling and path completion.

A completer maps ``(text, cursor)`` to a :class:`Completion`: candidate
strings plus the ``[start, end)`` span of ``text`` they replace.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

DIR_COMPLETION = "dir"
FILE_COMPLETION = "file"


@dataclass(frozen=True)
class Completion:
    candidates: tuple[str, ...]
    start: int
    end: int


Completer = Callable[[str, int], Completion]


def no_completion(text: str, cursor: int) -> Completion:
    return Completion((), cursor, cursor)


class CompletionCycle:
    """Cycle through candidates, ending back at the original text."""

    def __init__(self, text: str, completion: Completion) -> None:
        self.text = text
        self.completion = completion
        self.original = text[completion.start:completion.end]
        self._items = list(completion.candidates) + [self.original]
        self._index = len(self._items) - 1

    def step(self, backward: bool = False) -> tuple[str, int]:
        """Advance to the next (or previous) item; return ``(text, cursor)``."""
        delta = -1 if backward else 1
        self._index = (self._index + delta) % len(self._items)
        item = self._items[self._index]
        start, end = self.completion.start, self.completion.end
        return self.text[:start] + item + self.text[end:], start + len(item)


def path_completer(base_dir: Callable[[], Path], kind: str = FILE_COMPLETION) -> Completer:
    """Build a completer for the last path component before the cursor.

    ``kind`` of ``"dir"`` offers only directories; ``"file"`` offers both.
    Directory candidates carry a trailing ``/``.
    """

    def complete(text: str, cursor: int) -> Completion:
        head = text[:cursor]
        slash = head.rfind("/")
        start = slash + 1
        prefix = head[start:]
        dir_part = head[:start]
        directory = Path(dir_part) if dir_part.startswith("/") else base_dir() / dir_part
        candidates: list[str] = []
        try:
            with os.scandir(directory) as children:
                for child in children:
                    if not child.name.startswith(prefix):
                        continue
                    if child.name.startswith(".") and not prefix.startswith("."):
                        continue
                    try:
                        is_dir = child.is_dir()
                    except OSError:
                        is_dir = False
                    if kind == DIR_COMPLETION and not is_dir:
                        continue
                    candidates.append(child.name + "/" if is_dir else child.name)
        except OSError:
            return Completion((), start, cursor)
        return Completion(tuple(sorted(candidates)), start, cursor)

    return complete
