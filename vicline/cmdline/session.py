"""Command-line session state: sub-modes, line buffer and per-session fields."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from ..completion import Completer, CompletionCycle
from ..history import (
    COMMAND_HISTORY,
    FILTER_HISTORY,
    PROMPT_HISTORY,
    SEARCH_HISTORY,
    HistoryBrowse,
)
from ..listing import ListingSnapshot

COMMAND = "command"
SEARCH_FORWARD = "search-forward"
SEARCH_BACKWARD = "search-backward"
FILTER = "filter"
PROMPT = "prompt"
USER_INPUT = "user-input"

SUB_MODES = (COMMAND, SEARCH_FORWARD, SEARCH_BACKWARD, FILTER, PROMPT, USER_INPUT)
NAVIGATING_SUB_MODES = frozenset({SEARCH_FORWARD, SEARCH_BACKWARD, FILTER})
# Sub-modes whose callback also fires on cancel, with ``None``.
PROMPT_SUB_MODES = frozenset({PROMPT, USER_INPUT})

DEFAULT_PROMPTS = {
    COMMAND: ":",
    SEARCH_FORWARD: "/",
    SEARCH_BACKWARD: "?",
    FILTER: "=",
    PROMPT: "",
    USER_INPUT: "",
}

HISTORY_FOR_SUB_MODE = {
    COMMAND: COMMAND_HISTORY,
    SEARCH_FORWARD: SEARCH_HISTORY,
    SEARCH_BACKWARD: SEARCH_HISTORY,
    FILTER: FILTER_HISTORY,
    PROMPT: PROMPT_HISTORY,
    USER_INPUT: PROMPT_HISTORY,
}

AcceptCallback = Callable[["str | None"], object]


@dataclass
class LineBuffer:
    """Editable text with a cursor offset in ``[0, len(text)]``."""

    text: str = ""
    cursor: int = 0

    def __post_init__(self) -> None:
        self.cursor = max(0, min(self.cursor, len(self.text)))

    def set(self, text: str, cursor: int | None = None) -> None:
        self.text = text
        self.cursor = len(text) if cursor is None else max(0, min(cursor, len(text)))

    def insert(self, chars: str) -> None:
        self.text = self.text[:self.cursor] + chars + self.text[self.cursor:]
        self.cursor += len(chars)

    def insert_at(self, offset: int, chars: str) -> None:
        """Insert ``chars`` at ``offset`` and leave the cursor after them."""
        offset = max(0, min(offset, len(self.text)))
        self.text = self.text[:offset] + chars + self.text[offset:]
        self.cursor = offset + len(chars)

    def delete_before(self) -> bool:
        if self.cursor == 0:
            return False
        self.text = self.text[:self.cursor - 1] + self.text[self.cursor:]
        self.cursor -= 1
        return True

    def delete_at(self) -> bool:
        if self.cursor >= len(self.text):
            return False
        self.text = self.text[:self.cursor] + self.text[self.cursor + 1:]
        return True

    def delete_word_before(self) -> bool:
        if self.cursor == 0:
            return False
        start = self.cursor
        while start > 0 and self.text[start - 1].isspace():
            start -= 1
        while start > 0 and not self.text[start - 1].isspace():
            start -= 1
        self.text = self.text[:start] + self.text[self.cursor:]
        self.cursor = start
        return True

    def kill_to_start(self) -> bool:
        if self.cursor == 0:
            return False
        self.text = self.text[self.cursor:]
        self.cursor = 0
        return True

    def kill_to_end(self) -> bool:
        if self.cursor >= len(self.text):
            return False
        self.text = self.text[:self.cursor]
        return True

    def move(self, delta: int) -> bool:
        target = max(0, min(self.cursor + delta, len(self.text)))
        moved = target != self.cursor
        self.cursor = target
        return moved

    def home(self) -> None:
        self.cursor = 0

    def end(self) -> None:
        self.cursor = len(self.text)


@dataclass(eq=False)
class CommandLineSession:
    """One open command-line interaction, from open to its terminal transition."""

    sub_mode: str
    prompt: str
    buffer: LineBuffer
    history_category: str
    on_accept: AcceptCallback | None = None
    completer: Completer | None = None
    allow_escape_entry: bool = False
    save_history: bool = True
    navigating: bool = False
    closed: bool = False
    history: HistoryBrowse = field(default_factory=HistoryBrowse)
    snapshot: ListingSnapshot | None = None
    # Contexts pushed by descending; popped again by ascending.
    origins: list[ListingSnapshot] = field(default_factory=list)
    search_origin: int = 0
    completion: CompletionCycle | None = None

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def is_prompt(self) -> bool:
        return self.sub_mode in PROMPT_SUB_MODES

    @property
    def supports_navigation(self) -> bool:
        return self.sub_mode in NAVIGATING_SUB_MODES
