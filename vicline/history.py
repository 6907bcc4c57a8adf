"""Bounded per-category input histories.

Each category (command, search, filter, prompt, expr) keeps its entries most
recent first. Appending an exact repeat of the most recent entry is a no-op,
and capacity changes evict from the oldest end.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_HISTORY_SIZE = 15

COMMAND_HISTORY = "command"
SEARCH_HISTORY = "search"
FILTER_HISTORY = "filter"
PROMPT_HISTORY = "prompt"
EXPR_HISTORY = "expr"

HISTORY_CATEGORIES = (
    COMMAND_HISTORY,
    SEARCH_HISTORY,
    FILTER_HISTORY,
    PROMPT_HISTORY,
    EXPR_HISTORY,
)

OLDER = "older"
NEWER = "newer"


@dataclass
class HistoryBrowse:
    """Browsing position of one reader of a history list."""

    # ``None`` means "not browsing", which differs from index 0.
    cursor: int | None = None
    draft: str | None = None

    def reset(self) -> None:
        self.cursor = None
        self.draft = None


@dataclass
class HistoryList:
    """Most-recent-first list of strings with a hard capacity."""

    capacity: int = DEFAULT_HISTORY_SIZE
    items: list[str] = field(default_factory=list)

    def append(self, text: str) -> bool:
        """Insert ``text`` as most recent; return whether anything was stored."""
        if not text or self.capacity <= 0:
            return False
        if self.items and self.items[0] == text:
            return False
        self.items.insert(0, text)
        del self.items[self.capacity:]
        return True

    def resize(self, capacity: int) -> None:
        self.capacity = max(0, capacity)
        del self.items[self.capacity:]

    def navigate(self, browse: HistoryBrowse, direction: str, draft: str) -> str:
        """Step ``browse`` through the list and return the text to show.

        Stepping past either end never loses the caller's in-progress text.
        """
        if browse.cursor is not None and browse.cursor >= len(self.items):
            # The list shrank underneath this reader.
            browse.cursor = len(self.items) - 1 if self.items else None

        if direction == OLDER:
            if browse.cursor is None:
                if not self.items:
                    return draft
                if browse.draft is None:
                    browse.draft = draft
                browse.cursor = 0
                return self.items[0]
            if browse.cursor + 1 >= len(self.items):
                return draft
            browse.cursor += 1
            return self.items[browse.cursor]

        if direction == NEWER:
            if browse.cursor is None or browse.cursor == 0:
                saved = browse.draft
                browse.reset()
                return draft if saved is None else saved
            browse.cursor -= 1
            return self.items[browse.cursor]

        raise ValueError(f"unknown history direction: {direction!r}")


class HistoryStore:
    """Collection of :class:`HistoryList` objects keyed by category."""

    def __init__(
        self,
        capacity: int = DEFAULT_HISTORY_SIZE,
        capacities: dict[str, int] | None = None,
    ) -> None:
        overrides = capacities or {}
        self._lists: dict[str, HistoryList] = {
            category: HistoryList(capacity=max(0, overrides.get(category, capacity)))
            for category in HISTORY_CATEGORIES
        }

    def _list(self, category: str) -> HistoryList:
        try:
            return self._lists[category]
        except KeyError:
            raise ValueError(f"unknown history category: {category!r}") from None

    def append(self, category: str, text: str) -> bool:
        return self._list(category).append(text)

    def entries(self, category: str) -> list[str]:
        """Return a copy of ``category`` entries, most recent first."""
        return list(self._list(category).items)

    def is_empty(self, category: str) -> bool:
        return not self._list(category).items

    def most_recent(self, category: str) -> str | None:
        items = self._list(category).items
        return items[0] if items else None

    def capacity(self, category: str) -> int:
        return self._list(category).capacity

    def navigate(self, category: str, browse: HistoryBrowse, direction: str, draft: str) -> str:
        return self._list(category).navigate(browse, direction, draft)

    def set_capacity(self, size: int, category: str | None = None) -> None:
        """Resize one category, or all of them when ``category`` is omitted."""
        targets = [category] if category is not None else list(self._lists)
        for name in targets:
            self._list(name).resize(size)

    def to_dict(self) -> dict[str, list[str]]:
        return {category: list(hist.items) for category, hist in self._lists.items()}

    @classmethod
    def from_dict(
        cls,
        data: dict[str, object],
        capacity: int = DEFAULT_HISTORY_SIZE,
        capacities: dict[str, int] | None = None,
    ) -> HistoryStore:
        """Build a store from serialized data, dropping malformed values.

        Entries are stored most recent first, so they are appended in reverse.
        """
        store = cls(capacity=capacity, capacities=capacities)
        for category in HISTORY_CATEGORIES:
            raw = data.get(category)
            if not isinstance(raw, list):
                continue
            for text in reversed(raw):
                if isinstance(text, str):
                    store.append(category, text)
        return store
