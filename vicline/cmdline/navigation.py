"""Live-preview navigation for search and filter sessions.

While a search or filter pattern is being typed the listing cursor follows
the first match. With navigation toggled on, the session also steps between
matches and walks into and out of directories without closing. Everything is
provisional until confirm; cancel restores the snapshot taken at open.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..listing import DirectoryListing, name_matcher
from .session import FILTER, SEARCH_BACKWARD, CommandLineSession

if TYPE_CHECKING:
    from ..runtime.config import Settings

logger = logging.getLogger(__name__)


class IncrementalNavigator:
    """Search/filter cursor movement against a :class:`DirectoryListing`."""

    def __init__(self, listing: DirectoryListing, settings: Settings) -> None:
        self.listing = listing
        self.settings = settings

    @property
    def live(self) -> bool:
        """Whether the environment supports live interactivity."""
        return bool(self.settings.inc_search)

    def begin(self, session: CommandLineSession) -> None:
        session.snapshot = self.listing.snapshot()
        session.origins = []
        session.search_origin = self.listing.position
        if self.live and session.text:
            self.update(session)

    def toggle(self, session: CommandLineSession) -> bool:
        """Flip navigation on or off; a no-op without live interactivity."""
        if not self.live or not session.supports_navigation:
            logger.debug("navigation unavailable for %s", session.sub_mode)
            return False
        session.navigating = not session.navigating
        return True

    def _available(self, session: CommandLineSession) -> bool:
        return self.live and session.navigating

    def matches(self, pattern: str) -> list[int]:
        """Indexes of listing entries matching ``pattern``, in listing order."""
        matcher = name_matcher(pattern, self.settings.ignore_case)
        return [idx for idx, entry in enumerate(self.listing.entries) if matcher(entry.name)]

    def find_from(self, pattern: str, origin: int, backward: bool, inclusive: bool) -> int | None:
        """First match at/after ``origin`` (at/before when ``backward``).

        Wraps around the listing when ``wrap_scan`` is set.
        """
        found = self.matches(pattern)
        if not found:
            return None
        if backward:
            before = [idx for idx in found if idx < origin or (inclusive and idx == origin)]
            if before:
                return before[-1]
            return found[-1] if self.settings.wrap_scan else None
        after = [idx for idx in found if idx > origin or (inclusive and idx == origin)]
        if after:
            return after[0]
        return found[0] if self.settings.wrap_scan else None

    def update(self, session: CommandLineSession) -> bool:
        """Recompute matches for the edited pattern and move the live cursor."""
        if not self.live or not session.supports_navigation:
            return False
        return self._apply_pattern(session)

    def _apply_pattern(self, session: CommandLineSession) -> bool:
        pattern = session.text
        if session.sub_mode == FILTER:
            # After a descend the opening snapshot belongs to another directory.
            base = None if session.origins else session.snapshot
            self.listing.set_filter(pattern)
            origin_name = base.entry_name if base is not None else None
            index = self.listing.find(origin_name) if origin_name is not None else None
            self.listing.position = index if index is not None else 0
            return bool(self.listing.entries)
        index = self.find_from(
            pattern,
            session.search_origin,
            backward=session.sub_mode == SEARCH_BACKWARD,
            inclusive=True,
        )
        if index is None:
            self.listing.position = min(session.search_origin, max(0, len(self.listing.entries) - 1))
            return False
        self.listing.position = index
        return True

    def step(self, session: CommandLineSession, forward: bool = True) -> bool:
        """Go to the next/previous match; ``False`` means no movement."""
        if not self._available(session):
            return False
        found = self.matches(session.text) if session.sub_mode != FILTER else list(
            range(len(self.listing.entries))
        )
        if not found:
            return False
        position = self.listing.position
        if forward:
            later = [idx for idx in found if idx > position]
            target = later[0] if later else (found[0] if self.settings.wrap_scan else None)
        else:
            earlier = [idx for idx in found if idx < position]
            target = earlier[-1] if earlier else (found[-1] if self.settings.wrap_scan else None)
        if target is None or target == position:
            return False
        self.listing.position = target
        logger.debug("navigate to %s", self.listing.entries[target].name)
        return True

    def next_match(self, session: CommandLineSession) -> bool:
        return self.step(session, forward=True)

    def previous_match(self, session: CommandLineSession) -> bool:
        return self.step(session, forward=False)

    def move_entry(self, session: CommandLineSession, delta: int) -> bool:
        if not self._available(session):
            return False
        return self.listing.move_to(self.listing.position + delta)

    def jump_edge(self, session: CommandLineSession, last: bool) -> bool:
        if not self._available(session):
            return False
        return self.listing.move_to(len(self.listing.entries) - 1 if last else 0)

    def descend(self, session: CommandLineSession) -> bool:
        """Enter the highlighted directory, keeping the session open."""
        if not self._available(session):
            return False
        entry = self.listing.current_entry()
        if entry is None or not entry.is_dir:
            return False
        origin = self.listing.snapshot()
        if not self.listing.change_directory(entry.path):
            return False
        session.origins.append(origin)
        session.search_origin = 0
        session.buffer.set("")
        return True

    def ascend(self, session: CommandLineSession) -> bool:
        """Return to the context left by the last descend, or to the parent."""
        if not self._available(session):
            return False
        if session.origins:
            self.listing.restore(session.origins.pop())
            if session.sub_mode == FILTER:
                self.listing.set_filter("")
        elif not self.listing.leave_directory():
            return False
        session.search_origin = self.listing.position
        session.buffer.set("")
        return True

    def cancel(self, session: CommandLineSession) -> None:
        """Discard every provisional move by restoring the opening snapshot."""
        if session.snapshot is not None:
            self.listing.restore(session.snapshot)

    def confirm(self, session: CommandLineSession) -> bool:
        """Commit the final pattern; returns whether anything matched."""
        if session.sub_mode == FILTER:
            self.listing.set_filter(session.text)
            return bool(self.listing.entries)
        if not session.text:
            return True
        if self.live:
            return bool(self.matches(session.text))
        return self._apply_pattern(session)

    def repeat_search(self, pattern: str, backward: bool) -> bool:
        """Move to the next match of ``pattern`` outside any session (``n``/``N``)."""
        index = self.find_from(pattern, self.listing.position, backward=backward, inclusive=False)
        if index is None:
            return False
        return self.listing.move_to(index) or index == self.listing.position
