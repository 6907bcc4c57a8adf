"""Blocking key loop with re-entrant nesting.

``run_until`` is called once at top level and again, recursively, by every
blocking prompt. Each call reads keys (waiting at most until the matcher's
ambiguity deadline), feeds them to the matcher and returns once its predicate
holds. End of input aborts all open sessions so no frozen caller waits forever.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..input.keys import parse_keys
from ..input.matcher import KeySequenceMatcher, MatchResult
from ..input.reader import ScriptedKeySource, TerminalKeySource
from ..modes import ModeManager

logger = logging.getLogger(__name__)

KeySource = ScriptedKeySource | TerminalKeySource


class EventLoop:
    """Single-threaded key dispatch loop."""

    def __init__(
        self,
        source: KeySource,
        matcher: KeySequenceMatcher,
        modes: ModeManager,
        after_key: Callable[[], None] | None = None,
    ) -> None:
        self.source = source
        self.matcher = matcher
        self.modes = modes
        self.after_key = after_key
        self.stopped = False
        self.depth = 0

    def stop(self) -> None:
        self.stopped = True

    def dispatch(self, key: str) -> MatchResult:
        result = self.matcher.feed(key)
        if self.after_key is not None:
            self.after_key()
        return result

    def execute_keys(self, keys: Iterable[str] | str, timed_out: bool = True) -> None:
        """Feed ``keys`` directly, resolving a trailing ambiguous prefix.

        A plain string is parsed as vim notation (``"<cr>"``, ``"<c-r>"``).
        """
        if isinstance(keys, str):
            keys = parse_keys(keys)
        for key in keys:
            self.dispatch(key)
        if timed_out and self.matcher.pending:
            self.matcher.timeout()
            if self.after_key is not None:
                self.after_key()

    def run_until(self, done: Callable[[], bool]) -> None:
        self.depth += 1
        try:
            while not done() and not self.stopped:
                key = self.source.read(self.matcher.deadline.remaining())
                if key is not None:
                    self.dispatch(key)
                    continue
                if self.matcher.pending:
                    # The wait ended without input: the deadline passed, or a
                    # scripted source ran dry and cannot wait at all.
                    self.matcher.timeout()
                    if self.after_key is not None:
                        self.after_key()
                    continue
                if self.source.closed:
                    logger.warning("input exhausted at loop depth %d; aborting sessions", self.depth)
                    self.modes.abort_all()
                    break
        finally:
            self.depth -= 1

    def run(self) -> None:
        """Run the top-level loop until :meth:`stop` or end of input."""
        self.run_until(lambda: self.stopped)
