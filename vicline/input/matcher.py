"""Chord registry and key-sequence matcher with ambiguous-prefix timeout.

Bindings are stored in a trie per mode. Feeding keys walks the trie:

* a complete match with no longer continuation executes at once,
* a complete match that is also the prefix of a longer chord arms a deadline;
  expiry executes the shorter chord, another key disarms it,
* a key with no continuation reports the consumed sequence as unmatched.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .keys import Chord

logger = logging.getLogger(__name__)

PENDING = "pending"
EXECUTED = "executed"
UNMATCHED = "unmatched"

DEFAULT_TIMEOUT_MS = 1000

Handler = Callable[[], object]
Fallback = Callable[[str], object]


@dataclass(frozen=True)
class KeyChordBinding:
    """Mapping from one or more chords to a single action callback."""

    chords: tuple[Chord, ...]
    handler: Handler


@dataclass(frozen=True)
class MatchResult:
    """Outcome of feeding one key (or of a timeout) to the matcher."""

    status: str
    keys: Chord = ()
    handler: Handler | None = None


@dataclass
class _TrieNode:
    handler: Handler | None = None
    children: dict[str, _TrieNode] = field(default_factory=dict)


class Deadline:
    """Single-shot, cancelable deadline measured on an injectable clock."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._expires_at: float | None = None

    @property
    def armed(self) -> bool:
        return self._expires_at is not None

    def arm(self, seconds: float) -> None:
        self._expires_at = self._clock() + max(0.0, seconds)

    def disarm(self) -> None:
        self._expires_at = None

    def remaining(self) -> float | None:
        """Seconds until expiry, ``0.0`` once expired, ``None`` when disarmed."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at


class KeySequenceMatcher:
    """Resolve key tokens against chords registered for the active mode."""

    def __init__(
        self,
        active_mode: Callable[[], str],
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._active_mode = active_mode
        self.timeout_ms = timeout_ms
        self.deadline = Deadline(clock)
        self._roots: dict[str, _TrieNode] = {}
        self._fallbacks: dict[str, Fallback] = {}
        self._node: _TrieNode | None = None
        self._keys: list[str] = []

    def register(self, mode: str, chord: Chord, handler: Handler) -> KeySequenceMatcher:
        """Bind ``chord`` in ``mode``, replacing an existing binding."""
        if not chord:
            raise ValueError("cannot bind an empty chord")
        node = self._roots.setdefault(mode, _TrieNode())
        for key in chord:
            node = node.children.setdefault(key, _TrieNode())
        node.handler = handler
        return self

    def register_binding(self, mode: str, binding: KeyChordBinding) -> KeySequenceMatcher:
        for chord in binding.chords:
            self.register(mode, chord, binding.handler)
        return self

    def register_bindings(self, mode: str, *bindings: KeyChordBinding) -> KeySequenceMatcher:
        """Register multiple bindings and return ``self`` for fluent usage."""
        for binding in bindings:
            self.register_binding(mode, binding)
        return self

    def set_fallback(self, mode: str, handler: Fallback | None) -> None:
        """Install the per-mode handler for keys of unmatched sequences."""
        if handler is None:
            self._fallbacks.pop(mode, None)
        else:
            self._fallbacks[mode] = handler

    @property
    def pending(self) -> bool:
        return self._node is not None

    def reset(self) -> None:
        """Drop any partial match without executing anything."""
        self._node = None
        self._keys = []
        self.deadline.disarm()

    def feed(self, key: str) -> MatchResult:
        mode = self._active_mode()
        self.deadline.disarm()
        if self._node is None:
            self._node = self._roots.get(mode, _TrieNode())
            self._keys = []

        child = self._node.children.get(key)
        self._keys.append(key)
        if child is None:
            keys = tuple(self._keys)
            self.reset()
            logger.debug("unmatched %r in %s mode", keys, mode)
            self._run_fallback(mode, keys)
            return MatchResult(UNMATCHED, keys)

        if not child.children:
            return self._execute(child.handler, tuple(self._keys))

        self._node = child
        if child.handler is not None:
            self.deadline.arm(self.timeout_ms / 1000.0)
        return MatchResult(PENDING, tuple(self._keys))

    def poll(self) -> MatchResult | None:
        """Resolve an ambiguous prefix once its deadline has expired."""
        if self.deadline.expired():
            return self.timeout()
        return None

    def timeout(self) -> MatchResult | None:
        """Resolve the in-flight prefix as if the deadline had just expired.

        A prefix with a terminal binding executes it; a bare prefix is
        reported unmatched. Returns ``None`` when nothing was pending.
        """
        if self._node is None:
            return None
        node = self._node
        keys = tuple(self._keys)
        if node.handler is None:
            mode = self._active_mode()
            self.reset()
            self._run_fallback(mode, keys)
            return MatchResult(UNMATCHED, keys)
        return self._execute(node.handler, keys)

    def _execute(self, handler: Handler | None, keys: Chord) -> MatchResult:
        # Reset first: handlers may re-enter the loop and feed more keys.
        self.reset()
        logger.debug("execute %r", keys)
        if handler is not None:
            handler()
        return MatchResult(EXECUTED, keys, handler)

    def _run_fallback(self, mode: str, keys: Chord) -> None:
        fallback = self._fallbacks.get(mode)
        if fallback is None:
            return
        for key in keys:
            fallback(key)
