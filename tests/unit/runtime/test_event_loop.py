"""Tests for the blocking key loop and its nesting behavior."""

from __future__ import annotations

import unittest

from vicline.input.matcher import KeySequenceMatcher
from vicline.input.reader import ScriptedKeySource
from vicline.modes import CMDLINE_MODE, NORMAL_MODE, ModeManager
from vicline.runtime.loop import EventLoop


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class EventLoopTests(unittest.TestCase):
    def setUp(self) -> None:
        self.modes = ModeManager()
        self.clock = _FakeClock()
        self.matcher = KeySequenceMatcher(lambda: self.modes.active, timeout_ms=1000, clock=self.clock)
        self.source = ScriptedKeySource()
        self.redraws = 0
        self.loop = EventLoop(self.source, self.matcher, self.modes, after_key=self._redraw)
        self.calls: list[str] = []

    def _redraw(self) -> None:
        self.redraws += 1

    def _bind(self, keys: tuple[str, ...], name: str) -> None:
        self.matcher.register(NORMAL_MODE, keys, lambda: self.calls.append(name))

    def test_run_dispatches_until_input_ends(self) -> None:
        self._bind(("a",), "a")
        self.source.feed("aa")
        self.loop.run()
        self.assertEqual(self.calls, ["a", "a"])
        self.assertEqual(self.redraws, 2)

    def test_stop_ends_the_loop(self) -> None:
        self.matcher.register(NORMAL_MODE, ("q",), self.loop.stop)
        self._bind(("a",), "a")
        self.source.feed("qa")
        self.loop.run()
        self.assertEqual(self.calls, [])
        self.assertEqual(self.source.pending(), ["a"])

    def test_drained_source_resolves_pending_prefix(self) -> None:
        self._bind(("d",), "d")
        self._bind(("d", "d"), "dd")
        self.source.feed("d")
        self.loop.run()
        self.assertEqual(self.calls, ["d"])

    def test_execute_keys_resolves_trailing_prefix_only_when_timed_out(self) -> None:
        self._bind(("d",), "d")
        self._bind(("d", "d"), "dd")

        self.loop.execute_keys("d", timed_out=False)
        self.assertTrue(self.matcher.pending)
        self.loop.execute_keys("d")
        self.assertEqual(self.calls, ["dd"])

        self.loop.execute_keys("d")
        self.assertEqual(self.calls, ["dd", "d"])

    def test_nested_run_until_consumes_queued_keys(self) -> None:
        answers: list[str] = []

        def ask() -> None:
            self.modes.push(CMDLINE_MODE)
            typed: list[str] = []
            self.matcher.set_fallback(CMDLINE_MODE, typed.append)
            self.matcher.register(CMDLINE_MODE, ("ENTER",), self.modes.pop)
            self.loop.run_until(lambda: self.modes.is_active(NORMAL_MODE))
            answers.append("".join(typed))

        self.matcher.register(NORMAL_MODE, ("i",), ask)
        self.source.feed("xy<cr>")
        self.loop.execute_keys("i")

        self.assertEqual(answers, ["xy"])
        self.assertEqual(self.loop.depth, 0)

    def test_exhausted_input_aborts_open_modes(self) -> None:
        aborted: list[str] = []

        def on_abort() -> None:
            aborted.append("cmdline")
            self.modes.pop()

        self.modes.push(CMDLINE_MODE, on_abort=on_abort)
        self.loop.run_until(lambda: False)

        self.assertEqual(aborted, ["cmdline"])
        self.assertTrue(self.modes.is_active(NORMAL_MODE))
