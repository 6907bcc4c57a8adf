"""End-to-end command-line scenarios driven through the key matcher.

Keys for nested ``input()`` loops are queued on the scripted source before
the outer command runs, because every prompt reads from the event loop.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from vicline.history import FILTER_HISTORY, SEARCH_HISTORY
from vicline.runtime.config import Settings
from vicline.runtime.context import build_context

READ_FILES = ("binary-data", "dos-eof", "dos-line-endings", "two-lines", "very-long-line")


def _make_test_data(root: Path) -> Path:
    data = root / "test-data"
    (data / "read").mkdir(parents=True)
    for name in READ_FILES:
        (data / "read" / name).write_text("", encoding="utf-8")
    (data / "tree" / "dir1" / "dir2").mkdir(parents=True)
    (data / "tree" / "dir5").mkdir()
    return data.resolve()


class _ScenarioTestCase(unittest.TestCase):
    inc_search = False

    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.data = _make_test_data(Path(tmp.name))
        self.opener = mock.Mock(return_value=None)

    def make_context(self, directory: str, settings: Settings | None = None):
        return build_context(
            self.data / directory,
            settings=settings if settings is not None else Settings(inc_search=self.inc_search),
            opener=self.opener,
        )

    @staticmethod
    def current_name(context) -> str:
        return context.listing.current_entry().name


class UserInputTests(_ScenarioTestCase):
    def test_user_prompt_accepts_input(self) -> None:
        context = self.make_context("read")
        context.feed("suffix<cr>")
        context.execute(":echo input('prompt', 'input')<cr>")
        self.assertEqual(context.status.last(), "inputsuffix")

    def test_user_prompt_handles_cancellation(self) -> None:
        context = self.make_context("read")
        context.status.message("old")
        context.feed("suffix<c-c>")
        context.execute(":echo input('prompt', 'input')<cr>")
        self.assertEqual(context.status.last(), "")

    def test_user_prompts_nest(self) -> None:
        context = self.make_context("read")
        context.feed("-<cr>*<cr>")
        context.execute(":echo input('p2', input('p1', '1').'2')<cr>")
        self.assertEqual(context.status.last(), "1-2*")

    def test_user_prompt_and_expression_register(self) -> None:
        context = self.make_context("read")
        context.feed("<c-r>=input('n')<cr>nested<cr>extra<cr>")
        context.execute(":echo input('p').'out'<cr>")
        self.assertEqual(context.status.last(), "nestedextraout")

    def test_user_prompt_completion_kinds(self) -> None:
        context = self.make_context(".")
        context.feed("<c-i><cr>")
        context.execute(":echo input('p', 'read/dos', 'dir')<cr>")
        self.assertEqual(context.status.last(), "read/dos")

        context.feed("<c-i><cr>")
        context.execute(":echo input('p', 'read/dos', 'file')<cr>")
        self.assertEqual(context.status.last(), "read/dos-eof")

    def test_exhausted_input_cancels_the_prompt(self) -> None:
        context = self.make_context("read")
        context.execute(":echo input('p', 'x').'!'<cr>")
        self.assertEqual(context.status.last(), "!")
        self.assertIsNone(context.engine.active)
        self.assertEqual(context.modes.depth, 0)


class NavigationAvailabilityTests(_ScenarioTestCase):
    def test_command_mode_has_no_navigation(self) -> None:
        context = self.make_context("tree", Settings(inc_search=True))
        context.execute(":")
        context.execute("<c-y>")
        self.assertFalse(context.engine.active.navigating)
        context.execute("<c-o>")
        self.assertEqual(context.listing.directory.name, "tree")

    def test_navigation_requires_interactivity(self) -> None:
        context = self.make_context("tree")
        context.execute("/")

        context.execute("<c-y>")
        self.assertFalse(context.engine.active.navigating)

        context.settings.inc_search = True
        context.execute("<c-y>")
        self.assertTrue(context.engine.active.navigating)
        context.execute("<c-y>")
        self.assertFalse(context.engine.active.navigating)


class NavigationMovementTests(_ScenarioTestCase):
    inc_search = True

    def test_stepping_moving_and_walking_directories(self) -> None:
        context = self.make_context("read")
        context.execute("/")

        context.execute("<c-y>")
        self.assertEqual(self.current_name(context), "binary-data")
        context.execute("<c-n>")
        self.assertEqual(self.current_name(context), "dos-eof")
        context.execute("<c-n>")
        self.assertEqual(self.current_name(context), "dos-line-endings")
        context.execute("<c-p>")
        self.assertEqual(self.current_name(context), "dos-eof")

        context.execute("<up>")
        self.assertEqual(self.current_name(context), "binary-data")
        context.execute("<down>")
        self.assertEqual(self.current_name(context), "dos-eof")
        context.execute("<home>")
        self.assertEqual(self.current_name(context), "binary-data")
        context.execute("<end>")
        self.assertEqual(self.current_name(context), "very-long-line")
        context.execute("<left>")
        self.assertEqual(context.listing.directory.name, "test-data")
        context.execute("<right>")
        self.assertEqual(context.listing.directory.name, "read")

    def test_search_navigation_walks_without_history(self) -> None:
        context = self.make_context("tree", Settings(inc_search=True, wrap_scan=True, history_size=5))
        context.execute("/<c-y>")

        context.execute("5<c-m>")
        self.assertEqual(context.listing.directory.name, "dir5")
        context.execute("<c-o>")
        self.assertEqual(context.listing.directory.name, "tree")
        context.execute("1<c-m>")
        self.assertEqual(context.listing.directory.name, "dir1")
        context.execute("2<c-m>")
        self.assertEqual(context.listing.directory.name, "dir2")

        self.assertTrue(context.history.is_empty(SEARCH_HISTORY))

    def test_filter_navigation_walks_without_history(self) -> None:
        context = self.make_context("tree", Settings(inc_search=True, wrap_scan=True, history_size=5))
        context.execute("=<c-y>")

        context.execute("5<c-m>")
        self.assertEqual(context.listing.directory.name, "dir5")
        context.execute("<c-o>")
        self.assertEqual(context.listing.directory.name, "tree")
        self.assertEqual(context.listing.filter_pattern, "")
        context.execute("1<c-m>")
        self.assertEqual(context.listing.directory.name, "dir1")
        context.execute("2<c-m>")
        self.assertEqual(context.listing.directory.name, "dir2")

        self.assertTrue(context.history.is_empty(FILTER_HISTORY))

    def test_navigation_opens_files(self) -> None:
        context = self.make_context("read")
        context.execute("/<c-y><c-m>")

        self.opener.assert_called_once_with(self.data / "read" / "binary-data")
        self.assertIsNone(context.engine.active)

    def test_cancel_restores_directory_and_position(self) -> None:
        context = self.make_context("tree")
        context.execute("/<c-y>")
        context.execute("1<c-m>2")
        self.assertEqual(context.listing.directory.name, "dir1")

        context.execute("<esc>")

        self.assertEqual(context.listing.directory.name, "tree")
        self.assertEqual(self.current_name(context), "dir1")
        self.assertTrue(context.history.is_empty(SEARCH_HISTORY))


class SearchAndFilterTests(_ScenarioTestCase):
    def test_live_search_follows_first_match(self) -> None:
        context = self.make_context("read", Settings(inc_search=True))
        context.execute("/dos-l")
        self.assertEqual(self.current_name(context), "dos-line-endings")
        context.execute("<bs><bs>")
        self.assertEqual(self.current_name(context), "dos-eof")
        context.execute("<esc>")
        self.assertEqual(self.current_name(context), "binary-data")

    def test_confirmed_search_is_recorded_and_repeats(self) -> None:
        context = self.make_context("read")
        context.execute("/dos<cr>")
        self.assertEqual(self.current_name(context), "dos-eof")
        self.assertEqual(context.history.entries(SEARCH_HISTORY), ["dos"])

        context.execute("n")
        self.assertEqual(self.current_name(context), "dos-line-endings")
        context.execute("n")
        self.assertEqual(self.current_name(context), "dos-eof")
        context.execute("N")
        self.assertEqual(self.current_name(context), "dos-line-endings")

    def test_backward_search(self) -> None:
        context = self.make_context("read")
        context.execute("G?dos<cr>")
        self.assertEqual(self.current_name(context), "dos-line-endings")

    def test_empty_search_adds_no_history(self) -> None:
        context = self.make_context("read")
        context.execute("/<cr>")
        self.assertTrue(context.history.is_empty(SEARCH_HISTORY))

    def test_missing_pattern_is_reported(self) -> None:
        context = self.make_context("read")
        context.execute("j/zzz<cr>")
        self.assertEqual(context.status.last(), "Pattern not found: zzz")
        self.assertEqual(self.current_name(context), "dos-eof")

    def test_repeat_without_previous_search(self) -> None:
        context = self.make_context("read")
        context.execute("n")
        self.assertEqual(context.status.last(), "No previous search pattern")

    def test_filter_confirm_and_cancel(self) -> None:
        context = self.make_context("read")
        context.execute("=dos<cr>")
        self.assertEqual(context.listing.names, ["dos-eof", "dos-line-endings"])
        self.assertEqual(context.history.entries(FILTER_HISTORY), ["dos"])

        context.execute("=<c-u>line<esc>")
        self.assertEqual(context.listing.filter_pattern, "dos")

    def test_live_filter_previews_and_cancel_restores(self) -> None:
        context = self.make_context("read", Settings(inc_search=True))
        context.execute("jj=line")
        self.assertEqual(context.listing.names, ["dos-line-endings", "two-lines", "very-long-line"])
        self.assertEqual(self.current_name(context), "dos-line-endings")
        context.execute("<esc>")
        self.assertEqual(context.listing.filter_pattern, "")
        self.assertEqual(len(context.listing.names), len(READ_FILES))
        self.assertEqual(self.current_name(context), "dos-line-endings")
