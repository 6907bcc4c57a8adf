"""Tests for command-line sessions: terminal transitions, history, editing."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from vicline.cmdline import COMMAND, PROMPT
from vicline.history import COMMAND_HISTORY, EXPR_HISTORY, PROMPT_HISTORY
from vicline.modes import CMDLINE_MODE, NORMAL_MODE
from vicline.runtime.context import build_context


class _EngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.edits: list[str] = []
        self.context = build_context(self.root, edit_text=self._edit_text)
        self.engine = self.context.engine
        self.responses: list[str | None] = []

    def _edit_text(self, text: str) -> tuple[str | None, str | None]:
        self.edits.append(text)
        return "edited", None

    def line(self) -> str:
        session = self.engine.active
        self.assertIsNotNone(session)
        return session.text


class PromptCallbackTests(_EngineTestCase):
    def test_callback_fires_once_on_confirm(self) -> None:
        self.engine.prompt("(prompt)", "initial", self.responses.append)
        self.assertTrue(self.context.modes.is_active(CMDLINE_MODE))
        self.assertEqual(self.engine.active.sub_mode, PROMPT)

        self.context.execute("<cr>")

        self.assertEqual(self.responses, ["initial"])
        self.assertTrue(self.context.modes.is_active(NORMAL_MODE))
        self.assertEqual(self.context.history.entries(PROMPT_HISTORY), ["initial"])

    def test_callback_fires_once_with_none_on_cancel(self) -> None:
        self.engine.prompt("(prompt)", "initial", self.responses.append)
        self.context.execute("<c-c>")
        self.assertEqual(self.responses, [None])
        self.assertIsNone(self.engine.active)
        self.assertFalse(self.engine.cancel())

    def test_prompt_can_opt_out_of_history(self) -> None:
        self.engine.prompt("(prompt)", "secret", self.responses.append, save_history=False)
        self.context.execute("<cr>")
        self.assertTrue(self.context.history.is_empty(PROMPT_HISTORY))

    def test_failing_callback_is_reported_after_close(self) -> None:
        def explode(_text: str | None) -> None:
            raise RuntimeError("boom")

        self.engine.prompt("(prompt)", "x", explode)
        self.context.execute("<cr>")

        self.assertIsNone(self.engine.active)
        self.assertEqual(self.context.status.last(), "Error: boom")

    def test_accept_without_session_is_ignored(self) -> None:
        self.assertFalse(self.engine.accept())


class SessionStackTests(_EngineTestCase):
    def test_only_innermost_session_receives_keys(self) -> None:
        outer = self.engine.open_command("out")
        inner = self.engine.prompt("?", "", self.responses.append)
        self.assertEqual(self.engine.depth, 2)

        self.context.execute("in<cr>")

        self.assertEqual(self.responses, ["in"])
        self.assertEqual(outer.text, "out")
        self.assertTrue(inner.closed)
        self.assertIs(self.engine.active, outer)
        self.assertTrue(self.context.modes.is_active(CMDLINE_MODE))

    def test_abort_all_cancels_every_session(self) -> None:
        first: list[str | None] = []
        second: list[str | None] = []
        self.engine.prompt("1", "a", first.append)
        self.engine.prompt("2", "b", second.append)

        self.context.modes.abort_all()

        self.assertEqual((first, second), ([None], [None]))
        self.assertEqual(self.engine.depth, 0)
        self.assertTrue(self.context.modes.is_active(NORMAL_MODE))

    def test_abort_all_cancels_sessions_opened_while_aborting(self) -> None:
        reopened: list[str | None] = []

        def reopen(text: str | None) -> None:
            self.responses.append(text)
            if text is None and not reopened:
                self.engine.prompt("again", "", reopened.append)

        self.engine.prompt("1", "a", reopen)
        self.context.modes.abort_all()

        self.assertEqual(self.responses, [None])
        self.assertEqual(reopened, [None])
        self.assertEqual(self.engine.depth, 0)
        self.assertEqual(self.context.modes.depth, 0)
        self.assertTrue(self.context.modes.is_active(NORMAL_MODE))

    def test_outer_session_resumes_unchanged_after_nested_prompt(self) -> None:
        outer = self.engine.open_command("abc")
        self.context.execute("<left>")
        self.engine.prompt("?", "", self.responses.append)
        self.context.execute("xyz<left><cr>")

        self.assertIs(self.engine.active, outer)
        self.assertEqual(outer.text, "abc")
        self.assertEqual(outer.buffer.cursor, 2)
        self.assertEqual(outer.sub_mode, COMMAND)
        self.context.execute("Q")
        self.assertEqual(outer.text, "abQc")

    def test_unknown_sub_mode_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.engine.open("nope")


class EditingTests(_EngineTestCase):
    def test_backspace_on_empty_line_cancels(self) -> None:
        self.context.execute(":a<bs>")
        self.assertEqual(self.line(), "")
        self.context.execute("<bs>")
        self.assertIsNone(self.engine.active)

    def test_line_editing_chords(self) -> None:
        self.context.execute(":echo one two<c-w>")
        self.assertEqual(self.line(), "echo one ")
        self.context.execute("<c-a>X<c-e>Y")
        self.assertEqual(self.line(), "Xecho one Y")
        self.context.execute("<left><left><c-k>")
        self.assertEqual(self.line(), "Xecho one")
        self.context.execute("<c-u>")
        self.assertEqual(self.line(), "")

    def test_unbound_control_keys_are_not_inserted(self) -> None:
        self.context.execute(":a<c-r>b")
        self.assertEqual(self.line(), "ab")

    def test_external_editing_replaces_line(self) -> None:
        self.context.execute(":draft<c-g>")
        self.assertEqual(self.edits, ["draft"])
        self.assertEqual(self.line(), "edited")

    def test_external_editing_needs_permission_in_prompts(self) -> None:
        self.engine.prompt("?", "text", self.responses.append)
        self.context.execute("<c-g>")
        self.assertEqual(self.edits, [])
        self.assertEqual(self.line(), "text")


class HistoryTests(_EngineTestCase):
    def test_accepted_commands_are_recorded_once(self) -> None:
        self.context.execute(":echo 1<cr>")
        self.context.execute(":echo 1<cr>")
        self.context.execute(":<cr>")
        self.assertEqual(self.context.history.entries(COMMAND_HISTORY), ["echo 1"])
        self.assertEqual(self.context.status.last(), "1")

    def test_cancelled_commands_are_not_recorded(self) -> None:
        self.context.execute(":echo 1<esc>")
        self.assertTrue(self.context.history.is_empty(COMMAND_HISTORY))

    def test_browsing_history_preserves_draft(self) -> None:
        self.context.history.append(COMMAND_HISTORY, "older")
        self.context.history.append(COMMAND_HISTORY, "newer")

        self.context.execute(":draft<up>")
        self.assertEqual(self.line(), "newer")
        self.context.execute("<c-p>")
        self.assertEqual(self.line(), "older")
        self.context.execute("<up>")
        self.assertEqual(self.line(), "older")
        self.context.execute("<down><c-n>")
        self.assertEqual(self.line(), "draft")

    def test_history_browse_resets_after_close(self) -> None:
        self.context.history.append(COMMAND_HISTORY, "older")
        session = self.engine.open_command()
        self.context.execute("<up>")
        self.assertEqual(session.history.cursor, 0)
        self.context.execute("<esc>")
        self.assertIsNone(session.history.cursor)
        self.context.execute(":<up>")
        self.assertEqual(self.line(), "older")


class CompletionTests(_EngineTestCase):
    def test_tab_cycles_command_names(self) -> None:
        self.context.execute(":<tab>")
        self.assertEqual(self.line(), "cd")
        self.context.execute("<tab>")
        self.assertEqual(self.line(), "echo")
        self.context.execute("<s-tab><s-tab>")
        self.assertEqual(self.line(), "")

    def test_typing_ends_completion(self) -> None:
        self.context.execute(":<tab>x<tab>")
        self.assertEqual(self.line(), "cdx")

    def test_echo_completes_expression_functions(self) -> None:
        self.context.execute(":echo str<tab>")
        self.assertEqual(self.line(), "echo strlen(")

    def test_cd_completes_directories(self) -> None:
        (self.root / "subdir").mkdir()
        (self.root / "subfile").write_text("", encoding="utf-8")
        self.context.execute(":cd su<tab>")
        self.assertEqual(self.line(), "cd subdir/")


class ExpressionRegisterTests(_EngineTestCase):
    def test_function_name_completion(self) -> None:
        self.context.execute(":<c-r>=")
        self.context.execute("ex<c-i>")
        self.assertEqual(self.line(), "executable(")
        self.context.execute("<c-c>")

    def test_completion_ignores_pipe(self) -> None:
        self.context.execute(":<c-r>=")
        self.context.execute("ab|ex<c-i>")
        self.assertEqual(self.line(), "ab|ex")
        self.context.execute("<c-c>")

    def test_value_is_inserted_at_cursor(self) -> None:
        self.context.execute(":ab<left><c-r>='X'.'Y'<cr>")
        self.assertEqual(self.engine.active.sub_mode, COMMAND)
        self.assertEqual(self.line(), "aXYb")
        self.assertEqual(self.context.history.entries(EXPR_HISTORY), ["'X'.'Y'"])

    def test_evaluation_error_inserts_nothing(self) -> None:
        self.context.execute(":ab<c-r>=nosuch()<cr>")
        self.assertEqual(self.line(), "ab")
        self.assertEqual(self.context.status.last(), "Unknown function: nosuch")

    def test_cancelled_register_inserts_nothing(self) -> None:
        self.context.execute(":ab<c-r>='X'<esc>")
        self.assertEqual(self.line(), "ab")

    def test_nested_register_browses_history_from_the_start(self) -> None:
        self.context.history.append(EXPR_HISTORY, "'a'")
        self.context.history.append(EXPR_HISTORY, "'b'")

        self.context.execute(":<c-r>=<up>")
        self.assertEqual(self.line(), "'b'")
        outer = self.engine.active

        self.context.execute("<c-r>=<up>")
        self.assertEqual(self.line(), "'b'")
        self.context.execute("<esc>")

        self.assertIs(self.engine.active, outer)
        self.assertEqual(outer.history.cursor, 0)
        self.context.execute("<up>")
        self.assertEqual(self.line(), "'a'")
        self.context.execute("<down><down>")
        self.assertEqual(self.line(), "")
