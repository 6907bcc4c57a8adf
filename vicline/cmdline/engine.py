"""Command-line session engine.

Owns the stack of open sessions. Only the innermost session receives keys;
outer sessions stay frozen until it reaches its single terminal transition
(accept or cancel). Blocking :meth:`CommandLineEngine.input` re-enters the
event loop, which is how ``input()`` calls nest inside expressions evaluated
from other prompts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..completion import Completer, CompletionCycle, path_completer
from ..expr import EvalError, complete_expression
from ..history import EXPR_HISTORY, NEWER, OLDER
from ..input.keys import is_printable_key
from ..modes import CMDLINE_MODE
from .deps import CommandLineDeps
from .navigation import IncrementalNavigator
from .session import (
    COMMAND,
    DEFAULT_PROMPTS,
    FILTER,
    HISTORY_FOR_SUB_MODE,
    PROMPT,
    SEARCH_BACKWARD,
    SEARCH_FORWARD,
    SUB_MODES,
    USER_INPUT,
    AcceptCallback,
    CommandLineSession,
    LineBuffer,
)

logger = logging.getLogger(__name__)

EXPR_REGISTER_PROMPT = "="


class CommandLineEngine:
    """Open, edit, accept and cancel (possibly nested) command-line sessions."""

    def __init__(self, deps: CommandLineDeps) -> None:
        self.deps = deps
        self.navigator = IncrementalNavigator(deps.listing, deps.settings)
        self.command_completer: Completer | None = None
        self.last_search: tuple[str, bool] | None = None
        self._sessions: list[CommandLineSession] = []

    @property
    def active(self) -> CommandLineSession | None:
        """Innermost open session, the only one receiving keys."""
        return self._sessions[-1] if self._sessions else None

    @property
    def depth(self) -> int:
        return len(self._sessions)

    # Opening sessions.

    def open(
        self,
        sub_mode: str,
        prompt: str | None = None,
        initial_text: str = "",
        on_accept: AcceptCallback | None = None,
        completer: Completer | None = None,
        allow_escape_entry: bool = False,
        save_history: bool = True,
        history_category: str | None = None,
    ) -> CommandLineSession:
        """Open a session on top of any active one and return it."""
        if sub_mode not in SUB_MODES:
            raise ValueError(f"unknown command-line sub-mode: {sub_mode!r}")
        session = CommandLineSession(
            sub_mode=sub_mode,
            prompt=DEFAULT_PROMPTS[sub_mode] if prompt is None else prompt,
            buffer=LineBuffer(initial_text, len(initial_text)),
            history_category=history_category or HISTORY_FOR_SUB_MODE[sub_mode],
            on_accept=on_accept,
            completer=completer,
            allow_escape_entry=allow_escape_entry,
            save_history=save_history,
        )
        self._sessions.append(session)
        self.deps.modes.push(CMDLINE_MODE, on_abort=lambda: self._abort(session))
        if session.supports_navigation:
            self.navigator.begin(session)
        logger.debug("open %s session (depth %d)", sub_mode, len(self._sessions))
        return session

    def open_command(self, initial_text: str = "") -> CommandLineSession:
        return self.open(
            COMMAND,
            initial_text=initial_text,
            on_accept=self._run_command,
            completer=self.command_completer,
            allow_escape_entry=True,
        )

    def open_search(self, backward: bool = False) -> CommandLineSession:
        sub_mode = SEARCH_BACKWARD if backward else SEARCH_FORWARD
        return self.open(
            sub_mode,
            on_accept=lambda text: self._searched(text, backward),
            allow_escape_entry=True,
        )

    def open_filter(self) -> CommandLineSession:
        return self.open(
            FILTER,
            initial_text=self.deps.listing.filter_pattern,
            allow_escape_entry=True,
        )

    def prompt(
        self,
        prompt: str,
        initial_text: str,
        on_accept: AcceptCallback,
        completer: Completer | None = None,
        allow_escape_entry: bool = False,
        save_history: bool = True,
    ) -> CommandLineSession:
        """Open a prompt whose callback fires on confirm and, with ``None``, on cancel."""
        return self.open(
            PROMPT,
            prompt=prompt,
            initial_text=initial_text,
            on_accept=on_accept,
            completer=completer,
            allow_escape_entry=allow_escape_entry,
            save_history=save_history,
        )

    def input(self, prompt: str, initial_text: str = "", completion: str = "") -> str | None:
        """Ask for a line of text, running a nested event loop until answered.

        Returns ``None`` when the user cancels.
        """
        if self.deps.run_until is None:
            raise RuntimeError("blocking input requires an event loop")
        result: list[str | None] = []
        completer = None
        if completion:
            completer = path_completer(lambda: self.deps.listing.directory, completion)
        session = self.open(
            USER_INPUT,
            prompt=prompt,
            initial_text=initial_text,
            on_accept=result.append,
            completer=completer,
        )
        self.deps.run_until(lambda: session.closed)
        if not session.closed and self.active is session:
            # The loop gave up (input exhausted); never leave a session hanging.
            self._cancel_session(session)
        return result[0] if result else None

    # Terminal transitions.

    def accept(self) -> bool:
        session = self.active
        if session is None:
            return False
        if session.supports_navigation and not self.navigator.confirm(session) and session.text:
            self.deps.status.error(f"Pattern not found: {session.text}")
        text = session.text
        self._close(session)
        if text and (not session.is_prompt or session.save_history):
            self.deps.history.append(session.history_category, text)
        self._fire(session, text)
        return True

    def cancel(self) -> bool:
        """Cancel the innermost session; ignored when none is open."""
        session = self.active
        if session is None:
            logger.debug("cancel ignored: no open session")
            return False
        self._cancel_session(session)
        return True

    def _cancel_session(self, session: CommandLineSession) -> None:
        if session.supports_navigation:
            self.navigator.cancel(session)
        self._close(session)
        if session.is_prompt:
            self._fire(session, None)

    def _abort(self, session: CommandLineSession) -> None:
        if not session.closed:
            self._cancel_session(session)

    def _close(self, session: CommandLineSession) -> None:
        if session.closed:
            raise RuntimeError("session already reached its terminal transition")
        if self.active is not session:
            raise RuntimeError("only the innermost session can be closed")
        session.closed = True
        session.completion = None
        self._sessions.pop()
        self.deps.modes.pop()
        session.history.reset()
        logger.debug("close %s session (depth %d)", session.sub_mode, len(self._sessions))

    def _fire(self, session: CommandLineSession, value: str | None) -> None:
        if session.on_accept is None:
            return
        try:
            session.on_accept(value)
        except Exception as exc:
            logger.exception("command-line callback failed")
            self.deps.status.error(f"Error: {exc}")

    def _run_command(self, text: str | None) -> None:
        if text and self.deps.run_command is not None:
            self.deps.run_command(text)

    def _searched(self, text: str | None, backward: bool) -> None:
        if text:
            self.last_search = (text, backward)

    # Key actions; each acts on the innermost session.

    def action(self, handler: Callable[[CommandLineSession], object], keep_completion: bool = False):
        """Wrap ``handler`` as a key action bound to the innermost session."""

        def run() -> None:
            session = self.active
            if session is None:
                return
            if not keep_completion:
                session.completion = None
            handler(session)

        return run

    def insert_key(self, key: str) -> bool:
        """Fallback for unbound keys: insert printable characters."""
        session = self.active
        if session is None or not is_printable_key(key):
            return False
        session.completion = None
        session.buffer.insert(key)
        self.changed(session)
        return True

    def changed(self, session: CommandLineSession) -> None:
        """Hook run after every buffer edit."""
        if session.supports_navigation:
            self.navigator.update(session)

    def backspace(self, session: CommandLineSession) -> None:
        if not session.text:
            self.cancel()
            return
        if session.buffer.delete_before():
            self.changed(session)

    def delete(self, session: CommandLineSession) -> None:
        if session.buffer.delete_at():
            self.changed(session)

    def delete_word(self, session: CommandLineSession) -> None:
        if session.buffer.delete_word_before():
            self.changed(session)

    def kill_to_start(self, session: CommandLineSession) -> None:
        if session.buffer.kill_to_start():
            self.changed(session)

    def kill_to_end(self, session: CommandLineSession) -> None:
        if session.buffer.kill_to_end():
            self.changed(session)

    def cursor_home(self, session: CommandLineSession) -> None:
        session.buffer.home()

    def cursor_end(self, session: CommandLineSession) -> None:
        session.buffer.end()

    def left(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.ascend(session)
        else:
            session.buffer.move(-1)

    def right(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.descend(session)
        else:
            session.buffer.move(1)

    def home(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.jump_edge(session, last=False)
        else:
            session.buffer.home()

    def end(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.jump_edge(session, last=True)
        else:
            session.buffer.end()

    def history_older(self, session: CommandLineSession) -> None:
        self._recall(session, OLDER)

    def history_newer(self, session: CommandLineSession) -> None:
        self._recall(session, NEWER)

    def _recall(self, session: CommandLineSession, direction: str) -> None:
        text = self.deps.history.navigate(
            session.history_category, session.history, direction, session.text
        )
        if text != session.text:
            session.buffer.set(text)
            self.changed(session)

    def up(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.move_entry(session, -1)
        else:
            self.history_older(session)

    def down(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.move_entry(session, 1)
        else:
            self.history_newer(session)

    def previous(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.previous_match(session)
        else:
            self.history_older(session)

    def next(self, session: CommandLineSession) -> None:
        if session.navigating:
            self.navigator.next_match(session)
        else:
            self.history_newer(session)

    def enter(self, session: CommandLineSession) -> None:
        if not session.navigating:
            self.accept()
            return
        entry = self.deps.listing.current_entry()
        if entry is not None and entry.is_dir:
            self.navigator.descend(session)
            return
        self.open_entry(session)

    def open_entry(self, session: CommandLineSession) -> None:
        """Confirm the session, then open the entry it navigated to."""
        self.accept()
        error = self.deps.listing.open_entry()
        if error is not None:
            self.deps.status.error(error)

    def ascend(self, session: CommandLineSession) -> None:
        self.navigator.ascend(session)

    def toggle_navigation(self, session: CommandLineSession) -> None:
        self.navigator.toggle(session)

    def complete(self, session: CommandLineSession, backward: bool = False) -> bool:
        """Complete at the cursor, or cycle an ongoing completion."""
        if session.completion is not None:
            text, cursor = session.completion.step(backward)
            session.buffer.set(text, cursor)
            self.changed(session)
            return True
        if session.completer is None:
            return False
        result = session.completer(session.text, session.buffer.cursor)
        if not result.candidates:
            return False
        cycle = CompletionCycle(session.text, result)
        text, cursor = cycle.step(backward)
        session.buffer.set(text, cursor)
        if len(result.candidates) > 1:
            session.completion = cycle
        self.changed(session)
        return True

    def complete_backward(self, session: CommandLineSession) -> bool:
        return self.complete(session, backward=True)

    def insert_expression_register(self, session: CommandLineSession) -> None:
        """Evaluate an expression in a nested prompt and splice its value in.

        The value goes where the cursor was when the register was requested.
        Evaluation errors insert nothing and are reported on the status line.
        """
        offset = session.buffer.cursor
        evaluator = self.deps.evaluator

        def on_result(text: str | None) -> None:
            if text is None:
                return
            try:
                value = evaluator.evaluate(text)
            except EvalError as exc:
                self.deps.status.error(str(exc))
                return
            if session.closed:
                return
            session.buffer.insert_at(offset, value)
            self.changed(session)

        self.open(
            PROMPT,
            prompt=EXPR_REGISTER_PROMPT,
            on_accept=on_result,
            completer=lambda text, cursor: complete_expression(text, cursor, evaluator.function_names()),
            history_category=EXPR_HISTORY,
        )

    def edit_externally(self, session: CommandLineSession) -> None:
        if session.is_prompt and not session.allow_escape_entry:
            return
        text, error = self.deps.edit_text(session.text)
        if error is not None or text is None:
            self.deps.status.error(error or "Editing failed")
            return
        session.buffer.set(text)
        self.changed(session)

    def repeat_search(self, reverse: bool = False) -> bool:
        """Jump to the next match of the last search (``n``/``N``)."""
        if self.last_search is None:
            self.deps.status.error("No previous search pattern")
            return False
        pattern, backward = self.last_search
        if not self.navigator.repeat_search(pattern, backward != reverse):
            self.deps.status.error(f"Pattern not found: {pattern}")
            return False
        return True
