"""Normal-mode key map over the directory listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .bookmarks import VALID_MARKS, is_user_mark
from .input.keys import DOWN, ENTER, LEFT, RIGHT, UP
from .input.matcher import KeyChordBinding
from .modes import NORMAL_MODE

if TYPE_CHECKING:
    from .runtime.context import InputContext


def register_normal_bindings(context: InputContext) -> None:
    """Bind listing motions, marks and the command-line entry points."""
    engine = context.engine
    listing = context.listing
    bookmarks = context.bookmarks
    status = context.status

    def move(delta: int):
        return lambda: listing.move_to(listing.position + delta)

    def open_entry() -> None:
        error = listing.open_entry()
        if error is not None:
            status.error(error)

    def leave() -> None:
        if not listing.leave_directory():
            status.error("Already at the root")

    def set_mark(mark: str):
        def run() -> None:
            entry = listing.current_entry()
            bookmarks.add(mark, listing.directory, entry.name if entry is not None else "")

        return run

    def goto_mark(mark: str):
        return lambda: bookmarks.goto(listing, mark)

    context.matcher.register_bindings(
        NORMAL_MODE,
        KeyChordBinding(((":",),), engine.open_command),
        KeyChordBinding((("/",),), engine.open_search),
        KeyChordBinding((("?",),), lambda: engine.open_search(backward=True)),
        KeyChordBinding((("=",),), engine.open_filter),
        KeyChordBinding((("j",), (DOWN,)), move(1)),
        KeyChordBinding((("k",), (UP,)), move(-1)),
        KeyChordBinding((("g", "g"),), lambda: listing.move_to(0)),
        KeyChordBinding((("G",),), lambda: listing.move_to(len(listing.entries) - 1)),
        KeyChordBinding((("h",), (LEFT,)), leave),
        KeyChordBinding((("l",), (RIGHT,), (ENTER,)), open_entry),
        KeyChordBinding((("n",),), engine.repeat_search),
        KeyChordBinding((("N",),), lambda: engine.repeat_search(reverse=True)),
        KeyChordBinding((("q",),), context.loop.stop),
    )
    for mark in VALID_MARKS:
        if is_user_mark(mark):
            context.matcher.register(NORMAL_MODE, ("m", mark), set_mark(mark))
    for mark in VALID_MARKS + "'":
        context.matcher.register(NORMAL_MODE, ("'", mark), goto_mark(mark))
