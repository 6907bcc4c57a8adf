"""Structural chords of command-line mode."""

from __future__ import annotations

from ..input.keys import (
    BACKSPACE,
    CTRL_A,
    CTRL_C,
    CTRL_E,
    CTRL_G,
    CTRL_K,
    CTRL_N,
    CTRL_O,
    CTRL_P,
    CTRL_R,
    CTRL_U,
    CTRL_W,
    CTRL_Y,
    DELETE,
    DOWN,
    END,
    ENTER,
    ESC,
    HOME,
    LEFT,
    RIGHT,
    SHIFT_TAB,
    TAB,
    UP,
)
from ..input.matcher import KeyChordBinding, KeySequenceMatcher
from ..modes import CMDLINE_MODE
from .engine import CommandLineEngine

EXPR_REGISTER_CHORD = (CTRL_R, "=")


def register_cmdline_bindings(matcher: KeySequenceMatcher, engine: CommandLineEngine) -> None:
    """Bind line editing and structural actions for command-line mode."""
    act = engine.action

    def cancel(_session) -> None:
        engine.cancel()

    matcher.register_bindings(
        CMDLINE_MODE,
        KeyChordBinding(((ENTER,),), act(engine.enter)),
        KeyChordBinding(((ESC,), (CTRL_C,)), act(cancel)),
        KeyChordBinding(((BACKSPACE,),), act(engine.backspace)),
        KeyChordBinding(((DELETE,),), act(engine.delete)),
        KeyChordBinding(((CTRL_W,),), act(engine.delete_word)),
        KeyChordBinding(((CTRL_U,),), act(engine.kill_to_start)),
        KeyChordBinding(((CTRL_K,),), act(engine.kill_to_end)),
        KeyChordBinding(((CTRL_A,),), act(engine.cursor_home)),
        KeyChordBinding(((CTRL_E,),), act(engine.cursor_end)),
        KeyChordBinding(((LEFT,),), act(engine.left)),
        KeyChordBinding(((RIGHT,),), act(engine.right)),
        KeyChordBinding(((HOME,),), act(engine.home)),
        KeyChordBinding(((END,),), act(engine.end)),
        KeyChordBinding(((UP,),), act(engine.up)),
        KeyChordBinding(((DOWN,),), act(engine.down)),
        KeyChordBinding(((CTRL_P,),), act(engine.previous)),
        KeyChordBinding(((CTRL_N,),), act(engine.next)),
        KeyChordBinding(((TAB,),), act(engine.complete, keep_completion=True)),
        KeyChordBinding(((SHIFT_TAB,),), act(engine.complete_backward, keep_completion=True)),
        KeyChordBinding((EXPR_REGISTER_CHORD,), act(engine.insert_expression_register)),
        KeyChordBinding(((CTRL_Y,),), act(engine.toggle_navigation)),
        KeyChordBinding(((CTRL_O,),), act(engine.ascend)),
        KeyChordBinding(((CTRL_G,),), act(engine.edit_externally)),
    )
    matcher.set_fallback(CMDLINE_MODE, engine.insert_key)
