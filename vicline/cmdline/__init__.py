"""Command-line component: sessions, engine, live navigation and key map.

Four interaction styles share one engine: command entry, incremental search,
incremental filter and prompts (including blocking ``input()``).
"""

from .engine import CommandLineEngine
from .keymap import EXPR_REGISTER_CHORD, register_cmdline_bindings
from .navigation import IncrementalNavigator
from .session import (
    COMMAND,
    FILTER,
    PROMPT,
    SEARCH_BACKWARD,
    SEARCH_FORWARD,
    USER_INPUT,
    CommandLineSession,
    LineBuffer,
)

__all__ = [
    "CommandLineEngine",
    "CommandLineSession",
    "IncrementalNavigator",
    "LineBuffer",
    "EXPR_REGISTER_CHORD",
    "register_cmdline_bindings",
    "COMMAND",
    "FILTER",
    "PROMPT",
    "SEARCH_BACKWARD",
    "SEARCH_FORWARD",
    "USER_INPUT",
]
