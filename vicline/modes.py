"""Process-wide mode bookkeeping: one active mode plus a suspend stack.

Nested command-line sessions push ``CMDLINE_MODE`` on top of whatever was
active and pop it on their terminal transition, so the previous mode resumes
exactly as it was suspended.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

NORMAL_MODE = "normal"
CMDLINE_MODE = "cmdline"
VISUAL_MODE = "visual"
MENU_MODE = "menu"
SORT_MODE = "sort"
ATTR_MODE = "attribute"
CHANGE_MODE = "change"
VIEW_MODE = "view"
FILE_INFO_MODE = "file-info"
MSG_MODE = "message"
MORE_MODE = "more"

MODES = (
    NORMAL_MODE,
    CMDLINE_MODE,
    VISUAL_MODE,
    MENU_MODE,
    SORT_MODE,
    ATTR_MODE,
    CHANGE_MODE,
    VIEW_MODE,
    FILE_INFO_MODE,
    MSG_MODE,
    MORE_MODE,
)


@dataclass
class _SuspendedMode:
    mode: str
    on_abort: Callable[[], object] | None = None


def check_mode(mode: str) -> str:
    """Return ``mode`` unchanged or raise ``ValueError`` for unknown names."""
    if mode not in MODES:
        raise ValueError(f"unknown mode: {mode!r}")
    return mode


class ModeManager:
    """Active mode plus a LIFO stack of suspended modes.

    ``on_abort`` handlers registered with :meth:`push` are how
    :meth:`abort_all` cancels intervening sessions innermost first.
    """

    def __init__(self, base_mode: str = NORMAL_MODE) -> None:
        self.base_mode = check_mode(base_mode)
        self._stack: list[_SuspendedMode] = []
        self._active = _SuspendedMode(self.base_mode)

    @property
    def active(self) -> str:
        return self._active.mode

    @property
    def depth(self) -> int:
        """Number of modes suspended below the active one."""
        return len(self._stack)

    def is_active(self, mode: str) -> bool:
        return self._active.mode == mode

    def push(self, mode: str, on_abort: Callable[[], object] | None = None) -> None:
        """Suspend the current mode and activate ``mode``."""
        check_mode(mode)
        self._stack.append(self._active)
        self._active = _SuspendedMode(mode, on_abort)
        logger.debug("mode push %s (depth %d)", mode, len(self._stack))

    def pop(self) -> str:
        """Reactivate the previously suspended mode and return it.

        Popping the base mode is ignored.
        """
        if not self._stack:
            logger.debug("mode pop ignored at base mode %s", self._active.mode)
            return self._active.mode
        left = self._active.mode
        self._active = self._stack.pop()
        logger.debug("mode pop %s -> %s (depth %d)", left, self._active.mode, len(self._stack))
        return self._active.mode

    def abort_all(self) -> None:
        """Collapse to the base mode, cancelling every intervening session.

        Modes pushed by an abort handler are aborted in turn.
        """
        while self._stack:
            entry = self._active
            if entry.on_abort is not None:
                entry.on_abort()
            # Handlers normally pop themselves; force progress if one did not.
            if self._active is entry and self._stack:
                self.pop()
