"""Low-level terminal input decoding and key sources.

Reads raw bytes from stdin and translates them into key tokens. Handles
ESC-sequence timing and the arrow/home/end/shift-tab sequences the command
line uses. Key sources wrap either a terminal descriptor or a scripted queue
behind the same ``read(timeout)`` call used by the event loop.
"""

from __future__ import annotations

import os
import select
from collections import deque
from collections.abc import Iterable

from .keys import (
    BACKSPACE,
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
    parse_keys,
)

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CSI_FINAL = {
    b"A": UP,
    b"B": DOWN,
    b"C": RIGHT,
    b"D": LEFT,
    b"H": HOME,
    b"F": END,
    b"Z": SHIFT_TAB,
}

_CSI_TILDE = {
    b"1": HOME,
    b"3": DELETE,
    b"4": END,
    b"7": HOME,
    b"8": END,
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, first: bytes) -> str:
    lead = first[0]
    if lead < 0xC0:
        return first.decode("utf-8", errors="replace")
    extra = 1 if lead < 0xE0 else 2 if lead < 0xF0 else 3
    data = first
    for _ in range(extra):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data += part
    return data.decode("utf-8", errors="replace")


def decode_control_byte(ch: bytes) -> str | None:
    """Return the token for a single control byte, or ``None``."""
    if ch == b"\t":
        return TAB
    if ch in {b"\r", b"\n"}:
        return ENTER
    if ch in {b"\x08", b"\x7f"}:
        return BACKSPACE
    code = ch[0]
    if 1 <= code <= 26:
        return f"CTRL_{chr(ord('A') + code - 1)}"
    return None


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; return ``""`` on timeout or EOF."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch != b"\x1b":
        control = decode_control_byte(ch)
        if control is not None:
            return control
        return _read_utf8_tail(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return ESC
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return ESC
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return ESC
    if seq in _CSI_FINAL:
        return _CSI_FINAL[seq]
    if seq in _CSI_TILDE:
        tail = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if tail == b"~":
            return _CSI_TILDE[seq]
    return ESC


class TerminalKeySource:
    """Key source reading tokens from a raw-mode terminal descriptor."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self.closed = False

    def read(self, timeout: float | None = None) -> str | None:
        """Return the next key, or ``None`` when ``timeout`` seconds pass."""
        timeout_ms = None if timeout is None else max(0, int(timeout * 1000))
        key = read_key(self.fd, timeout_ms)
        if key:
            return key
        if timeout_ms is None:
            # A blocking read that returned nothing means EOF.
            self.closed = True
        return None


class ScriptedKeySource:
    """In-memory key queue; reports itself closed once drained.

    Used to pre-feed input to nested event loops and by tests.
    """

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._queue: deque[str] = deque(keys)

    @property
    def closed(self) -> bool:
        return not self._queue

    def feed(self, keys: Iterable[str] | str) -> None:
        """Queue tokens; a plain string is parsed as vim notation."""
        if isinstance(keys, str):
            keys = parse_keys(keys)
        self._queue.extend(keys)

    def pending(self) -> list[str]:
        return list(self._queue)

    def read(self, timeout: float | None = None) -> str | None:
        if not self._queue:
            return None
        return self._queue.popleft()
