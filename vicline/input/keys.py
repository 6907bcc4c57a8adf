"""Key token names and a vim-style notation parser.

Keys travel through the system as short strings: printable characters stand
for themselves and everything else uses an upper-case token such as
``"ENTER"`` or ``"CTRL_R"``. A chord is a tuple of such tokens.
"""

from __future__ import annotations

import re

ENTER = "ENTER"
ESC = "ESC"
TAB = "TAB"
SHIFT_TAB = "SHIFT_TAB"
BACKSPACE = "BACKSPACE"
DELETE = "DELETE"
UP = "UP"
DOWN = "DOWN"
LEFT = "LEFT"
RIGHT = "RIGHT"
HOME = "HOME"
END = "END"

CTRL_A = "CTRL_A"
CTRL_C = "CTRL_C"
CTRL_E = "CTRL_E"
CTRL_G = "CTRL_G"
CTRL_K = "CTRL_K"
CTRL_N = "CTRL_N"
CTRL_O = "CTRL_O"
CTRL_P = "CTRL_P"
CTRL_R = "CTRL_R"
CTRL_U = "CTRL_U"
CTRL_W = "CTRL_W"
CTRL_Y = "CTRL_Y"

Chord = tuple[str, ...]

_NAMED_KEYS = {
    "cr": ENTER,
    "enter": ENTER,
    "return": ENTER,
    "nl": ENTER,
    "esc": ESC,
    "tab": TAB,
    "s-tab": SHIFT_TAB,
    "bs": BACKSPACE,
    "del": DELETE,
    "up": UP,
    "down": DOWN,
    "left": LEFT,
    "right": RIGHT,
    "home": HOME,
    "end": END,
    "space": " ",
    "lt": "<",
    "bar": "|",
}

# Control letters that terminals deliver as other keys.
_CTRL_ALIASES = {
    "m": ENTER,
    "j": ENTER,
    "i": TAB,
    "h": BACKSPACE,
    "[": ESC,
}

_NOTATION_RE = re.compile(r"<([^<>]+)>")


def ctrl(letter: str) -> str:
    """Return the token for Ctrl plus ``letter``."""
    lowered = letter.lower()
    if lowered in _CTRL_ALIASES:
        return _CTRL_ALIASES[lowered]
    return f"CTRL_{lowered.upper()}"


def _named_key(name: str) -> str | None:
    lowered = name.lower()
    if lowered in _NAMED_KEYS:
        return _NAMED_KEYS[lowered]
    if lowered.startswith("c-") and len(lowered) == 3:
        return ctrl(lowered[2])
    return None


def parse_keys(notation: str) -> list[str]:
    """Split vim notation such as ``":echo 1<cr>"`` into key tokens.

    Unknown ``<...>`` groups are kept as literal characters.
    """
    keys: list[str] = []
    pos = 0
    for match in _NOTATION_RE.finditer(notation):
        keys.extend(notation[pos:match.start()])
        token = _named_key(match.group(1))
        if token is None:
            keys.extend(match.group(0))
        else:
            keys.append(token)
        pos = match.end()
    keys.extend(notation[pos:])
    return keys


def chord(notation: str) -> Chord:
    """Return ``notation`` parsed into a chord tuple."""
    return tuple(parse_keys(notation))


def is_printable_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()
