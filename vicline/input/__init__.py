"""Input-layer public API: key tokens, terminal decoding and chord matching."""

from .keys import Chord, chord, parse_keys
from .matcher import (
    EXECUTED,
    PENDING,
    UNMATCHED,
    Deadline,
    KeyChordBinding,
    KeySequenceMatcher,
    MatchResult,
)
from .reader import ESC_SEQUENCE_TIMEOUT_MS, ScriptedKeySource, TerminalKeySource, read_key

__all__ = [
    "Chord",
    "chord",
    "parse_keys",
    "EXECUTED",
    "PENDING",
    "UNMATCHED",
    "Deadline",
    "KeyChordBinding",
    "KeySequenceMatcher",
    "MatchResult",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "ScriptedKeySource",
    "TerminalKeySource",
    "read_key",
]
