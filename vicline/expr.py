"""Small expression language used by ``:echo`` and the expression register.

Values are strings. The grammar is deliberately tiny::

    expr    := primary ("." primary)*
    primary := STRING | NUMBER | "$" NAME | NAME "(" [expr ("," expr)*] ")"
             | "(" expr ")"

Strings use single quotes (``''`` escapes a quote) or double quotes with
backslash escapes. ``input()`` is the interesting builtin: it asks the
command line for text through a prompt hook, which runs a nested session.
"""

from __future__ import annotations

import os
import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass

from .completion import Completion


class EvalError(Exception):
    """Raised when an expression cannot be parsed or evaluated."""


PromptHook = Callable[[str, str, str], "str | None"]
Function = Callable[["Evaluator", list[str]], str]

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<number>\d+)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<squote>'(?:[^']|'')*')
  | (?P<dquote>"(?:[^"\\]|\\.)*")
  | (?P<op>[.,()$])
    """,
    re.VERBOSE,
)

_DQUOTE_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "e": "\x1b"}


@dataclass(frozen=True)
class _Token:
    kind: str
    value: str
    pos: int


def tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            if text[pos] in "'\"":
                raise EvalError(f"Unterminated string: {text[pos:]}")
            raise EvalError(f"Invalid expression: {text[pos:]}")
        kind = match.lastgroup or ""
        if kind != "space":
            tokens.append(_Token(kind, match.group(), pos))
        pos = match.end()
    return tokens


def _unquote(token: _Token) -> str:
    body = token.value[1:-1]
    if token.kind == "squote":
        return body.replace("''", "'")
    return re.sub(r"\\(.)", lambda m: _DQUOTE_ESCAPES.get(m.group(1), m.group(1)), body)


def _arity(args: list[str], name: str, low: int, high: int) -> None:
    if not low <= len(args) <= high:
        raise EvalError(f"Wrong number of arguments for {name}()")


def _fn_input(evaluator: Evaluator, args: list[str]) -> str:
    _arity(args, "input", 1, 3)
    if evaluator.prompt is None:
        raise EvalError("input() is not available here")
    prompt, text, completion = (args + ["", ""])[:3]
    if completion not in {"", "dir", "file"}:
        raise EvalError(f"Unknown completion kind: {completion}")
    response = evaluator.prompt(prompt, text, completion)
    return "" if response is None else response


def _fn_executable(evaluator: Evaluator, args: list[str]) -> str:
    _arity(args, "executable", 1, 1)
    name = args[0]
    if "/" in name:
        return "1" if os.access(name, os.X_OK) and not os.path.isdir(name) else "0"
    return "1" if shutil.which(name) is not None else "0"


def _fn_strlen(evaluator: Evaluator, args: list[str]) -> str:
    _arity(args, "strlen", 1, 1)
    return str(len(args[0]))


def _fn_toupper(evaluator: Evaluator, args: list[str]) -> str:
    _arity(args, "toupper", 1, 1)
    return args[0].upper()


def _fn_tolower(evaluator: Evaluator, args: list[str]) -> str:
    _arity(args, "tolower", 1, 1)
    return args[0].lower()


BUILTIN_FUNCTIONS: dict[str, Function] = {
    "input": _fn_input,
    "executable": _fn_executable,
    "strlen": _fn_strlen,
    "toupper": _fn_toupper,
    "tolower": _fn_tolower,
}


class Evaluator:
    """Recursive-descent evaluator; safe to re-enter from nested prompts."""

    def __init__(
        self,
        prompt: PromptHook | None = None,
        functions: dict[str, Function] | None = None,
    ) -> None:
        self.prompt = prompt
        self.functions = dict(BUILTIN_FUNCTIONS if functions is None else functions)

    def function_names(self) -> list[str]:
        return sorted(self.functions)

    def evaluate(self, text: str) -> str:
        tokens = tokenize(text)
        if not tokens:
            raise EvalError("Empty expression")
        # Parser state lives on the stack so nested evaluate() calls are safe.
        value, pos = self._parse_concat(tokens, 0)
        if pos != len(tokens):
            raise EvalError(f"Trailing characters: {text[tokens[pos].pos:]}")
        return value

    def _parse_concat(self, tokens: list[_Token], pos: int) -> tuple[str, int]:
        value, pos = self._parse_primary(tokens, pos)
        while pos < len(tokens) and tokens[pos].value == ".":
            rhs, pos = self._parse_primary(tokens, pos + 1)
            value += rhs
        return value, pos

    def _parse_primary(self, tokens: list[_Token], pos: int) -> tuple[str, int]:
        if pos >= len(tokens):
            raise EvalError("Expression ends unexpectedly")
        token = tokens[pos]
        if token.kind in {"squote", "dquote"}:
            return _unquote(token), pos + 1
        if token.kind == "number":
            return str(int(token.value)), pos + 1
        if token.value == "$":
            if pos + 1 >= len(tokens) or tokens[pos + 1].kind != "name":
                raise EvalError("Expected environment variable name after $")
            return os.environ.get(tokens[pos + 1].value, ""), pos + 2
        if token.value == "(":
            value, pos = self._parse_concat(tokens, pos + 1)
            return value, self._expect(tokens, pos, ")")
        if token.kind == "name":
            return self._parse_call(tokens, pos)
        raise EvalError(f"Unexpected {token.value!r}")

    def _parse_call(self, tokens: list[_Token], pos: int) -> tuple[str, int]:
        name = tokens[pos].value
        function = self.functions.get(name)
        if function is None:
            raise EvalError(f"Unknown function: {name}")
        pos = self._expect(tokens, pos + 1, "(")
        args: list[str] = []
        if pos < len(tokens) and tokens[pos].value == ")":
            return function(self, args), pos + 1
        while True:
            value, pos = self._parse_concat(tokens, pos)
            args.append(value)
            if pos < len(tokens) and tokens[pos].value == ",":
                pos += 1
                continue
            pos = self._expect(tokens, pos, ")")
            return function(self, args), pos

    @staticmethod
    def _expect(tokens: list[_Token], pos: int, value: str) -> int:
        if pos >= len(tokens) or tokens[pos].value != value:
            raise EvalError(f"Expected {value!r}")
        return pos + 1


_IDENT_TAIL_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*$")


def complete_expression(text: str, cursor: int, names: list[str]) -> Completion:
    """Complete a function name ending at ``cursor``.

    Nothing is offered after a ``|`` since it cannot appear in an expression.
    """
    head = text[:cursor]
    if "|" in head:
        return Completion((), cursor, cursor)
    match = _IDENT_TAIL_RE.search(head)
    start = match.start() if match is not None else cursor
    prefix = head[start:]
    candidates = tuple(f"{name}(" for name in sorted(names) if name.startswith(prefix))
    return Completion(candidates, start, cursor)
