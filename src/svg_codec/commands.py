"""Tokenizer and command stream for SVG path data.

Path text is normalized, split into tokens and grouped into one
:class:`PathCommand` per coordinate group. Argument counts are validated
against :data:`ARITY`; groups that do not fit are reported in
:attr:`CommandStream.malformed` instead of being read past the end.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, NamedTuple, Tuple

import structlog

logger = structlog.get_logger(__name__)


# Arguments consumed by one group of each command kind
ARITY = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "T": 2,
    "A": 7,
    "Z": 0,
}

# Positions of the large-arc and sweep flags inside an arc group
ARC_FLAG_POSITIONS = (3, 4)

_TOKEN_RE = re.compile(
    r"(?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"
    r"|(?P<word>[-+]?(?:[Nn][Aa][Nn]|[Ii][Nn][Ff](?:[Ii][Nn][Ii][Tt][Yy])?))"
    r"|(?P<command>[MLHVCSQTAZmlhvcsqtaz])"
    r"|(?P<separator>[\s,]+)"
    r"|(?P<garbage>.)",
    re.DOTALL,
)


class ParseError(Exception):
    """Path text could not be turned into a command stream."""


class TokenKind(str, Enum):
    COMMAND = "command"
    NUMBER = "number"


class Token(NamedTuple):
    kind: TokenKind
    text: str
    value: float

    @property
    def is_command(self) -> bool:
        return self.kind is TokenKind.COMMAND


@dataclass(frozen=True)
class PathCommand:
    """One coordinate group of a path command.

    ``kind`` is the upper-case letter; ``relative`` records whether the
    source used the lower-case form.
    """

    kind: str
    relative: bool
    args: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in ARITY:
            raise ValueError(f"Unknown path command: {self.kind!r}")
        expected = ARITY[self.kind]
        if len(self.args) != expected:
            raise ValueError(
                f"Command {self.kind} takes {expected} arguments, got {len(self.args)}"
            )

    @property
    def letter(self) -> str:
        return self.kind.lower() if self.relative else self.kind

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(a) for a in self.args)

    def __str__(self) -> str:
        return " ".join([self.letter, *(repr(a) for a in self.args)])


@dataclass(frozen=True)
class MalformedGroup:
    """Arguments that could not form a complete group."""

    letter: str
    args: Tuple[str, ...]
    reason: str


@dataclass
class CommandStream:
    commands: List[PathCommand] = field(default_factory=list)
    malformed: List[MalformedGroup] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self):
        return iter(self.commands)


def _expand_scientific(text: str) -> str:
    """Write one exponent-form number token as a plain decimal.

    Out-of-range exponents collapse to ``inf`` or ``0`` through the float
    conversion, so the expansion never grows past a float's digits.
    """
    value = float(text)
    if not math.isfinite(value):
        return repr(value)
    return format(Decimal(repr(value)).normalize(), "f")


def normalize_path_data(d: str) -> str:
    """Rewrite scientific notation as plain decimals and collapse separators.

    Expansion works on whole number tokens; adjacent numbers that had no
    separator between them get one, so ``1.5.5e2`` stays ``1.5`` and ``50``.

    >>> normalize_path_data("M1e2,  2.5E-1")
    'M100 0.25'
    """
    parts: List[str] = []
    previous = None
    for match in _TOKEN_RE.finditer(d):
        group = match.lastgroup
        text = match.group(0)
        if group == "separator":
            parts.append(" ")
        else:
            if group == "number" and "e" in text.lower():
                text = _expand_scientific(text)
            if group in ("number", "word") and previous in ("number", "word"):
                parts.append(" ")
            parts.append(text)
        previous = group
    return "".join(parts).strip()


def tokenize(d: str) -> List[Token]:
    """Split path text into command and number tokens.

    Adjacent numbers need no separator (``10-5`` is two numbers, ``1.5.5``
    is ``1.5`` and ``.5``). ``NaN``/``Infinity`` words keep their float
    value; any other stray character becomes a number token whose value is
    NaN, so the group containing it is later rejected as non-finite.
    """
    tokens: List[Token] = []
    for match in _TOKEN_RE.finditer(d):
        group = match.lastgroup
        text = match.group(0)
        if group == "separator":
            continue
        if group == "command":
            tokens.append(Token(TokenKind.COMMAND, text, math.nan))
        elif group in ("number", "word"):
            tokens.append(Token(TokenKind.NUMBER, text, float(text)))
        else:
            tokens.append(Token(TokenKind.NUMBER, text, math.nan))
    return tokens


def _split_flag(token: Token) -> Tuple[Token, List[Token]]:
    """Peel a single-digit arc flag off a compact token such as ``0110``."""
    text = token.text
    if len(text) > 1 and text[0] in "01":
        rest = text[1:]
        head = Token(TokenKind.NUMBER, text[0], float(text[0]))
        if rest.startswith("."):
            rest = "0" + rest
        return head, [Token(TokenKind.NUMBER, rest, float(rest))]
    if token.value not in (0.0, 1.0):
        return Token(TokenKind.NUMBER, text, math.nan), []
    return token, []


def _group_arguments(kind: str, operands: List[Token]) -> Tuple[List[List[float]], List[str]]:
    """Chunk operand tokens into complete groups; returns (groups, leftover)."""
    arity = ARITY[kind]
    pending = list(operands)
    groups: List[List[float]] = []
    current: List[float] = []
    texts: List[str] = []

    while pending:
        token = pending.pop(0)
        if kind == "A" and len(current) in ARC_FLAG_POSITIONS:
            token, rest = _split_flag(token)
            pending[:0] = rest
        current.append(token.value)
        texts.append(token.text)
        if len(current) == arity:
            groups.append(current)
            current = []
            texts = []

    return groups, texts


def parse_commands(d: str) -> CommandStream:
    """Parse path text into validated command groups.

    Raises:
        ParseError: If the text is not blank and does not start with a
            command letter.
    """
    tokens = tokenize(normalize_path_data(d))
    stream = CommandStream()
    if not tokens:
        return stream

    if not tokens[0].is_command:
        if not any(t.is_command for t in tokens):
            raise ParseError(f"No path commands found in {d[:40]!r}")
        raise ParseError(f"Path data must start with a command, got {tokens[0].text!r}")

    i = 0
    while i < len(tokens):
        letter = tokens[i].text
        i += 1
        operands: List[Token] = []
        while i < len(tokens) and not tokens[i].is_command:
            operands.append(tokens[i])
            i += 1

        kind = letter.upper()
        relative = letter.islower()

        if kind == "Z":
            stream.commands.append(PathCommand("Z", relative))
            if operands:
                stream.malformed.append(
                    MalformedGroup(letter, tuple(t.text for t in operands), "arguments after close")
                )
            continue

        groups, leftover = _group_arguments(kind, operands)
        if not groups and not leftover:
            stream.malformed.append(MalformedGroup(letter, (), "missing arguments"))
            continue

        for n, args in enumerate(groups):
            group_kind = kind
            # Extra pairs after a moveto are implicit linetos
            if kind == "M" and n > 0:
                group_kind = "L"
            stream.commands.append(PathCommand(group_kind, relative, tuple(args)))

        if leftover:
            stream.malformed.append(
                MalformedGroup(
                    letter,
                    tuple(leftover),
                    f"incomplete group: expected {ARITY[kind]} arguments, got {len(leftover)}",
                )
            )

    if stream.malformed:
        logger.debug("Path data has malformed groups", count=len(stream.malformed))
    return stream
