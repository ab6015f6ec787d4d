"""Turn expression source text into a list of `Token`s."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from errors import UnrecognizedToken
from symbols import Fn, Op, builtin_symbols

_log = logging.getLogger(__name__)

WHITESPACE = " \t\n\r"


class Kind(Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    SEPARATOR = ","
    FUNCTION = "function"


PUNCTUATION = {"(": Kind.LPAREN, ")": Kind.RPAREN, ",": Kind.SEPARATOR}
_VALUE_TYPES = {Kind.NUMBER: float, Kind.OPERATOR: Op, Kind.FUNCTION: Fn}


@dataclass(frozen=True)
class Token:
    """A lexeme tagged with its `Kind`.

    `pos` only serves error messages; tokens compare equal regardless of
    where in the source they came from.

    >>> Token.number(2.0, pos=0) == Token.number(2.0, pos=7)
    True
    >>> Token(Kind.NUMBER, "2")
    Traceback (most recent call last):
      ...
    TypeError: Unknown token type: Kind.NUMBER with value '2'
    """

    kind: Kind
    value: Any
    pos: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        expected = _VALUE_TYPES.get(self.kind, str)
        if (
            not isinstance(self.kind, Kind)
            or not isinstance(self.value, expected)
            or expected is str
            and PUNCTUATION.get(self.value) is not self.kind
        ):
            raise TypeError(f"Unknown token type: {self.kind} with value {self.value!r}")

    @classmethod
    def number(cls, value, pos=None):
        return cls(Kind.NUMBER, float(value), pos)

    @classmethod
    def operator(cls, op, pos=None):
        return cls(Kind.OPERATOR, op, pos)

    @classmethod
    def function(cls, fn, pos=None):
        return cls(Kind.FUNCTION, fn, pos)

    @classmethod
    def punct(cls, char, pos=None):
        return cls(PUNCTUATION.get(char), char, pos)

    @property
    def arity(self):
        return self.value.arity

    def __repr__(self):
        if self.kind in (Kind.NUMBER, Kind.OPERATOR, Kind.FUNCTION):
            return repr(self.value)
        return self.value


def read_number(s, i):
    """Read a decimal literal at `i`; return ``(value, end)`` or None.

    >>> read_number("3.25.1", 0)
    (3.25, 4)
    >>> read_number(".5", 0), read_number(".", 0)
    ((0.5, 2), None)
    """
    j = i
    seen_dot = False
    while j < len(s):
        c = s[j]
        if c == ".":
            if seen_dot:
                break
            seen_dot = True
        elif not "0" <= c <= "9":
            break
        j += 1
    if j - i - seen_dot == 0:
        return None
    return float(s[i:j]), j


def _is_alpha(c):
    return "a" <= c <= "z" or "A" <= c <= "Z"


def read_function(s, i, symbols):
    """Read a registered function name at `i`; return ``(fn, end)`` or None."""
    if not _is_alpha(s[i]):
        return None
    j = i + 1
    while j < len(s) and (_is_alpha(s[j]) or "0" <= s[j] <= "9"):
        j += 1
    fn = symbols.lookup_function(s[i:j])
    return None if fn is None else (fn, j)


def read_token(s, i, symbols):
    """Read one token at `i`; return ``(token, end)`` or None."""
    if num := read_number(s, i):
        value, end = num
        return Token.number(value, i), end
    if match := symbols.lookup_operator(s, i):
        op, n = match
        return Token.operator(op, i), i + n
    if s[i] in PUNCTUATION:
        return Token.punct(s[i], i), i + 1
    if fun := read_function(s, i, symbols):
        fn, end = fun
        return Token.function(fn, i), end
    return None


def tokenize(source, symbols=None):
    """Split `source` into tokens.

    >>> tokenize("2**3")
    [2.0, op('**'), 3.0]
    >>> tokenize("max(1, rand())")
    [fn('max'), (, 1.0, ,, fn('rand'), (, ), )]
    """
    if symbols is None:
        symbols = builtin_symbols()
    tokens = []
    i = 0
    while i < len(source):
        if source[i] in WHITESPACE:
            i += 1
            continue
        if (read := read_token(source, i, symbols)) is None:
            raise UnrecognizedToken(source, i)
        token, i = read
        tokens.append(token)
    _log.debug("tokenize(%r) -> %r", source, tokens)
    return tokens
