"""Shunting-yard parser: token list -> expression tree of `Node`s."""
import logging
from typing import NamedTuple, Tuple

from errors import (
    EmptyExpression,
    InsufficientOperands,
    MismatchedLeftParen,
    MismatchedRightParen,
    MisplacedSeparator,
    UnknownToken,
)
from lexer import Kind, Token, tokenize

_log = logging.getLogger(__name__)


class Node(NamedTuple):
    """A number leaf, or an operator/function token applied to `children`.

    Internal nodes always have exactly ``token.arity`` children, leftmost
    operand first.
    """

    token: Token
    children: Tuple["Node", ...] = ()

    def __repr__(self):
        if self.token.kind is Kind.NUMBER:
            return repr(self.token)
        return f"({', '.join(map(repr, (self.token, *self.children)))})"


def reduce(ops, exprs):
    """Pop the top of `ops` and apply it to the topmost nodes of `exprs`."""
    token = ops.pop()
    if token.kind not in (Kind.OPERATOR, Kind.FUNCTION):
        raise UnknownToken(f"Invalid operator or function token: {token!r}", token.pos)
    n = token.arity
    if len(exprs) < n:
        raise InsufficientOperands(
            f"{token!r} needs {n} operand(s), found {len(exprs)}", token.pos
        )
    args = tuple(exprs[len(exprs) - n :])
    del exprs[len(exprs) - n :]
    exprs.append(Node(token, args))
    _log.debug("reduce %r with %d operand(s)", token, n)


def parse(tokens):
    """Build the expression tree for `tokens`.

    >>> parse(tokenize("2-3-4"))
    (op('-'), (op('-'), 2.0, 3.0), 4.0)
    >>> parse(tokenize("2**3**2"))
    (op('**'), 2.0, (op('**'), 3.0, 2.0))
    >>> parse(tokenize("max(3, ~5)"))
    (fn('max'), 3.0, (op('~'), 5.0))
    """
    exprs = []
    ops = []
    for token in tokens:
        kind = token.kind
        if kind is Kind.NUMBER:
            exprs.append(Node(token))
        elif kind is Kind.LPAREN or kind is Kind.FUNCTION:
            # A function's arguments are attached when its ")" arrives.
            ops.append(token)
        elif kind is Kind.RPAREN:
            while True:
                if not ops:
                    raise MismatchedRightParen(
                        "Mismatched right parenthesis, ')'", token.pos
                    )
                if ops[-1].kind is Kind.LPAREN:
                    ops.pop()
                    if ops and ops[-1].kind is Kind.FUNCTION:
                        reduce(ops, exprs)
                    break
                reduce(ops, exprs)
        elif kind is Kind.OPERATOR:
            op = token.value
            while ops and ops[-1].kind is Kind.OPERATOR and ops[-1].value.left_first(op):
                reduce(ops, exprs)
            ops.append(token)
        elif kind is Kind.SEPARATOR:
            while not ops or ops[-1].kind is not Kind.LPAREN:
                if not ops:
                    raise MisplacedSeparator(
                        "Misplaced argument separator or mismatched parentheses",
                        token.pos,
                    )
                reduce(ops, exprs)
        else:
            raise UnknownToken(f"Unknown token type: {token!r}", token.pos)

    while ops:
        if ops[-1].kind is Kind.LPAREN:
            raise MismatchedLeftParen("Mismatched left parenthesis, '('", ops[-1].pos)
        reduce(ops, exprs)

    if not exprs:
        raise EmptyExpression("Empty expression")
    if len(exprs) > 1:
        raise EmptyExpression(
            f"Expected a single expression, found {len(exprs)}",
            exprs[1].token.pos,
        )
    (ans,) = exprs
    return ans


def to_ast(x, symbols=None):
    return parse(tokenize(x, symbols))
