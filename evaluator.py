"""Evaluate expression trees, and print them back as infix source.

Evaluation follows IEEE floating point throughout: 1/0 is inf and 0/0 is nan
(as in numpy), never an exception.

Both walks keep their own stack instead of recursing, so trees as deep as the
parser can build (e.g. a long chain of "1 + 1 + ...") don't hit python's
recursion limit.

>>> from parser import to_ast
>>> evaluate(to_ast("3 + (8 - 7.5) * 10 / 5 - (2 + 5 * 7)"))
-33.0
>>> evaluate(to_ast("1/0")), evaluate(to_ast("0/0")), evaluate(to_ast("5 % 0"))
(inf, nan, nan)
>>> unparse(to_ast("(2 - (3 - 4)) ** (1 ** 2) ** 3"))
'(2 - (3 - 4)) ** (1 ** 2) ** 3'
"""
import logging

import numpy as np

from errors import UnknownToken
from lexer import Kind

_log = logging.getLogger(__name__)


def canonicalize_num(num):
    """Format `num` so the scanner reads it back exactly (no exponent).

    >>> canonicalize_num(2.0), canonicalize_num(1e-05), canonicalize_num(1e20)
    ('2', '0.00001', '100000000000000000000')
    """
    return np.format_float_positional(num, trim="-")


def postorder(root, visit):
    """Return ``visit(node, results)`` for `root`, children before parents.

    `results` holds the children's own visit results, leftmost first, and
    children are visited left to right.
    """
    results = []
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or not node.children:
            n = len(node.children)
            args = results[len(results) - n :]
            del results[len(results) - n :]
            results.append(visit(node, args))
        else:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
    (ans,) = results
    return ans


def _apply(node, args):
    token = node.token
    if token.kind is Kind.NUMBER:
        return token.value
    if token.kind not in (Kind.OPERATOR, Kind.FUNCTION):
        raise UnknownToken(f"Unexpected token type: {token!r}", token.pos)
    return token.value(*args)


def evaluate(node):
    """Reduce the tree rooted at `node` to a float.

    Children are evaluated left to right before their parent is applied.
    """
    with np.errstate(all="ignore"):
        ans = float(postorder(node, _apply))
    _log.debug("evaluate -> %r", ans)
    return ans


def _is_op(node, arity=None):
    return node.token.kind is Kind.OPERATOR and (
        arity is None or node.token.arity == arity
    )


def _format(node, texts):
    token, args = node
    if token.kind is Kind.NUMBER:
        return canonicalize_num(token.value)
    if token.kind is Kind.FUNCTION:
        return f"{token.value.name}({', '.join(texts)})"
    op = token.value
    if op.arity == 1:
        (arg,), (x,) = args, texts
        if _is_op(arg) and op.left_first(arg.token.value):
            x = f"({x})"
        return f"{op.op}{x}"
    (arg1, arg2), (x, y) = args, texts
    if _is_op(arg1) and not arg1.token.value.left_first(op):
        x = f"({x})"
    if _is_op(arg2, arity=2) and op.left_first(arg2.token.value):
        y = f"({y})"
    return f"{x} {op.op} {y}"


def unparse(node):
    """Print `node` as infix source, with as few parentheses as possible.

    >>> from parser import to_ast
    >>> unparse(to_ast("((1 + 2)) * ~(3) - max(4, (5))"))
    '(1 + 2) * ~3 - max(4, 5)'
    >>> unparse(to_ast("~(2 ** 3) ** 2"))
    '~(2 ** 3) ** 2'
    """
    return postorder(node, _format)
