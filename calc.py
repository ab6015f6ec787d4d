"""Evaluate infix arithmetic expressions from the command line.

    $ calc "2 + 3 * 4"
    14
    $ calc --ast "max(3, 5) ** 2"
    max(3, 5) ** 2
    25

Set DEBUG=1 in the environment (or pass --verbose) to trace the scanner,
parser and evaluator.
"""
import argparse
import logging
import os
import sys

from errors import ExpressionError
from evaluator import canonicalize_num, evaluate, unparse
from lexer import tokenize
from parser import parse
from symbols import builtin_symbols

DEBUG = bool(os.getenv("DEBUG", False))

_log = logging.getLogger(__name__)


def calculate(source, symbols=None):
    """Compile and evaluate `source`.

    >>> calculate("2 + 3 * 4"), calculate("(2 + 3) * 4"), calculate("3 - ~2")
    (14.0, 20.0, 5.0)
    >>> calculate("floor(2.7) + max(3, 5)")
    7.0
    """
    return evaluate(parse(tokenize(source, symbols)))


def format_result(x):
    """`repr` of `x`, except that integral values print without ``.0``.

    >>> format_result(14.0), format_result(0.25), format_result(1e300), format_result(float("-inf"))
    ('14', '0.25', '1e+300', '-inf')
    """
    if x.is_integer() and abs(x) < 1e16:
        return canonicalize_num(x)
    return repr(x)


def show_error(err, source, file=None):
    file = file or sys.stderr
    print(f"error: {err.message}", file=file)
    print(f"  {source}", file=file)
    if err.pos is not None:
        print(f"  {' ' * err.pos}^", file=file)


def list_symbols(symbols, file=None):
    for op in sorted(symbols.operators.values(), key=lambda o: (o.prec, o.op)):
        kind = "prefix" if op.arity == 1 else {"l": "left", "r": "right"}[op.assoc]
        print(f"{op.op:>4}  precedence {op.prec}  {kind}", file=file)
    for fn in symbols.functions.values():
        args = ", ".join("abcdefgh"[: fn.arity])
        print(f"{fn.name}({args})", file=file)


def main(argv=None):
    ap = argparse.ArgumentParser(
        prog="calc", description="Evaluate an infix arithmetic expression."
    )
    ap.add_argument("expr", nargs="*", help="expression (words are joined by spaces)")
    ap.add_argument("-t", "--tokens", action="store_true", help="print the tokens")
    ap.add_argument("-a", "--ast", action="store_true", help="print the parsed tree")
    ap.add_argument("--symbols", action="store_true", help="list operators and functions")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = ap.parse_args(argv)

    if args.verbose or DEBUG:
        logging.basicConfig(level=logging.DEBUG)

    symbols = builtin_symbols()
    if args.symbols:
        list_symbols(symbols)
        return 0
    if not args.expr:
        ap.error("no expression given")

    source = " ".join(args.expr)
    try:
        tokens = tokenize(source, symbols)
        if args.tokens:
            print(" ".join(map(repr, tokens)))
        tree = parse(tokens)
        if args.ast:
            print(unparse(tree))
        ans = evaluate(tree)
    except ExpressionError as err:
        _log.debug("failed to evaluate %r", source, exc_info=True)
        show_error(err, source)
        return 1
    print(format_result(ans))
    return 0


if __name__ == "__main__":
    sys.exit(main())
