"""Operators and named functions known to the expression language.

A `SymbolTable` is filled during a registration phase and then frozen;
after that it is only ever read, so it can be shared freely.

All arithmetic goes through numpy ufuncs so that division by zero,
overflow and domain errors produce inf/nan (as they would on the FPU)
instead of raising like python's float operators do. Callers evaluate
inside ``np.errstate(all="ignore")`` to silence the warnings.
"""
import functools
import logging
import re
from types import MappingProxyType
from typing import Callable, Literal, NamedTuple

import numpy as np

from errors import DuplicateSymbol, RegistryFrozen

_log = logging.getLogger(__name__)


class Op(NamedTuple):
    op: str
    prec: int
    assoc: Literal["l", "r"]  # left-associative, right-associative
    fun: Callable
    arity: int = 2

    def __call__(self, *args):
        return self.fun(*args)

    def __repr__(self):
        return f"op({self.op!r:})"

    def left_first(self, other):
        """Whether `self`, already on the stack, binds before `other` is pushed.

        >>> OPS["-"].left_first(OPS["+"]), OPS["**"].left_first(OPS["**"])
        (True, False)
        """
        return self.prec > other.prec or self.prec == other.prec and other.assoc == "l"


class Fn(NamedTuple):
    name: str
    arity: int
    fun: Callable

    def __call__(self, *args):
        return self.fun(*args)

    def __repr__(self):
        return f"fn({self.name!r:})"


class SymbolTable:
    """Operator symbols and function names, in two separate namespaces.

    >>> table = SymbolTable()
    >>> table.register_operator("*", 1, "l", np.multiply)
    op('*')
    >>> table.register_operator("**", 2, "r", np.power)
    op('**')
    >>> table.lookup_operator("2**3", 1)
    (op('**'), 2)
    >>> table.lookup_operator("2*3", 1)
    (op('*'), 1)
    >>> table.lookup_operator("2*3", 0) is None
    True
    """

    def __init__(self):
        self._ops = {}
        self._funs = {}
        # Distinct operator symbol lengths, longest first.
        self._lengths = []
        self._frozen = False

    @property
    def operators(self):
        return MappingProxyType(self._ops)

    @property
    def functions(self):
        return MappingProxyType(self._funs)

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        self._frozen = True
        return self

    def register(self, entry):
        if self._frozen:
            raise RegistryFrozen(f"cannot register {entry!r}: symbol table is frozen")
        if isinstance(entry, Op):
            if not entry.op:
                raise ValueError("Operator symbols must not be empty")
            if entry.op in self._ops:
                raise DuplicateSymbol(f"Operator symbols must be unique: {entry.op!r}")
            self._ops[entry.op] = entry
            if len(entry.op) not in self._lengths:
                self._lengths.append(len(entry.op))
                self._lengths.sort(reverse=True)
        elif isinstance(entry, Fn):
            if not entry.name:
                raise ValueError("Function names must not be empty")
            if entry.name in self._funs:
                raise DuplicateSymbol(f"Function names must be unique: {entry.name!r}")
            self._funs[entry.name] = entry
        else:
            raise TypeError(f"Expected an Op or Fn, got {entry!r}")
        _log.debug("registered %r", entry)
        return entry

    def register_operator(self, symbol, prec, assoc, fun, arity=2):
        if assoc not in ("l", "r"):
            raise ValueError(f"assoc must be 'l' or 'r', not {assoc!r}")
        return self.register(Op(symbol, prec, assoc, fun, arity))

    def register_function(self, name, fun, arity):
        return self.register(Fn(name, arity, fun))

    def lookup_operator(self, text, pos):
        """Return ``(op, length)`` for the longest operator at `pos`, or None."""
        for n in self._lengths:
            if pos + n > len(text):
                continue
            if op := self._ops.get(text[pos : pos + n]):
                return op, n
        return None

    def lookup_function(self, name):
        return self._funs.get(name)


# One line per precedence level, lowest first; each entry is
# <numpy ufunc><symbol><assoc>, where "u" marks a (right-associative) prefix
# operator.
OP_GROUPS = """
add+l subtract-l
multiply*l divide/l fmod%l
power**r
negative~u
""".strip()

_rng = np.random.default_rng()


def round_half_up(a):
    """Round to the nearest integer, halves towards +inf.

    Computed from the fractional part; `floor(a + 0.5)` would round `a + 0.5`
    first and go wrong near 2**52 and just below 0.5.

    >>> [float(round_half_up(x)) for x in (2.5, -2.5, 0.49999999999999994, 2.0**52 + 1)]
    [3.0, -2.0, 0.0, 4503599627370497.0]
    """
    f = np.floor(a)
    return f + (a - f >= 0.5)


FUNCTIONS = {
    "max": (2, np.maximum),
    "min": (2, np.minimum),
    "rand": (0, lambda: _rng.random()),
    "floor": (1, np.floor),
    "ceil": (1, np.ceil),
    "round": (1, round_half_up),
}


def _builtin_ops():
    for prec, op_groups in enumerate(OP_GROUPS.split("\n")):
        for [(fun, o, assoc)] in map(
            re.compile(r"^(\w+)(\W+)(\w+)$").findall, op_groups.split()
        ):
            if assoc == "u":
                yield Op(o, prec, "r", getattr(np, fun), arity=1)
            else:
                yield Op(o, prec, assoc, getattr(np, fun))


@functools.lru_cache(maxsize=None)
def builtin_symbols():
    """The default, frozen symbol table. Built on first use only."""
    table = SymbolTable()
    for op in _builtin_ops():
        table.register(op)
    for name, (arity, fun) in FUNCTIONS.items():
        table.register_function(name, fun, arity)
    _log.debug(
        "built-in symbols: %d operators, %d functions",
        len(table.operators),
        len(table.functions),
    )
    return table.freeze()


OPS = builtin_symbols().operators
