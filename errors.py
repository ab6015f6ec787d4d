"""Exceptions raised while registering, scanning and parsing expressions."""


class ExpressionError(Exception):
    """Base class for every failure reported to the host.

    `pos` is the character offset in the source where the problem was
    found, or None if it isn't known.
    """

    def __init__(self, message, pos=None):
        super().__init__(message)
        self.message = message
        self.pos = pos

    def __str__(self):
        if self.pos is None:
            return self.message
        return f"{self.message} (at position {self.pos})"


class DuplicateSymbol(ExpressionError):
    pass


class RegistryFrozen(ExpressionError):
    pass


class LexError(ExpressionError):
    pass


class UnrecognizedToken(LexError):
    def __init__(self, source, pos):
        self.source = source
        self.char = source[pos]
        super().__init__(f"Unexpected token or symbol: {self.char!r}", pos)


class ParseError(ExpressionError):
    pass


class MismatchedRightParen(ParseError):
    pass


class MismatchedLeftParen(ParseError):
    pass


class MisplacedSeparator(ParseError):
    pass


class InsufficientOperands(ParseError):
    pass


class EmptyExpression(ParseError):
    pass


class UnknownToken(ParseError):
    """A token that can't be reduced reached the reduction step (a bug)."""
