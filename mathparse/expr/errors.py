"""Expression lexing, parsing and evaluation errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .lexer import Token


class ExprError(Exception):
    """Base class for expression errors."""

    #: 0-based offset into the source text, when the error can be pinned to one.
    position: int | None = None


class LimitExceededError(ExprError):
    """Expression exceeds safety limits."""
    pass


# === Lexical errors ===

class LexError(ExprError):
    """Failed to split the input into tokens."""

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.position = position


class UnexpectedCharacterError(LexError):
    """Character that cannot start any token."""

    def __init__(self, char: str, position: int):
        super().__init__(f"Unexpected character {char!r} at position {position}", position)
        self.char = char


class InvalidNumeralError(LexError):
    """Malformed numeric literal (bad digit for its base, empty digit run, ...)."""

    def __init__(self, text: str, position: int, reason: str):
        super().__init__(f"Invalid numeral {text!r} at position {position}: {reason}", position)
        self.text = text
        self.reason = reason


# === Syntax errors ===

class ParseError(ExprError):
    """Token sequence does not form a valid expression."""

    def __init__(self, message: str, token: Token):
        super().__init__(message)
        self.token = token
        self.position = token.pos


class UnexpectedTokenError(ParseError):
    """Token found where something else was expected."""

    def __init__(self, token: Token, expected: str):
        super().__init__(
            f"Expected {expected}, found {token.describe()} at position {token.pos}", token
        )
        self.expected = expected


class UnmatchedParenthesisError(UnexpectedTokenError):
    """An opening parenthesis was never closed."""

    def __init__(self, token: Token, opened_at: int):
        super().__init__(token, f"')' to close '(' at position {opened_at}")
        self.opened_at = opened_at


class ImplicitMultiplicationError(ParseError):
    """Two operands are adjacent with no operator between them."""

    def __init__(self, token: Token):
        super().__init__(
            f"Implicit multiplication is not supported: missing operator before "
            f"{token.describe()} at position {token.pos}",
            token,
        )


class TrailingInputError(ParseError):
    """Tokens left over after a complete expression."""

    def __init__(self, token: Token):
        super().__init__(
            f"Unexpected {token.describe()} at position {token.pos} after end of expression",
            token,
        )


# === Evaluation errors ===

class EvalError(ExprError):
    """Error during expression evaluation."""
    pass


class UnknownVariableError(EvalError):
    """Reference to unknown variable."""

    def __init__(self, name: str):
        super().__init__(f"Unknown variable: {name}")
        self.name = name


class UnknownFunctionError(EvalError):
    """Call to unknown function."""

    def __init__(self, name: str):
        super().__init__(f"Unknown function: {name}")
        self.name = name


class ArityMismatchError(EvalError):
    """Function called with the wrong number of arguments."""

    def __init__(self, name: str, expected: int, actual: int, variadic: bool = False):
        qualifier = "at least " if variadic else ""
        super().__init__(f"{name} expects {qualifier}{expected} args, got {actual}")
        self.name = name
        self.expected = expected
        self.actual = actual
        self.variadic = variadic


class DivisionByZeroError(EvalError):
    """Right operand of '/' evaluated to zero."""

    def __init__(self):
        super().__init__("Division by zero")


class FunctionDomainError(EvalError):
    """Function argument outside the function's domain."""

    def __init__(self, name: str, detail: str):
        super().__init__(f"{name}: {detail}")
        self.name = name
        self.detail = detail
