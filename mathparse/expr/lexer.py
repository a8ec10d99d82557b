"""Split expression strings into tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from .errors import InvalidNumeralError, UnexpectedCharacterError


class TokenKind(Enum):
    """All lexical token types produced by the tokenizer."""

    NUMBER = auto()
    IDENT = auto()
    OPERATOR = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    END = auto()


class Operator(Enum):
    """Binary arithmetic operators, valued by their surface symbol."""

    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'


@dataclass(frozen=True)
class Token:
    """A single lexical token.

    Attributes:
        kind: Token type
        value: float for NUMBER, name for IDENT, Operator for OPERATOR, else None
        pos: 0-based character offset in the input string
    """

    kind: TokenKind
    value: float | str | Operator | None
    pos: int

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        if self.kind is TokenKind.NUMBER:
            return f"number {self.value:g}"
        if self.kind is TokenKind.IDENT:
            return f"identifier {self.value!r}"
        if self.kind is TokenKind.OPERATOR:
            return f"operator '{self.value.value}'"
        if self.kind is TokenKind.END:
            return "end of input"
        return f"'{_PUNCTUATION_SYMBOLS[self.kind]}'"


_PUNCTUATION: dict[str, TokenKind] = {
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    ',': TokenKind.COMMA,
}
_PUNCTUATION_SYMBOLS = {kind: ch for ch, kind in _PUNCTUATION.items()}

_OPERATORS: dict[str, Operator] = {op.value: op for op in Operator}

# Base prefix letter -> (radix, valid digits)
_PREFIXES: dict[str, tuple[int, str]] = {
    'x': (16, '0123456789abcdefABCDEF'),
    'o': (8, '01234567'),
    'b': (2, '01'),
}
_DECIMAL_DIGITS = '0123456789'


def _is_letter(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def read_numeral(text: str, start: int) -> tuple[float, int]:
    """Read a numeric literal beginning at ``text[start]``.

    Handles decimal literals with an optional fractional part and the
    ``0x``/``0o``/``0b`` prefixed forms (prefix letter case-insensitive).

    Returns:
        (value, end): The numeric value and the offset just past the literal

    Raises:
        InvalidNumeralError: If the literal is malformed for its base
    """
    n = len(text)
    if text[start] == '0' and start + 1 < n and text[start + 1].lower() in _PREFIXES:
        radix, valid = _PREFIXES[text[start + 1].lower()]
        digits_start = start + 2
        end = digits_start
        while end < n and text[end] in valid:
            end += 1

        if end == digits_start:
            raise InvalidNumeralError(
                text[start:end], start, f"expected base-{radix} digits after prefix"
            )
        if end < n and text[end] == '.':
            raise InvalidNumeralError(
                text[start:end + 1], start, f"fractional part not allowed in base-{radix} literal"
            )
        if end < n and (text[end].isdigit() or _is_letter(text[end])):
            raise InvalidNumeralError(
                text[start:end + 1], start, f"{text[end]!r} is not a valid base-{radix} digit"
            )
        try:
            return float(int(text[digits_start:end], radix)), end
        except OverflowError:
            raise InvalidNumeralError(text[start:end], start, "literal too large") from None

    end = start
    while end < n and text[end] in _DECIMAL_DIGITS:
        end += 1
    if end < n and text[end] == '.':
        frac_start = end + 1
        end = frac_start
        while end < n and text[end] in _DECIMAL_DIGITS:
            end += 1
        if end == frac_start:
            raise InvalidNumeralError(text[start:end], start, "expected digits after '.'")
        if end < n and text[end] == '.':
            raise InvalidNumeralError(text[start:end + 1], start, "more than one '.'")
    return float(text[start:end]), end


def tokenize(text: str) -> list[Token]:
    """Lex an expression string into tokens, terminated by a single END token.

    Raises:
        UnexpectedCharacterError: For characters outside the expression alphabet
        InvalidNumeralError: For malformed numeric literals
    """
    tokens: list[Token] = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
        elif ch in _DECIMAL_DIGITS:
            value, end = read_numeral(text, i)
            tokens.append(Token(TokenKind.NUMBER, value, i))
            i = end
        elif _is_letter(ch):
            end = i + 1
            while end < n and _is_letter(text[end]):
                end += 1
            tokens.append(Token(TokenKind.IDENT, text[i:end], i))
            i = end
        elif ch in _OPERATORS:
            tokens.append(Token(TokenKind.OPERATOR, _OPERATORS[ch], i))
            i += 1
        elif ch in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[ch], None, i))
            i += 1
        else:
            raise UnexpectedCharacterError(ch, i)

    tokens.append(Token(TokenKind.END, None, n))
    return tokens
