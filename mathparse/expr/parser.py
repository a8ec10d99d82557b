"""Recursive-descent parser for expression token streams.

Grammar, lowest to highest precedence::

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := NUMBER | IDENT callArgs? | '(' expression ')' | '-' factor
    callArgs   := '(' (expression (',' expression)*)? ')'
"""

from __future__ import annotations

from collections.abc import Sequence

from mathparse import defaults

from .errors import (
    ImplicitMultiplicationError,
    LimitExceededError,
    TrailingInputError,
    UnexpectedTokenError,
    UnmatchedParenthesisError,
)
from .lexer import Operator, Token, TokenKind, tokenize
from .nodes import BinaryOp, FunctionCall, Negate, Node, NumberLiteral, VariableRef


ADDITIVE_OPS = {Operator.ADD, Operator.SUB}
MULTIPLICATIVE_OPS = {Operator.MUL, Operator.DIV}

# Tokens that may start an operand; seeing one right after a factor means an
# operator is missing.
OPERAND_STARTS = {TokenKind.NUMBER, TokenKind.IDENT, TokenKind.LPAREN}

FACTOR_EXPECTED = "a number, identifier, '(' or '-'"


class ExprParser:
    """Builds an AST from a token sequence ending in END."""

    def __init__(self, tokens: Sequence[Token], max_depth: int = defaults.DEFAULT_MAX_DEPTH):
        if not tokens or tokens[-1].kind is not TokenKind.END:
            raise ValueError("Token sequence must end with an END token")
        self.tokens = tokens
        self.max_depth = max_depth
        self.index = 0
        self.depth = 0

    def peek(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind is not TokenKind.END:
            self.index += 1
        return token

    def _at_operator(self, ops: set[Operator]) -> bool:
        token = self.peek()
        return token.kind is TokenKind.OPERATOR and token.value in ops

    def parse(self) -> Node:
        node = self.expression()
        token = self.peek()
        if token.kind is not TokenKind.END:
            raise TrailingInputError(token)
        return node

    def expression(self) -> Node:
        node = self.term()
        while self._at_operator(ADDITIVE_OPS):
            op = self.advance().value
            node = BinaryOp(op, node, self.term())
        return node

    def term(self) -> Node:
        node = self.operand()
        while self._at_operator(MULTIPLICATIVE_OPS):
            op = self.advance().value
            node = BinaryOp(op, node, self.operand())
        return node

    def operand(self) -> Node:
        """A factor that must be followed by an operator, ')' ',' or END."""
        node = self.factor()
        token = self.peek()
        if token.kind in OPERAND_STARTS:
            raise ImplicitMultiplicationError(token)
        return node

    def factor(self) -> Node:
        self.depth += 1
        if self.depth > self.max_depth:
            raise LimitExceededError(f"Expression exceeds depth {self.max_depth}")
        try:
            return self._factor()
        finally:
            self.depth -= 1

    def _factor(self) -> Node:
        token = self.advance()

        if token.kind is TokenKind.NUMBER:
            return NumberLiteral(token.value)

        if token.kind is TokenKind.IDENT:
            if self.peek().kind is TokenKind.LPAREN:
                return FunctionCall(token.value, self.call_args())
            return VariableRef(token.value)

        if token.kind is TokenKind.LPAREN:
            node = self.expression()
            self._close_paren(token)
            return node

        if token.kind is TokenKind.OPERATOR and token.value is Operator.SUB:
            return Negate(self.factor())

        raise UnexpectedTokenError(token, FACTOR_EXPECTED)

    def call_args(self) -> tuple[Node, ...]:
        open_paren = self.advance()
        args: list[Node] = []
        if self.peek().kind is TokenKind.RPAREN:
            self.advance()
            return ()

        args.append(self.expression())
        while self.peek().kind is TokenKind.COMMA:
            self.advance()
            args.append(self.expression())
        self._close_paren(open_paren)
        return tuple(args)

    def _close_paren(self, open_paren: Token) -> None:
        token = self.peek()
        if token.kind is TokenKind.RPAREN:
            self.advance()
            return
        if token.kind is TokenKind.END:
            raise UnmatchedParenthesisError(token, open_paren.pos)
        raise UnexpectedTokenError(token, "')'")


def parse(tokens: Sequence[Token], max_depth: int = defaults.DEFAULT_MAX_DEPTH) -> Node:
    """Parse a token sequence (as produced by ``tokenize``) into an AST.

    Raises:
        ParseError: If the tokens do not form a single valid expression
        LimitExceededError: If nesting exceeds ``max_depth``
    """
    try:
        return ExprParser(tokens, max_depth).parse()
    except RecursionError:
        raise LimitExceededError("Expression is too deeply nested to parse") from None


def parse_expression(expr: str, max_depth: int = defaults.DEFAULT_MAX_DEPTH) -> Node:
    """Tokenize and parse an expression string."""
    return parse(tokenize(expr), max_depth)
