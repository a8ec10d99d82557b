"""Expression lexing, parsing and evaluation.

Parse arithmetic expressions with variables, function calls and
hex/octal/binary literals, then evaluate the tree against variable bindings.

Example:
    from mathparse.expr import compile_expression

    # Parse once
    fn = compile_expression("sin(x) * 2 + 0x10")

    # Evaluate many times
    ys = [fn({'x': x}) for x in (0.0, 0.5, 1.0)]
"""

from collections.abc import Callable, Mapping

from mathparse import defaults

from .lexer import Operator, Token, TokenKind, read_numeral, tokenize
from .nodes import (
    BinaryOp,
    FunctionCall,
    Negate,
    Node,
    NumberLiteral,
    VariableRef,
    collect_variables,
    dump,
)
from .parser import parse, parse_expression
from .evaluator import compile_expr, evaluate
from .functions import CONSTANTS, FUNCTIONS, Function, FunctionTable, default_environment
from .errors import (
    ExprError,
    LexError,
    UnexpectedCharacterError,
    InvalidNumeralError,
    ParseError,
    UnexpectedTokenError,
    UnmatchedParenthesisError,
    ImplicitMultiplicationError,
    TrailingInputError,
    EvalError,
    UnknownVariableError,
    UnknownFunctionError,
    ArityMismatchError,
    DivisionByZeroError,
    FunctionDomainError,
    LimitExceededError,
)


def compile_expression(
    expr: str,
    functions: FunctionTable | None = None,
    max_depth: int = defaults.DEFAULT_MAX_DEPTH,
) -> Callable[[Mapping[str, float]], float]:
    """Parse and compile an expression string.

    Args:
        expr: Expression string like "x * 2 + 1"
        functions: Function table (default: built-ins)
        max_depth: Maximum nesting depth

    Returns:
        Callable that takes dict[str, float] and returns float

    Raises:
        LexError: If the string contains invalid characters or literals
        ParseError: If expression has syntax errors
        LimitExceededError: If expression is nested too deeply

    Example:
        fn = compile_expression("x * 2")
        fn({'x': 1.0})  # 2.0
    """
    return compile_expr(parse_expression(expr, max_depth), functions)


def get_variables(expr: str | Node) -> set[str]:
    """Get the set of variable names referenced in an expression.

    Constants such as ``pi`` are ordinary variables to the evaluator and are
    included when referenced.
    """
    tree = parse_expression(expr) if isinstance(expr, str) else expr
    return collect_variables(tree)


def list_functions() -> dict[str, int]:
    """List available built-in functions and their (minimum) argument counts."""
    return {name: info[1] for name, info in FUNCTIONS.items()}


def list_constants() -> dict[str, float]:
    """List available built-in constants."""
    return dict(CONSTANTS)


__all__ = [
    'tokenize',
    'read_numeral',
    'parse',
    'parse_expression',
    'evaluate',
    'compile_expression',
    'get_variables',
    'list_functions',
    'list_constants',
    'default_environment',
    'dump',
    'collect_variables',
    'compile_expr',
    'FUNCTIONS',
    'CONSTANTS',
    # Data model
    'Token',
    'TokenKind',
    'Operator',
    'Node',
    'NumberLiteral',
    'VariableRef',
    'FunctionCall',
    'BinaryOp',
    'Negate',
    'Function',
    'FunctionTable',
    # Errors
    'ExprError',
    'LexError',
    'UnexpectedCharacterError',
    'InvalidNumeralError',
    'ParseError',
    'UnexpectedTokenError',
    'UnmatchedParenthesisError',
    'ImplicitMultiplicationError',
    'TrailingInputError',
    'EvalError',
    'UnknownVariableError',
    'UnknownFunctionError',
    'ArityMismatchError',
    'DivisionByZeroError',
    'FunctionDomainError',
    'LimitExceededError',
]
