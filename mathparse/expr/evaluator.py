"""Evaluate expression ASTs against variable bindings and a function table."""

from __future__ import annotations

from collections.abc import Callable, Mapping

from .errors import (
    ArityMismatchError,
    DivisionByZeroError,
    LimitExceededError,
    UnknownFunctionError,
    UnknownVariableError,
)
from .functions import FunctionTable
from .lexer import Operator
from .nodes import BinaryOp, FunctionCall, Negate, Node, NumberLiteral, VariableRef


class ExprEvaluator:
    """Evaluates an expression AST with given variable bindings.

    The tree, the bindings and the function table are only read, so one
    parsed tree can be evaluated many times with different bindings.
    """

    def __init__(self, variables: Mapping[str, float], functions: FunctionTable):
        self.variables = variables
        self.functions = functions

    def visit(self, node: Node) -> float:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise TypeError(f"Unhandled node type: {type(node).__name__}")
        return method(node)

    def visit_NumberLiteral(self, node: NumberLiteral) -> float:
        return node.value

    def visit_VariableRef(self, node: VariableRef) -> float:
        try:
            return self.variables[node.name]
        except KeyError:
            raise UnknownVariableError(node.name) from None

    def visit_Negate(self, node: Negate) -> float:
        return -self.visit(node.operand)

    def visit_BinaryOp(self, node: BinaryOp) -> float:
        left = self.visit(node.left)
        right = self.visit(node.right)

        op = node.op
        if op is Operator.ADD:
            return left + right
        elif op is Operator.SUB:
            return left - right
        elif op is Operator.MUL:
            return left * right
        elif op is Operator.DIV:
            if right == 0:
                raise DivisionByZeroError()
            return left / right
        else:
            raise RuntimeError(f"Unhandled binary operator: {op!r}")

    def visit_FunctionCall(self, node: FunctionCall) -> float:
        args = [self.visit(arg) for arg in node.args]
        func = self.functions.lookup(node.name)
        if func is None:
            raise UnknownFunctionError(node.name)
        if not func.accepts(len(args)):
            raise ArityMismatchError(node.name, func.arity, len(args), func.variadic)
        return func(*args)


def evaluate(
    tree: Node,
    variables: Mapping[str, float] | None = None,
    functions: FunctionTable | None = None,
) -> float:
    """Evaluate a parsed expression.

    Args:
        tree: AST from ``parse``/``parse_expression``
        variables: Variable bindings (default: none)
        functions: Function table (default: ``FunctionTable.builtin()``)

    Returns:
        The value as a Python float

    Raises:
        EvalError: Unknown variable/function, arity mismatch, division by
            zero or a function domain error
    """
    if variables is None:
        variables = {}
    if functions is None:
        functions = FunctionTable.builtin()

    evaluator = ExprEvaluator(variables, functions)
    try:
        return float(evaluator.visit(tree))
    except RecursionError:
        raise LimitExceededError("Expression is too deeply nested to evaluate") from None


def compile_expr(
    tree: Node, functions: FunctionTable | None = None
) -> Callable[[Mapping[str, float]], float]:
    """Bind a parsed tree and function table into a reusable callable.

    Returns:
        Callable that takes a dict of variable bindings and returns a float
    """
    if functions is None:
        functions = FunctionTable.builtin()

    def evaluate_bound(bindings: Mapping[str, float]) -> float:
        return evaluate(tree, bindings, functions)

    return evaluate_bound
