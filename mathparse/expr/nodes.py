"""AST node types produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass

from .lexer import Operator


@dataclass(frozen=True)
class NumberLiteral:
    """Literal numeric value."""

    value: float


@dataclass(frozen=True)
class VariableRef:
    """Variable reference to be looked up in the environment."""

    name: str


@dataclass(frozen=True)
class FunctionCall:
    """Call to a named function with positional argument expressions."""

    name: str
    args: tuple[Node, ...] = ()


@dataclass(frozen=True)
class BinaryOp:
    """Binary arithmetic operator node."""

    op: Operator
    left: Node
    right: Node


@dataclass(frozen=True)
class Negate:
    """Unary minus."""

    operand: Node


Node = NumberLiteral | VariableRef | FunctionCall | BinaryOp | Negate


def collect_variables(node: Node) -> set[str]:
    """Names of all variables referenced in a tree (function names excluded)."""
    found: set[str] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, VariableRef):
            found.add(current.name)
        elif isinstance(current, Negate):
            stack.append(current.operand)
        elif isinstance(current, BinaryOp):
            stack.extend((current.left, current.right))
        elif isinstance(current, FunctionCall):
            stack.extend(current.args)
    return found


def dump(node: Node, indent: int = 0) -> str:
    """Render a tree one node per line, children indented beneath parents."""
    pad = '  ' * indent
    if isinstance(node, NumberLiteral):
        return f"{pad}NumberLiteral({node.value!r})"
    if isinstance(node, VariableRef):
        return f"{pad}VariableRef({node.name})"
    if isinstance(node, Negate):
        return f"{pad}Negate\n{dump(node.operand, indent + 1)}"
    if isinstance(node, BinaryOp):
        return (
            f"{pad}BinaryOp({node.op.value})\n"
            f"{dump(node.left, indent + 1)}\n"
            f"{dump(node.right, indent + 1)}"
        )
    if isinstance(node, FunctionCall):
        lines = [f"{pad}FunctionCall({node.name}, {len(node.args)} args)"]
        lines.extend(dump(arg, indent + 1) for arg in node.args)
        return '\n'.join(lines)
    raise TypeError(f"Unhandled node type: {type(node).__name__}")
