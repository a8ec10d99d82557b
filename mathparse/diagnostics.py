"""Error formatting for command-line output.

Keep this module small and dependency-light: it is imported by the CLI layer
and only depends on the error hierarchy.
"""

from __future__ import annotations

from mathparse.expr import (
    ExprError,
    ImplicitMultiplicationError,
    InvalidNumeralError,
    LimitExceededError,
    UnknownFunctionError,
    UnknownVariableError,
)


def format_caret(source: str, position: int, indent: str = "  ") -> str:
    """Echo ``source`` with a caret under column ``position``.

    A position equal to ``len(source)`` points just past the end.
    """
    position = min(max(position, 0), len(source))
    # Tabs keep their width so the caret stays aligned.
    pad = ''.join('\t' if ch == '\t' else ' ' for ch in source[:position])
    return f"{indent}{source}\n{indent}{pad}^"


def format_hint(exc: BaseException) -> str | None:
    """Return an actionable hint for a known error, or None."""

    if isinstance(exc, ImplicitMultiplicationError):
        return "write the operator explicitly, e.g. `2*x` instead of `2x`"

    if isinstance(exc, InvalidNumeralError):
        return "prefixed literals take digits of their base only: 0x1f, 0o17, 0b101"

    if isinstance(exc, UnknownVariableError):
        return "bind it with `--set NAME=VALUE` or under [constants] in mathparse.toml"

    if isinstance(exc, UnknownFunctionError):
        return "run `mathparse functions` to list the available functions"

    if isinstance(exc, LimitExceededError):
        return "reduce nesting or raise parser.max_depth in mathparse.toml"

    return None


def format_error(source: str, exc: BaseException, hints: bool = True) -> str:
    """Format an error for stderr: message, caret line when positioned, hint."""
    msg = (str(exc) or repr(exc)).strip()
    result = f"error: {msg}"

    position = getattr(exc, "position", None)
    if isinstance(exc, ExprError) and position is not None and '\n' not in source:
        result += "\n" + format_caret(source, position)

    if hints:
        hint = format_hint(exc)
        if hint:
            result += f"\nhint: {hint}"
    return result
