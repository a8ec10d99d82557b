"""Built-in function and constant registries for expressions."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

import numpy as np

from .errors import FunctionDomainError

Impl = Callable[..., float]


@dataclass(frozen=True)
class Function:
    """A callable with a declared argument count.

    Attributes:
        name: Name the function is called by in expressions
        impl: Implementation taking positional floats
        arity: Exact argument count, or the minimum when ``variadic``
        variadic: Accepts ``arity`` or more arguments
    """

    name: str
    impl: Impl
    arity: int
    variadic: bool = False

    def accepts(self, count: int) -> bool:
        if self.variadic:
            return count >= self.arity
        return count == self.arity

    def __call__(self, *args: float) -> float:
        # Underflow to zero is fine; everything else is a domain problem.
        try:
            with np.errstate(divide='raise', invalid='raise', over='raise', under='ignore'):
                result = self.impl(*args)
        except FloatingPointError as e:
            raise FunctionDomainError(self.name, str(e)) from e
        except (ValueError, OverflowError, ZeroDivisionError) as e:
            raise FunctionDomainError(self.name, str(e)) from e
        return float(result)


# === Scalar implementations ===

def _lerp(a, b, t):
    return a + t * (b - a)


def _smoothstep(edge0, edge1, x):
    if edge0 == edge1:
        raise ValueError("edges must differ")
    t = np.clip((x - edge0) / (edge1 - edge0), 0, 1)
    return t * t * (3 - 2 * t)


def _clamp(x, lo, hi):
    if lo > hi:
        raise ValueError(f"lower bound {lo:g} exceeds upper bound {hi:g}")
    return np.clip(x, lo, hi)


def _sqrt(x):
    if x < 0:
        raise ValueError(f"square root of negative number {x:g}")
    return np.sqrt(x)


def _log(x):
    if x <= 0:
        raise ValueError(f"logarithm of non-positive number {x:g}")
    return np.log(x)


# Function registry: name -> (implementation, num_args, variadic)
FUNCTIONS: dict[str, tuple[Impl, int, bool]] = {
    # Trigonometric
    'sin': (np.sin, 1, False),
    'cos': (np.cos, 1, False),
    'tan': (np.tan, 1, False),
    'asin': (np.arcsin, 1, False),
    'acos': (np.arccos, 1, False),
    'atan': (np.arctan, 1, False),
    'sinh': (np.sinh, 1, False),
    'cosh': (np.cosh, 1, False),
    'tanh': (np.tanh, 1, False),

    # Basic math
    'sqrt': (_sqrt, 1, False),
    'cbrt': (np.cbrt, 1, False),
    'abs': (np.abs, 1, False),
    'exp': (np.exp, 1, False),
    'log': (_log, 1, False),
    'floor': (np.floor, 1, False),
    'ceil': (np.ceil, 1, False),
    'round': (np.round, 1, False),
    'sign': (np.sign, 1, False),

    # Two-arg
    'pow': (np.power, 2, False),
    'hypot': (np.hypot, 2, False),

    # Three-arg
    'clamp': (_clamp, 3, False),
    'lerp': (_lerp, 3, False),
    'smoothstep': (_smoothstep, 3, False),

    # Variadic reductions (at least 1 arg)
    'min': (lambda *xs: min(xs), 1, True),
    'max': (lambda *xs: max(xs), 1, True),
    'mean': (lambda *xs: np.mean(xs), 1, True),
}


# Built-in constants
CONSTANTS: dict[str, float] = {
    'pi': float(np.pi),
    'e': float(np.e),
    'tau': float(2 * np.pi),
}


class FunctionTable:
    """Name -> Function mapping handed to the evaluator.

    Tables are built by the caller; ``FunctionTable()`` is empty and
    ``FunctionTable.builtin()`` holds every entry of ``FUNCTIONS``.
    """

    def __init__(self, functions: dict[str, Function] | None = None):
        self._functions: dict[str, Function] = dict(functions or {})

    @classmethod
    def builtin(cls) -> FunctionTable:
        table = cls()
        for name, (impl, num_args, variadic) in FUNCTIONS.items():
            table.register(name, impl, num_args, variadic=variadic)
        return table

    def register(self, name: str, impl: Impl, arity: int, variadic: bool = False) -> Function:
        """Add or replace a function. Names must be letters only to be callable."""
        if not (name.isascii() and name.isalpha()):
            raise ValueError(f"Function name must be ASCII letters only, got {name!r}")
        if arity < 0:
            raise ValueError(f"arity must be >= 0, got {arity}")
        fn = Function(name, impl, arity, variadic)
        self._functions[name] = fn
        return fn

    def lookup(self, name: str) -> Function | None:
        return self._functions.get(name)

    def names(self) -> list[str]:
        return sorted(self._functions)

    def arities(self) -> dict[str, int]:
        return {name: fn.arity for name, fn in self._functions.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)


def default_environment(**extra: float) -> dict[str, float]:
    """Fresh variable bindings holding the built-in constants plus ``extra``."""
    env = dict(CONSTANTS)
    env.update({name: float(value) for name, value in extra.items()})
    return env
