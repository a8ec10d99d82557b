"""Sample an expression over a range of x and draw it.

The tree is parsed once by the caller; each sample re-evaluates it with the
swept variable rebound.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from mathparse import defaults
from mathparse.expr import (
    DivisionByZeroError,
    FunctionDomainError,
    FunctionTable,
    Node,
    evaluate,
)

logger = logging.getLogger("mathparse.graph")


def lerp(a: float, b: float, t: float) -> float:
    """Point at fraction ``t`` of the way from ``a`` to ``b``."""
    return a + (b - a) * t


def inv_lerp(value: float, a: float, b: float) -> float:
    """Fraction of the way ``value`` lies from ``a`` to ``b``. Requires a != b."""
    return (value - a) / (b - a)


def lerp_map(value: float, a1: float, b1: float, a2: float, b2: float) -> float:
    """Map ``value`` from the range [a1, b1] onto [a2, b2]."""
    return lerp(a2, b2, inv_lerp(value, a1, b1))


@dataclass
class GraphSamples:
    """Evaluated (x, y) pairs.

    Attributes:
        xs: Sample positions, evenly spaced
        ys: Values at each position; nan where evaluation failed pointwise
        variable: Name the x values were bound to
        expression: Source text, for labels
    """
    xs: np.ndarray
    ys: np.ndarray
    variable: str = defaults.DEFAULT_GRAPH_VARIABLE
    expression: str = ""

    @property
    def finite(self) -> np.ndarray:
        return np.isfinite(self.ys)

    @property
    def gaps(self) -> int:
        return int(np.count_nonzero(~self.finite))

    def y_range(self) -> tuple[float, float] | None:
        """(min, max) over finite samples, or None if there are none."""
        finite_ys = self.ys[self.finite]
        if finite_ys.size == 0:
            return None
        return float(finite_ys.min()), float(finite_ys.max())

    def pairs(self) -> list[tuple[float, float]]:
        return [(float(x), float(y)) for x, y in zip(self.xs, self.ys)]


def sample(
    tree: Node,
    x_min: float = defaults.DEFAULT_GRAPH_X_MIN,
    x_max: float = defaults.DEFAULT_GRAPH_X_MAX,
    samples: int = defaults.DEFAULT_GRAPH_SAMPLES,
    variables: Mapping[str, float] | None = None,
    functions: FunctionTable | None = None,
    variable: str = defaults.DEFAULT_GRAPH_VARIABLE,
    expression: str = "",
) -> GraphSamples:
    """Evaluate ``tree`` at ``samples`` evenly spaced values of ``variable``.

    Division by zero and function domain errors leave a gap (nan) at that
    point. Any other evaluation error would fail at every point and is raised.

    Raises:
        ValueError: If the range is empty or ``samples`` is out of bounds
        EvalError: Unknown variable/function or arity mismatch
    """
    if not defaults.MIN_GRAPH_SAMPLES <= samples <= defaults.MAX_GRAPH_SAMPLES:
        raise ValueError(
            f"samples must be between {defaults.MIN_GRAPH_SAMPLES} and "
            f"{defaults.MAX_GRAPH_SAMPLES}, got {samples}"
        )
    if not x_max > x_min:
        raise ValueError(f"Empty range: {x_min:g} .. {x_max:g}")
    if functions is None:
        functions = FunctionTable.builtin()

    xs = np.linspace(x_min, x_max, samples)
    ys = np.full(samples, np.nan)
    bindings = dict(variables or {})

    for i, x in enumerate(xs):
        bindings[variable] = float(x)
        try:
            ys[i] = evaluate(tree, bindings, functions)
        except (DivisionByZeroError, FunctionDomainError) as e:
            logger.debug("Gap at %s=%g: %s", variable, x, e)

    result = GraphSamples(xs=xs, ys=ys, variable=variable, expression=expression)
    if result.gaps:
        logger.debug("%d of %d samples undefined", result.gaps, samples)
    return result


def _cell(value: float, lo: float, hi: float, cells: int) -> int:
    # Halve everything when the span overflows a float.
    if not np.isfinite(hi - lo):
        value, lo, hi = value / 2, lo / 2, hi / 2
    index = int(round(lerp_map(value, lo, hi, 0, cells - 1)))
    return min(max(index, 0), cells - 1)


def render_text(
    samples: GraphSamples,
    width: int = defaults.DEFAULT_PLOT_WIDTH,
    height: int = defaults.DEFAULT_PLOT_HEIGHT,
) -> str:
    """Draw samples as a character plot.

    Rows run from the largest y (top) to the smallest (bottom). Axes are drawn
    where x=0 or y=0 falls inside the plotted range. A constant curve is
    centred vertically.
    """
    if width < defaults.MIN_PLOT_WIDTH or height < defaults.MIN_PLOT_HEIGHT:
        raise ValueError(
            f"Plot must be at least {defaults.MIN_PLOT_WIDTH}x{defaults.MIN_PLOT_HEIGHT}, "
            f"got {width}x{height}"
        )

    x_lo, x_hi = float(samples.xs[0]), float(samples.xs[-1])
    y_range = samples.y_range()
    if y_range is None:
        return "(no finite samples to plot)"
    y_lo, y_hi = y_range
    if y_lo == y_hi:
        y_lo, y_hi = y_lo - 1.0, y_hi + 1.0

    grid = [[' '] * width for _ in range(height)]

    if x_lo <= 0.0 <= x_hi:
        col = _cell(0.0, x_lo, x_hi, width)
        for row in grid:
            row[col] = defaults.PLOT_Y_AXIS_CHAR
    if y_lo <= 0.0 <= y_hi:
        axis_row = grid[_cell(0.0, y_hi, y_lo, height)]
        for col in range(width):
            axis_row[col] = (
                defaults.PLOT_ORIGIN_CHAR
                if axis_row[col] == defaults.PLOT_Y_AXIS_CHAR
                else defaults.PLOT_X_AXIS_CHAR
            )

    for x, y in zip(samples.xs[samples.finite], samples.ys[samples.finite]):
        grid[_cell(y, y_hi, y_lo, height)][_cell(x, x_lo, x_hi, width)] = defaults.PLOT_POINT_CHAR

    top_label = f"{y_hi:.4g}"
    bottom_label = f"{y_lo:.4g}"
    gutter = max(len(top_label), len(bottom_label))

    lines = []
    for i, row in enumerate(grid):
        if i == 0:
            label = top_label
        elif i == height - 1:
            label = bottom_label
        else:
            label = ''
        lines.append(f"{label:>{gutter}} {''.join(row).rstrip()}")

    left = f"{x_lo:.4g}"
    right = f"{x_hi:.4g}"
    padding = max(width - len(left) - len(right), 1)
    lines.append(f"{'':>{gutter}} {left}{' ' * padding}{right}")
    return '\n'.join(lines)


def save_plot(
    samples: GraphSamples,
    path: str | Path,
    title: str | None = None,
    dpi: int = defaults.DEFAULT_PLOT_DPI,
) -> Path:
    """Render samples to an image file with matplotlib.

    Gaps (nan) break the line rather than being interpolated across.
    """
    from matplotlib.figure import Figure

    path = Path(path)
    fig = Figure(figsize=defaults.DEFAULT_PLOT_FIGSIZE)
    ax = fig.subplots()
    ax.axhline(0.0, color='0.75', linewidth=0.8)
    ax.axvline(0.0, color='0.75', linewidth=0.8)
    ax.plot(samples.xs, samples.ys, linewidth=1.5)
    ax.set_xlim(float(samples.xs[0]), float(samples.xs[-1]))
    ax.set_xlabel(samples.variable)
    ax.set_title(title if title is not None else samples.expression)
    fig.savefig(path, dpi=dpi)
    logger.debug("Saved plot to %s", path)
    return path
