"""Tests for graph sampling and rendering."""

import numpy as np
import pytest

from mathparse.expr import UnknownFunctionError, UnknownVariableError, parse_expression
from mathparse.graph import (
    GraphSamples,
    inv_lerp,
    lerp,
    lerp_map,
    render_text,
    sample,
    save_plot,
)


def test_lerp_helpers():
    assert lerp(0.0, 10.0, 0.25) == 2.5
    assert lerp(2.0, 4.0, 0.0) == 2.0
    assert lerp(2.0, 4.0, 1.0) == 4.0
    assert inv_lerp(5.0, 0.0, 10.0) == 0.5
    assert inv_lerp(4.0, 4.0, 8.0) == 0.0
    assert lerp_map(5.0, 0.0, 10.0, 100.0, 200.0) == 150.0
    # Reversed target range flips the direction
    assert lerp_map(1.0, 0.0, 4.0, 3.0, 0.0) == pytest.approx(2.25)


def test_sample_evenly_spaced():
    result = sample(parse_expression("x*2"), 0.0, 4.0, 5)

    np.testing.assert_allclose(result.xs, [0, 1, 2, 3, 4])
    np.testing.assert_allclose(result.ys, [0, 2, 4, 6, 8])
    assert result.gaps == 0
    assert result.variable == "x"
    assert result.pairs() == [(0.0, 0.0), (1.0, 2.0), (2.0, 4.0), (3.0, 6.0), (4.0, 8.0)]


def test_default_range_is_zero_to_ten():
    result = sample(parse_expression("x"))
    np.testing.assert_allclose(result.xs, np.arange(11))


def test_division_by_zero_leaves_gap():
    result = sample(parse_expression("1/x"), -1.0, 1.0, 3)

    assert result.gaps == 1
    assert np.isnan(result.ys[1])
    assert result.ys[0] == -1.0
    assert result.ys[2] == 1.0
    assert result.y_range() == (-1.0, 1.0)


def test_domain_error_leaves_gap():
    result = sample(parse_expression("sqrt(x)"), -1.0, 1.0, 3)
    assert result.gaps == 1
    assert np.isnan(result.ys[0])
    assert result.ys[2] == 1.0


def test_structural_errors_propagate():
    with pytest.raises(UnknownVariableError):
        sample(parse_expression("y * x"), 0.0, 1.0, 3)
    with pytest.raises(UnknownFunctionError):
        sample(parse_expression("foo(x)"), 0.0, 1.0, 3)


def test_custom_variable_and_bindings():
    env = {"k": 3.0}
    result = sample(parse_expression("k * t + 1"), 0.0, 1.0, 2, variables=env, variable="t")

    np.testing.assert_allclose(result.ys, [1.0, 4.0])
    assert result.variable == "t"
    assert env == {"k": 3.0}


@pytest.mark.parametrize("kwargs", [
    {"samples": 1},
    {"samples": 100_001},
    {"x_min": 1.0, "x_max": 1.0},
    {"x_min": 2.0, "x_max": 1.0},
])
def test_invalid_sampling_arguments(kwargs):
    with pytest.raises(ValueError):
        sample(parse_expression("x"), **kwargs)


def test_all_gaps():
    result = sample(parse_expression("1/(x-x)"), 0.0, 1.0, 4)

    assert result.gaps == 4
    assert result.y_range() is None
    assert render_text(result) == "(no finite samples to plot)"


def test_render_text_diagonal():
    result = sample(parse_expression("x"), 0.0, 4.0, 5)
    text = render_text(result, width=8, height=4)

    assert text.splitlines() == [
        "4 |      *",
        "  |    *",
        "  | * *",
        "0 *-------",
        "  0      4",
    ]


def test_render_text_axes_cross_at_origin():
    result = sample(parse_expression("x"), -2.0, 2.0, 2)
    lines = render_text(result, width=9, height=5).splitlines()

    assert "+" in lines[2]
    assert all("|" in line or "+" in line for line in lines[1:4])


def test_render_text_constant_curve_is_centred():
    result = sample(parse_expression("2"), 0.0, 1.0, 3)
    lines = render_text(result, width=8, height=5).splitlines()

    assert len(lines) == 6
    assert lines[0].startswith("3 ")
    assert lines[4].startswith("1 ")
    assert [i for i, line in enumerate(lines) if "*" in line] == [2]


def test_render_text_skips_gaps():
    result = sample(parse_expression("1/x"), -1.0, 1.0, 3)
    text = render_text(result, width=10, height=4)
    assert text.count("*") == 2


def test_render_text_span_beyond_float_range():
    result = GraphSamples(xs=np.array([0.0, 1.0, 2.0]), ys=np.array([-1e308, 0.0, 1e308]))
    lines = render_text(result, width=8, height=4).splitlines()

    assert lines[0].lstrip().startswith("1e+308 ")
    assert lines[3].startswith("-1e+308 ")
    assert sum(line.count("*") for line in lines) == 3


def test_render_text_rejects_tiny_plot():
    result = sample(parse_expression("x"), 0.0, 1.0, 2)
    with pytest.raises(ValueError, match="at least"):
        render_text(result, width=4, height=2)


def test_save_plot_writes_png(tmp_path):
    result = sample(parse_expression("1/x"), -1.0, 1.0, 21, expression="1/x")
    out = save_plot(result, tmp_path / "plot.png")

    assert out == tmp_path / "plot.png"
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_save_plot_accepts_str_path(tmp_path):
    result = GraphSamples(xs=np.array([0.0, 1.0]), ys=np.array([0.0, 1.0]))
    out = save_plot(result, str(tmp_path / "line.png"), title="line")
    assert out.is_file()
