"""Tests for evaluating trees and the public expression API."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from mathparse.expr import (
    ArityMismatchError,
    DivisionByZeroError,
    EvalError,
    FunctionDomainError,
    FunctionTable,
    LimitExceededError,
    Negate,
    NumberLiteral,
    UnknownFunctionError,
    UnknownVariableError,
    compile_expression,
    default_environment,
    evaluate,
    get_variables,
    list_constants,
    list_functions,
    parse_expression,
)


def calc(expr, **variables):
    return evaluate(parse_expression(expr), variables)


class TestArithmetic:
    """Test operator semantics."""

    @pytest.mark.parametrize("expr, expected", [
        ("42", 42.0),
        ("1+2*3", 7.0),
        ("(1+2)*3", 9.0),
        ("1-2-3", -4.0),
        ("8/4/2", 1.0),
        ("2*-3", -6.0),
        ("-5", -5.0),
        ("--5", 5.0),
        ("-(-3)", 3.0),
        ("10 - 4 * 2", 2.0),
        ("(10 - 4) * 2", 12.0),
        ("7 / 2", 3.5),
        ("0x1A + 0o17 + 0b101", 46.0),
        ("0xff / 0b11", 85.0),
    ])
    def test_values(self, expr, expected):
        assert calc(expr) == expected

    def test_fractions(self):
        assert calc("0.1 + 0.2") == pytest.approx(0.3)

    def test_result_is_builtin_float(self):
        assert type(calc("1 + 1")) is float
        assert type(calc("sin(0)")) is float

    def test_literal_returned_verbatim(self):
        assert evaluate(NumberLiteral(2.5)) == 2.5


class TestDivisionByZero:
    """Division by exactly zero is an error, not inf or nan."""

    @pytest.mark.parametrize("expr", ["1/0", "0/0", "1/(2-2)", "5/-0", "x/0"])
    def test_raises(self, expr):
        with pytest.raises(DivisionByZeroError):
            calc(expr, x=3.0)

    def test_tiny_divisor_is_fine(self):
        assert calc("1/x", x=1e-300) == pytest.approx(1e300)


class TestVariables:
    """Test environment lookups."""

    def test_lookup(self):
        assert calc("x * 2 + y", x=5, y=3) == 13.0

    def test_unknown_variable(self):
        with pytest.raises(UnknownVariableError, match="y") as info:
            calc("y+1")
        assert info.value.name == "y"

    def test_constants_come_from_environment(self):
        env = default_environment()
        assert evaluate(parse_expression("2 * pi"), env) == pytest.approx(2 * np.pi)
        with pytest.raises(UnknownVariableError):
            evaluate(parse_expression("pi"), {})

    def test_default_environment_extra(self):
        env = default_environment(r=2)
        assert env["r"] == 2.0
        assert evaluate(parse_expression("pi * r * r"), env) == pytest.approx(4 * np.pi)

    def test_default_environment_is_fresh(self):
        env = default_environment()
        env["pi"] = 3.0
        assert default_environment()["pi"] == pytest.approx(np.pi)

    def test_reuse_tree_with_different_bindings(self):
        tree = parse_expression("x*2")
        assert evaluate(tree, {"x": 0.0}) == 0.0
        assert evaluate(tree, {"x": 1.0}) == 2.0
        assert evaluate(tree, {"x": 0.0}) == 0.0

    def test_evaluation_does_not_mutate_inputs(self):
        tree = parse_expression("a + max(a, b) / 2")
        env = {"a": 1.0, "b": 4.0}
        functions = FunctionTable.builtin()
        before_tree, before_env, before_names = tree, dict(env), functions.names()
        evaluate(tree, env, functions)
        assert tree == before_tree
        assert env == before_env
        assert functions.names() == before_names

    def test_parallel_evaluation_with_distinct_bindings(self):
        tree = parse_expression("x * 2 + sin(0)")
        functions = FunctionTable.builtin()
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda x: evaluate(tree, {"x": float(x)}, functions), range(20)))
        assert results == [2.0 * x for x in range(20)]


class TestFunctions:
    """Test built-in functions and calls."""

    @pytest.mark.parametrize("expr, expected", [
        ("sqrt(16)", 4.0),
        ("abs(-3)", 3.0),
        ("floor(-1.5)", -2.0),
        ("ceil(1.2)", 2.0),
        ("round(3.7)", 4.0),
        ("sign(-4)", -1.0),
        ("pow(2, 10)", 1024.0),
        ("hypot(3, 4)", 5.0),
        ("clamp(5, 0, 1)", 1.0),
        ("lerp(0, 10, 0.5)", 5.0),
        ("smoothstep(0, 1, 0.5)", 0.5),
        ("max(1, 5, 3)", 5.0),
        ("min(4)", 4.0),
        ("mean(1, 2, 3)", 2.0),
        ("max(abs(-5), min(3, 7))", 5.0),
        ("sqrt(abs(-16))", 4.0),
    ])
    def test_values(self, expr, expected):
        assert calc(expr) == pytest.approx(expected)

    def test_trig(self):
        assert calc("sin(pi / 2)", pi=np.pi) == pytest.approx(1.0)
        assert calc("cos(0)") == pytest.approx(1.0)
        assert calc("atan(1) * 4") == pytest.approx(np.pi)

    def test_cbrt(self):
        assert calc("cbrt(27)") == pytest.approx(3.0)

    def test_exp_log(self):
        assert calc("log(exp(2))") == pytest.approx(2.0)

    def test_underflow_is_zero(self):
        assert calc("exp(-1000)") == 0.0

    @pytest.mark.parametrize("expr", [
        "sqrt(-1)",
        "log(0)",
        "log(-2)",
        "asin(2)",
        "acos(-1.5)",
        "exp(1000)",
        "pow(-8, 0.5)",
        "pow(0, -1)",
        "clamp(1, 2, 0)",
        "smoothstep(1, 1, 0.5)",
    ])
    def test_domain_errors(self, expr):
        with pytest.raises(FunctionDomainError):
            calc(expr)

    def test_domain_error_names_function(self):
        with pytest.raises(FunctionDomainError, match="sqrt") as info:
            calc("sqrt(-4)")
        assert info.value.name == "sqrt"

    def test_unknown_function(self):
        with pytest.raises(UnknownFunctionError, match="foo") as info:
            calc("foo(1)")
        assert info.value.name == "foo"

    def test_arguments_evaluated_before_lookup(self):
        with pytest.raises(UnknownVariableError):
            calc("foo(y)")

    def test_wrong_arity(self):
        with pytest.raises(ArityMismatchError, match="expects 1 args, got 2") as info:
            calc("sin(1, 2)")
        assert (info.value.expected, info.value.actual) == (1, 2)

    def test_zero_args_to_fixed_arity(self):
        with pytest.raises(ArityMismatchError):
            calc("abs()")

    def test_variadic_minimum(self):
        with pytest.raises(ArityMismatchError, match="at least 1") as info:
            calc("max()")
        assert info.value.variadic

    def test_eval_errors_share_base(self):
        for cls in (
            UnknownVariableError,
            UnknownFunctionError,
            ArityMismatchError,
            DivisionByZeroError,
            FunctionDomainError,
        ):
            assert issubclass(cls, EvalError)


class TestFunctionTable:
    """Caller-supplied function tables."""

    def test_empty_table_knows_nothing(self):
        with pytest.raises(UnknownFunctionError):
            evaluate(parse_expression("sin(0)"), {}, FunctionTable())

    def test_custom_function(self):
        table = FunctionTable()
        table.register("double", lambda x: 2 * x, 1)
        assert evaluate(parse_expression("double(4) + 1"), {}, table) == 9.0

    def test_zero_arity_function(self):
        table = FunctionTable()
        table.register("answer", lambda: 42, 0)
        assert evaluate(parse_expression("answer()"), {}, table) == 42.0
        with pytest.raises(ArityMismatchError):
            evaluate(parse_expression("answer(1)"), {}, table)

    def test_value_error_becomes_domain_error(self):
        def picky(x):
            raise ValueError("only on Tuesdays")

        table = FunctionTable()
        table.register("picky", picky, 1)
        with pytest.raises(FunctionDomainError, match="only on Tuesdays"):
            evaluate(parse_expression("picky(1)"), {}, table)

    def test_register_rejects_uncallable_names(self):
        table = FunctionTable()
        with pytest.raises(ValueError):
            table.register("log10", np.log10, 1)
        with pytest.raises(ValueError):
            table.register("my_fn", abs, 1)

    def test_builtin_tables_are_independent(self):
        a = FunctionTable.builtin()
        b = FunctionTable.builtin()
        a.register("extra", lambda x: x, 1)
        assert "extra" in a
        assert "extra" not in b

    def test_lookup(self):
        table = FunctionTable.builtin()
        assert table.lookup("sin").arity == 1
        assert table.lookup("nope") is None
        assert table.arities()["clamp"] == 3


class TestLimits:
    def test_deep_tree_reports_limit(self):
        tree = NumberLiteral(1.0)
        for _ in range(5000):
            tree = Negate(tree)
        with pytest.raises(LimitExceededError):
            evaluate(tree)


class TestPublicApi:
    """Test compile/introspection helpers."""

    def test_compile_expression(self):
        fn = compile_expression("x * 2")
        assert fn({"x": 3.0}) == 6.0
        assert fn({"x": -1.0}) == -2.0

    def test_compile_with_custom_table(self):
        table = FunctionTable()
        table.register("inc", lambda x: x + 1, 1)
        fn = compile_expression("inc(x)", functions=table)
        assert fn({"x": 1.0}) == 2.0

    def test_get_variables(self):
        assert get_variables("x + y * sin(z)") == {"x", "y", "z"}
        assert get_variables("x + x * x") == {"x"}
        assert get_variables("max(1, 2)") == set()

    def test_get_variables_from_tree(self):
        assert get_variables(parse_expression("a - -b")) == {"a", "b"}

    def test_list_functions(self):
        funcs = list_functions()
        assert funcs["sin"] == 1
        assert funcs["clamp"] == 3
        assert funcs["max"] == 1
        assert all(name.isalpha() for name in funcs)

    def test_list_constants(self):
        consts = list_constants()
        assert set(consts) == {"pi", "e", "tau"}
        assert consts["tau"] == pytest.approx(2 * np.pi)
