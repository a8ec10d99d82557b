from __future__ import annotations

import argparse
import logging
import math
import sys
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import TextIO

from mathparse import __version__, defaults
from mathparse.config import ConfigError, MathparseConfig, load_config
from mathparse.diagnostics import format_error
from mathparse.expr import (
    CONSTANTS,
    ExprError,
    FunctionTable,
    Node,
    Token,
    TokenKind,
    default_environment,
    dump,
    evaluate,
    parse,
    tokenize,
)

logger = logging.getLogger("mathparse.cli")

EXIT_OK = 0
EXIT_EXPRESSION_ERROR = 1
EXIT_USAGE = 2
EXIT_CONFIG_ERROR = 3


def _binding(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not value.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    if not (name.isascii() and name.isalpha()):
        raise argparse.ArgumentTypeError(f"variable names are ASCII letters only, got {name!r}")
    return name, value.strip()


def _variable_name(text: str) -> str:
    if not (text.isascii() and text.isalpha()):
        raise argparse.ArgumentTypeError(f"variable names are ASCII letters only, got {text!r}")
    return text


def _add_binding_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--set",
        dest="bindings",
        type=_binding,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Bind a variable; VALUE may itself be an expression (repeatable).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mathparse", description="Math expression parser.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to {defaults.CONFIG_FILENAME} (defaults to searching upward from cwd).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print the input, tokens and AST; enable debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    calc_p = subparsers.add_parser("calc", help="Evaluate an expression once.")
    calc_p.add_argument("expression")
    _add_binding_flags(calc_p)

    graph_p = subparsers.add_parser("graph", help="Sample an expression over a range of x.")
    graph_p.add_argument("expression")
    _add_binding_flags(graph_p)
    graph_p.add_argument("--from", dest="x_min", type=float, default=None, help="Start of range.")
    graph_p.add_argument("--to", dest="x_max", type=float, default=None, help="End of range.")
    graph_p.add_argument("--samples", type=int, default=None, help="Number of sample points.")
    graph_p.add_argument(
        "--var", dest="variable", type=_variable_name, default=None, help="Swept variable name."
    )
    graph_p.add_argument("--width", type=int, default=None, help="Plot width in characters.")
    graph_p.add_argument("--height", type=int, default=None, help="Plot height in characters.")
    graph_p.add_argument("--table", action="store_true", help="Print x/y pairs instead of a plot.")
    graph_p.add_argument("--output", type=str, default=None, help="Also save the plot as an image.")

    subparsers.add_parser("cli", help="Interactive mode: evaluate one expression per line.")
    subparsers.add_parser("functions", help="List built-in functions and constants.")

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def format_number(value: float) -> str:
    """Integral values without a trailing ``.0``, everything else at full precision."""
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _format_token(token: Token) -> str:
    if token.kind is TokenKind.OPERATOR:
        shown = token.value.value
    elif token.kind is TokenKind.NUMBER:
        shown = format_number(token.value)
    else:
        shown = "" if token.value is None else token.value
    return f"{token.pos:>4}  {token.kind.name:<8} {shown}".rstrip()


def _print_verbose(
    expr: str, tokens: Sequence[Token], tree: Node, out: TextIO | None = None
) -> None:
    print(f"> Input\n{expr}", file=out)
    print("> Tokens", file=out)
    for token in tokens:
        print(_format_token(token), file=out)
    print(f"> AST\n{dump(tree)}\n> Value", file=out)


def _load_config(args: argparse.Namespace) -> MathparseConfig:
    path = Path(args.config).resolve() if args.config else None
    return load_config(path)


def _environment(
    cfg: MathparseConfig, bindings: Iterable[tuple[str, str]]
) -> dict[str, float] | None:
    """Constants, then config constants, then ``--set`` bindings in order.

    Each binding is evaluated against everything bound before it. Returns None
    after reporting the first binding that fails.
    """
    env = default_environment(**cfg.constants)
    functions = FunctionTable.builtin()
    for name, text in bindings:
        try:
            env[name] = evaluate(parse(tokenize(text), cfg.parser.max_depth), env, functions)
        except ExprError as e:
            _eprint(f"in --set {name}=...:")
            _eprint(format_error(text, e))
            return None
    return env


def _compile(expr: str, cfg: MathparseConfig, verbose: bool) -> Node:
    tokens = tokenize(expr)
    tree = parse(tokens, cfg.parser.max_depth)
    if verbose:
        _print_verbose(expr, tokens, tree)
    return tree


def cmd_calc(args: argparse.Namespace, cfg: MathparseConfig) -> int:
    source = args.expression
    env = _environment(cfg, args.bindings)
    if env is None:
        return EXIT_EXPRESSION_ERROR
    try:
        tree = _compile(source, cfg, args.verbose)
        value = evaluate(tree, env, FunctionTable.builtin())
    except ExprError as e:
        _eprint(format_error(source, e))
        return EXIT_EXPRESSION_ERROR

    print(f"{source} = {format_number(value)}")
    return EXIT_OK


def cmd_graph(args: argparse.Namespace, cfg: MathparseConfig) -> int:
    from mathparse import graph

    source = args.expression
    g = cfg.graph
    x_min = g.x_min if args.x_min is None else args.x_min
    x_max = g.x_max if args.x_max is None else args.x_max
    samples = g.samples if args.samples is None else args.samples
    variable = g.variable if args.variable is None else args.variable
    width = g.width if args.width is None else args.width
    height = g.height if args.height is None else args.height

    env = _environment(cfg, args.bindings)
    if env is None:
        return EXIT_EXPRESSION_ERROR
    try:
        tree = _compile(source, cfg, args.verbose)
        result = graph.sample(
            tree,
            x_min=x_min,
            x_max=x_max,
            samples=samples,
            variables=env,
            functions=FunctionTable.builtin(),
            variable=variable,
            expression=source,
        )
        plot = None if args.table else graph.render_text(result, width=width, height=height)
    except ExprError as e:
        _eprint(format_error(source, e))
        return EXIT_EXPRESSION_ERROR
    except ValueError as e:
        _eprint(f"error: {e}")
        return EXIT_USAGE

    if args.table:
        for x, y in result.pairs():
            shown = format_number(y) if math.isfinite(y) else "undefined"
            print(f"{format_number(x)}\t{shown}")
    else:
        print(plot)

    if result.gaps:
        _eprint(f"warn: {result.gaps} of {samples} samples are undefined")

    if args.output:
        try:
            saved = graph.save_plot(result, args.output)
        except OSError as e:
            _eprint(f"error: failed writing {args.output}: {e}")
            return EXIT_USAGE
        print(f"Saved plot to {saved}")
    return EXIT_OK


def _iter_lines(stream: TextIO, prompt: str) -> Iterator[str]:
    if stream is sys.stdin and stream.isatty():
        while True:
            try:
                yield input(prompt)
            except EOFError:
                print()
                return
    else:
        yield from stream


def run_repl(
    lines: Iterable[str],
    variables: Mapping[str, float],
    functions: FunctionTable,
    max_depth: int = defaults.DEFAULT_MAX_DEPTH,
    out: TextIO | None = None,
    err: TextIO | None = None,
    verbose: bool = False,
) -> int:
    """Evaluate each non-blank line and print its value or error.

    Lines are independent; an error is reported and the loop moves on.

    Returns:
        Number of lines that failed
    """
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    failures = 0

    for line in lines:
        source = line.strip()
        if not source:
            continue
        try:
            tokens = tokenize(source)
            tree = parse(tokens, max_depth)
            if verbose:
                _print_verbose(source, tokens, tree, out)
            value = evaluate(tree, variables, functions)
        except ExprError as e:
            failures += 1
            print(format_error(source, e), file=err)
            continue
        print(format_number(value), file=out)

    return failures


def cmd_cli(args: argparse.Namespace, cfg: MathparseConfig) -> int:
    env = default_environment(**cfg.constants)
    try:
        failures = run_repl(
            _iter_lines(sys.stdin, defaults.REPL_PROMPT),
            env,
            FunctionTable.builtin(),
            max_depth=cfg.parser.max_depth,
            verbose=args.verbose,
        )
    except KeyboardInterrupt:
        print()
        return EXIT_OK
    logger.debug("Session ended with %d failed line(s)", failures)
    return EXIT_OK


def cmd_functions(args: argparse.Namespace, cfg: MathparseConfig) -> int:
    table = FunctionTable.builtin()
    print("Functions:")
    for name in table.names():
        fn = table.lookup(name)
        count = f"{fn.arity}+" if fn.variadic else str(fn.arity)
        print(f"  {name:<12} {count} arg(s)")
    print("Constants:")
    for name, value in {**CONSTANTS, **cfg.constants}.items():
        print(f"  {name:<12} {format_number(value)}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_USAGE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = _load_config(args)
    except ConfigError as e:
        _eprint(f"error: {e}")
        return EXIT_CONFIG_ERROR

    if args.command == "calc":
        return cmd_calc(args, cfg)
    if args.command == "graph":
        return cmd_graph(args, cfg)
    if args.command == "cli":
        return cmd_cli(args, cfg)
    if args.command == "functions":
        return cmd_functions(args, cfg)

    return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
