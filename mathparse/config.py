"""Optional user configuration loaded from ``mathparse.toml``.

Everything has a default, so a missing file is not an error. A file that is
present must be valid.
"""

from __future__ import annotations

import logging
import math
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mathparse import defaults

logger = logging.getLogger("mathparse.config")

CONFIG_VERSION = 1


class ConfigError(Exception):
    """Raised for invalid user configuration."""


@dataclass(frozen=True)
class ParserConfig:
    max_depth: int = defaults.DEFAULT_MAX_DEPTH


@dataclass(frozen=True)
class GraphConfig:
    x_min: float = defaults.DEFAULT_GRAPH_X_MIN
    x_max: float = defaults.DEFAULT_GRAPH_X_MAX
    samples: int = defaults.DEFAULT_GRAPH_SAMPLES
    width: int = defaults.DEFAULT_PLOT_WIDTH
    height: int = defaults.DEFAULT_PLOT_HEIGHT
    variable: str = defaults.DEFAULT_GRAPH_VARIABLE


@dataclass(frozen=True)
class MathparseConfig:
    parser: ParserConfig = field(default_factory=ParserConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    constants: dict[str, float] = field(default_factory=dict)
    source: Path | None = None


def find_config(start: Path) -> Path | None:
    """Walk upward from ``start`` looking for ``mathparse.toml``."""

    cur = start.resolve()
    if cur.is_file():
        cur = cur.parent
    while True:
        candidate = cur / defaults.CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if cur.parent == cur:
            return None
        cur = cur.parent


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigError(f"Expected {name} to be an integer.")
    return value


def _as_float(value: Any, *, name: str) -> float:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ConfigError(f"Expected {name} to be a number.")
    if not math.isfinite(value):
        raise ConfigError(f"Expected {name} to be finite.")
    return float(value)


def _as_name(value: Any, *, name: str) -> str:
    # Identifiers in expressions are ASCII letters only.
    if not isinstance(value, str) or not (value.isascii() and value.isalpha()):
        raise ConfigError(f"Expected {name} to be a name made of ASCII letters.")
    return value


def load_config(path: Path | None = None, *, search_from: Path | None = None) -> MathparseConfig:
    """Load and validate configuration.

    With an explicit ``path`` the file must exist. Otherwise the file is
    searched for upward from ``search_from`` (default: cwd) and defaults are
    returned when none is found.
    """

    if path is None:
        path = find_config(search_from if search_from is not None else Path.cwd())
        if path is None:
            return MathparseConfig()

    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise ConfigError(f"Missing config file: {path}") from e
    except OSError as e:
        raise ConfigError(f"Failed reading config file: {path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config is not valid UTF-8: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    version = data.get("version", None)
    if version is None:
        raise ConfigError(f"Missing required `version = {CONFIG_VERSION}` in {path}.")
    version_i = _as_int(version, name="version")
    if version_i != CONFIG_VERSION:
        raise ConfigError(f"Unsupported config version: {version_i} (expected {CONFIG_VERSION}).")

    parser_tbl = _as_table(data.get("parser"), name="parser")
    graph_tbl = _as_table(data.get("graph"), name="graph")
    constants_tbl = _as_table(data.get("constants"), name="constants")

    parser = ParserConfig(
        max_depth=_as_int(parser_tbl.get("max_depth", defaults.DEFAULT_MAX_DEPTH), name="parser.max_depth"),
    )

    graph = GraphConfig(
        x_min=_as_float(graph_tbl.get("x_min", defaults.DEFAULT_GRAPH_X_MIN), name="graph.x_min"),
        x_max=_as_float(graph_tbl.get("x_max", defaults.DEFAULT_GRAPH_X_MAX), name="graph.x_max"),
        samples=_as_int(graph_tbl.get("samples", defaults.DEFAULT_GRAPH_SAMPLES), name="graph.samples"),
        width=_as_int(graph_tbl.get("width", defaults.DEFAULT_PLOT_WIDTH), name="graph.width"),
        height=_as_int(graph_tbl.get("height", defaults.DEFAULT_PLOT_HEIGHT), name="graph.height"),
        variable=_as_name(
            graph_tbl.get("variable", defaults.DEFAULT_GRAPH_VARIABLE), name="graph.variable"
        ),
    )

    constants: dict[str, float] = {}
    for key, value in constants_tbl.items():
        _as_name(key, name=f"constant name {key!r}")
        constants[key] = _as_float(value, name=f"constants.{key}")

    # Validation
    if not 1 <= parser.max_depth <= defaults.MAX_PARSER_DEPTH:
        raise ConfigError(
            f"Invalid config: parser.max_depth must be between 1 and {defaults.MAX_PARSER_DEPTH}."
        )

    if graph.x_max <= graph.x_min:
        raise ConfigError("Invalid config: graph.x_max must be greater than graph.x_min.")

    if not defaults.MIN_GRAPH_SAMPLES <= graph.samples <= defaults.MAX_GRAPH_SAMPLES:
        raise ConfigError(
            f"Invalid config: graph.samples must be between {defaults.MIN_GRAPH_SAMPLES} "
            f"and {defaults.MAX_GRAPH_SAMPLES}."
        )

    if graph.width < defaults.MIN_PLOT_WIDTH or graph.height < defaults.MIN_PLOT_HEIGHT:
        raise ConfigError(
            f"Invalid config: graph plot must be at least "
            f"{defaults.MIN_PLOT_WIDTH}x{defaults.MIN_PLOT_HEIGHT}."
        )

    logger.debug("Loaded config from %s", path)
    return MathparseConfig(parser=parser, graph=graph, constants=constants, source=path)
