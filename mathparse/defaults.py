"""Central place for mathparse default settings."""

# Parser
DEFAULT_MAX_DEPTH: int = 100  # Nested parens / unary minus / call arguments
MAX_PARSER_DEPTH: int = 1000  # Upper bound accepted from config

# Graph sampling (x = 0, 1, ..., 10)
DEFAULT_GRAPH_VARIABLE: str = "x"
DEFAULT_GRAPH_X_MIN: float = 0.0
DEFAULT_GRAPH_X_MAX: float = 10.0
DEFAULT_GRAPH_SAMPLES: int = 11
MIN_GRAPH_SAMPLES: int = 2
MAX_GRAPH_SAMPLES: int = 100_000

# Text plot size in character cells
DEFAULT_PLOT_WIDTH: int = 60
DEFAULT_PLOT_HEIGHT: int = 20
MIN_PLOT_WIDTH: int = 8
MIN_PLOT_HEIGHT: int = 4

# Text plot glyphs
PLOT_POINT_CHAR: str = "*"
PLOT_X_AXIS_CHAR: str = "-"
PLOT_Y_AXIS_CHAR: str = "|"
PLOT_ORIGIN_CHAR: str = "+"

# Image export
DEFAULT_PLOT_DPI: int = 100
DEFAULT_PLOT_FIGSIZE: tuple[float, float] = (8.0, 5.0)

# Interactive mode
REPL_PROMPT: str = "> "

# Config file looked up from the working directory upward
CONFIG_FILENAME: str = "mathparse.toml"
