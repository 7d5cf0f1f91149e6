"""
tgrapher: graph two columns of a table against each other.

This package provides:
- load_table: read a table from CSV/TSV/whitespace text, Parquet, pickle,
  SQLite or a saved graph store
- GateSet / DataGate: value-range gates on auxiliary columns (union semantics)
- SeriesBuilder: gated (x, y) series with optional error bars
- FigureGenerator: Plotly scatter figure for a series
- save_graph: export to a JSON graph store, SQLite, CSV or HTML
- the ``tgrapher`` command line tool (tgrapher.app.cli)

For logging configuration in scripts:
    ```python
    from tgrapher.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

import logging

from tgrapher.utils.logging import configure_logging, get_logger

from tgrapher.exceptions import (
    ConfigError,
    ExportError,
    MissingColumnError,
    SourceError,
    TableNotFoundError,
    TGrapherError,
    UsageError,
)
from tgrapher.graph.gate import DataGate, GateSet
from tgrapher.graph.table_source import list_tables, load_table
from tgrapher.graph.series_builder import GraphSeries, SeriesBuilder
from tgrapher.graph.graph_state import DrawOption, GraphState
from tgrapher.graph.figure_generator import FigureGenerator
from tgrapher.graph.graph_writer import save_graph

# NullHandler so library logs don't propagate to root when nothing has
# configured logging. The CLI calls configure_logging() to add a real handler.
_logger = logging.getLogger("tgrapher")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "ConfigError",
    "DataGate",
    "DrawOption",
    "ExportError",
    "FigureGenerator",
    "GateSet",
    "GraphSeries",
    "GraphState",
    "MissingColumnError",
    "SeriesBuilder",
    "SourceError",
    "TGrapherError",
    "TableNotFoundError",
    "UsageError",
    "configure_logging",
    "get_logger",
    "list_tables",
    "load_table",
    "save_graph",
]

__version__ = "0.1.0"
