"""tgrapher command line.

Usage:
    tgrapher <filename> <table> <x_column> <y_column> [options]

Loads the table, applies the gates, prints a summary, optionally saves the
graph, and (unless --batch) shows it in a window where a cut can be drawn.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, TextIO

from tgrapher import __version__
from tgrapher.exceptions import TGrapherError, UsageError
from tgrapher.graph.figure_generator import FigureGenerator
from tgrapher.graph.gate import GateSet
from tgrapher.graph.graph_config import GraphConfig
from tgrapher.graph.graph_writer import save_graph
from tgrapher.graph.series_builder import GraphSeries, SeriesBuilder
from tgrapher.graph.table_source import load_table
from tgrapher.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

PROG = "tgrapher"


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with status 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


@dataclass(frozen=True)
class GraphRequest:
    """Everything one tgrapher run needs, as parsed from the command line."""
    filename: Path
    table: str
    xcol: str
    ycol: str
    xerr: Optional[str] = None
    yerr: Optional[str] = None
    save_path: Optional[Path] = None
    save_name: Optional[str] = None
    gates: tuple[tuple[str, float, float], ...] = ()
    draw_option: Optional[str] = None
    cut: bool = False
    batch: bool = False
    config_path: Optional[Path] = None
    write_config: bool = False
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description="Graph one column of a table against another, with optional gates and error bars.",
    )
    parser.add_argument("filename", type=Path, help="input file (.csv .tsv .txt .parquet .pkl .db .sqlite .json)")
    parser.add_argument("table", help="table name (SQLite table/view, saved graph name; '-' for single-table files)")
    parser.add_argument("x_column", help="column for the x-axis")
    parser.add_argument("y_column", help="column for the y-axis")
    parser.add_argument("--xerror", metavar="NAME", help="column containing the x-axis errors")
    parser.add_argument("--yerror", metavar="NAME", help="column containing the y-axis errors")
    parser.add_argument("--save", nargs=2, metavar=("FILENAME", "NAME"),
                        help="save the graph as NAME in FILENAME (.json .db .sqlite .csv .html)")
    parser.add_argument("--gate", nargs=3, action="append", default=[], metavar=("NAME", "LOW", "HIGH"),
                        help="keep rows with LOW <= NAME <= HIGH; repeat to add gates or ranges")
    parser.add_argument("--opt", metavar="STR", help="draw option, e.g. AP, APL, AC, A*Z (default from config, 'AP')")
    parser.add_argument("--cut", action="store_true", help="draw a cut on the graph and print the entries inside it")
    parser.add_argument("--batch", action="store_true", help="do not open a window")
    parser.add_argument("--config", type=Path, metavar="PATH", help="graph defaults file (default: per-user config)")
    parser.add_argument("--write-config", action="store_true",
                        help="store the draw option of this run as the default in the config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _parse_gates(raw: Sequence[Sequence[str]]) -> tuple[tuple[str, float, float], ...]:
    gates = []
    for name, low, high in raw:
        try:
            gates.append((name, float(low), float(high)))
        except ValueError:
            raise UsageError(f"argument --gate: limits for {name!r} must be numbers, got {low!r} {high!r}") from None
    return tuple(gates)


def _split_gate_args(argv: Sequence[str]) -> tuple[list[str], list[list[str]]]:
    """Pull complete ``--gate NAME LOW HIGH`` triples out of argv.

    The three tokens after --gate are taken verbatim, so bounds such as -1e3
    are not mistaken for options. An incomplete --gate is left for argparse.
    """
    rest: list[str] = []
    gates: list[list[str]] = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "--":
            rest.extend(argv[i:])
            break
        if token == "--gate" and i + 3 < len(argv):
            gates.append(list(argv[i + 1:i + 4]))
            i += 4
            continue
        rest.append(token)
        i += 1
    return rest, gates


def parse_args(argv: Optional[Sequence[str]] = None) -> GraphRequest:
    """Parse argv into a GraphRequest.

    Raises:
        UsageError: Invalid command line.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    rest, raw_gates = _split_gate_args(argv)
    ns = build_parser().parse_args(rest)
    if not ns.x_column:
        raise UsageError("No column name specified for x-axis")
    if not ns.y_column:
        raise UsageError("No column name specified for y-axis")
    save_path, save_name = (Path(ns.save[0]), ns.save[1]) if ns.save else (None, None)
    return GraphRequest(
        filename=ns.filename,
        table=ns.table,
        xcol=ns.x_column,
        ycol=ns.y_column,
        xerr=ns.xerror,
        yerr=ns.yerror,
        save_path=save_path,
        save_name=save_name,
        gates=_parse_gates(raw_gates + ns.gate),
        draw_option=ns.opt,
        # no window to draw a cut on in batch mode
        cut=ns.cut and not ns.batch,
        batch=ns.batch,
        config_path=ns.config,
        write_config=ns.write_config,
        verbose=ns.verbose,
    )


def print_header(request: GraphRequest, gates: GateSet, n_entries: int, out: TextIO) -> None:
    print(f" Graphing {request.ycol} vs. {request.xcol}", file=out)
    for gate in gates.enabled_gates():
        print(f"  For {gate.name} in range {gate.describe()}", file=out)
    if request.xerr:
        print(f"  Using {request.xerr} as x-axis errors", file=out)
    if request.yerr:
        print(f"  Using {request.yerr} as y-axis errors", file=out)
    print(f"  Processing {n_entries} entries", file=out)


def build_series(request: GraphRequest, out: TextIO) -> GraphSeries:
    """Load the table, apply the gates and report progress to out."""
    df = load_table(request.filename, request.table)
    gates = GateSet.from_specs(request.gates)
    builder = SeriesBuilder(df, request.xcol, request.ycol, xerr=request.xerr, yerr=request.yerr, gates=gates)
    print_header(request, gates, len(df), out)
    series = builder.build()
    if len(gates):
        print(f" Done! Found {builder.valid_count} valid entries in table.", file=out)
    return series


def run(request: GraphRequest, *, out: Optional[TextIO] = None) -> int:
    """Execute a parsed request. Returns the exit code."""
    out = out if out is not None else sys.stdout

    config = GraphConfig.load(config_path=request.config_path)
    if request.write_config and request.draw_option is not None:
        config.data.draw_option = request.draw_option
        config.save()
    state = config.to_graph_state(draw_option=request.draw_option, cut=request.cut)

    series = build_series(request, out)
    figure = FigureGenerator(state).make_figure(series)

    if request.save_path is not None:
        save_graph(request.save_path, request.save_name, series, figure)
        print(f" Wrote graph to file '{request.save_path}'", file=out)

    if not request.batch:
        from tgrapher.app.graph_app import run_graph_window
        window = run_graph_window(series, state, cut=request.cut, window_size=config.window_size)
        if request.cut:
            logger.info("Final cut holds %s point(s)", len(window.cut.indices))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console script entry point."""
    try:
        request = parse_args(argv)
    except UsageError as e:
        print(f" Error! {e}", file=sys.stderr)
        build_parser().print_help(sys.stderr)
        return 1

    configure_logging(level="DEBUG" if request.verbose else None)
    logger.debug("Request: %s", request)

    try:
        return run(request)
    except TGrapherError as e:
        print(f" Error! {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
