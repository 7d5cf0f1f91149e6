"""Graph export.

save_graph() writes a series under a name. The graph store (.json) and SQLite
(.db/.sqlite/.sqlite3) targets are updated in place: other graphs/tables
already in the file are kept and only ``name`` is replaced. CSV and HTML
targets hold a single graph and are overwritten.
"""

from __future__ import annotations

import json
import os
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path

import plotly.graph_objects as go
import plotly.io as pio

from tgrapher.exceptions import ExportError
from tgrapher.graph.series_builder import GraphSeries
from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

# Increment on a breaking change to the graph store layout.
STORE_SCHEMA_VERSION: int = 1

STORE_SUFFIXES = {".json"}
SQLITE_SUFFIXES = {".db", ".sqlite", ".sqlite3"}
CSV_SUFFIXES = {".csv"}
HTML_SUFFIXES = {".html", ".htm"}


def _empty_store() -> dict:
    return {"schema_version": STORE_SCHEMA_VERSION, "graphs": {}}


def _load_store(path: Path) -> dict:
    """Existing store at path, or an empty one if the file does not exist yet."""
    if not path.exists():
        return _empty_store()
    try:
        store = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ExportError(f"{path} exists but is not a graph store: {e}") from e
    if not isinstance(store, dict) or not isinstance(store.get("graphs"), dict):
        raise ExportError(f"{path} exists but is not a graph store")
    version = store.get("schema_version")
    if version != STORE_SCHEMA_VERSION:
        logger.warning(
            "Graph store %s has schema_version=%s, expected %s; updating in place",
            path, version, STORE_SCHEMA_VERSION,
        )
        store["schema_version"] = STORE_SCHEMA_VERSION
    return store


def _save_store(path: Path, name: str, series: GraphSeries, figure: dict) -> None:
    store = _load_store(path)
    store["graphs"][name] = {
        "title": series.title,
        "x_name": series.x_name,
        "y_name": series.y_name,
        "saved": datetime.now().isoformat(timespec="seconds"),
        "points": series.to_points(),
        # plotly.io serialises numpy arrays inside the figure dict
        "figure": json.loads(pio.to_json(figure, validate=False)),
    }
    path.write_text(json.dumps(store, indent=2), encoding="utf-8")


def _save_sqlite(path: Path, name: str, series: GraphSeries) -> None:
    with closing(sqlite3.connect(path)) as conn:
        series.to_frame().to_sql(name, conn, if_exists="replace", index=False)
        conn.commit()


def _save_html(path: Path, name: str, figure: dict) -> None:
    go.Figure(figure).write_html(path, include_plotlyjs="cdn", div_id=name)


def save_graph(
    path: str | os.PathLike,
    name: str,
    series: GraphSeries,
    figure: dict,
) -> Path:
    """Write series (and its figure) to path under name.

    Args:
        path: Output file; the suffix selects the format.
        name: Graph name (store key, SQLite table, HTML div id).
        series: Points to write.
        figure: Plotly figure dict from FigureGenerator.make_figure().

    Returns:
        The path written.

    Raises:
        ExportError: Unsupported suffix, empty name, or write failure.
    """
    p = Path(path).expanduser()
    suffix = p.suffix.lower()
    if not name:
        raise ExportError("Graph name must not be empty")
    try:
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)
        if suffix in STORE_SUFFIXES:
            _save_store(p, name, series, figure)
        elif suffix in SQLITE_SUFFIXES:
            _save_sqlite(p, name, series)
        elif suffix in CSV_SUFFIXES:
            series.to_frame().to_csv(p, index=False)
        elif suffix in HTML_SUFFIXES:
            _save_html(p, name, figure)
        else:
            supported = sorted(STORE_SUFFIXES | SQLITE_SUFFIXES | CSV_SUFFIXES | HTML_SUFFIXES)
            raise ExportError(
                f"Unsupported output format {p.suffix!r}",
                {"supported": ", ".join(supported)},
            )
    except (OSError, sqlite3.Error, ValueError) as e:
        raise ExportError(f"Failed to write graph {name!r} to {p}: {e}") from e
    logger.info("Saved graph %r (%s points) to %s", name, len(series), p)
    return p
