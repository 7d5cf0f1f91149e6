"""Table loading for tgrapher.

Resolves ``<filename> <table>`` from the command line into a pandas DataFrame.
The file suffix picks the reader:

- .csv, .tsv/.tab, .txt/.dat: delimited text (``#`` lines are comments)
- .parquet, .pkl/.pickle: single pandas tables
- .db/.sqlite/.sqlite3: SQLite, ``table`` names a table or view
- .json: a graph store written by tgrapher.graph.graph_writer, ``table`` names
  a saved graph
"""

from __future__ import annotations

import json
import os
import pickle
import sqlite3
from contextlib import closing
from pathlib import Path

import pandas as pd

from tgrapher.exceptions import SourceError, TableNotFoundError
from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

# Placeholder table name for single-table formats.
ANY_TABLE = "-"

TEXT_SEPARATORS: dict[str, str] = {
    ".csv": ",",
    ".tsv": "\t",
    ".tab": "\t",
    ".txt": r"\s+",
    ".dat": r"\s+",
}
PARQUET_SUFFIXES = {".parquet"}
PICKLE_SUFFIXES = {".pkl", ".pickle"}
SQLITE_SUFFIXES = {".db", ".sqlite", ".sqlite3"}
STORE_SUFFIXES = {".json"}

SINGLE_TABLE_SUFFIXES = set(TEXT_SEPARATORS) | PARQUET_SUFFIXES | PICKLE_SUFFIXES
SUPPORTED_SUFFIXES = SINGLE_TABLE_SUFFIXES | SQLITE_SUFFIXES | STORE_SUFFIXES


def _suffix(path: Path) -> str:
    return path.suffix.lower()


def _check_path(path: str | os.PathLike) -> Path:
    p = Path(path).expanduser()
    if not p.exists():
        raise SourceError(f"Failed to load input file: {p} not found")
    if not p.is_file():
        raise SourceError(f"Failed to load input file: {p} is not a file")
    if _suffix(p) not in SUPPORTED_SUFFIXES:
        raise SourceError(
            f"Unsupported input format {p.suffix!r}",
            {"supported": ", ".join(sorted(SUPPORTED_SUFFIXES))},
        )
    return p


def _sqlite_tables(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type IN ('table', 'view') "
        "AND name NOT LIKE 'sqlite_%' ORDER BY name"
    ).fetchall()
    return [r[0] for r in rows]


def _connect_read_only(path: Path) -> sqlite3.Connection:
    return sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _read_store(path: Path) -> dict:
    try:
        store = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SourceError(f"Failed to load graph store {path}: {e}") from e
    if not isinstance(store, dict) or not isinstance(store.get("graphs"), dict):
        raise SourceError(f"{path} is not a tgrapher graph store")
    return store


def list_tables(path: str | os.PathLike) -> list[str]:
    """Names of the tables in a multi-table file (SQLite or graph store).

    Single-table formats return an empty list.
    """
    p = _check_path(path)
    suffix = _suffix(p)
    if suffix in SQLITE_SUFFIXES:
        try:
            with closing(_connect_read_only(p)) as conn:
                return _sqlite_tables(conn)
        except sqlite3.Error as e:
            raise SourceError(f"Failed to load input file {p}: {e}") from e
    if suffix in STORE_SUFFIXES:
        return sorted(_read_store(p)["graphs"])
    return []


def _load_sqlite(path: Path, table: str) -> pd.DataFrame:
    try:
        with closing(_connect_read_only(path)) as conn:
            tables = _sqlite_tables(conn)
            if table not in tables:
                raise TableNotFoundError(
                    f"Failed to load input table {table!r}",
                    {"available": ", ".join(tables) or "(none)"},
                )
            return pd.read_sql_query(f"SELECT * FROM {_quote_identifier(table)}", conn)
    except (sqlite3.Error, pd.errors.DatabaseError) as e:
        raise SourceError(f"Failed to load input file {path}: {e}") from e


def _load_store(path: Path, table: str) -> pd.DataFrame:
    graphs = _read_store(path)["graphs"]
    entry = graphs.get(table)
    if entry is None:
        raise TableNotFoundError(
            f"Failed to load input table {table!r}",
            {"available": ", ".join(sorted(graphs)) or "(none)"},
        )
    points = entry.get("points") or {}
    return pd.DataFrame({k: points[k] for k in ("x", "y", "ex", "ey") if k in points})


def _load_single(path: Path, table: str) -> pd.DataFrame:
    if table not in (ANY_TABLE, path.stem):
        logger.debug("%s holds a single table; treating %r as its name", path.name, table)
    suffix = _suffix(path)
    try:
        if suffix in PARQUET_SUFFIXES:
            return pd.read_parquet(path)
        if suffix in PICKLE_SUFFIXES:
            df = pd.read_pickle(path)
            if not isinstance(df, pd.DataFrame):
                raise SourceError(f"{path} does not contain a pandas DataFrame")
            return df
        sep = TEXT_SEPARATORS[suffix]
        return pd.read_csv(path, sep=sep, comment="#")
    except (OSError, ValueError, ImportError, pickle.UnpicklingError) as e:
        # pandas raises ValueError subclasses (ParserError, EmptyDataError) for bad text
        raise SourceError(f"Failed to load input file {path}: {e}") from e


def load_table(path: str | os.PathLike, table: str = ANY_TABLE) -> pd.DataFrame:
    """Load ``table`` from the file at ``path``.

    Args:
        path: Input file; the suffix selects the reader.
        table: Table/view name for SQLite, graph name for a graph store. For
            single-table formats it only names the dataset.

    Returns:
        The table as a DataFrame, rows in file order.

    Raises:
        SourceError: File missing, unreadable, or of an unsupported format.
        TableNotFoundError: ``table`` is not present in a multi-table file.
    """
    p = _check_path(path)
    suffix = _suffix(p)
    if suffix in SQLITE_SUFFIXES:
        df = _load_sqlite(p, table)
    elif suffix in STORE_SUFFIXES:
        df = _load_store(p, table)
    else:
        df = _load_single(p, table)
    logger.info("Loaded %s rows x %s columns from %s (table=%s)", len(df), len(df.columns), p, table)
    return df
