"""Unit tests for table_source (format dispatch, SQLite tables, graph stores)."""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from pathlib import Path

import pandas as pd
import pytest

from tgrapher.exceptions import SourceError, TableNotFoundError
from tgrapher.graph.table_source import ANY_TABLE, list_tables, load_table


def _write_sqlite(path: Path, tables: dict[str, pd.DataFrame]) -> Path:
    with closing(sqlite3.connect(path)) as conn:
        for name, df in tables.items():
            df.to_sql(name, conn, index=False)
        conn.commit()
    return path


def test_load_csv(sample_csv, sample_df):
    df = load_table(sample_csv, ANY_TABLE)
    pd.testing.assert_frame_equal(df, sample_df)


def test_load_csv_ignores_table_name_and_comments(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("# produced by a scan\nx,y\n1,2\n3,4\n")
    df = load_table(path, "whatever")
    assert list(df.columns) == ["x", "y"]
    assert df["y"].tolist() == [2, 4]


def test_load_tsv(tmp_path, sample_df):
    path = tmp_path / "data.tsv"
    sample_df.to_csv(path, sep="\t", index=False)
    df = load_table(path, "data")
    assert list(df.columns) == list(sample_df.columns)
    assert len(df) == len(sample_df)


def test_load_whitespace_text(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("x   y\n1.5   2\n  3 4.25\n")
    df = load_table(path)
    assert df["x"].tolist() == [1.5, 3.0]
    assert df["y"].tolist() == [2.0, 4.25]


def test_load_pickle(tmp_path, sample_df):
    path = tmp_path / "data.pkl"
    sample_df.to_pickle(path)
    pd.testing.assert_frame_equal(load_table(path), sample_df)


def test_load_pickle_not_a_dataframe_raises(tmp_path):
    path = tmp_path / "data.pkl"
    pd.to_pickle([1, 2, 3], path)
    with pytest.raises(SourceError, match="DataFrame"):
        load_table(path)


def test_load_sqlite_table(tmp_path, sample_df):
    path = _write_sqlite(tmp_path / "run.db", {"events": sample_df, "other": sample_df.head(2)})
    df = load_table(path, "events")
    assert len(df) == 6
    assert df["qdc"].tolist() == sample_df["qdc"].tolist()
    assert list_tables(path) == ["events", "other"]


def test_load_sqlite_quoted_table_name(tmp_path, sample_df):
    path = _write_sqlite(tmp_path / "run.sqlite", {'odd "name"': sample_df})
    assert len(load_table(path, 'odd "name"')) == 6


def test_load_sqlite_missing_table_lists_available(tmp_path, sample_df):
    path = _write_sqlite(tmp_path / "run.db", {"events": sample_df})
    with pytest.raises(TableNotFoundError) as exc_info:
        load_table(path, "nope")
    assert "nope" in str(exc_info.value)
    assert "events" in str(exc_info.value)


def test_load_graph_store(tmp_path):
    path = tmp_path / "graphs.json"
    store = {
        "schema_version": 1,
        "graphs": {"g1": {"points": {"x": [1, 2], "y": [3, 4], "ex": [0, 0], "ey": [1, 1]}}},
    }
    path.write_text(json.dumps(store))
    df = load_table(path, "g1")
    assert list(df.columns) == ["x", "y", "ex", "ey"]
    assert list_tables(path) == ["g1"]
    with pytest.raises(TableNotFoundError):
        load_table(path, "g2")


def test_json_that_is_not_a_store_raises(tmp_path):
    path = tmp_path / "other.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(SourceError, match="graph store"):
        load_table(path, "g1")


def test_missing_file_raises(tmp_path):
    with pytest.raises(SourceError, match="not found"):
        load_table(tmp_path / "nothing.csv")


def test_unsupported_suffix_raises(tmp_path):
    path = tmp_path / "data.xyz"
    path.write_text("x,y\n1,2\n")
    with pytest.raises(SourceError, match="Unsupported"):
        load_table(path)


def test_empty_csv_raises_source_error(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(SourceError):
        load_table(path)


def test_list_tables_single_table_format_is_empty(sample_csv):
    assert list_tables(sample_csv) == []
