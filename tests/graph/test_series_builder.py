"""Unit tests for SeriesBuilder and GraphSeries."""

import numpy as np
import pandas as pd
import pytest

from tgrapher.exceptions import MissingColumnError
from tgrapher.graph.gate import GateSet
from tgrapher.graph.series_builder import GraphSeries, SeriesBuilder


def test_build_without_gates_keeps_all_rows_in_order(sample_df):
    series = SeriesBuilder(sample_df, "energy", "tof").build()
    assert series.x.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    assert series.y.tolist() == [10.0, 20.0, 30.0, 40.0, 50.0, 60.0]
    assert series.row_index.tolist() == [0, 1, 2, 3, 4, 5]
    assert series.has_errors is False
    assert series.ex is None and series.ey is None
    assert series.total_entries == 6
    assert series.title == "tof vs. energy"


def test_build_with_gates(sample_df):
    gates = GateSet.from_specs([("qdc", 200, 450), ("qdc", 800, 900)])
    builder = SeriesBuilder(sample_df, "energy", "tof", gates=gates)
    series = builder.build()
    assert series.x.tolist() == [2.0, 3.0, 6.0]
    assert series.row_index.tolist() == [1, 2, 5]
    assert builder.valid_count == 3


def test_build_with_both_errors(sample_df):
    series = SeriesBuilder(sample_df, "energy", "tof", xerr="denergy", yerr="dtof").build()
    assert series.has_errors
    assert series.ex.tolist() == sample_df["denergy"].tolist()
    assert series.ey.tolist() == sample_df["dtof"].tolist()


def test_build_with_only_y_error_zero_fills_x_error(sample_df):
    series = SeriesBuilder(sample_df, "energy", "tof", yerr="dtof").build()
    assert series.has_errors
    assert series.ex.tolist() == [0.0] * 6
    assert series.ey.tolist() == sample_df["dtof"].tolist()


def test_errors_follow_gating(sample_df):
    gates = GateSet.from_specs([("location", 0, 0)])
    series = SeriesBuilder(sample_df, "energy", "tof", xerr="denergy", gates=gates).build()
    assert series.x.tolist() == [1.0, 4.0]
    assert series.ex.tolist() == [0.1, 0.4]
    assert series.ey.tolist() == [0.0, 0.0]


@pytest.mark.parametrize("kwargs", [
    {"xcol": "missing", "ycol": "tof"},
    {"xcol": "energy", "ycol": "missing"},
    {"xcol": "energy", "ycol": "tof", "xerr": "missing"},
    {"xcol": "energy", "ycol": "tof", "yerr": "missing"},
])
def test_missing_column_raises(sample_df, kwargs):
    with pytest.raises(MissingColumnError) as exc_info:
        SeriesBuilder(sample_df, **kwargs)
    assert "missing" in str(exc_info.value)


def test_missing_gate_column_disables_gate(sample_df):
    """Only gate is unusable: nothing passes."""
    gates = GateSet.from_specs([("nope", 0, 1)])
    builder = SeriesBuilder(sample_df, "energy", "tof", gates=gates)
    assert len(builder.build()) == 0
    assert builder.valid_count == 0


def test_non_numeric_pairs_are_dropped(caplog):
    df = pd.DataFrame({"x": [1, "bad", 3, 4], "y": [1.0, 2.0, np.nan, 4.0]})
    with caplog.at_level("WARNING", logger="tgrapher"):
        series = SeriesBuilder(df, "x", "y").build()
    assert series.x.tolist() == [1.0, 4.0]
    assert series.row_index.tolist() == [0, 3]
    assert series.total_entries == 4
    assert "Dropped 2" in caplog.text


def test_integer_column_labels():
    df = pd.DataFrame({0: [1.0, 2.0, 3.0], 1: [3.0, 4.0, 5.0], 2: [0, 1, 0]})
    gates = GateSet.from_specs([("2", 0, 0)])
    series = SeriesBuilder(df, "0", "1", yerr="2", gates=gates).build()
    assert series.x.tolist() == [1.0, 3.0]
    assert series.y.tolist() == [3.0, 5.0]
    assert series.ey.tolist() == [0.0, 0.0]
    assert series.title == "1 vs. 0"


def test_to_points_and_frame():
    series = GraphSeries(
        x=np.array([1.0, 2.0]), y=np.array([3.0, 4.0]),
        ex=np.array([0.0, 0.0]), ey=np.array([0.5, 0.5]),
    )
    assert series.to_points() == {"x": [1.0, 2.0], "y": [3.0, 4.0], "ex": [0.0, 0.0], "ey": [0.5, 0.5]}
    assert list(series.to_frame().columns) == ["x", "y", "ex", "ey"]


def test_to_points_without_errors():
    series = GraphSeries(x=np.array([1.0]), y=np.array([2.0]))
    assert series.to_points() == {"x": [1.0], "y": [2.0]}
