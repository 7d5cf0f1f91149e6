"""Unit tests for GraphConfig persistence (platformdirs + JSON)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tgrapher.exceptions import ConfigError
from tgrapher.graph.graph_config import (
    APP_NAME,
    CONFIG_FILENAME,
    SCHEMA_VERSION,
    GraphConfig,
    GraphConfigData,
)


def test_default_config_path_uses_app_dir():
    path = GraphConfig.default_config_path()
    assert path.name == CONFIG_FILENAME
    assert APP_NAME in str(path)


def test_load_missing_file_uses_defaults(tmp_path):
    cfg = GraphConfig.load(config_path=tmp_path / "none.json")
    assert cfg.data == GraphConfigData()
    assert not (tmp_path / "none.json").exists()


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "sub" / "graph_config.json"
    cfg = GraphConfig(path=path)
    cfg.data.draw_option = "APL"
    cfg.data.marker_color = "red"
    cfg.data.window_size = [800, 600]
    cfg.save()
    loaded = GraphConfig.load(config_path=path)
    assert loaded.data.draw_option == "APL"
    assert loaded.data.marker_color == "red"
    assert loaded.window_size == (800, 600)


def test_invalid_json_uses_defaults(tmp_path):
    path = tmp_path / "graph_config.json"
    path.write_text("{not json")
    assert GraphConfig.load(config_path=path).data == GraphConfigData()


def test_non_dict_uses_defaults(tmp_path):
    path = tmp_path / "graph_config.json"
    path.write_text("[1, 2]")
    assert GraphConfig.load(config_path=path).data == GraphConfigData()


def test_schema_mismatch_uses_defaults(tmp_path):
    path = tmp_path / "graph_config.json"
    path.write_text(json.dumps({"schema_version": SCHEMA_VERSION + 1, "draw_option": "AL"}))
    assert GraphConfig.load(config_path=path).data.draw_option == "AP"


def test_unknown_keys_warn_and_values_are_clamped(tmp_path, caplog):
    path = tmp_path / "graph_config.json"
    path.write_text(json.dumps({
        "schema_version": SCHEMA_VERSION,
        "point_size": 500,
        "window_size": [10, 900],
        "colour": "green",
    }))
    with caplog.at_level("WARNING", logger="tgrapher"):
        data = GraphConfig.load(config_path=path).data
    assert data.point_size == 50
    assert data.window_size == [200, 900]
    assert "colour" in caplog.text


def test_malformed_values_fall_back(tmp_path):
    data = GraphConfigData.from_json_dict({
        "schema_version": SCHEMA_VERSION,
        "point_size": "big",
        "window_size": 12,
    })
    assert data.point_size == GraphConfigData().point_size
    assert data.window_size == GraphConfigData().window_size


def test_non_utf8_file_uses_defaults(tmp_path):
    path = tmp_path / "graph_config.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    assert GraphConfig.load(config_path=path).data == GraphConfigData()


def test_overflowing_numbers_fall_back(tmp_path):
    path = tmp_path / "graph_config.json"
    path.write_text('{"schema_version": 1, "point_size": 1e999, "window_size": [1e999, 700]}')
    data = GraphConfig.load(config_path=path).data
    assert data.point_size == GraphConfigData().point_size
    assert data.window_size == GraphConfigData().window_size


def test_overflowing_schema_version_uses_defaults(tmp_path):
    path = tmp_path / "graph_config.json"
    path.write_text('{"schema_version": 1e999, "draw_option": "AL"}')
    assert GraphConfig.load(config_path=path).data == GraphConfigData()


def test_save_failure_raises_config_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    cfg = GraphConfig(path=blocker / "graph_config.json")
    with pytest.raises(ConfigError, match="Failed to save graph config"):
        cfg.save()


def test_to_graph_state_override(tmp_path):
    cfg = GraphConfig(path=tmp_path / "c.json", data=GraphConfigData(draw_option="AL", point_size=8))
    state = cfg.to_graph_state()
    assert state.draw_option.text == "AL"
    assert state.point_size == 8
    state = cfg.to_graph_state(draw_option="AP*", cut=True)
    assert state.draw_option.star_markers
    assert state.cut is True
