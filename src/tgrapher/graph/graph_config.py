"""
Graph defaults persistence for tgrapher (platformdirs + JSON).

Persisted items (schema v1):
- draw_option: default draw option string (``--opt`` overrides it)
- marker_symbol, marker_color, point_size: marker style
- window_size: [width, height] of the interactive window

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches -> defaults are used
- Unknown keys in loaded JSON are ignored with warnings
- Out of range values are clamped
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_config_dir

from tgrapher.exceptions import ConfigError
from tgrapher.graph.graph_state import DEFAULT_DRAW_OPTION, DrawOption, GraphState
from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION: int = 1

APP_NAME = "tgrapher"
CONFIG_FILENAME = "graph_config.json"

POINT_SIZE_RANGE = (1, 50)
MIN_WINDOW_SIDE = 200


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@dataclass
class GraphConfigData:
    """
    JSON-serializable config payload.

    Keep fields JSON-friendly: primitives, lists, dicts.
    """
    schema_version: int = SCHEMA_VERSION
    draw_option: str = DEFAULT_DRAW_OPTION
    marker_symbol: str = "square"
    marker_color: str = "blue"
    point_size: int = 6
    window_size: list[int] = field(default_factory=lambda: [1200, 800])

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "draw_option": self.draw_option,
            "marker_symbol": self.marker_symbol,
            "marker_color": self.marker_color,
            "point_size": self.point_size,
            "window_size": list(self.window_size),
        }

    @classmethod
    def from_json_dict(cls, d: dict[str, Any]) -> "GraphConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates partially missing or malformed values
        """
        defaults = cls()
        try:
            schema_version = int(d.get("schema_version", -1))
        except (TypeError, ValueError, OverflowError):
            schema_version = -1

        draw_option = str(d.get("draw_option", defaults.draw_option)) or defaults.draw_option
        marker_symbol = str(d.get("marker_symbol", defaults.marker_symbol))
        marker_color = str(d.get("marker_color", defaults.marker_color))

        point_size = defaults.point_size
        if "point_size" in d:
            try:
                point_size = _clamp(int(d["point_size"]), *POINT_SIZE_RANGE)
            except (TypeError, ValueError, OverflowError):
                logger.warning(f"point_size {d['point_size']!r} is not an int, using {point_size}")

        window_size = list(defaults.window_size)
        raw_size = d.get("window_size")
        if raw_size is not None:
            try:
                w, h = (int(v) for v in raw_size)
                window_size = [max(MIN_WINDOW_SIDE, w), max(MIN_WINDOW_SIDE, h)]
            except (TypeError, ValueError, OverflowError):
                logger.warning(f"window_size {raw_size!r} is not [width, height], using {window_size}")

        known_keys = {"schema_version", "draw_option", "marker_symbol", "marker_color", "point_size", "window_size"}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in graph config, ignoring")

        return cls(
            schema_version=schema_version,
            draw_option=draw_option,
            marker_symbol=marker_symbol,
            marker_color=marker_color,
            point_size=point_size,
            window_size=window_size,
        )


class GraphConfig:
    """
    Manager for loading/saving GraphConfigData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[GraphConfigData] = None):
        self.path = path
        self.data = data if data is not None else GraphConfigData()

    @staticmethod
    def default_config_path(
        app_name: str = APP_NAME,
        filename: str = CONFIG_FILENAME,
    ) -> Path:
        """
        OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/tgrapher/graph_config.json
        Linux:   ~/.config/tgrapher/graph_config.json
        Windows: %LOCALAPPDATA%\\tgrapher\\graph_config.json
        """
        return Path(user_config_dir(app_name, appauthor=False)) / filename

    @classmethod
    def load(cls, *, config_path: Optional[Path] = None) -> "GraphConfig":
        """
        Load config from disk. Never raises; problems fall back to defaults.
        """
        path = Path(config_path) if config_path is not None else cls.default_config_path()
        default_data = GraphConfigData()

        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(parsed, dict):
                logger.warning(f"Graph config file at {path} does not contain a dict, using defaults")
                return cls(path=path, data=default_data)

            loaded = GraphConfigData.from_json_dict(parsed)
            if loaded.schema_version != SCHEMA_VERSION:
                logger.warning(
                    f"Graph config schema version mismatch: loaded={loaded.schema_version}, "
                    f"expected={SCHEMA_VERSION}, using defaults"
                )
                return cls(path=path, data=default_data)
            return cls(path=path, data=loaded)
        except FileNotFoundError:
            logger.debug(f"Graph config file not found at {path}, using defaults")
            return cls(path=path, data=default_data)
        except json.JSONDecodeError as e:
            logger.warning(f"Graph config file at {path} is not valid JSON: {e}, using defaults")
            return cls(path=path, data=default_data)
        except UnicodeDecodeError as e:
            logger.warning(f"Graph config file at {path} is not UTF-8 text: {e}, using defaults")
            return cls(path=path, data=default_data)
        except OSError as e:
            logger.warning(f"Error reading graph config from {path}: {e}, using defaults")
            return cls(path=path, data=default_data)

    def save(self) -> None:
        """Write config to disk.

        Raises:
            ConfigError: The file or its directory could not be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.data.to_json_dict(), indent=2), encoding="utf-8")
            logger.info(f"Saved graph config to {self.path}")
        except OSError as e:
            raise ConfigError(f"Failed to save graph config to '{self.path}': {e}") from e

    @property
    def window_size(self) -> tuple[int, int]:
        w, h = self.data.window_size
        return w, h

    def to_graph_state(self, *, draw_option: Optional[str] = None, cut: bool = False) -> GraphState:
        """GraphState seeded from the config; draw_option overrides the stored one."""
        return GraphState(
            draw_option=DrawOption.parse(draw_option if draw_option is not None else self.data.draw_option),
            marker_symbol=self.data.marker_symbol,
            marker_color=self.data.marker_color,
            point_size=self.data.point_size,
            cut=cut,
        )
