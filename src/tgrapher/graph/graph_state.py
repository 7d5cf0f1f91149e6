"""Graph appearance state.

This module defines DrawOption, the parsed form of the ``--opt`` string, and
the GraphState dataclass that holds everything FigureGenerator needs besides
the points themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DRAW_OPTION = "AP"

# Draw option characters (case-insensitive):
#   A  draw axes          P  markers          *  star markers
#   L  straight line      C  smooth curve
#   Z  no end caps on error bars              X  no error bars
_KNOWN_FLAGS = set("APLCZX*")


@dataclass(frozen=True)
class DrawOption:
    """Parsed draw option string."""
    text: str = DEFAULT_DRAW_OPTION
    axes: bool = True
    markers: bool = True
    star_markers: bool = False
    line: bool = False
    smooth: bool = False
    error_caps: bool = True
    error_bars: bool = True

    @classmethod
    def parse(cls, text: Optional[str]) -> "DrawOption":
        """Parse a draw option string such as "AP", "APL" or "ACZ".

        Unknown characters are logged and ignored. If the string selects
        neither markers nor a line, markers are drawn.
        """
        raw = (text or "").strip()
        flags = set(raw.upper())
        unknown = sorted(flags - _KNOWN_FLAGS - {" "})
        if unknown:
            logger.warning("Ignoring unknown draw option character(s) %s in %r", "".join(unknown), raw)

        star = "*" in flags
        markers = "P" in flags or star
        line = "L" in flags
        smooth = "C" in flags
        if not (markers or line or smooth):
            markers = True
        return cls(
            text=raw or DEFAULT_DRAW_OPTION,
            axes="A" in flags if raw else True,
            markers=markers,
            star_markers=star,
            line=line,
            smooth=smooth,
            error_caps="Z" not in flags,
            error_bars="X" not in flags,
        )

    @property
    def mode(self) -> str:
        """Plotly scatter mode ("markers", "lines" or "lines+markers")."""
        parts = []
        if self.line or self.smooth:
            parts.append("lines")
        if self.markers:
            parts.append("markers")
        return "+".join(parts)

    @property
    def line_shape(self) -> str:
        return "spline" if self.smooth else "linear"


@dataclass
class GraphState:
    """Configuration state for a single graph."""
    draw_option: DrawOption = field(default_factory=DrawOption)
    marker_symbol: str = "square"
    marker_color: str = "blue"
    point_size: int = 6
    title: Optional[str] = None        # None -> "<y> vs. <x>"
    x_title: Optional[str] = None      # None -> x column name
    y_title: Optional[str] = None      # None -> y column name
    cut: bool = False                  # interactive cut requested (lasso dragmode)

    def to_dict(self) -> dict[str, Any]:
        """Serialize GraphState to a JSON-friendly dictionary."""
        return {
            "draw_option": self.draw_option.text,
            "marker_symbol": self.marker_symbol,
            "marker_color": self.marker_color,
            "point_size": self.point_size,
            "title": self.title,
            "x_title": self.x_title,
            "y_title": self.y_title,
            "cut": self.cut,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GraphState":
        """Deserialize GraphState; missing keys take their defaults."""
        return cls(
            draw_option=DrawOption.parse(data.get("draw_option", DEFAULT_DRAW_OPTION)),
            marker_symbol=str(data.get("marker_symbol", "square")),
            marker_color=str(data.get("marker_color", "blue")),
            point_size=int(data.get("point_size", 6)),
            title=data.get("title"),  # Can be None
            x_title=data.get("x_title"),
            y_title=data.get("y_title"),
            cut=bool(data.get("cut", False)),
        )
