"""Graphical cuts on a plotted series (rect/lasso selection)."""

from __future__ import annotations

import re
from typing import Optional

import numpy as np

from tgrapher.graph.series_builder import GraphSeries
from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

_SVG_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def parse_plotly_path_to_xy(path: str) -> tuple[list[float], list[float]]:
    """Vertices of a lasso path such as "M 1 2 L 3 4 L 5 6 Z".

    Plotly reports lasso selections as SVG paths in data coordinates. Anything
    that does not give at least three (x, y) vertices yields ([], []).
    """
    if not isinstance(path, str):
        return [], []
    numbers = [float(tok) for tok in _SVG_NUMBER.findall(path)]
    if len(numbers) % 2 or len(numbers) < 6:
        return [], []
    return numbers[0::2], numbers[1::2]


def points_in_polygon(
    points: np.ndarray,
    polygon_xy: np.ndarray | list[tuple[float, float]],
) -> np.ndarray:
    """Even-odd inside test of (N, 2) points against an implicitly closed polygon.

    Raises:
        ValueError: points is not (N, 2) or the polygon has fewer than 3 vertices.
    """
    if len(points) == 0:
        return np.array([], dtype=bool)
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError("points must have shape (N, 2)")
    poly = np.asarray(polygon_xy, dtype=float)
    if poly.ndim != 2 or poly.shape[1] != 2 or len(poly) < 3:
        raise ValueError("polygon_xy must have shape (M, 2) with M >= 3")

    # edges (x0, y0) -> (x1, y1) against every point: arrays of shape (N, M)
    x0, y0 = poly[:, 0], poly[:, 1]
    x1, y1 = np.roll(x0, -1), np.roll(y0, -1)
    px, py = pts[:, :1], pts[:, 1:]
    spans = (y0 > py) != (y1 > py)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_at_py = x0 + (py - y0) * (x1 - x0) / (y1 - y0)
    crossings = np.count_nonzero(spans & (px < x_at_py), axis=1)
    return crossings % 2 == 1


def _rect_from(source: dict, prefix: str = "") -> Optional[tuple[tuple[float, float], tuple[float, float]]]:
    vals = [source.get(f"{prefix}{k}") for k in ("x0", "x1", "y0", "y1")]
    if any(v is None for v in vals):
        return None
    try:
        x0, x1, y0, y1 = (float(v) for v in vals)
    except (TypeError, ValueError):
        return None
    return (min(x0, x1), max(x0, x1)), (min(y0, y1), max(y0, y1))


class CutSelection:
    """Tracks the cut drawn on a series plot.

    The plot reports selections through ``plotly_relayout`` events; each
    payload replaces the current cut.
    """

    def __init__(self, series: GraphSeries) -> None:
        self.series = series
        self._indices: list[int] = []
        self.source = "none"

    @property
    def indices(self) -> list[int]:
        return list(self._indices)

    def clear(self) -> None:
        self._indices = []
        self.source = "none"

    def select_range(self, x_range: tuple[float, float], y_range: tuple[float, float]) -> list[int]:
        """Series indices inside the closed box x_range x y_range."""
        x, y = self.series.x, self.series.y
        mask = (x >= x_range[0]) & (x <= x_range[1]) & (y >= y_range[0]) & (y <= y_range[1])
        return np.flatnonzero(mask).tolist()

    def select_polygon(self, xs: list[float], ys: list[float]) -> list[int]:
        """Series indices inside the lasso polygon."""
        if not len(self.series) or not xs or len(xs) != len(ys):
            return []
        points = np.column_stack([self.series.x, self.series.y])
        mask = points_in_polygon(points, np.column_stack([xs, ys]))
        return np.flatnonzero(mask).tolist()

    def from_relayout(self, payload: dict) -> Optional[list[int]]:
        """Update the cut from a plotly relayout payload.

        Returns:
            The new list of selected indices, or None if the payload carries no
            selection change (zoom, pan, ...). An empty ``selections`` list
            clears the cut and returns [].
        """
        if "selections" not in payload:
            rect = _rect_from(payload, "selections[0].")
            if rect is None:
                return None
            self._indices = self.select_range(*rect)
            self.source = "rect"
            return self.indices

        selections = payload.get("selections") or []
        if not selections:
            self.clear()
            return []

        sel = selections[0] if isinstance(selections[0], dict) else {}
        stype = sel.get("type")
        if stype == "rect":
            rect = _rect_from(sel)
            if rect is None:
                return None
            self._indices = self.select_range(*rect)
            self.source = "rect"
        elif stype == "path":
            xs, ys = parse_plotly_path_to_xy(sel.get("path") or "")
            if not xs:
                return None
            self._indices = self.select_polygon(xs, ys)
            self.source = "lasso"
        else:
            return None
        logger.info("Cut: source=%s, selected_count=%s", self.source, len(self._indices))
        return self.indices

    def format_points(self, indices: Optional[list[int]] = None) -> list[str]:
        """Lines " <index>\\t<x>\\t<y>" for the given (default: current) indices."""
        if indices is None:
            indices = self._indices
        return [f" {i}\t{self.series.x[i]:g}\t{self.series.y[i]:g}" for i in indices]
