"""Gated (x, y) series construction.

This module provides the SeriesBuilder class, which turns a loaded table into
the point series that gets plotted and saved, keeping data processing separate
from figure generation and the UI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd

from tgrapher.exceptions import MissingColumnError
from tgrapher.graph.gate import GateSet
from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class GraphSeries:
    """Ordered (x, y) points with optional per-point errors.

    ex/ey are both None for a series without error bars; otherwise both are
    arrays the length of x (zeros for an axis that has no error column).
    row_index holds the position of each point's row in the source table.
    """
    x: np.ndarray
    y: np.ndarray
    ex: Optional[np.ndarray] = None
    ey: Optional[np.ndarray] = None
    row_index: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))
    x_name: str = "x"
    y_name: str = "y"
    total_entries: int = 0

    def __len__(self) -> int:
        return len(self.x)

    @property
    def has_errors(self) -> bool:
        return self.ex is not None and self.ey is not None

    @property
    def title(self) -> str:
        return f"{self.y_name} vs. {self.x_name}"

    def to_points(self) -> dict[str, list[float]]:
        """JSON-friendly column dict: x, y and, with errors, ex and ey."""
        points = {"x": self.x.tolist(), "y": self.y.tolist()}
        if self.has_errors:
            points["ex"] = self.ex.tolist()
            points["ey"] = self.ey.tolist()
        return points

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_points())


class SeriesBuilder:
    """Builds a GraphSeries from a DataFrame.

    Attributes:
        df: The source DataFrame.
        xcol: Column name for x values.
        ycol: Column name for y values.
        xerr: Optional column name for x errors.
        yerr: Optional column name for y errors.
        gates: GateSet bound to df's columns.
    """

    def __init__(
        self,
        df: pd.DataFrame,
        xcol: str,
        ycol: str,
        *,
        xerr: Optional[str] = None,
        yerr: Optional[str] = None,
        gates: Optional[GateSet] = None,
    ) -> None:
        """Initialize SeriesBuilder and bind gates to the table.

        Raises:
            MissingColumnError: If the x, y or a requested error column is missing.
        """
        # columns are addressed by their text label
        if not all(isinstance(c, str) for c in df.columns):
            df = df.rename(columns=str)
        self.df = df
        self.xcol = xcol
        self.ycol = ycol
        self.xerr = xerr or None
        self.yerr = yerr or None
        self.gates = gates if gates is not None else GateSet()

        columns = [str(c) for c in df.columns]
        for role, col in (("x-axis", self.xcol), ("y-axis", self.ycol),
                          ("x-error", self.xerr), ("y-error", self.yerr)):
            if col is not None and col not in columns:
                raise MissingColumnError(
                    f"Failed to load {role} column {col!r}",
                    {"columns": ", ".join(columns)},
                )
        self.gates.bind(columns)
        self.valid_count = 0

    @property
    def use_errors(self) -> bool:
        return self.xerr is not None or self.yerr is not None

    def _numeric(self, col: Optional[str]) -> np.ndarray:
        if col is None:
            return np.zeros(len(self.df), dtype=float)
        return pd.to_numeric(self.df[col], errors="coerce").to_numpy(dtype=float)

    def build(self) -> GraphSeries:
        """Apply the gates and collect the surviving points in table order."""
        total = len(self.df)
        x = self._numeric(self.xcol)
        y = self._numeric(self.ycol)

        mask = self.gates.mask(self.df)
        gated = int(mask.sum())

        finite = ~(np.isnan(x) | np.isnan(y))
        dropped = int((mask & ~finite).sum())
        if dropped:
            logger.warning(
                "Dropped %s gated row(s) with non-numeric %r or %r", dropped, self.xcol, self.ycol
            )
        mask &= finite

        ex = ey = None
        if self.use_errors:
            ex = np.nan_to_num(self._numeric(self.xerr)[mask], nan=0.0)
            ey = np.nan_to_num(self._numeric(self.yerr)[mask], nan=0.0)

        series = GraphSeries(
            x=x[mask],
            y=y[mask],
            ex=ex,
            ey=ey,
            row_index=np.flatnonzero(mask),
            x_name=self.xcol,
            y_name=self.ycol,
            total_entries=total,
        )
        self.valid_count = len(series)
        logger.debug(
            "SeriesBuilder.build: total=%s gated=%s valid=%s errors=%s",
            total, gated, self.valid_count, series.has_errors,
        )
        return series
