"""Plotly figure generation for tgrapher.

This module provides the FigureGenerator class for creating Plotly figure
dictionaries from a GraphSeries and GraphState, separating figure generation
from the window and export code.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import plotly.graph_objects as go

from tgrapher.graph.graph_state import GraphState
from tgrapher.graph.series_builder import GraphSeries
from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

# Points inside the current cut.
SELECTED_POINTS_COLOR = "rgba(0, 200, 255, 0.9)"   # cyan

AXIS_TITLE_STANDOFF = 12


class FigureGenerator:
    """Generates Plotly figure dictionaries for a graph series."""

    def __init__(self, state: Optional[GraphState] = None) -> None:
        self.state = state if state is not None else GraphState()

    def _error_bar(self, values: Optional[np.ndarray]) -> Optional[dict]:
        opt = self.state.draw_option
        if values is None or not opt.error_bars or not np.any(values):
            return None
        return dict(
            type="data",
            array=values,
            visible=True,
            width=4 if opt.error_caps else 0,
            color=self.state.marker_color,
        )

    def make_trace(
        self,
        series: GraphSeries,
        *,
        selected: Optional[list[int]] = None,
    ) -> go.Scatter:
        """Scatter trace for series; customdata carries each point's series index."""
        state = self.state
        opt = state.draw_option
        symbol = "star" if opt.star_markers else state.marker_symbol

        selectedpoints = None
        selected_style = None
        if selected:
            selectedpoints = list(selected)
            selected_style = dict(
                marker=dict(size=state.point_size * 1.3, color=SELECTED_POINTS_COLOR),
            )

        return go.Scatter(
            x=series.x,
            y=series.y,
            mode=opt.mode,
            name=series.title,
            customdata=np.arange(len(series)),
            marker=dict(size=state.point_size, color=state.marker_color, symbol=symbol),
            line=dict(color=state.marker_color, shape=opt.line_shape),
            error_x=self._error_bar(series.ex),
            error_y=self._error_bar(series.ey),
            selectedpoints=selectedpoints,
            selected=selected_style,
            hovertemplate=(
                "point=%{customdata}<br>"
                f"{series.x_name}=%{{x}}<br>"
                f"{series.y_name}=%{{y}}<extra></extra>"
            ),
        )

    def make_figure(
        self,
        series: GraphSeries,
        *,
        selected: Optional[list[int]] = None,
    ) -> dict:
        """Generate the Plotly figure dictionary for series.

        Args:
            series: Points to draw.
            selected: Series indices to highlight (the current cut).

        Returns:
            Plotly figure dictionary.
        """
        state = self.state
        logger.debug(
            "FigureGenerator.make_figure: points=%s errors=%s opt=%s selected=%s",
            len(series), series.has_errors, state.draw_option.text, len(selected or []),
        )
        fig = go.Figure()
        fig.add_trace(self.make_trace(series, selected=selected))

        axis_style = dict(
            visible=state.draw_option.axes,
            showline=True,
            mirror=True,
            ticks="outside",
            zeroline=False,
        )
        fig.update_layout(
            title=dict(text=state.title or series.title, x=0.5),
            margin=dict(l=60, r=20, t=50, b=50),
            xaxis=dict(
                title=dict(text=state.x_title or series.x_name, standoff=AXIS_TITLE_STANDOFF),
                **axis_style,
            ),
            yaxis=dict(
                title=dict(text=state.y_title or series.y_name, standoff=AXIS_TITLE_STANDOFF),
                **axis_style,
            ),
            showlegend=False,
            dragmode="lasso" if state.cut else "zoom",
            uirevision="keep",
        )
        return fig.to_dict()
