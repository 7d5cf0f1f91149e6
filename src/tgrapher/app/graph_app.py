"""Interactive graph window (NiceGUI).

Shows the graph in a browser tab (default) or a native window and, when a cut
was requested, prints the points inside each box/lasso selection to stdout.
The window stays up until the Done button is pressed.

Env vars:
    TGRAPHER_GUI_NATIVE: 1/0 (default 0, native needs pywebview)
    HOST: bind host (default 127.0.0.1)
    PORT: bind port (default: first open port)
"""

from __future__ import annotations

import os
import sys
from dataclasses import replace
from typing import Any, Optional, TextIO

from nicegui import app, ui
from nicegui.events import GenericEventArguments

from tgrapher.graph.cut_selection import CutSelection
from tgrapher.graph.figure_generator import FigureGenerator
from tgrapher.graph.graph_state import GraphState
from tgrapher.graph.series_builder import GraphSeries
from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

CUT_PROMPT = "Draw the cut! (box or lasso select, Escape clears, Done exits)"


def _env_bool(name: str, default: bool) -> bool:
    """Parse env var as bool; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    """Parse env var as int; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def relayout_payload(raw: Any) -> dict:
    """Normalise the args of a plotly_relayout event to a dict."""
    if isinstance(raw, list) and len(raw) == 1 and isinstance(raw[0], dict):
        return raw[0]
    if isinstance(raw, dict):
        return raw
    return {}


class GraphWindow:
    """One page: the graph, a point count and a Done button."""

    def __init__(
        self,
        series: GraphSeries,
        state: GraphState,
        *,
        out: Optional[TextIO] = None,
    ) -> None:
        self.series = series
        self.state = state
        self.figure_generator = FigureGenerator(state)
        self.cut = CutSelection(series)
        self._out = out
        self._plot: Optional[ui.plotly] = None
        self._status: Optional[ui.label] = None

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def build(self) -> None:
        ui.page_title(self.series.title)
        with ui.column().classes("w-full h-screen flex flex-col gap-2 p-4"):
            self._plot = ui.plotly(self.figure_generator.make_figure(self.series)).classes("w-full flex-1 min-h-0")
            if self.state.cut:
                self._plot.on("plotly_relayout", self._on_plotly_relayout)
                ui.keyboard(on_key=self._on_keyboard_key)
            with ui.row().classes("w-full items-center gap-4"):
                self._status = ui.label(self._status_text())
                ui.button("Done", on_click=self._on_done)

    def _status_text(self) -> str:
        text = f"{len(self.series)} of {self.series.total_entries} entries"
        if self.state.cut:
            text += f", {len(self.cut.indices)} in cut"
        return text

    def _refresh(self) -> None:
        if self._plot is not None:
            self._plot.update_figure(self.figure_generator.make_figure(self.series, selected=self.cut.indices))
        if self._status is not None:
            self._status.set_text(self._status_text())

    def apply_relayout(self, payload: dict) -> None:
        """Update the cut from a relayout payload and report the points inside it."""
        indices = self.cut.from_relayout(payload)
        if indices is None:
            return
        if indices:
            for line in self.cut.format_points(indices):
                print(line, file=self.out)
            self.out.flush()
        self._refresh()

    def _on_plotly_relayout(self, e: GenericEventArguments) -> None:
        self.apply_relayout(relayout_payload(e.args))

    def _on_keyboard_key(self, e) -> None:
        key_name = getattr(getattr(e, "key", None), "name", None) if e else None
        action = getattr(e, "action", None)
        if key_name == "Escape" and getattr(action, "keydown", False) and self.cut.indices:
            self.cut.clear()
            logger.info("Cut cleared")
            self._refresh()

    def _on_done(self) -> None:
        logger.info("Closing graph window")
        app.shutdown()


def run_graph_window(
    series: GraphSeries,
    state: GraphState,
    *,
    cut: Optional[bool] = None,
    window_size: tuple[int, int] = (1200, 800),
    native: Optional[bool] = None,
) -> GraphWindow:
    """Serve the graph window and block until it is closed.

    Args:
        cut: Enable the interactive cut; None keeps state.cut.
        window_size: Native window size in pixels.
        native: Native window instead of a browser tab; None reads TGRAPHER_GUI_NATIVE.

    Returns:
        The GraphWindow, whose ``cut`` holds the last selection.
    """
    if cut is not None and cut != state.cut:
        state = replace(state, cut=cut)
    native = _env_bool("TGRAPHER_GUI_NATIVE", False) if native is None else native

    from nicegui import native as native_module
    port = _env_int("PORT", native_module.find_open_port())
    host = os.getenv("HOST", "127.0.0.1")

    window = GraphWindow(series, state)
    ui.page("/")(window.build)

    if state.cut:
        print(CUT_PROMPT, flush=True)

    logger.info("Starting graph window: host=%s port=%s native=%s", host, port, native)
    run_kwargs: dict = {
        "host": host,
        "port": port,
        "reload": False,
        "native": native,
        "title": series.title,
        "show": not native,
    }
    if native:
        run_kwargs["window_size"] = window_size
    ui.run(**run_kwargs)
    return window
