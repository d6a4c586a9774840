"""
Composition of the graph view.

`GraphView` wires the builder output to the layout engine, renderer,
interaction controller, viewport and side panel, and exposes the two things a
host loop needs: `frame()` to advance one animation frame and `handle(event)`
to apply one input event. Everything runs to completion on the caller's
thread; the asyncio host lives in `app/backend/engine.py`.

A view whose data failed to load is still a valid object: the panel shows
the error, there is no graph and no layout engine, frames do nothing and
pointer events are ignored.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from .builder import build, build_from_file
from .config import ViewConfig
from .errors import DataLoadError, MalformedRecord
from .events import Pan, Resize, Zoom
from .graph import Graph
from .interaction import InteractionController
from .layout import LayoutEngine
from .panel import InfoPanel
from .render import Renderer
from .viewport import Viewport

logger = logging.getLogger(__name__)


class GraphView:
    """
    One interactive view over a built graph.

    Attributes:
        graph: The built graph, or None when loading failed
        engine: Layout engine, or None when loading failed
        renderer: Scene glyphs, or None when loading failed
        controller: Pointer state machine, or None when loading failed
        viewport: Surface size and pan/zoom transform
        panel: Side panel state
        error: The load/build error, if any
    """

    def __init__(self, graph: Optional[Graph], config: ViewConfig | None = None, error: Exception | None = None):
        self.config = config or ViewConfig()
        self.panel = InfoPanel()
        self.viewport = Viewport(self.config.viewport)
        self.graph = graph
        self.error = error
        self.engine: Optional[LayoutEngine] = None
        self.renderer: Optional[Renderer] = None
        self.controller: Optional[InteractionController] = None

        if graph is None:
            self.panel.show_error()
            return

        self.engine = LayoutEngine(graph, self.config.layout)
        self.engine.set_center(*self.viewport.center)
        self.renderer = Renderer(graph, self.config.render)
        self.renderer.sync(self.engine)
        self.engine.on_tick(self.renderer.sync)
        self.controller = InteractionController(
            graph, self.engine, self.renderer, self.panel, self.config.layout
        )

    # ----- construction -----
    @classmethod
    def from_records(cls, records: Iterable[Any], config: ViewConfig | None = None) -> "GraphView":
        """Build a view from relation records; a malformed record yields a failed view."""
        try:
            graph = build(records)
        except MalformedRecord as exc:
            return cls.failed(exc, config)
        return cls(graph, config)

    @classmethod
    def from_file(cls, path: str, config: ViewConfig | None = None) -> "GraphView":
        """Build a view from a SPARQL JSON results file; failures yield a failed view."""
        try:
            graph = build_from_file(path)
        except (DataLoadError, MalformedRecord) as exc:
            return cls.failed(exc, config)
        return cls(graph, config)

    @classmethod
    def failed(cls, error: Exception, config: ViewConfig | None = None) -> "GraphView":
        logger.error("Error loading data: %s", error)
        return cls(None, config, error=error)

    @property
    def is_failed(self) -> bool:
        return self.graph is None

    # ----- scheduling -----
    def frame(self) -> bool:
        """
        Advance one animation frame.

        Returns:
            bool: True if the layout ticked (and the scene was re-synced)
        """
        if self.engine is None:
            return False
        return self.engine.step()

    def run_until_settled(self, max_ticks: int = 1000) -> int:
        """Run frames until the layout settles or `max_ticks` frames have run."""
        ticks = 0
        while ticks < max_ticks and self.frame():
            ticks += 1
        return ticks

    @property
    def running(self) -> bool:
        return self.engine is not None and self.engine.running

    # ----- input -----
    def handle(self, event):
        """
        Route one input event.

        Viewport events go to the viewport manager; pointer events go to the
        interaction controller. Pointer events are ignored on a failed view.

        Returns:
            The interaction state after the event, or None
        """
        if isinstance(event, Resize):
            self.viewport.resize(
                event.window_width,
                event.window_height,
                self.engine,
                reheat_alpha=self.config.layout.reheat_alpha,
            )
            return self.controller.state if self.controller else None
        if isinstance(event, Zoom):
            self.viewport.zoom(event.factor, event.x, event.y)
            return self.controller.state if self.controller else None
        if isinstance(event, Pan):
            self.viewport.pan(event.dx, event.dy)
            return self.controller.state if self.controller else None
        if self.controller is None:
            return None
        return self.controller.dispatch(event)

    def teardown(self) -> None:
        """Release pins and stop the layout."""
        if self.controller is not None:
            self.controller.teardown()

    # ----- transport -----
    def graph_dict(self) -> Dict[str, Any]:
        if self.graph is None:
            return {"nodes": [], "edges": []}
        return {
            "nodes": [
                {
                    "id": n.id,
                    "name": n.name,
                    "category": n.category.name,
                    "connections": len(n.neighbor_labels),
                }
                for n in self.graph.node_list()
            ],
            "edges": [
                {"index": i, "source": e.source_id, "target": e.target_id}
                for i, e in self.graph.iter_edges()
            ],
        }

    def state(self) -> Dict[str, Any]:
        """Snapshot of everything a client needs to draw the current frame."""
        data: Dict[str, Any] = {
            "failed": self.is_failed,
            "panel": self.panel.to_dict(),
            "viewport": self.viewport.to_dict(),
        }
        if self.is_failed:
            return data
        data.update(
            interaction=self.controller.state.name,
            focused=self.controller.focused,
            dragging=self.controller.dragging,
            tick=self.engine.tick_count,
            alpha=self.engine.alpha,
            running=self.engine.running,
            scene=self.renderer.to_dict(),
        )
        return data
