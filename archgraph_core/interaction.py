"""
Pointer interaction controller.

This module implements the focus/drag state machine that turns pointer events
into highlight flags on the renderer, side panel updates and pins on the
layout engine. All events enter through `InteractionController.dispatch`.

States:
- IDLE: baseline, nothing highlighted, all labels hidden, panel shows the hint
- FOCUSED(n): n and its direct neighbors highlighted, the rest dimmed
- DRAGGING(n): n pinned under the pointer; hover events are ignored

Transitions:
- PointerEnter(n): IDLE/FOCUSED -> FOCUSED(n)
- PointerLeave(n): FOCUSED(n) -> IDLE
- DragStart(n): IDLE/FOCUSED -> DRAGGING(n), pin at current position, reheat
- DragMove(n, x, y): DRAGGING(n) -> DRAGGING(n), move the pin
- DragEnd(n): DRAGGING(n) -> IDLE, unpin, let the layout resettle
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from .config import LayoutConfig
from .enums import InteractionState
from .events import DragEnd, DragMove, DragStart, PointerEnter, PointerLeave
from .graph import Graph
from .layout import LayoutEngine
from .panel import InfoPanel
from .render import Renderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Highlight:
    """Induced neighborhood of the focused node."""

    node_ids: FrozenSet[str] = field(default_factory=frozenset)
    edge_indices: FrozenSet[int] = field(default_factory=frozenset)

    def __bool__(self) -> bool:
        return bool(self.node_ids or self.edge_indices)


EMPTY_HIGHLIGHT = Highlight()


def compute_highlight(graph: Graph, node_id: str) -> Highlight:
    """
    Collect a node, its direct neighbors and the edges joining them.

    Args:
        graph: The built graph
        node_id: Id of the focused node

    Returns:
        Highlight with {node_id} plus the other endpoint of every incident
        edge, and the indices of those edges
    """
    edge_indices = graph.incident_edges(node_id)
    node_ids = {node_id}
    node_ids.update(graph.opposite(i, node_id) for i in edge_indices)
    return Highlight(frozenset(node_ids), frozenset(edge_indices))


class InteractionController:
    """
    Single dispatcher for pointer events.

    Attributes:
        focused: Id of the focused node, if any
        dragging: Id of the dragged node, if any
        highlight: Current highlight (empty outside FOCUSED)
    """

    def __init__(
        self,
        graph: Graph,
        engine: LayoutEngine,
        renderer: Renderer,
        panel: InfoPanel,
        config: LayoutConfig | None = None,
    ):
        self.graph = graph
        self.engine = engine
        self.renderer = renderer
        self.panel = panel
        self.config = config or engine.config
        self.focused: Optional[str] = None
        self.dragging: Optional[str] = None
        self.highlight = EMPTY_HIGHLIGHT

    @property
    def state(self) -> InteractionState:
        if self.dragging is not None:
            return InteractionState.DRAGGING
        if self.focused is not None:
            return InteractionState.FOCUSED
        return InteractionState.IDLE

    def dispatch(self, event) -> InteractionState:
        """
        Apply one pointer event and return the resulting state.

        Raises:
            TypeError: If the event is not a pointer event
        """
        before = self.state
        if isinstance(event, PointerEnter):
            self._on_enter(event.node_id)
        elif isinstance(event, PointerLeave):
            self._on_leave(event.node_id)
        elif isinstance(event, DragStart):
            self._on_drag_start(event.node_id)
        elif isinstance(event, DragMove):
            self._on_drag_move(event.node_id, event.x, event.y)
        elif isinstance(event, DragEnd):
            self._on_drag_end(event.node_id)
        else:
            raise TypeError(f"not a pointer event: {event!r}")
        after = self.state
        if after != before:
            logger.debug("%s: %s -> %s", type(event).__name__, before.name, after.name)
        return after

    # ----- focus -----
    def _on_enter(self, node_id: str) -> None:
        if self.dragging is not None:
            return
        if node_id not in self.graph:
            logger.debug("Ignoring focus on unknown node %r", node_id)
            return
        self._focus(node_id)

    def _on_leave(self, node_id: str) -> None:
        if self.dragging is not None or self.focused != node_id:
            return
        self._reset()

    def _focus(self, node_id: str) -> None:
        self.highlight = compute_highlight(self.graph, node_id)
        self.renderer.apply_highlight(self.highlight.node_ids, self.highlight.edge_indices)
        self.renderer.hide_labels()
        self.renderer.show_label(node_id)
        self.panel.show_node(self.graph.nodes[node_id])
        self.focused = node_id

    def _reset(self) -> None:
        """Return every glyph and the panel to the idle baseline."""
        self.highlight = EMPTY_HIGHLIGHT
        self.renderer.clear_highlight()
        self.renderer.hide_labels()
        self.panel.show_hint()
        self.focused = None

    # ----- drag -----
    def _on_drag_start(self, node_id: str) -> None:
        if node_id not in self.engine:
            logger.debug("Ignoring drag on unknown node %r", node_id)
            return
        if self.dragging is not None and self.dragging != node_id:
            self.engine.unpin(self.dragging)
        if self.focused is not None and self.focused != node_id:
            self._reset()
        p = self.engine.position(node_id)
        self.engine.pin(node_id, p.x, p.y)
        self.engine.reheat(alpha_target=self.config.drag_alpha_target)
        self.dragging = node_id

    def _on_drag_move(self, node_id: str, x: float, y: float) -> None:
        if self.dragging != node_id:
            return
        self.engine.move_pin(node_id, x, y)

    def _on_drag_end(self, node_id: str) -> None:
        if self.dragging != node_id:
            return
        self.engine.unpin(node_id)
        self.engine.reheat(alpha_target=0.0)
        self.dragging = None
        self._reset()

    def teardown(self) -> None:
        """Abandon any interaction: release the pin, clear flags, stop the engine."""
        if self.dragging is not None:
            self.engine.unpin(self.dragging)
            self.dragging = None
        self._reset()
        self.engine.stop()
