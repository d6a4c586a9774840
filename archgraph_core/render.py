"""
Scene model kept in sync with the layout engine.

The renderer owns one glyph per node (circle + label) and one per edge (line),
created once and keyed by node id / edge index. Every sync moves the existing
glyphs to the latest simulation coordinates; highlight flags and label
visibility are written by the interaction controller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .config import RenderConfig
from .enums import Category
from .graph import Graph


@dataclass
class NodeGlyph:
    id: str
    name: str
    category: Category
    radius: float
    x: float = 0.0
    y: float = 0.0
    label_visible: bool = False
    highlighted: bool = False
    dimmed: bool = False

    @property
    def css_class(self) -> str:
        classes = ["node", self.category.name.lower()]
        if self.highlighted:
            classes.append("highlighted")
        if self.dimmed:
            classes.append("dimmed")
        return " ".join(classes)


@dataclass
class LinkGlyph:
    index: int
    source_id: str
    target_id: str
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    highlighted: bool = False
    dimmed: bool = False


class Renderer:
    """
    Visual primitives bound to graph identities.

    Attributes:
        nodes: Node glyphs by node id, in graph order
        links: Link glyphs, indexed like `graph.edges`
        frame_count: Number of syncs performed
    """

    def __init__(self, graph: Graph, config: RenderConfig | None = None):
        self.graph = graph
        self.config = config or RenderConfig()
        self.nodes: Dict[str, NodeGlyph] = {
            node_id: NodeGlyph(node_id, node.name, node.category, self.radius_for(node.category))
            for node_id, node in graph.nodes.items()
        }
        self.links: List[LinkGlyph] = [
            LinkGlyph(i, e.source_id, e.target_id) for i, e in enumerate(graph.edges)
        ]
        self.frame_count = 0

    def radius_for(self, category: Category) -> float:
        if category == Category.ARCHITECT:
            return self.config.architect_radius
        return self.config.building_radius

    def sync(self, engine) -> None:
        """Move every glyph to the engine's current coordinates."""
        positions = {n.id: n for n in engine.nodes}
        for node_id, glyph in self.nodes.items():
            p = positions[node_id]
            glyph.x = p.x
            glyph.y = p.y
        for link, glyph in zip(engine.links, self.links):
            glyph.x1, glyph.y1 = link.source.x, link.source.y
            glyph.x2, glyph.y2 = link.target.x, link.target.y
        self.frame_count += 1

    def apply_highlight(self, node_ids: Iterable[str], edge_indices: Iterable[int]) -> None:
        """Highlight the given nodes/edges and dim everything else."""
        node_ids = set(node_ids)
        edge_indices = set(edge_indices)
        for node_id, glyph in self.nodes.items():
            inside = node_id in node_ids
            glyph.highlighted = inside
            glyph.dimmed = not inside
        for glyph in self.links:
            inside = glyph.index in edge_indices
            glyph.highlighted = inside
            glyph.dimmed = not inside

    def clear_highlight(self) -> None:
        for glyph in self.nodes.values():
            glyph.highlighted = False
            glyph.dimmed = False
        for glyph in self.links:
            glyph.highlighted = False
            glyph.dimmed = False

    def show_label(self, node_id: str) -> None:
        glyph = self.nodes.get(node_id)
        if glyph is not None:
            glyph.label_visible = True

    def hide_labels(self) -> None:
        for glyph in self.nodes.values():
            glyph.label_visible = False

    def is_baseline(self) -> bool:
        """True when no glyph is highlighted, dimmed or labelled."""
        return not any(
            g.highlighted or g.dimmed or g.label_visible for g in self.nodes.values()
        ) and not any(g.highlighted or g.dimmed for g in self.links)

    def visible_label(self) -> Optional[str]:
        for glyph in self.nodes.values():
            if glyph.label_visible:
                return glyph.id
        return None

    def transform_for(self, node_id: str) -> str:
        glyph = self.nodes[node_id]
        return f"translate({glyph.x},{glyph.y})"

    def to_dict(self):
        """Glyph state for JSON transport."""
        return {
            "frame": self.frame_count,
            "nodes": [
                {
                    "id": g.id,
                    "x": g.x,
                    "y": g.y,
                    "r": g.radius,
                    "class": g.css_class,
                    "label": g.name if g.label_visible else None,
                    "label_dx": self.config.label_dx,
                    "label_dy": self.config.label_dy,
                }
                for g in self.nodes.values()
            ],
            "links": [
                {
                    "index": g.index,
                    "x1": g.x1,
                    "y1": g.y1,
                    "x2": g.x2,
                    "y2": g.y2,
                    "highlighted": g.highlighted,
                    "dimmed": g.dimmed,
                }
                for g in self.links
            ],
        }
