"""
Lightweight visualization utilities decoupled from Streamlit to enable testing.
"""

from __future__ import annotations

from typing import Any, Dict, List

from archgraph_core.enums import Category
from archgraph_core.render import Renderer

CATEGORY_COLORS = {
    "ARCHITECT": "#2563EB",
    "BUILDING": "#F59E0B",
}
DIMMED_COLOR = "#D1D5DB"
LINK_COLOR = "#9CA3AF"
LINK_HIGHLIGHT_COLOR = "#111827"


def build_cytoscape_elements(renderer: Renderer) -> List[Dict[str, Any]]:
    """Convert the renderer's glyphs into Cytoscape-compatible elements.

    Nodes carry their current simulation position ("preset" layout), size
    from the category radius, and the highlight/dim state as classes. The
    label is only set while the node's label is visible.
    """
    elements: List[Dict[str, Any]] = []

    # Nodes
    for node_id, glyph in renderer.nodes.items():
        category = glyph.category.name
        elements.append({
            "data": {
                "id": node_id,
                "label": glyph.name if glyph.label_visible else "",
                "name": glyph.name,
                "color": color_for(glyph.category, glyph.dimmed),
                "size": int(round(glyph.radius * 2)),
                "group": category,
            },
            "position": {"x": float(glyph.x), "y": float(glyph.y)},
            "classes": glyph.css_class,
        })

    # Edges
    for link in renderer.links:
        classes = ["link"]
        if link.highlighted:
            classes.append("highlighted")
        if link.dimmed:
            classes.append("dimmed")
        elements.append({
            "data": {
                "id": f"e{link.index}:{link.source_id}->{link.target_id}",
                "source": link.source_id,
                "target": link.target_id,
                "index": link.index,
            },
            "classes": " ".join(classes),
        })

    return elements


def color_for(category: Category, dimmed: bool = False) -> str:
    if dimmed:
        return DIMMED_COLOR
    return CATEGORY_COLORS.get(category.name, "#60A5FA")


def link_style(highlighted: bool, dimmed: bool) -> Dict[str, float | str]:
    """Matplotlib line style for a link glyph."""
    if highlighted:
        return {"color": LINK_HIGHLIGHT_COLOR, "alpha": 0.9, "linewidth": 1.8}
    if dimmed:
        return {"color": LINK_COLOR, "alpha": 0.15, "linewidth": 0.8}
    return {"color": LINK_COLOR, "alpha": 0.6, "linewidth": 1.0}
