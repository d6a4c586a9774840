"""
Streamlit inspection interface for the architect/building graph.

This module provides a web page for exploring the force-directed layout
outside the browser client. Users can step or settle the simulation, focus a
node to see its neighborhood highlighted, pin a node at chosen coordinates,
resize the virtual window and zoom, and read the side panel text.

Interface includes:
- Layout controls (step, run, reheat, reset)
- Node focus and pin controls backed by the interaction state machine
- Matplotlib drawing of the scene glyphs with highlight/dim styling
- Side panel and layout metrics
"""

import os
import sys
import time

# Add project root to Python path BEFORE any imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import matplotlib.pyplot as plt
import streamlit as st

from archgraph_core.config import ViewConfig
from archgraph_core.events import DragEnd, DragMove, DragStart, PointerEnter, PointerLeave, Resize, Zoom
from archgraph_core.metrics import layout_summary
from archgraph_core.view import GraphView
from viz.utils import color_for, link_style

DEFAULT_DATA = os.path.join(project_root, "data", "arkitekter_byggnader.json")

# Frames advanced per "Run" click
SPEED_FRAME_MAPPING = {
    "Slow": 10,
    "Normal": 30,
    "Fast": 120,
}

st.set_page_config(layout="wide", page_title="Arkitekter och byggnader")


class ViewSession:
    """Holds the graph view across Streamlit reruns."""

    def __init__(self, data_path: str = DEFAULT_DATA):
        self.data_path = data_path
        self.view = GraphView.from_file(data_path, ViewConfig())

    def reset(self):
        self.view = GraphView.from_file(self.data_path, ViewConfig())

    def run_frames(self, n: int) -> int:
        ticks = 0
        for _ in range(n):
            if not self.view.frame():
                break
            ticks += 1
        return ticks

    def focus(self, node_id):
        current = self.view.controller.focused
        if current is not None:
            self.view.handle(PointerLeave(current))
        if node_id is not None:
            self.view.handle(PointerEnter(node_id))

    def drag_to(self, node_id: str, x: float, y: float, settle_frames: int = 60):
        """Drag a node to (x, y) and hold it there for a number of frames."""
        self.view.handle(DragStart(node_id))
        self.view.handle(DragMove(node_id, x, y))
        self.run_frames(settle_frames)
        self.view.handle(DragEnd(node_id))


def get_speed_label_from_frames(frames):
    """Convert a frame count to a human-readable speed label."""
    for speed, value in SPEED_FRAME_MAPPING.items():
        if frames == value:
            return speed
    if frames < SPEED_FRAME_MAPPING["Normal"]:
        return "Slow"
    elif frames > SPEED_FRAME_MAPPING["Normal"]:
        return "Fast"
    else:
        return "Normal"


def draw_scene(view: GraphView):
    """Draw the renderer glyphs in screen space."""
    fig, ax = plt.subplots(figsize=(10, 7))
    t = view.viewport.transform
    renderer = view.renderer

    for link in renderer.links:
        x1, y1 = t.apply(link.x1, link.y1)
        x2, y2 = t.apply(link.x2, link.y2)
        ax.plot([x1, x2], [y1, y2], zorder=1, **link_style(link.highlighted, link.dimmed))

    for glyph in renderer.nodes.values():
        x, y = t.apply(glyph.x, glyph.y)
        ax.scatter(
            [x],
            [y],
            s=(glyph.radius * t.k) ** 2 * 4,
            c=color_for(glyph.category, glyph.dimmed),
            edgecolors="#111827" if glyph.highlighted else "white",
            linewidths=1.5,
            zorder=2,
        )
        if glyph.label_visible:
            ax.text(
                x + renderer.config.label_dx * t.k,
                y + renderer.config.label_dy * t.k,
                glyph.name,
                fontsize=10,
                zorder=3,
            )

    ax.set_xlim(0, view.viewport.width)
    ax.set_ylim(view.viewport.height, 0)  # screen coordinates grow downward
    ax.set_aspect("equal")
    ax.axis("off")
    plt.tight_layout()
    return fig


# Initialize session
if "session" not in st.session_state:
    st.session_state.session = ViewSession()

session = st.session_state.session
view = session.view

st.title("Arkitekter, byggnader och hur de hör ihop")

if view.is_failed:
    st.error(view.panel.text())
    st.stop()

with st.sidebar:
    st.header("Layout")

    speed = st.select_slider("Speed", options=list(SPEED_FRAME_MAPPING), value="Normal")
    col_step, col_run = st.columns(2)
    with col_step:
        if st.button("Step", use_container_width=True):
            session.run_frames(1)
    with col_run:
        if st.button("Run", type="primary", use_container_width=True):
            started = time.perf_counter()
            ticks = session.run_frames(SPEED_FRAME_MAPPING[speed])
            st.caption(f"{ticks} ticks in {time.perf_counter() - started:.2f}s")

    col_reheat, col_reset = st.columns(2)
    with col_reheat:
        if st.button("Reheat", use_container_width=True):
            view.engine.reheat(alpha=view.config.layout.reheat_alpha)
    with col_reset:
        if st.button("Reset", use_container_width=True):
            session.reset()
            st.rerun()

    st.divider()
    st.header("Window")
    win_w = st.number_input("Window width", min_value=400, max_value=4000, value=1280, step=20)
    win_h = st.number_input("Window height", min_value=300, max_value=3000, value=800, step=20)
    if st.button("Apply size", use_container_width=True):
        view.handle(Resize(float(win_w), float(win_h)))
    zoom_k = st.slider("Zoom", 0.1, 4.0, float(view.viewport.transform.k), 0.1)
    if abs(zoom_k - view.viewport.transform.k) > 1e-9:
        view.handle(Zoom(zoom_k / view.viewport.transform.k))

    st.divider()
    st.header("Focus")
    node_ids = list(view.graph.nodes)
    names = {nid: view.graph.nodes[nid].name for nid in node_ids}
    selected = st.selectbox(
        "Hover node:",
        [None] + node_ids,
        format_func=lambda nid: "(ingen)" if nid is None else names[nid],
    )
    if selected != view.controller.focused:
        session.focus(selected)

    st.divider()
    st.header("Drag")
    drag_node = st.selectbox("Node:", node_ids, format_func=lambda nid: names[nid])
    cx, cy = view.viewport.center
    drag_x = st.number_input("x", value=float(cx))
    drag_y = st.number_input("y", value=float(cy))
    if st.button("Drag here", use_container_width=True):
        session.drag_to(drag_node, drag_x, drag_y)

col_graph, col_panel = st.columns([3, 1])

with col_graph:
    fig = draw_scene(view)
    st.pyplot(fig, use_container_width=True)
    plt.close(fig)

with col_panel:
    st.subheader("Info")
    st.markdown(view.panel.to_html(), unsafe_allow_html=True)

    st.subheader("Simulation")
    metrics = layout_summary(view.engine)
    st.metric("Tick", int(metrics["ticks"]))
    st.metric("Alpha", f"{metrics['alpha']:.4f}")
    st.metric("Energy", f"{metrics['energy']:.3f}")
    st.metric("Mean link length", f"{metrics['mean_link_length']:.1f}")
    st.caption("Running" if view.running else "Settled")
