"""
archgraph Core Package.

This package contains the implementation of the interactive architect/building
graph view, including:

- Graph model and builder (Graph, Node, Edge, build)
- Force-directed layout simulation (LayoutEngine and its forces)
- Scene glyphs kept in sync with the simulation (Renderer)
- Pointer focus/drag state machine (InteractionController)
- Pan/zoom and surface size (Viewport) and the side panel (InfoPanel)

The view is read-only: the graph is built once from relation records and only
positions, highlight flags and the panel change afterwards.
"""

# archgraph Core Package

__version__ = "0.1.0"

from .enums import Category, InteractionState, PanelMode
from .errors import ArchGraphError, DataLoadError, InvalidPinTarget, MalformedRecord
from .graph import Graph, Node, Edge, RelationRecord
from .builder import build, build_from_file, build_from_json, records_from_bindings
from .config import LayoutConfig, ViewConfig, load_config
from .layout import LayoutEngine
from .render import Renderer
from .interaction import InteractionController, compute_highlight
from .panel import InfoPanel, connection_text
from .viewport import Viewport
from .view import GraphView
