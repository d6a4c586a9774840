"""
Core enumerations for the architect/building graph view.

This module defines the node categories, the interaction states of the pointer
controller and the display modes of the side panel.
"""

from enum import Enum, auto


class Category(Enum):
    """
    Categories of nodes in the bipartite graph.

    Every relation record links one node of each category:
    - ARCHITECT: the subject of a relation record
    - BUILDING: the object of a relation record
    """

    ARCHITECT = auto()
    """Subject side of a relation (the person who designed something)."""

    BUILDING = auto()
    """Object side of a relation (the designed building)."""

    @property
    def label(self) -> str:
        """Localized category label shown in the side panel."""
        return "Arkitekt" if self is Category.ARCHITECT else "Byggnad"

    @property
    def opposite(self) -> "Category":
        return Category.BUILDING if self is Category.ARCHITECT else Category.ARCHITECT


class InteractionState(Enum):
    """
    States of the pointer interaction controller.

    - IDLE: nothing focused or dragged, every glyph at its baseline
    - FOCUSED: the pointer hovers a node and its neighborhood is highlighted
    - DRAGGING: a node is pinned under the pointer
    """

    IDLE = auto()
    FOCUSED = auto()
    DRAGGING = auto()


class PanelMode(Enum):
    """Mutually exclusive display modes of the side panel."""

    HINT = auto()
    """Placeholder text shown while nothing is focused."""

    DETAIL = auto()
    """Name, category and connection count of the focused node."""

    ERROR = auto()
    """Data could not be loaded; nothing else is shown."""
