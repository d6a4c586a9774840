"""
Side panel content: placeholder hint, node detail or load error.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .enums import Category, PanelMode
from .graph import Node

HINT_TEXT = "Hovra över noder för information"
ERROR_TEXT = "Fel vid laddning av data"

# Singular noun counted from each side; plural adds "er"
_COUNTED_NOUN = {
    Category.ARCHITECT: "byggnad",
    Category.BUILDING: "arkitekt",
}
PLURAL_SUFFIX = "er"


def connection_text(category: Category, count: int) -> str:
    """
    Pluralized count of the opposite category.

    Architects count buildings and buildings count architects. Every count
    other than 1, zero included, takes the plural suffix.

    >>> connection_text(Category.ARCHITECT, 2)
    '2 byggnader'
    >>> connection_text(Category.BUILDING, 1)
    '1 arkitekt'
    """
    noun = _COUNTED_NOUN[category]
    return f"{count} {noun}{PLURAL_SUFFIX if count != 1 else ''}"


@dataclass
class NodeSummary:
    name: str
    category_label: str
    connections: str


class InfoPanel:
    """
    Holds exactly one of the three panel states.

    Attributes:
        mode: Current display mode
        summary: Node detail when mode is DETAIL
        message: Error text when mode is ERROR
    """

    def __init__(self):
        self.mode = PanelMode.HINT
        self.summary: Optional[NodeSummary] = None
        self.message: Optional[str] = None

    def show_hint(self) -> None:
        self.mode = PanelMode.HINT
        self.summary = None
        self.message = None

    def show_node(self, node: Node) -> NodeSummary:
        self.mode = PanelMode.DETAIL
        self.summary = NodeSummary(
            name=node.name,
            category_label=node.category.label,
            connections=connection_text(node.category, len(node.neighbor_labels)),
        )
        self.message = None
        return self.summary

    def show_error(self, message: str = ERROR_TEXT) -> None:
        self.mode = PanelMode.ERROR
        self.summary = None
        self.message = message

    def text(self) -> str:
        """Plain-text rendering, one line per field."""
        if self.mode == PanelMode.DETAIL and self.summary is not None:
            s = self.summary
            return f"{s.name}\n{s.category_label}\n{s.connections}"
        if self.mode == PanelMode.ERROR:
            return self.message or ERROR_TEXT
        return HINT_TEXT

    def to_html(self) -> str:
        if self.mode == PanelMode.DETAIL and self.summary is not None:
            s = self.summary
            return (
                f'<div class="node-name">{html.escape(s.name)}</div>'
                f'<div class="node-type">{html.escape(s.category_label)}</div>'
                f'<div class="node-connections">{html.escape(s.connections)}</div>'
            )
        if self.mode == PanelMode.ERROR:
            return f'<p style="color: #cc0000;">{html.escape(self.message or ERROR_TEXT)}</p>'
        return f'<p class="hint">{HINT_TEXT}</p>'

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"mode": self.mode.name}
        if self.summary is not None:
            data.update(
                name=self.summary.name,
                category=self.summary.category_label,
                connections=self.summary.connections,
            )
        if self.message is not None:
            data["message"] = self.message
        return data
