"""
Viewport manager: drawing surface size and pan/zoom transform.

The transform only affects how the scene is displayed. Simulation
coordinates are never modified here; pointer positions are converted with
`to_simulation` before they reach the layout engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import ViewportConfig

logger = logging.getLogger(__name__)


@dataclass
class ZoomTransform:
    """Uniform scale `k` followed by translation (x, y)."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, px: float, py: float) -> Tuple[float, float]:
        """Simulation point -> screen point."""
        return (px * self.k + self.x, py * self.k + self.y)

    def invert(self, sx: float, sy: float) -> Tuple[float, float]:
        """Screen point -> simulation point."""
        return ((sx - self.x) / self.k, (sy - self.y) / self.k)

    def to_svg(self) -> str:
        return f"translate({self.x},{self.y}) scale({self.k})"


class Viewport:
    """
    Size of the drawing surface and the display transform.

    Attributes:
        width: Surface width (window width minus the side panel)
        height: Surface height (window height)
        transform: Current pan/zoom transform
    """

    def __init__(self, config: ViewportConfig | None = None):
        self.config = config or ViewportConfig()
        self.width = 0.0
        self.height = 0.0
        self.transform = ZoomTransform()
        self._set_size(self.config.initial_window_width, self.config.initial_window_height)

    def _set_size(self, window_width: float, window_height: float) -> None:
        self.width = max(0.0, float(window_width) - self.config.side_panel_width)
        self.height = max(0.0, float(window_height))

    @property
    def center(self) -> Tuple[float, float]:
        return (self.width / 2.0, self.height / 2.0)

    def resize(self, window_width: float, window_height: float, engine=None, reheat_alpha: float = 0.3) -> None:
        """
        Recompute the surface size from the window size.

        When an engine is given, its centering target moves to the new
        surface center and the simulation is reheated.
        """
        self._set_size(window_width, window_height)
        logger.debug("Viewport resized to %.0fx%.0f", self.width, self.height)
        if engine is not None:
            engine.set_center(*self.center)
            engine.reheat(alpha=reheat_alpha)

    def clamp_scale(self, k: float) -> float:
        return max(self.config.min_scale, min(self.config.max_scale, float(k)))

    def zoom(self, factor: float, anchor_x: Optional[float] = None, anchor_y: Optional[float] = None) -> ZoomTransform:
        """
        Scale the view by `factor` keeping the anchor point fixed on screen.

        The anchor defaults to the surface center.
        """
        return self.zoom_to(self.transform.k * float(factor), anchor_x, anchor_y)

    def zoom_to(self, k: float, anchor_x: Optional[float] = None, anchor_y: Optional[float] = None) -> ZoomTransform:
        if anchor_x is None or anchor_y is None:
            anchor_x, anchor_y = self.center
        new_k = self.clamp_scale(k)
        px, py = self.transform.invert(anchor_x, anchor_y)
        self.transform = ZoomTransform(new_k, anchor_x - px * new_k, anchor_y - py * new_k)
        return self.transform

    def pan(self, dx: float, dy: float) -> ZoomTransform:
        t = self.transform
        self.transform = ZoomTransform(t.k, t.x + float(dx), t.y + float(dy))
        return self.transform

    def reset_transform(self) -> None:
        self.transform = ZoomTransform()

    def to_simulation(self, sx: float, sy: float) -> Tuple[float, float]:
        return self.transform.invert(sx, sy)

    def to_dict(self):
        t = self.transform
        return {"width": self.width, "height": self.height, "k": t.k, "x": t.x, "y": t.y}
