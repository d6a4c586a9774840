"""
Configuration objects for the graph view.

Exposes tunable parameters for the force simulation, the viewport and the
glyph geometry, enabling experiments without editing core logic. Defaults
reproduce the browser view.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Tuple

import yaml

DEFAULT_ALPHA_MIN = 0.001


@dataclass
class LayoutConfig:
    """
    Configuration for `LayoutEngine` forces and cooling schedule.
    """

    # Link force
    link_distance: float = 100.0
    link_iterations: int = 1

    # Many-body (repulsion) force
    charge_strength: float = -200.0
    theta: float = 0.9
    distance_min: float = 1.0
    distance_max: float = math.inf

    # Centering force
    center_strength: float = 1.0

    # Collision force
    collide_radius: float = 25.0
    collide_strength: float = 1.0
    collide_iterations: int = 1

    # Cooling schedule; alpha_decay of 0 means "derive from alpha_min over 300 ticks"
    alpha: float = 1.0
    alpha_min: float = DEFAULT_ALPHA_MIN
    alpha_decay: float = 0.0
    alpha_target: float = 0.0
    velocity_decay: float = 0.4

    # Reheat values used by drag and resize
    drag_alpha_target: float = 0.3
    reheat_alpha: float = 0.3

    # Initial placement (phyllotaxis spiral)
    initial_radius: float = 10.0

    # Seed for the jiggle generator
    seed: int = 0

    def effective_alpha_decay(self) -> float:
        if self.alpha_decay > 0.0:
            return self.alpha_decay
        return 1.0 - self.alpha_min ** (1.0 / 300.0)


@dataclass
class ViewportConfig:
    """Drawing surface geometry and zoom limits."""

    side_panel_width: float = 280.0
    min_scale: float = 0.1
    max_scale: float = 4.0
    initial_window_width: float = 1280.0
    initial_window_height: float = 800.0

    @property
    def scale_extent(self) -> Tuple[float, float]:
        return (self.min_scale, self.max_scale)


@dataclass
class RenderConfig:
    """Glyph geometry. Purely cosmetic."""

    architect_radius: float = 8.0
    building_radius: float = 7.0
    label_dx: float = 10.0
    label_dy: float = 4.0


@dataclass
class ViewConfig:
    """Aggregate configuration passed to `GraphView`."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    # Delay between frames of the asyncio loop, in seconds
    frame_interval: float = 1.0 / 60.0


_SECTIONS = {
    "layout": LayoutConfig,
    "viewport": ViewportConfig,
    "render": RenderConfig,
}


def _build_section(cls, values: Dict[str, Any], section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"unknown {section} option(s): {', '.join(sorted(unknown))}")
    return cls(**values)


def config_from_dict(data: Dict[str, Any]) -> ViewConfig:
    """
    Build a `ViewConfig` from a parsed YAML dictionary.

    Expected shape (every key optional):

    layout:
      link_distance: 100
      charge_strength: -200
    viewport:
      side_panel_width: 280
    render:
      architect_radius: 8
    frame_interval: 0.016

    Raises:
        ValueError: On unknown sections or options
    """
    data = dict(data or {})
    kwargs: Dict[str, Any] = {}
    for section, cls in _SECTIONS.items():
        values = data.pop(section, None) or {}
        if not isinstance(values, dict):
            raise ValueError(f"config section {section!r} must be a mapping")
        kwargs[section] = _build_section(cls, values, section)
    if "frame_interval" in data:
        kwargs["frame_interval"] = float(data.pop("frame_interval"))
    if data:
        raise ValueError(f"unknown config section(s): {', '.join(sorted(data))}")
    return ViewConfig(**kwargs)


def config_from_yaml(yaml_text: str) -> ViewConfig:
    """Parse YAML text into a `ViewConfig`."""
    data = yaml.safe_load(yaml_text) or {}
    return config_from_dict(data)


def load_config(path: str) -> ViewConfig:
    """Read a YAML config file into a `ViewConfig`."""
    with open(path, "r", encoding="utf-8") as f:
        txt = f.read()
    return config_from_yaml(txt)
