"""
Layout diagnostics for the force simulation.

This module provides:
- Kinetic energy and centroid of a set of position records
- Bounding box of the layout
- Mean on-screen length of the edges
- Smallest distance between any two nodes (overlap check)

All helpers accept the `SimNode` records owned by `LayoutEngine`.
"""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

import numpy as np


def _positions(nodes: Iterable) -> np.ndarray:
    return np.array([(n.x, n.y) for n in nodes], dtype=float).reshape(-1, 2)


def kinetic_energy(nodes: Iterable) -> float:
    """Sum of squared velocities."""
    v = np.array([(n.vx, n.vy) for n in nodes], dtype=float).reshape(-1, 2)
    return float(np.square(v).sum())


def centroid(nodes: Iterable) -> Tuple[float, float]:
    """Mean position, or (0, 0) for an empty layout."""
    p = _positions(nodes)
    if not len(p):
        return (0.0, 0.0)
    cx, cy = p.mean(axis=0)
    return (float(cx), float(cy))


def bounding_box(nodes: Iterable) -> Dict[str, float]:
    """
    Axis-aligned bounds of the layout.

    Returns:
        dict with keys: x0, y0, x1, y1, width, height
    """
    p = _positions(nodes)
    if not len(p):
        return {"x0": 0.0, "y0": 0.0, "x1": 0.0, "y1": 0.0, "width": 0.0, "height": 0.0}
    x0, y0 = p.min(axis=0)
    x1, y1 = p.max(axis=0)
    return {
        "x0": float(x0),
        "y0": float(y0),
        "x1": float(x1),
        "y1": float(y1),
        "width": float(x1 - x0),
        "height": float(y1 - y0),
    }


def mean_link_length(engine) -> float:
    """Average distance between the endpoints of every resolved link."""
    if not engine.links:
        return 0.0
    src = np.array([(l.source.x, l.source.y) for l in engine.links], dtype=float)
    dst = np.array([(l.target.x, l.target.y) for l in engine.links], dtype=float)
    return float(np.linalg.norm(dst - src, axis=1).mean())


def min_pair_distance(nodes: Iterable) -> float:
    """Smallest distance between two distinct nodes (inf for fewer than two)."""
    p = _positions(nodes)
    if len(p) < 2:
        return float("inf")
    diff = p[:, None, :] - p[None, :, :]
    dist = np.sqrt(np.square(diff).sum(axis=-1))
    np.fill_diagonal(dist, np.inf)
    return float(dist.min())


def layout_summary(engine) -> Dict[str, float]:
    """Compact metrics dictionary for reports."""
    cx, cy = centroid(engine.nodes)
    box = bounding_box(engine.nodes)
    return {
        "ticks": float(engine.tick_count),
        "alpha": float(engine.alpha),
        "energy": kinetic_energy(engine.nodes),
        "centroid_x": cx,
        "centroid_y": cy,
        "width": box["width"],
        "height": box["height"],
        "mean_link_length": mean_link_length(engine),
        "min_pair_distance": min_pair_distance(engine.nodes),
    }
