"""
Force-directed layout engine.

This module implements the continuous physics simulation that positions the
graph's nodes. The engine manages:

- One mutable `SimNode` position record per graph node
- Edge endpoints resolved once to their SimNode records
- Four forces applied on every tick (link, charge, center, collision)
- A decaying temperature (alpha); the engine stops once alpha < alpha_min
- Pins (fx/fy) that override integration while a node is dragged

Configuration: forces and the cooling schedule are tunable via `LayoutConfig`
in `archgraph_core.config`.

Each scheduled frame (`step`) has three phases:
1. Cooling: alpha moves toward alpha_target by alpha_decay
2. Integration: forces update velocities, velocities update positions
3. Notification: tick listeners run; end listeners run once settled
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from .config import LayoutConfig
from .errors import InvalidPinTarget
from .forces import CenterForce, CollideForce, Force, LinkForce, ManyBodyForce
from .graph import Graph

logger = logging.getLogger(__name__)

INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


@dataclass
class SimNode:
    """
    Position state of one node, owned by the layout engine.

    `fx`/`fy` are only set or cleared through the pin API; the integrator
    reads them but never writes them.
    """

    id: str
    index: int
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None


@dataclass
class ResolvedLink:
    """An edge with its endpoints resolved to live position records."""

    index: int
    source: SimNode
    target: SimNode


def integrate(
    nodes: Sequence[SimNode],
    forces: Sequence[Force],
    alpha: float,
    velocity_decay: float,
) -> float:
    """
    Advance node positions by one integration step.

    Applies every force at the given alpha, then damps velocities and moves
    every free node. Pinned axes snap to the pin and lose their velocity.

    Args:
        nodes: Position records to advance in place
        forces: Forces already initialized on `nodes`
        alpha: Current temperature
        velocity_decay: Fraction of velocity removed per step (0..1)

    Returns:
        float: Kinetic energy (sum of squared velocities) after the step
    """
    for force in forces:
        force(alpha)

    keep = 1.0 - velocity_decay
    for node in nodes:
        if node.fx is None:
            node.vx *= keep
            node.x += node.vx
        else:
            node.x = node.fx
            node.vx = 0.0
        if node.fy is None:
            node.vy *= keep
            node.y += node.vy
        else:
            node.y = node.fy
            node.vy = 0.0

    if not nodes:
        return 0.0
    velocities = np.array([(node.vx, node.vy) for node in nodes], dtype=float)
    return float(np.square(velocities).sum())


class LayoutEngine:
    """
    Continuous force-directed simulation over a graph's nodes.

    Attributes:
        graph: The graph whose nodes are positioned
        config: Force and cooling parameters
        nodes: Position records in graph node order
        links: Edges resolved to position records, in edge order
        forces: Named forces, applied in insertion order
        alpha: Current temperature
        alpha_target: Value alpha decays toward
        running: Whether scheduled frames advance the simulation
        tick_count: Number of integration steps taken
    """

    def __init__(self, graph: Graph, config: LayoutConfig | None = None):
        """
        Initialize positions and forces for a built graph.

        Args:
            graph: Graph produced by the builder
            config: Layout parameters (defaults give the browser view)
        """
        self.graph = graph
        self.config = config or LayoutConfig()
        self._rng = np.random.default_rng(self.config.seed)

        self.nodes: List[SimNode] = [
            SimNode(node_id, i) for i, node_id in enumerate(graph.nodes)
        ]
        self._by_id: Dict[str, SimNode] = {n.id: n for n in self.nodes}
        self._place_initial()

        self.links: List[ResolvedLink] = [
            ResolvedLink(i, self._by_id[e.source_id], self._by_id[e.target_id])
            for i, e in enumerate(graph.edges)
        ]

        cfg = self.config
        self.forces: Dict[str, Force] = {}
        self.add_force(LinkForce(self.links, distance=cfg.link_distance, iterations=cfg.link_iterations))
        self.add_force(
            ManyBodyForce(
                strength=cfg.charge_strength,
                theta=cfg.theta,
                distance_min=cfg.distance_min,
                distance_max=cfg.distance_max,
            )
        )
        self.add_force(CenterForce(0.0, 0.0, strength=cfg.center_strength))
        self.add_force(
            CollideForce(
                radius=cfg.collide_radius,
                strength=cfg.collide_strength,
                iterations=cfg.collide_iterations,
            )
        )

        self.alpha = cfg.alpha
        self.alpha_min = cfg.alpha_min
        self.alpha_decay = cfg.effective_alpha_decay()
        self.alpha_target = cfg.alpha_target
        self.velocity_decay = cfg.velocity_decay
        self.running = bool(self.nodes)
        self.tick_count = 0
        self.energy = 0.0

        self._tick_listeners: List[Callable[["LayoutEngine"], None]] = []
        self._end_listeners: List[Callable[["LayoutEngine"], None]] = []
        self._restart_listeners: List[Callable[["LayoutEngine"], None]] = []

    # ----- setup -----
    def _place_initial(self) -> None:
        """Lay nodes out on a phyllotaxis spiral with zero velocity."""
        r0 = self.config.initial_radius
        for node in self.nodes:
            radius = r0 * math.sqrt(0.5 + node.index)
            angle = node.index * INITIAL_ANGLE
            node.x = radius * math.cos(angle)
            node.y = radius * math.sin(angle)
            node.vx = node.vy = 0.0

    def _jiggle(self) -> float:
        return (float(self._rng.random()) - 0.5) * 1e-6

    def add_force(self, force: Force) -> Force:
        """Register (or replace) a force under its name and bind it to the nodes."""
        force.initialize(self.nodes, self._jiggle)
        self.forces[force.name] = force
        return force

    @property
    def center(self) -> CenterForce:
        return self.forces["center"]  # type: ignore[return-value]

    # ----- listeners -----
    def on_tick(self, callback: Callable[["LayoutEngine"], None]) -> None:
        """Call `callback(engine)` after every scheduled tick."""
        self._tick_listeners.append(callback)

    def on_end(self, callback: Callable[["LayoutEngine"], None]) -> None:
        """Call `callback(engine)` when the simulation settles."""
        self._end_listeners.append(callback)

    def on_restart(self, callback: Callable[["LayoutEngine"], None]) -> None:
        """Call `callback(engine)` whenever the simulation is reheated."""
        self._restart_listeners.append(callback)

    # ----- lookups -----
    def position(self, node_id: str) -> SimNode:
        """
        Return the position record of a node.

        Raises:
            InvalidPinTarget: If the id is unknown to the engine
        """
        try:
            return self._by_id[node_id]
        except KeyError:
            raise InvalidPinTarget(node_id) from None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    @property
    def is_settled(self) -> bool:
        return self.alpha < self.alpha_min

    # ----- simulation -----
    def tick(self, iterations: int = 1):
        """
        Advance the simulation by `iterations` integration steps.

        Does not notify listeners and ignores `running`; use `step` for
        scheduled frames.

        Returns:
            dict: Snapshot of the simulation after ticking
        """
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
            self.energy = integrate(
                self.nodes, list(self.forces.values()), self.alpha, self.velocity_decay
            )
            self.tick_count += 1
        return self.snapshot()

    def step(self) -> bool:
        """
        Run one scheduled frame.

        Ticks once and notifies tick listeners; stops and notifies end
        listeners when alpha falls below alpha_min.

        Returns:
            bool: True if a tick happened
        """
        if not self.running:
            return False
        self.tick()
        for callback in list(self._tick_listeners):
            callback(self)
        if self.alpha < self.alpha_min:
            self.running = False
            logger.debug("Layout settled after %d ticks", self.tick_count)
            for callback in list(self._end_listeners):
                callback(self)
        return True

    def reheat(self, alpha: float | None = None, alpha_target: float | None = None) -> None:
        """
        Raise the temperature and resume scheduled ticking.

        Args:
            alpha: New temperature, if given
            alpha_target: New value for alpha to decay toward, if given
        """
        if alpha is not None:
            self.alpha = float(alpha)
        if alpha_target is not None:
            self.alpha_target = float(alpha_target)
        was_running = self.running
        self.running = bool(self.nodes)
        logger.debug("Reheat: alpha=%.4f target=%.4f", self.alpha, self.alpha_target)
        if self.running and not was_running:
            for callback in list(self._restart_listeners):
                callback(self)

    def stop(self) -> None:
        """Force the simulation to rest (view teardown)."""
        self.alpha = 0.0
        self.alpha_target = 0.0
        self.running = False

    def set_center(self, x: float, y: float) -> None:
        """Move the centering force's target point."""
        self.center.x = float(x)
        self.center.y = float(y)

    # ----- pins -----
    def pin(self, node_id: str, x: float, y: float) -> bool:
        """
        Fix a node at (x, y) for subsequent ticks.

        Unknown ids are ignored, since they can only come from stale events.

        Returns:
            bool: True if a node was pinned
        """
        try:
            node = self.position(node_id)
        except InvalidPinTarget as exc:
            logger.debug("Ignoring pin: %s", exc)
            return False
        node.fx = float(x)
        node.fy = float(y)
        return True

    def move_pin(self, node_id: str, x: float, y: float) -> bool:
        """Update the pinned coordinates of a node (same contract as `pin`)."""
        return self.pin(node_id, x, y)

    def unpin(self, node_id: str) -> bool:
        """
        Release a node back to free integration.

        Returns:
            bool: True if the id was known
        """
        try:
            node = self.position(node_id)
        except InvalidPinTarget as exc:
            logger.debug("Ignoring unpin: %s", exc)
            return False
        node.fx = None
        node.fy = None
        return True

    def release_all(self) -> None:
        for node in self.nodes:
            node.fx = None
            node.fy = None

    def snapshot(self):
        """
        Create a snapshot of the current simulation state.

        Returns:
            dict: Dictionary containing:
                - 'tick': Number of integration steps taken
                - 'alpha': Current temperature
                - 'running': Whether frames still advance the simulation
                - 'energy': Kinetic energy after the last tick
                - 'nodes': Dictionary of position records by node id
        """
        return {
            "tick": self.tick_count,
            "alpha": self.alpha,
            "running": self.running,
            "energy": self.energy,
            "nodes": {
                n.id: {"x": n.x, "y": n.y, "vx": n.vx, "vy": n.vy, "fx": n.fx, "fy": n.fy}
                for n in self.nodes
            },
        }
