"""
Composable forces for the layout simulation.

Each force is bound to the simulation's node list once via `initialize` and is
then called with the current alpha on every tick. Forces only add to node
velocities, except `CenterForce`, which translates positions directly.

- LinkForce: springs toward a target separation along each edge
- ManyBodyForce: pairwise repulsion approximated with Barnes-Hut
- CenterForce: keeps the layout centroid at the viewport center
- CollideForce: resolves overlapping node discs
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Sequence

from .quadtree import Quad, QuadTree

Jiggle = Callable[[], float]


def _no_jiggle() -> float:
    return 1e-6


class Force:
    """Base class for simulation forces."""

    name = "force"

    def __init__(self):
        self.nodes: List = []
        self.jiggle: Jiggle = _no_jiggle

    def initialize(self, nodes: Sequence, jiggle: Jiggle) -> None:
        """
        Bind the force to the simulation's nodes.

        Args:
            nodes: Node records exposing index, x, y, vx, vy
            jiggle: Returns a tiny random offset used to separate coincident points
        """
        self.nodes = list(nodes)
        self.jiggle = jiggle

    def __call__(self, alpha: float) -> None:  # pragma: no cover - abstract
        raise NotImplementedError


class LinkForce(Force):
    """
    Spring force pulling each edge's endpoints toward `distance`.

    Strength defaults to 1 / min(degree(source), degree(target)) so that hubs
    do not over-constrain their neighbors; the correction is split between the
    endpoints in proportion to their degrees.
    """

    name = "link"

    def __init__(self, links: Sequence, distance: float = 100.0, iterations: int = 1):
        super().__init__()
        self.links = list(links)
        self.distance = float(distance)
        self.iterations = int(iterations)
        self.count: Dict[int, int] = {}
        self.strengths: List[float] = []
        self.bias: List[float] = []

    def initialize(self, nodes: Sequence, jiggle: Jiggle) -> None:
        super().initialize(nodes, jiggle)
        self.count = {node.index: 0 for node in self.nodes}
        for link in self.links:
            self.count[link.source.index] += 1
            self.count[link.target.index] += 1
        self.strengths = []
        self.bias = []
        for link in self.links:
            cs = self.count[link.source.index]
            ct = self.count[link.target.index]
            self.strengths.append(1.0 / min(cs, ct))
            self.bias.append(cs / (cs + ct))

    def __call__(self, alpha: float) -> None:
        for _ in range(self.iterations):
            for i, link in enumerate(self.links):
                source, target = link.source, link.target
                if source is target:
                    # a self-relation has no separation to restore
                    continue
                x = target.x + target.vx - source.x - source.vx
                if x == 0.0:
                    x = self.jiggle()
                y = target.y + target.vy - source.y - source.vy
                if y == 0.0:
                    y = self.jiggle()
                length = math.sqrt(x * x + y * y)
                length = (length - self.distance) / length * alpha * self.strengths[i]
                x *= length
                y *= length
                b = self.bias[i]
                target.vx -= x * b
                target.vy -= y * b
                b = 1.0 - b
                source.vx += x * b
                source.vy += y * b


class ManyBodyForce(Force):
    """
    Constant-strength repulsion between all node pairs.

    Distant clusters are approximated by their charge-weighted centroid when
    quad width / distance < theta (Barnes-Hut).
    """

    name = "charge"

    def __init__(
        self,
        strength: float = -200.0,
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ):
        super().__init__()
        self.strength = float(strength)
        self.theta2 = theta * theta
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max
        self.strengths: List[float] = []

    def initialize(self, nodes: Sequence, jiggle: Jiggle) -> None:
        super().initialize(nodes, jiggle)
        self.strengths = [self.strength] * len(self.nodes)

    def _accumulate(self, quad: Quad) -> None:
        if quad.is_leaf:
            quad.value = sum(self.strengths[item.index] for item in quad.items())
            if quad.points:
                quad.cx, quad.cy = quad.points[0][0], quad.points[0][1]
            return
        strength = weight = x = y = 0.0
        for child in quad.children:
            if child is None or not child.value:
                continue
            c = abs(child.value)
            strength += child.value
            weight += c
            x += c * child.cx
            y += c * child.cy
        quad.value = strength
        if weight:
            quad.cx = x / weight
            quad.cy = y / weight

    def __call__(self, alpha: float) -> None:
        if not self.nodes:
            return
        tree = QuadTree((node.x, node.y, node) for node in self.nodes)
        tree.visit_after(self._accumulate)
        for node in self.nodes:
            tree.visit(lambda quad, node=node: self._apply(quad, node, alpha))

    def _apply(self, quad: Quad, node, alpha: float) -> bool:
        if not quad.value:
            return True

        x = quad.cx - node.x
        y = quad.cy - node.y
        w = quad.width
        dist2 = x * x + y * y

        # Far enough away: treat the quad as a single body
        if w * w / self.theta2 < dist2:
            if dist2 < self.distance_max2:
                if x == 0.0:
                    x = self.jiggle()
                    dist2 += x * x
                if y == 0.0:
                    y = self.jiggle()
                    dist2 += y * y
                if dist2 < self.distance_min2:
                    dist2 = math.sqrt(self.distance_min2 * dist2)
                node.vx += x * quad.value * alpha / dist2
                node.vy += y * quad.value * alpha / dist2
            return True

        if not quad.is_leaf or dist2 >= self.distance_max2:
            return False

        others = [item for item in quad.items() if item is not node]
        if not others:
            return True
        if x == 0.0:
            x = self.jiggle()
            dist2 += x * x
        if y == 0.0:
            y = self.jiggle()
            dist2 += y * y
        if dist2 < self.distance_min2:
            dist2 = math.sqrt(self.distance_min2 * dist2)
        for other in others:
            w = self.strengths[other.index] * alpha / dist2
            node.vx += x * w
            node.vy += y * w
        return True


class CenterForce(Force):
    """
    Translate every node so that the centroid sits at (x, y).

    `x` and `y` are updated in place when the viewport is resized.
    """

    name = "center"

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0):
        super().__init__()
        self.x = float(x)
        self.y = float(y)
        self.strength = float(strength)

    def __call__(self, alpha: float) -> None:
        n = len(self.nodes)
        if not n:
            return
        sx = sum(node.x for node in self.nodes)
        sy = sum(node.y for node in self.nodes)
        sx = (sx / n - self.x) * self.strength
        sy = (sy / n - self.y) * self.strength
        for node in self.nodes:
            node.x -= sx
            node.y -= sy


class CollideForce(Force):
    """
    Treat each node as a disc of `radius` and push overlapping pairs apart.

    Positions are anticipated by one step of velocity. Each pair is resolved
    once per iteration, by the node with the lower index.
    """

    name = "collision"

    def __init__(self, radius: float = 25.0, strength: float = 1.0, iterations: int = 1):
        super().__init__()
        self.radius = float(radius)
        self.strength = float(strength)
        self.iterations = int(iterations)
        self.radii: List[float] = []

    def initialize(self, nodes: Sequence, jiggle: Jiggle) -> None:
        super().initialize(nodes, jiggle)
        self.radii = [self.radius] * len(self.nodes)

    def _prepare(self, quad: Quad) -> None:
        if quad.is_leaf:
            quad.r = max((self.radii[item.index] for item in quad.items()), default=0.0)
            return
        quad.r = max((child.r for child in quad.children if child is not None), default=0.0)

    def __call__(self, alpha: float) -> None:
        if not self.nodes:
            return
        for _ in range(self.iterations):
            tree = QuadTree((node.x + node.vx, node.y + node.vy, node) for node in self.nodes)
            tree.visit_after(self._prepare)
            for node in self.nodes:
                tree.visit(lambda quad, node=node: self._apply(quad, node))

    def _apply(self, quad: Quad, node) -> bool:
        ri = self.radii[node.index]
        xi = node.x + node.vx
        yi = node.y + node.vy
        if quad.is_leaf:
            ri2 = ri * ri
            for other in quad.items():
                if other.index <= node.index:
                    continue
                rj = self.radii[other.index]
                r = ri + rj
                x = xi - other.x - other.vx
                y = yi - other.y - other.vy
                dist2 = x * x + y * y
                if dist2 >= r * r:
                    continue
                if x == 0.0:
                    x = self.jiggle()
                    dist2 += x * x
                if y == 0.0:
                    y = self.jiggle()
                    dist2 += y * y
                dist = math.sqrt(dist2)
                push = (r - dist) / dist * self.strength
                x *= push
                y *= push
                share = rj * rj / (ri2 + rj * rj)
                node.vx += x * share
                node.vy += y * share
                share = 1.0 - share
                other.vx -= x * share
                other.vy -= y * share
            return True
        r = ri + quad.r
        return quad.x0 > xi + r or quad.x1 < xi - r or quad.y0 > yi + r or quad.y1 < yi - r
