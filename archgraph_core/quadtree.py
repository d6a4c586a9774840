"""
Quadtree spatial partition for the n-body and collision forces.

Points are `(x, y, item)` triples. Leaves hold a bucket of points sharing the
same coordinates; internal quads hold up to four children. Each quad carries
mutable aggregate slots that the forces fill in during a post-order pass:

- value: summed charge of the points below (many-body force)
- cx, cy: charge-weighted centroid (many-body force)
- r: largest collision radius below (collision force)
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Tuple

# Beyond this depth distinct but nearly equal points share a bucket
MAX_DEPTH = 32


class Quad:
    """A square cell of the quadtree."""

    __slots__ = ("x0", "y0", "x1", "y1", "children", "points", "value", "cx", "cy", "r")

    def __init__(self, x0: float, y0: float, x1: float, y1: float):
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1
        self.children: Optional[List[Optional["Quad"]]] = None
        self.points: List[Tuple[float, float, Any]] = []
        self.value = 0.0
        self.cx = 0.0
        self.cy = 0.0
        self.r = 0.0

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    def items(self) -> List[Any]:
        return [item for _, _, item in self.points]

    def _child_index(self, x: float, y: float) -> int:
        xm = (self.x0 + self.x1) / 2.0
        ym = (self.y0 + self.y1) / 2.0
        return (int(y >= ym) << 1) | int(x >= xm)

    def _make_child(self, i: int) -> "Quad":
        xm = (self.x0 + self.x1) / 2.0
        ym = (self.y0 + self.y1) / 2.0
        x0, x1 = (xm, self.x1) if i & 1 else (self.x0, xm)
        y0, y1 = (ym, self.y1) if i & 2 else (self.y0, ym)
        return Quad(x0, y0, x1, y1)


class QuadTree:
    """
    Quadtree built once from a batch of points.

    Attributes:
        root: Top-level quad covering every point (None when empty)
        size: Number of points inserted
    """

    def __init__(self, points: Iterable[Tuple[float, float, Any]] = ()):
        pts = list(points)
        self.size = 0
        self.root: Optional[Quad] = None
        if not pts:
            return
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        x0, y0 = min(xs), min(ys)
        extent = max(max(xs) - x0, max(ys) - y0)
        if extent <= 0.0:
            extent = 1.0
        self.root = Quad(x0, y0, x0 + extent, y0 + extent)
        for x, y, item in pts:
            self.add(x, y, item)

    def add(self, x: float, y: float, item: Any) -> None:
        """Insert a point lying inside the root extent."""
        assert self.root is not None, "QuadTree was built without an extent"
        node = self.root
        depth = 0
        while True:
            if not node.is_leaf:
                i = node._child_index(x, y)
                child = node.children[i]
                if child is None:
                    child = node._make_child(i)
                    node.children[i] = child
                node = child
                depth += 1
                continue

            if not node.points or depth >= MAX_DEPTH:
                node.points.append((x, y, item))
                break
            px, py, _ = node.points[0]
            if px == x and py == y:
                node.points.append((x, y, item))
                break

            # Split the leaf and push its coincident bucket one level down
            bucket = node.points
            node.points = []
            node.children = [None, None, None, None]
            i = node._child_index(px, py)
            child = node._make_child(i)
            child.points = bucket
            node.children[i] = child
        self.size += 1

    def visit(self, callback: Callable[[Quad], bool]) -> None:
        """
        Visit quads in pre-order.

        Args:
            callback: Called with each quad; returning True skips its children
        """
        if self.root is None:
            return
        stack = [self.root]
        while stack:
            quad = stack.pop()
            if callback(quad) or quad.is_leaf:
                continue
            for child in reversed(quad.children):
                if child is not None:
                    stack.append(child)

    def visit_after(self, callback: Callable[[Quad], None]) -> None:
        """Visit quads in post-order (children before their parent)."""
        if self.root is None:
            return
        stack = [self.root]
        order: List[Quad] = []
        while stack:
            quad = stack.pop()
            order.append(quad)
            if not quad.is_leaf:
                for child in quad.children:
                    if child is not None:
                        stack.append(child)
        for quad in reversed(order):
            callback(quad)

    def leaves(self) -> List[Quad]:
        out: List[Quad] = []

        def collect(quad: Quad) -> bool:
            if quad.is_leaf and quad.points:
                out.append(quad)
            return False

        self.visit(collect)
        return out
