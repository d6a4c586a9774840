"""
Unit tests for layout diagnostics.
"""

import math

import pytest

from archgraph_core.builder import build
from archgraph_core.graph import RelationRecord
from archgraph_core.layout import LayoutEngine, SimNode
from archgraph_core.metrics import (
    bounding_box,
    centroid,
    kinetic_energy,
    layout_summary,
    mean_link_length,
    min_pair_distance,
)


def square():
    return [
        SimNode('a', 0, 0.0, 0.0, vx=1.0, vy=2.0),
        SimNode('b', 1, 4.0, 0.0),
        SimNode('c', 2, 4.0, 3.0),
        SimNode('d', 3, 0.0, 3.0, vx=-2.0),
    ]


class TestNodeMetrics:
    def test_kinetic_energy(self):
        assert kinetic_energy(square()) == pytest.approx(1 + 4 + 4)

    def test_centroid(self):
        assert centroid(square()) == (2.0, 1.5)
        assert centroid([]) == (0.0, 0.0)

    def test_bounding_box(self):
        box = bounding_box(square())
        assert box == {'x0': 0.0, 'y0': 0.0, 'x1': 4.0, 'y1': 3.0, 'width': 4.0, 'height': 3.0}
        assert bounding_box([])['width'] == 0.0

    def test_min_pair_distance(self):
        assert min_pair_distance(square()) == pytest.approx(3.0)
        assert math.isinf(min_pair_distance(square()[:1]))


class TestEngineMetrics:
    def make_engine(self):
        return LayoutEngine(build([
            RelationRecord('A', 'A', 'B1', 'B1'),
            RelationRecord('A', 'A', 'B2', 'B2'),
        ]))

    def test_mean_link_length(self):
        engine = self.make_engine()
        a, b1, b2 = engine.nodes
        expected = (math.hypot(b1.x - a.x, b1.y - a.y) + math.hypot(b2.x - a.x, b2.y - a.y)) / 2
        assert mean_link_length(engine) == pytest.approx(expected)

    def test_settled_layout_respects_collision_radius(self):
        engine = self.make_engine()
        while engine.step():
            pass
        assert min_pair_distance(engine.nodes) > 40.0
        assert mean_link_length(engine) == pytest.approx(100.0, abs=40.0)

    def test_layout_summary(self):
        engine = self.make_engine()
        engine.tick(3)
        summary = layout_summary(engine)
        assert summary['ticks'] == 3.0
        assert summary['alpha'] == engine.alpha
        assert set(summary) >= {'energy', 'centroid_x', 'width', 'mean_link_length', 'min_pair_distance'}

    def test_empty_engine(self):
        engine = LayoutEngine(build([]))
        assert mean_link_length(engine) == 0.0
        assert layout_summary(engine)['energy'] == 0.0
