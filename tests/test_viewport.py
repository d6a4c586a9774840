"""
Tests for the viewport manager: surface size, resize reheat and pan/zoom.
"""

import pytest

from archgraph_core.builder import build
from archgraph_core.config import ViewportConfig
from archgraph_core.graph import RelationRecord
from archgraph_core.layout import LayoutEngine
from archgraph_core.viewport import Viewport, ZoomTransform


def settled_engine():
    engine = LayoutEngine(build([RelationRecord('A', 'A', 'B', 'B')]))
    while engine.step():
        pass
    return engine


class TestSize:
    def test_initial_size_excludes_side_panel(self):
        vp = Viewport()
        assert (vp.width, vp.height) == (1000.0, 800.0)
        assert vp.center == (500.0, 400.0)

    def test_resize_moves_center_and_reheats(self):
        engine = settled_engine()
        assert not engine.running
        vp = Viewport()

        vp.resize(1480, 800, engine)

        assert vp.width == 1200.0
        assert (engine.center.x, engine.center.y) == (600.0, 400.0)
        assert engine.alpha == pytest.approx(0.3)
        assert engine.alpha > engine.alpha_min
        assert engine.running

    def test_resize_without_engine(self):
        vp = Viewport()
        vp.resize(500, 400)
        assert (vp.width, vp.height) == (220.0, 400.0)

    def test_window_narrower_than_panel(self):
        vp = Viewport()
        vp.resize(100, 300)
        assert vp.width == 0.0

    def test_custom_panel_width(self):
        vp = Viewport(ViewportConfig(side_panel_width=0.0, initial_window_width=640, initial_window_height=480))
        assert vp.center == (320.0, 240.0)


class TestTransform:
    def test_apply_and_invert(self):
        t = ZoomTransform(2.0, 10.0, -5.0)
        assert t.apply(3.0, 4.0) == (16.0, 3.0)
        assert t.invert(16.0, 3.0) == (3.0, 4.0)
        assert t.to_svg() == 'translate(10.0,-5.0) scale(2.0)'

    def test_zoom_keeps_anchor_fixed(self):
        vp = Viewport()
        before = vp.to_simulation(200.0, 100.0)
        vp.zoom(2.0, 200.0, 100.0)
        assert vp.transform.k == 2.0
        assert vp.to_simulation(200.0, 100.0) == pytest.approx(before)

    def test_zoom_defaults_to_center(self):
        vp = Viewport()
        vp.zoom(2.0)
        assert vp.transform.apply(500.0, 400.0) == pytest.approx((500.0, 400.0))

    def test_scale_is_clamped(self):
        vp = Viewport()
        vp.zoom(100.0)
        assert vp.transform.k == 4.0
        vp.zoom_to(0.001)
        assert vp.transform.k == pytest.approx(0.1)
        assert vp.config.scale_extent == (0.1, 4.0)

    def test_pan_and_reset(self):
        vp = Viewport()
        vp.pan(15.0, -5.0)
        assert vp.to_simulation(15.0, -5.0) == (0.0, 0.0)
        vp.reset_transform()
        assert vp.transform == ZoomTransform()

    def test_transform_leaves_layout_alone(self):
        engine = settled_engine()
        before = engine.snapshot()
        vp = Viewport()
        vp.zoom(3.0, 10.0, 10.0)
        vp.pan(5.0, 5.0)
        assert engine.snapshot() == before
        assert not engine.running

    def test_to_dict(self):
        vp = Viewport()
        assert vp.to_dict() == {'width': 1000.0, 'height': 800.0, 'k': 1.0, 'x': 0.0, 'y': 0.0}
