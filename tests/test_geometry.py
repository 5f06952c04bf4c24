"""Tests for curve construction, arrowheads and hit-testing."""

import pytest
from PySide6.QtCore import QPointF

from fsm_geometry import (
    STATE_RADIUS,
    Anchor,
    CubicCurve,
    QuadCurve,
    add_button_center,
    anchor_at,
    anchor_position,
    arrowhead,
    edge_curve,
    grid_position,
    hit_test_curve,
    point_in_state,
    point_on_add_button,
    self_loop_curve,
)
from fsm_model import State


def xy(p):
    return p.x(), p.y()


@pytest.fixture
def state():
    return State("q0", QPointF(100, 100))


class TestAnchors:
    def test_anchor_positions_lie_on_boundary(self, state):
        assert xy(anchor_position(state, Anchor.NORTH)) == (100, 100 - STATE_RADIUS)
        assert xy(anchor_position(state, Anchor.SOUTH)) == (100, 100 + STATE_RADIUS)
        assert xy(anchor_position(state, Anchor.EAST)) == (100 + STATE_RADIUS, 100)
        assert xy(anchor_position(state, Anchor.WEST)) == (100 - STATE_RADIUS, 100)

    def test_anchor_ordering_around_center(self, state):
        north = anchor_position(state, Anchor.NORTH)
        south = anchor_position(state, Anchor.SOUTH)
        east = anchor_position(state, Anchor.EAST)
        west = anchor_position(state, Anchor.WEST)
        assert north.y() < state.position.y() < south.y()
        assert west.x() < state.position.x() < east.x()

    def test_anchor_at_finds_nearby_anchor(self, state):
        assert anchor_at(state, QPointF(100, 70)) == Anchor.NORTH
        assert anchor_at(state, QPointF(130, 102)) == Anchor.EAST

    def test_anchor_at_center_is_none(self, state):
        assert anchor_at(state, QPointF(100, 100)) is None

    def test_point_in_state(self, state):
        assert point_in_state(state, QPointF(120, 120))
        assert not point_in_state(state, QPointF(140, 140))


class TestCurves:
    def test_edge_curve_without_offset_is_straight(self):
        curve = edge_curve(QPointF(0, 0), QPointF(100, 0), 0)
        assert xy(curve.ctrl) == pytest.approx((50, 0))

    def test_edge_curve_offset_along_normal(self):
        curve = edge_curve(QPointF(0, 0), QPointF(100, 0), 1)
        assert xy(curve.ctrl) == pytest.approx((50, 40))

    def test_edge_curve_flip_changes_side(self):
        curve = edge_curve(QPointF(0, 0), QPointF(100, 0), 2, flip=True)
        assert xy(curve.ctrl) == pytest.approx((50, -80))

    def test_edge_curve_side_independent_of_direction(self):
        forward = edge_curve(QPointF(0, 0), QPointF(100, 0), 1)
        backward = edge_curve(QPointF(100, 0), QPointF(0, 0), 1)
        flipped = edge_curve(QPointF(100, 0), QPointF(0, 0), 1, flip=True)
        assert xy(backward.ctrl) == pytest.approx(xy(forward.ctrl))
        assert xy(flipped.ctrl) == pytest.approx((50, -40))
        assert xy(backward.p0) == (100, 0)

    def test_quad_point_at(self):
        curve = QuadCurve(QPointF(0, 0), QPointF(50, 40), QPointF(100, 0))
        assert xy(curve.point_at(0)) == pytest.approx((0, 0))
        assert xy(curve.point_at(1)) == pytest.approx((100, 0))
        assert xy(curve.point_at(0.5)) == pytest.approx((50, 20))

    def test_self_loop_sits_above_state(self, state):
        loop = self_loop_curve(state, 0)
        assert isinstance(loop, CubicCurve)
        assert xy(loop.p0) == pytest.approx((84.5, 59))
        assert xy(loop.p1) == pytest.approx((115.5, 59))
        assert xy(loop.c1) == pytest.approx((84.5, 16))
        assert xy(loop.point_at(0.5)) == pytest.approx((100, 26.75))

    def test_stacked_self_loops_grow(self, state):
        first = self_loop_curve(state, 0)
        second = self_loop_curve(state, 1)
        assert second.p1.x() - second.p0.x() > first.p1.x() - first.p0.x()
        assert second.c1.y() < first.c1.y()

    def test_label_positions(self, state):
        curve = edge_curve(QPointF(0, 0), QPointF(100, 0), 1)
        assert xy(curve.label_position()) == pytest.approx((50, 40))
        loop = self_loop_curve(state, 0)
        assert xy(loop.label_position()) == pytest.approx((100, 24))


class TestArrowhead:
    def test_wings_step_back_from_tip(self):
        tip, p1, p2 = arrowhead(QPointF(0, 0), 0.0, 12, 5)
        assert xy(tip) == (0, 0)
        assert xy(p1) == pytest.approx((-12, 5))
        assert xy(p2) == pytest.approx((-12, -5))

    def test_quad_arrow_points_at_end(self):
        curve = QuadCurve(QPointF(0, 0), QPointF(50, 0), QPointF(100, 0))
        tip, p1, p2 = curve.arrow()
        assert xy(tip) == pytest.approx((100, 0))
        assert p1.x() < 100 and p2.x() < 100


class TestHitTesting:
    def test_hit_near_curve(self):
        curve = QuadCurve(QPointF(0, 0), QPointF(50, 40), QPointF(100, 0))
        assert hit_test_curve(curve, QPointF(50, 25))
        assert hit_test_curve(curve, QPointF(2, 1))

    def test_miss_away_from_curve(self):
        curve = QuadCurve(QPointF(0, 0), QPointF(50, 40), QPointF(100, 0))
        assert not hit_test_curve(curve, QPointF(50, 40))
        assert not hit_test_curve(curve, QPointF(50, -20))

    def test_coarse_step_still_samples_curve_end(self):
        curve = QuadCurve(QPointF(0, 0), QPointF(50, 0), QPointF(100, 0))
        # samples at t = 0, 0.3, 0.6, 0.9 and 1.0
        assert hit_test_curve(curve, QPointF(100, 0), sample_step=0.3, tolerance=3)
        assert not hit_test_curve(curve, QPointF(50, 0), sample_step=0.3, tolerance=3)

    def test_hit_on_self_loop(self, state):
        loop = self_loop_curve(state, 0)
        assert hit_test_curve(loop, QPointF(100, 27))
        assert not hit_test_curve(loop, QPointF(100, 100))


class TestLayoutHelpers:
    def test_grid_position_row_major(self):
        assert xy(grid_position(0, 4)) == (120, 120)
        assert xy(grid_position(1, 4)) == (240, 120)
        assert xy(grid_position(3, 4)) == (240, 240)
        assert xy(grid_position(2, 5)) == (360, 120)

    def test_add_button_only_on_large_canvas(self):
        assert xy(add_button_center(400, 300)) == (200, 150)
        assert add_button_center(100, 300) is None

    def test_point_on_add_button(self):
        center = QPointF(200, 150)
        assert point_on_add_button(center, QPointF(240, 160))
        assert not point_on_add_button(center, QPointF(260, 150))
        assert not point_on_add_button(None, QPointF(200, 150))
