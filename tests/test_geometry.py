import dataclasses
import math

import pytest

from pdf2dxf.geometry import (
    DEFAULT_CURVE_SEGMENTS,
    AffineTransform,
    LineSegment,
    Point,
    flatten_cubic,
)


def assert_point(actual: Point, x: float, y: float):
    assert actual.x == pytest.approx(x)
    assert actual.y == pytest.approx(y)


class TestAffineTransform:
    def test_identity_leaves_points_alone(self):
        assert AffineTransform.identity().apply(Point(3.5, -2.0)) == Point(3.5, -2.0)

    def test_apply_includes_translation(self):
        m = AffineTransform(2, 0, 0, 3, 10, 20)
        assert m.apply(Point(1, 1)) == Point(12, 23)

    def test_compose_applies_argument_first(self):
        scale = AffineTransform.scaling(2, 2)
        shift = AffineTransform.translation(10, 0)

        # shift first, then scale
        assert_point(scale.compose(shift).apply(Point(1, 0)), 22, 0)
        # scale first, then shift
        assert_point(shift.compose(scale).apply(Point(1, 0)), 12, 0)

    def test_compose_matches_sequential_application(self):
        angle = math.radians(30)
        rotate = AffineTransform(math.cos(angle), math.sin(angle),
                                 -math.sin(angle), math.cos(angle), 0, 0)
        skew = AffineTransform(1, 0.5, 0.25, 1, -4, 7)
        p = Point(3, -2)

        expected = rotate.apply(skew.apply(p))
        actual = rotate.compose(skew).apply(p)
        assert_point(actual, expected.x, expected.y)

    def test_compose_with_identity(self):
        m = AffineTransform(1, 2, 3, 4, 5, 6)
        assert m.compose(AffineTransform.identity()) == m
        assert AffineTransform.identity().compose(m) == m

    def test_from_values(self):
        m = AffineTransform.from_values([1, 0, 0, 1, 5, 6])
        assert m.to_tuple() == (1.0, 0.0, 0.0, 1.0, 5.0, 6.0)

    @pytest.mark.parametrize("values", [[], [1, 0, 0, 1, 0], [1, 0, 0, 1, 0, 0, 0]])
    def test_from_values_rejects_wrong_length(self, values):
        with pytest.raises(ValueError):
            AffineTransform.from_values(values)


class TestPoint:
    def test_value_semantics(self):
        assert Point(1, 2) == Point(1.0, 2.0)
        assert len({Point(1, 2), Point(1.0, 2.0)}) == 1

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Point(1, 2).x = 5


class TestLineSegment:
    def test_degenerate_within_epsilon(self):
        assert LineSegment(Point(5, 5), Point(5.0005, 5)).is_degenerate()
        assert LineSegment(Point(5, 5), Point(5.0009, 5.0009)).is_degenerate()

    def test_not_degenerate_when_one_axis_differs(self):
        assert not LineSegment(Point(5, 5), Point(5, 5.01)).is_degenerate()

    def test_scaled(self):
        segment = LineSegment(Point(1, 2), Point(3, 4)).scaled(2)
        assert segment == LineSegment(Point(2, 4), Point(6, 8))


class TestFlattenCubic:
    def test_default_segment_count(self):
        segments = flatten_cubic(Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0))
        assert len(segments) == DEFAULT_CURVE_SEGMENTS

    def test_chain_runs_from_start_to_end(self):
        p0, p3 = Point(0, 0), Point(10, 0)
        segments = flatten_cubic(p0, Point(0, 10), Point(10, 10), p3, 8)

        assert len(segments) == 8
        assert segments[0].start == p0
        assert segments[-1].end == p3
        for previous, current in zip(segments, segments[1:]):
            assert previous.end == current.start

    def test_midpoint_of_symmetric_curve(self):
        segments = flatten_cubic(Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0), 2)
        # B(0.5) = (p0 + 3 p1 + 3 p2 + p3) / 8
        assert_point(segments[0].end, 5, 7.5)

    def test_straight_control_polygon_stays_on_the_line(self):
        segments = flatten_cubic(Point(0, 0), Point(1, 1), Point(2, 2), Point(3, 3))
        for segment in segments:
            assert segment.end.x == pytest.approx(segment.end.y)

    def test_coincident_points_give_degenerate_segments(self):
        p = Point(4, 4)
        segments = flatten_cubic(p, p, p, p)
        assert len(segments) == DEFAULT_CURVE_SEGMENTS
        assert all(s.is_degenerate() for s in segments)

    def test_single_segment_is_the_chord(self):
        segments = flatten_cubic(Point(0, 0), Point(5, 9), Point(7, -3), Point(10, 2), 1)
        assert segments == [LineSegment(Point(0, 0), Point(10, 2))]

    def test_rejects_zero_segments(self):
        with pytest.raises(ValueError):
            flatten_cubic(Point(0, 0), Point(0, 0), Point(0, 0), Point(0, 0), 0)
