"""
Unit tests for planar geometry helpers.
"""

import itertools

import numpy as np
import pytest

from src.common.geometry import (
    is_convex_quadrilateral,
    is_degenerate_quad,
    order_points,
    polygon_area,
    segments_intersect,
)


class TestOrderPoints:
    """Tests for order_points function."""

    def test_axis_aligned_rectangle(self):
        """Test ordering of a plain rectangle."""
        pts = np.array([[400, 300], [100, 100], [100, 300], [400, 100]])
        ordered = order_points(pts)

        expected = np.array([[100, 100], [400, 100], [400, 300], [100, 300]])
        np.testing.assert_array_equal(ordered, expected)
        assert ordered.dtype == np.float64

    def test_perspective_quad(self):
        """Test ordering of a skewed quadrilateral."""
        pts = np.array([[320, 400], [100, 200], [80, 380], [300, 150]])
        ordered = order_points(pts)

        expected = np.array([[100, 200], [300, 150], [320, 400], [80, 380]])
        np.testing.assert_array_equal(ordered, expected)

    def test_independent_of_input_order(self):
        """Test that every permutation of the input gives the same result."""
        pts = [[100, 200], [300, 150], [320, 400], [80, 380]]
        reference = order_points(pts)

        for perm in itertools.permutations(pts):
            np.testing.assert_array_equal(order_points(list(perm)), reference)

    def test_diamond_falls_back_to_clockwise(self):
        """Test a 45-degree diamond, where the sum/difference rule is ambiguous."""
        diamond = [[50, 0], [100, 50], [50, 100], [0, 50]]

        for perm in itertools.permutations(diamond):
            ordered = order_points(list(perm))

            # Start at the smallest sum (top wins the tie), then clockwise
            expected = np.array([[50, 0], [100, 50], [50, 100], [0, 50]], dtype=np.float64)
            np.testing.assert_array_equal(ordered, expected)

    def test_wrong_point_count(self):
        """Test that anything other than 4 points is rejected."""
        with pytest.raises(ValueError, match="exactly 4 points"):
            order_points([[0, 0], [1, 0], [1, 1]])


class TestPolygonArea:
    """Tests for polygon_area function."""

    def test_square_area(self):
        """Test the unsigned area of a square."""
        pts = np.array([[0, 0], [10, 0], [10, 10], [0, 10]])

        assert abs(polygon_area(pts)) == pytest.approx(100.0)

    def test_orientation_flips_sign(self):
        """Test that reversing the winding flips the sign."""
        pts = np.array([[0, 0], [10, 0], [10, 10], [0, 10]])

        assert polygon_area(pts) == pytest.approx(-polygon_area(pts[::-1]))


class TestSegmentsIntersect:
    """Tests for segments_intersect function."""

    def test_crossing(self):
        p1, p2 = np.array([0, 0]), np.array([10, 10])
        q1, q2 = np.array([0, 10]), np.array([10, 0])

        assert segments_intersect(p1, p2, q1, q2)

    def test_disjoint(self):
        p1, p2 = np.array([0, 0]), np.array([10, 0])
        q1, q2 = np.array([0, 5]), np.array([10, 5])

        assert not segments_intersect(p1, p2, q1, q2)

    def test_touching_endpoint(self):
        p1, p2 = np.array([0, 0]), np.array([10, 0])
        q1, q2 = np.array([10, 0]), np.array([10, 10])

        assert segments_intersect(p1, p2, q1, q2)


class TestIsDegenerateQuad:
    """Tests for is_degenerate_quad function."""

    def test_valid_rectangle(self):
        assert not is_degenerate_quad([[0, 0], [100, 0], [100, 50], [0, 50]])

    def test_valid_trapezoid(self):
        assert not is_degenerate_quad([[10, 0], [90, 0], [100, 50], [0, 50]])

    def test_all_collinear(self):
        """Test four points on one line."""
        assert is_degenerate_quad([[0, 0], [100, 0], [200, 0], [300, 0]])

    def test_three_collinear(self):
        """Test a triangle with an extra corner on one of its edges."""
        assert is_degenerate_quad([[0, 0], [50, 0], [100, 0], [50, 80]])

    def test_coincident_corners(self):
        """Test two corners at the same position."""
        assert is_degenerate_quad([[0, 0], [100, 0], [100, 0], [0, 100]])

    def test_all_same_point(self):
        assert is_degenerate_quad([[5, 5], [5, 5], [5, 5], [5, 5]])

    def test_bow_tie(self):
        """Test a self-intersecting corner order."""
        assert is_degenerate_quad([[0, 0], [100, 100], [100, 0], [0, 100]])

    def test_non_finite(self):
        assert is_degenerate_quad([[0, 0], [np.nan, 0], [100, 100], [0, 100]])

    def test_tiny_area(self):
        """Test an area below the threshold."""
        assert is_degenerate_quad([[0, 0], [1, 0], [1, 1], [0, 1]], min_area=2.0)

    def test_invalid_shape(self):
        with pytest.raises(ValueError, match=r"\(4, 2\)"):
            is_degenerate_quad([[0, 0], [1, 1]])


class TestIsConvexQuadrilateral:
    """Tests for is_convex_quadrilateral function."""

    def test_convex(self):
        assert is_convex_quadrilateral(np.array([[0, 0], [100, 0], [100, 50], [0, 50]]))

    def test_concave(self):
        """Test an arrowhead (one reflex corner)."""
        assert not is_convex_quadrilateral(np.array([[0, 0], [100, 50], [0, 100], [30, 50]]))
