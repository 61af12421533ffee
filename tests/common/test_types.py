"""
Unit tests for common types (Rotation, SegmentationMask, Point, Quad).
"""

import numpy as np
import pytest
from pydantic import ValidationError

from src.common.types import Point, Quad, Rotation, SegmentationMask


class TestRotation:
    """Tests for Rotation enum."""

    @pytest.mark.parametrize(
        "degrees,expected",
        [
            (0, Rotation.DEG_0),
            (90, Rotation.DEG_90),
            (360, Rotation.DEG_0),
            (450, Rotation.DEG_90),
            (-90, Rotation.DEG_270),
        ],
    )
    def test_from_degrees_normalizes(self, degrees, expected):
        """Test that any multiple of 90 is normalised modulo 360."""
        assert Rotation.from_degrees(degrees) is expected

    @pytest.mark.parametrize("degrees", [45, 90.5, 45.0, True, "90", float("nan")])
    def test_from_degrees_rejects_non_multiple(self, degrees):
        """Test that fractional, non-multiple and non-numeric angles are rejected."""
        with pytest.raises(ValueError, match="multiple of 90"):
            Rotation.from_degrees(degrees)

    def test_from_degrees_accepts_integral_float(self):
        assert Rotation.from_degrees(180.0) is Rotation.DEG_180
        assert Rotation.from_degrees(np.int64(-270)) is Rotation.DEG_90

    def test_rotated_by_rejects_fraction(self):
        with pytest.raises(ValueError):
            Rotation.DEG_90.rotated_by(0.5)

    def test_rotated_by(self):
        """Test composing rotations."""
        assert Rotation.DEG_90.rotated_by(180) is Rotation.DEG_270
        assert Rotation.DEG_270.rotated_by(90) is Rotation.DEG_0


class TestSegmentationMask:
    """Tests for SegmentationMask model."""

    def test_dimensions(self):
        """Test width/height properties."""
        mask = SegmentationMask(data=np.zeros((96, 128), dtype=np.float32))

        assert mask.width == 128
        assert mask.height == 96

    def test_data_is_copied_and_read_only(self):
        """Test that the mask cannot change after construction."""
        raw = np.zeros((10, 10), dtype=np.uint8)
        mask = SegmentationMask(data=raw)

        raw[5, 5] = 255

        assert mask.data[5, 5] == 0
        assert not mask.data.flags.writeable
        with pytest.raises(ValueError):
            mask.data[0, 0] = 1

    def test_squeezes_single_channel(self):
        """Test that (H, W, 1) arrays are accepted."""
        mask = SegmentationMask(data=np.zeros((20, 30, 1), dtype=np.float32))

        assert mask.data.shape == (20, 30)

    def test_bool_mask_converted(self):
        """Test that boolean masks become 0/1 uint8."""
        raw = np.zeros((10, 10), dtype=bool)
        raw[2:5, 2:5] = True
        mask = SegmentationMask(data=raw)

        assert mask.data.dtype == np.uint8
        assert mask.value_range == 1.0
        assert np.count_nonzero(mask.binarize()) == 9

    @pytest.mark.parametrize(
        "data",
        [
            np.zeros((0, 10), dtype=np.float32),
            np.zeros((10, 10, 3), dtype=np.uint8),
            np.zeros(10, dtype=np.float32),
            np.array([["a", "b"], ["c", "d"]]),
        ],
    )
    def test_invalid_arrays_rejected(self, data):
        """Test that empty, multi-channel, 1D and non-numeric arrays are rejected."""
        with pytest.raises(ValidationError):
            SegmentationMask(data=data)

    def test_non_array_rejected(self):
        """Test that plain lists are rejected."""
        with pytest.raises(ValidationError):
            SegmentationMask(data=[[0, 1], [1, 0]])

    def test_binarize_float_confidences(self):
        """Test thresholding a float confidence mask."""
        mask = SegmentationMask(data=np.array([[0.2, 0.5], [0.51, 1.0]], dtype=np.float32))

        binary = mask.binarize(0.5)

        assert binary.dtype == np.uint8
        np.testing.assert_array_equal(binary, [[0, 0], [255, 255]])

    def test_binarize_uint8_0_255(self):
        """Test that 0/255 masks are thresholded relative to 255."""
        mask = SegmentationMask(data=np.array([[0, 100], [200, 255]], dtype=np.uint8))

        np.testing.assert_array_equal(mask.binarize(0.5), [[0, 0], [255, 255]])

    def test_binarize_uint8_0_1(self):
        """Test that 0/1 masks are thresholded relative to 1."""
        mask = SegmentationMask(data=np.array([[0, 1], [1, 0]], dtype=np.uint8))

        np.testing.assert_array_equal(mask.binarize(0.5), [[0, 255], [255, 0]])

    def test_explicit_max_value(self):
        """Test that low 0-255 confidences are not mistaken for a 0/1 mask."""
        data = np.array([[0, 1], [1, 0]], dtype=np.uint8)
        mask = SegmentationMask(data=data, max_value=255)

        assert mask.value_range == 255.0
        assert not mask.binarize(0.5).any()

    def test_max_value_must_be_positive(self):
        with pytest.raises(ValidationError):
            SegmentationMask(data=np.zeros((4, 4), dtype=np.uint8), max_value=0)

    def test_equality_by_content(self):
        """Test that masks compare and hash by their values."""
        first = SegmentationMask(data=np.zeros((10, 10), dtype=np.uint8))
        second = SegmentationMask(data=np.zeros((10, 10), dtype=np.uint8))
        raw = np.zeros((10, 10), dtype=np.uint8)
        raw[3, 3] = 255
        different = SegmentationMask(data=raw)

        assert first == second
        assert hash(first) == hash(second)
        assert first != different
        assert len({first, second, different}) == 2

    def test_equality_checks_dtype_and_scale(self):
        ints = SegmentationMask(data=np.zeros((4, 4), dtype=np.uint8))

        assert ints != SegmentationMask(data=np.zeros((4, 4), dtype=np.float32))
        assert ints != SegmentationMask(data=np.zeros((4, 4), dtype=np.uint8), max_value=255)
        assert ints != "not a mask"


class TestPoint:
    """Tests for Point model."""

    def test_coordinates_are_float(self):
        """Test that integer coordinates are stored as floats."""
        point = Point(x=np.int32(10), y=20)

        assert isinstance(point.x, float)
        assert point.to_tuple() == (10.0, 20.0)

    def test_from_numpy_invalid_shape(self):
        """Test that only shape (2,) arrays are accepted."""
        with pytest.raises(ValueError, match="shape"):
            Point.from_numpy(np.array([1, 2, 3]))

    def test_distance_to(self):
        """Test Euclidean distance."""
        assert Point(x=0, y=0).distance_to(Point(x=3, y=4)) == pytest.approx(5.0)

    def test_frozen(self):
        """Test that points are immutable."""
        point = Point(x=1, y=2)
        with pytest.raises(ValidationError):
            point.x = 5


class TestQuad:
    """Tests for Quad model."""

    def test_from_unordered(self):
        """Test canonical ordering of shuffled corners."""
        quad = Quad.from_unordered([[80, 80], [20, 20], [80, 20], [20, 80]])

        assert quad.top_left == Point(x=20, y=20)
        assert quad.top_right == Point(x=80, y=20)
        assert quad.bottom_right == Point(x=80, y=80)
        assert quad.bottom_left == Point(x=20, y=80)

    def test_from_numpy_invalid_shape(self):
        """Test that anything other than 4 points is rejected."""
        with pytest.raises(ValueError, match=r"\(4, 2\)"):
            Quad.from_numpy([[0, 0], [1, 0], [1, 1]])

    def test_area_and_perimeter(self):
        """Test measurements of a 60x60 square."""
        quad = Quad.from_numpy([[20, 20], [80, 20], [80, 80], [20, 80]])

        assert quad.area() == pytest.approx(3600.0)
        assert quad.perimeter() == pytest.approx(240.0)

    def test_to_numpy_order(self):
        """Test that to_numpy preserves [TL, TR, BR, BL]."""
        corners = [[1, 2], [10, 3], [11, 12], [0, 13]]
        quad = Quad.from_numpy(corners)

        np.testing.assert_array_equal(quad.to_numpy(), np.array(corners, dtype=np.float64))

    def test_is_degenerate(self):
        """Test degeneracy helper."""
        good = Quad.from_numpy([[0, 0], [10, 0], [10, 10], [0, 10]])
        flat = Quad.from_numpy([[0, 0], [10, 0], [20, 0], [30, 0]])

        assert not good.is_degenerate()
        assert flat.is_degenerate()

    def test_scaled_to_delegates(self):
        """Test the convenience scaling method."""
        quad = Quad.from_numpy([[20, 20], [80, 20], [80, 80], [20, 80]])

        scaled = quad.scaled_to(100, 100, 1000, 1000)

        assert scaled.almost_equal(
            Quad.from_numpy([[200, 200], [800, 200], [800, 800], [200, 800]])
        )

    def test_frozen(self):
        """Test that quads are immutable."""
        quad = Quad.from_numpy([[0, 0], [10, 0], [10, 10], [0, 10]])
        with pytest.raises(ValidationError):
            quad.top_left = Point(x=1, y=1)
