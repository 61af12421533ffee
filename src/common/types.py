"""
Common type definitions for the document scanning pipeline.

This module provides Pydantic-based type definitions for the core data
structures passed between pipeline stages: segmentation masks, points,
quadrilaterals and frame rotations.

These types provide:
- Type validation and conversion
- Consistent interfaces across modules
- Helper methods for common geometric operations
- Integration with numpy arrays and OpenCV
"""

from enum import IntEnum
from typing import Any, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator

from src.common.geometry import is_degenerate_quad, order_points, polygon_area


class Rotation(IntEnum):
    """
    Clockwise sensor-to-upright correction of a camera frame, in degrees.

    Example:
        >>> Rotation.from_degrees(-90)
        <Rotation.DEG_270: 270>
        >>> Rotation.DEG_90.rotated_by(180)
        <Rotation.DEG_270: 270>
    """

    DEG_0 = 0
    DEG_90 = 90
    DEG_180 = 180
    DEG_270 = 270

    @classmethod
    def from_degrees(cls, degrees: Union[int, "Rotation"]) -> "Rotation":
        """
        Build a Rotation from any multiple of 90 degrees (normalised modulo 360).

        Integral floats such as 180.0 are accepted; fractional values and
        booleans are not.

        Raises:
            ValueError: If degrees is not a multiple of 90.
        """
        if isinstance(degrees, bool):
            raise ValueError(f"Rotation must be a multiple of 90 degrees, got {degrees!r}")
        try:
            value = int(degrees)
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(
                f"Rotation must be a multiple of 90 degrees, got {degrees!r}"
            ) from e
        if value != degrees or value % 90 != 0:
            raise ValueError(f"Rotation must be a multiple of 90 degrees, got {degrees!r}")
        return cls(value % 360)

    def rotated_by(self, degrees: int) -> "Rotation":
        """Return the rotation obtained by adding ``degrees`` clockwise."""
        return Rotation.from_degrees(int(self) + degrees)


class SegmentationMask(BaseModel):
    """
    Immutable per-pixel foreground-confidence grid.

    Produced fresh per frame by a segmentation provider and discarded once the
    pipeline has consumed it. Floating-point masks hold confidences in
    [0.0, 1.0]; uint8 masks hold values in [0, 255] (binary masks may use
    either 0/1 or 0/255).

    The full-confidence value is taken from ``max_value`` when given.
    Otherwise it is inferred: 1.0 for floating-point masks; for integer masks
    255 if any value exceeds 1, else 1. An integer confidence mask whose
    values all happen to be 0 or 1 is therefore read as a 0/1 binary mask;
    pass ``max_value=255`` for 0-255 confidences to avoid that.

    Masks compare equal when their data (shape, dtype and values) and full
    confidence value match, and hash consistently with that.

    Attributes:
        data: 2D numpy array of shape (H, W). The array is copied on
            construction and marked read-only.
        max_value: Value corresponding to full confidence. None to infer it.

    Example:
        >>> mask = SegmentationMask(data=np.zeros((96, 128), dtype=np.float32))
        >>> print(mask.width, mask.height)  # 128, 96
        >>> probs = SegmentationMask(data=model_output_u8, max_value=255)
    """

    data: np.ndarray = Field(..., description="Mask values as a 2D numpy array")
    max_value: Optional[float] = Field(
        default=None, gt=0, description="Full-confidence value (inferred if None)"
    )

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @field_validator("data", mode="before")
    @classmethod
    def _validate_mask(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate and freeze the mask array.

        Raises:
            ValueError: If the array is not a non-empty numeric 2D grid.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Mask array is empty")

        if v.ndim == 3 and v.shape[2] == 1:
            v = v[:, :, 0]

        if v.ndim != 2:
            raise ValueError(f"Expected 2D mask, got shape {v.shape}")

        if v.dtype == np.bool_:
            v = v.astype(np.uint8)
        elif not (
            np.issubdtype(v.dtype, np.integer) or np.issubdtype(v.dtype, np.floating)
        ):
            raise ValueError(f"Expected numeric mask dtype, got {v.dtype}")

        frozen = np.array(v, copy=True)
        frozen.setflags(write=False)
        return frozen

    @property
    def height(self) -> int:
        """Mask height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Mask width in pixels."""
        return int(self.data.shape[1])

    @property
    def value_range(self) -> float:
        """Value corresponding to full confidence (see the class docstring)."""
        if self.max_value is not None:
            return float(self.max_value)
        if np.issubdtype(self.data.dtype, np.floating):
            return 1.0
        return 255.0 if self.data.max() > 1 else 1.0

    def binarize(self, threshold: float = 0.5) -> np.ndarray:
        """
        Threshold the mask into a 0/255 uint8 image.

        Args:
            threshold: Confidence threshold in [0.0, 1.0], relative to
                ``value_range``. Pixels strictly above it are foreground.

        Returns:
            New uint8 array of shape (H, W) with values 0 or 255.
        """
        cutoff = threshold * self.value_range
        return np.where(self.data > cutoff, 255, 0).astype(np.uint8)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SegmentationMask):
            return NotImplemented
        return (
            self.data.dtype == other.data.dtype
            and np.array_equal(self.data, other.data)
            and self.value_range == other.value_range
        )

    def __hash__(self) -> int:
        return hash((self.data.shape, self.data.dtype.str, self.data.tobytes()))

    def __repr__(self) -> str:
        return f"SegmentationMask(shape={self.data.shape}, dtype={self.data.dtype})"


class Point(BaseModel):
    """
    Immutable 2D point (x, y) in pixel coordinates.

    Coordinates are floats: quads are remapped between resolutions and
    rounding them would bias the homography.

    Example:
        >>> point = Point(x=100.5, y=200)
        >>> arr = point.to_numpy()  # array([100.5, 200.])
        >>> point2 = Point.from_numpy(np.array([150, 250]))
    """

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    model_config = {"frozen": True}

    @field_validator("x", "y", mode="before")
    @classmethod
    def _convert_to_float(cls, v: Union[int, float, np.number]) -> float:
        if isinstance(v, (int, float, np.number)) and not isinstance(v, bool):
            return float(v)
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point":
        """
        Create Point from numpy array of shape (2,).

        Raises:
            ValueError: If array shape is not (2,).
        """
        arr = np.asarray(arr)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    def to_numpy(self, dtype: type = np.float64) -> np.ndarray:
        """Convert Point to numpy array [x, y]."""
        return np.array([self.x, self.y], dtype=dtype)

    def to_tuple(self) -> Tuple[float, float]:
        """Convert Point to tuple (x, y)."""
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return float(np.hypot(self.x - other.x, self.y - other.y))

    def __repr__(self) -> str:
        return f"Point(x={self.x:g}, y={self.y:g})"


class Quad(BaseModel):
    """
    Four points in canonical order: top-left, top-right, bottom-right, bottom-left.

    Coordinates are expressed in the space of whichever image the quad was
    derived from (mask space or full-image space). The type does not reject
    degenerate corner sets on its own; the detector never builds one and the
    rectifier refuses one with ``InvalidQuadError``.

    Example:
        >>> quad = Quad.from_unordered([[80, 80], [20, 20], [80, 20], [20, 80]])
        >>> quad.top_left
        Point(x=20, y=20)
        >>> quad.area()
        3600.0
    """

    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    model_config = {"frozen": True}

    @classmethod
    def from_numpy(cls, arr: Union[np.ndarray, list]) -> "Quad":
        """
        Create a Quad from 4 points already in [TL, TR, BR, BL] order.

        Raises:
            ValueError: If input does not have shape (4, 2).
        """
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (4, 2):
            raise ValueError(f"Expected array of shape (4, 2), got {arr.shape}")
        tl, tr, br, bl = (Point.from_numpy(p) for p in arr)
        return cls(top_left=tl, top_right=tr, bottom_right=br, bottom_left=bl)

    @classmethod
    def from_unordered(cls, points: Union[np.ndarray, list]) -> "Quad":
        """Create a Quad from 4 points in any order, applying canonical corner ordering."""
        return cls.from_numpy(order_points(points))

    @property
    def points(self) -> Tuple[Point, Point, Point, Point]:
        """Corners as a tuple (TL, TR, BR, BL)."""
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)

    def to_numpy(self, dtype: type = np.float64) -> np.ndarray:
        """Corners as an array of shape (4, 2) in [TL, TR, BR, BL] order."""
        return np.array([p.to_tuple() for p in self.points], dtype=dtype)

    def area(self) -> float:
        """Absolute polygon area (shoelace formula)."""
        return abs(polygon_area(self.to_numpy()))

    def perimeter(self) -> float:
        """Sum of the four edge lengths."""
        pts = self.points
        return sum(pts[i].distance_to(pts[(i + 1) % 4]) for i in range(4))

    def is_degenerate(self) -> bool:
        """True if the corners do not form a simple polygon with positive area."""
        return is_degenerate_quad(self.to_numpy())

    def scaled_to(
        self, from_w: float, from_h: float, to_w: float, to_h: float, **kwargs
    ) -> "Quad":
        """Remap this quad from a (from_w, from_h) frame to a (to_w, to_h) frame."""
        from src.scaling.quad_scaler import scaled_to

        return scaled_to(self, from_w, from_h, to_w, to_h, **kwargs)

    def almost_equal(self, other: "Quad", tolerance: float = 1e-6) -> bool:
        """Corner-wise comparison with an absolute tolerance in pixels."""
        return bool(
            np.allclose(self.to_numpy(), other.to_numpy(), rtol=0.0, atol=tolerance)
        )

    def __repr__(self) -> str:
        corners = ", ".join(f"({p.x:g}, {p.y:g})" for p in self.points)
        return f"Quad({corners})"
