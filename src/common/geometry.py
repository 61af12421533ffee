"""
Planar Geometry Helpers

Point ordering and quadrilateral sanity checks shared by the detection
and rectification stages. All functions operate on float numpy arrays of
shape (N, 2) holding [x, y] pixel coordinates.
"""

import logging
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)

# Relative tolerance for collinearity tests (|cross| / (|a| * |b|)).
COLLINEAR_TOLERANCE = 1e-6

# Absolute tolerance (in px^2) below which an area counts as zero.
MIN_AREA_EPSILON = 1e-3


def order_points(pts: Union[np.ndarray, list]) -> np.ndarray:
    """
    Order 4 points in a consistent manner: Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    This ordering is critical for perspective transformation: a mismatched
    correspondence silently mirrors or rotates the rectified output.
    The algorithm uses geometric properties:
    - Top-Left: smallest sum (x + y)
    - Bottom-Right: largest sum (x + y)
    - Top-Right: smallest difference (y - x)
    - Bottom-Left: largest difference (y - x)

    The input is sorted lexicographically first, so the result never depends
    on the order the points were given in. When the sum/difference rule picks
    the same point for two corners (a 45-degree diamond, where the sums tie),
    the points are ordered clockwise around their centroid instead, starting
    at the point with the smallest sum (smaller y wins a tie).

    Args:
        pts: Array of 4 points with shape (4, 2) or list of [x, y] coordinates.

    Returns:
        Ordered numpy array of shape (4, 2), dtype float64:
        [Top-Left, Top-Right, Bottom-Right, Bottom-Left].

    Raises:
        ValueError: If input does not contain exactly 4 points.

    Example:
        >>> pts = np.array([[100, 200], [300, 150], [320, 400], [80, 380]])
        >>> ordered = order_points(pts)
        >>> # ordered[0] is Top-Left, ordered[1] is Top-Right, etc.
    """
    pts = np.array(pts, dtype=np.float64)

    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    # Input-order independence: argmin/argmax pick the first of equal values
    pts = pts[np.lexsort((pts[:, 1], pts[:, 0]))]

    s = pts.sum(axis=1)  # x + y
    diff = pts[:, 1] - pts[:, 0]  # y - x

    indices = [
        int(np.argmin(s)),  # Top-Left
        int(np.argmin(diff)),  # Top-Right
        int(np.argmax(s)),  # Bottom-Right
        int(np.argmax(diff)),  # Bottom-Left
    ]

    if len(set(indices)) == 4:
        return pts[indices]

    logger.debug(
        f"Sum/difference ordering is ambiguous for {pts.tolist()}, "
        "falling back to angular ordering"
    )
    return _order_points_angular(pts)


def _order_points_angular(pts: np.ndarray) -> np.ndarray:
    """Order points clockwise (image coordinates, y down) around the centroid."""
    center = pts.mean(axis=0)
    angles = np.arctan2(pts[:, 1] - center[1], pts[:, 0] - center[0])
    clockwise = pts[np.argsort(angles, kind="stable")]

    s = clockwise.sum(axis=1)
    candidates = np.flatnonzero(np.isclose(s, s.min()))
    start = int(candidates[np.argmin(clockwise[candidates, 1])])

    return np.roll(clockwise, -start, axis=0)


def polygon_area(pts: np.ndarray) -> float:
    """Signed shoelace area of a closed polygon (positive when clockwise on screen)."""
    pts = np.asarray(pts, dtype=np.float64)
    x = pts[:, 0]
    y = pts[:, 1]
    return float(0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def _cross(o: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))


def segments_intersect(
    p1: np.ndarray, p2: np.ndarray, q1: np.ndarray, q2: np.ndarray
) -> bool:
    """
    Check whether closed segments p1-p2 and q1-q2 share at least one point.

    Touching and collinear-overlapping segments count as intersecting.
    """
    d1 = _cross(q1, q2, p1)
    d2 = _cross(q1, q2, p2)
    d3 = _cross(p1, p2, q1)
    d4 = _cross(p1, p2, q2)

    if ((d1 > 0 and d2 < 0) or (d1 < 0 and d2 > 0)) and (
        (d3 > 0 and d4 < 0) or (d3 < 0 and d4 > 0)
    ):
        return True

    def _on_segment(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> bool:
        return (
            min(a[0], b[0]) <= c[0] <= max(a[0], b[0])
            and min(a[1], b[1]) <= c[1] <= max(a[1], b[1])
        )

    return (
        (d1 == 0 and _on_segment(q1, q2, p1))
        or (d2 == 0 and _on_segment(q1, q2, p2))
        or (d3 == 0 and _on_segment(p1, p2, q1))
        or (d4 == 0 and _on_segment(p1, p2, q2))
    )


def is_degenerate_quad(
    pts: Union[np.ndarray, list], min_area: float = MIN_AREA_EPSILON
) -> bool:
    """
    Check whether 4 ordered corners fail to form a simple polygon with positive area.

    A quadrilateral [TL, TR, BR, BL] is degenerate when any of these hold:
    - a coordinate is not finite
    - its area is at most ``min_area``
    - two consecutive corners coincide, or three consecutive corners are collinear
    - opposite edges cross (self-intersecting "bow-tie")

    Args:
        pts: 4 corner points in order [TL, TR, BR, BL], shape (4, 2).
        min_area: Areas at or below this value (px^2) count as zero.

    Returns:
        True if the quadrilateral is degenerate.

    Raises:
        ValueError: If input does not have shape (4, 2).
    """
    pts = np.array(pts, dtype=np.float64)
    if pts.shape != (4, 2):
        raise ValueError(f"Expected 4 points with shape (4, 2), got {pts.shape}")

    if not np.isfinite(pts).all():
        return True

    area = abs(polygon_area(pts))
    if area <= min_area:
        logger.debug(f"Degenerate quad: area {area:.6f} <= {min_area}")
        return True

    for i in range(4):
        prev_pt = pts[i - 1]
        pt = pts[i]
        next_pt = pts[(i + 1) % 4]
        a = pt - prev_pt
        b = next_pt - pt
        norm = float(np.linalg.norm(a) * np.linalg.norm(b))
        if norm == 0.0:
            logger.debug(f"Degenerate quad: corner {i} coincides with a neighbour")
            return True
        if abs(_cross(prev_pt, pt, next_pt)) / norm <= COLLINEAR_TOLERANCE:
            logger.debug(f"Degenerate quad: corners around index {i} are collinear")
            return True

    tl, tr, br, bl = pts
    if segments_intersect(tl, tr, br, bl) or segments_intersect(tr, br, bl, tl):
        logger.debug("Degenerate quad: edges self-intersect")
        return True

    return False


def is_convex_quadrilateral(pts: np.ndarray) -> bool:
    """
    Check if 4 ordered points form a convex quadrilateral.

    For each consecutive edge pair (P1->P2, P2->P3) the 2D cross product
    must have the same sign all the way round.
    """
    pts = np.asarray(pts, dtype=np.float64)
    crosses = [_cross(pts[i], pts[(i + 1) % 4], pts[(i + 2) % 4]) for i in range(4)]
    return all(c > 0 for c in crosses) or all(c < 0 for c in crosses)
