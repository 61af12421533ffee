"""
Geometric measurements for the Rectification module.

Derives the rectified output size from the quad's physical proportions and
checks quads for degeneracy before any perspective transformation.
"""

import logging
from typing import Tuple, Union

import numpy as np

from src.common.geometry import is_degenerate_quad
from src.common.types import Quad

logger = logging.getLogger(__name__)


def _as_corners(quad: Union[Quad, np.ndarray, list]) -> np.ndarray:
    if isinstance(quad, Quad):
        return quad.to_numpy()

    corners = np.array(quad, dtype=np.float64)
    if corners.shape != (4, 2):
        raise ValueError(f"Expected 4 corners with shape (4, 2), got {corners.shape}")
    return corners


def calculate_edge_lengths(
    quad: Union[Quad, np.ndarray, list],
) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of a quadrilateral.

    Args:
        quad: Quad or 4 corner points in order [TL, TR, BR, BL].

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Example:
        >>> points = np.array([[100, 100], [400, 100], [400, 200], [100, 200]])
        >>> top, right, bottom, left = calculate_edge_lengths(points)
        >>> print(f"Width: {top:.0f}, Height: {right:.0f}")
        Width: 300, Height: 100
    """
    tl, tr, br, bl = _as_corners(quad)

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(bl - br))
    left_edge = float(np.linalg.norm(tl - bl))

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def calculate_predicted_dimensions(
    quad: Union[Quad, np.ndarray, list],
) -> Tuple[float, float]:
    """
    Calculate the (unrounded) width and height of the rectified document.

    Uses the longer of each pair of opposite edges: perspective foreshortening
    shrinks the far edge, and sizing from the near one avoids upsampling blur.

    Returns:
        Tuple of (width, height).
    """
    top, right, bottom, left = calculate_edge_lengths(quad)

    width = max(top, bottom)
    height = max(left, right)

    logger.debug(f"Predicted dimensions: {width:.1f} x {height:.1f}")

    return width, height


def calculate_target_size(quad: Union[Quad, np.ndarray, list]) -> Tuple[int, int]:
    """
    Calculate the pixel size of the rectified raster.

    Returns:
        Tuple of (width, height), each rounded to the nearest integer. Both are
        at least 2 so the target rectangle itself has positive area.

    Example:
        >>> calculate_target_size([[0, 0], [400, 0], [400, 200], [0, 200]])
        (400, 200)
    """
    width, height = calculate_predicted_dimensions(quad)
    return max(int(round(width)), 2), max(int(round(height)), 2)


def calculate_aspect_ratio(quad: Union[Quad, np.ndarray, list]) -> float:
    """
    Calculate the aspect ratio (width/height) of the rectified document.

    Raises:
        ValueError: If the height is zero.
    """
    width, height = calculate_predicted_dimensions(quad)

    if height == 0:
        raise ValueError("Height is zero, cannot calculate aspect ratio")

    return width / height


def validate_quad_geometry(quad: Union[Quad, np.ndarray, list]) -> bool:
    """
    Check that a quad can be rectified.

    Returns:
        True if the corners form a simple polygon with positive area.
    """
    is_valid = not is_degenerate_quad(_as_corners(quad))
    if not is_valid:
        logger.warning(f"Degenerate quad: {_as_corners(quad).tolist()}")
    return is_valid
