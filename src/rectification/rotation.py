"""
Frame rotation helpers.

Rotations are clockwise multiples of 90 degrees and are applied losslessly
(pure pixel transposition, no resampling).
"""

import logging
from typing import Union

import cv2
import numpy as np

from src.common.types import Quad, Rotation

logger = logging.getLogger(__name__)

_ROTATE_CODES = {
    Rotation.DEG_90: cv2.ROTATE_90_CLOCKWISE,
    Rotation.DEG_180: cv2.ROTATE_180,
    Rotation.DEG_270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def rotate_image(image: np.ndarray, rotation: Union[Rotation, int]) -> np.ndarray:
    """
    Rotate an image clockwise by a multiple of 90 degrees.

    Returns:
        A new array; for 0 degrees a copy of the input.
    """
    rotation = Rotation.from_degrees(rotation)
    if rotation is Rotation.DEG_0:
        return image.copy()
    return cv2.rotate(image, _ROTATE_CODES[rotation])


def rotate_points(
    pts: np.ndarray, rotation: Union[Rotation, int], width: int, height: int
) -> np.ndarray:
    """
    Map pixel coordinates of a width x height image into the rotated image.

    Uses pixel-centre coordinates, consistent with ``rotate_image``: pixel
    (x, y) of the source lands on the returned coordinates in the output.

    Args:
        pts: Points of shape (N, 2).
        rotation: Clockwise rotation.
        width: Source image width.
        height: Source image height.

    Returns:
        Rotated points of shape (N, 2), float64.
    """
    rotation = Rotation.from_degrees(rotation)
    pts = np.asarray(pts, dtype=np.float64).reshape(-1, 2)
    x = pts[:, 0]
    y = pts[:, 1]

    if rotation is Rotation.DEG_90:
        return np.stack([(height - 1) - y, x], axis=1)
    if rotation is Rotation.DEG_180:
        return np.stack([(width - 1) - x, (height - 1) - y], axis=1)
    if rotation is Rotation.DEG_270:
        return np.stack([y, (width - 1) - x], axis=1)
    return pts.copy()


def rotate_quad(
    quad: Quad, rotation: Union[Rotation, int], width: int, height: int
) -> Quad:
    """
    Express a quad in the frame of the rotated image.

    Corners are re-ordered canonically in the new frame, so the returned
    quad's top-left is the corner that appears top-left after rotation.
    """
    rotated = rotate_points(quad.to_numpy(), rotation, width, height)
    return Quad.from_unordered(rotated)
