"""
Image Rectification Utilities

Provides the homography and perspective warp that map a document
quadrilateral onto an axis-aligned rectangle.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def target_rectangle(width: int, height: int) -> np.ndarray:
    """
    Destination corners for a width x height raster, in [TL, TR, BR, BL] order.

    Quad corners land on the centres of the extreme output pixels, so
    rotating the output by 90 degrees commutes exactly with rotating the
    source and its quad.
    """
    return np.array(
        [
            [0, 0],  # Top-Left
            [width - 1, 0],  # Top-Right
            [width - 1, height - 1],  # Bottom-Right
            [0, height - 1],  # Bottom-Left
        ],
        dtype=np.float32,
    )


def compute_homography(corners: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Compute the perspective transform sending quad corners to the target rectangle.

    The correspondence is fixed: TL->TL, TR->TR, BR->BR, BL->BL. Corners in
    any other order silently produce a mirrored or rotated result.

    Args:
        corners: Quad corners in [TL, TR, BR, BL] order, shape (4, 2).
        width: Target width in pixels.
        height: Target height in pixels.

    Returns:
        3x3 homography matrix (float64).
    """
    src = np.asarray(corners, dtype=np.float32).reshape(4, 2)
    dst = target_rectangle(width, height)
    return cv2.getPerspectiveTransform(src, dst)


def warp_to_rectangle(
    image: np.ndarray,
    homography: np.ndarray,
    width: int,
    height: int,
    interpolation: int = cv2.INTER_LINEAR,
    border_mode: int = cv2.BORDER_REPLICATE,
    border_value: float = 0,
) -> np.ndarray:
    """
    Warp an image (or mask) through a homography onto a width x height canvas.

    Interpolation method: INTER_LINEAR (bilinear) by default. Balances edge
    smoothness and speed for document text.

    Returns:
        New array of shape (height, width[, C]); the input is not modified.
    """
    warped = cv2.warpPerspective(
        image,
        homography,
        (width, height),
        flags=interpolation,
        borderMode=border_mode,
        borderValue=border_value,
    )

    logger.debug(f"Warped {image.shape[1]}x{image.shape[0]} -> {width}x{height}")

    return warped
