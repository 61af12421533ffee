"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules. All masks and scenes are synthesized with numpy and
OpenCV drawing primitives, so no test assets are required.
"""

import cv2
import numpy as np
import pytest

from src.common.types import SegmentationMask


@pytest.fixture
def empty_mask():
    """100x100 mask with no foreground at all."""
    return SegmentationMask(data=np.zeros((100, 100), dtype=np.float32))


@pytest.fixture
def square_mask():
    """100x100 mask with a filled square spanning (20,20)-(80,80)."""
    mask = np.zeros((100, 100), dtype=np.uint8)
    mask[20:81, 20:81] = 255
    return SegmentationMask(data=mask)


@pytest.fixture
def clipped_diamond_mask():
    """
    45-degree diamond filling the 100x100 frame.

    The diamond |x - 50| + |y - 50| <= 65 overflows the frame, so its four
    tips are cut off by the border and the visible region is an octagon.
    """
    yy, xx = np.mgrid[0:100, 0:100]
    mask = (np.abs(xx - 50) + np.abs(yy - 50) <= 65).astype(np.uint8) * 255
    return SegmentationMask(data=mask)


@pytest.fixture
def document_scene():
    """
    Synthetic 640x480 photo of a bright page seen in perspective.

    Returns:
        Tuple of (image, corners, mask) where corners are the page corners
        in [TL, TR, BR, BL] order (image coordinates) and mask is a
        160x120 float segmentation mask of the page.
    """
    image = np.full((480, 640, 3), 40, dtype=np.uint8)
    corners = np.array([[160, 100], [500, 80], [540, 400], [120, 420]], dtype=np.int32)
    cv2.fillConvexPoly(image, corners, (230, 230, 230))
    cv2.line(image, (200, 150), (450, 140), (20, 20, 20), 4)

    mask = np.zeros((120, 160), dtype=np.float32)
    cv2.fillConvexPoly(mask, corners // 4, 1.0)

    return image, corners.astype(np.float64), SegmentationMask(data=mask)


@pytest.fixture
def textured_image():
    """Smooth random 320x240 colour image (blurred noise)."""
    rng = np.random.default_rng(0)
    noise = rng.integers(0, 256, size=(240, 320, 3), dtype=np.uint8)
    return cv2.GaussianBlur(noise, (9, 9), 0)
