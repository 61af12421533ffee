"""
Mask-Assisted Edge Cleanup

The segmentation mask, warped through the same perspective transform as the
image, yields a document/background matte over the rectified canvas. Near
the output border the matte tells which pixels are background bleed (table,
floor, fingers) left over by an imperfect quad; those are composited to a
neutral fill. Geometry is never changed by the mask.
"""

import logging
from typing import Sequence

import cv2
import numpy as np

from src.common.types import Quad, SegmentationMask
from src.rectification.image_rectification import compute_homography, warp_to_rectangle

logger = logging.getLogger(__name__)

# Isolated background specks smaller than this kernel are ignored
_SPECK_KERNEL = np.ones((3, 3), dtype=np.uint8)


def compute_matte(
    mask: SegmentationMask,
    mask_quad: Quad,
    width: int,
    height: int,
    threshold: float = 0.5,
) -> np.ndarray:
    """
    Warp the mask onto the rectified canvas and re-binarize it.

    Args:
        mask: Segmentation mask of the source frame.
        mask_quad: The document quad expressed in mask coordinates.
        width: Rectified width.
        height: Rectified height.
        threshold: Re-binarization threshold relative to the mask value range.

    Returns:
        uint8 matte of shape (height, width): 255 = document, 0 = background.
    """
    confidence = mask.data.astype(np.float32) / np.float32(mask.value_range)
    homography = compute_homography(mask_quad.to_numpy(), width, height)
    warped = warp_to_rectangle(
        confidence,
        homography,
        width,
        height,
        interpolation=cv2.INTER_LINEAR,
        border_mode=cv2.BORDER_CONSTANT,
        border_value=0,
    )
    return np.where(warped > threshold, 255, 0).astype(np.uint8)


def edge_band(width: int, height: int, band_ratio: float) -> np.ndarray:
    """
    Boolean map of the pixels within the border band of a width x height canvas.

    The band is ``band_ratio * min(width, height)`` pixels wide (at least 1
    pixel when the ratio is positive).
    """
    band = np.zeros((height, width), dtype=bool)
    if band_ratio <= 0:
        return band

    thickness = max(int(round(band_ratio * min(width, height))), 1)
    band[:thickness, :] = True
    band[-thickness:, :] = True
    band[:, :thickness] = True
    band[:, -thickness:] = True
    return band


def _fill_value(
    image: np.ndarray, document: np.ndarray, fill_mode: str, fill_color: Sequence[int]
) -> np.ndarray:
    channels = 1 if image.ndim == 2 else image.shape[2]

    if fill_mode == "median" and document.any():
        return np.median(image[document], axis=0).astype(image.dtype)

    color = list(fill_color)
    if len(color) < channels:
        color = color + [color[-1]] * (channels - len(color))
    if channels == 1:
        return np.array(color[0], dtype=image.dtype)
    return np.array(color[:channels], dtype=image.dtype)


def apply_matte(
    image: np.ndarray,
    matte: np.ndarray,
    band_ratio: float,
    fill_mode: str = "color",
    fill_color: Sequence[int] = (255, 255, 255),
) -> np.ndarray:
    """
    Replace background pixels inside the border band with a neutral fill.

    Background inside the document interior (holes in the segmentation,
    dark photos on the page) is left untouched.

    Args:
        image: Rectified raster of shape (H, W) or (H, W, C).
        matte: uint8 matte of shape (H, W) from ``compute_matte``.
        band_ratio: Border band width as a fraction of min(W, H).
        fill_mode: "color" or "median".
        fill_color: Fill colour in the image's channel order.

    Returns:
        New raster; the input is not modified.
    """
    height, width = image.shape[:2]
    if matte.shape != (height, width):
        raise ValueError(
            f"Matte shape {matte.shape} does not match image size {(height, width)}"
        )

    background = cv2.morphologyEx(
        cv2.bitwise_not(matte), cv2.MORPH_OPEN, _SPECK_KERNEL
    ).astype(bool)
    fill_region = background & edge_band(width, height, band_ratio)

    result = image.copy()
    if not fill_region.any():
        return result

    result[fill_region] = _fill_value(image, matte > 0, fill_mode, fill_color)

    logger.debug(
        f"Matte cleanup filled {int(fill_region.sum())} of {width * height} px"
    )
    return result
