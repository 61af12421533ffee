"""
Segmentation Mask Processing

Binary-mask operations used by the quad detector: largest connected region
selection, boundary tracing and boundary simplification.
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def extract_largest_region(
    binary: np.ndarray, connectivity: int = 8
) -> Optional[Tuple[np.ndarray, int]]:
    """
    Isolate the largest connected foreground region of a binary mask.

    Connected components are labelled in raster-scan order, so when several
    regions share the largest pixel count the one encountered first wins.

    Args:
        binary: uint8 mask of shape (H, W), foreground > 0.
        connectivity: 4 or 8.

    Returns:
        Tuple of (region_mask, pixel_count) where region_mask is a 0/255 uint8
        array containing only the selected region, or None if the mask has
        no foreground at all.
    """
    num_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
        binary, connectivity=connectivity
    )

    # Label 0 is the background
    if num_labels <= 1:
        return None

    areas = stats[1:, cv2.CC_STAT_AREA]
    best_label = int(np.argmax(areas)) + 1
    pixel_count = int(areas[best_label - 1])

    logger.debug(
        f"Found {num_labels - 1} foreground region(s), "
        f"largest is label {best_label} with {pixel_count} px"
    )

    region = np.where(labels == best_label, 255, 0).astype(np.uint8)
    return region, pixel_count


def trace_region_boundary(region: np.ndarray) -> np.ndarray:
    """
    Trace the outer boundary of a single-region binary mask.

    The mask is padded by one background pixel first so that regions touching
    the mask border are traced along the border instead of being cut open.

    Args:
        region: 0/255 uint8 mask containing one connected region.

    Returns:
        Boundary points as an int32 array of shape (N, 1, 2) in mask coordinates.

    Raises:
        ValueError: If the mask has no foreground.
    """
    padded = cv2.copyMakeBorder(region, 1, 1, 1, 1, cv2.BORDER_CONSTANT, value=0)
    contours, _ = cv2.findContours(padded, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)

    if not contours:
        raise ValueError("Region mask has no foreground to trace")

    boundary = max(contours, key=lambda c: (cv2.contourArea(c), len(c)))
    return (boundary - 1).astype(np.int32)


def simplify_boundary(boundary: np.ndarray, epsilon_ratio: float) -> np.ndarray:
    """
    Simplify a closed boundary with Douglas-Peucker.

    Args:
        boundary: Contour of shape (N, 1, 2).
        epsilon_ratio: Tolerance as a fraction of the boundary perimeter.

    Returns:
        Simplified polygon vertices as float64 array of shape (K, 2).
    """
    perimeter = cv2.arcLength(boundary, True)
    epsilon = epsilon_ratio * perimeter
    approx = cv2.approxPolyDP(boundary, epsilon, True)

    logger.debug(
        f"Simplified boundary of {len(boundary)} points "
        f"(perimeter={perimeter:.1f}, epsilon={epsilon:.2f}) to {len(approx)} vertices"
    )

    return approx.reshape(-1, 2).astype(np.float64)
