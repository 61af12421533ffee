"""
Main processor for the Detection module.

Turns a segmentation mask into the document's quadrilateral (mask-space
coordinates) or reports that no document is visible.

Pipeline stages:
1. Binarize the mask at a fixed confidence threshold
2. Keep the largest connected foreground region (minimum area gate)
3. Trace and simplify its boundary
4. Accept a four-vertex boundary directly, otherwise (relaxed mode only)
   fall back to the minimum-area enclosing quadrilateral of the hull
5. Canonical corner ordering and degeneracy check
"""

import logging
from typing import Optional, Union

import numpy as np

from src.common.geometry import (
    is_convex_quadrilateral,
    is_degenerate_quad,
    order_points,
    polygon_area,
)
from src.common.types import Quad, SegmentationMask
from src.detection.config_loader import DetectionModuleConfig, get_default_config
from src.detection.enclosing_quad import min_area_enclosing_quad
from src.detection.mask_processing import (
    extract_largest_region,
    simplify_boundary,
    trace_region_boundary,
)
from src.detection.types import (
    DetectionResult,
    NotFoundReason,
    QuadFound,
    QuadNotFound,
)

logger = logging.getLogger(__name__)


class QuadDetector:
    """
    Detects the document quadrilateral in a segmentation mask.

    Stateless apart from its configuration: every call is independent and
    identical inputs always give identical results, so one instance can be
    shared between threads and frames.

    Example:
        >>> detector = QuadDetector()
        >>> mask = np.zeros((100, 100), dtype=np.uint8)
        >>> mask[20:81, 20:81] = 255
        >>> result = detector.detect(SegmentationMask(data=mask), relaxed=False)
        >>> if result.is_found():
        ...     print(result.quad.top_left)
        Point(x=20, y=20)
    """

    def __init__(self, config: Optional[DetectionModuleConfig] = None):
        """
        Initialize the quad detector.

        Args:
            config: Detection configuration. If None, loads the bundled config.yaml.
        """
        if config is None:
            self.config = get_default_config().detection
        else:
            self.config = config

    def detect(
        self,
        mask: Optional[Union[SegmentationMask, np.ndarray]],
        relaxed: bool = False,
    ) -> DetectionResult:
        """
        Detect the document quad in a mask.

        Args:
            mask: Segmentation mask (or raw 2D array). None means the
                segmentation step produced nothing for this frame.
            relaxed: If True, fall back to the minimum-area enclosing
                quadrilateral when the simplified boundary is not four-sided.
                If False, report NOT_QUADRILATERAL instead of guessing.

        Returns:
            QuadFound with the quad in mask coordinates, or QuadNotFound with
            the reason.
        """
        if mask is None:
            logger.debug("No mask for this frame")
            return QuadNotFound(NotFoundReason.NO_MASK)

        if not isinstance(mask, SegmentationMask):
            mask = SegmentationMask(data=mask)

        # Stage 1: Binarize
        binary = mask.binarize(self.config.binarization.threshold)

        # Stage 2: Largest region
        region = extract_largest_region(binary, self.config.region.connectivity)
        if region is None:
            logger.debug("Mask has no foreground")
            return QuadNotFound(NotFoundReason.NO_FOREGROUND)

        region_mask, pixel_count = region
        mask_area = float(mask.width * mask.height)
        min_pixels = self.config.region.min_area_ratio * mask_area
        if pixel_count < min_pixels:
            logger.debug(
                f"Largest region has {pixel_count} px < minimum {min_pixels:.0f} px"
            )
            return QuadNotFound(NotFoundReason.REGION_TOO_SMALL)

        # Stage 3: Boundary
        boundary = trace_region_boundary(region_mask)
        polygon = simplify_boundary(boundary, self.config.simplification.epsilon_ratio)

        # Stage 4: Quad candidate
        candidate = self._four_sided_candidate(polygon)
        if candidate is None:
            if not relaxed:
                logger.debug(
                    f"Simplified boundary has {len(polygon)} vertices, strict mode"
                )
                return QuadNotFound(NotFoundReason.NOT_QUADRILATERAL)

            enclosing = min_area_enclosing_quad(
                boundary,
                self.config.enclosing_quad.hull_epsilon_ratio,
                self.config.enclosing_quad.max_hull_vertices,
            )
            if enclosing is None:
                return QuadNotFound(NotFoundReason.DEGENERATE_QUAD)
            candidate = order_points(enclosing)
            logger.debug(
                f"Relaxed mode: enclosing quad used for {len(polygon)}-vertex boundary"
            )

        # Stage 5: Validation
        min_quad_area = self.config.validation.min_quad_area_ratio * mask_area
        if is_degenerate_quad(candidate) or abs(polygon_area(candidate)) < min_quad_area:
            logger.warning(f"Rejected degenerate quad candidate {candidate.tolist()}")
            return QuadNotFound(NotFoundReason.DEGENERATE_QUAD)

        quad = Quad.from_numpy(candidate)
        logger.debug(f"Detected {quad} in {mask.width}x{mask.height} mask")
        return QuadFound(quad)

    @staticmethod
    def _four_sided_candidate(polygon: np.ndarray) -> Optional[np.ndarray]:
        """Canonically ordered corners if the polygon is a convex, non-degenerate quad."""
        if len(polygon) != 4:
            return None

        ordered = order_points(polygon)
        if not is_convex_quadrilateral(ordered) or is_degenerate_quad(ordered):
            return None
        return ordered


def detect_document_quad(
    mask: Optional[Union[SegmentationMask, np.ndarray]],
    relaxed: bool = False,
    config: Optional[DetectionModuleConfig] = None,
) -> DetectionResult:
    """
    Convenience function for one-shot quad detection.

    Args:
        mask: Segmentation mask or raw 2D array (None: no mask available).
        relaxed: Allow the enclosing-quadrilateral fallback.
        config: Optional custom configuration. Uses default if None.

    Returns:
        QuadFound or QuadNotFound.

    Example:
        >>> result = detect_document_quad(mask, relaxed=True)
        >>> if not result.is_found():
        ...     print(result.get_message())
    """
    detector = QuadDetector(config=config)
    return detector.detect(mask, relaxed=relaxed)
