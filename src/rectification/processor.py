"""
Main processor for the Rectification module.

Turns a full-resolution image and the document quad into an upright,
axis-aligned scan of the document.

Pipeline stages:
1. Precondition check (degenerate quad -> InvalidQuadError)
2. Target size from the quad's edge lengths
3. Homography + bilinear perspective warp
4. Mask-assisted edge cleanup (optional)
5. Lossless rotation to upright
"""

import logging
from typing import Optional, Union

import numpy as np

from src.common.errors import InvalidQuadError
from src.common.types import Quad, Rotation, SegmentationMask
from src.rectification.config_loader import RectificationModuleConfig, get_default_config
from src.rectification.geometric_validator import (
    calculate_target_size,
    validate_quad_geometry,
)
from src.rectification.image_rectification import compute_homography, warp_to_rectangle
from src.rectification.matte import apply_matte, compute_matte
from src.rectification.rotation import rotate_image
from src.scaling.quad_scaler import ScalingPolicy, scaled_to

logger = logging.getLogger(__name__)


def _validate_image(image: np.ndarray) -> None:
    if image is None or not isinstance(image, np.ndarray) or image.size == 0:
        raise ValueError("Invalid input image: image is None or empty")

    if image.ndim not in (2, 3) or (image.ndim == 3 and image.shape[2] not in (1, 3, 4)):
        raise ValueError(
            f"Invalid input image: expected (H, W) or (H, W, C) with 1, 3 or 4 "
            f"channels, got shape {image.shape}"
        )


class DocumentRectifier:
    """
    Perspective-corrects a photographed document.

    The quad is expressed in the source image's own (sensor) frame. The
    rectified raster is computed in that frame and then rotated clockwise
    by ``rotation`` so the result is upright however the device was held.

    Example:
        >>> rectifier = DocumentRectifier()
        >>> image = cv2.imread("page.jpg")
        >>> quad = Quad.from_numpy([[0, 0], [400, 0], [400, 200], [0, 200]])
        >>> scan = rectifier.extract(image, quad, Rotation.DEG_0)
        >>> scan.shape
        (200, 400, 3)
    """

    def __init__(self, config: Optional[RectificationModuleConfig] = None):
        """
        Initialize the rectifier.

        Args:
            config: Rectification configuration. If None, loads the bundled config.yaml.
        """
        if config is None:
            self.config = get_default_config().rectification
        else:
            self.config = config

    def extract(
        self,
        image: np.ndarray,
        quad: Union[Quad, np.ndarray, list],
        rotation: Union[Rotation, int] = Rotation.DEG_0,
        mask: Optional[Union[SegmentationMask, np.ndarray]] = None,
    ) -> np.ndarray:
        """
        Extract the document as an upright, axis-aligned raster.

        Args:
            image: Full-resolution source image (H, W) or (H, W, C). Not modified.
            quad: Document corners in image coordinates, [TL, TR, BR, BL].
            rotation: Clockwise sensor-to-upright correction.
            mask: Segmentation mask of the same frame at any resolution, used
                only to clean background bleed along the output edges.

        Returns:
            New raster. Before rotation its width is the longer horizontal
            edge of the quad and its height the longer vertical edge.

        Raises:
            InvalidQuadError: If the quad is collinear, zero-area or self-intersecting.
            ValueError: If the image is invalid or the rotation is not a multiple of 90.
        """
        _validate_image(image)

        if not isinstance(quad, Quad):
            quad = Quad.from_numpy(quad)

        # Stage 1: Precondition
        if not validate_quad_geometry(quad):
            raise InvalidQuadError(
                f"Cannot rectify degenerate quad {quad}: corners must form a "
                "simple polygon with positive area"
            )

        rotation = Rotation.from_degrees(rotation)

        # Stage 2: Target size
        width, height = calculate_target_size(quad)

        # Stage 3: Warp
        homography = compute_homography(quad.to_numpy(), width, height)
        rectified = warp_to_rectangle(
            image,
            homography,
            width,
            height,
            interpolation=self.config.processing.interpolation_flag,
            border_mode=self.config.processing.border_flag,
        )

        # Stage 4: Edge cleanup
        if mask is not None and self.config.matte.enabled:
            rectified = self._clean_edges(rectified, image, quad, mask)

        # Stage 5: Upright
        if rotation is not Rotation.DEG_0:
            rectified = rotate_image(rectified, rotation)

        logger.info(
            f"Rectified document to {rectified.shape[1]}x{rectified.shape[0]} "
            f"(rotation={int(rotation)})"
        )

        return rectified

    def _clean_edges(
        self,
        rectified: np.ndarray,
        image: np.ndarray,
        quad: Quad,
        mask: Union[SegmentationMask, np.ndarray],
    ) -> np.ndarray:
        if not isinstance(mask, SegmentationMask):
            mask = SegmentationMask(data=mask)

        matte_config = self.config.matte
        image_h, image_w = image.shape[:2]
        height, width = rectified.shape[:2]

        mask_quad = scaled_to(
            quad,
            image_w,
            image_h,
            mask.width,
            mask.height,
            policy=ScalingPolicy(matte_config.mask_scaling),
        )
        matte = compute_matte(mask, mask_quad, width, height, matte_config.threshold)

        return apply_matte(
            rectified,
            matte,
            matte_config.edge_band_ratio,
            fill_mode=matte_config.fill_mode,
            fill_color=matte_config.fill_color,
        )


def extract_document(
    image: np.ndarray,
    quad: Union[Quad, np.ndarray, list],
    rotation: Union[Rotation, int] = Rotation.DEG_0,
    mask: Optional[Union[SegmentationMask, np.ndarray]] = None,
    config: Optional[RectificationModuleConfig] = None,
) -> np.ndarray:
    """
    Convenience function for one-shot rectification.

    Example:
        >>> scan = extract_document(image, quad, rotation=90, mask=mask)
    """
    rectifier = DocumentRectifier(config=config)
    return rectifier.extract(image, quad, rotation, mask)
