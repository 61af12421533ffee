"""
Full End-to-End Pipeline

Orchestrates segmentation, quad detection, quad scaling and rectification
for the two ways the scanner runs:

- Live preview: detect + scale only, once per camera frame, abandoned
  between stages as soon as a newer frame supersedes it.
- Capture: one complete run on the captured photo, never cancelled.

Threading and offloading are the caller's responsibility; every method here
is synchronous and holds no per-frame state.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from src.common.types import Quad, Rotation, SegmentationMask
from src.detection.processor import QuadDetector
from src.detection.types import (
    DetectionResult,
    NotFoundReason,
    QuadFound,
    QuadNotFound,
)
from src.pipeline.cancellation import CancellationToken
from src.rectification.processor import DocumentRectifier
from src.scaling.quad_scaler import ScalingPolicy, scaled_to
from src.segmentation.provider import SegmentationProvider, segment_or_none

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """
    Output of a capture run.

    Attributes:
        detection: QuadFound with the quad in full-image coordinates, or
            QuadNotFound with the reason.
        image: The rectified, upright document (None if nothing was found).
    """

    detection: DetectionResult
    image: Optional[np.ndarray]

    def is_found(self) -> bool:
        return self.image is not None

    @property
    def quad(self) -> Optional[Quad]:
        return self.detection.quad if isinstance(self.detection, QuadFound) else None


class DocumentScanPipeline:
    """
    End-to-end pipeline: frame -> mask -> quad -> rectified document.

    Example:
        >>> pipeline = DocumentScanPipeline(provider)
        >>> result = pipeline.capture(photo, Rotation.DEG_90)
        >>> if result.is_found():
        ...     cv2.imwrite("scan.jpg", result.image)
        ... else:
        ...     print(result.detection.get_message())
    """

    def __init__(
        self,
        provider: SegmentationProvider,
        detector: Optional[QuadDetector] = None,
        rectifier: Optional[DocumentRectifier] = None,
        scaling_policy: ScalingPolicy = ScalingPolicy.STRETCH,
        relaxed_preview: bool = False,
        relaxed_capture: bool = True,
    ):
        """
        Initialize the pipeline.

        Args:
            provider: Segmentation model wrapper.
            detector: Quad detector. If None, uses the default configuration.
            rectifier: Document rectifier. If None, uses the default configuration.
            scaling_policy: How mask coordinates map to image coordinates
                (STRETCH, or UNLETTERBOX for models fed letterboxed input).
            relaxed_preview: Allow the enclosing-quad fallback in live preview.
            relaxed_capture: Allow the enclosing-quad fallback on capture.
        """
        self.provider = provider
        self.detector = detector if detector is not None else QuadDetector()
        self.rectifier = rectifier if rectifier is not None else DocumentRectifier()
        self.scaling_policy = scaling_policy
        self.relaxed_preview = relaxed_preview
        self.relaxed_capture = relaxed_capture

    def _to_image_space(
        self, quad: Quad, mask: SegmentationMask, image: np.ndarray
    ) -> Quad:
        image_h, image_w = image.shape[:2]
        return scaled_to(
            quad,
            mask.width,
            mask.height,
            image_w,
            image_h,
            policy=self.scaling_policy,
        )

    def preview(
        self,
        image: np.ndarray,
        rotation: Union[Rotation, int] = Rotation.DEG_0,
        token: Optional[CancellationToken] = None,
    ) -> DetectionResult:
        """
        Locate the document in a live-preview frame.

        Args:
            image: Camera frame.
            rotation: Clockwise sensor-to-upright correction of the frame.
            token: Cancellation token checked between stages.

        Returns:
            QuadFound in full-image coordinates, or QuadNotFound.

        Raises:
            FrameSupersededError: If the token was cancelled between stages.
        """
        rotation = Rotation.from_degrees(rotation)

        if token is not None:
            token.raise_if_cancelled("segmentation")
        mask = segment_or_none(self.provider, image, rotation)
        if mask is None:
            return QuadNotFound(NotFoundReason.NO_MASK)

        if token is not None:
            token.raise_if_cancelled("detection")
        detection = self.detector.detect(mask, relaxed=self.relaxed_preview)
        if not detection.is_found():
            return detection

        if token is not None:
            token.raise_if_cancelled("scaling")
        return QuadFound(self._to_image_space(detection.quad, mask, image))

    def capture(
        self, image: np.ndarray, rotation: Union[Rotation, int] = Rotation.DEG_0
    ) -> ScanResult:
        """
        Run the complete pipeline on a captured photo.

        Args:
            image: Full-resolution photo in its sensor orientation.
            rotation: Clockwise sensor-to-upright correction.

        Returns:
            ScanResult with the rectified document, or the reason nothing was found.
        """
        rotation = Rotation.from_degrees(rotation)
        image_h, image_w = image.shape[:2]
        logger.info(f"Capture: {image_w}x{image_h} frame, rotation={int(rotation)}")

        mask = segment_or_none(self.provider, image, rotation)
        if mask is None:
            return ScanResult(QuadNotFound(NotFoundReason.NO_MASK), None)

        detection = self.detector.detect(mask, relaxed=self.relaxed_capture)
        if not detection.is_found():
            logger.info(f"Capture: no document ({detection.reason.value})")
            return ScanResult(detection, None)

        quad = self._to_image_space(detection.quad, mask, image)
        scan = self.rectifier.extract(image, quad, rotation, mask)

        logger.info(f"Capture: document extracted at {quad}")
        return ScanResult(QuadFound(quad), scan)
