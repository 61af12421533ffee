"""
Segmentation provider contract.

The segmentation model itself is an external collaborator: it turns a
captured frame into a foreground-confidence mask, usually at a lower
resolution than the frame. This module defines the interface the pipeline
consumes and how an unavailable model is reported.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

import numpy as np

from src.common.types import Rotation, SegmentationMask

logger = logging.getLogger(__name__)


class SegmentationUnavailableError(RuntimeError):
    """The segmentation model could not run (not loaded, failed to initialize)."""


class SegmentationProvider(ABC):
    """
    Produces a document segmentation mask for a captured frame.

    Implementations may return None, or raise SegmentationUnavailableError,
    when the underlying model is unavailable. The mask must be expressed in
    the same (sensor) frame as the image it was computed from.
    """

    @abstractmethod
    def segment(
        self, image: np.ndarray, rotation: Rotation
    ) -> Optional[SegmentationMask]:
        """
        Segment a frame.

        Args:
            image: Captured frame (H, W, C).
            rotation: Clockwise sensor-to-upright correction of the frame.

        Returns:
            Foreground-confidence mask, or None if no mask could be produced.
        """


class StaticMaskProvider(SegmentationProvider):
    """
    Returns a fixed mask for every frame.

    Useful when the mask was computed elsewhere (another process, a cached
    inference result) and in tests.

    Example:
        >>> provider = StaticMaskProvider(np.zeros((64, 64), dtype=np.float32))
        >>> provider.segment(frame, Rotation.DEG_0).width
        64
    """

    def __init__(self, mask: Optional[Union[SegmentationMask, np.ndarray]]):
        if mask is not None and not isinstance(mask, SegmentationMask):
            mask = SegmentationMask(data=mask)
        self.mask = mask

    def segment(
        self, image: np.ndarray, rotation: Rotation
    ) -> Optional[SegmentationMask]:
        return self.mask


def segment_or_none(
    provider: SegmentationProvider,
    image: np.ndarray,
    rotation: Union[Rotation, int] = Rotation.DEG_0,
) -> Optional[SegmentationMask]:
    """
    Run a provider, treating an unavailable model as "no mask".

    Only SegmentationUnavailableError is absorbed; any other exception is a
    bug in the provider and propagates.

    Returns:
        The mask, or None if the provider produced nothing.
    """
    try:
        mask = provider.segment(image, Rotation.from_degrees(rotation))
    except SegmentationUnavailableError as e:
        logger.warning(f"Segmentation unavailable: {e}")
        return None

    if mask is None:
        logger.warning(f"{type(provider).__name__} returned no mask")
        return None

    if not isinstance(mask, SegmentationMask):
        mask = SegmentationMask(data=mask)

    return mask
