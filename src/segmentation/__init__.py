"""
Segmentation provider contract (mask production is an external collaborator).
"""

from src.segmentation.provider import (
    SegmentationProvider,
    SegmentationUnavailableError,
    StaticMaskProvider,
    segment_or_none,
)

__all__ = [
    "SegmentationProvider",
    "SegmentationUnavailableError",
    "StaticMaskProvider",
    "segment_or_none",
]
