"""
Document Quad Detection

Finds the document's quadrilateral in a segmentation mask. "No document"
is an ordinary outcome (QuadNotFound), never an exception.

Example:
    >>> from src.detection import QuadDetector
    >>> from src.common.types import SegmentationMask
    >>> detector = QuadDetector()
    >>> result = detector.detect(SegmentationMask(data=mask), relaxed=False)
    >>> if result.is_found():
    ...     print(f"Document at {result.quad}")
"""

from src.detection.config_loader import (
    Config,
    DetectionModuleConfig,
    get_default_config,
    load_config,
)
from src.detection.processor import QuadDetector, detect_document_quad
from src.detection.types import (
    DetectionResult,
    NotFoundReason,
    QuadFound,
    QuadNotFound,
)

__all__ = [
    "QuadDetector",
    "detect_document_quad",
    "DetectionResult",
    "NotFoundReason",
    "QuadFound",
    "QuadNotFound",
    "DetectionModuleConfig",
    "Config",
    "get_default_config",
    "load_config",
]
