"""
Data types for the quad detection module.

Detection has two outcomes, both ordinary return values: a quad was found,
or it was not (with the reason). Absence is never signalled by an exception.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from src.common.types import Quad


class NotFoundReason(Enum):
    """Why no document quad was produced for a frame."""

    NO_MASK = "No Mask"  # Segmentation unavailable for this frame
    NO_FOREGROUND = "No Foreground"  # Mask is all background
    REGION_TOO_SMALL = "Region Too Small"  # Largest region below area threshold
    NOT_QUADRILATERAL = "Not Quadrilateral"  # Strict mode, boundary is not 4-sided
    DEGENERATE_QUAD = "Degenerate Quad"  # Candidate collapsed (collinear/zero-area)


@dataclass(frozen=True)
class QuadFound:
    """A document quad was detected.

    Attributes:
        quad: Corners in canonical [TL, TR, BR, BL] order, in the coordinate
            space of the mask (or of the image once scaled).
    """

    quad: Quad

    def is_found(self) -> bool:
        return True


@dataclass(frozen=True)
class QuadNotFound:
    """No document quad in this frame; try again with the next one."""

    reason: NotFoundReason

    def is_found(self) -> bool:
        return False

    def get_message(self) -> str:
        """Human-readable explanation for UI hints and logs."""
        messages = {
            NotFoundReason.NO_MASK: "Segmentation unavailable for this frame",
            NotFoundReason.NO_FOREGROUND: "No document in view",
            NotFoundReason.REGION_TOO_SMALL: "Document too small, move closer",
            NotFoundReason.NOT_QUADRILATERAL: "Document edges not clearly visible",
            NotFoundReason.DEGENERATE_QUAD: "Document outline could not be resolved",
        }
        return messages[self.reason]


DetectionResult = Union[QuadFound, QuadNotFound]
