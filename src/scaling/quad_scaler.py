"""
Quad Coordinate Remapping

Maps a quadrilateral between two image resolutions, typically from the
segmentation mask's resolution to the full camera frame. Pure coordinate
arithmetic: no I/O, no validity checks on the result.
"""

import logging
from enum import Enum

import numpy as np

from src.common.types import Quad

logger = logging.getLogger(__name__)


class ScalingPolicy(Enum):
    """How the source frame relates to the target frame."""

    # Independent horizontal/vertical factors; the whole source frame covers
    # the whole target frame.
    STRETCH = "stretch"
    # The source frame is fitted, centred and aspect-preserving, inside a
    # padded target frame (image -> letterboxed model input).
    LETTERBOX = "letterbox"
    # Inverse of LETTERBOX: the source frame is the padded one
    # (letterboxed model output -> image).
    UNLETTERBOX = "unletterbox"


def _validate_dimensions(from_w: float, from_h: float, to_w: float, to_h: float) -> None:
    for name, value in (
        ("from_w", from_w),
        ("from_h", from_h),
        ("to_w", to_w),
        ("to_h", to_h),
    ):
        if not value > 0:
            raise ValueError(f"{name} must be positive, got {value}")


def scaled_to(
    quad: Quad,
    from_w: float,
    from_h: float,
    to_w: float,
    to_h: float,
    policy: ScalingPolicy = ScalingPolicy.STRETCH,
) -> Quad:
    """
    Remap a quad from a (from_w, from_h) frame to a (to_w, to_h) frame.

    - STRETCH: (x, y) -> (x * to_w / from_w, y * to_h / from_h). The mask and
      the camera frame are generally not the same aspect ratio, hence the
      independent factors.
    - LETTERBOX: uniform scale s = min(to_w / from_w, to_h / from_h) plus
      centring padding pad = (to - from * s) / 2, i.e. x_to = x * s + pad_x.
    - UNLETTERBOX: exact inverse of LETTERBOX with the frames swapped,
      x_to = (x - pad_x) / s with s = min(from_w / to_w, from_h / to_h).

    Corner order is preserved, ``scaled_to(q, w, h, w, h)`` is the identity
    and scaling there and back returns the original quad (LETTERBOX pairs
    with UNLETTERBOX).

    Args:
        quad: Quad expressed in the source frame.
        from_w: Source frame width.
        from_h: Source frame height.
        to_w: Target frame width.
        to_h: Target frame height.
        policy: Relationship between the two frames.

    Returns:
        New Quad in target-frame coordinates.

    Raises:
        ValueError: If any dimension is not strictly positive.

    Example:
        >>> quad = Quad.from_numpy([[20, 20], [80, 20], [80, 80], [20, 80]])
        >>> scaled_to(quad, 100, 100, 1000, 1000).top_right
        Point(x=800, y=200)
    """
    _validate_dimensions(from_w, from_h, to_w, to_h)

    pts = quad.to_numpy()

    if policy is ScalingPolicy.STRETCH:
        factors = np.array([to_w / from_w, to_h / from_h], dtype=np.float64)
        remapped = pts * factors
    elif policy is ScalingPolicy.LETTERBOX:
        s = min(to_w / from_w, to_h / from_h)
        padding = np.array(
            [(to_w - from_w * s) / 2.0, (to_h - from_h * s) / 2.0], dtype=np.float64
        )
        remapped = pts * s + padding
    elif policy is ScalingPolicy.UNLETTERBOX:
        s = min(from_w / to_w, from_h / to_h)
        padding = np.array(
            [(from_w - to_w * s) / 2.0, (from_h - to_h * s) / 2.0], dtype=np.float64
        )
        remapped = (pts - padding) / s
    else:
        raise ValueError(f"Unsupported scaling policy: {policy}")

    logger.debug(
        f"Scaled quad {from_w}x{from_h} -> {to_w}x{to_h} ({policy.value}): "
        f"{pts.tolist()} -> {remapped.tolist()}"
    )

    return Quad.from_numpy(remapped)
