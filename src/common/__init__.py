"""
Common types and utilities shared across all modules.

This module provides standardized data types for the document scanning pipeline,
ensuring consistency and type safety across detection, scaling and rectification.
"""

from src.common.errors import FrameSupersededError, InvalidQuadError
from src.common.geometry import is_degenerate_quad, order_points
from src.common.types import Point, Quad, Rotation, SegmentationMask

__all__ = [
    "Point",
    "Quad",
    "Rotation",
    "SegmentationMask",
    "InvalidQuadError",
    "FrameSupersededError",
    "order_points",
    "is_degenerate_quad",
]
