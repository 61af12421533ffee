"""
Document Rectification

Perspective-corrects the photographed document: the quad's corners are
mapped onto an axis-aligned rectangle sized from the quad's own edge
lengths, background bleed along the edges is cleaned with the segmentation
mask, and the result is rotated upright.

Pipeline stages:
1. Precondition check (degenerate quad -> InvalidQuadError)
2. Target size derivation (longer of each pair of opposite edges)
3. Homography + bilinear warp
4. Mask-assisted edge cleanup
5. Rotation to upright
"""

from src.rectification.config_loader import (
    Config,
    RectificationModuleConfig,
    get_default_config,
    load_config,
)
from src.rectification.geometric_validator import (
    calculate_aspect_ratio,
    calculate_edge_lengths,
    calculate_target_size,
)
from src.rectification.processor import DocumentRectifier, extract_document
from src.rectification.rotation import rotate_image, rotate_quad

__all__ = [
    "DocumentRectifier",
    "extract_document",
    "calculate_edge_lengths",
    "calculate_target_size",
    "calculate_aspect_ratio",
    "rotate_image",
    "rotate_quad",
    "RectificationModuleConfig",
    "Config",
    "get_default_config",
    "load_config",
]
