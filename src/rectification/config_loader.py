"""
Configuration loader with Pydantic validation for Rectification module.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values.
"""

from pathlib import Path
from typing import List, Literal

import cv2
import yaml
from pydantic import BaseModel, Field, field_validator

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}

BORDER_MODES = {
    "replicate": cv2.BORDER_REPLICATE,
    "constant": cv2.BORDER_CONSTANT,
    "reflect": cv2.BORDER_REFLECT_101,
}


class ProcessingConfig(BaseModel):
    """Perspective warp configuration.

    Attributes:
        warp_interpolation: Resampling used by the warp ("linear" is bilinear).
        border_mode: How samples falling outside the source image are filled.
    """

    warp_interpolation: Literal["linear", "cubic", "nearest", "area", "lanczos"] = (
        "linear"
    )
    border_mode: Literal["replicate", "constant", "reflect"] = "replicate"

    @property
    def interpolation_flag(self) -> int:
        """OpenCV interpolation flag for ``warp_interpolation``."""
        return INTERPOLATION_FLAGS[self.warp_interpolation]

    @property
    def border_flag(self) -> int:
        """OpenCV border flag for ``border_mode``."""
        return BORDER_MODES[self.border_mode]


class MatteConfig(BaseModel):
    """Mask-assisted edge cleanup configuration.

    Attributes:
        enabled: Use the segmentation mask to neutralize background bleed.
        threshold: Re-binarization threshold for the warped mask (0.0-1.0).
        edge_band_ratio: Width of the border band that may be filled, as a
            fraction of min(width, height) of the rectified image.
        fill_mode: "color" fills with ``fill_color``; "median" fills with the
            median colour of the document pixels.
        fill_color: Fill colour in the image's channel order (BGR by default).
        mask_scaling: How the mask frame relates to the image frame.
    """

    enabled: bool = True
    threshold: float = Field(default=0.5, ge=0.0, lt=1.0)
    edge_band_ratio: float = Field(default=0.05, ge=0.0, le=0.5)
    fill_mode: Literal["color", "median"] = "color"
    fill_color: List[int] = Field(default_factory=lambda: [255, 255, 255])
    mask_scaling: Literal["stretch", "letterbox"] = "stretch"

    @field_validator("fill_color")
    @classmethod
    def _validate_fill_color(cls, v: List[int]) -> List[int]:
        if len(v) not in (1, 3, 4):
            raise ValueError(f"fill_color must have 1, 3 or 4 components, got {len(v)}")
        if any(c < 0 or c > 255 for c in v):
            raise ValueError(f"fill_color components must be in [0, 255], got {v}")
        return v


class RectificationModuleConfig(BaseModel):
    """Complete rectification module configuration.

    Attributes:
        processing: Perspective warp settings.
        matte: Mask-assisted edge cleanup settings.
    """

    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    matte: MatteConfig = Field(default_factory=MatteConfig)


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        rectification: Rectification module configuration.
    """

    rectification: RectificationModuleConfig = RectificationModuleConfig()


def load_config(config_path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file.

    Returns:
        Validated Config object with all settings.

    Raises:
        FileNotFoundError: If config file does not exist.
        yaml.YAMLError: If YAML parsing fails.
        pydantic.ValidationError: If configuration validation fails.

    Example:
        >>> config = load_config(Path("src/rectification/config.yaml"))
        >>> print(config.rectification.processing.warp_interpolation)
        linear
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    # Wrap flat YAML structure in 'rectification' key for Config model
    return Config(rectification=RectificationModuleConfig(**config_dict))


def get_default_config() -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/rectification/config.yaml.
    """
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    else:
        # Fallback to hardcoded defaults if config file is missing
        return Config()
