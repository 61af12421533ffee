"""
Configuration loader with Pydantic validation for Detection module.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values.
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field


class BinarizationConfig(BaseModel):
    """Mask binarization configuration.

    Attributes:
        threshold: Confidence threshold relative to the mask's value range
            (0.0-1.0). Pixels strictly above it are foreground.
    """

    threshold: float = Field(default=0.5, ge=0.0, lt=1.0)


class RegionConfig(BaseModel):
    """Foreground region selection.

    Attributes:
        min_area_ratio: Minimum pixel count of the largest region, as a
            fraction of the mask area. Guards against noise-only masks.
        connectivity: Pixel connectivity for connected components (4 or 8).
    """

    min_area_ratio: float = Field(default=0.02, gt=0.0, le=1.0)
    connectivity: Literal[4, 8] = 8


class SimplificationConfig(BaseModel):
    """Boundary simplification (Douglas-Peucker).

    Attributes:
        epsilon_ratio: Simplification tolerance as a fraction of the
            boundary perimeter.
    """

    epsilon_ratio: float = Field(default=0.02, gt=0.0, lt=0.5)


class EnclosingQuadConfig(BaseModel):
    """Relaxed-mode fallback: minimum-area enclosing quadrilateral.

    Attributes:
        hull_epsilon_ratio: Initial hull simplification tolerance as a
            fraction of the hull perimeter.
        max_hull_vertices: Upper bound on hull vertices searched; the
            tolerance grows until the hull is at most this size.
    """

    hull_epsilon_ratio: float = Field(default=0.005, gt=0.0, lt=0.5)
    max_hull_vertices: int = Field(default=16, ge=4, le=64)


class ValidationConfig(BaseModel):
    """Final quad validation.

    Attributes:
        min_quad_area_ratio: Quads smaller than this fraction of the mask
            area are treated as degenerate.
    """

    min_quad_area_ratio: float = Field(default=0.001, ge=0.0, le=1.0)


class DetectionModuleConfig(BaseModel):
    """Complete quad detection configuration.

    Attributes:
        binarization: Mask binarization settings.
        region: Foreground region selection settings.
        simplification: Boundary simplification settings.
        enclosing_quad: Relaxed-mode fallback settings.
        validation: Final quad validation settings.
    """

    binarization: BinarizationConfig = Field(default_factory=BinarizationConfig)
    region: RegionConfig = Field(default_factory=RegionConfig)
    simplification: SimplificationConfig = Field(default_factory=SimplificationConfig)
    enclosing_quad: EnclosingQuadConfig = Field(default_factory=EnclosingQuadConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        detection: Detection module configuration.
    """

    detection: DetectionModuleConfig = DetectionModuleConfig()


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
        >>> config = load_config(Path("src/detection/config.yaml"))
        >>> print(config.detection.binarization.threshold)
        0.5
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    # Wrap flat YAML structure in 'detection' key for Config model
    return Config(detection=DetectionModuleConfig(**config_dict))


def get_default_config() -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/detection/config.yaml.
    """
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    else:
        # Fallback to hardcoded defaults if config file is missing
        return Config()
