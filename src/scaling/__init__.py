"""
Quad scaling between coordinate spaces (mask resolution <-> image resolution).
"""

from src.scaling.quad_scaler import ScalingPolicy, scaled_to

__all__ = ["ScalingPolicy", "scaled_to"]
