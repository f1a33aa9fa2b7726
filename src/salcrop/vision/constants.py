"""Heuristic calibration constants for the detector layers and scorer.

These are tuning values, not structure: they seed ``HeuristicTuning`` and
can be overridden per call without touching pipeline code. Values follow
the published smartcrop heuristics, with Rec. 709 luminance weights.
"""

from __future__ import annotations

# Rec. 709 luminance weights for (R, G, B)
LUMA_WEIGHTS: tuple[float, float, float] = (0.2126, 0.7152, 0.0722)

# 4-neighbour Laplacian; centre minus the four direct neighbours
LAPLACIAN_KERNEL: tuple[tuple[float, ...], ...] = (
    (0.0, -1.0, 0.0),
    (-1.0, 4.0, -1.0),
    (0.0, -1.0, 0.0),
)

# Edge energy is clamped to the 8-bit luminance range before normalizing
EDGE_ENERGY_MAX: float = 255.0

# RGB direction of a typical skin tone, compared against unit-length pixel colours
SKIN_COLOR: tuple[float, float, float] = (0.78, 0.57, 0.44)

# Colour similarity (1 - distance to SKIN_COLOR) that counts as skin
SKIN_THRESHOLD: float = 0.8

# Relative luminance envelope for skin
SKIN_BRIGHTNESS_MIN: float = 0.2
SKIN_BRIGHTNESS_MAX: float = 1.0

# HSV saturation floor and relative luminance envelope for colourful pixels
SATURATION_THRESHOLD: float = 0.4
SATURATION_BRIGHTNESS_MIN: float = 0.05
SATURATION_BRIGHTNESS_MAX: float = 0.9

# Width of the rule-of-thirds bump; larger is narrower
THIRDS_SHARPNESS: float = 16.0

# Width of the strip along each crop border whose importance is penalized,
# as a fraction of the crop half-extent
CROP_EDGE_RADIUS: float = 0.4

# Centre weighting value at the crop centre; about 0 in the corners
CENTRE_PEAK: float = 1.41

# Added to edge energy before it scales the skin and saturation layers
SKIN_BIAS: float = 0.01
SATURATION_BIAS: float = 0.2

# Smallest working resolution the detectors are meaningful at
MIN_WORKING_RESOLUTION: int = 8
