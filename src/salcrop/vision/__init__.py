"""Vision module: working-image preparation and importance layers.

This module downscales the caller's image to the working resolution and
turns its pixels into per-pixel importance maps (edges, skin, saturation),
which the combiner merges into the map the crop search is scored against.
"""

from __future__ import annotations

from salcrop.vision.detectors import (
    detect_edges,
    detect_saturation,
    detect_skin,
    luminance,
)
from salcrop.vision.image import (
    ImageInput,
    WorkingImage,
    downscale,
    to_rgb_array,
    working_size,
)
from salcrop.vision.importance import ImportanceLayers, ImportanceMap, combine_layers
from salcrop.vision.tuning import HeuristicTuning

__all__ = [
    "HeuristicTuning",
    "ImageInput",
    "ImportanceLayers",
    "ImportanceMap",
    "WorkingImage",
    "combine_layers",
    "detect_edges",
    "detect_saturation",
    "detect_skin",
    "downscale",
    "luminance",
    "to_rgb_array",
    "working_size",
]
