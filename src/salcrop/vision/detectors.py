"""Detector layers: edge energy, skin likelihood and colour saturation.

Each detector is a pure function from the working image pixels (RGB,
uint8, shape (H, W, 3)) and the heuristic tuning to an ``ImportanceMap``
of the same size with values in [0, 1]. The set of detectors is closed;
the engine calls all three and weights them in the combiner.
"""

from __future__ import annotations

import cv2
import numpy as np
import numpy.typing as npt

from salcrop.vision.constants import EDGE_ENERGY_MAX, LAPLACIAN_KERNEL
from salcrop.vision.importance import FloatGrid, ImportanceMap
from salcrop.vision.tuning import HeuristicTuning

_LAPLACIAN = np.array(LAPLACIAN_KERNEL, dtype=np.float64)


def luminance(
    pixels: npt.NDArray[np.uint8],
    weights: tuple[float, float, float],
) -> FloatGrid:
    """Weighted sum of the colour channels, in the 0-255 range.

    Args:
        pixels: RGB array of shape (H, W, 3).
        weights: (R, G, B) coefficients.

    Returns:
        Float64 array of shape (H, W).
    """
    rgb = pixels.astype(np.float64)
    r_w, g_w, b_w = weights
    return r_w * rgb[:, :, 0] + g_w * rgb[:, :, 1] + b_w * rgb[:, :, 2]


def _soft_threshold(
    values: FloatGrid,
    threshold: float,
    brightness: FloatGrid,
    brightness_min: float,
    brightness_max: float,
) -> FloatGrid:
    """Rescale values above threshold to [0, 1]; zero elsewhere or out of envelope."""
    inside = (
        (values > threshold)
        & (brightness >= brightness_min)
        & (brightness <= brightness_max)
    )
    scaled = (values - threshold) / (1.0 - threshold)
    return np.where(inside, np.clip(scaled, 0.0, 1.0), 0.0)


def detect_edges(
    pixels: npt.NDArray[np.uint8],
    tuning: HeuristicTuning,
) -> ImportanceMap:
    """Edge energy from a Laplacian of the luminance channel.

    Luminance is rounded to whole 8-bit levels before filtering so the
    convolution is exact and flat areas score exactly zero. Borders read
    replicated edge pixels, so a flat image has zero energy everywhere
    including its border. Negative responses (the dark side of an edge)
    are clamped to zero.

    Args:
        pixels: Working image RGB array.
        tuning: Heuristic tuning (luminance weights).

    Returns:
        ImportanceMap with values in [0, 1].
    """
    luma = np.rint(luminance(pixels, tuning.luma_weights))
    response = cv2.filter2D(
        luma,
        cv2.CV_64F,
        _LAPLACIAN,
        borderType=cv2.BORDER_REPLICATE,
    )
    energy = np.clip(response, 0.0, EDGE_ENERGY_MAX) / EDGE_ENERGY_MAX
    return ImportanceMap(energy)


def detect_skin(
    pixels: npt.NDArray[np.uint8],
    tuning: HeuristicTuning,
) -> ImportanceMap:
    """Skin likelihood from the pixel's colour direction and brightness.

    The pixel's RGB vector is normalized to unit length and compared with
    the reference skin direction; similarity is one minus their Euclidean
    distance. Pure black has no direction and is treated as the zero
    vector. Scores rise continuously from the threshold to 1 at the
    reference colour.

    Args:
        pixels: Working image RGB array.
        tuning: Heuristic tuning (skin colour, threshold, brightness envelope).

    Returns:
        ImportanceMap with values in [0, 1].
    """
    rgb = pixels.astype(np.float64)
    magnitude = np.sqrt(np.sum(rgb * rgb, axis=2, keepdims=True))
    direction = np.divide(
        rgb,
        magnitude,
        out=np.zeros_like(rgb),
        where=magnitude > 0,
    )
    diff = direction - np.asarray(tuning.skin_color, dtype=np.float64)
    similarity = 1.0 - np.sqrt(np.sum(diff * diff, axis=2))

    brightness = luminance(pixels, tuning.luma_weights) / 255.0
    score = _soft_threshold(
        similarity,
        tuning.skin_threshold,
        brightness,
        tuning.skin_brightness_min,
        tuning.skin_brightness_max,
    )
    return ImportanceMap(score)


def detect_saturation(
    pixels: npt.NDArray[np.uint8],
    tuning: HeuristicTuning,
) -> ImportanceMap:
    """Colourfulness from HSV saturation with a soft floor.

    Saturation is (max - min) / max over the three channels; pure black is
    defined as zero saturation.

    Args:
        pixels: Working image RGB array.
        tuning: Heuristic tuning (saturation threshold, brightness envelope).

    Returns:
        ImportanceMap with values in [0, 1].
    """
    rgb = pixels.astype(np.float64)
    high = rgb.max(axis=2)
    low = rgb.min(axis=2)
    saturation = np.divide(
        high - low,
        high,
        out=np.zeros_like(high),
        where=high > 0,
    )

    brightness = luminance(pixels, tuning.luma_weights) / 255.0
    score = _soft_threshold(
        saturation,
        tuning.saturation_threshold,
        brightness,
        tuning.saturation_brightness_min,
        tuning.saturation_brightness_max,
    )
    return ImportanceMap(score)
