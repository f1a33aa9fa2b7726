"""Per-call heuristic tuning for the detector layers and the scorer."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator

from salcrop.vision.constants import (
    CROP_EDGE_RADIUS,
    LUMA_WEIGHTS,
    SATURATION_BIAS,
    SATURATION_BRIGHTNESS_MAX,
    SATURATION_BRIGHTNESS_MIN,
    SATURATION_THRESHOLD,
    SKIN_BIAS,
    SKIN_BRIGHTNESS_MAX,
    SKIN_BRIGHTNESS_MIN,
    SKIN_COLOR,
    SKIN_THRESHOLD,
    THIRDS_SHARPNESS,
)


class HeuristicTuning(BaseModel, frozen=True):
    """Thresholds and coefficients used by the detectors, combiner and scorer.

    Attributes:
        luma_weights: (R, G, B) weights of the luminance channel.
        skin_color: Reference skin tone as an RGB direction.
        skin_threshold: Similarity to skin_color below which a pixel scores 0.
        skin_brightness_min: Lowest relative luminance treated as skin.
        skin_brightness_max: Highest relative luminance treated as skin.
        saturation_threshold: Saturation floor below which a pixel scores 0.
        saturation_brightness_min: Lowest relative luminance counted.
        saturation_brightness_max: Highest relative luminance counted.
        thirds_sharpness: Narrowness of the rule-of-thirds bump.
        edge_radius: Width of the penalized strip along crop borders, as a
            fraction of the crop half-extent.
        skin_bias: Detail floor when skin is coupled to edge energy.
        saturation_bias: Detail floor when saturation is coupled to edge
            energy.
    """

    luma_weights: tuple[float, float, float] = LUMA_WEIGHTS
    skin_color: tuple[float, float, float] = SKIN_COLOR
    skin_threshold: float = Field(default=SKIN_THRESHOLD, ge=0.0, lt=1.0)
    skin_brightness_min: float = Field(default=SKIN_BRIGHTNESS_MIN, ge=0.0, le=1.0)
    skin_brightness_max: float = Field(default=SKIN_BRIGHTNESS_MAX, ge=0.0, le=1.0)
    saturation_threshold: float = Field(default=SATURATION_THRESHOLD, ge=0.0, lt=1.0)
    saturation_brightness_min: float = Field(
        default=SATURATION_BRIGHTNESS_MIN, ge=0.0, le=1.0
    )
    saturation_brightness_max: float = Field(
        default=SATURATION_BRIGHTNESS_MAX, ge=0.0, le=1.0
    )
    thirds_sharpness: float = Field(default=THIRDS_SHARPNESS, gt=0.0)
    edge_radius: float = Field(default=CROP_EDGE_RADIUS, gt=0.0, le=1.0)
    skin_bias: float = Field(default=SKIN_BIAS, ge=0.0)
    saturation_bias: float = Field(default=SATURATION_BIAS, ge=0.0)

    @model_validator(mode="after")
    def _validate_envelopes(self) -> Self:
        if self.skin_brightness_min > self.skin_brightness_max:
            raise ValueError("skin_brightness_min must not exceed skin_brightness_max")
        if self.saturation_brightness_min > self.saturation_brightness_max:
            raise ValueError(
                "saturation_brightness_min must not exceed saturation_brightness_max"
            )
        if any(w < 0 for w in self.luma_weights) or sum(self.luma_weights) <= 0:
            raise ValueError("luma_weights must be non-negative and not all zero")
        return self
