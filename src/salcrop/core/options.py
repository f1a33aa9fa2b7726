"""Crop options: the immutable per-call configuration of the pipeline.

All tunables travel in a ``CropOptions`` value passed explicitly through
the pipeline; nothing is read from module state, so concurrent calls with
different options cannot interfere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, Field, ValidationError, model_validator

from salcrop.exceptions import InvalidBoostRegionError, InvalidConfigError
from salcrop.geometry import Region
from salcrop.vision.constants import MIN_WORKING_RESOLUTION
from salcrop.vision.tuning import HeuristicTuning

if TYPE_CHECKING:
    from salcrop.config import Settings


class BoostRegion(BaseModel, frozen=True):
    """A caller-declared rectangle of extra importance.

    Coordinates are in original-image pixels (e.g., a face bounding box
    from an external detector).

    Attributes:
        x: Left edge X coordinate.
        y: Top edge Y coordinate.
        width: Horizontal extent in pixels.
        height: Vertical extent in pixels.
        weight: Importance added to every pixel inside the region.
    """

    x: int = Field(..., ge=0, description="Left edge X coordinate")
    y: int = Field(..., ge=0, description="Top edge Y coordinate")
    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")
    weight: float = Field(default=1.0, gt=0.0, description="Added importance")

    @property
    def region(self) -> Region:
        """Return the rectangle as a Region."""
        return Region(x=self.x, y=self.y, width=self.width, height=self.height)


class CropOptions(BaseModel, frozen=True):
    """Weights, search granularity and tuning for one crop computation.

    Attributes:
        working_resolution_limit: Long side of the downscaled analysis image.
        edge_weight: Combiner weight of the edge layer.
        skin_weight: Combiner weight of the skin layer.
        saturation_weight: Combiner weight of the saturation layer.
        boost_weight: Combiner weight of the boost layer.
        outside_penalty_weight: Scorer weight of the discarded importance.
        rule_of_thirds_weight: Scorer weight of the rule-of-thirds bonus.
        crop_edge_weight: Scorer weight of importance near the crop border.
        centre_weight: Scorer weight of importance near the crop centre; 0
            disables the term.
        detail_coupling: Scale skin and saturation by edge energy (plus the
            tuning biases) before combining, favouring detailed skin and
            colour over flat patches.
        min_scale: Smallest candidate, as a fraction of the largest
            rectangle of the requested ratio that fits the image.
        max_scale: Largest candidate, same units.
        scale_step: Decrement between candidate scales.
        position_step: Working-pixel stride between candidate origins.
        top_k: Number of ranked crops returned.
        aspect_tolerance: Allowed relative aspect-ratio error of a crop.
        max_workers: Threads used to score candidates; 1 scores inline.
        boost_regions: Regions of extra importance.
        tuning: Detector thresholds and thirds bump shape.
    """

    working_resolution_limit: int = Field(default=256, ge=MIN_WORKING_RESOLUTION)

    edge_weight: float = Field(default=0.2, ge=0.0)
    skin_weight: float = Field(default=1.8, ge=0.0)
    saturation_weight: float = Field(default=0.3, ge=0.0)
    boost_weight: float = Field(default=2.0, ge=0.0)

    outside_penalty_weight: float = Field(default=0.5, ge=0.0)
    rule_of_thirds_weight: float = Field(default=1.0, ge=0.0)
    crop_edge_weight: float = Field(default=1.0, ge=0.0)
    centre_weight: float = Field(default=0.0, ge=0.0)
    detail_coupling: bool = False

    min_scale: float = Field(default=0.5, gt=0.0, le=1.0)
    max_scale: float = Field(default=1.0, gt=0.0, le=1.0)
    scale_step: float = Field(default=0.1, gt=0.0, le=1.0)
    position_step: int = Field(default=8, ge=1)

    top_k: int = Field(default=1, ge=1)
    aspect_tolerance: float = Field(default=0.01, gt=0.0, lt=0.5)
    max_workers: int = Field(default=1, ge=1)

    boost_regions: tuple[BoostRegion, ...] = ()
    tuning: HeuristicTuning = Field(default_factory=HeuristicTuning)

    @model_validator(mode="after")
    def _validate_scale_range(self) -> Self:
        if self.min_scale > self.max_scale:
            raise ValueError(
                f"min_scale ({self.min_scale}) must not exceed max_scale ({self.max_scale})"
            )
        return self

    @classmethod
    def build(cls, **values: Any) -> Self:
        """Validate option values, raising the crop error hierarchy.

        Direct construction raises pydantic's ``ValidationError``; this
        constructor maps failures to ``InvalidBoostRegionError`` when any
        problem lies inside ``boost_regions`` and to ``InvalidConfigError``
        otherwise.

        Raises:
            InvalidBoostRegionError: If a boost region is malformed.
            InvalidConfigError: If any other option is invalid.
        """
        try:
            return cls(**values)
        except ValidationError as e:
            errors = [dict(err) for err in e.errors(include_url=False)]
            boost_errors = [
                err for err in errors if err.get("loc", ())[:1] == ("boost_regions",)
            ]
            if boost_errors:
                loc = boost_errors[0]["loc"]
                region = None
                regions = values.get("boost_regions") or ()
                if len(loc) > 1 and isinstance(loc[1], int) and loc[1] < len(regions):
                    region = regions[loc[1]]
                raise InvalidBoostRegionError(
                    f"Invalid boost region: {boost_errors[0]['msg']}",
                    region=region,
                ) from e
            raise InvalidConfigError("Invalid crop options", errors=errors) from e

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> Self:
        """Seed options from process settings, then apply overrides."""
        values: dict[str, Any] = {
            "working_resolution_limit": settings.WORKING_RESOLUTION_LIMIT,
            "top_k": settings.TOP_K,
            "max_workers": settings.MAX_WORKERS,
        }
        values.update(overrides)
        return cls.build(**values)
