"""Smart crop pipeline.

The engine runs the stages of a crop computation in order:

    1. Downscale: reduce the caller's image to the working resolution.
    2. Detect: edge, skin and saturation layers on the working pixels.
    3. Boost: rasterize caller regions of interest.
    4. Combine: weighted sum of all layers into one importance map.
    5. Search: enumerate candidates of the requested aspect ratio.
    6. Score and select: rank candidates, keep the top K.
    7. Map back: convert the winners to original-image coordinates.

Every stage is a pure function of its inputs and the ``CropOptions``; the
engine holds no mutable state, so one engine can serve many threads.
"""

from __future__ import annotations

from dataclasses import dataclass

from salcrop.core.boost import accumulate_boost
from salcrop.core.candidates import CropCandidates
from salcrop.core.options import CropOptions
from salcrop.core.scoring import CropScorer, ScoredCrop
from salcrop.core.selector import rank_candidates
from salcrop.exceptions import InvalidCropSizeError
from salcrop.geometry import GeometryValidator, Size, crop_to_original
from salcrop.utils.logging import get_logger
from salcrop.vision import (
    ImageInput,
    ImportanceLayers,
    WorkingImage,
    combine_layers,
    detect_edges,
    detect_saturation,
    detect_skin,
    downscale,
)


@dataclass(frozen=True)
class CropResult:
    """Outcome of a crop computation.

    Attributes:
        top_crop: Best crop, in original-image coordinates.
        crops: Top-K crops in original-image coordinates, best first.
            ``crops[0]`` is ``top_crop``.
        working_size: Size of the image the search ran on.
        scale_factor: Working/original scale factor (1.0 if not downscaled).
        candidate_count: Number of rectangles scored.
        requested_aspect: Requested width/height ratio.
    """

    top_crop: ScoredCrop
    crops: tuple[ScoredCrop, ...]
    working_size: Size
    scale_factor: float
    candidate_count: int
    requested_aspect: float


class SmartCropEngine:
    """Finds the crop of an image that keeps the most important content.

    Example:
        >>> from PIL import Image
        >>> engine = SmartCropEngine(CropOptions(top_k=3))
        >>> result = engine.find_crop(Image.open("photo.jpg"), 400, 300)
        >>> print(result.top_crop.region.to_tuple())
    """

    __slots__ = ("_options", "_validator")

    def __init__(self, options: CropOptions | None = None) -> None:
        """Initialize the engine.

        Args:
            options: Crop options. Defaults to ``CropOptions()``.
        """
        self._options = options or CropOptions()
        self._validator = GeometryValidator()

    @property
    def options(self) -> CropOptions:
        return self._options

    def analyze(self, image: ImageInput) -> tuple[WorkingImage, ImportanceLayers]:
        """Downscale an image and compute all importance layers.

        Args:
            image: Caller's decoded image.

        Returns:
            Tuple of (working image, importance layers).

        Raises:
            EmptyImageError: If the image has zero width or height.
            InvalidBoostRegionError: If a boost region misses the image.
        """
        options = self._options
        working = downscale(image, options.working_resolution_limit)
        tuning = options.tuning

        boost = accumulate_boost(
            options.boost_regions,
            working.original_size,
            working.size,
            working.scale_factor,
        )
        layers = combine_layers(
            detect_edges(working.pixels, tuning),
            detect_skin(working.pixels, tuning),
            detect_saturation(working.pixels, tuning),
            boost,
            edge_weight=options.edge_weight,
            skin_weight=options.skin_weight,
            saturation_weight=options.saturation_weight,
            boost_weight=options.boost_weight,
            detail_coupling=options.detail_coupling,
            skin_bias=tuning.skin_bias,
            saturation_bias=tuning.saturation_bias,
        )
        return working, layers

    def find_crop(self, image: ImageInput, width: int, height: int) -> CropResult:
        """Find the best crop of the requested output size.

        The crop has the aspect ratio width:height; the caller resizes it
        to the exact output size. Crops are never smaller than the
        requested size unless the image itself is.

        Args:
            image: Caller's decoded image.
            width: Requested output width in pixels.
            height: Requested output height in pixels.

        Returns:
            CropResult with the winner and the ranked shortlist.

        Raises:
            EmptyImageError: If the image has zero width or height.
            InvalidCropSizeError: If width or height is not positive, or no
                crop of that aspect ratio fits the image.
            InvalidBoostRegionError: If a boost region misses the image.
        """
        logger = get_logger(__name__)

        if width <= 0 or height <= 0:
            raise InvalidCropSizeError(
                "Requested width and height must be positive",
                requested=(width, height),
            )
        requested = Size(width=width, height=height)
        options = self._options

        working, layers = self.analyze(image)
        logger.debug(
            "Importance computed",
            original=working.original_size.to_tuple(),
            working=working.size.to_tuple(),
            scale_factor=working.scale_factor,
            importance_total=layers.combined.total(),
        )

        candidates = CropCandidates.for_request(
            working.size, requested, working.scale_factor, options
        )
        scorer = CropScorer.from_options(layers.combined, options)
        ranked = rank_candidates(
            candidates,
            scorer,
            working.size,
            options.top_k,
            max_workers=options.max_workers,
        )

        aspect = requested.aspect_ratio
        crops = tuple(self._to_original(crop, working, aspect) for crop in ranked)
        candidate_count = len(candidates)
        best = crops[0]
        logger.info(
            "Crop selected",
            requested=requested.to_tuple(),
            region=best.region.to_tuple(),
            score=round(best.score.total, 6),
            candidates=candidate_count,
            scales=len(candidates.sizes),
        )

        return CropResult(
            top_crop=best,
            crops=crops,
            working_size=working.size,
            scale_factor=working.scale_factor,
            candidate_count=candidate_count,
            requested_aspect=aspect,
        )

    def _to_original(
        self,
        crop: ScoredCrop,
        working: WorkingImage,
        aspect: float,
    ) -> ScoredCrop:
        region = crop_to_original(
            crop.region, working.scale_factor, aspect, working.original_size
        )
        self._validator.require_inside(region, working.original_size)
        return ScoredCrop(region=region, score=crop.score)


def find_crop(
    image: ImageInput,
    width: int,
    height: int,
    options: CropOptions | None = None,
) -> CropResult:
    """Find the best crop of ``image`` for a width x height output.

    Convenience wrapper around ``SmartCropEngine(options).find_crop``.
    """
    return SmartCropEngine(options).find_crop(image, width, height)
