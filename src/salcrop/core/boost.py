"""Boost accumulator: rasterizes caller regions into an importance layer."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from salcrop.core.options import BoostRegion
from salcrop.exceptions import InvalidBoostRegionError
from salcrop.geometry import Size, region_to_working
from salcrop.vision.importance import ImportanceMap

logger = logging.getLogger(__name__)


def accumulate_boost(
    regions: Sequence[BoostRegion],
    original_size: Size,
    working: Size,
    scale_factor: float,
) -> ImportanceMap:
    """Build the boost layer for a working image.

    Each region is mapped to working coordinates with the downscale factor
    and every covered pixel receives the region's weight; overlapping
    regions add up. Regions partly outside the image are clipped.

    Args:
        regions: Boost regions in original-image coordinates.
        original_size: Size of the caller's image.
        working: Size of the working image.
        scale_factor: Working/original scale factor.

    Returns:
        ImportanceMap of the working size (all zeros without regions).

    Raises:
        InvalidBoostRegionError: If a region lies entirely outside the image
            or has a non-positive weight.
    """
    if not regions:
        return ImportanceMap.zeros(working)

    grid = np.zeros((working.height, working.width), dtype=np.float64)
    image_bounds = original_size.as_region()

    for boost in regions:
        if boost.weight <= 0:
            raise InvalidBoostRegionError("Boost weight must be positive", region=boost)
        clipped = boost.region.intersection(image_bounds)
        if clipped is None:
            raise InvalidBoostRegionError(
                f"Boost region lies outside the {original_size.width}x"
                f"{original_size.height} image",
                region=boost,
            )
        target = region_to_working(clipped, scale_factor, working)
        grid[target.y : target.bottom, target.x : target.right] += boost.weight
        logger.debug(
            "Boost region %s -> working %s (weight=%.3f)",
            boost.region.to_tuple(),
            target.to_tuple(),
            boost.weight,
        )

    return ImportanceMap(grid)
