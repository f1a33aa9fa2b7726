"""Crop candidate generation.

Candidates are rectangles of the requested aspect ratio inside the
working image, enumerated over a descending range of scales and, for each
scale, over a grid of origins.

Algorithm:
    1. Base rectangle: the largest rectangle of the requested ratio that
       fits the working image (scale 1.0).
    2. Scale range: from max_scale down to the lower bound
       min(max_scale, max(min_scale, requested_width / base_width)), so no
       candidate is smaller than the requested output (which would need
       upscaling), stepping by scale_step; the lower bound itself is always
       included.
    3. Each scale is snapped to the integer size with the smallest aspect
       error; sizes outside the tolerance are skipped, duplicates dropped.
    4. If no scale yields an admissible size (typically a request larger
       than the image with an awkward ratio), the largest integer size
       within the tolerance is used instead, at any scale.
    5. Origins per axis: 0, step, 2*step, ... plus the far edge and the
       centred offset.

The resulting ``CropCandidates`` is a lazy, restartable iterable: sizes
are resolved up front (so an impossible request fails immediately), and
rectangles are produced on demand every time it is iterated.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator

from salcrop.core.options import CropOptions
from salcrop.exceptions import InvalidCropSizeError
from salcrop.geometry import Region, Size, aspect_error, snap_to_aspect

logger = logging.getLogger(__name__)

# Absorbs float error when counting scale steps (e.g. 1.0 - 5 * 0.1)
_SCALE_EPSILON = 1e-9


def base_rectangle(bounds: Size, aspect: float) -> tuple[float, float]:
    """Largest real-valued (width, height) of the given ratio inside bounds."""
    if bounds.aspect_ratio >= aspect:
        return bounds.height * aspect, float(bounds.height)
    return float(bounds.width), bounds.width / aspect


def candidate_scales(
    min_scale: float,
    max_scale: float,
    scale_step: float,
    lower_bound: float,
) -> list[float]:
    """Descending scales from max_scale to the effective lower bound.

    Args:
        min_scale: Configured minimum scale.
        max_scale: Configured maximum scale.
        scale_step: Decrement between scales.
        lower_bound: Scale of the requested output size.

    Returns:
        Scales in descending order; the last one is the effective minimum.
    """
    lowest = min(max_scale, max(min_scale, lower_bound))
    count = math.floor((max_scale - lowest) / scale_step + _SCALE_EPSILON)
    scales = [max_scale - k * scale_step for k in range(count + 1)]
    if scales[-1] - lowest > _SCALE_EPSILON:
        scales.append(lowest)
    return scales


def largest_admissible_size(
    bounds: Size, aspect: float, tolerance: float
) -> tuple[int, int] | None:
    """Largest integer (width, height) inside bounds within ``tolerance`` of ``aspect``.

    For each height the widest admissible width is the one at the top of
    the tolerance band, clipped to the image, so one check per row suffices.
    Ties in area go to the smaller aspect error.
    """
    best: tuple[int, int] | None = None
    best_key: tuple[int, float] = (0, 0.0)
    for height in range(bounds.height, 0, -1):
        widest = min(
            math.floor(height * aspect * (1.0 + tolerance) + _SCALE_EPSILON),
            bounds.width,
        )
        if widest < 1:
            break
        # The epsilon may overshoot the band by one column
        for width in (widest, widest - 1):
            if width < 1:
                continue
            error = aspect_error(width, height, aspect)
            if error <= tolerance:
                key = (width * height, -error)
                if best is None or key > best_key:
                    best, best_key = (width, height), key
                break
    return best


def axis_positions(extent: int, length: int, step: int) -> list[int]:
    """Origins along one axis for a window of ``length`` inside ``extent``."""
    limit = extent - length
    positions = set(range(0, limit + 1, step))
    positions.add(limit)
    positions.add(limit // 2)
    return sorted(positions)


class CropCandidates:
    """Lazy, restartable sequence of crop rectangles in working coordinates.

    Attributes:
        bounds: Working image size.
        aspect: Requested width/height ratio.
        sizes: Admissible candidate sizes, largest first.
        position_step: Stride between origins.
    """

    __slots__ = ("_aspect", "_bounds", "_position_step", "_sizes")

    def __init__(
        self,
        bounds: Size,
        aspect: float,
        sizes: tuple[Size, ...],
        position_step: int,
    ) -> None:
        if not sizes:
            raise ValueError("CropCandidates needs at least one size")
        if position_step < 1:
            raise ValueError(f"position_step must be >= 1, got {position_step}")
        for size in sizes:
            if size.width > bounds.width or size.height > bounds.height:
                raise ValueError(
                    f"Candidate size {size.to_tuple()} exceeds bounds {bounds.to_tuple()}"
                )
        self._bounds = bounds
        self._aspect = aspect
        self._sizes = sizes
        self._position_step = position_step

    @classmethod
    def for_request(
        cls,
        bounds: Size,
        requested: Size,
        scale_factor: float,
        options: CropOptions,
    ) -> CropCandidates:
        """Resolve the candidate sizes for a crop request.

        Args:
            bounds: Working image size.
            requested: Requested output size in original pixels.
            scale_factor: Working/original scale factor.
            options: Crop options (scale range, steps, tolerance).

        Returns:
            CropCandidates for the request.

        Raises:
            InvalidCropSizeError: If no rectangle of the requested ratio
                fits the working image within the aspect tolerance at any
                scale.
        """
        aspect = requested.aspect_ratio
        base_w, base_h = base_rectangle(bounds, aspect)
        lower_bound = requested.width * scale_factor / base_w
        scales = candidate_scales(
            options.min_scale,
            options.max_scale,
            options.scale_step,
            lower_bound,
        )

        sizes: list[Size] = []
        seen: set[tuple[int, int]] = set()
        for scale in scales:
            snapped = snap_to_aspect(base_w * scale, base_h * scale, aspect, bounds)
            if snapped is None:
                logger.debug("Scale %.3f: no integer size fits", scale)
                continue
            error = aspect_error(snapped[0], snapped[1], aspect)
            if error > options.aspect_tolerance:
                logger.debug(
                    "Scale %.3f: %dx%d misses aspect %.4f by %.2f%%",
                    scale,
                    snapped[0],
                    snapped[1],
                    aspect,
                    error * 100,
                )
                continue
            if snapped in seen:
                continue
            seen.add(snapped)
            sizes.append(Size.from_tuple(snapped))

        if not sizes:
            fallback = largest_admissible_size(bounds, aspect, options.aspect_tolerance)
            if fallback is not None:
                logger.debug(
                    "No scale in [%.3f, %.3f] admissible, using %dx%d",
                    scales[-1],
                    scales[0],
                    *fallback,
                )
                sizes.append(Size.from_tuple(fallback))

        if not sizes:
            raise InvalidCropSizeError(
                f"No crop with aspect ratio {aspect:.4f} fits within "
                f"{options.aspect_tolerance:.2%} tolerance",
                requested=requested.to_tuple(),
                image_size=bounds,
            )

        return cls(bounds, aspect, tuple(sizes), options.position_step)

    @property
    def bounds(self) -> Size:
        return self._bounds

    @property
    def aspect(self) -> float:
        return self._aspect

    @property
    def sizes(self) -> tuple[Size, ...]:
        return self._sizes

    @property
    def position_step(self) -> int:
        return self._position_step

    def __iter__(self) -> Iterator[Region]:
        for size in self._sizes:
            xs = axis_positions(self._bounds.width, size.width, self._position_step)
            ys = axis_positions(self._bounds.height, size.height, self._position_step)
            for y in ys:
                for x in xs:
                    yield Region(x=x, y=y, width=size.width, height=size.height)

    def __len__(self) -> int:
        total = 0
        for size in self._sizes:
            xs = axis_positions(self._bounds.width, size.width, self._position_step)
            ys = axis_positions(self._bounds.height, size.height, self._position_step)
            total += len(xs) * len(ys)
        return total
