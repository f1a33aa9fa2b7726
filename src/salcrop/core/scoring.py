"""Crop scoring against a combined importance map.

Each candidate rectangle receives five subscores:

    retained     = inside_sum / crop_area
    outside      = (map_total - inside_sum) / map_area
    thirds       = sum(importance * (bump(px) + bump(py))) / crop_area
    edge_falloff = sum(importance * (band(px) + band(py))) / crop_area
    centre       = sum(importance * (CENTRE_PEAK - hypot(px, py))) / crop_area

and a total

    retained - w_outside * outside + w_thirds * thirds
             - w_edge * edge_falloff + w_centre * centre

``px``/``py`` are the distances of each pixel centre from the crop centre,
normalized so the crop border is at 1. The thirds bump peaks where they
equal 1/3, i.e. on the crop's third lines. ``band(t)`` is the squared depth
of ``t`` into the strip of width ``edge_radius`` along the crop border, so
important content hugging the border of a crop costs it score.

Performance:
    Rectangle sums come from a summed-area table. The thirds and edge
    falloff terms are separable and use per-column and per-row cumulative
    sums, so they cost O(width + height) per candidate. The centre term is
    not separable and costs O(area); it is skipped while its weight is 0.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from salcrop.core.options import CropOptions
from salcrop.geometry import Region
from salcrop.vision.constants import CENTRE_PEAK, CROP_EDGE_RADIUS, THIRDS_SHARPNESS
from salcrop.vision.importance import FloatGrid, ImportanceMap


@dataclass(frozen=True)
class CropScore:
    """Subscores and total for one candidate.

    Attributes:
        retained: Mean importance inside the crop.
        outside: Importance discarded by the crop, per map pixel.
        thirds: Importance-weighted rule-of-thirds alignment, per crop pixel.
        total: Weighted combination used for ranking.
        edge_falloff: Importance inside the crop's border band, per crop pixel.
        centre: Importance weighted towards the crop centre, per crop pixel.
            Zero when centre weighting is disabled.
    """

    retained: float
    outside: float
    thirds: float
    total: float
    edge_falloff: float = 0.0
    centre: float = 0.0


@dataclass(frozen=True)
class ScoredCrop:
    """A crop rectangle together with its score."""

    region: Region
    score: CropScore


def thirds_bump(t: FloatGrid, sharpness: float = THIRDS_SHARPNESS) -> FloatGrid:
    """Rule-of-thirds bump over normalized centre distances in [0, 1].

    Returns 1 at t = 1/3 and falls off quadratically, reaching 0 at a
    distance of 2/sharpness on either side.
    """
    shifted = (np.mod(t - 1.0 / 3.0 + 1.0, 2.0) * 0.5 - 0.5) * sharpness
    return np.maximum(1.0 - shifted * shifted, 0.0)


def border_band(t: FloatGrid, radius: float = CROP_EDGE_RADIUS) -> FloatGrid:
    """Squared depth of normalized centre distances into the border strip.

    Zero for ``t <= 1 - radius``, rising to ``radius ** 2`` on the border.
    """
    depth = np.maximum(t - 1.0 + radius, 0.0)
    return depth * depth


def centre_distances(length: int) -> FloatGrid:
    """Normalized distance of each pixel centre from the middle of a span."""
    t = (np.arange(length, dtype=np.float64) + 0.5) / length
    return np.abs(0.5 - t) * 2.0


def centre_weights(width: int, height: int) -> FloatGrid:
    """(height, width) grid of ``CENTRE_PEAK - hypot(px, py)``."""
    px = centre_distances(width)
    py = centre_distances(height)
    return CENTRE_PEAK - np.hypot(px[np.newaxis, :], py[:, np.newaxis])


class CropScorer:
    """Scores crop rectangles against one importance map.

    The scorer is immutable after construction and safe to share between
    threads.

    Attributes:
        importance: The combined importance map.
        outside_penalty_weight: Weight of the outside term.
        rule_of_thirds_weight: Weight of the thirds term.
        thirds_sharpness: Narrowness of the thirds bump.
        crop_edge_weight: Weight of the border falloff penalty.
        edge_radius: Width of the border strip, as a fraction of the
            half-extent of the crop.
        centre_weight: Weight of the centre term.
    """

    def __init__(
        self,
        importance: ImportanceMap,
        *,
        outside_penalty_weight: float,
        rule_of_thirds_weight: float,
        thirds_sharpness: float = THIRDS_SHARPNESS,
        crop_edge_weight: float = 0.0,
        edge_radius: float = CROP_EDGE_RADIUS,
        centre_weight: float = 0.0,
    ) -> None:
        self.importance = importance
        self.outside_penalty_weight = outside_penalty_weight
        self.rule_of_thirds_weight = rule_of_thirds_weight
        self.thirds_sharpness = thirds_sharpness
        self.crop_edge_weight = crop_edge_weight
        self.edge_radius = edge_radius
        self.centre_weight = centre_weight

        values = importance.values
        height, width = values.shape

        # Summed-area table with a zero row/column of padding
        sat = np.zeros((height + 1, width + 1), dtype=np.float64)
        sat[1:, 1:] = values.cumsum(axis=0).cumsum(axis=1)
        # Running sums down each column and along each row
        col_cum = np.zeros((height + 1, width), dtype=np.float64)
        col_cum[1:, :] = values.cumsum(axis=0)
        row_cum = np.zeros((height, width + 1), dtype=np.float64)
        row_cum[:, 1:] = values.cumsum(axis=1)

        for table in (sat, col_cum, row_cum):
            table.setflags(write=False)
        self._sat = sat
        self._col_cum = col_cum
        self._row_cum = row_cum
        self._total = float(sat[height, width])
        self._map_area = width * height
        self._profiles: dict[tuple[str, int], FloatGrid] = {}
        self._centre_grids: dict[tuple[int, int], FloatGrid] = {}

    @classmethod
    def from_options(cls, importance: ImportanceMap, options: CropOptions) -> CropScorer:
        """Create a scorer using the weights and tuning of ``options``."""
        return cls(
            importance,
            outside_penalty_weight=options.outside_penalty_weight,
            rule_of_thirds_weight=options.rule_of_thirds_weight,
            thirds_sharpness=options.tuning.thirds_sharpness,
            crop_edge_weight=options.crop_edge_weight,
            edge_radius=options.tuning.edge_radius,
            centre_weight=options.centre_weight,
        )

    def _profile(self, kind: str, length: int) -> FloatGrid:
        key = (kind, length)
        profile = self._profiles.get(key)
        if profile is None:
            t = centre_distances(length)
            if kind == "thirds":
                profile = thirds_bump(t, self.thirds_sharpness)
            else:
                profile = border_band(t, self.edge_radius)
            profile.setflags(write=False)
            # Racing threads compute identical arrays
            self._profiles[key] = profile
        return profile

    def _separable_sum(self, region: Region, kind: str) -> float:
        x0, y0, x1, y1 = region.x, region.y, region.right, region.bottom
        column_sums = self._col_cum[y1, x0:x1] - self._col_cum[y0, x0:x1]
        row_sums = self._row_cum[y0:y1, x1] - self._row_cum[y0:y1, x0]
        return float(
            np.dot(column_sums, self._profile(kind, region.width))
            + np.dot(row_sums, self._profile(kind, region.height))
        )

    def region_sum(self, region: Region) -> float:
        """Sum of importance inside a rectangle."""
        sat = self._sat
        x0, y0, x1, y1 = region.x, region.y, region.right, region.bottom
        return float(sat[y1, x1] - sat[y0, x1] - sat[y1, x0] + sat[y0, x0])

    def thirds_sum(self, region: Region) -> float:
        """Importance weighted by the horizontal and vertical thirds bumps."""
        return self._separable_sum(region, "thirds")

    def edge_falloff_sum(self, region: Region) -> float:
        """Importance weighted by depth into the crop's border strip."""
        return self._separable_sum(region, "band")

    def centre_sum(self, region: Region) -> float:
        """Importance weighted by closeness to the crop centre."""
        key = (region.width, region.height)
        grid = self._centre_grids.get(key)
        if grid is None:
            grid = centre_weights(region.width, region.height)
            grid.setflags(write=False)
            self._centre_grids[key] = grid
        window = self.importance.values[region.y : region.bottom, region.x : region.right]
        return float(np.vdot(window, grid))

    def score(self, region: Region) -> ScoredCrop:
        """Score one rectangle in working coordinates.

        Args:
            region: Candidate inside the importance map.

        Returns:
            ScoredCrop with all subscores.

        Raises:
            ValueError: If the region does not lie inside the map.
        """
        if region.right > self.importance.width or region.bottom > self.importance.height:
            raise ValueError(
                f"Region {region.to_tuple()} exceeds importance map "
                f"{self.importance.width}x{self.importance.height}"
            )

        area = region.area
        inside = self.region_sum(region)
        retained = inside / area
        outside = max(self._total - inside, 0.0) / self._map_area
        thirds = self.thirds_sum(region) / area
        edge_falloff = self.edge_falloff_sum(region) / area
        centre = self.centre_sum(region) / area if self.centre_weight > 0 else 0.0
        total = (
            retained
            - self.outside_penalty_weight * outside
            + self.rule_of_thirds_weight * thirds
            - self.crop_edge_weight * edge_falloff
            + self.centre_weight * centre
        )
        return ScoredCrop(
            region=region,
            score=CropScore(
                retained=retained,
                outside=outside,
                thirds=thirds,
                total=total,
                edge_falloff=edge_falloff,
                centre=centre,
            ),
        )
