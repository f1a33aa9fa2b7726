"""Importance maps and the weighted combiner.

Every detector layer produces an ``ImportanceMap`` the size of the working
image. The combiner merges them with a per-pixel weighted sum:

    combined = w_edge * edge + w_skin * skin + w_sat * saturation + w_boost * boost

With detail coupling enabled, skin and saturation are first multiplied by
the edge energy plus a small bias, so flat skin-coloured or saturated
areas count for less than detailed ones.

Detector layers are pre-scaled to [0, 1]; the boost layer holds the sum
of caller-supplied region weights. No normalization across the whole map
is applied, so scores stay comparable between images.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from salcrop.geometry import Size
from salcrop.vision.constants import SATURATION_BIAS, SKIN_BIAS

FloatGrid = npt.NDArray[np.float64]


@dataclass(frozen=True)
class ImportanceMap:
    """Immutable (height, width) grid of float64 importance scores."""

    values: FloatGrid

    def __post_init__(self) -> None:
        if self.values.ndim != 2:
            raise ValueError(
                f"ImportanceMap needs a 2-D array, got shape {self.values.shape}"
            )
        values = np.asarray(self.values, dtype=np.float64)
        if values is self.values and values.flags.writeable:
            values = values.copy()
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @classmethod
    def zeros(cls, size: Size) -> ImportanceMap:
        """Create an all-zero map of the given size."""
        return cls(np.zeros((size.height, size.width), dtype=np.float64))

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    def total(self) -> float:
        """Sum of all scores in the map."""
        return float(self.values.sum())


@dataclass(frozen=True)
class ImportanceLayers:
    """All layers computed for one working image plus their combination.

    Attributes:
        edge: Edge energy layer, [0, 1].
        skin: Skin likelihood layer, [0, 1].
        saturation: Soft-thresholded saturation layer, [0, 1].
        boost: Summed boost region weights, >= 0.
        combined: Weighted sum used by the crop scorer.
    """

    edge: ImportanceMap
    skin: ImportanceMap
    saturation: ImportanceMap
    boost: ImportanceMap
    combined: ImportanceMap

    def __post_init__(self) -> None:
        sizes = {
            layer.size
            for layer in (self.edge, self.skin, self.saturation, self.boost, self.combined)
        }
        if len(sizes) != 1:
            raise ValueError(f"Importance layers differ in size: {sorted(s.to_tuple() for s in sizes)}")

    @property
    def size(self) -> Size:
        return self.combined.size


def combine_layers(
    edge: ImportanceMap,
    skin: ImportanceMap,
    saturation: ImportanceMap,
    boost: ImportanceMap,
    *,
    edge_weight: float,
    skin_weight: float,
    saturation_weight: float,
    boost_weight: float,
    detail_coupling: bool = False,
    skin_bias: float = SKIN_BIAS,
    saturation_bias: float = SATURATION_BIAS,
) -> ImportanceLayers:
    """Merge the detector and boost layers into one importance map.

    Args:
        edge: Edge layer.
        skin: Skin layer.
        saturation: Saturation layer.
        boost: Boost layer.
        edge_weight: Weight of the edge layer.
        skin_weight: Weight of the skin layer.
        saturation_weight: Weight of the saturation layer.
        boost_weight: Weight of the boost layer.
        detail_coupling: Multiply skin by ``edge + skin_bias`` and saturation
            by ``edge + saturation_bias`` before weighting.
        skin_bias: Detail floor for coupled skin.
        saturation_bias: Detail floor for coupled saturation.

    Returns:
        ImportanceLayers holding the inputs and the combined map.

    Raises:
        ValueError: If the layers differ in size.
    """
    if not edge.size == skin.size == saturation.size == boost.size:
        raise ValueError("Importance layers differ in size")

    skin_values = skin.values
    saturation_values = saturation.values
    if detail_coupling:
        skin_values = skin_values * (edge.values + skin_bias)
        saturation_values = saturation_values * (edge.values + saturation_bias)

    combined = (
        edge_weight * edge.values
        + skin_weight * skin_values
        + saturation_weight * saturation_values
        + boost_weight * boost.values
    )
    return ImportanceLayers(
        edge=edge,
        skin=skin,
        saturation=saturation,
        boost=boost,
        combined=ImportanceMap(combined),
    )
