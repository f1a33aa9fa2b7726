"""Core algorithms for salcrop.

This package contains the crop search: options, boost regions, candidate
generation, scoring, selection and the engine that ties them together.

Public API:
    - CropOptions: Immutable per-call configuration.
    - BoostRegion: Caller-declared rectangle of extra importance.
    - CropCandidates: Lazy set of candidate rectangles.
    - CropScorer: Scores rectangles against an importance map.
    - SmartCropEngine: Runs the full pipeline.
    - find_crop: Functional entry point.
"""

from salcrop.core.boost import accumulate_boost
from salcrop.core.candidates import CropCandidates
from salcrop.core.engine import CropResult, SmartCropEngine, find_crop
from salcrop.core.options import BoostRegion, CropOptions
from salcrop.core.scoring import CropScore, CropScorer, ScoredCrop
from salcrop.core.selector import rank_candidates, select_top, selection_key
from salcrop.vision.tuning import HeuristicTuning

__all__ = [
    "BoostRegion",
    "CropCandidates",
    "CropOptions",
    "CropResult",
    "CropScore",
    "CropScorer",
    "HeuristicTuning",
    "ScoredCrop",
    "SmartCropEngine",
    "accumulate_boost",
    "find_crop",
    "rank_candidates",
    "select_top",
    "selection_key",
]
