"""Best crop selection.

Candidates are ranked by a total order:

    1. Higher total score
    2. Centre closer to the centre of the working image
    3. Smaller area
    4. Lower x, then lower y (then narrower, for completeness)

Because the order is total, the winner and the top-K list do not depend
on the order in which candidates are scored, which makes the serial and
threaded paths produce identical results.
"""

from __future__ import annotations

import heapq
import logging
from collections import deque
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from itertools import islice

from salcrop.core.scoring import CropScorer, ScoredCrop
from salcrop.geometry import Region, Size

logger = logging.getLogger(__name__)

SelectionKey = tuple[float, int, int, int, int, int]

# Candidates handed to a worker at a time
_CHUNK_SIZE = 512
# Chunks in flight per worker before the oldest result is merged
_PENDING_PER_WORKER = 2


def selection_key(crop: ScoredCrop, bounds: Size) -> SelectionKey:
    """Sort key placing the preferred crop first."""
    region = crop.region
    return (
        -crop.score.total,
        region.center_distance_sq(bounds),
        region.area,
        region.x,
        region.y,
        region.width,
    )


def select_top(crops: Iterable[ScoredCrop], bounds: Size, k: int) -> list[ScoredCrop]:
    """Return the ``k`` best crops, best first.

    Args:
        crops: Scored candidates (consumed lazily).
        bounds: Working image size, for the centre-distance tie-break.
        k: Number of crops to keep.

    Returns:
        Up to k crops in descending preference.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    return heapq.nsmallest(k, crops, key=lambda crop: selection_key(crop, bounds))


def _chunks(regions: Iterable[Region], size: int) -> Iterator[list[Region]]:
    iterator = iter(regions)
    while chunk := list(islice(iterator, size)):
        yield chunk


def rank_candidates(
    regions: Iterable[Region],
    scorer: CropScorer,
    bounds: Size,
    k: int,
    *,
    max_workers: int = 1,
) -> list[ScoredCrop]:
    """Score every candidate and keep the ``k`` best.

    With ``max_workers > 1`` candidates are scored in chunks on a thread
    pool; each chunk is reduced to its own top ``k`` and folded into the
    running result with the same key. At most
    ``_PENDING_PER_WORKER * max_workers`` chunks are in flight, so the
    candidate stream is consumed lazily on both paths.

    Args:
        regions: Candidate rectangles in working coordinates.
        scorer: Scorer bound to the combined importance map.
        bounds: Working image size.
        k: Number of crops to keep.
        max_workers: Worker threads; 1 scores inline.

    Returns:
        Up to k scored crops, best first.
    """
    if max_workers <= 1:
        return select_top((scorer.score(region) for region in regions), bounds, k)

    def best_of_chunk(chunk: Sequence[Region]) -> list[ScoredCrop]:
        return select_top((scorer.score(region) for region in chunk), bounds, k)

    best: list[ScoredCrop] = []
    merged = 0
    pending: deque[Future[list[ScoredCrop]]] = deque()
    window = _PENDING_PER_WORKER * max_workers

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for chunk in _chunks(regions, _CHUNK_SIZE):
            pending.append(executor.submit(best_of_chunk, chunk))
            if len(pending) >= window:
                best = select_top([*best, *pending.popleft().result()], bounds, k)
                merged += 1
        while pending:
            best = select_top([*best, *pending.popleft().result()], bounds, k)
            merged += 1

    logger.debug("Merged %d scored chunks on %d workers", merged, max_workers)
    return best
