"""Two-stage samplers used by the penetration estimator."""
from __future__ import annotations

import random
from typing import Iterator, Sequence, Tuple

from ..data.constants import BASE_BODY_SIZE, BODY_SIZE_BUCKETS, BODY_SIZE_DIMENSIONS


def bucket_random(buckets: Sequence[float], rng: random.Random) -> float:
    """Pick one of the ``len(buckets) - 1`` intervals, then a value inside it.

    This keeps each interval equally likely regardless of its width, so the
    result is not uniform over ``[buckets[0], buckets[-1]]``.

    The value is a real number drawn uniformly within the chosen
    sub-interval, so integer thresholds (the strength table) still give
    non-integral results.
    """
    if len(buckets) < 2:
        raise ValueError("bucket_random needs at least two thresholds")
    i = rng.randrange(len(buckets) - 1)
    return rng.uniform(buckets[i], buckets[i + 1])


def body_size(rng: random.Random, base: float = BASE_BODY_SIZE) -> float:
    """Body size compounded over three independent linear dimensions."""
    size = base
    for _ in range(BODY_SIZE_DIMENSIONS):
        size *= bucket_random(BODY_SIZE_BUCKETS, rng)
    return size


def iter_weighted(weights: Sequence[Tuple[int, int]]) -> Iterator[int]:
    """Yield each tier index once per unit of multiplicity, in table order."""
    for index, multiplicity in weights:
        for _ in range(multiplicity):
            yield index


def total_weight(weights: Sequence[Tuple[int, int]]) -> int:
    return sum(m for _, m in weights)


__all__ = ["bucket_random", "body_size", "iter_weighted", "total_weight"]
