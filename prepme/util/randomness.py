from __future__ import annotations

"""Randomness helpers for question selection and seeding."""

import os
import random
from typing import List, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything exposing an in-place ``shuffle`` (``random.Random`` qualifies)."""

    def shuffle(self, x: list) -> None: ...


def seed_if_needed() -> Optional[int]:
    """Seed the module RNG if the SEED env var is set. Returns the seed used."""
    seed = os.environ.get("SEED")
    if seed is None:
        return None
    try:
        s = int(seed)
    except ValueError:
        return None
    random.seed(s)
    return s


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Independent RNG; seeded when a seed is given."""
    return random.Random(seed)


def shuffle_take(items: Sequence[T], n: int, rng: Optional[RandomSource] = None) -> List[T]:
    """Unweighted shuffle-then-take: up to ``n`` distinct items, no repeats.

    The input sequence is never mutated.
    """
    pool = list(items)
    (rng or random).shuffle(pool)
    return pool[: max(0, int(n))]
