from __future__ import annotations

import random


def new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def make_rng(seed: int | None = None) -> tuple[random.Random, int]:
    """Return a tournament-owned RNG and the seed it was built from.

    The seed is kept alongside the session for reproducibility/debugging.
    """

    if seed is None:
        seed = new_seed()
    return random.Random(seed), seed
