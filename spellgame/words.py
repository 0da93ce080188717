from __future__ import annotations

import random

VOCABULARY: tuple[str, ...] = (
    "apple",
    "banana",
    "computer",
    "elephant",
    "giraffe",
    "kangaroo",
    "library",
    "mountain",
    "octopus",
    "penguin",
)


def draw(rng: random.Random | None = None) -> str:
    """Pick a word uniformly at random from the fixed vocabulary."""

    return (rng or random).choice(VOCABULARY)
