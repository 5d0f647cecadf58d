from __future__ import annotations

import random
from typing import Any, MutableSequence, Optional, Protocol


class RandomSource(Protocol):
    """Uniform randomness capability threaded into every function that needs it.

    ``random.Random`` satisfies it as-is; tests may pass any object with the
    same three methods to script the choices.
    """

    def random(self) -> float: ...

    def randrange(self, stop: int) -> int: ...

    def shuffle(self, x: MutableSequence[Any]) -> None: ...


def make_random(seed: Optional[int] = None) -> random.Random:
    """Creates an independent generator; ``None`` seeds from system entropy."""
    return random.Random(seed)


def shuffled(items, rng: RandomSource) -> list:
    """Returns a shuffled copy of ``items`` without touching the original."""
    out = list(items)
    rng.shuffle(out)
    return out
