"""
Seeded linear-congruential pseudo-random stream.

Every generation stage receives its own `SeededRandom` instance, so a fixed
seed and a fixed call sequence always reproduce the same network.
"""

from math import floor
from typing import Sequence, TypeVar

T = TypeVar("T")

MULTIPLIER = 1103515245
INCREMENT = 12345
MODULUS = 2 ** 31


class SeededRandom:
    """
    Deterministic stream of floats in [0, 1) driven by
    `state = (state * MULTIPLIER + INCREMENT) mod 2^31`.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self.state = self.seed % MODULUS

    def next(self) -> float:
        self.state = (self.state * MULTIPLIER + INCREMENT) % MODULUS
        return self.state / MODULUS

    def uniform(self, low: float, high: float) -> float:
        return low + self.next() * (high - low)

    def randint(self, low: int, high: int) -> int:
        """
        Integer in [low, high], both ends included.
        """
        return low + floor(self.next() * (high - low + 1))

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[floor(self.next() * len(items))]

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """
        Fisher-Yates shuffle into a new list. Consumes `len(items) - 1` draws.
        """
        out = list(items)
        for i in range(len(out) - 1, 0, -1):
            j = floor(self.next() * (i + 1))
            out[i], out[j] = out[j], out[i]
        return out
