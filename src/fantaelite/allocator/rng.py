"""Seeded randomness reproducible from an opaque seed string."""

from __future__ import annotations

from typing import Any, List

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def hash_seed(seed: str) -> int:
    """Fold a string into a 32-bit state (xmur3 mixing)."""

    h = (1779033703 ^ len(seed)) & _MASK32
    for ch in seed:
        h = _imul(h ^ ord(ch), 3432918353)
        h = ((h << 13) | (h >> 19)) & _MASK32
    h = _imul(h ^ (h >> 16), 2246822507)
    h = _imul(h ^ (h >> 13), 3266489909)
    return (h ^ (h >> 16)) & _MASK32


class Randomizer:
    """mulberry32 generator; same seed, same sequence."""

    def __init__(self, state: int) -> None:
        self._state = state & _MASK32

    @classmethod
    def from_seed(cls, seed: str) -> "Randomizer":
        return cls(hash_seed(seed))

    def random(self) -> float:
        """Return a float in [0, 1)."""
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    def randrange(self, n: int) -> int:
        if n <= 0:
            raise ValueError(f"randrange requires a positive bound, got {n}")
        return int(self.random() * n)

    def draw(self, items: List[Any], k: int) -> List[Any]:
        """Pop ``k`` items from ``items`` without replacement, in draw order."""

        return [items.pop(self.randrange(len(items))) for _ in range(k)]
