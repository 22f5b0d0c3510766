"""Random sources for the price simulator.

The simulator never picks its own randomness: callers pass either a
seeded source (reproducible runs, tests) or an entropy source (live use).
"""

from typing import Optional, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    """Supplies the generator used for one simulated day."""

    def generator_for_day(self, day: int) -> np.random.Generator:
        ...


class SeededRandomSource:
    """Deterministic source: a fresh generator seeded with ``seed + day``.

    Two runs with the same seed and inputs produce identical paths, and
    day *n* does not depend on how many draws earlier days consumed.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed

    def generator_for_day(self, day: int) -> np.random.Generator:
        return np.random.default_rng(self.seed + day)

    def __repr__(self) -> str:
        return f"SeededRandomSource(seed={self.seed})"


class EntropyRandomSource:
    """Non-deterministic source backed by one OS-entropy generator per run."""

    def __init__(self) -> None:
        self._rng = np.random.default_rng()

    def generator_for_day(self, day: int) -> np.random.Generator:
        return self._rng

    def __repr__(self) -> str:
        return "EntropyRandomSource()"


def make_random_source(seed: Optional[int]) -> RandomSource:
    """Seeded source when *seed* is given, entropy source otherwise."""
    if seed is None:
        return EntropyRandomSource()
    return SeededRandomSource(seed)
