"""
Randomness source for GA operators.

Wraps a numpy Generator behind the small uniform-draw interface consumed by
the chromosome operators and the generational engine, and hands out
independent child streams for parallel workers.
"""

from typing import List, Optional, Sequence, TypeVar
import numpy as np


T = TypeVar("T")


class RandomSource:
    """Uniform real/integer draws backed by a numpy Generator."""

    def __init__(self, generator: Optional[np.random.Generator] = None):
        self.generator = generator if generator is not None else np.random.default_rng()

    @classmethod
    def from_seed(cls, seed: Optional[int]) -> "RandomSource":
        """Create a source seeded for reproducible runs."""
        return cls(np.random.default_rng(seed))

    def uniform_real(self, lo: float, hi: float) -> float:
        """Uniform float in [lo, hi)."""
        return float(self.generator.uniform(lo, hi))

    def uniform_int(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi], both ends inclusive."""
        return int(self.generator.integers(lo, hi + 1))

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self.generator.random())

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy of items."""
        order = self.generator.permutation(len(items))
        return [items[i] for i in order]

    def spawn(self, count: int) -> List["RandomSource"]:
        """
        Derive independent child streams.

        The children are seeded from entropy drawn from this stream, so the
        same parent state always yields the same children.

        Args:
            count: Number of child streams

        Returns:
            List of RandomSource objects, one per worker/shard
        """
        entropy = [int(v) for v in self.generator.integers(0, 2**32, size=4)]
        children = np.random.SeedSequence(entropy).spawn(count)
        return [RandomSource(np.random.default_rng(child)) for child in children]
