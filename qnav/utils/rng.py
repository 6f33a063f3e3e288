"""Random number generation utilities for the navigation simulation."""

import numpy as np
from typing import Optional


class SeededRNG:
    """Seeded random number generator for reproducible results."""

    def __init__(self, seed: Optional[int] = None):
        self._generator = np.random.default_rng(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return float(self._generator.random())

    def choice(self, seq):
        """Choose random element from sequence."""
        return seq[int(self._generator.integers(0, len(seq)))]
