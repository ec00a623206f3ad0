"""Brain that acts uniformly at random."""

import numpy as np

from hummingbird.dtypes import ACTION_SIZE


class RandomBrain:
    """Sample every action component uniformly from ``[-1, 1]``."""

    def __init__(self, rng: np.random.Generator) -> None:
        self.rng = rng

    def reset(self) -> None:
        """Nothing to reset; the brain is stateless."""

    def run_brain(self, observation: np.ndarray) -> np.ndarray:  # noqa: ARG002
        """Sample an action, ignoring the observation."""
        return self.rng.uniform(-1.0, 1.0, size=ACTION_SIZE)
