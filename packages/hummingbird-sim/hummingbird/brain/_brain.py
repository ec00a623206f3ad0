"""Brain protocol shared by every action source."""

from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np


class BrainType(Enum):
    """Available brain implementations."""

    HEURISTIC = "heuristic"
    RANDOM = "random"


@runtime_checkable
class Brain(Protocol):
    """
    Maps observations to actions.

    A trained policy, a scripted controller or a manual input translator can
    all drive the agent as long as they produce the 5-value action vector.
    """

    def run_brain(self, observation: np.ndarray) -> np.ndarray:
        """Choose an action for the given observation."""
        ...

    def reset(self) -> None:
        """Clear any per-episode state."""
        ...
