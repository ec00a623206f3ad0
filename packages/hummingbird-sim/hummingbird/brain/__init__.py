"""Module for brains: the sources of agent actions."""

from hummingbird.brain._brain import Brain, BrainType
from hummingbird.brain.heuristic import HeuristicBrain
from hummingbird.brain.random_brain import RandomBrain

__all__ = [
    "Brain",
    "BrainType",
    "HeuristicBrain",
    "RandomBrain",
]
