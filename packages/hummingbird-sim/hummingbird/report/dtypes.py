"""Data types for reporting in Hummingbird."""

from enum import Enum

from pydantic import BaseModel


class TerminationReason(str, Enum):
    """Reason why an episode terminated.

    Attributes
    ----------
    COMPLETED_ALL_NECTAR : str
        Every flower in the area was emptied.
    MAX_STEPS : str
        Agent reached maximum allowed steps.
    SPAWN_FAILED : str
        No collision-free spawn pose was found, so the episode never started.
    """

    COMPLETED_ALL_NECTAR = "completed_all_nectar"
    MAX_STEPS = "max_steps"
    SPAWN_FAILED = "spawn_failed"


class SimulationResult(BaseModel):
    """
    Result of a single episode.

    Attributes
    ----------
    episode : int
        The episode number (1-based).
    steps : int
        The number of fixed steps simulated.
    total_reward : float
        The total reward received during the episode.
    nectar_obtained : float
        Nectar collected by the agent.
    feed_events : int
        Number of nectar contacts that fed the agent.
    flowers_emptied : int
        Number of flowers the agent emptied.
    boundary_collisions : int
        Number of collisions with the area boundary.
    termination_reason : TerminationReason
        The reason why the episode terminated.
    """

    episode: int
    steps: int
    total_reward: float
    nectar_obtained: float
    feed_events: int
    flowers_emptied: int
    boundary_collisions: int
    termination_reason: TerminationReason

    @property
    def success(self) -> bool:
        """Whether the agent collected any nectar."""
        return self.nectar_obtained > 0.0
