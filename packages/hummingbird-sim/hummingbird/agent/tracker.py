"""Episode tracking in the Hummingbird agent."""

from hummingbird.agent.runners import EpisodeData


class EpisodeTracker:
    """Tracks data across a single episode.

    Attributes
    ----------
    data : EpisodeData
        Data for the current episode.
    """

    def __init__(self) -> None:
        """Initialize the tracker with zero counters."""
        self.data = EpisodeData()

    @property
    def steps(self) -> int:
        """Get the total steps for the episode."""
        return self.data.steps

    @property
    def rewards(self) -> float:
        """Get the total rewards for the episode."""
        return self.data.rewards

    @property
    def nectar_obtained(self) -> float:
        """Get the nectar obtained in the episode."""
        return self.data.nectar_obtained

    @property
    def feed_events(self) -> int:
        """Get the number of feeding contacts in the episode."""
        return self.data.feed_events

    @property
    def flowers_emptied(self) -> int:
        """Get the number of flowers emptied in the episode."""
        return self.data.flowers_emptied

    @property
    def boundary_collisions(self) -> int:
        """Get the number of boundary collisions in the episode."""
        return self.data.boundary_collisions

    def track_feed(self, nectar_received: float, *, flower_emptied: bool = False) -> None:
        """Track a feeding contact.

        Parameters
        ----------
        nectar_received : float
            Nectar actually received from the flower.
        flower_emptied : bool, optional
            Whether this contact emptied the flower.
        """
        self.data.feed_events += 1
        self.data.nectar_obtained += nectar_received
        if flower_emptied:
            self.data.flowers_emptied += 1

    def track_boundary_collision(self) -> None:
        """Track a collision with the area boundary."""
        self.data.boundary_collisions += 1

    def track_reward(self, reward: float) -> None:
        """Track a single reward.

        Parameters
        ----------
        reward : float
            Reward received for this instance.
        """
        self.data.rewards += reward

    def track_step(self) -> None:
        """Track a single fixed step."""
        self.data.steps += 1

    def reset(self) -> None:
        """Reset the episode data for a new episode."""
        self.data = EpisodeData()
